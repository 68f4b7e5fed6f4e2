"""
Stencil errors.
"""


class StencilError(Exception):
    """Base exception for all Stencil errors."""
    pass


class ConfigurationError(StencilError):
    """Errors in configuration."""
    pass


class TemplateLoadError(StencilError):
    """A serialized template could not be loaded."""
    pass


class UnsupportedActionError(StencilError):
    """Raised by a driver function when no backend handles action/entity."""

    def __init__(self, action: str, entity: str):
        self.action = action
        self.entity = entity
        super().__init__(f"unsupported action/entity: {action} {entity}")


class UnresolvedReferenceError(StencilError):
    """A statement referenced an identifier not declared earlier in the run.

    The partial run report assembled before the abort is kept on ``report``.
    """

    def __init__(self, identifier: str, report=None):
        self.identifier = identifier
        self.report = report
        super().__init__(f"unresolved reference '${identifier}': not declared by an earlier statement")


class UnresolvedHolesError(StencilError):
    """Batch hole resolution left holes without a fill."""

    def __init__(self, holes):
        self.holes = list(holes)
        names = ", ".join(sorted({h.hole for h in self.holes}))
        super().__init__(f"missing fills for holes: {names}")
