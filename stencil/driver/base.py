"""Driver interface between templates and provisioning backends."""

import abc
import logging
from typing import Any, Callable, Dict

from ..errors import UnsupportedActionError

DriverFn = Callable[[Dict[str, Any]], Any]
"""Performs one action on one entity. Returns a value or raises on failure."""


def unsupported(action: str, entity: str) -> DriverFn:
    """Driver function that always fails for an unknown action/entity pair."""

    def _unsupported(params: Dict[str, Any]) -> Any:
        raise UnsupportedActionError(action, entity)

    return _unsupported


class Driver(abc.ABC):
    """Abstract base class for provisioning backends.

    ``lookup`` is total: a pair with no implementation still yields a
    callable, one that fails when invoked.
    """

    def __init__(self):
        self.dry_run = False
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @abc.abstractmethod
    def lookup(self, action: str, entity: str) -> DriverFn:
        """Return the function performing ``action`` on ``entity``.

        Args:
            action: Action name, e.g. "create"
            entity: Entity name, e.g. "vpc"

        Returns:
            Callable taking the parameter dict
        """
        pass

    def supports(self, action: str, entity: str) -> bool:
        """Whether the driver has a real implementation for the pair."""
        return False

    def set_dry_run(self, enabled: bool) -> None:
        self.dry_run = enabled

    def set_logger(self, logger: logging.Logger) -> None:
        self.logger = logger
