"""
Stencil - run declarative infrastructure provisioning templates.

A template is an ordered list of statements such as::

    net = create vpc cidr=10.0.0.0/16
    sub = create subnet vpc=$net cidr={subnet-cidr}
    create instance subnet=$sub image=@ubuntu

Stencil fills holes (``{...}``), applies parameter overrides, resolves refs
(``$...``) between statements and runs each one against a pluggable driver,
returning a run report with a fresh ULID.
"""

from .driver import Driver, MultiDriver, RegistryDriver
from .errors import (
    StencilError,
    UnresolvedHolesError,
    UnresolvedReferenceError,
    UnsupportedActionError,
)
from .models import AST, Declaration, Expression, Failed, Identifier, Outcome, RunReport, Statement
from .run_id import RunIdGenerator
from .settings import StencilSettings, get_settings, reload_settings
from .template import Template, UnresolvedHole

__version__ = "0.1.0"
__all__ = [
    "AST",
    "Declaration",
    "Driver",
    "Expression",
    "Failed",
    "Identifier",
    "MultiDriver",
    "Outcome",
    "RegistryDriver",
    "RunIdGenerator",
    "RunReport",
    "Statement",
    "StencilError",
    "StencilSettings",
    "Template",
    "UnresolvedHole",
    "UnresolvedHolesError",
    "UnresolvedReferenceError",
    "UnsupportedActionError",
    "get_settings",
    "reload_settings",
]
