"""
Driver module for Stencil.

Drivers map an (action, entity) pair to the function performing it against
a real backend. The runner only ever talks to the ``Driver`` interface.
"""

from .base import Driver, DriverFn, unsupported
from .registry import MultiDriver, RegistryDriver

__all__ = [
    "Driver",
    "DriverFn",
    "MultiDriver",
    "RegistryDriver",
    "unsupported",
]
