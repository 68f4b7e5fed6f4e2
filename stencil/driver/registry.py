"""Table-driven drivers."""

from typing import Any, Callable, Dict, Tuple

from .base import Driver, DriverFn, unsupported


class RegistryDriver(Driver):
    """Driver backed by an ``(action, entity) -> function`` table.

    Example:
        >>> driver = RegistryDriver()
        >>> @driver.register("create", "vpc")
        ... def create_vpc(params):
        ...     return "vpc-1234"
        >>> driver.lookup("create", "vpc")({"cidr": "10.0.0.0/16"})
        'vpc-1234'
    """

    def __init__(self, functions: Dict[Tuple[str, str], DriverFn] | None = None):
        super().__init__()
        self._functions: Dict[Tuple[str, str], DriverFn] = dict(functions or {})

    def register(self, action: str, entity: str) -> Callable[[DriverFn], DriverFn]:
        """Decorator registering ``fn`` for the action/entity pair."""

        def decorator(fn: DriverFn) -> DriverFn:
            self.add(action, entity, fn)
            return fn

        return decorator

    def add(self, action: str, entity: str, fn: DriverFn) -> None:
        self._functions[(action, entity)] = fn

    def supports(self, action: str, entity: str) -> bool:
        return (action, entity) in self._functions

    def lookup(self, action: str, entity: str) -> DriverFn:
        fn = self._functions.get((action, entity))
        if fn is None:
            return unsupported(action, entity)
        if self.dry_run:
            return self._dry_run_fn(action, entity)
        return fn

    def _dry_run_fn(self, action: str, entity: str) -> DriverFn:
        def _noop(params: Dict[str, Any]) -> Any:
            self.logger.info(f"[dry run] {action} {entity} {params}")
            return None

        return _noop


class MultiDriver(Driver):
    """Chains drivers; the first one supporting a pair handles it."""

    def __init__(self, *drivers: Driver):
        super().__init__()
        self.drivers = list(drivers)

    def supports(self, action: str, entity: str) -> bool:
        return any(d.supports(action, entity) for d in self.drivers)

    def lookup(self, action: str, entity: str) -> DriverFn:
        for driver in self.drivers:
            if driver.supports(action, entity):
                return driver.lookup(action, entity)
        return unsupported(action, entity)

    def set_dry_run(self, enabled: bool) -> None:
        super().set_dry_run(enabled)
        for driver in self.drivers:
            driver.set_dry_run(enabled)

    def set_logger(self, logger) -> None:
        super().set_logger(logger)
        for driver in self.drivers:
            driver.set_logger(logger)
