"""Tests for the driver interface and table-driven drivers."""

import logging

import pytest

from stencil.driver import MultiDriver, RegistryDriver, unsupported
from stencil.errors import UnsupportedActionError


class TestUnsupported:
    """Tests for the unsupported fallback."""

    def test_fails_only_when_called(self):
        """Test building the fallback is fine; calling it raises."""
        fn = unsupported("create", "vpc")
        with pytest.raises(UnsupportedActionError, match="unsupported action/entity: create vpc") as exc_info:
            fn({})
        assert exc_info.value.action == "create"
        assert exc_info.value.entity == "vpc"


class TestRegistryDriver:
    """Tests for RegistryDriver."""

    def test_register_decorator(self):
        """Test a decorated function is returned by lookup."""
        driver = RegistryDriver()

        @driver.register("create", "vpc")
        def create_vpc(params):
            return f"vpc-{params['cidr']}"

        assert driver.supports("create", "vpc")
        assert driver.lookup("create", "vpc")({"cidr": "10.0.0.0/16"}) == "vpc-10.0.0.0/16"

    def test_initial_table(self):
        """Test functions can be passed to the constructor."""
        driver = RegistryDriver({("delete", "subnet"): lambda params: True})
        assert driver.lookup("delete", "subnet")({}) is True

    def test_lookup_is_total(self):
        """Test an unknown pair yields a failing function, not an error."""
        driver = RegistryDriver()
        fn = driver.lookup("create", "vpc")
        assert not driver.supports("create", "vpc")
        with pytest.raises(UnsupportedActionError):
            fn({})

    def test_dry_run_skips_real_function(self, caplog):
        """Test dry run logs the call instead of performing it."""
        calls = []
        driver = RegistryDriver()
        driver.add("create", "vpc", lambda params: calls.append(params) or "vpc-1")
        driver.set_dry_run(True)

        with caplog.at_level(logging.INFO):
            result = driver.lookup("create", "vpc")({"cidr": "10.0.0.0/16"})

        assert result is None
        assert calls == []
        assert "[dry run] create vpc" in caplog.text

    def test_dry_run_keeps_unsupported(self):
        """Test dry run does not hide unsupported pairs."""
        driver = RegistryDriver()
        driver.set_dry_run(True)
        with pytest.raises(UnsupportedActionError):
            driver.lookup("create", "vpc")({})

    def test_set_logger(self):
        """Test the diagnostic logger can be replaced."""
        driver = RegistryDriver()
        logger = logging.getLogger("test.driver")
        driver.set_logger(logger)
        assert driver.logger is logger


class TestMultiDriver:
    """Tests for MultiDriver."""

    def test_first_supporting_driver_wins(self):
        """Test lookup goes to the first driver that supports the pair."""
        network = RegistryDriver({("create", "vpc"): lambda params: "net-vpc"})
        compute = RegistryDriver({
            ("create", "vpc"): lambda params: "compute-vpc",
            ("create", "instance"): lambda params: "i-1",
        })
        driver = MultiDriver(network, compute)

        assert driver.lookup("create", "vpc")({}) == "net-vpc"
        assert driver.lookup("create", "instance")({}) == "i-1"
        assert driver.supports("create", "instance")

    def test_unknown_pair(self):
        """Test no supporting driver falls back to unsupported."""
        driver = MultiDriver(RegistryDriver())
        with pytest.raises(UnsupportedActionError):
            driver.lookup("create", "vpc")({})

    def test_toggles_fan_out(self):
        """Test dry run and logger reach every child driver."""
        children = [RegistryDriver(), RegistryDriver()]
        driver = MultiDriver(*children)
        logger = logging.getLogger("test.multi")

        driver.set_dry_run(True)
        driver.set_logger(logger)

        assert driver.dry_run
        assert all(child.dry_run for child in children)
        assert all(child.logger is logger for child in children)
