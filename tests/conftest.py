"""
Pytest configuration and fixtures for Stencil tests.
"""

import itertools
import tempfile
from pathlib import Path

import pytest

from stencil.models import Declaration, Expression, Identifier, Statement
from stencil.run_id import RunIdGenerator
from stencil.template import Template


@pytest.fixture
def temp_dir():
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def network_template():
    """vpc → subnet → instance, chained by refs."""
    return Template([
        Statement(node=Declaration(
            left=Identifier(name="createdvpc"),
            right=Expression(action="create", entity="vpc", params={"count": 1}),
        )),
        Statement(node=Declaration(
            left=Identifier(name="createdsubnet"),
            right=Expression(action="create", entity="subnet", refs={"vpc": "createdvpc"}),
        )),
        Statement(node=Expression(
            action="create", entity="instance", refs={"subnet": "createdsubnet"},
        )),
    ])


@pytest.fixture
def fixed_run_ids():
    """Run id generator with a frozen clock and counting entropy."""
    counter = itertools.count(1)
    return RunIdGenerator(
        clock=lambda: 1_700_000_000.0,
        entropy=lambda n: next(counter).to_bytes(n, "big"),
    )
