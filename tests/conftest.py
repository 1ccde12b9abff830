"""Shared pytest fixtures for the aggregation engine tests.

Examples
--------
Request a small two-factor context in a test:

>>> def test_vector(small_context: Context) -> None:
...     assert small_context.factor_count == 2
"""

from __future__ import annotations

import pytest

from dah.config import EngineSettings
from dah.extensions import STANDARD_FACTORS, Standards
from dah.scoring import CombinePolicy, Context, FactorDefinition


@pytest.fixture
def small_context() -> Context:
    """Provide a two-factor context using the rank-decay combine policy."""
    return Context.from_definitions([
        FactorDefinition("AP", factor_weight=0.9, subscore_weight=0.5),
        FactorDefinition("AM", factor_weight=1.0, subscore_weight=0.8),
    ])


@pytest.fixture
def power_context() -> Context:
    """Provide a single-factor context using the power combine policy."""
    return Context.from_definitions(
        [FactorDefinition("AP", subscore_weight=0.5)],
        combine_policy=CombinePolicy.POWER,
    )


@pytest.fixture
def standard_context() -> Context:
    """Provide a context holding the standard factor catalog."""
    return Context.from_definitions(STANDARD_FACTORS)


@pytest.fixture
def standards() -> Standards:
    """Provide the standard heuristics with default settings."""
    return Standards(settings=EngineSettings())
