"""Test helpers module for shared test utilities.

This module consolidates common test utilities to reduce duplication:
- constants: Principals, pool defaults and tolerances
- factories: Pool config and state factory functions
"""

from tests.helpers.constants import (
    ADMIN,
    ALICE,
    DEPLOYER,
    INITIAL_BALANCE,
    MIDPOINT,
    MIDPOINT_FACTOR,
    ORACLE,
    RATE_TOLERANCE,
    UNIT,
)
from tests.helpers.factories import make_pool_config, make_state

__all__ = [
    # Constants
    "UNIT",
    "DEPLOYER",
    "ADMIN",
    "ALICE",
    "ORACLE",
    "INITIAL_BALANCE",
    "MIDPOINT",
    "MIDPOINT_FACTOR",
    "RATE_TOLERANCE",
    # Factories
    "make_pool_config",
    "make_state",
]
