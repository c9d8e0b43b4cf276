"""Test helpers module for shared test utilities.

- constants: Accounts, scales and curve reference values
- factories: Asset and pool factory functions
"""

from tests.helpers.constants import (
    ALICE,
    BOB,
    CAROL,
    DAY,
    ONE,
    START_TIME,
    YEAR,
)
from tests.helpers.factories import RefusingAsset, fund, make_assets, make_seeded_pool

__all__ = [
    # Constants
    "ONE",
    "YEAR",
    "DAY",
    "START_TIME",
    "ALICE",
    "BOB",
    "CAROL",
    # Factories
    "RefusingAsset",
    "make_assets",
    "fund",
    "make_seeded_pool",
]
