"""Pytest configuration and fixtures."""

import pytest

from expiry_amm.config import CurveParameters
from expiry_amm.pool import ManualClock, Pool
from tests.helpers import BOB, ONE, START_TIME, fund, make_assets, make_seeded_pool
from tests.helpers.constants import A, K
from tests.helpers.factories import RefusingAsset


@pytest.fixture
def params() -> CurveParameters:
    """Reference curve parameters (a = 1, k = 10)."""
    return CurveParameters(a=A, k=K)


@pytest.fixture
def clock() -> ManualClock:
    """Manual clock starting at START_TIME."""
    return ManualClock(START_TIME)


@pytest.fixture
def assets() -> tuple[RefusingAsset, RefusingAsset]:
    """18-decimal X/Y asset pair."""
    return make_assets()


@pytest.fixture
def pool(clock: ManualClock, assets: tuple[RefusingAsset, RefusingAsset]) -> Pool:
    """Pool seeded by ALICE one day into a one-year term, with BOB funded to trade."""
    asset_x, asset_y = assets
    seeded = make_seeded_pool(clock, asset_x, asset_y)
    fund(BOB, 100 * ONE, asset_x, asset_y)
    return seeded
