"""Factory functions for building assets and pools in tests."""

from expiry_amm.config import CurveParameters
from expiry_amm.pool import InMemoryReserveAsset, ManualClock, Pool
from tests.helpers.constants import A, ALICE, K, SEED_TTL


class RefusingAsset(InMemoryReserveAsset):
    """Ledger that misbehaves for chosen accounts.

    Transfers touching a ``blocked`` account fail. Transfers touching a
    ``silent`` account report success without moving anything.
    """

    def __init__(self, symbol: str, decimals: int = 18) -> None:
        super().__init__(symbol, decimals)
        self.blocked: set[str] = set()
        self.silent: set[str] = set()

    def transfer_from(self, holder: str, recipient: str, amount: int) -> bool:
        if holder in self.blocked or recipient in self.blocked:
            return False
        if holder in self.silent or recipient in self.silent:
            return True
        return super().transfer_from(holder, recipient, amount)

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        if sender in self.blocked or recipient in self.blocked:
            return False
        if sender in self.silent or recipient in self.silent:
            return True
        return super().transfer(sender, recipient, amount)


def make_assets(
    decimals_x: int = 18,
    decimals_y: int = 18,
) -> tuple[RefusingAsset, RefusingAsset]:
    """Create an X/Y asset pair."""
    return RefusingAsset("PT", decimals_x), RefusingAsset("YT", decimals_y)


def fund(holder: str, amount: int, *assets: InMemoryReserveAsset) -> None:
    """Mint amount of each asset to holder."""
    for asset in assets:
        asset.mint(holder, amount)


def make_seeded_pool(
    clock: ManualClock,
    asset_x: InMemoryReserveAsset,
    asset_y: InMemoryReserveAsset,
    ttl: int = SEED_TTL,
    params: CurveParameters | None = None,
    seeder: str = ALICE,
    seed_funds: int = 100 * 10**18,
) -> Pool:
    """Fund seeder and create a pool expiring ttl seconds from now."""
    fund(seeder, seed_funds, asset_x, asset_y)
    return Pool.create(
        asset_x,
        asset_y,
        params if params is not None else CurveParameters(a=A, k=K),
        clock.now() + ttl,
        seeder=seeder,
        clock=clock,
    )
