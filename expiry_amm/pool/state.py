"""Pool state machine.

A pool holds reserves of two assets, X and Y, and trades them along the
time-decaying curve until its expiry. Its lifecycle is

    UNSEEDED --seed()--> LIVE --(clock reaches expiry)--> EXPIRED

The LIVE -> EXPIRED transition is not a transaction: every call reads the
clock and derives the phase from it.

Reserves are recorded in each asset's native units. Curve math runs on
18-decimal values, so amounts are scaled up on the way in and scaled back
down at the boundary (rounding in the pool's favour). LP shares are 18
decimals.

Every mutating call runs as one unit. Before it starts, assets sent to the
pool outside of any call are added to the reserves, and a pool holding less
than its recorded reserves refuses the call with CollateralizationError.
If the recorded reserves and the held balances disagree afterwards, the
call's transfers are reversed and its accounting restored before
CollateralizationError propagates.
"""

from __future__ import annotations

import secrets
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum

import structlog

from expiry_amm.config import CurveParameters
from expiry_amm.curve.invariant import calc_equilibrium_point, calc_k
from expiry_amm.curve.liquidity import calc_lp_token_amount, calc_redemption_amounts
from expiry_amm.curve.pricing import (
    calc_x_out_given_y_in,
    calc_x_price_in_y,
    calc_y_out_given_x_in,
)
from expiry_amm.curve.scaling import scale_down_down, scale_down_up, scale_up, scaling_factor
from expiry_amm.errors import (
    CollateralizationError,
    DeadlineError,
    DomainError,
    InvalidParameterError,
    LifecycleError,
    PoolError,
    SlippageError,
    TransferError,
)

from .assets import ReserveAsset
from .clock import Clock, SystemClock

logger = structlog.get_logger()


class PoolStatus(str, Enum):
    """Lifecycle phase of a pool."""

    UNSEEDED = "unseeded"
    LIVE = "live"
    EXPIRED = "expired"


@dataclass(frozen=True)
class SwapQuote:
    """Result of a swap query.

    Attributes:
        amount_out: Output in the output asset's native units
        x0: X reserve the quote was computed from (native units)
        y0: Y reserve the quote was computed from (native units)
        a: Curve steepness
        k: Invariant recovered from (x0, y0)
        t: Seconds to expiry at quote time
    """

    amount_out: int
    x0: int
    y0: int
    a: int
    k: int
    t: int


@dataclass(frozen=True)
class LiquidityChange:
    """Amounts moved by a liquidity operation (native units, shares in 18 decimals)."""

    shares: int
    x_amount: int
    y_amount: int


@dataclass(frozen=True)
class PoolSnapshot:
    """Consistent view of a pool's state at one instant."""

    address: str
    symbol_x: str
    symbol_y: str
    x: int
    y: int
    total_lp_supply: int
    expiry: int
    a: int
    k: int
    t: int
    status: PoolStatus


@dataclass(frozen=True)
class _Transfer:
    asset: ReserveAsset
    counterparty: str
    amount: int
    inbound: bool


class Pool:
    """A two-asset pool trading along the time-decaying curve.

    Mutating operations hold the pool's lock for their whole body. Quotes
    copy the reserves and the time under the lock and compute outside it.

    Args:
        asset_x: Principal-bearing reserve asset
        asset_y: Residual-claim reserve asset
        params: Curve parameters (a and the creation-time k)
        expiry: Unix timestamp at which trading stops
        clock: Time source (defaults to the system clock)
        address: Identity of the pool in the asset ledgers (random if omitted)

    Raises:
        InvalidParameterError: If the assets are the same object, have
            unsupported decimals, or the expiry is not in the future
    """

    def __init__(
        self,
        asset_x: ReserveAsset,
        asset_y: ReserveAsset,
        params: CurveParameters,
        expiry: int,
        clock: Clock | None = None,
        address: str | None = None,
    ) -> None:
        if asset_x is asset_y:
            raise InvalidParameterError("asset_x and asset_y must be different assets")
        self._clock = clock if clock is not None else SystemClock()
        now = self._clock.now()
        if expiry <= now:
            raise InvalidParameterError(f"expiry {expiry} is not after current time {now}")

        self.address = address if address is not None else "0x" + secrets.token_hex(20)
        self._asset_x = asset_x
        self._asset_y = asset_y
        self._factor_x = scaling_factor(asset_x.decimals)
        self._factor_y = scaling_factor(asset_y.decimals)
        self._params = params
        self._expiry = expiry

        self._x = 0
        self._y = 0
        self._total_lp_supply = 0
        self._lp_balances: dict[str, int] = {}
        self._seeded = False
        self._journal: list[_Transfer] = []
        self._lock = threading.RLock()

    @classmethod
    def create(
        cls,
        asset_x: ReserveAsset,
        asset_y: ReserveAsset,
        params: CurveParameters,
        expiry: int,
        seeder: str,
        recipient: str | None = None,
        clock: Clock | None = None,
        address: str | None = None,
    ) -> Pool:
        """Construct a pool and seed it from ``seeder`` in one step.

        The seed amounts are the equilibrium point at ``t = expiry - now``.
        LP shares go to ``recipient`` (the seeder if omitted).
        """
        pool = cls(asset_x, asset_y, params, expiry, clock=clock, address=address)
        pool.seed(seeder, recipient if recipient is not None else seeder)
        return pool

    def __repr__(self) -> str:
        return (
            f"Pool({self._asset_x.symbol}/{self._asset_y.symbol}, "
            f"address={self.address}, expiry={self._expiry})"
        )

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def asset_x(self) -> ReserveAsset:
        return self._asset_x

    @property
    def asset_y(self) -> ReserveAsset:
        return self._asset_y

    @property
    def params(self) -> CurveParameters:
        return self._params

    @property
    def x(self) -> int:
        with self._lock:
            return self._x

    @property
    def y(self) -> int:
        with self._lock:
            return self._y

    @property
    def total_lp_supply(self) -> int:
        with self._lock:
            return self._total_lp_supply

    @property
    def expiry(self) -> int:
        return self._expiry

    @property
    def a(self) -> int:
        return self._params.a

    @property
    def k(self) -> int:
        """Invariant chosen at creation (the live invariant drifts from it)."""
        return self._params.k

    @property
    def status(self) -> PoolStatus:
        with self._lock:
            return self._status_at(self._clock.now())

    def lp_balance_of(self, holder: str) -> int:
        with self._lock:
            return self._lp_balances.get(holder, 0)

    def time_to_expiry(self) -> int:
        """Seconds until expiry, zero once expired."""
        return self._time_to_expiry(self._clock.now())

    def snapshot(self) -> PoolSnapshot:
        with self._lock:
            now = self._clock.now()
            return PoolSnapshot(
                address=self.address,
                symbol_x=self._asset_x.symbol,
                symbol_y=self._asset_y.symbol,
                x=self._x,
                y=self._y,
                total_lp_supply=self._total_lp_supply,
                expiry=self._expiry,
                a=self._params.a,
                k=self._params.k,
                t=self._time_to_expiry(now),
                status=self._status_at(now),
            )

    def spot_price(self) -> int:
        """Marginal price of X in Y at the current reserves, 18 decimals.

        Raises:
            LifecycleError: If the pool has not been seeded
            DomainError: If the pool holds no X
        """
        x, y, t = self._read_state()
        x_s, y_s = self._scale_reserves(x, y)
        k = calc_k(x_s, y_s, self._params.a, t)
        return calc_x_price_in_y(x_s, self._params.a, k, t)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_y_out_given_x_in(self, x_in: int) -> SwapQuote:
        """Quote the Y paid for x_in of X at the current reserves and time.

        Raises:
            LifecycleError: If the pool has not been seeded
            DomainError: If x_in is not positive or would push X past the
                curve domain
        """
        x, y, t = self._read_state()
        y_out, k = self._y_out(x, y, x_in, t)
        return SwapQuote(amount_out=y_out, x0=x, y0=y, a=self._params.a, k=k, t=t)

    def get_x_out_given_y_in(self, y_in: int) -> SwapQuote:
        """Quote the X paid for y_in of Y at the current reserves and time.

        Raises:
            LifecycleError: If the pool has not been seeded
            DomainError: If y_in is not positive or the output is invalid
        """
        x, y, t = self._read_state()
        x_out, k = self._x_out(x, y, y_in, t)
        return SwapQuote(amount_out=x_out, x0=x, y0=y, a=self._params.a, k=k, t=t)

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------

    def seed(self, sender: str, recipient: str) -> LiquidityChange:
        """Provide the initial liquidity at the curve's equilibrium point.

        Pulls ``calc_equilibrium_point(a, k, t)`` of each asset from sender
        and mints the same number of LP shares to recipient. A live pool
        whose LP supply has returned to zero can be seeded again.

        Raises:
            LifecycleError: If the pool already holds liquidity or is expired
            TransferError: If sender cannot fund the seed
        """
        with self._lock, self._transaction("seed"):
            now = self._clock.now()
            if self._total_lp_supply > 0:
                raise self._reject(LifecycleError, "seed", "pool is already seeded")
            if now >= self._expiry:
                raise self._reject(LifecycleError, "seed", "pool is expired")
            return self._seed("seed", sender, recipient, now, None)

    def add_liquidity(
        self,
        sender: str,
        x_delta: int,
        recipient: str,
        max_y_in: int | None = None,
        deadline: int | None = None,
    ) -> LiquidityChange:
        """Deposit x_delta of X plus the Y that keeps the marginal price fixed.

        When every share has been withdrawn from a live pool, the deposit
        seeds it again at the equilibrium point instead and x_delta only has
        to be positive.

        Args:
            sender: Account funding the deposit
            x_delta: X deposited (native units)
            recipient: Account credited with the minted shares
            max_y_in: Optional cap on the Y pulled
            deadline: Optional unix time after which the call is rejected

        Returns:
            Shares minted and the X and Y pulled

        Raises:
            DeadlineError: If now is past deadline
            LifecycleError: If the pool is not live
            DomainError: If x_delta is not positive or too small to mint shares
            SlippageError: If the Y required exceeds max_y_in
            TransferError: If sender cannot fund the deposit
        """
        with self._lock, self._transaction("add_liquidity"):
            now = self._clock.now()
            self._check_deadline("add_liquidity", now, deadline)
            self._require_live("add_liquidity", now)
            self._require_positive("add_liquidity", "x_delta", x_delta)
            if self._total_lp_supply == 0:
                return self._seed("add_liquidity", sender, recipient, now, max_y_in)

            t = self._time_to_expiry(now)
            x_s, y_s = self._scale_reserves(self._x, self._y)
            shares, y_delta, price = calc_lp_token_amount(
                True,
                scale_up(x_delta, self._factor_x),
                x_s,
                y_s,
                self._params.a,
                t,
                self._total_lp_supply,
            )
            y_in = scale_down_up(y_delta, self._factor_y)
            if max_y_in is not None and y_in > max_y_in:
                raise self._reject(
                    SlippageError, "add_liquidity", f"requires {y_in} Y, above limit {max_y_in}"
                )
            if shares == 0:
                raise self._reject(DomainError, "add_liquidity", "deposit too small to mint shares")

            self._execute(
                _Transfer(self._asset_x, sender, x_delta, inbound=True),
                _Transfer(self._asset_y, sender, y_in, inbound=True),
            )
            self._x += x_delta
            self._y += y_in
            self._mint(recipient, shares)

            logger.info(
                "liquidity_added",
                pool=self.address,
                x_in=x_delta,
                y_in=y_in,
                shares=shares,
                price=price,
            )
            return LiquidityChange(shares=shares, x_amount=x_delta, y_amount=y_in)

    def remove_liquidity(self, sender: str, recipient: str, shares: int) -> LiquidityChange:
        """Burn shares for their proportional claim on both reserves.

        Raises:
            LifecycleError: If the pool is not live
            DomainError: If shares is not positive or exceeds sender's balance
            TransferError: If a payout fails
        """
        with self._lock, self._transaction("remove_liquidity"):
            now = self._clock.now()
            self._require_live("remove_liquidity", now)
            self._require_liquidity("remove_liquidity")
            self._require_shares("remove_liquidity", sender, shares)

            x_out, y_out = calc_redemption_amounts(self._x, self._y, shares, self._total_lp_supply)
            self._execute(
                _Transfer(self._asset_x, recipient, x_out, inbound=False),
                _Transfer(self._asset_y, recipient, y_out, inbound=False),
            )
            self._x -= x_out
            self._y -= y_out
            self._burn(sender, shares)

            logger.info(
                "liquidity_removed",
                pool=self.address,
                x_out=x_out,
                y_out=y_out,
                shares=shares,
            )
            return LiquidityChange(shares=shares, x_amount=x_out, y_amount=y_out)

    def remove_liquidity_given_x(
        self,
        sender: str,
        recipient: str,
        x_delta: int,
        max_shares_in: int,
    ) -> LiquidityChange:
        """Withdraw exactly x_delta of X plus the Y that keeps the price fixed.

        The shares burned are derived from the depth withdrawn.

        Raises:
            LifecycleError: If the pool is not live or holds no liquidity
            DomainError: If x_delta is not positive, would empty the X
                reserve, or the shares required exceed sender's balance
            SlippageError: If the shares required exceed max_shares_in
            TransferError: If a payout fails
        """
        with self._lock, self._transaction("remove_liquidity_given_x"):
            now = self._clock.now()
            self._require_live("remove_liquidity_given_x", now)
            self._require_liquidity("remove_liquidity_given_x")
            self._require_positive("remove_liquidity_given_x", "x_delta", x_delta)

            t = self._time_to_expiry(now)
            x_s, y_s = self._scale_reserves(self._x, self._y)
            shares, y_delta, price = calc_lp_token_amount(
                False,
                scale_up(x_delta, self._factor_x),
                x_s,
                y_s,
                self._params.a,
                t,
                self._total_lp_supply,
            )
            y_out = scale_down_down(y_delta, self._factor_y)
            if shares > max_shares_in:
                raise self._reject(
                    SlippageError,
                    "remove_liquidity_given_x",
                    f"requires {shares} shares, above limit {max_shares_in}",
                )
            if shares == 0:
                raise self._reject(
                    DomainError, "remove_liquidity_given_x", "withdrawal too small to burn shares"
                )
            self._require_shares("remove_liquidity_given_x", sender, shares)
            if y_out > self._y:
                raise self._reject(
                    DomainError, "remove_liquidity_given_x", f"y_out {y_out} exceeds reserve {self._y}"
                )

            self._execute(
                _Transfer(self._asset_x, recipient, x_delta, inbound=False),
                _Transfer(self._asset_y, recipient, y_out, inbound=False),
            )
            self._x -= x_delta
            self._y -= y_out
            self._burn(sender, shares)

            logger.info(
                "liquidity_removed",
                pool=self.address,
                x_out=x_delta,
                y_out=y_out,
                shares=shares,
                price=price,
            )
            return LiquidityChange(shares=shares, x_amount=x_delta, y_amount=y_out)

    def redeem(self, sender: str, recipient: str) -> LiquidityChange:
        """After expiry, burn all of sender's shares for their pro-rata reserves.

        When the last holder redeems, both reserves and the LP supply reach
        exactly zero.

        Raises:
            LifecycleError: If the pool has not expired (or was never seeded)
            DomainError: If sender holds no shares
            TransferError: If a payout fails
        """
        with self._lock, self._transaction("redeem"):
            now = self._clock.now()
            status = self._status_at(now)
            if status is not PoolStatus.EXPIRED:
                raise self._reject(LifecycleError, "redeem", f"pool is {status.value}, not expired")
            shares = self._lp_balances.get(sender, 0)
            if shares == 0:
                raise self._reject(DomainError, "redeem", f"{sender} holds no shares")

            x_out, y_out = calc_redemption_amounts(self._x, self._y, shares, self._total_lp_supply)
            self._execute(
                _Transfer(self._asset_x, recipient, x_out, inbound=False),
                _Transfer(self._asset_y, recipient, y_out, inbound=False),
            )
            self._x -= x_out
            self._y -= y_out
            self._burn(sender, shares)

            logger.info(
                "liquidity_redeemed",
                pool=self.address,
                x_out=x_out,
                y_out=y_out,
                shares=shares,
                remaining_supply=self._total_lp_supply,
            )
            return LiquidityChange(shares=shares, x_amount=x_out, y_amount=y_out)

    def swap_get_y_given_x_in(
        self,
        sender: str,
        to: str,
        x_in: int,
        min_y_out: int,
        deadline: int,
    ) -> int:
        """Sell x_in of X for Y.

        Returns:
            Y paid to ``to`` (native units)

        Raises:
            DeadlineError: If now is past deadline
            LifecycleError: If the pool is not live
            DomainError: If x_in is not positive or exceeds the curve domain
            SlippageError: If the output is below min_y_out
            TransferError: If a transfer fails
        """
        with self._lock, self._transaction("swap_get_y_given_x_in"):
            now = self._clock.now()
            self._check_deadline("swap_get_y_given_x_in", now, deadline)
            self._require_live("swap_get_y_given_x_in", now)
            self._require_liquidity("swap_get_y_given_x_in")

            y_out, k = self._y_out(self._x, self._y, x_in, self._time_to_expiry(now))
            if y_out < min_y_out:
                raise self._reject(
                    SlippageError,
                    "swap_get_y_given_x_in",
                    f"output {y_out} below minimum {min_y_out}",
                )

            self._execute(
                _Transfer(self._asset_x, sender, x_in, inbound=True),
                _Transfer(self._asset_y, to, y_out, inbound=False),
            )
            self._x += x_in
            self._y -= y_out

            logger.info(
                "swap_executed",
                pool=self.address,
                direction="x_to_y",
                amount_in=x_in,
                amount_out=y_out,
                k=k,
            )
            return y_out

    def swap_get_x_given_y_in(
        self,
        sender: str,
        to: str,
        y_in: int,
        min_x_out: int,
        deadline: int,
    ) -> int:
        """Sell y_in of Y for X.

        Returns:
            X paid to ``to`` (native units)

        Raises:
            DeadlineError: If now is past deadline
            LifecycleError: If the pool is not live
            DomainError: If y_in is not positive or the output is invalid
            SlippageError: If the output is below min_x_out
            TransferError: If a transfer fails
        """
        with self._lock, self._transaction("swap_get_x_given_y_in"):
            now = self._clock.now()
            self._check_deadline("swap_get_x_given_y_in", now, deadline)
            self._require_live("swap_get_x_given_y_in", now)
            self._require_liquidity("swap_get_x_given_y_in")

            x_out, k = self._x_out(self._x, self._y, y_in, self._time_to_expiry(now))
            if x_out < min_x_out:
                raise self._reject(
                    SlippageError,
                    "swap_get_x_given_y_in",
                    f"output {x_out} below minimum {min_x_out}",
                )

            self._execute(
                _Transfer(self._asset_y, sender, y_in, inbound=True),
                _Transfer(self._asset_x, to, x_out, inbound=False),
            )
            self._y += y_in
            self._x -= x_out

            logger.info(
                "swap_executed",
                pool=self.address,
                direction="y_to_x",
                amount_in=y_in,
                amount_out=x_out,
                k=k,
            )
            return x_out

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _time_to_expiry(self, now: int) -> int:
        return max(0, self._expiry - now)

    def _status_at(self, now: int) -> PoolStatus:
        if not self._seeded:
            return PoolStatus.UNSEEDED
        if now >= self._expiry:
            return PoolStatus.EXPIRED
        return PoolStatus.LIVE

    def _read_state(self) -> tuple[int, int, int]:
        with self._lock:
            if not self._seeded:
                raise LifecycleError("pool has not been seeded")
            return self._x, self._y, self._time_to_expiry(self._clock.now())

    def _scale_reserves(self, x: int, y: int) -> tuple[int, int]:
        return scale_up(x, self._factor_x), scale_up(y, self._factor_y)

    def _y_out(self, x: int, y: int, x_in: int, t: int) -> tuple[int, int]:
        self._require_positive("swap_get_y_given_x_in", "x_in", x_in)
        x_s, y_s = self._scale_reserves(x, y)
        k = calc_k(x_s, y_s, self._params.a, t)
        y_out_s = calc_y_out_given_x_in(
            x_s, scale_up(x_in, self._factor_x), self._params.a, k, t
        )
        y_out = scale_down_down(y_out_s, self._factor_y)
        if y_out > y:
            raise DomainError(f"output {y_out} exceeds Y reserve {y}")
        return y_out, k

    def _x_out(self, x: int, y: int, y_in: int, t: int) -> tuple[int, int]:
        self._require_positive("swap_get_x_given_y_in", "y_in", y_in)
        x_s, y_s = self._scale_reserves(x, y)
        k = calc_k(x_s, y_s, self._params.a, t)
        x_out_s = calc_x_out_given_y_in(
            y_s, scale_up(y_in, self._factor_y), self._params.a, k, t, x0=x_s
        )
        x_out = scale_down_down(x_out_s, self._factor_x)
        if x_out > x:
            raise DomainError(f"output {x_out} exceeds X reserve {x}")
        return x_out, k

    def _seed(
        self,
        operation: str,
        sender: str,
        recipient: str,
        now: int,
        max_y_in: int | None,
    ) -> LiquidityChange:
        t = self._time_to_expiry(now)
        eq = calc_equilibrium_point(self._params.a, self._params.k, t)
        shares, _, _ = calc_lp_token_amount(True, eq, eq, eq, self._params.a, t, 0)
        # Reserves already held (unsolicited deposits) count toward the seed
        x_in = max(0, scale_down_up(eq, self._factor_x) - self._x)
        y_in = max(0, scale_down_up(eq, self._factor_y) - self._y)
        if max_y_in is not None and y_in > max_y_in:
            raise self._reject(SlippageError, operation, f"requires {y_in} Y, above limit {max_y_in}")

        self._execute(
            _Transfer(self._asset_x, sender, x_in, inbound=True),
            _Transfer(self._asset_y, sender, y_in, inbound=True),
        )
        self._x += x_in
        self._y += y_in
        self._mint(recipient, shares)
        self._seeded = True

        logger.info(
            "pool_seeded",
            pool=self.address,
            x=self._x,
            y=self._y,
            shares=shares,
            t=t,
        )
        return LiquidityChange(shares=shares, x_amount=x_in, y_amount=y_in)

    def _reject(self, error: type[PoolError], operation: str, reason: str) -> PoolError:
        logger.warning(
            "operation_rejected",
            pool=self.address,
            operation=operation,
            error=error.__name__,
            reason=reason,
        )
        return error(f"{operation}: {reason}")

    def _check_deadline(self, operation: str, now: int, deadline: int | None) -> None:
        if deadline is not None and now > deadline:
            raise self._reject(DeadlineError, operation, f"now {now} is past deadline {deadline}")

    def _require_live(self, operation: str, now: int) -> None:
        status = self._status_at(now)
        if status is not PoolStatus.LIVE:
            raise self._reject(LifecycleError, operation, f"pool is {status.value}, not live")

    def _require_liquidity(self, operation: str) -> None:
        if self._total_lp_supply == 0:
            raise self._reject(LifecycleError, operation, "pool holds no liquidity")

    def _require_positive(self, operation: str, name: str, amount: int) -> None:
        if amount <= 0:
            raise self._reject(DomainError, operation, f"{name} must be positive, got {amount}")

    def _require_shares(self, operation: str, holder: str, shares: int) -> None:
        self._require_positive(operation, "shares", shares)
        balance = self._lp_balances.get(holder, 0)
        if shares > balance:
            raise self._reject(
                DomainError, operation, f"{holder} holds {balance} shares, needs {shares}"
            )

    def _mint(self, holder: str, shares: int) -> None:
        self._lp_balances[holder] = self._lp_balances.get(holder, 0) + shares
        self._total_lp_supply += shares

    def _burn(self, holder: str, shares: int) -> None:
        remaining = self._lp_balances[holder] - shares
        if remaining:
            self._lp_balances[holder] = remaining
        else:
            del self._lp_balances[holder]
        self._total_lp_supply -= shares

    def _execute(self, *transfers: _Transfer) -> None:
        """Run transfers in order, undoing completed ones if any fails.

        Inbound transfers pull from the counterparty into the pool, outbound
        ones pay the counterparty. Zero amounts are skipped. Completed
        transfers are journaled so the enclosing transaction can reverse them.
        """
        done: list[_Transfer] = []
        for transfer in transfers:
            if transfer.amount == 0:
                continue
            if self._apply(transfer, reverse=False):
                done.append(transfer)
                continue

            self._undo(done)
            direction = "from" if transfer.inbound else "to"
            raise self._reject(
                TransferError,
                "transfer",
                f"{transfer.asset.symbol} transfer of {transfer.amount} "
                f"{direction} {transfer.counterparty} failed",
            )
        self._journal.extend(done)

    def _undo(self, transfers: list[_Transfer]) -> None:
        for completed in reversed(transfers):
            if not self._apply(completed, reverse=True):
                logger.error(
                    "transfer_rollback_failed",
                    pool=self.address,
                    asset=completed.asset.symbol,
                    counterparty=completed.counterparty,
                    amount=completed.amount,
                )
                raise CollateralizationError(
                    f"could not undo {completed.asset.symbol} transfer of {completed.amount}"
                )

    def _apply(self, transfer: _Transfer, *, reverse: bool) -> bool:
        into_pool = transfer.inbound != reverse
        if into_pool:
            return transfer.asset.transfer_from(transfer.counterparty, self.address, transfer.amount)
        return transfer.asset.transfer(self.address, transfer.counterparty, transfer.amount)

    @contextmanager
    def _transaction(self, operation: str) -> Iterator[None]:
        """Apply one mutating call as a unit; the caller holds the lock.

        Reserves are reconciled with the held balances first. Any error
        raised inside the block, including a failed collateralization check
        at the end, reverses the journaled transfers and restores the
        accounting as it was before the call.
        """
        saved = (
            self._x,
            self._y,
            self._total_lp_supply,
            dict(self._lp_balances),
            self._seeded,
        )
        self._journal = []
        try:
            self._sync_reserves(operation)
            yield
            self._assert_collateralized()
        except Exception:
            self._x, self._y, self._total_lp_supply, self._lp_balances, self._seeded = saved
            journal, self._journal = self._journal, []
            self._undo(journal)
            raise
        self._journal = []

    def _sync_reserves(self, operation: str) -> None:
        """Absorb unsolicited deposits; refuse to run on a shortfall."""
        held_x = self._asset_x.balance_of(self.address)
        held_y = self._asset_y.balance_of(self.address)
        if held_x < self._x or held_y < self._y:
            logger.error(
                "collateralization_violated",
                pool=self.address,
                operation=operation,
                x=self._x,
                held_x=held_x,
                y=self._y,
                held_y=held_y,
            )
            raise CollateralizationError(
                f"{operation}: held balances ({held_x}, {held_y}) "
                f"below reserves ({self._x}, {self._y})"
            )
        if held_x != self._x or held_y != self._y:
            logger.info(
                "reserves_synced",
                pool=self.address,
                operation=operation,
                surplus_x=held_x - self._x,
                surplus_y=held_y - self._y,
            )
            self._x = held_x
            self._y = held_y

    def _assert_collateralized(self) -> None:
        held_x = self._asset_x.balance_of(self.address)
        held_y = self._asset_y.balance_of(self.address)
        if held_x != self._x or held_y != self._y:
            logger.error(
                "collateralization_violated",
                pool=self.address,
                x=self._x,
                held_x=held_x,
                y=self._y,
                held_y=held_y,
            )
            raise CollateralizationError(
                f"reserves ({self._x}, {self._y}) differ from held balances ({held_x}, {held_y})"
            )
