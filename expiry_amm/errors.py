"""Pool error classes.

Every check that can reject an operation runs before any funds move, so a
raised error always leaves the pool untouched.
"""


class PoolError(Exception):
    """Base error for pool and curve operations."""

    pass


class DomainError(PoolError):
    """Input lies outside the curve's valid region or exceeds a reserve."""

    pass


class SlippageError(PoolError):
    """Computed amount is worse than the caller's limit."""

    pass


class DeadlineError(PoolError):
    """The current time is past the caller's deadline."""

    pass


class LifecycleError(PoolError):
    """Operation is not allowed in the pool's current phase."""

    pass


class TransferError(PoolError):
    """A reserve asset refused to move funds."""

    pass


class CollateralizationError(PoolError):
    """Recorded reserves no longer match the balances the pool holds."""

    pass


class InvalidParameterError(PoolError, ValueError):
    """Curve or pool construction parameter is invalid."""

    pass
