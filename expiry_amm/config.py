"""Configuration for curve parameters and the HTTP service."""

from __future__ import annotations

import os
from dataclasses import dataclass

from expiry_amm.errors import InvalidParameterError
from expiry_amm.math.fixed_point import ONE, UINT256_MAX


@dataclass(frozen=True)
class CurveParameters:
    """Immutable shape parameters of a pool's bonding curve.

    Attributes:
        a: Steepness of the convex term, 18 decimals (must be positive)
        k: Invariant target chosen at creation, 18 decimals (must be positive)
    """

    a: int
    k: int

    def __post_init__(self) -> None:
        for name in ("a", "k"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise InvalidParameterError(f"{name} must be an int, got {type(value).__name__}")
            if value <= 0:
                raise InvalidParameterError(f"{name} must be positive, got {value}")
            if value > UINT256_MAX:
                raise InvalidParameterError(f"{name} exceeds uint256: {value}")


# a = 1, k = 10 (the parameters the curve's reference values are stated for)
DEFAULT_CURVE_PARAMETERS = CurveParameters(a=ONE, k=10 * ONE)


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ("true", "1", "yes")


@dataclass(frozen=True)
class ServiceSettings:
    """Settings for the HTTP service hosting a single pool.

    Attributes:
        host: Interface to bind to
        port: Port to bind to
        debug: Enable uvicorn reload mode
        curve: Curve parameters of the hosted pool
        ttl_seconds: Seconds from startup until the hosted pool expires
    """

    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    curve: CurveParameters = DEFAULT_CURVE_PARAMETERS
    ttl_seconds: int = 31_536_000

    def __post_init__(self) -> None:
        if not 0 < self.port < 65536:
            raise InvalidParameterError(f"port must be in (0, 65536), got {self.port}")
        if self.ttl_seconds <= 0:
            raise InvalidParameterError(f"ttl_seconds must be positive, got {self.ttl_seconds}")

    @classmethod
    def from_env(cls) -> ServiceSettings:
        """Build settings from environment variables.

        - EXPIRY_AMM_HOST: Host to bind to (default: 0.0.0.0)
        - EXPIRY_AMM_PORT: Port to bind to (default: 8000)
        - EXPIRY_AMM_DEBUG: Enable debug/reload mode (default: false)
        - EXPIRY_AMM_A: Curve steepness in wei (default: 1e18)
        - EXPIRY_AMM_K: Curve invariant in wei (default: 10e18)
        - EXPIRY_AMM_TTL_SECONDS: Pool lifetime from startup (default: one year)

        Raises:
            InvalidParameterError: If a value is out of range
            ValueError: If a numeric variable is not an integer
        """
        return cls(
            host=os.environ.get("EXPIRY_AMM_HOST", "0.0.0.0"),
            port=int(os.environ.get("EXPIRY_AMM_PORT", "8000")),
            debug=_env_bool("EXPIRY_AMM_DEBUG", "false"),
            curve=CurveParameters(
                a=int(os.environ.get("EXPIRY_AMM_A", str(DEFAULT_CURVE_PARAMETERS.a))),
                k=int(os.environ.get("EXPIRY_AMM_K", str(DEFAULT_CURVE_PARAMETERS.k))),
            ),
            ttl_seconds=int(os.environ.get("EXPIRY_AMM_TTL_SECONDS", "31536000")),
        )
