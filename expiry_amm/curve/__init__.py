"""Time-decaying bonding curve: invariant, pricing and liquidity math."""

from .invariant import (
    calc_equilibrium_point,
    calc_k,
    calc_x,
    calc_x_max,
    calc_y,
    scaled_a,
    time_factor,
    year_fraction,
)
from .liquidity import calc_invariant_y_new, calc_lp_token_amount, calc_redemption_amounts
from .pricing import calc_x_out_given_y_in, calc_x_price_in_y, calc_y_out_given_x_in
from .scaling import scale_down_down, scale_down_up, scale_up, scaling_factor

__all__ = [
    # Invariant
    "time_factor",
    "year_fraction",
    "scaled_a",
    "calc_y",
    "calc_x",
    "calc_x_max",
    "calc_k",
    "calc_equilibrium_point",
    # Pricing
    "calc_x_price_in_y",
    "calc_y_out_given_x_in",
    "calc_x_out_given_y_in",
    # Liquidity
    "calc_invariant_y_new",
    "calc_lp_token_amount",
    "calc_redemption_amounts",
    # Scaling
    "scaling_factor",
    "scale_up",
    "scale_down_down",
    "scale_down_up",
]
