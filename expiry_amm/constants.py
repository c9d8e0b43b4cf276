"""Protocol constants for the expiry pool."""

# Seconds in the 365-day year used to turn time-to-expiry into a year fraction
SECONDS_PER_YEAR = 31_536_000

# All curve math runs on 18-decimal integers regardless of token decimals
INTERNAL_DECIMALS = 18
