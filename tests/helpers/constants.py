"""Shared constants for tests: accounts, scales and curve reference values."""

ONE = 10**18
YEAR = 31_536_000
DAY = 86_400

# Arbitrary fixed start time so lifecycle tests are deterministic
START_TIME = 1_700_000_000

# Accounts
ALICE = "0x" + "a1" * 20
BOB = "0x" + "b0" * 20
CAROL = "0x" + "c0" * 20

# Curve reference values (a = 1, k = 10)
A = ONE
K = 10 * ONE
X_MAX_ONE_YEAR = 10916079781560898380
X_MAX_TWO_PERCENT_YEAR = 10139461979840581630
EQUILIBRIUM_ONE_YEAR = 5854101965976788105
PRICE_AT_EQUILIBRIUM = 1291796067527835803

# Seeding one day into a one-year pool
SEED_TTL = YEAR - DAY
EQUILIBRIUM_SEED_TTL = 5853039847826276830
