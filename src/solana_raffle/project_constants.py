"""
Project-wide immutable parameters for the recurring SOL raffle.

These values define the public rules of every round.
Changing them changes who can win and MUST be publicly announced.
"""

# SOL uses 9 decimals
LAMPORTS_PER_SOL = 10**9

# Default ticket price (raw units)
DEFAULT_ENTRANCE_FEE = 10_000_000  # 0.01 SOL in lamports

# Minimum seconds between two closes
DEFAULT_INTERVAL_S = 30.0

# Ledger address that holds the pot
RAFFLE_ACCOUNT = "RaffLe1111111111111111111111111111111111111"

# VRF request parameters (sent verbatim with every close)
DEFAULT_KEY_HASH = "0x474e34a077df58807dbe9c96d3c009b23b3c6d0cce433e59bbf5b34f823bc56c"
DEFAULT_REQUEST_CONFIRMATIONS = 3
DEFAULT_CALLBACK_GAS_LIMIT = 500_000
NUM_WORDS = 1
