# oracle/config.py
# Configuration for the oracle (xorshift128 service)

# Network config
HOST = '127.0.0.1'
PORT = 5000

# Seed configuration:
# - SEED_MODE:
#     'fixed'  : use the integer in SEED (if SEED is None, falls back to deterministic constant)
#     'random' : use os.urandom(4) at startup (non-deterministic each run)
#     'time'   : use current unix time truncated to 32 bits - what many games actually do
SEED_MODE = 'fixed'   # 'fixed' | 'random' | 'time'

# If SEED_MODE == 'fixed', use this SEED (32-bit integer).
# If None, a default deterministic 32-bit constant will be used.
SEED = 0x12345678  # or None

# If SEED_MODE == 'time', this controls whether we use seconds or milliseconds.
# 's' -> int(time.time()), 'ms' -> int(time.time() * 1000)
TIME_GRANULARITY = 's'  # 's' or 'ms'

# Resume a captured state instead of seeding: (s0, s1) as returned by get_state64().
# Takes priority over SEED_MODE when set.
STATE64 = None  # e.g. (0x6C07896600000001, 0xDBFFE6DC714ACB3F)

# How many bits of each 32-bit output the oracle reveals on /get_output (1..32)
OUTPUT_BITS = 32
OUTPUT_SELECT = 'high'   # 'high' or 'low'

# Logging level
LOG_LEVEL = 'INFO'
