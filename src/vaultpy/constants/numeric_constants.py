LAMPORTS_PER_SOL = 1_000_000_000

U64_MAX = 2**64 - 1

LOCKED_PROFIT_DEGRADATION_DENOMINATOR = 1_000_000_000_000

# getMultipleAccounts accepts at most 100 keys per request
GET_MULTIPLE_ACCOUNTS_CHUNK_SIZE = 100

# spl-token instruction enum index for SyncNative
SYNC_NATIVE_OPCODE = 17

MAX_SEEDS = 16
MAX_SEED_LEN = 32
