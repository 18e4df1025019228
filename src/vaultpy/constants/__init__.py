from vaultpy.constants.config import (
    AFFILIATE_PROGRAM_ID,
    SEEDS,
    VAULT_BASE_KEY,
    VAULT_PROGRAM_ID,
    configs,
)
from vaultpy.constants.numeric_constants import *  # noqa: F403
