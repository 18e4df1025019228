from dataclasses import dataclass
from typing import Literal

from solders.pubkey import Pubkey

VaultEnv = Literal["devnet", "mainnet"]

VAULT_PROGRAM_ID = Pubkey.from_string("24Uqj9JCLxUeoC3hGfh5W3s9FM9uCHDS2SG3LYwBpyTi")
AFFILIATE_PROGRAM_ID = Pubkey.from_string(
    "GacY9YuN16HNRTy7ZWwULPccwvfFSBeNLuAQP7y38Du3"
)

# part of the vault program's address contract, must match on-chain
VAULT_BASE_KEY = Pubkey.from_string("HWzXGcGHy4tcpYfaRDCyLNzXqBTv3E6BttpCH2vJxArv")


@dataclass(frozen=True)
class Seeds:
    vault_prefix: bytes = b"vault"
    token_vault_prefix: bytes = b"token_vault"
    lp_mint_prefix: bytes = b"lp_mint"


SEEDS = Seeds()


@dataclass(frozen=True)
class Config:
    env: VaultEnv
    vault_program_id: Pubkey
    affiliate_program_id: Pubkey
    default_http: str


configs: dict[str, Config] = {
    "devnet": Config(
        env="devnet",
        vault_program_id=VAULT_PROGRAM_ID,
        affiliate_program_id=AFFILIATE_PROGRAM_ID,
        default_http="https://api.devnet.solana.com",
    ),
    "mainnet": Config(
        env="mainnet",
        vault_program_id=VAULT_PROGRAM_ID,
        affiliate_program_id=AFFILIATE_PROGRAM_ID,
        default_http="https://api.mainnet-beta.solana.com",
    ),
}
