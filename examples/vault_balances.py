import asyncio
import os

import dotenv
from solana.rpc.async_api import AsyncClient
from solders.pubkey import Pubkey

from vaultpy.accounts import chunked_fetch_multiple_vault_accounts, get_onchain_time
from vaultpy.addresses import get_vault_pdas
from vaultpy.constants.config import configs
from vaultpy.math.vault import calculate_withdrawable_amount
from vaultpy.program import get_vault_program

dotenv.load_dotenv()

config = configs[os.getenv("VAULT_ENV", "mainnet")]
connection = AsyncClient(os.getenv("RPC_URL", config.default_http))

MINTS = [
    Pubkey.from_string("So11111111111111111111111111111111111111112"),
    Pubkey.from_string("EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"),
    Pubkey.from_string("Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB"),
]


async def main():
    program = get_vault_program(connection, config.vault_program_id)
    vault_pubkeys = [
        get_vault_pdas(mint, config.vault_program_id).vault for mint in MINTS
    ]

    vaults, now = await asyncio.gather(
        chunked_fetch_multiple_vault_accounts(program, vault_pubkeys),
        get_onchain_time(connection),
    )
    print(f"Found {len(vaults)} vault accounts")
    for vault in vaults:
        print(
            vault.pubkey,
            vault.token_mint,
            vault.total_amount,
            calculate_withdrawable_amount(now, vault),
        )


if __name__ == "__main__":
    asyncio.run(main())
