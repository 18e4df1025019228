import asyncio
import os

from dotenv import load_dotenv
from solana.rpc.async_api import AsyncClient
from solders.keypair import Keypair

from vaultpy.constants import LAMPORTS_PER_SOL, configs
from vaultpy.tokens import NATIVE_MINT
from vaultpy.vault_client import VaultClient

load_dotenv()


async def deposit_and_withdraw():
    rpc = os.environ.get("RPC_URL", configs["mainnet"].default_http)
    kp = Keypair.from_base58_string(os.environ.get("PRIVATE_KEY"))
    print(f"Using wallet: {kp.pubkey()}")

    connection = AsyncClient(rpc)
    vault_client = await VaultClient(connection, NATIVE_MINT).initialize()

    amount = int(0.1 * LAMPORTS_PER_SOL)

    print("Depositing 0.1 SOL")
    tx = await vault_client.deposit(kp.pubkey(), amount)
    tx.sign([kp], tx.message.recent_blockhash)
    sig = (await connection.send_raw_transaction(bytes(tx))).value
    await connection.confirm_transaction(sig)
    print(f"Deposited: {sig}")

    lp_balance = await vault_client.get_user_balance(kp.pubkey())
    print(f"LP balance: {lp_balance}")

    print("Withdrawing everything")
    tx = await vault_client.withdraw(kp.pubkey(), lp_balance)
    tx.sign([kp], tx.message.recent_blockhash)
    sig = (await connection.send_raw_transaction(bytes(tx))).value
    print(f"Withdrew: {sig}")


if __name__ == "__main__":
    asyncio.run(deposit_and_withdraw())
