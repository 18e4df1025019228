from pathlib import Path

from anchorpy import Idl, Program
from anchorpy.provider import Provider, Wallet
from solana.rpc.async_api import AsyncClient
from solders.pubkey import Pubkey

import vaultpy
from vaultpy.constants.config import AFFILIATE_PROGRAM_ID, VAULT_PROGRAM_ID


def _load_program(
    connection: AsyncClient, idl_name: str, program_id: Pubkey
) -> Program:
    file = Path(str(vaultpy.__path__[0]) + f"/idl/{idl_name}.json")
    idl = Idl.from_json(file.read_text())
    provider = Provider(connection=connection, wallet=Wallet.dummy())
    return Program(idl=idl, provider=provider, program_id=program_id)


def get_vault_program(
    connection: AsyncClient, program_id: Pubkey = VAULT_PROGRAM_ID
) -> Program:
    """
    Get the vault program as an anchorpy Program object
    """
    return _load_program(connection, "vault", program_id)


def get_affiliate_program(
    connection: AsyncClient, program_id: Pubkey = AFFILIATE_PROGRAM_ID
) -> Program:
    return _load_program(connection, "affiliate", program_id)
