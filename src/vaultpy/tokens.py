"""
Associated token account resolution and wrapped SOL helpers.
"""

import logging
from typing import List, Optional

from solana.rpc.async_api import AsyncClient
from solders.account import Account
from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey
from solders.system_program import TransferParams, transfer
from spl.token._layouts import ACCOUNT_LAYOUT
from spl.token.constants import TOKEN_PROGRAM_ID, WRAPPED_SOL_MINT
from spl.token.instructions import (
    CloseAccountParams,
    close_account,
    create_associated_token_account,
    get_associated_token_address,
)

from vaultpy.constants.numeric_constants import SYNC_NATIVE_OPCODE, U64_MAX
from vaultpy.errors import AccountReadFailure, AmountOverflow, ShapeMismatch
from vaultpy.types import AtaFound, AtaNotFound, AtaResult, TokenAccount

logger = logging.getLogger(__name__)

NATIVE_MINT = WRAPPED_SOL_MINT


def check_u64(amount: int, field: str = "amount") -> int:
    if amount < 0 or amount > U64_MAX:
        raise AmountOverflow(amount, field)
    return amount


def get_associated_token_account(token_mint: Pubkey, owner: Pubkey) -> Pubkey:
    # owner may be a PDA, no on-curve check
    return get_associated_token_address(owner, token_mint)


def deserialize_account(
    account_info: Optional[Account], address: Optional[Pubkey] = None
) -> Optional[TokenAccount]:
    if account_info is None:
        return None

    if account_info.owner != TOKEN_PROGRAM_ID:
        raise ShapeMismatch(
            address, f"owned by {account_info.owner}, not the token program"
        )
    data = bytes(account_info.data)
    if len(data) < ACCOUNT_LAYOUT.sizeof():
        raise ShapeMismatch(
            address,
            f"token account data is {len(data)} bytes, "
            f"expected {ACCOUNT_LAYOUT.sizeof()}",
        )

    decoded = ACCOUNT_LAYOUT.parse(data)
    return TokenAccount(
        address=address,
        mint=Pubkey(decoded.mint),
        owner=Pubkey(decoded.owner),
        amount=decoded.amount,
        is_native=decoded.is_native_option != 0,
    )


async def get_or_create_ata_instruction(
    token_mint: Pubkey,
    owner: Pubkey,
    connection: AsyncClient,
    payer: Optional[Pubkey] = None,
) -> AtaResult:
    """
    Resolve the owner's associated token account for a mint.

    Returns ``AtaFound`` when the account exists, otherwise ``AtaNotFound``
    carrying the instruction that creates it, paid by ``payer`` (defaults to
    the owner). Only a missing account leads to a create instruction; a
    failed read raises ``AccountReadFailure``.
    """
    ata = get_associated_token_account(token_mint, owner)

    try:
        resp = await connection.get_account_info(ata)
    except Exception as e:
        logger.error(f"Error fetching associated token account {ata}: {e}")
        raise AccountReadFailure(ata, "get_or_create_ata_instruction", str(e)) from e

    if resp.value is None:
        ix = create_associated_token_account(
            payer if payer is not None else owner, owner, token_mint
        )
        return AtaNotFound(ata, ix)

    return AtaFound(ata)


def sync_native_instruction(account: Pubkey) -> Instruction:
    return Instruction(
        program_id=TOKEN_PROGRAM_ID,
        accounts=[AccountMeta(pubkey=account, is_signer=False, is_writable=True)],
        data=bytes([SYNC_NATIVE_OPCODE]),
    )


def wrap_sol_instruction(
    from_pubkey: Pubkey, to_pubkey: Pubkey, amount: int
) -> List[Instruction]:
    lamports = check_u64(amount, "lamports")
    return [
        transfer(
            TransferParams(
                from_pubkey=from_pubkey, to_pubkey=to_pubkey, lamports=lamports
            )
        ),
        sync_native_instruction(to_pubkey),
    ]


async def unwrap_sol_instruction(
    wallet: Pubkey, connection: Optional[AsyncClient] = None
) -> Optional[Instruction]:
    """
    Close the wallet's wrapped SOL account back into the wallet.

    Without a connection the instruction is built unconditionally. With one,
    the account is looked up first and ``None`` is returned if the wallet has
    no wrapped SOL account.
    """
    wsol_ata = get_associated_token_account(NATIVE_MINT, wallet)

    if connection is not None:
        try:
            resp = await connection.get_account_info(wsol_ata)
        except Exception as e:
            logger.error(f"Error fetching wrapped SOL account {wsol_ata}: {e}")
            raise AccountReadFailure(wsol_ata, "unwrap_sol_instruction", str(e)) from e
        if resp.value is None:
            return None

    return close_account(
        CloseAccountParams(
            program_id=TOKEN_PROGRAM_ID,
            account=wsol_ata,
            dest=wallet,
            owner=wallet,
        )
    )
