"""
Chunked multi-account reads.

RPC nodes cap ``getMultipleAccounts`` at 100 keys, so larger reads are split
into chunks that are requested concurrently and flattened back in order.

Two operations are exposed and they differ in result shape:

* ``chunked_fetch_multiple_vault_accounts`` decodes vault accounts and drops
  missing or foreign accounts, so results no longer line up with the input.
* ``chunked_get_multiple_account_infos`` returns raw accounts and keeps
  ``None`` for missing ones, so ``result[i]`` belongs to ``pubkeys[i]``.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Sequence, TypeVar

from anchorpy.program.core import Program
from solana.rpc.async_api import AsyncClient
from solders.account import Account
from solders.pubkey import Pubkey

from vaultpy.constants.numeric_constants import GET_MULTIPLE_ACCOUNTS_CHUNK_SIZE
from vaultpy.errors import BatchFetchFailure
from vaultpy.types import VaultState

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def chunks(array: Sequence[T], size: int) -> List[List[T]]:
    if size <= 0:
        raise ValueError(f"chunk size must be positive, got {size}")
    return [list(array[i : i + size]) for i in range(0, len(array), size)]


async def _fetch_chunked(
    operation: str,
    pubkeys: Sequence[Pubkey],
    chunk_size: int,
    fetch: Callable[[List[Pubkey]], Awaitable[List[R]]],
) -> List[R]:
    pubkey_chunks = chunks(pubkeys, chunk_size)
    if not pubkey_chunks:
        return []

    logger.debug(
        f"{operation}: {len(pubkeys)} accounts in {len(pubkey_chunks)} chunks"
    )

    async def fetch_chunk(index: int, chunk: List[Pubkey]) -> List[R]:
        try:
            return list(await fetch(chunk))
        except Exception as e:
            logger.error(f"{operation}: chunk {index} failed: {e}")
            raise BatchFetchFailure(operation, index, chunk) from e

    tasks = [
        asyncio.create_task(fetch_chunk(i, chunk))
        for i, chunk in enumerate(pubkey_chunks)
    ]
    try:
        results = await asyncio.gather(*tasks)
    except BaseException:
        # stop sibling requests once one chunk has failed
        for task in tasks:
            task.cancel()
        raise
    return [item for chunk_result in results for item in chunk_result]


async def chunked_fetch_multiple_vault_accounts(
    program: Program,
    pubkeys: Sequence[Pubkey],
    chunk_size: int = GET_MULTIPLE_ACCOUNTS_CHUNK_SIZE,
) -> List[VaultState]:
    async def fetch(chunk: List[Pubkey]) -> List[Optional[VaultState]]:
        accounts = await program.account["Vault"].fetch_multiple(chunk)
        return [
            VaultState.from_account(pubkey, account) if account is not None else None
            for pubkey, account in zip(chunk, accounts)
        ]

    vaults = await _fetch_chunked(
        "chunked_fetch_multiple_vault_accounts", pubkeys, chunk_size, fetch
    )
    return [vault for vault in vaults if vault is not None]


async def chunked_get_multiple_account_infos(
    connection: AsyncClient,
    pubkeys: Sequence[Pubkey],
    chunk_size: int = GET_MULTIPLE_ACCOUNTS_CHUNK_SIZE,
) -> List[Optional[Account]]:
    async def fetch(chunk: List[Pubkey]) -> List[Optional[Account]]:
        resp = await connection.get_multiple_accounts(chunk)
        if len(resp.value) != len(chunk):
            raise ValueError(
                f"expected {len(chunk)} accounts, node returned {len(resp.value)}"
            )
        return resp.value

    return await _fetch_chunked(
        "chunked_get_multiple_account_infos", pubkeys, chunk_size, fetch
    )
