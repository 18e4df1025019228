import logging
from typing import Any, Optional

from anchorpy.error import AccountDoesNotExistError, AccountInvalidDiscriminator
from anchorpy.program.core import Program
from solana.rpc.async_api import AsyncClient
from solders.pubkey import Pubkey
from solders.sysvar import CLOCK

from vaultpy.errors import AccountNotFound, AccountReadFailure, ShapeMismatch
from vaultpy.tokens import deserialize_account
from vaultpy.types import (
    AffiliateInfo,
    ClockInfo,
    ParsedClockState,
    TokenAccount,
    VaultState,
)

logger = logging.getLogger(__name__)

CLOCK_INFO_FIELDS = {
    "epoch": "epoch",
    "epochStartTimestamp": "epoch_start_timestamp",
    "leaderScheduleEpoch": "leader_schedule_epoch",
    "slot": "slot",
    "unixTimestamp": "unix_timestamp",
}


def parse_clock_state(data: Any, address: Pubkey = CLOCK) -> ParsedClockState:
    parsed = getattr(data, "parsed", None)
    if not isinstance(parsed, dict):
        raise ShapeMismatch(address, "clock sysvar was not returned as parsed data")

    info = parsed.get("info")
    if not isinstance(info, dict):
        raise ShapeMismatch(address, "clock sysvar has no info section")

    missing = [key for key in CLOCK_INFO_FIELDS if not isinstance(info.get(key), int)]
    if missing:
        raise ShapeMismatch(address, f"clock sysvar info is missing {missing}")

    return ParsedClockState(
        info=ClockInfo(
            **{field: info[key] for key, field in CLOCK_INFO_FIELDS.items()}
        ),
        type=parsed.get("type", ""),
        program=getattr(data, "program", ""),
        space=getattr(data, "space", 0),
    )


async def get_parsed_clock_state(connection: AsyncClient) -> ParsedClockState:
    try:
        resp = await connection.get_account_info_json_parsed(CLOCK)
    except Exception as e:
        logger.error(f"Error fetching clock sysvar: {e}")
        raise AccountReadFailure(CLOCK, "get_parsed_clock_state", str(e)) from e

    if resp.value is None:
        raise ShapeMismatch(CLOCK, "clock sysvar account not found")

    return parse_clock_state(resp.value.data)


async def get_onchain_time(connection: AsyncClient) -> int:
    return (await get_parsed_clock_state(connection)).info.unix_timestamp


async def get_lp_supply(connection: AsyncClient, token_mint: Pubkey) -> int:
    try:
        resp = await connection.get_token_supply(token_mint)
    except Exception as e:
        logger.error(f"Error fetching supply of {token_mint}: {e}")
        raise AccountReadFailure(token_mint, "get_lp_supply", str(e)) from e
    return int(resp.value.amount)


async def get_token_account(
    connection: AsyncClient, address: Pubkey
) -> Optional[TokenAccount]:
    try:
        resp = await connection.get_account_info(address)
    except Exception as e:
        logger.error(f"Error fetching token account {address}: {e}")
        raise AccountReadFailure(address, "get_token_account", str(e)) from e
    return deserialize_account(resp.value, address)


async def account_exists(connection: AsyncClient, address: Pubkey) -> bool:
    try:
        resp = await connection.get_account_info(address)
    except Exception as e:
        logger.error(f"Error fetching account {address}: {e}")
        raise AccountReadFailure(address, "account_exists", str(e)) from e
    return resp.value is not None


async def _fetch_typed(program: Program, name: str, address: Pubkey, operation: str):
    try:
        return await program.account[name].fetch(address)
    except AccountDoesNotExistError as e:
        raise AccountNotFound(address, operation) from e
    except AccountInvalidDiscriminator as e:
        raise ShapeMismatch(address, f"not a {name} account") from e
    except Exception as e:
        logger.error(f"Error fetching {name} account {address}: {e}")
        raise AccountReadFailure(address, operation, str(e)) from e


async def get_vault_state(program: Program, vault: Pubkey) -> VaultState:
    account = await _fetch_typed(program, "Vault", vault, "get_vault_state")
    return VaultState.from_account(vault, account)


async def get_affiliate_partner(program: Program, partner: Pubkey) -> AffiliateInfo:
    account = await _fetch_typed(program, "Partner", partner, "get_affiliate_partner")
    return AffiliateInfo.from_account(account)
