import asyncio
from types import SimpleNamespace
from typing import Callable, Dict, List, Optional, Set

from anchorpy import NamedInstruction, Program
from solders.account import Account
from solders.hash import Hash
from solders.pubkey import Pubkey
from spl.token.constants import TOKEN_PROGRAM_ID

TOKEN_ACCOUNT_SIZE = 165


def token_account_data(mint: Pubkey, owner: Pubkey, amount: int) -> bytes:
    data = bytes(mint) + bytes(owner) + amount.to_bytes(8, "little")
    return data + bytes(TOKEN_ACCOUNT_SIZE - len(data))


def make_token_account(mint: Pubkey, owner: Pubkey, amount: int) -> Account:
    return Account(
        lamports=2_039_280,
        data=token_account_data(mint, owner, amount),
        owner=TOKEN_PROGRAM_ID,
    )


def make_vault_account(
    token_mint: Pubkey,
    lp_mint: Optional[Pubkey] = None,
    total_amount: int = 0,
    last_updated_locked_profit: int = 0,
    last_report: int = 0,
    locked_profit_degradation: int = 0,
):
    """An object shaped like an anchorpy-decoded Vault account"""
    return SimpleNamespace(
        enabled=1,
        bumps=SimpleNamespace(vault_bump=255, token_vault_bump=254),
        total_amount=total_amount,
        token_vault=Pubkey.new_unique(),
        fee_vault=Pubkey.new_unique(),
        token_mint=token_mint,
        lp_mint=lp_mint if lp_mint is not None else Pubkey.new_unique(),
        strategies=[Pubkey.default()] * 30,
        base=Pubkey.new_unique(),
        admin=Pubkey.new_unique(),
        operator=Pubkey.new_unique(),
        locked_profit_tracker=SimpleNamespace(
            last_updated_locked_profit=last_updated_locked_profit,
            last_report=last_report,
            locked_profit_degradation=locked_profit_degradation,
        ),
    )


def encode_vault_account(
    program: Program,
    token_mint: Pubkey,
    lp_mint: Pubkey,
    total_amount: int = 0,
) -> Account:
    """A Vault account as the vault program stores it"""
    data = program.coder.accounts.build(
        NamedInstruction(
            name="Vault",
            data={
                "enabled": 1,
                "bumps": {"vault_bump": 255, "token_vault_bump": 254},
                "total_amount": total_amount,
                "token_vault": Pubkey.new_unique(),
                "fee_vault": Pubkey.new_unique(),
                "token_mint": token_mint,
                "lp_mint": lp_mint,
                "strategies": [Pubkey.default()] * 30,
                "base": Pubkey.new_unique(),
                "admin": Pubkey.new_unique(),
                "operator": Pubkey.new_unique(),
                "locked_profit_tracker": {
                    "last_updated_locked_profit": 0,
                    "last_report": 0,
                    "locked_profit_degradation": 0,
                },
            },
        )
    )
    return Account(lamports=10_000_000, data=data, owner=program.program_id)


def clock_data(unix_timestamp: int = 1_700_000_000, **overrides):
    info = {
        "epoch": 500,
        "epochStartTimestamp": unix_timestamp - 3600,
        "leaderScheduleEpoch": 501,
        "slot": 250_000_000,
        "unixTimestamp": unix_timestamp,
    }
    info.update(overrides)
    return SimpleNamespace(
        program="sysvar", space=40, parsed={"type": "clock", "info": info}
    )


class FakeConnection:
    """
    Stand-in for solana.rpc.async_api.AsyncClient.

    Serves accounts from a dict and records every call as (method, args).
    """

    def __init__(
        self,
        accounts: Optional[Dict[Pubkey, Account]] = None,
        failing: Optional[Set[Pubkey]] = None,
        clock=None,
        token_supplies: Optional[Dict[Pubkey, int]] = None,
        chunk_delay: Optional[Callable[[int], float]] = None,
    ):
        self.accounts = accounts if accounts is not None else {}
        self.failing = failing if failing is not None else set()
        self.clock = clock
        self.token_supplies = token_supplies if token_supplies is not None else {}
        self.chunk_delay = chunk_delay
        self.calls: List[tuple] = []
        self.completed_chunks: List[List[Pubkey]] = []

    def calls_to(self, method: str) -> List[tuple]:
        return [call for call in self.calls if call[0] == method]

    def _check(self, pubkey: Pubkey):
        if pubkey in self.failing:
            raise ConnectionError(f"rpc node unreachable for {pubkey}")

    async def get_account_info(self, pubkey: Pubkey, *args, **kwargs):
        self.calls.append(("get_account_info", pubkey))
        self._check(pubkey)
        return SimpleNamespace(value=self.accounts.get(pubkey))

    async def get_multiple_accounts(self, pubkeys: List[Pubkey], *args, **kwargs):
        call_index = len(self.calls_to("get_multiple_accounts"))
        self.calls.append(("get_multiple_accounts", list(pubkeys)))
        if self.chunk_delay is not None:
            await asyncio.sleep(self.chunk_delay(call_index))
        for pubkey in pubkeys:
            self._check(pubkey)
        self.completed_chunks.append(list(pubkeys))
        return SimpleNamespace(value=[self.accounts.get(pk) for pk in pubkeys])

    async def get_account_info_json_parsed(self, pubkey: Pubkey, *args, **kwargs):
        self.calls.append(("get_account_info_json_parsed", pubkey))
        self._check(pubkey)
        value = None if self.clock is None else SimpleNamespace(data=self.clock)
        return SimpleNamespace(value=value)

    async def get_token_supply(self, mint: Pubkey, *args, **kwargs):
        self.calls.append(("get_token_supply", mint))
        self._check(mint)
        return SimpleNamespace(
            value=SimpleNamespace(amount=str(self.token_supplies.get(mint, 0)))
        )

    async def get_latest_blockhash(self, *args, **kwargs):
        self.calls.append(("get_latest_blockhash", None))
        return SimpleNamespace(value=SimpleNamespace(blockhash=Hash.default()))


class FakeAccountClient:
    def __init__(
        self, accounts: Dict[Pubkey, object], failing: Optional[Set[Pubkey]] = None
    ):
        self.accounts = accounts
        self.failing = failing if failing is not None else set()
        self.calls: List[List[Pubkey]] = []

    async def fetch_multiple(self, pubkeys: List[Pubkey], *args, **kwargs):
        self.calls.append(list(pubkeys))
        for pubkey in pubkeys:
            if pubkey in self.failing:
                raise ConnectionError(f"rpc node unreachable for {pubkey}")
        return [self.accounts.get(pk) for pk in pubkeys]


class FakeProgram:
    def __init__(
        self, vaults: Dict[Pubkey, object], failing: Optional[Set[Pubkey]] = None
    ):
        self.account = {"Vault": FakeAccountClient(vaults, failing)}
