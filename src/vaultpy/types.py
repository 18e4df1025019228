from dataclasses import dataclass
from typing import Any, Iterator, Optional, Union

from solders.instruction import Instruction
from solders.pubkey import Pubkey


@dataclass(frozen=True)
class VaultPdas:
    vault: Pubkey
    token_vault: Pubkey
    lp_mint: Pubkey


@dataclass(frozen=True)
class VaultBumps:
    vault_bump: int
    token_vault_bump: int


@dataclass(frozen=True)
class LockedProfitTracker:
    last_updated_locked_profit: int
    last_report: int
    locked_profit_degradation: int


@dataclass(frozen=True)
class VaultState:
    """
    Read-only snapshot of a vault account.

    Owned by the vault program. The client only reads these fields.
    """

    pubkey: Optional[Pubkey]
    enabled: int
    bumps: VaultBumps
    total_amount: int
    token_vault: Pubkey
    fee_vault: Pubkey
    token_mint: Pubkey
    lp_mint: Pubkey
    strategies: tuple[Pubkey, ...]
    base: Pubkey
    admin: Pubkey
    operator: Pubkey
    locked_profit_tracker: LockedProfitTracker

    @classmethod
    def from_account(cls, pubkey: Optional[Pubkey], account: Any) -> "VaultState":
        tracker = account.locked_profit_tracker
        return cls(
            pubkey=pubkey,
            enabled=int(account.enabled),
            bumps=VaultBumps(
                vault_bump=account.bumps.vault_bump,
                token_vault_bump=account.bumps.token_vault_bump,
            ),
            total_amount=int(account.total_amount),
            token_vault=account.token_vault,
            fee_vault=account.fee_vault,
            token_mint=account.token_mint,
            lp_mint=account.lp_mint,
            strategies=tuple(account.strategies),
            base=account.base,
            admin=account.admin,
            operator=account.operator,
            locked_profit_tracker=LockedProfitTracker(
                last_updated_locked_profit=int(tracker.last_updated_locked_profit),
                last_report=int(tracker.last_report),
                locked_profit_degradation=int(tracker.locked_profit_degradation),
            ),
        )


@dataclass(frozen=True)
class AffiliateInfo:
    partner_token: Pubkey
    vault: Pubkey
    outstanding_fee: int
    fee_ratio: int
    cumulative_fee: int

    @classmethod
    def from_account(cls, account: Any) -> "AffiliateInfo":
        return cls(
            partner_token=account.partner_token,
            vault=account.vault,
            outstanding_fee=int(account.outstanding_fee),
            fee_ratio=int(account.fee_ratio),
            cumulative_fee=int(account.cummulative_fee),
        )


@dataclass(frozen=True)
class ClockInfo:
    epoch: int
    epoch_start_timestamp: int
    leader_schedule_epoch: int
    slot: int
    unix_timestamp: int


@dataclass(frozen=True)
class ParsedClockState:
    info: ClockInfo
    type: str
    program: str
    space: int


@dataclass(frozen=True)
class TokenAccount:
    address: Optional[Pubkey]
    mint: Pubkey
    owner: Pubkey
    amount: int
    is_native: bool


@dataclass(frozen=True)
class AtaFound:
    address: Pubkey

    @property
    def instruction(self) -> None:
        return None

    def __iter__(self) -> Iterator[Any]:
        return iter((self.address, None))


@dataclass(frozen=True)
class AtaNotFound:
    address: Pubkey
    instruction: Instruction

    def __iter__(self) -> Iterator[Any]:
        return iter((self.address, self.instruction))


AtaResult = Union[AtaFound, AtaNotFound]
