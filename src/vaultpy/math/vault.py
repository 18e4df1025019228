from vaultpy.constants.numeric_constants import LOCKED_PROFIT_DEGRADATION_DENOMINATOR
from vaultpy.types import VaultState


def calculate_locked_profit(onchain_time: int, vault_state: VaultState) -> int:
    tracker = vault_state.locked_profit_tracker
    duration = onchain_time - tracker.last_report
    locked_fund_ratio = (
        LOCKED_PROFIT_DEGRADATION_DENOMINATOR
        - duration * tracker.locked_profit_degradation
    )
    if locked_fund_ratio < 0:
        return 0

    return (
        tracker.last_updated_locked_profit
        * locked_fund_ratio
        // LOCKED_PROFIT_DEGRADATION_DENOMINATOR
    )


def calculate_withdrawable_amount(onchain_time: int, vault_state: VaultState) -> int:
    """
    Amount of the vault's tokens that is unlocked at ``onchain_time``.

    Profit reported by strategies unlocks linearly from ``last_report``; the
    still-locked part is excluded.
    """
    return vault_state.total_amount - calculate_locked_profit(onchain_time, vault_state)


def get_amount_by_share(share: int, unlocked_amount: int, total_supply: int) -> int:
    if total_supply == 0:
        return 0
    return share * unlocked_amount // total_supply


def get_unmint_amount(out_amount: int, unlocked_amount: int, total_supply: int) -> int:
    if unlocked_amount == 0:
        return 0
    return out_amount * total_supply // unlocked_amount
