from typing import Optional, Sequence

from solders.pubkey import Pubkey


class VaultError(Exception):
    """Base class for errors raised by vaultpy."""


class DerivationFailure(VaultError):
    def __init__(self, message: str, seeds: Sequence[bytes], program_id: Pubkey):
        super().__init__(f"{message} (program {program_id}, {len(seeds)} seeds)")
        self.seeds = list(seeds)
        self.program_id = program_id


class AccountReadFailure(VaultError):
    """
    The connection failed while reading an account.

    This is never used for "account does not exist"; the underlying
    exception is chained as ``__cause__``.
    """

    def __init__(self, address: Optional[Pubkey], operation: str, message: str = ""):
        detail = f": {message}" if message else ""
        super().__init__(f"{operation} failed for {address}{detail}")
        self.address = address
        self.operation = operation


class ShapeMismatch(VaultError):
    def __init__(self, address: Optional[Pubkey], message: str):
        super().__init__(f"Unexpected account data at {address}: {message}")
        self.address = address


class BatchFetchFailure(VaultError):
    def __init__(self, operation: str, chunk_index: int, pubkeys: Sequence[Pubkey]):
        super().__init__(
            f"{operation} failed on chunk {chunk_index} ({len(pubkeys)} accounts)"
        )
        self.operation = operation
        self.chunk_index = chunk_index
        self.pubkeys = list(pubkeys)


class AmountOverflow(VaultError, ValueError):
    def __init__(self, amount: int, field: str = "amount"):
        super().__init__(f"{field} {amount} does not fit in a u64")
        self.amount = amount
        self.field = field


class AccountNotFound(VaultError):
    def __init__(self, address: Optional[Pubkey], operation: str):
        super().__init__(f"{operation}: account {address} does not exist")
        self.address = address
        self.operation = operation
