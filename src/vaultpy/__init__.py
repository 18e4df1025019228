from vaultpy.addresses import get_vault_pdas
from vaultpy.vault_client import VaultClient, VaultImplementation

__all__ = [
    "get_vault_pdas",
    "VaultClient",
    "VaultImplementation",
]
