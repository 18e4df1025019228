from typing import Optional, Sequence

from solders.pubkey import Pubkey

from vaultpy.constants.config import SEEDS, VAULT_BASE_KEY
from vaultpy.constants.numeric_constants import MAX_SEED_LEN, MAX_SEEDS
from vaultpy.errors import DerivationFailure
from vaultpy.types import VaultPdas


def find_program_address(
    seeds: Sequence[bytes], program_id: Pubkey
) -> tuple[Pubkey, int]:
    if len(seeds) > MAX_SEEDS:
        raise DerivationFailure("Too many seeds", seeds, program_id)
    for seed in seeds:
        if len(seed) > MAX_SEED_LEN:
            raise DerivationFailure(
                f"Seed of length {len(seed)} exceeds {MAX_SEED_LEN} bytes",
                seeds,
                program_id,
            )

    address, bump = Pubkey.find_program_address(list(seeds), program_id)
    if address.is_on_curve():
        raise DerivationFailure("No off-curve bump found", seeds, program_id)
    return address, bump


def get_vault_public_key(
    program_id: Pubkey,
    token_mint: Pubkey,
    seed_base_key: Optional[Pubkey] = None,
) -> Pubkey:
    base_key = seed_base_key if seed_base_key is not None else VAULT_BASE_KEY
    return find_program_address(
        [SEEDS.vault_prefix, bytes(token_mint), bytes(base_key)], program_id
    )[0]


def get_token_vault_public_key(program_id: Pubkey, vault: Pubkey) -> Pubkey:
    return find_program_address([SEEDS.token_vault_prefix, bytes(vault)], program_id)[
        0
    ]


def get_lp_mint_public_key(program_id: Pubkey, vault: Pubkey) -> Pubkey:
    return find_program_address([SEEDS.lp_mint_prefix, bytes(vault)], program_id)[0]


def get_vault_pdas(
    token_mint: Pubkey,
    program_id: Pubkey,
    seed_base_key: Optional[Pubkey] = None,
) -> VaultPdas:
    """
    Derive the vault, token vault and LP mint addresses for a token mint.

    The token vault and LP mint are seeded by the vault address, so all three
    are derived together.
    """
    vault = get_vault_public_key(program_id, token_mint, seed_base_key)
    return VaultPdas(
        vault=vault,
        token_vault=get_token_vault_public_key(program_id, vault),
        lp_mint=get_lp_mint_public_key(program_id, vault),
    )


def get_affiliate_partner_public_key(
    affiliate_program_id: Pubkey,
    vault: Pubkey,
    partner: Pubkey,
) -> Pubkey:
    return find_program_address([bytes(vault), bytes(partner)], affiliate_program_id)[
        0
    ]


def get_affiliate_user_public_key(
    affiliate_program_id: Pubkey,
    partner_account: Pubkey,
    owner: Pubkey,
) -> Pubkey:
    return find_program_address(
        [bytes(partner_account), bytes(owner)], affiliate_program_id
    )[0]
