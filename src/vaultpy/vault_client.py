import asyncio
import logging
from abc import abstractmethod
from typing import List, Optional

from anchorpy.program.context import Context
from anchorpy.program.core import Program
from solana.rpc.async_api import AsyncClient
from solders.instruction import Instruction
from solders.message import Message
from solders.pubkey import Pubkey
from solders.system_program import ID as SYS_PROGRAM_ID
from solders.sysvar import RENT
from solders.transaction import Transaction
from spl.token.constants import TOKEN_PROGRAM_ID

from vaultpy.accounts.get_accounts import (
    account_exists,
    get_affiliate_partner,
    get_lp_supply,
    get_onchain_time,
    get_token_account,
    get_vault_state,
)
from vaultpy.addresses import (
    get_affiliate_partner_public_key,
    get_affiliate_user_public_key,
    get_vault_pdas,
)
from vaultpy.constants.config import AFFILIATE_PROGRAM_ID, VAULT_PROGRAM_ID
from vaultpy.errors import ShapeMismatch
from vaultpy.math.vault import calculate_withdrawable_amount, get_amount_by_share
from vaultpy.program import get_affiliate_program, get_vault_program
from vaultpy.tokens import (
    NATIVE_MINT,
    check_u64,
    get_associated_token_account,
    get_or_create_ata_instruction,
    unwrap_sol_instruction,
    wrap_sol_instruction,
)
from vaultpy.types import AffiliateInfo, VaultPdas, VaultState

logger = logging.getLogger(__name__)


class VaultImplementation:
    @abstractmethod
    async def get_user_balance(self, owner: Pubkey) -> int:
        pass

    @abstractmethod
    async def get_vault_supply(self) -> int:
        pass

    @abstractmethod
    async def get_withdrawable_amount(self, owner: Pubkey) -> int:
        pass

    @abstractmethod
    async def deposit(self, owner: Pubkey, base_token_amount: int) -> Transaction:
        pass

    @abstractmethod
    async def get_affiliate_info(self) -> AffiliateInfo:
        pass


class VaultClient(VaultImplementation):
    """
    Client for a single vault, identified by its token mint.

    Builds unsigned transactions; signing and sending are left to the caller.
    When ``affiliate_id`` is set, balances and deposits go through the
    affiliate program's user account for that partner.
    """

    def __init__(
        self,
        connection: AsyncClient,
        token_mint: Pubkey,
        program_id: Pubkey = VAULT_PROGRAM_ID,
        affiliate_id: Optional[Pubkey] = None,
        affiliate_program_id: Pubkey = AFFILIATE_PROGRAM_ID,
        seed_base_key: Optional[Pubkey] = None,
    ):
        self.connection = connection
        self.token_mint = token_mint
        self.program_id = program_id
        self.affiliate_id = affiliate_id
        self.affiliate_program_id = affiliate_program_id
        self.vault_pdas: VaultPdas = get_vault_pdas(
            token_mint, program_id, seed_base_key
        )
        self.program: Optional[Program] = None
        self.affiliate_program: Optional[Program] = None
        self.vault_state: Optional[VaultState] = None

    async def initialize(self):
        """Load the program bindings and the current vault state"""
        self.program = get_vault_program(self.connection, self.program_id)
        if self.affiliate_id is not None:
            self.affiliate_program = get_affiliate_program(
                self.connection, self.affiliate_program_id
            )
        await self.refresh_vault_state()
        return self

    @property
    def is_affiliated(self) -> bool:
        return self.affiliate_id is not None

    def _get_program(self) -> Program:
        if self.program is None:
            raise ValueError("Vault program not loaded, call initialize() first")
        return self.program

    def _get_affiliate_program(self) -> Program:
        if self.affiliate_program is None:
            raise ValueError("Affiliate program not loaded, call initialize() first")
        return self.affiliate_program

    async def refresh_vault_state(self) -> VaultState:
        self.vault_state = await get_vault_state(
            self._get_program(), self.vault_pdas.vault
        )
        return self.vault_state

    def get_affiliate_partner_public_key(self) -> Pubkey:
        if self.affiliate_id is None:
            raise ValueError("No affiliate id configured")
        return get_affiliate_partner_public_key(
            self.affiliate_program_id, self.vault_pdas.vault, self.affiliate_id
        )

    def get_affiliate_user_public_key(self, owner: Pubkey) -> Pubkey:
        return get_affiliate_user_public_key(
            self.affiliate_program_id, self.get_affiliate_partner_public_key(), owner
        )

    def get_user_lp_public_key(self, owner: Pubkey) -> Pubkey:
        lp_owner = (
            self.get_affiliate_user_public_key(owner) if self.is_affiliated else owner
        )
        return get_associated_token_account(self.vault_pdas.lp_mint, lp_owner)

    async def get_user_balance(self, owner: Pubkey) -> int:
        address = self.get_user_lp_public_key(owner)
        token_account = await get_token_account(self.connection, address)
        if token_account is None:
            return 0
        if token_account.mint != self.vault_pdas.lp_mint:
            raise ShapeMismatch(
                address, f"holds mint {token_account.mint}, not the vault LP mint"
            )
        return token_account.amount

    async def get_vault_supply(self) -> int:
        _, lp_supply = await asyncio.gather(
            self.refresh_vault_state(),
            get_lp_supply(self.connection, self.vault_pdas.lp_mint),
        )
        return lp_supply

    async def get_withdrawable_amount(self, owner: Pubkey) -> int:
        """Tokens the owner's LP balance can be redeemed for right now"""
        onchain_time, user_lp, lp_supply, vault_state = await asyncio.gather(
            get_onchain_time(self.connection),
            self.get_user_balance(owner),
            get_lp_supply(self.connection, self.vault_pdas.lp_mint),
            self.refresh_vault_state(),
        )
        unlocked_amount = calculate_withdrawable_amount(onchain_time, vault_state)
        return get_amount_by_share(user_lp, unlocked_amount, lp_supply)

    async def get_deposit_ixs(
        self, owner: Pubkey, base_token_amount: int, minimum_lp_amount: int = 0
    ) -> List[Instruction]:
        check_u64(base_token_amount, "base_token_amount")
        check_u64(minimum_lp_amount, "minimum_lp_amount")
        vault_state = await self.refresh_vault_state()

        instructions: List[Instruction] = []

        if self.is_affiliated:
            affiliate_program = self._get_affiliate_program()
            partner = self.get_affiliate_partner_public_key()
            user = self.get_affiliate_user_public_key(owner)
            user_token, user_lp, user_exists = await asyncio.gather(
                get_or_create_ata_instruction(
                    vault_state.token_mint, owner, self.connection
                ),
                get_or_create_ata_instruction(
                    self.vault_pdas.lp_mint, user, self.connection, payer=owner
                ),
                account_exists(self.connection, user),
            )
            if not user_exists:
                instructions.append(
                    affiliate_program.instruction["init_user"](
                        ctx=Context(
                            accounts={
                                "partner": partner,
                                "user": user,
                                "owner": owner,
                                "system_program": SYS_PROGRAM_ID,
                                "rent": RENT,
                            }
                        )
                    )
                )
        else:
            user_token, user_lp = await asyncio.gather(
                get_or_create_ata_instruction(
                    vault_state.token_mint, owner, self.connection
                ),
                get_or_create_ata_instruction(
                    self.vault_pdas.lp_mint, owner, self.connection
                ),
            )

        for ata in (user_token, user_lp):
            if ata.instruction is not None:
                instructions.append(ata.instruction)

        if vault_state.token_mint == NATIVE_MINT:
            instructions.extend(
                wrap_sol_instruction(owner, user_token.address, base_token_amount)
            )

        if self.is_affiliated:
            deposit_ix = affiliate_program.instruction["deposit"](
                base_token_amount,
                minimum_lp_amount,
                ctx=Context(
                    accounts={
                        "partner": partner,
                        "user": user,
                        "vault_program": self.program_id,
                        "vault": self.vault_pdas.vault,
                        "token_vault": self.vault_pdas.token_vault,
                        "vault_lp_mint": self.vault_pdas.lp_mint,
                        "user_token": user_token.address,
                        "user_lp": user_lp.address,
                        "owner": owner,
                        "token_program": TOKEN_PROGRAM_ID,
                    }
                ),
            )
        else:
            deposit_ix = self._get_program().instruction["deposit"](
                base_token_amount,
                minimum_lp_amount,
                ctx=Context(
                    accounts={
                        "vault": self.vault_pdas.vault,
                        "token_vault": self.vault_pdas.token_vault,
                        "lp_mint": self.vault_pdas.lp_mint,
                        "user_token": user_token.address,
                        "user_lp": user_lp.address,
                        "user": owner,
                        "token_program": TOKEN_PROGRAM_ID,
                    }
                ),
            )
        instructions.append(deposit_ix)
        return instructions

    async def get_withdraw_ixs(
        self, owner: Pubkey, unmint_amount: int, min_out_amount: int = 0
    ) -> List[Instruction]:
        check_u64(unmint_amount, "unmint_amount")
        check_u64(min_out_amount, "min_out_amount")
        vault_state = await self.refresh_vault_state()

        instructions: List[Instruction] = []

        user_token = await get_or_create_ata_instruction(
            vault_state.token_mint, owner, self.connection
        )
        if user_token.instruction is not None:
            instructions.append(user_token.instruction)
        user_lp = self.get_user_lp_public_key(owner)

        if self.is_affiliated:
            withdraw_ix = self._get_affiliate_program().instruction["withdraw"](
                unmint_amount,
                min_out_amount,
                ctx=Context(
                    accounts={
                        "partner": self.get_affiliate_partner_public_key(),
                        "user": self.get_affiliate_user_public_key(owner),
                        "vault_program": self.program_id,
                        "vault": self.vault_pdas.vault,
                        "token_vault": self.vault_pdas.token_vault,
                        "vault_lp_mint": self.vault_pdas.lp_mint,
                        "user_token": user_token.address,
                        "user_lp": user_lp,
                        "owner": owner,
                        "token_program": TOKEN_PROGRAM_ID,
                    }
                ),
            )
        else:
            withdraw_ix = self._get_program().instruction["withdraw"](
                unmint_amount,
                min_out_amount,
                ctx=Context(
                    accounts={
                        "vault": self.vault_pdas.vault,
                        "token_vault": self.vault_pdas.token_vault,
                        "lp_mint": self.vault_pdas.lp_mint,
                        "user_token": user_token.address,
                        "user_lp": user_lp,
                        "user": owner,
                        "token_program": TOKEN_PROGRAM_ID,
                    }
                ),
            )
        instructions.append(withdraw_ix)

        if vault_state.token_mint == NATIVE_MINT:
            instructions.append(await unwrap_sol_instruction(owner))

        return instructions

    async def build_transaction(
        self, owner: Pubkey, instructions: List[Instruction]
    ) -> Transaction:
        latest_blockhash = (
            await self.connection.get_latest_blockhash()
        ).value.blockhash
        msg = Message.new_with_blockhash(instructions, owner, latest_blockhash)
        return Transaction.new_unsigned(msg)

    async def deposit(self, owner: Pubkey, base_token_amount: int) -> Transaction:
        ixs = await self.get_deposit_ixs(owner, base_token_amount)
        logger.debug(
            f"deposit of {base_token_amount} into {self.vault_pdas.vault}: "
            f"{len(ixs)} instructions"
        )
        return await self.build_transaction(owner, ixs)

    async def withdraw(self, owner: Pubkey, unmint_amount: int) -> Transaction:
        ixs = await self.get_withdraw_ixs(owner, unmint_amount)
        logger.debug(
            f"withdraw of {unmint_amount} LP from {self.vault_pdas.vault}: "
            f"{len(ixs)} instructions"
        )
        return await self.build_transaction(owner, ixs)

    async def get_affiliate_info(self) -> AffiliateInfo:
        if not self.is_affiliated:
            raise ValueError("No affiliate id configured")
        return await get_affiliate_partner(
            self._get_affiliate_program(), self.get_affiliate_partner_public_key()
        )
