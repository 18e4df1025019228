from vaultpy.accounts.chunked import (
    chunked_fetch_multiple_vault_accounts,
    chunked_get_multiple_account_infos,
    chunks,
)
from vaultpy.accounts.get_accounts import (
    account_exists,
    get_affiliate_partner,
    get_lp_supply,
    get_onchain_time,
    get_parsed_clock_state,
    get_token_account,
    get_vault_state,
    parse_clock_state,
)
