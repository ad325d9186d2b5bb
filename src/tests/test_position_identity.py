from core import constants
from services.position_identity import (
    classify_position_type,
    find_duplicate_identities,
    position_identity,
    resolve_identity,
)
from snapshot_factory import make_position


def test_position_identity_is_normalized():
    position = make_position(protocol_name="Aave V3", chain="ETH", symbol="USDC.e")
    assert position_identity(position) == "aave_v3_eth_lending_usdce"


def test_position_identity_without_supply_tokens():
    position = make_position()
    position.supply_tokens = []
    assert position_identity(position).endswith("_unknown")


def test_classify_position_type():
    assert classify_position_type("Liquidity Pool") == "liquidity"
    assert classify_position_type("Locked") == "staking"
    assert classify_position_type("Yield Farming") == "farming"
    assert classify_position_type("Vault") == "vault"
    assert classify_position_type("Something") == "other"
    assert classify_position_type(None) == "other"


def test_resolve_identity_prefers_external_id():
    position = make_position(position_id="NFT #1234")
    identity = resolve_identity(position)
    assert identity.source == constants.IDENTITY_EXTERNAL
    assert identity.key == "aave_v3_eth_nft_1234"


def test_resolve_identity_falls_back_to_heuristic():
    identity = resolve_identity(make_position())
    assert identity.source == constants.IDENTITY_HEURISTIC
    assert identity.key == "aave_v3_eth_lending_usdc"


def test_find_duplicate_identities():
    positions = [
        make_position(supply=1000),
        make_position(supply=2000),
        make_position(symbol="WETH"),
        make_position(position_id="1"),
        make_position(position_id="2"),
    ]
    assert find_duplicate_identities(positions) == ["aave_v3_eth_lending_usdc"]


def test_vault_labels_win_over_deposit():
    assert classify_position_type("Vault Deposit") == "vault"


def test_short_liquidity_keywords_match_whole_words_only():
    assert classify_position_type("Uniswap V3 LP") == "liquidity"
    assert classify_position_type("LP Staking") == "liquidity"
    assert classify_position_type("AMM") == "liquidity"
    assert classify_position_type("Helpful Bonus") == "other"
    assert classify_position_type("Hammer") == "other"
