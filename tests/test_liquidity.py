"""Liquidity provision and the administrative surface."""

import pytest

from conftest import EVENT, MARKET, TOKEN
from predpool.errors import (
    FeeTooHigh,
    InsufficientPoolBalance,
    InvalidOption,
    LiquidityLocked,
    MarketClosed,
    MarketExists,
    NothingToClaim,
    ZeroAmount,
)
from predpool.notifications import EventRecorder


def test_deposit_splits_evenly_and_keeps_dust(exchange, assets):
    exchange.admin.create_market("tri", EVENT, ["A", "B", "C"])
    credited = exchange.liquidity.add_liquidity("tri", "lp", 10)
    assert credited == 9
    m = exchange.get_market("tri")
    assert m.initial_liquidity == [3, 3, 3]
    assert m.current_liquidity == [3, 3, 3]
    assert m.total_liquidity == 9
    assert assets.balance_of("lp") == 1000 * TOKEN - 9


def test_deposit_too_small_to_split(exchange, market):
    with pytest.raises(ZeroAmount):
        exchange.liquidity.add_liquidity(MARKET, "lp", 1)
    with pytest.raises(ZeroAmount):
        exchange.liquidity.add_liquidity(MARKET, "lp", 0)


def test_repeat_provider_listed_once(exchange, market):
    exchange.liquidity.add_liquidity(MARKET, "lp", 10 * TOKEN)
    exchange.liquidity.add_liquidity(MARKET, "bob", 4 * TOKEN)
    assert exchange.liquidity.get_providers(MARKET) == ["lp", "bob"]
    assert exchange.liquidity.get_liquidity_provided_by(MARKET, "lp") == 85 * TOKEN
    assert exchange.liquidity.get_liquidity_provided_by(MARKET, "carol") == 0


def test_deposit_never_creates_reserve(exchange, market):
    exchange.pricing.place_bet("alice", MARKET, 0, 10 * TOKEN)
    reserves = exchange.get_reserved_tokens(MARKET)
    exchange.liquidity.add_liquidity(MARKET, "bob", 10 * TOKEN)
    assert exchange.get_reserved_tokens(MARKET) == reserves


def test_withdrawal_locked_while_open(exchange, market):
    with pytest.raises(LiquidityLocked):
        exchange.liquidity.remove_liquidity(MARKET, "lp")


def test_closed_market_takes_no_deposits(exchange, market):
    exchange.admin.cancel_market(MARKET)
    with pytest.raises(MarketClosed):
        exchange.liquidity.add_liquidity(MARKET, "lp", TOKEN)


def test_withdrawal_pays_share_plus_fees(exchange, assets, market):
    exchange.pricing.place_bet("alice", MARKET, 0, 10 * TOKEN)
    fees = exchange.get_market(MARKET).total_fees
    exchange.admin.cancel_market(MARKET)

    recorder = EventRecorder()
    exchange.bus.subscribe(recorder)
    payout = exchange.liquidity.remove_liquidity(MARKET, "lp")
    # Sole provider: remaining liquidity equals total liquidity
    assert payout == 75 * TOKEN + fees * 75 // 85
    assert assets.balance_of("lp") == 925 * TOKEN + payout
    assert exchange.liquidity.get_liquidity_provided_by(MARKET, "lp") == 0
    (event,) = recorder.of_type("liquidity_changed")
    assert event.removed and event.amount == payout

    with pytest.raises(NothingToClaim):
        exchange.liquidity.remove_liquidity(MARKET, "lp")
    with pytest.raises(NothingToClaim):
        exchange.liquidity.remove_liquidity(MARKET, "carol")


def test_house_seeding_from_pool(exchange, assets):
    exchange.admin.configure_default_liquidity(True, 20 * TOKEN)
    pool = assets.pool_balance()
    m = exchange.admin.create_market("seeded", EVENT, ["Yes", "No"])
    assert m.initial_liquidity == [10 * TOKEN, 10 * TOKEN]
    assert m.providers == {"house": 20 * TOKEN}
    assert assets.pool_balance() == pool
    assert exchange.pricing.get_all_odds("seeded") == [20000, 20000]


def test_house_seeding_needs_pool_balance(exchange, assets):
    exchange.admin.configure_default_liquidity(True, 20 * TOKEN)
    assets.withdraw("drain", assets.pool_balance())
    with pytest.raises(InsufficientPoolBalance):
        exchange.admin.create_market("seeded", EVENT, ["Yes", "No"])
    assert not exchange.store.exists("seeded")


def test_top_up_from_pool(exchange, assets, market):
    pool = assets.pool_balance()
    exchange.liquidity.add_liquidity(MARKET, "house", 10 * TOKEN, from_pool=True)
    assert assets.pool_balance() == pool
    assert exchange.liquidity.get_providers(MARKET) == ["lp", "house"]


def test_create_market_validation(exchange, market):
    with pytest.raises(MarketExists):
        exchange.admin.create_market(MARKET, EVENT, ["Yes", "No"])
    with pytest.raises(InvalidOption):
        exchange.admin.create_market("solo", EVENT, ["Only"])
    with pytest.raises(ValueError):
        exchange.admin.configure_default_liquidity(True, -1)


def test_fee_caps(exchange, params):
    with pytest.raises(FeeTooHigh):
        exchange.admin.set_platform_fee(1001)
    with pytest.raises(FeeTooHigh):
        exchange.admin.set_early_exit_fee(-1)
    exchange.admin.set_platform_fee(1000)
    exchange.admin.set_early_exit_fee(0)
    assert (params.platform_fee, params.early_exit_fee) == (1000, 0)


def test_fee_change_applies_to_next_quote(exchange, market):
    before = exchange.pricing.calculate_potential_return(MARKET, 0, 10 * TOKEN)
    exchange.admin.set_platform_fee(0)
    after = exchange.pricing.calculate_potential_return(MARKET, 0, 10 * TOKEN)
    assert after - before == 236842105263157894
