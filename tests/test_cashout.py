"""Early exit and live cashout valuation."""

import pytest

from conftest import DEADLINE, EVENT, MARKET, TOKEN
from predpool.errors import (
    BetNotActive,
    BetNotFound,
    DivisionByZero,
    InsufficientPoolBalance,
    MarketClosed,
    NotBetOwner,
    WindowClosed,
)
from predpool.models import BetStatus
from predpool.pricing.cashout import simulate_cashout
from predpool.notifications import EventRecorder


@pytest.fixture
def bet_id(exchange, market):
    return exchange.pricing.place_bet("alice", MARKET, 0, 10 * TOKEN)


def test_quoted_value_is_paid(exchange, assets, bet_id):
    quoted = exchange.ledger.calculate_early_exit_value(bet_id)
    assert exchange.ledger.get_active_bets_with_cashout("alice", MARKET) == [(bet_id, quoted)]
    paid = exchange.pricing.early_exit(bet_id, "alice")
    assert paid == quoted
    assert assets.balance_of("alice") == 990 * TOKEN + paid


def test_immediate_cashout_is_bounded(exchange, bet_id):
    bet = exchange.get_bet_details(bet_id)
    paid = exchange.pricing.early_exit(bet_id, "alice")
    assert 0 < paid < bet.potential_payout
    assert 9460 * TOKEN // 1000 < paid < 9480 * TOKEN // 1000


def test_exit_updates_market_and_indexes(exchange, bet_id):
    bet = exchange.get_bet_details(bet_id)
    before = exchange.get_market(MARKET)
    quote = exchange.ledger.quote_cashout(bet, before)

    exchange.pricing.early_exit(bet_id, "alice")
    after = exchange.get_market(MARKET)
    assert after.current_liquidity == quote.new_liquidity
    assert after.total_fees == before.total_fees + quote.fee
    assert after.total_bets == before.total_bets
    assert all(v > 0 for v in after.current_liquidity)

    assert exchange.get_bet_details(bet_id).status is BetStatus.CASHED_OUT
    assert exchange.ledger.get_user_active_bet_ids("alice", MARKET) == []
    assert exchange.ledger.get_market_bet_ids(MARKET) == [bet_id]
    assert exchange.ledger.calculate_early_exit_value(bet_id) == 0


def test_exit_publishes_event(exchange, bet_id):
    recorder = EventRecorder()
    exchange.bus.subscribe(recorder)
    paid = exchange.pricing.early_exit(bet_id, "alice")
    (event,) = recorder.of_type("bet_cashed_out")
    assert event.bet_id == bet_id
    assert event.cashout == paid
    assert len(recorder.of_type("odds_changed")) == 1


def test_second_exit_rejected(exchange, bet_id):
    exchange.pricing.early_exit(bet_id, "alice")
    with pytest.raises(BetNotActive):
        exchange.pricing.early_exit(bet_id, "alice")


def test_unknown_bet(exchange, market):
    with pytest.raises(BetNotFound):
        exchange.pricing.early_exit(99, "alice")
    with pytest.raises(BetNotFound):
        exchange.ledger.calculate_early_exit_value(99)


def test_only_owner_can_exit(exchange, bet_id):
    with pytest.raises(NotBetOwner):
        exchange.pricing.early_exit(bet_id, "bob")
    assert exchange.get_bet_details(bet_id).is_active


def test_exit_outside_window(exchange, clock, bet_id):
    clock.now = 1500
    assert exchange.ledger.calculate_early_exit_value(bet_id) == 0
    assert exchange.ledger.get_active_bets_with_cashout("alice", MARKET) == [(bet_id, 0)]
    with pytest.raises(WindowClosed):
        exchange.pricing.early_exit(bet_id, "alice")


def test_exit_while_paused(exchange, bet_id):
    exchange.admin.pause()
    with pytest.raises(MarketClosed):
        exchange.pricing.early_exit(bet_id, "alice")
    assert exchange.ledger.get_active_bets_with_cashout("alice", MARKET) == [(bet_id, 0)]


def test_exit_with_empty_pool_changes_nothing(exchange, assets, bet_id):
    before = exchange.get_market(MARKET)
    assets.withdraw("drain", assets.pool_balance())
    with pytest.raises(InsufficientPoolBalance):
        exchange.pricing.early_exit(bet_id, "alice")
    assert exchange.get_market(MARKET) == before
    assert exchange.get_bet_details(bet_id).is_active


def test_valuation_lists_every_active_bet(exchange, market):
    first = exchange.pricing.place_bet("alice", MARKET, 0, 5 * TOKEN)
    second = exchange.pricing.place_bet("alice", MARKET, 1, 2 * TOKEN)
    exchange.pricing.place_bet("bob", MARKET, 0, 5 * TOKEN)
    values = dict(exchange.ledger.get_active_bets_with_cashout("alice", MARKET))
    assert set(values) == {first, second}
    assert all(v > 0 for v in values.values())
    assert exchange.ledger.get_active_bets_with_cashout("carol", MARKET) == []


def test_position_summary(exchange, bet_id):
    exchange.pricing.place_bet("alice", MARKET, 1, 2 * TOKEN)
    position = exchange.get_position(MARKET, "alice")
    assert position.stakes == [10 * TOKEN, 2 * TOKEN]
    assert position.locked_payouts[0] == 17657894736842105264
    assert [b for b, _ in position.cashout_values] == [bet_id, bet_id + 1]
    assert position.claimable == 0


@pytest.fixture
def tiny(exchange):
    """K = 4: alice 1 on Yes, then bob 3 on No leaves current [1, 4]."""
    exchange.admin.create_market("tiny", EVENT, ["Yes", "No"], settlement_deadline=DEADLINE)
    exchange.liquidity.add_liquidity("tiny", "lp", 4)
    alice = exchange.pricing.place_bet("alice", "tiny", 0, 1)
    exchange.pricing.place_bet("bob", "tiny", 1, 3)
    assert exchange.get_market("tiny").current_liquidity == [1, 4]
    return alice


def test_exit_that_drains_option_rejected(exchange, assets, tiny):
    assert exchange.get_bet_details(tiny).potential_payout == 2
    assert exchange.ledger.calculate_early_exit_value(tiny) == 0
    before = exchange.get_market("tiny")
    balance = assets.balance_of("alice")
    with pytest.raises(DivisionByZero):
        exchange.pricing.early_exit(tiny, "alice")
    assert exchange.get_market("tiny") == before
    assert exchange.get_bet_details(tiny).is_active
    assert assets.balance_of("alice") == balance


def test_simulation_rejects_zero_liquidity(exchange, tiny):
    bet = exchange.get_bet_details(tiny)
    with pytest.raises(DivisionByZero) as exc:
        simulate_cashout(bet, [2, 2], [1, 4], 10000, 300)
    assert exc.value.context["option_index"] == 0
