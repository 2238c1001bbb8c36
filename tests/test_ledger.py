"""Bet ledger records, status transitions and indexes."""

import pytest

from conftest import MARKET, TOKEN
from predpool.errors import BetNotFound, InvalidStatusTransition, UnauthorizedRecorder
from predpool.ledger import BetLedger
from predpool.models import Bet, BetStatus, can_transition


def _record(exchange, owner="alice", market_id=MARKET, option_index=0, amount=TOKEN):
    return exchange.ledger.record_bet(
        exchange.pricing, owner, market_id, option_index, amount, 2 * amount, 20000
    )


def test_only_pricing_engine_may_record(exchange):
    with pytest.raises(UnauthorizedRecorder) as exc:
        exchange.ledger.record_bet(object(), "alice", MARKET, 0, TOKEN, 2 * TOKEN, 20000)
    assert exc.value.context["caller"] == "object"
    assert exchange.ledger.bet_count == 0


def test_bet_ids_are_sequential(exchange):
    ids = [_record(exchange) for _ in range(3)]
    assert ids == [1, 2, 3]
    bet = exchange.ledger.get_bet(2)
    assert bet.status is BetStatus.ACTIVE
    assert bet.created_at == 500


def test_same_status_update_is_noop(exchange):
    bet_id = _record(exchange)
    exchange.ledger.update_bet_status(bet_id, BetStatus.ACTIVE)
    exchange.ledger.update_bet_status(bet_id, BetStatus.ACTIVE)
    assert exchange.ledger.get_user_active_bet_ids("alice", MARKET) == [bet_id]

    exchange.ledger.update_bet_status(bet_id, BetStatus.CASHED_OUT)
    exchange.ledger.update_bet_status(bet_id, BetStatus.CASHED_OUT)
    assert exchange.ledger.get_user_active_bet_ids("alice", MARKET) == []
    assert exchange.ledger.get_bet(bet_id).status is BetStatus.CASHED_OUT


def test_removal_swaps_with_last(exchange):
    a, b, c = (_record(exchange) for _ in range(3))
    other = _record(exchange, owner="bob")

    exchange.ledger.update_bet_status(a, BetStatus.CASHED_OUT)
    assert exchange.ledger.get_user_active_bet_ids("alice", MARKET) == [c, b]
    exchange.ledger.update_bet_status(c, BetStatus.REFUNDED)
    assert exchange.ledger.get_user_active_bet_ids("alice", MARKET) == [b]
    exchange.ledger.update_bet_status(b, BetStatus.SETTLED_LOST)
    assert exchange.ledger.get_user_active_bet_ids("alice", MARKET) == []

    assert exchange.ledger.get_user_active_bet_ids("bob", MARKET) == [other]
    # The all-bets index never shrinks
    assert exchange.ledger.get_market_bet_ids(MARKET) == [a, b, c, other]
    assert [x.bet_id for x in exchange.ledger.get_market_bets(MARKET, BetStatus.ACTIVE)] == [other]


def test_terminal_states_have_no_exits(exchange):
    bet_id = _record(exchange)
    exchange.ledger.update_bet_status(bet_id, BetStatus.SETTLED_LOST)
    with pytest.raises(InvalidStatusTransition) as exc:
        exchange.ledger.update_bet_status(bet_id, BetStatus.SETTLED_WON)
    assert exc.value.context == {"bet_id": bet_id, "current": "settled_lost", "new": "settled_won"}
    with pytest.raises(InvalidStatusTransition):
        exchange.ledger.update_bet_status(bet_id, BetStatus.ACTIVE)

    for status in BetStatus:
        if status is not BetStatus.ACTIVE:
            assert can_transition(BetStatus.ACTIVE, status)
            assert not any(can_transition(status, s) for s in BetStatus)


def test_unknown_bet(exchange):
    with pytest.raises(BetNotFound):
        exchange.ledger.get_bet(7)
    with pytest.raises(BetNotFound):
        exchange.ledger.update_bet_status(7, BetStatus.CASHED_OUT)


def test_active_stake_per_option(exchange):
    _record(exchange, option_index=0, amount=3 * TOKEN)
    _record(exchange, option_index=0, amount=2 * TOKEN)
    done = _record(exchange, option_index=0, amount=TOKEN)
    _record(exchange, option_index=1, amount=4 * TOKEN)
    exchange.ledger.update_bet_status(done, BetStatus.CASHED_OUT)
    assert exchange.ledger.active_stake("alice", MARKET, 0) == 5 * TOKEN
    assert exchange.ledger.active_stake("alice", MARKET, 1) == 4 * TOKEN
    assert exchange.ledger.active_stake("bob", MARKET, 0) == 0


def test_load_rebuilds_indexes(exchange, params):
    bets = [
        Bet(bet_id=3, owner="alice", market_id=MARKET, option_index=0, amount=TOKEN,
            potential_payout=2 * TOKEN, locked_odds=20000, created_at=1),
        Bet(bet_id=1, owner="alice", market_id=MARKET, option_index=1, amount=TOKEN,
            potential_payout=2 * TOKEN, locked_odds=20000, created_at=1, status=BetStatus.CASHED_OUT),
        Bet(bet_id=2, owner="bob", market_id=MARKET, option_index=0, amount=TOKEN,
            potential_payout=2 * TOKEN, locked_odds=20000, created_at=1),
    ]
    ledger = BetLedger(exchange.store, params)
    ledger.load(bets)
    assert ledger.bet_count == 3
    assert ledger.get_market_bet_ids(MARKET) == [1, 2, 3]
    assert ledger.get_user_active_bet_ids("alice", MARKET) == [3]
    assert ledger.get_user_active_bet_ids("bob", MARKET) == [2]

    recorder = object()
    ledger.set_recorder(recorder)
    assert ledger.record_bet(recorder, "carol", MARKET, 0, TOKEN, 2 * TOKEN, 20000) == 4
