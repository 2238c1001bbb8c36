"""Shared fixtures: fixed clock, in-memory oracle and asset ledger, seeded exchange."""

import tempfile
from pathlib import Path

import pytest

from predpool.exchange import Exchange
from predpool.external.assets import InMemoryAssetLedger
from predpool.external.oracle import StaticOracle
from predpool.models import ProtocolParameters
from predpool.storage.db import get_connection, init_schema

TOKEN = 10**18
EVENT = "evt-1"
MARKET = "m1"
WINDOW = (100, 1000)
DEADLINE = 2000


class FakeClock:
    def __init__(self, now: int = 500) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def oracle():
    o = StaticOracle()
    o.set_window(EVENT, *WINDOW)
    return o


@pytest.fixture
def assets():
    a = InMemoryAssetLedger()
    for account in ("alice", "bob", "carol", "lp"):
        a.mint(account, 1000 * TOKEN)
    a.fund_pool(1000 * TOKEN)
    return a


@pytest.fixture
def params():
    return ProtocolParameters(precision=10000, platform_fee=300, early_exit_fee=300, max_fee=1000)


@pytest.fixture
def exchange(oracle, assets, params, clock):
    return Exchange(oracle, assets, params, clock=clock)


@pytest.fixture
def market(exchange):
    """Binary market seeded with 75 tokens (37.5 per option)."""
    exchange.admin.create_market(MARKET, EVENT, ["Yes", "No"], settlement_deadline=DEADLINE)
    exchange.liquidity.add_liquidity(MARKET, "lp", 75 * TOKEN)
    return exchange.get_market(MARKET)


@pytest.fixture
def temp_db():
    tmp = tempfile.mkdtemp()
    path = Path(tmp) / "test.duckdb"
    conn = get_connection(path)
    init_schema(conn)
    yield conn
    conn.close()
    path.unlink(missing_ok=True)
    Path(tmp).rmdir()
