"""External collaborators: oracle and settlement-asset ledger."""

from predpool.external.assets import AssetLedger, InMemoryAssetLedger
from predpool.external.oracle import Oracle, StaticOracle, window_is_open

__all__ = ["AssetLedger", "InMemoryAssetLedger", "Oracle", "StaticOracle", "window_is_open"]
