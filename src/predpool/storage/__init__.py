"""DuckDB persistence for markets, bets and the notification log."""
