"""predpool command line: read-only ledger inspection."""
