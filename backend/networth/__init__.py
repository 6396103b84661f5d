"""Net worth engine: valuation services over the ledger core."""
