"""Payment ledger reconciliation engine."""
