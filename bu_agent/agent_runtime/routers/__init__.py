"""Read-only HTTP routers over the ledger."""
