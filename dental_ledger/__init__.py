"""Patient billing reconciliation service."""
