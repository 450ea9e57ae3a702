"""Domain services: identity, classification, replies, scoring, ledger, analytics."""
