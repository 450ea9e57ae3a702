"""Small deterministic helpers shared by services."""
