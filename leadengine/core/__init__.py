"""Core configuration, errors and logging for the lead engine."""
