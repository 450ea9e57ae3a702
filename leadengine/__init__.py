"""Lead scoring and multi-channel analytics engine."""

__version__ = "1.0.0"
