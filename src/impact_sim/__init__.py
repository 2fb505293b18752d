"""Solar-system viewer with an asteroid impact indicator panel."""

__version__ = "1.0.0"
