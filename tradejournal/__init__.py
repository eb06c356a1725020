"""Trading journal: trade storage, dashboard metrics and edge analytics."""

__version__ = "1.0.0"
