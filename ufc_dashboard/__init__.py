"""Client-side data layer for the Universal Fashion Center dashboard."""

__version__ = "1.0.0"
