"""Pin lifecycle and map-synchronisation engine."""

__version__ = "0.1.0"
