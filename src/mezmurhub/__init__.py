"""MezmurHub admin: song and category catalog management."""

__version__ = "0.1.0"
