"""Store catalog editor core."""

__version__ = "0.1.0"
