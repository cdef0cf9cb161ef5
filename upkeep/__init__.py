"""upkeep — run every maintenance tool on the machine in one pass."""

__version__ = "0.1.0"
