"""Client driver for TrGEN trigger generator devices."""

__version__ = "0.1.0"
