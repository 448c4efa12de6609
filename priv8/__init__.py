"""priv8 - share a secret that can be read exactly once."""

__version__ = "0.9.0"
