"""Bitcoin SV encoding, Merkle proof helpers, and metrics utilities."""

__version__ = "0.3.0"

__all__ = ["bitcoin", "merkle", "metrics"]