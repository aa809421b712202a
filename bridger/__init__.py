"""Cross-chain swap and bridge cycle automation."""

__version__ = "0.1.0"
