"""parsebench — Rank CSV parser implementations by how fast they really are."""

__version__ = "0.1.0"
