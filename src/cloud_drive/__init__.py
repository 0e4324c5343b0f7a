"""Client-side view over a remote hierarchical file store."""

__version__ = "0.1.0"
