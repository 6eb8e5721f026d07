"""DEG-Embed: embedding-based comparison of DEGs against biological functions."""

__version__ = "0.1.0"
