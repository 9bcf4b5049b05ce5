"""Container entrypoint for a Hytale dedicated server."""

__version__ = "1.0.0"
