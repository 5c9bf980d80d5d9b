"""HSD Chat backend: chat history and per-user chat index."""

__version__ = "0.1.0"
