"""HTTP API for SplitSheet."""

from .app import create_app

__all__ = ["create_app"]
