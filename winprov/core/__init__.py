"""
Core operations.

`fetch_artifact` is the high-level entry point: it resolves credentials and
delegates the transfer to `fetch`.
"""

from .fetch import fetch, fetch_artifact

__all__ = ["fetch", "fetch_artifact"]
