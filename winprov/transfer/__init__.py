"""
Transfer Layer.

This package streams remote artifacts to local files.
"""

from .downloader import Downloader

__all__ = ["Downloader"]
