"""
Data Models Layer.

This package contains Pydantic models and records that define the core data
structures used throughout the application, such as settings and fetch results.
"""

from .config import FetchConfig, ResolutionMode, ToolSettings
from .result import FetchResult

__all__ = ["FetchConfig", "FetchResult", "ResolutionMode", "ToolSettings"]
