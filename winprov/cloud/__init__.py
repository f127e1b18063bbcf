"""
Cloud Metadata Layer.
"""

from .metadata import MetadataClient, get_region, get_stack_name

__all__ = ["MetadataClient", "get_region", "get_stack_name"]
