"""
Artifactory API Layer.

This package resolves credentials and handles all communication with the
artifact repository.
"""

from .client import ArtifactoryClient, build_url
from .credentials import resolve_fetch_config
from .secret_store import ParameterStore, SecretStore

__all__ = [
    "ArtifactoryClient",
    "ParameterStore",
    "SecretStore",
    "build_url",
    "resolve_fetch_config",
]
