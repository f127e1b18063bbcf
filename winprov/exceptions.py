"""
Defines custom exceptions for the application to allow for more specific error handling.
"""

from enum import Enum


class WinprovError(Exception):
    """Base exception for all application-specific errors."""


class ConfigurationError(WinprovError):
    """Raised for issues related to settings file loading or validation."""


class SecretStoreError(WinprovError):
    """Raised when a value cannot be read from the managed secret store."""


class FetchError(WinprovError):
    """Base class for every way an artifact fetch can fail."""


class MissingConfigurationError(FetchError):
    """Raised when the resolved API key or host is empty. No request is sent."""


class InsecureEndpointError(FetchError):
    """Raised when the host is not an https:// URL. No request is sent."""


class TransportError(FetchError):
    """Raised on DNS, TLS, connection or timeout failures."""


class RejectionKind(str, Enum):
    AUTHENTICATION = "authentication"
    NOT_FOUND = "not_found"
    SERVER_ERROR = "server_error"
    UNEXPECTED = "unexpected"


class RemoteRejectedError(FetchError):
    """Raised when the repository answers with a non-success status."""

    def __init__(self, status: int, url: str = ""):
        self.status = status
        self.url = url
        self.kind = self.classify(status)
        super().__init__(f"Repository rejected the request with HTTP {status} ({self.kind.value}).")

    @staticmethod
    def classify(status: int) -> RejectionKind:
        if status in (401, 403):
            return RejectionKind.AUTHENTICATION
        if status == 404:
            return RejectionKind.NOT_FOUND
        if 500 <= status <= 599:
            return RejectionKind.SERVER_ERROR
        return RejectionKind.UNEXPECTED


class LocalWriteError(FetchError):
    """Raised when the download target cannot be written."""


class ChecksumMismatchError(FetchError):
    """Raised when the received body does not match the advertised SHA-256."""


class AgentConfigError(WinprovError):
    """Raised when the monitoring agent configuration cannot be installed."""


class ServiceRestartError(WinprovError):
    """Raised when a system service fails to restart."""


class MetadataError(WinprovError):
    """Raised when the instance metadata endpoint cannot answer a query."""


class DatabaseUnreachableError(WinprovError):
    """
    Raised when the database server cannot be reached, so that a connection
    failure is never mistaken for a database that does not exist.
    """
