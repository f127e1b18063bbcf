"""
Pydantic models for fetch credentials and tool settings.
Provides robust validation for all settings.
"""

from enum import Enum
from urllib.parse import urlsplit

from pydantic import BaseModel, SecretStr, field_validator

from winprov.exceptions import InsecureEndpointError, MissingConfigurationError

DEFAULT_AGENT_CONFIG_PATH = (
    "C:\\Program Files\\Amazon\\SSM\\Plugins\\awsCloudWatch\\"
    "AWS.EC2.Windows.CloudWatch.json"
)


class ResolutionMode(str, Enum):
    """Where the API key and host come from when no environment override is set."""

    DIRECT = "direct"
    SECRET_STORE = "secret_store"


class FetchConfig(BaseModel):
    """The resolved API key and base host URL for one fetch."""

    api_key: SecretStr = SecretStr("")
    host: str = ""

    class Config:
        """Pydantic model configuration."""

        frozen = True

    def ensure_complete(self) -> None:
        """
        Checks the values before any request is built. They are used verbatim;
        whitespace-only counts as empty but is never trimmed.

        Raises:
            MissingConfigurationError: The API key or host is empty.
            InsecureEndpointError: The host is not an https:// URL, which would
                send the API key in cleartext.
        """
        missing = []
        if not self.api_key.get_secret_value().strip():
            missing.append("API key")
        if not self.host.strip():
            missing.append("host")
        if missing:
            raise MissingConfigurationError(
                f"Artifactory {' and '.join(missing)} resolved to an empty value."
            )
        if urlsplit(self.host).scheme.lower() != "https":
            raise InsecureEndpointError(
                f"Refusing to send the API key to non-https host '{self.host}'."
            )


class ToolSettings(BaseModel):
    """A validated settings model for the application."""

    # Artifact fetching
    timeout: float | None = None
    max_attempts: int = 1
    retry_delay: float = 1.5
    chunk_size: int = 262144  # 256 KB
    verify_checksum: bool = True
    ca_bundle: str = ""  # extra trusted CA certificates (PEM)

    # Secret store
    api_key_parameter: str = "artifactory-api-key"
    host_parameter: str = "artifactory-host"
    aws_region: str = ""

    # Instance metadata
    metadata_url: str = "http://169.254.169.254"

    # Monitoring agent
    agent_config_path: str = DEFAULT_AGENT_CONFIG_PATH
    agent_service_name: str = "AmazonSSMAgent"

    class Config:
        """Pydantic model configuration."""

        validate_assignment = True
        str_strip_whitespace = True

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: float | None) -> float | None:
        """A zero or negative timeout means 'use the client default'."""
        if v is not None and v <= 0:
            return None
        return v

    @field_validator("max_attempts")
    @classmethod
    def validate_attempts(cls, v: int) -> int:
        if v < 1 or v > 10:
            raise ValueError("max_attempts must be between 1 and 10.")
        return v

    @field_validator("chunk_size")
    @classmethod
    def validate_chunk_size(cls, v: int) -> int:
        if v < 1024:
            raise ValueError("chunk_size must be at least 1024 bytes.")
        return v

    @field_validator("metadata_url")
    @classmethod
    def validate_metadata_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("metadata_url must be an http(s) URL.")
        return v.rstrip("/")

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        return set(cls.model_fields)
