"""Configuration for the CloudWatch output writer.

The host agent hands the writer a flat ``map<string, string>`` of settings.
This module validates that map into an immutable ``WriterConfig``. Values
arrive as strings and are coerced by pydantic.

Recognised keys:
- namespace: CloudWatch namespace for every datum (required)
- metadata-timeout: connect timeout for the metadata endpoint, ms (default: 500)
- metadata-read-timeout: read timeout for the metadata endpoint, ms (default: 1000)
- metadata-attempts: attempts at the metadata GET before giving up (default: 1)
- metadata-token-ttl: IMDSv2 session token lifetime, seconds (default: 21600)
- endpoint-url: CloudWatch endpoint override, e.g. LocalStack (default: none)

Unknown keys are ignored so the host can pass its own settings through.
"""

from collections.abc import Mapping

from pydantic import (
    AnyHttpUrl,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
)

METADATA_BASE_URL = "http://169.254.169.254"
METADATA_URL = f"{METADATA_BASE_URL}/latest/dynamic/instance-identity/document"
METADATA_TOKEN_URL = f"{METADATA_BASE_URL}/latest/api/token"

DEFAULT_METADATA_TIMEOUT_MS = 500
DEFAULT_METADATA_READ_TIMEOUT_MS = 1000
MAX_METADATA_TOKEN_TTL_SECONDS = 21600

# Prefix reserved by AWS for its own service metrics
RESERVED_NAMESPACE_PREFIX = "AWS/"
MAX_NAMESPACE_LENGTH = 255

_HTTP_URL = TypeAdapter(AnyHttpUrl)


class WriterConfig(BaseModel):
    """Validated writer settings.

    Attributes:
        namespace: CloudWatch namespace every datum is submitted under
        metadata_timeout: Connect timeout for the metadata endpoint (milliseconds)
        metadata_read_timeout: Read timeout for the metadata endpoint (milliseconds)
        metadata_attempts: Number of attempts at the metadata document GET
        metadata_token_ttl: Requested IMDSv2 token lifetime (seconds)
        endpoint_url: Optional CloudWatch endpoint override
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    namespace: str = Field(..., description="CloudWatch namespace for submitted data")
    metadata_timeout: int = Field(
        default=DEFAULT_METADATA_TIMEOUT_MS,
        ge=1,
        alias="metadata-timeout",
        description="Metadata endpoint connect timeout (ms)",
    )
    metadata_read_timeout: int = Field(
        default=DEFAULT_METADATA_READ_TIMEOUT_MS,
        ge=1,
        alias="metadata-read-timeout",
        description="Metadata endpoint read timeout (ms)",
    )
    metadata_attempts: int = Field(
        default=1,
        ge=1,
        le=5,
        alias="metadata-attempts",
        description="Attempts at the metadata document GET",
    )
    metadata_token_ttl: int = Field(
        default=MAX_METADATA_TOKEN_TTL_SECONDS,
        ge=1,
        le=MAX_METADATA_TOKEN_TTL_SECONDS,
        alias="metadata-token-ttl",
        description="IMDSv2 session token TTL (s)",
    )
    endpoint_url: str | None = Field(
        default=None, alias="endpoint-url", description="Override CloudWatch endpoint"
    )

    @field_validator("namespace")
    @classmethod
    def namespace_must_be_valid(cls, v: str) -> str:
        if not v or not v.strip():
            msg = "namespace cannot be empty"
            raise ValueError(msg)
        if len(v) > MAX_NAMESPACE_LENGTH:
            msg = f"namespace cannot exceed {MAX_NAMESPACE_LENGTH} characters"
            raise ValueError(msg)
        if v.startswith(RESERVED_NAMESPACE_PREFIX):
            msg = f"namespace cannot start with reserved prefix {RESERVED_NAMESPACE_PREFIX!r}"
            raise ValueError(msg)
        return v

    @field_validator("endpoint_url")
    @classmethod
    def endpoint_must_be_http_url(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        try:
            _HTTP_URL.validate_python(v)
        except ValidationError as e:
            msg = f"endpoint-url must be an http(s) URL: {e.errors()[0]['msg']}"
            raise ValueError(msg) from e
        return v

    @property
    def metadata_timeouts(self) -> tuple[float, float]:
        """(connect, read) timeouts in seconds, as ``requests`` expects them."""
        return self.metadata_timeout / 1000, self.metadata_read_timeout / 1000

    @classmethod
    def from_settings(cls, settings: Mapping[str, str | None]) -> "WriterConfig":
        """Build a config from the host's settings map.

        Keys whose value is None are treated as absent.

        Raises:
            pydantic.ValidationError: If a required key is missing or a value is invalid
        """
        return cls.model_validate({k: v for k, v in settings.items() if v is not None})
