"""Settings for the local smoke-test script.

Defaults are read from scripts/.env (no prefix) and can be overridden on
the command line.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_SCRIPT_DIR = Path(__file__).parent


class ScriptSettings(BaseSettings):
    """Defaults for scripts/emit_metric.py."""

    model_config = SettingsConfigDict(
        env_file=str(_SCRIPT_DIR / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    namespace: str = Field(default="smoke-test/cloudwatch-writer", description="Target namespace")
    endpoint_url: str | None = Field(
        default=None, description="CloudWatch endpoint override (e.g. http://localhost:4566)"
    )
    metadata_timeout: int = Field(default=500, ge=1, description="Metadata connect timeout (ms)")
    metadata_attempts: int = Field(default=1, ge=1, le=5, description="Metadata GET attempts")

    def writer_settings(self) -> dict[str, str]:
        """Render as the string map a host agent would pass to post_construct."""
        settings = {
            "namespace": self.namespace,
            "metadata-timeout": str(self.metadata_timeout),
            "metadata-attempts": str(self.metadata_attempts),
        }
        if self.endpoint_url:
            settings["endpoint-url"] = self.endpoint_url
        return settings
