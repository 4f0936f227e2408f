"""Datum and writer state models."""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from cloudwatch_writer.aws.cloudwatch import CloudWatchClient


class MetricDatum(BaseModel):
    """One CloudWatch datum: a name, a value and the instant it was observed.

    No dimensions, unit or statistic set are carried.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="CloudWatch metric name")
    value: float = Field(..., description="Sample value")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def to_api(self) -> dict:
        """Render as a ``MetricData`` entry for ``put_metric_data``."""
        return {
            "MetricName": self.name,
            "Value": self.value,
            "Timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class Ready:
    """Initialization succeeded; the client is bound to ``region``."""

    client: "CloudWatchClient"
    region: str


@dataclass(frozen=True)
class Disabled:
    """Initialization failed or has not run; emits are refused."""

    reason: str


WriterState = Ready | Disabled

NOT_INITIALIZED = Disabled("post_construct has not been called")
