"""CloudWatch output writer.

Forwards every sample the host agent produces to CloudWatch as a
single-datum ``PutMetricData`` request.

Initialization runs once, from the host's ``post_construct`` call:
1. Validate the settings map
2. Set up instance-profile credentials
3. Discover the region from the instance identity document
4. Build a CloudWatch client bound to that region and those credentials

Any failure leaves the writer ``Disabled`` with a reason instead of raising
out of the host's lifecycle hook. Emits on a disabled writer raise
``WriterDisabledError`` without touching the network. Hosts that prefer to
refuse a broken writer call ``ensure_ready()`` right after
``post_construct``.

The state is written once during initialization and only read afterwards,
so concurrent emits need no locking provided initialization completes
before the first emit.
"""

import logging
from collections.abc import Mapping
from datetime import UTC, datetime

from pydantic import ValidationError

from cloudwatch_writer.aws.cloudwatch import CloudWatchClient, instance_profile_credentials
from cloudwatch_writer.aws.metadata import InstanceMetadataClient
from cloudwatch_writer.coercion import to_double
from cloudwatch_writer.config import WriterConfig
from cloudwatch_writer.errors import (
    CredentialsUnavailableError,
    InvalidRegionError,
    MetadataUnavailableError,
    WriterDisabledError,
)
from cloudwatch_writer.models import NOT_INITIALIZED, Disabled, MetricDatum, Ready, WriterState
from cloudwatch_writer.output_writer import AbstractOutputWriter

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(UTC)


class CloudWatchOutputWriter(AbstractOutputWriter):
    """Output writer that submits each sample to Amazon CloudWatch."""

    def __init__(self):
        super().__init__()
        self.config: WriterConfig | None = None
        self.state: WriterState = NOT_INITIALIZED

    @property
    def namespace(self) -> str | None:
        if self.config is not None:
            return self.config.namespace
        return self.settings.get("namespace")

    @property
    def region(self) -> str | None:
        if isinstance(self.state, Ready):
            return self.state.region
        return None

    def post_construct(self, settings: Mapping[str, str]) -> None:
        super().post_construct(settings)

        try:
            self.config = WriterConfig.from_settings(settings)
        except ValidationError as e:
            logger.error(f"Invalid CloudWatch output writer settings: {e}")
            self.state = Disabled(f"invalid settings: {e.error_count()} error(s)")
            return

        try:
            timeout, _ = self.config.metadata_timeouts
            credentials = instance_profile_credentials(
                timeout=timeout, attempts=self.config.metadata_attempts
            )
            region = InstanceMetadataClient.from_config(self.config).discover_region()
            client = CloudWatchClient(
                region=region,
                credential_provider=credentials,
                endpoint_url=self.config.endpoint_url,
            )
        except MetadataUnavailableError as e:
            logger.error("Could not connect to AWS Metadata service", exc_info=True)
            self.state = Disabled(f"metadata service unavailable: {e}")
            return
        except InvalidRegionError as e:
            logger.error(f"Could not bind CloudWatch client to region: {e}")
            self.state = Disabled(str(e))
            return
        except CredentialsUnavailableError as e:
            logger.error(f"Could not obtain instance profile credentials: {e}")
            self.state = Disabled(str(e))
            return

        self.state = Ready(client=client, region=region)
        logger.log(
            self.info_level,
            f"CloudWatchOutputWriter is configured with Region {region}, "
            f"namespace={self.config.namespace}",
        )

    def ensure_ready(self) -> Ready:
        """Return the ready state.

        Raises:
            WriterDisabledError: If initialization failed or has not run
        """
        state = self.state
        if isinstance(state, Disabled):
            raise WriterDisabledError(state.reason)
        return state

    def write_query_result(
        self,
        metric_name: str,
        metric_type: str | None,  # noqa: ARG002
        value: object,
    ) -> None:
        """Submit one sample as a single-datum PutMetricData request.

        Raises:
            WriterDisabledError: If the writer is not initialized
            UnconvertibleValueError: If ``value`` is not a supported number
            ClientError: If CloudWatch rejects the request
            BotoCoreError: If the request could not be sent
        """
        ready = self.ensure_ready()
        datum = MetricDatum(name=metric_name, value=to_double(value), timestamp=utc_now())
        ready.client.put_metric_datum(self.config.namespace, datum)

    def __str__(self) -> str:
        if isinstance(self.state, Ready):
            where = f"region={self.state.region}"
        else:
            where = f"disabled={self.state.reason}"
        return f"CloudWatchOutputWriter{{{where}, namespace='{self.namespace}'}}"
