"""CloudWatch client bound to the instance's region and instance-profile credentials."""

import logging

import boto3
import botocore.session
from botocore.credentials import (
    CredentialProvider,
    CredentialResolver,
    InstanceMetadataFetcher,
    InstanceMetadataProvider,
)
from botocore.exceptions import BotoCoreError, ClientError

from cloudwatch_writer.errors import CredentialsUnavailableError, InvalidRegionError
from cloudwatch_writer.models import MetricDatum

logger = logging.getLogger(__name__)

SERVICE_NAME = "cloudwatch"


def instance_profile_credentials(timeout: float, attempts: int = 1) -> CredentialProvider:
    """Credential provider that reads the instance role from the metadata service.

    Args:
        timeout: Timeout in seconds for each metadata request
        attempts: Attempts per credential fetch
    """
    fetcher = InstanceMetadataFetcher(timeout=timeout, num_attempts=attempts)
    return InstanceMetadataProvider(iam_role_fetcher=fetcher)


def canonical_regions(session: botocore.session.Session) -> set[str]:
    """All region codes CloudWatch is offered in, across every AWS partition."""
    regions: set[str] = set()
    for partition in session.get_available_partitions():
        regions.update(session.get_available_regions(SERVICE_NAME, partition_name=partition))
    return regions


class CloudWatchClient:
    """Submits single-datum PutMetricData requests.

    The underlying boto3 client is thread-safe and shared by every emit call.
    """

    def __init__(
        self,
        region: str,
        credential_provider: CredentialProvider,
        endpoint_url: str | None = None,
    ):
        """Validate the region, load credentials and build the boto3 client.

        Args:
            region: Short region code the client is bound to
            credential_provider: Sole source of credentials for the client
            endpoint_url: Optional endpoint override (LocalStack)

        Raises:
            InvalidRegionError: If ``region`` is not a canonical region code
            CredentialsUnavailableError: If the provider yields no credentials
        """
        botocore_session = botocore.session.get_session()
        if region not in canonical_regions(botocore_session):
            raise InvalidRegionError(region)

        botocore_session.register_component(
            "credential_provider", CredentialResolver(providers=[credential_provider])
        )
        if botocore_session.get_credentials() is None:
            msg = "No credentials available from the instance profile"
            raise CredentialsUnavailableError(msg)

        self.region = region
        session = boto3.Session(botocore_session=botocore_session, region_name=region)
        client_kwargs: dict = {}
        if endpoint_url:
            client_kwargs["endpoint_url"] = endpoint_url
        self.cloudwatch = session.client(SERVICE_NAME, **client_kwargs)

    def put_metric_datum(self, namespace: str, datum: MetricDatum) -> None:
        """Submit one datum under ``namespace``.

        Raises:
            ClientError: If CloudWatch rejects the request
            BotoCoreError: If the request could not be sent
        """
        try:
            self.cloudwatch.put_metric_data(Namespace=namespace, MetricData=[datum.to_api()])
        except (ClientError, BotoCoreError) as e:
            logger.error(f"CloudWatch put_metric_data failed for {datum.name}: {e}")
            raise
