"""Unit tests for the CloudWatch client wrapper."""

import logging
from datetime import UTC, datetime
from unittest.mock import MagicMock, patch

import botocore.session
import pytest
from botocore.credentials import CredentialProvider, Credentials, InstanceMetadataProvider
from botocore.exceptions import ClientError
from botocore.stub import Stubber

from cloudwatch_writer.aws.cloudwatch import (
    CloudWatchClient,
    canonical_regions,
    instance_profile_credentials,
)
from cloudwatch_writer.errors import CredentialsUnavailableError, InvalidRegionError
from cloudwatch_writer.models import MetricDatum

OBSERVED_AT = datetime(2025, 10, 15, 14, 30, 0, tzinfo=UTC)


@pytest.fixture
def static_credentials():
    """Credential provider that never touches the metadata service."""
    provider = MagicMock(spec=CredentialProvider)
    provider.load.return_value = Credentials("AKIDEXAMPLE", "wJalrXUtnFEMI/K7MDENG")
    return provider


@pytest.fixture
def client(static_credentials):
    return CloudWatchClient(region="us-east-1", credential_provider=static_credentials)


class TestClientConstruction:
    """Tests for region and credential validation."""

    def test_binds_client_to_region(self, client):
        assert client.region == "us-east-1"
        assert client.cloudwatch.meta.region_name == "us-east-1"

    def test_uses_supplied_credentials(self, client, static_credentials):
        static_credentials.load.assert_called_once()

    @pytest.mark.parametrize("region", ["", "mars-north-1", "US-EAST-1"])
    def test_rejects_unknown_region(self, static_credentials, region):
        """Empty and non-canonical region codes fail at region binding."""
        with pytest.raises(InvalidRegionError) as exc_info:
            CloudWatchClient(region=region, credential_provider=static_credentials)

        assert exc_info.value.region == region
        static_credentials.load.assert_not_called()

    def test_accepts_regions_outside_the_commercial_partition(self, static_credentials):
        client = CloudWatchClient(region="us-gov-west-1", credential_provider=static_credentials)

        assert client.cloudwatch.meta.region_name == "us-gov-west-1"

    def test_missing_credentials_rejected(self, static_credentials):
        static_credentials.load.return_value = None

        with pytest.raises(CredentialsUnavailableError):
            CloudWatchClient(region="us-east-1", credential_provider=static_credentials)

    def test_endpoint_override(self, static_credentials):
        client = CloudWatchClient(
            region="us-east-1",
            credential_provider=static_credentials,
            endpoint_url="http://localhost:4566",
        )

        assert client.cloudwatch.meta.endpoint_url == "http://localhost:4566"


class TestPutMetricDatum:
    """Tests for put_metric_datum."""

    def test_sends_single_datum(self, client):
        """Exactly one datum with name, value and timestamp; nothing else."""
        datum = MetricDatum(name="heap.used", value=1234567890.0, timestamp=OBSERVED_AT)

        with Stubber(client.cloudwatch) as stubber:
            stubber.add_response(
                "put_metric_data",
                {},
                {
                    "Namespace": "my/app",
                    "MetricData": [
                        {
                            "MetricName": "heap.used",
                            "Value": 1234567890.0,
                            "Timestamp": OBSERVED_AT,
                        }
                    ],
                },
            )
            client.put_metric_datum("my/app", datum)
            stubber.assert_no_pending_responses()

    def test_client_error_propagates(self, client, caplog):
        """API errors are logged and re-raised unchanged."""
        datum = MetricDatum(name="heap.used", value=1.0, timestamp=OBSERVED_AT)

        with Stubber(client.cloudwatch) as stubber:
            stubber.add_client_error(
                "put_metric_data",
                service_error_code="Throttling",
                service_message="Rate exceeded",
                http_status_code=400,
            )
            with caplog.at_level(logging.ERROR, logger="cloudwatch_writer.aws.cloudwatch"):
                with pytest.raises(ClientError) as exc_info:
                    client.put_metric_datum("my/app", datum)

        assert exc_info.value.response["Error"]["Code"] == "Throttling"
        assert "heap.used" in caplog.records[0].getMessage()


class TestCredentialsAndRegions:
    """Tests for the module-level helpers."""

    @patch("cloudwatch_writer.aws.cloudwatch.InstanceMetadataFetcher")
    def test_instance_profile_credentials(self, mock_fetcher_class):
        provider = instance_profile_credentials(timeout=0.5, attempts=2)

        mock_fetcher_class.assert_called_once_with(timeout=0.5, num_attempts=2)
        assert isinstance(provider, InstanceMetadataProvider)

    def test_canonical_regions(self):
        regions = canonical_regions(botocore.session.get_session())

        assert {"us-east-1", "eu-west-1", "ap-southeast-2"} <= regions
        assert "" not in regions
