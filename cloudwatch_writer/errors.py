"""Exceptions raised by the CloudWatch output writer."""


class CloudWatchWriterError(Exception):
    """Base class for all writer failures."""


class MetadataUnavailableError(CloudWatchWriterError):
    """The EC2 instance metadata service could not be reached or read."""


class InvalidRegionError(CloudWatchWriterError):
    """The discovered region is not a canonical AWS region code."""

    def __init__(self, region: str):
        self.region = region
        super().__init__(f"Unknown AWS region: {region!r}")


class CredentialsUnavailableError(CloudWatchWriterError):
    """The instance profile did not yield any credentials."""


class UnconvertibleValueError(CloudWatchWriterError, ValueError):
    """A sample value cannot be expressed as a CloudWatch datum value."""

    def __init__(self, value: object, message: str):
        self.value = value
        super().__init__(message)


class WriterDisabledError(CloudWatchWriterError):
    """Emit was called on a writer whose initialization failed."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"CloudWatch output writer is disabled: {reason}")
