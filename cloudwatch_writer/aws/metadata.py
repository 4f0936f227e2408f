"""EC2 instance metadata access for region discovery.

The writer learns its region from the instance identity document served
at the link-local metadata endpoint. The document is JSON, but only the
``region`` line is needed, so it is scanned line by line rather than parsed.

IMDSv2 is tried first: a session token is requested with a PUT and sent
with the document GET. Instances that answer the PUT with 403, 404 or 405
only speak IMDSv1, and the GET is made without a token.
"""

import logging
from collections.abc import Iterable

import requests

from cloudwatch_writer.config import METADATA_TOKEN_URL, METADATA_URL, WriterConfig
from cloudwatch_writer.errors import MetadataUnavailableError

logger = logging.getLogger(__name__)

REGION_KEY = "region"
ENCODING = "utf-8"

TOKEN_TTL_HEADER = "X-aws-ec2-metadata-token-ttl-seconds"
TOKEN_HEADER = "X-aws-ec2-metadata-token"
IMDSV1_FALLBACK_STATUSES = frozenset({403, 404, 405})


def parse_region(lines: Iterable[str]) -> str:
    """Extract the region code from identity document lines.

    For each line containing ``region``, the field between the first and
    second ``:`` is taken with double quotes and commas removed, and its
    first word is the region. This handles both the pretty-printed document
    and compact single-line JSON. The first matching line wins.

    Args:
        lines: Decoded lines of the identity document

    Returns:
        The region code, or an empty string if no line names one
    """
    for line in lines:
        if REGION_KEY not in line:
            continue
        fields = line.split(":")
        if len(fields) < 2:
            continue
        words = fields[1].replace('"', " ").replace(",", " ").split()
        return words[0] if words else ""
    return ""


class InstanceMetadataClient:
    """Reads the instance identity document from the EC2 metadata service."""

    def __init__(
        self,
        timeout: float,
        read_timeout: float,
        attempts: int = 1,
        token_ttl: int = 21600,
        document_url: str = METADATA_URL,
        token_url: str = METADATA_TOKEN_URL,
    ):
        """Initialize the metadata client.

        Args:
            timeout: Connect timeout in seconds
            read_timeout: Read timeout in seconds
            attempts: Attempts at the document GET before giving up
            token_ttl: Requested IMDSv2 token lifetime in seconds
            document_url: Identity document URL
            token_url: IMDSv2 token URL
        """
        self.timeouts = (timeout, read_timeout)
        self.attempts = attempts
        self.token_ttl = token_ttl
        self.document_url = document_url
        self.token_url = token_url

        self.session = requests.Session()
        # Proxies configured for outbound traffic must not capture the link-local endpoint
        self.session.trust_env = False

    @classmethod
    def from_config(cls, config: WriterConfig) -> "InstanceMetadataClient":
        timeout, read_timeout = config.metadata_timeouts
        return cls(
            timeout=timeout,
            read_timeout=read_timeout,
            attempts=config.metadata_attempts,
            token_ttl=config.metadata_token_ttl,
        )

    def discover_region(self) -> str:
        """Return the short region code of this instance (e.g. ``us-east-1``).

        Returns an empty string if the document has no region line; the
        caller's region validation rejects that.

        Raises:
            MetadataUnavailableError: If every attempt failed
        """
        last_error: MetadataUnavailableError | None = None
        for attempt in range(1, self.attempts + 1):
            try:
                return self._fetch_region()
            except MetadataUnavailableError as e:
                last_error = e
                logger.warning(
                    f"Metadata request failed (attempt {attempt}/{self.attempts}): {e}"
                )
        raise last_error

    def _fetch_region(self) -> str:
        headers = {}
        token = self._fetch_token()
        if token:
            headers[TOKEN_HEADER] = token

        try:
            with self.session.get(
                self.document_url, headers=headers, timeout=self.timeouts, stream=True
            ) as response:
                response.raise_for_status()
                response.encoding = ENCODING
                # Body is read to completion before release
                lines = list(response.iter_lines(decode_unicode=True))
            return parse_region(lines)
        except requests.RequestException as e:
            msg = f"Could not read instance identity document from {self.document_url}: {e}"
            raise MetadataUnavailableError(msg) from e

    def _fetch_token(self) -> str | None:
        """Request an IMDSv2 session token, or None if the instance only speaks IMDSv1."""
        try:
            response = self.session.put(
                self.token_url,
                headers={TOKEN_TTL_HEADER: str(self.token_ttl)},
                timeout=self.timeouts,
            )
        except requests.RequestException as e:
            msg = f"Could not request metadata token from {self.token_url}: {e}"
            raise MetadataUnavailableError(msg) from e

        with response:
            if response.status_code in IMDSV1_FALLBACK_STATUSES:
                logger.debug(
                    f"Metadata token request returned {response.status_code}, using IMDSv1"
                )
                return None
            try:
                response.raise_for_status()
            except requests.HTTPError as e:
                msg = f"Metadata token request failed: {e}"
                raise MetadataUnavailableError(msg) from e
            return response.text.strip() or None
