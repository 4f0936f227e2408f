"""Logging utilities for running the writer outside a host agent.

Inside a host agent the host owns logging configuration. The smoke-test
script uses these helpers to get structured output locally and to show
which network routes the writer's two endpoints take.
"""

import json
import logging
import logging.config
from pathlib import Path

from requests.utils import get_environ_proxies, urldefragauth

from cloudwatch_writer.config import METADATA_BASE_URL

logger = logging.getLogger(__name__)

DEFAULT_LOGGING_CONFIG = Path(__file__).parent.parent.parent / "logging.json"
PACKAGE_LOGGER = "cloudwatch_writer"


def configure_logging(config_path: Path | None = None, level: str | None = None) -> None:
    """Configure logging from a JSON ``dictConfig`` file.

    Args:
        config_path: Logging config file (default: logging.json at the project root)
        level: Optional level name applied to the writer's own loggers
    """
    config_path = config_path or DEFAULT_LOGGING_CONFIG

    if config_path.exists():
        with open(config_path) as f:
            logging.config.dictConfig(json.load(f))
    else:
        logging.basicConfig(
            level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
        )

    if level:
        logging.getLogger(PACKAGE_LOGGER).setLevel(level.strip().upper())


def proxy_for(url: str) -> str | None:
    """Return the proxy the environment routes ``url`` through, without credentials."""
    proxies = get_environ_proxies(url)
    scheme = url.split("://", 1)[0].lower()
    proxy = proxies.get(scheme) or proxies.get("all")
    return urldefragauth(proxy) if proxy else None


def log_network_routes(cloudwatch_endpoint: str) -> None:
    """Log how the CloudWatch and metadata endpoints will be reached.

    The CloudWatch client honours proxy environment variables. The metadata
    client never does.
    """
    proxy = proxy_for(cloudwatch_endpoint)
    if proxy:
        logger.info(f"CloudWatch endpoint {cloudwatch_endpoint} is reached via proxy {proxy}")
    else:
        logger.info(f"CloudWatch endpoint {cloudwatch_endpoint} is reached directly")
    logger.info(f"Instance metadata at {METADATA_BASE_URL} is reached directly")
