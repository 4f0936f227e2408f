#!/usr/bin/env python

"""Emit a single sample through the CloudWatch output writer.

This script is for LOCAL DEVELOPMENT ONLY. It plays the part of the host
agent: it builds the settings map, calls post_construct, and writes one
query result. It must run on an EC2 instance (or somewhere the metadata
endpoint is reachable) with an instance role allowed to call
cloudwatch:PutMetricData.

Usage:
    python scripts/emit_metric.py heap.used 1234567890
    python scripts/emit_metric.py cpu.load 0.87 --namespace my/app
    python scripts/emit_metric.py --help
"""

import logging

import typer
from botocore.exceptions import BotoCoreError, ClientError

from cloudwatch_writer.common.log_utils import configure_logging, log_network_routes
from cloudwatch_writer.errors import CloudWatchWriterError
from cloudwatch_writer.writer import CloudWatchOutputWriter
from settings import ScriptSettings

configure_logging()
logger = logging.getLogger(__name__)

app = typer.Typer(help="Emit one sample to CloudWatch via the output writer")


def parse_value(raw: str) -> int | float:
    """Parse the command-line value as an int where possible, else a float."""
    try:
        return int(raw)
    except ValueError:
        return float(raw)


@app.command()
def emit(
    metric_name: str = typer.Argument(..., help="Metric name, e.g. heap.used"),
    value: str = typer.Argument(..., help="Numeric sample value"),
    namespace: str | None = typer.Option(
        None, "--namespace", "-n", help="CloudWatch namespace (default from scripts/.env)"
    ),
    endpoint_url: str | None = typer.Option(
        None, "--endpoint", help="CloudWatch endpoint override, e.g. LocalStack"
    ),
    invocation: bool = typer.Option(
        False, "--invocation", help="Send as an invocation result instead of a query result"
    ),
):
    """Initialize the writer and submit one datum."""
    script_settings = ScriptSettings()
    settings = script_settings.writer_settings()
    if namespace:
        settings["namespace"] = namespace
    if endpoint_url:
        settings["endpoint-url"] = endpoint_url

    try:
        sample = parse_value(value)
    except ValueError:
        logger.error(f"Not a number: {value}")
        raise typer.Exit(1)

    writer = CloudWatchOutputWriter()
    writer.post_construct(settings)
    try:
        ready = writer.ensure_ready()
        log_network_routes(ready.client.cloudwatch.meta.endpoint_url)
        if invocation:
            writer.write_invocation_result(metric_name, sample)
        else:
            writer.write_query_result(metric_name, None, sample)
    except (CloudWatchWriterError, ClientError, BotoCoreError) as e:
        logger.error(f"Emit failed: {e}")
        raise typer.Exit(1)

    logger.info(f"Submitted {metric_name}={sample} via {writer}")


if __name__ == "__main__":
    app()
