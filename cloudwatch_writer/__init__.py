"""Amazon CloudWatch output writer for monitoring agents."""

from cloudwatch_writer.output_writer import AbstractOutputWriter, OutputWriter
from cloudwatch_writer.writer import CloudWatchOutputWriter

__all__ = ["AbstractOutputWriter", "CloudWatchOutputWriter", "OutputWriter"]
