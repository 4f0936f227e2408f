"""Output writer contract shared with the host monitoring agent."""

import logging
from collections.abc import Mapping
from typing import Protocol

SETTING_LOGGER_LEVEL = "logger.level"


class OutputWriter(Protocol):
    """Capability set the host agent drives to push samples to a sink.

    Lifecycle: ``post_construct`` once at startup, then any number of
    ``pre_collect`` / ``write_*`` / ``post_collect`` rounds, possibly from
    several host threads, then ``pre_destroy`` at shutdown.
    """

    def post_construct(self, settings: Mapping[str, str]) -> None:
        """Configure the writer from the host's settings map."""
        ...

    def pre_destroy(self) -> None: ...

    def pre_collect(self) -> None: ...

    def post_collect(self) -> None: ...

    def write_query_result(
        self, metric_name: str, metric_type: str | None, value: object
    ) -> None:
        """Write one sample produced by a query.

        Args:
            metric_name: Name of the metric
            metric_type: Optional type hint (e.g. "gauge", "counter")
            value: Sample value of unknown runtime type
        """
        ...

    def write_invocation_result(self, invocation_name: str, value: object) -> None:
        """Write the result of an agent-side operation invocation."""
        ...


class AbstractOutputWriter:
    """Base for output writers: keeps the raw settings and no-op lifecycle hooks.

    Subclasses implement ``write_query_result``; invocation results go
    through it with no type hint.
    """

    def __init__(self):
        self.settings: Mapping[str, str] = {}
        self.info_level = logging.INFO

    def post_construct(self, settings: Mapping[str, str]) -> None:
        self.settings = dict(settings)
        level_name = (self.settings.get(SETTING_LOGGER_LEVEL) or "INFO").strip().upper()
        self.info_level = logging.getLevelNamesMapping().get(level_name, logging.INFO)

    def pre_destroy(self) -> None:
        pass

    def pre_collect(self) -> None:
        pass

    def post_collect(self) -> None:
        pass

    def write_query_result(
        self, metric_name: str, metric_type: str | None, value: object
    ) -> None:
        raise NotImplementedError

    def write_invocation_result(self, invocation_name: str, value: object) -> None:
        self.write_query_result(invocation_name, None, value)
