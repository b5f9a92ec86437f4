"""
Audit Log Observer - Write span lifecycle records to a logger.
"""

from __future__ import annotations

import fnmatch
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from spanhooks.core.options import FinishOptions, StartSpanOptions
    from spanhooks.tracing.span import Span


class AuditSpanObserver:
    """Logs the lifecycle of one span."""

    def __init__(
        self,
        span: Span,
        operation_name: str,
        *,
        logger: logging.Logger,
        level: int,
    ) -> None:
        self._logger = logger
        self._level = level
        self._operation_name = operation_name
        self._trace_id = span.trace_id
        self._span_id = span.span_id

    def _log(self, message: str, *args: object) -> None:
        self._logger.log(
            self._level,
            message,
            *args,
            extra={
                "trace_id": self._trace_id,
                "span_id": self._span_id,
                "operation_name": self._operation_name,
            },
        )

    def on_start(self, options: StartSpanOptions) -> None:
        self._log("span started: %s (%d tags)", self._operation_name, len(options.tags))

    def on_set_operation_name(self, operation_name: str) -> None:
        previous = self._operation_name
        self._operation_name = operation_name
        self._log("span renamed: %s -> %s", previous, operation_name)

    def on_set_tag(self, key: str, value: object) -> None:
        self._log("span tag: %s %s=%r", self._operation_name, key, value)

    def on_finish(self, options: FinishOptions) -> None:
        self._log(
            "span finished: %s (%d log records)",
            self._operation_name,
            len(options.log_records),
        )


class AuditLogObserver:
    """
    Logs span starts, renames, tags, and finishes.

    Example:
        ```python
        # Only audit payment spans
        audit = AuditLogObserver(include=["payment.*"])
        tracer.register_contrib_observer(audit)
        ```
    """

    def __init__(
        self,
        logger: logging.Logger | None = None,
        *,
        level: int = logging.INFO,
        include: Sequence[str] | None = None,
    ) -> None:
        """
        Initialize audit observer.

        Args:
            logger: Logger to write to (default: this module's logger)
            level: Log level for all records
            include: Glob patterns for operation names to audit (None = all)
        """
        self._logger = logger or logging.getLogger(__name__)
        self._level = level
        self._include = tuple(include) if include is not None else None

    def _matches(self, operation_name: str) -> bool:
        if self._include is None:
            return True
        return any(fnmatch.fnmatchcase(operation_name, p) for p in self._include)

    def on_start_span(
        self,
        span: Span,
        operation_name: str,
        options: StartSpanOptions,
    ) -> AuditSpanObserver | None:
        if not self._matches(operation_name):
            return None

        span_observer = AuditSpanObserver(
            span, operation_name, logger=self._logger, level=self._level
        )
        span_observer.on_start(options)
        return span_observer
