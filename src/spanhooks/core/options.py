"""
Option bags passed to observers at span start and finish.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from spanhooks.tracing.span import SpanContext


def _frozen_mapping(data: Mapping[str, object] | None = None) -> Mapping[str, object]:
    return MappingProxyType(dict(data or {}))


class ReferenceType(StrEnum):
    """Causal relationship between a span and a referenced span."""

    CHILD_OF = "child_of"
    FOLLOWS_FROM = "follows_from"


@dataclass(frozen=True)
class SpanReference:
    """A reference from a new span to an existing span context."""

    type: ReferenceType
    context: SpanContext


@dataclass(frozen=True)
class LogRecord:
    """Timestamped key-value fields logged on a span."""

    timestamp: float
    """Seconds since the epoch."""

    fields: Mapping[str, object] = field(default_factory=_frozen_mapping)


@dataclass(frozen=True)
class StartSpanOptions:
    """
    Settings a span was started with.

    Passed unchanged to every observer's ``on_start_span``.
    """

    start_time: float | None = None
    """Explicit start time in seconds since the epoch (None = now)."""

    tags: Mapping[str, object] = field(default_factory=_frozen_mapping)
    """Tags set at creation."""

    references: tuple[SpanReference, ...] = ()
    """References to other spans."""

    @classmethod
    def create(
        cls,
        *,
        start_time: float | None = None,
        tags: Mapping[str, object] | None = None,
        references: tuple[SpanReference, ...] | list[SpanReference] = (),
    ) -> StartSpanOptions:
        """Create options, copying ``tags`` into a read-only mapping."""
        return cls(
            start_time=start_time,
            tags=_frozen_mapping(tags),
            references=tuple(references),
        )


@dataclass(frozen=True)
class FinishOptions:
    """
    Settings a span was finished with.

    Passed unchanged to every span observer's ``on_finish``.
    """

    finish_time: float | None = None
    """Explicit finish time in seconds since the epoch (None = now)."""

    log_records: tuple[LogRecord, ...] = ()
    """Log records added at finish."""
