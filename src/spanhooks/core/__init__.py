"""Core module - Config and option bags."""

from spanhooks.core.config import TracerConfig, parse_bool
from spanhooks.core.options import (
    FinishOptions,
    LogRecord,
    ReferenceType,
    SpanReference,
    StartSpanOptions,
)

__all__ = [
    "TracerConfig",
    "parse_bool",
    "StartSpanOptions",
    "FinishOptions",
    "LogRecord",
    "ReferenceType",
    "SpanReference",
]
