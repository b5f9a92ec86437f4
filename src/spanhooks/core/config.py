"""
Configuration for the tracer and its observers.

Settings can be given in code or read from ``SPANHOOKS_*`` environment
variables.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

ENV_PREFIX = "SPANHOOKS_"

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off"})


def parse_bool(value: str, *, name: str = "value") -> bool:
    """
    Parse a boolean from a string.

    Accepts 1/0, true/false, yes/no, on/off (case-insensitive).

    Raises:
        ValueError: If the string is not a recognized boolean
    """
    normalized = value.lower().strip()
    if normalized in _TRUE:
        return True
    if normalized in _FALSE:
        return False
    valid = ", ".join(sorted(_TRUE | _FALSE))
    raise ValueError(f"Invalid boolean for {name}: '{value}'. Valid values: {valid}")


@dataclass(frozen=True)
class TracerConfig:
    """
    Configuration for a Tracer.

    Example:
        ```python
        config = TracerConfig(service_name="checkout", rpc_metrics=True)
        tracer = Tracer(config)

        # Or from SPANHOOKS_* environment variables
        tracer = Tracer(TracerConfig.from_env())
        ```
    """

    service_name: str = "spanhooks"
    """Name of the service, added to every span as the ``service`` tag."""

    isolate_observer_failures: bool = False
    """Log and swallow observer exceptions instead of propagating them."""

    rpc_metrics: bool = False
    """Register the built-in RPC metrics observer."""

    max_endpoints: int = 200
    """Distinct endpoint names tracked by RPC metrics before folding into "other"."""

    def __post_init__(self) -> None:
        if self.max_endpoints <= 0:
            raise ValueError(
                f"max_endpoints must be positive, got {self.max_endpoints}"
            )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> TracerConfig:
        """
        Build a config from environment variables.

        Recognized variables:
            SPANHOOKS_SERVICE_NAME
            SPANHOOKS_ISOLATE_OBSERVERS
            SPANHOOKS_RPC_METRICS
            SPANHOOKS_MAX_ENDPOINTS

        Unset variables keep their defaults.

        Args:
            environ: Mapping to read from (defaults to ``os.environ``)

        Returns:
            TracerConfig built from the environment

        Raises:
            ValueError: If a variable holds an invalid value
        """
        env = os.environ if environ is None else environ
        kwargs: dict[str, object] = {}

        service_name = env.get(f"{ENV_PREFIX}SERVICE_NAME")
        if service_name:
            kwargs["service_name"] = service_name

        isolate = env.get(f"{ENV_PREFIX}ISOLATE_OBSERVERS")
        if isolate is not None:
            kwargs["isolate_observer_failures"] = parse_bool(
                isolate, name=f"{ENV_PREFIX}ISOLATE_OBSERVERS"
            )

        rpc_metrics = env.get(f"{ENV_PREFIX}RPC_METRICS")
        if rpc_metrics is not None:
            kwargs["rpc_metrics"] = parse_bool(
                rpc_metrics, name=f"{ENV_PREFIX}RPC_METRICS"
            )

        max_endpoints = env.get(f"{ENV_PREFIX}MAX_ENDPOINTS")
        if max_endpoints is not None:
            try:
                kwargs["max_endpoints"] = int(max_endpoints)
            except ValueError:
                raise ValueError(
                    f"Invalid integer for {ENV_PREFIX}MAX_ENDPOINTS: '{max_endpoints}'"
                ) from None

        return cls(**kwargs)
