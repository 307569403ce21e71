"""
Environment configuration for the stream relay Lambdas.

Values are set by the infrastructure stack; missing required values stop the
Lambda from starting.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dynamo_search_relay.exceptions import ConfigurationError


def _split_csv(value: Optional[str]) -> tuple[str, ...]:
    if not value:
        return ()
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class RelayConfig:
    """Immutable settings the processor and purge engine are built from."""

    queue_urls: tuple[str, ...]
    opensearch_endpoint: str
    region: str
    purge_indices: tuple[str, ...] = ()
    log_level: str = "INFO"
    structured_logging: bool = True

    def require_purge_indices(self) -> tuple[str, ...]:
        """
        Return the indices to purge.

        Raises:
            ConfigurationError: If TABLES was not configured
        """
        if not self.purge_indices:
            raise ConfigurationError("TABLES is required")
        return self.purge_indices


def load_config(environ: Optional[Mapping[str, str]] = None) -> RelayConfig:
    """
    Read relay settings from the environment.

    Raises:
        ConfigurationError: If QUEUE_URLS, OPENSEARCH_ENDPOINT or the region
            is missing
    """
    env = os.environ if environ is None else environ

    queue_urls = _split_csv(env.get("QUEUE_URLS"))
    if not queue_urls:
        raise ConfigurationError("QUEUE_URLS is required")

    endpoint = env.get("OPENSEARCH_ENDPOINT", "").strip()
    if not endpoint:
        raise ConfigurationError("OPENSEARCH_ENDPOINT is required")

    region = (env.get("AWS_REGION") or env.get("region") or "").strip()
    if not region:
        raise ConfigurationError("AWS_REGION is required")

    return RelayConfig(
        queue_urls=queue_urls,
        opensearch_endpoint=endpoint,
        region=region,
        purge_indices=_split_csv(env.get("TABLES")),
        log_level=env.get("LOG_LEVEL", "INFO"),
        structured_logging=(
            env.get("ENABLE_STRUCTURED_LOGGING", "true").lower() == "true"
        ),
    )


__all__ = ["RelayConfig", "load_config"]
