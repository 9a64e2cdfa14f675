"""Config module — loading and managing configuration."""

from src.core.config.loader import (
    get_config,
    get_fetcher_config,
    get_targets_config,
)

__all__ = [
    "get_config",
    "get_fetcher_config",
    "get_targets_config",
]
