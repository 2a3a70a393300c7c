"""
Factory for creating graph sources.
"""

from graphloom.config import SourceConfig
from graphloom.core.source.base import GraphSource
from graphloom.core.source.http import HttpGraphSource
from graphloom.core.source.memory import InMemoryGraphSource
from graphloom.utils.exceptions import ConfigurationError


class SourceFactory:
    """Factory for creating graph sources from configuration."""

    @staticmethod
    def create(config: SourceConfig) -> GraphSource:
        """
        Create graph source from configuration.

        Args:
            config: Source configuration

        Returns:
            Graph source instance

        Raises:
            ConfigurationError: If provider is not supported
        """
        if config.provider == "http":
            if not config.base_url:
                raise ConfigurationError("HTTP graph source requires a base_url")
            return HttpGraphSource(
                base_url=config.base_url,
                api_key=config.api_key,
                timeout=config.timeout,
            )
        elif config.provider == "memory":
            return InMemoryGraphSource()
        else:
            raise ConfigurationError(
                f"Unsupported graph source provider: {config.provider}",
                context={"provider": config.provider},
            )
