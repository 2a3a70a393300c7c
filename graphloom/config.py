"""
Configuration for GraphLoom.

Supports loading from:
1. Environment variables (highest priority)
2. YAML config file
3. Default values (fallback)
"""

import os
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

# Hand-tuned word lists carried over unchanged from the viewer; keep for parity.
DEFAULT_STOP_WORDS: tuple[str, ...] = (
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "is", "are", "was", "were", "be", "been", "have",
    "has", "had", "do", "does", "did", "will", "would", "could", "should",
    "can", "may", "might", "must", "this", "that", "these", "those",
)  # fmt: skip

DEFAULT_IMPORTANCE_KEYWORDS: Mapping[str, int] = MappingProxyType(
    {
        "critical": 9,
        "important": 8,
        "essential": 8,
        "key": 7,
        "main": 7,
        "primary": 7,
        "core": 8,
        "fundamental": 8,
        "basic": 5,
        "minor": 3,
        "optional": 4,
        "experimental": 6,
    }
)


def read_only(value: Mapping) -> Mapping:
    """Freeze a lookup table so injected configs cannot be changed in place."""
    return MappingProxyType(dict(value))


class EnrichmentConfig(BaseModel):
    """Tag mining and importance configuration."""

    model_config = ConfigDict(frozen=True)

    marker: str = "#"
    stop_words: tuple[str, ...] = DEFAULT_STOP_WORDS
    importance_keywords: Mapping[str, int] = Field(
        default_factory=lambda: DEFAULT_IMPORTANCE_KEYWORDS, validate_default=True
    )
    marker_weight: int = 6
    type_weight: int = 8
    keyword_base_weight: int = 5
    min_keyword_length: int = 3
    max_keywords: int = 10

    @field_validator("importance_keywords")
    @classmethod
    def freeze_tables(cls, value: Mapping[str, int]) -> Mapping[str, int]:
        return read_only(value)

    @field_serializer("importance_keywords")
    def dump_tables(self, value: Mapping[str, int]) -> dict[str, int]:
        return dict(value)


class LayerConfig(BaseModel):
    """Layer discovery configuration."""

    model_config = ConfigDict(frozen=True)

    spacing: float = 200.0
    min_tag_weight: int = 7
    min_node_count: int = 2


class PaletteConfig(BaseModel):
    """Presentation hints attached to nodes, layers and links."""

    model_config = ConfigDict(frozen=True)

    node_colors: Mapping[str, str] = Field(
        validate_default=True,
        default_factory=lambda: {
            "Project": "#00ff41",
            "Development Phase": "#00cc33",
            "Historical Figure": "#33ff66",
            "Natural Phenomenon": "#66ff99",
            "Resource": "#99ffcc",
        },
    )
    layer_colors: Mapping[str, str] = Field(
        validate_default=True,
        default_factory=lambda: {
            "project": "#00ff41",
            "development": "#00cc33",
            "research": "#33ff66",
            "concept": "#66ff99",
            "tool": "#99ffcc",
            "framework": "#ccffcc",
        },
    )
    default_color: str = "#00ff41"
    intra_layer_link_color: str = "#00ff41"
    inter_layer_link_color: str = "#ffffff"
    intra_layer_link_width: int = 2
    inter_layer_link_width: int = 3

    @field_validator("node_colors", "layer_colors")
    @classmethod
    def freeze_palettes(cls, value: Mapping[str, str]) -> Mapping[str, str]:
        return read_only(value)

    @field_serializer("node_colors", "layer_colors")
    def dump_palettes(self, value: Mapping[str, str]) -> dict[str, str]:
        return dict(value)

    def node_color(self, node_type: str) -> str:
        return self.node_colors.get(node_type, self.default_color)

    def layer_color(self, tag_name: str) -> str:
        return self.layer_colors.get(tag_name, self.default_color)


class CacheConfig(BaseModel):
    """Snapshot cache configuration."""

    ttl_seconds: float = 300.0
    sweep_interval_seconds: float = 300.0
    enable_sweeper: bool = True


class NotifierConfig(BaseModel):
    """Update notifier configuration."""

    highlight_limit: int = 50


class SourceConfig(BaseModel):
    """Remote graph source configuration."""

    provider: str = "http"  # http, memory
    base_url: str = "http://localhost:3000/api/graph"
    api_key: str | None = None
    timeout: float = 60.0


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    log_to_file: bool = True
    log_dir: str = "logs"
    file_rotation: str = "10 MB"
    file_retention: str = "7 days"
    compression: str = "zip"
    serialize: bool = True


class Config(BaseModel):
    """Main configuration."""

    enrichment: EnrichmentConfig = Field(default_factory=EnrichmentConfig)
    layers: LayerConfig = Field(default_factory=LayerConfig)
    palette: PaletteConfig = Field(default_factory=PaletteConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    notifier: NotifierConfig = Field(default_factory=NotifierConfig)
    source: SourceConfig = Field(default_factory=SourceConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> "Config":
        """
        Load configuration from environment variables.

        Priority: .env file -> system environment variables -> defaults

        Args:
            env_file: Optional path to .env file (default: .env in project root)

        Returns:
            Config instance

        Environment variables:
            GRAPHLOOM_SOURCE_PROVIDER: Graph source provider (http, memory)
            GRAPHLOOM_SOURCE_BASE_URL: Relay endpoint for the graph-memory service
            GRAPHLOOM_SOURCE_API_KEY: Optional bearer token for the relay
            GRAPHLOOM_SOURCE_TIMEOUT: Request timeout in seconds
            GRAPHLOOM_CACHE_TTL_SECONDS: Snapshot time-to-live
            GRAPHLOOM_CACHE_SWEEP_INTERVAL_SECONDS: Expiry sweep period
            GRAPHLOOM_LAYER_SPACING: Depth step between layers
            GRAPHLOOM_HIGHLIGHT_LIMIT: Max node IDs per highlight notification
            GRAPHLOOM_LOG_LEVEL: Log level
        """
        # Load .env file if provided or exists
        if env_file:
            load_dotenv(env_file)
        elif Path(".env").exists():
            load_dotenv()

        def get_env(key: str, default: Any = None) -> Any:
            """Get environment variable with type conversion."""
            value = os.getenv(key)
            if value is None:
                return default
            # If value is empty string, return default
            if value == "":
                return default
            # Convert boolean strings
            if isinstance(default, bool):
                return str(value).lower() in ("true", "1", "yes")
            # Convert numeric strings
            if isinstance(default, int):
                return int(value)
            if isinstance(default, float):
                return float(value)
            return value

        return cls(
            layers=LayerConfig(
                spacing=get_env("GRAPHLOOM_LAYER_SPACING", 200.0),
                min_tag_weight=get_env("GRAPHLOOM_LAYER_MIN_TAG_WEIGHT", 7),
                min_node_count=get_env("GRAPHLOOM_LAYER_MIN_NODE_COUNT", 2),
            ),
            cache=CacheConfig(
                ttl_seconds=get_env("GRAPHLOOM_CACHE_TTL_SECONDS", 300.0),
                sweep_interval_seconds=get_env("GRAPHLOOM_CACHE_SWEEP_INTERVAL_SECONDS", 300.0),
                enable_sweeper=get_env("GRAPHLOOM_CACHE_ENABLE_SWEEPER", True),
            ),
            notifier=NotifierConfig(
                highlight_limit=get_env("GRAPHLOOM_HIGHLIGHT_LIMIT", 50),
            ),
            source=SourceConfig(
                provider=get_env("GRAPHLOOM_SOURCE_PROVIDER", "http"),
                base_url=get_env("GRAPHLOOM_SOURCE_BASE_URL", "http://localhost:3000/api/graph"),
                api_key=get_env("GRAPHLOOM_SOURCE_API_KEY"),
                timeout=get_env("GRAPHLOOM_SOURCE_TIMEOUT", 60.0),
            ),
            logging=LoggingConfig(
                level=get_env("GRAPHLOOM_LOG_LEVEL", "INFO"),
                log_to_file=get_env("GRAPHLOOM_LOG_TO_FILE", True),
                log_dir=get_env("GRAPHLOOM_LOG_DIR", "logs"),
                file_rotation=get_env("GRAPHLOOM_LOG_FILE_ROTATION", "10 MB"),
                file_retention=get_env("GRAPHLOOM_LOG_FILE_RETENTION", "7 days"),
                compression=get_env("GRAPHLOOM_LOG_COMPRESSION", "zip"),
                serialize=get_env("GRAPHLOOM_LOG_SERIALIZE", True),
            ),
        )

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> "Config":
        """
        Load configuration from YAML file.

        Args:
            yaml_path: Path to YAML configuration file

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If YAML file doesn't exist
            yaml.YAMLError: If YAML is invalid
        """
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"Config file not found: {yaml_path}")

        with open(yaml_path) as f:
            data = yaml.safe_load(f)

        return cls(**(data or {}))

    @classmethod
    def from_env_or_yaml(
        cls, yaml_path: str | Path | None = None, env_file: str | Path | None = None
    ) -> "Config":
        """
        Load configuration with priority: env vars > YAML > defaults.

        Args:
            yaml_path: Optional path to YAML config
            env_file: Optional path to .env file

        Returns:
            Config instance
        """
        # Start with YAML if provided
        if yaml_path and Path(yaml_path).exists():
            with open(yaml_path) as f:
                config_dict = yaml.safe_load(f) or {}
        else:
            config_dict = {}

        env_config = cls.from_env(env_file=env_file)

        # Merge: env vars override YAML
        final_dict = {**config_dict}

        # Apply env overrides (non-default values)
        default = cls()
        if env_config.layers != default.layers:
            final_dict["layers"] = env_config.layers.model_dump()
        if env_config.cache != default.cache:
            final_dict["cache"] = env_config.cache.model_dump()
        if env_config.notifier != default.notifier:
            final_dict["notifier"] = env_config.notifier.model_dump()
        if env_config.source != default.source:
            final_dict["source"] = env_config.source.model_dump()
        if env_config.logging != default.logging:
            final_dict["logging"] = env_config.logging.model_dump()

        return cls(**final_dict) if final_dict else env_config


# Default config instance
default_config = Config()
