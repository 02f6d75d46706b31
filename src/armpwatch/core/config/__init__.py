"""Configuration loading, validation and label tables."""

from .labels import (
    DEFAULT_LABEL_TABLE,
    DEFAULT_SYNONYMS,
    FieldLabels,
    LabelTable,
    SynonymTable,
    build_label_variants,
)
from .models import (
    # Enums
    ExtractionStrategy,
    OutputFormat,
    # Config models
    AppConfig,
    BrowserConfig,
    LoggingConfig,
    OutputConfig,
    ScrapeConfig,
    DEFAULT_URL,
)
from .loader import ConfigError, apply_overrides, env_overrides, load_app_config

__all__ = [
    # Label tables
    "DEFAULT_LABEL_TABLE",
    "DEFAULT_SYNONYMS",
    "FieldLabels",
    "LabelTable",
    "SynonymTable",
    "build_label_variants",
    # Enums
    "ExtractionStrategy",
    "OutputFormat",
    # Config models
    "AppConfig",
    "BrowserConfig",
    "LoggingConfig",
    "OutputConfig",
    "ScrapeConfig",
    "DEFAULT_URL",
    # Loaders
    "ConfigError",
    "apply_overrides",
    "env_overrides",
    "load_app_config",
]
