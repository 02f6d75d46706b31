"""
Pydantic configuration models for ARMPWatch.

These models provide type-safe configuration with validation for:
- Scrape target and extraction strategy
- Browser backend settings
- Output format and destination
- Logging
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, field_validator


DEFAULT_URL = (
    "https://www.armp.cm/recherche_avancee?recherche_avancee_do=1"
    "&reference_avis=&maitre_ouvrage=0&region=0&departement=0"
    "&type_publication%5B%5D=AO"
)


# =============================================================================
# Enums
# =============================================================================


class ExtractionStrategy(str, Enum):
    """Notice extraction strategies."""

    LABELS = "labels"  # ordered label probes on a live DOM
    CELLS = "cells"  # single pass over label/value cells
    MARKUP = "markup"  # regex over raw item markup

    @property
    def needs_dom(self) -> bool:
        return self is not ExtractionStrategy.MARKUP


class OutputFormat(str, Enum):
    """Serialization formats for notice sequences."""

    YAML = "yaml"
    JSON = "json"

    @classmethod
    def parse(cls, value: str | None) -> "OutputFormat | None":
        """Parse a user-supplied format name, accepting ``yml``."""
        if value is None:
            return None
        text = value.strip().lower()
        if text == "yml":
            return cls.YAML
        try:
            return cls(text)
        except ValueError:
            return None


# =============================================================================
# Scrape Configuration
# =============================================================================


class ScrapeConfig(BaseModel):
    """Target page and extraction settings."""

    url: str = Field(
        default=DEFAULT_URL,
        description="Listing page to scrape",
    )
    strategy: ExtractionStrategy = Field(
        default=ExtractionStrategy.LABELS,
        description="Extraction strategy for list items",
    )
    list_selector: str = Field(
        default=".list-group",
        description="CSS selector for the notice list container",
    )
    item_selector: str = Field(
        default="li.list-group-item",
        description="CSS selector for notice items within the list",
    )
    cell_selector: str = Field(
        default="div.d-table-cell",
        description="CSS selector for alternating label/value cells",
    )
    title_selector: str = Field(
        default="strong",
        description="CSS selector for the bolded notice title",
    )
    label_selector_template: str = Field(
        default='div:text-is("{label}") + div',
        description="Selector for the value cell next to a label; {label} is substituted",
    )
    fall_through_empty: bool = Field(
        default=False,
        description="Try the next label variant when a matched value cell is empty",
    )
    show_html: bool = Field(
        default=False,
        description="Log each item's inner HTML before parsing",
    )

    @field_validator("label_selector_template")
    @classmethod
    def template_has_label(cls, v: str) -> str:
        """Ensure the template has a label placeholder."""
        if "{label}" not in v:
            raise ValueError("label_selector_template must contain '{label}'")
        return v


# =============================================================================
# Browser Configuration
# =============================================================================


class BrowserConfig(BaseModel):
    """Playwright browser settings."""

    browser: str = Field(
        default="chromium",
        description="Browser to use: chromium, firefox, webkit",
    )
    headless: bool = Field(
        default=True,
        description="Run browser in headless mode",
    )
    timeout_seconds: float = Field(
        default=30.0,
        ge=1.0,
        le=300.0,
        description="Navigation and wait timeout in seconds",
    )
    auto_install: bool = Field(
        default=True,
        description="Install the Playwright browser when it is missing",
    )
    user_agent: str | None = Field(
        default=None,
        description="Custom user agent string",
    )

    @field_validator("browser")
    @classmethod
    def known_browser(cls, v: str) -> str:
        """Restrict to browsers Playwright ships."""
        v = v.strip().lower()
        if v not in {"chromium", "firefox", "webkit"}:
            raise ValueError("browser must be one of: chromium, firefox, webkit")
        return v


# =============================================================================
# Output Configuration
# =============================================================================


class OutputConfig(BaseModel):
    """Serialization settings."""

    format: OutputFormat = Field(
        default=OutputFormat.YAML,
        description="Output format: yaml or json",
    )
    path: Path | None = Field(
        default=None,
        description="Output file path; stdout when empty",
    )
    pause_on_exit: bool = Field(
        default=False,
        description="On Windows, wait for Enter before exiting",
    )

    @field_validator("format", mode="before")
    @classmethod
    def lenient_format(cls, v: object) -> object:
        """Fall back to YAML for unknown format names."""
        if isinstance(v, OutputFormat):
            return v
        if isinstance(v, str):
            return OutputFormat.parse(v) or OutputFormat.YAML
        return v

    @field_validator("path", mode="before")
    @classmethod
    def empty_path_is_stdout(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v


# =============================================================================
# Logging Configuration
# =============================================================================


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )
    file: Path | None = Field(
        default=None,
        description="Log file path",
    )
    json_format: bool = Field(
        default=True,
        description="Use JSON format for file logs",
    )
    rich_console: bool = Field(
        default=True,
        description="Use Rich for console output",
    )

    @field_validator("level")
    @classmethod
    def known_level(cls, v: str) -> str:
        v = v.strip().upper()
        if v not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return v


# =============================================================================
# Application Configuration
# =============================================================================


class AppConfig(BaseModel):
    """Root application configuration.

    This is the main configuration object loaded from app.yaml.
    """

    scrape: ScrapeConfig = Field(default_factory=ScrapeConfig)
    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
