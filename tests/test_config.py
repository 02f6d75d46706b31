"""Tests for configuration loading."""

import logging
from pathlib import Path

import pytest

from armpwatch.core.config import (
    DEFAULT_URL,
    AppConfig,
    ConfigError,
    ExtractionStrategy,
    OutputFormat,
    apply_overrides,
    env_overrides,
    load_app_config,
)
from armpwatch.core.config.loader import env_flag


def write_config(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


class TestDefaults:
    """Tests for default configuration."""

    def test_defaults_without_file(self):
        config = load_app_config(env={})
        assert config.scrape.url == DEFAULT_URL
        assert config.scrape.strategy is ExtractionStrategy.LABELS
        assert config.output.format is OutputFormat.YAML
        assert config.output.path is None
        assert config.browser.auto_install is True

    def test_default_path_is_read(self, tmp_path):
        write_config(tmp_path / "configs" / "app.yaml", "scrape:\n  strategy: cells\n")
        assert load_app_config(env={}).scrape.strategy is ExtractionStrategy.CELLS

    def test_explicit_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_app_config(tmp_path / "missing.yaml", env={})


class TestLoadAppConfig:
    """Tests for load_app_config."""

    def test_file_values(self, tmp_path):
        path = write_config(tmp_path / "app.yaml", (
            "scrape:\n"
            "  strategy: markup\n"
            "  fall_through_empty: true\n"
            "browser:\n"
            "  browser: firefox\n"
            "  headless: false\n"
            "output:\n"
            "  format: json\n"
            "  path: out/notices.json\n"
            "logging:\n"
            "  level: debug\n"
        ))
        config = load_app_config(path, env={})

        assert config.scrape.strategy is ExtractionStrategy.MARKUP
        assert config.scrape.fall_through_empty is True
        assert config.browser.browser == "firefox"
        assert config.browser.headless is False
        assert config.output.format is OutputFormat.JSON
        assert config.output.path == Path("out/notices.json")
        assert config.logging.level == "DEBUG"

    def test_env_references_expanded(self, tmp_path):
        path = write_config(tmp_path / "app.yaml", (
            "scrape:\n"
            "  url: ${ARMP_URL:-https://fallback.test/}\n"
            "output:\n"
            "  path: ${OUT_DIR}/notices.yaml\n"
        ))
        config = load_app_config(path, env={"OUT_DIR": "data"})
        assert config.scrape.url == "https://fallback.test/"
        assert config.output.path == Path("data/notices.yaml")

    def test_env_overrides_file(self, tmp_path):
        path = write_config(tmp_path / "app.yaml", "output:\n  format: json\n  path: file.json\n")
        config = load_app_config(path, env={
            "FORMAT": "yml",
            "OUTPUT_FILE": "env.yaml",
            "SHOW_HTML": "yes",
            "PAUSE_ON_EXIT": "1",
            "SCRAPE_URL": "https://env.test/",
        })

        assert config.output.format is OutputFormat.YAML
        assert config.output.path == Path("env.yaml")
        assert config.scrape.show_html is True
        assert config.output.pause_on_exit is True
        assert config.scrape.url == "https://env.test/"

    def test_unknown_format_falls_back_to_yaml(self, tmp_path, caplog):
        path = write_config(tmp_path / "app.yaml", "output:\n  format: xml\n")
        with caplog.at_level(logging.WARNING, logger="armpwatch"):
            config = load_app_config(path, env={})
        assert config.output.format is OutputFormat.YAML
        assert "Unknown format" in caplog.text

    def test_invalid_yaml(self, tmp_path):
        path = write_config(tmp_path / "app.yaml", "scrape: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_app_config(path, env={})

    def test_non_mapping_document(self, tmp_path):
        path = write_config(tmp_path / "app.yaml", "- a\n- b\n")
        with pytest.raises(ConfigError, match="Expected a mapping"):
            load_app_config(path, env={})

    def test_validation_error(self, tmp_path):
        path = write_config(tmp_path / "app.yaml", "browser:\n  browser: netscape\n")
        with pytest.raises(ConfigError) as exc_info:
            load_app_config(path, env={})
        assert "netscape" in exc_info.value.details

    def test_template_needs_placeholder(self, tmp_path):
        path = write_config(tmp_path / "app.yaml", "scrape:\n  label_selector_template: div + div\n")
        with pytest.raises(ConfigError):
            load_app_config(path, env={})

    def test_empty_file(self, tmp_path):
        path = write_config(tmp_path / "app.yaml", "")
        assert load_app_config(path, env={}) == AppConfig()


class TestEnvOverrides:
    """Tests for env_overrides and env_flag."""

    @pytest.mark.parametrize("value,expected", [
        ("1", True), ("true", True), ("YES", True), (" on ", True), ("y", True),
        ("0", False), ("false", False), ("", False), (None, False),
    ])
    def test_env_flag(self, value, expected):
        assert env_flag(value) is expected

    def test_empty_values_ignored(self):
        assert env_overrides({"FORMAT": " ", "OUTPUT_FILE": "", "SHOW_HTML": "0"}) == {}

    def test_nested_shape(self):
        assert env_overrides({"FORMAT": "json", "SHOW_HTML": "true"}) == {
            "output": {"format": "json"},
            "scrape": {"show_html": True},
        }


class TestApplyOverrides:
    """Tests for apply_overrides."""

    def test_none_keeps_existing(self):
        config = AppConfig.model_validate({"output": {"format": "json"}})
        updated = apply_overrides(config, {"output": {"format": None, "path": "x.json"}})
        assert updated.output.format is OutputFormat.JSON
        assert updated.output.path == Path("x.json")

    def test_flag_wins(self):
        config = AppConfig.model_validate({"scrape": {"strategy": "cells"}})
        updated = apply_overrides(config, {"scrape": {"strategy": "markup"}})
        assert updated.scrape.strategy is ExtractionStrategy.MARKUP
        assert config.scrape.strategy is ExtractionStrategy.CELLS

    def test_invalid_override(self):
        with pytest.raises(ConfigError):
            apply_overrides(AppConfig(), {"logging": {"level": "LOUD"}})
