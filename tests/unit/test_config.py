"""Tests for configuration loading."""

import textwrap

import pytest

from changelog_tracker.adapters.base import ProviderConfig
from changelog_tracker.config.loader import (
    ConfigLoader,
    TrackerSettings,
    load_config,
    substitute_env_vars,
)
from changelog_tracker.core.deduplicator import DedupPolicy


def write_config(tmp_path, content, name="providers.yml"):
    path = tmp_path / name
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


class TestSubstituteEnvVars:
    """Tests for substitute_env_vars function."""

    def test_default_used(self, monkeypatch):
        monkeypatch.delenv("TRACKER_TEST_VAR", raising=False)

        assert substitute_env_vars("x: ${TRACKER_TEST_VAR:-fallback}") == "x: fallback"

    def test_env_value_used(self, monkeypatch):
        monkeypatch.setenv("TRACKER_TEST_VAR", "set")

        assert substitute_env_vars("x: ${TRACKER_TEST_VAR:-fallback}") == "x: set"

    def test_missing_required_becomes_empty(self, monkeypatch):
        monkeypatch.delenv("TRACKER_TEST_VAR", raising=False)

        assert substitute_env_vars("x: ${TRACKER_TEST_VAR}") == "x: "


class TestTrackerSettings:
    """Tests for TrackerSettings.from_dict."""

    def test_defaults(self):
        settings = TrackerSettings.from_dict(None)

        assert settings.max_retained == 100
        assert settings.dedup_policy is DedupPolicy.TITLE_AND_DATE
        assert settings.concurrency == 1

    def test_title_policy(self):
        assert TrackerSettings.from_dict({"dedup_key": "title"}).dedup_policy is DedupPolicy.TITLE

    @pytest.mark.parametrize("data", [
        {"dedup_key": "url"},
        {"max_retained": 0},
        {"concurrency": 0},
        {"timeout": 0},
    ])
    def test_invalid(self, data):
        with pytest.raises(ValueError):
            TrackerSettings.from_dict(data)


class TestConfigLoader:
    """Tests for ConfigLoader."""

    def test_load_bundled_providers(self):
        """Test loading the packaged providers.yml file."""
        config = ConfigLoader().load()

        ids = [p.id for p in config.providers]
        assert ids == ["google-analytics", "adobe-cja", "amplitude", "mixpanel", "piwik-pro", "matomo"]
        assert all(isinstance(p, ProviderConfig) for p in config.providers)

    def test_bundled_provider_fields(self):
        for provider in load_config().providers:
            assert provider.name
            assert provider.url.startswith("https://")
            assert provider.base_url.startswith("https://")
            assert provider.max_entries > 0

    def test_env_override(self, tmp_path, monkeypatch):
        monkeypatch.setenv("UPDATES_DATA_FILE", str(tmp_path / "out.json"))

        config = load_config()

        assert config.settings.data_file == str(tmp_path / "out.json")

    def test_invalid_provider_skipped(self, tmp_path):
        """Test that a provider missing required fields does not stop loading."""
        path = write_config(tmp_path, """
            providers:
              - id: broken
                name: Broken
              - id: matomo
                name: Matomo
                url: https://matomo.org/changelog/
        """)

        config = load_config(str(path))

        assert [p.id for p in config.providers] == ["matomo"]

    def test_duplicate_provider_skipped(self, tmp_path):
        path = write_config(tmp_path, """
            providers:
              - id: matomo
                name: Matomo
                url: https://matomo.org/changelog/
              - id: matomo
                name: Matomo again
                url: https://matomo.org/other/
        """)

        config = load_config(str(path))

        assert len(config.providers) == 1
        assert config.providers[0].name == "Matomo"

    def test_adapter_and_base_url_defaults(self, tmp_path):
        path = write_config(tmp_path, """
            providers:
              - id: matomo
                name: Matomo
                url: https://matomo.org/changelog/
        """)

        provider = load_config(str(path)).providers[0]

        assert provider.adapter == "matomo"
        assert provider.base_url == "https://matomo.org/changelog/"
        assert provider.fallback_description == "Matomo update"
        assert provider.min_title_length == 6

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigLoader(str(tmp_path)).load()
