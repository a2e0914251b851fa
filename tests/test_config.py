"""
Tests for configuration parsing (cli_notify/config.py).
"""

from unittest.mock import patch

import pytest

from cli_notify.config import (
    NotifierConfig,
    _load_yaml,
    load_config,
    load_config_file,
)


class TestNotifierConfig:
    """Tests for NotifierConfig dataclass."""

    def test_defaults(self):
        """Test NotifierConfig with default values."""
        config = NotifierConfig()
        assert config.version == 1
        assert config.enabled is True
        assert config.package_manager is None
        assert config.registry_timeout_seconds == 30
        assert config.pnpm_global_marker == "pnpm-global"
        assert config.prerelease_tag == "next"
        assert config.color is True
        assert config.source == ""

    def test_invalid_version(self):
        with pytest.raises(ValueError, match="Unsupported config version"):
            NotifierConfig(version=2)

    @pytest.mark.parametrize("timeout", [0, 301])
    def test_invalid_timeout(self, timeout):
        with pytest.raises(ValueError, match="Invalid registry_timeout_seconds"):
            NotifierConfig(registry_timeout_seconds=timeout)

    def test_empty_marker_rejected(self):
        with pytest.raises(ValueError, match="pnpm_global_marker"):
            NotifierConfig(pnpm_global_marker="")

    def test_empty_prerelease_tag_rejected(self):
        with pytest.raises(ValueError, match="prerelease_tag"):
            NotifierConfig(prerelease_tag="")

    def test_immutable(self):
        """Test that NotifierConfig is immutable."""
        config = NotifierConfig()
        with pytest.raises(AttributeError):
            config.enabled = False  # Should fail (frozen)

    def test_from_dict(self):
        data = {
            "version": 1,
            "enabled": False,
            "package_manager": "pnpm",
            "registry_timeout_seconds": 10,
            "prerelease_tag": "beta",
        }
        config = NotifierConfig.from_dict(data, source="test.yml")
        assert config.enabled is False
        assert config.package_manager == "pnpm"
        assert config.registry_timeout_seconds == 10
        assert config.prerelease_tag == "beta"
        assert config.pnpm_global_marker == "pnpm-global"  # Default
        assert config.source == "test.yml"


class TestConfigMerging:
    """Tests for configuration merging."""

    def test_merge_prefers_explicit_values(self):
        project = NotifierConfig(package_manager="yarn", source="project")
        user = NotifierConfig(package_manager="pnpm", registry_timeout_seconds=10, source="user")

        merged = project.merge_with(user)

        assert merged.package_manager == "yarn"
        assert merged.registry_timeout_seconds == 10
        assert merged.source == "project"

    def test_from_dict_records_present_keys(self):
        config = NotifierConfig.from_dict({"version": 1, "enabled": True, "unknown": 3})
        assert config.set_fields() == frozenset({"version", "enabled"})

    def test_merge_keeps_explicit_default(self):
        project = NotifierConfig.from_dict({"enabled": True})
        user = NotifierConfig.from_dict({"enabled": False, "prerelease_tag": "beta"})

        merged = project.merge_with(user)

        assert merged.enabled is True
        assert merged.prerelease_tag == "beta"

    def test_merge_with_defaults(self):
        config = NotifierConfig(color=False)
        assert config.merge_with(NotifierConfig()) == config


class TestLoadYAML:
    """Tests for YAML loading."""

    def test_load_yaml_valid(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("version: 1\nenabled: false\n")
        assert _load_yaml(str(path)) == {"version": 1, "enabled": False}

    def test_load_yaml_empty_file(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("")
        assert _load_yaml(str(path)) == {}

    def test_load_yaml_invalid(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("enabled: [unterminated\n")
        assert _load_yaml(str(path)) is None

    def test_load_yaml_not_found(self):
        assert _load_yaml("/nonexistent/file.yml") is None


class TestLoadConfigFile:
    """Tests for loading configuration from a single file."""

    def test_valid(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("version: 1\npackage_manager: yarn\n")

        config = load_config_file(str(path))

        assert config.package_manager == "yarn"
        assert config.source == str(path)

    def test_validation_failure(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("version: 1\nregistry_timeout_seconds: 0\n")
        assert load_config_file(str(path)) is None

    def test_not_found(self):
        assert load_config_file("/nonexistent/file.yml") is None


class TestLoadConfig:
    """Tests for loading and merging configuration from multiple sources."""

    def test_defaults(self, tmp_path):
        with patch("cli_notify.config.CONFIG_LOCATIONS", [str(tmp_path / "missing.yml")]):
            assert load_config() == NotifierConfig()

    def test_project_over_user(self, tmp_path):
        project = tmp_path / ".cli-notify.yml"
        project.write_text("version: 1\npackage_manager: yarn\n")
        user = tmp_path / "user.yml"
        user.write_text("version: 1\npackage_manager: npm\nprerelease_tag: beta\n")

        with patch("cli_notify.config.CONFIG_LOCATIONS", [str(project), str(user)]):
            config = load_config()

        assert config.package_manager == "yarn"
        assert config.prerelease_tag == "beta"

    def test_project_default_values_win(self, tmp_path):
        """Test a project file setting a default value still overrides the user file."""
        project = tmp_path / ".cli-notify.yml"
        project.write_text("version: 1\nenabled: true\nregistry_timeout_seconds: 30\n")
        user = tmp_path / "user.yml"
        user.write_text("version: 1\nenabled: false\nregistry_timeout_seconds: 120\ncolor: false\n")

        with patch("cli_notify.config.CONFIG_LOCATIONS", [str(project), str(user)]):
            config = load_config()

        assert config.enabled is True
        assert config.registry_timeout_seconds == 30
        assert config.color is False
        assert config.source == str(project)

    def test_custom_path_highest(self, tmp_path):
        custom = tmp_path / "custom.yml"
        custom.write_text("version: 1\nenabled: false\n")
        project = tmp_path / ".cli-notify.yml"
        project.write_text("version: 1\nenabled: true\npackage_manager: pnpm\n")

        with patch("cli_notify.config.CONFIG_LOCATIONS", [str(project)]):
            config = load_config(custom_path=str(custom))

        assert config.enabled is False
        assert config.package_manager == "pnpm"
        assert config.source == str(custom)

    def test_custom_path_not_found(self):
        """Test that custom path not found raises ValueError."""
        with pytest.raises(ValueError, match="Could not load config"):
            load_config(custom_path="/nonexistent/file.yml")

    def test_invalid_file_skipped(self, tmp_path):
        broken = tmp_path / "broken.yml"
        broken.write_text("version: 7\n")

        with patch("cli_notify.config.CONFIG_LOCATIONS", [str(broken)]):
            assert load_config() == NotifierConfig()
