"""
Tests for global install detection (cli_notify/detection.py).
"""

import os

import pytest

from cli_notify.detection import (
    NPM_GLOBAL_COMMAND,
    PNPM_GLOBAL_COMMAND,
    YARN_GLOBAL_COMMAND,
    detect_global_install_command,
    get_global_install_command,
    has_path_segment,
    is_nested_under,
)
from cli_notify.environment import EnvironmentProbe
from cli_notify.process import ProcessError


class TestPathHelpers:
    """Tests for is_nested_under and has_path_segment."""

    def test_nested(self, tmp_path):
        assert is_nested_under(str(tmp_path / "lib" / "tool"), str(tmp_path))

    def test_same_directory(self, tmp_path):
        assert is_nested_under(str(tmp_path), str(tmp_path) + os.sep)

    def test_sibling_with_common_prefix(self, tmp_path):
        """Test /opt/node-extra is not considered nested under /opt/node."""
        assert not is_nested_under(str(tmp_path / "node-extra" / "bin"), str(tmp_path / "node"))

    def test_empty_directory_never_matches(self, tmp_path):
        assert not is_nested_under(str(tmp_path), "")

    def test_symlinked_directory(self, tmp_path):
        real = tmp_path / "real"
        (real / "lib").mkdir(parents=True)
        link = tmp_path / "link"
        link.symlink_to(real, target_is_directory=True)

        assert is_nested_under(str(link / "lib"), str(real))

    def test_path_segment(self):
        path = os.path.join(os.sep, "home", "dev", ".pnpm-global", "5", "node_modules", "tool")
        assert has_path_segment(os.path.join(os.sep, "x", "pnpm-global", "5"), "pnpm-global")
        assert not has_path_segment(path, "pnpm-global")


class TestGetGlobalInstallCommand:
    """Tests for get_global_install_command."""

    @pytest.fixture
    def layout(self, tmp_path):
        """Global directories of each package manager."""
        dirs = {
            "yarn": tmp_path / "yarn" / "global",
            "pnpm": tmp_path / "pnpm",
            "npm": tmp_path / "npm",
        }
        for path in dirs.values():
            path.mkdir(parents=True)
        return dirs

    def _runner(self, fake_runner, layout, versions):
        return fake_runner(
            versions=versions,
            outputs={
                ("yarn", "global", "dir"): str(layout["yarn"]),
                ("pnpm", "config", "get", "prefix"): str(layout["pnpm"]),
                ("npm", "config", "get", "prefix"): str(layout["npm"]),
            },
        )

    def _detect(self, runner, install_path, **kwargs):
        probe = EnvironmentProbe(runner=runner)
        return get_global_install_command(str(install_path), probe=probe, **kwargs)

    def test_yarn_global(self, fake_runner, layout):
        runner = self._runner(fake_runner, layout, {"yarn": "1.22.19", "pnpm": "8.6.0"})
        install_path = layout["yarn"] / "node_modules" / "create-widget"

        assert self._detect(runner, install_path) == YARN_GLOBAL_COMMAND

    def test_pnpm_global_with_marker(self, fake_runner, layout):
        runner = self._runner(fake_runner, layout, {"pnpm": "8.6.0"})
        install_path = layout["pnpm"] / "pnpm-global" / "5" / "node_modules" / "create-widget"

        assert self._detect(runner, install_path) == PNPM_GLOBAL_COMMAND

    def test_pnpm_prefix_without_marker_falls_through(self, fake_runner, layout):
        runner = self._runner(fake_runner, layout, {"pnpm": "8.6.0"})
        install_path = layout["pnpm"] / "lib" / "node_modules" / "create-widget"

        assert self._detect(runner, install_path) is None
        assert runner.count("npm", "config", "get", "prefix") == 1

    def test_custom_pnpm_marker(self, fake_runner, layout):
        runner = self._runner(fake_runner, layout, {"pnpm": "8.6.0"})
        install_path = layout["pnpm"] / "global" / "5" / "node_modules" / "create-widget"

        assert self._detect(runner, install_path, pnpm_global_marker="global") == PNPM_GLOBAL_COMMAND

    def test_old_pnpm_skipped(self, fake_runner, layout):
        runner = self._runner(fake_runner, layout, {"pnpm": "2.25.6"})
        install_path = layout["pnpm"] / "pnpm-global" / "node_modules" / "create-widget"

        assert self._detect(runner, install_path) is None
        assert runner.count("pnpm", "config", "get", "prefix") == 0

    def test_npm_global(self, fake_runner, layout):
        runner = self._runner(fake_runner, layout, {"yarn": "1.22.19"})
        install_path = layout["npm"] / "lib" / "node_modules" / "create-widget"

        assert self._detect(runner, install_path) == NPM_GLOBAL_COMMAND

    def test_yarn_installed_but_not_owner(self, fake_runner, layout):
        runner = self._runner(fake_runner, layout, {"yarn": "1.22.19"})
        install_path = layout["npm"] / "lib" / "node_modules" / "create-widget"

        assert self._detect(runner, install_path) == NPM_GLOBAL_COMMAND
        assert runner.count("yarn", "global", "dir") == 1

    def test_local_install(self, fake_runner, layout, tmp_path):
        runner = self._runner(fake_runner, layout, {"yarn": "1.22.19", "pnpm": "8.6.0"})
        install_path = tmp_path / "project" / "node_modules" / "create-widget"

        assert self._detect(runner, install_path) is None

    def test_query_failure_raises(self, fake_runner, layout):
        runner = fake_runner(versions={"yarn": "1.22.19"})
        with pytest.raises(ProcessError):
            self._detect(runner, layout["npm"])


class TestDetectGlobalInstallCommand:
    """Tests for the result-returning wrapper."""

    def test_success(self, fake_runner, tmp_path):
        runner = fake_runner(outputs={("npm", "config", "get", "prefix"): str(tmp_path)})

        result = detect_global_install_command(str(tmp_path / "lib"), runner=runner)

        assert result.ok
        assert result.command == NPM_GLOBAL_COMMAND

    def test_no_match_is_not_an_error(self, fake_runner, tmp_path):
        runner = fake_runner(outputs={("npm", "config", "get", "prefix"): str(tmp_path / "npm")})

        result = detect_global_install_command(str(tmp_path / "elsewhere"), runner=runner)

        assert result.ok
        assert result.command is None

    def test_failure_captured(self, fake_runner, tmp_path):
        result = detect_global_install_command(str(tmp_path), runner=fake_runner())

        assert not result.ok
        assert result.command is None
        assert isinstance(result.error, ProcessError)
