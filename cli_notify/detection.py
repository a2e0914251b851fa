"""
Global install detection.

Works out which package manager installed the running tool globally, so the
upgrade notice can suggest the matching command.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from .common import vlog
from .environment import EnvironmentProbe
from .process import ProcessError, ProcessRunner

DEFAULT_PNPM_GLOBAL_MARKER = "pnpm-global"

YARN_GLOBAL_COMMAND = "yarn global add"
PNPM_GLOBAL_COMMAND = "pnpm i -g"
NPM_GLOBAL_COMMAND = "npm i -g"


@dataclass(frozen=True)
class InstallCommandResult:
    """
    Outcome of global install detection.

    Attributes:
        command: Upgrade command prefix (e.g., "npm i -g"), None if undetermined
        error: Failure raised during detection, if any
    """
    command: str | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _normalize(path: str) -> str:
    return os.path.normcase(os.path.realpath(path))


def is_nested_under(path: str, directory: str) -> bool:
    """Check whether path equals or lies beneath directory.

    An empty directory never matches.
    """
    if not directory:
        return False
    path = _normalize(path)
    directory = _normalize(directory)
    return path == directory or path.startswith(directory.rstrip(os.sep) + os.sep)


def has_path_segment(path: str, segment: str) -> bool:
    """Check whether one component of path is exactly segment."""
    parts = os.path.normpath(path).split(os.sep)
    return segment in parts


def get_global_install_command(
    install_path: str,
    probe: EnvironmentProbe | None = None,
    runner: ProcessRunner | None = None,
    pnpm_global_marker: str = DEFAULT_PNPM_GLOBAL_MARKER,
    verbose: bool = False,
) -> str | None:
    """
    Detect the global install command governing install_path.

    Detection order (first match wins):
    1. yarn: install_path under `yarn global dir`
    2. pnpm >= 3: install_path under `pnpm config get prefix` and
       containing the pnpm global marker segment
    3. npm: install_path under `npm config get prefix`

    Args:
        install_path: Directory the running tool is installed in
        probe: Environment probe for yarn/pnpm presence
        runner: Process runner (defaults to the probe's)
        pnpm_global_marker: Path segment identifying pnpm's global store
        verbose: Enable verbose logging

    Returns:
        Command prefix such as "yarn global add", or None if no manager matches

    Raises:
        ProcessError: If a package manager query fails
    """
    probe = probe or EnvironmentProbe(runner=runner, verbose=verbose)
    runner = runner or probe.runner

    if probe.has_yarn():
        yarn_global_dir = runner.run("yarn", ["global", "dir"]).stdout
        if is_nested_under(install_path, yarn_global_dir):
            vlog(f"{install_path} is under yarn global dir {yarn_global_dir}", verbose)
            return YARN_GLOBAL_COMMAND

    if probe.has_pnpm3_or_later():
        pnpm_prefix = runner.run("pnpm", ["config", "get", "prefix"]).stdout
        if is_nested_under(install_path, pnpm_prefix) and has_path_segment(install_path, pnpm_global_marker):
            vlog(f"{install_path} is under pnpm prefix {pnpm_prefix}", verbose)
            return PNPM_GLOBAL_COMMAND

    npm_prefix = runner.run("npm", ["config", "get", "prefix"]).stdout
    if is_nested_under(install_path, npm_prefix):
        vlog(f"{install_path} is under npm prefix {npm_prefix}", verbose)
        return NPM_GLOBAL_COMMAND

    vlog(f"No global package manager owns {install_path}", verbose)
    return None


def detect_global_install_command(
    install_path: str,
    probe: EnvironmentProbe | None = None,
    runner: ProcessRunner | None = None,
    pnpm_global_marker: str = DEFAULT_PNPM_GLOBAL_MARKER,
    verbose: bool = False,
) -> InstallCommandResult:
    """
    Detect the global install command, capturing failures in the result.

    Returns:
        InstallCommandResult carrying either the command (possibly None)
        or the ProcessError that stopped detection
    """
    try:
        command = get_global_install_command(
            install_path,
            probe=probe,
            runner=runner,
            pnpm_global_marker=pnpm_global_marker,
            verbose=verbose,
        )
    except ProcessError as e:
        return InstallCommandResult(error=e)
    return InstallCommandResult(command=command)
