"""
Environment probing for yarn, pnpm and npm.

Answers two questions without ever raising for a missing binary:
which package managers are installed locally, and whether a project
directory is governed by one of them (via its lockfile).
"""

from __future__ import annotations

import os
import re
from enum import Enum

from packaging.version import InvalidVersion, Version

from .common import vlog
from .process import ProcessError, ProcessRunner, SubprocessRunner

VERSION_RE = re.compile(r"\d+(?:\.\d+)+(?:[-+][0-9A-Za-z.\-]+)?")

NO_VERSION = Version("0.0.0")

# pnpm 2 has a critical bug (pnpm/pnpm#1678), so only pnpm >= 3 counts as installed
MIN_PNPM_VERSION = "3.0.0"


class PackageManagerKind(Enum):
    """Package managers this notifier knows how to talk to."""
    YARN = "yarn"
    PNPM = "pnpm"
    NPM = "npm"
    OTHER = "other"

    @classmethod
    def from_name(cls, name: str) -> PackageManagerKind:
        """Map a binary name to its kind; unknown names become OTHER."""
        for kind in cls:
            if kind is not cls.OTHER and kind.value == name:
                return kind
        return cls.OTHER


LOCKFILES = {
    PackageManagerKind.YARN: "yarn.lock",
    PackageManagerKind.PNPM: "pnpm-lock.yaml",
    PackageManagerKind.NPM: "package-lock.json",
}


class MissingPackageManager(Exception):
    """Raised when a project lockfile names a package manager that isn't installed."""
    pass


def extract_version_number(s: str) -> str:
    """Extract version number from tool output.

    Args:
        s: String potentially containing version (e.g., "8.6.0", "v1.22.19")

    Returns:
        Version number (e.g., "1.22.19") or empty string if not found
    """
    if not s:
        return ""
    match = VERSION_RE.search(s)
    return match.group(0) if match else ""


def parse_tool_version(s: str) -> Version:
    """Parse a package manager's --version output, NO_VERSION if unparsable."""
    number = extract_version_number(s)
    if not number:
        return NO_VERSION
    try:
        return Version(number)
    except InvalidVersion:
        return NO_VERSION


class EnvironmentProbe:
    """
    Detects installed package managers and project lockfiles.

    The pnpm version is looked up once per probe: it is stored after the
    first successful probe and never re-queried. A new probe starts empty.
    """

    def __init__(self, runner: ProcessRunner | None = None, verbose: bool = False):
        self.runner = runner or SubprocessRunner()
        self.verbose = verbose
        self._pnpm_version: Version | None = None
        self._has_pnpm = False

    def has_binary(self, name: str) -> bool:
        """
        Check whether ``<name> --version`` runs successfully.

        Args:
            name: Binary name

        Returns:
            True if the command exits 0, False on any failure
        """
        try:
            self.runner.run(name, ["--version"])
        except ProcessError as e:
            vlog(f"{name} not available: {e}", self.verbose)
            return False
        return True

    def has_yarn(self) -> bool:
        return self.has_binary("yarn")

    def pnpm_version(self) -> Version:
        """
        Get the installed pnpm version.

        Returns:
            The reported version, or 0.0.0 if pnpm is absent or reports
            nothing parsable
        """
        if self._pnpm_version is not None:
            return self._pnpm_version

        try:
            output = self.runner.run("pnpm", ["--version"]).stdout
        except ProcessError as e:
            vlog(f"pnpm not available: {e}", self.verbose)
            return NO_VERSION

        self._has_pnpm = True
        self._pnpm_version = parse_tool_version(output)
        return self._pnpm_version

    def has_pnpm_version_or_later(self, version: str | Version) -> bool:
        if not isinstance(version, Version):
            version = Version(version)
        return self.pnpm_version() >= version

    def has_pnpm3_or_later(self) -> bool:
        return self.has_pnpm_version_or_later(MIN_PNPM_VERSION)

    def has_project_lock(self, project_dir: str, kind: PackageManagerKind) -> bool:
        """
        Check whether a project is governed by the given package manager.

        Args:
            project_dir: Project directory to inspect (not searched upwards)
            kind: Package manager whose lockfile to look for

        Returns:
            True if the lockfile exists directly under project_dir

        Raises:
            MissingPackageManager: If a yarn or pnpm lockfile exists but the
                matching binary (pnpm >= 3) is not installed
        """
        lockfile = LOCKFILES.get(kind)
        if lockfile is None:
            return False

        if not os.path.exists(os.path.join(project_dir, lockfile)):
            return False

        if kind is PackageManagerKind.YARN and not self.has_yarn():
            raise MissingPackageManager(
                "The project seems to require yarn but it's not installed."
            )

        if kind is PackageManagerKind.PNPM and not self.has_pnpm3_or_later():
            requirement = f"pnpm >= {MIN_PNPM_VERSION[0]}" if self._has_pnpm else "pnpm"
            raise MissingPackageManager(
                f"The project seems to require {requirement} but it's not installed."
            )

        vlog(f"Found {lockfile} in {project_dir}", self.verbose)
        return True
