"""
Upgrade notification: version comparison and notice generation.

Compares the running version with the registry's dist-tags and builds the
notice shown by the host CLI, including the command to upgrade with.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, replace

import semantic_version

from .common import vlog
from .config import NotifierConfig
from .detection import detect_global_install_command
from .package_managers import ProjectPackageManager
from .render import boxed, render_title, render_upgrade_message


@dataclass(frozen=True)
class UpgradeDecision:
    """
    Result of comparing the running version with the registry.

    Attributes:
        current_version: Version currently running
        latest_version: Newest applicable published version (None if unknown)
        includes_prerelease: Whether the prerelease dist-tag was consulted
        upgrade_command: Global install command prefix (e.g., "npm i -g")
        package_name: Package the notice is about
        prerelease_tag: Dist-tag appended to the package when latest is a prerelease
    """
    current_version: str
    latest_version: str | None
    includes_prerelease: bool
    upgrade_command: str | None = None
    package_name: str = ""
    prerelease_tag: str = "next"

    @property
    def upgrade_available(self) -> bool:
        return self.latest_version is not None and compare_versions(self.current_version, self.latest_version) < 0

    @property
    def package_spec(self) -> str:
        """Package argument for the upgrade command, tagged when latest is a prerelease."""
        if self.latest_version and is_prerelease(self.latest_version):
            return f"{self.package_name}@{self.prerelease_tag}"
        return self.package_name

    @property
    def command_line(self) -> str | None:
        if not self.upgrade_command:
            return None
        return f"{self.upgrade_command} {self.package_spec}"


def compare_versions(v1: str, v2: str) -> int:
    """
    Compare two semantic versions.

    Args:
        v1: First version
        v2: Second version

    Returns:
        -1 if v1 < v2, 0 if v1 == v2, 1 if v1 > v2

    Raises:
        ValueError: If either version is not valid semver
    """
    ver1 = semantic_version.Version(str(v1))
    ver2 = semantic_version.Version(str(v2))
    if ver1 < ver2:
        return -1
    elif ver1 > ver2:
        return 1
    else:
        return 0


def is_prerelease(version: str) -> bool:
    """Check whether a semantic version carries a prerelease label."""
    return bool(semantic_version.Version(str(version)).prerelease)


def default_install_path() -> str:
    """Directory of the running program, used to spot its global install."""
    return os.path.dirname(os.path.realpath(sys.argv[0] or "."))


def get_latest_version(
    pm: ProjectPackageManager,
    package_name: str,
    include_prerelease: bool = False,
    prerelease_tag: str = "next",
    verbose: bool = False,
) -> str | None:
    """
    Query the registry for the newest applicable version.

    Args:
        pm: Package manager used for registry access
        package_name: Package to look up
        include_prerelease: Also consult the prerelease dist-tag
        prerelease_tag: Dist-tag holding prereleases
        verbose: Enable verbose logging

    Returns:
        "latest", or the prerelease tag's version when strictly greater;
        None if neither resolves
    """
    version = pm.get_remote_version(package_name, "latest")
    vlog(f"{package_name}@latest: {version}", verbose)

    if include_prerelease:
        prerelease = pm.get_remote_version(package_name, prerelease_tag)
        vlog(f"{package_name}@{prerelease_tag}: {prerelease}", verbose)
        if prerelease is not None and (version is None or compare_versions(prerelease, version) > 0):
            version = prerelease

    return version


def check_for_upgrade(
    package_name: str,
    current_version: str,
    pm: ProjectPackageManager | None = None,
    install_path: str | None = None,
    config: NotifierConfig | None = None,
    verbose: bool = False,
) -> UpgradeDecision:
    """
    Decide whether an upgrade notice should be shown.

    Registry and configuration failures propagate; failing to detect the
    install command does not and only leaves upgrade_command unset.

    Args:
        package_name: Package the running tool was installed from
        current_version: Running version
        pm: Package manager for registry access (resolved if omitted)
        install_path: Install directory of the running tool
        config: Notifier configuration
        verbose: Enable verbose logging

    Returns:
        UpgradeDecision for this invocation
    """
    config = config or NotifierConfig()
    pm = pm or ProjectPackageManager(config=config, verbose=verbose)

    include_prerelease = is_prerelease(current_version)
    latest = get_latest_version(
        pm,
        package_name,
        include_prerelease=include_prerelease,
        prerelease_tag=config.prerelease_tag,
        verbose=verbose,
    )

    decision = UpgradeDecision(
        current_version=str(current_version),
        latest_version=latest,
        includes_prerelease=include_prerelease,
        package_name=package_name,
        prerelease_tag=config.prerelease_tag,
    )
    if not decision.upgrade_available:
        return decision

    result = detect_global_install_command(
        install_path or default_install_path(),
        probe=pm.probe,
        runner=pm.runner,
        pnpm_global_marker=config.pnpm_global_marker,
        verbose=verbose,
    )
    if not result.ok:
        # Not knowing the command only drops the "Run ..." line
        vlog(f"Could not determine global install command: {result.error}", verbose)
        return decision

    return replace(decision, upgrade_command=result.command)


def format_notice(command_name: str, decision: UpgradeDecision, use_color: bool | None = None) -> str:
    """
    Render the title and, when an upgrade is available, the boxed notice.

    Args:
        command_name: Display name of the host CLI
        decision: Outcome of check_for_upgrade
        use_color: Override the CLI_NOTIFY_COLOR setting

    Returns:
        Multi-line text for the host CLI to print
    """
    title = render_title(command_name, decision.current_version, use_color)
    if not decision.upgrade_available:
        return title

    message = render_upgrade_message(
        decision.current_version,
        decision.latest_version,
        decision.command_line,
        use_color,
    )
    return f"{title}\n{boxed(message, use_color=use_color)}\n"


def generate_title(
    command_name: str,
    current_version: str,
    package_name: str,
    pm: ProjectPackageManager | None = None,
    install_path: str | None = None,
    config: NotifierConfig | None = None,
    verbose: bool = False,
) -> str:
    """
    Build the CLI banner, with an upgrade notice when a newer version exists.

    Args:
        command_name: Display name of the host CLI
        current_version: Running version
        package_name: Package the tool was installed from
        pm: Package manager for registry access (resolved if omitted)
        install_path: Install directory of the running tool
        config: Notifier configuration
        verbose: Enable verbose logging

    Returns:
        Title line, followed by the boxed notice if an upgrade is available
    """
    config = config or NotifierConfig()
    decision = check_for_upgrade(
        package_name,
        current_version,
        pm=pm,
        install_path=install_path,
        config=config,
        verbose=verbose,
    )
    return format_notice(command_name, decision, use_color=None if config.color else False)
