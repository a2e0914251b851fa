"""
Project package manager resolution and registry lookups.

Picks the package manager governing a project (or the machine) and answers
registry questions through it:

1. Explicitly forced package manager - highest priority
2. Project lockfile (yarn.lock, pnpm-lock.yaml, package-lock.json)
3. Installed binaries (yarn, then pnpm >= 3, then npm) - fallback
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any, Sequence

from packaging.version import Version

from .common import vlog
from .config import NotifierConfig
from .environment import (
    EnvironmentProbe,
    MissingPackageManager,
    PackageManagerKind,
    parse_tool_version,
)
from .npmrc import auth_token_key, load_npmrc_layers, npmrc_locations
from .process import ProcessError, ProcessRunner
from .registry import (
    ABBREVIATED_METADATA_ACCEPT,
    NetworkError,
    extract_package_scope,
    http_get_json,
    max_satisfying,
    published_versions,
)

logger = logging.getLogger(__name__)

SUPPORTED_PACKAGE_MANAGERS = (
    PackageManagerKind.YARN,
    PackageManagerKind.PNPM,
    PackageManagerKind.NPM,
)

# npm doesn't support package aliases until v6.9
MIN_SUPPORTED_NPM_VERSION = Version("6.9.0")
# npm 7 installs peer dependencies by default
NPM_PEER_DEPS_VERSION = Version("7.0.0")

# Config keys that replace "registry" in some dialects (yarn 2+)
ALTERNATE_REGISTRY_KEYS = {
    PackageManagerKind.YARN: "npmRegistryServer",
}


class RegistryLookupError(Exception):
    """Raised when no registry URL can be determined."""
    pass


class MetadataFetchError(Exception):
    """Raised when package metadata cannot be fetched from the registry."""
    pass


def registry_from_argv(argv: Sequence[str], verbose: bool = False) -> str | None:
    """
    Read a --registry / -r override from the host CLI's arguments.

    ``-r``/``--registry`` followed by another option (or nothing) and an
    empty ``--registry=`` carry no value; they are skipped and resolution
    falls through to the package manager config.

    Args:
        argv: Argument vector of the invoking process
        verbose: Enable verbose logging

    Returns:
        Registry URL (the last usable occurrence wins), or None
    """
    registry = None
    args = list(argv)
    for i, arg in enumerate(args):
        if arg.startswith("--registry="):
            value = arg.split("=", 1)[1]
            if value:
                registry = value
            else:
                vlog("Ignoring empty --registry= argument", verbose)
        elif arg in ("-r", "--registry"):
            if i + 1 < len(args) and not args[i + 1].startswith("-"):
                registry = args[i + 1]
            else:
                vlog(f"Ignoring {arg} without a registry URL", verbose)
    return registry


def _is_unset(value: str | None) -> bool:
    return not value or value == "undefined"


class ProjectPackageManager:
    """
    Package manager governing a project, resolved once per CLI invocation.

    Attributes:
        context: Project directory (defaults to the working directory)
        bin: Binary name that was resolved, possibly an unsupported one
        kind: PackageManagerKind of bin (OTHER when unsupported)
        needs_npm_install_fix: npm is older than 6.9.0
        needs_peer_deps_fix: npm is 7.0.0 or newer
    """

    def __init__(
        self,
        context: str | None = None,
        force_package_manager: str | PackageManagerKind | None = None,
        *,
        probe: EnvironmentProbe | None = None,
        runner: ProcessRunner | None = None,
        argv: Sequence[str] | None = None,
        config: NotifierConfig | None = None,
        verbose: bool = False,
    ):
        self.context = context or os.getcwd()
        self.probe = probe or EnvironmentProbe(runner=runner, verbose=verbose)
        self.runner = runner or self.probe.runner
        self.argv = list(sys.argv if argv is None else argv)
        self.config = config or NotifierConfig()
        self.verbose = verbose

        self._registry = ""
        self.needs_npm_install_fix = False
        self.needs_peer_deps_fix = False

        if force_package_manager is None:
            force_package_manager = self.config.package_manager

        self.bin = self._resolve_bin(context, force_package_manager)
        self.kind = PackageManagerKind.from_name(self.bin)
        vlog(f"Using package manager: {self.bin}", verbose)

        if self.kind is PackageManagerKind.NPM:
            self._check_npm_version()

        if self.kind not in SUPPORTED_PACKAGE_MANAGERS:
            logger.warning(
                f"The package manager {self.bin} is not officially supported. "
                "It will be treated like npm, but compatibility issues may occur. "
                "See if you can use --registry instead."
            )

    def _resolve_bin(
        self,
        context: str | None,
        forced: str | PackageManagerKind | None,
    ) -> str:
        if isinstance(forced, PackageManagerKind):
            return forced.value
        if forced:
            return forced

        if context:
            for kind in SUPPORTED_PACKAGE_MANAGERS:
                if self.probe.has_project_lock(context, kind):
                    return kind.value

        if self.probe.has_yarn():
            return PackageManagerKind.YARN.value
        if self.probe.has_pnpm3_or_later():
            return PackageManagerKind.PNPM.value
        return PackageManagerKind.NPM.value

    def _check_npm_version(self) -> None:
        try:
            output = self.runner.run("npm", ["--version"]).stdout
        except ProcessError as e:
            raise MissingPackageManager("npm is required but could not be run.") from e

        npm_version = parse_tool_version(output)
        vlog(f"npm version: {npm_version}", self.verbose)

        if npm_version < MIN_SUPPORTED_NPM_VERSION:
            logger.warning(
                "You are using an outdated version of NPM. "
                "There may be unexpected errors during installation. "
                "Please upgrade your NPM version."
            )
            self.needs_npm_install_fix = True

        if npm_version >= NPM_PEER_DEPS_VERSION:
            self.needs_peer_deps_fix = True

    @property
    def config_bin(self) -> str:
        """Binary used for config queries; unsupported managers fall back to npm."""
        if self.kind in SUPPORTED_PACKAGE_MANAGERS:
            return self.bin
        return PackageManagerKind.NPM.value

    def _config_get(self, key: str) -> str:
        return self.runner.run(self.config_bin, ["config", "get", key]).stdout

    def get_registry(self, scope: str | None = None) -> str:
        """
        Get the registry URL, resolving it on first call only.

        Resolution order:
        1. --registry / -r in the host CLI's arguments
        2. "<scope>:registry" config (when a scope is given)
        3. "registry" config
        4. Dialect-specific key (yarn 2+: npmRegistryServer)

        Args:
            scope: Package scope such as "@babel"

        Returns:
            Registry URL; later calls return the same value whatever the scope

        Raises:
            RegistryLookupError: If no source yields a registry
        """
        if self._registry:
            return self._registry

        registry = registry_from_argv(self.argv, self.verbose)
        if registry is None:
            registry = self._registry_from_config(scope)

        registry = registry.strip()
        if _is_unset(registry):
            raise RegistryLookupError(f"{self.config_bin} reported no registry")

        self._registry = registry
        vlog(f"Resolved registry: {registry}", self.verbose)
        return registry

    def _registry_from_config(self, scope: str | None) -> str:
        registry = None
        failure: ProcessError | None = None
        try:
            if scope:
                registry = self._config_get(f"{scope}:registry")
            if _is_unset(registry):
                registry = self._config_get("registry")
        except ProcessError as e:
            failure = e

        if not _is_unset(registry):
            return registry

        alternate = ALTERNATE_REGISTRY_KEYS.get(self.kind)
        if alternate is None:
            raise RegistryLookupError(f"Could not determine registry via {self.config_bin}") from failure

        try:
            return self._config_get(alternate)
        except ProcessError as e:
            raise RegistryLookupError(f"Could not determine registry via {self.config_bin}") from e

    def get_auth_token(self, scope: str | None = None) -> str | None:
        """
        Get the auth token for the registry from .npmrc files.

        The project .npmrc takes precedence over ~/.npmrc.

        Args:
            scope: Package scope used to resolve the registry

        Returns:
            Token string, or None if no credential file has one
        """
        npm_config = load_npmrc_layers(npmrc_locations(self.context))
        registry = self.get_registry(scope)
        return npm_config.get(auth_token_key(registry))

    def get_metadata(self, package_name: str, full: bool = False) -> dict[str, Any]:
        """
        Fetch a package's metadata document from the registry.

        Args:
            package_name: Package name, optionally scoped ("@scope/name")
            full: Request the full packument instead of the abbreviated one

        Returns:
            Decoded metadata document

        Raises:
            RegistryLookupError: If the registry cannot be determined
            MetadataFetchError: If the request fails or the registry reports an error
        """
        scope = extract_package_scope(package_name)
        registry = self.get_registry(scope)

        headers: dict[str, str] = {}
        if not full:
            headers["Accept"] = ABBREVIATED_METADATA_ACCEPT

        auth_token = self.get_auth_token(scope)
        if auth_token:
            headers["Authorization"] = f"Bearer {auth_token}"

        url = f"{registry.rstrip('/')}/{package_name}"
        try:
            metadata = http_get_json(url, timeout=self.config.registry_timeout_seconds, headers=headers)
        except NetworkError as e:
            logger.error(f"Failed to get response from {url}")
            raise MetadataFetchError(str(e)) from e

        if not isinstance(metadata, dict) or metadata.get("error"):
            logger.error(f"Failed to get response from {url}")
            reason = metadata.get("error") if isinstance(metadata, dict) else "unexpected response body"
            raise MetadataFetchError(f"{url}: {reason}")

        return metadata

    def get_remote_version(self, package_name: str, version_range: str = "latest") -> str | None:
        """
        Resolve a dist-tag or npm range to a published version.

        A dist-tag name is answered directly from "dist-tags" without any
        range matching.

        Args:
            package_name: Package name
            version_range: Dist-tag ("latest", "next", ...) or npm range

        Returns:
            Version string, or None if no published version satisfies the range
        """
        metadata = self.get_metadata(package_name)
        dist_tags = metadata.get("dist-tags") or {}
        if version_range in dist_tags:
            return dist_tags[version_range]

        return max_satisfying(published_versions(metadata), version_range)
