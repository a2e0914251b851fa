"""
cli_notify - Upgrade notices for npm-distributed command-line tools.

Core Modules:
- Environment: yarn/pnpm/npm presence and project lockfile detection
- Package managers: project package manager resolution, registry and auth lookups
- Detection: which package manager owns the running tool's global install
- Upgrade: latest/prerelease version comparison and notice rendering
"""

__version__ = "1.0.0"
__author__ = "cli-notify Contributors"

VERSION = __version__

from .process import ProcessError, ProcessResult, ProcessRunner, SubprocessRunner
from .environment import (
    EnvironmentProbe,
    MissingPackageManager,
    PackageManagerKind,
    LOCKFILES,
)
from .config import NotifierConfig, load_config, load_config_file
from .npmrc import load_npmrc_layers, parse_npmrc, auth_token_key
from .registry import NetworkError, extract_package_scope, max_satisfying
from .package_managers import (
    ProjectPackageManager,
    RegistryLookupError,
    MetadataFetchError,
    registry_from_argv,
)
from .detection import (
    InstallCommandResult,
    get_global_install_command,
    detect_global_install_command,
)
from .upgrade import (
    UpgradeDecision,
    compare_versions,
    is_prerelease,
    get_latest_version,
    check_for_upgrade,
    format_notice,
    generate_title,
)
from .logging_config import setup_logging, get_logger

__all__ = [
    "__version__",
    "VERSION",
    # Process
    "ProcessError",
    "ProcessResult",
    "ProcessRunner",
    "SubprocessRunner",
    # Environment
    "EnvironmentProbe",
    "MissingPackageManager",
    "PackageManagerKind",
    "LOCKFILES",
    # Config
    "NotifierConfig",
    "load_config",
    "load_config_file",
    # Credentials and registry
    "load_npmrc_layers",
    "parse_npmrc",
    "auth_token_key",
    "NetworkError",
    "extract_package_scope",
    "max_satisfying",
    # Package managers
    "ProjectPackageManager",
    "RegistryLookupError",
    "MetadataFetchError",
    "registry_from_argv",
    # Detection
    "InstallCommandResult",
    "get_global_install_command",
    "detect_global_install_command",
    # Upgrade
    "UpgradeDecision",
    "compare_versions",
    "is_prerelease",
    "get_latest_version",
    "check_for_upgrade",
    "format_notice",
    "generate_title",
    # Logging
    "setup_logging",
    "get_logger",
]
