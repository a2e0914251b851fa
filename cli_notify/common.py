"""
Common utilities shared across cli_notify modules.
"""

from __future__ import annotations

import os
import re
import sys

ANSI_ESCAPE_RE = re.compile(r'\x1b\[[0-9;]*m|\033\[[0-9;]*m')


def strip_ansi(text: str) -> str:
    """Remove ANSI color sequences from a string."""
    return ANSI_ESCAPE_RE.sub('', text)


def is_ci_environment() -> bool:
    """
    Check if running in a CI/CD environment.

    Returns:
        True if CI indicators are present, False otherwise.
    """
    ci_indicators = [
        "CI",
        "CONTINUOUS_INTEGRATION",
        "GITHUB_ACTIONS",
        "GITLAB_CI",
        "CIRCLECI",
        "TRAVIS",
        "JENKINS_HOME",
        "BUILDKITE",
        "DRONE",
        "TF_BUILD",  # Azure Pipelines
    ]
    return any(os.environ.get(var) for var in ci_indicators)


def is_check_disabled() -> bool:
    """Check whether the user opted out of version checks via environment."""
    return os.environ.get("CLI_NOTIFY_DISABLE", "0") == "1"


def vlog(msg: str, verbose: bool = False) -> None:
    """
    Log verbose message using structured logging.

    Args:
        msg: Message to log
        verbose: Whether verbose mode is enabled
    """
    if verbose or os.environ.get("CLI_NOTIFY_DEBUG", "0") == "1":
        try:
            from .logging_config import get_logger
            get_logger().info(msg)
        except Exception:
            try:
                print(f"[cli_notify] {msg}", file=sys.stderr)
            except Exception:
                pass
