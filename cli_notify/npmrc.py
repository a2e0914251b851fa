"""
Reading npm credential files (.npmrc).

Only top-level ``key=value`` pairs are used. Files are merged as layers:
a key from an earlier layer is never overwritten by a later one, so the
project .npmrc wins over the one in the home directory.
"""

from __future__ import annotations

import configparser
import logging
import os
import re
from typing import Iterable

logger = logging.getLogger(__name__)

NPMRC_FILENAME = ".npmrc"

_ROOT_SECTION = "__root__"
_ENV_REF_RE = re.compile(r"(\\*)\$\{([^}]+)\}")


def npmrc_locations(context: str) -> list[str]:
    """
    Candidate credential files in precedence order.

    Args:
        context: Project directory

    Returns:
        Project .npmrc followed by the user's ~/.npmrc
    """
    return [
        os.path.abspath(os.path.join(context, NPMRC_FILENAME)),
        os.path.abspath(os.path.join(os.path.expanduser("~"), NPMRC_FILENAME)),
    ]


def _expand_env(value: str) -> str:
    # npm substitutes ${VAR} from the environment; "\${VAR}" stays literal
    def replace(match: re.Match) -> str:
        escapes, name = match.group(1), match.group(2)
        if len(escapes) % 2:
            return escapes[1:] + "${" + name + "}"
        return escapes + os.environ.get(name, match.group(0))
    return _ENV_REF_RE.sub(replace, value)


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def parse_npmrc(text: str) -> dict[str, str]:
    """
    Parse .npmrc content into its top-level key/value pairs.

    Args:
        text: File content

    Returns:
        Mapping of keys to (env-expanded) values; keys under [sections] are ignored

    Raises:
        configparser.Error: If the content is not valid INI
    """
    parser = configparser.ConfigParser(
        delimiters=("=",),
        allow_no_value=True,
        comment_prefixes=("#", ";"),
        inline_comment_prefixes=None,
        interpolation=None,
        strict=False,
        default_section="__defaults__",
    )
    # Keys such as "//registry.npmjs.org/:_authToken" are case-sensitive
    parser.optionxform = str
    # npm trims every line; configparser would read indentation as a continuation
    lines = "\n".join(line.strip() for line in text.splitlines())
    parser.read_string(f"[{_ROOT_SECTION}]\n{lines}")

    return {
        key: _expand_env(_unquote(value.strip()))
        for key, value in parser.items(_ROOT_SECTION)
        if value is not None
    }


def load_npmrc_layers(paths: Iterable[str]) -> dict[str, str]:
    """
    Merge credential files, earlier paths taking precedence.

    Missing, unreadable or malformed files are skipped.

    Args:
        paths: Files in precedence order (highest first)

    Returns:
        Merged key/value mapping
    """
    merged: dict[str, str] = {}
    for path in paths:
        if not os.path.isfile(path):
            continue
        try:
            with open(path, "r", encoding="utf-8") as f:
                layer = parse_npmrc(f.read())
        except (OSError, UnicodeDecodeError, configparser.Error) as e:
            logger.debug(f"Skipping unreadable credential file {path}: {e}")
            continue

        for key, value in layer.items():
            if key not in merged:
                merged[key] = value

    return merged


def auth_token_key(registry: str) -> str:
    """
    Build the .npmrc key holding the auth token for a registry.

    Args:
        registry: Registry URL (e.g., "https://registry.npmjs.org")

    Returns:
        Key such as "//registry.npmjs.org/:_authToken"
    """
    without_protocol = re.sub(r"^https?:", "", registry, count=1)
    if not without_protocol.endswith("/"):
        without_protocol += "/"
    return f"{without_protocol}:_authToken"
