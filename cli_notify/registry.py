"""
npm registry access: HTTP transport and version selection.

One GET per metadata document; nothing is cached and nothing is retried.
"""

from __future__ import annotations

import json
import logging
import re
import urllib.request
from typing import Any, Iterable

import semantic_version

from . import __version__

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30

USER_AGENT = f"cli-notify/{__version__}"

# Abbreviated "corgi" document, falling back to the full packument
ABBREVIATED_METADATA_ACCEPT = (
    "application/vnd.npm.install-v1+json;q=1.0, application/json;q=0.9, */*;q=0.8"
)

SCOPED_NAME_RE = re.compile(r"^(@[^/]+)/.*$")


class NetworkError(Exception):
    """Raised when network requests fail."""
    pass


def extract_package_scope(package_name: str) -> str | None:
    """Return the "@scope" prefix of a scoped package name, or None."""
    match = SCOPED_NAME_RE.match(package_name)
    return match.group(1) if match else None


def http_get(url: str, timeout: float = DEFAULT_TIMEOUT_SECONDS, headers: dict[str, str] | None = None) -> bytes:
    """Perform HTTP GET request.

    Args:
        url: URL to fetch
        timeout: Timeout in seconds
        headers: Optional HTTP headers

    Returns:
        Response body as bytes

    Raises:
        NetworkError: If request fails
    """
    try:
        default_headers = {"User-Agent": USER_AGENT}
        if headers:
            default_headers.update(headers)

        req = urllib.request.Request(url, headers=default_headers)
        with urllib.request.urlopen(req, timeout=timeout) as response:
            return response.read()
    except Exception as e:
        raise NetworkError(f"Failed to fetch {url}: {e}") from e


def http_get_json(url: str, timeout: float = DEFAULT_TIMEOUT_SECONDS, headers: dict[str, str] | None = None) -> Any:
    """Fetch a URL and decode its body as JSON.

    Raises:
        NetworkError: If the request fails or the body is not JSON
    """
    body = http_get(url, timeout=timeout, headers=headers)
    try:
        return json.loads(body)
    except ValueError as e:
        raise NetworkError(f"Invalid JSON from {url}: {e}") from e


def published_versions(metadata: dict[str, Any]) -> list[str]:
    """List published version strings; "versions" may be a list or a mapping."""
    versions = metadata.get("versions") or []
    if isinstance(versions, dict):
        return list(versions.keys())
    return list(versions)


def max_satisfying(versions: Iterable[str], version_range: str) -> str | None:
    """
    Pick the highest version satisfying an npm range.

    Args:
        versions: Candidate version strings (invalid ones are skipped)
        version_range: npm range such as "^1.2.0", "~2.1", "1.x" or ">=3 <4"

    Returns:
        The highest matching version as a string, or None if nothing matches
        or the range cannot be parsed
    """
    try:
        spec = semantic_version.NpmSpec(version_range)
    except ValueError:
        logger.debug(f"Not a valid npm range: {version_range!r}")
        return None

    candidates = []
    for raw in versions:
        try:
            candidates.append(semantic_version.Version(raw))
        except ValueError:
            continue

    best = spec.select(candidates)
    return str(best) if best is not None else None
