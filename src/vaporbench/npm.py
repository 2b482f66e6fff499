"""npm package metadata and installation for the subject library.

Covers reading the installed subject version from ``package.json``,
listing published versions from the npm registry, and installing an
exact version into the example project.
"""

from __future__ import annotations

import json
import shlex
import subprocess
from typing import Any

import requests

from vaporbench import __version__
from vaporbench.config import BenchConfig
from vaporbench.logging import get_logger

log = get_logger("npm")

_USER_AGENT = f"vaporbench/{__version__}"

UNKNOWN_VERSION = "unknown"


def read_subject_version(config: BenchConfig) -> str:
    """Return the subject library version declared in ``package.json``.

    Range markers (``^``, ``~``) are stripped.  Any failure to read or
    interpret the manifest yields ``"unknown"``.
    """
    try:
        manifest = json.loads(config.package_json.read_text(encoding="utf-8"))
        spec = manifest["dependencies"][config.subject_package]
        return str(spec).replace("^", "").replace("~", "")
    except (OSError, ValueError, KeyError, TypeError) as exc:
        log.warning("Could not determine %s version: %s", config.subject_package, exc)
        return UNKNOWN_VERSION


def fetch_registry_metadata(
    package_name: str,
    *,
    registry_url: str = "https://registry.npmjs.org/{name}",
    timeout: float = 30.0,
) -> dict[str, Any] | None:
    """Fetch a package document from the npm registry.

    Args:
        package_name: The name of the package on npm.
        registry_url: URL template with a ``{name}`` placeholder.
        timeout: HTTP request timeout in seconds.

    Returns:
        The parsed JSON document, or ``None`` on failure.
    """
    url = registry_url.format(name=package_name)
    try:
        resp = requests.get(
            url,
            timeout=timeout,
            headers={"User-Agent": _USER_AGENT, "Accept": "application/json"},
        )
    except requests.ConnectionError:
        log.error("Connection error fetching %s", url)
        return None
    except requests.Timeout:
        log.error("Timeout fetching %s", url)
        return None
    except requests.RequestException as exc:
        log.error("Request error fetching %s: %s", url, exc)
        return None

    if resp.status_code == 404:
        log.warning("Package %s not found in registry (404)", package_name)
        return None
    if resp.status_code != 200:
        log.warning("Registry returned %d for %s", resp.status_code, package_name)
        return None

    try:
        data = resp.json()
    except (ValueError, requests.JSONDecodeError):
        log.error("Invalid JSON response for %s", package_name)
        return None
    if not isinstance(data, dict):
        log.error("Unexpected registry document for %s", package_name)
        return None
    return data


def published_versions(metadata: dict[str, Any]) -> list[str]:
    """Return every published version listed in a registry document."""
    versions = metadata.get("versions", {})
    if isinstance(versions, dict):
        return list(versions)
    if isinstance(versions, list):
        return [str(v) for v in versions]
    return []


def install_version(config: BenchConfig, version: str) -> None:
    """Install *version* of the subject library into the project.

    Raises:
        subprocess.CalledProcessError: If the install command fails.
    """
    cmd = [*shlex.split(config.install_command), f"{config.subject_package}@{version}"]
    log.info("Installing %s@%s...", config.subject_package, version)
    log.debug("Running: %s (in %s)", shlex.join(cmd), config.root)
    subprocess.run(cmd, cwd=str(config.root), check=True)
