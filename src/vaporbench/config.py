"""Benchmark configuration and profile loading.

Handles:
- Default paths and commands for the example project layout.
- Loading overrides from a YAML profile (``vaporbench.yaml``).
- Validating the final configuration before a run touches any file.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from vaporbench.build import MODE_INSPECT
from vaporbench.logging import get_logger

log = get_logger("config")

PROFILE_NAME = "vaporbench.yaml"


# ---------------------------------------------------------------------------
# BenchConfig
# ---------------------------------------------------------------------------


@dataclass
class BenchConfig:
    """Resolved configuration for a benchmark or backfill run.

    Path fields are relative to ``root`` unless absolute.
    """

    root: Path = field(default_factory=Path.cwd)

    # Build output and persisted results
    dist_dir: str = "dist"
    artifacts_dir: str = "benchmark/artifacts"
    history_file: str = "benchmark/results/build-history.json"
    report_file: str = "benchmark/artifacts/report.md"

    # Sources rewritten for the classic build
    entry_file: str = "example/src/main.ts"
    component_files: list[str] = field(
        default_factory=lambda: [
            "example/src/App.vue",
            "example/src/components/HelloWorld.vue",
        ]
    )

    # External commands
    build_command: str = "npm run build:ship"
    inspect_build_command: str = "npm run build"
    install_command: str = "npm install"

    # Subject library and registry
    subject_package: str = "vue"
    version_prefix: str = "3.6.0-alpha"
    registry_url: str = "https://registry.npmjs.org/{name}"
    timeout: float = 30.0  # Registry HTTP timeout in seconds

    def path(self, rel: str) -> Path:
        """Resolve *rel* against the project root."""
        return self.root / rel

    @property
    def tracked_files(self) -> list[str]:
        """Every source file the classic transform may rewrite."""
        return [self.entry_file, *self.component_files]

    @property
    def dist_path(self) -> Path:
        return self.path(self.dist_dir)

    @property
    def vapor_dir(self) -> Path:
        return self.path(self.artifacts_dir) / "vapor"

    @property
    def classic_dir(self) -> Path:
        return self.path(self.artifacts_dir) / "classic"

    @property
    def history_path(self) -> Path:
        return self.path(self.history_file)

    @property
    def report_path(self) -> Path:
        return self.path(self.report_file)

    @property
    def package_json(self) -> Path:
        return self.root / "package.json"

    def build_command_for(self, mode: str) -> str:
        """Select the build command: readable output for inspection runs."""
        return self.inspect_build_command if mode == MODE_INSPECT else self.build_command

    def relative(self, path: Path) -> str:
        """Show *path* relative to the project root when possible."""
        try:
            return str(path.relative_to(self.root))
        except ValueError:
            return str(path)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


@dataclass
class ValidationError:
    """A single configuration validation error."""

    field: str
    message: str
    severity: str = "error"  # "error" or "warning"


def validate_config(config: BenchConfig) -> list[ValidationError]:
    """Validate a benchmark configuration.

    Returns a list of validation errors.  Empty list means valid.
    """
    errors: list[ValidationError] = []

    if not config.root.is_dir():
        errors.append(
            ValidationError(
                field="root",
                message=f"Project root does not exist: {config.root}",
            )
        )
        return errors

    for rel in config.tracked_files:
        if not config.path(rel).is_file():
            errors.append(
                ValidationError(
                    field="tracked_files",
                    message=f"Tracked source file not found: {rel}",
                )
            )

    for name in ("build_command", "inspect_build_command"):
        if not getattr(config, name).strip():
            errors.append(ValidationError(field=name, message=f"{name} must not be empty."))

    if not config.package_json.is_file():
        errors.append(
            ValidationError(
                field="package_json",
                message=(
                    f"No package.json in {config.root}; "
                    f"the {config.subject_package} version will be recorded as 'unknown'."
                ),
                severity="warning",
            )
        )

    return errors


# ---------------------------------------------------------------------------
# YAML profile loading
# ---------------------------------------------------------------------------


def load_profile(profile_path: Path) -> dict[str, Any]:
    """Load configuration overrides from a YAML file.

    Profile format::

        build_command: "npm run build:ship"
        inspect_build_command: "npm run build"
        entry_file: "example/src/main.ts"
        component_files:
          - "example/src/App.vue"
        subject_package: "vue"
        version_prefix: "3.6.0-alpha"

    An empty file is treated as an empty mapping.

    Raises:
        FileNotFoundError: If the profile does not exist.
        ValueError: If the YAML is malformed or the document is not a mapping.
    """
    if not profile_path.exists():
        raise FileNotFoundError(f"Profile not found: {profile_path}")

    try:
        data = yaml.safe_load(profile_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {profile_path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Profile must be a YAML mapping, got {type(data).__name__}")
    return data


def config_from_profile(profile_data: dict[str, Any], *, root: Path) -> BenchConfig:
    """Build a BenchConfig from parsed profile data.

    Keys that are not BenchConfig fields are ignored with a warning.
    """
    known = {f.name for f in fields(BenchConfig)} - {"root"}
    overrides: dict[str, Any] = {}
    for key, value in profile_data.items():
        if key not in known:
            log.warning("Ignoring unknown profile key: %s", key)
            continue
        overrides[key] = value

    component_files = overrides.get("component_files")
    if component_files is not None and not isinstance(component_files, list):
        raise ValueError("Profile 'component_files' must be a list of paths")

    return BenchConfig(root=root, **overrides)


def load_config(root: Path, profile_path: Path | None = None) -> BenchConfig:
    """Resolve the configuration for the project at *root*.

    Uses *profile_path* if given, else ``root/vaporbench.yaml`` when it
    exists, else the built-in defaults.
    """
    root = root.resolve()
    if profile_path is None:
        candidate = root / PROFILE_NAME
        if candidate.is_file():
            profile_path = candidate
    if profile_path is None:
        return BenchConfig(root=root)
    log.debug("Loading profile %s", profile_path)
    return config_from_profile(load_profile(profile_path), root=root)
