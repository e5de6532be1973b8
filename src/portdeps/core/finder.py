"""Discover port manifests under a ports directory."""

from __future__ import annotations

import os
from pathlib import Path

import structlog

from portdeps.core.manifest import PackageRecord, parse_control_file

log = structlog.get_logger(__name__)

MANIFEST_NAME = "CONTROL"

# Environment variables consulted when no ports root is given explicitly.
PORTS_ROOT_ENV = "PORTDEPS_PORTS_ROOT"
VCPKG_ROOT_ENV = "VCPKG_ROOT"


def _env_path(env_var: str) -> Path | None:
    """Return the environment variable as a Path, or None if unset/empty."""
    value = os.environ.get(env_var, "").strip()
    if not value:
        return None
    return Path(value).expanduser()


def resolve_ports_root(ports_root: Path | str | None = None) -> Path | None:
    """
    Work out which directory holds the ports.

    Order: explicit argument, PORTDEPS_PORTS_ROOT, VCPKG_ROOT/ports, ./ports.
    Returns None if none of them is an existing directory.
    """
    candidates: list[Path] = []
    if ports_root is not None:
        candidates.append(Path(ports_root).expanduser())
    else:
        env_root = _env_path(PORTS_ROOT_ENV)
        if env_root is not None:
            candidates.append(env_root)
        vcpkg_root = _env_path(VCPKG_ROOT_ENV)
        if vcpkg_root is not None:
            candidates.append(vcpkg_root / "ports")
        candidates.append(Path.cwd() / "ports")
    for candidate in candidates:
        if candidate.is_dir():
            return candidate.resolve()
    return None


def list_port_paths(ports_root: Path) -> dict[str, Path]:
    """
    Map each port directory name to its CONTROL file.

    Directories without a CONTROL file are ignored. Keys are sorted.
    """
    paths: dict[str, Path] = {}
    if not ports_root.is_dir():
        return paths
    try:
        children = sorted(ports_root.iterdir(), key=lambda p: p.name)
    except PermissionError:
        return paths
    for child in children:
        if not child.is_dir() or child.name.startswith("."):
            continue
        control = child / MANIFEST_NAME
        if control.is_file():
            paths[child.name] = control
    return paths


def load_all_ports(ports_root: Path) -> list[PackageRecord]:
    """
    Parse every port under ports_root, in directory-name order.

    Manifests that cannot be parsed are skipped with a warning.
    """
    records: list[PackageRecord] = []
    for dir_name, control in list_port_paths(ports_root).items():
        record = parse_control_file(control)
        if record is None:
            log.warning("port_skipped", port=dir_name, path=str(control))
            continue
        records.append(record)
    log.debug("ports_loaded", root=str(ports_root), count=len(records))
    return records
