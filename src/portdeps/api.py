"""Public API: use portdeps from Python or from other tools."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path

from portdeps.core.closure import build_closure, index_catalog
from portdeps.core.finder import list_port_paths, load_all_ports, resolve_ports_root
from portdeps.core.graph import entries_from_catalog, entries_from_closure
from portdeps.core.manifest import PackageRecord
from portdeps.core.render import OutputFormat, render

__all__ = [
    "build_closure",
    "depend_info",
    "get_package_info",
    "list_known_ports",
    "load_catalog",
    "OutputFormat",
]


def load_catalog(ports_root: Path | str | None = None) -> list[PackageRecord]:
    """
    Load every port manifest under the ports root.

    The root is resolved from the argument, PORTDEPS_PORTS_ROOT or
    VCPKG_ROOT/ports. Returns an empty list if no ports root can be found.
    """
    root = resolve_ports_root(ports_root)
    if root is None:
        return []
    return load_all_ports(root)


def list_known_ports(ports_root: Path | str | None = None) -> dict[str, Path]:
    """Map port name to the path of its CONTROL file."""
    root = resolve_ports_root(ports_root)
    if root is None:
        return {}
    return list_port_paths(root)


def get_package_info(
    catalog: Sequence[PackageRecord],
    name: str,
) -> PackageRecord | None:
    """Return the first record named name, or None."""
    return index_catalog(catalog).get(name)


def depend_info(
    catalog: Sequence[PackageRecord],
    root_names: Iterable[str] = (),
    *,
    fmt: OutputFormat | str = OutputFormat.PLAIN,
    include_features: bool | None = None,
) -> str:
    """
    Render the dependencies of root_names (or of every port) as text.

    Args:
        catalog: Package records, usually from load_catalog().
        root_names: Ports to start from. Empty means the whole catalog,
            unfiltered.
        fmt: Output format (plain, dot or dgml).
        include_features: Whether feature dependencies become DGML links.
            None means yes for the whole catalog, no for a filtered closure.

    Returns:
        The rendered graph as a single string.
    """
    roots = list(root_names)
    if not roots:
        features = True if include_features is None else include_features
        entries = entries_from_catalog(catalog, include_features=features)
    else:
        closure = build_closure(catalog, roots)
        entries = entries_from_closure(closure, catalog, include_features=bool(include_features))
    return render(fmt, entries)
