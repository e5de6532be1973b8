"""Core library: manifest parsing, port discovery, closure building, graph rendering."""

from portdeps.core.closure import build_closure, index_catalog
from portdeps.core.finder import list_port_paths, load_all_ports, resolve_ports_root
from portdeps.core.graph import GraphEntry, entries_from_catalog, entries_from_closure
from portdeps.core.manifest import (
    Dependency,
    FeatureParagraph,
    PackageRecord,
    parse_control_file,
    parse_control_text,
)
from portdeps.core.render import OutputFormat, render, select_format

__all__ = [
    "build_closure",
    "index_catalog",
    "list_port_paths",
    "load_all_ports",
    "resolve_ports_root",
    "GraphEntry",
    "entries_from_catalog",
    "entries_from_closure",
    "Dependency",
    "FeatureParagraph",
    "PackageRecord",
    "parse_control_file",
    "parse_control_text",
    "OutputFormat",
    "render",
    "select_format",
]
