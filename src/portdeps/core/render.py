"""Render graph entries as plain text, DOT or DGML."""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from xml.sax.saxutils import escape

from portdeps.core.graph import GraphEntry

DOT_HEADER = "digraph G{ rankdir=LR; edge [minlen=3]; overlap=false;"
DGML_HEADER = '<?xml version="1.0" encoding="utf-8"?>'
DGML_NAMESPACE = "http://schemas.microsoft.com/vs/2009/dgml"


class OutputFormat(str, Enum):
    """Supported output grammars."""

    PLAIN = "plain"
    DOT = "dot"
    DGML = "dgml"


def select_format(dot: bool = False, dgml: bool = False) -> OutputFormat:
    """Pick the output format from the two graph switches. DOT wins if both are set."""
    if dot:
        return OutputFormat.DOT
    if dgml:
        return OutputFormat.DGML
    return OutputFormat.PLAIN


def sanitize_dot_id(name: str) -> str:
    """DOT bare identifiers may not contain '-'; replace it with '_'."""
    return name.replace("-", "_")


def _xml_attr(value: str) -> str:
    return escape(value, {'"': "&quot;"})


def render_plain(entries: Sequence[GraphEntry]) -> str:
    """One "name: dep1, dep2" line per entry."""
    return "\n".join(f"{e.name}: {', '.join(e.dependencies)}" for e in entries)


def render_dot(entries: Sequence[GraphEntry]) -> str:
    """
    Render a compact DOT digraph.

    Entries without dependencies are not drawn; they are counted into a
    single "N singletons..." node instead.
    """
    parts = [DOT_HEADER]
    empty_count = 0
    for entry in entries:
        if not entry.dependencies:
            empty_count += 1
            continue
        name = sanitize_dot_id(entry.name)
        parts.append(f"{name};")
        for dep in entry.dependencies:
            parts.append(f"{name} -> {sanitize_dot_id(dep)};")
    parts.append(f'empty [label="{empty_count} singletons..."]; }}')
    return "".join(parts)


def render_dgml(entries: Sequence[GraphEntry]) -> str:
    """
    Render a DGML (Directed Graph Markup Language) document.

    Every entry becomes a node; links cover core then feature dependencies.
    Names are written as-is apart from XML attribute escaping.
    """
    nodes: list[str] = []
    links: list[str] = []
    for entry in entries:
        nodes.append(f'<Node Id="{_xml_attr(entry.name)}" />')
        for source, target in entry.edges():
            links.append(f'<Link Source="{_xml_attr(source)}" Target="{_xml_attr(target)}" />')
    return (
        f"{DGML_HEADER}"
        f'<DirectedGraph xmlns="{DGML_NAMESPACE}">'
        f"<Nodes>{''.join(nodes)}</Nodes>"
        f"<Links>{''.join(links)}</Links>"
        "</DirectedGraph>"
    )


_RENDERERS = {
    OutputFormat.PLAIN: render_plain,
    OutputFormat.DOT: render_dot,
    OutputFormat.DGML: render_dgml,
}


def render(fmt: OutputFormat | str, entries: Sequence[GraphEntry]) -> str:
    """Render entries in the given format."""
    return _RENDERERS[OutputFormat(fmt)](entries)
