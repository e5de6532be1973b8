"""Parse port CONTROL manifests into package records."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import structlog

log = structlog.get_logger(__name__)

# Fields that carry a dependency list, in either the source or a feature paragraph.
DEPENDENCY_FIELDS = ("Build-Depends",)


@dataclass(frozen=True)
class Dependency:
    """A reference to another port, as written in a Build-Depends list."""

    name: str
    features: tuple[str, ...] = ()
    qualifier: str = ""

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class FeatureParagraph:
    """An optional feature of a port and the extra dependencies it pulls in."""

    name: str
    description: str = ""
    dependencies: tuple[Dependency, ...] = ()


@dataclass(frozen=True)
class PackageRecord:
    """Metadata parsed from a CONTROL file."""

    name: str
    version: str = ""
    description: str = ""
    path: Path | None = None
    dependencies: tuple[Dependency, ...] = ()
    features: tuple[FeatureParagraph, ...] = ()

    def dependency_names(self) -> list[str]:
        """Direct dependency names in declared order (duplicates kept)."""
        return [d.name for d in self.dependencies]

    def feature_dependency_names(self) -> list[str]:
        """Dependency names of every feature, feature order then declared order."""
        return [d.name for f in self.features for d in f.dependencies]


def parse_dependency(text: str) -> Dependency:
    """
    Parse a single dependency reference such as ``curl[ssl,http2] (!uwp)``.

    Whitespace around the parts is ignored. A missing feature list or
    qualifier yields an empty tuple or empty string.
    """
    rest = text.strip()
    qualifier = ""
    if rest.endswith(")") and "(" in rest:
        start = rest.rfind("(")
        qualifier = rest[start + 1 : -1].strip()
        rest = rest[:start].strip()
    features: tuple[str, ...] = ()
    if rest.endswith("]") and "[" in rest:
        start = rest.find("[")
        features = tuple(f.strip() for f in rest[start + 1 : -1].split(",") if f.strip())
        rest = rest[:start].strip()
    return Dependency(name=rest, features=features, qualifier=qualifier)


def parse_dependency_list(text: str) -> list[Dependency]:
    """Split a comma-separated Build-Depends value; commas inside [] or () do not split."""
    items: list[str] = []
    depth = 0
    current: list[str] = []
    for ch in text:
        if ch in "[(":
            depth += 1
        elif ch in "])":
            depth = max(depth - 1, 0)
        if ch == "," and depth == 0:
            items.append("".join(current))
            current = []
        else:
            current.append(ch)
    items.append("".join(current))
    return [parse_dependency(item) for item in items if item.strip()]


def _split_paragraphs(text: str) -> list[dict[str, str]]:
    """Split RFC 822-style text into paragraphs of field -> value."""
    paragraphs: list[dict[str, str]] = []
    fields: dict[str, str] = {}
    last_field: str | None = None
    for raw in text.splitlines():
        if raw.startswith("#"):
            continue
        if not raw.strip():
            if fields:
                paragraphs.append(fields)
            fields = {}
            last_field = None
            continue
        if raw[0].isspace() and last_field is not None:
            # Continuation line
            fields[last_field] = f"{fields[last_field]}\n{raw.strip()}"
            continue
        key, sep, value = raw.partition(":")
        if not sep:
            log.debug("control_line_ignored", line=raw)
            continue
        last_field = key.strip()
        fields[last_field] = value.strip()
    if fields:
        paragraphs.append(fields)
    return paragraphs


def _dependencies_of(fields: dict[str, str]) -> tuple[Dependency, ...]:
    deps: list[Dependency] = []
    for key in DEPENDENCY_FIELDS:
        if key in fields:
            deps.extend(parse_dependency_list(fields[key].replace("\n", " ")))
    return tuple(deps)


def parse_control_text(text: str, path: Path | None = None) -> PackageRecord | None:
    """
    Parse the contents of a CONTROL file.

    The first paragraph describes the port itself (Source, Version,
    Description, Build-Depends); every following paragraph with a Feature
    field describes an optional feature. Returns None if no Source field is
    present.
    """
    paragraphs = _split_paragraphs(text)
    if not paragraphs:
        return None
    source = paragraphs[0]
    name = source.get("Source", "").strip()
    if not name:
        return None

    features: list[FeatureParagraph] = []
    for para in paragraphs[1:]:
        feature_name = para.get("Feature", "").strip()
        if not feature_name:
            continue
        features.append(
            FeatureParagraph(
                name=feature_name,
                description=para.get("Description", ""),
                dependencies=_dependencies_of(para),
            )
        )

    return PackageRecord(
        name=name,
        version=source.get("Version", ""),
        description=source.get("Description", ""),
        path=path,
        dependencies=_dependencies_of(source),
        features=tuple(features),
    )


def parse_control_file(path: Path) -> PackageRecord | None:
    """
    Read and parse a CONTROL file.

    Returns None if the file cannot be read or has no Source field.
    """
    if not path.exists() or not path.is_file():
        return None
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        log.warning("control_unreadable", path=str(path), error=str(e))
        return None
    return parse_control_text(text, path=path.resolve())
