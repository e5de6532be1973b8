"""Assemble dependency graphs as plain data, independent of output format."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from portdeps.core.closure import index_catalog
from portdeps.core.manifest import PackageRecord


@dataclass
class GraphEntry:
    """One node of the graph and the names it points to."""

    name: str
    dependencies: list[str] = field(default_factory=list)
    # Only filled when feature dependencies are requested
    feature_dependencies: list[str] = field(default_factory=list)

    def edges(self, *, include_features: bool = True) -> list[tuple[str, str]]:
        """(source, target) pairs: core dependencies, then feature dependencies."""
        targets = list(self.dependencies)
        if include_features:
            targets.extend(self.feature_dependencies)
        return [(self.name, t) for t in targets]

    def to_dict(self) -> dict:
        """Serialize entry to a JSON-friendly dict (for API/frontend)."""
        return {
            "name": self.name,
            "dependencies": list(self.dependencies),
            "feature_dependencies": list(self.feature_dependencies),
        }


def entries_from_catalog(
    catalog: Iterable[PackageRecord],
    *,
    include_features: bool = True,
) -> list[GraphEntry]:
    """One entry per record, in catalog order."""
    return [
        GraphEntry(
            name=record.name,
            dependencies=record.dependency_names(),
            feature_dependencies=record.feature_dependency_names() if include_features else [],
        )
        for record in catalog
    ]


def entries_from_closure(
    closure: Mapping[str, Sequence[str]],
    catalog: Sequence[PackageRecord] = (),
    *,
    include_features: bool = False,
) -> list[GraphEntry]:
    """
    One entry per closure key, in closure order.

    Feature dependencies are looked up in catalog only when include_features
    is set; a key missing from catalog simply gets none.
    """
    index = index_catalog(catalog) if include_features else {}
    entries: list[GraphEntry] = []
    for name, deps in closure.items():
        record = index.get(name)
        entries.append(
            GraphEntry(
                name=name,
                dependencies=list(deps),
                feature_dependencies=record.feature_dependency_names() if record else [],
            )
        )
    return entries
