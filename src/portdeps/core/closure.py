"""Compute the transitive dependency closure of a set of ports."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence

import structlog

from portdeps.core.manifest import PackageRecord

log = structlog.get_logger(__name__)


def index_catalog(catalog: Iterable[PackageRecord]) -> dict[str, PackageRecord]:
    """Map name -> record. On duplicate names the first record wins."""
    index: dict[str, PackageRecord] = {}
    for record in catalog:
        index.setdefault(record.name, record)
    return index


def build_closure(
    catalog: Sequence[PackageRecord],
    root_names: Iterable[str],
) -> dict[str, list[str]]:
    """
    Collect every port reachable from root_names.

    Each key maps to that port's direct dependency names, in declared order.
    Keys appear in depth-first discovery order: a root's whole chain is
    visited before the next root. A name is inserted before its own
    dependencies are expanded, so cycles terminate. Names with no matching
    record are skipped and never become keys.

    An explicit stack of iterators replaces recursion, so deep chains are
    not limited by the interpreter's recursion limit.
    """
    index = index_catalog(catalog)
    closure: dict[str, list[str]] = {}
    roots = list(root_names)
    stack: list[Iterator[str]] = [iter(roots)]
    while stack:
        try:
            name = next(stack[-1])
        except StopIteration:
            stack.pop()
            continue
        if name in closure:
            continue
        record = index.get(name)
        if record is None:
            continue
        deps = record.dependency_names()
        closure[name] = deps
        stack.append(iter(deps))
    log.debug("closure_built", roots=len(roots), size=len(closure))
    return closure
