"""Deterministic topological ordering of a classified graph.

Dependencies are placed before the packages that depend on them, so every
dependency index is smaller than the index of the package listing it.
Among packages that are ready at the same time, the least by
``(name, version, source)`` is placed first. This tie-break is part of the
output format: two graphs that differ only in discovery order serialize to
the same bytes, and previously embedded documents keep re-serializing
identically.

Kahn's algorithm with a min-heap is used rather than a DFS postorder, whose
result depends on the order edges were listed.
"""

from __future__ import annotations

import heapq
import logging
from collections import defaultdict
from typing import Any

from depaudit.core.graph.classify import ClassifiedGraph, ClassifiedPackage, Identity, classify
from depaudit.core.graph.rich import RichGraph
from depaudit.core.model import Package, VersionInfo
from depaudit.exceptions import InvalidGraphError

logger = logging.getLogger(__name__)


def ordering_key(pkg: ClassifiedPackage) -> tuple[Any, ...]:
    """Tie-break key: name, then SemVer order, then source."""
    return (pkg.name, pkg.version.sort_key(), pkg.source.sort_key())


def order_packages(classified: ClassifiedGraph) -> VersionInfo:
    """Linearize a classified graph into a validated ``VersionInfo``.

    Args:
        classified: Output of ``classify``.

    Returns:
        The compact model, dependencies before dependents, with each
        package's dependency indices sorted ascending.

    Raises:
        InvalidGraphError: If the dependency graph contains a cycle.
    """
    pending: dict[Identity, int] = {}
    dependents: dict[Identity, list[Identity]] = defaultdict(list)
    for identity, pkg in classified.packages.items():
        pending[identity] = len(pkg.dependencies)
        for dep in pkg.dependencies:
            dependents[dep].append(identity)

    # Keys are unique per identity, so the heap never compares identities.
    by_key = {ordering_key(pkg): pkg.identity for pkg in classified.packages.values()}
    ready = [key for key, identity in by_key.items() if pending[identity] == 0]
    heapq.heapify(ready)

    order: list[Identity] = []
    while ready:
        identity = by_key[heapq.heappop(ready)]
        order.append(identity)
        for dependent in dependents.get(identity, ()):
            pending[dependent] -= 1
            if pending[dependent] == 0:
                heapq.heappush(ready, ordering_key(classified.packages[dependent]))

    if len(order) != len(classified.packages):
        stuck = sorted(
            f"{name} {version}"
            for (name, version, _), count in pending.items()
            if count > 0
        )
        raise InvalidGraphError(
            f"Dependency cycle among packages: {', '.join(stuck)}"
        )

    position = {identity: index for index, identity in enumerate(order)}
    packages = []
    for identity in order:
        pkg = classified.packages[identity]
        packages.append(Package(
            name=pkg.name,
            version=pkg.version,
            source=pkg.source,
            kind=pkg.kind,
            dependencies=tuple(sorted(position[dep] for dep in pkg.dependencies)),
            root=pkg.root,
        ))

    logger.debug("Ordered %d packages; root at index %d", len(packages), position[classified.root])
    return VersionInfo(packages=tuple(packages))


def build_version_info(graph: RichGraph) -> VersionInfo:
    """Full pipeline: classify a rich graph, then order it.

    Example::

        graph = RichGraph()
        graph.add_node(RichNode("app", "app", "0.1.0", root=True))
        graph.add_node(RichNode("serde", "serde", "1.0.200", RegistrySource(CRATES_IO_INDEX)))
        graph.depend("app", "serde")
        info = build_version_info(graph)
    """
    return order_packages(classify(graph))
