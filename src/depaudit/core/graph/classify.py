"""Deduplication and dependency-kind classification of a rich graph.

Reduces a ``RichGraph`` to the unique package set of the audited artifact:

1. **Grouping.** Rich nodes are grouped by ``(name, version, source)``; each
   group becomes one package. The root group's source is normalized to
   ``Local``: the artifact is not fetched from anywhere.
2. **Edge collapse.** Edges between groups are merged; parallel edges keep
   their strongest kind.
3. **Kind resolution.** A breadth-first relaxation from the root. The root
   is a runtime requirement; an edge contributes ``min(edge kind, parent
   kind)`` to its child, and a child takes the maximum contribution over
   all incoming paths. Development and test edges contribute nothing and are
   not traversed, so tooling that only serves the developer never enters the
   audit.
4. **Pruning.** Groups never reached are dropped. This is not an error:
   workspaces routinely contain packages the audited artifact does not use.

The relaxation is monotone over a finite lattice, so the result does not
depend on the order in which nodes or edges were discovered.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass

from depaudit.core.graph.rich import EdgeKind, RichGraph
from depaudit.core.model import LOCAL, DependencyKind, Source, Version
from depaudit.exceptions import InvalidRootError

logger = logging.getLogger(__name__)

Identity = tuple[str, Version, Source]

_KIND_OF_EDGE: dict[EdgeKind, DependencyKind] = {
    EdgeKind.BUILD: DependencyKind.BUILD,
    EdgeKind.NORMAL: DependencyKind.RUNTIME,
}


@dataclass(frozen=True)
class ClassifiedPackage:
    """A deduplicated package whose dependencies are still identities."""

    name: str
    version: Version
    source: Source
    kind: DependencyKind
    root: bool
    dependencies: frozenset[Identity]

    @property
    def identity(self) -> Identity:
        return (self.name, self.version, self.source)


@dataclass(frozen=True)
class ClassifiedGraph:
    """Output of ``classify``: unique packages keyed by identity."""

    packages: dict[Identity, ClassifiedPackage]
    root: Identity

    def __len__(self) -> int:
        return len(self.packages)


def _group_nodes(graph: RichGraph) -> tuple[list[Identity], Identity]:
    """Map every arena node to its identity and locate the root identity."""
    identities: list[Identity] = [
        (node.name, Version.parse(node.version, node.name), node.source)
        for node in graph.nodes
    ]

    root_ids = {identities[i] for i, node in enumerate(graph.nodes) if node.root}
    if not root_ids:
        raise InvalidRootError("Rich graph has no root node")
    if len(root_ids) > 1:
        names = ", ".join(sorted(f"{name} {version}" for name, version, _ in root_ids))
        raise InvalidRootError(f"Rich graph has several distinct root packages: {names}")

    raw_root = root_ids.pop()
    root: Identity = (raw_root[0], raw_root[1], LOCAL)
    return [root if ident == raw_root else ident for ident in identities], root


def _collapse_edges(
    graph: RichGraph, identities: list[Identity]
) -> dict[Identity, dict[Identity, EdgeKind]]:
    adjacency: dict[Identity, dict[Identity, EdgeKind]] = {}
    for edge in graph.edges:
        parent = identities[graph.index_of(edge.parent)]
        child = identities[graph.index_of(edge.child)]
        targets = adjacency.setdefault(parent, {})
        targets[child] = max(edge.kind, targets.get(child, EdgeKind.DEVELOPMENT))
    return adjacency


def _resolve_kinds(
    root: Identity, adjacency: dict[Identity, dict[Identity, EdgeKind]]
) -> dict[Identity, EdgeKind]:
    kinds: dict[Identity, EdgeKind] = {root: EdgeKind.NORMAL}
    queue: deque[Identity] = deque([root])

    while queue:
        parent = queue.popleft()
        parent_kind = kinds[parent]
        for child, edge_kind in adjacency.get(parent, {}).items():
            kind = min(edge_kind, parent_kind)
            if kind == EdgeKind.DEVELOPMENT:
                continue
            if kind > kinds.get(child, EdgeKind.DEVELOPMENT):
                kinds[child] = kind
                queue.append(child)

    return kinds


def classify(graph: RichGraph) -> ClassifiedGraph:
    """Deduplicate a rich graph and classify every reachable package.

    Args:
        graph: The rich build graph. Exactly one package identity must be
            marked root (duplicate occurrences of it are fine).

    Returns:
        A ``ClassifiedGraph`` holding one ``ClassifiedPackage`` per identity
        reachable from the root through runtime or build edges.

    Raises:
        InvalidRootError: If no node, or nodes of several distinct
            identities, are marked root.
        InvalidVersionError: If a node's version is not valid SemVer.
    """
    identities, root = _group_nodes(graph)
    adjacency = _collapse_edges(graph, identities)
    kinds = _resolve_kinds(root, adjacency)

    packages: dict[Identity, ClassifiedPackage] = {}
    for identity, edge_kind in kinds.items():
        name, version, source = identity
        dependencies = frozenset(
            child
            for child, kind in adjacency.get(identity, {}).items()
            if kind != EdgeKind.DEVELOPMENT and child in kinds
        )
        packages[identity] = ClassifiedPackage(
            name=name,
            version=version,
            source=source,
            kind=_KIND_OF_EDGE[edge_kind],
            root=identity == root,
            dependencies=dependencies,
        )

    pruned = len(set(identities)) - len(packages)
    logger.debug(
        "Classified %d rich nodes into %d packages (%d pruned)",
        graph.node_count, len(packages), pruned,
    )
    return ClassifiedGraph(packages=packages, root=root)
