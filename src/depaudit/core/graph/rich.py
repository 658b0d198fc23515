"""Rich dependency graph --- the redundant build-graph input.

A build tool describes a dependency graph with more detail than the audit
needs: the same package can appear once per feature set or build profile,
and each edge carries the reason the dependency exists (ordinary, build
script, development, test). ``RichGraph`` stores that input as an arena of
nodes addressed by caller-chosen ids, plus a flat list of edges.

The graph is only a container. Grouping, classification and pruning live in
``depaudit.core.graph.classify``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

from depaudit.core.model import LOCAL, Source, source_from_data
from depaudit.exceptions import (
    InvalidGraphError,
    MalformedDocumentError,
    UnsupportedKindError,
)


# ---------------------------------------------------------------------------
# EdgeKind: DEVELOPMENT < BUILD < NORMAL
# ---------------------------------------------------------------------------


class EdgeKind(IntEnum):
    """Raw dependency kind of a rich-graph edge.

    Ordered by strength. Development and test edges share the bottom
    element: neither is part of what ships or builds the artifact.
    """

    DEVELOPMENT = 0
    BUILD = 1
    NORMAL = 2

    @classmethod
    def from_tag(cls, tag: object) -> EdgeKind:
        """Parse a raw edge tag: ``normal``, ``build``, ``dev`` or ``test``.

        Raises:
            UnsupportedKindError: For any other tag.
        """
        try:
            return _EDGE_TAGS[tag]  # type: ignore[index]
        except (KeyError, TypeError):
            raise UnsupportedKindError(tag) from None


_EDGE_TAGS: dict[str, EdgeKind] = {
    "normal": EdgeKind.NORMAL,
    "build": EdgeKind.BUILD,
    "dev": EdgeKind.DEVELOPMENT,
    "test": EdgeKind.DEVELOPMENT,
}


@dataclass(frozen=True)
class RichNode:
    """One occurrence of a package in the build graph.

    Attributes:
        id: Caller-chosen unique node id (e.g. a build tool's package id).
        name: Package name.
        version: Version text; parsed during classification.
        source: Package origin as reported by the build tool.
        root: True for the occurrence(s) of the artifact being audited.
    """

    id: str
    name: str
    version: str
    source: Source = LOCAL
    root: bool = False


@dataclass(frozen=True)
class RichEdge:
    """A dependency edge between two rich nodes."""

    parent: str
    child: str
    kind: EdgeKind = EdgeKind.NORMAL


@dataclass
class RichGraph:
    """Arena of rich nodes and the edges between them.

    Thread safety: This class is NOT thread-safe. Build one graph per
    conversion.
    """

    nodes: list[RichNode] = field(default_factory=list)
    edges: list[RichEdge] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._index: dict[str, int] = {}
        nodes, edges = self.nodes, self.edges
        self.nodes, self.edges = [], []
        for node in nodes:
            self.add_node(node)
        for edge in edges:
            self.add_edge(edge)

    def add_node(self, node: RichNode) -> int:
        """Add a node and return its arena index.

        Raises:
            InvalidGraphError: If a node with the same id already exists.
        """
        if node.id in self._index:
            raise InvalidGraphError(f"Duplicate rich graph node id {node.id!r}")
        self._index[node.id] = len(self.nodes)
        self.nodes.append(node)
        return self._index[node.id]

    def add_edge(self, edge: RichEdge) -> None:
        """Add an edge between two existing nodes.

        Raises:
            InvalidGraphError: If either endpoint is unknown.
        """
        for end in (edge.parent, edge.child):
            if end not in self._index:
                raise InvalidGraphError(
                    f"Edge {edge.parent!r} -> {edge.child!r} references "
                    f"unknown node {end!r}"
                )
        self.edges.append(edge)

    def depend(self, parent: str, child: str, kind: EdgeKind = EdgeKind.NORMAL) -> None:
        """Shorthand for ``add_edge(RichEdge(parent, child, kind))``."""
        self.add_edge(RichEdge(parent, child, kind))

    def index_of(self, node_id: str) -> int:
        """Return the arena index of a node id."""
        return self._index[node_id]

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    # -- JSON interchange ---------------------------------------------------

    @classmethod
    def from_dict(cls, data: Any) -> RichGraph:
        """Build a graph from its JSON interchange form.

        Expected shape::

            {
              "nodes": [{"id": "app", "name": "app", "version": "0.1.0",
                         "source": "local", "root": true}, ...],
              "edges": [{"from": "app", "to": "serde", "kind": "normal"}, ...]
            }

        ``source`` defaults to ``"local"``, ``root`` to false and ``kind`` to
        ``"normal"``.

        Raises:
            MalformedDocumentError: If the document does not have this shape.
            UnsupportedSourceError: On an unknown source tag.
            UnsupportedKindError: On an unknown edge kind.
            InvalidGraphError: On duplicate ids or dangling edges.
        """
        if not isinstance(data, dict):
            raise MalformedDocumentError("Rich graph document must be a JSON object")
        nodes = data.get("nodes")
        edges = data.get("edges", [])
        if not isinstance(nodes, list) or not isinstance(edges, list):
            raise MalformedDocumentError(
                "Rich graph document needs a 'nodes' list and an optional 'edges' list"
            )

        graph = cls()
        for entry in nodes:
            if not isinstance(entry, dict):
                raise MalformedDocumentError(f"Rich graph node must be an object: {entry!r}")
            try:
                node_id, name, version = entry["id"], entry["name"], entry["version"]
            except KeyError as exc:
                raise MalformedDocumentError(
                    f"Rich graph node is missing {exc.args[0]!r}: {entry!r}"
                ) from None
            if not all(isinstance(v, str) for v in (node_id, name, version)):
                raise MalformedDocumentError(
                    f"Rich graph node id, name and version must be strings: {entry!r}"
                )
            root = entry.get("root", False)
            if not isinstance(root, bool):
                raise MalformedDocumentError(f"Rich graph node 'root' must be a boolean: {entry!r}")
            graph.add_node(RichNode(
                id=node_id,
                name=name,
                version=version,
                source=source_from_data(entry.get("source", LOCAL.tag)),
                root=root,
            ))

        for entry in edges:
            if not isinstance(entry, dict):
                raise MalformedDocumentError(f"Rich graph edge must be an object: {entry!r}")
            try:
                parent, child = entry["from"], entry["to"]
            except KeyError as exc:
                raise MalformedDocumentError(
                    f"Rich graph edge is missing {exc.args[0]!r}: {entry!r}"
                ) from None
            if not isinstance(parent, str) or not isinstance(child, str):
                raise MalformedDocumentError(
                    f"Rich graph edge endpoints must be node id strings: {entry!r}"
                )
            graph.add_edge(RichEdge(
                parent=parent,
                child=child,
                kind=EdgeKind.from_tag(entry.get("kind", "normal")),
            ))

        return graph

    @classmethod
    def from_json(cls, text: str) -> RichGraph:
        """Build a graph from JSON text.

        Raises:
            MalformedDocumentError: If *text* is not valid JSON, plus every
                error ``from_dict`` raises.
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise MalformedDocumentError(
                f"Invalid JSON: {exc.msg}", line=exc.lineno, column=exc.colno
            ) from exc
        return cls.from_dict(data)
