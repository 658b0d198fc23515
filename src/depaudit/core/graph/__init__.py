"""Rich build graph to compact model conversion.

- ``rich``: ``RichGraph``, ``RichNode``, ``RichEdge`` and ``EdgeKind``, the
  redundant input produced by a build tool.
- ``classify``: grouping by identity, dependency-kind resolution, pruning.
- ``ordering``: the deterministic topological order and the
  ``build_version_info`` pipeline.
"""

from depaudit.core.graph.classify import (
    ClassifiedGraph,
    ClassifiedPackage,
    Identity,
    classify,
)
from depaudit.core.graph.ordering import build_version_info, order_packages, ordering_key
from depaudit.core.graph.rich import EdgeKind, RichEdge, RichGraph, RichNode

__all__ = [
    "ClassifiedGraph",
    "ClassifiedPackage",
    "EdgeKind",
    "Identity",
    "RichEdge",
    "RichGraph",
    "RichNode",
    "build_version_info",
    "classify",
    "order_packages",
    "ordering_key",
]
