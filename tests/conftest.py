"""Shared fixtures for depaudit tests."""

from __future__ import annotations

import pytest

from depaudit.core.graph import EdgeKind, RichGraph, RichNode, build_version_info
from depaudit.core.model import RegistrySource, VersionInfo

REGISTRY_URL = "https://registry.example/index"


@pytest.fixture
def registry() -> RegistrySource:
    """The registry every example package is downloaded from."""
    return RegistrySource(url=REGISTRY_URL)


@pytest.fixture
def example_graph(registry: RegistrySource) -> RichGraph:
    """Root ``r`` needs ``a`` at runtime; ``a`` needs ``b`` only to build."""
    graph = RichGraph()
    graph.add_node(RichNode("r", "r", "0.1.0", source=registry, root=True))
    graph.add_node(RichNode("a", "a", "1.0.0", source=registry))
    graph.add_node(RichNode("b", "b", "2.0.0", source=registry))
    graph.depend("r", "a", EdgeKind.NORMAL)
    graph.depend("a", "b", EdgeKind.BUILD)
    return graph


@pytest.fixture
def example_info(example_graph: RichGraph) -> VersionInfo:
    """The compact model of ``example_graph``: ``[b, a, r]``."""
    return build_version_info(example_graph)
