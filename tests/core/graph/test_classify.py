"""Tests for deduplication, dependency-kind resolution and pruning."""

from __future__ import annotations

import pytest

from depaudit.core.graph import ClassifiedGraph, EdgeKind, RichGraph, RichNode, classify
from depaudit.core.model import LOCAL, DependencyKind, PathSource, RegistrySource, Version
from depaudit.exceptions import InvalidRootError, InvalidVersionError

REGISTRY = RegistrySource("https://registry.example/index")


# ===========================================================================
# Helpers
# ===========================================================================


def _graph(
    nodes: list[tuple[str, str, str]],
    edges: list[tuple[str, str, EdgeKind]],
    root: str = "root",
) -> RichGraph:
    """Build a graph from ``(id, name, version)`` triples, all from REGISTRY."""
    g = RichGraph()
    for node_id, name, version in nodes:
        g.add_node(RichNode(node_id, name, version, source=REGISTRY, root=node_id == root))
    for parent, child, kind in edges:
        g.depend(parent, child, kind)
    return g


def _kinds(classified: ClassifiedGraph) -> dict[str, DependencyKind]:
    return {pkg.name: pkg.kind for pkg in classified.packages.values()}


def _deps(classified: ClassifiedGraph, name: str) -> set[str]:
    pkg = next(p for p in classified.packages.values() if p.name == name)
    return {dep[0] for dep in pkg.dependencies}


N, B, D = EdgeKind.NORMAL, EdgeKind.BUILD, EdgeKind.DEVELOPMENT


# ===========================================================================
# Grouping
# ===========================================================================


class TestGrouping:
    """Rich nodes collapse by (name, version, source)."""

    def test_feature_duplicates_collapse(self) -> None:
        g = _graph(
            [("root", "app", "0.1.0"), ("s1", "serde", "1.0.0"), ("s2", "serde", "1.0.0")],
            [("root", "s1", N), ("root", "s2", N)],
        )
        classified = classify(g)
        assert len(classified) == 2
        assert _deps(classified, "app") == {"serde"}

    def test_duplicate_edges_merged(self) -> None:
        g = _graph(
            [("root", "app", "0.1.0"), ("a1", "a", "1.0.0"), ("a2", "a", "1.0.0"),
             ("x", "x", "1.0.0")],
            [("root", "a1", N), ("a1", "x", N), ("a2", "x", N)],
        )
        app_pkg = next(p for p in classify(g).packages.values() if p.name == "a")
        assert len(app_pkg.dependencies) == 1

    def test_different_sources_stay_separate(self) -> None:
        g = RichGraph()
        g.add_node(RichNode("root", "app", "0.1.0", root=True))
        g.add_node(RichNode("r", "util", "1.0.0", source=REGISTRY))
        g.add_node(RichNode("p", "util", "1.0.0", source=PathSource()))
        g.depend("root", "r")
        g.depend("root", "p")
        assert len(classify(g)) == 3

    def test_different_versions_stay_separate(self) -> None:
        g = _graph(
            [("root", "app", "0.1.0"), ("r1", "rand", "0.7.3"), ("r2", "rand", "0.8.5")],
            [("root", "r1", N), ("root", "r2", N)],
        )
        versions = sorted(
            p.version for p in classify(g).packages.values() if p.name == "rand"
        )
        assert versions == [Version.parse("0.7.3"), Version.parse("0.8.5")]

    def test_invalid_version_names_package(self) -> None:
        g = _graph([("root", "app", "0.1.0"), ("bad", "broken", "1.0")], [("root", "bad", N)])
        with pytest.raises(InvalidVersionError) as excinfo:
            classify(g)
        assert excinfo.value.package == "broken"


# ===========================================================================
# Root identification
# ===========================================================================


class TestRoot:
    """Exactly one root identity, normalized to a local source."""

    def test_root_source_normalized_to_local(self) -> None:
        g = _graph([("root", "app", "0.1.0")], [])
        classified = classify(g)
        assert classified.root == ("app", Version.parse("0.1.0"), LOCAL)
        assert classified.packages[classified.root].root

    def test_no_root_rejected(self) -> None:
        g = _graph([("a", "a", "1.0.0")], [], root="none")
        with pytest.raises(InvalidRootError):
            classify(g)

    def test_distinct_roots_rejected(self) -> None:
        g = RichGraph()
        g.add_node(RichNode("x", "x", "1.0.0", root=True))
        g.add_node(RichNode("y", "y", "1.0.0", root=True))
        with pytest.raises(InvalidRootError, match="several"):
            classify(g)

    def test_duplicate_root_occurrences_allowed(self) -> None:
        g = RichGraph()
        g.add_node(RichNode("x1", "app", "0.1.0", root=True))
        g.add_node(RichNode("x2", "app", "0.1.0", root=True))
        classified = classify(g)
        assert len(classified) == 1

    def test_only_root_is_marked(self) -> None:
        g = _graph([("root", "app", "0.1.0"), ("a", "a", "1.0.0")], [("root", "a", N)])
        roots = [p.name for p in classify(g).packages.values() if p.root]
        assert roots == ["app"]


# ===========================================================================
# Kind resolution
# ===========================================================================


class TestKindResolution:
    """The stronger requirement wins; build-only status propagates."""

    def test_runtime_and_build(self) -> None:
        g = _graph(
            [("root", "app", "0.1.0"), ("a", "a", "1.0.0"), ("b", "b", "2.0.0")],
            [("root", "a", N), ("a", "b", B)],
        )
        assert _kinds(classify(g)) == {
            "app": DependencyKind.RUNTIME,
            "a": DependencyKind.RUNTIME,
            "b": DependencyKind.BUILD,
        }

    def test_runtime_edge_promotes_build_only_package(self) -> None:
        g = _graph(
            [("root", "app", "0.1.0"), ("a", "a", "1.0.0"), ("b", "b", "1.0.0"),
             ("x", "x", "1.0.0")],
            [("root", "a", N), ("root", "b", N), ("a", "x", B), ("b", "x", N)],
        )
        assert _kinds(classify(g))["x"] is DependencyKind.RUNTIME

    def test_promotion_independent_of_edge_order(self) -> None:
        g = _graph(
            [("root", "app", "0.1.0"), ("x", "x", "1.0.0"), ("a", "a", "1.0.0")],
            [("root", "a", N), ("a", "x", N), ("root", "x", B)],
        )
        assert _kinds(classify(g))["x"] is DependencyKind.RUNTIME

    def test_dependencies_of_build_only_package_are_build_only(self) -> None:
        g = _graph(
            [("root", "app", "0.1.0"), ("cc", "cc", "1.0.0"), ("jobs", "jobserver", "0.1.0")],
            [("root", "cc", B), ("cc", "jobs", N)],
        )
        kinds = _kinds(classify(g))
        assert kinds["cc"] is DependencyKind.BUILD
        assert kinds["jobserver"] is DependencyKind.BUILD

    def test_later_runtime_path_upgrades_subtree(self) -> None:
        g = _graph(
            [("root", "app", "0.1.0"), ("cc", "cc", "1.0.0"), ("libc", "libc", "0.2.0"),
             ("mid", "mid", "1.0.0")],
            [("root", "cc", B), ("cc", "libc", N), ("root", "mid", N), ("mid", "cc", N)],
        )
        kinds = _kinds(classify(g))
        assert kinds["cc"] is DependencyKind.RUNTIME
        assert kinds["libc"] is DependencyKind.RUNTIME

    def test_parallel_edges_keep_strongest(self) -> None:
        g = _graph(
            [("root", "app", "0.1.0"), ("a", "a", "1.0.0")],
            [("root", "a", D), ("root", "a", B)],
        )
        assert _kinds(classify(g))["a"] is DependencyKind.BUILD


# ===========================================================================
# Pruning
# ===========================================================================


class TestPruning:
    """Development/test-only and unreachable packages leave the audit."""

    def test_dev_only_package_pruned(self) -> None:
        g = _graph(
            [("root", "app", "0.1.0"), ("y", "criterion", "0.5.0"), ("z", "plotters", "0.3.0")],
            [("root", "y", D), ("y", "z", N)],
        )
        classified = classify(g)
        assert set(_kinds(classified)) == {"app"}
        assert _deps(classified, "app") == set()

    def test_test_only_package_pruned(self) -> None:
        g = RichGraph()
        g.add_node(RichNode("root", "app", "0.1.0", root=True))
        g.add_node(RichNode("t", "proptest", "1.0.0", source=REGISTRY))
        g.depend("root", "t", EdgeKind.from_tag("test"))
        assert set(_kinds(classify(g))) == {"app"}

    def test_unreachable_package_pruned(self) -> None:
        g = _graph([("root", "app", "0.1.0"), ("w", "workspace-tool", "0.1.0")], [])
        assert set(_kinds(classify(g))) == {"app"}

    def test_dev_and_runtime_paths_include_package(self) -> None:
        g = _graph(
            [("root", "app", "0.1.0"), ("a", "a", "1.0.0"), ("x", "x", "1.0.0")],
            [("root", "x", D), ("root", "a", N), ("a", "x", N)],
        )
        classified = classify(g)
        assert _kinds(classified)["x"] is DependencyKind.RUNTIME
        # The dev edge itself is not recorded.
        assert _deps(classified, "app") == {"a"}
        assert _deps(classified, "a") == {"x"}

    def test_dev_edges_below_root_not_traversed(self) -> None:
        g = _graph(
            [("root", "app", "0.1.0"), ("a", "a", "1.0.0"), ("t", "tester", "1.0.0")],
            [("root", "a", N), ("a", "t", D)],
        )
        assert "tester" not in _kinds(classify(g))
