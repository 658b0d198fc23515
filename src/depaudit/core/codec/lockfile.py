"""Conversion between the compact model and ``Cargo.lock``-style lock files.

A lock file lists every package of a workspace with its exact version,
source and direct dependency names::

    version = 3

    [[package]]
    name = "app"
    version = "0.1.0"
    dependencies = [
     "serde",
    ]

    [[package]]
    name = "serde"
    version = "1.0.200"
    source = "registry+https://github.com/rust-lang/crates.io-index"

``from_lock`` treats such a document as a rich graph in which every edge is
a runtime edge (lock files do not distinguish build-only dependencies) and
runs it through classification and ordering. ``to_lock`` goes the other way;
dependency kinds cannot be represented and are dropped.
"""

from __future__ import annotations

import json
import logging
import re
import tomllib
from dataclasses import dataclass
from typing import Any

from depaudit.core.graph import EdgeKind, RichGraph, RichNode, build_version_info
from depaudit.core.model import (
    LOCAL,
    PATH,
    DependencyKind,
    GitSource,
    Package,
    RegistrySource,
    Source,
    VersionInfo,
)
from depaudit.exceptions import (
    InvalidRootError,
    MalformedDocumentError,
    UnsupportedSourceError,
)

logger = logging.getLogger(__name__)

LOCKFILE_FORMAT_VERSION = 3

_REFERENCE_RE = re.compile(
    r"^(?P<name>[^\s()]+)(?:\s+(?P<version>[^\s()]+))?(?:\s+\((?P<source>[^()]+)\))?$"
)


# ---------------------------------------------------------------------------
# Source strings
# ---------------------------------------------------------------------------


def parse_lock_source(text: str | None) -> Source:
    """Parse a lock-file ``source`` string.

    - absent: a workspace member (``Local``)
    - ``registry+URL``: ``Registry(URL)``
    - ``sparse+URL``: ``Registry("sparse+URL")``; the protocol is kept so the
      string survives a round trip
    - ``git+URL[?query]#commit``: ``Git(URL, commit)``
    - ``path+URL``: ``Path``

    Raises:
        UnsupportedSourceError: For any other prefix.
        MalformedDocumentError: For a git source without a commit.
    """
    if text is None:
        return LOCAL
    if text.startswith("registry+"):
        return RegistrySource(url=text[len("registry+"):])
    if text.startswith("sparse+"):
        return RegistrySource(url=text)
    if text.startswith("git+"):
        location, _, commit = text[len("git+"):].partition("#")
        if not commit:
            raise MalformedDocumentError(f"Git source without a commit: {text!r}")
        return GitSource(url=location.split("?", 1)[0], commit=commit)
    if text.startswith("path+"):
        return PATH
    raise UnsupportedSourceError(text)


def format_lock_source(source: Source) -> str | None:
    """Render a source as a lock-file string; ``None`` for local and path."""
    if isinstance(source, RegistrySource):
        if source.url.startswith("sparse+"):
            return source.url
        return f"registry+{source.url}"
    if isinstance(source, GitSource):
        return f"git+{source.url}#{source.commit}"
    return None


# ---------------------------------------------------------------------------
# Lock file -> compact model
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class _LockEntry:
    node_id: str
    name: str
    version: str
    source_text: str | None
    references: tuple[str, ...]


def _read_entries(data: dict[str, Any]) -> list[_LockEntry]:
    tables = data.get("package", [])
    if not isinstance(tables, list):
        raise MalformedDocumentError("Lock file 'package' must be an array of tables")

    entries: list[_LockEntry] = []
    for table in tables:
        if not isinstance(table, dict):
            raise MalformedDocumentError(f"Lock file package must be a table: {table!r}")
        name, version = table.get("name"), table.get("version")
        if not isinstance(name, str) or not isinstance(version, str):
            raise MalformedDocumentError(
                f"Lock file package needs string 'name' and 'version': {table!r}"
            )
        source_text = table.get("source")
        if source_text is not None and not isinstance(source_text, str):
            raise MalformedDocumentError(
                f"Lock file package {name!r} has a non-string source {source_text!r}"
            )
        references = table.get("dependencies", [])
        if not isinstance(references, list) or not all(isinstance(r, str) for r in references):
            raise MalformedDocumentError(
                f"Lock file package {name!r} 'dependencies' must be a list of strings"
            )
        node_id = f"{name} {version}" + (f" ({source_text})" if source_text else "")
        entries.append(_LockEntry(node_id, name, version, source_text, tuple(references)))
    return entries


def _resolve_reference(reference: str, entries: list[_LockEntry], owner: str) -> _LockEntry:
    m = _REFERENCE_RE.match(reference.strip())
    if not m:
        raise MalformedDocumentError(
            f"Package {owner!r} has an unparsable dependency reference {reference!r}"
        )
    candidates = [
        e for e in entries
        if e.name == m.group("name")
        and (m.group("version") is None or e.version == m.group("version"))
        and (m.group("source") is None or e.source_text == m.group("source"))
    ]
    if not candidates:
        raise MalformedDocumentError(
            f"Package {owner!r} depends on {reference!r}, which is not in the lock file"
        )
    if len(candidates) > 1 and m.group("source") is None:
        # An unqualified reference names the entry without a source line.
        candidates = [e for e in candidates if e.source_text is None] or candidates
    if len(candidates) > 1:
        raise MalformedDocumentError(
            f"Package {owner!r} has an ambiguous dependency reference {reference!r}"
        )
    return candidates[0]


def _select_root(
    entries: list[_LockEntry], dependents: set[str], root: str | None
) -> _LockEntry:
    if root is None:
        candidates = [e for e in entries if e.node_id not in dependents]
        described = "packages without dependents"
    else:
        name, _, version = root.strip().partition(" ")
        candidates = [
            e for e in entries
            if e.name == name and (not version or e.version == version.strip())
        ]
        described = f"packages matching {root!r}"

    if len(candidates) != 1:
        found = ", ".join(sorted(e.node_id for e in candidates)) or "none"
        raise InvalidRootError(
            f"Cannot determine the root package: expected exactly one of the "
            f"{described}, found {found}"
        )
    return candidates[0]


def from_lock(text: str, root: str | None = None) -> VersionInfo:
    """Build the compact model from a lock-file document.

    Args:
        text: TOML text of the lock file.
        root: ``"name"`` or ``"name version"`` of the audited package. When
            omitted, the unique package no other package depends on is used.

    Returns:
        The validated, ordered ``VersionInfo``; packages the root does not
        reach are pruned, every package is a runtime dependency.

    Raises:
        MalformedDocumentError: On invalid TOML or an unexpected shape, and
            on dangling or ambiguous dependency references.
        InvalidRootError: If the root cannot be determined uniquely.
        UnsupportedSourceError: On an unknown source prefix.
        InvalidVersionError: If a version is not valid SemVer.
        InvalidGraphError: On duplicate entries or a dependency cycle.
    """
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise MalformedDocumentError(f"Invalid TOML: {exc}") from exc

    entries = _read_entries(data)
    edges: list[tuple[str, str]] = []
    for entry in entries:
        for reference in entry.references:
            target = _resolve_reference(reference, entries, entry.name)
            edges.append((entry.node_id, target.node_id))

    root_entry = _select_root(entries, {child for _, child in edges}, root)

    graph = RichGraph()
    for entry in entries:
        graph.add_node(RichNode(
            id=entry.node_id,
            name=entry.name,
            version=entry.version,
            source=parse_lock_source(entry.source_text),
            root=entry is root_entry,
        ))
    for parent, child in edges:
        graph.depend(parent, child, EdgeKind.NORMAL)

    logger.debug(
        "Read %d lock file packages, %d edges, root %s",
        len(entries), len(edges), root_entry.node_id,
    )
    return build_version_info(graph)


# ---------------------------------------------------------------------------
# Compact model -> lock file
# ---------------------------------------------------------------------------


def _toml_string(value: str) -> str:
    # JSON string escapes are valid TOML basic-string escapes when
    # non-ASCII characters are left unescaped.
    return json.dumps(value, ensure_ascii=False)


def _reference(pkg: Package, packages: tuple[Package, ...]) -> str:
    same_name = [p for p in packages if p.name == pkg.name]
    if len(same_name) == 1:
        return pkg.name
    same_version = [p for p in same_name if p.version == pkg.version]
    source_text = format_lock_source(pkg.source)
    if len(same_version) == 1 or source_text is None:
        return f"{pkg.name} {pkg.version}"
    return f"{pkg.name} {pkg.version} ({source_text})"


def to_lock(info: VersionInfo) -> str:
    """Render the compact model as a version-3 lock file.

    Packages are sorted by name, version and source; dependency references
    use the shortest unambiguous form. Dependency kinds are not
    representable and are dropped.
    """
    build_only = sum(1 for p in info.packages if p.kind == DependencyKind.BUILD)
    if build_only:
        logger.warning(
            "Lock file format cannot mark build-only dependencies; "
            "%d package(s) lose their kind", build_only,
        )

    lines = [
        "# This file is automatically @generated by depaudit.",
        "# It is not intended for manual editing.",
        f"version = {LOCKFILE_FORMAT_VERSION}",
    ]
    ordered = sorted(
        info.packages,
        key=lambda p: (p.name, p.version.sort_key(), p.source.sort_key()),
    )
    for pkg in ordered:
        lines.append("")
        lines.append("[[package]]")
        lines.append(f"name = {_toml_string(pkg.name)}")
        lines.append(f"version = {_toml_string(str(pkg.version))}")
        source_text = format_lock_source(pkg.source)
        if source_text is not None:
            lines.append(f"source = {_toml_string(source_text)}")
        if pkg.dependencies:
            references = sorted(
                _reference(info.packages[i], info.packages) for i in pkg.dependencies
            )
            lines.append("dependencies = [")
            lines.extend(f" {_toml_string(ref)}," for ref in references)
            lines.append("]")

    return "\n".join(lines) + "\n"
