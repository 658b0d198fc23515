"""Compact audit model --- packages, sources, dependency kinds.

Defines the value types embedded into a compiled artifact: one ``Package``
per unique ``(name, version, source)`` identity, dependency edges expressed
as indices into the final package list, and the ``VersionInfo`` container.

Sources and kinds are closed variants. An unrecognized tag is a hard error
(``UnsupportedSourceError`` / ``UnsupportedKindError``), never a silently
applied default, so that audit data cannot be partially understood.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, ClassVar, Iterator, Union

from depaudit.core.model.validation import validate_packages
from depaudit.core.model.version import Version
from depaudit.exceptions import (
    InvalidVersionError,
    MalformedDocumentError,
    UnsupportedKindError,
    UnsupportedSourceError,
)


# ---------------------------------------------------------------------------
# DependencyKind: BUILD < RUNTIME
# ---------------------------------------------------------------------------


class DependencyKind(IntEnum):
    """Why the audited artifact needs a package.

    A two-element chain ``BUILD < RUNTIME``; when evidence disagrees the
    stronger requirement wins (``max``).
    """

    BUILD = 1
    RUNTIME = 2

    @property
    def tag(self) -> str:
        """Stable serialized spelling."""
        return self.name.lower()

    @classmethod
    def from_tag(cls, tag: object) -> DependencyKind:
        """Parse a serialized kind tag.

        Raises:
            UnsupportedKindError: If *tag* is not ``"runtime"`` or ``"build"``.
        """
        for kind in cls:
            if tag == kind.tag:
                return kind
        raise UnsupportedKindError(tag)


# ---------------------------------------------------------------------------
# Source: Local | Registry(url) | Git(url, commit) | Path
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LocalSource:
    """No externally fetchable origin: the audited artifact or a workspace member."""

    tag: ClassVar[str] = "local"

    @property
    def is_reproducible(self) -> bool:
        return False

    def to_data(self) -> Any:
        return self.tag

    def sort_key(self) -> tuple[str, ...]:
        return (self.tag,)

    def __str__(self) -> str:
        return self.tag


@dataclass(frozen=True)
class PathSource:
    """A package taken from a filesystem path outside the workspace."""

    tag: ClassVar[str] = "path"

    @property
    def is_reproducible(self) -> bool:
        return False

    def to_data(self) -> Any:
        return self.tag

    def sort_key(self) -> tuple[str, ...]:
        return (self.tag,)

    def __str__(self) -> str:
        return self.tag


@dataclass(frozen=True)
class RegistrySource:
    """A package downloaded from a package registry.

    Attributes:
        url: Registry index URL.
    """

    url: str
    tag: ClassVar[str] = "registry"

    @property
    def is_reproducible(self) -> bool:
        return True

    def to_data(self) -> Any:
        return {self.tag: self.url}

    def sort_key(self) -> tuple[str, ...]:
        return (self.tag, self.url)

    def __str__(self) -> str:
        return f"registry+{self.url}"


@dataclass(frozen=True)
class GitSource:
    """A package checked out from a git repository at a fixed commit.

    Attributes:
        url: Repository URL.
        commit: Full commit hash the build used.
    """

    url: str
    commit: str
    tag: ClassVar[str] = "git"

    @property
    def is_reproducible(self) -> bool:
        return True

    def to_data(self) -> Any:
        return {self.tag: {"url": self.url, "commit": self.commit}}

    def sort_key(self) -> tuple[str, ...]:
        return (self.tag, self.url, self.commit)

    def __str__(self) -> str:
        return f"git+{self.url}#{self.commit}"


Source = Union[LocalSource, PathSource, RegistrySource, GitSource]

LOCAL = LocalSource()
PATH = PathSource()

CRATES_IO_INDEX = "https://github.com/rust-lang/crates.io-index"

SOURCE_TYPES: tuple[type, ...] = (LocalSource, PathSource, RegistrySource, GitSource)


def source_from_data(data: object) -> Source:
    """Parse the serialized (tagged) form of a source.

    Accepts ``"local"``, ``"path"``, ``{"registry": url}`` and
    ``{"git": {"url": url, "commit": commit}}``.

    Raises:
        UnsupportedSourceError: If the tag is unknown.
        MalformedDocumentError: If a known tag carries a malformed payload.
    """
    if isinstance(data, str):
        if data == LocalSource.tag:
            return LOCAL
        if data == PathSource.tag:
            return PATH
        raise UnsupportedSourceError(data)

    if not isinstance(data, dict) or len(data) != 1:
        raise UnsupportedSourceError(data)

    (tag, payload), = data.items()
    if tag == RegistrySource.tag:
        if not isinstance(payload, str) or not payload:
            raise MalformedDocumentError(
                f"Registry source must carry a non-empty URL string, got {payload!r}"
            )
        return RegistrySource(url=payload)
    if tag == GitSource.tag:
        if (
            not isinstance(payload, dict)
            or set(payload) != {"url", "commit"}
            or not all(isinstance(v, str) and v for v in payload.values())
        ):
            raise MalformedDocumentError(
                f"Git source must carry non-empty 'url' and 'commit' strings, "
                f"got {payload!r}"
            )
        return GitSource(url=payload["url"], commit=payload["commit"])
    raise UnsupportedSourceError(tag)


# ---------------------------------------------------------------------------
# Package and VersionInfo
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Package:
    """One node of the compact dependency graph.

    Attributes:
        name: Package name, non-empty.
        version: Exact version used in the build. A string is parsed on
            construction.
        source: Where the package came from.
        kind: Whether the artifact needs the package at runtime or only to
            build.
        dependencies: Indices (into ``VersionInfo.packages``) of the packages
            this one directly depends on, ascending.
        root: True only for the artifact being described.
    """

    name: str
    version: Version
    source: Source = LOCAL
    kind: DependencyKind = DependencyKind.RUNTIME
    dependencies: tuple[int, ...] = ()
    root: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise MalformedDocumentError(
                f"Package name must be a non-empty string, got {self.name!r}"
            )
        if isinstance(self.version, str):
            object.__setattr__(self, "version", Version.parse(self.version, self.name))
        elif not isinstance(self.version, Version):
            raise InvalidVersionError(repr(self.version), self.name)
        if not isinstance(self.source, SOURCE_TYPES):
            raise UnsupportedSourceError(self.source)
        if not isinstance(self.kind, DependencyKind):
            raise UnsupportedKindError(self.kind)
        object.__setattr__(self, "dependencies", tuple(self.dependencies))

    @property
    def identity(self) -> tuple[str, Version, Source]:
        """The ``(name, version, source)`` triple that makes a package unique."""
        return (self.name, self.version, self.source)

    def __str__(self) -> str:
        return f"{self.name} {self.version}"


@dataclass(frozen=True)
class VersionInfo:
    """The complete compact dependency graph of one artifact.

    Packages are ordered so that every dependency precedes its dependents.
    Construction validates all structural invariants; an invalid graph can
    not be represented.

    Example::

        info = VersionInfo(packages=(
            Package("serde", "1.0.200", RegistrySource(CRATES_IO_INDEX)),
            Package("app", "0.1.0", dependencies=(0,), root=True),
        ))
    """

    packages: tuple[Package, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "packages", tuple(self.packages))
        validate_packages(self.packages)

    def __len__(self) -> int:
        return len(self.packages)

    def __iter__(self) -> Iterator[Package]:
        return iter(self.packages)

    @property
    def root_index(self) -> int:
        """Index of the root package."""
        return next(i for i, p in enumerate(self.packages) if p.root)

    @property
    def root_package(self) -> Package:
        """The package describing the audited artifact."""
        return self.packages[self.root_index]

    def dependencies_of(self, index: int) -> list[Package]:
        """Return the direct dependencies of the package at *index*."""
        return [self.packages[i] for i in self.packages[index].dependencies]

    def summary(self) -> dict[str, Any]:
        """Return aggregate counts for display.

        Returns a dict with:
        - ``total``: number of packages
        - ``root``: ``"name version"`` of the root package
        - ``kinds``: mapping of kind tag -> count
        - ``sources``: mapping of source tag -> count
        - ``reproducible``: packages whose source is externally fetchable
        """
        kinds = Counter(p.kind.tag for p in self.packages)
        sources = Counter(p.source.tag for p in self.packages)
        return {
            "total": len(self.packages),
            "root": str(self.root_package),
            "kinds": dict(sorted(kinds.items())),
            "sources": dict(sorted(sources.items())),
            "reproducible": sum(1 for p in self.packages if p.source.is_reproducible),
        }
