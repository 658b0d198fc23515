"""Compact audit model.

The value types embedded into a compiled artifact to describe its full
dependency graph:

- ``version``: ``Version``, a SemVer 2.0.0 value with precedence ordering.
- ``models``: ``Package``, ``VersionInfo``, the closed ``Source`` variants
  and ``DependencyKind``.
- ``validation``: the structural invariants checked whenever a
  ``VersionInfo`` is constructed.
"""

from depaudit.core.model.models import (
    CRATES_IO_INDEX,
    LOCAL,
    PATH,
    DependencyKind,
    GitSource,
    LocalSource,
    Package,
    PathSource,
    RegistrySource,
    Source,
    VersionInfo,
    source_from_data,
)
from depaudit.core.model.validation import validate_packages
from depaudit.core.model.version import Version

__all__ = [
    "CRATES_IO_INDEX",
    "LOCAL",
    "PATH",
    "DependencyKind",
    "GitSource",
    "LocalSource",
    "Package",
    "PathSource",
    "RegistrySource",
    "Source",
    "Version",
    "VersionInfo",
    "source_from_data",
    "validate_packages",
]
