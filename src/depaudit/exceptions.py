"""depaudit exception hierarchy.

All public exceptions inherit from DepAuditError, giving callers a single
base class to catch when they want to handle any depaudit-specific failure
without swallowing unrelated errors. None of them is recovered internally:
audit data either validates completely or the whole operation fails.
"""

from __future__ import annotations


class DepAuditError(Exception):
    """Base exception for all depaudit errors."""


class InvalidVersionError(DepAuditError):
    """Raised when a version string is not a valid semantic version.

    Attributes:
        version: The offending version text.
        package: Name of the package carrying the version, when known.
    """

    def __init__(self, version: str, package: str | None = None) -> None:
        self.version = version
        self.package = package
        if package:
            message = f"Package {package!r} has invalid semantic version {version!r}"
        else:
            message = f"Invalid semantic version: {version!r}"
        super().__init__(message)


class InvalidGraphError(DepAuditError):
    """Raised for out-of-bounds, forward, duplicate, or cyclic dependency edges.

    Also covers duplicate package identities and rich graphs that reference
    unknown nodes.
    """


class InvalidRootError(DepAuditError):
    """Raised when a graph has zero or more than one root package."""


class MalformedDocumentError(DepAuditError):
    """Raised when an interchange or lock-file document has the wrong shape.

    Covers invalid JSON/TOML, missing or unexpected keys, wrong value types,
    and corrupt or oversized compressed payloads.

    Attributes:
        line: 1-based line of a syntax error, when known.
        column: 1-based column of a syntax error, when known.
    """

    def __init__(
        self, message: str, line: int | None = None, column: int | None = None
    ) -> None:
        self.line = line
        self.column = column
        if line is not None:
            message = f"{message} (line {line}, column {column})"
        super().__init__(message)


class UnsupportedSourceError(DepAuditError):
    """Raised when a source tag is not recognized by this version of the model."""

    def __init__(self, tag: object) -> None:
        self.tag = tag
        super().__init__(f"Unsupported package source: {tag!r}")


class UnsupportedKindError(DepAuditError):
    """Raised when a dependency kind tag is not recognized."""

    def __init__(self, tag: object) -> None:
        self.tag = tag
        super().__init__(f"Unsupported dependency kind: {tag!r}")
