"""JSON interchange format of the compact model.

Document shape::

    {"packages": [
        {"name": "build-helper", "version": "2.0.0",
         "source": {"registry": "https://..."}, "kind": "build"},
        {"name": "app", "version": "0.1.0", "source": "local",
         "dependencies": [0], "root": true}
    ]}

Field names and tag spellings are stable: previously embedded documents
must keep deserializing. Defaults are omitted to keep the embedded blob
small: ``kind`` is written only for build dependencies, ``dependencies``
only when non-empty, and ``root`` only on the root package.

Serialization is deterministic. Deserialization is strict: unknown keys,
wrong types, unknown tags and every ``VersionInfo`` invariant are checked
again rather than trusted, and any failure rejects the whole document.

The compressed form (zlib-wrapped JSON) is what gets embedded into a
binary. Decompression is bounded so that a hostile blob cannot exhaust
memory.
"""

from __future__ import annotations

import json
import logging
import zlib
from pathlib import Path
from typing import Any

from depaudit.core.model import (
    DependencyKind,
    Package,
    VersionInfo,
    source_from_data,
)
from depaudit.exceptions import MalformedDocumentError

logger = logging.getLogger(__name__)

DEFAULT_COMPRESSION_LEVEL = 9
DEFAULT_MAX_DECOMPRESSED_SIZE = 8 * 1024 * 1024

_TOP_LEVEL_KEYS = frozenset({"packages"})
_PACKAGE_KEYS = frozenset({"name", "version", "source", "kind", "dependencies", "root"})
_REQUIRED_PACKAGE_KEYS = ("name", "version", "source")


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


def package_to_dict(pkg: Package) -> dict[str, Any]:
    """Serialize one package, omitting default-valued fields."""
    entry: dict[str, Any] = {
        "name": pkg.name,
        "version": str(pkg.version),
        "source": pkg.source.to_data(),
    }
    if pkg.kind != DependencyKind.RUNTIME:
        entry["kind"] = pkg.kind.tag
    if pkg.dependencies:
        entry["dependencies"] = list(pkg.dependencies)
    if pkg.root:
        entry["root"] = True
    return entry


def to_dict(info: VersionInfo) -> dict[str, Any]:
    """Serialize a ``VersionInfo`` to a JSON-ready dict."""
    return {"packages": [package_to_dict(pkg) for pkg in info.packages]}


def to_json(info: VersionInfo, indent: int | None = None) -> str:
    """Serialize to a JSON string.

    Args:
        info: The compact model.
        indent: Indentation for human-readable output. ``None`` (default)
            produces the compact form that is embedded.

    Returns:
        Deterministic JSON text.
    """
    if indent is None:
        return json.dumps(to_dict(info), separators=(",", ":"), ensure_ascii=False)
    return json.dumps(to_dict(info), indent=indent, ensure_ascii=False)


def to_compressed(info: VersionInfo, level: int = DEFAULT_COMPRESSION_LEVEL) -> bytes:
    """Serialize to zlib-compressed compact JSON."""
    return zlib.compress(to_json(info).encode("utf-8"), level)


# ---------------------------------------------------------------------------
# Deserialization
# ---------------------------------------------------------------------------


def _package_from_dict(index: int, entry: Any) -> Package:
    if not isinstance(entry, dict):
        raise MalformedDocumentError(f"Package #{index} must be an object, got {entry!r}")

    unknown = set(entry) - _PACKAGE_KEYS
    if unknown:
        raise MalformedDocumentError(
            f"Package #{index} has unexpected keys: {', '.join(sorted(unknown))}"
        )
    for key in _REQUIRED_PACKAGE_KEYS:
        if key not in entry:
            raise MalformedDocumentError(f"Package #{index} is missing {key!r}")

    name = entry["name"]
    if not isinstance(name, str) or not name:
        raise MalformedDocumentError(f"Package #{index} has invalid name {name!r}")
    version = entry["version"]
    if not isinstance(version, str):
        raise MalformedDocumentError(
            f"Package {name!r} has a non-string version {version!r}"
        )

    dependencies = entry.get("dependencies", [])
    if not isinstance(dependencies, list):
        raise MalformedDocumentError(
            f"Package {name!r} 'dependencies' must be a list, got {dependencies!r}"
        )
    root = entry.get("root", False)
    if not isinstance(root, bool):
        raise MalformedDocumentError(f"Package {name!r} 'root' must be a boolean, got {root!r}")

    kind = DependencyKind.RUNTIME
    if "kind" in entry:
        kind = DependencyKind.from_tag(entry["kind"])

    return Package(
        name=name,
        version=version,
        source=source_from_data(entry["source"]),
        kind=kind,
        dependencies=tuple(dependencies),
        root=root,
    )


def from_dict(data: Any) -> VersionInfo:
    """Deserialize and validate a parsed JSON document.

    Raises:
        MalformedDocumentError: If the document does not have the expected
            shape.
        InvalidVersionError: If a version is not valid SemVer.
        UnsupportedSourceError: On an unknown source tag.
        UnsupportedKindError: On an unknown kind tag.
        InvalidGraphError: On invalid dependency indices.
        InvalidRootError: If there is not exactly one root package.
    """
    if not isinstance(data, dict):
        raise MalformedDocumentError("Audit document must be a JSON object")
    unknown = set(data) - _TOP_LEVEL_KEYS
    if unknown:
        raise MalformedDocumentError(
            f"Audit document has unexpected keys: {', '.join(sorted(unknown))}"
        )
    packages = data.get("packages")
    if not isinstance(packages, list):
        raise MalformedDocumentError("Audit document needs a 'packages' list")

    return VersionInfo(
        packages=tuple(_package_from_dict(i, entry) for i, entry in enumerate(packages))
    )


def from_json(text: str | bytes) -> VersionInfo:
    """Deserialize from JSON text.

    Raises:
        MalformedDocumentError: If *text* is not valid UTF-8 JSON, reporting
            the line and column of a syntax error.
    """
    if isinstance(text, bytes):
        try:
            text = text.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedDocumentError(
                f"Audit document is not valid UTF-8 at byte {exc.start}"
            ) from exc
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedDocumentError(
            f"Invalid JSON: {exc.msg}", line=exc.lineno, column=exc.colno
        ) from exc
    return from_dict(data)


def from_compressed(
    blob: bytes, max_size: int = DEFAULT_MAX_DECOMPRESSED_SIZE
) -> VersionInfo:
    """Decompress and deserialize an embedded blob.

    Args:
        blob: zlib-compressed JSON.
        max_size: Upper bound on the decompressed size in bytes.

    Raises:
        MalformedDocumentError: If the blob is corrupt, truncated, followed
            by trailing bytes, or decompresses to more than *max_size* bytes.
    """
    decompressor = zlib.decompressobj()
    try:
        data = decompressor.decompress(blob, max_size + 1)
    except zlib.error as exc:
        raise MalformedDocumentError(f"Corrupt compressed audit data: {exc}") from exc
    if len(data) > max_size:
        raise MalformedDocumentError(
            f"Compressed audit data exceeds the {max_size}-byte limit"
        )
    if not decompressor.eof:
        raise MalformedDocumentError("Compressed audit data is truncated")
    if decompressor.unused_data:
        raise MalformedDocumentError(
            f"Compressed audit data has {len(decompressor.unused_data)} trailing bytes"
        )
    logger.debug("Decompressed %d bytes of audit data into %d", len(blob), len(data))
    return from_json(data)


def is_compressed(blob: bytes) -> bool:
    """Return True if *blob* starts with a valid zlib header."""
    return (
        len(blob) >= 2
        and blob[0] & 0x0F == 8
        and (blob[0] << 8 | blob[1]) % 31 == 0
    )


# ---------------------------------------------------------------------------
# Disk I/O
# ---------------------------------------------------------------------------


def read(path: Path, max_size: int = DEFAULT_MAX_DECOMPRESSED_SIZE) -> VersionInfo:
    """Read an audit document, compressed or plain JSON.

    Raises:
        FileNotFoundError: If the file does not exist.
        MalformedDocumentError: If the content is not a valid document.
    """
    blob = path.read_bytes()
    if is_compressed(blob):
        return from_compressed(blob, max_size=max_size)
    return from_json(blob)


def write(info: VersionInfo, path: Path, compress: bool = False) -> None:
    """Write an audit document to disk.

    Creates parent directories if they do not exist.

    Args:
        info: The compact model.
        path: Destination file.
        compress: Write the zlib-compressed form instead of JSON text.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    if compress:
        path.write_bytes(to_compressed(info))
    else:
        path.write_text(to_json(info), encoding="utf-8")
