"""Codecs for the compact audit model.

The package is split into focused submodules:

- ``json_codec``: the stable JSON interchange document, its zlib-compressed
  embedded form, and disk helpers.
- ``lockfile``: conversion from and to ``Cargo.lock``-style lock files.
- ``schema``: the static JSON Schema of the interchange document.
"""

from depaudit.core.codec.json_codec import (
    DEFAULT_COMPRESSION_LEVEL,
    DEFAULT_MAX_DECOMPRESSED_SIZE,
    from_compressed,
    from_dict,
    from_json,
    is_compressed,
    read,
    to_compressed,
    to_dict,
    to_json,
    write,
)
from depaudit.core.codec.lockfile import (
    LOCKFILE_FORMAT_VERSION,
    format_lock_source,
    from_lock,
    parse_lock_source,
    to_lock,
)
from depaudit.core.codec.schema import json_schema, schema_json

__all__ = [
    "DEFAULT_COMPRESSION_LEVEL",
    "DEFAULT_MAX_DECOMPRESSED_SIZE",
    "LOCKFILE_FORMAT_VERSION",
    "format_lock_source",
    "from_compressed",
    "from_dict",
    "from_json",
    "from_lock",
    "is_compressed",
    "json_schema",
    "parse_lock_source",
    "read",
    "schema_json",
    "to_compressed",
    "to_dict",
    "to_json",
    "to_lock",
    "write",
]
