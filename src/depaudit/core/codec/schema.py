"""JSON Schema (draft-07) of the audit interchange document.

The schema is static: it describes the document shape without looking at
any instance. Tag enumerations are taken from the model types themselves so
that a new source or kind variant cannot be added without the schema
following. It is published for external validators only; the codec never
consults it.
"""

from __future__ import annotations

import json
from typing import Any

from depaudit.core.model import (
    DependencyKind,
    GitSource,
    LocalSource,
    PathSource,
    RegistrySource,
)
from depaudit.core.model.version import SEMVER_PATTERN

SCHEMA_DIALECT = "http://json-schema.org/draft-07/schema#"


def _source_schema() -> dict[str, Any]:
    return {
        "description": "Where the package came from.",
        "oneOf": [
            {
                "description": "A package with no external origin, or a path dependency.",
                "type": "string",
                "enum": [LocalSource.tag, PathSource.tag],
            },
            {
                "description": "A package downloaded from a registry.",
                "type": "object",
                "required": [RegistrySource.tag],
                "additionalProperties": False,
                "properties": {
                    RegistrySource.tag: {"type": "string", "minLength": 1},
                },
            },
            {
                "description": "A package checked out from git at a fixed commit.",
                "type": "object",
                "required": [GitSource.tag],
                "additionalProperties": False,
                "properties": {
                    GitSource.tag: {
                        "type": "object",
                        "required": ["url", "commit"],
                        "additionalProperties": False,
                        "properties": {
                            "url": {"type": "string", "minLength": 1},
                            "commit": {"type": "string", "minLength": 1},
                        },
                    },
                },
            },
        ],
    }


def json_schema() -> dict[str, Any]:
    """Return the JSON Schema of the interchange document as a dict."""
    return {
        "$schema": SCHEMA_DIALECT,
        "title": "VersionInfo",
        "description": (
            "Dependency graph of a compiled artifact. Packages are ordered so "
            "that every dependency precedes its dependents; exactly one "
            "package is the root."
        ),
        "type": "object",
        "required": ["packages"],
        "additionalProperties": False,
        "properties": {
            "packages": {
                "type": "array",
                "items": {"$ref": "#/definitions/Package"},
            },
        },
        "definitions": {
            "Package": {
                "description": "One package used to build the artifact.",
                "type": "object",
                "required": ["name", "version", "source"],
                "additionalProperties": False,
                "properties": {
                    "name": {"type": "string", "minLength": 1},
                    "version": {"type": "string", "pattern": SEMVER_PATTERN},
                    "source": {"$ref": "#/definitions/Source"},
                    "kind": {"$ref": "#/definitions/DependencyKind"},
                    "dependencies": {
                        "description": "Indices of direct dependencies in 'packages'.",
                        "type": "array",
                        "items": {"type": "integer", "minimum": 0},
                        "uniqueItems": True,
                        "default": [],
                    },
                    "root": {
                        "description": "True only for the artifact itself.",
                        "type": "boolean",
                        "default": False,
                    },
                },
            },
            "Source": _source_schema(),
            "DependencyKind": {
                "description": "Whether the package is needed at runtime or only to build.",
                "type": "string",
                "enum": [kind.tag for kind in DependencyKind],
                "default": DependencyKind.RUNTIME.tag,
            },
        },
    }


def schema_json(indent: int = 2) -> str:
    """Render the schema as deterministic JSON text."""
    return json.dumps(json_schema(), indent=indent, sort_keys=True)
