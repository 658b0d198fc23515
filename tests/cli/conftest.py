"""Shared fixtures for CLI tests.

Provides input documents on disk: the example rich graph in its JSON
interchange form, a lock file, and the example audit document in plain
and compressed form.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from depaudit.core.codec import write
from depaudit.core.model import VersionInfo

REGISTRY_SOURCE = {"registry": "https://registry.example/index"}


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click CliRunner for invoking commands."""
    return CliRunner()


@pytest.fixture
def graph_file(tmp_path: Path) -> Path:
    """The example graph (r -> a normal, a -> b build) as interchange JSON.

    Contains a duplicate occurrence of ``a`` and a dev-only dependency,
    both of which must disappear from the audit data.
    """
    document = {
        "nodes": [
            {"id": "r", "name": "r", "version": "0.1.0", "source": REGISTRY_SOURCE,
             "root": True},
            {"id": "a", "name": "a", "version": "1.0.0", "source": REGISTRY_SOURCE},
            {"id": "a-std", "name": "a", "version": "1.0.0", "source": REGISTRY_SOURCE},
            {"id": "b", "name": "b", "version": "2.0.0", "source": REGISTRY_SOURCE},
            {"id": "t", "name": "tester", "version": "0.5.0", "source": REGISTRY_SOURCE},
        ],
        "edges": [
            {"from": "r", "to": "a"},
            {"from": "r", "to": "a-std", "kind": "normal"},
            {"from": "a", "to": "b", "kind": "build"},
            {"from": "r", "to": "t", "kind": "dev"},
        ],
    }
    path = tmp_path / "graph.json"
    path.write_text(json.dumps(document, indent=2))
    return path


@pytest.fixture
def lock_file(tmp_path: Path) -> Path:
    """A two-package lock file: ``app`` depends on ``serde``."""
    path = tmp_path / "Cargo.lock"
    path.write_text(
        "version = 3\n"
        "\n"
        "[[package]]\n"
        'name = "app"\n'
        'version = "0.1.0"\n'
        "dependencies = [\n"
        ' "serde",\n'
        "]\n"
        "\n"
        "[[package]]\n"
        'name = "serde"\n'
        'version = "1.0.200"\n'
        'source = "registry+https://github.com/rust-lang/crates.io-index"\n'
    )
    return path


@pytest.fixture
def audit_file(tmp_path: Path, example_info: VersionInfo) -> Path:
    """The example audit document as plain JSON."""
    path = tmp_path / "audit.json"
    write(example_info, path)
    return path


@pytest.fixture
def compressed_audit_file(tmp_path: Path, example_info: VersionInfo) -> Path:
    """The example audit document in its compressed embedded form."""
    path = tmp_path / "audit.bin"
    write(example_info, path, compress=True)
    return path


@pytest.fixture
def invalid_audit_file(tmp_path: Path) -> Path:
    """An audit document whose only package depends on itself."""
    path = tmp_path / "invalid.json"
    path.write_text(json.dumps({"packages": [
        {"name": "app", "version": "0.1.0", "source": "local",
         "dependencies": [0], "root": True},
    ]}))
    return path
