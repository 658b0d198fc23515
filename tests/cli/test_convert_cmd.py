"""Tests for ``depaudit convert`` and ``depaudit from-lock``.

Verifies:
    - A rich graph converts to the deterministic compact document.
    - Compressed and pretty output to files.
    - ``--compress`` without ``--output`` is a usage error (exit code 2).
    - Invalid inputs exit with code 1 and an error message.
    - Lock files convert with automatic or explicit root selection.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from click.testing import CliRunner

from depaudit.cli.main import cli
from depaudit.core.codec import from_json, is_compressed, read, to_json
from depaudit.core.model import VersionInfo


class TestConvert:
    """Tests for converting a rich graph document."""

    def test_prints_compact_json(
        self, runner: CliRunner, graph_file: Path, example_info: VersionInfo
    ) -> None:
        """Duplicates and dev-only packages are gone; output matches the model."""
        result = runner.invoke(cli, ["convert", str(graph_file)])
        assert result.exit_code == 0
        assert to_json(example_info) in result.output
        assert "tester" not in result.output

    def test_pretty_output(self, runner: CliRunner, graph_file: Path) -> None:
        result = runner.invoke(cli, ["convert", str(graph_file), "--pretty"])
        assert result.exit_code == 0
        assert '\n  "packages": [' in result.output

    def test_writes_file(
        self, runner: CliRunner, graph_file: Path, tmp_path: Path,
        example_info: VersionInfo,
    ) -> None:
        out = tmp_path / "out" / "audit.json"
        result = runner.invoke(cli, ["convert", str(graph_file), "-o", str(out)])
        assert result.exit_code == 0
        assert "written to" in result.output
        assert "r 0.1.0 (3 packages)" in result.output
        assert from_json(out.read_text()) == example_info

    def test_writes_pretty_file(
        self, runner: CliRunner, graph_file: Path, tmp_path: Path,
        example_info: VersionInfo,
    ) -> None:
        out = tmp_path / "audit.json"
        result = runner.invoke(
            cli, ["convert", str(graph_file), "-o", str(out), "--pretty"]
        )
        assert result.exit_code == 0
        assert json.loads(out.read_text()) == json.loads(to_json(example_info))
        assert "\n" in out.read_text().strip()

    def test_writes_compressed_file(
        self, runner: CliRunner, graph_file: Path, tmp_path: Path,
        example_info: VersionInfo,
    ) -> None:
        out = tmp_path / "audit.bin"
        result = runner.invoke(
            cli, ["convert", str(graph_file), "-o", str(out), "--compress"]
        )
        assert result.exit_code == 0
        assert is_compressed(out.read_bytes())
        assert read(out) == example_info

    def test_compress_requires_output(self, runner: CliRunner, graph_file: Path) -> None:
        result = runner.invoke(cli, ["convert", str(graph_file), "--compress"])
        assert result.exit_code == 2
        assert "--compress requires --output" in result.output

    def test_invalid_json_exits_1(self, runner: CliRunner, tmp_path: Path) -> None:
        bad = tmp_path / "bad.json"
        bad.write_text("{not json")
        result = runner.invoke(cli, ["convert", str(bad)])
        assert result.exit_code == 1
        assert "Error: Invalid JSON" in result.output

    def test_graph_without_root_exits_1(self, runner: CliRunner, tmp_path: Path) -> None:
        doc = tmp_path / "graph.json"
        doc.write_text(json.dumps({"nodes": [{"id": "a", "name": "a", "version": "1.0.0"}]}))
        result = runner.invoke(cli, ["convert", str(doc)])
        assert result.exit_code == 1
        assert "root" in result.output

    def test_missing_file_exits_2(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["convert", str(tmp_path / "absent.json")])
        assert result.exit_code == 2

    def test_verbose_flag(self, runner: CliRunner, graph_file: Path) -> None:
        result = runner.invoke(cli, ["-v", "convert", str(graph_file)])
        assert result.exit_code == 0

    def test_verbosity_applies_per_invocation(self, runner: CliRunner, graph_file: Path) -> None:
        root_logger = logging.getLogger()
        saved = root_logger.level
        try:
            runner.invoke(cli, ["-v", "convert", str(graph_file)])
            assert root_logger.level == logging.DEBUG
            runner.invoke(cli, ["convert", str(graph_file)])
            assert root_logger.level == logging.WARNING
            runner.invoke(cli, ["--verbose", "convert", str(graph_file)])
            assert root_logger.level == logging.DEBUG
        finally:
            root_logger.setLevel(saved)


class TestFromLock:
    """Tests for converting a lock file."""

    def test_auto_root(self, runner: CliRunner, lock_file: Path) -> None:
        result = runner.invoke(cli, ["from-lock", str(lock_file)])
        assert result.exit_code == 0
        assert '"name":"app","version":"0.1.0","source":"local"' in result.output
        assert '"dependencies":[0],"root":true' in result.output

    def test_explicit_root(self, runner: CliRunner, lock_file: Path) -> None:
        result = runner.invoke(cli, ["from-lock", str(lock_file), "--root", "serde"])
        assert result.exit_code == 0
        assert '"name":"serde","version":"1.0.200","source":"local","root":true' in result.output
        assert '"app"' not in result.output

    def test_unknown_root_exits_1(self, runner: CliRunner, lock_file: Path) -> None:
        result = runner.invoke(cli, ["from-lock", str(lock_file), "--root", "missing"])
        assert result.exit_code == 1
        assert "Cannot determine the root package" in result.output

    def test_writes_compressed_file(
        self, runner: CliRunner, lock_file: Path, tmp_path: Path
    ) -> None:
        out = tmp_path / "audit.bin"
        result = runner.invoke(
            cli, ["from-lock", str(lock_file), "-o", str(out), "--compress"]
        )
        assert result.exit_code == 0
        info = read(out)
        assert [p.name for p in info] == ["serde", "app"]

    def test_invalid_toml_exits_1(self, runner: CliRunner, tmp_path: Path) -> None:
        bad = tmp_path / "Cargo.lock"
        bad.write_text("[[package]\n")
        result = runner.invoke(cli, ["from-lock", str(bad)])
        assert result.exit_code == 1
        assert "Invalid TOML" in result.output
