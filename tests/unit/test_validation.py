"""Tests for project validation."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

from tandem.diagnostics import DiagnosticKind
from tandem.validation import validate_project
from tandem.workspace.workspace import Workspace


def test_valid_project(workspace_dir: Path, diagnostics) -> None:
    workspace = Workspace.discover(workspace_dir)

    assert validate_project(workspace, on_diagnostic=diagnostics) is True
    assert len(diagnostics) == 0


def test_tandem_version_requirement(workspace_dir: Path, diagnostics) -> None:
    config = workspace_dir / "tandem.yaml"
    config.write_text(config.read_text() + 'tandem_version: ">=2.0.0"\n')
    workspace = Workspace.discover(workspace_dir)

    with patch("tandem.__version__", "1.4.0"):
        assert validate_project(workspace, on_diagnostic=diagnostics) is False

    [diagnostic] = diagnostics.diagnostics
    assert diagnostic.kind == DiagnosticKind.PROJECT_VALIDITY
    assert ">=2.0.0" in diagnostic.message
    assert "1.4.0" in diagnostic.message


def test_tandem_version_satisfied(workspace_dir: Path, diagnostics) -> None:
    config = workspace_dir / "tandem.yaml"
    config.write_text(config.read_text() + 'tandem_version: "^2.1.0"\n')
    workspace = Workspace.discover(workspace_dir)

    with patch("tandem.__version__", "2.3.0"):
        assert validate_project(workspace, on_diagnostic=diagnostics) is True


def test_root_depends_on_workspace_package(workspace_dir: Path, diagnostics) -> None:
    (workspace_dir / "package.json").write_text(
        json.dumps({"name": "root", "dependencies": {"pkg-b": "^2.0.0", "typescript": "^5.0.0"}})
    )
    workspace = Workspace.discover(workspace_dir)

    assert validate_project(workspace, on_diagnostic=diagnostics) is False
    [diagnostic] = diagnostics.diagnostics
    assert diagnostic.packages == ("pkg-b",)


def test_reports_every_problem(workspace_dir: Path, diagnostics) -> None:
    (workspace_dir / "package.json").write_text(
        json.dumps({"name": "root", "devDependencies": {"pkg-a": "*"}})
    )
    manifest = workspace_dir / "packages" / "pkg-c" / "package.json"
    data = json.loads(manifest.read_text())
    data["dependencies"]["pkg-b"] = "^3.0.0"
    manifest.write_text(json.dumps(data))
    workspace = Workspace.discover(workspace_dir)

    assert validate_project(workspace, on_diagnostic=diagnostics) is False
    assert [d.kind for d in diagnostics] == [
        DiagnosticKind.PROJECT_VALIDITY,
        DiagnosticKind.GRAPH_VALIDITY,
    ]


def test_defaults_to_workspace_sink(workspace_dir: Path, diagnostics) -> None:
    (workspace_dir / "package.json").write_text(
        json.dumps({"name": "root", "devDependencies": {"pkg-a": "*"}})
    )
    workspace = Workspace.discover(workspace_dir, on_diagnostic=diagnostics)

    validate_project(workspace)

    assert len(diagnostics) == 1
