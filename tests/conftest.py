"""Shared test fixtures for tandem tests."""

from __future__ import annotations

import json
import tempfile
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
from dotenv import load_dotenv

from tandem.diagnostics import DiagnosticCollector
from tandem.workspace.manifest import Manifest
from tandem.workspace.package import Package

# Load .env from project root (doesn't override existing env vars)
load_dotenv(Path(__file__).parent.parent / ".env")

PackageFactory = Callable[..., Package]


def write_manifest(path: Path, data: dict[str, Any]) -> Path:
    """Write ``data`` as package.json in ``path``."""
    path.mkdir(parents=True, exist_ok=True)
    manifest = path / "package.json"
    manifest.write_text(json.dumps(data, indent=2) + "\n")
    return manifest


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def diagnostics() -> DiagnosticCollector:
    """Collect diagnostics instead of logging them."""
    return DiagnosticCollector()


@pytest.fixture
def manifest_writer() -> Callable[[Path, dict[str, Any]], Path]:
    """Write a package.json into a directory."""
    return write_manifest


@pytest.fixture
def make_package(temp_dir: Path) -> PackageFactory:
    """Build an in-memory package without touching disk.

    Usage: ``make_package("foo", "1.0.0", dependencies={"bar": "^1.0.0"})``
    """

    def factory(name: str, version: str = "1.0.0", **groups: dict[str, str]) -> Package:
        path = temp_dir / "packages" / name.replace("/", "__")
        data: dict[str, Any] = {"name": name, "version": version}
        for key, deps in groups.items():
            data[key] = dict(deps)
        return Package(path=path, manifest=Manifest(path / "package.json", data))

    return factory


@pytest.fixture
def sample_tandem_yaml() -> str:
    """Sample tandem.yaml content."""
    return """\
name: test-workspace
packages:
  - packages/*

env:
  CI: "true"

scripts:
  build: echo building
  test:
    run: echo testing
    description: Run tests
    env:
      NODE_ENV: test
  lint:
    run: echo linting
    scope: "pkg-a,pkg-b"
    topological: false

command_defaults:
  fail_fast: false
"""


@pytest.fixture
def workspace_dir(temp_dir: Path, sample_tandem_yaml: str) -> Path:
    """Create a sample workspace: pkg-c -> pkg-b -> pkg-a."""
    (temp_dir / "tandem.yaml").write_text(sample_tandem_yaml)
    write_manifest(temp_dir, {"name": "test-workspace", "private": True})

    write_manifest(
        temp_dir / "packages" / "pkg-a",
        {"name": "pkg-a", "version": "1.0.0", "description": "Package A"},
    )
    write_manifest(
        temp_dir / "packages" / "pkg-b",
        {
            "name": "pkg-b",
            "version": "2.0.0",
            "description": "Package B",
            "dependencies": {"pkg-a": "^1.0.0", "left-pad": "^1.3.0"},
        },
    )
    write_manifest(
        temp_dir / "packages" / "pkg-c",
        {
            "name": "pkg-c",
            "version": "0.1.0",
            "description": "Package C",
            "dependencies": {"pkg-b": "~2.0.0"},
            "devDependencies": {"pkg-a": "1.0.0"},
        },
    )
    return temp_dir
