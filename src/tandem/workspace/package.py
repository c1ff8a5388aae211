"""Workspace package model."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from tandem.workspace.manifest import MANIFEST_FILENAME, Manifest


@dataclass(eq=False)
class Package:
    """A package living in the workspace.

    Identity-hashed: two loads of the same directory are different packages.

    Attributes:
        path: Package directory.
        manifest: Loaded package.json.
    """

    path: Path
    manifest: Manifest = field(repr=False)

    @classmethod
    def load(cls, path: Path) -> Package:
        """Load the package in ``path``."""
        return cls(path=path, manifest=Manifest.load(path / MANIFEST_FILENAME))

    @property
    def name(self) -> str:
        return self.manifest.name

    @property
    def version(self) -> str:
        return self.manifest.version

    @property
    def description(self) -> str | None:
        return self.manifest.description

    @property
    def manifest_path(self) -> Path:
        return self.manifest.path

    def __repr__(self) -> str:
        return f"Package(name={self.name!r}, path={str(self.path)!r})"
