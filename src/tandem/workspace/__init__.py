"""Workspace discovery, manifests and the dependency graph."""

from tandem.workspace.graph import DependencyGraph, GraphEntry
from tandem.workspace.manifest import MANIFEST_FILENAME, DependencyType, Manifest
from tandem.workspace.package import Package
from tandem.workspace.workspace import Workspace

__all__ = [
    "MANIFEST_FILENAME",
    "DependencyGraph",
    "DependencyType",
    "GraphEntry",
    "Manifest",
    "Package",
    "Workspace",
]
