"""package.json manifests."""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Any

from tandem.errors import ManifestError

MANIFEST_FILENAME = "package.json"


class DependencyType(Enum):
    """Dependency groups of a manifest, valued by their manifest key."""

    DEPENDENCIES = "dependencies"
    DEV = "devDependencies"
    PEER = "peerDependencies"
    OPTIONAL = "optionalDependencies"


class Manifest:
    """In-memory view of a package.json.

    Range rewrites mutate the loaded data only; call :meth:`write` to persist.
    Unknown keys are preserved in their original order.
    """

    def __init__(self, path: Path, data: dict[str, Any]) -> None:
        self.path = path
        self._data = data

    @classmethod
    def load(cls, path: Path) -> Manifest:
        """Read a manifest from disk.

        Raises:
            ManifestError: If the file is missing, not JSON, or lacks a name.
        """
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise ManifestError(path, str(e)) from e
        except json.JSONDecodeError as e:
            raise ManifestError(path, f"invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise ManifestError(path, "top level must be an object")
        if not isinstance(data.get("name"), str) or not data["name"]:
            raise ManifestError(path, "missing 'name'")
        for dep_type in DependencyType:
            group = data.get(dep_type.value)
            if group is not None and not isinstance(group, dict):
                raise ManifestError(path, f"'{dep_type.value}' must be an object")
        return cls(path, data)

    @property
    def name(self) -> str:
        return self._data["name"]

    @property
    def version(self) -> str:
        return str(self._data.get("version", "0.0.0"))

    @property
    def description(self) -> str | None:
        return self._data.get("description")

    @property
    def data(self) -> dict[str, Any]:
        return self._data

    def get_dependencies(self, dep_type: DependencyType) -> dict[str, str]:
        """Declared dependencies of one group (empty when absent)."""
        return dict(self._data.get(dep_type.value) or {})

    def get_all_dependencies(self) -> dict[str, str]:
        """All declared dependencies; earlier groups win on duplicate names."""
        merged: dict[str, str] = {}
        for dep_type in DependencyType:
            for name, range_ in self.get_dependencies(dep_type).items():
                merged.setdefault(name, range_)
        return merged

    def get_dependency_types(self, name: str) -> list[DependencyType]:
        """Groups in which ``name`` is declared."""
        return [t for t in DependencyType if name in (self._data.get(t.value) or {})]

    def get_dependency_range(self, name: str) -> str | None:
        """Declared range for ``name`` from the first group that has it."""
        for dep_type in self.get_dependency_types(name):
            return str(self._data[dep_type.value][name])
        return None

    def set_dependency_range(self, name: str, dep_type: DependencyType, range_: str) -> bool:
        """Rewrite the range of an existing declaration.

        Returns:
            True when the stored value changed.

        Raises:
            KeyError: If ``name`` is not declared under ``dep_type``.
        """
        group = self._data.get(dep_type.value) or {}
        if name not in group:
            raise KeyError(f"{name} is not a {dep_type.value} entry of {self.name}")
        if group[name] == range_:
            return False
        group[name] = range_
        return True

    def dumps(self) -> str:
        return json.dumps(self._data, indent=2, ensure_ascii=False) + "\n"

    def write(self) -> None:
        """Persist the manifest back to its file."""
        self.path.write_text(self.dumps(), encoding="utf-8")
