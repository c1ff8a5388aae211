"""Locate and load tandem.yaml."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import ValidationError

from tandem.config.schema import TandemConfig
from tandem.errors import ConfigurationError, WorkspaceNotFoundError

CONFIG_FILENAME = "tandem.yaml"


def find_config(start: Path | None = None) -> Path:
    """Walk upwards from ``start`` to the first directory holding tandem.yaml.

    Raises:
        WorkspaceNotFoundError: If no config file exists up to the filesystem root.
    """
    start = (start or Path.cwd()).resolve()
    for directory in (start, *start.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    raise WorkspaceNotFoundError(start)


def load_config(path: Path) -> TandemConfig:
    """Parse and validate a config file.

    Args:
        path: Path to tandem.yaml.

    Returns:
        Validated configuration.

    Raises:
        ConfigurationError: On unreadable YAML or schema violations.
    """
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigurationError(f"cannot read file: {e}", path) from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"invalid YAML: {e}", path) from e

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigurationError("top level must be a mapping", path)

    try:
        return TandemConfig.model_validate(raw)
    except ValidationError as e:
        errors = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigurationError(errors, path) from e
