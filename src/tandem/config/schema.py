"""Pydantic models for tandem.yaml."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ScriptConfig(BaseModel):
    """A named script runnable across packages."""

    model_config = ConfigDict(extra="forbid")

    run: str
    description: str | None = None
    env: dict[str, str] = Field(default_factory=dict)
    scope: str | None = None
    fail_fast: bool = False
    topological: bool = True


class CommandDefaults(BaseModel):
    """Defaults applied to run/exec when not given on the command line."""

    model_config = ConfigDict(extra="forbid")

    concurrency: int | None = None
    fail_fast: bool = False
    topological: bool = True

    @field_validator("concurrency")
    @classmethod
    def _positive(cls, value: int | None) -> int | None:
        if value is not None and value < 1:
            raise ValueError("concurrency must be at least 1")
        return value


class TandemConfig(BaseModel):
    """Root configuration model."""

    model_config = ConfigDict(extra="forbid")

    name: str
    packages: list[str] = Field(default_factory=lambda: ["packages/*"])
    ignore: list[str] = Field(default_factory=list)
    tandem_version: str | None = None
    env: dict[str, str] = Field(default_factory=dict)
    scripts: dict[str, ScriptConfig] = Field(default_factory=dict)
    command_defaults: CommandDefaults = Field(default_factory=CommandDefaults)

    @field_validator("packages")
    @classmethod
    def _not_empty(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("at least one package pattern is required")
        return value

    @field_validator("scripts", mode="before")
    @classmethod
    def _expand_short_scripts(cls, value: Any) -> Any:
        # `test: pytest` is shorthand for `test: {run: pytest}`
        if isinstance(value, dict):
            return {
                name: {"run": script} if isinstance(script, str) else script
                for name, script in value.items()
            }
        return value

    def get_script(self, name: str) -> ScriptConfig | None:
        return self.scripts.get(name)

    @property
    def script_names(self) -> list[str]:
        return sorted(self.scripts)
