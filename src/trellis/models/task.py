"""
Task definitions.

A task is declared under ``tasks`` (or ``target.<platform>.tasks``) in one of
three forms:

    tasks:
      test: "pytest -q"                       # plain command
      fmt: ["ruff", "format", "."]            # argv list
      check:                                  # full table
        cmd: "ruff check ."
        depends_on: [fmt]
        cwd: src
      ci:                                     # alias: no command, only deps
        depends_on: [check, test]
"""

from __future__ import annotations

import shlex
from pathlib import Path
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Task(BaseModel):
    """One runnable (or alias) task."""

    cmd: Optional[Union[str, List[str]]] = Field(
        None, description="Command string or argument list; None for an alias task"
    )
    depends_on: List[str] = Field(
        default_factory=list,
        alias="depends-on",
        description="Names of tasks that must run first",
    )
    cwd: Optional[Path] = Field(None, description="Working directory, relative to the project root")

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def parse_short_forms(cls, data: Any) -> Any:
        if isinstance(data, (str, list)):
            return {"cmd": data}
        return data

    @field_validator("depends_on", mode="before")
    @classmethod
    def single_dependency(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return v

    @model_validator(mode="after")
    def validate_not_empty(self) -> "Task":
        if self.cmd is None and not self.depends_on:
            raise ValueError("a task needs a 'cmd', a 'depends_on' list, or both")
        if isinstance(self.cmd, list) and not self.cmd:
            raise ValueError("a task command list cannot be empty")
        return self

    @property
    def is_alias(self) -> bool:
        return self.cmd is None

    def as_single_command(self) -> Optional[str]:
        """The command as one shell string, or None for an alias."""
        if self.cmd is None:
            return None
        if isinstance(self.cmd, str):
            return self.cmd
        return " ".join(shlex.quote(arg) for arg in self.cmd)

    def to_manifest(self) -> Any:
        """Shortest form that round-trips through the manifest."""
        if not self.depends_on and self.cwd is None:
            return self.cmd
        table: dict = {}
        if self.cmd is not None:
            table["cmd"] = self.cmd
        if self.depends_on:
            table["depends_on"] = list(self.depends_on)
        if self.cwd is not None:
            table["cwd"] = str(self.cwd)
        return table

    def __str__(self) -> str:
        command = self.as_single_command()
        if command is None:
            return f"alias of {', '.join(self.depends_on)}"
        return command
