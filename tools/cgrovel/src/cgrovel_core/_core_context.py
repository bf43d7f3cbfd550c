from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ._core_base import python_literal


@dataclass(frozen=True)
class Declaration:
    function: str
    args: tuple[Any, ...] = ()
    options: tuple[tuple[str, Any], ...] = ()

    def render(self) -> str:
        parts = [python_literal(item) for item in self.args]
        parts.extend(f"{key}={python_literal(value)}" for key, value in self.options)
        return f"{self.function}({', '.join(parts)})"


@dataclass
class BuildContext:
    """Per-run accumulator threaded through every directive rule.

    `flags` collects compiler flags in the order the specification adds them;
    `declarations` collects the declaration forms a wrapper run writes next to
    its shared library. `source_only` runs never start external tools, so
    pkg-config lookups are skipped. One instance belongs to exactly one
    pipeline run.
    """

    source_name: str
    flags: list[str] = field(default_factory=list)
    declarations: list[Declaration] = field(default_factory=list)
    source_only: bool = False

    def add_flags(self, flags: list[str]) -> None:
        self.flags.extend(flags)

    def declare(self, declaration: Declaration) -> None:
        self.declarations.append(declaration)
