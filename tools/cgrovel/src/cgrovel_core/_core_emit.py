from __future__ import annotations

from pathlib import Path

from ._core_base import CGrovelError, python_banner
from ._core_context import BuildContext, Declaration


def library_declaration(lib_name: str, library_path: Path) -> Declaration:
    return Declaration(
        "define_foreign_library",
        (lib_name,),
        (
            ("search_path", str(library_path.parent.resolve())),
            ("filename", library_path.name),
        ),
    )


def render_declarations_file(context: BuildContext, lib_name: str, library_path: Path) -> str:
    lines = [library_declaration(lib_name, library_path).render()]
    lines.extend(declaration.render() for declaration in context.declarations)
    return python_banner(context.source_name) + "\n".join(lines) + "\n"


def write_text(path: Path, content: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise CGrovelError(f"Unable to write '{path}': {exc}") from exc
