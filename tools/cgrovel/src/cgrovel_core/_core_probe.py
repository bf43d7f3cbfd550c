from __future__ import annotations

from ._core_base import SUPPORT_HEADER, c_banner, c_string_literal, python_banner
from ._core_context import BuildContext
from ._core_reader import Directive
from ._core_registry import DirectiveRegistry, PreparedDirective
from ._core_rules import GROVEL_REGISTRY


def partition_directives(prepared: list[PreparedDirective]) -> tuple[list[PreparedDirective], list[PreparedDirective]]:
    header = [item for item in prepared if item.header]
    body = [item for item in prepared if not item.header]
    return header, body


def render_probe_prologue(source_name: str) -> str:
    lines = [
        f'#include "{SUPPORT_HEADER}"',
        "",
        "int main(int argc, char **argv)",
        "{",
        '  FILE *output = argc > 1 ? fopen(argv[1], "w") : stdout;',
        "  if (output == NULL) {",
        "    perror(argv[1]);",
        "    return 1;",
        "  }",
        f"  fputs({c_string_literal(python_banner(source_name))}, output);",
    ]
    return "\n".join(lines) + "\n"


def render_probe_epilogue() -> str:
    lines = [
        "  if (output != stdout)",
        "    fclose(output);",
        "  return 0;",
        "}",
    ]
    return "\n".join(lines) + "\n"


def generate_probe_source(
    directives: list[Directive],
    source_name: str,
    context: BuildContext | None = None,
    registry: DirectiveRegistry = GROVEL_REGISTRY,
) -> tuple[str, BuildContext]:
    """Render the C source of a probe program for a grovel specification.

    Every directive is validated before anything is rendered. The result is laid
    out as banner, header forms, generic prologue, body forms, epilogue: header
    text must stay valid at file scope and body text inside ``main``.
    """
    if context is None:
        context = BuildContext(source_name=source_name)
    prepared = registry.prepare(directives)
    header, body = partition_directives(prepared)

    parts = [c_banner(source_name), "\n"]
    parts.extend(item.render(context) for item in header)
    parts.append("\n")
    parts.append(render_probe_prologue(source_name))
    parts.append("\n")
    parts.extend(item.render(context) for item in body)
    parts.append("\n")
    parts.append(render_probe_epilogue())
    return "".join(parts), context
