from __future__ import annotations

from ._core_base import c_banner
from ._core_context import BuildContext
from ._core_reader import Directive
from ._core_registry import DirectiveRegistry
from ._core_rules import WRAPPER_REGISTRY


def generate_wrapper_source(
    directives: list[Directive],
    source_name: str,
    context: BuildContext | None = None,
    registry: DirectiveRegistry = WRAPPER_REGISTRY,
) -> tuple[str, BuildContext]:
    # No header/body split here: shims, includes and raw text keep file order.
    if context is None:
        context = BuildContext(source_name=source_name)
    prepared = registry.prepare(directives)
    parts = [c_banner(source_name), "\n"]
    parts.extend(item.render(context) for item in prepared)
    return "".join(parts), context
