from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable

from ._core_base import CGrovelError, DispatchError, is_header_kind
from ._core_context import BuildContext
from ._core_reader import Directive, Keyword, Symbol

ParseFn = Callable[[Directive], Any]
RenderFn = Callable[[Any, BuildContext], str]


@dataclass(frozen=True)
class DirectiveRule:
    kind: str
    parse: ParseFn
    render: RenderFn
    header: bool = False


@dataclass(frozen=True)
class PreparedDirective:
    directive: Directive
    rule: DirectiveRule
    spec: Any

    @property
    def header(self) -> bool:
        return self.rule.header

    def render(self, context: BuildContext) -> str:
        return self.rule.render(self.spec, context)


class DirectiveRegistry:
    """Maps directive kinds of one grammar to their parse/render rules."""

    def __init__(self, name: str, kinds: Iterable[str]) -> None:
        self.name = name
        self.kinds = frozenset(kinds)
        self._rules: dict[str, DirectiveRule] = {}

    def register(self, kind: str, parse: ParseFn, render: RenderFn) -> DirectiveRule:
        if kind not in self.kinds:
            known = ", ".join(sorted(self.kinds))
            raise CGrovelError(f"Directive '{kind}' is not part of the {self.name} grammar. Known kinds: {known}")
        if kind in self._rules:
            raise CGrovelError(f"Directive '{kind}' is already registered in the {self.name} grammar")
        rule = DirectiveRule(kind=kind, parse=parse, render=render, header=is_header_kind(kind))
        self._rules[kind] = rule
        return rule

    def registered_kinds(self) -> list[str]:
        return sorted(self._rules.keys())

    def rule_for(self, directive: Directive) -> DirectiveRule:
        rule = self._rules.get(directive.kind)
        if rule is None:
            raise DispatchError(
                f"Unknown directive '{directive.kind}' in {self.name} specification",
                source=directive.source,
                line=directive.line,
            )
        return rule

    def prepare(self, directives: list[Directive]) -> list[PreparedDirective]:
        prepared: list[PreparedDirective] = []
        for directive in directives:
            rule = self.rule_for(directive)
            prepared.append(PreparedDirective(directive=directive, rule=rule, spec=rule.parse(directive)))
        return prepared


def split_options(
    items: Iterable[Any],
    directive: Directive,
    allowed: set[str] | None,
    context: str = "form",
) -> tuple[list[Any], dict[str, Any]]:
    positional: list[Any] = []
    options: dict[str, Any] = {}
    values = list(items)
    index = 0
    while index < len(values):
        item = values[index]
        if isinstance(item, Keyword):
            if allowed is not None and item.name not in allowed:
                allowed_text = ", ".join(f":{name}" for name in sorted(allowed)) or "<none>"
                raise directive.error(f"unknown option :{item.name} in {context}; allowed: {allowed_text}")
            if index + 1 >= len(values):
                raise directive.error(f"option :{item.name} in {context} is missing its value")
            if item.name in options:
                raise directive.error(f"option :{item.name} given twice in {context}")
            options[item.name] = values[index + 1]
            index += 2
            continue
        if options:
            raise directive.error(f"positional argument {item!r} after options in {context}")
        positional.append(item)
        index += 1
    return positional, options


def name_arg(value: Any, directive: Directive, label: str) -> str:
    if isinstance(value, (Symbol, Keyword)):
        name = value.name
    elif isinstance(value, str):
        name = value
    else:
        raise directive.error(f"{label} must be a symbol or string, got {value!r}")
    if not name or '"' in name or "\\" in name:
        raise directive.error(f"{label} {name!r} is not a usable name")
    return name


def string_arg(value: Any, directive: Directive, label: str) -> str:
    if not isinstance(value, str) or not value:
        raise directive.error(f"{label} must be a non-empty string, got {value!r}")
    return value


def string_args(values: Iterable[Any], directive: Directive, label: str) -> tuple[str, ...]:
    out = tuple(string_arg(value, directive, f"{label}[{index}]") for index, value in enumerate(values))
    if not out:
        raise directive.error(f"expects at least one {label}")
    return out


def bool_option(options: dict[str, Any], key: str, directive: Directive) -> bool:
    value = options.get(key, False)
    if not isinstance(value, bool):
        raise directive.error(f":{key} must be t or nil, got {value!r}")
    return value


def doc_option(options: dict[str, Any], directive: Directive, key: str = "documentation") -> str | None:
    value = options.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise directive.error(f":{key} must be a string, got {value!r}")
    return value


def list_arg(value: Any, directive: Directive, label: str) -> list[Any]:
    if not isinstance(value, list) or not value:
        raise directive.error(f"{label} must be a non-empty list, got {value!r}")
    return list(value)
