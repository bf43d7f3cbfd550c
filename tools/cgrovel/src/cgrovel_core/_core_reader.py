from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ._core_base import CGrovelError, SpecError

GROUPING_KIND = "progn"
NAMESPACE_KIND = "in-namespace"

_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
  | (?P<comment>;[^\n]*)
  | (?P<block>\#\|.*?\|\#)
  | (?P<open>\()
  | (?P<close>\))
  | (?P<string>"(?:[^"\\]|\\.)*")
  | (?P<atom>[^\s()";]+)
    """,
    re.S | re.X,
)
_STRING_ESCAPES = {"n": "\n", "t": "\t", '"': '"', "\\": "\\"}


@dataclass(frozen=True)
class Symbol:
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Keyword:
    name: str

    def __str__(self) -> str:
        return f":{self.name}"


class FormList(list):
    """A parenthesized form; remembers the line its opening paren was on."""

    def __init__(self, items: list[Any] | None = None, line: int = 0) -> None:
        super().__init__(items or [])
        self.line = line


@dataclass(frozen=True)
class Directive:
    kind: str
    args: tuple[Any, ...]
    line: int
    source: str | None = None

    def error(self, message: str) -> SpecError:
        return SpecError(f"({self.kind} ...): {message}", source=self.source, line=self.line)


def _read_string(raw: str, source: str, line: int) -> str:
    out: list[str] = []
    index = 1
    end = len(raw) - 1
    while index < end:
        ch = raw[index]
        if ch == "\\":
            escaped = raw[index + 1]
            if escaped not in _STRING_ESCAPES:
                raise SpecError(f"Unsupported string escape '\\{escaped}'", source=source, line=line)
            out.append(_STRING_ESCAPES[escaped])
            index += 2
            continue
        out.append(ch)
        index += 1
    return "".join(out)


def _read_atom(raw: str, source: str, line: int) -> Any:
    if re.fullmatch(r"-?[0-9]+", raw):
        return int(raw)
    if re.fullmatch(r"(?:#x|0x)[0-9A-Fa-f]+", raw, flags=re.I):
        return int(raw[2:], 16)
    lowered = raw.lower()
    if lowered == "t":
        return True
    if lowered == "nil":
        return False
    if raw.startswith(":"):
        if len(raw) == 1 or ":" in raw[1:]:
            raise SpecError(f"Malformed keyword '{raw}'", source=source, line=line)
        return Keyword(lowered[1:])
    if ":" in raw:
        raise SpecError(f"Package-qualified symbol '{raw}' is not supported", source=source, line=line)
    return Symbol(raw)


def read_forms(text: str, source: str = "<spec>") -> list[Any]:
    stack: list[FormList] = [FormList(line=1)]
    line = 1
    pos = 0
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            if text[pos] == '"':
                raise SpecError("Unterminated string", source=source, line=line)
            raise SpecError(f"Unexpected input {text[pos:pos + 20]!r}", source=source, line=line)
        kind = match.lastgroup
        raw = match.group(0)
        if kind == "open":
            stack.append(FormList(line=line))
        elif kind == "close":
            if len(stack) == 1:
                raise SpecError("Unbalanced ')'", source=source, line=line)
            form = stack.pop()
            stack[-1].append(form)
        elif kind == "string":
            stack[-1].append(_read_string(raw, source, line))
        elif kind == "atom":
            stack[-1].append(_read_atom(raw, source, line))
        line += raw.count("\n")
        pos = match.end()

    if len(stack) != 1:
        raise SpecError("Unterminated form; missing ')'", source=source, line=stack[-1].line)
    return list(stack[0])


def _namespace_name(value: Any, directive: Directive) -> str:
    if isinstance(value, (Symbol, Keyword)):
        return value.name
    if isinstance(value, str) and value:
        return value
    raise directive.error("namespace must be a symbol, keyword, or string")


def read_directives(forms: list[Any], source: str = "<spec>") -> list[Directive]:
    out: list[Directive] = []

    def visit(form: Any) -> None:
        line = form.line if isinstance(form, FormList) else 0
        if not isinstance(form, list) or not form:
            raise SpecError(f"Top-level form must be a non-empty list, got {form!r}", source=source, line=line or None)
        head = form[0]
        if not isinstance(head, Symbol):
            raise SpecError(f"Directive head must be a symbol, got {head!r}", source=source, line=line)
        kind = head.name.lower()
        if kind == GROUPING_KIND:
            for child in form[1:]:
                visit(child)
            return
        directive = Directive(kind=kind, args=tuple(form[1:]), line=line, source=source)
        if kind == NAMESPACE_KIND:
            if len(directive.args) != 1:
                raise directive.error("expects exactly one namespace name")
            name = _namespace_name(directive.args[0], directive)
            directive = Directive(kind=kind, args=(name,), line=line, source=source)
        out.append(directive)

    for form in forms:
        visit(form)
    return out


def read_spec_text(text: str, source: str = "<spec>") -> list[Directive]:
    return read_directives(read_forms(text, source=source), source=source)


def read_spec_file(path: Path) -> list[Directive]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CGrovelError(f"Unable to read specification file '{path}': {exc}") from exc
    return read_spec_text(text, source=str(path))
