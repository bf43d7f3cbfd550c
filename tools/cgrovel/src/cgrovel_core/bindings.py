from __future__ import annotations

import ast
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ._core_base import CGrovelError


class MissingDefinitionWarning(UserWarning):
    pass


@dataclass(frozen=True)
class ConstantBinding:
    name: str
    value: int | float
    doc: str | None = None
    namespace: str | None = None


@dataclass(frozen=True)
class TypeBinding:
    name: str
    base: str
    size: int
    doc: str | None = None
    namespace: str | None = None


@dataclass(frozen=True)
class SlotBinding:
    name: str
    native_name: str
    type: str
    count: int
    size: int
    offset: int | None = None


@dataclass(frozen=True)
class RecordBinding:
    kind: str
    name: str
    native_type: str
    slots: tuple[SlotBinding, ...]
    size: int
    doc: str | None = None
    namespace: str | None = None

    def slot(self, name: str) -> SlotBinding:
        for item in self.slots:
            if item.name == name:
                return item
        raise KeyError(name)


@dataclass(frozen=True)
class EnumMemberBinding:
    name: str
    value: int
    doc: str | None = None


@dataclass(frozen=True)
class EnumBinding:
    name: str
    base_type: str
    members: tuple[EnumMemberBinding, ...]
    doc: str | None = None
    namespace: str | None = None

    def as_dict(self) -> dict[str, int]:
        return {member.name: member.value for member in self.members}


@dataclass(frozen=True)
class FunctionBinding:
    name: str
    symbol: str
    return_type: str
    params: tuple[tuple[str, str], ...]
    options: dict[str, Any]
    namespace: str | None = None


@dataclass(frozen=True)
class LibraryBinding:
    name: str
    search_path: str
    filename: str

    @property
    def path(self) -> Path:
        return Path(self.search_path) / self.filename


@dataclass
class BindingTable:
    """Declarations read back from a generated bindings file."""

    source: str
    namespace: str | None = None
    constants: dict[str, ConstantBinding] = field(default_factory=dict)
    types: dict[str, TypeBinding] = field(default_factory=dict)
    records: dict[str, RecordBinding] = field(default_factory=dict)
    record_types: dict[str, str] = field(default_factory=dict)
    enums: dict[str, EnumBinding] = field(default_factory=dict)
    functions: dict[str, FunctionBinding] = field(default_factory=dict)
    libraries: dict[str, LibraryBinding] = field(default_factory=dict)
    namespaces: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)

    # -- declaration handlers, called by name from the bindings file --

    def in_namespace(self, name: str) -> None:
        self.namespace = name
        if name not in self.namespaces:
            self.namespaces.append(name)

    def missing_definition(self, name: str) -> None:
        self.missing.append(name)
        warnings.warn(f"{self.source}: no definition found for '{name}'", MissingDefinitionWarning, stacklevel=2)

    def defconstant(self, name: str, value: int | float, doc: str | None = None) -> None:
        self.constants[name] = ConstantBinding(name=name, value=value, doc=doc, namespace=self.namespace)

    def defctype(self, name: str, base: str, size: int, doc: str | None = None) -> None:
        self.types[name] = TypeBinding(name=name, base=base, size=size, doc=doc, namespace=self.namespace)

    def slot(
        self,
        name: str,
        native_name: str,
        type: str,
        count: int | str,
        size: int,
        offset: int | None = None,
    ) -> SlotBinding:
        if isinstance(count, str):
            constant = self.constants.get(count)
            if constant is None or not isinstance(constant.value, int):
                raise CGrovelError(f"{self.source}: slot '{name}' uses unknown size constant '{count}'")
            count = constant.value
        return SlotBinding(name=name, native_name=native_name, type=type, count=count, size=size, offset=offset)

    def _record(self, kind: str, name: str, native_type: str, slots: list[Any], size: int, doc: str | None) -> None:
        self.records[name] = RecordBinding(
            kind=kind,
            name=name,
            native_type=native_type,
            slots=tuple(item for item in slots if isinstance(item, SlotBinding)),
            size=size,
            doc=doc,
            namespace=self.namespace,
        )

    def defcstruct(self, name: str, native_type: str, slots: list[Any], size: int, doc: str | None = None) -> None:
        self._record("struct", name, native_type, slots, size, doc)

    def defcunion(self, name: str, native_type: str, slots: list[Any], size: int, doc: str | None = None) -> None:
        self._record("union", name, native_type, slots, size, doc)

    def defrecordtype(self, name: str, kind: str) -> None:
        self.record_types[name] = kind

    def member(self, name: str, value: int, doc: str | None = None) -> EnumMemberBinding:
        return EnumMemberBinding(name=name, value=value, doc=doc)

    def defcenum(self, name: str, base_type: str, members: list[Any], doc: str | None = None) -> None:
        self.enums[name] = EnumBinding(
            name=name,
            base_type=base_type,
            members=tuple(item for item in members if isinstance(item, EnumMemberBinding)),
            doc=doc,
            namespace=self.namespace,
        )

    def define_foreign_library(self, name: str, search_path: str, filename: str) -> None:
        self.libraries[name] = LibraryBinding(name=name, search_path=search_path, filename=filename)

    def defcfun(self, name: str, symbol: str, return_type: str, params: list[tuple[str, str]], **options: Any) -> None:
        self.functions[name] = FunctionBinding(
            name=name,
            symbol=symbol,
            return_type=return_type,
            params=tuple((str(param), str(kind)) for param, kind in params),
            options=dict(options),
            namespace=self.namespace,
        )


STATEMENT_FUNCTIONS = {
    "in_namespace",
    "missing_definition",
    "defconstant",
    "defctype",
    "defcstruct",
    "defcunion",
    "defrecordtype",
    "defcenum",
    "define_foreign_library",
    "defcfun",
}
NESTED_FUNCTIONS = {"slot", "member", "missing_definition"}
NON_FINITE_FLOATS = {"inf", "-inf", "nan"}


def _non_finite_float(node: ast.Call, label: str) -> float:
    if (
        len(node.args) != 1
        or node.keywords
        or not isinstance(node.args[0], ast.Constant)
        or node.args[0].value not in NON_FINITE_FLOATS
    ):
        raise CGrovelError(f"{label}: float() only accepts one of {sorted(NON_FINITE_FLOATS)}")
    return float(node.args[0].value)


def _evaluate(node: ast.AST, table: BindingTable, label: str) -> Any:
    if isinstance(node, ast.Call):
        if isinstance(node.func, ast.Name) and node.func.id == "float":
            return _non_finite_float(node, label)
        return _call(node, table, NESTED_FUNCTIONS, label)
    if isinstance(node, ast.List):
        return [_evaluate(item, table, label) for item in node.elts]
    if isinstance(node, ast.Tuple):
        return tuple(_evaluate(item, table, label) for item in node.elts)
    try:
        return ast.literal_eval(node)
    except ValueError as exc:
        raise CGrovelError(f"{label}: unsupported expression {ast.dump(node)}") from exc


def _call(node: ast.Call, table: BindingTable, allowed: set[str], label: str) -> Any:
    if not isinstance(node.func, ast.Name) or node.func.id not in allowed:
        name = node.func.id if isinstance(node.func, ast.Name) else ast.dump(node.func)
        raise CGrovelError(f"{label}: unexpected call to '{name}'")
    args = [_evaluate(item, table, label) for item in node.args]
    kwargs: dict[str, Any] = {}
    for keyword in node.keywords:
        if keyword.arg is None:
            raise CGrovelError(f"{label}: '**' arguments are not allowed")
        kwargs[keyword.arg] = _evaluate(keyword.value, table, label)
    try:
        return getattr(table, node.func.id)(*args, **kwargs)
    except TypeError as exc:
        raise CGrovelError(f"{label}: bad arguments to {node.func.id}: {exc}") from exc


def parse_bindings(text: str, source: str = "<bindings>") -> BindingTable:
    try:
        module = ast.parse(text, filename=source)
    except SyntaxError as exc:
        raise CGrovelError(f"Invalid bindings file '{source}': {exc}") from exc

    table = BindingTable(source=source)
    for statement in module.body:
        label = f"{source}:{statement.lineno}"
        if not isinstance(statement, ast.Expr) or not isinstance(statement.value, ast.Call):
            raise CGrovelError(f"{label}: bindings files may only contain declaration calls")
        _call(statement.value, table, STATEMENT_FUNCTIONS, label)
    return table


def load_bindings(path: Path) -> BindingTable:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CGrovelError(f"Unable to read bindings file '{path}': {exc}") from exc
    return parse_bindings(text, source=str(path))
