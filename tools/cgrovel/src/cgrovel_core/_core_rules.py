from __future__ import annotations

import re
import shlex
from dataclasses import dataclass
from typing import Any

from ._core_base import c_identifier, c_string_literal, is_c_identifier, python_literal
from ._core_build import pkg_config_cflags
from ._core_context import BuildContext, Declaration
from ._core_reader import Directive, Keyword, Symbol
from ._core_registry import (
    DirectiveRegistry,
    bool_option,
    doc_option,
    list_arg,
    name_arg,
    split_options,
    string_arg,
    string_args,
)

GROVEL_KINDS = (
    "c",
    "include",
    "define",
    "typedef",
    "in-namespace",
    "flag",
    "cc-flags",
    "pkg-config-cflags",
    "constant",
    "ctype",
    "cstruct",
    "cunion",
    "cenum",
    "constantenum",
)
WRAPPER_KINDS = (
    "c",
    "include",
    "define",
    "typedef",
    "in-namespace",
    "flag",
    "cc-flags",
    "pkg-config-cflags",
    "defwrapper",
    "defwrapper*",
)

PRIMITIVE_C_TYPES = {
    "char": "char",
    "uchar": "unsigned char",
    "unsigned-char": "unsigned char",
    "short": "short",
    "ushort": "unsigned short",
    "unsigned-short": "unsigned short",
    "int": "int",
    "uint": "unsigned int",
    "unsigned-int": "unsigned int",
    "long": "long",
    "ulong": "unsigned long",
    "unsigned-long": "unsigned long",
    "llong": "long long",
    "long-long": "long long",
    "ullong": "unsigned long long",
    "unsigned-long-long": "unsigned long long",
    "int8": "int8_t",
    "uint8": "uint8_t",
    "int16": "int16_t",
    "uint16": "uint16_t",
    "int32": "int32_t",
    "uint32": "uint32_t",
    "int64": "int64_t",
    "uint64": "uint64_t",
    "size": "size_t",
    "ssize": "ssize_t",
    "float": "float",
    "double": "double",
    "pointer": "void*",
    "string": "char*",
    "bool": "_Bool",
    "void": "void",
}
CONSTANT_VALUE_TYPES = {"integer": "CGROVEL_PRINT_INTEGER", "double": "CGROVEL_PRINT_DOUBLE", "double-float": "CGROVEL_PRINT_DOUBLE"}
_MEMBER_DESIGNATOR_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(?:\.[A-Za-z_][A-Za-z0-9_]*)*$")


@dataclass(frozen=True)
class RawSpec:
    text: str


@dataclass(frozen=True)
class IncludeSpec:
    headers: tuple[str, ...]


@dataclass(frozen=True)
class DefineSpec:
    name: str
    value: str | None


@dataclass(frozen=True)
class TypedefSpec:
    base: str
    alias: str


@dataclass(frozen=True)
class NamespaceSpec:
    name: str


@dataclass(frozen=True)
class FlagSpec:
    flags: tuple[str, ...]


@dataclass(frozen=True)
class PkgConfigSpec:
    packages: tuple[str, ...]
    optional: bool


@dataclass(frozen=True)
class ConstantSpec:
    name: str
    candidates: tuple[str, ...]
    optional: bool = False
    doc: str | None = None
    value_type: str = "integer"


@dataclass(frozen=True)
class CTypeSpec:
    name: str
    c_type: str
    doc: str | None = None


@dataclass(frozen=True)
class SlotSpec:
    name: str
    native_name: str
    type_name: str
    count: int | str
    auto: bool = False


@dataclass(frozen=True)
class RecordSpec:
    kind: str
    name: str
    native_type: str
    slots: tuple[SlotSpec, ...]
    doc: str | None = None


@dataclass(frozen=True)
class EnumMemberSpec:
    name: str
    candidates: tuple[str, ...]
    optional: bool = False
    doc: str | None = None


@dataclass(frozen=True)
class EnumSpec:
    kind: str
    name: str
    base_type: str
    members: tuple[EnumMemberSpec, ...]
    define_constants: bool = False
    doc: str | None = None


@dataclass(frozen=True)
class WrapperParam:
    name: str
    binding_type: str
    c_type: str


@dataclass(frozen=True)
class WrapperSpec:
    name: str
    native_name: str
    options: tuple[tuple[str, Any], ...]
    return_type: str
    return_c_type: str
    params: tuple[WrapperParam, ...]
    body: tuple[str, ...] | None = None

    @property
    def symbol(self) -> str:
        return f"{c_identifier(self.native_name)}_wrap"


# ---------------------------------------------------------------------------
# Shape parsing
# ---------------------------------------------------------------------------


def _macro_name(value: Any, directive: Directive, label: str) -> str:
    name = string_arg(value, directive, label)
    if not is_c_identifier(name):
        raise directive.error(f"{label} {name!r} is not a C identifier")
    return name


def _type_designator(value: Any, directive: Directive, label: str) -> str:
    if isinstance(value, (Keyword, Symbol)):
        return value.name
    if isinstance(value, str) and value:
        return value
    raise directive.error(f"{label} must be a keyword, symbol, or string, got {value!r}")


def parse_raw(directive: Directive) -> RawSpec:
    return RawSpec(text="\n".join(string_args(directive.args, directive, "C text")))


def parse_include(directive: Directive) -> IncludeSpec:
    return IncludeSpec(headers=string_args(directive.args, directive, "header"))


def parse_define(directive: Directive) -> DefineSpec:
    if len(directive.args) not in (1, 2):
        raise directive.error("expects a macro name and an optional value")
    name = name_arg(directive.args[0], directive, "macro name")
    if not is_c_identifier(name):
        raise directive.error(f"macro name {name!r} is not a C identifier")
    value: str | None = None
    if len(directive.args) == 2:
        raw = directive.args[1]
        if isinstance(raw, bool) or not isinstance(raw, (str, int)):
            raise directive.error(f"macro value must be a string or integer, got {raw!r}")
        value = str(raw)
    return DefineSpec(name=name, value=value)


def parse_typedef(directive: Directive) -> TypedefSpec:
    if len(directive.args) != 2:
        raise directive.error("expects a base type and an alias")
    base = string_arg(directive.args[0], directive, "base type")
    alias = _macro_name(directive.args[1], directive, "alias")
    return TypedefSpec(base=base, alias=alias)


def parse_namespace(directive: Directive) -> NamespaceSpec:
    return NamespaceSpec(name=name_arg(directive.args[0], directive, "namespace"))


def parse_flags(directive: Directive) -> FlagSpec:
    flags: list[str] = []
    for value in string_args(directive.args, directive, "flag"):
        flags.extend(shlex.split(value))
    return FlagSpec(flags=tuple(flags))


def parse_pkg_config(directive: Directive) -> PkgConfigSpec:
    positional, options = split_options(directive.args, directive, {"optional"})
    return PkgConfigSpec(
        packages=string_args(positional, directive, "package"),
        optional=bool_option(options, "optional", directive),
    )


def parse_constant(directive: Directive) -> ConstantSpec:
    if not directive.args:
        raise directive.error("expects (name \"MACRO\" ...) followed by options")
    head = list_arg(directive.args[0], directive, "constant head")
    if len(head) < 2:
        raise directive.error("constant head needs a name and at least one candidate macro")
    extra, options = split_options(directive.args[1:], directive, {"optional", "documentation", "type"})
    if extra:
        raise directive.error(f"unexpected arguments {extra!r}; constant options are keywords")
    value_type = _type_designator(options.get("type", "integer"), directive, ":type")
    if value_type not in CONSTANT_VALUE_TYPES:
        raise directive.error(f":type must be one of {', '.join(sorted(CONSTANT_VALUE_TYPES))}, got {value_type!r}")
    return ConstantSpec(
        name=name_arg(head[0], directive, "constant name"),
        candidates=tuple(_macro_name(item, directive, "candidate macro") for item in head[1:]),
        optional=bool_option(options, "optional", directive),
        doc=doc_option(options, directive),
        value_type="double" if value_type == "double-float" else value_type,
    )


def parse_ctype(directive: Directive) -> CTypeSpec:
    positional, options = split_options(directive.args, directive, {"documentation"})
    if len(positional) != 2:
        raise directive.error("expects a name and a C type")
    return CTypeSpec(
        name=name_arg(positional[0], directive, "type name"),
        c_type=string_arg(positional[1], directive, "C type"),
        doc=doc_option(options, directive),
    )


def _parse_slot(form: Any, directive: Directive, index: int) -> SlotSpec:
    items = list_arg(form, directive, f"slot[{index}]")
    positional, options = split_options(items, directive, {"type", "count"}, context=f"slot[{index}]")
    if len(positional) != 2:
        raise directive.error(f"slot[{index}] expects (name \"c_field\" :type type [:count n])")
    native_name = string_arg(positional[1], directive, f"slot[{index}] C field")
    if not _MEMBER_DESIGNATOR_RE.match(native_name):
        raise directive.error(f"slot[{index}] C field {native_name!r} is not a member designator")
    if "type" not in options:
        raise directive.error(f"slot[{index}] is missing :type")
    count = options.get("count", 1)
    auto = False
    if isinstance(count, Keyword):
        if count.name != "auto":
            raise directive.error(f"slot[{index}] :count keyword must be :auto, got {count}")
        auto = True
        count = "auto"
    elif isinstance(count, Symbol):
        count = count.name
    elif isinstance(count, bool) or not isinstance(count, int) or count < 0:
        raise directive.error(f"slot[{index}] :count must be a non-negative integer, a constant name, or :auto")
    return SlotSpec(
        name=name_arg(positional[0], directive, f"slot[{index}] name"),
        native_name=native_name,
        type_name=_type_designator(options["type"], directive, f"slot[{index}] :type"),
        count=count,
        auto=auto,
    )


def _split_doc_and_forms(values: list[Any]) -> tuple[str | None, list[Any]]:
    doc: str | None = None
    if values and isinstance(values[0], str):
        doc = values[0]
        values = values[1:]
    return doc, values


def _record_parser(kind: str):
    def parse(directive: Directive) -> RecordSpec:
        if len(directive.args) < 2:
            raise directive.error(f"expects a name and a C {kind} type")
        doc, slot_forms = _split_doc_and_forms(list(directive.args[2:]))
        slots = tuple(_parse_slot(form, directive, index) for index, form in enumerate(slot_forms))
        if not slots:
            raise directive.error(f"{kind} needs at least one slot")
        auto_slots = [slot for slot in slots if slot.auto]
        if auto_slots and kind == "struct" and slots[-1] is not auto_slots[0]:
            raise directive.error(":count :auto is only allowed on the last slot of a struct")
        return RecordSpec(
            kind=kind,
            name=name_arg(directive.args[0], directive, f"{kind} name"),
            native_type=string_arg(directive.args[1], directive, f"C {kind} type"),
            slots=slots,
            doc=doc,
        )

    return parse


def _parse_enum_member(form: Any, directive: Directive, index: int, single_candidate: bool) -> EnumMemberSpec:
    items = list_arg(form, directive, f"member[{index}]")
    head = list_arg(items[0], directive, f"member[{index}] head")
    extra, options = split_options(items[1:], directive, {"optional", "documentation"}, context=f"member[{index}]")
    if extra:
        raise directive.error(f"member[{index}] has unexpected arguments {extra!r}")
    candidates = tuple(_macro_name(item, directive, f"member[{index}] C name") for item in head[1:])
    if not candidates:
        raise directive.error(f"member[{index}] needs a C name")
    if single_candidate and len(candidates) != 1:
        raise directive.error(f"member[{index}] of a cenum takes exactly one C name")
    return EnumMemberSpec(
        name=name_arg(head[0], directive, f"member[{index}] name"),
        candidates=candidates,
        optional=bool_option(options, "optional", directive),
        doc=doc_option(options, directive),
    )


def _enum_parser(kind: str):
    allowed = {"base-type", "define-constants"} if kind == "constantenum" else {"base-type"}

    def parse(directive: Directive) -> EnumSpec:
        if not directive.args:
            raise directive.error("expects a name and members")
        head = directive.args[0]
        options: dict[str, Any] = {}
        if isinstance(head, list):
            items = list_arg(head, directive, "enum head")
            extra, options = split_options(items[1:], directive, allowed, context="enum head")
            if extra:
                raise directive.error(f"enum head has unexpected arguments {extra!r}")
            head = items[0]
        doc, member_forms = _split_doc_and_forms(list(directive.args[1:]))
        members = tuple(
            _parse_enum_member(form, directive, index, single_candidate=(kind == "cenum"))
            for index, form in enumerate(member_forms)
        )
        if not members:
            raise directive.error("enum needs at least one member")
        return EnumSpec(
            kind=kind,
            name=name_arg(head, directive, "enum name"),
            base_type=_type_designator(options.get("base-type", "int"), directive, ":base-type"),
            members=members,
            define_constants=bool_option(options, "define-constants", directive),
            doc=doc,
        )

    return parse


def _parse_wrapper_type(value: Any, directive: Directive, label: str) -> tuple[str, str]:
    if isinstance(value, list):
        if len(value) != 2:
            raise directive.error(f"{label} expects (type \"C type\")")
        return _type_designator(value[0], directive, label), string_arg(value[1], directive, f"{label} C type")
    designator = _type_designator(value, directive, label)
    if isinstance(value, str):
        return designator, designator
    c_type = PRIMITIVE_C_TYPES.get(designator)
    if c_type is None:
        raise directive.error(f"{label} {designator!r} is not a primitive type; spell it as ({designator} \"C type\")")
    return designator, c_type


def _parse_wrapper_param(form: Any, directive: Directive, index: int) -> WrapperParam:
    items = list_arg(form, directive, f"param[{index}]")
    if len(items) not in (2, 3):
        raise directive.error(f"param[{index}] expects (name type [\"C type\"])")
    name = name_arg(items[0], directive, f"param[{index}] name")
    if len(items) == 3:
        binding_type = _type_designator(items[1], directive, f"param[{index}] type")
        c_type = string_arg(items[2], directive, f"param[{index}] C type")
    else:
        binding_type, c_type = _parse_wrapper_type(items[1], directive, f"param[{index}] type")
    if c_type == "void":
        raise directive.error(f"param[{index}] cannot have type void")
    return WrapperParam(name=name, binding_type=binding_type, c_type=c_type)


def _option_value(value: Any) -> Any:
    if isinstance(value, (Keyword, Symbol)):
        return value.name
    if isinstance(value, list):
        return [_option_value(item) for item in value]
    return value


def _parse_wrapper_name(value: Any, directive: Directive) -> tuple[str, str, tuple[tuple[str, Any], ...]]:
    if isinstance(value, str):
        native = _macro_name(value, directive, "native name")
        return native, native, ()
    items = list_arg(value, directive, "wrapper name")
    native = _macro_name(items[0], directive, "native name")
    rest = items[1:]
    name = native
    if rest and not isinstance(rest[0], Keyword):
        name = name_arg(rest[0], directive, "binding name")
        rest = rest[1:]
    positional, options = split_options(rest, directive, None, context="wrapper options")
    if positional:
        raise directive.error(f"unexpected wrapper options {positional!r}")
    rendered: list[tuple[str, Any]] = []
    for key, raw in options.items():
        option_name = key.replace("-", "_")
        if not option_name.isidentifier():
            raise directive.error(f"wrapper option :{key} is not a valid option name")
        rendered.append((option_name, _option_value(raw)))
    return native, name, tuple(rendered)


def _wrapper_parser(raw_body: bool):
    def parse(directive: Directive) -> WrapperSpec:
        minimum = 3 if raw_body else 2
        if len(directive.args) < minimum:
            raise directive.error("expects a name, a return type, parameters" + (" and C statements" if raw_body else ""))
        native, name, options = _parse_wrapper_name(directive.args[0], directive)
        return_type, return_c_type = _parse_wrapper_type(directive.args[1], directive, "return type")
        body: tuple[str, ...] | None = None
        if raw_body:
            param_forms = directive.args[2]
            if param_forms is False:
                param_forms = []
            if not isinstance(param_forms, list):
                raise directive.error(f"parameter list must be a list, got {param_forms!r}")
            body = string_args(directive.args[3:], directive, "C statement")
        else:
            param_forms = list(directive.args[2:])
        params = tuple(_parse_wrapper_param(form, directive, index) for index, form in enumerate(param_forms))
        seen: set[str] = set()
        for param in params:
            ident = c_identifier(param.name)
            if ident in seen:
                raise directive.error(f"duplicate parameter {param.name!r}")
            seen.add(ident)
        return WrapperSpec(
            name=name,
            native_name=native,
            options=options,
            return_type=return_type,
            return_c_type=return_c_type,
            params=params,
            body=body,
        )

    return parse


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def _puts(text: str) -> str:
    return f"  fputs({c_string_literal(text)}, output);"


def _doc_suffix(doc: str | None) -> str:
    return f", doc={python_literal(doc)}" if doc is not None else ""


def render_raw(spec: RawSpec, context: BuildContext) -> str:
    return spec.text + "\n"


def render_include(spec: IncludeSpec, context: BuildContext) -> str:
    return "".join(f"#include <{header}>\n" for header in spec.headers)


def render_define(spec: DefineSpec, context: BuildContext) -> str:
    if spec.value is None:
        return f"#define {spec.name}\n"
    return f"#define {spec.name} {spec.value}\n"


def render_typedef(spec: TypedefSpec, context: BuildContext) -> str:
    return f"typedef {spec.base} {spec.alias};\n"


def render_flags(spec: FlagSpec, context: BuildContext) -> str:
    context.add_flags(list(spec.flags))
    return ""


def render_pkg_config(spec: PkgConfigSpec, context: BuildContext) -> str:
    if context.source_only:
        return ""
    context.add_flags(pkg_config_cflags(spec.packages, spec.optional))
    return ""


def render_probe_namespace(spec: NamespaceSpec, context: BuildContext) -> str:
    return _puts(Declaration("in_namespace", (spec.name,)).render() + "\n") + "\n"


def render_wrapper_namespace(spec: NamespaceSpec, context: BuildContext) -> str:
    context.declare(Declaration("in_namespace", (spec.name,)))
    return ""


def _candidate_chain(
    candidates: tuple[str, ...],
    optional: bool,
    missing_name: str,
    emit: Any,
    terminator: str,
) -> list[str]:
    lines: list[str] = []
    for index, candidate in enumerate(candidates):
        lines.append(f"{'#if' if index == 0 else '#elif'} defined({candidate})")
        lines.extend(emit(candidate))
    if not optional:
        lines.append("#else")
        lines.append(f"  CGROVEL_MISSING(output, {c_string_literal(missing_name)});")
        lines.append(_puts(terminator))
    lines.append("#endif")
    return lines


def constant_lines(spec: ConstantSpec) -> list[str]:
    printer = CONSTANT_VALUE_TYPES[spec.value_type]

    def emit(candidate: str) -> list[str]:
        return [
            _puts(f"defconstant({python_literal(spec.name)}, "),
            f"  {printer}(output, {candidate});",
            _puts(f"{_doc_suffix(spec.doc)})\n"),
        ]

    return _candidate_chain(spec.candidates, spec.optional, spec.name, emit, "\n")


def render_constant(spec: ConstantSpec, context: BuildContext) -> str:
    return "\n".join(constant_lines(spec)) + "\n"


def render_ctype(spec: CTypeSpec, context: BuildContext) -> str:
    lines = [
        _puts(f"defctype({python_literal(spec.name)}, "),
        f"  CGROVEL_PRINT_INT_TYPE(output, {spec.c_type});",
        _puts(", size="),
        f"  CGROVEL_PRINT_SIZE(output, sizeof({spec.c_type}));",
        _puts(f"{_doc_suffix(spec.doc)})\n"),
    ]
    return "\n".join(lines) + "\n"


def _slot_lines(record: RecordSpec, slot: SlotSpec) -> list[str]:
    head = f"    slot({python_literal(slot.name)}, {python_literal(slot.native_name)}, {python_literal(slot.type_name)}, count="
    lines: list[str] = []
    if slot.auto:
        # Trailing array length is only known once the compiler has laid out the record.
        lines.append(_puts(head))
        lines.append(f"  CGROVEL_PRINT_SIZE(output, CGROVEL_AUTO_COUNT({record.native_type}, {slot.native_name}));")
    else:
        lines.append(_puts(f"{head}{python_literal(slot.count)}"))
    if record.kind == "struct":
        lines.append(_puts(", offset="))
        lines.append(f"  CGROVEL_PRINT_SIZE(output, offsetof({record.native_type}, {slot.native_name}));")
    lines.append(_puts(", size="))
    size_macro = "CGROVEL_AUTO_SIZE" if slot.auto else "CGROVEL_FIELD_SIZE"
    lines.append(f"  CGROVEL_PRINT_SIZE(output, {size_macro}({record.native_type}, {slot.native_name}));")
    lines.append(_puts("),\n"))
    return lines


def render_record(spec: RecordSpec, context: BuildContext) -> str:
    function = "defcstruct" if spec.kind == "struct" else "defcunion"
    lines = [_puts(f"{function}({python_literal(spec.name)}, {python_literal(spec.native_type)}, slots=[\n")]
    for slot in spec.slots:
        lines.extend(_slot_lines(spec, slot))
    lines.append(_puts("], size="))
    lines.append(f"  CGROVEL_PRINT_SIZE(output, sizeof({spec.native_type}));")
    lines.append(_puts(f"{_doc_suffix(spec.doc)})\n"))
    lines.append(_puts(Declaration("defrecordtype", (spec.name, spec.kind)).render() + "\n"))
    lines.append(_puts(f"defconstant({python_literal('size_of_' + spec.name)}, "))
    lines.append(f"  CGROVEL_PRINT_SIZE(output, sizeof({spec.native_type}));")
    lines.append(_puts(")\n"))
    return "\n".join(lines) + "\n"


def _member_lines(spec: EnumSpec, member: EnumMemberSpec) -> list[str]:
    def emit(candidate: str) -> list[str]:
        return [
            _puts(f"    member({python_literal(member.name)}, "),
            f"  CGROVEL_PRINT_INTEGER(output, {candidate});",
            _puts(f"{_doc_suffix(member.doc)}),\n"),
        ]

    if spec.kind == "cenum":
        native = member.candidates[0]
        if not member.optional:
            return emit(native)
        return [f"#ifdef {native}", *emit(native), "#endif"]
    return _candidate_chain(member.candidates, member.optional, member.name, emit, ",\n")


def render_enum(spec: EnumSpec, context: BuildContext) -> str:
    lines = [_puts(f"defcenum({python_literal(spec.name)}, {python_literal(spec.base_type)}, members=[\n")]
    for member in spec.members:
        lines.extend(_member_lines(spec, member))
    lines.append(_puts(f"]{_doc_suffix(spec.doc)})\n"))
    if spec.define_constants:
        for member in spec.members:
            lines.extend(
                constant_lines(
                    ConstantSpec(
                        name=member.name,
                        candidates=member.candidates,
                        optional=member.optional,
                        doc=member.doc,
                    )
                )
            )
    return "\n".join(lines) + "\n"


def render_wrapper(spec: WrapperSpec, context: BuildContext) -> str:
    arguments = [c_identifier(param.name) for param in spec.params]
    parameter_text = ", ".join(f"{param.c_type} {ident}" for param, ident in zip(spec.params, arguments)) or "void"
    lines = [f"{spec.return_c_type} {spec.symbol}({parameter_text})", "{"]
    if spec.body is None:
        call = f"{spec.native_name}({', '.join(arguments)})"
        lines.append(f"  {call};" if spec.return_c_type.strip() == "void" else f"  return {call};")
    else:
        lines.extend(f"  {statement}" for statement in spec.body)
    lines.append("}")

    context.declare(
        Declaration(
            "defcfun",
            (
                spec.name,
                spec.symbol,
                spec.return_type,
                [(param.name, param.binding_type) for param in spec.params],
            ),
            spec.options,
        )
    )
    return "\n".join(lines) + "\n\n"


def _register_common(registry: DirectiveRegistry) -> None:
    registry.register("c", parse_raw, render_raw)
    registry.register("include", parse_include, render_include)
    registry.register("define", parse_define, render_define)
    registry.register("typedef", parse_typedef, render_typedef)
    registry.register("flag", parse_flags, render_flags)
    registry.register("cc-flags", parse_flags, render_flags)
    registry.register("pkg-config-cflags", parse_pkg_config, render_pkg_config)


def build_grovel_registry() -> DirectiveRegistry:
    registry = DirectiveRegistry("grovel", GROVEL_KINDS)
    _register_common(registry)
    registry.register("in-namespace", parse_namespace, render_probe_namespace)
    registry.register("constant", parse_constant, render_constant)
    registry.register("ctype", parse_ctype, render_ctype)
    registry.register("cstruct", _record_parser("struct"), render_record)
    registry.register("cunion", _record_parser("union"), render_record)
    registry.register("cenum", _enum_parser("cenum"), render_enum)
    registry.register("constantenum", _enum_parser("constantenum"), render_enum)
    return registry


def build_wrapper_registry() -> DirectiveRegistry:
    registry = DirectiveRegistry("wrapper", WRAPPER_KINDS)
    _register_common(registry)
    registry.register("in-namespace", parse_namespace, render_wrapper_namespace)
    registry.register("defwrapper", _wrapper_parser(raw_body=False), render_wrapper)
    registry.register("defwrapper*", _wrapper_parser(raw_body=True), render_wrapper)
    return registry


GROVEL_REGISTRY = build_grovel_registry()
WRAPPER_REGISTRY = build_wrapper_registry()
