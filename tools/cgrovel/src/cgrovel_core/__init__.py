from .bindings import BindingTable, MissingDefinitionWarning, load_bindings, parse_bindings
from .core import (
    GROVEL_REGISTRY,
    HEADER_KINDS,
    TOOL_VERSION,
    WRAPPER_REGISTRY,
    BuildContext,
    BuildError,
    CGrovelError,
    Declaration,
    Directive,
    DirectiveRegistry,
    DispatchError,
    SpecError,
    compile_and_link,
    generate_probe_source,
    generate_wrapper_source,
    process_grovel_file,
    process_wrapper_file,
    read_spec_file,
    read_spec_text,
    render_declarations_file,
    run_probe,
)

__all__ = [
    "BindingTable",
    "BuildContext",
    "BuildError",
    "CGrovelError",
    "Declaration",
    "Directive",
    "DirectiveRegistry",
    "DispatchError",
    "GROVEL_REGISTRY",
    "HEADER_KINDS",
    "MissingDefinitionWarning",
    "SpecError",
    "TOOL_VERSION",
    "WRAPPER_REGISTRY",
    "compile_and_link",
    "generate_probe_source",
    "generate_wrapper_source",
    "load_bindings",
    "parse_bindings",
    "process_grovel_file",
    "process_wrapper_file",
    "read_spec_file",
    "read_spec_text",
    "render_declarations_file",
    "run_probe",
]
