from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any

from .core import TOOL_VERSION, CGrovelError, process_grovel_file, process_wrapper_file


def _optional_path(value: str | None) -> Path | None:
    return Path(value) if value else None


def _print_missing_definitions(result: dict[str, Any]) -> None:
    for name in result.get("missing_definitions") or []:
        print(f"cgrovel warning: missing definition for '{name}'", file=sys.stderr)


def command_grovel(args: argparse.Namespace) -> int:
    spec_path = Path(args.spec)
    result = process_grovel_file(
        spec_path,
        output_path=_optional_path(args.output),
        output_dir=_optional_path(args.output_dir),
        extra_flags=list(args.cflag or []),
        source_only=bool(args.source_only),
    )
    artifacts = result["artifacts"]
    if args.verbose and result["compile"]:
        print(f"[{spec_path.name}] compile: {result['compile']['command']}")
    if args.source_only:
        print(f"[{spec_path.name}] grovel: source={artifacts['source']}")
    else:
        print(f"[{spec_path.name}] grovel: source={artifacts['source']} output={artifacts['output']}")
    _print_missing_definitions(result)
    return 0


def command_wrapper(args: argparse.Namespace) -> int:
    spec_path = Path(args.spec)
    result = process_wrapper_file(
        spec_path,
        output_dir=_optional_path(args.output_dir),
        lib_name=args.lib_name,
        extra_flags=list(args.cflag or []),
        source_only=bool(args.source_only),
    )
    artifacts = result["artifacts"]
    if args.verbose and result["compile"]:
        print(f"[{spec_path.name}] compile: {result['compile']['command']}")
    if args.source_only:
        print(f"[{spec_path.name}] wrapper: source={artifacts['source']}")
    else:
        print(
            f"[{spec_path.name}] wrapper: source={artifacts['source']} "
            f"library={artifacts['library']} output={artifacts['output']} "
            f"functions={result['declaration_count']}"
        )
    return 0


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("spec", help="Specification file to process.")
    parser.add_argument("--output-dir", help="Directory for generated artifacts (default: the specification file's directory).")
    parser.add_argument("--cflag", action="append", help="Extra compiler flag placed before the specification's own flags (repeatable).")
    parser.add_argument("--source-only", action="store_true", help="Write the generated C source and stop before compiling.")
    parser.add_argument("--verbose", action="store_true", help="Print the toolchain command lines that were run.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cgrovel",
        description="Discover platform C facts with generated probes and build forwarding shims for macro/inline functions.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {TOOL_VERSION}")
    sub = parser.add_subparsers(dest="command", required=True)

    grovel = sub.add_parser("grovel", help="Compile and run a probe that writes a bindings file.")
    _add_common_arguments(grovel)
    grovel.add_argument("--output", help="Bindings file written by the probe (default: <output-dir>/<spec stem>.py).")
    grovel.set_defaults(func=command_grovel)

    wrapper = sub.add_parser("wrapper", help="Build a shared library of forwarding shims and its bindings file.")
    _add_common_arguments(wrapper)
    wrapper.add_argument("--lib-name", help="Symbolic library name in the bindings file (default: spec stem).")
    wrapper.set_defaults(func=command_wrapper)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        return int(args.func(args))
    except CGrovelError as exc:
        print(f"cgrovel error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
