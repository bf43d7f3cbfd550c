from __future__ import annotations

from pathlib import Path
from typing import Any

from ._core_base import CGrovelError
from ._core_build import compile_and_link, executable_suffix, run_probe, shared_library_suffix
from ._core_context import BuildContext
from ._core_emit import render_declarations_file, write_text
from ._core_probe import generate_probe_source
from ._core_reader import read_spec_file
from ._core_wrapper import generate_wrapper_source


def resolve_output_dir(spec_path: Path, output_dir: Path | None) -> Path:
    return (output_dir if output_dir is not None else spec_path.parent).resolve()


def grovel_artifact_paths(spec_path: Path, output_dir: Path | None, output_path: Path | None) -> dict[str, Path]:
    base = resolve_output_dir(spec_path, output_dir)
    stem = spec_path.stem
    return {
        "source": base / f"{stem}.c",
        "executable": base / f"{stem}{executable_suffix()}",
        "output": output_path.resolve() if output_path is not None else base / f"{stem}.py",
    }


def wrapper_artifact_paths(spec_path: Path, output_dir: Path | None) -> dict[str, Path]:
    base = resolve_output_dir(spec_path, output_dir)
    stem = spec_path.stem
    return {
        "source": base / f"{stem}.c",
        "library": base / f"{stem}{shared_library_suffix()}",
        "output": base / f"{stem}.py",
    }


def ensure_artifacts_spare_spec(spec_path: Path, paths: dict[str, Path], written: list[str]) -> None:
    spec = spec_path.resolve()
    for key in written:
        if paths[key].resolve() == spec:
            raise CGrovelError(
                f"Generated {key} path '{paths[key]}' is the specification file itself; "
                "rename the specification or choose another --output-dir"
            )


def process_grovel_file(
    spec_path: Path,
    *,
    output_path: Path | None = None,
    output_dir: Path | None = None,
    extra_flags: list[str] | None = None,
    source_only: bool = False,
) -> dict[str, Any]:
    directives = read_spec_file(spec_path)
    context = BuildContext(source_name=spec_path.name, flags=list(extra_flags or []), source_only=source_only)
    source_text, context = generate_probe_source(directives, spec_path.name, context=context)

    paths = grovel_artifact_paths(spec_path, output_dir, output_path)
    ensure_artifacts_spare_spec(spec_path, paths, ["source"] if source_only else ["source", "executable", "output"])
    write_text(paths["source"], source_text)
    result: dict[str, Any] = {
        "mode": "grovel",
        "spec": str(spec_path),
        "directive_count": len(directives),
        "flags": list(context.flags),
        "artifacts": {key: str(value) for key, value in paths.items()},
        "compile": None,
        "probe": None,
        "missing_definitions": [],
    }
    if source_only:
        return result

    result["compile"] = compile_and_link(paths["source"], paths["executable"], context.flags, is_library=False)
    probe = run_probe(paths["executable"], paths["output"])
    result["probe"] = probe
    result["missing_definitions"] = list(probe["missing_definitions"])
    return result


def process_wrapper_file(
    spec_path: Path,
    *,
    output_dir: Path | None = None,
    lib_name: str | None = None,
    extra_flags: list[str] | None = None,
    source_only: bool = False,
) -> dict[str, Any]:
    directives = read_spec_file(spec_path)
    context = BuildContext(source_name=spec_path.name, flags=list(extra_flags or []), source_only=source_only)
    source_text, context = generate_wrapper_source(directives, spec_path.name, context=context)

    paths = wrapper_artifact_paths(spec_path, output_dir)
    ensure_artifacts_spare_spec(spec_path, paths, ["source"] if source_only else ["source", "library", "output"])
    write_text(paths["source"], source_text)
    result: dict[str, Any] = {
        "mode": "wrapper",
        "spec": str(spec_path),
        "directive_count": len(directives),
        "flags": list(context.flags),
        "artifacts": {key: str(value) for key, value in paths.items()},
        "declaration_count": len(context.declarations),
        "compile": None,
    }
    if source_only:
        return result

    result["compile"] = compile_and_link(paths["source"], paths["library"], context.flags, is_library=True)
    declarations = render_declarations_file(context, lib_name or spec_path.stem, paths["library"])
    write_text(paths["output"], declarations)
    return result
