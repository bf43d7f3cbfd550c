from __future__ import annotations

import os
import platform
import re
import shlex
import subprocess
import sys
import time
from pathlib import Path
from typing import Any

from ._core_base import SUPPORT_INCLUDE_DIR, BuildError, format_command

COMPILER_ENV_VAR = "CC"
PKG_CONFIG_ENV_VAR = "PKG_CONFIG"
MISSING_DEFINITION_RE = re.compile(r"^cgrovel: missing definition: (?P<name>.+?)\s*$", re.M)
_X86_MACHINES = {"x86_64", "amd64", "i386", "i486", "i586", "i686", "x86"}


def default_compiler() -> str:
    return "gcc" if os.name == "nt" else "cc"


def resolve_compiler() -> str:
    value = os.environ.get(COMPILER_ENV_VAR)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default_compiler()


def word_size_flags() -> list[str]:
    if platform.machine().lower() not in _X86_MACHINES:
        return []
    return ["-m64"] if sys.maxsize > 2**32 else ["-m32"]


def shared_library_flags() -> list[str]:
    if sys.platform == "darwin":
        return ["-dynamiclib"]
    if os.name == "nt":
        return ["-shared"]
    return ["-shared", "-fPIC"]


def executable_suffix() -> str:
    return ".exe" if os.name == "nt" else ""


def shared_library_suffix() -> str:
    if sys.platform == "darwin":
        return ".dylib"
    if os.name == "nt":
        return ".dll"
    return ".so"


def build_compile_command(source_path: Path, output_path: Path, flags: list[str], is_library: bool) -> list[str]:
    command = [*shlex.split(resolve_compiler()), *word_size_flags(), *flags, f"-I{SUPPORT_INCLUDE_DIR}"]
    if is_library:
        command.extend(shared_library_flags())
    command.extend(["-o", str(output_path), str(source_path)])
    return command


def run_command(command: list[str]) -> dict[str, Any]:
    start = time.perf_counter()
    try:
        proc = subprocess.run(command, capture_output=True, text=True, check=True)
    except subprocess.CalledProcessError as exc:
        raise BuildError(command, exc.returncode, stdout=exc.stdout or "", stderr=exc.stderr or "") from exc
    except OSError as exc:
        raise BuildError(command, None, stderr=str(exc), reason="could not start process") from exc
    elapsed_ms = round((time.perf_counter() - start) * 1000.0, 3)
    return {
        "command": format_command(command),
        "returncode": proc.returncode,
        "stdout": proc.stdout,
        "stderr": proc.stderr,
        "elapsed_ms": elapsed_ms,
    }


def remove_stale_library(path: Path) -> bool:
    try:
        path.unlink()
    except OSError:
        return False
    return True


def compile_and_link(source_path: Path, output_path: Path, flags: list[str], is_library: bool) -> dict[str, Any]:
    if is_library:
        # A process may still hold the old library mapped; relink into a fresh inode.
        remove_stale_library(output_path)
    command = build_compile_command(source_path, output_path, flags, is_library)
    result = run_command(command)
    result["output"] = str(output_path)
    return result


def parse_missing_definitions(stderr: str) -> list[str]:
    return [match.group("name") for match in MISSING_DEFINITION_RE.finditer(stderr)]


def run_probe(executable_path: Path, facts_path: Path) -> dict[str, Any]:
    result = run_command([str(executable_path), str(facts_path)])
    result["output"] = str(facts_path)
    result["missing_definitions"] = parse_missing_definitions(result["stderr"])
    return result


def pkg_config_cflags(packages: tuple[str, ...], optional: bool) -> list[str]:
    executable = os.environ.get(PKG_CONFIG_ENV_VAR) or "pkg-config"
    command = [executable, "--cflags", *packages]
    try:
        result = run_command(command)
    except BuildError:
        if optional:
            return []
        raise
    return shlex.split(result["stdout"])
