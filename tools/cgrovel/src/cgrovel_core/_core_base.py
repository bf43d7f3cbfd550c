from __future__ import annotations

import json
import re
import shlex
from pathlib import Path
from typing import Any

TOOL_NAME = "cgrovel"
TOOL_VERSION = "1.0.0"
SUPPORT_INCLUDE_DIR = Path(__file__).resolve().parent / "include"
SUPPORT_HEADER = "cgrovel_common.h"
HEADER_KINDS = frozenset({"c", "include", "define", "typedef"})


class CGrovelError(Exception):
    pass


class SpecError(CGrovelError):
    def __init__(self, message: str, source: str | None = None, line: int | None = None) -> None:
        self.message = message
        self.source = source
        self.line = line
        location = source or "<spec>"
        if line is not None:
            location = f"{location}:{line}"
        super().__init__(f"{location}: {message}")


class DispatchError(SpecError):
    pass


class BuildError(CGrovelError):
    def __init__(
        self,
        command: list[str],
        returncode: int | None,
        stdout: str = "",
        stderr: str = "",
        reason: str | None = None,
    ) -> None:
        self.command = list(command)
        self.returncode = returncode
        self.stdout = stdout or ""
        self.stderr = stderr or ""
        status = reason or f"exit code {returncode}"
        lines = [
            f"command failed ({status}): {format_command(self.command)}",
            "--- stdout ---",
            self.stdout.rstrip(),
            "--- stderr ---",
            self.stderr.rstrip(),
        ]
        super().__init__("\n".join(lines))


def format_command(command: list[str]) -> str:
    return " ".join(shlex.quote(item) for item in command)


def is_header_kind(kind: str) -> bool:
    return kind in HEADER_KINDS


def c_string_literal(text: str) -> str:
    out: list[str] = ['"']
    for byte in text.encode("utf-8"):
        ch = chr(byte)
        if ch == "\\":
            out.append("\\\\")
        elif ch == '"':
            out.append('\\"')
        elif ch == "\n":
            out.append("\\n")
        elif ch == "\t":
            out.append("\\t")
        elif ch == "\r":
            out.append("\\r")
        elif ch == "?":
            # keeps "??x" from forming a trigraph
            out.append("\\?")
        elif 0x20 <= byte < 0x7F:
            out.append(ch)
        else:
            out.append(f"\\{byte:03o}")
    out.append('"')
    return "".join(out)


def python_literal(value: Any) -> str:
    if value is None:
        return "None"
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str):
        return json.dumps(value)
    if isinstance(value, tuple):
        inner = ", ".join(python_literal(item) for item in value)
        return f"({inner},)" if len(value) == 1 else f"({inner})"
    if isinstance(value, list):
        return "[" + ", ".join(python_literal(item) for item in value) + "]"
    if isinstance(value, dict):
        return "{" + ", ".join(f"{python_literal(k)}: {python_literal(v)}" for k, v in value.items()) + "}"
    raise CGrovelError(f"Cannot render value of type {type(value).__name__} as a declaration literal")


def c_identifier(name: str) -> str:
    ident = re.sub(r"[^A-Za-z0-9_]", "_", name)
    if not ident or ident[0].isdigit():
        ident = f"_{ident}"
    return ident


def is_c_identifier(value: str) -> bool:
    return bool(re.match(r"^[A-Za-z_][A-Za-z0-9_]*$", value))


def banner_lines(source_name: str) -> list[str]:
    return [
        f"This file was automatically generated by {TOOL_NAME} from {source_name}.",
        "Do not edit it by hand.",
    ]


def python_banner(source_name: str) -> str:
    return "".join(f"# {line}\n" for line in banner_lines(source_name)) + "\n"


def c_banner(source_name: str) -> str:
    first, second = banner_lines(source_name)
    return f"/* {first}\n * {second} */\n"
