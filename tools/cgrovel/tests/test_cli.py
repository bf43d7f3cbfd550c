from __future__ import annotations

import contextlib
import io
import subprocess
import sys
import tempfile
import unittest
from unittest import mock
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))
from cgrovel_core import cli  # noqa: E402
from cgrovel_core import _core_build as build  # noqa: E402

CGROVEL_ENTRYPOINT = Path(__file__).resolve().parents[1] / "cgrovel.py"


def run_cli(argv: list[str]) -> tuple[int, str, str]:
    stdout = io.StringIO()
    stderr = io.StringIO()
    with contextlib.redirect_stdout(stdout), contextlib.redirect_stderr(stderr):
        code = cli.main(argv)
    return code, stdout.getvalue(), stderr.getvalue()


class CliTests(unittest.TestCase):
    def test_grovel_source_only_writes_the_probe(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            spec_path = Path(temp_dir) / "errno.grovel"
            spec_path.write_text(
                '(pkg-config-cflags "libfoo")\n(include "errno.h")\n(constant (EINVAL "EINVAL"))\n', encoding="utf-8"
            )
            out_dir = Path(temp_dir) / "gen"
            with mock.patch.object(build.subprocess, "run") as run_mock:
                code, stdout, stderr = run_cli(["grovel", str(spec_path), "--output-dir", str(out_dir), "--source-only"])
            source_path = out_dir / "errno.c"
            self.assertEqual(code, 0)
            self.assertTrue(source_path.is_file())
            self.assertIn("defined(EINVAL)", source_path.read_text(encoding="utf-8"))
            self.assertFalse((out_dir / "errno.py").exists())
        run_mock.assert_not_called()
        self.assertIn("[errno.grovel] grovel: source=", stdout)
        self.assertEqual(stderr, "")

    def test_wrapper_source_only_writes_no_declarations(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            spec_path = Path(temp_dir) / "shims.wrapper"
            spec_path.write_text('(defwrapper "abs" :int (x :int))\n', encoding="utf-8")
            code, stdout, _ = run_cli(["wrapper", str(spec_path), "--source-only"])
            self.assertEqual(code, 0)
            self.assertIn("abs_wrap", (Path(temp_dir) / "shims.c").read_text(encoding="utf-8"))
            self.assertFalse((Path(temp_dir) / "shims.py").exists())
        self.assertIn("[shims.wrapper] wrapper: source=", stdout)

    def test_grovel_reports_missing_definitions(self) -> None:
        fake_result = {
            "artifacts": {"source": "/tmp/x.c", "executable": "/tmp/x", "output": "/tmp/x.py"},
            "compile": {"command": "cc -o /tmp/x /tmp/x.c"},
            "missing_definitions": ["EFOO"],
        }
        with mock.patch.object(cli, "process_grovel_file", return_value=fake_result) as process_mock:
            code, stdout, stderr = run_cli(["grovel", "x.grovel", "--cflag", "-DA", "--cflag", "-DB", "--verbose"])
        self.assertEqual(code, 0)
        self.assertEqual(process_mock.call_args.kwargs["extra_flags"], ["-DA", "-DB"])
        self.assertIn("compile: cc -o /tmp/x /tmp/x.c", stdout)
        self.assertIn("output=/tmp/x.py", stdout)
        self.assertIn("cgrovel warning: missing definition for 'EFOO'", stderr)

    def test_spec_error_exits_with_code_2(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            spec_path = Path(temp_dir) / "bad.grovel"
            spec_path.write_text('(constant (A "A"))\n(no-such-directive)\n', encoding="utf-8")
            code, stdout, stderr = run_cli(["grovel", str(spec_path), "--source-only"])
            self.assertFalse((Path(temp_dir) / "bad.c").exists())
        self.assertEqual(code, 2)
        self.assertEqual(stdout, "")
        self.assertTrue(stderr.startswith("cgrovel error: "))
        self.assertIn("bad.grovel:2", stderr)
        self.assertIn("no-such-directive", stderr)

    def test_build_failure_exits_with_code_2(self) -> None:
        error = build.subprocess.CalledProcessError(1, ["cc"], output="", stderr="fatal error: nope.h\n")
        with tempfile.TemporaryDirectory() as temp_dir:
            spec_path = Path(temp_dir) / "broken.grovel"
            spec_path.write_text('(include "nope.h")\n(constant (A "A"))\n', encoding="utf-8")
            with mock.patch.object(build.subprocess, "run", side_effect=error):
                code, _, stderr = run_cli(["grovel", str(spec_path)])
        self.assertEqual(code, 2)
        self.assertIn("exit code 1", stderr)
        self.assertIn("fatal error: nope.h", stderr)

    def test_launcher_script_runs_the_cli(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            spec_path = Path(temp_dir) / "shims.wrapper"
            spec_path.write_text('(defwrapper "abs" :int (x :int))\n', encoding="utf-8")
            command = [sys.executable, str(CGROVEL_ENTRYPOINT), "wrapper", str(spec_path), "--source-only"]
            result = subprocess.run(command, capture_output=True, text=True)
            self.assertEqual(result.returncode, 0, msg=(result.stdout + "\n" + result.stderr))
            self.assertTrue((Path(temp_dir) / "shims.c").exists())

            version = subprocess.run([sys.executable, str(CGROVEL_ENTRYPOINT), "--version"], capture_output=True, text=True)
            self.assertEqual(version.stdout.strip(), f"cgrovel {cli.TOOL_VERSION}")


if __name__ == "__main__":
    unittest.main()
