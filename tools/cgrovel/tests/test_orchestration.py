from __future__ import annotations

import sys
import tempfile
import unittest
from unittest import mock
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))
from cgrovel_core import _core_build as build  # noqa: E402
from cgrovel_core import _core_orchestration as orchestration  # noqa: E402
from cgrovel_core.core import CGrovelError, process_grovel_file, process_wrapper_file  # noqa: E402

GROVEL_TEXT = '(include "errno.h")\n(constant (EINVAL "EINVAL"))\n'
WRAPPER_TEXT = '(defwrapper "abs" :int (x :int))\n'


class ArtifactCollisionTests(unittest.TestCase):
    def assert_spec_is_kept(self, name: str, text: str, process, **kwargs) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            spec_path = Path(temp_dir) / name
            spec_path.write_text(text, encoding="utf-8")
            with mock.patch.object(build.subprocess, "run") as run_mock:
                with self.assertRaises(CGrovelError) as ctx:
                    process(spec_path, **kwargs)
            self.assertEqual(spec_path.read_text(encoding="utf-8"), text)
            self.assertEqual(sorted(item.name for item in Path(temp_dir).iterdir()), [name])
        run_mock.assert_not_called()
        self.assertIn("specification file itself", str(ctx.exception))

    def test_grovel_executable_without_suffix_would_replace_spec(self) -> None:
        with mock.patch.object(orchestration, "executable_suffix", return_value=""):
            self.assert_spec_is_kept("errno", GROVEL_TEXT, process_grovel_file)

    def test_grovel_source_would_replace_spec(self) -> None:
        self.assert_spec_is_kept("errno.c", GROVEL_TEXT, process_grovel_file)
        self.assert_spec_is_kept("errno.c", GROVEL_TEXT, process_grovel_file, source_only=True)

    def test_grovel_facts_file_would_replace_spec(self) -> None:
        self.assert_spec_is_kept("facts.py", GROVEL_TEXT, process_grovel_file)

    def test_explicit_output_path_would_replace_spec(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            spec_path = Path(temp_dir) / "errno.grovel"
            spec_path.write_text(GROVEL_TEXT, encoding="utf-8")
            with mock.patch.object(build.subprocess, "run") as run_mock:
                with self.assertRaises(CGrovelError):
                    process_grovel_file(spec_path, output_path=spec_path)
            self.assertEqual(spec_path.read_text(encoding="utf-8"), GROVEL_TEXT)
            self.assertFalse((Path(temp_dir) / "errno.c").exists())
        run_mock.assert_not_called()

    def test_wrapper_artifacts_would_replace_spec(self) -> None:
        self.assert_spec_is_kept("shims.c", WRAPPER_TEXT, process_wrapper_file)
        self.assert_spec_is_kept("shims.py", WRAPPER_TEXT, process_wrapper_file)
        with mock.patch.object(orchestration, "shared_library_suffix", return_value=".so"):
            self.assert_spec_is_kept("libshims.so", WRAPPER_TEXT, process_wrapper_file)

    def test_source_only_ignores_artifacts_it_does_not_write(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            spec_path = Path(temp_dir) / "errno"
            spec_path.write_text(GROVEL_TEXT, encoding="utf-8")
            with mock.patch.object(orchestration, "executable_suffix", return_value=""):
                result = process_grovel_file(spec_path, source_only=True)
            self.assertEqual(spec_path.read_text(encoding="utf-8"), GROVEL_TEXT)
            self.assertTrue((Path(temp_dir) / "errno.c").is_file())
        self.assertIsNone(result["compile"])

    def test_output_dir_elsewhere_avoids_the_collision(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            spec_path = Path(temp_dir) / "errno.c"
            spec_path.write_text(GROVEL_TEXT, encoding="utf-8")
            out_dir = Path(temp_dir) / "gen"
            process_grovel_file(spec_path, output_dir=out_dir, source_only=True)
            self.assertEqual(spec_path.read_text(encoding="utf-8"), GROVEL_TEXT)
            self.assertIn("defined(EINVAL)", (out_dir / "errno.c").read_text(encoding="utf-8"))


if __name__ == "__main__":
    unittest.main()
