from __future__ import annotations

import sys
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))
from cgrovel_core import core as cgrovel_core  # noqa: E402
from cgrovel_core import parse_bindings  # noqa: E402
from cgrovel_core.core import BuildContext, DispatchError, SpecError  # noqa: E402


def generate(text: str) -> tuple[str, BuildContext]:
    directives = cgrovel_core.read_spec_text(text, source="shims.wrapper")
    return cgrovel_core.generate_wrapper_source(directives, "shims.wrapper")


class WrapperSourceTests(unittest.TestCase):
    def test_defwrapper_forwards_arguments(self) -> None:
        source, context = generate('(defwrapper "htons" :uint16 (host-short :uint16))')
        self.assertIn("uint16_t htons_wrap(uint16_t host_short)\n{\n  return htons(host_short);\n}\n", source)
        self.assertEqual(
            context.declarations[0].render(),
            'defcfun("htons", "htons_wrap", "uint16", [("host-short", "uint16")])',
        )

    def test_void_return_and_no_params(self) -> None:
        source, context = generate('(defwrapper ("reset_state" reset) :void)')
        self.assertIn("void reset_state_wrap(void)\n{\n  reset_state();\n}\n", source)
        self.assertNotIn("return reset_state", source)
        self.assertEqual(context.declarations[0].render(), 'defcfun("reset", "reset_state_wrap", "void", [])')

    def test_explicit_c_types_and_options(self) -> None:
        source, context = generate(
            '(defwrapper ("lookup_name" lookup :convention :stdcall) (:pointer "struct entry*")'
            ' (key :string "const char*") (flags (mask "unsigned int")))'
        )
        self.assertIn("struct entry* lookup_name_wrap(const char* key, unsigned int flags)", source)
        self.assertEqual(
            context.declarations[0].render(),
            'defcfun("lookup", "lookup_name_wrap", "pointer", [("key", "string"), ("flags", "mask")], convention="stdcall")',
        )

    def test_defwrapper_star_uses_verbatim_body(self) -> None:
        source, context = generate(
            """
(defwrapper* "checked_div" :int ((a :int) (b :int))
  "if (b == 0) return 0;"
  "return a / b;")
(defwrapper* "tick" :void nil "counter++;")
"""
        )
        self.assertIn("int checked_div_wrap(int a, int b)\n{\n  if (b == 0) return 0;\n  return a / b;\n}\n", source)
        self.assertIn("void tick_wrap(void)\n{\n  counter++;\n}\n", source)
        self.assertEqual([item.args[0] for item in context.declarations], ["checked_div", "tick"])

    def test_forms_keep_file_order(self) -> None:
        source, context = generate(
            """
(include "stdint.h")
(c "static inline int add_ints(int a, int b) { return a + b; }")
(defwrapper "add_ints" :int (a :int) (b :int))
(in-namespace shims)
(include "late.h")
(defwrapper "abs" :int (x :int))
"""
        )
        markers = [
            "#include <stdint.h>",
            "static inline int add_ints",
            "int add_ints_wrap(int a, int b)",
            "#include <late.h>",
            "int abs_wrap(int x)",
        ]
        positions = [source.index(marker) for marker in markers]
        self.assertEqual(positions, sorted(positions))
        self.assertTrue(source.startswith("/* This file was automatically generated by cgrovel from shims.wrapper."))
        self.assertEqual(
            [item.function for item in context.declarations],
            ["defcfun", "in_namespace", "defcfun"],
        )
        self.assertNotIn("main(", source)

    def test_invalid_wrapper_forms(self) -> None:
        for text in [
            "(defwrapper)",
            '(defwrapper "x")',
            '(defwrapper "not valid" :int)',
            '(defwrapper "f" :mystery)',
            '(defwrapper "f" :int (a :void))',
            '(defwrapper "f" :int (a :int) (a :int))',
            '(defwrapper "f" :int (a))',
            '(defwrapper* "f" :int "return 0;")',
            '(defwrapper* "f" :int ((a :int)) 42)',
        ]:
            with self.subTest(text=text):
                with self.assertRaises(SpecError):
                    generate(text)

    def test_grovel_directives_are_not_wrapper_directives(self) -> None:
        with self.assertRaises(DispatchError) as ctx:
            generate('(constant (A "A"))')
        self.assertIn("constant", str(ctx.exception))


class DeclarationsFileTests(unittest.TestCase):
    def test_library_declaration_comes_first(self) -> None:
        _, context = generate('(defwrapper "abs" :int (x :int))\n(defwrapper "labs" :long (x :long))')
        text = cgrovel_core.render_declarations_file(context, "shims", Path("/opt/lib/shims.so"))
        lines = text.splitlines()
        self.assertEqual(lines[0], "# This file was automatically generated by cgrovel from shims.wrapper.")
        self.assertEqual(lines[1], "# Do not edit it by hand.")
        self.assertEqual(lines[2], "")
        self.assertTrue(lines[3].startswith('define_foreign_library("shims", search_path='))
        self.assertTrue(lines[3].endswith('filename="shims.so")'))
        self.assertEqual(lines[4:], [
            'defcfun("abs", "abs_wrap", "int", [("x", "int")])',
            'defcfun("labs", "labs_wrap", "long", [("x", "long")])',
        ])
        self.assertTrue(text.endswith("\n"))

    def test_declarations_file_loads_back(self) -> None:
        _, context = generate('(in-namespace shims)\n(defwrapper "abs" :int (x :int))')
        text = cgrovel_core.render_declarations_file(context, "shims", Path("/opt/lib/libshims.so"))
        table = parse_bindings(text, source="shims.py")
        self.assertEqual(table.libraries["shims"].filename, "libshims.so")
        self.assertEqual(table.functions["abs"].symbol, "abs_wrap")
        self.assertEqual(table.functions["abs"].params, (("x", "int"),))
        self.assertEqual(table.functions["abs"].namespace, "shims")


if __name__ == "__main__":
    unittest.main()
