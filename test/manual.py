"""
Manual module behavioral tests.

Scope
- Validate the plain-text help: ordering, names, kind suffixes, help lines and the
  recursive listing of nested schemas.
- Validate the rich table rendering.

Conventions
- Test method names follow CamelCase per project convention.
- Plain-text expectations are compared verbatim.
"""

from __future__ import annotations

import io
import unittest
from unittest import TestCase

from rich.console import Console
from rich.table import Table

from argsplitter import Schema, branch, flag, manual, repeatable, required, single, varargs


class TestHelp(TestCase):
    """Plain-text manual."""

    def setUp(self):
        self.schema = Schema.of(
            required("target"),
            varargs("files..."),
            single("-f", "--file", help="The archive file"),
            flag("-c", "--create", help="Create an archive"),
        )

    def testListsEveryOptionSorted(self):
        self.assertEqual(manual.help(self.schema), "\n".join([
            "-c, --create (flag)",
            "  Create an archive",
            "-f, --file <value>",
            "  The archive file",
            "files...",
            "target (required)",
        ]))

    def testSchemaHelpMethod(self):
        self.assertEqual(self.schema.help(), manual.help(self.schema))

    def testCustomIndent(self):
        self.assertIn("\n    Create an archive\n", manual.help(self.schema, indent=4))

    def testNegativeIndentRejected(self):
        with self.assertRaises(ValueError):
            manual.help(self.schema, indent=-1)

    def testSuffixes(self):
        schema = Schema.of(
            repeatable("--list"),
            repeatable("--pair", cardinality=2, metavar="KEY"),
            single("-o", metavar="FILE"),
            varargs("rest"),
        )
        self.assertEqual(manual.help(schema).splitlines(), [
            "--list <value> (repeatable)",
            "--pair <KEY> <KEY> (repeatable)",
            "-o <FILE>",
            "rest...",
        ])

    def testNestedSchemas(self):
        topic = required("topic", help="The topic")
        schema = Schema.of(
            branch("help", schema=Schema.of(topic), help="Show help"),
            single("--point", schema=Schema.of(required("x"), required("y"))),
        )
        self.assertEqual(manual.help(schema).splitlines(), [
            "--point (group)",
            "  x (required)",
            "  y (required)",
            "help (branch)",
            "  Show help",
            "  topic (required)",
            "    The topic",
        ])


class TestRender(TestCase):
    """Rich table rendering."""

    def testRendersEveryOption(self):
        schema = Schema.of(
            flag("-c", "--create", help="Create an archive"),
            branch("help", schema=Schema.of(required("topic"))),
        )
        table = manual.render(schema, colorful=False)
        self.assertIsInstance(table, Table)
        self.assertEqual(table.row_count, 3)

        console = Console(file=io.StringIO(), width=100, color_system=None)
        console.print(table)
        output = console.file.getvalue()
        self.assertIn("-c, --create (flag)", output)
        self.assertIn("Create an archive", output)
        self.assertIn("topic (required)", output)


if __name__ == "__main__":
    unittest.main()
