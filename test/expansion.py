"""
Expansion module behavioral tests.

Scope
- Validate @file expansion: comments, blank lines, trimming, escapes and the
  no-recursion rule.
- Validate the expansion errors (missing, unreadable, nested) and their options.
- Validate the token processors (identity, trim, prune, normalize, DEFAULT) and chain().

Conventions
- Test method names follow CamelCase per project convention.
- Arguments files live in a per-test temporary directory.
"""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest import TestCase

from argsplitter import (
    DEFAULT,
    ArgumentsFileNotFoundError,
    ExpansionError,
    NestedArgumentsFileError,
    UnreadableArgumentsFileError,
    chain,
    expand,
    expand_file,
    identity,
    normalize,
    prune,
    trim,
)


class TestArgumentsFile(TestCase):
    """@file references."""

    def setUp(self):
        self.directory = tempfile.TemporaryDirectory()
        self.addCleanup(self.directory.cleanup)

    def write(self, name, content):
        path = Path(self.directory.name, name)
        path.write_text(content, encoding="utf-8")
        return path

    def testCommentsAndBlankLinesSkipped(self):
        path = self.write("arguments.txt", "# comment\n\n   --policies=CLASS  \n")
        self.assertEqual(expand_file(path), ["--policies=CLASS"])

    def testOneTokenPerLine(self):
        path = self.write("arguments.txt", "--file\nout dir/a.jar\n")
        self.assertEqual(expand_file(path), ["--file", "out dir/a.jar"])

    def testReferencesInlined(self):
        path = self.write("arguments.txt", "--policies=CLASS\n")
        self.assertEqual(expand(["-v", "@" + str(path), "x"]), ["-v", "--policies=CLASS", "x"])

    def testMissingFile(self):
        path = Path(self.directory.name, "missing.txt")
        with self.assertRaises(ArgumentsFileNotFoundError) as context:
            expand(["@" + str(path)])
        self.assertEqual(context.exception.options["path"], path)
        self.assertIsInstance(context.exception.__cause__, FileNotFoundError)

    def testDirectoryIsUnreadable(self):
        with self.assertRaises(UnreadableArgumentsFileError):
            expand_file(self.directory.name)

    def testUndecodableFileIsUnreadable(self):
        path = Path(self.directory.name, "binary.txt")
        path.write_bytes(b"\xff\xfe--verbose\n")
        with self.assertRaises(UnreadableArgumentsFileError):
            expand_file(path)

    def testNestedReferenceRejected(self):
        path = self.write("arguments.txt", "# header\n@other.txt\n")
        with self.assertRaises(NestedArgumentsFileError) as context:
            expand_file(path)
        self.assertEqual(context.exception.options["line"], 2)

    def testEscapedLine(self):
        path = self.write("arguments.txt", "@@at\n")
        self.assertEqual(expand_file(path), ["@at"])

    def testExpansionErrorsShareFamily(self):
        for error in (ArgumentsFileNotFoundError, UnreadableArgumentsFileError, NestedArgumentsFileError):
            with self.subTest(error=error):
                self.assertTrue(issubclass(error, ExpansionError))


class TestProcessors(TestCase):
    """Token processors and composition."""

    def testEscapedToken(self):
        self.assertEqual(expand(["@@x", "y@"]), ["@x", "y@"])

    def testTokensKeptVerbatim(self):
        self.assertEqual(expand(["", " a "]), ["", " a "])

    def testIdentity(self):
        self.assertEqual(identity(iter(["a", ""])), ["a", ""])

    def testTrimAndPrune(self):
        self.assertEqual(trim([" a ", ""]), ["a", ""])
        self.assertEqual(prune(["a", ""]), ["a"])
        self.assertEqual(normalize([" a ", "  "]), ["a"])

    def testDefault(self):
        self.assertEqual(DEFAULT([" @@x ", "", "y"]), ["@x", "y"])

    def testChainRunsLeftToRight(self):
        processor = chain(lambda tokens: [token + "1" for token in tokens], lambda tokens: [token + "2" for token in tokens])
        self.assertEqual(processor(["a"]), ["a12"])

    def testEmptyChain(self):
        self.assertEqual(chain()(("a",)), ["a"])

    def testChainRejectsNonCallable(self):
        with self.assertRaises(TypeError):
            chain(trim, "prune")


if __name__ == "__main__":
    unittest.main()
