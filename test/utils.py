"""
Utils module behavioral tests.

Scope
- Validate the Unset sentinel (singleton, falsy, printable, sealed, usable in unions).
- Validate coalesce(), rename() in both forms and mirror() freezing.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from argsplitter.utils import Unset, UnsetType, coalesce, mirror, rename


class TestUnset(TestCase):
    """The not-provided sentinel."""

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)

    def testFalsyAndPrintable(self):
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testUnions(self):
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("text", str | Unset)
        self.assertNotIsInstance(1, str | Unset)

    def testSealed(self):
        with self.assertRaises(TypeError):
            class Custom(UnsetType):  # NOQA: F-841
                pass


class TestCoalesce(TestCase):
    """Unset replacement."""

    def testReplacesUnset(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))

    def testKeepsFalsyValues(self):
        for value in (None, 0, "", []):
            with self.subTest(value=value):
                self.assertIs(coalesce(value, "fallback"), value)


class TestRename(TestCase):
    """Callable naming."""

    def testDirectForm(self):
        function = rename(lambda: None, "named")
        self.assertEqual(function.__name__, "named")
        self.assertEqual(function.__qualname__, "named")

    def testDecoratorForm(self):
        @rename("decorated")
        def function():
            pass
        self.assertEqual(function.__name__, "decorated")

    def testRejectsBadArguments(self):
        with self.assertRaises(TypeError):
            rename(1, "named")
        with self.assertRaises(TypeError):
            rename(lambda: None, 1)
        with self.assertRaises(TypeError):
            rename()


class TestMirror(TestCase):
    """Read-only backing-field properties."""

    def setUp(self):
        class Holder:
            names = mirror("names")
            table = mirror("table")
            label = mirror("label")

            def __init__(self):
                self._names = ["a", "b"]
                self._table = {"a": 1}
                self._label = "text"

        self.holder = Holder()

    def testSequencesFrozen(self):
        self.assertEqual(self.holder.names, ("a", "b"))

    def testMappingsFrozen(self):
        with self.assertRaises(TypeError):
            self.holder.table["b"] = 2

    def testStringsUnchanged(self):
        self.assertEqual(self.holder.label, "text")

    def testReadOnly(self):
        with self.assertRaises(AttributeError):
            self.holder.names = ()


if __name__ == "__main__":
    unittest.main()
