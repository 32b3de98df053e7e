"""
Faults module behavioral tests.

Scope
- Validate the fault contract: message, read-only options, code/hint accessors,
  copy.replace() merging and the exception families.
- Validate trigger(): raising (with cause), warning, shell-mode rendering and exit.
- Validate FaultCode.normalize() and the rich rendering of faults.

Conventions
- Test method names follow CamelCase per project convention.
- The stderr console is patched whenever shell mode is exercised.
"""

from __future__ import annotations

import copy
import io
import sys
import unittest
import warnings
from unittest import TestCase, mock

from rich.console import Console

from argsplitter import (
    ConversionError,
    EmptyOptionValueWarning,
    FaultCode,
    MissingValueError,
    SchemaError,
    SplitterException,
    SplitterWarning,
    SplittingError,
    UnknownOptionError,
    trigger,
)


def unknown(**options):
    return UnknownOptionError(
        "unknown option '-x'",
        title="unknown option",
        code=FaultCode.UNKNOWN_OPTION,
        hint="did you mean '-v'?",
        **options,
    )


class TestContract(TestCase):
    """Message, options and families."""

    def testMessageAndAccessors(self):
        fault = unknown()
        self.assertEqual(str(fault), "unknown option '-x'")
        self.assertIs(fault.code, FaultCode.UNKNOWN_OPTION)
        self.assertEqual(fault.hint, "did you mean '-v'?")

    def testTitleStandsInForMissingMessage(self):
        self.assertEqual(str(MissingValueError(title="missing value")), "missing value")

    def testOptionsAreReadOnly(self):
        with self.assertRaises(TypeError):
            unknown().options["hint"] = "other"

    def testReplaceMergesOptions(self):
        fault = unknown()
        other = copy.replace(fault, hint="other", shell=False)
        self.assertIs(type(other), UnknownOptionError)
        self.assertEqual(str(other), str(fault))
        self.assertEqual(other.hint, "other")
        self.assertIs(other.code, FaultCode.UNKNOWN_OPTION)
        self.assertEqual(fault.hint, "did you mean '-v'?")

    def testFamilies(self):
        self.assertTrue(issubclass(UnknownOptionError, SplittingError))
        self.assertTrue(issubclass(SplittingError, SplitterException))
        self.assertTrue(issubclass(SchemaError, ValueError))
        self.assertTrue(issubclass(ConversionError, ValueError))
        self.assertTrue(issubclass(EmptyOptionValueWarning, SplitterWarning))
        self.assertTrue(issubclass(SplitterWarning, Warning))


class TestCodes(TestCase):
    """Code normalization."""

    def testNumericByDefault(self):
        self.assertEqual(FaultCode.UNKNOWN_OPTION.normalize(), "23101")

    def testMainOverrides(self):
        with mock.patch.object(sys.modules["__main__"], "__codes__", {FaultCode.UNKNOWN_OPTION: "E-UNKNOWN"}, create=True):
            self.assertEqual(FaultCode.UNKNOWN_OPTION.normalize(), "E-UNKNOWN")
            self.assertEqual(FaultCode.MISSING_VALUE.normalize(), "23104")

    def testPhases(self):
        self.assertEqual(FaultCode.EMPTY_SCHEMA // 1000, 21)
        self.assertEqual(FaultCode.NESTED_ARGUMENTS_FILE // 1000, 22)
        self.assertEqual(FaultCode.CONVERSION_FAILED // 1000, 23)
        self.assertEqual(FaultCode.EMPTY_INLINE_VALUE // 1000, 24)


class TestTrigger(TestCase):
    """Surfacing faults."""

    def testErrorRaised(self):
        with self.assertRaises(UnknownOptionError):
            trigger(unknown())

    def testErrorRaisedFromCause(self):
        cause = ValueError("boom")
        with self.assertRaises(MissingValueError) as context:
            trigger(MissingValueError("missing"), cause=cause)
        self.assertIs(context.exception.__cause__, cause)

    def testWarningEmitted(self):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            trigger(EmptyOptionValueWarning("empty inline value for single '--file'"))
        self.assertEqual(len(caught), 1)
        self.assertIs(caught[0].category, EmptyOptionValueWarning)

    def testShellErrorExits(self):
        with mock.patch("argsplitter.faults.console") as console:
            with self.assertRaises(SystemExit) as context:
                trigger(unknown(), shell=True)
        self.assertEqual(context.exception.code, 1)
        console.print.assert_called_once()

    def testShellWarningPrints(self):
        with mock.patch("argsplitter.faults.console") as console:
            trigger(EmptyOptionValueWarning("empty"), shell=True)
        console.print.assert_called_once()

    def testPlainObjectsRejected(self):
        with self.assertRaises(TypeError):
            trigger(object())


class TestRendering(TestCase):
    """Rich output."""

    def render(self, fault):
        console = Console(file=io.StringIO(), width=100, color_system=None)
        console.print(fault)
        return console.file.getvalue()

    def testPlainRendering(self):
        output = self.render(unknown(colorful=False))
        self.assertIn("Unknown Option", output)
        self.assertIn("23101", output)
        self.assertIn("unknown option '-x'", output)
        self.assertIn("did you mean '-v'?", output)

    def testFancyRendering(self):
        output = self.render(unknown(fancy=True))
        self.assertIn("unknown option '-x'", output)
        self.assertIn("did you mean '-v'?", output)

    def testWarningRendering(self):
        output = self.render(EmptyOptionValueWarning("empty", title="empty inline value", code=FaultCode.EMPTY_INLINE_VALUE))
        self.assertIn("24101", output)
        self.assertIn("Empty Inline Value", output)


if __name__ == "__main__":
    unittest.main()
