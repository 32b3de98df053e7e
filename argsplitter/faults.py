"""
argsplitter faults (errors and warnings) and rendering.

Scope
- FaultCode: stable numeric identifiers for every issue the engine can report,
  grouped by the phase that detects it (configuration, expansion, splitting, warnings).
- SplitterException / SplitterWarning: base types carrying a message plus keyword
  options (title, code, hint and context such as option/input/token) and knowing how
  to render themselves with rich.
- trigger(): single exit point for faults; raises (or warns) by default, renders on a
  stderr console when the caller runs in shell mode.

Families
- configuration (SchemaError, a ValueError): raised while building options, schemas
  and splitters; expected to be caught during development.
- expansion (ExpansionError): unreadable or nested @file references.
- splitting (SplittingError): raised by split(); atomic, no partial result escapes.
- conversion (ConversionError): raised by converters, wrapped by the splitter into a
  ConversionFailedError naming the option and the raw input.

Customization (read from __main__)
- __styles__: palette overrides for the rendered output.
- __codes__: FaultCode -> label mapping used by FaultCode.normalize().
- __prog__: program name shown in headers (defaults to the script name).
"""
import copy
import os
import sys
import warnings
from abc import ABC
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - configuration (211xx): EMPTY_SCHEMA, DUPLICATED_NAME, MISPLACED_POSITIONAL,
      UNRESOLVED_CONVERTER
    - expansion (221xx): ARGUMENTS_FILE_NOT_FOUND, UNREADABLE_ARGUMENTS_FILE,
      NESTED_ARGUMENTS_FILE
    - splitting (231xx): UNKNOWN_OPTION, UNEXPECTED_ARGUMENT, MISSING_ARGUMENT,
      MISSING_VALUE, CONVERSION_FAILED, INVALID_CHOICE, INVALID_VALUE
    - warnings (241xx): EMPTY_INLINE_VALUE
    """
    # --- configuration errors (21xxx) ---
    EMPTY_SCHEMA                = 21101
    DUPLICATED_NAME             = 21102
    MISPLACED_POSITIONAL        = 21103
    UNRESOLVED_CONVERTER        = 21104

    # --- expansion errors (22xxx) ---
    ARGUMENTS_FILE_NOT_FOUND    = 22101
    UNREADABLE_ARGUMENTS_FILE   = 22102
    NESTED_ARGUMENTS_FILE       = 22103

    # --- splitting errors (23xxx) ---
    UNKNOWN_OPTION              = 23101
    UNEXPECTED_ARGUMENT         = 23102
    MISSING_ARGUMENT            = 23103
    MISSING_VALUE               = 23104
    CONVERSION_FAILED           = 23105
    INVALID_CHOICE              = 23106
    INVALID_VALUE               = 23107

    # --- warnings (24xxx) ---
    EMPTY_INLINE_VALUE          = 24101

    def normalize(self):
        """
        return a host-normalized string for this code.

        a __codes__ mapping in __main__ may override numeric ids with friendlier
        labels; otherwise the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, palette, /):
    main = __import__("__main__")
    colorful = fault.options.get("colorful", True)
    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)

    prog = getattr(main, "__prog__", os.path.basename(sys.argv[0]) or "argsplitter")
    code = fault.options.get("code")

    header = Text.assemble(
        "[ ",
        text(prog, styler("prog-name")),
        " — ",
        text(code.normalize() if isinstance(code, FaultCode) else "", styler("code")),
        " | ",
        text(str(fault.options.get("title", type(fault).__name__)).title(), styler("title")),
        " ]"
    )
    message = text(str(fault), styler("message"))
    renders = [message]
    if hint := fault.options.get("hint"):
        renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

    if fault.options.get("fancy", False):
        return Panel(Group(*renders), title=header, title_align="left")
    return Group(header, *renders)


class SplitterException(Exception):
    """
    base class of every argsplitter error.

    the positional message is the human sentence; keyword options carry the
    structured context (title, code, hint, option, input, token, ...), exposed
    read-only through `options`.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return coalesce(self.message, self.options.get("title", ""))

    @property
    def code(self):
        return self.options.get("code")

    @property
    def hint(self):
        return self.options.get("hint")

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "title": "bold #FF4DA6",  # pinky title
            "message": "#C8C8D0",  # soft gray body
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        })

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from self.options.get("cause")
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class SchemaError(SplitterException, ValueError): ...
class EmptySchemaError(SchemaError): ...
class DuplicatedNameError(SchemaError): ...
class MisplacedPositionalError(SchemaError): ...
class UnresolvedConverterError(SchemaError): ...

class ExpansionError(SplitterException): ...
class ArgumentsFileNotFoundError(ExpansionError): ...
class UnreadableArgumentsFileError(ExpansionError): ...
class NestedArgumentsFileError(ExpansionError): ...

class SplittingError(SplitterException): ...
class UnknownOptionError(SplittingError): ...
class UnexpectedArgumentError(SplittingError): ...
class MissingArgumentError(SplittingError): ...
class MissingValueError(SplittingError): ...
class ConversionFailedError(SplittingError): ...

class ConversionError(SplitterException, ValueError): ...


class SplitterWarning(ABC, Warning):
    """
    base class of every argsplitter warning (same message/options contract as errors).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return coalesce(self.message, self.options.get("title", ""))

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #FFB400",  # amber fault code for warnings
            "title": "bold #FFC2E0",
            "message": "#D6D6DE",
            "hint-arrow": "#B8EFAF dim",
            "hint": "italic #B8EFAF",
        })

    def __trigger__(self):
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=3)
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class EmptyOptionValueWarning(SplitterWarning): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ (see the base classes).
    - options are merged into the fault via copy.replace() before triggering.
    - errors are raised and warnings go through warnings.warn(), unless shell=True,
      in which case both are rendered on stderr and errors exit with status 1.
    """
    if (
        not callable(getattr(fault, "__trigger__", None)) or
        not callable(getattr(fault, "__replace__", None))
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


__all__ = (
    # Codes
    "FaultCode",

    # Errors
    "SplitterException",
    "SchemaError",
    "EmptySchemaError",
    "DuplicatedNameError",
    "MisplacedPositionalError",
    "UnresolvedConverterError",
    "ExpansionError",
    "ArgumentsFileNotFoundError",
    "UnreadableArgumentsFileError",
    "NestedArgumentsFileError",
    "SplittingError",
    "UnknownOptionError",
    "UnexpectedArgumentError",
    "MissingArgumentError",
    "MissingValueError",
    "ConversionFailedError",
    "ConversionError",

    # Warnings
    "SplitterWarning",
    "EmptyOptionValueWarning",

    # Functions
    "trigger",
)
