"""
argsplitter manual (help rendering).

- help(schema, indent=2): plain text. Options are sorted by primary name; each one is
  listed as its names joined with ", " plus a kind suffix, followed by its help text
  indented by `indent` spaces. Nested schemas (branches, composite groups) are listed
  recursively one indentation level deeper.

      --file, -f <value>
        The archive file
      -c, --create (flag)
        Create an archive

- render(schema, *, colorful=True): the same content as a rich table, with styles
  overridable through a __styles__ mapping in __main__.
"""
from collections import defaultdict

from rich.box import ROUNDED
from rich.table import Table
from rich.text import Text

from .options import Kind


def _suffix(option, /):
    metavar = "<%s>" % (option.metavar or "value")
    match option.kind:
        case Kind.FLAG:
            return " (flag)"
        case Kind.BRANCH:
            return " (branch)"
        case Kind.SINGLE if option.composite:
            return " (group)"
        case Kind.REPEATABLE if option.composite:
            return " (group, repeatable)"
        case Kind.SINGLE:
            return " " + metavar
        case Kind.REPEATABLE:
            return " %s (repeatable)" % " ".join([metavar] * option.cardinality)
        case Kind.REQUIRED:
            return " (required)"
        case Kind.VARARGS:
            return "" if option.name.endswith("...") else "..."


def _sorted(schema, /):
    return sorted(schema.options, key=lambda option: option.name)


def help(schema, indent=2):
    """
    Plain-text manual of `schema`; every declared option appears, with or without help.
    """
    if not isinstance(indent, int) or isinstance(indent, bool) or indent < 0:
        raise ValueError("help() indent must be a non-negative integer")

    padding = " " * indent
    lines = []
    for option in _sorted(schema):
        lines.append(", ".join(option.names) + _suffix(option))
        if option.help:
            lines.extend(padding + line for line in option.help.splitlines())
        if option.schema is not None:
            lines.extend(padding + line for line in help(option.schema, indent).splitlines())
    return "\n".join(lines)


def render(schema, *, colorful=True):
    """
    Rich table listing the options of `schema` (nested schemas indented under their option).
    """
    styles = defaultdict(str, {
        "table": "#4B5563",  # slate border
        "header": "bold #FFFFFF",
        "flag-name": "bold #22C55E",  # green for flags
        "option-name": "bold #00E6FF",  # cyan for valued options
        "positional-name": "bold #FFD600",  # amber for positionals
        "branch-name": "bold #FF4D94",  # magenta for branches
        "suffix": "#9CA3AF",
        "help": "#9CA3AF",
    } | getattr(__import__("__main__"), "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    table = Table(
        "name", "help",
        box=ROUNDED,
        style=styler("table"),
        header_style=styler("header"),
    )

    def rows(schema, depth):
        for option in _sorted(schema):
            match option.kind:
                case Kind.FLAG:
                    style = "flag-name"
                case Kind.BRANCH:
                    style = "branch-name"
                case Kind.REQUIRED | Kind.VARARGS:
                    style = "positional-name"
                case _:
                    style = "option-name"
            name = Text.assemble(
                "  " * depth,
                Text(", ".join(option.names), styler(style)),
                Text(_suffix(option), styler("suffix")),
            )
            table.add_row(name, Text(option.help or "", styler("help")))
            if option.schema is not None:
                rows(option.schema, depth + 1)

    rows(schema, 0)
    return table


__all__ = (
    "help",
    "render",
)
