r"""
argsplitter option model.

Overview
- Kind: closed set of option shapes.
  • FLAG        presence switch, raw value bool (e.g., -v/--verbose).
  • SINGLE      optional named value, raw value str | absent (e.g., --file out.jar).
  • REPEATABLE  accumulating named value, raw value list[str] (e.g., --list a --list=b,c).
  • REQUIRED    mandatory slot bound positionally (or by name), raw value str.
  • VARARGS     trailing positional list, raw value list[str] (all leftover tokens).
  • BRANCH      named sub-schema (subcommand); raw value is the nested result or absent.

- Option[_T]: one declared switch or positional slot. Built through the OptionType
  metaclass, which exposes the sanitized metadata as read-only properties and gives
  every option a stable __repr__/__rich_repr__.

- Factories: flag(), single(), repeatable(), required(), varargs(), branch().

Metadata (sanitized on construction)
- names: one or more non-empty strings, insertion-ordered, the first one is the
  primary name used by diagnostics and help. Names are matched exactly, so they need
  no dashes ("help", "-v", "--file" are all valid); whitespace, '=' and a leading '@'
  are rejected, as is the reserved escape token '--'.
- help: Unset | str (trimmed, non-empty when provided).
- type: value shape handed to the converter resolver (str by default). For
  REPEATABLE/VARARGS a scalar shape is the element type of the resulting list.
- convert: explicit converter overriding resolution; receives str for SINGLE/REQUIRED
  and list[str] for REPEATABLE/VARARGS.
- default: value of an absent SINGLE (None by default).
- schema: nested Schema; mandatory for BRANCH, optional for SINGLE/REPEATABLE
  (composite groups, which cannot declare VARARGS or BRANCH themselves).
- cardinality: tokens consumed per occurrence; above 1 only for REPEATABLE.
- metavar: label used by the manual for the value (defaults to "value").

Quick example:
    >>> from argsplitter.options import flag, single, varargs
    >>> create = flag("-c", "--create", help="Create an archive")
    >>> file = single("-f", "--file", help="The archive file")
    >>> files = varargs("files...", type=pathlib.Path)
"""
import functools
import operator
import re
from enum import Enum

from .utils import *


class Kind(Enum):
    FLAG = "flag"
    SINGLE = "single"
    REPEATABLE = "repeatable"
    REQUIRED = "required"
    VARARGS = "varargs"
    BRANCH = "branch"

    @property
    def positional(self):
        """
        True for the kinds owning a positional slot in declaration order.
        """
        return self in (Kind.REQUIRED, Kind.VARARGS, Kind.BRANCH)

    @property
    def listed(self):
        """
        True for the kinds whose raw value is a list of strings.
        """
        return self in (Kind.REPEATABLE, Kind.VARARGS)

    def __repr__(self):
        return f"{type(self).__name__}.{self.name}"


class OptionType(type):
    """
    Metaclass for option descriptors.

    Responsibilities
    - Derive __typename__ from the class name (camel-case split with hyphens); it is
      the subject of every construction error message.
    - Expose each name listed in __introspectable__ as a read-only property backed by
      the "_{name}" attribute (see mirror()).
    - Provide stable __repr__/__rich_repr__ over __displayable__ (falling back to
      __introspectable__).
    - Seal the class against subclassing when created with sealed=True.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                field: mirror(field) for field in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for field in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield field, getattr(self, field)
        self.__rich_repr__ = __rich_repr__

        if options.get("sealed", False):
            @rename("__init_subclass__")
            def __init_subclass__(cls, **options):  # NOQA: F-841
                raise TypeError(f"type {self.__name__!r} is not an acceptable base type")
            self.__init_subclass__ = classmethod(__init_subclass__)

        return self


def _sanitize_names(cls, metadata, /):
    """
    Internal: validate option names and freeze them into an ordered tuple.

    Raises
    - TypeError: no names at all, or a non-string entry.
    - ValueError: empty string, whitespace or '=' inside a name, a leading '@',
      the reserved '--', or a duplicate within the same option.
    """
    if not metadata["names"]:
        raise TypeError(f"{cls.__typename__} must specify at least one name")

    names = []
    for name in metadata["names"]:
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} names must be strings")
        elif not name:
            raise ValueError(f"{cls.__typename__} names cannot be empty-strings")
        elif re.search(r"[\s=]", name):
            raise ValueError(f"{cls.__typename__} name {name!r} cannot contain whitespaces or '='")
        elif name == "--":
            raise ValueError(f"{cls.__typename__} name '--' is reserved for the escape token")
        elif name.startswith("@"):
            raise ValueError(f"{cls.__typename__} name {name!r} cannot start with '@' (reserved for argument files)")
        elif name in names:
            raise ValueError(f"{cls.__typename__} names cannot contain duplicates")
        names.append(name)

    metadata["names"] = tuple(names)


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate the per-kind metadata and materialize defaults in place.
    """
    from .schemas import Schema

    if not isinstance(kind := metadata["kind"], Kind):
        raise TypeError(f"{cls.__typename__} 'kind' must be a Kind")

    if not isinstance(help := metadata["help"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'help' must be a string")
    elif isinstance(help, str) and not (help := help.strip()):
        raise ValueError(f"{cls.__typename__} 'help' cannot be empty")
    metadata["help"] = coalesce(help)

    if not isinstance(metavar := metadata["metavar"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'metavar' must be a string")
    elif isinstance(metavar, str) and not (metavar := metavar.strip()):
        raise ValueError(f"{cls.__typename__} 'metavar' cannot be empty")
    metadata["metavar"] = coalesce(metavar)

    # nested schema: mandatory for branches, optional for composite groups
    if not isinstance(schema := metadata["schema"], Schema | Unset):
        raise TypeError(f"{cls.__typename__} 'schema' must be a Schema")
    if kind is Kind.BRANCH and schema is Unset:
        raise TypeError(f"{kind.value} {cls.__typename__} must specify a 'schema'")
    if kind not in (Kind.BRANCH, Kind.SINGLE, Kind.REPEATABLE) and schema is not Unset:
        raise TypeError(f"{kind.value} {cls.__typename__} cannot specify a 'schema'")
    if kind is not Kind.BRANCH and schema is not Unset:
        for option in schema.options:
            if option.kind in (Kind.VARARGS, Kind.BRANCH):
                raise ValueError(f"composite {cls.__typename__} schema cannot declare a {option.kind.value}")
    metadata["schema"] = coalesce(schema)

    # value shape and conversion only apply to options carrying text
    textual = kind not in (Kind.FLAG, Kind.BRANCH) and schema is Unset
    if metadata["type"] is not Unset and not textual:
        raise TypeError(f"{kind.value} {cls.__typename__} cannot specify a 'type'")
    if (convert := metadata["convert"]) is not Unset:
        if not textual:
            raise TypeError(f"{kind.value} {cls.__typename__} cannot specify a 'convert'")
        if not callable(convert):
            raise TypeError(f"{cls.__typename__} 'convert' must be callable")
    metadata["type"] = coalesce(metadata["type"], str if textual else bool if kind is Kind.FLAG else None)
    metadata["convert"] = coalesce(convert)

    if metadata["default"] is not Unset and kind is not Kind.SINGLE:
        raise TypeError(f"{kind.value} {cls.__typename__} cannot specify a 'default'")
    metadata["default"] = coalesce(metadata["default"])

    if not isinstance(cardinality := metadata["cardinality"], int) or isinstance(cardinality, bool):
        raise TypeError(f"{cls.__typename__} 'cardinality' must be an integer")
    if cardinality < 1:
        raise ValueError(f"{cls.__typename__} 'cardinality' must be a positive integer")
    if cardinality > 1 and kind is not Kind.REPEATABLE:
        raise ValueError(f"{kind.value} {cls.__typename__} cannot consume more than one token per occurrence")


class Option[_T](metaclass=OptionType, sealed=True):
    """
    One declared switch or positional slot.

    Options are immutable once built: every field is exposed through a read-only
    property, containers are returned as tuples. Identity matters: a parse result
    is looked up by the very Option instance that was declared, so an Option has
    identity-based equality and hashing.
    """

    __introspectable__ = (
        "kind",
        "names",
        "help",
        "schema",
        "type",
        "convert",
        "default",
        "cardinality",
        "metavar",
    )
    __displayable__ = (
        "kind",
        "names",
        "help",
        "type",
        "cardinality",
    )

    def __new__(
            cls,
            kind,
            /,
            *names,
            help=Unset,
            type=Unset,
            convert=Unset,
            default=Unset,
            schema=Unset,
            cardinality=1,
            metavar=Unset
    ):
        metadata = {
            "kind": kind,
            "names": names,
            "help": help,
            "schema": schema,
            "type": type,
            "convert": convert,
            "default": default,
            "cardinality": cardinality,
            "metavar": metavar,
        }
        _sanitize_names(cls, metadata)
        _sanitize_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def name(self):
        """
        Primary name (first declared), used by diagnostics and help.
        """
        return self._names[0]

    @property
    def composite(self):
        """
        True for SINGLE/REPEATABLE options whose value is a nested group.
        """
        return self._kind is not Kind.BRANCH and self._schema is not None


def flag(*names, help=Unset):
    """
    Declare a presence switch; its value is True when any of its names is given.
    """
    return Option(Kind.FLAG, *names, help=help)


def single(*names, **options):
    """
    Declare an optional named value (`--name value` or `--name=value`); the last
    occurrence wins and an absent option converts to `default`.
    """
    return Option(Kind.SINGLE, *names, **options)


def repeatable(*names, **options):
    """
    Declare an accumulating named value; occurrences append in encounter order and
    the inline form `--name=a,b` contributes one element per comma-separated part.
    """
    return Option(Kind.REPEATABLE, *names, **options)


def required(*names, **options):
    """
    Declare a mandatory slot, bound to the next unmatched token (or by name).
    """
    return Option(Kind.REQUIRED, *names, **options)


def varargs(*names, **options):
    """
    Declare the trailing positional list absorbing every remaining unmatched token.
    """
    return Option(Kind.VARARGS, *names, **options)


def branch(*names, schema, help=Unset):
    """
    Declare a subcommand: once its name is met, the rest of the input belongs to
    `schema` and the result of that nested split becomes the option's value.
    """
    return Option(Kind.BRANCH, *names, schema=schema, help=help)


def parse_boolean(text, /):
    """
    Lenient boolean of a flag inline value: "true" in any casing is true, anything
    else (including "yes" or "1") is false.
    """
    return text.lower() == "true"


__all__ = (
    # Types
    "Kind",
    "OptionType",
    "Option",

    # Factories
    "flag",
    "single",
    "repeatable",
    "required",
    "varargs",
    "branch",

    # Functions
    "parse_boolean",
)
