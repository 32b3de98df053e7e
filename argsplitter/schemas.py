"""
argsplitter schemas and split results.

Overview
- Schema[_T]: an ordered, immutable list of Options plus a finalizer. Declaration
  order is the positional binding order; the finalizer turns the converted values
  into the caller's result shape.
  • Schema(options, finalizer)     custom finalizer receiving an ArgumentBag.
  • Schema.of(*options)            the ArgumentBag itself is the result.
  • Schema.into(target, *options)  target(*values), e.g. a dataclass or NamedTuple.
  • Schema.values(*options, pruned=False)
                                   list of Value(option, value) pairs; pruned drops
                                   absent flags/singles/branches and empty lists.

- ArgumentBag: the per-split result view. It is a Sequence of the converted values in
  schema order and also answers lookups by option identity (argument()) and by any of
  an option's names (named()).

Validation (fail fast, configuration errors)
- at least one option                      EmptySchemaError
- every name unique across the schema      DuplicatedNameError
- one varargs at most, no required after it MisplacedPositionalError
  (required slots after a branch are fine: a branch is only entered by name)
"""
from collections.abc import Sequence
from types import MappingProxyType
from typing import NamedTuple

from .faults import *
from .options import Kind, Option
from .utils import *


class ArgumentBag(Sequence):
    """
    Converted values of one split, in schema order.

    Three equivalent views over the same values: by position (bag[0]), by option
    (bag.argument(option)) and by name (bag.named("--file")). Two bags are equal when
    they hold equal values for the very same options.
    """
    __slots__ = ("_options", "_values", "_names")

    def __init__(self, options, values, /):
        options = tuple(options)
        values = tuple(values)
        if len(options) != len(values):
            raise ValueError("ArgumentBag() expects exactly one value per option")
        self._options = options
        self._values = values
        self._names = {name: index for index, option in enumerate(options) for name in option.names}

    @property
    def options(self):
        return self._options

    def __getitem__(self, index, /):
        return self._values[index]

    def __len__(self):
        return len(self._values)

    def argument(self, option, /):
        """
        Value of `option` (looked up by identity).
        """
        for index, candidate in enumerate(self._options):
            if candidate is option:
                return self._values[index]
        raise KeyError(f"option {getattr(option, 'name', option)!r} does not belong to this result")

    def named(self, name, /):
        """
        Value of the option declaring `name` (any of its names).
        """
        try:
            return self._values[self._names[name]]
        except KeyError:
            raise KeyError(f"no option named {name!r}") from None

    def asdict(self):
        """
        Values keyed by each option's primary name.
        """
        return {option.name: value for option, value in zip(self._options, self._values)}

    def __eq__(self, other, /):
        if not isinstance(other, ArgumentBag):
            return NotImplemented
        return (
            len(self._options) == len(other._options) and
            all(mine is theirs for mine, theirs in zip(self._options, other._options)) and
            self._values == other._values
        )

    __hash__ = None

    def __repr__(self):
        return f"{type(self).__name__}({self.asdict()!r})"

    def __rich_repr__(self):
        yield from self.asdict().items()


class Value(NamedTuple):
    """
    One (option, converted value) pair, as produced by Schema.values().
    """
    option: Option
    value: object

    @property
    def kind(self):
        return self.option.kind


def _absent(option, value, /):
    match option.kind:
        case Kind.FLAG:
            return value is False
        case Kind.REQUIRED:
            return False
        case Kind.REPEATABLE | Kind.VARARGS:
            return not value
        case _:
            return value is None


@rename("bag")
def _identity(bag, /):
    return bag


class Schema[_T]:
    """
    Ordered, immutable option declaration plus the finalizer building the result.

    A schema may be nested under several options and reused by any number of
    splitters; it holds no per-split state.
    """
    __slots__ = ("_options", "_names", "_finalizer")

    def __init__(self, options, finalizer=Unset, /):
        try:
            options = tuple(options)
        except TypeError:
            raise TypeError("Schema() options must be iterable") from None

        for option in options:
            if not isinstance(option, Option):
                raise TypeError(f"Schema() options must be Option instances, not {type(option).__name__}")

        if not options:
            raise EmptySchemaError(
                "at least one option is expected",
                title="empty schema",
                code=FaultCode.EMPTY_SCHEMA,
                hint="declare at least one option",
            )

        names = {}
        for option in options:
            for name in option.names:
                if name in names:
                    raise DuplicatedNameError(
                        "name %r is declared more than once (%r and %r)" % (name, names[name].name, option.name),
                        title="duplicated name",
                        code=FaultCode.DUPLICATED_NAME,
                        hint="give each option its own names",
                        name=name,
                    )
                names[name] = option

        varargs = None
        for option in options:
            match option.kind:
                case Kind.VARARGS if varargs is not None:
                    raise MisplacedPositionalError(
                        "varargs %r is declared after varargs %r" % (option.name, varargs.name),
                        title="misplaced positional",
                        code=FaultCode.MISPLACED_POSITIONAL,
                        hint="keep a single varargs option",
                        option=option,
                    )
                case Kind.VARARGS:
                    varargs = option
                case Kind.REQUIRED if varargs is not None:
                    raise MisplacedPositionalError(
                        "required %r is declared after varargs %r" % (option.name, varargs.name),
                        title="misplaced positional",
                        code=FaultCode.MISPLACED_POSITIONAL,
                        hint="declare varargs as the last positional option",
                        option=option,
                    )

        if finalizer is not Unset and not callable(finalizer):
            raise TypeError("Schema() finalizer must be callable")

        self._options = options
        self._names = MappingProxyType(names)
        self._finalizer = coalesce(finalizer, _identity)

    @property
    def options(self):
        return self._options

    @property
    def names(self):
        """
        Read-only name -> option mapping covering every declared name.
        """
        return self._names

    @property
    def finalizer(self):
        return self._finalizer

    @property
    def varargs(self):
        return next((option for option in self._options if option.kind is Kind.VARARGS), None)

    @property
    def required(self):
        return tuple(option for option in self._options if option.kind is Kind.REQUIRED)

    def finalize(self, values, /):
        """
        Wrap converted values (one per option, schema order) and run the finalizer.
        """
        return self._finalizer(ArgumentBag(self._options, values))

    def help(self, indent=2):
        from .manual import help
        return help(self, indent)

    def __repr__(self):
        return f"{type(self).__name__}({', '.join(option.name for option in self._options)})"

    @classmethod
    def of(cls, *options):
        return cls(options)

    @classmethod
    def into(cls, target, /, *options):
        if not callable(target):
            raise TypeError("Schema.into() target must be callable")

        @rename(getattr(target, "__name__", "into"))
        def finalizer(bag):
            return target(*bag)

        return cls(options, finalizer)

    @classmethod
    def values(cls, *options, pruned=False):
        @rename("pruned" if pruned else "values")
        def finalizer(bag):
            return [
                Value(option, value)
                for option, value in zip(bag.options, bag)
                if not (pruned and _absent(option, value))
            ]

        return cls(options, finalizer)


__all__ = (
    # Types
    "Schema",
    "ArgumentBag",
    "Value",
)
