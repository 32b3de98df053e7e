"""
argsplitter converter resolution.

Overview
- A converter is a plain callable turning raw text into a typed value: str -> T for
  SINGLE/REQUIRED options, list[str] -> T for REPEATABLE/VARARGS options.
- A resolver maps a value shape (a type such as int, an enum class, or a typing form
  such as list[Path] or int | None) to a converter, or to None when it does not know
  the shape. ConverterResolver wraps such a function and composes it.

Composition
- a | b (or a.or_(b)): try a first, fall back to b; lazy, the first non-None wins.
- r.unwrap(): teach r the container shapes; Optional/X | None, list[X], tuple[X, ...],
  set[X], frozenset[X] and Sequence[X] are peeled recursively and the element
  converter is applied to each item.
- ConverterResolver.of(function): lift a bare function.
- ConverterResolver.when(shape_or_predicate, converter): a one-shape resolver, handy
  to shadow a built-in (`when(bool, my_bool) | default`).

Built-ins
- basic:      str (identity), bool (strict "true"/"false"), int, float, complex.
- enumerated: Enum subclasses, by exact case-sensitive member name; a mismatch raises
              ConversionError listing the valid names.
- reflected:  class factories (parse, of, from_string, fromisoformat) and, failing
              those, the class constructor itself (Path, Decimal, UUID, ...).
- default:    (basic | enumerated | reflected).unwrap()

Resolution happens once per option when a Splitter is built; conversion happens on
every split.
"""
import collections.abc
import inspect
from enum import Enum
from types import NoneType, UnionType
from typing import Union, get_args, get_origin

from .faults import ConversionError, FaultCode
from .utils import rename

_CONTAINERS = {
    list: list,
    tuple: tuple,
    set: set,
    frozenset: frozenset,
    collections.abc.Sequence: list,
}

_FACTORIES = ("parse", "of", "from_string", "fromisoformat")


class ConverterResolver:
    """
    Composable mapping from a value shape to a converter.

    The wrapped function receives a shape and returns a callable, or None when the
    shape is not handled. Resolvers are immutable; every combinator returns a new one.
    """
    __slots__ = ("_function",)

    def __init__(self, function, /):
        if not callable(function):
            raise TypeError("ConverterResolver() argument must be callable")
        self._function = function

    def resolve(self, shape, /):
        """
        Return the converter for `shape`, or None when this resolver cannot handle it.
        """
        converter = self._function(shape)
        if converter is not None and not callable(converter):
            raise TypeError(f"resolver {self!r} returned a non-callable converter for {shape!r}")
        return converter

    def or_(self, other, /):
        """
        Resolver trying `self` first and `other` only when `self` yields None.
        """
        if not isinstance(other, ConverterResolver):
            raise TypeError("or_() argument must be a ConverterResolver")

        @rename(f"{getattr(self._function, '__name__', 'resolver')}|{getattr(other._function, '__name__', 'resolver')}")
        def function(shape):
            if (converter := self.resolve(shape)) is not None:
                return converter
            return other.resolve(shape)

        return type(self)(function)

    def __or__(self, other, /):
        if not isinstance(other, ConverterResolver):
            return NotImplemented
        return self.or_(other)

    def unwrap(self):
        """
        Resolver additionally handling optional and container shapes around the
        shapes `self` knows, recursively (e.g., list[int | None]).
        """

        @rename("unwrap")
        def function(shape):
            origin, arguments = get_origin(shape), get_args(shape)

            if origin in (Union, UnionType):
                if NoneType not in arguments:
                    return None
                remaining = tuple(argument for argument in arguments if argument is not NoneType)
                if len(remaining) != 1 or (converter := function(remaining[0])) is None:
                    return None

                @rename(f"optional[{getattr(converter, '__name__', 'converter')}]")
                def optional(value):
                    return None if value is None else converter(value)
                return optional

            # bare containers carry strings
            if shape in _CONTAINERS:
                origin, arguments = shape, (str,)

            if origin in _CONTAINERS:
                if origin is tuple and arguments[1:] not in ((), (Ellipsis,)):
                    return None
                if not arguments or (converter := function(arguments[0])) is None:
                    return None
                factory = _CONTAINERS[origin]

                @rename(f"{factory.__name__}[{getattr(converter, '__name__', 'converter')}]")
                def container(values):
                    return factory(map(converter, values))
                return container

            return self.resolve(shape)

        return type(self)(function)

    @classmethod
    def of(cls, function, /):
        """
        Lift a `shape -> converter | None` function into a resolver.
        """
        return cls(function)

    @classmethod
    def when(cls, condition, converter, /):
        """
        Resolver answering `converter` for one shape (compared by equality) or for
        every shape accepted by a predicate, and None otherwise.
        """
        if not callable(converter):
            raise TypeError("when() converter must be callable")
        if isinstance(condition, type) or get_origin(condition) is not None:
            shape = condition
            condition = rename(lambda candidate: candidate == shape, "matches")
        elif not callable(condition):
            raise TypeError("when() condition must be a type, a typing form or a predicate")

        @rename("when")
        def function(shape):
            return converter if condition(shape) else None

        return cls(function)

    def __repr__(self):
        return f"{type(self).__name__}({getattr(self._function, '__name__', self._function)!r})"


@rename("str")
def _identity(text):
    return text


@rename("bool")
def _boolean(text):
    match text.lower():
        case "true":
            return True
        case "false":
            return False
    raise ConversionError(
        "invalid boolean value %r" % text,
        title="invalid value",
        code=FaultCode.INVALID_VALUE,
        hint="use 'true' or 'false'",
        input=text,
    )


@rename("basic")
def _basic(shape):
    if shape is str:
        return _identity
    if shape is bool:
        return _boolean
    if shape in (int, float, complex):
        return shape
    return None


@rename("enumerated")
def _enumerated(shape):
    if not (isinstance(shape, type) and issubclass(shape, Enum)):
        return None

    @rename(shape.__name__)
    def convert(text):
        try:
            return shape[text]
        except KeyError:
            choices = tuple(shape.__members__)
            raise ConversionError(
                "invalid choice %r for %s" % (text, shape.__name__),
                title="invalid choice",
                code=FaultCode.INVALID_CHOICE,
                hint="choose from %s" % ", ".join(map(repr, choices)),
                input=text,
                choices=choices,
            ) from None

    return convert


@rename("reflected")
def _reflected(shape):
    if not isinstance(shape, type) or inspect.isabstract(shape):
        return None
    for name in _FACTORIES:
        factory = getattr(shape, name, None)
        # only factories bound to the class itself (classmethods, static methods)
        if callable(factory) and (
            getattr(factory, "__self__", None) is shape or
            isinstance(inspect.getattr_static(shape, name, None), staticmethod)
        ):
            return factory
    return shape


basic = ConverterResolver.of(_basic)
enumerated = ConverterResolver.of(_enumerated)
reflected = ConverterResolver.of(_reflected)
default = (basic | enumerated | reflected).unwrap()


__all__ = (
    # Types
    "ConverterResolver",

    # Resolvers
    "basic",
    "enumerated",
    "reflected",
    "default",
)
