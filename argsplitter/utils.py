"""
argsplitter utilities (small building blocks shared by every layer)

Scope
- Helpers used by the option model, the schema, the splitter and the faults to keep
  "not provided" semantics, generated-callable naming and read-only views consistent.

Overview
- UnsetType / Unset
  • Singleton sentinel meaning "argument not given", distinct from None (an absent
    Single legitimately converts to None).
  • Falsy, printable as "Unset", non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default; None/0/""/[] are preserved.

- rename(callable, name) / @rename("name")
  • Stable __name__/__qualname__ on generated converters and finalizers so that
    reprs and tracebacks stay readable.

- mirror("attr")
  • Read-only property exposing a private backing field (self._attr); lists come back
    as tuples and mappings as read-only proxies, so callers cannot mutate a built
    Option or Schema through its public surface.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> coalesce(None, "fallback") is None
    True
"""
import builtins
import functools
from collections.abc import Mapping, Sequence
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Sentinel type for a parameter that was not provided.

    Characteristics
    - Boolean-false, but distinct from None and 0.
    - repr(Unset) -> "Unset".
    - A single instance per process; subclassing is rejected.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in isinstance checks (e.g., str | Unset).
        """
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Return `object` unless it is the Unset sentinel, in which case return `default`.

    Falsy values (None, 0, "", []) are kept as-is; only Unset is replaced.
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set __name__/__qualname__ on a callable, or build a decorator doing so.

    Forms
    - rename(callable, name) -> callable (renamed in place)
    - rename(name)           -> decorator

    Errors
    - TypeError on a non-callable target, a non-string name, a callable whose
      names cannot be updated, or a wrong number of arguments.
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _freeze(object):
    # strings are sequences too, leave them alone
    if isinstance(object, Sequence) and not isinstance(object, str):
        return tuple(object)
    if isinstance(object, Mapping):
        return MappingProxyType(dict(object))
    return object


def mirror(name, /):
    """
    Build a read-only property reading the backing attribute "_{name}".

    Sequences are exposed as tuples and mappings as read-only proxies; any other
    value is returned unchanged.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _freeze(getattr(self, "_" + name))

    return property(getter)


Unset = UnsetType()


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
