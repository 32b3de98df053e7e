r"""
argsplitter matching engine.

Overview
- Splitter[_T] binds a Schema to a converter resolver and a token expander, then
  turns flat token sequences into the schema's result (split()).
- Every converter of the schema tree is resolved when the splitter is built, so an
  unknown value shape is a configuration error (UnresolvedConverterError) long
  before any input is seen.

Token classification (first rule that applies wins)
1. escape       '--' switches the rest of the scan to positional-only; discarded.
2. name=value   split on the first '='; the left part must be a declared name; a value
                wrapped in one pair of double quotes is unquoted.
3. name         exact, case-sensitive match of a flag, single, repeatable, required
                or branch name (no abbreviations).
4. bundle       '-abc' where each of '-a', '-b', '-c' is a declared flag.
5. positional   next pending required slot; otherwise varargs absorbs this token and
                every remaining one, verbatim.
Leftovers raise UnknownOptionError for named-looking tokens ('-x', outside an escape)
and UnexpectedArgumentError otherwise.

Per-kind accumulation
- flag        True (or the boolean of an inline value: only 'true' is true).
- single      inline value or next token; the last occurrence wins.
- repeatable  appends `cardinality` tokens per occurrence; the inline form splits on
              commas when the cardinality is 1, otherwise it supplies the first token.
- required    bound positionally in declaration order, or by name like a single.
- branch      the remaining tokens belong to a fresh split over the branch schema; its
              result is the branch value and the outer scan ends there (required slots
              of the outer schema are not enforced once a branch is taken).
- composite single/repeatable options read a nested group with a partial scan that
  stops at the first token the group cannot consume.

Conversion runs after the scan and is atomic: the first failing converter aborts the
whole split with a ConversionFailedError naming the option and the raw input.
Finalizers (nested ones included) only run once every value of the split converted.
Warnings raised by converters go through the warnings module untouched.

Quick example:
    >>> create = flag("-c", "--create")
    >>> file = single("-f", "--file")
    >>> files = varargs("files...", type=pathlib.Path)
    >>> bag = Splitter(Schema.of(create, file, files)).split(
    ...     ["--create", "--file", "classes.jar", "Foo.class", "Bar.class"])
    >>> bag.argument(files)
    [PosixPath('Foo.class'), PosixPath('Bar.class')]
"""
import collections.abc
import copy
import difflib
import itertools
import re
import sys
from collections import deque
from typing import NamedTuple, get_origin

from . import converters, expansion
from .converters import ConverterResolver
from .faults import *
from .options import Kind, parse_boolean
from .schemas import Schema
from .utils import *

_CONTAINERS = (list, tuple, set, frozenset, collections.abc.Sequence)


def _unquote(value, /):
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1]
    return value


def _check(tokens, /):
    tokens = list(tokens)
    for token in tokens:
        if not isinstance(token, str):
            raise TypeError(f"split() tokens must be strings, not {type(token).__name__}")
    return tokens


def _shape(option, /):
    # list-like kinds convert the whole list, a scalar shape is its element type
    shape = option.type
    if option.kind.listed and shape not in _CONTAINERS and get_origin(shape) not in _CONTAINERS:
        return list[shape]
    return shape


class _Pending(NamedTuple):
    """
    converted values of one schema, finalized once the whole split succeeded.
    """
    schema: Schema
    values: list

    def finalize(self):
        values = []
        for option, value in zip(self.schema.options, self.values):
            if option.kind is Kind.REPEATABLE and option.composite:
                value = [item.finalize() for item in value]
            elif isinstance(value, _Pending):
                value = value.finalize()
            values.append(value)
        return self.schema.finalize(values)


class Splitter[_T]:
    """
    Matching engine bound to one schema.

    Parameters
    - schema: Schema[_T]
      the declaration to match tokens against.
    - resolver: ConverterResolver
      value-shape resolution (converters.default when omitted).
    - expand: Callable[[Iterable[str]], Iterable[str]] | None
      token preprocessing run right before the scan (expansion.expand, i.e. @file
      inlining, when omitted; None disables it).
    - shell / fancy / colorful: bool
      fault surfacing: in shell mode faults are rendered on stderr (errors exit with
      status 1) instead of being raised; fancy draws panels; colorful toggles styles.

    A splitter holds no per-split state: split() may be called any number of times,
    including concurrently, with independent results.
    """

    def __init__(self, schema, /, resolver=Unset, expand=Unset, *, shell=False, fancy=False, colorful=True):
        if not isinstance(schema, Schema):
            raise TypeError("Splitter() schema must be a Schema")
        if not isinstance(resolver := coalesce(resolver, converters.default), ConverterResolver):
            raise TypeError("Splitter() resolver must be a ConverterResolver")
        if (expand := coalesce(expand, expansion.expand)) is not None and not callable(expand):
            raise TypeError("Splitter() expand must be callable or None")

        self._schema = schema
        self._resolver = resolver
        self._expand = expand
        self._hooks = ()
        self._options = {
            "shell": bool(shell),
            "fancy": bool(fancy),
            "colorful": bool(colorful),
        }
        self._converters = {}
        self._resolve(schema)

    @property
    def schema(self):
        return self._schema

    @property
    def resolver(self):
        return self._resolver

    def _resolve(self, schema):
        for option in schema.options:
            if option.schema is not None:
                self._resolve(option.schema)
                continue
            if option.kind is Kind.FLAG:
                continue
            if option.convert is not None:
                self._converters[option] = option.convert
                continue
            if (converter := self._resolver.resolve(shape := _shape(option))) is None:
                raise UnresolvedConverterError(
                    "no converter for %r (%s %r)" % (shape, option.kind.value, option.name),
                    title="unresolved converter",
                    code=FaultCode.UNRESOLVED_CONVERTER,
                    hint="declare a 'convert' callable or register a resolver for this type",
                    option=option,
                    shape=shape,
                )
            self._converters[option] = converter

    def _trigger(self, fault, /):
        trigger(fault, **self._options)

    # --- preprocessing hooks (each returns a new splitter, the newest hook runs first) ---

    def _derive(self, hook, /):
        other = copy.copy(self)
        other._hooks = (hook,) + self._hooks
        return other

    def with_each(self, function, /):
        """
        Splitter mapping every token through `function` before splitting.
        """
        if not callable(function):
            raise TypeError("with_each() argument must be callable")
        return self._derive(rename(lambda tokens: map(function, tokens), "each"))

    def with_expand(self, function, /):
        """
        Splitter replacing every token by the tokens `function` returns for it.
        """
        if not callable(function):
            raise TypeError("with_expand() argument must be callable")
        return self._derive(rename(lambda tokens: itertools.chain.from_iterable(map(function, tokens)), "expand"))

    def with_adjust(self, function, /):
        """
        Splitter handing the whole token sequence to `function` before splitting.
        """
        if not callable(function):
            raise TypeError("with_adjust() argument must be callable")
        return self._derive(function)

    # --- splitting ---

    def split(self, tokens=Unset, /):
        """
        Split `tokens` (sys.argv[1:] when omitted) into the schema's result.

        Raises
        - ExpansionError: an @file cannot be read or nests another @file.
        - SplittingError: unknown or unexpected tokens, missing values or required
          arguments, failed conversions.
        - TypeError: tokens is a plain string or holds non-string items.
        """
        tokens = coalesce(tokens, sys.argv[1:])
        if isinstance(tokens, str):
            raise TypeError("split() argument must be an iterable of strings, not a string")

        for hook in self._hooks:
            tokens = hook(tokens)
        tokens = _check(tokens)
        if self._expand is not None:
            try:
                tokens = _check(self._expand(tokens))
            except ExpansionError as exception:
                if not self._options["shell"]:
                    raise
                self._trigger(exception)

        return self._split(self._schema, deque(tokens), nested=False).finalize()

    def _split(self, schema, tokens, *, nested):
        raw = {}
        for option in schema.options:
            match option.kind:
                case Kind.FLAG:
                    raw[option] = False
                case Kind.REPEATABLE | Kind.VARARGS:
                    raw[option] = []
                case _:
                    raw[option] = Unset

        pending = deque(schema.required)
        flags = sum(option.kind is Kind.FLAG for option in schema.options)
        escaped = False

        while tokens:
            token = tokens.popleft()

            if token == "--" and not escaped:
                if nested:
                    # the escape belongs to the enclosing scan
                    tokens.appendleft(token)
                    break
                escaped = True
                continue

            if not escaped:
                name, separator, value = token.partition("=")
                value = _unquote(value) if separator else Unset
                option = schema.names.get(name)

                if option is not None and option.kind is not Kind.VARARGS:
                    if value == "":
                        self._trigger(EmptyOptionValueWarning(
                            "empty inline value for %s %r" % (option.kind.value, name),
                            title="empty inline value",
                            code=FaultCode.EMPTY_INLINE_VALUE,
                            hint="add a value after '=' (for example: %s=<value>)" % name,
                            option=option,
                            input=name,
                        ))

                    if option.kind is Kind.BRANCH:
                        if separator:
                            self._trigger(UnexpectedArgumentError(
                                "branch %r does not take an inline value" % name,
                                title="unexpected inline value",
                                code=FaultCode.UNEXPECTED_ARGUMENT,
                                hint="pass the branch arguments after a space (for example: %s %s)" % (name, value),
                                option=option,
                                input=token,
                            ))
                        raw[option] = self._split(option.schema, tokens, nested=False)
                        return _Pending(schema, self._convert(schema, raw))

                    self._accept(option, name, value, raw, pending, tokens)
                    continue

                if flags > 1 and re.fullmatch(r"-[a-zA-Z]{2,%d}" % flags, token) and all(
                    getattr(schema.names.get("-" + char), "kind", None) is Kind.FLAG for char in token[1:]
                ):
                    for char in token[1:]:
                        raw[schema.names["-" + char]] = True
                    continue

            if pending:
                raw[pending.popleft()] = token
                continue

            tokens.appendleft(token)
            if nested:
                break
            if (option := schema.varargs) is not None:
                raw[option] = list(tokens)
                tokens.clear()
                break
            self._leftover(schema, tokens, escaped)

        if pending:
            self._trigger(MissingArgumentError(
                "missing required argument%s %s" % ("s" * (len(pending) > 1), ", ".join(repr(option.name) for option in pending)),
                title="missing argument",
                code=FaultCode.MISSING_ARGUMENT,
                hint="add a value for %r" % pending[0].name,
                option=pending[0],
                missing=tuple(pending),
            ))

        return _Pending(schema, self._convert(schema, raw))

    def _accept(self, option, name, value, raw, pending, tokens):
        """
        record one named occurrence of `option` (value is the inline value or Unset).
        """
        match option.kind:
            case Kind.FLAG:
                raw[option] = True if value is Unset else parse_boolean(value)
            case Kind.SINGLE | Kind.REQUIRED:
                if option.composite:
                    self._refuse(option, name, value)
                    raw[option] = self._split(option.schema, tokens, nested=True)
                elif value is Unset:
                    raw[option], = self._take(option, name, tokens, 1)
                else:
                    raw[option] = value
                if option in pending:
                    pending.remove(option)
            case Kind.REPEATABLE:
                if option.composite:
                    self._refuse(option, name, value)
                    raw[option].append(self._split(option.schema, tokens, nested=True))
                elif value is Unset:
                    raw[option].extend(self._take(option, name, tokens, option.cardinality))
                elif option.cardinality == 1:
                    raw[option].extend(value.split(","))
                else:
                    raw[option].extend([value, *self._take(option, name, tokens, option.cardinality - 1)])
            case _:
                raise RuntimeError("unexpected option kind")

    def _refuse(self, option, name, value):
        if value is not Unset:
            self._trigger(UnexpectedArgumentError(
                "composite %s %r does not take an inline value" % (option.kind.value, name),
                title="unexpected inline value",
                code=FaultCode.UNEXPECTED_ARGUMENT,
                hint="pass the group values after a space (for example: %s %s)" % (name, value),
                option=option,
                input=name,
            ))

    def _take(self, option, name, tokens, count):
        if len(tokens) < count:
            self._trigger(MissingValueError(
                "%s %r expects %d value%s but %d remain%s" % (
                    option.kind.value, name, count, "s" * (count > 1), len(tokens), "s" * (len(tokens) == 1)
                ),
                title="missing value",
                code=FaultCode.MISSING_VALUE,
                hint="pass the value after the name (for example: %s <%s>)" % (name, option.metavar or "value"),
                option=option,
                input=name,
            ))
        return [tokens.popleft() for _ in range(count)]

    def _leftover(self, schema, tokens, escaped):
        token = tokens[0]
        if not escaped and len(token) > 1 and token.startswith("-"):
            suggestions = difflib.get_close_matches(token.partition("=")[0], schema.names.keys(), 5)
            try:
                hint = "did you mean %r?" % suggestions[0]
            except IndexError:
                hint = "check the declared option names"
            self._trigger(UnknownOptionError(
                "unknown option %r" % token,
                title="unknown option",
                code=FaultCode.UNKNOWN_OPTION,
                hint=hint,
                input=token,
                suggestions=suggestions,
            ))
        self._trigger(UnexpectedArgumentError(
            "unexpected argument %r" % token,
            title="unexpected argument",
            code=FaultCode.UNEXPECTED_ARGUMENT,
            hint="remove the extra input (%d token%s left)" % (len(tokens), "s" * (len(tokens) > 1)),
            input=token,
            leftover=tuple(tokens),
        ))

    def _convert(self, schema, raw):
        values = []
        for option in schema.options:
            value = raw[option]
            match option.kind:
                case Kind.FLAG | Kind.BRANCH:
                    values.append(coalesce(value))
                case _ if option.composite:
                    values.append(coalesce(value, option.default))
                case Kind.SINGLE if value is Unset:
                    values.append(option.default)
                case Kind.REQUIRED if value is Unset:
                    # only reachable when a branch ended the scan
                    values.append(None)
                case _:
                    values.append(self._apply(option, value))
        return values

    def _apply(self, option, value):
        converter = self._converters[option]
        try:
            return converter(value)
        except Exception as exception:
            self._trigger(ConversionFailedError(
                "cannot convert %r for %s %r" % (value, option.kind.value, option.name),
                title="conversion error",
                code=FaultCode.CONVERSION_FAILED,
                hint=getattr(exception, "hint", None) or "use a valid %s" % getattr(_shape(option), "__name__", "value"),
                option=option,
                input=value,
                exception=exception,
                cause=exception,
            ))

    def __repr__(self):
        return f"{type(self).__name__}({self._schema!r})"


__all__ = (
    # Types
    "Splitter",
)
