"""
argsplitter token preprocessing and @file expansion.

Processors are plain callables taking an iterable of tokens and returning a list of
tokens; chain() composes them left to right.

- identity   tokens unchanged.
- trim       strip surrounding whitespace of every token.
- prune      drop empty tokens.
- normalize  trim, then prune.
- expand     inline @file references (the default expander of every Splitter).
- DEFAULT    normalize, then expand.

@file rules
- '@path' is replaced by the lines of the file at path, one token per line; every
  line is stripped, blank lines and lines starting with '#' are dropped.
- a line starting with '@' inside an expanded file is an error (no recursion).
- '@@text' (as a token or as a file line) stands for the literal '@text'.
"""
from pathlib import Path

from .faults import *
from .utils import rename


@rename("identity")
def identity(tokens, /):
    return list(tokens)


@rename("trim")
def trim(tokens, /):
    return [token.strip() for token in tokens]


@rename("prune")
def prune(tokens, /):
    return [token for token in tokens if token]


def chain(*processors):
    """
    Processor running `processors` left to right.
    """
    for processor in processors:
        if not callable(processor):
            raise TypeError("chain() arguments must be callable")

    @rename("+".join(getattr(processor, "__name__", "processor") for processor in processors) or "identity")
    def processor(tokens, /):
        tokens = list(tokens)
        for step in processors:
            tokens = step(tokens)
        return list(tokens)

    return processor


normalize = rename(chain(trim, prune), "normalize")


def _unescape(token, /):
    return token[1:] if token.startswith("@@") else token


def expand_file(path, /, *, encoding="utf-8"):
    """
    Tokens contributed by one arguments file.

    Raises
    - ArgumentsFileNotFoundError: the file does not exist.
    - UnreadableArgumentsFileError: the file exists but cannot be read or decoded.
    - NestedArgumentsFileError: a line references another arguments file.
    """
    path = Path(path)
    try:
        lines = path.read_text(encoding=encoding).splitlines()
    except FileNotFoundError as exception:
        raise ArgumentsFileNotFoundError(
            "arguments file not found: %s" % path,
            title="arguments file not found",
            code=FaultCode.ARGUMENTS_FILE_NOT_FOUND,
            hint="check the path after '@' or escape a literal '@' as '@@'",
            path=path,
        ) from exception
    except (OSError, UnicodeDecodeError) as exception:
        raise UnreadableArgumentsFileError(
            "cannot read arguments file %s (%s)" % (path, exception),
            title="unreadable arguments file",
            code=FaultCode.UNREADABLE_ARGUMENTS_FILE,
            hint="make sure the file is a readable %s text file" % encoding,
            path=path,
        ) from exception

    tokens = []
    for number, line in enumerate(lines, 1):
        if not (line := line.strip()) or line.startswith("#"):
            continue
        if line.startswith("@") and not line.startswith("@@"):
            raise NestedArgumentsFileError(
                "expanding arguments file is not allowed: %r (%s, line %d)" % (line, path, number),
                title="nested arguments file",
                code=FaultCode.NESTED_ARGUMENTS_FILE,
                hint="inline the referenced arguments or escape the line as '@%s'" % line,
                path=path,
                line=number,
            )
        tokens.append(_unescape(line))
    return tokens


def expand(tokens, /, *, encoding="utf-8"):
    """
    Replace every '@path' token by the tokens of that file; '@@text' becomes '@text'.
    """
    expanded = []
    for token in tokens:
        if token.startswith("@") and not token.startswith("@@"):
            expanded.extend(expand_file(token[1:], encoding=encoding))
        else:
            expanded.append(_unescape(token))
    return expanded


DEFAULT = rename(chain(normalize, expand), "default")


__all__ = (
    # Processors
    "identity",
    "trim",
    "prune",
    "normalize",
    "expand",
    "DEFAULT",

    # Functions
    "chain",
    "expand_file",
)
