import pathlib

from rich.pretty import pprint

from argsplitter import *

__prog__ = "jar"

create = flag("-c", "--create", help="Create an archive")
file = single("-f", "--file", help="The archive file", metavar="FILE")
verbose = flag("-v", "--verbose", help="Generate verbose output")
files = varargs("files...", type=pathlib.Path, help="Files to add")

splitter = Splitter(Schema.of(create, file, verbose, files), shell=True)


if __name__ == '__main__':
    pprint(splitter.split())
