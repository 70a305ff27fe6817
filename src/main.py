import logging
import sys
from typing import Optional

import tips
from interp import execute, format_value
from parse import file_parse
from symtab import SymbolTable
from tips_util import print_tree

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_PARSE = 2
EXIT_RUNTIME = 3

USAGE = "usage: tips-run FILE [--tree] [--no-run] [--debug] [--verbose]"


def print_and_exit(msg: str, code: int) -> None:
    try:
        print(msg)
    except BrokenPipeError:
        pass
    raise SystemExit(code)


class CmdLineArgs:
    def __init__(
        self,
        filename: str,
        *,
        tree: bool,
        run: bool,
        debug: bool,
        verbose: bool,
    ):
        self.filename = filename
        self.tree = tree
        self.run = run
        self.debug = debug
        self.verbose = verbose


def parse_cmd_line_args(argv: list[str]) -> CmdLineArgs:
    tree = False
    run = True
    debug = False
    verbose = False
    positional: list[str] = []

    for a in argv:
        if a in ("--tree", "-t"):
            tree = True
        elif a == "--no-run":
            run = False
        elif a in ("--debug", "-d"):
            debug = True
        elif a in ("--verbose", "-v"):
            verbose = True
        elif a.startswith("-"):
            print_and_exit(f"unknown option {a}\n{USAGE}", EXIT_USAGE)
        else:
            positional.append(a)

    if len(positional) != 1:
        print_and_exit(USAGE, EXIT_USAGE)

    return CmdLineArgs(positional[0], tree=tree, run=run, debug=debug, verbose=verbose)


def main(argv: Optional[list[str]] = None) -> None:
    cmd = parse_cmd_line_args(sys.argv[1:] if argv is None else argv)
    if cmd.debug:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr, format="[%(name)s] %(message)s")

    try:
        with open(cmd.filename, "r", encoding="utf-8") as f:
            src = f.read()
    except OSError as e:
        if cmd.verbose:
            print(e, file=sys.stderr)
        print_and_exit(f"error: cannot read {cmd.filename}", EXIT_USAGE)

    symtab = SymbolTable()
    try:
        prog = file_parse(src, symtab)
    except tips.ParseError as e:
        if cmd.verbose:
            lines = src.splitlines()
            if 0 < e.line <= len(lines):
                print(lines[e.line - 1], file=sys.stderr)
        print_and_exit(e.describe(), EXIT_PARSE)

    if cmd.tree:
        sys.stdout.write(print_tree(prog))
    if not cmd.run:
        raise SystemExit(EXIT_OK)

    outcome = execute(prog, symtab)
    if not outcome.ok:
        if cmd.verbose:
            for name, value in symtab.items():
                print(f"  {name} = {format_value(value)}", file=sys.stderr)
        sys.stdout.flush()
        print_and_exit(outcome.message, EXIT_RUNTIME)
    raise SystemExit(EXIT_OK)


if __name__ == "__main__":
    main()
