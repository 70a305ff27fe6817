"""Utilities for printing TIPS ASTs.

`print_tree` draws the whole program with box-drawing connectors, one node
per line; `stringify` / `stringify_stmt` give compact one-line forms for
debug output. None of these touch the symbol table.
"""

from typing import List

import tips

BRANCH = "├── "
LAST_BRANCH = "└── "
PIPE = "│   "
SPACE = "    "


def _line(out: List[str], prefix: str, last: bool, label: str) -> None:
    out.append(f"{prefix}{LAST_BRANCH if last else BRANCH}{label}")


def _kid_prefix(prefix: str, last: bool) -> str:
    return prefix + (SPACE if last else PIPE)


def exp_label(e: tips.Exp) -> str:
    match e:
        case tips.IntLiteral(v): return f"INT {v}"
        case tips.RealLiteral(v): return f"REAL {v!r}"
        case tips.Identifier(name): return f"IDENT {name}"
        case tips.Unary(op, _): return f"Unary({op})"
        case tips.PreIncDec("++", name): return f"PreInc({name})"
        case tips.PreIncDec(_, name): return f"PreDec({name})"
        case tips.BinOp(op, _, _): return f"Bin({op})"
        case _: return str(e)


def _tree_exp(out: List[str], e: tips.Exp, prefix: str, last: bool) -> None:
    # Explicit stack: left-associative chains can nest deeper than the
    # interpreter's recursion limit.
    todo = [(e, prefix, last)]
    while todo:
        e, prefix, last = todo.pop()
        _line(out, prefix, last, exp_label(e))
        kid = _kid_prefix(prefix, last)
        match e:
            case tips.Unary(_, arg):
                todo.append((arg, kid, True))
            case tips.BinOp(_, l, r):
                todo.append((r, kid, True))
                todo.append((l, kid, False))


def _tree_stmt(out: List[str], s: tips.Stmt, prefix: str, last: bool) -> None:
    match s:
        case tips.Compound(stmts):
            _line(out, prefix, last, "BEGIN")
            kid = _kid_prefix(prefix, last)
            if not stmts:
                _line(out, kid, True, "(empty)")
            for i, stmt in enumerate(stmts):
                _tree_stmt(out, stmt, kid, i == len(stmts) - 1)
            # END closes the block at the BEGIN's own indentation.
            _line(out, prefix, True, "END")
        case tips.Assign(dest, src):
            _line(out, prefix, last, f"Assign {dest} :=")
            _tree_exp(out, src, _kid_prefix(prefix, last), True)
        case tips.Read(name):
            _line(out, prefix, last, f"Read({name})")
        case tips.Write(tips.StringLiteral(text)):
            _line(out, prefix, last, f"Write('{text}')")
        case tips.Write(tips.Identifier(name)):
            _line(out, prefix, last, f"Write({name})")
        case _:
            _line(out, prefix, last, str(s))


def _tree_block(out: List[str], b: tips.Block, prefix: str, last: bool) -> None:
    _line(out, prefix, last, "Block")
    kid = _kid_prefix(prefix, last)
    if b.decls:
        _line(out, kid, False, "VAR")
        var_kid = _kid_prefix(kid, False)
        for i, d in enumerate(b.decls):
            _line(out, var_kid, i == len(b.decls) - 1, f"{d.name} : {d.type!r};")
    _tree_stmt(out, b.body, kid, True)


def print_tree(prog: tips.Program) -> str:
    """Render `prog` as an indented tree (the same tree always gives the same text)."""
    out = ["Program"]
    _line(out, "", False, f"name: {prog.name}")
    _tree_block(out, prog.block, "", True)
    return "\n".join(out) + "\n"


def stringify(e: tips.Exp) -> str:
    """Convert expression `e` to a fully parenthesised one-line string."""
    match e:
        case tips.IntLiteral(v): return str(v)
        case tips.RealLiteral(v): return repr(v)
        case tips.Identifier(name): return name
        case tips.Unary(op, arg): return f"({op}{stringify(arg)})"
        case tips.PreIncDec(op, name): return f"{op}{name}"
        case tips.BinOp(op, l, r): return f"({stringify(l)} {op} {stringify(r)})"
        case _: return str(e)


def stringify_stmt(s: tips.Stmt) -> str:
    """Convert statement `s` to a compact string (for debug output)."""
    match s:
        case tips.Assign(dest, src): return f"{dest} := {stringify(src)}"
        case tips.Read(name): return f"READ({name})"
        case tips.Write(tips.StringLiteral(text)): return f"WRITE('{text}')"
        case tips.Write(tips.Identifier(name)): return f"WRITE({name})"
        case tips.Compound(stmts): return f"BEGIN {{{len(stmts)} statements}} END"
        case _: return str(s)
