"""Tree-walking evaluator for parsed TIPS programs.

Numeric rules:
- `+ - *` stay INTEGER (wrapping at 32 bits) unless either side is REAL.
- `/` always produces a REAL.
- `MOD` takes INTEGER operands only; a non-zero result has the divisor's sign.
- `^^` stays INTEGER for a non-negative INTEGER exponent, otherwise REAL.

Any `tips.TipsRuntimeError` stops the run at once. Output already written
and assignments already made are kept.
"""

from __future__ import annotations

import logging
import math
import sys
from dataclasses import dataclass
from typing import List, Optional, TextIO

import pyparsing
from pyparsing import pyparsing_common

import tips
import tips_util
from parse import file_parse
from symtab import SymbolTable

log = logging.getLogger(__name__)

INT_INPUT = pyparsing_common.signed_integer
REAL_INPUT = pyparsing_common.fnumber


def format_value(v: tips.Value) -> str:
    """Render a value the way WRITE prints it."""
    if tips.is_real(v):
        return f"{v:.4f}"
    return str(v)


def int_pow(base: int, exp: int) -> int:
    """`base ** exp` for exp >= 0 by repeated squaring, wrapping every product."""
    result = 1
    factor = base
    while exp > 0:
        if exp & 1:
            result = tips.wrap_int(result * factor)
        exp >>= 1
        if exp:
            factor = tips.wrap_int(factor * factor)
    return result


def real_pow(base: float, exp: float) -> float:
    """C-style pow: overflow gives an infinity, domain errors give inf or nan."""
    try:
        return math.pow(base, exp)
    except OverflowError:
        odd = exp.is_integer() and int(exp) % 2 == 1
        return -math.inf if base < 0 and odd else math.inf
    except ValueError:
        # 0 raised to a negative power, or a negative base with a fractional exponent.
        return math.inf if base == 0.0 else math.nan


def int_mod(a: int, b: int) -> int:
    if b == 0:
        raise tips.TipsRuntimeError("Runtime error: division by zero in MOD")
    # Python's % already gives the result the sign of the divisor.
    return tips.wrap_int(a % b)


def binop(op: str, a: tips.Value, b: tips.Value) -> tips.Value:
    match op:
        case "MOD":
            if tips.is_real(a) or tips.is_real(b):
                raise tips.TipsRuntimeError("Runtime error: MOD requires INTEGER operands")
            return int_mod(a, b)
        case "/":
            if float(b) == 0.0:
                raise tips.TipsRuntimeError("Runtime error: division by zero")
            return float(a) / float(b)
        case "^^":
            if not tips.is_real(a) and not tips.is_real(b) and b >= 0:
                return int_pow(a, b)
            return real_pow(float(a), float(b))
        case "+" | "-" | "*" if tips.is_real(a) or tips.is_real(b):
            a, b = float(a), float(b)
            return a + b if op == "+" else a - b if op == "-" else a * b
        case "+":
            return tips.wrap_int(a + b)
        case "-":
            return tips.wrap_int(a - b)
        case "*":
            return tips.wrap_int(a * b)
        case _:
            raise tips.TipsRuntimeError(f"Runtime error: unknown binary operator {op}")


class InputReader:
    """Whitespace-delimited tokens from a text stream, pulled one at a time.

    Lines are read only when a READ needs another token, so interactive input
    works line by line.
    """

    def __init__(self, stream: TextIO):
        self.stream = stream
        self.pending: List[str] = []

    def next_token(self) -> Optional[str]:
        while not self.pending:
            line = self.stream.readline()
            if not line:
                return None
            self.pending = line.split()
        return self.pending.pop(0)

    def read_value(self, name: str, typ: tips.Type) -> tips.Value:
        """Read one value for slot `name` of type `typ`.

        A malformed token is consumed before the failure is raised, so it is
        never seen again.
        """
        tok = self.next_token()
        if tok is None:
            raise tips.TipsRuntimeError(f"Input error: expected {typ} for {name}, got end of input")
        grammar = REAL_INPUT if isinstance(typ, tips.RealType) else INT_INPUT
        try:
            value = grammar.parse_string(tok, parse_all=True)[0]
        except pyparsing.ParseException:
            raise tips.TipsRuntimeError(f"Input error: expected {typ} for {name}, got {tok!r}") from None
        except ValueError:
            raise tips.TipsRuntimeError(f"Input error: {tok[:20]}... is out of range for {typ} {name}") from None
        if isinstance(typ, tips.IntegerType) and not tips.INT_MIN <= value <= tips.INT_MAX:
            raise tips.TipsRuntimeError(f"Input error: {tok} is out of range for INTEGER {name}")
        return value


class Interpreter:
    def __init__(self, symtab: SymbolTable, stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None):
        self.symtab = symtab
        self.input = InputReader(stdin if stdin is not None else sys.stdin)
        self.out = stdout if stdout is not None else sys.stdout

    def run(self, prog: tips.Program) -> None:
        try:
            self.exec_stmt(prog.block.body)
        except RecursionError:
            raise tips.TipsRuntimeError("Runtime error: expression nested too deeply to evaluate") from None

    def exec_stmt(self, s: tips.Stmt) -> None:
        if log.isEnabledFor(logging.DEBUG):
            log.debug("exec %s", tips_util.stringify_stmt(s))
        match s:
            case tips.Compound(stmts):
                for stmt in stmts:
                    self.exec_stmt(stmt)
            case tips.Assign(dest, src):
                self.symtab.store(dest, self.eval_exp(src))
            case tips.Read(name):
                self.symtab.store(name, self.input.read_value(name, self.symtab.tag(name)))
            case tips.Write(tips.StringLiteral(text)):
                self.out.write(f"'{text}'\n")
            case tips.Write(tips.Identifier(name)):
                self.out.write(format_value(self.symtab.load(name)) + "\n")
            case _:
                raise tips.TipsRuntimeError(f"Runtime error: unsupported statement {s!r}")

    def eval_exp(self, e: tips.Exp) -> tips.Value:
        match e:
            case tips.IntLiteral(v) | tips.RealLiteral(v):
                return v
            case tips.Identifier(name):
                return self.symtab.load(name)
            case tips.Unary(op, arg):
                v = self.eval_exp(arg)
                if op == "+":
                    return v
                return -v if tips.is_real(v) else tips.wrap_int(-v)
            case tips.PreIncDec(op, name):
                v = self.symtab.load(name)
                step = 1.0 if tips.is_real(v) else 1
                return self.symtab.store(name, v + step if op == "++" else v - step)
            case tips.BinOp(op, l, r):
                return binop(op, self.eval_exp(l), self.eval_exp(r))
            case _:
                raise tips.TipsRuntimeError(f"Runtime error: unsupported expression {e!r}")


@dataclass
class Outcome:
    """Result of a parse-and-run attempt.

    `kind` is "parse" or "runtime" when `ok` is false; `line` is only known
    for parse failures.
    """
    ok: bool
    kind: Optional[str] = None
    message: str = ""
    line: Optional[int] = None

    @classmethod
    def success(cls) -> Outcome:
        return cls(True)

    @classmethod
    def parse_failure(cls, err: tips.ParseError) -> Outcome:
        return cls(False, "parse", err.describe(), err.line)

    @classmethod
    def runtime_failure(cls, err: tips.TipsRuntimeError) -> Outcome:
        return cls(False, "runtime", err.message)


def execute(prog: tips.Program, symtab: SymbolTable,
            stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None) -> Outcome:
    """Run an already-parsed program, reporting a runtime failure as an Outcome."""
    try:
        Interpreter(symtab, stdin, stdout).run(prog)
    except tips.TipsRuntimeError as e:
        log.debug("run aborted: %s", e.message)
        return Outcome.runtime_failure(e)
    return Outcome.success()


def run_source(text: str, stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None,
               symtab: Optional[SymbolTable] = None) -> Outcome:
    """Parse and run `text` with a fresh symbol table (or the one given)."""
    symtab = symtab if symtab is not None else SymbolTable()
    try:
        prog = file_parse(text, symtab)
    except tips.ParseError as e:
        return Outcome.parse_failure(e)
    return execute(prog, symtab, stdin, stdout)
