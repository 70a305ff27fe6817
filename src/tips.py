"""AST, value helpers and failure types for the TIPS subset.

Values at runtime are plain Python numbers: `int` is an INTEGER (always kept
inside the signed 32-bit range by `wrap_int`), `float` is a REAL.
"""

from dataclasses import dataclass
from typing import List, Optional, Union

INT_BITS = 32
INT_MIN = -(1 << (INT_BITS - 1))
INT_MAX = (1 << (INT_BITS - 1)) - 1

Value = Union[int, float]


def wrap_int(n: int) -> int:
    """Reduce `n` to a signed 32-bit integer with two's-complement wraparound."""
    n &= (1 << INT_BITS) - 1
    if n > INT_MAX:
        n -= 1 << INT_BITS
    return n


def is_real(v: Value) -> bool:
    return isinstance(v, float)

@dataclass
class Type:
    pass

@dataclass
class IntegerType(Type):
    def __repr__(self):
        return "INTEGER"

@dataclass
class RealType(Type):
    def __repr__(self):
        return "REAL"


def zero_value(typ: Type) -> Value:
    """The value a freshly declared slot of type `typ` holds."""
    return 0.0 if isinstance(typ, RealType) else 0


def type_of(v: Value) -> Type:
    return RealType() if is_real(v) else IntegerType()

@dataclass
class Node:
    pass

@dataclass
class Exp(Node):
    pass

@dataclass
class IntLiteral(Exp):
    value: int

@dataclass
class RealLiteral(Exp):
    value: float

@dataclass
class Identifier(Exp):
    name: str

@dataclass
class Unary(Exp):
    op: str  # "+" or "-"
    arg: Exp

@dataclass
class PreIncDec(Exp):
    op: str  # "++" or "--"
    name: str

@dataclass
class BinOp(Exp):
    op: str  # "+", "-", "*", "/", "MOD" or "^^"
    left: Exp
    right: Exp

@dataclass
class StringLiteral(Node):
    """Text of a quoted literal, stored without its quotes."""
    text: str

@dataclass
class Stmt(Node):
    pass

@dataclass
class Read(Stmt):
    name: str

@dataclass
class Write(Stmt):
    arg: Union[StringLiteral, Identifier]

@dataclass
class Assign(Stmt):
    dest: str # Variable name
    source: Exp

@dataclass
class Compound(Stmt):
    stmts: List[Stmt]

@dataclass
class Decl(Node):
    type: Type
    name: str

@dataclass
class Block(Node):
    decls: List[Decl]
    body: Compound

@dataclass
class Program(Node):
    name: str
    block: Block


class ParseError(Exception):
    """Grammar or declaration violation found while parsing.

    `expected` names the construct the parser wanted, `got` the token kind it
    found instead (with the lexeme in `lexeme` when there is one).
    """

    def __init__(self, line: int, expected: str, got: str, message: str, lexeme: Optional[str] = None):
        self.line = line
        self.expected = expected
        self.got = got
        self.lexeme = lexeme
        self.message = message
        super().__init__(self.describe())

    def describe(self) -> str:
        got = self.got if not self.lexeme else f"{self.got} [{self.lexeme}]"
        return f"Parse error (line {self.line}): expected {self.expected}, got {got}: {self.message}"


class ScanError(ParseError):
    """Source text that does not start any token."""

    def __init__(self, line: int, text: str):
        super().__init__(line, "token", "UNKNOWN", f"unrecognised character {text!r}", lexeme=text)


class TipsRuntimeError(Exception):
    """Failure while evaluating a parsed program."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)
