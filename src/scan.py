"""Turn TIPS source text into the token stream the parser pulls from.

Tokens are matched with a pyparsing alternation. `scan_string` skips
whitespace and silently steps over text that matches nothing, so every gap
between two matches is checked: anything other than whitespace there is a
`ScanError` at the line where it starts.
"""

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

import pyparsing
from pyparsing import Keyword, Literal, MatchFirst, Regex, Word, alphanums, alphas

import tips

KEYWORDS = ("PROGRAM", "VAR", "INTEGER", "REAL", "BEGIN", "END", "READ", "WRITE", "MOD")

# Longer operators must come before their one-character prefixes.
PUNCTUATION = (
    (":=", "ASSIGN"),
    ("++", "INCR"),
    ("--", "DECR"),
    ("^^", "POW"),
    (";", "SEMICOLON"),
    (":", "COLON"),
    (".", "DOT"),
    ("(", "OPENPAREN"),
    (")", "CLOSEPAREN"),
    ("+", "PLUS"),
    ("-", "MINUS"),
    ("*", "TIMES"),
    ("/", "DIVIDE"),
)

EOF = "EOF"
COMMENT = "COMMENT"


@dataclass(frozen=True)
class Token:
    kind: str
    lexeme: str
    line: int

    def __repr__(self):
        if self.lexeme:
            return f"{self.kind}({self.lexeme})@{self.line}"
        return f"{self.kind}@{self.line}"


def _emit(kind: str):
    return lambda s, loc, t: Token(kind, t[0], pyparsing.lineno(loc, s))


def _token_grammar() -> pyparsing.ParserElement:
    alternatives = [
        Regex(r"\{[^}]*\}").set_parse_action(_emit(COMMENT)),
        Regex(r"//[^\n]*").set_parse_action(_emit(COMMENT)),
        Regex(r"'[^'\n]*'").set_parse_action(_emit("STRINGLIT")),
        Regex(r"\d+\.\d+([eE][+-]?\d+)?").set_parse_action(_emit("FLOATLIT")),
        Regex(r"\d+").set_parse_action(_emit("INTLIT")),
    ]
    # Keyword() refuses to match a prefix of a longer identifier, so BEGINX
    # falls through to IDENT.
    alternatives += [Keyword(k).set_parse_action(_emit(k)) for k in KEYWORDS]
    alternatives.append(Word(alphas, alphanums + "_").set_parse_action(_emit("IDENT")))
    alternatives += [Literal(text).set_parse_action(_emit(kind)) for text, kind in PUNCTUATION]
    return MatchFirst(alternatives).parse_with_tabs()


_TOKEN = _token_grammar()


def _check_gap(text: str, start: int, end: int) -> None:
    gap = text[start:end]
    stripped = gap.lstrip()
    if stripped:
        loc = start + (len(gap) - len(stripped))
        raise tips.ScanError(pyparsing.lineno(loc, text), stripped[0])


def scan(text: str) -> Iterator[Token]:
    """Yield the tokens of `text`, ending with a single EOF token.

    Comments (`{ ... }` and `// ...`) are dropped. Tokens are produced lazily,
    so a scan error surfaces only when the parser pulls that far.
    """
    last = 0
    for toks, start, end in _TOKEN.scan_string(text):
        _check_gap(text, last, start)
        last = end
        tok = toks[0]
        if tok.kind != COMMENT:
            yield tok
    _check_gap(text, last, len(text))
    yield Token(EOF, "", pyparsing.lineno(len(text), text) if text else 1)


class TokenStream:
    """One-token lookahead over a token iterable.

    Once the underlying tokens run out, the stream keeps answering with the
    EOF token, so `peek()` and `advance()` are always safe to call.
    """

    def __init__(self, tokens: Iterable[Token]):
        self._tokens = iter(tokens)
        self._peeked: Optional[Token] = None
        self._eof: Optional[Token] = None

    def _pull(self) -> Token:
        if self._eof is not None:
            return self._eof
        tok = next(self._tokens, None)
        if tok is None:
            tok = Token(EOF, "", 0)
        if tok.kind == EOF:
            self._eof = tok
        return tok

    def peek(self) -> Token:
        if self._peeked is None:
            self._peeked = self._pull()
        return self._peeked

    def advance(self) -> Token:
        tok = self.peek()
        self._peeked = None
        return tok


def token_stream(text: str) -> TokenStream:
    return TokenStream(scan(text))
