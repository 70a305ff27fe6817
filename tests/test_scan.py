import pytest

import tips
from scan import EOF, Token, TokenStream, scan


def kinds(text):
    return [t.kind for t in scan(text)]


def test_program_header_tokens():
    assert kinds("PROGRAM P; BEGIN END.") == [
        "PROGRAM", "IDENT", "SEMICOLON", "BEGIN", "END", "DOT", EOF,
    ]


def test_operators_prefer_longest_match():
    assert kinds("x := ++y -- z ^^ 2 : ; + - * /") == [
        "IDENT", "ASSIGN", "INCR", "IDENT", "DECR", "IDENT", "POW", "INTLIT",
        "COLON", "SEMICOLON", "PLUS", "MINUS", "TIMES", "DIVIDE", EOF,
    ]


def test_numbers_and_strings_keep_lexemes():
    toks = list(scan("3 3.25 1.5e2 'hello world'"))
    assert [(t.kind, t.lexeme) for t in toks[:-1]] == [
        ("INTLIT", "3"),
        ("FLOATLIT", "3.25"),
        ("FLOATLIT", "1.5e2"),
        ("STRINGLIT", "'hello world'"),
    ]


def test_keywords_are_whole_words():
    toks = list(scan("BEGINX MOD MODULE END"))
    assert [(t.kind, t.lexeme) for t in toks[:-1]] == [
        ("IDENT", "BEGINX"),
        ("MOD", "MOD"),
        ("IDENT", "MODULE"),
        ("END", "END"),
    ]


def test_comments_are_skipped():
    src = "{ header\n comment } PROGRAM // trailing\nP"
    assert kinds(src) == ["PROGRAM", "IDENT", EOF]


def test_tokens_carry_line_numbers():
    toks = list(scan("PROGRAM P;\n\nBEGIN\n  WRITE('x')\nEND"))
    lines = {t.lexeme: t.line for t in toks if t.lexeme}
    assert lines["PROGRAM"] == 1
    assert lines["BEGIN"] == 3
    assert lines["'x'"] == 4
    assert lines["END"] == 5


def test_unknown_character_is_a_scan_error():
    with pytest.raises(tips.ScanError) as exc:
        list(scan("PROGRAM P;\nBEGIN # END"))
    assert exc.value.line == 2
    assert exc.value.lexeme == "#"


def test_unterminated_string_is_a_scan_error():
    with pytest.raises(tips.ScanError):
        list(scan("WRITE('oops)"))


def test_scan_error_is_a_parse_error():
    with pytest.raises(tips.ParseError):
        list(scan("@"))


def test_token_stream_lookahead():
    ts = TokenStream(scan("a b"))
    assert ts.peek().lexeme == "a"
    assert ts.peek().lexeme == "a"
    assert ts.advance().lexeme == "a"
    assert ts.advance().lexeme == "b"
    assert ts.advance().kind == EOF
    # EOF repeats once reached.
    assert ts.peek().kind == EOF
    assert ts.advance().kind == EOF


def test_token_stream_without_explicit_eof():
    ts = TokenStream([Token("IDENT", "x", 1)])
    assert ts.advance().kind == "IDENT"
    assert ts.peek().kind == EOF
