import pytest

import tips
from parse import MAX_DEPTH, file_parse
from symtab import SymbolTable


def parse(src):
    symtab = SymbolTable()
    return file_parse(src, symtab), symtab


def parse_exp(exp, decls="a:INTEGER; b:INTEGER; c:INTEGER; r:REAL;"):
    prog, _ = parse(f"PROGRAM P; VAR {decls} BEGIN a := {exp} END.")
    (stmt,) = prog.block.body.stmts
    return stmt.source


def parse_error(src) -> tips.ParseError:
    with pytest.raises(tips.ParseError) as exc:
        parse(src)
    return exc.value


def test_program_structure():
    prog, symtab = parse("PROGRAM P; VAR x:INTEGER; BEGIN x:=2+3*4; WRITE(x) END.")
    assert prog == tips.Program(
        "P",
        tips.Block(
            [tips.Decl(tips.IntegerType(), "x")],
            tips.Compound([
                tips.Assign("x", tips.BinOp("+", tips.IntLiteral(2),
                                            tips.BinOp("*", tips.IntLiteral(3), tips.IntLiteral(4)))),
                tips.Write(tips.Identifier("x")),
            ]),
        ),
    )
    assert "x" in symtab
    assert symtab.load("x") == 0


def test_declarations_fill_symbol_table_with_zero_values():
    prog, symtab = parse("PROGRAM P; VAR i:INTEGER; r:REAL; BEGIN END.")
    assert [d.name for d in prog.block.decls] == ["i", "r"]
    assert symtab.load("i") == 0 and isinstance(symtab.load("i"), int)
    assert symtab.load("r") == 0.0 and isinstance(symtab.load("r"), float)


def test_var_section_may_be_empty_or_absent():
    prog, symtab = parse("PROGRAM P; VAR BEGIN END.")
    assert prog.block.decls == []
    assert len(symtab) == 0
    prog, _ = parse("PROGRAM P; BEGIN END")
    assert prog.block.body == tips.Compound([])


def test_write_string_literal_is_stored_unquoted():
    prog, _ = parse("PROGRAM P; BEGIN WRITE('hi there') END.")
    assert prog.block.body.stmts == [tips.Write(tips.StringLiteral("hi there"))]


def test_read_and_nested_compound():
    prog, _ = parse("PROGRAM P; VAR x:REAL; BEGIN READ(x); BEGIN WRITE(x); BEGIN END END END.")
    assert prog.block.body.stmts == [
        tips.Read("x"),
        tips.Compound([tips.Write(tips.Identifier("x")), tips.Compound([])]),
    ]


def test_additive_and_multiplicative_are_left_associative():
    a, b, c = tips.Identifier("a"), tips.Identifier("b"), tips.Identifier("c")
    assert parse_exp("a - b - c") == tips.BinOp("-", tips.BinOp("-", a, b), c)
    assert parse_exp("a / b MOD c") == tips.BinOp("MOD", tips.BinOp("/", a, b), c)


def test_multiplicative_binds_tighter_than_additive():
    a, b, c = tips.Identifier("a"), tips.Identifier("b"), tips.Identifier("c")
    assert parse_exp("a + b MOD c") == tips.BinOp("+", a, tips.BinOp("MOD", b, c))
    assert parse_exp("(a + b) * c") == tips.BinOp("*", tips.BinOp("+", a, b), c)


def test_power_is_right_associative_and_binds_tightest():
    two, three = tips.IntLiteral(2), tips.IntLiteral(3)
    assert parse_exp("2 ^^ 3 ^^ 2") == tips.BinOp("^^", two, tips.BinOp("^^", three, tips.IntLiteral(2)))
    assert parse_exp("3 * 2 ^^ 3") == tips.BinOp("*", three, tips.BinOp("^^", two, three))


def test_unary_sign_applies_before_power():
    assert parse_exp("-2 ^^ 2") == tips.BinOp("^^", tips.Unary("-", tips.IntLiteral(2)), tips.IntLiteral(2))
    assert parse_exp("- + -a") == tips.Unary("-", tips.Unary("+", tips.Unary("-", tips.Identifier("a"))))


def test_pre_increment_and_decrement():
    assert parse_exp("++a * --r") == tips.BinOp("*", tips.PreIncDec("++", "a"), tips.PreIncDec("--", "r"))


def test_real_literal():
    assert parse_exp("2.5") == tips.RealLiteral(2.5)


def test_undeclared_identifier_in_assignment():
    err = parse_error("PROGRAM P; BEGIN x := 1 END.")
    assert "undeclared" in err.message
    assert err.lexeme == "x"


@pytest.mark.parametrize("body", [
    "WRITE(y)",
    "READ(y)",
    "x := y + 1",
    "x := ++y",
    "BEGIN x := 1; y := 2 END",
])
def test_every_identifier_use_must_be_declared(body):
    err = parse_error(f"PROGRAM P; VAR x:INTEGER; BEGIN {body} END.")
    assert "undeclared identifier y" in err.message


def test_program_name_is_not_a_variable():
    err = parse_error("PROGRAM P; BEGIN WRITE(P) END.")
    assert "undeclared" in err.message


def test_duplicate_declaration_is_rejected():
    err = parse_error("PROGRAM P; VAR x:INTEGER;\n x:REAL; BEGIN END.")
    assert "duplicate declaration of x" in err.message
    assert err.line == 2


def test_mismatch_reports_line_expected_and_got():
    err = parse_error("PROGRAM P\nBEGIN END.")
    assert (err.line, err.expected, err.got) == (2, "SEMICOLON", "BEGIN")
    assert "Parse error (line 2)" in str(err)


def test_statements_need_separators():
    err = parse_error("PROGRAM P; BEGIN WRITE('a') WRITE('b') END.")
    assert (err.expected, err.got) == ("END", "WRITE")


def test_trailing_semicolon_before_end_is_rejected():
    err = parse_error("PROGRAM P; BEGIN WRITE('a'); END.")
    assert err.expected == "statement"


def test_trailing_tokens_after_program_are_rejected():
    err = parse_error("PROGRAM P; BEGIN END. BEGIN END.")
    assert (err.expected, err.got) == ("EOF", "BEGIN")
    err = parse_error("PROGRAM P; BEGIN END..")
    assert err.got == "DOT"


def test_bad_type_name():
    err = parse_error("PROGRAM P; VAR x:BOOLEAN; BEGIN END.")
    assert err.expected == "INTEGER or REAL"


def test_missing_operand():
    err = parse_error("PROGRAM P; VAR x:INTEGER; BEGIN x := 1 + END.")
    assert err.expected == "expression"


def test_integer_literal_out_of_range():
    err = parse_error("PROGRAM P; VAR x:INTEGER; BEGIN x := 2147483648 END.")
    assert "out of 32-bit range" in err.message


def test_integer_literal_too_long_to_convert():
    err = parse_error(f"PROGRAM P; VAR x:INTEGER; BEGIN x := {'9' * 5000} END.")
    assert "out of 32-bit range" in err.message
    assert err.got == "INTLIT"


def test_scan_errors_surface_through_parser():
    err = parse_error("PROGRAM P; BEGIN WRITE(#) END.")
    assert isinstance(err, tips.ScanError)


def test_nesting_depth_is_bounded():
    depth = MAX_DEPTH + 5
    err = parse_error(f"PROGRAM P; VAR x:INTEGER; BEGIN x := {'(' * depth}1{')' * depth} END.")
    assert "nesting deeper" in err.message
    err = parse_error("PROGRAM P; " + "BEGIN " * depth + "END " * depth + ".")
    assert "nesting deeper" in err.message


def test_nesting_below_the_limit_is_fine():
    depth = MAX_DEPTH // 2
    prog, _ = parse(f"PROGRAM P; VAR x:INTEGER; BEGIN x := {'(' * depth}1{')' * depth} END.")
    assert prog.block.body.stmts[0].source == tips.IntLiteral(1)
