"""Recursive-descent parser for the TIPS subset.

Grammar (one token of lookahead):

    Program        := 'PROGRAM' IDENT ';' Block ['.'] EOF
    Block          := [Declarations] CompoundStatement
    Declarations   := 'VAR' (IDENT ':' Type ';')*
    Type           := 'INTEGER' | 'REAL'
    CompoundStatement := 'BEGIN' (Statement (';' Statement)*)? 'END'
    Statement      := ReadStmt | WriteStmt | AssignStmt | CompoundStatement
    ReadStmt       := 'READ' '(' IDENT ')'
    WriteStmt      := 'WRITE' '(' (STRINGLIT | IDENT) ')'
    AssignStmt     := IDENT ':=' Expression
    Expression     := Simple
    Simple         := Term (('+'|'-') Term)*
    Term           := Power (('*'|'/'|'MOD') Power)*
    Power          := Unary ('^^' Power)?
    Unary          := ('+'|'-') Unary | ('++'|'--') IDENT | Primary
    Primary        := '(' Expression ')' | INTLIT | FLOATLIT | IDENT

Declarations go straight into the symbol table, and every later use of a
name is checked against it, so a program that parses never refers to an
undeclared variable. The first problem raises `tips.ParseError`; nothing is
recovered and no partial tree is returned.
"""

import logging
from contextlib import contextmanager
from typing import List

import tips
from scan import EOF, Token, TokenStream, token_stream
from symtab import SymbolTable

log = logging.getLogger(__name__)

# Nesting limit for parenthesised expressions, unary/power chains and
# BEGIN/END blocks. Each level costs about six Python frames.
MAX_DEPTH = 100

ADD_OPS = {"PLUS": "+", "MINUS": "-"}
MUL_OPS = {"TIMES": "*", "DIVIDE": "/", "MOD": "MOD"}


class Parser:
    def __init__(self, tokens: TokenStream, symtab: SymbolTable, max_depth: int = MAX_DEPTH):
        self.tokens = tokens
        self.symtab = symtab
        self.max_depth = max_depth
        self.depth = 0

    # ---------- token helpers ----------
    def peek(self) -> Token:
        tok = self.tokens.peek()
        log.debug("peek: %s%s @ line %d", tok.kind, f" [{tok.lexeme}]" if tok.lexeme else "", tok.line)
        return tok

    def advance(self) -> Token:
        tok = self.tokens.advance()
        log.debug("consume: %s", tok.kind)
        return tok

    def error(self, expected: str, message: str) -> None:
        tok = self.tokens.peek()
        log.debug("expect FAIL: wanted %s, got %s", expected, tok.kind)
        raise tips.ParseError(tok.line, expected, tok.kind, message, lexeme=tok.lexeme or None)

    def expect(self, kind: str, message: str) -> Token:
        if self.peek().kind != kind:
            self.error(kind, message)
        return self.advance()

    def accept(self, kind: str) -> bool:
        if self.peek().kind == kind:
            self.advance()
            return True
        return False

    @contextmanager
    def nested(self, what: str):
        if self.depth >= self.max_depth:
            self.error(what, f"nesting deeper than {self.max_depth} levels")
        self.depth += 1
        try:
            yield
        finally:
            self.depth -= 1

    def use(self, tok: Token) -> str:
        """Return the identifier in `tok`, which must already be declared."""
        if tok.lexeme not in self.symtab:
            raise tips.ParseError(tok.line, "declared identifier", tok.kind,
                                  f"use of undeclared identifier {tok.lexeme}", lexeme=tok.lexeme)
        return tok.lexeme

    def expect_declared(self, message: str) -> str:
        if self.peek().kind != "IDENT":
            self.error("IDENT", message)
        return self.use(self.advance())

    # ---------- program structure ----------
    def parse_program(self) -> tips.Program:
        self.expect("PROGRAM", "start of program")
        name = self.expect("IDENT", "program name").lexeme
        self.expect("SEMICOLON", "';' after program name")
        block = self.parse_block()
        self.accept("DOT")
        self.expect(EOF, "end of file (no trailing tokens after program)")
        return tips.Program(name, block)

    def parse_block(self) -> tips.Block:
        decls = self.parse_declarations()
        return tips.Block(decls, self.parse_compound())

    def parse_declarations(self) -> List[tips.Decl]:
        decls: List[tips.Decl] = []
        if not self.accept("VAR"):
            return decls
        while self.peek().kind == "IDENT":
            tok = self.advance()
            self.expect("COLON", "':' after identifier in declaration")
            typ = self.parse_type()
            if tok.lexeme in self.symtab:
                raise tips.ParseError(tok.line, "new identifier", tok.kind,
                                      f"duplicate declaration of {tok.lexeme}", lexeme=tok.lexeme)
            self.symtab.declare(tok.lexeme, typ)
            self.expect("SEMICOLON", "';' after declaration")
            decls.append(tips.Decl(typ, tok.lexeme))
        return decls

    def parse_type(self) -> tips.Type:
        if self.accept("INTEGER"):
            return tips.IntegerType()
        if self.accept("REAL"):
            return tips.RealType()
        self.error("INTEGER or REAL", "type in declaration")

    # ---------- statements ----------
    def parse_compound(self) -> tips.Compound:
        with self.nested("END"):
            self.expect("BEGIN", "BEGIN to start a compound statement")
            stmts: List[tips.Stmt] = []
            if self.peek().kind != "END":
                stmts.append(self.parse_statement())
                while self.accept("SEMICOLON"):
                    stmts.append(self.parse_statement())
            self.expect("END", "END to close compound statement")
            return tips.Compound(stmts)

    def parse_statement(self) -> tips.Stmt:
        match self.peek().kind:
            case "READ":
                return self.parse_read()
            case "WRITE":
                return self.parse_write()
            case "BEGIN":
                return self.parse_compound()
            case "IDENT":
                return self.parse_assign()
            case _:
                self.error("statement", "READ, WRITE, BEGIN or an assignment")

    def parse_read(self) -> tips.Read:
        self.expect("READ", "READ statement")
        self.expect("OPENPAREN", "'(' after READ")
        name = self.expect_declared("identifier to READ into")
        self.expect("CLOSEPAREN", "')' after identifier")
        return tips.Read(name)

    def parse_write(self) -> tips.Write:
        self.expect("WRITE", "WRITE statement")
        self.expect("OPENPAREN", "'(' after WRITE")
        tok = self.peek()
        if tok.kind == "STRINGLIT":
            self.advance()
            arg = tips.StringLiteral(tok.lexeme[1:-1])
        elif tok.kind == "IDENT":
            arg = tips.Identifier(self.use(self.advance()))
        else:
            self.error("STRINGLIT or IDENT", "argument of WRITE(...)")
        self.expect("CLOSEPAREN", "')' after WRITE argument")
        return tips.Write(arg)

    def parse_assign(self) -> tips.Assign:
        dest = self.expect_declared("assignment target")
        self.expect("ASSIGN", "':=' after identifier")
        return tips.Assign(dest, self.parse_expression())

    # ---------- expressions ----------
    def parse_expression(self) -> tips.Exp:
        return self.parse_simple()

    def parse_simple(self) -> tips.Exp:
        left = self.parse_term()
        while self.peek().kind in ADD_OPS:
            op = ADD_OPS[self.advance().kind]
            left = tips.BinOp(op, left, self.parse_term())
        return left

    def parse_term(self) -> tips.Exp:
        left = self.parse_power()
        while self.peek().kind in MUL_OPS:
            op = MUL_OPS[self.advance().kind]
            left = tips.BinOp(op, left, self.parse_power())
        return left

    def parse_power(self) -> tips.Exp:
        base = self.parse_unary()
        if not self.accept("POW"):
            return base
        with self.nested("expression"):
            return tips.BinOp("^^", base, self.parse_power())

    def parse_unary(self) -> tips.Exp:
        tok = self.peek()
        match tok.kind:
            case "PLUS" | "MINUS":
                self.advance()
                with self.nested("expression"):
                    return tips.Unary(ADD_OPS[tok.kind], self.parse_unary())
            case "INCR" | "DECR":
                self.advance()
                name = self.expect_declared(f"identifier after '{tok.lexeme}'")
                return tips.PreIncDec(tok.lexeme, name)
            case _:
                return self.parse_primary()

    def parse_primary(self) -> tips.Exp:
        tok = self.peek()
        match tok.kind:
            case "OPENPAREN":
                self.advance()
                with self.nested("')'"):
                    e = self.parse_expression()
                self.expect("CLOSEPAREN", "')' to close parenthesised expression")
                return e
            case "INTLIT":
                self.advance()
                try:
                    value = int(tok.lexeme)
                except ValueError:
                    # too many digits for int() to convert at all
                    value = None
                if value is None or value > tips.INT_MAX:
                    raise tips.ParseError(tok.line, "INTEGER literal", tok.kind,
                                          "integer literal out of 32-bit range", lexeme=tok.lexeme)
                return tips.IntLiteral(value)
            case "FLOATLIT":
                self.advance()
                return tips.RealLiteral(float(tok.lexeme))
            case "IDENT":
                return tips.Identifier(self.use(self.advance()))
            case _:
                self.error("expression", "'(', a number or an identifier")


def parse_tokens(tokens: TokenStream, symtab: SymbolTable) -> tips.Program:
    return Parser(tokens, symtab).parse_program()


def file_parse(text: str, symtab: SymbolTable) -> tips.Program:
    """Parse TIPS source `text`, declaring its variables in `symtab`."""
    return parse_tokens(token_stream(text), symtab)
