"""
Calx Programming Language Parser
pyparsing grammar whose terminals are cut by the Calx lexer
"""

from typing import Iterator

from pyparsing import (
    Forward, Group, Optional as PyParsingOptional, ParseException,
    ParserElement, StringEnd, Token as PyParsingToken, ZeroOrMore,
)

from error_handling import parse_error_from_exception
from lexing import (
    Lexer, Span, next_token,
    SEMICOLON, EQUAL, PLUS, MINUS, ASTERISK, SLASH, LPAREN, RPAREN, COMMA,
    LET, IN, DEF, NUMBER, STRING, IDENTIFIER,
)
from syntax import (
    BinaryOperator, UnaryOperator, Expr, Program,
    Number, String, UnaryOp, BinaryOp, Variable, Apply, Let,
    ExprStmt, Def, LetStmt,
)

# Enable packrat parsing for performance
ParserElement.enable_packrat()


DISPLAY_NAMES = {
    SEMICOLON: "';'",
    EQUAL: "'='",
    PLUS: "'+'",
    MINUS: "'-'",
    ASTERISK: "'*'",
    SLASH: "'/'",
    LPAREN: "'('",
    RPAREN: "')'",
    COMMA: "','",
    LET: "'let'",
    IN: "'in'",
    DEF: "'def'",
    NUMBER: "number",
    STRING: "string",
    IDENTIFIER: "identifier",
}


class LexerToken(PyParsingToken):
    """Grammar terminal matching one token cut by lexing.next_token.

    Lexical errors are not parse failures: they propagate out of the
    parser unchanged and end the parse.
    """

    def __init__(self, token_type: str):
        super().__init__()
        self.token_type = token_type
        self.mayReturnEmpty = False
        self.mayIndexError = False

    def _generateDefaultName(self) -> str:
        return DISPLAY_NAMES.get(self.token_type, self.token_type)

    def parseImpl(self, instring, loc, do_actions=True):
        result = next_token(instring, loc)
        if result is None or result[0].type != self.token_type:
            raise ParseException(instring, loc, f"Expected {self.name}", self)

        token, consumed = result
        value = token.type if token.value is None else token.value
        return loc + consumed, value


def _fold_left(tokens):
    """[e0, op1, e1, op2, e2, ...] -> ((e0 op1 e1) op2 e2) ..."""
    items = list(tokens)
    result = items[0]
    for i in range(1, len(items), 2):
        result = BinaryOp(items[i], result, items[i + 1])
    return result


def _make_apply(tokens):
    items = list(tokens)
    result = items[0]
    for call_args in items[1:]:
        result = Apply(result, tuple(call_args))
    return result


def _make_let_stmt(tokens):
    items = list(tokens)
    if len(items) == 3:
        return ExprStmt(Let(items[0], items[1], items[2]))
    return LetStmt(items[0], items[1])


class CalxGrammar:
    """Calx grammar definition using pyparsing"""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self._setup_grammar()

    def _setup_grammar(self):
        """Setup the Calx grammar on top of lexer-cut terminals"""

        def punct(token_type):
            return LexerToken(token_type).suppress()

        def operator(token_type, op):
            return LexerToken(token_type).set_parse_action(lambda: op)

        # Forward declarations for recursive structures
        expression = Forward()
        unary = Forward()

        semicolon = punct(SEMICOLON)
        equals = punct(EQUAL)
        lparen = punct(LPAREN)
        rparen = punct(RPAREN)
        comma = punct(COMMA)
        let_kw = punct(LET)
        in_kw = punct(IN)
        def_kw = punct(DEF)

        identifier = LexerToken(IDENTIFIER)

        # Literals and atoms
        number = LexerToken(NUMBER).set_parse_action(lambda t: Number(t[0]))
        string_literal = LexerToken(STRING).set_parse_action(lambda t: String(t[0]))
        variable = LexerToken(IDENTIFIER).set_parse_action(lambda t: Variable(t[0]))
        parenthesized = lparen + expression + rparen

        primary = number | string_literal | variable | parenthesized

        # Function application: f(a, b)(c) ...
        call_args = Group(
            lparen + PyParsingOptional(expression + ZeroOrMore(comma + expression)) + rparen
        )
        postfix = (primary + ZeroOrMore(call_args)).set_parse_action(_make_apply)

        # Negation binds tighter than any binary operator
        negation = (punct(MINUS) + unary).set_parse_action(
            lambda t: UnaryOp(UnaryOperator.NEG, t[0])
        )
        unary <<= negation | postfix

        # Binary operators, left associative
        mul_op = operator(ASTERISK, BinaryOperator.MUL) | operator(SLASH, BinaryOperator.DIV)
        add_op = operator(PLUS, BinaryOperator.ADD) | operator(MINUS, BinaryOperator.SUB)
        term = (unary + ZeroOrMore(mul_op + unary)).set_parse_action(_fold_left)
        additive = (term + ZeroOrMore(add_op + term)).set_parse_action(_fold_left)

        # Inline binding: let x = e1 in e2
        let_expr = (
            let_kw + identifier + equals + expression + in_kw + expression
        ).set_parse_action(lambda t: Let(t[0], t[1], t[2]))

        expression <<= let_expr | additive

        # Statements
        params = Group(PyParsingOptional(identifier + ZeroOrMore(comma + identifier)))
        def_stmt = (
            def_kw + identifier + lparen + params + rparen + equals + expression
        ).set_parse_action(lambda t: Def(t[0], tuple(t[1]), t[2]))

        # `let x = e` persists; `let x = e in body` is an expression statement
        let_stmt = (
            let_kw + identifier + equals + expression + PyParsingOptional(in_kw + expression)
        ).set_parse_action(_make_let_stmt)

        expr_stmt = Group(expression).set_parse_action(lambda t: ExprStmt(t[0][0]))

        statement = def_stmt | let_stmt | expr_stmt

        program = (
            PyParsingOptional(statement + ZeroOrMore(semicolon + statement)) +
            PyParsingOptional(semicolon) +
            StringEnd()
        ).parse_with_tabs()

        # Store the main parsers
        self.program = program
        self.statement = statement
        self.expression = expression

    def parse_program(self, text: str) -> Program:
        """Parse a complete Calx program"""
        try:
            result = self.program.parse_string(text, parse_all=True)
        except ParseException as e:
            raise parse_error_from_exception(e, text) from None

        program = tuple(result)
        if self.debug:
            for stmt in program:
                print(f"Parsed: {stmt}")
        return program

    def parse_expression(self, text: str) -> Expr:
        """Parse a single Calx expression"""
        try:
            result = (self.expression + StringEnd()).parse_with_tabs().parse_string(text, parse_all=True)
        except ParseException as e:
            raise parse_error_from_exception(e, text) from None

        if self.debug:
            print(f"Parsed: {result[0]}")
        return result[0]


class CalxParser:
    """Main Calx parser combining lexer and grammar"""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self.grammar = CalxGrammar(debug)

    def parse_file(self, filepath: str) -> Program:
        """Parse a Calx source file"""
        with open(filepath, 'r', encoding='utf-8') as f:
            content = f.read()
        return self.grammar.parse_program(content)

    def parse_string(self, text: str) -> Program:
        """Parse Calx source code from string"""
        return self.grammar.parse_program(text)

    def parse_expression(self, text: str) -> Expr:
        """Parse a single Calx expression"""
        return self.grammar.parse_expression(text)

    def tokenize(self, text: str) -> Iterator[Span]:
        """Stream (start, token, end) spans; a lexical error ends the stream"""
        return Lexer(text, self.debug)


# Factory functions for creating parsers
def create_parser(debug: bool = False) -> CalxParser:
    """Create a Calx parser"""
    return CalxParser(debug=debug)


def create_debug_parser() -> CalxParser:
    """Create a Calx parser with debug enabled"""
    return CalxParser(debug=True)
