"""
Recursive descent parser for dyce.

Converts a token stream into an expression tree or a Program of command
definitions. Nothing in the grammar marks a calling shape: "1D6", "d6",
"2d" and "CCB" are told apart purely by the kinds of the surrounding tokens.
"""

from typing import List, Optional, Tuple, Union
from .tokens import Token, TokenType, SourceSpan, describe_token_type
from .lexer import tokenize
from .ast import (
    FunctionKind, BinaryOperator, ComparisonOperator,
    Expression, Integer, BinaryExpr, ComparisonExpr,
    NullaryCommand, PrefixCommand, InfixCommand, PostfixCommand, FunctionCall,
    CommandDefinition, Program,
)
from .errors import (
    error_unexpected_token,
    error_unexpected_eof,
    error_illegal_character,
    error_invalid_number_literal,
    error_duplicate_parameter,
    error_nesting_too_deep,
)


# Integers are signed 128-bit wide
INTEGER_MIN = -(2 ** 127)
INTEGER_MAX = 2 ** 127 - 1

BINARY_OPERATORS = {
    TokenType.PLUS: BinaryOperator.ADD,
    TokenType.MINUS: BinaryOperator.SUB,
    TokenType.STAR: BinaryOperator.MUL,
    TokenType.SLASH: BinaryOperator.DIV,
}

COMPARISON_OPERATORS = {
    TokenType.EQ: ComparisonOperator.EQ,
    TokenType.NE: ComparisonOperator.NE,
    TokenType.LT: ComparisonOperator.LT,
    TokenType.LE: ComparisonOperator.LE,
    TokenType.GT: ComparisonOperator.GT,
    TokenType.GE: ComparisonOperator.GE,
}


class Parser:
    """
    Recursive descent parser for dyce.

    Usage:
        parser = Parser(tokens)
        expr = parser.parse_expression()

    or, for a block of definitions:
        program = Parser(tokens).parse_program()

    Precedence, loosest first (comparisons do not chain):
        = == != <>
        < <= > >=
        + -
        * /
        command calls (nullary, prefix, infix, postfix, f(a, b))
        number, ( expr )
    """

    def __init__(self, tokens: List[Token], source: Optional[str] = None):
        self.tokens = tokens
        self.source = source  # Original source, for diagnostics
        self.pos = 0
        self._lines: Optional[List[str]] = None

    # =========================================================================
    # Token Navigation
    # =========================================================================

    def _current(self) -> Token:
        """Get current token."""
        if self.pos >= len(self.tokens):
            return self.tokens[-1]  # EOF
        return self.tokens[self.pos]

    def _is_at_end(self) -> bool:
        """Check if at end of tokens."""
        return self._current().type == TokenType.EOF

    def _check(self, token_type: TokenType) -> bool:
        """Check if current token is of given type."""
        return self._current().type == token_type

    def _check_any(self, *token_types: TokenType) -> bool:
        """Check if current token is any of given types."""
        return self._current().type in token_types

    def _advance(self) -> Token:
        """Consume and return current token."""
        token = self._current()
        if not self._is_at_end():
            self.pos += 1
        return token

    def _consume(self, token_type: TokenType, expected: str) -> Token:
        """Consume token of expected type, or raise error."""
        if self._check(token_type):
            return self._advance()
        self._error(expected)

    def _match(self, *token_types: TokenType) -> Optional[Token]:
        """Consume token if it matches any of the given types."""
        if self._current().type in token_types:
            return self._advance()
        return None

    def _skip_separators(self) -> None:
        """Skip any SEPARATOR tokens."""
        while self._check(TokenType.SEPARATOR):
            self._advance()

    def _source_line(self, line_num: int) -> Optional[str]:
        """Get a specific line of source (1-indexed)."""
        if self.source is None:
            return None
        if self._lines is None:
            self._lines = self.source.split('\n')
        if 1 <= line_num <= len(self._lines):
            return self._lines[line_num - 1]
        return None

    def _error(self, expected: str) -> None:
        """Raise a parser error for the current token."""
        token = self._current()
        if token.type == TokenType.EOF:
            raise error_unexpected_eof(expected, token.span)
        source_line = self._source_line(token.span.start.line)
        if token.type == TokenType.ILLEGAL:
            raise error_illegal_character(token.lexeme, token.span, source_line)
        raise error_unexpected_token(expected, _describe(token), token.span, source_line)

    def _nesting_error(self) -> None:
        """Raise a parser error when nesting exhausts the Python stack."""
        token = self._current()
        raise error_nesting_too_deep(
            token.span, self._source_line(token.span.start.line)
        ) from None

    def _span_from(self, start: Token) -> SourceSpan:
        """Create a span from start token to the last consumed token."""
        prev_pos = max(0, self.pos - 1)
        end_token = self.tokens[prev_pos]
        return SourceSpan(start.span.start, end_token.span.end)

    # =========================================================================
    # Entry Points
    # =========================================================================

    def parse_expression(self) -> Expression:
        """Parse a standalone expression; only newlines may follow it."""
        try:
            expr = self._parse_expression()
        except RecursionError:
            self._nesting_error()
        self._skip_separators()
        if not self._is_at_end():
            self._error("end of input")
        return expr

    def parse_program(self) -> Program:
        """Parse newline-separated command definitions."""
        start = self._current()
        self._skip_separators()

        definitions = []
        while not self._is_at_end():
            try:
                definitions.append(self._parse_definition())
            except RecursionError:
                self._nesting_error()
            if self._is_at_end():
                break
            self._consume(TokenType.SEPARATOR, "newline")
            self._skip_separators()

        return Program(tuple(definitions), span=self._span_from(start))

    # =========================================================================
    # Definitions
    # =========================================================================

    def _parse_definition(self) -> CommandDefinition:
        """Parse `pattern => expr`."""
        start = self._current()
        name, kind, parameters = self._parse_pattern()
        self._consume(TokenType.ARROW, "'=>'")
        body = self._parse_expression()
        return CommandDefinition(name, kind, parameters, body, span=self._span_from(start))

    def _parse_pattern(self) -> Tuple[str, FunctionKind, Tuple[str, ...]]:
        """Parse a definition pattern.

        pattern := IDENT
                 | IDENT '"' IDENT '"'
                 | IDENT '"' IDENT '"' IDENT
                 | '"' IDENT '"' IDENT
        """
        # '"' param '"' name
        if self._match(TokenType.DOUBLE_QUOTE):
            param = self._consume(TokenType.IDENTIFIER, "parameter name")
            self._consume(TokenType.DOUBLE_QUOTE, "'\"'")
            name = self._consume(TokenType.IDENTIFIER, "command name")
            return name.value, FunctionKind.POSTFIX, (param.value,)

        name = self._consume(TokenType.IDENTIFIER, "command name or '\"'")

        # name
        if not self._match(TokenType.DOUBLE_QUOTE):
            return name.value, FunctionKind.NULLARY, ()

        left = self._consume(TokenType.IDENTIFIER, "parameter name")
        self._consume(TokenType.DOUBLE_QUOTE, "'\"'")

        # name '"' param '"'
        right = self._match(TokenType.IDENTIFIER)
        if right is None:
            return name.value, FunctionKind.PREFIX, (left.value,)

        # name '"' param '"' param
        if right.value == left.value:
            raise error_duplicate_parameter(
                right.value, right.span, self._source_line(right.span.start.line)
            )
        return name.value, FunctionKind.INFIX, (left.value, right.value)

    # =========================================================================
    # Expressions
    # =========================================================================

    def _parse_expression(self) -> Expression:
        """expr := equality"""
        return self._parse_equality()

    def _parse_equality(self) -> Expression:
        """equality := relational ( ("=" | "==" | "!=" | "<>") relational )?"""
        left = self._parse_relational()
        op = self._match(TokenType.EQ, TokenType.NE)
        if op is None:
            return left
        right = self._parse_relational()
        return ComparisonExpr(
            COMPARISON_OPERATORS[op.type], left, right,
            span=SourceSpan(left.span.start, right.span.end),
        )

    def _parse_relational(self) -> Expression:
        """relational := additive ( ("<" | "<=" | ">" | ">=") additive )?"""
        left = self._parse_additive()
        op = self._match(TokenType.LT, TokenType.LE, TokenType.GT, TokenType.GE)
        if op is None:
            return left
        right = self._parse_additive()
        return ComparisonExpr(
            COMPARISON_OPERATORS[op.type], left, right,
            span=SourceSpan(left.span.start, right.span.end),
        )

    def _parse_additive(self) -> Expression:
        """additive := multiplicative ( ("+" | "-") multiplicative )*"""
        left = self._parse_multiplicative()
        while True:
            op = self._match(TokenType.PLUS, TokenType.MINUS)
            if op is None:
                return left
            right = self._parse_multiplicative()
            left = BinaryExpr(
                BINARY_OPERATORS[op.type], left, right,
                span=SourceSpan(left.span.start, right.span.end),
            )

    def _parse_multiplicative(self) -> Expression:
        """multiplicative := call ( ("*" | "/") call )*"""
        left = self._parse_call()
        while True:
            op = self._match(TokenType.STAR, TokenType.SLASH)
            if op is None:
                return left
            right = self._parse_call()
            left = BinaryExpr(
                BINARY_OPERATORS[op.type], left, right,
                span=SourceSpan(left.span.start, right.span.end),
            )

    def _parse_call(self) -> Expression:
        """Resolve the calling shape from lookahead.

        Decision table, first match wins:
            IDENT "(" ...               f(), f(a) (prefix), f(a, b, ...)
            IDENT NUMBER                prefix
            IDENT                       nullary
            primary IDENT (NUMBER|"(")  infix
            primary IDENT               postfix
            primary                     the primary itself
        """
        start = self._current()

        name = self._match(TokenType.IDENTIFIER)
        if name is not None:
            if self._match(TokenType.LPAREN):
                args = self._parse_arguments()
                if len(args) == 1:
                    return PrefixCommand(name.value, args[0], span=self._span_from(start))
                return FunctionCall(name.value, args, span=self._span_from(start))

            if self._check(TokenType.NUMBER):
                rhs = self._parse_primary()
                return PrefixCommand(name.value, rhs, span=self._span_from(start))

            return NullaryCommand(name.value, span=name.span)

        lhs = self._parse_primary()
        name = self._match(TokenType.IDENTIFIER)
        if name is None:
            return lhs

        if self._check_any(TokenType.NUMBER, TokenType.LPAREN):
            rhs = self._parse_primary()
            return InfixCommand(name.value, lhs, rhs, span=self._span_from(start))

        return PostfixCommand(name.value, lhs, span=self._span_from(start))

    def _parse_arguments(self) -> Tuple[Expression, ...]:
        """Parse `expr ("," expr)* ")"` after the opening parenthesis."""
        if self._match(TokenType.RPAREN):
            return ()

        args = [self._parse_expression()]
        while self._match(TokenType.COMMA):
            args.append(self._parse_expression())
        self._consume(TokenType.RPAREN, "',' or ')'")
        return tuple(args)

    def _parse_primary(self) -> Expression:
        """primary := NUMBER | "(" expr ")" """
        if self._match(TokenType.LPAREN):
            expr = self._parse_expression()
            self._consume(TokenType.RPAREN, "')'")
            return expr

        token = self._consume(TokenType.NUMBER, "number or '('")
        value = int(token.lexeme)
        if not INTEGER_MIN <= value <= INTEGER_MAX:
            raise error_invalid_number_literal(
                token.lexeme, token.span, self._source_line(token.span.start.line)
            )
        return Integer(value, span=token.span)


def _describe(token: Token) -> str:
    """Describe a token for error messages."""
    if token.type in (TokenType.NUMBER, TokenType.IDENTIFIER):
        return f"{describe_token_type(token.type)} '{token.lexeme}'"
    if token.type in BINARY_OPERATORS or token.type in COMPARISON_OPERATORS:
        return f"'{token.lexeme}'"
    return describe_token_type(token.type)


def parse_expression(source: str) -> Expression:
    """
    Parse a single expression.

    Args:
        source: Expression text, optionally followed by newlines

    Returns:
        The expression tree

    Raises:
        ParserError: If the text is not exactly one expression
    """
    return Parser(tokenize(source), source).parse_expression()


def parse_program(source: str) -> Program:
    """
    Parse newline-separated command definitions.

    Raises:
        ParserError: If any definition is malformed
    """
    return Parser(tokenize(source), source).parse_program()


def parse_line(source: str) -> Union[Program, Expression]:
    """
    Parse one line of input as the shell sees it.

    Text containing a definition arrow is parsed as a Program, anything
    else as a single expression.
    """
    tokens = tokenize(source)
    parser = Parser(tokens, source)
    if any(t.type == TokenType.ARROW for t in tokens):
        return parser.parse_program()
    return parser.parse_expression()
