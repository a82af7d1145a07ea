"""
Token types for the dyce lexer.

Token categories map onto the error code ranges used by diagnostics:
- E1xx: Syntax errors (the lexer itself never fails, illegal input
  surfaces as ILLEGAL tokens which the parser rejects)
- E2xx: Evaluation errors
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Any, Optional


class TokenType(Enum):
    """All token types recognized by the lexer."""

    # --- Literals ---
    NUMBER = auto()             # 42 (digits only, no sign)

    # --- Identifiers ---
    IDENTIFIER = auto()         # D, d, CCB (ASCII letters only)

    # --- Arithmetic operators ---
    PLUS = auto()               # +
    MINUS = auto()              # -
    STAR = auto()               # *
    SLASH = auto()              # /

    # --- Comparison operators ---
    EQ = auto()                 # = or ==
    NE = auto()                 # != or <>
    LT = auto()                 # <
    LE = auto()                 # <=
    GT = auto()                 # >
    GE = auto()                 # >=

    # --- Delimiters ---
    LPAREN = auto()             # (
    RPAREN = auto()             # )
    COMMA = auto()              # ,
    DOUBLE_QUOTE = auto()       # " (parameter marker in patterns)
    ARROW = auto()              # =>

    # --- Layout ---
    SEPARATOR = auto()          # one or more newlines

    # --- Special ---
    ILLEGAL = auto()            # unrecognized character
    EOF = auto()                # end of input


@dataclass(frozen=True)
class SourceLocation:
    """Represents a position in source code."""
    line: int           # 1-indexed line number
    column: int         # 1-indexed column number
    offset: int         # 0-indexed character offset from start

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class SourceSpan:
    """Represents a range in source code."""
    start: SourceLocation
    end: SourceLocation

    def __str__(self) -> str:
        return f"{self.start.line}:{self.start.column}-{self.end.line}:{self.end.column}"


@dataclass(frozen=True)
class Token:
    """A single token from the lexer."""
    type: TokenType
    value: Any              # Literal text; None for EOF
    lexeme: str             # The original source text
    span: SourceSpan        # Location in source

    def __str__(self) -> str:
        if self.type in (TokenType.NUMBER, TokenType.IDENTIFIER, TokenType.ILLEGAL):
            return f"{self.type.name}({self.lexeme!r})"
        return self.type.name


# Two-character operators, keyed by their first character
DIGRAPHS: dict[str, dict[str, TokenType]] = {
    "=": {"=": TokenType.EQ, ">": TokenType.ARROW},
    "!": {"=": TokenType.NE},
    "<": {"=": TokenType.LE, ">": TokenType.NE},
    ">": {"=": TokenType.GE},
}

# Characters that form a token on their own
SINGLE_CHAR_TOKENS: dict[str, TokenType] = {
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    ",": TokenType.COMMA,
    '"': TokenType.DOUBLE_QUOTE,
    "=": TokenType.EQ,
    "<": TokenType.LT,
    ">": TokenType.GT,
}


def describe_token_type(token_type: TokenType) -> str:
    """Human-readable name of a token type for error messages."""
    return _DESCRIPTIONS.get(token_type, token_type.name.lower())


_DESCRIPTIONS: dict[TokenType, str] = {
    TokenType.NUMBER: "number",
    TokenType.IDENTIFIER: "identifier",
    TokenType.LPAREN: "'('",
    TokenType.RPAREN: "')'",
    TokenType.COMMA: "','",
    TokenType.DOUBLE_QUOTE: "'\"'",
    TokenType.ARROW: "'=>'",
    TokenType.SEPARATOR: "newline",
    TokenType.ILLEGAL: "illegal character",
    TokenType.EOF: "end of input",
}
