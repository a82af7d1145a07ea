"""
Lexer for dyce.

Converts source text into a stream of tokens for the parser.
Supports:
- Decimal integer literals (digits only, converted later by the parser)
- ASCII identifiers (case-sensitive, letters only: "d6" is "d" then "6")
- Arithmetic and comparison operators, including the digraphs
  ==, !=, <>, <=, >= and the definition arrow =>
- Newline runs collapsed into a single SEPARATOR token

The lexer never raises. Characters it does not recognize become ILLEGAL
tokens and the parser reports them.
"""

from typing import List, Iterator
from .tokens import (
    Token, TokenType, SourceLocation, SourceSpan, DIGRAPHS, SINGLE_CHAR_TOKENS,
)


# Horizontal whitespace skipped between tokens
BLANKS = " \t\r"


class Lexer:
    """
    Single-pass tokenizer with one character of lookahead.

    Usage:
        lexer = Lexer(source_code)
        tokens = lexer.tokenize()

    Or for streaming:
        lexer = Lexer(source_code)
        for token in lexer:
            process(token)
    """

    def __init__(self, source: str):
        self.source = source
        self.pos = 0            # Current position in source
        self.line = 1           # Current line (1-indexed)
        self.column = 1         # Current column (1-indexed)

    def _location(self) -> SourceLocation:
        """Get current source location."""
        return SourceLocation(self.line, self.column, self.pos)

    def _span(self, start: SourceLocation) -> SourceSpan:
        """Create a span from start to current position."""
        return SourceSpan(start, self._location())

    def _peek(self, offset: int = 0) -> str:
        """Look at character at current position + offset without consuming."""
        idx = self.pos + offset
        if idx >= len(self.source):
            return '\0'
        return self.source[idx]

    def _advance(self) -> str:
        """Consume and return current character."""
        if self.pos >= len(self.source):
            return '\0'
        ch = self.source[self.pos]
        self.pos += 1
        if ch == '\n':
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return ch

    def _is_at_end(self) -> bool:
        """Check if we've reached end of source."""
        return self.pos >= len(self.source)

    def _skip_blanks(self) -> None:
        """Skip spaces, tabs and carriage returns (not newlines)."""
        while not self._is_at_end() and self._peek() in BLANKS:
            self._advance()

    def _make_token(self, token_type: TokenType, value, start: SourceLocation) -> Token:
        """Create a token spanning start to the current position."""
        lexeme = self.source[start.offset:self.pos]
        return Token(token_type, value, lexeme, self._span(start))

    def _scan_separator(self) -> Token:
        """Collapse a run of newlines (and blanks between them) into one token."""
        start = self._location()
        while self._peek() == '\n':
            self._advance()
            self._skip_blanks()
        return self._make_token(TokenType.SEPARATOR, "\n", start)

    def _scan_number(self) -> Token:
        """Scan a run of decimal digits."""
        start = self._location()
        while _is_digit(self._peek()):
            self._advance()
        lexeme = self.source[start.offset:self.pos]
        return self._make_token(TokenType.NUMBER, lexeme, start)

    def _scan_identifier(self) -> Token:
        """Scan a run of ASCII letters."""
        start = self._location()
        while _is_letter(self._peek()):
            self._advance()
        lexeme = self.source[start.offset:self.pos]
        return self._make_token(TokenType.IDENTIFIER, lexeme, start)

    def _scan_operator(self) -> Token:
        """Scan a one- or two-character operator, or an illegal character."""
        start = self._location()
        ch = self._advance()

        # The first character decides which digraphs are possible, so
        # "=>" is an arrow while ">=" is greater-or-equal.
        second = DIGRAPHS.get(ch, {}).get(self._peek())
        if second is not None:
            self._advance()
            return self._make_token(second, self.source[start.offset:self.pos], start)

        if ch in SINGLE_CHAR_TOKENS:
            return self._make_token(SINGLE_CHAR_TOKENS[ch], ch, start)

        # Unknown character, including a bare '!'
        return self._make_token(TokenType.ILLEGAL, ch, start)

    def next_token(self) -> Token:
        """Scan the next token. Returns an EOF token once input is exhausted."""
        self._skip_blanks()

        if self._is_at_end():
            return self._make_token(TokenType.EOF, None, self._location())

        ch = self._peek()

        if ch == '\n':
            return self._scan_separator()

        if _is_digit(ch):
            return self._scan_number()

        if _is_letter(ch):
            return self._scan_identifier()

        return self._scan_operator()

    def tokenize(self) -> List[Token]:
        """Tokenize the entire source, returning a list of tokens."""
        tokens = []
        while True:
            token = self.next_token()
            tokens.append(token)
            if token.type == TokenType.EOF:
                break
        return tokens

    def __iter__(self) -> Iterator[Token]:
        """Iterate over tokens."""
        while True:
            token = self.next_token()
            yield token
            if token.type == TokenType.EOF:
                break


def _is_digit(ch: str) -> bool:
    return '0' <= ch <= '9'


def _is_letter(ch: str) -> bool:
    return ('a' <= ch <= 'z') or ('A' <= ch <= 'Z')


def tokenize(source: str) -> List[Token]:
    """
    Convenience function to tokenize source code.

    Args:
        source: The source code to tokenize

    Returns:
        List of tokens, always ending with an EOF token
    """
    lexer = Lexer(source)
    return lexer.tokenize()
