"""
Exceptions and diagnostics for dyce.

Error code ranges:
- E1xx: Syntax errors (parser)
- E2xx: Evaluation errors (runtime)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List
from .tokens import SourceSpan


class ErrorSeverity(Enum):
    """Severity levels for diagnostics."""
    ERROR = "error"


@dataclass
class Diagnostic:
    """A single diagnostic message."""
    code: str                       # E101, E201, etc.
    message: str                    # Human-readable message
    severity: ErrorSeverity = ErrorSeverity.ERROR
    span: Optional[SourceSpan] = None
    source_line: Optional[str] = None   # The actual line of source code
    hints: List[str] = field(default_factory=list)

    def format(self, show_source: bool = True) -> str:
        """Format the diagnostic for display."""
        parts = []

        header = f"{self.severity.value}[{self.code}]: {self.message}"
        if self.span is not None:
            header = f"{self.span.start}: {header}"
        parts.append(header)

        # Source line with caret
        if show_source and self.span is not None and self.source_line is not None:
            parts.append("  |")
            line_num = str(self.span.start.line)
            parts.append(f"{line_num:>3} | {self.source_line}")

            col = self.span.start.column
            end_col = self.span.end.column if self.span.start.line == self.span.end.line else len(self.source_line) + 1
            underline_len = max(1, end_col - col)
            parts.append(f"    | {' ' * (col - 1)}{'^' * underline_len}")

        for hint in self.hints:
            parts.append(f"    = hint: {hint}")

        return "\n".join(parts)

    def to_json(self) -> dict:
        """Convert to JSON-serializable dict for tooling integration."""
        result = {
            "code": self.code,
            "message": self.message,
            "severity": self.severity.value,
            "hints": self.hints,
        }
        if self.span is not None:
            result["range"] = {
                "start": {
                    "line": self.span.start.line,
                    "column": self.span.start.column,
                    "offset": self.span.start.offset,
                },
                "end": {
                    "line": self.span.end.line,
                    "column": self.span.end.column,
                    "offset": self.span.end.offset,
                },
            }
        return result


class DyceError(Exception):
    """Base exception for dyce errors."""

    def __init__(self, diagnostic: Diagnostic):
        self.diagnostic = diagnostic
        super().__init__(diagnostic.message)

    @property
    def code(self) -> str:
        return self.diagnostic.code

    def __str__(self) -> str:
        return self.diagnostic.format()


class ParserError(DyceError):
    """Syntax error while parsing (E1xx)."""
    pass


class EvaluationError(DyceError):
    """Error while evaluating a tree (E2xx)."""
    pass


class UnknownCommandError(EvaluationError):
    """No built-in or user binding for a (name, kind) pair."""
    pass


class ArityError(EvaluationError):
    """Argument count differs from the declared parameter count."""
    pass


class TypeMismatchError(EvaluationError):
    """Operand of the wrong runtime type."""
    pass


class DivisionByZeroError(EvaluationError):
    """Integer division by zero."""
    pass


class InvalidDiceError(EvaluationError):
    """Negative roll count or fewer than one side."""
    pass


class RecursionLimitError(EvaluationError):
    """Command calls nested deeper than the interpreter stack allows."""
    pass


# --- Parser error codes ---

def error_unexpected_token(expected: str, found: str, span: SourceSpan,
                           source_line: str = None) -> ParserError:
    """E101: Unexpected token."""
    diag = Diagnostic(
        code="E101",
        message=f"expected {expected}, found {found}",
        span=span,
        source_line=source_line,
    )
    return ParserError(diag)


def error_unexpected_eof(expected: str, span: SourceSpan) -> ParserError:
    """E102: Unexpected end of input."""
    diag = Diagnostic(
        code="E102",
        message=f"unexpected end of input, expected {expected}",
        span=span,
    )
    return ParserError(diag)


def error_illegal_character(char: str, span: SourceSpan,
                            source_line: str = None) -> ParserError:
    """E103: Illegal character."""
    diag = Diagnostic(
        code="E103",
        message=f"illegal character '{char}'",
        span=span,
        source_line=source_line,
    )
    return ParserError(diag)


def error_invalid_number_literal(text: str, span: SourceSpan,
                                 source_line: str = None) -> ParserError:
    """E104: Number literal out of range."""
    diag = Diagnostic(
        code="E104",
        message=f"invalid number literal '{text}'",
        span=span,
        source_line=source_line,
        hints=["integer literals must fit in a signed 128-bit integer"],
    )
    return ParserError(diag)


def error_duplicate_parameter(name: str, span: SourceSpan,
                              source_line: str = None) -> ParserError:
    """E105: Parameter name used twice in one pattern."""
    diag = Diagnostic(
        code="E105",
        message=f"duplicate parameter '{name}'",
        span=span,
        source_line=source_line,
    )
    return ParserError(diag)


def error_nesting_too_deep(span: SourceSpan,
                           source_line: str = None) -> ParserError:
    """E106: Input nested deeper than the parser can follow."""
    diag = Diagnostic(
        code="E106",
        message="expression nested too deeply",
        span=span,
        source_line=source_line,
    )
    return ParserError(diag)


# --- Evaluation error codes ---

def error_unknown_command(name: str, kind: str,
                          span: Optional[SourceSpan] = None) -> UnknownCommandError:
    """E201: Unknown command."""
    diag = Diagnostic(
        code="E201",
        message=f"unknown {kind} command '{name}'",
        span=span,
    )
    return UnknownCommandError(diag)


def error_arity(name: str, expected: int, found: int,
                span: Optional[SourceSpan] = None) -> ArityError:
    """E202: Wrong number of arguments."""
    diag = Diagnostic(
        code="E202",
        message=f"command '{name}' takes {expected} argument(s), {found} given",
        span=span,
    )
    return ArityError(diag)


def error_type_mismatch(expected: str, found: str,
                        span: Optional[SourceSpan] = None) -> TypeMismatchError:
    """E203: Type mismatch."""
    diag = Diagnostic(
        code="E203",
        message=f"type mismatch: expected '{expected}', found '{found}'",
        span=span,
    )
    return TypeMismatchError(diag)


def error_division_by_zero(span: Optional[SourceSpan] = None) -> DivisionByZeroError:
    """E204: Division by zero."""
    diag = Diagnostic(
        code="E204",
        message="division by zero",
        span=span,
    )
    return DivisionByZeroError(diag)


def error_invalid_dice(count: int, sides: int,
                       span: Optional[SourceSpan] = None) -> InvalidDiceError:
    """E205: Invalid dice parameters."""
    diag = Diagnostic(
        code="E205",
        message=f"cannot roll {count} dice with {sides} side(s)",
        span=span,
        hints=["the roll count must be >= 0 and the side count >= 1"],
    )
    return InvalidDiceError(diag)


def error_recursion_limit(span: Optional[SourceSpan] = None) -> RecursionLimitError:
    """E206: Recursion limit exceeded."""
    diag = Diagnostic(
        code="E206",
        message="recursion limit exceeded",
        span=span,
        hints=["expressions or command calls are nested too deeply to evaluate"],
    )
    return RecursionLimitError(diag)
