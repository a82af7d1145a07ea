"""
Abstract Syntax Tree (AST) node definitions for dyce.

A parsed line is either a single expression tree or a Program of command
definitions. Nodes are frozen dataclasses: the evaluator only reads them,
and the same subtree may be bound into many call scopes at once.

Source spans are carried for diagnostics but excluded from equality, so
trees built by hand compare equal to parsed ones.
"""

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Optional, Tuple, List
from .tokens import SourceSpan


class FunctionKind(Enum):
    """Calling shape of a command."""
    NULLARY = "nullary"         # CCB
    PREFIX = "prefix"           # d6
    INFIX = "infix"             # 1D6
    POSTFIX = "postfix"         # 2d


class BinaryOperator(Enum):
    """Arithmetic operators."""
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"


class ComparisonOperator(Enum):
    """Comparison operators."""
    EQ = "=="
    NE = "!="
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="


# =============================================================================
# Base Classes
# =============================================================================

@dataclass(frozen=True)
class AstNode:
    """Base class for all AST nodes."""
    span: Optional[SourceSpan] = field(default=None, compare=False, repr=False, kw_only=True)


@dataclass(frozen=True)
class Expression(AstNode):
    """Base class for all expressions."""
    pass


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass(frozen=True)
class Integer(Expression):
    """An integer literal."""
    value: int


@dataclass(frozen=True)
class BinaryExpr(Expression):
    """Arithmetic on two operands (e.g., 1 + 2)."""
    op: BinaryOperator
    lhs: Expression
    rhs: Expression


@dataclass(frozen=True)
class ComparisonExpr(Expression):
    """Comparison of two operands (e.g., 1 <= 2)."""
    op: ComparisonOperator
    lhs: Expression
    rhs: Expression


@dataclass(frozen=True)
class CommandCall(Expression):
    """Base class for the command invocation shapes."""

    @property
    def kind(self) -> FunctionKind:
        raise NotImplementedError

    @property
    def arguments(self) -> Tuple[Expression, ...]:
        """Argument expressions, left to right."""
        raise NotImplementedError


@dataclass(frozen=True)
class NullaryCommand(CommandCall):
    """A bare identifier, called with no operands (e.g., CCB)."""
    name: str

    @property
    def kind(self) -> FunctionKind:
        return FunctionKind.NULLARY

    @property
    def arguments(self) -> Tuple[Expression, ...]:
        return ()


@dataclass(frozen=True)
class PrefixCommand(CommandCall):
    """Identifier followed by one operand (e.g., d6, succ(1+2))."""
    name: str
    rhs: Expression

    @property
    def kind(self) -> FunctionKind:
        return FunctionKind.PREFIX

    @property
    def arguments(self) -> Tuple[Expression, ...]:
        return (self.rhs,)


@dataclass(frozen=True)
class InfixCommand(CommandCall):
    """Operand, identifier, operand (e.g., 3D6)."""
    name: str
    lhs: Expression
    rhs: Expression

    @property
    def kind(self) -> FunctionKind:
        return FunctionKind.INFIX

    @property
    def arguments(self) -> Tuple[Expression, ...]:
        return (self.lhs, self.rhs)


@dataclass(frozen=True)
class PostfixCommand(CommandCall):
    """Operand followed by an identifier (e.g., 2d)."""
    name: str
    lhs: Expression

    @property
    def kind(self) -> FunctionKind:
        return FunctionKind.POSTFIX

    @property
    def arguments(self) -> Tuple[Expression, ...]:
        return (self.lhs,)


@dataclass(frozen=True)
class FunctionCall(CommandCall):
    """Parenthesized call with zero or two-plus arguments (e.g., D(2, 6)).

    Single-argument calls are parsed as PrefixCommand instead. The calling
    shape follows the argument count: none is nullary, two is infix.
    Other counts have no shape and cannot resolve to a command.
    """
    name: str
    args: Tuple[Expression, ...] = ()

    @property
    def kind(self) -> Optional[FunctionKind]:
        return _KIND_BY_ARITY.get(len(self.args))

    @property
    def arguments(self) -> Tuple[Expression, ...]:
        return self.args


_KIND_BY_ARITY = {
    0: FunctionKind.NULLARY,
    2: FunctionKind.INFIX,
}


# =============================================================================
# Definitions
# =============================================================================

@dataclass(frozen=True)
class CommandDefinition(AstNode):
    """A user command definition.

    Syntax (pattern => body):
        CCB => 10               nullary
        succ "x" => x + 1       prefix, parameter x
        times "x" y => x * y    infix, parameters x (left) and y (right)
        "n" twice => n * 2      postfix, parameter n
    """
    name: str
    kind: FunctionKind
    parameters: Tuple[str, ...]
    body: Expression


@dataclass(frozen=True)
class Program(AstNode):
    """An ordered sequence of command definitions."""
    definitions: Tuple[CommandDefinition, ...] = ()

    def __len__(self) -> int:
        return len(self.definitions)

    def __iter__(self):
        return iter(self.definitions)


# =============================================================================
# Debug Helpers
# =============================================================================

class AstPrinter:
    """Renders an AST as an indented outline."""

    def __init__(self, indent: int = 0):
        self.indent = indent
        self.lines: List[str] = []

    def _emit(self, text: str) -> None:
        self.lines.append("  " * self.indent + text)

    def visit(self, node: AstNode) -> List[str]:
        self._emit(node.__class__.__name__)
        for f in fields(node):
            if f.name == "span":
                continue
            value = getattr(node, f.name)
            if isinstance(value, AstNode):
                self._emit(f"  {f.name}:")
                self.lines.extend(AstPrinter(self.indent + 2).visit(value))
            elif isinstance(value, tuple) and any(isinstance(v, AstNode) for v in value):
                self._emit(f"  {f.name}: [")
                for item in value:
                    self.lines.extend(AstPrinter(self.indent + 2).visit(item))
                self._emit("  ]")
            elif isinstance(value, Enum):
                self._emit(f"  {f.name}: {value.name}")
            else:
                self._emit(f"  {f.name}: {value!r}")
        return self.lines


def format_ast(node: AstNode) -> str:
    """Format an AST node as an indented outline."""
    return "\n".join(AstPrinter().visit(node))


def print_ast(node: AstNode) -> None:
    """Print an AST node for debugging."""
    print(format_ast(node))
