"""
dyce - a small language for dice expressions.

This module provides:
- Lexer: Tokenizes source text
- Parser: Builds expression trees and command definitions
- Interpreter: Evaluates expressions, rolling dice with `D`/`d`

Usage:
    from dyce import execute, Session

    execute("3D6 + 2")              # Value(13, INTEGER), say

    session = Session()
    session.run_line('times "x" y => x * y')
    session.run_line("2times3").value   # Value(6, INTEGER)
"""

__version__ = "0.1.0"

from .tokens import (
    Token,
    TokenType,
    SourceLocation,
    SourceSpan,
)

from .lexer import (
    Lexer,
    tokenize,
)

from .parser import (
    Parser,
    parse_expression,
    parse_program,
    parse_line,
)

from .ast import (
    # Base
    AstNode,
    Expression,
    # Enums
    FunctionKind,
    BinaryOperator,
    ComparisonOperator,
    # Expressions
    Integer,
    BinaryExpr,
    ComparisonExpr,
    CommandCall,
    NullaryCommand,
    PrefixCommand,
    InfixCommand,
    PostfixCommand,
    FunctionCall,
    # Definitions
    CommandDefinition,
    Program,
    # Utilities
    format_ast,
    print_ast,
)

from .errors import (
    ErrorSeverity,
    Diagnostic,
    DyceError,
    ParserError,
    EvaluationError,
    UnknownCommandError,
    ArityError,
    TypeMismatchError,
    DivisionByZeroError,
    InvalidDiceError,
    RecursionLimitError,
)

from .runtime import (
    Value,
    ValueType,
    int_val,
    bool_val,
    FunctionForm,
    Function,
    Environment,
    BuiltinRegistry,
    get_builtin_registry,
    Interpreter,
    LineResult,
    Session,
    execute,
)

__all__ = [
    "__version__",
    # Tokens
    "Token",
    "TokenType",
    "SourceLocation",
    "SourceSpan",
    # Lexer
    "Lexer",
    "tokenize",
    # Parser
    "Parser",
    "parse_expression",
    "parse_program",
    "parse_line",
    # AST
    "AstNode",
    "Expression",
    "FunctionKind",
    "BinaryOperator",
    "ComparisonOperator",
    "Integer",
    "BinaryExpr",
    "ComparisonExpr",
    "CommandCall",
    "NullaryCommand",
    "PrefixCommand",
    "InfixCommand",
    "PostfixCommand",
    "FunctionCall",
    "CommandDefinition",
    "Program",
    "format_ast",
    "print_ast",
    # Errors
    "ErrorSeverity",
    "Diagnostic",
    "DyceError",
    "ParserError",
    "EvaluationError",
    "UnknownCommandError",
    "ArityError",
    "TypeMismatchError",
    "DivisionByZeroError",
    "InvalidDiceError",
    "RecursionLimitError",
    # Runtime
    "Value",
    "ValueType",
    "int_val",
    "bool_val",
    "FunctionForm",
    "Function",
    "Environment",
    "BuiltinRegistry",
    "get_builtin_registry",
    "Interpreter",
    "LineResult",
    "Session",
    "execute",
]
