"""
dyce runtime - tree-walking evaluation of dice expressions.

This module provides:
- Interpreter: Evaluates expression trees
- Value: Runtime values tagged with their type
- Environment: Command bindings keyed by name and calling shape
- BuiltinRegistry: Built-in commands (the dice roll)
- Session: Line-at-a-time driver used by the shell
"""

from .values import (
    Value,
    ValueType,
    int_val,
    bool_val,
)

from .environment import (
    FunctionForm,
    Command,
    Function,
    Environment,
)

from .builtins import (
    BuiltinCommand,
    BuiltinRegistry,
    get_builtin_registry,
    roll,
)

from .interpreter import (
    Interpreter,
    LineResult,
    Session,
    execute,
)

__all__ = [
    # Values
    "Value",
    "ValueType",
    "int_val",
    "bool_val",
    # Environment
    "FunctionForm",
    "Command",
    "Function",
    "Environment",
    # Builtins
    "BuiltinCommand",
    "BuiltinRegistry",
    "get_builtin_registry",
    "roll",
    # Interpreter
    "Interpreter",
    "LineResult",
    "Session",
    "execute",
]
