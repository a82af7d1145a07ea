"""
Runtime values for the dyce interpreter.

Every evaluation produces a Value: an integer or a boolean tagged with its
type, so operators can check operands before using them.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union


class ValueType(Enum):
    """Runtime types."""
    INTEGER = "integer"
    BOOLEAN = "boolean"


@dataclass(frozen=True)
class Value:
    """
    A runtime value with its type.

    Equality is structural over both fields, so an integer never equals a
    boolean even where Python would say 1 == True.
    """
    data: Union[int, bool]
    type: ValueType

    def __repr__(self) -> str:
        return f"Value({self.data!r}, {self.type.name})"

    def __str__(self) -> str:
        if self.type == ValueType.BOOLEAN:
            return "true" if self.data else "false"
        return str(self.data)

    @property
    def is_integer(self) -> bool:
        return self.type == ValueType.INTEGER

    @property
    def is_boolean(self) -> bool:
        return self.type == ValueType.BOOLEAN


def int_val(n: int) -> Value:
    """Create an integer value."""
    return Value(int(n), ValueType.INTEGER)


def bool_val(b: bool) -> Value:
    """Create a boolean value."""
    return Value(bool(b), ValueType.BOOLEAN)
