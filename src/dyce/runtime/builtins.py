"""
Built-in command registry for the dyce interpreter.

Built-ins are keyed by FunctionForm just like user commands and take
priority over them. The only built-in is the dice roll, bound as infix
`D` and infix `d`: `3D6` rolls three six-sided dice and sums them.
"""

from dataclasses import dataclass
from random import Random
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Sequence

from .environment import Command, Environment, FunctionForm
from .values import Value, ValueType, int_val
from ..ast import Expression, FunctionKind
from ..errors import EvaluationError, error_arity, error_invalid_dice, error_type_mismatch
from ..tokens import SourceSpan

if TYPE_CHECKING:
    from .interpreter import Interpreter


def roll(count: int, sides: int, rng: Random) -> int:
    """
    Sum `count` independent uniform draws from [1, sides].

    Raises:
        InvalidDiceError: If count < 0 or sides < 1
    """
    if count < 0 or sides < 1:
        raise error_invalid_dice(count, sides)
    return sum(rng.randint(1, sides) for _ in range(count))


@dataclass(frozen=True)
class BuiltinCommand(Command):
    """
    A built-in command over integer operands.

    Operands arrive as expressions and are evaluated (once each, left to
    right) before the implementation runs.
    """
    name: str
    kind: FunctionKind
    implementation: Callable[..., int]
    arity: int
    doc: str = ""

    @property
    def form(self) -> FunctionForm:
        return FunctionForm(self.name, self.kind)

    def call(
        self,
        form: FunctionForm,
        arguments: Sequence[Expression],
        env: Environment,
        interpreter: "Interpreter",
        span: Optional[SourceSpan] = None,
    ) -> Value:
        if len(arguments) != self.arity:
            raise error_arity(self.name, self.arity, len(arguments), span)

        operands = []
        for arg in arguments:
            value = interpreter.eval_node(arg, env)
            if value.type != ValueType.INTEGER:
                raise error_type_mismatch(ValueType.INTEGER.value, value.type.value, arg.span)
            operands.append(value.data)

        try:
            return int_val(self.implementation(*operands, rng=interpreter.rng))
        except EvaluationError as e:
            if e.diagnostic.span is None:
                e.diagnostic.span = span
            raise


class BuiltinRegistry:
    """
    Registry of all built-in commands.

    Commands are registered by form and looked up before user bindings.
    """

    def __init__(self):
        self._commands: Dict[FunctionForm, BuiltinCommand] = {}
        self._register_all()

    def get(self, form: FunctionForm) -> Optional[BuiltinCommand]:
        """Look up a command by form."""
        return self._commands.get(form)

    def register(self, command: BuiltinCommand) -> None:
        """Register a command."""
        self._commands[command.form] = command

    def commands(self) -> List[BuiltinCommand]:
        """All registered commands."""
        return list(self._commands.values())

    def __contains__(self, form: FunctionForm) -> bool:
        return form in self._commands

    def _register_all(self) -> None:
        """Register all built-in commands."""
        self._register_dice()

    # --- Dice ---

    def _register_dice(self) -> None:
        """Register the dice roll under both spellings."""
        for name in ("D", "d"):
            self.register(BuiltinCommand(
                name,
                FunctionKind.INFIX,
                roll,
                arity=2,
                doc=f"COUNT {name} SIDES: sum of COUNT rolls of a SIDES-sided die",
            ))


# Global singleton registry
_registry: Optional[BuiltinRegistry] = None


def get_builtin_registry() -> BuiltinRegistry:
    """Get the global built-in command registry."""
    global _registry
    if _registry is None:
        _registry = BuiltinRegistry()
    return _registry
