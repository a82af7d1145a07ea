"""
Tree-walking interpreter for dyce.

Evaluates expression trees against an Environment of user commands, and
wraps the parse/define/evaluate cycle of a shell in a Session.
"""

import logging
import random
from dataclasses import dataclass, field
from typing import List, Optional, Union

from .values import Value, ValueType, int_val, bool_val
from .environment import Environment, FunctionForm
from .builtins import BuiltinRegistry, get_builtin_registry

from ..ast import (
    Expression, Integer, BinaryExpr, ComparisonExpr,
    BinaryOperator, ComparisonOperator, CommandCall, Program,
)
from ..errors import (
    DyceError,
    error_type_mismatch,
    error_division_by_zero,
    error_unknown_command,
    error_recursion_limit,
)
from ..parser import parse_expression, parse_line

logger = logging.getLogger(__name__)


class Interpreter:
    """
    Tree-walking interpreter for dyce expressions.

    Evaluates AST nodes by dispatching on node type. Dice are rolled with
    the interpreter's own random.Random, so a seed makes runs reproducible.
    """

    def __init__(
        self,
        builtins: Optional[BuiltinRegistry] = None,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
    ):
        """
        Initialize the interpreter.

        Args:
            builtins: Built-in command registry (defaults to the global one)
            rng: Random source for dice; takes precedence over seed
            seed: Seed for a fresh random source
        """
        self.builtins = builtins or get_builtin_registry()
        self.rng = rng if rng is not None else random.Random(seed)

    def evaluate(
        self,
        node: Union[Program, Expression],
        env: Optional[Environment] = None,
    ) -> Optional[Value]:
        """
        Evaluate a parsed line.

        A Program binds its definitions into env; an expression is
        evaluated against env.

        Args:
            node: Program or expression to evaluate
            env: Command environment (an empty one if omitted)

        Returns:
            The resulting integer or boolean Value, or None for a Program

        Raises:
            EvaluationError: On any runtime failure
        """
        if env is None:
            env = Environment()
        if isinstance(node, Program):
            self.load(node, env)
            return None
        try:
            return self.eval_node(node, env)
        except RecursionError:
            raise error_recursion_limit(node.span) from None

    def load(self, program: Program, env: Environment) -> List[FunctionForm]:
        """Bind every definition of a program into env."""
        return env.load(program)

    def eval_node(self, node: Expression, env: Environment) -> Value:
        """Evaluate a node without the recursion guard of evaluate()."""
        if isinstance(node, Integer):
            return int_val(node.value)
        elif isinstance(node, BinaryExpr):
            return self._eval_binary(node, env)
        elif isinstance(node, ComparisonExpr):
            return self._eval_comparison(node, env)
        elif isinstance(node, CommandCall):
            return self._eval_command(node, env)
        else:
            raise TypeError(f"Unknown expression type: {type(node).__name__}")

    def _eval_binary(self, expr: BinaryExpr, env: Environment) -> Value:
        """Evaluate integer arithmetic."""
        left = self._eval_integer(expr.lhs, env)
        right = self._eval_integer(expr.rhs, env)

        if expr.op == BinaryOperator.ADD:
            return int_val(left + right)
        elif expr.op == BinaryOperator.SUB:
            return int_val(left - right)
        elif expr.op == BinaryOperator.MUL:
            return int_val(left * right)
        elif expr.op == BinaryOperator.DIV:
            if right == 0:
                raise error_division_by_zero(expr.span)
            return int_val(_truncating_div(left, right))
        else:
            raise TypeError(f"Unknown binary operator: {expr.op}")

    def _eval_comparison(self, expr: ComparisonExpr, env: Environment) -> Value:
        """Evaluate a comparison."""
        if expr.op in (ComparisonOperator.EQ, ComparisonOperator.NE):
            left = self.eval_node(expr.lhs, env)
            right = self.eval_node(expr.rhs, env)
            equal = left == right
            return bool_val(equal if expr.op == ComparisonOperator.EQ else not equal)

        left = self._eval_integer(expr.lhs, env)
        right = self._eval_integer(expr.rhs, env)

        if expr.op == ComparisonOperator.LT:
            return bool_val(left < right)
        elif expr.op == ComparisonOperator.LE:
            return bool_val(left <= right)
        elif expr.op == ComparisonOperator.GT:
            return bool_val(left > right)
        elif expr.op == ComparisonOperator.GE:
            return bool_val(left >= right)
        else:
            raise TypeError(f"Unknown comparison operator: {expr.op}")

    def _eval_command(self, call: CommandCall, env: Environment) -> Value:
        """Resolve a command call by name and shape, then invoke it."""
        kind = call.kind
        if kind is None:
            # f(a, b, c) has no calling shape to look up
            raise error_unknown_command(call.name, f"{len(call.arguments)}-argument", call.span)
        form = FunctionForm(call.name, kind)
        return env.lookup_and_evaluate(form, call.arguments, self, call.span)

    def _eval_integer(self, node: Expression, env: Environment) -> int:
        """Evaluate a node that must produce an integer."""
        value = self.eval_node(node, env)
        if value.type != ValueType.INTEGER:
            raise error_type_mismatch(ValueType.INTEGER.value, value.type.value, node.span)
        return value.data


def _truncating_div(left: int, right: int) -> int:
    """Integer division rounding toward zero."""
    quotient = abs(left) // abs(right)
    if (left < 0) != (right < 0):
        return -quotient
    return quotient


# =============================================================================
# Sessions
# =============================================================================

@dataclass
class LineResult:
    """Result of running one line of input."""
    success: bool
    value: Optional[Value] = None
    defined: List[FunctionForm] = field(default_factory=list)
    error: Optional[DyceError] = None

    @property
    def error_message(self) -> Optional[str]:
        if self.error is None:
            return None
        return str(self.error)

    def format(self) -> str:
        """Text a shell prints for this line."""
        if not self.success:
            return self.error_message or "error"
        if self.value is not None:
            return str(self.value)
        if self.defined:
            return "defined " + ", ".join(str(form) for form in self.defined)
        return ""


class Session:
    """
    A shell session: one interpreter and one environment shared by every line.

    Definitions made on one line are visible to the lines after it. With
    fresh=True each line starts from an empty environment instead.
    """

    def __init__(self, interpreter: Optional[Interpreter] = None, fresh: bool = False):
        self.interpreter = interpreter or Interpreter()
        self.fresh = fresh
        self.env = Environment()

    def reset(self) -> None:
        """Discard all definitions."""
        self.env = Environment()

    def parse(self, text: str) -> Union[Program, Expression]:
        """Parse one line as the session would run it."""
        return parse_line(text)

    def run_line(self, text: str) -> LineResult:
        """
        Parse and run one line of input.

        Definitions are bound into the session environment; an expression
        is evaluated against it. Failures are returned, not raised.
        """
        if not text.strip():
            return LineResult(success=True)

        if self.fresh:
            self.reset()

        try:
            node = self.parse(text)
            if isinstance(node, Program):
                defined = self.interpreter.load(node, self.env)
                logger.debug("defined %s", ", ".join(str(form) for form in defined))
                return LineResult(success=True, defined=defined)

            logger.debug("evaluating %r", text)
            value = self.interpreter.evaluate(node, self.env)
            return LineResult(success=True, value=value)
        except DyceError as e:
            logger.debug("line failed with %s: %s", e.code, e.diagnostic.message)
            return LineResult(success=False, error=e)


# =============================================================================
# Convenience Functions
# =============================================================================

def execute(
    source: str,
    env: Optional[Environment] = None,
    interpreter: Optional[Interpreter] = None,
) -> Value:
    """
    Parse and evaluate a single expression.

    Args:
        source: Expression text
        env: Command environment (an empty one if omitted)
        interpreter: Interpreter to use (a fresh unseeded one if omitted)

    Returns:
        The resulting Value

    Raises:
        ParserError: If the text does not parse
        EvaluationError: If evaluation fails
    """
    if interpreter is None:
        interpreter = Interpreter()
    return interpreter.evaluate(parse_expression(source), env)
