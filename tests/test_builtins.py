"""
Tests for the built-in dice roll.
"""

import random
import pytest
import textwrap

from dyce import (
    parse_program, execute, Interpreter, Session,
    FunctionKind, int_val, InvalidDiceError, TypeMismatchError,
)
from dyce.runtime import (
    Environment, FunctionForm, BuiltinCommand, BuiltinRegistry,
    get_builtin_registry, roll,
)


class ScriptedRandom:
    """Stands in for random.Random, returning preset rolls in order."""

    def __init__(self, *rolls):
        self.rolls = list(rolls)
        self.requests = []

    def randint(self, low, high):
        self.requests.append((low, high))
        return self.rolls.pop(0)


def env_with(source: str) -> Environment:
    env = Environment()
    env.load(parse_program(textwrap.dedent(source)))
    return env


class TestRoll:
    """Test the roll() implementation directly."""

    def test_sums_draws(self):
        rng = ScriptedRandom(2, 5, 6)
        assert roll(3, 6, rng) == 13
        assert rng.requests == [(1, 6)] * 3

    def test_zero_dice(self):
        assert roll(0, 6, ScriptedRandom()) == 0

    def test_one_sided_die(self):
        assert roll(4, 1, random.Random(0)) == 4

    def test_negative_count(self):
        with pytest.raises(InvalidDiceError) as exc_info:
            roll(-1, 6, random.Random(0))
        assert exc_info.value.code == "E205"

    def test_zero_sides(self):
        with pytest.raises(InvalidDiceError):
            roll(1, 0, random.Random(0))

    def test_in_range(self):
        rng = random.Random(1234)
        for _ in range(200):
            assert 3 <= roll(3, 6, rng) <= 18


class TestRegistry:
    """Test the built-in registry."""

    def test_dice_forms(self):
        registry = get_builtin_registry()
        assert FunctionForm("D", FunctionKind.INFIX) in registry
        assert FunctionForm("d", FunctionKind.INFIX) in registry

    def test_only_infix_forms(self):
        registry = get_builtin_registry()
        assert registry.get(FunctionForm("d", FunctionKind.PREFIX)) is None
        assert registry.get(FunctionForm("d", FunctionKind.POSTFIX)) is None

    def test_singleton(self):
        assert get_builtin_registry() is get_builtin_registry()

    def test_register_custom_command(self):
        registry = BuiltinRegistry()
        registry.register(BuiltinCommand(
            "max", FunctionKind.INFIX, lambda a, b, rng: max(a, b), arity=2,
        ))
        interp = Interpreter(builtins=registry)
        assert execute("3max7", interpreter=interp) == int_val(7)
        # Dice are still there
        assert execute("1D1", interpreter=interp) == int_val(1)

    def test_commands_listing(self):
        names = sorted(cmd.name for cmd in get_builtin_registry().commands())
        assert names == ["D", "d"]

    def test_commands_are_documented(self):
        for command in get_builtin_registry().commands():
            assert f"COUNT {command.name} SIDES" in command.doc


class TestDiceExpressions:
    """Dice through the interpreter."""

    def test_scripted_roll(self):
        interp = Interpreter(rng=ScriptedRandom(4, 1))
        assert execute("2D6", interpreter=interp) == int_val(5)

    def test_lowercase_spelling(self):
        interp = Interpreter(rng=ScriptedRandom(3))
        assert execute("1d20", interpreter=interp) == int_val(3)

    def test_function_call_spelling(self):
        interp = Interpreter(rng=ScriptedRandom(2, 2))
        assert execute("D(2, 6)", interpreter=interp) == int_val(4)

    def test_range(self):
        interp = Interpreter(seed=42)
        for _ in range(100):
            value = execute("3D6", interpreter=interp)
            assert 3 <= value.data <= 18

    @pytest.mark.parametrize("count,sides", [
        (0, 1), (1, 1), (7, 1), (250, 1),
        (0, 20), (1, 2), (2, 6), (10, 4), (50, 20), (100, 100), (400, 3),
    ])
    def test_range_sweep(self, count, sides):
        """A roll always lands in [count, count * sides]."""
        interp = Interpreter(seed=count * 1000 + sides)
        for _ in range(25):
            value = execute(f"{count}D{sides}", interpreter=interp)
            assert count <= value.data <= count * sides

    def test_one_sided_dice_are_exact(self):
        for count in range(20):
            assert execute(f"{count}d1") == int_val(count)

    def test_random_range_sweep(self):
        picker = random.Random(2024)
        interp = Interpreter(seed=5)
        for _ in range(300):
            count = picker.randint(0, 60)
            sides = picker.randint(1, 60)
            value = execute(f"{count}D{sides}", interpreter=interp)
            assert count <= value.data <= count * sides

    def test_seed_is_reproducible(self):
        first = [execute("10D100", interpreter=Interpreter(seed=7)) for _ in range(3)]
        second = [execute("10D100", interpreter=Interpreter(seed=7)) for _ in range(3)]
        assert first == second

    def test_zero_dice(self):
        assert execute("0D6") == int_val(0)

    def test_computed_operands(self):
        interp = Interpreter(rng=ScriptedRandom(1, 2, 3))
        assert execute("(1+2)D(2*3)", interpreter=interp) == int_val(6)
        assert interp.rng.requests == [(1, 6)] * 3

    def test_dice_in_arithmetic(self):
        interp = Interpreter(rng=ScriptedRandom(6, 6))
        assert execute("2D6 + 1", interpreter=interp) == int_val(13)

    def test_negative_count(self):
        with pytest.raises(InvalidDiceError) as exc_info:
            execute("(0-1)D6")
        assert exc_info.value.diagnostic.span is not None

    def test_zero_sides(self):
        with pytest.raises(InvalidDiceError):
            execute("2D0")

    def test_boolean_operand(self):
        with pytest.raises(TypeMismatchError):
            execute("(1=1)D6")
        with pytest.raises(TypeMismatchError):
            execute("2D(1<2)")

    def test_builtin_wins_over_user_definition(self):
        env = env_with('D "x" y => 1000')
        assert execute("1D1", env) == int_val(1)

    def test_user_prefix_d_is_allowed(self):
        env = env_with('d "x" => x + 1')
        assert execute("d5", env) == int_val(6)

    def test_arguments_are_rerolled_on_each_use(self):
        """A parameter used twice evaluates its argument twice."""
        env = env_with('"x" dup => x + x')
        interp = Interpreter(rng=ScriptedRandom(2, 5))
        assert execute("(1D6)dup", env, interp) == int_val(7)
        assert len(interp.rng.requests) == 2

    def test_unused_dice_are_not_rolled(self):
        env = env_with('zero "x" => 0')
        interp = Interpreter(rng=ScriptedRandom())
        assert execute("zero(5D6)", env, interp) == int_val(0)
        assert interp.rng.requests == []

    def test_session_uses_interpreter_rng(self):
        session = Session(Interpreter(rng=ScriptedRandom(1, 2, 3)))
        session.run_line('"n" rolls => (n)D6')
        assert session.run_line("3rolls").value == int_val(6)
