"""
Command environment for the dyce interpreter.

An Environment maps (name, calling shape) to a command body. It is never
mutated while a call is in progress: each call extends a copy of the caller's
environment with its parameter bindings and drops it on return, so sibling
subexpressions never see each other's parameters.

Scoping is dynamic. A body resolves free names against the environment
active at call time, not the one it was defined in, so commands may refer
to each other (or to themselves) in any definition order.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

from .values import Value
from ..ast import Expression, FunctionKind, CommandDefinition, Program
from ..errors import error_unknown_command, error_arity
from ..tokens import SourceSpan

if TYPE_CHECKING:
    from .interpreter import Interpreter


@dataclass(frozen=True)
class FunctionForm:
    """
    Environment key: a command name together with its calling shape.

    The same name may be bound once per shape, so prefix `d` and postfix
    `d` are unrelated commands.
    """
    name: str
    kind: FunctionKind

    def __str__(self) -> str:
        return f"{self.kind.value} {self.name}"


class Command(ABC):
    """Something a (name, shape) pair can resolve to."""

    @abstractmethod
    def call(
        self,
        form: FunctionForm,
        arguments: Sequence[Expression],
        env: "Environment",
        interpreter: "Interpreter",
        span: Optional[SourceSpan] = None,
    ) -> Value:
        """Invoke with unevaluated argument expressions."""


@dataclass(frozen=True)
class Function(Command):
    """A user-defined command: a body and its ordered parameter names."""
    body: Expression
    parameters: Tuple[str, ...] = ()

    def call(
        self,
        form: FunctionForm,
        arguments: Sequence[Expression],
        env: "Environment",
        interpreter: "Interpreter",
        span: Optional[SourceSpan] = None,
    ) -> Value:
        if len(arguments) != len(self.parameters):
            raise error_arity(form.name, len(self.parameters), len(arguments), span)

        # Arguments are bound unevaluated; each reference re-evaluates them.
        scope = env.extend(dict(zip(self.parameters, arguments)))
        return interpreter.eval_node(self.body, scope)


class Environment:
    """
    Mapping from FunctionForm to user-defined Function.

    Built-in commands are not stored here; they are consulted first by
    lookup_and_evaluate() and always win over a user binding with the
    same form.
    """

    def __init__(self, store: Optional[Mapping[FunctionForm, Function]] = None):
        self._store: Dict[FunctionForm, Function] = dict(store) if store else {}

    def get(self, form: FunctionForm) -> Optional[Function]:
        """Look up a user binding."""
        return self._store.get(form)

    def insert(self, form: FunctionForm, function: Function) -> Optional[Function]:
        """Bind a form, returning the binding it replaced (if any)."""
        previous = self._store.get(form)
        self._store[form] = function
        return previous

    def define(self, definition: CommandDefinition) -> FunctionForm:
        """Bind a parsed command definition."""
        form = FunctionForm(definition.name, definition.kind)
        self.insert(form, Function(definition.body, definition.parameters))
        return form

    def load(self, program: Program) -> List[FunctionForm]:
        """Bind every definition of a program, later ones shadowing earlier."""
        return [self.define(definition) for definition in program.definitions]

    def copy(self) -> "Environment":
        """Shallow copy; bodies are immutable and shared."""
        return Environment(self._store)

    def extend(self, bindings: Mapping[str, Expression]) -> "Environment":
        """
        Return a copy with each name bound as a nullary command wrapping
        its (unevaluated) expression. This environment is left untouched.
        """
        scope = self.copy()
        for name, expr in bindings.items():
            scope.insert(FunctionForm(name, FunctionKind.NULLARY), Function(expr))
        return scope

    def lookup_and_evaluate(
        self,
        form: FunctionForm,
        arguments: Sequence[Expression],
        interpreter: "Interpreter",
        span: Optional[SourceSpan] = None,
    ) -> Value:
        """
        Resolve a command call and evaluate it.

        Built-ins are tried first, then user bindings.

        Raises:
            UnknownCommandError: Neither a built-in nor a user binding exists
            ArityError: Argument count differs from the parameter count
        """
        command = interpreter.builtins.get(form)
        if command is None:
            command = self.get(form)
        if command is None:
            raise error_unknown_command(form.name, form.kind.value, span)
        return command.call(form, arguments, self, interpreter, span)

    def forms(self) -> Iterable[FunctionForm]:
        """All bound forms, in binding order."""
        return list(self._store)

    def __contains__(self, form: FunctionForm) -> bool:
        return form in self._store

    def __len__(self) -> int:
        return len(self._store)

    def __iter__(self) -> Iterator[FunctionForm]:
        return iter(self.forms())
