#!/usr/bin/env python3
"""
Command-line shell for dyce.

Usage:
    python -m dyce                       interactive shell
    python -m dyce -e EXPR [-e EXPR ...] evaluate and exit
    python -m dyce --ast -e EXPR         print the parse tree instead
    python -m dyce --builtins            list built-in commands

Examples:
    # Roll three six-sided dice
    python -m dyce -e "3D6"

    # Reproducible rolls
    python -m dyce --seed 42 -e "2d20 + 5"

    # Define a command, then use it
    python -m dyce -e 'times "x" y => x * y' -e "2times3"

Environment:
    DYCE_PROMPT   prompt for the interactive shell (default ">> ")
    DYCE_SEED     seed for the dice roller; --seed wins
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from .ast import format_ast
from .errors import DyceError
from .runtime import Interpreter, Session, get_builtin_registry

logger = logging.getLogger(__name__)

DEFAULT_PROMPT = ">> "


def parse_seed(text: str) -> int:
    """Parse a seed given on the command line or in DYCE_SEED."""
    try:
        return int(text.strip())
    except ValueError:
        raise ValueError(f"Invalid seed: {text!r} (expected an integer)")


def configure_logging(verbose: bool) -> None:
    """Send log records to stderr, at DEBUG when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def run_line(session: Session, text: str, show_ast: bool = False) -> bool:
    """Run or parse one line, printing the outcome. Returns success."""
    if show_ast:
        if not text.strip():
            return True
        try:
            node = session.parse(text)
        except DyceError as e:
            print(e, file=sys.stderr)
            return False
        print(format_ast(node))
        return True

    result = session.run_line(text)
    if not result.success:
        print(result.error_message, file=sys.stderr)
        return False
    output = result.format()
    if output:
        print(output)
    return True


def cmd_eval(session: Session, expressions: List[str], show_ast: bool) -> int:
    """Run each -e argument in order."""
    failures = 0
    for text in expressions:
        if not run_line(session, text, show_ast):
            failures += 1
    if failures:
        logger.debug("%d of %d expression(s) failed", failures, len(expressions))
        return 1
    return 0


def cmd_builtins() -> int:
    """List the built-in commands."""
    commands = get_builtin_registry().commands()
    print(f"Built-in commands ({len(commands)}):")
    for command in commands:
        print(f"  {command.form}: {command.doc}")
    return 0


def cmd_repl(session: Session, prompt: str, show_ast: bool) -> int:
    """Read lines until end of input."""
    while True:
        try:
            text = input(prompt)
        except EOFError:
            print()
            return 0
        except KeyboardInterrupt:
            print()
            continue
        try:
            run_line(session, text, show_ast)
        except KeyboardInterrupt:
            print("interrupted", file=sys.stderr)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog='python -m dyce',
        description='Evaluate dice expressions',
    )
    parser.add_argument('-e', '--eval', action='append', metavar='EXPR', dest='expressions',
                        help='Evaluate EXPR and exit (can be repeated)')
    parser.add_argument('--seed', metavar='N',
                        help='Seed the dice roller (overrides DYCE_SEED)')
    parser.add_argument('--fresh', action='store_true',
                        help='Give every line its own empty environment')
    parser.add_argument('--ast', action='store_true',
                        help='Print the parse tree instead of evaluating')
    parser.add_argument('--builtins', action='store_true',
                        help='List the built-in commands and exit')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable debug logging')

    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    seed_text = args.seed if args.seed is not None else os.environ.get('DYCE_SEED')
    seed = None
    if seed_text:
        try:
            seed = parse_seed(seed_text)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 2
        logger.debug("dice seeded with %d", seed)

    if args.builtins:
        return cmd_builtins()

    session = Session(Interpreter(seed=seed), fresh=args.fresh)

    if args.expressions:
        return cmd_eval(session, args.expressions, args.ast)

    prompt = os.environ.get('DYCE_PROMPT', DEFAULT_PROMPT)
    return cmd_repl(session, prompt, args.ast)


if __name__ == '__main__':
    sys.exit(main())
