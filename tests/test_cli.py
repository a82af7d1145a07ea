"""
Tests for the dyce command-line shell.
"""

import io
import pytest

import dyce.__main__ as shell
from dyce.__main__ import main, parse_seed


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    monkeypatch.delenv("DYCE_SEED", raising=False)
    monkeypatch.delenv("DYCE_PROMPT", raising=False)


def feed_stdin(monkeypatch, text):
    monkeypatch.setattr("sys.stdin", io.StringIO(text))


class TestEvalOption:
    """Test -e/--eval."""

    def test_single_expression(self, capsys):
        assert main(["-e", "1+2"]) == 0
        assert capsys.readouterr().out == "3\n"

    def test_boolean_result(self, capsys):
        assert main(["--eval", "1<2"]) == 0
        assert capsys.readouterr().out == "true\n"

    def test_definitions_carry_over(self, capsys):
        assert main(["-e", 'times "x" y => x * y', "-e", "2times3"]) == 0
        assert capsys.readouterr().out.splitlines() == ["defined infix times", "6"]

    def test_failure_exit_status(self, capsys):
        assert main(["-e", "1/0"]) == 1
        captured = capsys.readouterr()
        assert "E204" in captured.err
        assert captured.out == ""

    def test_later_expressions_still_run(self, capsys):
        assert main(["-e", "CCB", "-e", "5"]) == 1
        captured = capsys.readouterr()
        assert "E201" in captured.err
        assert captured.out == "5\n"

    def test_syntax_error(self, capsys):
        assert main(["-e", "1 2"]) == 1
        assert "E101" in capsys.readouterr().err

    def test_fresh_forgets_definitions(self, capsys):
        assert main(["--fresh", "-e", "CCB => 10", "-e", "CCB"]) == 1
        assert "unknown nullary command 'CCB'" in capsys.readouterr().err


class TestSeeding:
    """Test --seed and DYCE_SEED."""

    def roll_with(self, capsys, argv):
        assert main(argv + ["-e", "10D100"]) == 0
        return capsys.readouterr().out

    def test_seed_is_reproducible(self, capsys):
        first = self.roll_with(capsys, ["--seed", "3"])
        second = self.roll_with(capsys, ["--seed", "3"])
        assert first == second

    def test_seed_from_environment(self, capsys, monkeypatch):
        from_option = self.roll_with(capsys, ["--seed", "11"])
        monkeypatch.setenv("DYCE_SEED", "11")
        from_env = self.roll_with(capsys, [])
        assert from_option == from_env

    def test_option_wins_over_environment(self, capsys, monkeypatch):
        expected = self.roll_with(capsys, ["--seed", "5"])
        monkeypatch.setenv("DYCE_SEED", "not a number")
        assert self.roll_with(capsys, ["--seed", "5"]) == expected

    def test_invalid_seed(self, capsys):
        assert main(["--seed", "abc", "-e", "1"]) == 2
        assert "Invalid seed" in capsys.readouterr().err

    def test_parse_seed(self):
        assert parse_seed(" 42 ") == 42
        with pytest.raises(ValueError):
            parse_seed("4.2")


class TestAstOption:
    """Test --ast."""

    def test_prints_tree(self, capsys):
        assert main(["--ast", "-e", "1D6"]) == 0
        out = capsys.readouterr().out
        assert out.startswith("InfixCommand")
        assert "name: 'D'" in out

    def test_does_not_evaluate(self, capsys):
        assert main(["--ast", "-e", "1/0"]) == 0
        assert "BinaryExpr" in capsys.readouterr().out

    def test_parse_error(self, capsys):
        assert main(["--ast", "-e", "1+"]) == 1
        assert "E102" in capsys.readouterr().err


class TestRepl:
    """Test the interactive loop."""

    def test_reads_until_eof(self, capsys, monkeypatch):
        feed_stdin(monkeypatch, "1+1\n\nCCB => 10\nCCB\n")
        assert main([]) == 0
        out = capsys.readouterr().out
        assert "2\n" in out
        assert "defined nullary CCB\n" in out
        assert "10\n" in out
        assert out.count(">> ") == 5

    def test_errors_do_not_stop_the_loop(self, capsys, monkeypatch):
        feed_stdin(monkeypatch, "1/0\n3\n")
        assert main([]) == 0
        captured = capsys.readouterr()
        assert "E204" in captured.err
        assert "3\n" in captured.out

    def test_prompt_from_environment(self, capsys, monkeypatch):
        monkeypatch.setenv("DYCE_PROMPT", "dice? ")
        feed_stdin(monkeypatch, "1\n")
        assert main([]) == 0
        assert "dice? " in capsys.readouterr().out

    def test_interrupted_line_keeps_the_shell_alive(self, capsys, monkeypatch):
        seen = []

        def interrupt_first(session, text, show_ast=False):
            seen.append(text)
            if len(seen) == 1:
                raise KeyboardInterrupt
            return True

        monkeypatch.setattr(shell, "run_line", interrupt_first)
        feed_stdin(monkeypatch, "1000000000000D6\n2\n")
        assert main([]) == 0
        assert seen == ["1000000000000D6", "2"]
        assert "interrupted" in capsys.readouterr().err


class TestBuiltinsOption:
    """Test --builtins."""

    def test_lists_dice(self, capsys):
        assert main(["--builtins"]) == 0
        out = capsys.readouterr().out
        assert "Built-in commands (2):" in out
        assert "infix D: COUNT D SIDES" in out
        assert "infix d: COUNT d SIDES" in out
