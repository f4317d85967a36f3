"""
Front end tests for Calx
Script mode, inspection flags and REPL line handling
"""

import pytest
import main
from main import eval_line, main as calx_main
from interpreter import create_interpreter
from parsing import create_parser


@pytest.fixture
def script(tmp_path):
  """Write source to a script file and return its path"""
  def _script(source):
    path = tmp_path / "script.calx"
    path.write_text(source, encoding="utf-8")
    return str(path)

  return _script


class TestScriptMode:
  """Test running files from the command line"""

  def test_prints_last_value(self, script, capsys):
    calx_main([script("let x = 1 + 2; x * 3")])
    assert capsys.readouterr().out == "9.0\n"

  def test_all_prints_every_statement(self, script, capsys):
    calx_main(["--all", script('let s = "ab"; s * 2; 1 / 0')])
    assert capsys.readouterr().out == '()\n"abab"\ninf\n'

  def test_empty_script_prints_unit(self, script, capsys):
    calx_main([script("")])
    assert capsys.readouterr().out == "()\n"

  def test_tokens(self, script, capsys):
    calx_main(["--tokens", script("let x = 1")])
    assert capsys.readouterr().out.splitlines() == [
      "    0     3  LET",
      "    4     5  IDENTIFIER('x')",
      "    6     7  EQUAL",
      "    8     9  NUMBER(1.0)",
    ]

  def test_parse(self, script, capsys):
    calx_main(["--parse", script("let x = 1+2; x*3")])
    assert capsys.readouterr().out == "let x = (1.0 + 2.0);\n(x * 3.0);\n"

  def test_eval_error_exits(self, script, capsys):
    path = script("x + 1")
    with pytest.raises(SystemExit) as exc_info:
      calx_main([path])
    assert exc_info.value.code == 1
    assert capsys.readouterr().out == f"EvalError in '{path}': undefined variable: x\n"

  def test_parse_error_exits(self, script, capsys):
    with pytest.raises(SystemExit) as exc_info:
      calx_main([script("1 +")])
    assert exc_info.value.code == 1
    assert capsys.readouterr().out.startswith("ParseError in ")

  def test_deep_nesting_exits_as_parse_error(self, script, capsys):
    path = script("(" * 3000 + "1" + ")" * 3000)
    with pytest.raises(SystemExit) as exc_info:
      calx_main([path])
    assert exc_info.value.code == 1
    assert capsys.readouterr().out == f"ParseError in '{path}': maximum nesting depth exceeded\n"

  def test_lexical_error_exits(self, script, capsys):
    path = script('"never closed')
    with pytest.raises(SystemExit):
      calx_main([path])
    assert capsys.readouterr().out == f"LexicalError in '{path}': unexpected end of file\n"

  def test_lexical_error_in_tokens_mode(self, script, capsys):
    with pytest.raises(SystemExit):
      calx_main(["--tokens", script("1 + #")])
    out = capsys.readouterr().out
    assert "    0     1  NUMBER(1.0)" in out
    assert "unexpected character: '#'" in out

  def test_missing_script(self, tmp_path, capsys):
    with pytest.raises(SystemExit) as exc_info:
      calx_main([str(tmp_path / "missing.calx")])
    assert exc_info.value.code == 1
    assert "does not exist" in capsys.readouterr().out

  def test_version(self, capsys):
    with pytest.raises(SystemExit) as exc_info:
      calx_main(["--version"])
    assert exc_info.value.code == 0
    assert "Calx v0.1.0" in capsys.readouterr().out

  def test_debug_traces_stages(self, script, capsys):
    calx_main(["--debug", script("1 + 2")])
    out = capsys.readouterr().out
    assert "Parsed: (1.0 + 2.0);" in out
    assert "Evaluating: " in out
    assert out.endswith("3.0\n")


class TestReplLines:
  """Test evaluation of single REPL lines"""

  @pytest.fixture
  def session(self):
    return create_interpreter(), create_parser()

  def test_bindings_persist_across_lines(self, session):
    interpreter, parser = session
    assert eval_line("let x = 2", interpreter, parser) == ["=> ()"]
    assert eval_line("def sq(n) = n * n", interpreter, parser) == ["=> ()"]
    assert eval_line("sq(x) + 1", interpreter, parser) == ["=> 5.0"]

  def test_errors_are_reported_and_session_continues(self, session):
    interpreter, parser = session
    eval_line("let x = 2", interpreter, parser)
    assert eval_line("y", interpreter, parser) == ["EvalError: undefined variable: y"]
    assert eval_line("$", interpreter, parser) == ["LexicalError: unexpected character: '$'"]
    assert eval_line("1 +", interpreter, parser)[0].startswith("ParseError: ")
    assert eval_line("x", interpreter, parser) == ["=> 2.0"]

  def test_failed_line_binds_nothing(self, session):
    interpreter, parser = session
    eval_line("let a = 1; let b = nope", interpreter, parser)
    assert "a" not in interpreter.env

  def test_huge_repeat_count_is_an_eval_error(self, session):
    interpreter, parser = session
    assert eval_line('"ab" * 1e19', interpreter, parser) == ["EvalError: bad operand type"]
    assert eval_line('"" * 1e19', interpreter, parser) == ['=> ""']

  def test_deep_nesting_is_a_parse_error(self, session):
    interpreter, parser = session
    source = "(" * 3000 + "1" + ")" * 3000
    assert eval_line(source, interpreter, parser) == ["ParseError: maximum nesting depth exceeded"]
    assert eval_line("1 + 1", interpreter, parser) == ["=> 2.0"]

  def test_runaway_recursion(self, session):
    interpreter, parser = session
    eval_line("def loop() = loop()", interpreter, parser)
    assert eval_line("loop()", interpreter, parser) == ["EvalError: maximum recursion depth exceeded"]
    assert eval_line("1 + 1", interpreter, parser) == ["=> 2.0"]


class TestInteractiveMode:
  """Test the REPL loop with scripted input"""

  def feed(self, monkeypatch, lines):
    inputs = iter(lines)

    def fake_input(prompt=""):
      try:
        return next(inputs)
      except StopIteration:
        raise EOFError

    monkeypatch.setattr("builtins.input", fake_input)
    monkeypatch.setattr(main, "READLINE_AVAILABLE", False)

  def test_session(self, monkeypatch, capsys):
    self.feed(monkeypatch, ["let x = 2", "", ":env", "x + 1", ":quit", "never read"])
    calx_main([])
    out = capsys.readouterr().out
    assert "Interactive Mode" in out
    assert "  x = 2.0" in out
    assert "=> 3.0" in out

  def test_end_of_input_exits(self, monkeypatch, capsys):
    self.feed(monkeypatch, [":help"])
    calx_main([])
    out = capsys.readouterr().out
    assert "REPL Commands:" in out
    assert "Goodbye!" in out
