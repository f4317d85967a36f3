"""
Calx Programming Language - Main Entry Point
Runs source files or an interactive session on top of the Calx core
"""

import sys
import argparse
from pathlib import Path
from typing import List, Optional
import os

# Readline support for history and auto-completion
try:
  import readline
  READLINE_AVAILABLE = True
except ImportError:
  READLINE_AVAILABLE = False

from error_handling import CalxError, error_kind
from interpreter import Environment, create_interpreter
from lexing import KEYWORDS
from parsing import create_parser
from syntax import format_program
from utilities import show_value

VERSION = "Calx v0.1.0"
HISTORY_FILE = "~/.calx_history"
PROMPT = ">> "
NESTING_MESSAGE = "maximum nesting depth exceeded"
RECURSION_MESSAGE = "maximum recursion depth exceeded"


def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = argparse.ArgumentParser(
      prog='calx',
      description='Calx - a small expression language interpreter',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s script.calx            # Run a Calx script
  %(prog)s -i                     # Interactive mode
  %(prog)s --tokens script.calx   # Show the token stream
  %(prog)s --parse script.calx    # Parse and show the AST
  %(prog)s --all script.calx      # Show the value of every statement
  %(prog)s --debug script.calx    # Run with debug output
        """
  )

  parser.add_argument(
      'script',
      nargs='?',
      help='Calx script file to execute'
  )

  parser.add_argument(
      '-i', '--interactive',
      action='store_true',
      help='Start interactive mode'
  )

  parser.add_argument(
      '--tokens',
      action='store_true',
      help='Lex file and show (start, token, end) spans'
  )

  parser.add_argument(
      '--parse',
      action='store_true',
      help='Parse file and show the AST'
  )

  parser.add_argument(
      '--all',
      action='store_true',
      help='Print the value of every statement, not just the last'
  )

  parser.add_argument(
      '--debug',
      action='store_true',
      help='Enable debug output for all stages'
  )

  parser.add_argument(
      '--version',
      action='version',
      version=VERSION
  )

  return parser


def read_source(script_path: str) -> str:
  """Read a script, exiting with a hint when it cannot be read"""
  try:
    with open(script_path, 'r', encoding='utf-8') as f:
      return f.read()
  except FileNotFoundError:
    print(f"Error: Script file '{script_path}' not found")
    print(f"  Hint: Check the file path and make sure the file exists")
  except PermissionError:
    print(f"Error: Permission denied reading '{script_path}'")
    print(f"  Hint: Make sure you have read permissions for this file")
  except UnicodeDecodeError as e:
    print(f"Error: Cannot decode file '{script_path}': {e}")
    print(f"  Hint: Make sure the file is a text file with UTF-8 encoding")
  sys.exit(1)


def report_error(error: CalxError, script_path: Optional[str] = None) -> None:
  """Print an error the way both file and interactive modes show it"""
  where = f" in '{script_path}'" if script_path else ""
  print(f"{error_kind(error)}{where}: {error}")


def show_tokens(script_path: str, debug: bool = False) -> None:
  """Lex a Calx script file and show its token spans"""
  source = read_source(script_path)
  parser = create_parser(debug)

  try:
    for start, token, end in parser.tokenize(source):
      print(f"{start:5d} {end:5d}  {token}")
  except CalxError as e:
    report_error(e, script_path)
    sys.exit(1)


def parse_source(parser, source: str, script_path: str):
  """Parse a script's source; any error is fatal"""
  try:
    return parser.parse_string(source)
  except CalxError as e:
    report_error(e, script_path)
  except RecursionError:
    print(f"ParseError in '{script_path}': {NESTING_MESSAGE}")
  sys.exit(1)


def parse_file(script_path: str, debug: bool = False) -> None:
  """Parse a Calx script file and show the AST"""
  source = read_source(script_path)
  parser = create_parser(debug)

  print(format_program(parse_source(parser, source, script_path)))


def run_script_file(script_path: str, show_all: bool = False, debug: bool = False) -> None:
  """Run a Calx script file; any error is fatal"""
  source = read_source(script_path)
  parser = create_parser(debug)
  interpreter = create_interpreter(debug)

  program = parse_source(parser, source, script_path)
  try:
    if show_all:
      for value in interpreter.run_all(program):
        print(show_value(value))
    else:
      print(show_value(interpreter.run(program)))
  except CalxError as e:
    report_error(e, script_path)
    sys.exit(1)
  except RecursionError:
    print(f"EvalError in '{script_path}': {RECURSION_MESSAGE}")
    sys.exit(1)


# ============================================================================
# INTERACTIVE MODE
# ============================================================================

REPL_COMMANDS = [":env", ":help", ":quit"]


def setup_readline() -> None:
  """Setup readline with history and auto-completion"""
  if not READLINE_AVAILABLE:
    return

  history_file = os.path.expanduser(HISTORY_FILE)
  try:
    readline.read_history_file(history_file)
  except OSError:
    pass  # first run, no history yet

  readline.set_history_length(1000)

  completions = sorted(KEYWORDS) + REPL_COMMANDS

  def completer(text, state):
    options = [cmd for cmd in completions if cmd.startswith(text)]
    if state < len(options):
      return options[state]
    return None

  readline.set_completer(completer)
  readline.parse_and_bind("tab: complete")

  import atexit
  atexit.register(_write_history, history_file)


def _write_history(history_file: str) -> None:
  try:
    readline.write_history_file(history_file)
  except OSError:
    pass  # history is best effort


def print_environment(env: Environment) -> None:
  print("Current environment:")
  bindings = env.bindings()
  if not bindings:
    print("  (no bindings)")
  for name, value in bindings.items():
    val_str = show_value(value)
    if len(val_str) > 60:
      val_str = val_str[:57] + "..."
    print(f"  {name} = {val_str}")


def print_help() -> None:
  print("REPL Commands:")
  print("  :env              - Show current environment")
  print("  :help             - Show this help")
  print("  :quit             - Exit REPL")
  print()
  print("Language features:")
  print("  let x = 1 + 2              - Binding, visible to later lines")
  print("  let y = 2 in y * y         - Local binding")
  print("  def f(a, b) = a * b + x    - Function definition")
  print("  f(3, 4)                    - Function call")
  print("  \"ab\" + \"cd\"; \"ab\" * 3      - String concatenation and repetition")


def eval_line(line: str, interpreter, parser) -> List[str]:
  """Evaluate one REPL line, returning the lines to print.

  A failing line leaves the interpreter's environment as it was.
  """
  try:
    program = parser.parse_string(line)
  except CalxError as e:
    return [f"{error_kind(e)}: {e}"]
  except RecursionError:
    return [f"ParseError: {NESTING_MESSAGE}"]

  try:
    value = interpreter.run(program)
  except CalxError as e:
    return [f"{error_kind(e)}: {e}"]
  except RecursionError:
    return [f"EvalError: {RECURSION_MESSAGE}"]
  return [f"=> {show_value(value)}"]


def run_interactive_mode(debug: bool = False) -> None:
  """Run Calx in interactive mode, keeping bindings across lines"""
  print(f"{VERSION} - Interactive Mode")
  print("Type ':quit' to exit, ':help' for commands")
  if debug:
    print("Debug mode enabled")
  print()

  setup_readline()

  parser = create_parser(debug)
  interpreter = create_interpreter(debug)

  while True:
    try:
      line = input(PROMPT)
    except (KeyboardInterrupt, EOFError):
      print("\nGoodbye!")
      break

    command = line.strip()
    if not command:
      continue
    if command == ":quit":
      break
    if command == ":help":
      print_help()
      continue
    if command == ":env":
      print_environment(interpreter.env)
      continue

    for output in eval_line(line, interpreter, parser):
      print(output)
    print()


def main(argv: Optional[List[str]] = None) -> None:
  """Main entry point for Calx"""
  arg_parser = create_arg_parser()
  args = arg_parser.parse_args(argv)

  if args.script:
    if not Path(args.script).exists():
      print(f"Error: Script file '{args.script}' does not exist")
      sys.exit(1)

    if args.tokens:
      show_tokens(args.script, debug=args.debug)
    elif args.parse:
      parse_file(args.script, debug=args.debug)
    else:
      run_script_file(args.script, show_all=args.all, debug=args.debug)
  else:
    run_interactive_mode(debug=args.debug)


if __name__ == "__main__":
  main()
