"""
Calx Interpreter - Pure Functional Style
Tree-walking evaluation threading an immutable environment through statements
Side effects (I/O, sessions) are handled by the front end
"""

from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from stdlib import BUILTIN_OPERATORS, UNARY_OPERATORS
from syntax import (
  Expr, Stmt,
  Number as NumberExpr, String as StringExpr,
  UnaryOp, BinaryOp, Variable, Apply, Let,
  ExprStmt, Def, LetStmt,
)
from utilities import (
  EvalError,
  UndefinedVariable,
  BadOperandType,
  UncallableObject,
  WrongNumberOfArguments,
  arity_error,
  type_name,
)
from values import Value, UNIT, Number, String, Function


__all__ = [
  "Environment", "EvalError", "UndefinedVariable", "BadOperandType",
  "UncallableObject", "WrongNumberOfArguments",
  "eval_program", "eval_program_values", "eval_stmt", "eval_expr",
  "Interpreter", "create_interpreter", "create_debug_interpreter",
]


# ============================================================================
# ENVIRONMENT
# ============================================================================

class Environment:
  """Immutable name-to-value mapping with structural sharing.

  Each extension is a new node holding one binding and pointing at the
  environment it extends, so older snapshots stay valid and share all
  of their bindings with newer ones.
  """

  __slots__ = ('_parent', '_name', '_value')

  def __init__(self, parent: Optional['Environment'] = None,
               name: Optional[str] = None, value: Optional[Value] = None):
    self._parent = parent
    self._name = name
    self._value = value

  def with_variable(self, name: str, value: Value) -> 'Environment':
    """Return a new environment where name is bound to value"""
    return Environment(self, name, value)

  def _nodes(self) -> Iterator['Environment']:
    node = self
    while node is not None and node._parent is not None:
      yield node
      node = node._parent

  def lookup(self, name: str) -> Optional[Value]:
    """Look up a value, nearest binding first"""
    for node in self._nodes():
      if node._name == name:
        return node._value
    return None

  def __contains__(self, name: str) -> bool:
    return any(node._name == name for node in self._nodes())

  def names(self) -> List[str]:
    """Visible names, most recently bound first"""
    seen: List[str] = []
    for node in self._nodes():
      if node._name not in seen:
        seen.append(node._name)
    return seen

  def bindings(self) -> Dict[str, Value]:
    """Visible bindings in definition order"""
    return {name: self.lookup(name) for name in reversed(self.names())}

  def __len__(self) -> int:
    return len(self.names())

  def __repr__(self) -> str:
    inner = ", ".join(f"{name}={value!r}" for name, value in self.bindings().items())
    return f"Environment({inner})"


# ============================================================================
# PROGRAM EVALUATION
# ============================================================================

def eval_program(env: Environment, program: Sequence[Stmt], debug: bool = False) -> Tuple[Value, Environment]:
  """
  Evaluate statements left to right, each seeing the bindings of the ones before.
  Returns (last_value, final_environment); an empty program yields (UNIT, env).
  """
  last_value: Value = UNIT
  for stmt in program:
    last_value, env = eval_stmt(env, stmt, debug)
  return last_value, env


def eval_program_values(env: Environment, program: Sequence[Stmt], debug: bool = False) -> Tuple[List[Value], Environment]:
  """Like eval_program, but collects every statement's value in order"""
  results = []
  for stmt in program:
    value, env = eval_stmt(env, stmt, debug)
    results.append(value)
  return results, env


def eval_stmt(env: Environment, stmt: Stmt, debug: bool = False) -> Tuple[Value, Environment]:
  """Evaluate one statement and return (value, updated_environment)"""
  if debug:
    print(f"Evaluating: {stmt}")

  if isinstance(stmt, ExprStmt):
    return eval_expr(env, stmt.expr, debug), env
  elif isinstance(stmt, Def):
    # The body is kept unevaluated until the function is applied
    func = Function(stmt.name, stmt.params, stmt.body)
    return UNIT, env.with_variable(stmt.name, func)
  elif isinstance(stmt, LetStmt):
    value = eval_expr(env, stmt.expr, debug)
    return UNIT, env.with_variable(stmt.name, value)
  raise TypeError(f"unknown statement node: {stmt!r}")


# ============================================================================
# EXPRESSION EVALUATION
# ============================================================================

def eval_expr(env: Environment, expr: Expr, debug: bool = False) -> Value:
  """Evaluate an expression against env; env itself is never changed"""
  if debug:
    print(f"Evaluating: {expr}")

  if isinstance(expr, NumberExpr):
    return Number(expr.value)
  elif isinstance(expr, StringExpr):
    return String(expr.value)
  elif isinstance(expr, UnaryOp):
    operand = eval_expr(env, expr.operand, debug)
    return UNARY_OPERATORS[expr.op](operand)
  elif isinstance(expr, BinaryOp):
    left = eval_expr(env, expr.left, debug)
    right = eval_expr(env, expr.right, debug)
    return BUILTIN_OPERATORS[expr.op](left, right)
  elif isinstance(expr, Variable):
    return eval_variable(env, expr.name)
  elif isinstance(expr, Let):
    bound = eval_expr(env, expr.bound, debug)
    return eval_expr(env.with_variable(expr.name, bound), expr.body, debug)
  elif isinstance(expr, Apply):
    return eval_apply(env, expr.func, expr.args, debug)
  raise TypeError(f"unknown expression node: {expr!r}")


def eval_variable(env: Environment, name: str) -> Value:
  value = env.lookup(name)
  if value is None:
    raise UndefinedVariable(name)
  return value


def eval_apply(env: Environment, func_expr: Expr, args: Sequence[Expr], debug: bool = False) -> Value:
  """
  Apply a user function.

  Arguments are evaluated against the caller's environment, and the
  parameters are bound on top of that same environment: the body sees
  the call site's bindings, not the ones in scope at the `def`.
  """
  func = eval_expr(env, func_expr, debug)
  if not isinstance(func, Function):
    raise UncallableObject(type_name(func))
  if len(args) != len(func.params):
    raise arity_error(func, len(args))

  call_env = env
  for param, arg in zip(func.params, args):
    call_env = call_env.with_variable(param, eval_expr(env, arg, debug))

  if debug:
    print(f"Calling: {func.name}({', '.join(func.params)})")
  return eval_expr(call_env, func.body, debug)


# ============================================================================
# FACTORY FUNCTIONS (for main.py)
# ============================================================================

class Interpreter:
  """Holds an environment across units of work, as the REPL needs"""

  def __init__(self, env: Optional[Environment] = None, debug: bool = False):
    self.env = env if env is not None else Environment()
    self.debug = debug

  def run(self, program: Sequence[Stmt]) -> Value:
    """Evaluate program; the stored environment changes only on success"""
    value, self.env = eval_program(self.env, program, self.debug)
    return value

  def run_all(self, program: Sequence[Stmt]) -> List[Value]:
    values, self.env = eval_program_values(self.env, program, self.debug)
    return values


def create_interpreter(debug: bool = False) -> Interpreter:
  """Factory function returning an interpreter with an empty environment"""
  return Interpreter(debug=debug)


def create_debug_interpreter() -> Interpreter:
  """Factory function returning a debug interpreter"""
  return create_interpreter(debug=True)
