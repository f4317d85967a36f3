"""
Utilities module for the Calx interpreter
Evaluation error types, error builders and value display helpers
"""

from typing import Callable, Optional
import math
import operator

from error_handling import CalxError
from lexing import quote_string
from values import Value, Unit, Number, String, Function


# ==================== EVALUATION ERRORS ====================

class EvalError(CalxError):
  """Raised while walking the AST; aborts the statement being evaluated"""
  pass


class UndefinedVariable(EvalError):
  def __init__(self, name: str):
    self.name = name
    super().__init__(f"undefined variable: {name}")


class BadOperandType(EvalError):
  def __init__(self, op: Optional[str] = None, *operand_types: str):
    self.op = op
    self.operand_types = operand_types
    super().__init__("bad operand type")


class UncallableObject(EvalError):
  def __init__(self, type_name: Optional[str] = None):
    self.type_name = type_name
    super().__init__("uncallable object")


class WrongNumberOfArguments(EvalError):
  def __init__(self, expected: int = 0, got: int = 0):
    self.expected = expected
    self.got = got
    super().__init__("wrong number of arguments")


# ==================== TYPE UTILITIES ====================

def type_name(value: Value) -> str:
  """
  Name of a value's runtime type, for diagnostics

  Examples:
    type_name(Number(1.0)) -> "Number"
    type_name(UNIT) -> "Unit"
  """
  return type(value).__name__


# ==================== ERROR MESSAGE BUILDERS ====================

def operation_error(op: str, *operands: Value) -> BadOperandType:
  """
  Generate a bad operand error recording what was attempted

  Args:
    op: Operator symbol
    *operands: Operand values, left to right

  Returns:
    BadOperandType carrying the operand type names
  """
  return BadOperandType(op, *(type_name(v) for v in operands))


def arity_error(func: Function, got: int) -> WrongNumberOfArguments:
  return WrongNumberOfArguments(len(func.params), got)


# ==================== BINARY OPERATION FACTORIES ====================

def binary_arithmetic_op(
  op: Callable[[float, float], float],
  symbol: str
) -> Callable[[Value, Value], Value]:
  """
  Factory for number-only binary operations

  Args:
    op: Python operator function (e.g., operator.sub)
    symbol: Operator symbol for error messages

  Returns:
    Function taking two values and returning a Number

  Examples:
    calx_sub = binary_arithmetic_op(operator.sub, "-")
    calx_sub(Number(3.0), Number(1.0)) -> Number(2.0)
  """
  def arithmetic(x: Value, y: Value) -> Value:
    if isinstance(x, Number) and isinstance(y, Number):
      return Number(op(x.value, y.value))
    raise operation_error(symbol, x, y)

  return arithmetic


def ieee_div(x: float, y: float) -> float:
  """Float division that follows IEEE-754 instead of raising on zero"""
  if y != 0.0:
    return operator.truediv(x, y)
  if x == 0.0 or math.isnan(x):
    return math.nan
  return math.copysign(math.inf, x) * math.copysign(1.0, y)


# ==================== DISPLAY ====================

def format_number(n: float) -> str:
  if math.isnan(n):
    return "NaN"
  return repr(n)


def show_value(value: Value) -> str:
  """
  Render a value for the front end

  Examples:
    show_value(Number(9.0)) -> "9.0"
    show_value(String("ab")) -> '"ab"'
    show_value(UNIT) -> "()"
  """
  if isinstance(value, Unit):
    return "()"
  elif isinstance(value, Number):
    return format_number(value.value)
  elif isinstance(value, String):
    return quote_string(value.value)
  elif isinstance(value, Function):
    return f"<function {value.name}({', '.join(value.params)})>"
  raise TypeError(f"not a Calx value: {value!r}")
