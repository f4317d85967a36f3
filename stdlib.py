"""
Calx Standard Library
Built-in operator semantics over the runtime value lattice
Pure functions: values in, new value out
"""

from typing import Callable, Dict
import math
import operator
import sys

from syntax import BinaryOperator, UnaryOperator
from utilities import binary_arithmetic_op, ieee_div, operation_error
from values import Value, Number, String


# ============================================================================
# ARITHMETIC
# ============================================================================

def calx_add(x: Value, y: Value) -> Value:
  """Addition for numbers, concatenation for strings"""
  if isinstance(x, Number) and isinstance(y, Number):
    return Number(x.value + y.value)
  elif isinstance(x, String) and isinstance(y, String):
    return String(x.value + y.value)
  raise operation_error("+", x, y)


calx_sub = binary_arithmetic_op(operator.sub, "-")
calx_div = binary_arithmetic_op(ieee_div, "/")


def calx_mul(x: Value, y: Value) -> Value:
  """Multiplication for numbers, repetition for string * number.

  The repeat count is truncated toward zero; negative and NaN counts
  give the empty string. Counts too large for an index are bad operands.
  """
  if isinstance(x, Number) and isinstance(y, Number):
    return Number(x.value * y.value)
  elif isinstance(x, String) and isinstance(y, Number):
    count = y.value
    if not x.value or math.isnan(count) or count <= 0:
      return String("")
    if count > sys.maxsize:
      raise operation_error("*", x, y)
    return String(x.value * int(count))
  raise operation_error("*", x, y)


def calx_neg(x: Value) -> Value:
  """Arithmetic negation"""
  if isinstance(x, Number):
    return Number(-x.value)
  raise operation_error("-", x)


# ============================================================================
# OPERATOR TABLES
# ============================================================================

BUILTIN_OPERATORS: Dict[BinaryOperator, Callable[[Value, Value], Value]] = {
    BinaryOperator.ADD: calx_add,
    BinaryOperator.SUB: calx_sub,
    BinaryOperator.MUL: calx_mul,
    BinaryOperator.DIV: calx_div,
}

UNARY_OPERATORS: Dict[UnaryOperator, Callable[[Value], Value]] = {
    UnaryOperator.NEG: calx_neg,
}
