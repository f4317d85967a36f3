"""
Calx Runtime Values
Immutable values produced by evaluation: unit, number, string, function
"""

from typing import Tuple, Union
from dataclasses import dataclass

from syntax import Expr


@dataclass(frozen=True)
class Unit:
  """Result of a statement with no meaningful value"""
  pass


UNIT = Unit()


@dataclass(frozen=True)
class Number:
  value: float


@dataclass(frozen=True)
class String:
  # str is immutable, so values share their text without copying
  value: str


@dataclass(frozen=True)
class Function:
  """User-defined function.

  Holds no environment: free names in the body are resolved against
  the environment at the call site.
  """
  name: str
  params: Tuple[str, ...]
  body: Expr


Value = Union[Unit, Number, String, Function]
