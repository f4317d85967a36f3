"""
Calx Abstract Syntax Tree
Immutable expression and statement nodes produced by the parser
"""

from typing import Tuple, Union
from dataclasses import dataclass
from enum import Enum
import math

from lexing import quote_string


class UnaryOperator(Enum):
    NEG = "-"

    def __str__(self) -> str:
        return self.value


class BinaryOperator(Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"

    def __str__(self) -> str:
        return self.value


# ============================================================================
# EXPRESSIONS
# ============================================================================

@dataclass(frozen=True)
class Number:
    value: float

    def __str__(self) -> str:
        # Overflowing literals lex back to infinity
        if math.isinf(self.value):
            return "1e999" if self.value > 0 else "-1e999"
        return repr(self.value)


@dataclass(frozen=True)
class String:
    value: str

    def __str__(self) -> str:
        return quote_string(self.value)


@dataclass(frozen=True)
class UnaryOp:
    op: UnaryOperator
    operand: 'Expr'

    def __str__(self) -> str:
        return f"{self.op}{self.operand}"


@dataclass(frozen=True)
class BinaryOp:
    op: BinaryOperator
    left: 'Expr'
    right: 'Expr'

    def __str__(self) -> str:
        return f"({self.left} {self.op} {self.right})"


@dataclass(frozen=True)
class Variable:
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Apply:
    func: 'Expr'
    args: Tuple['Expr', ...]

    def __str__(self) -> str:
        args = ", ".join(str(arg) for arg in self.args)
        return f"{self.func}({args})"


@dataclass(frozen=True)
class Let:
    """Inline `let name = bound in body`; the binding is local to body"""
    name: str
    bound: 'Expr'
    body: 'Expr'

    def __str__(self) -> str:
        return f"(let {self.name} = {self.bound} in {self.body})"


Expr = Union[Number, String, UnaryOp, BinaryOp, Variable, Apply, Let]


# ============================================================================
# STATEMENTS
# ============================================================================

@dataclass(frozen=True)
class ExprStmt:
    expr: Expr

    def __str__(self) -> str:
        return f"{self.expr};"


@dataclass(frozen=True)
class Def:
    name: str
    params: Tuple[str, ...]
    body: Expr

    def __str__(self) -> str:
        params = ", ".join(self.params)
        return f"def {self.name}({params}) = {self.body};"


@dataclass(frozen=True)
class LetStmt:
    """Top-level `let name = expr`; the binding persists for later statements"""
    name: str
    expr: Expr

    def __str__(self) -> str:
        return f"let {self.name} = {self.expr};"


Stmt = Union[ExprStmt, Def, LetStmt]
Program = Tuple[Stmt, ...]


def format_program(program: Program) -> str:
    """Render a program one statement per line"""
    return "\n".join(str(stmt) for stmt in program)
