import decimal
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Sequence, Union

import mathengine.constants as cst
from mathengine.extra.exceptions import ArityMismatchError, ArithmeticDomainError
from mathengine.number import Number


class Operator(Enum):
    PLUS = "+"
    MINUS = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    POWER = "^"


class Bracket(Enum):
    PAREN_LEFT = "("
    PAREN_RIGHT = ")"
    VERTICAL_LINE = "|"


@dataclass(frozen=True)
class NumberToken:
    value: Number


@dataclass(frozen=True)
class OperatorToken:
    operator: Operator


@dataclass(frozen=True)
class FactorialSign:
    pass


@dataclass(frozen=True)
class BracketToken:
    bracket: Bracket


@dataclass(frozen=True)
class Identifier:
    name: str


@dataclass(frozen=True)
class Comma:
    pass


Token = Union[NumberToken, OperatorToken, FactorialSign, BracketToken, Identifier, Comma]
TOKEN_TYPES = (NumberToken, OperatorToken, FactorialSign, BracketToken, Identifier, Comma)


@dataclass(frozen=True)
class OperatorRule:
    """
    Class representing how an operator is applied
    :param priority: priority of operator
    :param callable_function: function that will be called with left and right operands
    :param is_right: is operator right associative
    """
    priority: float
    callable_function: Callable[[Number, Number], Number]
    is_right: bool = False


@dataclass(frozen=True)
class Variable:
    """
    Class representing a named constant or function
    :param callable_function: function called with 'argc' Decimal arguments
    :param argc: fixed amount of args
    :param validators: list of callable validators will be called before calling 'callable_function'
    :param name: name used in error messages
    """
    callable_function: Callable
    argc: int = 0
    validators: list[Callable] = field(default_factory=list)
    name: str = ""

    @classmethod
    def constant(cls, value: Number | decimal.Decimal | int | str, name: str = "") -> "Variable":
        number = Number(value)
        return cls(lambda: number, 0, [], name)

    def calc(self, args: Sequence[Number]) -> Number:
        """
        Calls the variable with given arguments
        :param args: arguments in left-to-right order
        :return: result of the call
        :raises ArityMismatchError: len(args) differs from argc
        :raises ArithmeticDomainError: arguments are out of the function domain
        """
        if len(args) != self.argc:
            raise ArityMismatchError(
                f"{self.name or 'function'} requires {self.argc} arguments but {len(args)} were given",
                expected=self.argc, given=len(args))
        values = [arg.value for arg in args]
        for valid in self.validators:
            valid(*values, op=self.name)
        try:
            with decimal.localcontext() as ctx:
                ctx.prec = cst.PRECISION
                return Number(self.callable_function(*values))
        except (ValueError, OverflowError, ZeroDivisionError, decimal.DecimalException) as e:
            args_shown = ", ".join(str(arg) for arg in args)
            raise ArithmeticDomainError(f"Cannot calculate {self.name}({args_shown}): {e}", exc_type="undefined")
