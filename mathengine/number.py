import decimal
import logging
import math
from functools import total_ordering
from typing import Union

import mathengine.constants as cst
from mathengine.extra.exceptions import ArithmeticDomainError
from mathengine.extra.utils import check_is_integer, estimate_digits, round_decimal

logger = logging.getLogger(__name__)


def _context() -> decimal.Context:
    return decimal.Context(prec=cst.PRECISION, rounding=cst.ROUNDING,
                           traps=[decimal.DivisionByZero, decimal.InvalidOperation, decimal.Overflow])


def _check_digits(operation, a: decimal.Decimal, b: decimal.Decimal | None = None) -> None:
    """
    Refuses operations whose result would be too long
    :raises ArithmeticDomainError: estimated result exceeds MAXIMUM_DIGITS
    """
    shown = f"{a}{operation}" if b is None else f"{a} {operation} {b}"
    try:
        with decimal.localcontext(_context()):
            n_digits = estimate_digits(operation, a, b)
    except decimal.Overflow:
        raise ArithmeticDomainError(f"Operation {shown} leads to too many digits", exc_type="overflow")
    if n_digits > cst.MAXIMUM_DIGITS:
        raise ArithmeticDomainError(
            f"Operation {shown} will lead to at least {n_digits:.0f} digits out of maximum of {cst.MAXIMUM_DIGITS}",
            exc_type="overflow")
    if n_digits > cst.MAXIMUM_DIGITS_WARNING:
        logger.warning(
            f"Operation {shown} will lead to at least {n_digits:.0f} digits(warning set on {cst.MAXIMUM_DIGITS_WARNING})")


@total_ordering
class Number:
    """
    Arithmetic value used by the engine. Wraps decimal.Decimal, every operation returns a new Number
    :param value: int, str, Decimal or another Number. Number() is zero
    """
    __slots__ = ("value",)

    def __init__(self, value: Union["Number", decimal.Decimal, int, str] = 0):
        if isinstance(value, Number):
            value = value.value
        try:
            self.value = decimal.Decimal(value)
        except decimal.InvalidOperation:
            raise ArithmeticDomainError(f"'{value}' is not a number", exc_type="undefined")
        if not self.value.is_finite():
            raise ArithmeticDomainError(f"'{value}' is not a finite number", exc_type="undefined")

    def _run(self, operation: str, other: "Number", function) -> "Number":
        try:
            with decimal.localcontext(_context()):
                return Number(+function(self.value, other.value))
        except decimal.DivisionByZero:
            raise ArithmeticDomainError(f"Cannot apply '{operation}' to {self} and {other}: division by zero",
                                        exc_type="division_by_zero")
        except decimal.Overflow:
            raise ArithmeticDomainError(f"Result of {self} {operation} {other} is too large", exc_type="overflow")
        except decimal.InvalidOperation:
            raise ArithmeticDomainError(f"Cannot apply '{operation}' to {self} and {other}", exc_type="undefined")

    def add(self, other: "Number") -> "Number":
        return self._run("+", other, lambda x, y: x + y)

    def sub(self, other: "Number") -> "Number":
        return self._run("-", other, lambda x, y: x - y)

    def mul(self, other: "Number") -> "Number":
        _check_digits("*", self.value, other.value)
        return self._run("*", other, lambda x, y: x * y)

    def div(self, other: "Number") -> "Number":
        if other.value == 0:
            raise ArithmeticDomainError(f"Cannot divide {self} by zero", exc_type="division_by_zero")
        return self._run("/", other, lambda x, y: x / y)

    def power(self, other: "Number") -> "Number":
        if self.value == other.value == 0:
            raise ArithmeticDomainError("'0^0' is undefined", exc_type="undefined")
        _check_digits("^", self.value, other.value)
        return self._run("^", other, lambda x, y: x ** y)

    def factorial(self) -> "Number":
        """
        :raises ArithmeticDomainError: value is negative or not an integer
        """
        if not self.is_integer() or self.value < 0:
            raise ArithmeticDomainError(f"Cannot apply '!' to {self}: only non-negative integers are allowed",
                                        exc_type="factorial")
        _check_digits("!", self.value)
        return Number(math.factorial(self.to_int()))

    def abs(self) -> "Number":
        return Number(abs(self.value))

    def is_integer(self) -> bool:
        return check_is_integer(self.value)

    def to_int(self) -> int:
        return int(self.value)

    def rounded(self, n_digits: int = cst.ROUNDING_DIGITS) -> "Number":
        return Number(round_decimal(self.value, n_digits))

    def __eq__(self, other):
        if isinstance(other, Number):
            return self.value == other.value
        if isinstance(other, (int, decimal.Decimal)):
            return self.value == other
        return NotImplemented

    def __lt__(self, other):
        if isinstance(other, Number):
            return self.value < other.value
        if isinstance(other, (int, decimal.Decimal)):
            return self.value < other
        return NotImplemented

    def __hash__(self):
        return hash(self.value)

    def __str__(self):
        return format(self.value.normalize(_context()), "f")

    def __repr__(self):
        return f"Number('{self}')"
