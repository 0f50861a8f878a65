import decimal
import logging
import math
from functools import wraps
from sys import stdout
from typing import Literal

import mathengine.constants as cst


def check_is_integer(dec: decimal.Decimal) -> bool:
    return dec.is_finite() and dec == dec.to_integral_value()


def round_decimal(dec: decimal.Decimal, n_digits: int = cst.ROUNDING_DIGITS, rounding=cst.ROUNDING):
    """
    Rounds decimal to n digits after point
    :param dec: decimal to round
    :param n_digits: number of digits to round to
    :rounding: rounding method
    :return: rounded decimal
    """
    quantizer = decimal.Decimal('1.' + '0' * n_digits)
    try:
        return dec.quantize(quantizer, rounding=rounding)
    except decimal.InvalidOperation:
        return dec


def estimate_digits(operation: Literal["*", "^", "!"], a: decimal.Decimal,
                    b: decimal.Decimal | None = None) -> decimal.Decimal:
    """
    Estimates amount of digits in the integer part of the operation result
    :param operation: '*', '^' or '!'
    :param a: left operand (the only one for '!')
    :param b: right operand
    :return: estimated amount of digits
    """
    if a == 0 or b == 0:
        return decimal.Decimal(1)
    abs_a = abs(a)
    if operation == "^":
        n_digits = b * abs_a.log10()  # type: ignore
    elif operation == "*":
        n_digits = abs_a.log10() + abs(b).log10()  # type: ignore
    elif operation == "!":
        n_digits = decimal.Decimal(math.lgamma(float(a) + 1) / math.log(10))
    else:
        n_digits = decimal.Decimal(-1)
    return n_digits + 1


def log_exception(func):

    """Decorator to automatically log exceptions"""

    @wraps(func)
    def wrapper(self, *args, **kwargs):

        try:
            return func(self, *args, **kwargs)
        except Exception as e:
            self.logger.exception(f"Exception in {func.__name__}: {e}")
            raise

    return wrapper


def configure_logging(level: int = logging.DEBUG, log_file: str | None = None) -> logging.Logger:
    """
    Sets up root logger with stdout handler and, optionally, a file handler
    :param level: logging level
    :param log_file: path to log file or None to log only to stdout
    :return: root logger
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="a", encoding="utf-8"))
    logging.basicConfig(level=level, handlers=handlers, format=cst.FORMAT, force=True)
    return logging.getLogger()


class CallAllMethods:
    """
    Calls every '_check' method of the object in the order they are defined
    """
    def call_all_methods(self, instance = None):
        if not instance:
            instance = self
        for method in type(instance).__dict__:
            if method.startswith("_check") and callable(getattr(instance, method)):
                getattr(instance, method)()
