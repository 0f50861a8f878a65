import decimal
import math

from mathengine.extra.exceptions import ArithmeticDomainError
from mathengine.extra.types import Operator, OperatorRule, Variable
from mathengine.number import Number

PI = "3.141592653589793238462643383279502884197169399375105820974944592307816406286208998628034825342117068"
E = "2.718281828459045235360287471352662497757247093699959574966967627724076630353547594571382178525166427"


def non_negative_validator(*args, **kwargs):
    """
    Validates that the expression is non-negative.
    :param kwargs: must contain 'op' key with function name
    :param args: numbers to validate
    :raises ArithmeticDomainError: if any of the arguments are negative
    """
    if any(x < 0 for x in args):
        args = [str(arg) for arg in args]
        raise ArithmeticDomainError(
            f"Cannot apply '{kwargs['op']}' to {', '.join(args)}: only non-negative values are allowed",
            exc_type="undefined")


def positive_validator(*args, **kwargs):
    if any(x <= 0 for x in args):
        args = [str(arg) for arg in args]
        raise ArithmeticDomainError(
            f"Cannot apply '{kwargs['op']}' to {', '.join(args)}: only positive values are allowed",
            exc_type="undefined")


def log_base_validator(*args, **kwargs):
    if args[1] == 1:
        raise ArithmeticDomainError(f"Cannot apply '{kwargs['op']}' with base 1", exc_type="undefined")


def custom_sqrt(x: decimal.Decimal) -> decimal.Decimal:
    return x.sqrt()


def custom_log(x: decimal.Decimal, base: decimal.Decimal) -> decimal.Decimal:
    return x.ln() / base.ln()


OPERATORS: dict[Operator, OperatorRule] = {
        Operator.PLUS: OperatorRule(0, Number.add),
        Operator.MINUS: OperatorRule(0, Number.sub),
        Operator.MULTIPLY: OperatorRule(1, Number.mul),
        Operator.DIVIDE: OperatorRule(1, Number.div),
        Operator.POWER: OperatorRule(2, Number.power),
    }


DEFAULT_VARIABLES: dict[str, Variable] = {
        "pi": Variable.constant(PI, "pi"),
        "e": Variable.constant(E, "e"),
        "max": Variable(max, 2, [], "max"),
        "min": Variable(min, 2, [], "min"),
        "abs": Variable(abs, 1, [], "abs"),
        "sqrt": Variable(custom_sqrt, 1, [non_negative_validator], "sqrt"),
        "ln": Variable(lambda x: x.ln(), 1, [positive_validator], "ln"),
        "log": Variable(custom_log, 2, [positive_validator, log_base_validator], "log"),
        "sin": Variable(lambda x: decimal.Decimal(math.sin(x)), 1, [], "sin"),
        "cos": Variable(lambda x: decimal.Decimal(math.cos(x)), 1, [], "cos"),
    }


def default_variables() -> dict[str, Variable]:
    return DEFAULT_VARIABLES.copy()


def default_operators() -> dict[Operator, OperatorRule]:
    return OPERATORS.copy()
