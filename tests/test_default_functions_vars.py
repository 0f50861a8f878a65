import decimal

import pytest

from mathengine.engine import ShuntingYardEngine
from mathengine.extra.exceptions import (ArithmeticDomainError, ArityMismatchError, MalformedExpressionError,
                                         UndefinedVariableError)
from mathengine.extra.types import Variable
from mathengine.number import Number
from mathengine.vars import default_variables, non_negative_validator
from tests.test_simple import tok


@pytest.mark.parametrize("tokens, expected",
                         [
                             (tok("max", "(", 3, ",", 7, ")"), 7),
                             (tok("min", "(", 3, ",", 7, ")"), 3),
                             (tok("abs", "(", 2, "-", 9, ")"), 7),
                             (tok("sqrt", "(", 16, ")"), 4),
                             (tok("max", "(", 1, "+", 2, "*", 3, ",", 4, ")"), 7),
                             (tok("max", "(", 2, "^", 3, ",", 3, "^", 2, ")", "-", 1), 8),
                             (tok(2, "*", "max", "(", "min", "(", 4, ",", 9, ")", ",", "(", 1, "+", 2, ")", ")"), 8),
                             (tok("max", "(", "(", 3, ")", ",", "|", Number(-10), "|", ")"), 10),
                             (tok("abs", "(", 3, "-", 5, ")", "!"), 2),
                             (tok("sin", "(", 0, ")"), 0),
                             (tok("cos", "(", 0, ")"), 1),
                         ]
)
def test_basic_functions(tokens, expected):
    assert ShuntingYardEngine().execute(tokens) == expected


@pytest.mark.parametrize("tokens, expected",
                         [
                             (tok("pi"), decimal.Decimal("3.14159")),
                             (tok("pi", "(", ")"), decimal.Decimal("3.14159")),
                             (tok("e"), decimal.Decimal("2.71828")),
                             (tok(2, "*", "pi"), decimal.Decimal("6.28319")),
                             (tok("log", "(", 8, ",", 2, ")"), 3),
                             (tok("ln", "(", "e", ")"), 1),
                         ])
def test_constants_and_logarithms(tokens, expected):
    assert ShuntingYardEngine().execute(tokens).rounded() == expected


def test_user_variables():
    variables = default_variables()
    variables["x"] = Variable.constant(5, "x")
    variables["hyp"] = Variable(lambda a, b: (a * a + b * b).sqrt(), 2, [non_negative_validator], "hyp")
    variables["three"] = Variable(lambda a, b, c: a * 100 + b * 10 + c, 3, [], "three")

    engine = ShuntingYardEngine()
    assert engine.execute(tok("x", "*", "x", "-", 1), variables) == 24
    assert engine.execute(tok("hyp", "(", 3, ",", "x", "-", 1, ")"), variables) == 5
    assert engine.execute(tok("three", "(", 1, ",", 2, ",", 3, ")"), variables) == 123


def test_variables_are_not_changed():
    variables = default_variables()
    before = dict(variables)
    ShuntingYardEngine().execute(tok("max", "(", 1, ",", 2, ")"), variables)
    assert variables == before


@pytest.mark.parametrize("tokens, exception",
                         [
                             (tok("sqrt", "(", Number(-1), ")"), ArithmeticDomainError),
                             (tok("ln", "(", 0, ")"), ArithmeticDomainError),
                             (tok("log", "(", 8, ",", 1, ")"), ArithmeticDomainError),
                             (tok("max", "(", 3, ")"), ArityMismatchError),
                             (tok("max", "(", 1, ",", 2, ",", 3, ")"), ArityMismatchError),
                             (tok("sqrt", "(", ")"), ArityMismatchError),
                             (tok("max"), ArityMismatchError),
                             (tok("y", "+", 1), UndefinedVariableError),
                             (tok("f", "(", 1, ")"), UndefinedVariableError),
                         ])
def test_invalid_args(tokens, exception):
    with pytest.raises(exception):
        ShuntingYardEngine().execute(tokens)


@pytest.mark.parametrize("tokens, exception",
                         [
                             (tok("max", "(", 3, ")"), MalformedExpressionError),
                             (tok(2, "+", "max", "(", 3, ")"), MalformedExpressionError),
                             (tok("max", "(", 1, 2, ")"), MalformedExpressionError),
                             (tok("y"), UndefinedVariableError),
                             (tok("sqrt", "(", Number(-4), ")"), ArithmeticDomainError),
                         ])
def test_invalid_args_without_validation(tokens, exception):
    with pytest.raises(exception):
        ShuntingYardEngine().evaluate(tokens)


def test_arity_error_details():
    with pytest.raises(ArityMismatchError) as e:
        ShuntingYardEngine().validate(tok("max", "(", 3, ")"))
    assert e.value.expected == 2
    assert e.value.given == 1
