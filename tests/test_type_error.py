import decimal
import logging

import pytest

from mathengine.engine import ShuntingYardEngine
from mathengine.extra.exceptions import ArithmeticDomainError
from mathengine.number import Number
from tests.test_simple import tok


@pytest.mark.parametrize("tokens, exc_type",
                         [
                             (tok(5, "/", 0), "division_by_zero"),
                             (tok(1, "/", "(", 2, "-", 2, ")"), "division_by_zero"),
                             (tok(Number(-3), "!"), "factorial"),
                             (tok(decimal.Decimal("2.5"), "!"), "factorial"),
                             (tok("(", 1, "-", 4, ")", "!"), "factorial"),
                             (tok(0, "^", 0), "undefined"),
                             (tok(Number(-8), "^", decimal.Decimal("0.5")), "undefined"),
                             (tok(10, "^", 10_000_000), "overflow"),
                             (tok(1_000_000, "!"), "overflow"),
                             (tok(Number("1e999999"), "^", Number("1e999999")), "overflow"),
                             (tok(Number("1e999999"), "*", Number("1e999999")), "overflow"),
                         ])
def test_domain_errors(tokens, exc_type):
    with pytest.raises(ArithmeticDomainError) as e:
        ShuntingYardEngine().execute(tokens)
    assert e.value.exc_type == exc_type


def test_huge_result_warning(caplog):
    with caplog.at_level(logging.WARNING, logger="mathengine.number"):
        result = ShuntingYardEngine().execute(tok(10, "^", 800_000))
    assert result == Number("1E+800000")
    assert "digits" in caplog.text


def test_division_result_is_not_produced():
    engine = ShuntingYardEngine()
    with pytest.raises(ArithmeticDomainError):
        engine.execute(tok(2, "+", 5, "/", 0))
    assert engine.execute(tok(2, "+", 5, "/", 1)) == 7
