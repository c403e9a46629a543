"""Tests for the numeric routines and built-in function catalog."""

import math
from decimal import Decimal, Context, ROUND_HALF_UP, ROUND_HALF_EVEN

import pytest

from EquationEngine import error as E
from EquationEngine import ScientificEngine as S


@pytest.fixture
def context():
    return Context(prec=7, rounding=ROUND_HALF_EVEN)


@pytest.mark.parametrize("n", [0, 1, 2, 3, 4, 8, 15, 16, 17, 99, 10 ** 14 * 2, 10 ** 30 + 7])
def test_integer_sqrt_matches_isqrt(n):
    """Newton's iteration converges to floor(sqrt(n)), including n + 1 square cases."""
    assert S.integer_sqrt(n) == math.isqrt(n)


def test_square_root_has_fixed_scale(context):
    """SQRT keeps exactly `precision` digits after the point, truncated."""
    assert S.square_root(Decimal(2), context) == Decimal("1.4142135")
    assert S.square_root(Decimal(16), context) == 4
    assert S.square_root(Decimal("0.25"), context) == Decimal("0.5")


def test_square_root_of_zero_and_negative(context):
    """Zero short-circuits, negative input is a domain error."""
    assert S.square_root(Decimal(0), context) == 0
    with pytest.raises(E.DomainError) as excinfo:
        S.square_root(Decimal(-1), context)
    assert excinfo.value.code == "5001"


def test_power_integral_exponent(context):
    """Integral exponents are applied exactly."""
    assert S.power(Decimal(2), Decimal(10), context) == 1024
    assert S.power(Decimal(-3), Decimal(3), context) == -27
    assert S.power(Decimal(0), Decimal(0), context) == 1


def test_power_negative_exponent_is_reciprocated(context):
    """Negative exponents give 1 / base^|exponent| at `precision` decimal places."""
    assert S.power(Decimal(2), Decimal(-1), context) == Decimal("0.5")
    assert S.power(Decimal(3), Decimal(-1), context) == Decimal("0.3333333")


def test_power_fractional_exponent_is_approximated(context):
    """The fractional part of the exponent goes through float pow."""
    assert S.power(Decimal(2), Decimal("0.5"), context) == Decimal("1.414214")
    assert S.power(Decimal(4), Decimal("1.5"), context) == 8


def test_power_fractional_exponent_of_negative_base(context):
    """A negative base with a fractional exponent is a domain error."""
    with pytest.raises(E.DomainError):
        S.power(Decimal(-8), Decimal("0.5"), context)


def test_reciprocal_rounds_half_up():
    """Reciprocals are rounded half-up, also for negative values."""
    assert S.reciprocal(Decimal(8), 2) == Decimal("0.13")
    assert S.reciprocal(Decimal("1.6"), 2) == Decimal("0.63")
    assert S.reciprocal(Decimal(-8), 2) == Decimal("-0.13")
    with pytest.raises(E.DomainError):
        S.reciprocal(Decimal(0), 2)


def test_set_scale():
    """set_scale rounds at a fixed number of decimal places, also left of the point."""
    assert S.set_scale(Decimal("3.14159"), 2, ROUND_HALF_UP) == Decimal("3.14")
    assert S.set_scale(Decimal("1234.5678"), -2, ROUND_HALF_UP) == 1200
    assert S.set_scale(Decimal("2.5"), 0, ROUND_HALF_EVEN) == 2


def test_from_float_rejects_non_finite(context):
    """Non-finite float results cannot become decimals."""
    with pytest.raises(E.DomainError):
        S.from_float(float("inf"), context)
    assert S.from_float(0.5, context) == Decimal("0.5")


def test_default_functions_catalog():
    """All built-in functions are present exactly once with their arity."""
    functions = {function.name: function for function in S.default_functions()}
    assert len(functions) == len(S.default_functions())
    assert set(functions) == {
        "NOT", "IF", "RANDOM", "SIN", "COS", "TAN", "ASIN", "ACOS", "ATAN",
        "SINH", "COSH", "TANH", "RAD", "DEG", "MAX", "MIN", "ABS", "LOG",
        "LOG10", "ROUND", "FLOOR", "CEILING", "SQRT",
    }
    assert functions["MAX"].num_params_varies
    assert functions["IF"].num_params == 3
    assert functions["RANDOM"].num_params == 0
