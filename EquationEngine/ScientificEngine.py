# ScientificEngine
"""Built-in functions of the equation engine and the numeric routines behind them.

Every function rule has the signature ``rule(parameters, context)`` and returns
a Decimal. Trigonometric and logarithmic functions go through binary floats and
are rounded to the context on the way back; ROUND, FLOOR, CEILING, ABS, MAX,
MIN, IF and SQRT stay in decimal arithmetic.
"""
import logging
import math
import random
from decimal import Decimal, Context, ROUND_DOWN, ROUND_HALF_UP, ROUND_FLOOR, ROUND_CEILING

from . import error as E
from .Registry import Function, VARIADIC

logger = logging.getLogger(__name__)

ZERO = Decimal(0)
ONE = Decimal(1)

# Constant exposed to equations as the variable PI
PI = Decimal("3.141592653589793")


# -----------------------------
# Numeric helpers
# -----------------------------

def from_float(value, context):
    """Create a Decimal from a float result, rounded to the context."""
    if not math.isfinite(value):
        raise E.DomainError(E.message("5005", f"result {value} is not finite"), code="5005")
    return context.create_decimal_from_float(value)


def truth(flag):
    """Return ONE for a true flag, ZERO otherwise."""
    return ONE if flag else ZERO


def is_true(value):
    return value != ZERO


def set_scale(value, scale, rounding):
    """Round value to `scale` digits after the decimal point.

    A negative scale rounds to the left of the point (tens, hundreds, ...).
    The result is never limited by a context precision.
    """
    digits = max(value.adjusted() + scale + 2, 1)
    exponent = Decimal((0, (1,), -scale))
    return value.quantize(exponent, rounding=rounding, context=Context(prec=digits))


def reciprocal(value, scale):
    """Return 1 / value rounded half-up to `scale` decimal places.

    The quotient is first truncated with enough guard digits, so the half-up
    step sees the exact position of the true value relative to the midpoint.
    """
    if value == ZERO:
        raise E.DomainError(E.message("5003"), code="5003")
    digits = max(scale - value.adjusted() + 3, 1)
    quotient = Context(prec=digits, rounding=ROUND_DOWN).divide(ONE, value)
    return set_scale(quotient, scale, ROUND_HALF_UP)


def power(base, exponent, context):
    """base ^ exponent under the context.

    The integral part of the exponent is applied exactly (within the context),
    the fractional part via float pow. Fractional exponents therefore only
    carry double precision. Negative exponents are reciprocated at
    context.prec decimal places, rounding half-up.
    """
    negative = exponent < ZERO
    exponent = exponent.copy_abs()
    integral = int(exponent)
    # exact subtraction: the fraction never has more digits than the exponent
    fraction = Context(prec=len(exponent.as_tuple().digits) + 1).subtract(exponent, Decimal(integral))

    if integral == 0:
        int_pow = ONE
    else:
        int_pow = context.power(base, integral)

    if fraction == ZERO:
        float_pow = ONE
    else:
        try:
            approximated = math.pow(float(base), float(fraction))
        except ValueError:
            raise E.DomainError(E.message("5005", f"{base} ^ {fraction}"), code="5005")
        if not math.isfinite(approximated):
            raise E.DomainError(E.message("5005", f"{base} ^ {fraction} is not finite"), code="5005")
        float_pow = Decimal(approximated)

    result = context.multiply(int_pow, float_pow)
    if negative:
        result = reciprocal(result, context.prec)
    return result


def shifted_integer(value, places):
    """Move the decimal point of a non-negative value right and truncate to int."""
    sign, digits, exponent = value.as_tuple()
    coefficient = int("".join(map(str, digits)))
    shift = exponent + places
    if shift >= 0:
        return coefficient * 10 ** shift
    return coefficient // 10 ** -shift


def integer_sqrt(n):
    """floor(sqrt(n)) by Newton's method on integers.

    Starts at a power of two not below the root; the estimate strictly
    decreases until it reaches the floor of the root, where the loop stops.
    """
    if n < 0:
        raise ValueError("integer_sqrt of a negative number")
    if n == 0:
        return 0
    ix = 1 << ((n.bit_length() + 1) >> 1)
    while True:
        next_ix = (ix + n // ix) >> 1
        if next_ix >= ix:
            return ix
        ix = next_ix


def square_root(value, context):
    """Square root with exactly context.prec digits after the decimal point (truncated)."""
    if value == ZERO:
        return ZERO
    if value < ZERO:
        raise E.DomainError(E.message("5001"), code="5001")
    scale = context.prec
    n = shifted_integer(value, scale << 1)
    ix = integer_sqrt(n)
    logger.debug("SQRT(%s): integer root %d at scale %d", value, ix, scale)
    return Decimal(f"{ix}E-{scale}")


# -----------------------------
# Function rules
# -----------------------------

def _not(parameters, context):
    return truth(parameters[0] == ZERO)


def _if(parameters, context):
    condition, if_true, if_false = parameters
    return if_true if is_true(condition) else if_false


def _random(parameters, context):
    return from_float(random.random(), context)


def _from_degrees(operation):
    """Rule applying a float function to an angle given in degrees."""
    def rule(parameters, context):
        return from_float(operation(math.radians(float(parameters[0]))), context)
    return rule


def _to_degrees(operation):
    """Rule applying an inverse trig function and returning degrees."""
    def rule(parameters, context):
        return from_float(math.degrees(operation(float(parameters[0]))), context)
    return rule


def _float_rule(operation):
    """Rule applying a plain float function."""
    def rule(parameters, context):
        return from_float(operation(float(parameters[0])), context)
    return rule


def _max(parameters, context):
    if not parameters:
        raise E.DomainError(E.message("5002", "MAX"), code="5002")
    return max(parameters)


def _min(parameters, context):
    if not parameters:
        raise E.DomainError(E.message("5002", "MIN"), code="5002")
    return min(parameters)


def _abs(parameters, context):
    return context.abs(parameters[0])


def _round(parameters, context):
    value, digits = parameters
    return set_scale(value, int(digits), context.rounding)


def _floor(parameters, context):
    return set_scale(parameters[0], 0, ROUND_FLOOR)


def _ceiling(parameters, context):
    return set_scale(parameters[0], 0, ROUND_CEILING)


def _sqrt(parameters, context):
    return square_root(parameters[0], context)


def default_functions():
    """Return fresh Function definitions for all built-in functions."""
    return [
        Function("NOT", 1, _not),
        Function("IF", 3, _if),
        Function("RANDOM", 0, _random),
        Function("SIN", 1, _from_degrees(math.sin)),
        Function("COS", 1, _from_degrees(math.cos)),
        Function("TAN", 1, _from_degrees(math.tan)),
        Function("ASIN", 1, _to_degrees(math.asin)),
        Function("ACOS", 1, _to_degrees(math.acos)),
        Function("ATAN", 1, _to_degrees(math.atan)),
        Function("SINH", 1, _float_rule(math.sinh)),
        Function("COSH", 1, _float_rule(math.cosh)),
        Function("TANH", 1, _float_rule(math.tanh)),
        Function("RAD", 1, _float_rule(math.radians)),
        Function("DEG", 1, _float_rule(math.degrees)),
        Function("MAX", VARIADIC, _max),
        Function("MIN", VARIADIC, _min),
        Function("ABS", 1, _abs),
        Function("LOG", 1, _float_rule(math.log)),
        Function("LOG10", 1, _float_rule(math.log10)),
        Function("ROUND", 2, _round),
        Function("FLOOR", 1, _floor),
        Function("CEILING", 1, _ceiling),
        Function("SQRT", 1, _sqrt),
    ]
