# Operators.py
"""Built-in binary operators.

Symbol      Precedence  Associativity
+ -         20          left
* / %       30          left
^           40          right
> >= < <=   10          right
= == != <>  7           right
&&          4           right
||          2           right

Comparison and boolean operators always return Decimal 1 or 0.
== and <> are aliases of = and != and follow their current definitions.
"""
from . import error as E
from . import ScientificEngine
from .Registry import Operator, Associativity
from .ScientificEngine import ZERO, truth, is_true

LEFT = Associativity.LEFT
RIGHT = Associativity.RIGHT


def _add(v1, v2, context):
    return context.add(v1, v2)


def _subtract(v1, v2, context):
    return context.subtract(v1, v2)


def _multiply(v1, v2, context):
    return context.multiply(v1, v2)


def _divide(v1, v2, context):
    if v2 == ZERO:
        raise E.DomainError(E.message("5003"), code="5003")
    return context.divide(v1, v2)


def _remainder(v1, v2, context):
    if v2 == ZERO:
        raise E.DomainError(E.message("5003"), code="5003")
    return context.remainder(v1, v2)


def _power(v1, v2, context):
    return ScientificEngine.power(v1, v2, context)


def _and(v1, v2, context):
    return truth(is_true(v1) and is_true(v2))


def _or(v1, v2, context):
    return truth(is_true(v1) or is_true(v2))


def _greater(v1, v2, context):
    return truth(v1 > v2)


def _greater_equal(v1, v2, context):
    return truth(v1 >= v2)


def _less(v1, v2, context):
    return truth(v1 < v2)


def _less_equal(v1, v2, context):
    return truth(v1 <= v2)


def _equal(v1, v2, context):
    return truth(v1 == v2)


def _not_equal(v1, v2, context):
    return truth(v1 != v2)


BUILTIN_OPERATORS = [
    ("+", 20, LEFT, _add),
    ("-", 20, LEFT, _subtract),
    ("*", 30, LEFT, _multiply),
    ("/", 30, LEFT, _divide),
    ("%", 30, LEFT, _remainder),
    ("^", 40, RIGHT, _power),
    ("&&", 4, RIGHT, _and),
    ("||", 2, RIGHT, _or),
    (">", 10, RIGHT, _greater),
    (">=", 10, RIGHT, _greater_equal),
    ("<", 10, RIGHT, _less),
    ("<=", 10, RIGHT, _less_equal),
    ("=", 7, RIGHT, _equal),
    ("==", 7, RIGHT, None, "="),
    ("!=", 7, RIGHT, _not_equal),
    ("<>", 7, RIGHT, None, "!="),
]


def default_operators():
    """Return fresh Operator definitions for all built-in operators."""
    return [Operator(*definition) for definition in BUILTIN_OPERATORS]
