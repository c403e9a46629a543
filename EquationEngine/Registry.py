# Registry.py
"""Operator and function definitions and the case-insensitive tables holding them.

An operator is a symbol with a precedence, an associativity and a binary rule
``rule(left, right, context) -> Decimal``. A function is a name with a fixed
parameter count (or VARIADIC) and a rule ``rule(parameters, context) -> Decimal``
taking the ordered argument list.
"""
from collections.abc import MutableMapping
from enum import Enum

# Parameter count of functions accepting any number of arguments
VARIADIC = -1


class Associativity(Enum):
    LEFT = "left"
    RIGHT = "right"


class Operator:
    """A binary infix operator.

    An alias (alias_of set to another symbol) evaluates with whatever operator
    is registered under that symbol at evaluation time.
    """
    def __init__(self, symbol, precedence, associativity, rule, alias_of=None):
        self.symbol = symbol
        self.precedence = int(precedence)
        self.associativity = Associativity(associativity)
        self.rule = rule
        self.alias_of = alias_of

    @property
    def left_assoc(self):
        return self.associativity is Associativity.LEFT

    def eval(self, left, right, context):
        return self.rule(left, right, context)

    def __repr__(self):
        return f"Operator({self.symbol!r}, {self.precedence}, {self.associativity.name})"


class Function:
    """A named function with a fixed or variable number of parameters."""
    def __init__(self, name, num_params, rule):
        # Names are stored upper case, lookups ignore case anyway
        self.name = name.upper()
        self.num_params = int(num_params)
        self.rule = rule

    @property
    def num_params_varies(self):
        return self.num_params < 0

    def eval(self, parameters, context):
        return self.rule(parameters, context)

    def __repr__(self):
        arity = "variadic" if self.num_params_varies else self.num_params
        return f"Function({self.name!r}, {arity})"


class Registry(MutableMapping):
    """Dictionary with case-insensitive string keys.

    The spelling of the first insertion of a key is kept, like a
    case-insensitive TreeMap: replacing a value never changes the key.
    """
    def __init__(self, items=None):
        self._store = {}
        if items:
            self.update(items)

    @staticmethod
    def _fold(key):
        return key.casefold()

    def add(self, key, value):
        """Insert or replace key and return the value it replaced (or None)."""
        folded = self._fold(key)
        previous = self._store.get(folded)
        if previous is None:
            self._store[folded] = (key, value)
            return None
        self._store[folded] = (previous[0], value)
        return previous[1]

    def __setitem__(self, key, value):
        self.add(key, value)

    def __getitem__(self, key):
        return self._store[self._fold(key)][1]

    def __delitem__(self, key):
        del self._store[self._fold(key)]

    def __contains__(self, key):
        return isinstance(key, str) and self._fold(key) in self._store

    def __iter__(self):
        return (key for key, _ in self._store.values())

    def __len__(self):
        return len(self._store)

    def names(self):
        """Sorted, read-only view of the declared names."""
        return tuple(sorted(self, key=self._fold))

    def __repr__(self):
        return f"Registry({dict(self.items())!r})"
