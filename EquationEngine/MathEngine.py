# MathEngine.py
"""""
Core evaluation engine for infix equations.

Pipeline
--------
1) Tokenizer: splits the equation into numbers, identifiers, operators, '(' ')' ','.
2) Shunting-yard: converts the token stream into postfix (RPN) order.
3) Validator: checks that the RPN collapses to exactly one value.
4) Evaluator: runs the RPN on a stack of Decimals under a decimal.Context.
5) Cleanup: strips trailing fractional zeros from the result.

Operators, functions and variables live in case-insensitive Registry tables
owned by each Expression; they are passed explicitly to every stage.
"""""

import logging
import re
from decimal import Decimal, Context, InvalidOperation, DivisionByZero, Overflow

from . import config_manager as config_manager
from . import error as E
from . import Operators
from . import ScientificEngine
from .Registry import Registry
from .ScientificEngine import ZERO, ONE, PI
from .Tokenizer import Tokenizer

logger = logging.getLogger(__name__)

ROUNDING_MODES = (
    "ROUND_CEILING", "ROUND_DOWN", "ROUND_FLOOR", "ROUND_HALF_DOWN",
    "ROUND_HALF_EVEN", "ROUND_HALF_UP", "ROUND_UP", "ROUND_05UP",
)

NUMBER_PATTERN = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d*)?")


# -----------------------------
# Utilities / small helpers
# -----------------------------

def is_number(token):
    """Return True if the token is shaped like a numeric literal."""
    return bool(token) and NUMBER_PATTERN.fullmatch(token) is not None


def parse_number(token, context):
    """Parse a numeric literal, rounded to the context."""
    try:
        return context.create_decimal(token)
    except InvalidOperation:
        raise E.LexicalError(E.message("1002", token), code="1002")


def make_context(precision, rounding="ROUND_HALF_EVEN"):
    """Return a decimal.Context trapping invalid operations, division by zero and overflow."""
    if rounding not in ROUNDING_MODES:
        raise ValueError(f"Unknown rounding mode: {rounding}")
    return Context(prec=int(precision), rounding=rounding,
                   traps=[InvalidOperation, DivisionByZero, Overflow])


def default_context(precision=None):
    """Context built from config.json; an explicit precision overrides the setting."""
    settings = config_manager.load_setting_value("all")
    if precision is None:
        precision = settings["precision"]
    rounding = settings["rounding"]
    if rounding not in ROUNDING_MODES:
        logger.warning("Ignoring unknown rounding mode %r from settings", rounding)
        rounding = config_manager.DEFAULT_SETTINGS["rounding"]
    return make_context(precision, rounding)


def strip_trailing_zeros(value):
    """Drop redundant trailing zeros.

    Fractional zeros always go (1.50 becomes 1.5). A plain integer keeps its
    digits (100 stays 100), while a value already in exponent form is reduced
    to its shortest coefficient (1.000000E+20 becomes 1E+20).
    """
    if not value.is_finite():
        return value
    if value.is_zero():
        return ZERO
    sign, digits, exponent = value.as_tuple()
    if exponent < 0:
        while exponent < 0 and digits[-1] == 0:
            digits = digits[:-1]
            exponent += 1
    else:
        while exponent > 0 and len(digits) > 1 and digits[-1] == 0:
            digits = digits[:-1]
            exponent += 1
    return Decimal((sign, digits, exponent))


class ArgListMarker:
    """Stack element delimiting the arguments of one function call."""
    def __repr__(self):
        return "ArgListMarker"


# -----------------------------
# Shunting-yard
# -----------------------------

def shunting_yard(equation, operators, functions, variables):
    """Convert an infix equation into a list of tokens in RPN order.

    A '(' directly after a function name is also put into the output, where it
    marks the start of that call's argument list for the evaluator.
    """
    output_queue = []
    stack = []
    tokenizer = Tokenizer(equation, operators)

    last_function = None
    previous_token = None
    for token in tokenizer:
        if is_number(token):
            output_queue.append(token)
        elif token in variables:
            output_queue.append(token)
        elif token in functions:
            stack.append(token)
            last_function = token
        elif token[0].isalpha() or token[0] == "_":
            # undeclared name, may still be bound before evaluation
            stack.append(token)
        elif token == ",":
            while stack and stack[-1] != "(":
                output_queue.append(stack.pop())
            if not stack:
                raise E.SyntaxError(E.message("2002", f"'{last_function}'"), code="2002")
        elif token in operators:
            o1 = operators[token]
            while stack and stack[-1] in operators:
                o2 = operators[stack[-1]]
                if not ((o1.left_assoc and o1.precedence <= o2.precedence)
                        or o1.precedence < o2.precedence):
                    break
                output_queue.append(stack.pop())
            stack.append(token)
        elif token == "(":
            if previous_token is not None:
                if is_number(previous_token):
                    raise E.SyntaxError(E.message("2003", tokenizer.pos), code="2003")
                if previous_token in functions:
                    output_queue.append(token)
            stack.append(token)
        elif token == ")":
            while stack and stack[-1] != "(":
                output_queue.append(stack.pop())
            if not stack:
                raise E.SyntaxError(E.message("2001"), code="2001")
            stack.pop()
            if stack and stack[-1] in functions:
                output_queue.append(stack.pop())
        previous_token = token

    while stack:
        element = stack.pop()
        if element in ("(", ")"):
            raise E.SyntaxError(E.message("2001"), code="2001")
        if element not in operators:
            raise E.SyntaxError(E.message("2004", element), code="2004")
        output_queue.append(element)

    logger.debug("RPN for %r: %s", equation, output_queue)
    return output_queue


# -----------------------------
# Validator
# -----------------------------

def validate(rpn, operators, functions):
    """Check that the RPN has enough operands for its operators and functions
    and leaves exactly one value behind.
    """
    counter = 0
    params = []
    for token in rpn:
        if token == "(":
            # a nested call's result is one parameter of the enclosing call
            if params:
                params[-1] += 1
            params.append(0)
        elif params:
            if token in functions:
                # drop the parameters and the '(' of this call
                counter -= params.pop() + 1
            else:
                params[-1] += 1
        elif token in operators:
            # all operators are binary
            counter -= 2
        if counter < 0:
            raise E.ValidationError(E.message("4001", token), code="4001")
        counter += 1

    if counter > 1:
        raise E.ValidationError(E.message("4002"), code="4002")
    elif counter < 1:
        raise E.ValidationError(E.message("4003"), code="4003")
    logger.debug("RPN %s is valid", rpn)


# -----------------------------
# Evaluator
# -----------------------------

def resolve_operator(operators, symbol):
    """Return the operator for symbol, following aliases to their target."""
    operator = operators[symbol]
    seen = {symbol.casefold()}
    while operator.alias_of is not None and operator.alias_of in operators:
        if operator.alias_of.casefold() in seen:
            break
        seen.add(operator.alias_of.casefold())
        operator = operators[operator.alias_of]
    return operator


def _pop_value(stack, token):
    if not stack or isinstance(stack[-1], ArgListMarker):
        raise E.ValidationError(E.message("4004", token), code="4004")
    return stack.pop()


def _apply(rule, arguments, context):
    """Call an operator or function rule, mapping numeric failures to DomainError."""
    try:
        result = rule(*arguments, context)
    except E.MathError:
        raise
    except (Overflow, OverflowError):
        raise E.DomainError(E.message("5004"), code="5004")
    except DivisionByZero:
        raise E.DomainError(E.message("5003"), code="5003")
    except (ArithmeticError, ValueError) as e:
        raise E.DomainError(E.message("5005", e), code="5005")
    if not isinstance(result, Decimal):
        result = context.create_decimal(result)
    return result


def evaluate_rpn(rpn, operators, functions, variables, context):
    """Run an RPN token list and return the single result."""
    stack = []
    for token in rpn:
        if token in operators:
            right = _pop_value(stack, token)
            left = _pop_value(stack, token)
            stack.append(_apply(resolve_operator(operators, token).eval, (left, right), context))
        elif token in variables:
            stack.append(context.plus(variables[token]))
        elif token in functions:
            function = functions[token]
            parameters = []
            while stack and not isinstance(stack[-1], ArgListMarker):
                parameters.insert(0, stack.pop())
            if stack:
                stack.pop()
            if not function.num_params_varies and len(parameters) != function.num_params:
                raise E.ArityError(
                    E.message("3001", f"{token}: expected {function.num_params} parameters, got {len(parameters)}"),
                    code="3001")
            stack.append(_apply(function.eval, (parameters,), context))
        elif token == "(":
            stack.append(ArgListMarker())
        elif is_number(token):
            stack.append(parse_number(token, context))
        else:
            raise E.SyntaxError(E.message("2004", token), code="2004")

    if not stack:
        raise E.ValidationError(E.message("4003"), code="4003")
    return strip_trailing_zeros(_pop_value(stack, "result"))


# -----------------------------
# Expression
# -----------------------------

class Expression:
    """An equation together with its operators, functions, variables and context.

    The RPN is computed (and validated) on first use and cached until the
    equation text changes. Changing variable values, the context or the
    registries does not invalidate it.

        >>> Expression("2 + 3 * x").set_variable("x", 4).evaluate()
        Decimal('14')
    """
    def __init__(self, equation, context=None):
        if context is None:
            context = default_context()
        elif isinstance(context, int):
            context = default_context(precision=context)
        self.context = context
        self._equation = equation
        self._rpn = None

        self.operators = Registry()
        for operator in Operators.default_operators():
            self.add_operator(operator)
        self.functions = Registry()
        for function in ScientificEngine.default_functions():
            self.add_function(function)
        self.variables = Registry({"PI": PI, "TRUE": ONE, "FALSE": ZERO})

    def __repr__(self):
        return f"Expression({self._equation!r}, prec={self.context.prec})"

    @property
    def equation(self):
        return self._equation

    @equation.setter
    def equation(self, equation):
        self._equation = equation
        self.invalidate()

    def invalidate(self):
        """Forget the cached RPN."""
        if self._rpn is not None:
            logger.debug("RPN cache of %r invalidated", self._equation)
        self._rpn = None

    def set_precision(self, precision):
        self.context = make_context(precision, self.context.rounding)
        return self

    def set_rounding_mode(self, rounding):
        self.context = make_context(self.context.prec, rounding)
        return self

    def add_operator(self, operator):
        """Register an operator; returns the definition it replaced, or None."""
        return self.operators.add(operator.symbol, operator)

    def add_function(self, function):
        """Register a function; returns the definition it replaced, or None."""
        return self.functions.add(function.name, function)

    def set_variable(self, name, value):
        """Bind a variable.

        Numbers (and numeric strings) are stored as Decimal values. Any other
        string is substituted as '(value)' for every whole-word occurrence of
        the name in the equation text, which invalidates the cached RPN.
        """
        if isinstance(value, Decimal):
            self.variables[name] = value
        elif isinstance(value, (int, float)):
            # via str to avoid binary float artifacts
            self.variables[name] = Decimal(str(value))
        elif isinstance(value, str):
            if is_number(value.strip()):
                try:
                    self.variables[name] = Decimal(value.strip())
                except InvalidOperation:
                    raise E.LexicalError(E.message("1002", value), code="1002")
            else:
                pattern = r"\b" + re.escape(name) + r"\b"
                self.equation = re.sub(pattern, lambda match: f"({value})", self._equation,
                                       flags=re.IGNORECASE)
        else:
            raise TypeError(f"Unsupported variable value: {value!r}")
        return self

    with_variable = set_variable

    def get_variable(self, name):
        return self.variables[name]

    def tokenizer(self):
        """Return a fresh Tokenizer over the equation text."""
        return Tokenizer(self._equation, self.operators)

    def _get_rpn(self):
        if self._rpn is None:
            rpn = shunting_yard(self._equation, self.operators, self.functions, self.variables)
            validate(rpn, self.operators, self.functions)
            self._rpn = rpn
        else:
            logger.debug("Using cached RPN for %r", self._equation)
        return self._rpn

    def evaluate(self):
        """Evaluate the equation and return a Decimal."""
        result = evaluate_rpn(self._get_rpn(), self.operators, self.functions, self.variables, self.context)
        logger.debug("%r = %s", self._equation, result)
        return result

    def to_rpn(self):
        """The cached RPN as a space separated string."""
        return " ".join(self._get_rpn())

    def declared_variables(self):
        return self.variables.names()

    def declared_operators(self):
        return self.operators.names()

    def declared_functions(self):
        return self.functions.names()


# -----------------------------
# Public entry point
# -----------------------------

def calculate(problem, variables=None, context=None):
    """Evaluate a single equation with an optional {name: value} table."""
    try:
        expression = Expression(problem, context)
        for name, value in (variables or {}).items():
            expression.set_variable(name, value)
        return expression.evaluate()

    # Re-raise our engine errors after attaching the source equation
    except E.MathError as e:
        e.equation = problem
        raise e
    # Convert unexpected Python exceptions to our unified error type
    except Exception as e:
        raise E.MathError(message=E.message("9999", e), code="9999", equation=problem) from e


def test_main():
    """Read one equation from stdin and print its value (manual testing aid)."""
    logging.basicConfig(level=config_manager.load_setting_value("log_level"))
    print("Enter the equation: ")
    problem = input()
    try:
        print(calculate(problem))
    except E.MathError as e:
        print(f"{E.category(e.code)}: {e}")


if __name__ == "__main__":
    # python -m EquationEngine.MathEngine
    test_main()
