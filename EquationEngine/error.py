# error.py
"""Exception hierarchy and error-code catalog for the equation engine.

Every failure of the engine is a MathError subclass carrying a human readable
message, a four digit code and (once known) the equation that failed.
"""


class MathError(Exception):
    def __init__(self, message, code="9999", equation=None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.equation = equation

    def __str__(self):
        return f"[{self.code}] {self.message}"


class LexicalError(MathError):
    pass

class SyntaxError(MathError):
    pass

class ArityError(MathError):
    pass

class ValidationError(MathError):
    pass

class DomainError(MathError):
    pass



Error_Dictionary = {

    "1" : "Lexical Error",
    "2" : "Syntax Error",
    "3" : "Arity Error",
    "4" : "Validation Error",
    "5" : "Domain Error",
    "9" : "Unexpected Error"

}

#Error codes are structured in:
# 1. Digit: Main Error (see Error_Dictionary)
# 2. Digit: Sub-category
# 3. and 4. Digit: Error Number



ERROR_MESSAGES = {
    "1001" : "Unknown operator ", # + operator and position
    "1002" : "Invalid number: ", # + token

    "2001" : "Mismatched parentheses",
    "2002" : "Parse error for function ", # + function name
    "2003" : "Missing operator at character position ", # + position
    "2004" : "Unknown operator, function or variable: ", # + token

    "3001" : "Wrong number of parameters for function ", # + function name

    "4001" : "Too many operators or functions at: ", # + token
    "4002" : "Too many numbers or variables",
    "4003" : "Empty equation",
    "4004" : "Missing operand for operator ", # + operator

    "5001" : "Argument to SQRT() function must not be negative",
    "5002" : "Function requires at least one parameter: ", # + function name
    "5003" : "Division by zero",
    "5004" : "Number too large (Arithmetic overflow).",
    "5005" : "Math domain error: ", # + detail

    "9999" : "Unexpected Error: " #+error
}


def message(code, detail=""):
    """Return the catalog message for code, followed by an optional detail."""
    return ERROR_MESSAGES.get(code, ERROR_MESSAGES["9999"]) + str(detail)


def category(code):
    """Return the main error category for a four digit code."""
    return Error_Dictionary.get(str(code)[:1], Error_Dictionary["9"])
