# Tokenizer.py
"""Lazy tokenizer for infix equations.

Splits a (trimmed) equation into numbers, identifiers, operators and the
structural characters '(', ')' and ','. Whitespace between tokens is skipped.
Token categories are not stored; the parser re-derives them from the text.
"""

import logging

from . import error as E

logger = logging.getLogger(__name__)


DECIMAL_SEPARATOR = "."
MINUS_SIGN = "-"
EXPONENT_MARKERS = ("e", "E")
STRUCTURAL = ("(", ")", ",")


def is_identifier_start(ch):
    return ch.isalpha() or ch == "_"


def is_operator_char(ch):
    """True for characters that may be part of an operator symbol."""
    return (ch != "" and not ch.isalpha() and not ch.isdecimal() and ch != "_"
            and not ch.isspace() and ch not in STRUCTURAL)


class Tokenizer:
    """Iterator over the tokens of an equation.

    `operators` is the operator table used to decide whether a minus sign in
    front of a digit belongs to the number (unary) or is the binary operator,
    and to reject unknown operator symbols.
    """
    def __init__(self, equation, operators):
        self.input = equation.strip()
        self.operators = operators
        self.pos = 0
        self.previous_token = None

    def __iter__(self):
        return self

    def has_next(self):
        return self.pos < len(self.input)

    def __next__(self):
        if not self.has_next():
            self.previous_token = None
            raise StopIteration
        token = self._read_token()
        logger.debug("Token %r", token)
        self.previous_token = token
        return token

    def _char(self, offset=0):
        """Character at pos + offset, or '' past the end."""
        index = self.pos + offset
        return self.input[index] if index < len(self.input) else ""

    def _minus_is_unary(self):
        previous = self.previous_token
        return previous is None or previous in ("(", ",") or previous in self.operators

    def _read_token(self):
        while self._char().isspace():
            self.pos += 1
        ch = self._char()

        if ch.isdecimal():
            return self._read_number()
        if ch == MINUS_SIGN and self._char(1).isdecimal() and self._minus_is_unary():
            self.pos += 1
            return MINUS_SIGN + self._read_number()
        if is_identifier_start(ch):
            return self._read_identifier()
        if ch in STRUCTURAL:
            self.pos += 1
            return ch
        return self._read_operator()

    def _read_number(self):
        start = self.pos
        seen_separator = False
        seen_exponent = False
        while True:
            ch = self._char()
            if ch.isdecimal():
                pass
            elif ch == DECIMAL_SEPARATOR and not seen_separator and not seen_exponent:
                seen_separator = True
            elif ch in EXPONENT_MARKERS and not seen_exponent:
                seen_exponent = True
            elif ch in ("+", MINUS_SIGN) and self.input[self.pos - 1] in EXPONENT_MARKERS:
                pass
            else:
                break
            self.pos += 1
        return self.input[start:self.pos]

    def _read_identifier(self):
        start = self.pos
        while True:
            ch = self._char()
            if not (ch.isalpha() or ch.isdecimal() or ch == "_"):
                break
            self.pos += 1
        return self.input[start:self.pos]

    def _read_operator(self):
        start = self.pos
        self.pos += 1
        # a minus sign always starts a new token
        while is_operator_char(self._char()) and self._char() != MINUS_SIGN:
            self.pos += 1
        token = self.input[start:self.pos]
        if token not in self.operators:
            raise E.LexicalError(E.message("1001", f"'{token}' at position {start + 1}"), code="1001")
        return token
