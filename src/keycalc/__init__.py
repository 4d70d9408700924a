'''
Pocket calculator.

Digit by digit, the way a four-function calculator takes them: one pending
operand, one pending operator, strictly left to right. No precedence, no
parentheses, no memory keys.

The machine does the arithmetic and formats the display; the lexer turns
keystrokes into machine input; the CLI wires both to a terminal.
'''

import structlog

from .cli import CLI
from .lexer import Lexer
from .machine import Machine
from .util import Action, CalculatorError, ErrorKind, Operator, \
                  configure_logging


if not structlog.is_configured():
    configure_logging()


__all__ = ('Machine', 'Lexer', 'CLI',
           'Action', 'CalculatorError', 'ErrorKind', 'Operator',
           'configure_logging')
