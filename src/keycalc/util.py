from enum import Enum
from functools import wraps
import logging
import operator
import sys

import structlog


class CalculatorError(Exception):
    pass


class Operator(Enum):
    '''
    The four binary operators, valued by their key symbol.
    '''
    ADD = '+'
    SUBTRACT = '-'
    MULTIPLY = '*'
    DIVIDE = '/'

    def __str__(self):
        return self.value

    def __call__(self, left, right):
        return _FUNCTIONS[self](left, right)


_FUNCTIONS = {
    Operator.ADD: operator.__add__,
    Operator.SUBTRACT: operator.__sub__,
    Operator.MULTIPLY: operator.__mul__,
    Operator.DIVIDE: operator.__truediv__,
}


class Action(Enum):
    '''
    Kind of the last input event, for context-sensitive keys.
    '''
    NONE = 'none'
    DIGIT = 'digit'
    DECIMAL = 'decimal'
    OPERATOR = 'operator'
    EQUALS = 'equals'
    BACKSPACE = 'backspace'


class ErrorKind(Enum):
    '''
    Recoverable errors, valued by the token shown in place of the display.
    '''
    DIVISION_BY_ZERO = 'Undefined'
    OVERFLOW = 'Result too large'

    def __str__(self):
        return self.value


def wrap_user_errors(fmt):
    '''
    Ugly hack decorator that converts exceptions to CalculatorErrors.

    Passes through CalculatorErrors.
    '''
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except CalculatorError:
                raise
            except Exception as e:
                raise CalculatorError(fmt.format(*args, **kwargs), e)
        return wrapper
    return decorator


def configure_logging(level=logging.WARNING, file=None):
    '''
    Route keycalc's structlog events to file (stderr), dropping those below
    level.

    Applied at import with WARNING, so an embedding renderer sees nothing
    unless it configures structlog itself.
    '''
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(
            file=sys.stderr if file is None else file),
    )
