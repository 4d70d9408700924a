from collections import namedtuple
from decimal import Decimal, ROUND_HALF_UP, localcontext
import math

import regex
import structlog

from .util import Action, CalculatorError, ErrorKind, Operator, \
                  wrap_user_errors


logger = structlog.get_logger()


State = namedtuple('State', ['display',
                             'expression',
                             'pending_operand',
                             'pending_operator',
                             'awaiting_operand',
                             'has_decimal',
                             'last_action',
                             'error'])


# Python writes 1e-07, a calculator display 1e-7.
_EXPONENT = regex.compile(r'e(?<sign>[+-]?)0*(?<digits>\d+)$',
                          flags=regex.VERSION1)


def _exponent(match):
    return 'e' + (match.group('sign') or '+') + match.group('digits')


def shortest(value):
    '''
    Shortest decimal text for value.

    Integral values lose their fractional part (18, not 18.0), values from
    1e-6 to 1e21 are written positionally, anything else in scientific
    notation with a bare exponent (1e-7).
    '''
    value = float(value)
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    text = repr(value)
    if 'e' in text and 1e-6 <= abs(value) < 1e21:
        return format(Decimal(text), 'f')
    return _EXPONENT.sub(_exponent, text)


def quantize(value, places):
    '''
    Round value to places fractional digits, half away from zero.

    Works on the shortest decimal form, so 0.125 rounds to 0.13 although the
    float is a hair below it.
    '''
    with localcontext() as context:
        context.prec = 64
        exponent = Decimal(1).scaleb(-places)
        rounded = Decimal(repr(value)).quantize(exponent,
                                                rounding=ROUND_HALF_UP)
    return float(rounded)


def scientific(value, digits):
    '''
    Scientific notation with a fixed number of fractional digits.
    '''
    return _EXPONENT.sub(_exponent, '{:.{}e}'.format(value, digits))


class Machine:
    '''
    Arithmetic state machine (pocket calculator).

    Takes one key at a time and keeps what a calculator display needs: the
    number being typed, at most one pending operand and operator, and a
    trace of the chain so far. Operations apply strictly left to right.

    Division by zero and overflow do not raise; they leave an error token on
    the display until the next digit or reset.
    '''

    DEFAULT_WIDTH = 12
    DEFAULT_PLACES = 8
    SCIENTIFIC_DIGITS = 6
    # Long results beyond these magnitudes go scientific.
    LARGE = 1e12
    SMALL = 1e-6

    DIGITS = frozenset('0123456789')
    # Typographic aliases, as found on keypads.
    SYMBOLS = {
        '\N{MINUS SIGN}': Operator.SUBTRACT,
        '\N{MULTIPLICATION SIGN}': Operator.MULTIPLY,
        '\N{DIVISION SIGN}': Operator.DIVIDE,
    }

    def __init__(self, width=None, places=None):
        '''
        Create idle machine.

        :param width: Digits that fit on the display.
        :param places: Fractional digits kept by calculations.
        '''
        self.store_width(type(self).DEFAULT_WIDTH if width is None
                         else width)
        self.store_places(type(self).DEFAULT_PLACES if places is None
                          else places)
        self.reset()

    @wrap_user_errors('Bad width {1!r}')
    def store_width(self, width):
        '''
        Set display width.
        '''
        width = int(width)
        if width < 1:
            raise ValueError(width)
        self.width = width

    @wrap_user_errors('Bad places {1!r}')
    def store_places(self, places):
        '''
        Set fractional digits kept when rounding results.
        '''
        places = int(places)
        if places < 0:
            raise ValueError(places)
        self.places = places

    def reset(self):
        '''
        Return to idle: 0 on display, nothing pending, no error.
        '''
        self.buffer = '0'
        self.pending_operand = None
        self.pending_operator = None
        self.awaiting_operand = False
        self.has_decimal = False
        self.last_action = Action.NONE
        self.trace = []
        self.error = None

    def feed(self, groups):
        '''
        Run one lexed key on the machine.

        :param groups: Matched groups of a key, as from Lexer.matchedgroups.
        '''
        if 'digit' in groups:
            self.input_digit(groups['digit'])
        elif 'decimal' in groups:
            self.input_decimal()
        elif 'operator' in groups:
            self.handle_operator(groups['operator'])
        elif 'equals' in groups:
            self.evaluate()
        elif 'backspace' in groups:
            self.backspace()
        elif 'clear' in groups:
            self.reset()
        else:
            raise CalculatorError('Nothing to feed in {}'.format(
                sorted(groups)))

    @wrap_user_errors('Not a digit {1!r}')
    def _digit(self, key):
        if key not in type(self).DIGITS:
            raise ValueError(key)
        return key

    @wrap_user_errors('No such operator {1!r}')
    def _operator(self, symbol):
        if isinstance(symbol, Operator):
            return symbol
        return type(self).SYMBOLS.get(symbol) or Operator(symbol)

    def input_digit(self, digit):
        '''
        Type a digit, starting a fresh number where one is due.

        Recovers from an error first. Digits past the display width are
        dropped.
        '''
        digit = self._digit(digit)
        if self.error is not None:
            self.reset()

        if (self.awaiting_operand or
                self.buffer == '0' or
                self.last_action is Action.EQUALS):
            self.buffer = digit
            self.awaiting_operand = False
            self.has_decimal = False
        elif len(self.buffer.replace('.', '')) >= self.width:
            logger.debug('Display full', buffer=self.buffer, digit=digit)
            return
        else:
            self.buffer += digit

        self.last_action = Action.DIGIT

    def input_decimal(self):
        '''
        Type the decimal point.
        '''
        if self.error is not None:
            return

        if self.awaiting_operand or self.last_action is Action.EQUALS:
            self.buffer = '0.'
            self.awaiting_operand = False
            self.has_decimal = True
        elif '.' not in self.buffer and len(self.buffer) < self.width:
            self.buffer += '.'
            self.has_decimal = True

        self.last_action = Action.DECIMAL

    def handle_operator(self, op):
        '''
        Press a binary operator.

        Back to back operators replace one another. An operator following a
        completed second operand first resolves the pending operation, so
        12 + 7 - shows 19 before the subtraction is armed.
        '''
        op = self._operator(op)
        if self.error is not None:
            return

        value = self._value()

        if self.pending_operator is not None and \
           self.last_action is Action.OPERATOR:
            logger.debug('Operator replaced',
                         old=str(self.pending_operator), new=str(op))
            self.pending_operator = op
            self.trace[-1] = str(op)
            return

        if (self.pending_operand is not None and
                self.pending_operator is not None and
                not self.awaiting_operand):
            result = self.calculate()
            if result is None:
                return
            self.buffer = self.format_display(result)
            self.pending_operand = result
        else:
            self.pending_operand = value

        self.pending_operator = op
        self.awaiting_operand = True
        self.has_decimal = False
        self.trace.extend([self.format_display(value), str(op)])
        self.last_action = Action.OPERATOR
        logger.debug('Operator armed', operand=self.pending_operand,
                     operator=str(op))

    def _value(self):
        '''
        Number on display.
        '''
        return float(self.buffer)

    def _round(self, n):
        '''
        Round to the machine's fractional places, half away from zero.
        '''
        if n.is_integer():
            return n
        return quantize(n, self.places)

    def calculate(self):
        '''
        Apply the pending operation to the number on display.

        Returns the display value unchanged when nothing is pending. Returns
        None after installing an error when the operation has no finite
        result.
        '''
        right = self._value()
        if self.pending_operator is None or self.pending_operand is None:
            return right

        if self.pending_operator is Operator.DIVIDE and right == 0:
            logger.info('Division by zero', operand=self.pending_operand)
            self.error = ErrorKind.DIVISION_BY_ZERO
            return None

        result = self.pending_operator(self.pending_operand, right)
        if not math.isfinite(result):
            logger.info('Overflow', operand=self.pending_operand,
                        operator=str(self.pending_operator), right=right)
            self.error = ErrorKind.OVERFLOW
            return None
        return self._round(result)

    def evaluate(self):
        '''
        Press equals.

        Does nothing until a second operand has been typed.
        '''
        if self.error is not None or \
           self.pending_operator is None or \
           self.awaiting_operand:
            return

        result = self.calculate()
        if result is None:
            return

        self.buffer = self.format_display(result)
        self.pending_operand = result
        self.pending_operator = None
        self.awaiting_operand = True
        self.has_decimal = False
        self.trace = []
        self.last_action = Action.EQUALS
        logger.debug('Evaluated', result=result, display=self.buffer)

    def format_display(self, value):
        '''
        Text for value that fits the display.

        Long values that are very large or very small go scientific, others
        lose fractional digits until they fit, rounding half away from zero.
        '''
        value = float(value)
        text = shortest(value)
        if len(text) <= self.width:
            return text

        cls = type(self)
        magnitude = abs(value)
        if magnitude > cls.LARGE or 0 < magnitude < cls.SMALL:
            return scientific(value, cls.SCIENTIFIC_DIGITS)

        if '.' in text:
            integral = text.partition('.')[0]
            places = max(0, self.width - len(integral) - 1)
            text = shortest(quantize(value, places))
            if len(text) <= self.width:
                return text

        return scientific(value, cls.SCIENTIFIC_DIGITS)

    def backspace(self):
        '''
        Delete the last typed character.

        Nothing to delete while awaiting an operand.
        '''
        if self.error is not None or self.awaiting_operand:
            return

        if len(self.buffer) > 1:
            if self.buffer[-1] == '.':
                self.has_decimal = False
            self.buffer = self.buffer[:-1]
        else:
            self.buffer = '0'
            self.has_decimal = False

        self.last_action = Action.BACKSPACE

    @property
    def display(self):
        '''
        Text to show: the error token, if any, else the number.
        '''
        if self.error is not None:
            return str(self.error)
        return self.buffer

    @property
    def expression(self):
        return ' '.join(self.trace)

    @property
    def has_error(self):
        return self.error is not None

    @property
    def error_message(self):
        return None if self.error is None else str(self.error)

    def snapshot(self):
        '''
        Read-only copy of the whole state.
        '''
        return State(display=self.display,
                     expression=self.expression,
                     pending_operand=self.pending_operand,
                     pending_operator=self.pending_operator,
                     awaiting_operand=self.awaiting_operand,
                     has_decimal=self.has_decimal,
                     last_action=self.last_action,
                     error=self.error)
