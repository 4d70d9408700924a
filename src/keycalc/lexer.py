from functools import reduce
import operator

import regex

from .util import CalculatorError, Operator
from .machine import Machine


class Lexer:
    '''
    Lexer for calculator keystrokes.

    Every lexeme is a single key press, so there is no lookahead and nothing
    is ever incomplete. Holds no internal state.
    '''
    DIGIT = r'\d'
    # Comma for locales that use it on the keypad
    DECIMAL = r'[.,]'
    OPERATOR = r'(?:' + r'|'.join(map(regex.escape,
                                      [op.value for op in Operator] +
                                      list(Machine.SYMBOLS))) + r')'
    # Enter is a carriage return in raw terminal mode
    EQUALS = r'[=\r]'
    # <, ^H, DEL
    BACKSPACE = r'[<\x08\x7f]'
    # c, C, ESC
    CLEAR = r'[cC\x1b]'
    SPACE = r'\s+'

    assert not [op for op in Operator if len(op.value) != 1]

    # All possible lexemes.
    LEXEME = r'(?<digit>' + DIGIT + r')|' \
             r'(?<decimal>' + DECIMAL + r')|' \
             r'(?<operator>' + OPERATOR + r')|' \
             r'(?<equals>' + EQUALS + r')|' \
             r'(?<backspace>' + BACKSPACE + r')|' \
             r'(?<clear>' + CLEAR + r')|' \
             r'(?<space>' + SPACE + r')'
    # Default regex flags for matching lexemes
    FLAGS = reduce(operator.__or__,
                   {regex.ASCII,
                    regex.VERSION1},
                   0)

    def lex(self, line):
        '''
        Take a line and return all lexemes.

        Raises on the first key that isn't one, after yielding those before.
        '''
        while line:
            match = regex.match(type(self).LEXEME, line,
                                flags=type(self).FLAGS)
            if match is None:
                break
            yield match
            line = line[len(match.group(0)):]
        if line:
            raise CalculatorError("Couldn't lex {0!r}".format(line.strip()))

    def isfeedable(self, match):
        '''
        Return True if lexeme can be fed to machine.
        '''
        return 'space' not in self.matchedgroups(match).keys()

    def matchedgroups(self, match):
        '''
        Return the groups that matched, by name.
        '''
        return {key: value
                for key, value
                in match.groupdict().items()
                if value}

    def symbol(self, match):
        '''
        Return the ASCII operator symbol of an operator lexeme, else None.
        '''
        key = self.matchedgroups(match).get('operator')
        if key is None:
            return None
        return str(Machine.SYMBOLS.get(key) or Operator(key))
