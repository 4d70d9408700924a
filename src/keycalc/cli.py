from argparse import ArgumentParser, REMAINDER, OPTIONAL
import logging
import sys

from prompt_toolkit import PromptSession

from .util import CalculatorError, configure_logging
from .machine import Machine
from .lexer import Lexer


class InteractiveInput:
    def __init__(self, prompt, machine):
        self.prompt = prompt
        self.machine = machine

    def display(self):
        return self.machine.display

    def expression(self):
        # An empty toolbar is not drawn at all
        return self.machine.expression or ' '

    def __iter__(self):
        try:
            session = PromptSession(message=self.prompt,
                                    enable_suspend=True,
                                    history=None,
                                    rprompt=self.display,
                                    bottom_toolbar=self.expression,
                                    prompt_continuation=' ' * len(self.prompt),
                                    # Certainly not! But be explicit.
                                    erase_when_done=False)
            while True:
                yield session.prompt()
        except EOFError:
            return


class CLI:
    '''
    Command line interface to the calculator.
    '''

    DEFAULT_PROMPT = '> '

    def dumper(self):
        '''
        Dump all lexemes matches and the operator they stand for.
        '''
        lexer = Lexer()
        print('[groups]\t<repr(key)>\t<operator>')
        for line in self.args.expressions:
            try:
                for match in lexer.lex(line):
                    groups = lexer.matchedgroups(match)
                    print(*groups.keys(),
                          repr(match.group(0)),
                          lexer.symbol(match),
                          sep='\t')
            except CalculatorError as e:
                print(e.args[0], file=sys.stderr)

    def executor(self):
        '''
        Run machine (calculator), showing the display after every line.
        '''
        lexer = Lexer()
        for line in self.args.expressions:
            try:
                for match in lexer.lex(line):
                    if lexer.isfeedable(match):
                        self.machine.feed(lexer.matchedgroups(match))
            # Abort entire rest of line, like a jammed key
            except CalculatorError as e:
                print(e.args[0], file=sys.stderr)
            self.render()

    def render(self):
        '''
        Print expression trace, if asked, then display.

        Errors go to stderr so they can be told apart from numbers.
        '''
        if self.args.trace and self.machine.expression:
            print(self.machine.expression)
        print(self.machine.display,
              file=sys.stderr if self.machine.has_error else sys.stdout)

    def raw_grammar(self):
        '''
        Print current internally defined grammar.
        '''
        print(Lexer.LEXEME)

    def _prompting_input(self):
        '''
        Return prompting stdin.__iter__ decorator...

        If either:
        - prompt explicitly specified.
        - both stdin/out are a tty
        '''
        if self.args.prompt or \
           sys.stdin.isatty() and sys.stdout.isatty():
            return InteractiveInput(prompt=self.args.prompt or
                                    self.DEFAULT_PROMPT,
                                    machine=self.machine)
        else:
            return sys.stdin

    def _configure_logging(self):
        level = logging.DEBUG if self.args.verbose else logging.WARNING
        configure_logging(level, file=sys.stderr)

    def __init__(self):
        '''
        Create ready to run CLI.

        Does not run or parse command line arguments.
        '''
        self.argument_parser = ArgumentParser(description='Pocket calculator')
        self.argument_parser.add_argument('-v', '--verbose',
                                          action='store_true',
                                          help='log every state transition')
        self.argument_parser.add_argument('-t', '--trace',
                                          action='store_true',
                                          help='print the expression trace')
        self.argument_parser.add_argument('-w', '--width',
                                          type=int,
                                          default=Machine.DEFAULT_WIDTH,
                                          help='display width in digits')
        self.argument_parser.add_argument('-k', '--places',
                                          type=int,
                                          default=Machine.DEFAULT_PLACES,
                                          help='fractional digits kept')
        int_nonint_groups = self.argument_parser.add_mutually_exclusive_group()
        int_nonint_groups.add_argument('-e', '--expression',
                                       nargs=REMAINDER,
                                       dest='expressions')
        int_nonint_groups.add_argument('-p', '--prompt',
                                       nargs=OPTIONAL,
                                       const=self.DEFAULT_PROMPT)
        main_groups = self.argument_parser.add_mutually_exclusive_group()
        for short_, long_, action in [('-G', '--raw-grammar',
                                       self.raw_grammar),
                                      ('-D', '--dump', self.dumper)]:
            main_groups.add_argument(short_, long_,
                                     action='store_const',
                                     const=action,
                                     dest='action')
        self.argument_parser.set_defaults(action=self.executor,
                                          expressions=None)

    def run(self, *, args=None):
        '''
        Run CLI, given these args, or previously passed CLI args.
        '''
        self.args = self.argument_parser.parse_args(args)
        self._configure_logging()
        try:
            self.machine = Machine(width=self.args.width,
                                   places=self.args.places)
        except CalculatorError as e:
            self.argument_parser.error(e.args[0])
        if self.args.expressions is None:
            self.args.expressions = self._prompting_input()
        try:
            self.args.action()
        except KeyboardInterrupt:
            sys.exit(1)


def main(args=None):
    CLI().run(args=args)
