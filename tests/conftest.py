from pytest import Item, fixture

import structlog

from keycalc.lexer import Lexer
from keycalc.machine import Machine
from keycalc.util import configure_logging


def pytest_assertion_pass(item: Item,
                          lineno: int,
                          orig: str,
                          expl: str) -> None:
    '''
    Log every assertion, in case we later need to audit a run.

    Excessive in most cases.

    Use with pytest -rP.
    '''
    print('given', item.name + ':' + str(lineno), str(orig))  # no repr()!)
    print('actual', item.name + ':' + str(lineno),
          '\n'.join(str(expl).splitlines()[:-2]))


@fixture(autouse=True)
def _structlog_defaults():
    '''
    Put back the quiet logging keycalc starts with, whatever a test or CLI
    run configured.
    '''
    yield
    structlog.reset_defaults()
    configure_logging()


@fixture
def machine():
    return Machine()


@fixture
def press():
    '''
    Feed a string of keys to a machine, as typed.
    '''
    lexer = Lexer()

    def press(machine, keys):
        for match in lexer.lex(keys):
            if lexer.isfeedable(match):
                machine.feed(lexer.matchedgroups(match))
        return machine.display
    return press
