# coding: utf-8

'''
A random interface that can be un-randomed for unit testing.
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

from typing import Optional, Iterable

import random as _random
import itertools
import os as _os


# -----------------------------------------------------------------------------
# Code
# -----------------------------------------------------------------------------

class Random(_random.Random):
    '''Default Actually Random Randomness'''
    ...


class NotRandom(Random):
    '''
    Not-Random-at-All Randomness

    `randint()` ignores its range and returns the next of `values`, cycling
    back to the start when they run out.
    '''

    def __init__(self,
                 values:  Optional[Iterable[int]] = None,
                 seeding: Optional[int]           = None) -> None:
        super().__init__(seeding)
        self.values = list(values) if values else [1, 2, 3, 4, 5, 6]
        self._cycle = itertools.cycle(self.values)

    def randint(self, a, b):
        return next(self._cycle)


# -----------------------------------------------------------------------------
# Singleton Setup
# -----------------------------------------------------------------------------

# These will share state, but that's how Python's random module works.

_inst = Random()
seed = _inst.seed
random = _inst.random
uniform = _inst.uniform
randint = _inst.randint
choice = _inst.choice
shuffle = _inst.shuffle
getstate = _inst.getstate
setstate = _inst.setstate


# Have forks get their own seeds.
if hasattr(_os, "register_at_fork"):
    _os.register_at_fork(after_in_child=lambda: _inst.seed())


def singleton(instance: Random) -> Random:
    '''
    Swap out the module's random instance (e.g. for a NotRandom in tests).
    Returns `instance`.
    '''
    global _inst, seed, random, uniform, randint, choice, shuffle
    global getstate, setstate

    _inst = instance
    seed = _inst.seed
    random = _inst.random
    uniform = _inst.uniform
    randint = _inst.randint
    choice = _inst.choice
    shuffle = _inst.shuffle
    getstate = _inst.getstate
    setstate = _inst.setstate
    return _inst


def reset() -> None:
    '''
    Go back to actual randomness.
    '''
    singleton(Random())
