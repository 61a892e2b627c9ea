# coding: utf-8

'''
Built-in math functions available to formulas, e.g. "floor(1d20 / 2)".

More can be registered per configuration with
`DiceConfiguration.register_function()`.
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

from typing import Callable, Any, Dict

import math


from rollform.base         import random
from rollform.base.numbers import NumberTypes


# -----------------------------------------------------------------------------
# Functions
# -----------------------------------------------------------------------------

def round_half_up(value: NumberTypes) -> int:
    '''Round to the nearest int; halves go up (2.5 -> 3, -2.5 -> -2).'''
    return int(math.floor(value + 0.5))


def sign(value: NumberTypes) -> int:
    if value > 0:
        return 1
    if value < 0:
        return -1
    return 0


def cbrt(value: NumberTypes) -> float:
    return math.copysign(abs(value) ** (1 / 3), value)


def trunc(value: NumberTypes) -> int:
    return math.trunc(value)


def random_uniform() -> float:
    '''A random float in [0, 1), from the module-level random instance.'''
    return random.random()


# -----------------------------------------------------------------------------
# Registry
# -----------------------------------------------------------------------------

FUNCTIONS: Dict[str, Callable[..., Any]] = {
    'abs':    abs,
    'ceil':   math.ceil,
    'floor':  math.floor,
    'round':  round_half_up,
    'trunc':  trunc,
    'sign':   sign,
    'max':    max,
    'min':    min,
    'sqrt':   math.sqrt,
    'cbrt':   cbrt,
    'pow':    math.pow,
    'exp':    math.exp,
    'log':    math.log,
    'log10':  math.log10,
    'log2':   math.log2,
    'hypot':  math.hypot,
    'sin':    math.sin,
    'cos':    math.cos,
    'tan':    math.tan,
    'asin':   math.asin,
    'acos':   math.acos,
    'atan':   math.atan,
    'atan2':  math.atan2,
    'random': random_uniform,
}
'''Function name -> callable. Mirrors the usual math library names.'''
