# coding: utf-8

'''
Helper functions for dealing with numbers.
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

from typing import Union, Any, NewType

import math


# -----------------------------------------------------------------------------
# Constants
# -----------------------------------------------------------------------------

NumberTypes = NewType('NumberTypes', Union[int, float])
NumberTypesTuple = (int, float)


# -----------------------------------------------------------------------------
# Numbers in General
# -----------------------------------------------------------------------------

def is_number(input: Any) -> bool:
    '''
    Checks type of input. Returns True for ints and floats (but not bools),
    False for everything else.
    '''
    return (isinstance(input, NumberTypesTuple)
            and not isinstance(input, bool))


def is_finite(input: Any) -> bool:
    '''
    True if `input` is a number and is neither NaN nor infinite.
    '''
    return is_number(input) and math.isfinite(input)


def to_str(number: NumberTypes) -> str:
    '''
    Converts a number into the string we want to see in a formula.

    Floats that hold an integer value drop their '.0'.
    '''
    if isinstance(number, float) and number.is_integer():
        return str(int(number))
    return str(number)


def from_str(string: str) -> NumberTypes:
    '''
    Converts a string into either an int or a float.

    Raises ValueError if `string` isn't a number.
    '''
    string = string.strip()
    try:
        return int(string)
    except ValueError:
        return float(string)


def to_number(input: Any, default: NumberTypes = 0) -> NumberTypes:
    '''
    Coerce `input` into a number.

    Numeric strings are converted; bools become 0/1. Anything else, NaN
    included, becomes `default`.
    '''
    if isinstance(input, bool):
        return int(input)

    if isinstance(input, str):
        try:
            input = from_str(input)
        except ValueError:
            return default

    if not is_number(input) or math.isnan(input):
        return default
    return input
