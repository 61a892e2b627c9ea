# coding: utf-8

'''
Exceptions for parsing & evaluating dice formulas.
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

from rollform.base.exceptions import RollformError


# -----------------------------------------------------------------------------
# Base
# -----------------------------------------------------------------------------

class DiceError(RollformError):
    '''
    Base class for all errors from the dice engine.
    '''
    ...


# -----------------------------------------------------------------------------
# "Could not parse" vs "could not compute a number"
# -----------------------------------------------------------------------------

class NotParsableError(DiceError):
    '''
    Formula is not a string, or the grammar could not parse it.
    '''
    ...


class NonNumericResultError(DiceError):
    '''
    Formula parsed, but evaluating it did not produce a number.
    '''
    ...


# -----------------------------------------------------------------------------
# Evaluation
# -----------------------------------------------------------------------------

class AlreadyEvaluatedError(DiceError):
    '''
    Attempted to evaluate or alter a term/roll that is already evaluated and
    is now immutable.
    '''
    ...


class ExcessiveDiceCountError(DiceError):
    '''
    More than 999 dice requested for one dice term.
    '''
    ...


class RecursionLimitError(DiceError):
    '''
    Reroll/explode modifier kept going past its safety cap.
    '''
    ...


class NonSynchronousTermError(DiceError):
    '''
    Synchronous evaluation (strict) ran into a term that needs randomness.
    '''
    ...


# -----------------------------------------------------------------------------
# Registration
# -----------------------------------------------------------------------------

class UnregisteredDenominationError(DiceError):
    '''
    A dice denomination has no registered term class. Recoverable; the plain
    Die class is used instead.
    '''
    ...


class UnregisteredFunctionError(DiceError):
    '''
    A function term names a function we don't know about.
    '''
    ...


# -----------------------------------------------------------------------------
# Fulfillment
# -----------------------------------------------------------------------------

class InvalidFulfillmentResultError(DiceError):
    '''
    An out-of-band result has nowhere to go (no empty slot for it), or is not
    a usable result. Recoverable; the result is just not consumed.
    '''
    ...


class ResolverError(DiceError):
    '''
    A resolver was used incorrectly.
    '''
    ...
