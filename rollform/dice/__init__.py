# coding: utf-8

'''
The dice formula engine.

Importing this registers every term class, dice denomination, and the
default Roll class.
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

from .           import registry
from .exceptions import (DiceError,
                         NotParsableError,
                         NonNumericResultError,
                         AlreadyEvaluatedError,
                         ExcessiveDiceCountError,
                         RecursionLimitError,
                         NonSynchronousTermError,
                         UnregisteredDenominationError,
                         UnregisteredFunctionError,
                         InvalidFulfillmentResultError,
                         ResolverError)
from .terms      import (DiceResult,
                         RollTerm,
                         OperatorTerm,
                         NumericTerm,
                         StringTerm,
                         DiceTerm,
                         Die,
                         FateDie,
                         Coin,
                         PoolTerm,
                         ParentheticalTerm,
                         FunctionTerm)
from .parser     import RollParser, Node
from .resolver   import (EvaluationSession,
                         Resolver,
                         RollResolver,
                         RESOLVERS)
from .roll       import Roll


# -----------------------------------------------------------------------------
# Exports
# -----------------------------------------------------------------------------

__all__ = [
    # ------------------------------
    # namespaced
    # ------------------------------
    'registry',

    # ------------------------------
    # Errors
    # ------------------------------
    'DiceError',
    'NotParsableError',
    'NonNumericResultError',
    'AlreadyEvaluatedError',
    'ExcessiveDiceCountError',
    'RecursionLimitError',
    'NonSynchronousTermError',
    'UnregisteredDenominationError',
    'UnregisteredFunctionError',
    'InvalidFulfillmentResultError',
    'ResolverError',

    # ------------------------------
    # Terms
    # ------------------------------
    'DiceResult',
    'RollTerm',
    'OperatorTerm',
    'NumericTerm',
    'StringTerm',
    'DiceTerm',
    'Die',
    'FateDie',
    'Coin',
    'PoolTerm',
    'ParentheticalTerm',
    'FunctionTerm',

    # ------------------------------
    # Parsing & Evaluation
    # ------------------------------
    'RollParser',
    'Node',
    'EvaluationSession',
    'Resolver',
    'RollResolver',
    'RESOLVERS',
    'Roll',
]
