# coding: utf-8

'''
All the pieces a Roll is made of. Importing this registers every term class
and dice denomination.
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

from .result        import DiceResult
from .term          import RollTerm
from .operator      import OperatorTerm
from .numeric       import NumericTerm
from .string        import StringTerm
from .dice          import DiceTerm
from .die           import Die
from .fate          import FateDie
from .coin          import Coin
from .pool          import PoolTerm
from .parenthetical import ParentheticalTerm
from .function      import FunctionTerm


# -----------------------------------------------------------------------------
# Exports
# -----------------------------------------------------------------------------

__all__ = [
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
]
