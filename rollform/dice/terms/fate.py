# coding: utf-8

'''
Fate (aka Fudge) dice: three faces, valued -1, 0, +1.
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

from typing import TYPE_CHECKING, Optional, Any
if TYPE_CHECKING:
    from ..resolver import EvaluationSession

from rollform.base  import random

from ..             import registry
from .dice          import DiceTerm
from .die           import Die
from .result        import DiceResult


# -----------------------------------------------------------------------------
# Code
# -----------------------------------------------------------------------------

@registry.denomination('f')
class FateDie(DiceTerm):
    '''
    A type of DiceTerm used to represent a three-sided Fate/Fudge die.
    Mathematically behaves like 1d3-2.

    Results of -1 are flagged as failures and +1 as successes.
    '''

    DENOMINATION = 'f'

    MODIFIERS = {
        'r':  Die.reroll,
        'rr': Die.reroll_recursive,
        'k':  Die.keep,
        'kh': Die.keep,
        'kl': Die.keep,
        'd':  Die.drop,
        'dh': Die.drop,
        'dl': Die.drop,
    }
    '''Same modifier implementations as Die.'''

    def __init__(self, number=1, faces=None, method=None, modifiers=None,
                 results=None, options=None) -> None:
        super().__init__(number=number, faces=3, method=method,
                         modifiers=modifiers, results=results,
                         options=options)

    @classmethod
    def default_faces(klass) -> int:
        return 3

    @property
    def minimum_face(self) -> int:
        return -1

    @property
    def maximum_face(self) -> int:
        return 1

    def random_face(self) -> int:
        return random.randint(1, 3) - 2

    async def roll(self,
                   session: Optional['EvaluationSession'] = None,
                   **options: Any) -> DiceResult:
        result = await super().roll(session, **options)
        if result.result == -1:
            result.failure = True
        elif result.result == 1:
            result.success = True
        return result
