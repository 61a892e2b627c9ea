# coding: utf-8

'''
Coin flips: 'c' denomination. Tails is 0, heads is 1.
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

from typing import Optional
import re


from rollform.base  import random

from ..             import registry
from .dice          import DiceTerm


# -----------------------------------------------------------------------------
# Code
# -----------------------------------------------------------------------------

@registry.denomination('c')
class Coin(DiceTerm):
    '''
    A type of DiceTerm used to represent flipping a two-sided coin.

    "2dc" flips two coins for 0-2 heads. "3dcc1" calls heads: each heads is
    a success.
    '''

    DENOMINATION = 'c'

    MODIFIERS = {
        'c': 'call',
    }

    CALL_RX = re.compile(r'c([01])', re.IGNORECASE)

    def __init__(self, number=1, faces=None, method=None, modifiers=None,
                 results=None, options=None) -> None:
        super().__init__(number=number, faces=2, method=method,
                         modifiers=modifiers, results=results,
                         options=options)

    @classmethod
    def default_faces(klass) -> int:
        return 2

    @property
    def minimum_face(self) -> int:
        return 0

    @property
    def maximum_face(self) -> int:
        return 1

    def random_face(self) -> int:
        return random.randint(0, 1)

    def call(self, modifier: str, session=None) -> Optional[bool]:
        '''
        Call heads (c1) or tails (c0); matching flips are successes.
        '''
        match = self.CALL_RX.search(modifier)
        if not match:
            return False
        target = int(match.group(1))
        for result in self.results:
            result.success = (result.result == target)
            result.count = 1 if result.success else 0
        return None
