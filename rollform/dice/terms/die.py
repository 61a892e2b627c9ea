# coding: utf-8

'''
Plain old dice: 'd' denomination, any number of faces.
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

from typing import TYPE_CHECKING, Optional
if TYPE_CHECKING:
    from ..resolver import EvaluationSession

from rollform.base.numbers import NumberTypes

from ..                    import registry
from .dice                 import DiceTerm
from .                     import modifiers as mods


# -----------------------------------------------------------------------------
# Code
# -----------------------------------------------------------------------------

@registry.denomination('d')
class Die(DiceTerm):
    '''
    A type of DiceTerm used to represent rolling a fair n-sided die.

    Examples:
      - "1d20"
      - "4d6kh3": Roll four six-sided dice and keep the highest three.
      - "2d10x10": Roll two ten-sided dice, exploding on tens.
    '''

    DENOMINATION = 'd'

    MODIFIERS = {
        'r':    'reroll',
        'rr':   'reroll_recursive',
        'x':    'explode',
        'xo':   'explode_once',
        'k':    'keep',
        'kh':   'keep',
        'kl':   'keep',
        'd':    'drop',
        'dh':   'drop',
        'dl':   'drop',
        'min':  'minimum',
        'max':  'maximum',
        'even': 'count_even',
        'odd':  'count_odd',
        'cs':   'count_success',
        'cf':   'count_failures',
        'df':   'deduct_failures',
        'sf':   'subtract_failures',
        'ms':   'margin_success',
    }

    @property
    def total(self) -> Optional[NumberTypes]:
        total = super().total
        if total is None:
            return None
        if self.options.get('marginSuccess', None):
            return total - int(self.options['marginSuccess'])
        if self.options.get('marginFailure', None):
            return int(self.options['marginFailure']) - total
        return total

    @property
    def denomination(self) -> str:
        return f"d{self.faces}"

    # -------------------------------------------------------------------------
    # Term Modifiers
    # -------------------------------------------------------------------------

    async def reroll(self,
                     modifier:  str,
                     session:   Optional['EvaluationSession'] = None,
                     recursive: bool                          = False
                     ) -> Optional[bool]:
        '''
        Re-roll the Die, rolling additional results for any values which
        fall within a target set. "r1", "r<3", "r2=1"...
        '''
        return await mods.reroll(self, modifier,
                                 session=session, recursive=recursive)

    async def reroll_recursive(self,
                               modifier: str,
                               session:  Optional['EvaluationSession'] = None
                               ) -> Optional[bool]:
        '''
        Re-roll, and keep re-rolling new results that also match.
        '''
        return await mods.reroll(self, modifier,
                                 session=session, recursive=True)

    async def explode(self,
                      modifier:  str,
                      session:   Optional['EvaluationSession'] = None,
                      recursive: bool                          = True
                      ) -> Optional[bool]:
        '''
        Explode the Die, rolling additional results for any values which
        match the target set. "x", "x>4", "x2>5"...
        '''
        return await mods.explode(self, modifier,
                                  session=session, recursive=recursive)

    async def explode_once(self,
                           modifier: str,
                           session:  Optional['EvaluationSession'] = None
                           ) -> Optional[bool]:
        return await mods.explode(self, modifier,
                                  session=session, recursive=False)

    def keep(self, modifier: str, session=None) -> Optional[bool]:
        return mods.keep(self.results, modifier)

    def drop(self, modifier: str, session=None) -> Optional[bool]:
        return mods.drop(self.results, modifier)

    def minimum(self, modifier: str, session=None) -> Optional[bool]:
        return mods.minimum(self.results, modifier)

    def maximum(self, modifier: str, session=None) -> Optional[bool]:
        return mods.maximum(self.results, modifier)

    def count_even(self, modifier: str, session=None) -> Optional[bool]:
        return mods.count_even(self.results, modifier)

    def count_odd(self, modifier: str, session=None) -> Optional[bool]:
        return mods.count_odd(self.results, modifier)

    def count_success(self, modifier: str, session=None) -> Optional[bool]:
        return mods.count_success(self.results, modifier, self.faces)

    def count_failures(self, modifier: str, session=None) -> Optional[bool]:
        return mods.count_failures(self.results, modifier, self.faces)

    def deduct_failures(self, modifier: str, session=None) -> Optional[bool]:
        return mods.deduct_failures(self.results, modifier)

    def subtract_failures(self, modifier: str, session=None) -> Optional[bool]:
        return mods.subtract_failures(self.results, modifier)

    def margin_success(self, modifier: str, session=None) -> Optional[bool]:
        return mods.margin(self.options, modifier)
