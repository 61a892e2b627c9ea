# coding: utf-8

'''
A plain number in a dice formula.
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

from typing import Optional, Union, Any, Mapping

import re


from rollform.base  import numbers

from ..             import registry
from .term          import RollTerm, FLAVOR_REGEXP_STRING


# -----------------------------------------------------------------------------
# Code
# -----------------------------------------------------------------------------

@registry.term
class NumericTerm(RollTerm):
    '''
    A term which represents a single number.
    '''

    REGEXP = re.compile(r'^([0-9]+(?:\.[0-9]+)?)'
                        + FLAVOR_REGEXP_STRING + '?$')
    SERIALIZE_ATTRIBUTES = ('number',)

    def __init__(self,
                 number:  Union[numbers.NumberTypes, str],
                 options: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__(options)
        if isinstance(number, str):
            number = numbers.from_str(number)
        self.number: numbers.NumberTypes = number

    @property
    def expression(self) -> str:
        return numbers.to_str(self.number)

    @property
    def total(self) -> numbers.NumberTypes:
        return self.number

    # -------------------------------------------------------------------------
    # Factories
    # -------------------------------------------------------------------------

    @classmethod
    def match_term(klass, expression: str) -> Optional[re.Match]:
        '''
        Does `expression` look like a number (plus optional flavor)?
        '''
        return klass.REGEXP.match(expression)

    @classmethod
    def from_match(klass, match: re.Match) -> 'NumericTerm':
        number, flavor = match.group(1, 2)
        return klass(number, options={'flavor': flavor} if flavor else None)
