# coding: utf-8

'''
Arithmetic operators in a dice formula.
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

from typing import Optional, Any, Mapping

import re
import math

from rollform.logs         import log
from rollform.base.numbers import NumberTypes, is_number

from ..exceptions          import NonNumericResultError
from ..                    import registry
from .term                 import RollTerm


# -----------------------------------------------------------------------------
# Constants
# -----------------------------------------------------------------------------

PRECEDENCE = {
    '+': 10,
    '-': 10,
    '*': 20,
    '/': 20,
    '%': 20,
}
'''Higher binds tighter. Unknown operators are 0.'''

OPERATORS = ('+', '-', '*', '/', '%')


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------

def _remainder(left: NumberTypes, right: NumberTypes) -> NumberTypes:
    '''
    Truncated remainder: the result takes the sign of `left`, so
    -7 % 3 is -1 and 7 % -3 is 1.
    '''
    if isinstance(left, int) and isinstance(right, int):
        if right == 0:
            raise ZeroDivisionError('integer modulo by zero')
        remainder = abs(left) % abs(right)
        return -remainder if left < 0 else remainder
    return math.fmod(left, right)


# -----------------------------------------------------------------------------
# Code
# -----------------------------------------------------------------------------

@registry.term
class OperatorTerm(RollTerm):
    '''
    One of: + - * / %

    Always evaluated; an operator has nothing to roll.
    '''

    PRECEDENCE = PRECEDENCE
    OPERATORS = OPERATORS
    REGEXP = re.compile(r'\s*([-+*/%])\s*')
    SERIALIZE_ATTRIBUTES = ('operator',)

    def __init__(self,
                 operator: str,
                 options:  Optional[Mapping[str, Any]] = None) -> None:
        super().__init__(options)
        self.operator = operator
        self._evaluated = True

    @property
    def flavor(self) -> str:
        return ''

    @property
    def expression(self) -> str:
        return f" {self.operator} "

    @property
    def total(self) -> str:
        return f" {self.operator} "

    @property
    def precedence(self) -> int:
        return self.PRECEDENCE.get(self.operator, 0)

    def _mark_evaluated(self) -> None:
        # Nothing to do; operators are born evaluated.
        pass

    @classmethod
    def _from_data(klass, data):
        term = super()._from_data(data)
        term._evaluated = True
        return term

    @staticmethod
    def operate(operator: str,
                left:     NumberTypes,
                right:    NumberTypes) -> NumberTypes:
        '''
        Apply `operator` to the operands. Unknown operators add.
        '''
        if not is_number(left) or not is_number(right):
            raise log.exception(
                NonNumericResultError,
                "Cannot compute '{} {} {}'; operands must be numbers.",
                left, operator, right,
                error_data={
                    'operator': operator,
                    'left': left,
                    'right': right,
                })
        try:
            if operator == '-':
                return left - right
            if operator == '*':
                return left * right
            if operator == '/':
                return left / right
            if operator == '%':
                return _remainder(left, right)
        except (ZeroDivisionError, ValueError) as error:
            raise log.exception(
                NonNumericResultError,
                "Cannot compute '{} {} {}'; division by zero.",
                left, operator, right,
                error_data={
                    'operator': operator,
                    'left': left,
                    'right': right,
                }) from error

        return left + right
