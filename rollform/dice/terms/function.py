# coding: utf-8

'''
A named function applied to sub-formulas: "floor(1d20 / 2)", "max(1d6, 3)".
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

from typing import (TYPE_CHECKING,
                    Optional, Any, Mapping, MutableMapping, Iterable,
                    Callable, List)
if TYPE_CHECKING:
    from ..resolver import EvaluationSession
    from ..roll     import Roll
    from .dice      import DiceTerm

import asyncio
import inspect
import json
import re


from rollform.logs         import log
from rollform.base         import numbers
from rollform.data.config  import config

from ..exceptions          import (NonNumericResultError,
                                   UnregisteredFunctionError)
from ..functions           import FUNCTIONS
from ..                    import registry
from .term                 import RollTerm


# -----------------------------------------------------------------------------
# Constants
# -----------------------------------------------------------------------------

DATA_ARGUMENT_RX = re.compile(r'^ᚖ([^ᚖ]+)ᚖ$')
'''Substituted non-scalar data, JSON encoded between 'ᚖ' marks.'''


# -----------------------------------------------------------------------------
# Code
# -----------------------------------------------------------------------------

@registry.term
class FunctionTerm(RollTerm):
    '''
    A type of RollTerm used to apply a function.

    Each argument is its own Roll. Functions come from the current
    DiceConfiguration's functions first, then the built-in math functions.
    '''

    SERIALIZE_ATTRIBUTES = ('fn', 'terms', 'rolls', 'result')
    is_intermediate = True

    def __init__(self,
                 fn:      str,
                 terms:   Optional[Iterable[str]]     = None,
                 rolls:   Optional[Iterable['Roll']]  = None,
                 result:  Any                         = None,
                 options: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__(options)

        self.fn: str = fn
        '''Name of the function.'''

        self.terms: List[str] = list(terms) if terms else []
        '''Formula of each argument.'''

        rolls = list(rolls) if rolls else []
        if len(rolls) != len(self.terms):
            Roll = registry.default_roll()
            rolls = [Roll.create(term) for term in self.terms]
        self.rolls: List['Roll'] = rolls

        self.result: Any = result

        if result is not None:
            self._evaluated = True

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def dice(self) -> List['DiceTerm']:
        return [die for roll in self.rolls for die in roll.dice]

    @property
    def total(self) -> Any:
        return self.result

    @property
    def expression(self) -> str:
        return f"{self.fn}({','.join(self.terms)})"

    @property
    def function(self) -> Optional[Callable[..., Any]]:
        '''The callable named by `fn`, or None.'''
        return config.get().functions.get(self.fn, None) or FUNCTIONS.get(
            self.fn, None)

    @property
    def is_deterministic(self) -> bool:
        if inspect.iscoroutinefunction(self.function):
            return False
        return all(roll.is_deterministic for roll in self.rolls)

    # -------------------------------------------------------------------------
    # Evaluation
    # -------------------------------------------------------------------------

    async def _evaluate(self,
                        session: Optional['EvaluationSession'],
                        options: MutableMapping[str, Any]) -> 'FunctionTerm':
        if self.is_deterministic_under(self, **options):
            return self._evaluate_sync(options)

        arguments = await asyncio.gather(
            *(self._evaluate_argument(roll, session, options)
              for roll in self.rolls))

        result = self._call(arguments)
        if inspect.isawaitable(result):
            result = await result
        self.result = self._coerce(result, options)
        return self

    async def _evaluate_argument(self,
                                 roll:    'Roll',
                                 session: Optional['EvaluationSession'],
                                 options: MutableMapping[str, Any]) -> Any:
        arg_options = dict(options)
        arg_options['allow_strings'] = True
        await roll.evaluate(session=session, **arg_options)
        roll.propagate_flavor(self.flavor)
        return self.parse_argument(roll)

    def _evaluate_sync(self,
                       options: MutableMapping[str, Any]) -> 'FunctionTerm':
        arg_options = dict(options)
        arg_options['allow_strings'] = True

        arguments = []
        for roll in self.rolls:
            roll.evaluate_sync(**arg_options)
            roll.propagate_flavor(self.flavor)
            arguments.append(self.parse_argument(roll))

        self.result = self._coerce(self._call(arguments), options)
        return self

    def _call(self, arguments: List[Any]) -> Any:
        function = self.function
        if function is None:
            raise log.exception(
                UnregisteredFunctionError,
                "The function '{}' is not registered.",
                self.fn,
                error_data={
                    'fn': self.fn,
                    'formula': self.formula,
                })
        try:
            return function(*arguments)
        except (ArithmeticError, ValueError, TypeError) as error:
            raise log.exception(
                NonNumericResultError,
                "Function '{}' failed for arguments {}.",
                self.fn, arguments,
                error_data={
                    'fn': self.fn,
                    'arguments': arguments,
                }) from error

    def _coerce(self, result: Any, options: Mapping[str, Any]) -> Any:
        '''
        Unless strings are allowed, the result must be a number.
        '''
        if options.get('allow_strings', False):
            return result

        if numbers.is_number(result):
            return result
        if isinstance(result, bool):
            return int(result)
        if isinstance(result, str):
            try:
                return numbers.from_str(result)
            except ValueError:
                pass

        raise log.exception(
            NonNumericResultError,
            "Function '{}' produced a non-numeric result: {}",
            self.fn, result,
            error_data={
                'fn': self.fn,
                'result': result,
            })

    @staticmethod
    def parse_argument(roll: 'Roll') -> Any:
        '''
        An evaluated argument Roll's product. Substituted data ('ᚖ{...}ᚖ')
        is decoded back into its object.
        '''
        product = roll.product
        if not isinstance(product, str):
            return product
        match = DATA_ARGUMENT_RX.match(product)
        return json.loads(match.group(1)) if match else product

    # -------------------------------------------------------------------------
    # Factories
    # -------------------------------------------------------------------------

    @classmethod
    def from_parse_node(klass, node: Mapping[str, Any]) -> 'FunctionTerm':
        Roll = registry.default_roll()
        rolls = [Roll.from_terms(Roll.instantiate_ast(term))
                 for term in node.get('terms', ())]
        data = dict(node)
        data['rolls'] = rolls
        data['terms'] = [roll.formula for roll in rolls]
        return klass._from_data(data)

    # -------------------------------------------------------------------------
    # Encoding / Decoding
    # -------------------------------------------------------------------------

    @classmethod
    def _from_data(klass,
                   data: MutableMapping[str, Any]) -> 'FunctionTerm':
        Roll = registry.default_roll()
        data['rolls'] = [roll if registry.is_roll(roll) else
                         Roll.from_data(roll)
                         for roll in (data.get('rolls', None) or ())]
        return super()._from_data(data)
