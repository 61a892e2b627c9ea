# coding: utf-8

'''
Base class for anything rolled: dice, coins, fate dice, etc.
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

from typing import (TYPE_CHECKING,
                    Optional, Union, Any, Type, Mapping, MutableMapping,
                    Iterable, Dict, List, Callable)
if TYPE_CHECKING:
    from ..resolver import EvaluationSession
    from ..roll     import Roll

import inspect
import math
import re


from rollform.logs         import log
from rollform.base         import random, numbers
from rollform.data.config  import config
from rollform.data.codec   import EncodedComplex

from ..exceptions          import (AlreadyEvaluatedError,
                                   ExcessiveDiceCountError,
                                   NonSynchronousTermError,
                                   UnregisteredDenominationError)
from ..                    import registry
from .term                 import RollTerm, FLAVOR_REGEXP_STRING
from .result               import DiceResult
from .                     import modifiers as mods


# -----------------------------------------------------------------------------
# Constants
# -----------------------------------------------------------------------------

MAX_DICE = 999
'''Most dice a single term may roll.'''

MODIFIERS_REGEXP_STRING = r'([^ (){}[\]+\-*/]+)'
'''Anything until a space, group symbol, or arithmetic operator.'''


# -----------------------------------------------------------------------------
# Code
# -----------------------------------------------------------------------------

@registry.term
class DiceTerm(RollTerm):
    '''
    An abstract base class for any type of RollTerm which involves randomized
    input from dice, coins, or other devices.

    `number` and `faces` can be ints or nested (unevaluated) Rolls for
    dynamic dice like "(1d4)d6".
    '''

    DENOMINATION: str = ''
    '''Registered denomination string ('d', 'f', 'c', ...).'''

    MODIFIERS: Dict[str, Union[str, Callable[..., Any]]] = {}
    '''Modifier command -> handler method name (or function).'''

    MODIFIER_REGEXP = re.compile(r'([a-zA-Z]+)([^a-zA-Z\s()+\-*/]+)?')
    '''Separates individual modifiers in a modifier string.'''

    REGEXP = re.compile(r'^([0-9]+)?[dD]([a-zA-Z]|[0-9]+)'
                        + MODIFIERS_REGEXP_STRING + '?'
                        + FLAVOR_REGEXP_STRING + '?$')

    SERIALIZE_ATTRIBUTES = ('number', 'faces', 'modifiers', 'results',
                            'method')

    def _define_vars(self) -> None:
        '''
        Instance variable definitions, type hinting, doc strings, etc.
        '''
        self._number: Union[numbers.NumberTypes, 'Roll'] = 1
        '''Count of dice to roll, or a Roll to evaluate for it.'''

        self._faces: Union[numbers.NumberTypes, 'Roll'] = 6
        '''Face count, or a Roll to evaluate for it.'''

        self._method: Optional[str] = None
        '''Fulfillment method id. Write-once.'''

        self._id: Optional[str] = None
        '''Set by a resolver to correlate its requests with this term.'''

        self.modifiers: List[str] = []
        '''Modifiers to apply (then: modifiers that were applied).'''

        self.results: List[DiceResult] = []
        '''Rolled results, in order.'''

    def __init__(self,
                 number:    Union[numbers.NumberTypes, 'Roll'] = 1,
                 faces:     Union[numbers.NumberTypes, 'Roll'] = 6,
                 method:    Optional[str]                      = None,
                 modifiers: Optional[Iterable[str]]            = None,
                 results:   Optional[Iterable[Any]]            = None,
                 options:   Optional[Mapping[str, Any]]        = None
                 ) -> None:
        super().__init__(options)
        self._define_vars()

        self._number = 1 if number is None else number
        self._faces = self.default_faces() if faces is None else faces
        self.method = method
        self.modifiers = list(modifiers) if modifiers else []
        self.results = [DiceResult.from_data(each)
                        for each in (results or ())]

        # Explicit results mean we've already been evaluated.
        if self.results:
            self._evaluated = True

    @classmethod
    def default_faces(klass) -> int:
        return 6

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def method(self) -> Optional[str]:
        '''The fulfillment method used to resolve this term.'''
        return self._method

    @method.setter
    def method(self, value: Optional[str]) -> None:
        # Write-once, and only known methods.
        if self._method or not value:
            return
        if not config.get().is_known_method(value):
            return
        self._method = value

    @property
    def number(self) -> Optional[numbers.NumberTypes]:
        '''
        Count of dice to roll. None if it's a Roll that isn't evaluated yet.
        '''
        if registry.is_roll(self._number):
            return self._number.total if self._number.evaluated else None
        return self._number

    @number.setter
    def number(self, value: Union[numbers.NumberTypes, 'Roll']) -> None:
        self._number = value

    @property
    def faces(self) -> Optional[numbers.NumberTypes]:
        '''
        Faces per die. None if it's a Roll that isn't evaluated yet.
        '''
        if registry.is_roll(self._faces):
            return self._faces.total if self._faces.evaluated else None
        return self._faces

    @faces.setter
    def faces(self, value: Union[numbers.NumberTypes, 'Roll']) -> None:
        self._faces = value

    @property
    def denomination(self) -> str:
        return self.DENOMINATION

    @property
    def expression(self) -> str:
        faces = (self._faces
                 if self.DENOMINATION == registry.DEFAULT_DENOMINATION else
                 self.DENOMINATION)
        return f"{self._number}d{faces}{''.join(self.modifiers)}"

    @property
    def dice(self) -> List['DiceTerm']:
        '''Dice terms inside our dynamic number/faces Rolls.'''
        dice = []
        for each in (self._number, self._faces):
            if registry.is_roll(each):
                dice.extend(each.dice)
        return dice

    @property
    def total(self) -> Optional[numbers.NumberTypes]:
        if not self._evaluated:
            return None
        total = sum(result.value for result in self.results if result.active)
        if (self.number or 0) < 0:
            total *= -1
        return total

    @property
    def values(self) -> List[numbers.NumberTypes]:
        '''Rolled values which are still active.'''
        return [result.result for result in self.results if result.active]

    @property
    def is_deterministic(self) -> bool:
        return False

    @property
    def minimum_face(self) -> numbers.NumberTypes:
        '''Result used when minimizing.'''
        return min(1, self.faces)

    @property
    def maximum_face(self) -> numbers.NumberTypes:
        '''Result used when maximizing.'''
        return self.faces

    # -------------------------------------------------------------------------
    # Dice Term Methods
    # -------------------------------------------------------------------------

    def alter(self,
              multiply: Any = None,
              add:      Any = None) -> 'DiceTerm':
        '''
        Multiply then add to the count of dice rolled.

        Bad `multiply` (not a finite, non-negative number) counts as 1; bad
        `add` (not an int) counts as 0.
        '''
        if self._evaluated:
            raise log.exception(
                AlreadyEvaluatedError,
                "You may not alter a {} after it has already been evaluated: "
                "{}",
                self.__class__.__name__, self.formula)

        if not numbers.is_finite(multiply) or multiply < 0:
            multiply = 1
        if not isinstance(add, int) or isinstance(add, bool):
            add = 0

        Roll = registry.default_roll()
        if registry.is_roll(self._number):
            self._number = Roll.create(
                f"({self._number} * {numbers.to_str(multiply)})")
        else:
            # Round half up.
            self._number = int(math.floor(self.number * multiply + 0.5))

        if add:
            if registry.is_roll(self._number):
                self._number = Roll.create(f"({self._number} + {add})")
            else:
                self._number += add
        return self

    def random_face(self) -> int:
        '''
        A random face value, from the module-level random instance.
        '''
        faces = int(self.faces or 0)
        if faces < 1:
            return 0
        return random.randint(1, faces)

    def _dice_count(self) -> int:
        '''
        How many results we need. Raises ExcessiveDiceCountError if too many.
        '''
        number = abs(self.number or 0)
        if number > MAX_DICE:
            raise log.exception(
                ExcessiveDiceCountError,
                "You may not evaluate a {} with more than {} requested "
                "results. Requested: {}",
                self.__class__.__name__, MAX_DICE, number,
                error_data={
                    'formula': self.formula,
                    'number': number,
                })
        return int(math.ceil(number))

    # -------------------------------------------------------------------------
    # Evaluation
    # -------------------------------------------------------------------------

    async def _evaluate(self,
                        session: Optional['EvaluationSession'],
                        options: MutableMapping[str, Any]) -> 'DiceTerm':
        if self.is_deterministic_under(self, **options):
            return self._evaluate_sync(options)
        return await self._evaluate_async(session, options)

    async def _evaluate_async(self,
                              session: Optional['EvaluationSession'],
                              options: MutableMapping[str, Any]
                              ) -> 'DiceTerm':
        for roll in (self._faces, self._number):
            if registry.is_roll(roll) and not roll.evaluated:
                await roll.evaluate(session=session, **options)

        count = self._dice_count()

        # Terms found after the resolver's first pass (e.g. intermediate
        # terms) get added now.
        resolver = session.resolver if session else None
        if resolver and not self._id:
            await resolver.add_term(self)

        for _ in range(len(self.results), count):
            await self.roll(session, **options)

        await mods.evaluate_modifiers(self, session)
        return self

    def _evaluate_sync(self, options: MutableMapping[str, Any]) -> 'DiceTerm':
        for roll in (self._faces, self._number):
            if registry.is_roll(roll) and not roll.evaluated:
                roll.evaluate_sync(**options)

        count = self._dice_count()

        for _ in range(len(self.results), count):
            if options.get('minimize', False):
                result = self.minimum_face
            elif options.get('maximize', False):
                result = self.maximum_face
            elif options.get('strict', True):
                raise log.exception(
                    NonSynchronousTermError,
                    "Cannot synchronously evaluate a non-deterministic "
                    "term: {}",
                    self.formula)
            else:
                continue
            self.results.append(DiceResult(result, active=True))
        return self

    async def roll(self,
                   session:  Optional['EvaluationSession'] = None,
                   minimize: bool                          = False,
                   maximize: bool                          = False,
                   **options: Any) -> DiceResult:
        '''
        Roll one more result and append it to `results`.

        Result comes from the fulfillment method if it gives one, else from
        internal randomness.
        '''
        value = await self._roll(session, **options)
        if minimize:
            value = self.minimum_face
        elif maximize:
            value = self.maximum_face
        elif value is None:
            value = self.random_face()

        result = DiceResult(value, active=True)
        self.results.append(result)
        return result

    async def _roll(self,
                    session: Optional['EvaluationSession'] = None,
                    **options: Any) -> Optional[numbers.NumberTypes]:
        '''
        Ask the configured fulfillment method for a result. Returns None if
        it didn't provide one.
        '''
        dice_config = config.get()
        method_id = dice_config.method_for(self.denomination)
        if method_id == config.MANUAL and not dice_config.allow_manual:
            return None

        method = dice_config.method(method_id)
        if not method:
            return None

        resolver = session.resolver if session else None
        if method.interactive and resolver:
            return await resolver.resolve_result(self, method_id, **options)

        if not method.handler:
            return None
        result = method.handler(self, **options)
        if inspect.isawaitable(result):
            result = await result
        return result

    # -------------------------------------------------------------------------
    # Factories
    # -------------------------------------------------------------------------

    @classmethod
    def match_term(klass,
                   expression:    str,
                   impute_number: bool = True) -> Optional[re.Match]:
        '''
        Does `expression` look like dice? If not `impute_number`, the count
        of dice must be explicit ("1d6", not "d6").
        '''
        match = klass.REGEXP.match(expression)
        if not match:
            return None
        if match.group(1) is None and not impute_number:
            return None
        return match

    @classmethod
    def parse_modifiers(klass, modifiers: Optional[str]) -> List[str]:
        '''Split a modifier string ("kh2x") into modifiers (["kh2", "x"]).'''
        return [match.group(0)
                for match in klass.MODIFIER_REGEXP.finditer(modifiers or '')]

    @classmethod
    def _denomination_class(klass, denomination: str) -> Type['DiceTerm']:
        '''
        Class registered for `denomination`, or the plain dice class.
        '''
        cls = registry.dice_class(denomination)
        if cls is not None:
            return cls
        if not denomination.isdigit():
            log.exception(
                UnregisteredDenominationError,
                "DiceTerm denomination '{}' is not registered; using '{}'.",
                denomination, registry.DEFAULT_DENOMINATION,
                error_data={
                    'denomination': denomination,
                },
                log_level=log.Level.WARNING)
        return registry.default_dice()

    @classmethod
    def from_match(klass, match: re.Match) -> 'DiceTerm':
        '''
        Construct the right kind of dice from a `match_term()` match.
        '''
        number, denomination, modifiers, flavor = match.group(1, 2, 3, 4)

        denomination = denomination.lower()
        cls = klass._denomination_class(denomination)

        kwargs = {
            'number': int(number) if number else 1,
            'modifiers': klass.parse_modifiers(modifiers),
            'options': {'flavor': flavor} if flavor else None,
        }
        if denomination.isdigit():
            kwargs['faces'] = int(denomination)
        return cls(**kwargs)

    @classmethod
    def from_parse_node(klass, node: Mapping[str, Any]) -> 'DiceTerm':
        Roll = registry.default_roll()

        number = node.get('number', None)
        faces = node.get('faces', None)
        denomination = registry.DEFAULT_DENOMINATION

        if number is None:
            number = 1
        if isinstance(number, Mapping):
            number = Roll.from_terms(Roll.instantiate_ast(number))

        if isinstance(faces, str):
            denomination = faces.lower()
        elif isinstance(faces, Mapping):
            faces = Roll.from_terms(Roll.instantiate_ast(faces))

        cls = klass._denomination_class(denomination)
        data = dict(node)
        data['number'] = number
        data['modifiers'] = klass.parse_modifiers(node.get('modifiers', None))
        data[klass.TYPE_FIELD_NAME] = cls.__name__
        data.pop('faces', None)
        if denomination == registry.DEFAULT_DENOMINATION:
            data['faces'] = faces
        return cls._from_data(data)

    # -------------------------------------------------------------------------
    # Encoding / Decoding
    # -------------------------------------------------------------------------

    def to_json(self) -> EncodedComplex:
        data = super().to_json()
        if registry.is_roll(self._number):
            data['_number'] = self._number.to_json()
        if registry.is_roll(self._faces):
            data['_faces'] = self._faces.to_json()
        return data

    @classmethod
    def _from_data(klass,
                   data: MutableMapping[str, Any]) -> 'DiceTerm':
        Roll = registry.default_roll()
        if data.get('_number', None):
            data['number'] = Roll.from_data(data['_number'])
        if data.get('_faces', None):
            data['faces'] = Roll.from_data(data['_faces'])
        return super()._from_data(data)
