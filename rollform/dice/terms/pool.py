# coding: utf-8

'''
Dice pools: "{4d6, 1d20+2}kh" rolls every inner formula and treats each total
as one result.
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

from typing import (TYPE_CHECKING,
                    Optional, Any, Mapping, MutableMapping, Iterable,
                    List)
if TYPE_CHECKING:
    from ..resolver import EvaluationSession
    from ..roll     import Roll

import re


from rollform.logs          import log
from rollform.base.numbers  import NumberTypes

from ..exceptions           import DiceError
from ..                     import registry
from .term                  import RollTerm
from .dice                  import DiceTerm, MODIFIERS_REGEXP_STRING
from .result                import DiceResult
from .                      import modifiers as mods


# -----------------------------------------------------------------------------
# Code
# -----------------------------------------------------------------------------

@registry.term
class PoolTerm(RollTerm):
    '''
    A type of RollTerm used to represent a pool of dice or other Rolls. Each
    inner Roll contributes its total as one result, which can then be kept,
    dropped, or counted with modifiers.
    '''

    MODIFIERS = {
        'k':  'keep',
        'kh': 'keep',
        'kl': 'keep',
        'd':  'drop',
        'dh': 'drop',
        'dl': 'drop',
        'cs': 'count_success',
        'cf': 'count_failures',
    }

    REGEXP = re.compile(r'{([^}]+)}' + MODIFIERS_REGEXP_STRING + '?')

    SERIALIZE_ATTRIBUTES = ('terms', 'modifiers', 'rolls', 'results')

    def __init__(self,
                 terms:     Optional[Iterable[str]]     = None,
                 modifiers: Optional[Iterable[str]]     = None,
                 rolls:     Optional[Iterable['Roll']]  = None,
                 results:   Optional[Iterable[Any]]     = None,
                 options:   Optional[Mapping[str, Any]] = None) -> None:
        super().__init__(options)

        self.terms: List[str] = list(terms) if terms else []
        '''Formula of each inner roll.'''

        self.modifiers: List[str] = list(modifiers) if modifiers else []

        rolls = list(rolls) if rolls else []
        if len(rolls) != len(self.terms):
            Roll = registry.default_roll()
            rolls = [Roll.create(term) for term in self.terms]
        self.rolls: List['Roll'] = rolls
        '''One Roll per entry in `terms`.'''

        self.results: List[DiceResult] = [DiceResult.from_data(each)
                                          for each in (results or ())]
        '''One result per inner Roll, once evaluated.'''

        # Explicit rolls and results mean we've already been evaluated.
        if self.rolls and self.results:
            self._evaluated = True

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def dice(self) -> List['DiceTerm']:
        return [die for roll in self.rolls for die in roll.dice]

    @property
    def expression(self) -> str:
        return "{" + ",".join(self.terms) + "}" + "".join(self.modifiers)

    @property
    def total(self) -> Optional[NumberTypes]:
        if not self._evaluated:
            return None
        return sum(result.value for result in self.results if result.active)

    @property
    def values(self) -> List[NumberTypes]:
        return [result.result for result in self.results if result.active]

    @property
    def is_deterministic(self) -> bool:
        return all(roll.is_deterministic for roll in self.rolls)

    def alter(self, *args: Any, **kwargs: Any) -> 'PoolTerm':
        '''Alter each inner roll.'''
        for roll in self.rolls:
            roll.alter(*args, **kwargs)
        return self

    # -------------------------------------------------------------------------
    # Evaluation
    # -------------------------------------------------------------------------

    async def _evaluate(self,
                        session: Optional['EvaluationSession'],
                        options: MutableMapping[str, Any]) -> 'PoolTerm':
        if self.is_deterministic_under(self, **options):
            return self._evaluate_sync(options)

        for roll in self.rolls:
            await roll.evaluate(session=session, **options)
            roll.propagate_flavor(self.flavor)
            self.results.append(DiceResult(roll.total, active=True))

        await mods.evaluate_modifiers(self, session)
        return self

    def _evaluate_sync(self, options: MutableMapping[str, Any]) -> 'PoolTerm':
        for roll in self.rolls:
            roll.evaluate_sync(**options)
            roll.propagate_flavor(self.flavor)
            self.results.append(DiceResult(roll.total, active=True))
        return self

    # -------------------------------------------------------------------------
    # Modifiers
    # -------------------------------------------------------------------------

    def keep(self, modifier: str, session=None) -> Optional[bool]:
        return mods.keep(self.results, modifier)

    def drop(self, modifier: str, session=None) -> Optional[bool]:
        return mods.drop(self.results, modifier)

    def count_success(self, modifier: str, session=None) -> Optional[bool]:
        return mods.count_success(self.results, modifier)

    def count_failures(self, modifier: str, session=None) -> Optional[bool]:
        return mods.count_failures(self.results, modifier)

    # -------------------------------------------------------------------------
    # Factories
    # -------------------------------------------------------------------------

    @classmethod
    def from_expression(klass,
                        formula: str,
                        options: Optional[Mapping[str, Any]] = None
                        ) -> Optional['PoolTerm']:
        '''
        Build an unevaluated pool from "{term,term,...}mods", or None if
        `formula` isn't one.
        '''
        match = klass.REGEXP.match(formula.strip())
        if not match:
            return None
        terms, modifiers = match.group(1, 2)
        return klass(terms=terms.split(','),
                     modifiers=DiceTerm.parse_modifiers(modifiers),
                     options=options)

    @classmethod
    def from_rolls(klass, rolls: Iterable['Roll']) -> 'PoolTerm':
        '''
        Build a pool from Rolls that are either all evaluated or none
        evaluated.
        '''
        rolls = list(rolls)
        all_evaluated = all(roll.evaluated for roll in rolls)
        none_evaluated = not any(roll.evaluated for roll in rolls)
        if not (all_evaluated or none_evaluated):
            raise log.exception(
                DiceError,
                "You can only build a {} from Rolls which are either all "
                "evaluated or none evaluated.",
                klass.__name__)

        results = []
        if all_evaluated:
            results = [DiceResult(roll.total, active=True) for roll in rolls]
        pool = klass(terms=[roll.formula for roll in rolls],
                     rolls=rolls,
                     results=results)
        pool._evaluated = all_evaluated
        return pool

    @classmethod
    def from_parse_node(klass, node: Mapping[str, Any]) -> 'PoolTerm':
        Roll = registry.default_roll()
        rolls = [Roll.from_terms(Roll.instantiate_ast(term))
                 for term in node.get('terms', ())]
        data = dict(node)
        data['rolls'] = rolls
        data['terms'] = [roll.formula for roll in rolls]
        data['modifiers'] = DiceTerm.parse_modifiers(
            node.get('modifiers', None))
        return klass._from_data(data)

    # -------------------------------------------------------------------------
    # Encoding / Decoding
    # -------------------------------------------------------------------------

    @classmethod
    def _from_data(klass,
                   data: MutableMapping[str, Any]) -> 'PoolTerm':
        Roll = registry.default_roll()
        data['rolls'] = [roll if registry.is_roll(roll) else
                         Roll.from_data(roll)
                         for roll in (data.get('rolls', None) or ())]
        return super()._from_data(data)
