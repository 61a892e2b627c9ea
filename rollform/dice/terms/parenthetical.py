# coding: utf-8

'''
A parenthesized sub-formula: "(1d4 + 2)".
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

from typing import (TYPE_CHECKING,
                    Optional, Any, Mapping, MutableMapping, Iterable, List)
if TYPE_CHECKING:
    from ..resolver import EvaluationSession
    from ..roll     import Roll
    from .dice      import DiceTerm


from ..             import registry
from .term          import RollTerm


# -----------------------------------------------------------------------------
# Code
# -----------------------------------------------------------------------------

@registry.term
class ParentheticalTerm(RollTerm):
    '''
    A type of RollTerm used to enclose a parenthetical expression to be
    recursively evaluated.
    '''

    SERIALIZE_ATTRIBUTES = ('term', 'roll')
    is_intermediate = True

    def __init__(self,
                 term:    Optional[str]               = None,
                 roll:    Optional['Roll']            = None,
                 options: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__(options)

        self.term: Optional[str] = term
        '''The inner formula.'''

        self.roll: Optional['Roll'] = roll
        '''The inner Roll; created at evaluation if not supplied.'''

        # An explicit roll may already be evaluated.
        if self.roll is not None:
            self.term = self.roll.formula
            self._evaluated = self.roll.evaluated

    @property
    def dice(self) -> List['DiceTerm']:
        return self.roll.dice if self.roll is not None else []

    @property
    def total(self) -> Any:
        return self.roll.total if self.roll is not None else None

    @property
    def expression(self) -> str:
        return f"({self.term})"

    @property
    def is_deterministic(self) -> bool:
        if self.roll is not None:
            return self.roll.is_deterministic
        return registry.default_roll().create(self.term).is_deterministic

    # -------------------------------------------------------------------------
    # Evaluation
    # -------------------------------------------------------------------------

    def _inner_roll(self) -> 'Roll':
        if self.roll is None:
            self.roll = registry.default_roll().create(self.term)
        return self.roll

    async def _evaluate(self,
                        session: Optional['EvaluationSession'],
                        options: MutableMapping[str, Any]
                        ) -> 'ParentheticalTerm':
        roll = self._inner_roll()
        if (options.get('maximize', False)
                or options.get('minimize', False)
                or roll.is_deterministic):
            return self._evaluate_sync(options)

        await roll.evaluate(session=session, **options)
        roll.propagate_flavor(self.flavor)
        return self

    def _evaluate_sync(self,
                       options: MutableMapping[str, Any]
                       ) -> 'ParentheticalTerm':
        roll = self._inner_roll()
        roll.evaluate_sync(**options)
        roll.propagate_flavor(self.flavor)
        return self

    # -------------------------------------------------------------------------
    # Factories
    # -------------------------------------------------------------------------

    @classmethod
    def from_terms(klass,
                   terms:   Iterable[RollTerm],
                   options: Optional[Mapping[str, Any]] = None
                   ) -> 'ParentheticalTerm':
        '''
        Wrap already-built terms in a parenthetical.
        '''
        roll = registry.default_roll().from_terms(terms)
        return klass(roll=roll, options=options)

    @classmethod
    def from_parse_node(klass,
                        node: Mapping[str, Any]) -> 'ParentheticalTerm':
        Roll = registry.default_roll()
        roll = Roll.from_terms(Roll.instantiate_ast(node['term']))
        data = dict(node)
        data['roll'] = roll
        data['term'] = roll.formula
        return klass._from_data(data)

    # -------------------------------------------------------------------------
    # Encoding / Decoding
    # -------------------------------------------------------------------------

    @classmethod
    def _from_data(klass,
                   data: MutableMapping[str, Any]) -> 'ParentheticalTerm':
        roll = data.get('roll', None)
        if roll is not None and not registry.is_roll(roll):
            data['roll'] = registry.default_roll().from_data(roll)
        return super()._from_data(data)
