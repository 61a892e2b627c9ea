# coding: utf-8

'''
Base class for every piece of a dice formula.
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

from typing import (TYPE_CHECKING,
                    Optional, Any, Type, Mapping, MutableMapping, Dict,
                    List, Tuple)
if TYPE_CHECKING:
    from ..resolver import EvaluationSession
    from .dice      import DiceTerm

import copy


from rollform.logs        import log
from rollform.data.codec  import Encodable, EncodedComplex

from ..exceptions         import AlreadyEvaluatedError
from ..                   import registry


# -----------------------------------------------------------------------------
# Constants
# -----------------------------------------------------------------------------

FLAVOR_REGEXP_STRING = r'(?:\[([^\]]+)\])'
'''Matches "[flavor text]" and captures the text.'''


# -----------------------------------------------------------------------------
# Code
# -----------------------------------------------------------------------------

@registry.term
class RollTerm(Encodable):
    '''
    An abstract class which represents a single token that can be used as part
    of a Roll. Tokens can be dice, operators, numbers, strings, pools, etc.

    Sub-classes must implement:
      - expression (property)
      - total (property)

    Evaluation comes in two flavors:
      - `evaluate_sync()`: deterministic only.
      - `await evaluate()`: anything, including awaiting dice results from
        a resolver.
    Either one can be done exactly once.
    '''

    SERIALIZE_ATTRIBUTES: Tuple[str, ...] = ()
    '''
    Attribute names that get encoded in `to_json()`, and are fed back into the
    constructor as keyword args in `from_data()`.
    '''

    is_intermediate: bool = False
    '''
    Intermediate terms hold a sub-formula that is resolved during evaluation
    (parentheticals, functions).
    '''

    def __init__(self,
                 options: Optional[Mapping[str, Any]] = None) -> None:
        self.options: Dict[str, Any] = dict(options) if options else {}
        '''Flavor text and any other per-term metadata.'''

        self._evaluated: bool = False
        '''Write-once; evaluated terms are immutable.'''

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def evaluated(self) -> bool:
        return self._evaluated

    @property
    def expression(self) -> str:
        '''
        A string representation of the term, without flavor text.
        '''
        raise NotImplementedError(f"The {self.__class__.__name__} class must "
                                  "implement the expression property.")

    @property
    def formula(self) -> str:
        '''
        A string representation of the term, with flavor text.
        '''
        formula = self.expression
        if self.flavor:
            formula += f"[{self.flavor}]"
        return formula

    @property
    def total(self) -> Any:
        '''
        The total result of this term, if evaluated.
        '''
        raise NotImplementedError(f"The {self.__class__.__name__} class must "
                                  "implement the total property.")

    @property
    def flavor(self) -> str:
        return self.options.get('flavor', None) or ''

    @property
    def is_deterministic(self) -> bool:
        '''
        Can this term be evaluated without any randomness?
        '''
        return True

    @property
    def dice(self) -> List['DiceTerm']:
        '''
        Any dice terms held within this term.
        '''
        return []

    @staticmethod
    def is_deterministic_under(term:     'RollTerm',
                               maximize: bool = False,
                               minimize: bool = False,
                               **kwargs: Any) -> bool:
        '''
        Would `term` be deterministic when evaluated with these options?
        '''
        return bool(maximize or minimize or term.is_deterministic)

    # -------------------------------------------------------------------------
    # Evaluation
    # -------------------------------------------------------------------------

    def _mark_evaluated(self) -> None:
        '''
        Flip the write-once evaluated flag, or raise AlreadyEvaluatedError.
        '''
        if self._evaluated:
            raise log.exception(
                AlreadyEvaluatedError,
                "The {} has already been evaluated and is now immutable.",
                self.__class__.__name__)
        self._evaluated = True

    def evaluate_sync(self, **options: Any) -> 'RollTerm':
        '''
        Evaluate the term synchronously. Only works for terms that are
        deterministic or are forced to be (`minimize`/`maximize` options).
        '''
        self._mark_evaluated()
        self._evaluate_sync(options)
        return self

    async def evaluate(self,
                       session: Optional['EvaluationSession'] = None,
                       **options: Any) -> 'RollTerm':
        '''
        Evaluate the term, awaiting any externally fulfilled dice results.
        '''
        self._mark_evaluated()
        await self._evaluate(session, options)
        return self

    def _evaluate_sync(self, options: MutableMapping[str, Any]) -> 'RollTerm':
        return self

    async def _evaluate(self,
                        session: Optional['EvaluationSession'],
                        options: MutableMapping[str, Any]) -> 'RollTerm':
        return self._evaluate_sync(options)

    # -------------------------------------------------------------------------
    # Encoding / Decoding
    # -------------------------------------------------------------------------

    @classmethod
    def from_data(klass: Type['RollTerm'],
                  data:  Mapping[str, Any]) -> 'RollTerm':
        '''
        Construct a term from its encoded data, using the data's 'class' to
        choose the term class. Unknown classes become plain dice.
        '''
        klass.error_for(data)
        term_class = registry.term_class(data.get(klass.TYPE_FIELD_NAME),
                                         registry.default_dice())
        return term_class._from_data(dict(data))

    @classmethod
    def from_parse_node(klass: Type['RollTerm'],
                        node:  Mapping[str, Any]) -> 'RollTerm':
        '''
        Construct a term from a parser's output node.
        '''
        return klass.from_data(copy.deepcopy(node))

    @classmethod
    def _from_data(klass: Type['RollTerm'],
                   data:  MutableMapping[str, Any]) -> 'RollTerm':
        '''
        Construct `klass` from `data`. Terms from data are assumed to be
        evaluated unless the data says otherwise.
        '''
        kwargs = {attr: data[attr]
                  for attr in klass.SERIALIZE_ATTRIBUTES
                  if attr in data}
        term = klass(options=data.get('options', None), **kwargs)
        term._evaluated = data.get('evaluated', True)
        return term

    @staticmethod
    def _encode(value: Any) -> Any:
        '''
        Encode anything that knows how, recursing into lists.
        '''
        if isinstance(value, (list, tuple)):
            return [RollTerm._encode(each) for each in value]
        if hasattr(value, 'to_json'):
            return value.to_json()
        return value

    def to_json(self) -> EncodedComplex:
        data = {
            self.TYPE_FIELD_NAME: self.type_field(),
            'options': dict(self.options),
            'evaluated': self._evaluated,
        }
        for attr in self.SERIALIZE_ATTRIBUTES:
            data[attr] = self._encode(getattr(self, attr))
        return data

    # -------------------------------------------------------------------------
    # Python Functions
    # -------------------------------------------------------------------------

    def __str__(self) -> str:
        return self.formula

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}: {self.formula}>"
