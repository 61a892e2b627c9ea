# coding: utf-8

'''
A Roll: a parsed dice formula that can be evaluated once to a total.

    roll = Roll("2d20kh + @prof", {'prof': 2})
    await roll.evaluate()
    roll.total
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

from typing import (Optional, Union, Any, Type, Mapping, Iterable, Dict,
                    List)

import asyncio


from rollform.logs           import log
from rollform.base           import numbers
from rollform.base.exceptions import RollformError
from rollform.data.codec     import Encodable, EncodedComplex
from rollform.data.config    import config

from .exceptions             import (DiceError,
                                     AlreadyEvaluatedError,
                                     NotParsableError,
                                     NonNumericResultError,
                                     NonSynchronousTermError)
from .parser                 import RollParser, Node
from .resolver               import (EvaluationSession,
                                     Resolver,
                                     RollResolver,
                                     RESOLVERS)
from .substitution           import (replace_formula_data,
                                     DATA_REFERENCE_RX)
from .terms.term             import RollTerm
from .terms.operator         import OperatorTerm
from .terms.numeric          import NumericTerm
from .terms.string           import StringTerm
from .terms.dice             import DiceTerm
from .                       import registry


# -----------------------------------------------------------------------------
# Constants
# -----------------------------------------------------------------------------

LEGACY_TERM_CLASSES = {
    'DicePool': 'PoolTerm',
    'MathTerm': 'FunctionTerm',
}
'''Older serialized class names and what they're called now.'''


# -----------------------------------------------------------------------------
# Code
# -----------------------------------------------------------------------------

@registry.roll
class Roll(Encodable):
    '''
    An interface and API for constructing and evaluating dice rolls.

    The formula is parsed into `terms` immediately. Evaluation happens
    exactly once, either synchronously (`evaluate_sync()`, deterministic
    formulas only) or asynchronously (`await evaluate()`), after which the
    Roll is immutable.
    '''

    PARSER = RollParser
    '''Turns formula strings into parse trees and term lists into ASTs.'''

    def _define_vars(self) -> None:
        '''
        Instance variable definitions, type hinting, doc strings, etc.
        '''
        self.data: Dict[str, Any] = {}
        '''Values for "@path" references in the formula.'''

        self.options: Dict[str, Any] = {}
        '''Flavor text and other metadata.'''

        self.terms: List[RollTerm] = []
        '''The formula as a flat list of terms and operators.'''

        self._formula: str = ''
        '''The formula as it was when the terms were made.'''

        self._dice: List[DiceTerm] = []
        '''Dice held directly by the roll (from older serialized data).'''

        self._evaluated: bool = False
        '''Write-once; evaluated rolls are immutable.'''

        self._total: Any = None
        '''Result of evaluation.'''

    def __init__(self,
                 formula: str                          = '',
                 data:    Optional[Mapping[str, Any]]  = None,
                 options: Optional[Mapping[str, Any]]  = None,
                 terms:   Optional[Iterable[RollTerm]] = None) -> None:
        self._define_vars()

        if not isinstance(formula, str):
            raise log.exception(
                NotParsableError,
                "Roll formula must be a string. Got: {}",
                type(formula).__name__,
                error_data={
                    'formula': formula,
                })

        self.data = self._prepare_data(data)
        self.options = dict(options) if options else {}

        if terms is not None:
            self.terms = list(terms)
            self._formula = formula or self.get_formula(self.terms)
        else:
            self.terms = self.parse(formula, self.data)
            self._formula = self.reset_formula()

    def _prepare_data(self,
                      data: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        '''
        Sub-classes can override to supply or massage roll data.
        '''
        return dict(data) if data else {}

    @classmethod
    def create(klass: Type['Roll'],
               formula: str = '',
               data:    Optional[Mapping[str, Any]] = None,
               options: Optional[Mapping[str, Any]] = None) -> 'Roll':
        '''
        Construct a Roll of the registered default Roll class.
        '''
        return registry.default_roll()(formula, data, options)

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def evaluated(self) -> bool:
        return self._evaluated

    @property
    def dice(self) -> List[DiceTerm]:
        '''
        Every dice term in the roll, including ones nested in other terms.
        '''
        dice = list(self._dice)
        for term in self.terms:
            dice.extend(term.dice)
            if isinstance(term, DiceTerm):
                dice.append(term)
        return dice

    @property
    def formula(self) -> str:
        '''
        The formula as built from the current terms.
        '''
        return self.get_formula(self.terms)

    @property
    def result(self) -> str:
        '''
        The formula with each term replaced by its total:
        "1d20 + 4" -> "17 + 4".
        '''
        return ''.join(self._str_total(term.total) for term in self.terms)

    @staticmethod
    def _str_total(total: Any) -> str:
        if numbers.is_number(total):
            return numbers.to_str(total)
        return str(total)

    @property
    def total(self) -> Optional[numbers.NumberTypes]:
        '''
        The numeric total, or None if not evaluated yet.
        '''
        if not self._evaluated:
            return None
        return numbers.to_number(self._total)

    @property
    def product(self) -> Any:
        '''
        The raw result of evaluation, which can be a non-number when strings
        were allowed.
        '''
        return self._total

    @property
    def is_deterministic(self) -> bool:
        return all(term.is_deterministic for term in self.terms)

    # -------------------------------------------------------------------------
    # Alteration & Copying
    # -------------------------------------------------------------------------

    def alter(self,
              multiply:         numbers.NumberTypes,
              add:              int,
              multiply_numeric: bool = False) -> 'Roll':
        '''
        Change the dice in an unevaluated roll: multiply their counts, then
        add to them. Plain numbers are multiplied too if `multiply_numeric`.
        '''
        if self._evaluated:
            raise log.exception(
                AlreadyEvaluatedError,
                "You may not alter a Roll which has already been evaluated: "
                "'{}'",
                self)

        for term in self.terms:
            if isinstance(term, DiceTerm):
                term.alter(multiply, add)
            elif multiply_numeric and isinstance(term, NumericTerm):
                term.number *= multiply

        self.reset_formula()
        return self

    def clone(self) -> 'Roll':
        '''
        A new, unevaluated Roll of the same formula, data, and options.
        '''
        return type(self)(self._formula, self.data, self.options)

    async def roll(self, **options: Any) -> 'Roll':
        '''Alias for `evaluate()`.'''
        return await self.evaluate(**options)

    async def reroll(self, **options: Any) -> 'Roll':
        '''
        Evaluate a fresh copy of this roll.
        '''
        return await self.clone().evaluate(**options)

    # -------------------------------------------------------------------------
    # Formula
    # -------------------------------------------------------------------------

    @staticmethod
    def get_formula(terms: Iterable[RollTerm]) -> str:
        return ''.join(term.formula for term in terms)

    def reset_formula(self) -> str:
        '''
        Rebuild the stored formula from the current terms.
        '''
        self._formula = self.get_formula(self.terms)
        return self._formula

    def propagate_flavor(self, flavor: Optional[str]) -> None:
        '''
        Give `flavor` to every term that doesn't have its own.
        '''
        if not flavor:
            return
        for term in self.terms:
            if isinstance(term, OperatorTerm):
                continue
            if not term.options.get('flavor', None):
                term.options['flavor'] = flavor

    # -------------------------------------------------------------------------
    # Evaluation
    # -------------------------------------------------------------------------

    def _mark_evaluated(self) -> None:
        if self._evaluated:
            raise log.exception(
                AlreadyEvaluatedError,
                "The Roll '{}' has already been evaluated and is now "
                "immutable.",
                self)
        self._evaluated = True

    async def evaluate(self,
                       minimize:          bool = False,
                       maximize:          bool = False,
                       allow_strings:     bool = False,
                       allow_interactive: bool = True,
                       session:           Optional[EvaluationSession] = None,
                       **options:         Any) -> 'Roll':
        '''
        Evaluate the roll, awaiting any dice results that come from outside
        (see resolver.py).

        Only the outermost roll gets a resolver; nested rolls share it via
        `session`.
        '''
        self._mark_evaluated()
        log.debug("Evaluating roll '{}'.", self)

        resolver = None
        if session is None:
            session = EvaluationSession(self)
            if allow_interactive and not minimize and not maximize:
                resolver = self.resolver_implementation()(self)
                session.resolver = resolver

        eval_options = dict(options)
        eval_options.update({
            'minimize': minimize,
            'maximize': maximize,
            'allow_strings': allow_strings,
            'allow_interactive': allow_interactive,
        })

        try:
            if resolver:
                await resolver.await_fulfillment()
            ast = self.PARSER.to_ast(self.terms)
            self._total = await self._evaluate_ast_async(ast,
                                                         session,
                                                         eval_options)
        finally:
            if resolver:
                resolver.close()

        return self

    async def _evaluate_ast_async(self,
                                  node:    Any,
                                  session: EvaluationSession,
                                  options: Mapping[str, Any]) -> Any:
        if node is None:
            return None

        if not isinstance(node, Node):
            if not node.evaluated:
                await node.evaluate(session=session, **options)
            return node.total

        left = await self._evaluate_ast_async(node.left, session, options)
        right = await self._evaluate_ast_async(node.right, session, options)
        return OperatorTerm.operate(node.operator, left, right)

    def evaluate_sync(self,
                      minimize:      bool = False,
                      maximize:      bool = False,
                      allow_strings: bool = False,
                      strict:        bool = True,
                      **options:     Any) -> 'Roll':
        '''
        Evaluate a deterministic roll (or force it to be with `minimize` or
        `maximize`).

        If not `strict`, terms that can't be evaluated synchronously count
        as zero instead of raising NonSynchronousTermError.
        '''
        self._mark_evaluated()

        eval_options = dict(options)
        eval_options.update({
            'minimize': minimize,
            'maximize': maximize,
            'allow_strings': allow_strings,
            'strict': strict,
        })

        ast = self.PARSER.to_ast(self.terms)
        self._total = self._evaluate_ast_sync(ast, eval_options)
        return self

    def _evaluate_ast_sync(self,
                           node:    Any,
                           options: Mapping[str, Any]) -> Any:
        if node is None:
            return None

        if not isinstance(node, Node):
            if node.evaluated:
                return node.total
            if RollTerm.is_deterministic_under(
                    node,
                    maximize=options.get('maximize', False),
                    minimize=options.get('minimize', False)):
                node.evaluate_sync(**options)
                return node.total
            if options.get('strict', True):
                raise log.exception(
                    NonSynchronousTermError,
                    "The roll '{}' contains terms that cannot be evaluated "
                    "synchronously.",
                    self,
                    error_data={
                        'term': str(node),
                    })
            return 0

        left = self._evaluate_ast_sync(node.left, options)
        right = self._evaluate_ast_sync(node.right, options)
        return OperatorTerm.operate(node.operator, left, right)

    def _evaluate_total(self) -> numbers.NumberTypes:
        '''
        Total from already evaluated terms.
        '''
        total = self._fold(self.PARSER.to_ast(self.terms))
        if not numbers.is_number(total):
            raise log.exception(
                NonNumericResultError,
                "'{}' is not a valid total for '{}'.",
                total, self,
                error_data={
                    'total': total,
                    'formula': self._formula,
                })
        return total

    @classmethod
    def _fold(klass, node: Any) -> Any:
        if node is None:
            return 0
        if not isinstance(node, Node):
            return node.total
        return OperatorTerm.operate(node.operator,
                                    klass._fold(node.left),
                                    klass._fold(node.right))

    # -------------------------------------------------------------------------
    # Simulation & Validation
    # -------------------------------------------------------------------------

    @classmethod
    async def simulate(klass: Type['Roll'],
                       formula: str,
                       n:       int = 10000) -> List[numbers.NumberTypes]:
        '''
        Evaluate `formula` `n` times without any interactive dice. Returns
        every total.
        '''
        rolls = [klass(formula) for _ in range(n)]
        await asyncio.gather(*(roll.evaluate(allow_interactive=False)
                               for roll in rolls))
        results = [roll.total for roll in rolls]

        if results:
            mean = sum(results) / len(results)
            log.info("Formula: {} | Iterations: {} | Mean: {} | "
                     "Min: {} | Max: {}",
                     formula, n, mean, min(results), max(results))
        return results

    @classmethod
    def validate(klass: Type['Roll'], formula: Any) -> bool:
        '''
        Is `formula` a roll we could parse and compute? Data references are
        treated as 1.
        '''
        if not isinstance(formula, str):
            return False
        formula = DATA_REFERENCE_RX.sub('1', formula)
        try:
            klass(formula).evaluate_sync(strict=False)
        except RollformError:
            return False
        return True

    # -------------------------------------------------------------------------
    # Out-of-Band Fulfillment
    # -------------------------------------------------------------------------

    @staticmethod
    def register_result(method:       str,
                        denomination: str,
                        result:       Any) -> bool:
        '''
        Offer a dice result to each active resolver until one takes it.
        '''
        for resolver in list(RESOLVERS.values()):
            if resolver.register_result(method, denomination, result):
                return True
        log.debug("No active resolver consumed {} {} result {}.",
                  method, denomination, result)
        return False

    @staticmethod
    def resolver_implementation() -> Type[Resolver]:
        '''
        The resolver class to use: the configured interactive method's own
        resolver if exactly one such method is in use.
        '''
        dice_config = config.get()
        methods = dice_config.interactive_methods()
        if len(methods) != 1:
            return RollResolver
        method = dice_config.method(next(iter(methods)))
        return (method.resolver if method and method.resolver else
                RollResolver)

    @staticmethod
    def identify_fulfillable_terms(terms: Iterable[RollTerm]
                                   ) -> List[DiceTerm]:
        '''
        Dice terms (including nested ones) that need interactive results.
        '''
        dice_config = config.get()
        fulfillable = []

        def identify(term: RollTerm) -> None:
            for nested in term.dice:
                if nested is not term:
                    identify(nested)
            if not isinstance(term, DiceTerm):
                return
            if not term.number or not term.faces:
                return
            method_id = dice_config.method_for(term.denomination)
            if method_id == config.MANUAL and not dice_config.allow_manual:
                return
            method = dice_config.method(method_id)
            if method and method.interactive:
                fulfillable.append(term)

        for term in terms:
            identify(term)
        return fulfillable

    # -------------------------------------------------------------------------
    # Parsing
    # -------------------------------------------------------------------------

    @classmethod
    def parse(klass: Type['Roll'],
              formula: str,
              data:    Optional[Mapping[str, Any]] = None) -> List[RollTerm]:
        '''
        Parse a formula into a list of terms.
        '''
        if not isinstance(formula, str):
            raise log.exception(
                NotParsableError,
                "Roll formula must be a string. Got: {}",
                type(formula).__name__)
        if not formula:
            return []

        formula = replace_formula_data(formula, data, missing='0')
        ast = klass.PARSER.parse(formula)
        return klass.instantiate_ast(ast)

    @classmethod
    def instantiate_ast(klass: Type['Roll'], ast: Any) -> List[RollTerm]:
        '''
        Flatten a parse tree and build a term from each node.
        '''
        return [registry.term_class(node.get('class'), RollTerm)
                .from_parse_node(node)
                for node in klass.PARSER.flatten_tree(ast)]

    @staticmethod
    def classify_string_term(term:         Union[str, RollTerm],
                             intermediate: bool               = True,
                             prior:        Optional[RollTerm] = None,
                             next:         Optional[RollTerm] = None
                             ) -> RollTerm:
        '''
        Turn a string into the most specific term it matches.

        Dice next to an intermediate term stay strings while still
        intermediate ("2(1d4)" is not dice yet).
        '''
        if isinstance(term, RollTerm):
            return term

        match = NumericTerm.match_term(term)
        if match:
            return NumericTerm.from_match(match)

        match = DiceTerm.match_term(term, impute_number=not intermediate)
        if match:
            if intermediate and (
                    getattr(prior, 'is_intermediate', False)
                    or getattr(next, 'is_intermediate', False)):
                return StringTerm(term)
            return DiceTerm.from_match(match)

        return StringTerm(term)

    @classmethod
    def simplify_terms(klass: Type['Roll'],
                       terms: Iterable[RollTerm]) -> List[RollTerm]:
        '''
        Merge stray strings into their neighbors, re-classify what's left,
        and drop dangling operators.
        '''
        terms = list(terms)

        # Merge adjacent non-operators where either one is a string.
        merged: List[RollTerm] = []
        for term in terms:
            prior = merged[-1] if merged else None
            is_operator = isinstance(term, OperatorTerm)
            if (prior is not None
                    and not is_operator
                    and not isinstance(prior, OperatorTerm)
                    and (isinstance(term, StringTerm)
                         or isinstance(prior, StringTerm))):
                options = klass._merge_options(prior.options, term.options)
                merged[-1] = StringTerm(prior.formula + term.formula,
                                        options=options)
                continue
            merged.append(term)

        # Re-classify the strings, now without imputing dice counts.
        classified = []
        for term in merged:
            if isinstance(term, StringTerm):
                options = term.options
                term = klass.classify_string_term(term.term,
                                                  intermediate=False)
                term.options = klass._merge_options(term.options, options)
            classified.append(term)

        # Dangling operators.
        if (classified
                and isinstance(classified[0], OperatorTerm)
                and classified[0].operator != '-'):
            classified.pop(0)
        if classified and isinstance(classified[-1], OperatorTerm):
            classified.pop()
        return classified

    @staticmethod
    def _merge_options(*options: Mapping[str, Any]) -> Dict[str, Any]:
        merged = {}
        for each in options:
            for key, value in (each or {}).items():
                if value is not None:
                    merged[key] = value
        return merged

    # -------------------------------------------------------------------------
    # Factories
    # -------------------------------------------------------------------------

    @classmethod
    def from_terms(klass:   Type['Roll'],
                   terms:   Iterable[RollTerm],
                   options: Optional[Mapping[str, Any]] = None) -> 'Roll':
        '''
        Build a Roll from terms that are either all evaluated or none
        evaluated. Evaluated terms give an evaluated Roll.
        '''
        terms = list(terms)
        evaluated = None
        for term in terms:
            if not isinstance(term, RollTerm):
                raise log.exception(
                    DiceError,
                    "A Roll can only be built from RollTerms. Got: {}",
                    type(term).__name__,
                    error_data={
                        'term': term,
                    })
            if isinstance(term, OperatorTerm):
                continue
            if evaluated is None:
                evaluated = term.evaluated
            elif evaluated != term.evaluated:
                raise log.exception(
                    DiceError,
                    "You can only call Roll.from_terms with an array of "
                    "terms which are either all evaluated, or none "
                    "evaluated.",
                    error_data={
                        'terms': [str(term) for term in terms],
                    })

        roll = klass(klass.get_formula(terms), options=options, terms=terms)
        if evaluated:
            roll._total = roll._evaluate_total()
            roll._evaluated = True
        return roll

    # -------------------------------------------------------------------------
    # Encoding / Decoding
    # -------------------------------------------------------------------------

    def to_json(self) -> EncodedComplex:
        return {
            self.TYPE_FIELD_NAME: self.type_field(),
            'options': dict(self.options),
            'dice': [die.to_json() for die in self._dice],
            'formula': self._formula,
            'terms': [term.to_json() for term in self.terms],
            'total': self._total,
            'evaluated': self._evaluated,
        }

    @classmethod
    def from_data(klass: Type['Roll'],
                  data:  Mapping[str, Any]) -> 'Roll':
        '''
        Rebuild a Roll (of the class named in the data) without re-parsing
        its formula.
        '''
        klass.error_for(data, keys=['formula', 'terms'])

        name = data.get(klass.TYPE_FIELD_NAME, None)
        if name and name != klass.__name__:
            cls = registry.roll_class(name)
            if cls is None:
                raise log.exception(
                    DiceError,
                    "Unable to recreate a Roll of class '{}'.",
                    name,
                    error_data={
                        'data': data,
                    })
            if cls is not klass:
                return cls.from_data(data)

        terms = []
        for term_data in data['terms']:
            term_data = dict(term_data)
            term_class = term_data.get(RollTerm.TYPE_FIELD_NAME, None)
            if term_class in LEGACY_TERM_CLASSES:
                term_data[RollTerm.TYPE_FIELD_NAME] = (
                    LEGACY_TERM_CLASSES[term_class])
            terms.append(RollTerm.from_data(term_data))

        roll = klass(data['formula'],
                     data.get('data', None),
                     data.get('options', None),
                     terms=terms)

        if data.get('evaluated', True):
            roll._total = data.get('total', None)
            roll._dice = [RollTerm.from_data(die)
                          for die in data.get('dice', None) or ()]
            roll._evaluated = True
        return roll

    # -------------------------------------------------------------------------
    # Python Functions
    # -------------------------------------------------------------------------

    def __str__(self) -> str:
        return self._formula

    def __repr__(self) -> str:
        total = f" = {self.result}" if self._evaluated else ''
        return f"<{self.__class__.__name__}: {self._formula}{total}>"
