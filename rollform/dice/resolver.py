# coding: utf-8

'''
Resolvers: gather dice results from outside the program (physical dice,
a companion app, a player typing numbers in) while a Roll is evaluated.

A Roll being evaluated interactively creates a resolver, which finds every
die that needs an interactive result and waits. Results arrive
out-of-band via `register_result()` (usually from `Roll.register_result()`,
which offers a result to each active resolver in turn). Once every slot is
filled, or the resolver is closed, evaluation continues.
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

from typing import (TYPE_CHECKING,
                    Optional, Any, Iterable, Mapping, Dict, List)
if TYPE_CHECKING:
    from .roll        import Roll

import abc
import asyncio
import math
import uuid


from rollform.logs           import log
from rollform.base           import numbers
from rollform.data.config    import config

from .exceptions             import (InvalidFulfillmentResultError,
                                     ResolverError)
from .terms.result           import DiceResult
from .terms.dice             import DiceTerm


# -----------------------------------------------------------------------------
# Evaluation Session
# -----------------------------------------------------------------------------

class EvaluationSession:
    '''
    State shared by every term of a Roll (and its nested Rolls) during one
    evaluation.
    '''

    def __init__(self,
                 root:     'Roll',
                 resolver: Optional['Resolver'] = None) -> None:
        self.root: 'Roll' = root
        '''The top-level Roll being evaluated.'''

        self.resolver: Optional['Resolver'] = resolver
        '''The active resolver, if the evaluation is interactive.'''

    def __repr__(self) -> str:
        return (f"{self.__class__.__name__}(root={self.root!s}, "
                f"resolver={self.resolver!r})")


# -----------------------------------------------------------------------------
# Resolver Interface
# -----------------------------------------------------------------------------

RESOLVERS: Dict['Roll', 'Resolver'] = {}
'''Currently active resolvers, by the Roll they are resolving.'''


class Resolver(abc.ABC):
    '''
    Interface for anything that can supply dice results for a Roll.
    '''

    def __init__(self, roll: 'Roll') -> None:
        self.roll: 'Roll' = roll

    @abc.abstractmethod
    async def await_fulfillment(self) -> None:
        '''
        Find the terms that need results and wait until they have them.
        '''
        ...

    @abc.abstractmethod
    def register_result(self,
                        method:       str,
                        denomination: str,
                        result:       Any) -> bool:
        '''
        Offer an out-of-band result. Returns True if it was consumed.
        '''
        ...

    @abc.abstractmethod
    async def resolve_result(self,
                             term:      'DiceTerm',
                             method:    str,
                             **options: Any) -> Optional[int]:
        '''
        Wait for a single result for `term`. None means "no result; use
        internal randomness instead".
        '''
        ...

    @abc.abstractmethod
    async def add_term(self, term: 'DiceTerm') -> None:
        '''
        Add a term discovered after `await_fulfillment()`, and wait for its
        results.
        '''
        ...

    @abc.abstractmethod
    def close(self) -> None:
        '''
        Stop resolving. Anything still outstanding gets random results.
        '''
        ...


# -----------------------------------------------------------------------------
# Default Resolver
# -----------------------------------------------------------------------------

class _Fulfillable:
    '''
    A term we need results for, and the results staged for it so far.
    '''

    __slots__ = ('id', 'term', 'method', 'slots', 'fulfilled')

    def __init__(self, id: str, term: 'DiceTerm', method: str) -> None:
        self.id = id
        self.term = term
        self.method = method

        # Only the dice the term doesn't already have results for.
        number = int(math.ceil(abs(term.number or 0)))
        count = max(number - len(term.results), 0)
        self.slots: List[Optional[int]] = [None] * count
        self.fulfilled: bool = False

    @property
    def denomination(self) -> str:
        return self.term.denomination

    @property
    def is_full(self) -> bool:
        return all(slot is not None for slot in self.slots)

    def open_slot(self) -> Optional[int]:
        for index, slot in enumerate(self.slots):
            if slot is None:
                return index
        return None


class _Pending:
    '''A `resolve_result()` call waiting on a single result.'''

    __slots__ = ('method', 'denomination', 'future')

    def __init__(self,
                 method:       str,
                 denomination: str,
                 future:       asyncio.Future) -> None:
        self.method = method
        self.denomination = denomination
        self.future = future


class RollResolver(Resolver):
    '''
    Collects results for every interactive die in a Roll.

    Results are staged into slots per term until every slot is full; then
    they're all pushed onto their terms at once and the Roll continues
    evaluating.
    '''

    def _define_vars(self) -> None:
        '''
        Instance variable definitions, type hinting, doc strings, etc.
        '''
        self.fulfillable: Dict[str, _Fulfillable] = {}
        '''Terms awaiting results, by the id we gave them.'''

        self.closed: bool = False
        '''No more results accepted once closed.'''

        self._gate: asyncio.Event = asyncio.Event()
        '''Set when there is nothing left to wait for.'''

        self._pending: List[_Pending] = []
        '''Outstanding `resolve_result()` requests, oldest first.'''

    def __init__(self, roll: 'Roll') -> None:
        super().__init__(roll)
        self._define_vars()

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def registered(self) -> bool:
        return RESOLVERS.get(self.roll, None) is self

    @property
    def outstanding(self) -> int:
        '''Number of empty result slots.'''
        return sum(1
                   for record in self.fulfillable.values()
                   for slot in record.slots
                   if slot is None)

    # -------------------------------------------------------------------------
    # Term Identification
    # -------------------------------------------------------------------------

    def _identify(self, terms: Iterable[Any]) -> List[_Fulfillable]:
        '''
        Give each fulfillable term in `terms` an id and a method, and start
        tracking it.
        '''
        found = type(self.roll).identify_fulfillable_terms(terms)
        records = []
        for term in found:
            if term._id and term._id in self.fulfillable:
                continue
            if not term._id:
                term._id = uuid.uuid4().hex
            method = term.method or self._method_for(term)
            if not term.method:
                term.method = method
            record = _Fulfillable(term._id, term, method)
            self.fulfillable[term._id] = record
            records.append(record)
        return records

    @staticmethod
    def _method_for(term: 'DiceTerm') -> str:
        return config.get().method_for(term.denomination)

    # -------------------------------------------------------------------------
    # Fulfillment
    # -------------------------------------------------------------------------

    async def await_fulfillment(self) -> None:
        records = self._identify(self.roll.terms)
        if not records:
            return

        if self.roll in RESOLVERS:
            raise log.exception(
                ResolverError,
                "A resolver is already active for roll '{}'.",
                self.roll,
                error_data={
                    'roll': str(self.roll),
                })
        RESOLVERS[self.roll] = self

        log.info("Awaiting {} dice result(s) for '{}'.",
                 self.outstanding, self.roll)
        self._gate.clear()
        if not self._check_fulfilled():
            await self._gate.wait()

    def register_result(self,
                        method:       str,
                        denomination: str,
                        result:       Any) -> bool:
        try:
            return self._register_result(method, denomination, result)
        except InvalidFulfillmentResultError as error:
            log.warning("Result not consumed: {}", error.message)
            return False

    def _register_result(self,
                         method:       str,
                         denomination: str,
                         result:       Any) -> bool:
        if (isinstance(result, bool)
                or not isinstance(result, int)):
            raise log.exception(
                InvalidFulfillmentResultError,
                "Dice results must be integers. Got: {}",
                result,
                error_data={
                    'method': method,
                    'denomination': denomination,
                    'result': result,
                },
                log_level=log.Level.DEBUG)

        if self.closed:
            raise log.exception(
                InvalidFulfillmentResultError,
                "Resolver for '{}' is closed.",
                self.roll,
                log_level=log.Level.DEBUG)

        # Someone asking for exactly this kind of result gets it first.
        for pending in self._pending:
            if (pending.method == method
                    and pending.denomination == denomination
                    and not pending.future.done()):
                self._pending.remove(pending)
                pending.future.set_result(result)
                return True

        for record in self.fulfillable.values():
            if (record.method != method
                    or record.denomination != denomination):
                continue
            index = record.open_slot()
            if index is None:
                continue
            record.slots[index] = result
            log.debug("Staged {} result {} for term {}.",
                      denomination, result, record.id)
            self._check_fulfilled()
            return True

        raise log.exception(
            InvalidFulfillmentResultError,
            "No open '{}' slot for a {} result of {}.",
            method, denomination, result,
            error_data={
                'method': method,
                'denomination': denomination,
                'result': result,
            },
            log_level=log.Level.DEBUG)

    async def resolve_result(self,
                             term:      'DiceTerm',
                             method:    str,
                             **options: Any) -> Optional[int]:
        if not term._id or term._id not in self.fulfillable:
            log.warning("Term '{}' was never registered with the resolver "
                        "for '{}'.",
                        term, self.roll)
            return None
        if self.closed:
            return None

        future = asyncio.get_running_loop().create_future()
        self._pending.append(_Pending(method, term.denomination, future))
        return await future

    async def add_term(self, term: 'DiceTerm') -> None:
        if not isinstance(term, DiceTerm):
            raise log.exception(
                ResolverError,
                "Only dice terms can be added to a resolver. Got: {}",
                type(term).__name__,
                error_data={
                    'term': term,
                })

        records = self._identify([term])
        if not records:
            return

        if self.closed:
            for record in records:
                self._fill_random(record)
                self._fulfill(record)
            return

        if not self.registered:
            RESOLVERS[self.roll] = self
        self._gate.clear()
        if not self._check_fulfilled():
            await self._gate.wait()

    def submit(self,
               entries: Optional[Mapping[str, Iterable[int]]] = None) -> None:
        '''
        Finish up: fill slots from `entries` (term id to results), then fill
        any still empty slots with random faces, and let evaluation continue.
        '''
        entries = entries or {}
        for id, results in entries.items():
            record = self.fulfillable.get(id, None)
            if not record:
                log.warning("Unknown term id '{}' in submitted results.", id)
                continue
            for value in results:
                index = record.open_slot()
                if index is None:
                    break
                record.slots[index] = value

        for record in self.fulfillable.values():
            self._fill_random(record)
        self._check_fulfilled()

    def close(self) -> None:
        self.submit()
        if self.registered:
            del RESOLVERS[self.roll]
        self._gate.set()
        for pending in self._pending:
            if not pending.future.done():
                pending.future.set_result(None)
        self._pending.clear()
        self.closed = True

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _fill_random(record: _Fulfillable) -> None:
        for index, slot in enumerate(record.slots):
            if slot is None:
                record.slots[index] = record.term.random_face()

    @staticmethod
    def _fulfill(record: _Fulfillable) -> None:
        '''Push a full record's staged results onto its term, once.'''
        if record.fulfilled:
            return
        for value in record.slots:
            record.term.results.append(
                DiceResult(numbers.to_number(value), active=True))
        record.fulfilled = True

    def _check_fulfilled(self) -> bool:
        '''
        If every slot is full, push the results to the terms and release
        anything waiting on us.
        '''
        if not all(record.is_full for record in self.fulfillable.values()):
            return False
        for record in self.fulfillable.values():
            self._fulfill(record)
        self._gate.set()
        return True

    def __repr__(self) -> str:
        return (f"{self.__class__.__name__}(roll={self.roll!s}, "
                f"outstanding={self.outstanding}, closed={self.closed})")
