# coding: utf-8

'''
Modifiers for dice and pool terms: keep/drop, success counting, rerolls,
explosions, etc.

Modifiers are free functions over a list of DiceResults so that both dice
terms and pool terms can use them. Each term class maps modifier commands to
its own handler methods (`MODIFIERS`), and those handlers call into here.

A handler returns False when the modifier string didn't match its pattern;
the modifier is then not recorded on the term.
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

from typing import (TYPE_CHECKING,
                    Optional, Any, Union, Iterable, List, MutableMapping)
if TYPE_CHECKING:
    from ..resolver import EvaluationSession
    from .dice      import DiceTerm
    from .pool      import PoolTerm

import functools
import inspect
import re


from rollform.logs         import log
from rollform.base.numbers import NumberTypes

from ..exceptions          import RecursionLimitError
from .result               import DiceResult


# -----------------------------------------------------------------------------
# Constants
# -----------------------------------------------------------------------------

MAX_CHECKS = 1000
'''Safety cap for reroll/explode loops.'''

COMMAND_RX = re.compile(r'[a-zA-Z]+')

REROLL_RX = re.compile(r'rr?([0-9]+)?([<>=]+)?([0-9]+)?', re.IGNORECASE)
EXPLODE_RX = re.compile(r'xo?([0-9]+)?([<>=]+)?([0-9]+)?', re.IGNORECASE)
KEEP_RX = re.compile(r'k([hl])?([0-9]+)?', re.IGNORECASE)
DROP_RX = re.compile(r'd([hl])?([0-9]+)?', re.IGNORECASE)
COUNT_SUCCESS_RX = re.compile(r'(?:cs)([<>=]+)?([0-9]+)?', re.IGNORECASE)
COUNT_FAILURES_RX = re.compile(r'(?:cf)([<>=]+)?([0-9]+)?', re.IGNORECASE)
DEDUCT_FAILURES_RX = re.compile(r'(?:df)([<>=]+)?([0-9]+)?', re.IGNORECASE)
SUBTRACT_FAILURES_RX = re.compile(r'(?:sf)([<>=]+)?([0-9]+)?', re.IGNORECASE)
MARGIN_RX = re.compile(r'(?:ms)([<>=]+)?([0-9]+)?', re.IGNORECASE)
MINIMUM_RX = re.compile(r'(?:min)([0-9]+)', re.IGNORECASE)
MAXIMUM_RX = re.compile(r'(?:max)([0-9]+)', re.IGNORECASE)


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------

def compare_result(result:     NumberTypes,
                   comparison: str,
                   target:     NumberTypes) -> bool:
    '''
    Does `result` compare favorably against `target`?

    `comparison` is one of: '=', '<', '<=', '>', '>='. Anything else is
    always False.
    '''
    if comparison == '=':
        return result == target
    if comparison == '<':
        return result < target
    if comparison == '<=':
        return result <= target
    if comparison == '>':
        return result > target
    if comparison == '>=':
        return result >= target
    return False


def _int(value: Optional[str], default: Any = None) -> Any:
    return int(value) if value else default


def keep_or_drop(results: List[DiceResult],
                 number:  int,
                 keep:    bool = True,
                 highest: bool = True) -> List[DiceResult]:
    '''
    Flag results as kept or discarded.

    Keeping: `number` active results are kept, others discarded.
    Dropping: `number` active results are discarded.
    Ties at the cut are discarded in order until the count is right.
    '''
    # Sort active values ascending (keep highest/drop lowest) or descending.
    ascending = (keep == highest)
    values = sorted((r.result for r in results if r.active),
                    reverse=not ascending)

    # Determine the cut point, beyond which to discard.
    number = max(0, min(len(values) - number if keep else number,
                        len(values)))

    # Everything goes.
    if number >= len(values):
        for result in results:
            if result.active:
                result.discarded = True
                result.active = False
        return results

    cut = values[number]
    comparison = '<' if ascending else '>'

    # First the results on the wrong side of the cut...
    discarded = 0
    ties = []
    for result in results:
        if not result.active:
            continue
        if compare_result(result.result, comparison, cut):
            result.discarded = True
            result.active = False
            discarded += 1
        elif result.result == cut:
            ties.append(result)

    # ...then ties until we've hit the target.
    for result in ties:
        if discarded >= number:
            break
        result.discarded = True
        result.active = False
        discarded += 1

    return results


def apply_count(results:      Iterable[DiceResult],
                comparison:   str,
                target:       NumberTypes,
                flag_success: bool = False,
                flag_failure: bool = False) -> None:
    '''
    Set each result's count to 1 or 0 depending on the comparison, flagging
    success or failure as requested.
    '''
    for result in results:
        success = compare_result(result.result, comparison, target)
        if flag_success:
            result.success = success
            if success:
                result.failure = None
        elif flag_failure:
            result.failure = success
            if success:
                result.success = None
        result.count = 1 if success else 0


def apply_deduct(results:        Iterable[DiceResult],
                 comparison:     Optional[str],
                 target:         Optional[NumberTypes],
                 deduct_failure: bool = False,
                 invert_failure: bool = False) -> None:
    '''
    Flag failures (by comparison, or previous "not a success") and make them
    count against the total.
    '''
    for result in results:
        if comparison:
            if compare_result(result.result, comparison, target):
                result.failure = True
                result.success = None
        elif result.success is False:
            result.failure = True
            result.success = None

        if deduct_failure:
            if result.failure:
                result.count = -1
        elif invert_failure:
            if result.failure:
                result.count = -1 * result.result


# -----------------------------------------------------------------------------
# Result-List Modifiers
# -----------------------------------------------------------------------------

def keep(results: List[DiceResult], modifier: str) -> Optional[bool]:
    '''
    k, kh, kl: Keep the highest (default) or lowest N (default 1) results.
    '''
    match = KEEP_RX.search(modifier)
    if not match:
        return False
    direction, number = match.group(1, 2)
    direction = direction.lower() if direction else 'h'
    number = _int(number) or 1
    keep_or_drop(results, number, keep=True, highest=(direction == 'h'))
    return None


def drop(results: List[DiceResult], modifier: str) -> Optional[bool]:
    '''
    d, dh, dl: Drop the lowest (default) or highest N (default 1) results.
    '''
    match = DROP_RX.search(modifier)
    if not match:
        return False
    direction, number = match.group(1, 2)
    direction = direction.lower() if direction else 'l'
    number = _int(number) or 1
    keep_or_drop(results, number, keep=False, highest=(direction != 'l'))
    return None


def count_success(results:  List[DiceResult],
                  modifier: str,
                  faces:    Optional[int] = None) -> Optional[bool]:
    '''
    cs: Count results that meet the target (default: equal to `faces`).
    '''
    match = COUNT_SUCCESS_RX.search(modifier)
    if not match:
        return False
    comparison, target = match.group(1, 2)
    target = _int(target, faces)
    if target is None:
        return False
    apply_count(results, comparison or '=', target, flag_success=True)
    return None


def count_failures(results:  List[DiceResult],
                   modifier: str,
                   faces:    Optional[int] = None) -> Optional[bool]:
    '''
    cf: Count results that meet the failure target (default: equal to 1).
    '''
    match = COUNT_FAILURES_RX.search(modifier)
    if not match:
        return False
    comparison, target = match.group(1, 2)
    apply_count(results, comparison or '=', _int(target, 1),
                flag_failure=True)
    return None


def count_even(results: List[DiceResult], modifier: str) -> None:
    '''even: Count even results as successes.'''
    for result in results:
        result.success = (result.result % 2) == 0
        result.count = 1 if result.success else 0


def count_odd(results: List[DiceResult], modifier: str) -> None:
    '''odd: Count odd results as successes.'''
    for result in results:
        result.success = (result.result % 2) != 0
        result.count = 1 if result.success else 0


def _failures(results:  List[DiceResult],
              modifier: str,
              regex:    re.Pattern,
              **kwargs: bool) -> Optional[bool]:
    match = regex.search(modifier)
    if not match:
        return False
    comparison, target = match.group(1, 2)
    if comparison or target:
        comparison = comparison or '='
        target = _int(target, 1)
    apply_deduct(results, comparison, target, **kwargs)
    return None


def deduct_failures(results: List[DiceResult],
                    modifier: str) -> Optional[bool]:
    '''df: Each failure counts as -1.'''
    return _failures(results, modifier, DEDUCT_FAILURES_RX,
                     deduct_failure=True)


def subtract_failures(results: List[DiceResult],
                      modifier: str) -> Optional[bool]:
    '''sf: Each failure subtracts its own value.'''
    return _failures(results, modifier, SUBTRACT_FAILURES_RX,
                     invert_failure=True)


def minimum(results: List[DiceResult], modifier: str) -> Optional[bool]:
    '''minN: Results below N count as N.'''
    match = MINIMUM_RX.search(modifier)
    if not match:
        return False
    target = int(match.group(1))
    for result in results:
        if result.result < target:
            result.count = target
            result.rerolled = True
    return None


def maximum(results: List[DiceResult], modifier: str) -> Optional[bool]:
    '''maxN: Results above N count as N.'''
    match = MAXIMUM_RX.search(modifier)
    if not match:
        return False
    target = int(match.group(1))
    for result in results:
        if result.result > target:
            result.count = target
            result.rerolled = True
    return None


def margin(options: MutableMapping[str, Any],
           modifier: str) -> Optional[bool]:
    '''
    ms: Total becomes the margin of success (or failure, for '<'/'<=')
    against the target.
    '''
    match = MARGIN_RX.search(modifier)
    if not match:
        return False
    comparison, target = match.group(1, 2)
    target = _int(target)
    if target is None:
        return None

    if comparison in (None, '>', '>=', '='):
        options['marginSuccess'] = target
    elif comparison in ('<', '<='):
        options['marginFailure'] = target
    return None


# -----------------------------------------------------------------------------
# Rolling Modifiers
# -----------------------------------------------------------------------------

def _targets(match: re.Match, default_target: int):
    '''
    Parse "<max><comparison><target>" where a lone number is the target.
    '''
    max_count, comparison, target = match.group(1, 2, 3)

    # If no comparison or target are provided, treat the max as the target.
    if max_count and not (target or comparison):
        target = max_count
        max_count = None

    return (_int(max_count),
            comparison or '=',
            _int(target, default_target))


async def reroll(term:      'DiceTerm',
                 modifier:  str,
                 session:   Optional['EvaluationSession'] = None,
                 recursive: bool                          = False
                 ) -> Optional[bool]:
    '''
    r, rr: Reroll results matching the comparison (default: equal to 1).

    Non-recursive only checks the results present before rerolling began.
    '''
    match = REROLL_RX.search(modifier)
    if not match:
        return False
    max_count, comparison, target = _targets(match, 1)

    checked = 0
    initial = len(term.results)
    while checked < len(term.results):
        result = term.results[checked]
        checked += 1
        if not result.active:
            continue

        # Out of rerolls?
        if max_count is not None and max_count <= 0:
            break

        if compare_result(result.result, comparison, target):
            result.rerolled = True
            result.active = False
            await term.roll(session, reroll=True)
            if max_count is not None:
                max_count -= 1

        if not recursive and checked >= initial:
            checked = len(term.results)
        if checked > MAX_CHECKS:
            raise log.exception(
                RecursionLimitError,
                "Maximum recursion depth for rerolling dice exceeded: {}",
                term.formula,
                error_data={
                    'modifier': modifier,
                    'checked': checked,
                })
    return None


async def explode(term:      'DiceTerm',
                  modifier:  str,
                  session:   Optional['EvaluationSession'] = None,
                  recursive: bool                          = True
                  ) -> Optional[bool]:
    '''
    x, xo: Roll an extra die for each result matching the comparison
    (default: equal to max face). The original result stays active.

    Non-recursive ("once") only checks the results present before exploding
    began.
    '''
    match = EXPLODE_RX.search(modifier)
    if not match:
        return False
    max_count, comparison, target = _targets(match, term.faces)

    checked = 0
    initial = len(term.results)
    while checked < len(term.results):
        result = term.results[checked]
        checked += 1
        if not result.active:
            continue

        # Out of explosions?
        if max_count is not None and max_count <= 0:
            break

        if compare_result(result.result, comparison, target):
            result.exploded = True
            await term.roll(session, explode=True)
            if max_count is not None:
                max_count -= 1

        if not recursive and checked == initial:
            break
        if checked > MAX_CHECKS:
            raise log.exception(
                RecursionLimitError,
                "Maximum recursion depth for exploding dice exceeded: {}",
                term.formula,
                error_data={
                    'modifier': modifier,
                    'checked': checked,
                })
    return None


# -----------------------------------------------------------------------------
# Modifier Pipeline
# -----------------------------------------------------------------------------

async def evaluate_modifiers(term:    Union['DiceTerm', 'PoolTerm'],
                             session: Optional['EvaluationSession'] = None
                             ) -> None:
    '''
    Apply each of `term.modifiers`, in order. `term.modifiers` is replaced
    with the (lower-cased) modifiers that actually applied.

    Unknown compound commands (e.g. 'khx') are split greedily, longest known
    modifier first.
    '''
    requested = list(term.modifiers)
    term.modifiers = []

    known = sorted(term.MODIFIERS, key=len, reverse=True)

    for modifier in requested:
        match = COMMAND_RX.search(modifier)
        if not match:
            log.debug("{}: ignoring modifier without a command: '{}'",
                      term.__class__.__name__, modifier)
            continue
        command = match.group(0).lower()

        # Matched command.
        if command in term.MODIFIERS:
            await evaluate_modifier(term, command, modifier, session)
            continue

        # Unmatched compound command.
        while command:
            for each in known:
                if command.startswith(each):
                    await evaluate_modifier(term, each, each, session)
                    command = command[len(each):]
                    break
            else:
                command = ''


async def evaluate_modifier(term:     Union['DiceTerm', 'PoolTerm'],
                            command:  str,
                            modifier: str,
                            session:  Optional['EvaluationSession'] = None
                            ) -> None:
    '''
    Run the handler for `command` and record `modifier` unless the handler
    says it didn't match.
    '''
    handler = term.MODIFIERS[command]
    if isinstance(handler, str):
        handler = getattr(term, handler, None)
    elif callable(handler):
        # Borrowed from another class; call it as our own.
        handler = functools.partial(handler, term)
    if not callable(handler):
        return

    result = handler(modifier, session=session)
    if inspect.isawaitable(result):
        result = await result

    if result is False:
        log.debug("{}: modifier '{}' did not match.",
                  term.__class__.__name__, modifier)
        return

    term.modifiers.append(modifier.lower())
    log.debug("{}: applied modifier '{}': {}",
              term.__class__.__name__, modifier, term.results)
