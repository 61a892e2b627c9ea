# coding: utf-8

'''
Unit tests for:
  rollform/dice/terms/modifiers.py
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

from typing import Iterable, List

import unittest

from rollform.zest.base.unit import ZestBase

from ..exceptions            import RecursionLimitError
from ..roll                  import Roll
from .result                 import DiceResult
from .                       import modifiers as mods


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------

def results(*values: int) -> List[DiceResult]:
    return [DiceResult(value, active=True) for value in values]


def active(results: Iterable[DiceResult]) -> List[int]:
    return [result.result for result in results if result.active]


def total(results: Iterable[DiceResult]) -> int:
    return sum(result.value for result in results if result.active)


# -----------------------------------------------------------------------------
# Test Code
# -----------------------------------------------------------------------------

class Test_Compare(ZestBase):

    def test_compare(self) -> None:
        self.assertTrue(mods.compare_result(3, '=', 3))
        self.assertTrue(mods.compare_result(2, '<', 3))
        self.assertTrue(mods.compare_result(3, '<=', 3))
        self.assertTrue(mods.compare_result(4, '>', 3))
        self.assertTrue(mods.compare_result(3, '>=', 3))
        self.assertFalse(mods.compare_result(3, '>', 3))
        self.assertFalse(mods.compare_result(3, '=>', 3))


class Test_KeepDrop(ZestBase):

    def test_keep(self) -> None:
        rolled = results(3, 5, 5, 1)
        self.assertIsNone(mods.keep(rolled, 'kh2'))
        self.assertEqual(active(rolled), [5, 5])
        self.assertTrue(rolled[0].discarded)
        self.assertIsNone(rolled[1].discarded)

        rolled = results(3, 5, 1)
        mods.keep(rolled, 'kl')
        self.assertEqual(active(rolled), [1])

        # Keep defaults to the single highest.
        rolled = results(3, 5, 1)
        mods.keep(rolled, 'k')
        self.assertEqual(active(rolled), [5])

    def test_keep_ties(self) -> None:
        rolled = results(4, 4, 4)
        mods.keep(rolled, 'k1')
        self.assertEqual(active(rolled), [4])
        self.assertTrue(rolled[2].active)

    def test_keep_more_than_rolled(self) -> None:
        rolled = results(2, 6)
        mods.keep(rolled, 'kh5')
        self.assertEqual(active(rolled), [2, 6])

    def test_drop(self) -> None:
        rolled = results(2, 6, 4)
        mods.drop(rolled, 'd')
        self.assertEqual(active(rolled), [6, 4])

        rolled = results(2, 6, 4)
        mods.drop(rolled, 'dh')
        self.assertEqual(active(rolled), [2, 4])

        rolled = results(2, 6, 4)
        mods.drop(rolled, 'dl2')
        self.assertEqual(active(rolled), [6])

        # Dropping all of them (or more) leaves nothing.
        rolled = results(2, 6, 4)
        mods.drop(rolled, 'd5')
        self.assertEqual(active(rolled), [])
        self.assertTrue(all(result.discarded for result in rolled))

    def test_no_match(self) -> None:
        self.assertFalse(mods.keep(results(1), 'x'))
        self.assertFalse(mods.drop(results(1), 'k'))
        self.assertFalse(mods.minimum(results(1), 'min'))


class Test_Counting(ZestBase):

    def test_count_success(self) -> None:
        rolled = results(1, 4, 6)
        mods.count_success(rolled, 'cs>3')
        self.assertEqual(total(rolled), 2)
        self.assertEqual([result.success for result in rolled],
                         [False, True, True])

        # Default target is the max face.
        rolled = results(1, 4, 6)
        mods.count_success(rolled, 'cs', faces=6)
        self.assertEqual(total(rolled), 1)

        # No target and no faces: doesn't apply.
        self.assertFalse(mods.count_success(results(1, 4), 'cs'))

    def test_count_failures(self) -> None:
        rolled = results(1, 4, 6)
        mods.count_failures(rolled, 'cf')
        self.assertEqual(total(rolled), 1)
        self.assertEqual([result.failure for result in rolled],
                         [True, False, False])

        rolled = results(1, 4, 6)
        mods.count_failures(rolled, 'cf<5')
        self.assertEqual(total(rolled), 2)

    def test_even_odd(self) -> None:
        rolled = results(1, 2, 4)
        mods.count_even(rolled, 'even')
        self.assertEqual(total(rolled), 2)

        rolled = results(1, 2, 3)
        mods.count_odd(rolled, 'odd')
        self.assertEqual(total(rolled), 2)

    def test_deduct_failures(self) -> None:
        # Failures by comparison.
        rolled = results(1, 4, 6)
        mods.count_success(rolled, 'cs>3')
        mods.deduct_failures(rolled, 'df=1')
        self.assertEqual(total(rolled), 1)
        self.assertTrue(rolled[0].failure)
        self.assertIsNone(rolled[0].success)

        # Failures are whatever wasn't a success.
        rolled = results(1, 4, 6)
        mods.count_success(rolled, 'cs>3')
        mods.deduct_failures(rolled, 'df')
        self.assertEqual(total(rolled), 1)

    def test_subtract_failures(self) -> None:
        rolled = results(1, 2, 5)
        mods.subtract_failures(rolled, 'sf<3')
        self.assertEqual([result.value for result in rolled], [-1, -2, 5])
        self.assertEqual(total(rolled), 2)

    def test_minimum_maximum(self) -> None:
        rolled = results(1, 5)
        mods.minimum(rolled, 'min3')
        self.assertEqual(total(rolled), 8)

        rolled = results(1, 5)
        mods.maximum(rolled, 'max4')
        self.assertEqual(total(rolled), 5)
        self.assertTrue(rolled[1].rerolled)

    def test_margin(self) -> None:
        options = {}
        mods.margin(options, 'ms>10')
        self.assertEqual(options, {'marginSuccess': 10})

        options = {}
        mods.margin(options, 'ms<5')
        self.assertEqual(options, {'marginFailure': 5})

        self.assertFalse(mods.margin({}, 'x'))


class Test_DiceModifiers(ZestBase):
    '''
    Modifiers applied while evaluating dice.
    '''

    def evaluate(self, formula: str, values: Iterable[int]) -> Roll:
        self.not_random(values)
        return self.run_async(Roll(formula).evaluate())

    def test_keep_drop(self) -> None:
        self.assertEqual(self.evaluate('4d6kh3', [1, 2, 3, 4]).total, 9)
        self.assertEqual(self.evaluate('4d6dl', [1, 2, 3, 4]).total, 9)
        self.assertEqual(self.evaluate('4d6kl2', [1, 2, 3, 4]).total, 3)

    def test_reroll(self) -> None:
        roll = self.evaluate('3d6r', [1, 4, 5, 6])
        die = roll.terms[0]
        self.assertEqual(len(die.results), 4)
        self.assertTrue(die.results[0].rerolled)
        self.assertFalse(die.results[0].active)
        self.assertEqual(roll.total, 15)

        # Only the original results get checked...
        roll = self.evaluate('1d6r1', [1, 1, 3])
        self.assertEqual(roll.total, 1)

        # ...unless recursive.
        roll = self.evaluate('1d6rr1', [1, 1, 3])
        self.assertEqual(roll.total, 3)
        self.assertEqual(len(roll.terms[0].results), 3)

        roll = self.evaluate('2d6r<3', [2, 5, 6])
        self.assertEqual(roll.total, 11)

    def test_explode(self) -> None:
        roll = self.evaluate('2d6x', [6, 2, 6, 3])
        die = roll.terms[0]
        self.assertEqual(die.values, [6, 2, 6, 3])
        self.assertTrue(die.results[0].exploded)
        self.assertEqual(roll.total, 17)

        # Once: only the original results can explode.
        roll = self.evaluate('2d6xo', [6, 6, 6, 3])
        self.assertEqual(roll.terms[0].values, [6, 6, 6, 3])

        roll = self.evaluate('2d6xo', [6, 2, 6, 3])
        self.assertEqual(roll.terms[0].values, [6, 2, 6])

        # Limited count of explosions.
        roll = self.evaluate('1d6x1>4', [6, 6, 6])
        self.assertEqual(roll.total, 12)

    def test_explode_forever(self) -> None:
        with self.assertRaises(RecursionLimitError):
            self.run_async(Roll('1d1x').evaluate())

    def test_counting(self) -> None:
        roll = self.evaluate('5d10cs>7', [1, 8, 9, 3, 10])
        self.assertEqual(roll.total, 3)

        roll = self.evaluate('3d6min3', [1, 2, 6])
        self.assertEqual(roll.total, 12)

    def test_margin(self) -> None:
        self.assertEqual(self.evaluate('1d20ms>10', [15]).total, 5)
        self.assertEqual(self.evaluate('1d20ms>10', [7]).total, -3)
        self.assertEqual(self.evaluate('1d20ms<10', [7]).total, 3)

    def test_compound(self) -> None:
        '''
        Unknown commands are split into known ones, longest first.
        '''
        roll = self.evaluate('4d6khx', [1, 2, 3, 6, 4])
        die = roll.terms[0]
        self.assertEqual(die.modifiers, ['kh', 'x'])
        self.assertEqual(roll.total, 10)
        self.assertEqual(roll.formula, '4d6khx')

    def test_unknown(self) -> None:
        roll = self.evaluate('1d6zz', [3])
        self.assertEqual(roll.terms[0].modifiers, [])
        self.assertEqual(roll.total, 3)


# --------------------------------Unit Testing---------------------------------
# --                      Main Command Line Entry Point                      --
# -----------------------------------------------------------------------------

if __name__ == '__main__':
    unittest.main()
