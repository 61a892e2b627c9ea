# coding: utf-8

'''
Unit tests for:
  rollform/dice/terms/pool.py
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

import unittest

from rollform.zest.base.unit import ZestBase

from ..exceptions            import DiceError
from ..roll                  import Roll
from .pool                   import PoolTerm


# -----------------------------------------------------------------------------
# Test Code
# -----------------------------------------------------------------------------

class Test_Pool(ZestBase):

    def test_parse(self) -> None:
        roll = Roll('{1d6, 1d8 + 2}kh')
        pool = roll.terms[0]
        self.assertIsInstance(pool, PoolTerm)
        self.assertEqual(pool.terms, ['1d6', '1d8 + 2'])
        self.assertEqual(pool.modifiers, ['kh'])
        self.assertEqual(pool.formula, '{1d6,1d8 + 2}kh')
        self.assertEqual(len(pool.dice), 2)
        self.assertFalse(pool.is_deterministic)

    def test_keep(self) -> None:
        self.not_random([3, 5])
        roll = self.run_async(Roll('{1d6, 1d6}kh').evaluate())
        pool = roll.terms[0]
        self.assertEqual(pool.values, [5])
        self.assertTrue(pool.results[0].discarded)
        self.assertEqual(roll.total, 5)

    def test_drop(self) -> None:
        self.not_random([3, 5, 1])
        roll = self.run_async(Roll('{1d6, 1d6, 1d6}dl').evaluate())
        self.assertEqual(roll.total, 8)

    def test_count_success(self) -> None:
        self.not_random([2, 4, 6])
        roll = self.run_async(Roll('{1d6, 1d6, 1d6}cs>3').evaluate())
        self.assertEqual(roll.total, 2)

        # Pools have no faces to default the target to.
        self.not_random([2, 4, 6])
        roll = self.run_async(Roll('{1d6, 1d6, 1d6}cs').evaluate())
        self.assertEqual(roll.terms[0].modifiers, [])
        self.assertEqual(roll.total, 12)

    def test_deterministic(self) -> None:
        '''
        Pools that need no dice are evaluated as-is; modifiers aren't applied.
        '''
        roll = self.run_async(Roll('{1, 2}kh').evaluate())
        self.assertEqual(roll.total, 3)

        roll = self.run_async(Roll('{1d6, 1d8}kh').evaluate(maximize=True))
        self.assertEqual(roll.total, 14)

    def test_flavor(self) -> None:
        pool = PoolTerm.from_expression('{1d6,1d8}',
                                        options={'flavor': 'fire'})
        pool.evaluate_sync(maximize=True)
        self.assertEqual(pool.total, 14)
        for roll in pool.rolls:
            self.assertEqual(roll.terms[0].flavor, 'fire')

    def test_alter(self) -> None:
        pool = PoolTerm.from_expression('{1d6,2d8}')
        pool.alter(2, 0)
        self.assertEqual([roll.formula for roll in pool.rolls],
                         ['2d6', '4d8'])


class Test_Factories(ZestBase):

    def test_from_expression(self) -> None:
        pool = PoolTerm.from_expression('{1d6,1d8}kh')
        self.assertEqual(pool.terms, ['1d6', '1d8'])
        self.assertEqual(pool.modifiers, ['kh'])
        self.assertEqual(pool.expression, '{1d6,1d8}kh')
        self.assertFalse(pool.evaluated)

        self.not_random([2, 7])
        self.run_async(pool.evaluate())
        self.assertEqual(pool.total, 7)

        self.assertIsNone(PoolTerm.from_expression('1d6 + 2'))

    def test_from_rolls(self) -> None:
        rolls = [Roll('1d6').evaluate_sync(maximize=True),
                 Roll('3').evaluate_sync()]
        pool = PoolTerm.from_rolls(rolls)
        self.assertTrue(pool.evaluated)
        self.assertEqual(pool.terms, ['1d6', '3'])
        self.assertEqual(pool.total, 9)

        pool = PoolTerm.from_rolls([Roll('1d6'), Roll('2')])
        self.assertFalse(pool.evaluated)
        self.assertIsNone(pool.total)

        with self.assertRaises(DiceError):
            PoolTerm.from_rolls([Roll('1d6'), Roll('2').evaluate_sync()])


# --------------------------------Unit Testing---------------------------------
# --                      Main Command Line Entry Point                      --
# -----------------------------------------------------------------------------

if __name__ == '__main__':
    unittest.main()
