# coding: utf-8

'''
Unit tests for:
  rollform/dice/terms/dice.py
  rollform/dice/terms/die.py
  rollform/dice/terms/fate.py
  rollform/dice/terms/coin.py
  rollform/dice/terms/result.py
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

from typing import Any

import unittest

from rollform.zest.base.unit import ZestBase
from rollform.logs           import log

from ..exceptions            import (AlreadyEvaluatedError,
                                     ExcessiveDiceCountError,
                                     NonSynchronousTermError)
from ..roll                  import Roll
from .dice                   import DiceTerm
from .die                    import Die
from .fate                   import FateDie
from .coin                   import Coin
from .result                 import DiceResult


# -----------------------------------------------------------------------------
# Test Code
# -----------------------------------------------------------------------------

class Test_Die(ZestBase):

    def test_init(self) -> None:
        die = Die(number=2, faces=20)
        self.assertEqual(die.formula, '2d20')
        self.assertEqual(die.denomination, 'd20')
        self.assertFalse(die.evaluated)
        self.assertIsNone(die.total)
        self.assertFalse(die.is_deterministic)

        die = Die(number=3, faces=6, options={'flavor': 'fire'})
        self.assertEqual(die.formula, '3d6[fire]')
        self.assertEqual(die.expression, '3d6')

    def test_results(self) -> None:
        '''
        Dice built with results are already evaluated.
        '''
        die = Die(number=2, faces=6,
                  results=[{'result': 4, 'active': True},
                           {'result': 1, 'active': False,
                            'discarded': True}])
        self.assertTrue(die.evaluated)
        self.assertEqual(die.total, 4)
        self.assertEqual(die.values, [4])

    def test_method(self) -> None:
        die = Die()
        die.method = 'nope'
        self.assertIsNone(die.method)

        die.method = 'manual'
        self.assertEqual(die.method, 'manual')

        # Write-once.
        die.method = 'mersenne'
        self.assertEqual(die.method, 'manual')

    def test_alter(self) -> None:
        die = Die(number=2, faces=6)
        self.assertIs(die.alter(2, 1), die)
        self.assertEqual(die.number, 5)
        self.assertEqual(die.formula, '5d6')

        # Bad multiplier and addition are ignored.
        die = Die(number=2, faces=6)
        die.alter('x', 'y')
        self.assertEqual(die.number, 2)
        die.alter(-1, 1.5)
        self.assertEqual(die.number, 2)

        die.evaluate_sync(maximize=True)
        with self.assertRaises(AlreadyEvaluatedError):
            die.alter(2, 0)

    def test_maximize_minimize(self) -> None:
        die = Die(number=3, faces=8).evaluate_sync(maximize=True)
        self.assertEqual(die.total, 24)

        die = Die(number=3, faces=8).evaluate_sync(minimize=True)
        self.assertEqual(die.total, 3)

        # Negative counts give negative totals.
        die = Die(number=-2, faces=6).evaluate_sync(maximize=True)
        self.assertEqual(die.values, [6, 6])
        self.assertEqual(die.total, -12)

    def test_sync(self) -> None:
        with self.assertRaises(NonSynchronousTermError):
            Die(number=1, faces=6).evaluate_sync()

        # Not strict: nothing gets rolled.
        die = Die(number=1, faces=6).evaluate_sync(strict=False)
        self.assertEqual(die.results, [])
        self.assertEqual(die.total, 0)

    def test_evaluate(self) -> None:
        self.not_random([4, 2])
        die = self.run_async(Die(number=2, faces=6).evaluate())
        self.assertEqual(die.values, [4, 2])
        self.assertEqual(die.total, 6)

        with self.assertRaises(AlreadyEvaluatedError):
            self.run_async(die.evaluate())

    def test_too_many(self) -> None:
        with self.assertRaises(ExcessiveDiceCountError):
            self.run_async(Die(number=1000, faces=6).evaluate())

    def test_dynamic(self) -> None:
        self.not_random([3, 1, 2, 6])
        roll = Roll('(1d4)d6')
        die = roll.terms[0]
        self.assertIsInstance(die, Die)
        self.assertIsNone(die.number)
        self.assertEqual(len(die.dice), 1)

        self.run_async(roll.evaluate())
        self.assertEqual(die.number, 3)
        self.assertEqual(die.values, [1, 2, 6])
        self.assertEqual(roll.total, 9)


class Test_Factories(ZestBase):

    def test_match_term(self) -> None:
        self.assertIsNotNone(DiceTerm.match_term('d20'))
        self.assertIsNone(DiceTerm.match_term('d20', impute_number=False))
        self.assertIsNone(DiceTerm.match_term('foo'))

    def test_from_match(self) -> None:
        die = DiceTerm.from_match(DiceTerm.match_term('4d6kh3[fire]'))
        self.assertIsInstance(die, Die)
        self.assertEqual(die.number, 4)
        self.assertEqual(die.faces, 6)
        self.assertEqual(die.modifiers, ['kh3'])
        self.assertEqual(die.flavor, 'fire')

        fate = DiceTerm.from_match(DiceTerm.match_term('4df'))
        self.assertIsInstance(fate, FateDie)
        self.assertEqual(fate.number, 4)

    def test_parse_modifiers(self) -> None:
        self.assertEqual(DiceTerm.parse_modifiers('kh2x'), ['kh2', 'x'])
        self.assertEqual(DiceTerm.parse_modifiers('r<3x>=5'),
                         ['r<3', 'x>=5'])
        self.assertEqual(DiceTerm.parse_modifiers(None), [])

    def test_unknown_denomination(self) -> None:
        roll = Roll('1dz')
        die = roll.terms[0]
        self.assertIs(type(die), Die)
        self.assertEqual(die.faces, 6)
        self.assertLogged(log.Level.WARNING,
                          "denomination 'z' is not registered")


class Test_Fulfillment(ZestBase):
    '''
    Non-interactive fulfillment methods.
    '''

    def test_handler(self) -> None:
        def loaded(term: Any, **options: Any) -> int:
            return term.faces

        self.config.register_method('loaded', handler=loaded)
        self.config.denominations['d8'] = 'loaded'

        roll = self.run_async(Roll('2d8 + 1d6').evaluate())
        self.assertEqual(roll.terms[0].values, [8, 8])
        self.assertNotEqual(roll.terms[2].values, [])

    def test_async_handler(self) -> None:
        async def loaded(term: Any, **options: Any) -> int:
            return 1

        self.config.register_method('loaded', handler=loaded)
        self.config.default_method = 'loaded'

        roll = self.run_async(Roll('3d20').evaluate())
        self.assertEqual(roll.total, 3)

    def test_no_result(self) -> None:
        '''
        A handler that has nothing to say leaves it to internal randomness.
        '''
        self.not_random([5])
        self.config.register_method('shrug', handler=lambda term, **_: None)
        self.config.denominations['d6'] = 'shrug'

        roll = self.run_async(Roll('1d6').evaluate())
        self.assertEqual(roll.total, 5)


class Test_FateDie(ZestBase):

    def test_init(self) -> None:
        fate = FateDie(number=4)
        self.assertEqual(fate.faces, 3)
        self.assertEqual(fate.denomination, 'f')
        self.assertEqual(fate.formula, '4df')

    def test_evaluate(self) -> None:
        self.not_random([3, 1, 2, 3])
        roll = self.run_async(Roll('4df').evaluate())
        fate = roll.terms[0]
        self.assertEqual(fate.values, [1, -1, 0, 1])
        self.assertEqual(roll.total, 1)

        self.assertTrue(fate.results[0].success)
        self.assertTrue(fate.results[1].failure)
        self.assertIsNone(fate.results[2].success)
        self.assertIsNone(fate.results[2].failure)

    def test_maximize_minimize(self) -> None:
        self.assertEqual(Roll('2df').evaluate_sync(minimize=True).total, -2)
        self.assertEqual(Roll('2df').evaluate_sync(maximize=True).total, 2)

    def test_modifiers(self) -> None:
        self.not_random([3, 1, 2])
        roll = self.run_async(Roll('3dfkh2').evaluate())
        self.assertEqual(roll.terms[0].modifiers, ['kh2'])
        self.assertEqual(roll.total, 1)


class Test_Coin(ZestBase):

    def test_init(self) -> None:
        coin = Coin(number=2)
        self.assertEqual(coin.faces, 2)
        self.assertEqual(coin.denomination, 'c')
        self.assertEqual(coin.formula, '2dc')

    def test_flip(self) -> None:
        self.not_random([1, 0, 1])
        roll = self.run_async(Roll('3dc').evaluate())
        self.assertEqual(roll.total, 2)

    def test_call(self) -> None:
        self.not_random([1, 0, 1])
        roll = self.run_async(Roll('3dcc0').evaluate())
        coin = roll.terms[0]
        self.assertEqual(coin.modifiers, ['c0'])
        self.assertEqual([result.success for result in coin.results],
                         [False, True, False])
        self.assertEqual(roll.total, 1)

    def test_maximize(self) -> None:
        self.assertEqual(Roll('2dc').evaluate_sync(maximize=True).total, 2)
        self.assertEqual(Roll('2dc').evaluate_sync(minimize=True).total, 0)


class Test_DiceResult(ZestBase):

    def test_value(self) -> None:
        result = DiceResult(5)
        self.assertTrue(result.active)
        self.assertEqual(result.value, 5)

        result.count = 0
        self.assertEqual(result.value, 0)

    def test_encoding(self) -> None:
        result = DiceResult(5, active=False, discarded=True)
        data = result.to_json()
        self.assertEqual(data,
                         {'result': 5, 'active': False, 'discarded': True})
        self.assertEqual(DiceResult.from_data(data), result)

        # Already decoded.
        self.assertIs(DiceResult.from_data(result), result)

        # Flags default to not computed.
        decoded = DiceResult.from_data({'result': 2})
        self.assertTrue(decoded.active)
        self.assertIsNone(decoded.success)


# --------------------------------Unit Testing---------------------------------
# --                      Main Command Line Entry Point                      --
# -----------------------------------------------------------------------------

if __name__ == '__main__':
    unittest.main()
