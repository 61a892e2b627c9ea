# coding: utf-8

'''
Unit tests for:
  rollform/dice/terms/function.py
  rollform/dice/functions.py
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

import unittest

from rollform.zest.base.unit import ZestBase

from ..exceptions            import (NonNumericResultError,
                                     NonSynchronousTermError,
                                     UnregisteredFunctionError)
from ..                      import functions
from ..roll                  import Roll
from .function               import FunctionTerm


# -----------------------------------------------------------------------------
# Test Code
# -----------------------------------------------------------------------------

class Test_Functions(ZestBase):

    def test_round_half_up(self) -> None:
        self.assertEqual(functions.round_half_up(2.5), 3)
        self.assertEqual(functions.round_half_up(2.4), 2)
        self.assertEqual(functions.round_half_up(-2.5), -2)

    def test_sign(self) -> None:
        self.assertEqual(functions.sign(-3), -1)
        self.assertEqual(functions.sign(0), 0)
        self.assertEqual(functions.sign(0.5), 1)


class Test_FunctionTerm(ZestBase):

    def test_init(self) -> None:
        term = FunctionTerm('max', terms=['1', '5', '3'])
        self.assertEqual(term.expression, 'max(1,5,3)')
        self.assertEqual(len(term.rolls), 3)
        self.assertTrue(term.is_deterministic)
        self.assertIsNone(term.total)

        term.evaluate_sync()
        self.assertEqual(term.total, 5)

    def test_dice_arguments(self) -> None:
        self.not_random([5])
        roll = Roll('max(1d6, 3)')
        self.assertFalse(roll.is_deterministic)
        self.assertEqual(len(roll.dice), 1)

        self.run_async(roll.evaluate())
        self.assertEqual(roll.total, 5)

    def test_flavor(self) -> None:
        self.not_random([5])
        roll = Roll('floor(1d6 / 2)[fire]')
        self.assertEqual(roll.formula, 'floor(1d6 / 2)[fire]')

        self.run_async(roll.evaluate())
        self.assertEqual(roll.total, 2)
        inner = roll.terms[0].rolls[0]
        self.assertEqual(inner.terms[0].flavor, 'fire')

    def test_async_function(self) -> None:
        async def lookup(value):
            return value * 10

        self.config.register_function('lookup', lookup)

        roll = Roll('lookup(2) + 1')
        self.assertFalse(roll.is_deterministic)
        with self.assertRaises(NonSynchronousTermError):
            roll.evaluate_sync()

        roll = self.run_async(Roll('lookup(2) + 1').evaluate())
        self.assertEqual(roll.total, 21)

    def test_registered_first(self) -> None:
        '''
        Registered functions win over built-in ones of the same name.
        '''
        self.config.register_function('floor', lambda value: 42)
        self.assertEqual(Roll('floor(1.5)').evaluate_sync().total, 42)

    def test_unregistered(self) -> None:
        with self.assertRaises(UnregisteredFunctionError):
            Roll('nope(1)').evaluate_sync()

    def test_function_error(self) -> None:
        with self.assertRaises(NonNumericResultError):
            Roll('sqrt(-1)').evaluate_sync()

        # Wrong number of arguments.
        with self.assertRaises(NonNumericResultError):
            Roll('floor(1, 2)').evaluate_sync()

    def test_result_types(self) -> None:
        self.config.register_function('name', lambda: 'bob')
        self.config.register_function('three', lambda: '3')

        with self.assertRaises(NonNumericResultError):
            FunctionTerm('name').evaluate_sync()

        term = FunctionTerm('name').evaluate_sync(allow_strings=True)
        self.assertEqual(term.total, 'bob')

        term = FunctionTerm('three').evaluate_sync()
        self.assertEqual(term.total, 3)

    def test_parse_argument(self) -> None:
        roll = Roll('3').evaluate_sync()
        self.assertEqual(FunctionTerm.parse_argument(roll), 3)

        roll = Roll('foo').evaluate_sync(allow_strings=True)
        self.assertEqual(FunctionTerm.parse_argument(roll), 'foo')

        roll = Roll('ᚖ{"a": [1, 2]}ᚖ').evaluate_sync(allow_strings=True)
        self.assertEqual(FunctionTerm.parse_argument(roll), {'a': [1, 2]})


# --------------------------------Unit Testing---------------------------------
# --                      Main Command Line Entry Point                      --
# -----------------------------------------------------------------------------

if __name__ == '__main__':
    unittest.main()
