# coding: utf-8

'''
Unit tests for:
  rollform/base/numbers.py
  rollform/base/dotted.py
  rollform/base/random.py
  rollform/base/exceptions.py
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

import unittest

from rollform.zest.base.unit import ZestBase

from .                       import numbers, dotted, random
from .exceptions             import RollformError, is_rollform


# -----------------------------------------------------------------------------
# Test Code
# -----------------------------------------------------------------------------

class Abilities:
    def __init__(self) -> None:
        self.strength = {'mod': 3}


class Test_Numbers(ZestBase):

    def test_is_number(self) -> None:
        self.assertTrue(numbers.is_number(1))
        self.assertTrue(numbers.is_number(1.5))
        self.assertFalse(numbers.is_number(True))
        self.assertFalse(numbers.is_number('1'))

        self.assertTrue(numbers.is_finite(2))
        self.assertFalse(numbers.is_finite(float('inf')))
        self.assertFalse(numbers.is_finite(float('nan')))

    def test_str(self) -> None:
        self.assertEqual(numbers.to_str(2.0), '2')
        self.assertEqual(numbers.to_str(2.5), '2.5')
        self.assertEqual(numbers.to_str(-3), '-3')

        self.assertEqual(numbers.from_str(' 4 '), 4)
        self.assertEqual(numbers.from_str('0.25'), 0.25)
        with self.assertRaises(ValueError):
            numbers.from_str('four')

    def test_to_number(self) -> None:
        self.assertEqual(numbers.to_number('3'), 3)
        self.assertEqual(numbers.to_number(True), 1)
        self.assertEqual(numbers.to_number('foo'), 0)
        self.assertEqual(numbers.to_number(None, default=-1), -1)
        self.assertEqual(numbers.to_number(float('nan')), 0)


class Test_Dotted(ZestBase):

    def test_join_split(self) -> None:
        self.assertEqual(dotted.join('abilities', 'str', 'mod'),
                         'abilities.str.mod')
        self.assertEqual(dotted.split('abilities.str.mod'),
                         ['abilities', 'str', 'mod'])

    def test_get(self) -> None:
        data = {
            'abilities': Abilities(),
            'dice': ['1d4', '1d6'],
        }
        self.assertEqual(dotted.get(data, 'abilities.strength.mod'), 3)
        self.assertEqual(dotted.get(data, 'dice.1'), '1d6')

        self.assertIsNone(dotted.get(data, 'dice.7'))
        self.assertIsNone(dotted.get(data, 'dice.first'))
        self.assertIsNone(dotted.get(data, 'nope.nothing'))
        self.assertIsNone(dotted.get(None, 'anything'))


class Test_Random(ZestBase):

    def test_not_random(self) -> None:
        self.not_random([4, 1])
        self.assertEqual(random.randint(1, 6), 4)
        self.assertEqual(random.randint(1, 100), 1)
        self.assertEqual(random.randint(1, 6), 4)

    def test_reset(self) -> None:
        self.not_random([42])
        random.reset()
        self.assertNotIsInstance(random._inst, random.NotRandom)
        self.assertIn(random.randint(1, 6), range(1, 7))


class Test_Exceptions(ZestBase):

    def test_rollform_error(self) -> None:
        cause = ValueError('bad')
        error = RollformError('Oops.', cause=cause, data={'x': 1})
        self.assertEqual(error.message, 'Oops.')
        self.assertIn('from bad', str(error))
        self.assertIn("'x': 1", str(error))

        self.assertTrue(is_rollform(error))
        self.assertTrue(is_rollform(RollformError))
        self.assertFalse(is_rollform(cause))


# --------------------------------Unit Testing---------------------------------
# --                      Main Command Line Entry Point                      --
# -----------------------------------------------------------------------------

if __name__ == '__main__':
    unittest.main()
