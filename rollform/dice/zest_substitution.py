# coding: utf-8

'''
Unit tests for:
  rollform/dice/substitution.py
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

import unittest

from rollform.zest.base.unit import ZestBase
from rollform.logs           import log

from .substitution           import format_value, replace_formula_data
from .roll                   import Roll


# -----------------------------------------------------------------------------
# Test Code
# -----------------------------------------------------------------------------

class Named:
    def __init__(self, name: str) -> None:
        self.name = name

    def __str__(self) -> str:
        return self.name


class Test_FormatValue(ZestBase):

    def test_scalars(self) -> None:
        self.assertEqual(format_value('  2d6 '), '2d6')
        self.assertEqual(format_value(True), 'true')
        self.assertEqual(format_value(False), 'false')
        self.assertEqual(format_value(3), '3')
        self.assertEqual(format_value(2.0), '2')
        self.assertEqual(format_value(2.5), '2.5')

    def test_objects(self) -> None:
        self.assertEqual(format_value([1, 2]), 'ᚖ[1, 2]ᚖ')
        self.assertEqual(format_value({'a': 1}), 'ᚖ{"a": 1}ᚖ')
        self.assertEqual(format_value({3, 1, 2}), 'ᚖ[1, 2, 3]ᚖ')
        self.assertEqual(format_value(Named('fire')), 'fire')


class Test_Replace(ZestBase):

    def test_replace(self) -> None:
        data = {
            'prof': 2,
            'abilities': {'str': {'mod': 3}},
            'dice': ['1d4', '1d6'],
        }
        self.assertEqual(
            replace_formula_data('1d20 + @prof + @abilities.str.mod', data),
            '1d20 + 2 + 3')
        self.assertEqual(replace_formula_data('@dice.1 + 1', data),
                         '1d6 + 1')

    def test_missing(self) -> None:
        self.assertEqual(replace_formula_data('1d20 + @nope', {}),
                         '1d20 + @nope')
        self.assertEqual(replace_formula_data('1d20 + @nope', None, '0'),
                         '1d20 + 0')

        replace_formula_data('1d20 + @nope', {}, warn=True)
        self.assertLogged(log.Level.WARNING, "Missing data for '@nope'")

    def test_data_argument(self) -> None:
        '''
        Non-scalar data survives the trip into a function's arguments.
        '''
        self.config.register_function('count', lambda values: len(values))
        roll = Roll('count(@items) + 1', {'items': ['a', 'b', 'c']})
        self.assertEqual(roll.evaluate_sync().total, 4)


# --------------------------------Unit Testing---------------------------------
# --                      Main Command Line Entry Point                      --
# -----------------------------------------------------------------------------

if __name__ == '__main__':
    unittest.main()
