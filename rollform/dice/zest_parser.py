# coding: utf-8

'''
Unit tests for:
  rollform/dice/grammar.py
  rollform/dice/parser.py
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

import unittest

from rollform.zest.base.unit import ZestBase

from .exceptions             import NotParsableError
from .parser                 import RollParser, Node


# -----------------------------------------------------------------------------
# Test Code
# -----------------------------------------------------------------------------

class Test_Parse(ZestBase):

    def test_numeric(self) -> None:
        node = RollParser.parse('42')
        self.assertEqual(node['class'], 'NumericTerm')
        self.assertEqual(node['number'], 42)
        self.assertEqual(node['formula'], '42')

        node = RollParser.parse('2.5[half]')
        self.assertEqual(node['number'], 2.5)
        self.assertEqual(node['options']['flavor'], 'half')
        self.assertEqual(node['formula'], '2.5[half]')

    def test_dice(self) -> None:
        node = RollParser.parse('4d6kh3[fire]')
        self.assertEqual(node['class'], 'DiceTerm')
        self.assertEqual(node['number'], 4)
        self.assertEqual(node['faces'], 6)
        self.assertEqual(node['modifiers'], 'kh3')
        self.assertEqual(node['options']['flavor'], 'fire')
        self.assertEqual(node['formula'], '4d6kh3[fire]')

        # Count of dice is optional.
        node = RollParser.parse('d20')
        self.assertIsNone(node['number'])
        self.assertEqual(node['faces'], 20)
        self.assertIsNone(node['modifiers'])

        # Letter denominations.
        node = RollParser.parse('4df')
        self.assertEqual(node['faces'], 'f')

    def test_dynamic_dice(self) -> None:
        node = RollParser.parse('(1d4)d6')
        self.assertEqual(node['class'], 'DiceTerm')
        self.assertEqual(node['number']['class'], 'ParentheticalTerm')
        self.assertEqual(node['faces'], 6)

        node = RollParser.parse('2d(1d4+2)')
        self.assertEqual(node['number'], 2)
        self.assertEqual(node['faces']['class'], 'ParentheticalTerm')
        self.assertEqual(node['faces']['formula'], '(1d4 + 2)')

    def test_pool(self) -> None:
        node = RollParser.parse('{1d6, 2d8}kh')
        self.assertEqual(node['class'], 'PoolTerm')
        self.assertEqual(len(node['terms']), 2)
        self.assertEqual(node['modifiers'], 'kh')

    def test_function(self) -> None:
        node = RollParser.parse('floor(1d20 / 2)')
        self.assertEqual(node['class'], 'FunctionTerm')
        self.assertEqual(node['fn'], 'floor')
        self.assertEqual(len(node['terms']), 1)
        self.assertIsInstance(node['terms'][0], Node)

        node = RollParser.parse('max(1, 5, 3)')
        self.assertEqual(len(node['terms']), 3)

        node = RollParser.parse('random()')
        self.assertEqual(node['terms'], [])

    def test_parenthetical(self) -> None:
        node = RollParser.parse('(1d4 + 2)[cold]')
        self.assertEqual(node['class'], 'ParentheticalTerm')
        self.assertEqual(node['options']['flavor'], 'cold')
        self.assertEqual(node['formula'], '(1d4 + 2)[cold]')
        self.assertEqual(node['term'].operator, '+')

    def test_string(self) -> None:
        node = RollParser.parse('foo')
        self.assertEqual(node['class'], 'StringTerm')
        self.assertEqual(node['term'], 'foo')

        node = RollParser.parse('ᚖ[1, 2]ᚖ')
        self.assertEqual(node['class'], 'StringTerm')
        self.assertEqual(node['term'], 'ᚖ[1, 2]ᚖ')

    def test_expression(self) -> None:
        # Left-skewed, regardless of precedence.
        node = RollParser.parse('2 + 3 * 4')
        self.assertIsInstance(node, Node)
        self.assertEqual(node.operator, '*')
        self.assertEqual(node.left.operator, '+')
        self.assertEqual(node.right['number'], 4)
        self.assertEqual(node.formula, '2 + 3 * 4')

    def test_signs(self) -> None:
        # Leading sign goes onto the number.
        node = RollParser.parse('-5 + 2')
        self.assertEqual(node.left['number'], -5)

        # Sign after a multiplicative operator goes onto the next term.
        node = RollParser.parse('2 * -3')
        self.assertEqual(node.operator, '*')
        self.assertEqual(node.right['number'], -3)

        # Runs of additive operators collapse.
        node = RollParser.parse('1 - -2')
        self.assertEqual(node.operator, '+')
        self.assertEqual(node.right['number'], 2)

        # Negative non-numbers become "(term * -1)".
        node = RollParser.parse('-1d6')
        self.assertEqual(node['class'], 'ParentheticalTerm')
        self.assertEqual(node['formula'], '(1d6 * -1)')

    def test_errors(self) -> None:
        for formula in ('1d20 +', '(1d4', '{1d6', 'floor(1', '* 2'):
            with self.subTest(formula=formula):
                with self.assertRaises(NotParsableError):
                    RollParser.parse(formula)


class Test_Tree(ZestBase):

    def test_collapse_operators(self) -> None:
        self.assertEqual(RollParser.collapse_operators(['+']), '+')
        self.assertEqual(RollParser.collapse_operators(['-']), '-')
        self.assertEqual(RollParser.collapse_operators(['-', '-']), '+')
        self.assertEqual(RollParser.collapse_operators(['+', '-']), '-')
        self.assertEqual(RollParser.collapse_operators(['-', '+']), '-')
        self.assertEqual(RollParser.collapse_operators(['-', '-', '-']),
                         '-')

    def test_flatten(self) -> None:
        flat = RollParser.flatten_tree(RollParser.parse('1 + 2 * 3'))
        self.assertEqual(len(flat), 5)
        self.assertEqual([node['class'] for node in flat],
                         ['NumericTerm', 'OperatorTerm', 'NumericTerm',
                          'OperatorTerm', 'NumericTerm'])
        self.assertEqual(flat[1]['operator'], '+')
        self.assertEqual(flat[3]['operator'], '*')

        # Not a tree; just the one node.
        flat = RollParser.flatten_tree(RollParser.parse('1d6'))
        self.assertEqual(len(flat), 1)

    def test_to_ast(self) -> None:
        ast = RollParser.to_ast(RollParser.parse('2 + 3 * 4'))
        self.assertEqual(ast.operator, '+')
        self.assertEqual(ast.left['number'], 2)
        self.assertEqual(ast.right.operator, '*')
        self.assertEqual(ast.right.left['number'], 3)
        self.assertEqual(ast.right.right['number'], 4)

        # Left-associative.
        ast = RollParser.to_ast(RollParser.parse('5 - 3 - 1'))
        self.assertEqual(ast.operator, '-')
        self.assertEqual(ast.left.operator, '-')
        self.assertEqual(ast.right['number'], 1)

        self.assertIsNone(RollParser.to_ast([]))

    def test_format_debug(self) -> None:
        self.assertEqual(
            RollParser.format_debug('on_dice_term',
                                    2, 6, None, 'fire', '2d6'),
            'on_dice_term(2, 6, null, "fire", "2d6")')

        self.assertEqual(
            RollParser.format_debug('on_pool_term',
                                    [{'class': 'DiceTerm'}, Node('+', [])]),
            'on_pool_term([DiceTerm, Node])')


# --------------------------------Unit Testing---------------------------------
# --                      Main Command Line Entry Point                      --
# -----------------------------------------------------------------------------

if __name__ == '__main__':
    unittest.main()
