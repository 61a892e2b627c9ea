# coding: utf-8

'''
Unit tests for:
  rollform/dice/terms/numeric.py
  rollform/dice/terms/operator.py
  rollform/dice/terms/string.py
  rollform/dice/terms/parenthetical.py
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

import unittest

from rollform.zest.base.unit import ZestBase

from ..exceptions            import NonNumericResultError
from .numeric                import NumericTerm
from .operator               import OperatorTerm
from .string                 import StringTerm
from .parenthetical          import ParentheticalTerm


# -----------------------------------------------------------------------------
# Test Code
# -----------------------------------------------------------------------------

class Test_NumericTerm(ZestBase):

    def test_init(self) -> None:
        self.assertEqual(NumericTerm('2.5').number, 2.5)
        self.assertEqual(NumericTerm('7').number, 7)
        self.assertEqual(NumericTerm(4.0).expression, '4')
        self.assertTrue(NumericTerm(4).is_deterministic)
        self.assertEqual(NumericTerm(4).evaluate_sync().total, 4)

    def test_match(self) -> None:
        term = NumericTerm.from_match(NumericTerm.match_term('3[fire]'))
        self.assertEqual(term.number, 3)
        self.assertEqual(term.formula, '3[fire]')

        self.assertIsNone(NumericTerm.match_term('1d6'))
        self.assertIsNone(NumericTerm.match_term('three'))


class Test_OperatorTerm(ZestBase):

    def test_init(self) -> None:
        term = OperatorTerm('*', options={'flavor': 'fire'})
        self.assertTrue(term.evaluated)
        self.assertEqual(term.expression, ' * ')
        self.assertEqual(term.formula, ' * ')
        self.assertGreater(term.precedence, OperatorTerm('+').precedence)

        # Evaluating an operator is harmless, however many times.
        term.evaluate_sync()
        term.evaluate_sync()

    def test_operate(self) -> None:
        self.assertEqual(OperatorTerm.operate('+', 5, 3), 8)
        self.assertEqual(OperatorTerm.operate('-', 5, 3), 2)
        self.assertEqual(OperatorTerm.operate('*', 5, 3), 15)
        self.assertEqual(OperatorTerm.operate('/', 6, 4), 1.5)
        self.assertEqual(OperatorTerm.operate('%', 7, 3), 1)

    def test_remainder_sign(self) -> None:
        # Remainder takes the sign of the dividend.
        self.assertEqual(OperatorTerm.operate('%', -7, 3), -1)
        self.assertEqual(OperatorTerm.operate('%', 7, -3), 1)
        self.assertEqual(OperatorTerm.operate('%', -7, -3), -1)
        self.assertIsInstance(OperatorTerm.operate('%', -7, 3), int)
        self.assertEqual(OperatorTerm.operate('%', -7.5, 2), -1.5)
        with self.assertRaises(NonNumericResultError):
            OperatorTerm.operate('%', 1.5, 0.0)

    def test_operate_errors(self) -> None:
        with self.assertRaises(NonNumericResultError):
            OperatorTerm.operate('/', 1, 0)
        with self.assertRaises(NonNumericResultError):
            OperatorTerm.operate('%', 1, 0)
        with self.assertRaises(NonNumericResultError):
            OperatorTerm.operate('+', 'foo', 1)


class Test_StringTerm(ZestBase):

    def test_evaluate(self) -> None:
        with self.assertRaises(NonNumericResultError):
            StringTerm('foo').evaluate_sync()

        term = StringTerm('foo').evaluate_sync(allow_strings=True)
        self.assertEqual(term.total, 'foo')

    def test_deterministic(self) -> None:
        self.assertTrue(StringTerm('foo').is_deterministic)
        # Looks like dice once it's classified.
        self.assertFalse(StringTerm('1d6').is_deterministic)


class Test_ParentheticalTerm(ZestBase):

    def test_init(self) -> None:
        term = ParentheticalTerm(term='1d4 + 2')
        self.assertEqual(term.expression, '(1d4 + 2)')
        self.assertIsNone(term.total)
        self.assertEqual(term.dice, [])
        self.assertFalse(term.is_deterministic)

    def test_evaluate_sync(self) -> None:
        term = ParentheticalTerm(term='1d4 + 2', options={'flavor': 'cold'})
        term.evaluate_sync(maximize=True)
        self.assertEqual(term.total, 6)
        self.assertEqual(term.roll.terms[0].flavor, 'cold')
        self.assertEqual(term.roll.terms[2].flavor, 'cold')

    def test_evaluate(self) -> None:
        self.not_random([4])
        term = self.run_async(ParentheticalTerm(term='1d6 * 2').evaluate())
        self.assertEqual(term.total, 8)
        self.assertEqual(len(term.dice), 1)

    def test_from_terms(self) -> None:
        term = ParentheticalTerm.from_terms([NumericTerm(2),
                                             OperatorTerm('+'),
                                             NumericTerm(3)])
        self.assertEqual(term.formula, '(2 + 3)')
        self.assertFalse(term.evaluated)
        self.assertTrue(term.is_deterministic)

        term.evaluate_sync()
        self.assertEqual(term.total, 5)


# --------------------------------Unit Testing---------------------------------
# --                      Main Command Line Entry Point                      --
# -----------------------------------------------------------------------------

if __name__ == '__main__':
    unittest.main()
