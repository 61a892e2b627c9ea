# coding: utf-8

'''
Unit tests for:
  rollform/dice/roll.py
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

import json
import unittest

from rollform.zest.base.unit import ZestBase
from rollform.logs           import log
from rollform.base.exceptions import RollformError

from .exceptions             import (DiceError,
                                     NotParsableError,
                                     NonNumericResultError,
                                     AlreadyEvaluatedError,
                                     ExcessiveDiceCountError,
                                     NonSynchronousTermError)
from .terms                  import (RollTerm,
                                     OperatorTerm,
                                     NumericTerm,
                                     StringTerm,
                                     Die,
                                     FateDie,
                                     ParentheticalTerm,
                                     PoolTerm)
from .                       import registry
from .roll                   import Roll


# -----------------------------------------------------------------------------
# Test Code
# -----------------------------------------------------------------------------

class Test_Construction(ZestBase):

    def test_registered(self) -> None:
        self.assertIs(registry.default_roll(), Roll)
        self.assertIsInstance(Roll.create('1d6'), Roll)

    def test_formula(self) -> None:
        roll = Roll('1d20+4')
        self.assertEqual(roll.formula, '1d20 + 4')
        self.assertEqual(str(roll), '1d20 + 4')
        self.assertEqual(len(roll.terms), 3)
        self.assertIsInstance(roll.terms[0], Die)
        self.assertIsInstance(roll.terms[1], OperatorTerm)
        self.assertIsInstance(roll.terms[2], NumericTerm)
        self.assertFalse(roll.evaluated)
        self.assertIsNone(roll.total)

    def test_reparse(self) -> None:
        '''
        A roll's formula parses back into the same roll.
        '''
        for formula in ('4d6kh3[fire]+2', '(1d4 + 2) * 3',
                        '{1d6, 2d8}kh - 1', 'floor(1d20 / 2)', '(1d4)d6'):
            with self.subTest(formula=formula):
                first = Roll(formula).formula
                self.assertEqual(Roll(first).formula, first)

    def test_empty(self) -> None:
        roll = Roll('')
        self.assertEqual(roll.terms, [])
        self.assertEqual(roll.formula, '')
        self.assertEqual(Roll.parse(''), [])

    def test_not_a_string(self) -> None:
        with self.assertRaises(NotParsableError):
            Roll(42)
        with self.assertRaises(NotParsableError):
            Roll.parse(None)

    def test_bad_formula(self) -> None:
        with self.assertRaises(NotParsableError):
            Roll('1d20 +')

    def test_data(self) -> None:
        roll = Roll('1d20 + @prof', {'prof': 2})
        self.assertEqual(roll.formula, '1d20 + 2')

        roll = Roll('@abilities.str.mod * 2',
                    {'abilities': {'str': {'mod': 3}}})
        self.assertEqual(roll.evaluate_sync().total, 6)

        # Missing data is zero.
        roll = Roll('@missing + 1')
        self.assertEqual(roll.formula, '0 + 1')
        self.assertEqual(roll.evaluate_sync().total, 1)

    def test_dice(self) -> None:
        # Nested dice count too.
        roll = Roll('4d6 + 1d20 + (2d8 + 1)')
        self.assertEqual(len(roll.dice), 3)
        self.assertEqual([die.faces for die in roll.dice], [6, 20, 8])

    def test_is_deterministic(self) -> None:
        self.assertTrue(Roll('1 + 2 * 3').is_deterministic)
        self.assertTrue(Roll('floor(7 / 2)').is_deterministic)
        self.assertFalse(Roll('1d6 + 2').is_deterministic)
        self.assertFalse(Roll('(1d6 + 2) * 2').is_deterministic)
        self.assertFalse(Roll('max(1d6, 2)').is_deterministic)


class Test_EvaluateSync(ZestBase):

    def total(self, formula: str, **options) -> object:
        return Roll(formula).evaluate_sync(**options).total

    def test_arithmetic(self) -> None:
        self.assertEqual(self.total('2 + 3 * 4'), 14)
        self.assertEqual(self.total('(2 + 3) * 4'), 20)
        self.assertEqual(self.total('5 - 3 - 1'), 1)
        self.assertEqual(self.total('10 / 4'), 2.5)
        self.assertEqual(self.total('7 % 4'), 3)
        self.assertEqual(self.total('-5 + 2'), -3)
        self.assertEqual(self.total('2 * -3'), -6)
        self.assertEqual(self.total('1 - -2'), 3)
        self.assertEqual(self.total('2.5 * 2'), 5)

    def test_remainder(self) -> None:
        self.assertEqual(self.total('-7 % 3'), -1)
        self.assertEqual(self.total('7 % -3'), 1)
        self.assertEqual(self.total('(0 - 8) % 5 + 10'), 7)

    def test_division_by_zero(self) -> None:
        with self.assertRaises(NonNumericResultError):
            self.total('1 / 0')

    def test_functions(self) -> None:
        self.assertEqual(self.total('floor(7 / 2)'), 3)
        self.assertEqual(self.total('ceil(7 / 2)'), 4)
        self.assertEqual(self.total('round(2.5)'), 3)
        self.assertEqual(self.total('max(1, 5, 3)'), 5)
        self.assertEqual(self.total('abs(-4) + 1'), 5)

    def test_maximize(self) -> None:
        self.assertEqual(self.total('1d20 + 4', maximize=True), 24)
        self.assertEqual(self.total('2d6 * 2', maximize=True), 24)
        self.assertEqual(self.total('-1d6', maximize=True), -6)
        self.assertEqual(self.total('(1d4)d6', maximize=True), 24)
        self.assertEqual(self.total('2d(1d4+2)', maximize=True), 12)

        # Modifiers don't apply synchronously.
        self.assertEqual(self.total('4d6kh1', maximize=True), 24)

    def test_minimize(self) -> None:
        self.assertEqual(self.total('1d20 + 4', minimize=True), 5)
        self.assertEqual(self.total('3d6', minimize=True), 3)
        self.assertEqual(self.total('-1d6', minimize=True), -1)

    def test_strict(self) -> None:
        with self.assertRaises(NonSynchronousTermError):
            self.total('1d20 + 4')

        # Not strict: the dice count as zero.
        self.assertEqual(self.total('1d20 + 4', strict=False), 4)

    def test_excessive(self) -> None:
        with self.assertRaises(ExcessiveDiceCountError):
            self.total('1000d6', maximize=True)

    def test_strings(self) -> None:
        with self.assertRaises(NonNumericResultError):
            self.total('foo')

        roll = Roll('foo').evaluate_sync(allow_strings=True)
        self.assertEqual(roll.product, 'foo')
        self.assertEqual(roll.total, 0)

    def test_result(self) -> None:
        roll = Roll('1d20 + 4').evaluate_sync(maximize=True)
        self.assertEqual(roll.result, '20 + 4')
        self.assertEqual(repr(roll), '<Roll: 1d20 + 4 = 20 + 4>')


class Test_Evaluate(ZestBase):

    def test_dice(self) -> None:
        self.not_random([17])
        roll = self.run_async(Roll('1d20 + 4').evaluate())
        self.assertTrue(roll.evaluated)
        self.assertEqual(roll.total, 21)
        self.assertEqual(roll.result, '17 + 4')
        self.assertEqual(roll.dice[0].values, [17])

    def test_modifiers(self) -> None:
        self.not_random([1, 2, 3, 4])
        roll = self.run_async(Roll('4d6kh1').evaluate())
        self.assertEqual(roll.total, 4)
        die = roll.terms[0]
        self.assertEqual(die.modifiers, ['kh1'])
        self.assertEqual(len([result for result in die.results
                              if result.discarded]),
                         3)

    def test_maximize(self) -> None:
        roll = self.run_async(Roll('2d8 + 1').evaluate(maximize=True))
        self.assertEqual(roll.total, 17)

    def test_flavor(self) -> None:
        self.not_random([1, 2, 3, 4])
        roll = self.run_async(Roll('4d6kh1[fire] + 2').evaluate())
        self.assertEqual(roll.terms[0].flavor, 'fire')
        self.assertEqual(roll.formula, '4d6kh1[fire] + 2')
        self.assertEqual(roll.total, 6)

    def test_parenthetical(self) -> None:
        self.not_random([3, 5])
        roll = self.run_async(Roll('(1d6 + 1d6)[cold] * 2').evaluate())
        self.assertEqual(roll.total, 16)
        inner = roll.terms[0]
        self.assertIsInstance(inner, ParentheticalTerm)
        # Flavor reaches the inner terms.
        for term in inner.roll.terms:
            if not isinstance(term, OperatorTerm):
                self.assertEqual(term.flavor, 'cold')

    def test_immutable(self) -> None:
        roll = Roll('1 + 1')
        roll.evaluate_sync()
        with self.assertRaises(AlreadyEvaluatedError):
            roll.evaluate_sync()
        with self.assertRaises(AlreadyEvaluatedError):
            self.run_async(roll.evaluate())
        with self.assertRaises(AlreadyEvaluatedError):
            roll.alter(2, 0)

    def test_roll_and_reroll(self) -> None:
        self.not_random([5])
        roll = Roll('1d6 + 1')
        self.assertIs(self.run_async(roll.roll()), roll)
        self.assertEqual(roll.total, 6)

        rerolled = self.run_async(roll.reroll())
        self.assertIsNot(rerolled, roll)
        self.assertTrue(rerolled.evaluated)
        self.assertEqual(rerolled.formula, roll.formula)


class Test_Alteration(ZestBase):

    def test_alter(self) -> None:
        roll = Roll('2d6 + 3').alter(2, 1)
        self.assertEqual(roll.formula, '5d6 + 3')

        roll = Roll('2d6 + 3').alter(2, 1, multiply_numeric=True)
        self.assertEqual(roll.formula, '5d6 + 6')

        # Half rounds up.
        roll = Roll('3d6').alter(0.5, 0)
        self.assertEqual(roll.formula, '2d6')

        # Bad multiplier is ignored; bad addition too.
        roll = Roll('3d6').alter(-1, 'two')
        self.assertEqual(roll.formula, '3d6')

    def test_clone(self) -> None:
        roll = Roll('1d20 + @prof', {'prof': 2}, {'flavor': 'attack'})
        roll.evaluate_sync(maximize=True)

        clone = roll.clone()
        self.assertIsNot(clone, roll)
        self.assertFalse(clone.evaluated)
        self.assertEqual(clone.formula, roll.formula)
        self.assertEqual(clone.data, roll.data)
        self.assertEqual(clone.options, roll.options)

    def test_propagate_flavor(self) -> None:
        roll = Roll('1d6[fire] + 1d4 + 2')
        roll.propagate_flavor('cold')
        self.assertEqual(roll.terms[0].flavor, 'fire')
        self.assertEqual(roll.terms[2].flavor, 'cold')
        self.assertEqual(roll.terms[4].flavor, 'cold')
        self.assertEqual(roll.terms[1].flavor, '')


class Test_Classmethods(ZestBase):

    def test_validate(self) -> None:
        self.assertTrue(Roll.validate('1d20 + 4'))
        self.assertTrue(Roll.validate('1d20 + @mod'))
        self.assertTrue(Roll.validate('floor(1d20 / 2)'))
        self.assertFalse(Roll.validate('1d20 +'))
        self.assertFalse(Roll.validate('1d20 + foo'))
        self.assertFalse(Roll.validate(20))

    def test_simulate(self) -> None:
        results = self.run_async(Roll.simulate('1d6', n=100))
        self.assertEqual(len(results), 100)
        self.assertTrue(all(1 <= result <= 6 for result in results))
        self.assertLogged(log.Level.INFO, 'Formula: 1d6 | Iterations: 100')

    def test_from_terms(self) -> None:
        terms = [Die(number=2, faces=6), OperatorTerm('+'), NumericTerm(3)]
        roll = Roll.from_terms(terms)
        self.assertEqual(roll.formula, '2d6 + 3')
        self.assertFalse(roll.evaluated)

        # Already evaluated terms make an evaluated roll.
        die = Die(number=2, faces=6, results=[{'result': 4}, {'result': 5}])
        number = NumericTerm(3)
        number.evaluate_sync()
        roll = Roll.from_terms([die, OperatorTerm('+'), number])
        self.assertTrue(roll.evaluated)
        self.assertEqual(roll.total, 12)

        # All or nothing.
        with self.assertRaises(DiceError):
            Roll.from_terms([die, OperatorTerm('+'), NumericTerm(3)])
        with self.assertRaises(DiceError):
            Roll.from_terms(['1d6'])

    def test_classify_string_term(self) -> None:
        self.assertIsInstance(Roll.classify_string_term('2d6'), Die)
        self.assertIsInstance(Roll.classify_string_term('4df'), FateDie)
        self.assertIsInstance(Roll.classify_string_term('5'), NumericTerm)
        self.assertIsInstance(Roll.classify_string_term('foo'), StringTerm)

        # Intermediate: the count of dice has to be explicit...
        self.assertIsInstance(Roll.classify_string_term('d6'), StringTerm)
        die = Roll.classify_string_term('d6', intermediate=False)
        self.assertIsInstance(die, Die)
        self.assertEqual(die.number, 1)

        # ...and dice next to intermediate terms stay strings.
        parenthetical = ParentheticalTerm('1d4')
        self.assertIsInstance(
            Roll.classify_string_term('2d6', prior=parenthetical),
            StringTerm)

        # Terms are already classified.
        number = NumericTerm(2)
        self.assertIs(Roll.classify_string_term(number), number)

    def test_simplify_terms(self) -> None:
        terms = Roll.simplify_terms([NumericTerm(2),
                                     StringTerm('d6'),
                                     OperatorTerm('+')])
        self.assertEqual(len(terms), 1)
        self.assertIsInstance(terms[0], Die)
        self.assertEqual(terms[0].formula, '2d6')

        terms = Roll.simplify_terms([OperatorTerm('*'),
                                     NumericTerm(2),
                                     OperatorTerm('+'),
                                     StringTerm('4')])
        self.assertEqual([term.formula for term in terms],
                         ['2', ' + ', '4'])
        self.assertIsInstance(terms[2], NumericTerm)

        # A leading minus stays.
        terms = Roll.simplify_terms([OperatorTerm('-'), NumericTerm(2)])
        self.assertEqual(len(terms), 2)


class Test_Encoding(ZestBase):

    def test_round_trip(self) -> None:
        self.not_random([1, 2, 3, 4])
        roll = self.run_async(Roll('4d6kh1[fire] + 2').evaluate())

        data = roll.to_json()
        self.assertEqual(data['class'], 'Roll')
        self.assertEqual(data['formula'], '4d6kh1[fire] + 2')
        self.assertEqual(data['total'], 6)
        self.assertTrue(data['evaluated'])

        # Survives the trip through actual JSON.
        copy = Roll.from_json(json.dumps(data))
        self.assertTrue(copy.evaluated)
        self.assertEqual(copy.total, 6)
        self.assertEqual(copy.formula, roll.formula)
        self.assertIsInstance(copy.terms[0], Die)
        self.assertEqual(copy.terms[0].results, roll.terms[0].results)
        self.assertEqual(copy.terms[0].total, 4)
        self.assertEqual(copy.terms[0].flavor, 'fire')

    def test_unevaluated(self) -> None:
        roll = Roll('{1d6, 1d8}kh + 1')
        copy = Roll.from_data(roll.to_json())
        self.assertFalse(copy.evaluated)
        self.assertIsInstance(copy.terms[0], PoolTerm)
        self.assertEqual(copy.formula, roll.formula)

        # Can still be evaluated.
        copy.evaluate_sync(maximize=True)
        self.assertEqual(copy.total, 15)

    def test_legacy_names(self) -> None:
        data = {
            'class': 'Roll',
            'formula': '{1d6}',
            'terms': [{
                'class': 'DicePool',
                'terms': ['1d6'],
                'modifiers': [],
                'rolls': [],
                'results': [{'result': 4, 'active': True}],
                'evaluated': True,
            }],
            'total': 4,
        }
        roll = Roll.from_data(data)
        self.assertTrue(roll.evaluated)
        self.assertIsInstance(roll.terms[0], PoolTerm)
        self.assertEqual(roll.total, 4)

    def test_bad_data(self) -> None:
        with self.assertRaises(RollformError):
            Roll.from_data({'class': 'Roll', 'terms': []})
        with self.assertRaises(DiceError):
            Roll.from_data({'class': 'NoSuchRoll',
                            'formula': '1',
                            'terms': []})

    def test_unknown_term_class(self) -> None:
        term = RollTerm.from_data({'class': 'Mystery',
                                   'number': 2,
                                   'faces': 4,
                                   'results': [{'result': 3},
                                               {'result': 1}]})
        self.assertIsInstance(term, Die)
        self.assertEqual(term.total, 4)


# --------------------------------Unit Testing---------------------------------
# --                      Main Command Line Entry Point                      --
# -----------------------------------------------------------------------------

if __name__ == '__main__':
    unittest.main()
