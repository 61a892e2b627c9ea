# coding: utf-8

'''
Unit tests for:
  rollform/dice/resolver.py

...and the interactive half of Roll.evaluate().
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

from typing import Any, List

import asyncio
import unittest

from rollform.zest.base.unit import ZestBase
from rollform.logs           import log

from .exceptions             import ResolverError
from .terms                  import NumericTerm, Die
from .resolver               import Resolver, RollResolver, RESOLVERS
from .roll                   import Roll


# -----------------------------------------------------------------------------
# Constants
# -----------------------------------------------------------------------------

BLUETOOTH = 'bluetooth'


# -----------------------------------------------------------------------------
# Test Resolver
# -----------------------------------------------------------------------------

class AutomaticResolver(RollResolver):
    '''
    Answers all of its own dice shortly after it starts waiting.
    '''

    RESULTS: List[int] = [6, 5, 4]

    async def await_fulfillment(self) -> None:
        asyncio.get_running_loop().call_later(0.01, self.answer)
        await super().await_fulfillment()

    def answer(self) -> None:
        for value in self.RESULTS:
            self.register_result('robot', 'd6', value)


class DelayedResolver(Resolver):
    '''
    Stages nothing up front; answers each die on its own, a little later.
    '''

    VALUE: int = 5
    DELAY: float = 0.01

    async def await_fulfillment(self) -> None:
        pass

    def register_result(self,
                        method:       str,
                        denomination: str,
                        result:       Any) -> bool:
        return False

    async def resolve_result(self,
                             term:      Any,
                             method:    str,
                             **options: Any) -> int:
        await asyncio.sleep(self.DELAY)
        return self.VALUE

    async def add_term(self, term: Any) -> None:
        pass

    def close(self) -> None:
        pass


# -----------------------------------------------------------------------------
# Test Code
# -----------------------------------------------------------------------------

class ResolverTestBase(ZestBase):

    def set_up(self) -> None:
        self.config.register_method(BLUETOOTH,
                                    label='Bluetooth Dice',
                                    interactive=True)
        self.config.denominations['d20'] = BLUETOOTH

    def tear_down(self) -> None:
        RESOLVERS.clear()

    async def start(self, roll: Roll, **options: Any) -> asyncio.Task:
        '''
        Start evaluating `roll` and return once its resolver is waiting.
        '''
        task = asyncio.create_task(roll.evaluate(**options))
        while roll not in RESOLVERS:
            if task.done():
                break
            await asyncio.sleep(0)
        return task


class Test_Fulfillment(ResolverTestBase):

    def test_implementation(self) -> None:
        self.assertIs(Roll.resolver_implementation(), RollResolver)

        self.config.register_method('robot',
                                    interactive=True,
                                    resolver=AutomaticResolver)
        self.config.denominations['d20'] = 'robot'
        self.assertIs(Roll.resolver_implementation(), AutomaticResolver)

        # More than one interactive method in play: the default resolver.
        self.config.denominations['d6'] = BLUETOOTH
        self.assertIs(Roll.resolver_implementation(), RollResolver)

    def test_identify(self) -> None:
        roll = Roll('1d20 + 2d6 + {1d20, 3}')
        fulfillable = Roll.identify_fulfillable_terms(roll.terms)
        self.assertEqual(len(fulfillable), 2)
        self.assertTrue(all(term.faces == 20 for term in fulfillable))

    def test_register_result(self) -> None:
        async def scenario() -> Roll:
            roll = Roll('1d20 + 2')
            task = await self.start(roll)

            resolver = RESOLVERS[roll]
            self.assertEqual(resolver.outstanding, 1)
            self.assertTrue(Roll.register_result(BLUETOOTH, 'd20', 17))
            await task

            # Nobody left to take it.
            self.assertNotIn(roll, RESOLVERS)
            self.assertFalse(Roll.register_result(BLUETOOTH, 'd20', 3))
            return roll

        roll = self.run_async(scenario())
        self.assertEqual(roll.total, 19)
        self.assertEqual(roll.terms[0].method, BLUETOOTH)
        self.assertLogged(log.Level.INFO, 'Awaiting 1 dice result(s)')

    def test_several_dice(self) -> None:
        async def scenario() -> Roll:
            roll = Roll('2d20')
            task = await self.start(roll)

            self.assertTrue(Roll.register_result(BLUETOOTH, 'd20', 5))
            await asyncio.sleep(0)
            self.assertFalse(task.done())
            self.assertEqual(RESOLVERS[roll].outstanding, 1)

            self.assertTrue(Roll.register_result(BLUETOOTH, 'd20', 15))
            await task
            return roll

        roll = self.run_async(scenario())
        self.assertEqual(roll.terms[0].values, [5, 15])
        self.assertEqual(roll.total, 20)

    def test_not_consumed(self) -> None:
        async def scenario() -> None:
            roll = Roll('1d20')
            task = await self.start(roll)

            # Wrong denomination, wrong method, not an int.
            self.assertFalse(Roll.register_result(BLUETOOTH, 'd6', 4))
            self.assertFalse(Roll.register_result('manual', 'd20', 4))
            self.assertFalse(Roll.register_result(BLUETOOTH, 'd20', '4'))
            self.assertFalse(Roll.register_result(BLUETOOTH, 'd20', True))

            self.assertTrue(Roll.register_result(BLUETOOTH, 'd20', 4))
            await task

        self.run_async(scenario())
        self.assertLogged(log.Level.WARNING, 'Result not consumed')

    def test_close(self) -> None:
        self.not_random([7])

        async def scenario() -> Roll:
            roll = Roll('1d20 + 2')
            task = await self.start(roll)

            resolver = RESOLVERS[roll]
            resolver.close()
            self.assertTrue(resolver.closed)
            self.assertFalse(resolver.registered)
            self.assertFalse(resolver.register_result(BLUETOOTH, 'd20', 3))
            await task
            return roll

        roll = self.run_async(scenario())
        self.assertEqual(roll.total, 9)

    def test_submit(self) -> None:
        self.not_random([1])

        async def scenario() -> Roll:
            roll = Roll('2d20 + 1d20')
            task = await self.start(roll)

            resolver = RESOLVERS[roll]
            first = roll.terms[0]._id
            resolver.submit({first: [12, 13, 14], 'nope': [2]})
            await task
            return roll

        roll = self.run_async(scenario())
        # Extra results are ignored; missing ones are random.
        self.assertEqual(roll.terms[0].values, [12, 13])
        self.assertEqual(roll.terms[2].values, [1])
        self.assertEqual(roll.total, 26)
        self.assertLogged(log.Level.WARNING, "Unknown term id 'nope'")

    def test_not_interactive(self) -> None:
        self.not_random([4])

        roll = self.run_async(Roll('1d20').evaluate(allow_interactive=False))
        self.assertEqual(roll.total, 4)

        roll = self.run_async(Roll('1d20').evaluate(maximize=True))
        self.assertEqual(roll.total, 20)
        self.assertFalse(RESOLVERS)

    def test_late_terms(self) -> None:
        '''
        Dice whose count isn't known until evaluation get added to the
        resolver then.
        '''
        self.not_random([2])

        async def scenario() -> Roll:
            roll = Roll('(1d4)d20')
            task = await self.start(roll)
            while not RESOLVERS.get(roll) or not RESOLVERS[roll].outstanding:
                await asyncio.sleep(0)

            self.assertEqual(RESOLVERS[roll].outstanding, 2)
            self.assertTrue(Roll.register_result(BLUETOOTH, 'd20', 10))
            self.assertTrue(Roll.register_result(BLUETOOTH, 'd20', 11))
            await task
            return roll

        roll = self.run_async(scenario())
        self.assertEqual(roll.total, 21)

    def test_extra_results(self) -> None:
        '''
        Explosions ask the resolver for one result at a time.
        '''
        async def scenario() -> Roll:
            roll = Roll('1d20x')
            task = await self.start(roll)
            resolver = RESOLVERS[roll]

            self.assertTrue(Roll.register_result(BLUETOOTH, 'd20', 20))
            while not resolver._pending:
                await asyncio.sleep(0)
            self.assertTrue(Roll.register_result(BLUETOOTH, 'd20', 3))
            await task
            return roll

        roll = self.run_async(scenario())
        self.assertEqual(roll.terms[0].values, [20, 3])
        self.assertEqual(roll.total, 23)

    def test_custom_resolver(self) -> None:
        self.config.register_method('robot',
                                    interactive=True,
                                    resolver=AutomaticResolver)
        self.config.denominations['d6'] = 'robot'
        self.config.denominations['d20'] = ''

        roll = self.run_async(Roll('3d6').evaluate())
        self.assertEqual(roll.terms[0].values, [6, 5, 4])
        self.assertEqual(roll.total, 15)

    def test_reroll(self) -> None:
        '''
        Rerolls after the first pass wait for their own results.
        '''
        async def scenario() -> Roll:
            roll = Roll('1d20r1')
            task = await self.start(roll)
            resolver = RESOLVERS[roll]

            self.assertTrue(Roll.register_result(BLUETOOTH, 'd20', 1))
            while not resolver._pending:
                await asyncio.sleep(0)
            self.assertFalse(task.done())
            self.assertTrue(Roll.register_result(BLUETOOTH, 'd20', 7))
            await task
            return roll

        roll = self.run_async(scenario())
        die = roll.terms[0]
        self.assertEqual(len(die.results), 2)
        self.assertTrue(die.results[0].rerolled)
        self.assertFalse(die.results[0].active)
        self.assertEqual(die.values, [7])
        self.assertEqual(roll.total, 7)

    def test_delayed_resolver(self) -> None:
        '''
        Evaluation suspends until the resolver answers each die.
        '''
        self.not_random([1])
        self.config.register_method('robot',
                                    interactive=True,
                                    resolver=DelayedResolver)
        self.config.denominations['d6'] = 'robot'
        self.config.denominations['d20'] = ''

        async def scenario() -> Roll:
            roll = Roll('2d6 + 1')
            task = asyncio.create_task(roll.evaluate())
            await asyncio.sleep(0)
            self.assertFalse(task.done())
            self.assertEqual(roll.terms[0].results, [])
            await task
            return roll

        roll = self.run_async(scenario())
        self.assertEqual(roll.terms[0].values, [5, 5])
        self.assertEqual(roll.total, 11)

    def test_negative_count(self) -> None:
        async def scenario() -> Roll:
            roll = Roll.from_terms([Die(number=-2, faces=20)])
            task = await self.start(roll)

            self.assertEqual(RESOLVERS[roll].outstanding, 2)
            self.assertTrue(Roll.register_result(BLUETOOTH, 'd20', 5))
            self.assertTrue(Roll.register_result(BLUETOOTH, 'd20', 15))
            await task
            return roll

        roll = self.run_async(scenario())
        self.assertEqual(roll.terms[0].values, [5, 15])
        self.assertEqual(roll.total, -20)

    def test_fractional_count(self) -> None:
        '''
        A fractional count rounds up to whole dice.
        '''
        async def scenario() -> Roll:
            roll = Roll('(5/2)d20')
            task = await self.start(roll)
            while not RESOLVERS.get(roll) or not RESOLVERS[roll].outstanding:
                await asyncio.sleep(0)

            self.assertEqual(RESOLVERS[roll].outstanding, 3)
            for value in (4, 5, 6):
                self.assertTrue(Roll.register_result(BLUETOOTH, 'd20',
                                                     value))
            await task
            return roll

        roll = self.run_async(scenario())
        self.assertEqual(roll.terms[0].values, [4, 5, 6])
        self.assertEqual(roll.total, 15)


class Test_Errors(ResolverTestBase):

    def test_one_per_roll(self) -> None:
        async def scenario() -> None:
            roll = Roll('1d20')
            RESOLVERS[roll] = RollResolver(roll)
            with self.assertRaises(ResolverError):
                await RollResolver(roll).await_fulfillment()

        self.run_async(scenario())

    def test_add_term(self) -> None:
        async def scenario() -> None:
            resolver = RollResolver(Roll('1'))
            with self.assertRaises(ResolverError):
                await resolver.add_term(NumericTerm(1))

        self.run_async(scenario())

    def test_unregistered_term(self) -> None:
        async def scenario() -> Any:
            roll = Roll('1d20')
            resolver = RollResolver(roll)
            return await resolver.resolve_result(roll.terms[0], BLUETOOTH)

        self.assertIsNone(self.run_async(scenario()))
        self.assertLogged(log.Level.WARNING, 'was never registered')


# --------------------------------Unit Testing---------------------------------
# --                      Main Command Line Entry Point                      --
# -----------------------------------------------------------------------------

if __name__ == '__main__':
    unittest.main()
