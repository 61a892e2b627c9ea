# coding: utf-8

'''
Unit tests for:
  rollform/interface/websocket/server.py
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

from typing import Any, List, Tuple

import asyncio
import json
import unittest

from rollform.zest.base.unit import ZestBase
from rollform.logs           import log
from rollform.dice.roll      import Roll
from rollform.dice.resolver  import RESOLVERS

from .exceptions             import MessageError
from .server                 import FulfillmentServer, send_result


# -----------------------------------------------------------------------------
# Test Code
# -----------------------------------------------------------------------------

class Test_Messages(ZestBase):

    def set_up(self) -> None:
        self.offered: List[Tuple[str, str, Any]] = []
        self.consume = True
        self.server = FulfillmentServer(register_fn=self.register)

    def register(self, method: str, denomination: str, result: Any) -> bool:
        self.offered.append((method, denomination, result))
        return self.consume

    def test_init(self) -> None:
        server = FulfillmentServer(port=8765)
        self.assertEqual(server.uri, 'ws://127.0.0.1:8765')
        self.assertIsNone(server.bound_port)
        self.assertEqual(server.register_fn, Roll.register_result)

    def test_decode(self) -> None:
        self.assertEqual(
            FulfillmentServer.decode(
                '{"method": "bluetooth", "denomination": "d20", '
                '"result": 17}'),
            ('bluetooth', 'd20', 17))

        for message in ('not json', '[1, 2]',
                        '{"method": "bluetooth", "result": 4}'):
            with self.subTest(message=message):
                with self.assertRaises(MessageError):
                    FulfillmentServer.decode(message)

    def test_consumed(self) -> None:
        reply = self.server.handle_message(json.dumps({
            'method': 'bluetooth',
            'denomination': 'd20',
            'result': 17,
        }))
        self.assertEqual(json.loads(reply), {'consumed': True})
        self.assertEqual(self.offered, [('bluetooth', 'd20', 17)])

        self.consume = False
        reply = self.server.handle_message(json.dumps({
            'method': 'bluetooth',
            'denomination': 'd6',
            'result': 3,
        }))
        self.assertEqual(json.loads(reply), {'consumed': False})

    def test_bad_message(self) -> None:
        reply = json.loads(self.server.handle_message('{"result": 4}'))
        self.assertFalse(reply['consumed'])
        self.assertIn('missing', reply['error'])
        self.assertEqual(self.offered, [])
        self.assertLogged(log.Level.WARNING, 'Ignoring fulfillment message')

        reply = json.loads(self.server.handle_message(b'\xff\xfe'))
        self.assertFalse(reply['consumed'])


class Test_Serve(ZestBase):

    def set_up(self) -> None:
        self.config.register_method('bluetooth',
                                    label='Bluetooth Dice',
                                    interactive=True)
        self.config.denominations['d20'] = 'bluetooth'

    def tear_down(self) -> None:
        RESOLVERS.clear()

    def test_send_result(self) -> None:
        offered = []

        def register(method: str, denomination: str, result: Any) -> bool:
            offered.append((method, denomination, result))
            return True

        async def scenario() -> Any:
            server = FulfillmentServer(register_fn=register)
            task = asyncio.create_task(server.serve())
            await server.started()
            self.assertIsNotNone(server.bound_port)

            reply = await send_result(server.uri, 'bluetooth', 'd20', 17)
            server.close()
            await task
            return reply

        reply = self.run_async(scenario())
        self.assertEqual(reply, {'consumed': True})
        self.assertEqual(offered, [('bluetooth', 'd20', 17)])

    def test_fulfill_roll(self) -> None:
        '''
        A result sent over the socket finishes a waiting roll.
        '''
        async def scenario() -> Tuple[Roll, Any, Any]:
            server = FulfillmentServer()
            serving = asyncio.create_task(server.serve())
            await server.started()

            roll = Roll('1d20 + 2')
            rolling = asyncio.create_task(roll.evaluate())
            while roll not in RESOLVERS:
                await asyncio.sleep(0)

            taken = await send_result(server.uri, 'bluetooth', 'd20', 17)
            await rolling
            extra = await send_result(server.uri, 'bluetooth', 'd20', 4)

            server.close()
            await serving
            return roll, taken, extra

        roll, taken, extra = self.run_async(scenario())
        self.assertEqual(taken, {'consumed': True})
        self.assertEqual(extra, {'consumed': False})
        self.assertEqual(roll.total, 19)


# --------------------------------Unit Testing---------------------------------
# --                      Main Command Line Entry Point                      --
# -----------------------------------------------------------------------------

if __name__ == '__main__':
    unittest.main()
