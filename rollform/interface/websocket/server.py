# coding: utf-8

'''
WebSocket server for fulfilling dice from outside the program: physical dice
readers, companion apps, and the like.

Clients send one JSON message per die result:
    {"method": "bluetooth", "denomination": "d20", "result": 17}

and get back whether any in-flight Roll took it:
    {"consumed": true}
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

from typing import Optional, Union, Any, Callable, Dict

import asyncio
import json

import websockets


from rollform.logs       import log
from rollform.dice.roll  import Roll

from .exceptions         import MessageError


# -----------------------------------------------------------------------------
# Constants
# -----------------------------------------------------------------------------

FIELDS = ('method', 'denomination', 'result')
'''Required keys of a result message.'''


# -----------------------------------------------------------------------------
# Code
# -----------------------------------------------------------------------------
# Borrowed a bit of this and that:
#   https://websockets.readthedocs.io/en/stable/intro.html

class FulfillmentServer:
    '''
    Listens for dice results and offers each one to the active resolvers via
    `Roll.register_result()`.
    '''

    SCHEME = 'ws'

    def _define_vars(self) -> None:
        '''
        Instance variable definitions, type hinting, doc strings, etc.
        '''
        self.host: str = '127.0.0.1'
        self.port: int = 0
        '''Port to listen on. Zero lets the OS pick; see `bound_port`.'''

        self.register_fn: Callable[[str, str, Any], bool] = None
        '''Who gets offered the results.'''

        self.bound_port: Optional[int] = None
        '''The port we actually got, once serving.'''

        self._close: asyncio.Event = None
        '''Set to stop serving.'''

        self._started: asyncio.Event = None
        '''Set once we're listening.'''

    def __init__(self,
                 host:        str                   = '127.0.0.1',
                 port:        int                   = 0,
                 register_fn: Optional[Callable]    = None) -> None:
        self._define_vars()
        self.host = host
        self.port = port
        self.register_fn = register_fn or Roll.register_result

    @property
    def uri(self) -> str:
        port = self.bound_port if self.bound_port is not None else self.port
        return f"{self.SCHEME}://{self.host}:{port}"

    # -------------------------------------------------------------------------
    # Serve
    # -------------------------------------------------------------------------

    async def serve(self) -> None:
        '''
        Serve until `close()` is called.
        '''
        self._close = self._close or asyncio.Event()
        self._started = self._started or asyncio.Event()

        log.debug("Starting fulfillment server on {}:{}...",
                  self.host, self.port)
        async with websockets.serve(self.handler,
                                    self.host,
                                    self.port) as listener:
            sockets = list(listener.sockets or ())
            if sockets:
                self.bound_port = sockets[0].getsockname()[1]
            log.info("Serving dice fulfillment on {}.", self.uri)
            self._started.set()
            await self._close.wait()

        log.info("Stopped serving dice fulfillment on {}.", self.uri)

    async def started(self) -> None:
        '''Wait until the server is listening.'''
        self._started = self._started or asyncio.Event()
        await self._started.wait()

    def close(self) -> None:
        '''Stop serving.'''
        self._close = self._close or asyncio.Event()
        self._close.set()

    # -------------------------------------------------------------------------
    # Connection Handler
    # -------------------------------------------------------------------------

    async def handler(self, websocket: Any, *args: Any) -> None:
        '''
        Reply to every message on `websocket` until the client leaves.

        Older `websockets` versions also pass the request path; we don't
        care about it.
        '''
        try:
            async for message in websocket:
                await websocket.send(self.handle_message(message))
        except websockets.ConnectionClosedError as error:
            log.warning("Fulfillment client connection closed abnormally: "
                        "{}", error)

    # -------------------------------------------------------------------------
    # Messages
    # -------------------------------------------------------------------------

    def handle_message(self, message: Union[str, bytes]) -> str:
        '''
        Decode a result message, offer it up, and encode the reply.
        '''
        try:
            method, denomination, result = self.decode(message)
        except MessageError as error:
            log.warning("Ignoring fulfillment message: {}", error.message)
            return json.dumps({'consumed': False, 'error': error.message})

        consumed = bool(self.register_fn(method, denomination, result))
        log.debug("Fulfillment message {} {} {}: consumed: {}",
                  method, denomination, result, consumed)
        return json.dumps({'consumed': consumed})

    @staticmethod
    def decode(message: Union[str, bytes]) -> tuple:
        '''
        Returns (method, denomination, result) or raises MessageError.
        '''
        try:
            data = json.loads(message)
        except (json.JSONDecodeError, UnicodeDecodeError) as error:
            raise log.exception(
                MessageError,
                "Message is not valid JSON: {}",
                message,
                error_data={
                    'message': message,
                },
                log_level=log.Level.DEBUG) from error

        if not isinstance(data, dict):
            raise log.exception(
                MessageError,
                "Message must be a JSON object. Got: {}",
                message,
                log_level=log.Level.DEBUG)

        missing = [field for field in FIELDS if field not in data]
        if missing:
            raise log.exception(
                MessageError,
                "Message is missing: {}",
                ', '.join(missing),
                error_data={
                    'data': data,
                },
                log_level=log.Level.DEBUG)

        return (str(data['method']),
                str(data['denomination']),
                data['result'])


# -----------------------------------------------------------------------------
# Client Helper
# -----------------------------------------------------------------------------

async def send_result(uri:          str,
                      method:       str,
                      denomination: str,
                      result:       int) -> Dict[str, Any]:
    '''
    Send one result to a FulfillmentServer at `uri` and return its reply.
    '''
    async with websockets.connect(uri) as websocket:
        await websocket.send(json.dumps({
            'method': method,
            'denomination': denomination,
            'result': result,
        }))
        return json.loads(await websocket.recv())
