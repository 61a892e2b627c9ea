# coding: utf-8

'''
Out-of-band dice fulfillment over WebSockets.
'''

from .exceptions import WebSocketError, MessageError
from .server     import FulfillmentServer, send_result


__all__ = [
    'WebSocketError',
    'MessageError',
    'FulfillmentServer',
    'send_result',
]
