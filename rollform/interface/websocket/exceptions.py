# coding: utf-8

'''
Exceptions for the out-of-band fulfillment WebSocket.
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

from rollform.base.exceptions import RollformError


# -----------------------------------------------------------------------------
# Exceptions
# -----------------------------------------------------------------------------

class WebSocketError(RollformError):
    '''
    Some sort of fulfillment WebSocket error.
    '''
    ...


class MessageError(WebSocketError):
    '''
    A client sent a message we can't make sense of.
    '''
    ...
