# coding: utf-8

'''
Constants, enums & types for the logging facade.
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

from typing import Optional, Union, NewType

import logging
import enum


# -----------------------------------------------------------------------------
# Constants
# -----------------------------------------------------------------------------

LogLvlConversion = NewType('LogLvlConversion', Optional[Union['Level', int]])
'''
These input types can be converted to a log.Level.
'''


LoggerInput = NewType('LoggerInput', Optional[logging.Logger])
'''
Optional logger can be: None, or a Python logging.Logger.
'''


# -----------------------------------------------------------------------------
# Logger Names
# -----------------------------------------------------------------------------

@enum.unique
class LogName(enum.Enum):

    ROOT = 'rollform'
    '''
    The default/root rollform logger.
    '''

    DICE = 'rollform.dice'
    '''
    Parsing & evaluation of dice formulas.
    '''

    INTERFACE = 'rollform.interface'
    '''
    Out-of-band input sources.
    '''

    def __str__(self) -> str:
        return self.value


# -----------------------------------------------------------------------------
# Logging Levels
# -----------------------------------------------------------------------------

@enum.unique
class Level(enum.IntEnum):
    '''
    Log level enum. Values are python's logging module log level ints.
    '''

    NOTSET   = logging.NOTSET
    DEBUG    = logging.DEBUG
    INFO     = logging.INFO
    WARNING  = logging.WARNING
    ERROR    = logging.ERROR
    CRITICAL = logging.CRITICAL

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def valid(lvl: Union['Level', int]) -> bool:
        for known in Level:
            if lvl == known:
                return True
        return False

    @staticmethod
    def to_logging(lvl: LogLvlConversion) -> int:
        if lvl is None:
            lvl = Level.NOTSET
        return int(lvl)

    @staticmethod
    def from_logging(lvl: LogLvlConversion) -> 'Level':
        if lvl is None:
            return Level.NOTSET
        return Level(lvl)

    @staticmethod
    def most_verbose(lvl_a: Union['Level', int, None],
                     lvl_b: Union['Level', int, None],
                     ignore_notset: bool = True) -> 'Level':
        '''
        Returns whichever of `a` or `b` is the most verbose logging level.

        Converts 'None' to Level.NOTSET.

        if `ignore_notset` is True, this will try to get the most verbose and
        return 'the other one' if one is logging level NOTSET. Otherwise, this
        will consider logging level NOTSET as the MOST verbose level.
        '''
        lvl_a = Level.to_logging(lvl_a)
        lvl_b = Level.to_logging(lvl_b)

        if ignore_notset:
            if lvl_a == Level.NOTSET.value:
                return Level.from_logging(lvl_b)
            if lvl_b == Level.NOTSET.value:
                return Level.from_logging(lvl_a)

        # Most verbose is the smallest: NOTSET(0) < DEBUG(10) < ... < CRITICAL.
        return Level.from_logging(min(lvl_a, lvl_b))


DEFAULT_LEVEL = Level.INFO
'''Root logger starts out at this level.'''


DEFAULT_FORMAT = '{asctime} - {name} - {levelname:8s} - {message}'
'''Brace-style format for the root logger's handler.'''
