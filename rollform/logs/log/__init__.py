# coding: utf-8

'''
Rollform's Log is layered on top of Python's 'logging' module.

Use the `log.<level>()` functions to log out via the root rollform logger, or
`log.get_logger()` for a named sub-logger to pass in as `rollform_logger`.
'''


# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

# ------------------------------
# Types (External)
# ------------------------------

from logging import Logger as PyLogType  # noqa


# ------------------------------
# Types, Enums, Consts
# ------------------------------

from .const import (
    # Constants
    DEFAULT_LEVEL,

    # Types
    LogLvlConversion, LoggerInput,

    # Enums
    Level, LogName
)


# ------------------------------
# Functions
# ------------------------------

from .log import (
    init,
    init_logger,

    get_logger,
    get_level,
    set_level,

    will_output,
    format_pretty,

    debug,
    info,
    warning,
    error,
    exception,
    critical,
    at_level,

    LoggingManager,

    ut_call,
    ut_set_up,
    ut_tear_down,
)


# -----------------------------------------------------------------------------
# Exports
# -----------------------------------------------------------------------------

__all__ = [
    # ------------------------------
    # External Types
    # ------------------------------
    'PyLogType',

    # ------------------------------
    # Types & Consts
    # ------------------------------
    'DEFAULT_LEVEL',
    'LogLvlConversion',
    'LoggerInput',
    'Level',
    'LogName',

    # ------------------------------
    # Functions
    # ------------------------------
    'init',
    'init_logger',

    'get_logger',
    'get_level',
    'set_level',

    'will_output',
    'format_pretty',

    'debug',
    'info',
    'warning',
    'error',
    'exception',
    'critical',
    'at_level',

    # ------------------------------
    # 'with' context manager
    # ------------------------------
    'LoggingManager',

    # ------------------------------
    # Unit Testing Support
    # ------------------------------
    'ut_call',
    'ut_set_up',
    'ut_tear_down',
]
