# coding: utf-8

'''
Logging utilities for Rollform.
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

from typing import (Optional, Union, Any, Type, Callable,
                    Mapping, MutableMapping, Dict)

import logging
import pprint
import textwrap

from types import TracebackType


from rollform.base.exceptions import RollformError

from . import const


# -----------------------------------------------------------------------------
# Exports
# -----------------------------------------------------------------------------

__all__ = [
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


# -----------------------------------------------------------------------------
# Variables
# -----------------------------------------------------------------------------

__initialized: bool = False
'''Re-init protection.'''

logger: logging.Logger = None
'''Our main/default logger.'''

_unit_test_callback: Optional[Callable[[const.Level, str], bool]] = None
'''Logging callback to consume logs during unit tests.'''


# -----------------------------------------------------------------------------
# Initialization
# -----------------------------------------------------------------------------

def init(level:        const.LogLvlConversion    = const.DEFAULT_LEVEL,
         handler:      Optional[logging.Handler] = None,
         formatter:    Optional[logging.Formatter] = None,
         reinitialize: Optional[bool]            = None) -> None:
    '''
    Initializes our root logger.

    If no `handler` is supplied, a StreamHandler (stderr) is created. If no
    `formatter` is supplied, one is made from const.DEFAULT_FORMAT.
    '''
    # ------------------------------
    # No Re-Init.
    # ------------------------------
    global __initialized
    if __initialized and not reinitialize:
        return
    __initialized = True

    # ------------------------------
    # Initialize the Logger...
    # ------------------------------
    global logger
    logger = init_logger(str(const.LogName.ROOT), level)

    # ------------------------------
    # ...and its output.
    # ------------------------------
    # This is our root logger, so we do allow it to have special handlers.
    for each in list(logger.handlers):
        logger.removeHandler(each)

    handler = handler or logging.StreamHandler()
    handler.setFormatter(formatter
                         or logging.Formatter(fmt=const.DEFAULT_FORMAT,
                                              style='{'))
    logger.addHandler(handler)
    logger.propagate = False


def init_logger(logger_name: str,
                level:       const.LogLvlConversion = const.DEFAULT_LEVEL
                ) -> logging.Logger:
    '''
    Initializes and returns a logger with the supplied name.
    '''
    named = logging.getLogger(logger_name)
    named.setLevel(const.Level.to_logging(level))

    # Non-root loggers should/must use the root's handler/formatter.

    return named


# -----------------------------------------------------------------------------
# Logger Helpers
# -----------------------------------------------------------------------------

def get_logger(*names:        str,
               min_log_level: const.LogLvlConversion = None
               ) -> logging.Logger:
    '''
    Get a logger by name. Names should be module name, or module and
    class name.

    Ignores any 'Falsy' values in `names` when building a name from parts.

    If `min_log_level` is an int or Level, this will check the logger's level
    and set it if it doesn't meet the requirement.

    E.g.:
      get_logger(__name__, self.__class__.__name__)
      get_logger(str(LogName.DICE), min_log_level=log.Level.DEBUG)
    '''
    logger_name = '.'.join([each for each in names if each])

    named_logger = logging.getLogger(logger_name)

    if min_log_level:
        current = get_level(named_logger)
        desired = const.Level.to_logging(min_log_level)
        if desired != current:
            set_level(const.Level.most_verbose(current, desired),
                      named_logger)

    return named_logger


def _logger(rollform_logger: const.LoggerInput = None) -> logging.Logger:
    '''
    Returns `rollform_logger` if it is Truthy.
    Returns the default rollform logger if not.
    '''
    return (rollform_logger
            if rollform_logger else
            logger)


# -----------------------------------------------------------------------------
# Log Output Levels
# -----------------------------------------------------------------------------

def get_level(rollform_logger: const.LoggerInput = None) -> const.Level:
    '''Returns current log level of logger, translated into Level enum.'''
    this = _logger(rollform_logger)
    return const.Level(this.level)


def set_level(level:           const.LogLvlConversion = const.DEFAULT_LEVEL,
              rollform_logger: const.LoggerInput      = None) -> None:
    '''
    Change logger's log level. Options are the log.Level enum values.
    '''
    if not const.Level.valid(level):
        error("Invalid log level {}. Ignoring.", level)
        return

    this = _logger(rollform_logger)
    this.setLevel(const.Level.to_logging(level))


def will_output(*args:           const.LogLvlConversion,
                rollform_logger: const.LoggerInput = None) -> bool:
    '''
    Returns true if any supplied `args` is high enough to output a log.
    '''
    the_logger = _logger(rollform_logger)
    for check in args:
        if const.Level.to_logging(check) >= the_logger.getEffectiveLevel():
            return True

    return False


# -----------------------------------------------------------------------------
# Log Output Formatting
# -----------------------------------------------------------------------------

def format_pretty(object:     object,
                  prefix:     Optional[str] = None,
                  indent:     int           = 2,
                  width:      int           = 120,
                  sort_dicts: bool          = True) -> str:
    '''
    Pretty print `object` to a string, return the string.

    If `prefix` is a string, each line is indented with it.
    '''
    pretty = pprint.pformat(object,
                            indent=indent,
                            width=width,
                            sort_dicts=sort_dicts)
    if prefix and isinstance(prefix, str):
        pretty = textwrap.indent(pretty, prefix)

    return pretty


def _brace_message(fmt_msg: str,
                   *args:   Any,
                   **kwargs: Mapping[str, Any]) -> str:
    '''
    `fmt_msg` is the user's message, which may have brace formatting to act on.
    Can handle case where no formatting needs be done (no args/kwargs
    supplied).

    Otherwise use '.format()' brace formatting on `fmt_msg` string.
    '''
    if not (args or kwargs):
        return fmt_msg

    try:
        return fmt_msg.format(*args, **kwargs)

    # We are trying to log something, so give both log and error info.
    except (IndexError, KeyError) as error:
        return ("FORMAT " + type(error).__name__ + " FOR: "
                + fmt_msg
                + ".format(): "
                + "args: " + str(args) + ", "
                + "kwargs: " + str(kwargs) + " -> "
                + str(error))


# -----------------------------------------------------------------------------
# Log Keyword Args Helpers
# -----------------------------------------------------------------------------

_LOG_KWARGS = ('exc_info', 'stack_info', 'stacklevel', 'extra')
'''Keyword args that belong to the python logger call, not our message.'''


def _pop_log_kwargs(kwargs: MutableMapping[str, Any]) -> Dict[str, Any]:
    '''
    Pulls python logger kwargs out of `kwargs` so that the rest can be used
    for message formatting.
    '''
    log_kwargs = {}
    for key in _LOG_KWARGS:
        if key in kwargs:
            log_kwargs[key] = kwargs.pop(key)
    return log_kwargs


# -----------------------------------------------------------------------------
# Logger Normal Functions
# -----------------------------------------------------------------------------

def at_level(level:           const.Level,
             msg:             str,
             *args:           Any,
             rollform_logger: const.LoggerInput = None,
             **kwargs:        Any) -> None:
    '''
    Log at `level`. All the level-named functions come through here.
    '''
    log_kwargs = _pop_log_kwargs(kwargs)
    output = _brace_message(msg, *args, **kwargs)
    if not ut_call(level, output):
        this = _logger(rollform_logger)
        this.log(const.Level.to_logging(level), output, **log_kwargs)


def debug(msg:             str,
          *args:           Any,
          rollform_logger: const.LoggerInput = None,
          **kwargs:        Any) -> None:
    at_level(const.Level.DEBUG, msg, *args,
             rollform_logger=rollform_logger,
             **kwargs)


def info(msg:             str,
         *args:           Any,
         rollform_logger: const.LoggerInput = None,
         **kwargs:        Any) -> None:
    at_level(const.Level.INFO, msg, *args,
             rollform_logger=rollform_logger,
             **kwargs)


def warning(msg:             str,
            *args:           Any,
            rollform_logger: const.LoggerInput = None,
            **kwargs:        Any) -> None:
    at_level(const.Level.WARNING, msg, *args,
             rollform_logger=rollform_logger,
             **kwargs)


def error(msg:             str,
          *args:           Any,
          rollform_logger: const.LoggerInput = None,
          **kwargs:        Any) -> None:
    at_level(const.Level.ERROR, msg, *args,
             rollform_logger=rollform_logger,
             **kwargs)


def critical(msg:             str,
             *args:           Any,
             rollform_logger: const.LoggerInput = None,
             **kwargs:        Any) -> None:
    at_level(const.Level.CRITICAL, msg, *args,
             rollform_logger=rollform_logger,
             **kwargs)


def _except_msg(message:      Optional[str],
                error_type:   Type[Exception],
                error_string: Optional[str],
                *args:        Any,
                **kwargs:     Any) -> str:
    '''
    Build the log message for `exception()`.

    If no `message`, creates a simple default. Otherwise appends basically the
    same info to the formatted message.

    `error_string` is allowed to have curly brackets and is not formatted.
    '''
    if not message:
        output = f"Exception caught. type: {error_type.__name__}"
        if error_string:
            output += f", str: {error_string}"
        if args:
            output += f", args: {args}"
        if kwargs:
            output += f", kwargs: {kwargs}"
        return output

    output = _brace_message(message, *args, **kwargs)
    if error_string:
        output += (f" (Exception type: {error_type.__name__}, "
                   f"str: {error_string})")
    return output


def exception(err_or_class:    Union[Exception, Type[Exception]],
              msg:             Optional[str],
              *args:           Any,
              rollform_logger: const.LoggerInput        = None,
              error_data:      Optional[Dict[Any, Any]] = None,
              log_level:       const.Level              = const.Level.ERROR,
              **kwargs:        Any) -> Exception:
    '''
    Log the exception at `log_level` (default ERROR).

    If `err_or_class` is a type, this will create and return an instance by
    constructing: `err_or_class(log_msg_output_str)`
      - If optional `error_data` is not None and `err_or_class` is a
        RollformError, it will be supplied to the created error as the `data`
        parameter in the constructor.

    Finally, this returns the exception instance. This way you can do
    something like:
      except SomeError as error:
          raise log.exception(
              OtherError,
              "Cannot frobnicate {} from {}.",
              source, target,
          ) from error
    '''
    log_kwargs = _pop_log_kwargs(kwargs)

    # ------------------------------
    # Did we get an instance or a type?
    # ------------------------------
    if isinstance(err_or_class, Exception):
        error_type = type(err_or_class)
        log_message = _except_msg(msg, error_type, str(err_or_class),
                                  *args, **kwargs)
        exception_instance = err_or_class

    else:
        error_type = err_or_class
        log_message = _except_msg(msg, error_type, None,
                                  *args, **kwargs)
        if issubclass(err_or_class, RollformError):
            exception_instance = err_or_class(log_message, data=error_data)
        else:
            exception_instance = err_or_class(log_message)

    # ------------------------------
    # And now - finally - log it and return exception
    # ------------------------------
    if not ut_call(log_level, log_message):
        _logger(rollform_logger).log(const.Level.to_logging(log_level),
                                     log_message, **log_kwargs)

    return exception_instance


# -----------------------------------------------------------------------------
# Logging Context Manager
# -----------------------------------------------------------------------------
# A context manager for unit testing/debugging that will
# turn up log level then turn it back to where it was when done.
# e.g.:
#   with log.LoggingManager.full_blast():
#       something_weird_happening()
# Also:
#   with log.LoggingManager.on_or_off(verbose):
#       something_only_sometimes_interesting()

class LoggingManager:
    def __init__(self, level: const.Level, no_op: bool = False) -> None:
        self._desired = level
        self._original = get_level()
        self._do_nothing = no_op

    def __enter__(self):
        if self._do_nothing:
            return

        self._original = get_level()
        set_level(self._desired)

    def __exit__(self,
                 type:      Optional[Type[BaseException]] = None,
                 value:     Optional[BaseException]       = None,
                 traceback: Optional[TracebackType]       = None) -> bool:
        '''We do the same thing, regardless of an exception or not.'''
        if self._do_nothing:
            return False

        set_level(self._original)
        return False

    # ---
    # Specific Manager Types...
    # ---
    @staticmethod
    def on_or_off(enabled: bool) -> 'LoggingManager':
        '''
        Returns either a full_blast() manager or an ignored() manager,
        depending on `enabled`.
        '''
        if enabled:
            return LoggingManager.full_blast()
        return LoggingManager.ignored()

    @staticmethod
    def full_blast() -> 'LoggingManager':
        '''
        This one sets logging to most verbose level - DEBUG.
        '''
        return LoggingManager(const.Level.DEBUG)

    @staticmethod
    def ignored() -> 'LoggingManager':
        '''
        This one does nothing.
        '''
        return LoggingManager(const.Level.CRITICAL, no_op=True)


# -----------------------------------------------------------------------------
# Unit Testing
# -----------------------------------------------------------------------------

def ut_call(level: const.Level,
            output: str) -> bool:
    '''
    Call this; it will figure out if it needs to do any of the unit-test
    callback stuff.

    Returns bool:
      - True if _unit_test_callback wants to eat the log.
      - False if no callback or it doesn't want to eat the log.
    '''
    if not _unit_test_callback or not callable(_unit_test_callback):
        return False

    return bool(_unit_test_callback(level, output))


def ut_set_up(callback: Optional[Callable[[const.Level, str], bool]]) -> None:
    '''
    Set up for unit testing.

    `callback` will be called for every log output function with log level and
    final output string. It should return a bool: True for when it wants to eat
    the log and not let it be logged out, False otherwise (tee message to it
    and logger).
    '''
    global _unit_test_callback
    _unit_test_callback = callback


def ut_tear_down() -> None:
    '''
    Tear down for unit testing.

    Reset things that were set in ut_set_up().
    '''
    global _unit_test_callback
    _unit_test_callback = None


# -----------------------------------------------------------------------------
# Module Setup
# -----------------------------------------------------------------------------

if not __initialized:
    init()
