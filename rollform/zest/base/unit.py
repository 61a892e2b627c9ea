# coding: utf-8

'''
Base Rollform Class for Tests.
  - Helpful functions.
  - Set-up / Tear-down for global Rollform stuff.
    - dice configuration
    - random number source
    - log capture
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

from typing import Optional, Any, List, Tuple, Iterable, Coroutine

import sys
import asyncio
import unittest


from rollform.logs               import log
from rollform.base               import random
from rollform.data.config        import config
from rollform.data.config.config import DiceConfiguration


# -----------------------------------------------------------------------------
# Base Class
# -----------------------------------------------------------------------------

class ZestBase(unittest.TestCase):
    '''
    Base Rollform Class for Tests.
      - Helpful functions.
      - Set-up / Tear-down for global Rollform stuff.

    Internal (probably) helpers/functions/variables - that is ones subclasses
    probably won't need to use directly - are prefixed with '_'. The
    helpers/functions/variables used directly are not prefixed.
    '''

    # -------------------------------------------------------------------------
    # Set-Up
    # -------------------------------------------------------------------------

    def _define_vars(self) -> None:
        '''
        Defines any instance variables with type hinting, docstrs.
        Happens ASAP during unittest.setUp(), before ZestBase.set_up().
        '''
        # ------------------------------
        # Debugging
        # ------------------------------

        self._ut_is_verbose = ('-v' in sys.argv) or ('--verbose' in sys.argv)
        '''
        True if unit tests were run with the 'verbose' flag from
        command line/whatever.
        '''

        self.debugging: bool = False
        '''
        Use as a flag for turning on/off extra debugging stuff.
        Mainly used with log.LoggingManager.on_or_off() context manager.
        '''

        # ------------------------------
        # Logging
        # ------------------------------

        self.logs: List[Tuple[log.Level, str]] = []
        '''
        Logs get captured into this list when self.capture_logs(True) is
        in effect.
        '''

        # ------------------------------
        # Configuration & Randomness
        # ------------------------------

        self.config: DiceConfiguration = None
        '''
        The dice configuration in effect for this test. Fresh for each test.
        '''

        self.random: Optional[random.NotRandom] = None
        '''
        If the test called `self.not_random()`, this is the fake random source
        currently installed as the module singleton.
        '''

    def pre_set_up(self) -> None:
        '''
        Called in `self.setUp()` after `self._define_vars()` and before
        anything happens.
        '''
        ...

    def set_up(self) -> None:
        '''
        Use this!

        Called at the end of self.setUp(), when instance vars are defined and
        the configuration is fresh.
        '''
        ...

    def setUp(self) -> None:
        '''
        unittest.TestCase setUp function. Sub-classes should use `set_up()` for
        their test set-up.
        '''
        self._define_vars()
        self.pre_set_up()

        # ---
        # Our Set-Up.
        # ---
        self._set_up_config()
        self.capture_logs(True)

        # ---
        # Our Unit Test's Specific Set-Up.
        # ---
        self.set_up()

    def _set_up_config(self) -> None:
        '''
        Throw away any configuration left over from a previous test.
        '''
        config.reset()
        self.config = config.get()

    # -------------------------------------------------------------------------
    # Tear-Down
    # -------------------------------------------------------------------------

    def tear_down(self) -> None:
        '''
        Use this!

        Called at the beginning of self.tearDown().
        '''
        ...

    def tearDown(self) -> None:
        '''
        unittest.TestCase tearDown function.

        Sub-classes should use `tear_down()` for their test tear-down. This
        calls tear_down() before any of the base class tear-down happens.
        '''
        try:
            self.tear_down()
        finally:
            self._tear_down_base()

    def _tear_down_base(self) -> None:
        '''
        Do all the base class tear-down.
        '''
        self._ut_is_verbose = False
        self.debugging      = False
        self.logs           = []
        self.random         = None

        try:
            log.ut_tear_down()
        finally:
            try:
                random.reset()
            finally:
                config.reset()
                self.config = None

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def not_random(self, values: Iterable[int]) -> random.NotRandom:
        '''
        Install a NotRandom as the random module singleton. Dice will roll
        `values` in order (cycling when exhausted).
        '''
        self.random = random.singleton(random.NotRandom(values))
        return self.random

    def run_async(self, coroutine: Coroutine) -> Any:
        '''
        Run `coroutine` to completion on a fresh event loop and return its
        result.
        '''
        return asyncio.run(coroutine)

    # -------------------------------------------------------------------------
    # Log Capture
    # -------------------------------------------------------------------------

    def clear_logs(self) -> None:
        '''
        Drop all captured logs from `self.logs` list.
        '''
        self.logs.clear()

    def capture_logs(self, enabled: bool) -> None:
        '''
        Divert logs from being output to being received by self.receive_log()
        instead.
        '''
        if enabled:
            log.ut_set_up(self._receive_log)
        else:
            log.ut_tear_down()

    def _receive_log(self,
                     level: log.Level,
                     output: str) -> bool:
        '''
        Logs will come to this callback when self.capture_logs(True) is
        in effect.

        They get appended to self.logs as (level, log output str) tuples.
        '''
        self.logs.append((level, output))

        # Eat the logs unless verbose tests, then let it go through.
        return not self._ut_is_verbose

    def assertLogged(self,
                     level:     log.Level,
                     substring: str) -> None:
        '''
        Assert that some captured log at `level` contains `substring`.
        '''
        for logged_level, output in self.logs:
            if logged_level == level and substring in output:
                return
        self.fail(f"No {level.name} log containing '{substring}'. "
                  f"Captured logs: {self.logs}")
