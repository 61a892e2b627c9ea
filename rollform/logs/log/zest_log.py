# coding: utf-8

'''
Test our logging layer.
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

from io import StringIO
import logging
import unittest

from rollform.zest.base.unit import ZestBase
from rollform.base.exceptions import RollformError


# ------------------------------
# What we're testing:
# ------------------------------
from . import log
from . import const


# -----------------------------------------------------------------------------
# Test Code
# -----------------------------------------------------------------------------

class Test_LogMessage(ZestBase):
    '''
    Test rollform.logs.log messages/levels are acting in an expected manner.
    '''

    def test_critical_at_default(self) -> None:
        self.assertFalse(self.logs)

        log.critical('test')
        self.assertEqual(len(self.logs), 1)
        self.assertEqual(self.logs[0], (const.Level.CRITICAL, 'test'))

    def test_brace_format(self) -> None:
        log.warning("{} rolled {total}", "1d20", total=17)
        self.assertEqual(self.logs[0][1], "1d20 rolled 17")

    def test_brace_format_error(self) -> None:
        # Bad format shouldn't raise; it should tell us what went wrong.
        log.warning("{} and {}", "only-one")
        self.assertIn("FORMAT IndexError", self.logs[0][1])

    def test_no_args_no_format(self) -> None:
        # Braces without args are left alone.
        log.info("{1d6, 1d8}kh")
        self.assertEqual(self.logs[0][1], "{1d6, 1d8}kh")

    def test_exception_from_type(self) -> None:
        error = log.exception(RollformError,
                              "Could not roll {}.", "2d(",
                              error_data={'formula': '2d('})
        self.assertIsInstance(error, RollformError)
        self.assertEqual(error.data, {'formula': '2d('})
        self.assertIn("Could not roll 2d(.", error.message)
        self.assertLogged(const.Level.ERROR, "Could not roll 2d(.")

    def test_exception_from_instance(self) -> None:
        original = ValueError("nope")
        error = log.exception(original, "Rethrowing.")
        self.assertIs(error, original)
        self.assertLogged(const.Level.ERROR, "nope")

    def test_exception_python_type(self) -> None:
        error = log.exception(ValueError, None)
        self.assertIsInstance(error, ValueError)
        self.assertIn("ValueError", str(error))


class Test_LogLevel(ZestBase):

    def set_up(self) -> None:
        self.original = log.get_level()

    def tear_down(self) -> None:
        log.set_level(self.original)

    def test_set_get(self) -> None:
        log.set_level(const.Level.DEBUG)
        self.assertEqual(log.get_level(), const.Level.DEBUG)
        self.assertTrue(log.will_output(const.Level.DEBUG))

        log.set_level(const.Level.ERROR)
        self.assertFalse(log.will_output(const.Level.INFO,
                                         const.Level.WARNING))
        self.assertTrue(log.will_output(const.Level.INFO,
                                        const.Level.CRITICAL))

    def test_invalid_level(self) -> None:
        log.set_level(const.Level.WARNING)
        log.set_level(1234)
        self.assertEqual(log.get_level(), const.Level.WARNING)
        self.assertLogged(const.Level.ERROR, "Invalid log level")

    def test_manager(self) -> None:
        log.set_level(const.Level.WARNING)
        with log.LoggingManager.full_blast():
            self.assertEqual(log.get_level(), const.Level.DEBUG)
        self.assertEqual(log.get_level(), const.Level.WARNING)

        with log.LoggingManager.on_or_off(False):
            self.assertEqual(log.get_level(), const.Level.WARNING)

        with log.LoggingManager.on_or_off(True):
            self.assertEqual(log.get_level(), const.Level.DEBUG)
        self.assertEqual(log.get_level(), const.Level.WARNING)

    def test_most_verbose(self) -> None:
        self.assertEqual(const.Level.most_verbose(const.Level.INFO,
                                                  const.Level.DEBUG),
                         const.Level.DEBUG)
        self.assertEqual(const.Level.most_verbose(None, const.Level.ERROR),
                         const.Level.ERROR)

    def test_named_logger(self) -> None:
        named = log.get_logger(str(const.LogName.DICE),
                               min_log_level=const.Level.DEBUG)
        self.assertEqual(named.name, 'rollform.dice')
        self.assertEqual(named.level, logging.DEBUG)


class Test_LogOutput(ZestBase):
    '''
    Let logs through to a stream handler to check the formatter.
    '''

    def set_up(self) -> None:
        self.capture_logs(False)
        self.stream = StringIO()
        log.init(handler=logging.StreamHandler(self.stream),
                 reinitialize=True)

    def tear_down(self) -> None:
        log.init(reinitialize=True)
        self.stream = None

    def test_formatted(self) -> None:
        log.warning("hello {}", "dice")
        output = self.stream.getvalue()
        self.assertIn("rollform", output)
        self.assertIn("WARNING", output)
        self.assertIn("hello dice", output)


# --------------------------------Unit Testing---------------------------------
# --                      Main Command Line Entry Point                      --
# -----------------------------------------------------------------------------

if __name__ == '__main__':
    unittest.main()
