# coding: utf-8

'''
Unit tests for:
  rollform/data/config/config.py
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

import pathlib
import tempfile
import unittest

from rollform.zest.base.unit import ZestBase

from ..exceptions            import ConfigError, LoadError
from .                       import config


# -----------------------------------------------------------------------------
# Test Code
# -----------------------------------------------------------------------------

class Test_Configuration(ZestBase):

    def set_up(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.dir = pathlib.Path(self.temp_dir.name)

    def tear_down(self) -> None:
        self.temp_dir.cleanup()
        self.temp_dir = None
        self.dir = None

    def write(self, text: str) -> pathlib.Path:
        path = self.dir / 'dice.yaml'
        path.write_text(text)
        return path

    def test_default(self) -> None:
        self.assertIsNotNone(self.config)
        self.assertEqual(self.config.path, config.default_path())
        self.assertEqual(self.config.default_method, '')
        self.assertTrue(self.config.allow_manual)
        self.assertIn('d20', self.config.denominations)
        self.assertEqual(self.config.method_for('d20'), '')

        mersenne = self.config.method(config.MERSENNE)
        self.assertFalse(mersenne.interactive)
        self.assertTrue(callable(mersenne.handler))

        manual = self.config.method(config.MANUAL)
        self.assertTrue(manual.interactive)
        self.assertIsNone(manual.handler)

        # 'manual' never counts.
        self.assertEqual(self.config.interactive_methods(), set())

    def test_current(self) -> None:
        self.assertIs(config.get(), self.config)

        replacement = config.DiceConfiguration()
        config.set_config(replacement)
        self.assertIs(config.get(), replacement)

        config.reset()
        self.assertIsNot(config.get(), replacement)

        with self.assertRaises(ConfigError):
            config.set_config({'default-method': 'manual'})

        # The builtin `set` is left alone.
        self.assertFalse(hasattr(config, 'set'))

    def test_load(self) -> None:
        path = self.write('''
doc-type: dice-configuration
default-method: mersenne
allow-manual: false
denominations:
  d20: bluetooth
  d6: ''
methods:
  bluetooth:
    label: Bluetooth Dice
    interactive: true
''')
        dice_config = config.DiceConfiguration(path)
        self.assertEqual(dice_config.path, path)
        self.assertFalse(dice_config.allow_manual)
        self.assertEqual(dice_config.method_for('d20'), 'bluetooth')
        self.assertEqual(dice_config.method_for('d6'), 'mersenne')
        self.assertEqual(dice_config.method_for('d12'), 'mersenne')
        self.assertTrue(dice_config.is_known_method('bluetooth'))
        self.assertFalse(dice_config.is_known_method('carrier-pigeon'))
        self.assertEqual(dice_config.interactive_methods(), {'bluetooth'})

    def test_load_errors(self) -> None:
        with self.assertRaises(LoadError):
            config.DiceConfiguration(self.dir / 'does-not-exist.yaml')

        with self.assertRaises(LoadError):
            config.DiceConfiguration(self.write('methods: [unclosed'))

        with self.assertRaises(ConfigError):
            config.DiceConfiguration(self.write('- just\n- a\n- list\n'))

        with self.assertRaises(ConfigError):
            config.DiceConfiguration(self.write('doc-type: something-else\n'))

        with self.assertRaises(ConfigError):
            config.DiceConfiguration(self.write('denominations: [d4, d6]\n'))

    def test_register(self) -> None:
        method = self.config.register_method('robot', label='Dice Robot',
                                             handler=lambda term: 4)
        self.assertIs(self.config.method('robot'), method)
        self.assertFalse(method.interactive)

        self.config.register_function('double', lambda x: x * 2)
        self.assertIn('double', self.config.functions)

        with self.assertRaises(ConfigError):
            self.config.register_function('oops', 42)
        with self.assertRaises(ConfigError):
            self.config.register_method('')


# --------------------------------Unit Testing---------------------------------
# --                      Main Command Line Entry Point                      --
# -----------------------------------------------------------------------------

if __name__ == '__main__':
    unittest.main()
