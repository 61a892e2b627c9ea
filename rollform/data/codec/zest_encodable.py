# coding: utf-8

'''
Unit tests for:
  rollform/data/codec/encodable.py
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

from typing import Any, Mapping

import unittest

from rollform.zest.base.unit import ZestBase

from ..exceptions            import EncodableError
from .encodable              import Encodable, EncodedComplex


# -----------------------------------------------------------------------------
# Test Encodable
# -----------------------------------------------------------------------------

class Modifier(Encodable):

    def __init__(self, name: str, value: int) -> None:
        self.name = name
        self.value = value

    def to_json(self) -> EncodedComplex:
        return {
            self.TYPE_FIELD_NAME: self.type_field(),
            'name': self.name,
            'value': self.value,
        }

    @classmethod
    def from_data(klass, data: Mapping[str, Any]) -> 'Modifier':
        klass.error_for(data, keys=('name', 'value'))
        return klass(data['name'], data['value'])


# -----------------------------------------------------------------------------
# Test Code
# -----------------------------------------------------------------------------

class Test_Encodable(ZestBase):

    def test_type_field(self) -> None:
        self.assertEqual(Modifier.type_field(), 'Modifier')

    def test_json(self) -> None:
        text = Modifier('prof', 2).to_json_str(sort_keys=True)
        decoded = Modifier.from_json(text)
        self.assertEqual((decoded.name, decoded.value), ('prof', 2))

    def test_errors(self) -> None:
        for text in ('{"name": "prof"', '[1, 2]', '{"name": "prof"}'):
            with self.subTest(text=text):
                with self.assertRaises(EncodableError):
                    Modifier.from_json(text)

        with self.assertRaises(EncodableError):
            Modifier.from_data(['name', 'value'])

    def test_not_implemented(self) -> None:
        with self.assertRaises(NotImplementedError):
            Encodable().to_json()
        with self.assertRaises(NotImplementedError):
            Encodable.from_data({})


# --------------------------------Unit Testing---------------------------------
# --                      Main Command Line Entry Point                      --
# -----------------------------------------------------------------------------

if __name__ == '__main__':
    unittest.main()
