# coding: utf-8

'''
Encoding of our objects to/from plain Python data (dicts, lists, numbers,
strings) and JSON text.
'''

from .encodable import Encodable, EncodedComplex


__all__ = [
    'Encodable',
    'EncodedComplex',
]
