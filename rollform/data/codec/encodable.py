# coding: utf-8

'''
Encodable mixin class for customizing how a class is encoded/decoded to
basic Python values/structures (int, dict, etc).
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

from typing import Any, Type, Iterable, Mapping, Dict

import json


from rollform.logs import log

from ..exceptions  import EncodableError


# -----------------------------------------------------------------------------
# Types
# -----------------------------------------------------------------------------

EncodedComplex = Dict[str, Any]
'''A mapping of strings to basic value-types, lists or other such mappings.'''


# -----------------------------------------------------------------------------
# Encodable Interface / Mixin
# -----------------------------------------------------------------------------

class Encodable:
    '''
    Mixin for classes that want to support encoding/decoding themselves.

    The class should convert its data to/from a mapping of strings to basic
    value-types (str, int, etc). If anything it (directly) contains also needs
    encoding/decoding, the class should ask it to during the encode/decode.

    Classes must implement:
      - to_json
      - from_data

    The encoded mapping always carries the class's `type_field()` under the
    TYPE_FIELD_NAME key so that decoding can pick the correct class.

    Classes can/should use "error_for*" methods for validation.
    '''

    TYPE_FIELD_NAME: str = 'class'
    '''
    Key in the encoded mapping that holds the `type_field()` value.
    '''

    # -------------------------------------------------------------------------
    # Encodable API
    # -------------------------------------------------------------------------

    @classmethod
    def type_field(klass: Type['Encodable']) -> str:
        '''
        A short, unique name for encoding an instance into a field in
        a dict. Defaults to the class name.
        '''
        return klass.__name__

    def to_json(self) -> EncodedComplex:
        '''
        Encode self as a mapping of plain data.
        '''
        raise NotImplementedError(f"{self.__class__.__name__}.to_json() "
                                  "is not implemented.")

    @classmethod
    def from_data(klass: Type['Encodable'],
                  data:  Mapping[str, Any]) -> 'Encodable':
        '''
        Decode plain `data` into an instance.
        '''
        raise NotImplementedError(f"{klass.__name__}.from_data() "
                                  "is not implemented.")

    def to_json_str(self, **kwargs: Any) -> str:
        '''
        Encode self all the way to JSON text. `kwargs` go to `json.dumps()`.
        '''
        return json.dumps(self.to_json(), **kwargs)

    @classmethod
    def from_json(klass: Type['Encodable'],
                  text:  str) -> 'Encodable':
        '''
        Decode JSON `text` into an instance.
        '''
        try:
            data = json.loads(text)
        except json.JSONDecodeError as error:
            raise log.exception(
                EncodableError,
                "Cannot decode {} from invalid JSON: {}",
                klass.__name__, text,
                error_data={
                    'text': text,
                }) from error

        if not isinstance(data, dict):
            raise log.exception(
                EncodableError,
                "Cannot decode {} from JSON that is not an object: {}",
                klass.__name__, text,
                error_data={
                    'data': data,
                })
        return klass.from_data(data)

    # -------------------------------------------------------------------------
    # Helpers: Validation / Error
    # -------------------------------------------------------------------------

    @classmethod
    def error_for_key(klass: Type['Encodable'],
                      key:   str,
                      data:  EncodedComplex) -> None:
        '''
        Raises an EncodableError if supplied `key` is not in `mapping`.
        '''
        if key not in data:
            msg = f"Cannot decode to {klass.__name__}: {data}"
            error = EncodableError(msg, None,
                                   data={
                                       'key': key,
                                       'data': data,
                                   })
            raise log.exception(error, msg)

    @classmethod
    def error_for(klass: Type['Encodable'],
                  data:  EncodedComplex,
                  keys:  Iterable[str] = ()) -> None:
        '''
        Runs error_for_key() on all `keys`.
        '''
        if not isinstance(data, Mapping):
            msg = f"Cannot decode to {klass.__name__}; not a mapping: {data}"
            error = EncodableError(msg, None,
                                   data={
                                       'data': data,
                                   })
            raise log.exception(error, msg)

        for key in keys:
            klass.error_for_key(key, data)
