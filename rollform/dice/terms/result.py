# coding: utf-8

'''
One rolled result of a dice term (or one inner roll's total in a pool).
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

from typing import Optional, Any, Mapping, Dict

from rollform.base.numbers import NumberTypes


# -----------------------------------------------------------------------------
# Code
# -----------------------------------------------------------------------------

class DiceResult:
    '''
    A result and its flags. Flags are None until something computes them, so
    "not computed" (None) is distinct from "computed False".
    '''

    __slots__ = (
        'result',
        'active',
        'count',
        'success',
        'failure',
        'discarded',
        'rerolled',
        'exploded',
    )

    FLAGS = ('count', 'success', 'failure', 'discarded', 'rerolled',
             'exploded')
    '''Optional fields; only encoded when not None.'''

    def __init__(self,
                 result:    NumberTypes,
                 active:    bool                  = True,
                 count:     Optional[NumberTypes] = None,
                 success:   Optional[bool]        = None,
                 failure:   Optional[bool]        = None,
                 discarded: Optional[bool]        = None,
                 rerolled:  Optional[bool]        = None,
                 exploded:  Optional[bool]        = None) -> None:
        self.result = result
        self.active = active
        self.count = count
        self.success = success
        self.failure = failure
        self.discarded = discarded
        self.rerolled = rerolled
        self.exploded = exploded

    @property
    def value(self) -> NumberTypes:
        '''What this result adds to a total: `count` if set, else `result`.'''
        return self.result if self.count is None else self.count

    def to_json(self) -> Dict[str, Any]:
        data = {'result': self.result, 'active': self.active}
        for flag in self.FLAGS:
            value = getattr(self, flag)
            if value is not None:
                data[flag] = value
        return data

    @classmethod
    def from_data(klass, data: Mapping[str, Any]) -> 'DiceResult':
        if isinstance(data, DiceResult):
            return data
        kwargs = {flag: data[flag] for flag in klass.FLAGS if flag in data}
        return klass(data['result'], data.get('active', True), **kwargs)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, DiceResult):
            return NotImplemented
        return all(getattr(self, name) == getattr(other, name)
                   for name in self.__slots__)

    def __repr__(self) -> str:
        return f"DiceResult({self.to_json()})"
