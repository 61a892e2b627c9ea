# coding: utf-8

'''
All your Exceptions are belong to these classes.
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

from typing import Optional, Union, Any, Type, Mapping

import pprint
import textwrap


# -----------------------------------------------------------------------------
# Helper
# -----------------------------------------------------------------------------

def is_rollform(error_or_type: Union[Exception, Type[Exception]]) -> bool:
    '''
    Given `error_or_type`, this will return True if it is a RollformError or
    sub-class, and False otherwise.

    `error_or_type` can be either an instance or a class type.
    '''
    type_of_error = (type(error_or_type)
                     if isinstance(error_or_type, Exception) else
                     error_or_type)

    return issubclass(type_of_error, RollformError)


# -----------------------------------------------------------------------------
# Exceptions
# -----------------------------------------------------------------------------

class RollformError(Exception):
    def __init__(self,
                 message: str,
                 cause:   Optional[Exception]       = None,
                 data:    Optional[Mapping[str, Any]] = None) -> None:
        super().__init__(message)

        self.message = message
        '''Human-friendly error message.'''

        self.cause = cause
        '''
        (Optional) Python/Third-Party exception that caused us to raise this
        exception.
        '''

        self.data = dict(data) if data else {}
        '''
        A bucket to stuff any extra data about the error.
        '''

    def __str__(self):
        output = f"{self.message}"
        if self.cause:
            output += f" from {self.cause}"
        if self.data:
            output += "\nAdditional Error Data:\n"
            output += textwrap.indent(pprint.pformat(self.data), '  ')

        return output
