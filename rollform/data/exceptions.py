# coding: utf-8

'''
All your Exceptions are belong to these classes.
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

from rollform.base.exceptions import RollformError


# -----------------------------------------------------------------------------
# Exceptions
# -----------------------------------------------------------------------------

class LoadError(RollformError):
    '''
    Error loading data in some way.
    '''
    ...


class ConfigError(RollformError):
    '''
    Error during configuration set-up, or when expecting configuration to
    provide something that it didn't.
    '''
    ...


class EncodableError(RollformError):
    '''
    An Encodable failed to encode or decode properly.
    '''
    ...
