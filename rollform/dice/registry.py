# coding: utf-8

'''
Registries for the dice engine:
  - TERMS:         Term class name -> Term class.
  - DENOMINATIONS: Dice denomination ('d', 'f', ...) -> DiceTerm class.
  - ROLLS:         Roll classes; the first is the default implementation.

Classes register themselves via decorators when their module is imported, so
modules can look each other up here instead of importing each other.
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

from typing import (TYPE_CHECKING,
                    Optional, Type, Callable, Dict, List, TypeVar)
if TYPE_CHECKING:
    from .terms.term import RollTerm
    from .terms.dice import DiceTerm
    from .roll       import Roll


from rollform.logs import log


# -----------------------------------------------------------------------------
# Constants
# -----------------------------------------------------------------------------

RegisterType = TypeVar('RegisterType')

TERMS: Dict[str, Type['RollTerm']] = {}
'''Term class name -> Term class.'''

DENOMINATIONS: Dict[str, Type['DiceTerm']] = {}
'''Dice denomination -> DiceTerm class.'''

ROLLS: List[Type['Roll']] = []
'''Roll implementations. ROLLS[0] is the default.'''

DEFAULT_DENOMINATION = 'd'


# -----------------------------------------------------------------------------
# Registration Decorators
# -----------------------------------------------------------------------------

def term(cls_or_func: RegisterType) -> RegisterType:
    '''
    Decorator to register a term class by its class name.
    '''
    name = cls_or_func.__name__
    if name in TERMS:
        log.warning("Term '{}' already registered as {}; replacing with {}.",
                    name, TERMS[name], cls_or_func)
    TERMS[name] = cls_or_func
    return cls_or_func


def denomination(denom: str) -> Callable[[RegisterType], RegisterType]:
    '''
    Decorator to register a DiceTerm class as both a term and a dice
    denomination.
    '''
    def register_decorator(cls_or_func: RegisterType) -> RegisterType:
        DENOMINATIONS[denom.lower()] = cls_or_func
        return term(cls_or_func)

    return register_decorator


def roll(cls_or_func: RegisterType) -> RegisterType:
    '''
    Decorator to register a Roll implementation. First one is the default.
    '''
    if cls_or_func not in ROLLS:
        ROLLS.append(cls_or_func)
    return cls_or_func


# -----------------------------------------------------------------------------
# Lookups
# -----------------------------------------------------------------------------

def term_class(name: Optional[str],
               default: Optional[Type['RollTerm']] = None
               ) -> Optional[Type['RollTerm']]:
    '''
    Term class registered as `name`, or `default`.
    '''
    return TERMS.get(name, default) if name else default


def dice_class(denom: Optional[str]) -> Optional[Type['DiceTerm']]:
    '''
    DiceTerm class registered for `denom`, or None.
    '''
    if not denom:
        return None
    return DENOMINATIONS.get(denom.lower(), None)


def default_dice() -> Type['DiceTerm']:
    '''
    The plain 'd' dice class.
    '''
    return DENOMINATIONS[DEFAULT_DENOMINATION]


def default_roll() -> Type['Roll']:
    '''
    The default Roll implementation.
    '''
    return ROLLS[0]


def roll_class(name: str) -> Optional[Type['Roll']]:
    '''
    Registered Roll implementation named `name`, or None.
    '''
    for each in ROLLS:
        if each.__name__ == name:
            return each
    return None


def is_roll(value: object) -> bool:
    '''
    Is `value` an instance of any registered Roll implementation?
    '''
    return bool(ROLLS) and isinstance(value, tuple(ROLLS))
