# coding: utf-8

'''
Helpers for dotted names & paths, e.g. 'abilities.strength.modifier'.
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

from typing import Any, Mapping, List


# -----------------------------------------------------------------------------
# Code
# -----------------------------------------------------------------------------

def join(*names: str) -> str:
    '''
    Turns iterable of `names` strings into one dotted string.

    e.g.:
      join('abilities', 'strength', 'mod') -> 'abilities.strength.mod'
    '''
    return '.'.join(names)


def split(dotted: str) -> List[str]:
    '''
    Splits a dotted string into its names.

    e.g.:
      'abilities.strength.mod' -> ['abilities', 'strength', 'mod']
    '''
    return dotted.split('.')


def get(data: Any, dotted: str) -> Any:
    '''
    Walk down into `data` following the `dotted` path and return whatever is
    found at the end. Mappings are walked by key, sequences by integer index
    and anything else by attribute.

    Returns None if any step of the path does not exist.
    '''
    current = data
    for name in split(dotted):
        if current is None:
            return None

        if isinstance(current, Mapping):
            current = current.get(name)

        elif isinstance(current, (list, tuple)):
            try:
                current = current[int(name)]
            except (ValueError, IndexError):
                return None

        else:
            current = getattr(current, name, None)

    return current
