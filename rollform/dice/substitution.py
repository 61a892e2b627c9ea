# coding: utf-8

'''
Replace "@path.to.value" data references in formulas with their values.
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

from typing import Optional, Any, Mapping

import json
import re


from rollform.logs  import log
from rollform.base  import dotted, numbers


# -----------------------------------------------------------------------------
# Constants
# -----------------------------------------------------------------------------

DATA_REFERENCE_RX = re.compile(r'@([a-z.0-9_-]+)', re.IGNORECASE)
'''"@abilities.str.mod" -> "abilities.str.mod"'''

DATA_MARK = 'ᚖ'
'''Non-scalar values are JSON encoded between a pair of these.'''


# -----------------------------------------------------------------------------
# Substitution
# -----------------------------------------------------------------------------

def format_value(value: Any) -> str:
    '''
    Format a data value for insertion into a formula.

      - Strings: stripped.
      - Bools: 'true'/'false'.
      - Numbers: as numbers.
      - Objects with their own `__str__`: str().
      - Everything else (lists, dicts, sets...): JSON between 'ᚖ' marks so a
        function can decode it back out of its argument.
    '''
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if numbers.is_number(value):
        return numbers.to_str(value)

    if isinstance(value, (set, frozenset)):
        value = sorted(value, key=str)
    elif isinstance(value, Mapping) and not isinstance(value, dict):
        value = dict(value)
    elif (not isinstance(value, (list, tuple, dict))
          and type(value).__str__ is not object.__str__):
        return str(value)

    return f"{DATA_MARK}{json.dumps(value, default=str)}{DATA_MARK}"


def replace_formula_data(formula: str,
                         data:    Optional[Mapping[str, Any]],
                         missing: Optional[str] = None,
                         warn:    bool          = False) -> str:
    '''
    Replace each "@path" in `formula` with its value from `data`.

    Missing values become `missing` if it's not None, otherwise they are left
    as-is. If `warn`, missing values are logged.
    '''
    data = data or {}

    def replace(match: re.Match) -> str:
        value = dotted.get(data, match.group(1))
        if value is None:
            if warn:
                log.warning("Missing data for '{}' in formula '{}'.",
                            match.group(0), formula)
            return str(missing) if missing is not None else match.group(0)
        return format_value(value)

    return DATA_REFERENCE_RX.sub(replace, formula)
