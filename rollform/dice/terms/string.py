# coding: utf-8

'''
Formula text that hasn't been classified as anything more useful.
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

from typing import Optional, Any, Mapping, MutableMapping


from rollform.logs  import log

from ..exceptions   import NonNumericResultError
from ..             import registry
from .term          import RollTerm


# -----------------------------------------------------------------------------
# Code
# -----------------------------------------------------------------------------

@registry.term
class StringTerm(RollTerm):
    '''
    A term which represents a string. Can only be evaluated when the caller
    allows strings (function arguments do).
    '''

    SERIALIZE_ATTRIBUTES = ('term',)

    def __init__(self,
                 term:    str,
                 options: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__(options)
        self.term: str = term

    @property
    def expression(self) -> str:
        return self.term

    @property
    def total(self) -> str:
        return self.term

    @property
    def is_deterministic(self) -> bool:
        classified = registry.default_roll().classify_string_term(
            self.term, intermediate=False)
        if isinstance(classified, StringTerm):
            return True
        return classified.is_deterministic

    def _check_allowed(self, options: MutableMapping[str, Any]) -> None:
        if not options.get('allow_strings', False):
            raise log.exception(
                NonNumericResultError,
                "Unresolved StringTerm '{}' requested for evaluation.",
                self.term,
                error_data={
                    'term': self.term,
                })

    def evaluate_sync(self, **options: Any) -> 'StringTerm':
        self._check_allowed(options)
        return super().evaluate_sync(**options)

    async def evaluate(self, session=None, **options: Any) -> 'StringTerm':
        self._check_allowed(options)
        return await super().evaluate(session, **options)
