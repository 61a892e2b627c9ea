# coding: utf-8

'''
Configuration for how dice get their results ("fulfillment"), plus any extra
functions usable in roll formulas.
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

from typing import (TYPE_CHECKING,
                    Optional, Any, Callable, Type, Mapping, Dict, Set)
if TYPE_CHECKING:
    from rollform.dice.resolver import Resolver

import pathlib

import yaml


from rollform.logs  import log

from ..exceptions   import ConfigError, LoadError


# -----------------------------------------------------------------------------
# Constants
# -----------------------------------------------------------------------------

THIS_DIR = pathlib.Path(__file__).resolve().parent
DEFAULT_NAME = 'dice.yaml'

DOC_TYPE = 'dice-configuration'

MANUAL = 'manual'
'''Method id for a human typing in the results.'''

MERSENNE = 'mersenne'
'''Method id for our internal random number generator.'''


# -----------------------------------------------------------------------------
# Code
# -----------------------------------------------------------------------------

def default_path() -> Optional[pathlib.Path]:
    '''
    Returns absolute path to the DEFAULT config file.

    Returns None if file does not exist.
    '''
    path = THIS_DIR / DEFAULT_NAME
    if not path.exists():
        return None

    return path


def _mersenne(term: Any, **options: Any) -> int:
    '''Fulfillment handler for the 'mersenne' method.'''
    return term.random_face()


_HANDLERS: Dict[str, Callable[..., Any]] = {
    MERSENNE: _mersenne,
}
'''Handlers for built-in non-interactive methods, by method id.'''


class FulfillmentMethod:
    '''
    Describes one way of getting die results.

    Non-interactive methods have a `handler` called with the term being rolled
    (plus keyword options) which returns a number, None, or an awaitable of
    those. Interactive methods are fulfilled by a resolver; a method may name
    its own resolver class.
    '''

    __slots__ = ('id', 'label', 'interactive', 'handler', 'resolver', 'icon')

    def __init__(self,
                 id:          str,
                 label:       str,
                 interactive: bool                          = False,
                 handler:     Optional[Callable[..., Any]]  = None,
                 resolver:    Optional[Type['Resolver']]    = None,
                 icon:        Optional[str]                 = None) -> None:
        self.id = id
        self.label = label
        self.interactive = bool(interactive)
        self.handler = handler
        self.resolver = resolver
        self.icon = icon

    def __repr__(self) -> str:
        return (f"{self.__class__.__name__}({self.id!r}, "
                f"interactive={self.interactive})")


class DiceConfiguration:
    '''
    Which fulfillment method each die denomination uses, the registry of
    methods, and the registry of formula functions.
    '''

    def _define_vars(self) -> None:
        '''
        Instance variable definitions, type hinting, doc strings, etc.
        '''
        self.path: Optional[pathlib.Path] = None
        '''Where our settings were loaded from, if anywhere.'''

        self.denominations: Dict[str, str] = {}
        '''
        Denomination ('d20', 'f', ...) to fulfillment method id. An empty
        string means `default_method`.
        '''

        self.default_method: str = ''
        '''
        Method id for any denomination not otherwise configured. Empty string
        means our internal random number generator.
        '''

        self.allow_manual: bool = True
        '''Whether the caller is allowed to use the 'manual' method.'''

        self.dice: Dict[str, Dict[str, str]] = {}
        '''Denomination to label/icon for display.'''

        self.methods: Dict[str, FulfillmentMethod] = {}
        '''Method id to FulfillmentMethod.'''

        self.functions: Dict[str, Callable[..., Any]] = {}
        '''Extra functions available to function terms, by name.'''

    def __init__(self, path: Optional[pathlib.Path] = None) -> None:
        self._define_vars()

        self.path = path or default_path()
        if self.path:
            self.load(self.path)

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def load(self, path: pathlib.Path) -> None:
        '''
        Read settings from YAML file at `path`.
        '''
        path = pathlib.Path(path)
        try:
            with path.open('r') as file_stream:
                document = yaml.safe_load(file_stream)
        except (OSError, yaml.YAMLError) as error:
            raise log.exception(
                LoadError,
                "Could not load dice configuration from: {}",
                path,
                error_data={
                    'path': path,
                }) from error

        self.path = path
        self.load_data(document)

    def load_data(self, document: Mapping[str, Any]) -> None:
        '''
        Apply settings from an already deserialized `document`.
        '''
        if not isinstance(document, Mapping):
            raise log.exception(
                ConfigError,
                "Dice configuration must be a mapping. Got: {}",
                type(document).__name__,
                error_data={
                    'document': document,
                })

        doc_type = document.get('doc-type', DOC_TYPE)
        if doc_type != DOC_TYPE:
            raise log.exception(
                ConfigError,
                "Expected doc-type '{}', got '{}'.",
                DOC_TYPE, doc_type,
                error_data={
                    'document': document,
                })

        self.default_method = str(document.get('default-method') or '')
        self.allow_manual = bool(document.get('allow-manual', True))

        denominations = document.get('denominations') or {}
        dice = document.get('dice') or {}
        methods = document.get('methods') or {}
        for name, section in (('denominations', denominations),
                              ('dice', dice),
                              ('methods', methods)):
            if not isinstance(section, Mapping):
                raise log.exception(
                    ConfigError,
                    "Dice configuration '{}' must be a mapping. Got: {}",
                    name, section,
                    error_data={
                        'document': document,
                    })

        self.denominations = {str(denom): str(method or '')
                              for denom, method in denominations.items()}
        self.dice = {str(denom): dict(info or {})
                     for denom, info in dice.items()}

        for method_id, info in methods.items():
            info = info or {}
            self.register_method(method_id,
                                 label=info.get('label', method_id),
                                 interactive=info.get('interactive', False),
                                 icon=info.get('icon', None))

        log.debug("Dice configuration loaded. default: '{}', "
                  "denominations: {}, methods: {}",
                  self.default_method,
                  self.denominations,
                  list(self.methods))

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    def register_method(self,
                        id:          str,
                        label:       Optional[str]                = None,
                        interactive: bool                         = False,
                        handler:     Optional[Callable[..., Any]] = None,
                        resolver:    Optional[Type['Resolver']]   = None,
                        icon:        Optional[str]                = None
                        ) -> FulfillmentMethod:
        '''
        Add or replace a fulfillment method. Built-in methods get their
        built-in handler if none is supplied.
        '''
        if not id or not isinstance(id, str):
            raise log.exception(
                ConfigError,
                "Fulfillment method id must be a non-empty string. Got: {}",
                id)

        if handler is None:
            handler = _HANDLERS.get(id, None)

        method = FulfillmentMethod(id, label or id,
                                   interactive=interactive,
                                   handler=handler,
                                   resolver=resolver,
                                   icon=icon)
        self.methods[id] = method
        return method

    def register_function(self,
                          name:     str,
                          function: Callable[..., Any]) -> None:
        '''
        Make `function` available to formulas as `name(...)`.
        '''
        if not callable(function):
            raise log.exception(
                ConfigError,
                "Roll function '{}' must be callable. Got: {}",
                name, function)
        self.functions[name] = function

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def method_for(self, denomination: str) -> str:
        '''
        Fulfillment method id for `denomination`; the default method if it
        has none. Can be empty string for "internal randomness".
        '''
        return self.denominations.get(denomination) or self.default_method

    def method(self, id: str) -> Optional[FulfillmentMethod]:
        '''
        Returns the registered FulfillmentMethod or None.
        '''
        return self.methods.get(id, None)

    def is_known_method(self, id: str) -> bool:
        return id in self.methods

    def interactive_methods(self) -> Set[str]:
        '''
        Set of interactive method ids (other than 'manual') that any
        denomination is configured to use.
        '''
        return {method_id
                for method_id in self.denominations.values()
                if (method_id
                    and method_id != MANUAL
                    and self.method(method_id)
                    and self.method(method_id).interactive)}


# -----------------------------------------------------------------------------
# Current Configuration
# -----------------------------------------------------------------------------

_current: Optional[DiceConfiguration] = None


def get() -> DiceConfiguration:
    '''
    Returns the current DiceConfiguration, creating the default if needed.
    '''
    global _current
    if _current is None:
        _current = DiceConfiguration()
    return _current


def set_config(configuration: DiceConfiguration) -> None:
    '''
    Replace the current DiceConfiguration.
    '''
    global _current
    if not isinstance(configuration, DiceConfiguration):
        raise log.exception(
            ConfigError,
            "Expected a DiceConfiguration. Got: {}",
            type(configuration).__name__)
    _current = configuration


def reset() -> None:
    '''
    Drop the current DiceConfiguration; the next `get()` makes a fresh one.
    '''
    global _current
    _current = None
