# coding: utf-8

'''
EBNF grammar for dice formulas, and the lark transformer that turns lark's
parse tree into parse nodes via a RollParser's semantic actions.

Some code used from Lark's calc example:
   https://github.com/lark-parser/lark/blob/master/examples/calc.py
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

from typing import (TYPE_CHECKING,
                    Optional, Union, Any, Type, Iterable, List, Dict)
if TYPE_CHECKING:
    from .parser import RollParser, Node

import re

import lark  # Lark, Transformer, v_args


from rollform.logs            import log
from rollform.base.exceptions import RollformError
from rollform.base            import numbers

from .exceptions              import NotParsableError


# -----------------------------------------------------------------------------
# EBNF Grammar
# -----------------------------------------------------------------------------

grammar = r'''
// Lark needs either start node in grammar or explicit start in constructor.
?start: expression

// ---
// Maths
// Operators are collected flat and sorted out by the RollParser:
//   - Leading additive operators collapse into one sign on the first term.
//   - A multiplicative operator can be followed by additive ones, which
//     collapse into a sign on the next term.
expression: ADD* term (operators term)*

operators: MUL ADD*
         | ADD+

// ---
// Terms
?term: function
     | dice
     | numeric
     | pool
     | parenthetical
     | string

// Function is func name (with its open paren) and list of args.
function: FUNCTION_OPEN [arguments] ")" [FLAVOR]
arguments: expression ("," expression)*

// Dice counts and faces can be numbers or parentheticals:
//   "4d6kh3", "2d(1d4+2)", "(1d4)d6", "(1d4)d(2+2)"
dice: DICE [FLAVOR]
    | DICE_OPEN expression ")" [BARE] [FLAVOR]          -> dice_faces
    | paren_expr D_TAIL [FLAVOR]                       -> dice_number
    | paren_expr D_OPEN expression ")" [BARE] [FLAVOR] -> dice_both

numeric: NUMBER [FLAVOR]

pool: "{" expression ("," expression)* "}" [BARE] [FLAVOR]

parenthetical: paren_expr [FLAVOR]
paren_expr: "(" expression ")"

// Anything else: substituted data or plain text.
string: (DATA | BARE) [FLAVOR]

// ---
// Terminals
// Higher priority is tried first. Modifiers are anything until a space,
// group symbol, or arithmetic operator.
FUNCTION_OPEN.5: /[a-zA-Z$_][a-zA-Z$_0-9]*\(/
DICE_OPEN.4: /[0-9]+[dD]\(/
DICE.3: /([0-9]+)?[dD]([0-9]+|[a-zA-Z])([^\s(){}\[\]$,+\-*%\/]+)?/
NUMBER.2: /[0-9]+(\.[0-9]+)?(?![^\s(){}\[\]$,+\-*%\/])/
DATA.2: /ᚖ[^ᚖ]*ᚖ/
BARE: /[^\s(){}\[\]$,+\-*%\/]+/

D_TAIL.3: /[dD]([0-9]+|[a-zA-Z])([^\s(){}\[\]$,+\-*%\/]+)?/
D_OPEN.4: /[dD]\(/

FLAVOR: /\[[^\[\]]+\]/

ADD: /[+-]/
MUL: /[*\/%]/

// ---
// Lark imports and ignores
%import common.WS
%ignore WS
'''


DICE_RX = re.compile(r'^([0-9]+)?[dD]([0-9]+|[a-zA-Z])(.*)$')
'''Splits a DICE/D_TAIL token into number, faces, and modifiers.'''


# -----------------------------------------------------------------------------
# Text -> Lark Tree
# -----------------------------------------------------------------------------

class Parser:
    '''
    Holds our lark parser. LALR with a contextual lexer so that the dice
    tails after a parenthetical ("(1d4)d6") only lex where they can appear.
    '''

    parser = lark.Lark(grammar,
                       parser='lalr',
                       lexer='contextual',
                       propagate_positions=True,
                       maybe_placeholders=True)

    @classmethod
    def parse(klass: Type['Parser'], text: str) -> lark.Tree:
        '''
        Parse input `text` using Lark EBNF grammar. Raises NotParsableError
        on failure.
        '''
        try:
            return klass.parser.parse(text)
        except lark.exceptions.LarkError as error:
            raise log.exception(
                NotParsableError,
                "Failed to parse formula: '{}'",
                text,
                error_data={
                    'formula': text,
                    'error': str(error),
                }) from error

    @classmethod
    def format(klass: Type['Parser'], parsed: lark.Tree) -> str:
        return parsed.pretty()


# -----------------------------------------------------------------------------
# Lark Tree -> Parse Nodes
# -----------------------------------------------------------------------------

ParseNode = Union[Dict[str, Any], 'Node']


# v_args: meta=True:
#   Methods get the rule's source position so we can slice out the original
#   formula text.
# NOTE: Don't do at class level. Only some rules need it.
class Transformer(lark.Transformer):
    '''
    Transforms a lexed/parsed tree into parse nodes, using a RollParser for
    the semantic actions.
    '''

    # -------------------------------------------------------------------------
    # Initialization
    # -------------------------------------------------------------------------

    def __init__(self) -> None:
        '''
        Define our vars, but don't assign them. They'll be set in `set_up()`
        for each transform.
        '''
        super().__init__()

        self.parser: 'RollParser' = None
        '''Receiver of our parse events.'''

        self.formula: str = None
        '''The text being parsed.'''

    def set_up(self, parser: 'RollParser', formula: str) -> None:
        '''
        Sets our parser and formula for the next transform.
        '''
        self.parser = parser
        self.formula = formula

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _text(self, meta: lark.tree.Meta) -> str:
        return self.formula[meta.start_pos:meta.end_pos]

    @staticmethod
    def _token(children: Iterable[Any], *types: str) -> Optional[lark.Token]:
        '''First token of one of `types` in `children`, or None.'''
        for child in children:
            if isinstance(child, lark.Token) and child.type in types:
                return child
        return None

    @staticmethod
    def _nodes(children: Iterable[Any]) -> List[ParseNode]:
        '''All the non-token, non-placeholder children.'''
        return [child for child in children
                if child is not None and not isinstance(child, lark.Token)]

    @classmethod
    def _flavor(klass, children: Iterable[Any]) -> Optional[str]:
        flavor = klass._token(children, 'FLAVOR')
        return str(flavor)[1:-1] if flavor else None

    @classmethod
    def _modifiers(klass, children: Iterable[Any]) -> Optional[str]:
        modifiers = klass._token(children, 'BARE')
        return str(modifiers) if modifiers else None

    @staticmethod
    def _faces(faces: str) -> Union[int, str]:
        return int(faces) if faces.isdigit() else faces

    def _wrap(self, expression: ParseNode) -> Dict[str, Any]:
        '''Wrap an expression as a parenthetical parse node.'''
        formula = f"({self.parser.formula_of(expression)})"
        return self.parser.on_parenthetical(expression, None, formula)

    # -------------------------------------------------------------------------
    # Expressions
    # -------------------------------------------------------------------------

    def expression(self, children: List[Any]) -> ParseNode:
        leading = []
        index = 0
        while (isinstance(children[index], lark.Token)
               and children[index].type == 'ADD'):
            leading.append(str(children[index]))
            index += 1

        head = children[index]
        rest = children[index + 1:]
        tail = [(rest[i], rest[i + 1]) for i in range(0, len(rest), 2)]
        return self.parser.on_expression(head, tail, leading)

    def operators(self, children: List[lark.Token]) -> List[Optional[str]]:
        '''
        Returns [multiplicative or None, *additives].
        '''
        multiplicative = self._token(children, 'MUL')
        additives = [str(child) for child in children if child.type == 'ADD']
        return [str(multiplicative) if multiplicative else None] + additives

    def arguments(self, children: List[Any]) -> List[ParseNode]:
        return self._nodes(children)

    # -------------------------------------------------------------------------
    # Terms
    # -------------------------------------------------------------------------

    @lark.v_args(meta=True)
    def function(self, meta: lark.tree.Meta,
                 children: List[Any]) -> Dict[str, Any]:
        fn = str(self._token(children, 'FUNCTION_OPEN'))[:-1]
        arguments = self._nodes(children)
        terms = arguments[0] if arguments else []
        return self.parser.on_function_term(fn, terms,
                                            self._flavor(children),
                                            self._text(meta))

    @lark.v_args(meta=True)
    def dice(self, meta: lark.tree.Meta,
             children: List[Any]) -> Dict[str, Any]:
        match = DICE_RX.match(str(self._token(children, 'DICE')))
        number, faces, modifiers = match.group(1, 2, 3)
        return self.parser.on_dice_term(int(number) if number else None,
                                        self._faces(faces),
                                        modifiers or None,
                                        self._flavor(children),
                                        self._text(meta))

    @lark.v_args(meta=True)
    def dice_faces(self, meta: lark.tree.Meta,
                   children: List[Any]) -> Dict[str, Any]:
        number = str(self._token(children, 'DICE_OPEN'))[:-2]
        faces = self._wrap(self._nodes(children)[0])
        return self.parser.on_dice_term(int(number),
                                        faces,
                                        self._modifiers(children),
                                        self._flavor(children),
                                        self._text(meta))

    @lark.v_args(meta=True)
    def dice_number(self, meta: lark.tree.Meta,
                    children: List[Any]) -> Dict[str, Any]:
        number = self._nodes(children)[0]
        match = DICE_RX.match(str(self._token(children, 'D_TAIL')))
        _, faces, modifiers = match.group(1, 2, 3)
        return self.parser.on_dice_term(number,
                                        self._faces(faces),
                                        modifiers or None,
                                        self._flavor(children),
                                        self._text(meta))

    @lark.v_args(meta=True)
    def dice_both(self, meta: lark.tree.Meta,
                  children: List[Any]) -> Dict[str, Any]:
        number, faces = self._nodes(children)
        return self.parser.on_dice_term(number,
                                        self._wrap(faces),
                                        self._modifiers(children),
                                        self._flavor(children),
                                        self._text(meta))

    @lark.v_args(meta=True)
    def numeric(self, meta: lark.tree.Meta,
                children: List[Any]) -> Dict[str, Any]:
        number = numbers.from_str(str(self._token(children, 'NUMBER')))
        return self.parser.on_numeric_term(number, self._flavor(children))

    @lark.v_args(meta=True)
    def pool(self, meta: lark.tree.Meta,
             children: List[Any]) -> Dict[str, Any]:
        return self.parser.on_pool_term(self._nodes(children),
                                        self._modifiers(children),
                                        self._flavor(children),
                                        self._text(meta))

    @lark.v_args(meta=True)
    def paren_expr(self, meta: lark.tree.Meta,
                   children: List[Any]) -> Dict[str, Any]:
        return self.parser.on_parenthetical(self._nodes(children)[0],
                                            None,
                                            self._text(meta))

    @lark.v_args(meta=True)
    def parenthetical(self, meta: lark.tree.Meta,
                      children: List[Any]) -> Dict[str, Any]:
        node = self._nodes(children)[0]
        flavor = self._flavor(children)
        if flavor:
            node['options']['flavor'] = flavor
            node['formula'] = self._text(meta)
        return node

    @lark.v_args(meta=True)
    def string(self, meta: lark.tree.Meta,
               children: List[Any]) -> Dict[str, Any]:
        term = self._token(children, 'DATA', 'BARE')
        return self.parser.on_string_term(str(term),
                                          self._flavor(children),
                                          self._text(meta))


# -----------------------------------------------------------------------------
# Input String -> Parse Nodes
# -----------------------------------------------------------------------------

def parse(formula: str, parser: 'RollParser') -> ParseNode:
    '''
    Parse `formula` into a tree of parse nodes, using `parser` for the
    semantic actions. Raises NotParsableError if it can't.
    '''
    log.debug("parse input: '{}'", formula)

    syntax_tree = Parser.parse(formula)
    if log.will_output(log.Level.DEBUG):
        # Dont format tree into string unless we're actually logging it.
        log.debug("Parser (lark) output: \n{}", Parser.format(syntax_tree))

    transformer = Transformer()
    transformer.set_up(parser, formula)
    try:
        return transformer.transform(syntax_tree)
    except lark.exceptions.VisitError as error:
        # Our own errors (e.g. from the parser's semantic actions) go out
        # as-is.
        if isinstance(error.orig_exc, RollformError):
            raise error.orig_exc from error
        raise log.exception(
            NotParsableError,
            "Failed to parse formula: '{}'",
            formula,
            error_data={
                'formula': formula,
                'error': str(error.orig_exc),
            }) from error
