# coding: utf-8

'''
Semantic actions for the dice grammar, and parse tree -> AST conversion.

The grammar produces a left-skewed binary tree of `Node`s over term parse
nodes. `RollParser.flatten_tree()` turns that back into the infix sequence of
terms and operators a Roll holds, and `RollParser.to_ast()` turns any such
sequence into a precedence-correct binary tree with the Shunting-Yard
algorithm.
'''

# -----------------------------------------------------------------------------
# Imports
# -----------------------------------------------------------------------------

from typing import (Optional, Union, Any, Mapping, Iterable, Sequence,
                    List, Dict, Tuple)


from rollform.logs         import log
from rollform.base         import numbers

from .exceptions           import NotParsableError
from .terms.operator       import OperatorTerm, PRECEDENCE
from .                     import grammar


# -----------------------------------------------------------------------------
# Binary Operator Node
# -----------------------------------------------------------------------------

class Node:
    '''
    A binary operator and its two operands. Operands are parse nodes, terms,
    or more Nodes.

    Used in both the parser's output tree and in ASTs for evaluation. Not a
    term; never ends up in a Roll's terms.
    '''

    __slots__ = ('operator', 'operands', 'formula')

    def __init__(self,
                 operator: str,
                 operands: Sequence[Any],
                 formula:  Optional[str] = None) -> None:
        self.operator: str = operator
        self.operands: List[Any] = list(operands)
        self.formula: Optional[str] = formula

    @property
    def left(self) -> Any:
        return self.operands[0]

    @property
    def right(self) -> Any:
        return self.operands[1]

    def __repr__(self) -> str:
        return f"Node({self.operator!r}, {self.operands!r})"


ParseNode = Union[Dict[str, Any], Node]


# -----------------------------------------------------------------------------
# Parser
# -----------------------------------------------------------------------------

class RollParser:
    '''
    Receives parse events from the grammar's transformer and builds parse
    nodes: plain dicts tagged with their term 'class', plus Nodes for binary
    operators.
    '''

    def __init__(self, formula: str) -> None:
        self.formula: str = formula
        '''The formula being parsed.'''

    @classmethod
    def parse(klass, formula: str) -> ParseNode:
        '''
        Parse `formula` into a tree of parse nodes. Raises NotParsableError
        if it can't.
        '''
        return grammar.parse(formula, klass(formula))

    # -------------------------------------------------------------------------
    # Parse Events
    # -------------------------------------------------------------------------

    def on_expression(self,
                      head:    ParseNode,
                      tail:    Iterable[Tuple[List[Optional[str]], ParseNode]],
                      leading: List[str]) -> ParseNode:
        '''
        Arrange the head and (operators, operand) pairs into a left-skewed
        binary tree.
        '''
        tail = list(tail)
        if log.will_output(log.Level.DEBUG):
            log.debug("{}", self.format_debug(
                'on_expression', head, tail))

        if leading and self.collapse_operators(leading) == '-':
            head = self.wrap_negative_term(head)

        accumulator = head
        for operators, operand in tail:
            multiplicative, *additive = operators
            additive = (self.collapse_operators(additive)
                        if additive else
                        None)

            if multiplicative:
                operator = multiplicative
                if additive == '-':
                    operand = self.wrap_negative_term(operand)
            else:
                operator = additive

            if not isinstance(operator, str):
                raise log.exception(
                    NotParsableError,
                    "Failed to parse '{}'. Unexpected operator.",
                    self.formula,
                    error_data={
                        'formula': self.formula,
                        'operators': operators,
                    })

            formula = (f"{self.formula_of(accumulator)} {operator} "
                       f"{self.formula_of(operand)}")
            accumulator = Node(operator, [accumulator, operand], formula)

        return accumulator

    def on_dice_term(self,
                     number:    Union[int, None, ParseNode],
                     faces:     Union[int, str, ParseNode],
                     modifiers: Optional[str],
                     flavor:    Optional[str],
                     formula:   str) -> Dict[str, Any]:
        if log.will_output(log.Level.DEBUG):
            log.debug("{}", self.format_debug(
                'on_dice_term', number, faces, modifiers, flavor, formula))
        return {
            'class': 'DiceTerm',
            'formula': formula,
            'modifiers': modifiers,
            'number': number,
            'faces': faces,
            'evaluated': False,
            'options': {'flavor': flavor},
        }

    def on_numeric_term(self,
                        number: numbers.NumberTypes,
                        flavor: Optional[str]) -> Dict[str, Any]:
        if log.will_output(log.Level.DEBUG):
            log.debug("{}", self.format_debug(
                'on_numeric_term', number, flavor))
        formula = numbers.to_str(number)
        if flavor:
            formula += f"[{flavor}]"
        return {
            'class': 'NumericTerm',
            'number': number,
            'formula': formula,
            'evaluated': False,
            'options': {'flavor': flavor},
        }

    def on_function_term(self,
                         fn:      str,
                         terms:   List[ParseNode],
                         flavor:  Optional[str],
                         formula: str) -> Dict[str, Any]:
        if log.will_output(log.Level.DEBUG):
            log.debug("{}", self.format_debug(
                'on_function_term', fn, terms, flavor, formula))
        return {
            'class': 'FunctionTerm',
            'fn': fn,
            'terms': list(terms),
            'formula': formula,
            'evaluated': False,
            'options': {'flavor': flavor},
        }

    def on_pool_term(self,
                     terms:     List[ParseNode],
                     modifiers: Optional[str],
                     flavor:    Optional[str],
                     formula:   str) -> Dict[str, Any]:
        if log.will_output(log.Level.DEBUG):
            log.debug("{}", self.format_debug(
                'on_pool_term', terms, modifiers, flavor, formula))
        return {
            'class': 'PoolTerm',
            'terms': list(terms),
            'formula': formula,
            'modifiers': modifiers,
            'evaluated': False,
            'options': {'flavor': flavor},
        }

    def on_parenthetical(self,
                         term:    ParseNode,
                         flavor:  Optional[str],
                         formula: str) -> Dict[str, Any]:
        if log.will_output(log.Level.DEBUG):
            log.debug("{}", self.format_debug(
                'on_parenthetical', term, flavor, formula))
        return {
            'class': 'ParentheticalTerm',
            'term': term,
            'formula': formula,
            'evaluated': False,
            'options': {'flavor': flavor},
        }

    def on_string_term(self,
                       term:    str,
                       flavor:  Optional[str],
                       formula: str) -> Dict[str, Any]:
        return {
            'class': 'StringTerm',
            'term': term,
            'formula': formula,
            'evaluated': False,
            'options': {'flavor': flavor},
        }

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def formula_of(node: Any) -> str:
        '''Formula of a parse node, Node, or term.'''
        if isinstance(node, Mapping):
            return node.get('formula', None) or ''
        return getattr(node, 'formula', None) or ''

    @staticmethod
    def collapse_operators(operators: List[str]) -> str:
        '''
        Collapse a run of additive operators into one: the last, with its
        sign flipped by each other '-'.
        '''
        operators = list(operators)
        head = operators.pop()
        for operator in operators:
            if operator == '-':
                head = '-' if head == '+' else '+'
        return head

    def wrap_negative_term(self, term: ParseNode) -> ParseNode:
        '''
        Negate a term: numbers directly, anything else by wrapping it as
        "(term * -1)".
        '''
        if isinstance(term, Mapping) and term.get('class') == 'NumericTerm':
            term['number'] *= -1
            term['formula'] = f"-{term['formula']}"
            return term
        formula = f"({self.formula_of(term)} * -1)"
        return type(self).parse(formula)

    # -------------------------------------------------------------------------
    # Tree Manipulation
    # -------------------------------------------------------------------------

    @staticmethod
    def flatten_tree(root: Any) -> List[Any]:
        '''
        Flatten a binary tree back into infix order: operands with operator
        parse nodes between them.
        '''
        flat = []

        def flatten_node(node: Any) -> None:
            if not isinstance(node, Node):
                flat.append(node)
                return
            left, right = node.operands
            flatten_node(left)
            flat.append({'class': 'OperatorTerm', 'operator': node.operator})
            flatten_node(right)

        flatten_node(root)
        return flat

    @staticmethod
    def is_operator_term(node: Any) -> bool:
        return (isinstance(node, OperatorTerm)
                or (isinstance(node, Mapping)
                    and node.get('class') == 'OperatorTerm'))

    @staticmethod
    def _operator(node: Any) -> str:
        if isinstance(node, Mapping):
            return node.get('operator')
        return node.operator

    @classmethod
    def to_ast(klass, root: Any) -> Optional[Any]:
        '''
        Convert a parse tree or an infix list of terms and operators into a
        binary tree with correct precedence (Shunting-Yard). All operators
        are left-associative. Returns None for an empty list.
        '''
        infix = list(root) if isinstance(root, list) else klass.flatten_tree(
            root)

        operators = []
        output = []

        def push_operator(operator: Any) -> None:
            precedence = PRECEDENCE.get(klass._operator(operator), 0)
            while (operators
                   and PRECEDENCE.get(klass._operator(operators[-1]), 0)
                   >= precedence):
                output.append(operators.pop())
            operators.append(operator)

        for node in infix:
            if klass.is_operator_term(node):
                push_operator(node)
                continue

            # Recurse into parse node sub-trees.
            if isinstance(node, Mapping):
                if node.get('class') == 'ParentheticalTerm':
                    node['term'] = klass.to_ast(node['term'])
                elif node.get('class') in ('FunctionTerm', 'PoolTerm'):
                    node['terms'] = [klass.to_ast(term)
                                     for term in node['terms']]

            output.append(node)

        while operators:
            output.append(operators.pop())

        # Postfix -> tree.
        ast = []
        for node in output:
            if not klass.is_operator_term(node):
                ast.append(node)
                continue
            right = ast.pop()
            left = ast.pop()
            ast.append(Node(klass._operator(node), [left, right]))

        return ast.pop() if ast else None

    # -------------------------------------------------------------------------
    # Debug Formatting
    # -------------------------------------------------------------------------

    @classmethod
    def format_arg(klass, arg: Any) -> str:
        if arg is None:
            return 'null'
        if isinstance(arg, str):
            return f'"{arg}"'
        if numbers.is_number(arg):
            return numbers.to_str(arg)
        if isinstance(arg, Node):
            return 'Node'
        if isinstance(arg, Mapping):
            return str(arg.get('class', 'Object'))
        if isinstance(arg, (list, tuple)):
            return '[' + ', '.join(klass.format_arg(each)
                                   for each in arg) + ']'
        return type(arg).__name__

    @classmethod
    def format_debug(klass, method: str, *args: Any) -> str:
        '''
        "method(arg, arg, ...)" with each parse node as its class name.
        '''
        return f"{method}({', '.join(klass.format_arg(a) for a in args)})"
