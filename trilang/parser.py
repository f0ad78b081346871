"""Parser for Rho, the infix notation of Trilang.

This module implements a two-stage parsing pipeline:

1. **Preprocessing**: comments are stripped (respecting string literals)
   and the source is terminated with a newline, so that the grammar only
   has to deal with code and line breaks.

2. **Parsing**: the preprocessed source is fed into a Lark LALR parser.
   Blocks are delimited by indentation (tabs or spaces) like Python;
   Lark's `Indenter` post-lexer turns changes in leading whitespace into
   `_INDENT` and `_DEDENT` tokens. The resulting parse tree is transformed
   into expression nodes from `trilang.ast`.

`parse_rho` is the public entry point for programs and returns a `Block`.
`parse_constant` is used by the postfix reader to read literal tokens.
"""

from __future__ import annotations

from typing import List

from lark import Lark, Transformer, v_args
from lark.exceptions import LarkError, UnexpectedCharacters, UnexpectedInput, UnexpectedToken, VisitError
from lark.indenter import Indenter

from .ast import (
    Expr, Literal, Var, Assign, ArrayLit, MapLit, BinaryOp, Scale, Mix,
    Get, Compose, Choice, Block, While, For, If, Call, Suspend,
    Resume, Break, Continue,
)
from .errors import ErrorVal, TrilangError
from .types import (
    UNIT, NumVal, BoolVal, StrVal, ColorVal, Color, ContinuationVal,
)


def preprocess(source: str) -> str:
    """Remove `#` comments outside of strings and ensure a final newline."""
    result: List[str] = []
    quote = ''
    in_comment = False
    for c in source:
        if in_comment:
            if c == '\n':
                in_comment = False
                result.append(c)
            continue
        if quote:
            result.append(c)
            if c == quote or c == '\n':
                quote = ''
            continue
        if c in ('"', "'"):
            quote = c
        elif c == '#':
            in_comment = True
            continue
        result.append(c)
    text = ''.join(result)
    if not text.endswith('\n'):
        text += '\n'
    return text


RHO_GRAMMAR = r"""
    file_input: (_NEWLINE | stmt)*

    ?stmt: simple_stmt
         | compound_stmt

    ?simple_stmt: small_stmt _NEWLINE
    ?small_stmt: assign
               | expr
    assign: NAME "=" expr

    ?compound_stmt: while_stmt
                  | for_stmt
                  | if_stmt
    while_stmt: "while" expr ":" suite
    for_stmt: "for" NAME "in" expr ":" suite
    if_stmt: "if" expr ":" suite ["else" ":" suite]
    suite: simple_stmt
         | _NEWLINE _INDENT stmt+ _DEDENT

    // Expressions with precedence, loosest first
    ?expr: choice
    ?choice: compose ("|" compose)*
    ?compose: comparison (";" comparison)*
    ?comparison: sum (comp_op sum)*
    ?sum: product (add_op product)*
    ?product: unary (mul_op unary)*
    ?unary: "-" unary -> neg
          | "defer" unary -> defer
          | "continue" unary -> continue_with
          | postfix
    ?postfix: atom
            | postfix "[" expr "]" -> get
    ?atom: NUMBER -> number
         | STRING -> string
         | "true" -> true
         | "false" -> false
         | "unit" -> unit
         | "empty" -> empty
         | "resume" -> resume
         | "break" -> break_flow
         | NAME -> var
         | NAME "(" [arguments] ")" -> call
         | "color" "(" NUMBER "," NUMBER "," NUMBER ")" -> color
         | "blend" "(" expr "," expr ")" -> blend
         | "scale" "(" expr "," expr ")" -> scale
         | "mix" "(" expr "," expr "," expr ")" -> mix
         | "[" [arguments] "]" -> array
         | "{" [pair ("," pair)*] "}" -> map
         | "(" NAME "=" expr ")" -> assign_expr
         | "(" expr ")"
    arguments: expr ("," expr)*
    pair: expr ":" expr

    !comp_op: "<" | ">" | "=="
    !add_op: "+" | "-"
    !mul_op: "*" | "/"

    NAME: /[a-zA-Z_][a-zA-Z0-9_]*/
    STRING: /"[^"\n]*"/ | /'[^'\n]*'/
    _NEWLINE: /(\r?\n[\t ]*)+/

    %import common.NUMBER
    %import common.WS_INLINE
    %ignore WS_INLINE
    %declare _INDENT _DEDENT
"""


class RhoIndenter(Indenter):
    """Turns leading tabs or spaces into block structure."""

    NL_type = '_NEWLINE'
    OPEN_PAREN_types = ['LPAR', 'LSQB', 'LBRACE']
    CLOSE_PAREN_types = ['RPAR', 'RSQB', 'RBRACE']
    INDENT_type = '_INDENT'
    DEDENT_type = '_DEDENT'
    tab_len = 8


RHO_PARSER = Lark(
    RHO_GRAMMAR,
    parser='lalr',
    postlex=RhoIndenter(),
    start=['file_input', 'expr'],
    propagate_positions=True,
    maybe_placeholders=False,
)


def syntax_error(message: str) -> TrilangError:
    return TrilangError(ErrorVal('SyntaxError', message))


def _fold_binary(items, make):
    # items pattern: expr (op expr)*
    left = items[0]
    i = 1
    while i < len(items):
        left = make(items[i], left, items[i + 1])
        i += 2
    return left


class ASTTransformer(Transformer):
    """Transforms the raw parse tree into expression nodes."""

    def file_input(self, items):
        return Block(tuple(items))

    def assign(self, items):
        return Assign(name=str(items[0]), value=items[1])

    def assign_expr(self, items):
        return self.assign(items)

    def while_stmt(self, items):
        return While(condition=items[0], body=items[1])

    def for_stmt(self, items):
        return For(name=str(items[0]), iterable=items[1], body=items[2])

    def if_stmt(self, items):
        else_branch = items[2] if len(items) > 2 else None
        return If(condition=items[0], then_branch=items[1], else_branch=else_branch)

    def suite(self, items):
        return Block(tuple(items))

    # Operators

    def choice(self, items):
        return _fold_binary(items, lambda _op, l, r: Choice(l, r))

    def compose(self, items):
        return _fold_binary(items, lambda _op, l, r: Compose(l, r))

    def comparison(self, items):
        return _fold_binary(items, lambda op, l, r: BinaryOp(op, l, r))

    def sum(self, items):
        return _fold_binary(items, lambda op, l, r: BinaryOp(op, l, r))

    def product(self, items):
        return _fold_binary(items, lambda op, l, r: BinaryOp(op, l, r))

    def comp_op(self, items):
        return str(items[0])

    def add_op(self, items):
        return str(items[0])

    def mul_op(self, items):
        return str(items[0])

    @v_args(inline=True)
    def neg(self, operand):
        if isinstance(operand, Literal) and isinstance(operand.value, NumVal):
            return Literal(NumVal(-operand.value.value))
        return BinaryOp('-', Literal(NumVal(0.0)), operand)

    @v_args(inline=True)
    def defer(self, body):
        return Suspend(body)

    @v_args(inline=True)
    def continue_with(self, arg):
        return Continue(arg)

    @v_args(inline=True)
    def get(self, target, index):
        return Get(target, index)

    # Atoms

    @v_args(inline=True)
    def number(self, token):
        return Literal(NumVal(float(token)))

    @v_args(inline=True)
    def string(self, token):
        # text between the quotes is taken as is, backslashes included
        return Literal(StrVal(str(token)[1:-1]))

    def true(self, items):
        return Literal(BoolVal(True))

    def false(self, items):
        return Literal(BoolVal(False))

    def unit(self, items):
        return Literal(UNIT)

    def empty(self, items):
        return Literal(ContinuationVal.empty())

    def resume(self, items):
        return Resume()

    def break_flow(self, items):
        return Break()

    @v_args(inline=True)
    def var(self, token):
        return Var(str(token))

    def call(self, items):
        args = items[1] if len(items) > 1 else []
        return Call(name=str(items[0]), args=tuple(args))

    def color(self, items):
        channels = []
        for name, token in zip('rgb', items):
            text = str(token)
            if not text.isdigit() or int(text) > 255:
                raise syntax_error(f'invalid {name} value {text}')
            channels.append(int(text))
        return Literal(ColorVal(Color(*channels)))

    @v_args(inline=True)
    def blend(self, left, right):
        return BinaryOp('blend', left, right)

    @v_args(inline=True)
    def scale(self, target, factor):
        if not (isinstance(factor, Literal) and isinstance(factor.value, NumVal)):
            raise syntax_error('scale factor must be a number')
        return Scale(target, factor.value.value)

    @v_args(inline=True)
    def mix(self, left, right, ratio):
        return Mix(left, right, ratio)

    def array(self, items):
        elements = items[0] if items else []
        return ArrayLit(tuple(elements))

    def map(self, items):
        return MapLit(tuple(items))

    def arguments(self, items):
        return list(items)

    def pair(self, items):
        return (items[0], items[1])



def _parse(text: str, start: str) -> Expr:
    try:
        tree = RHO_PARSER.parse(text, start=start)
        return ASTTransformer().transform(tree)
    except VisitError as e:
        if isinstance(e.orig_exc, TrilangError):
            raise e.orig_exc
        raise syntax_error(str(e.orig_exc))
    except UnexpectedToken as e:
        if e.token.type == '$END':
            raise syntax_error('unexpected end of input')
        raise syntax_error(f"unexpected token {e.token.value!r} at line {e.line}, column {e.column}")
    except UnexpectedCharacters as e:
        raise syntax_error(f"unexpected character {e.char!r} at line {e.line}, column {e.column}")
    except UnexpectedInput:
        raise syntax_error('unexpected end of input')
    except LarkError as e:
        # inconsistent dedent
        raise syntax_error(str(e))


def parse_rho(source: str) -> Block:
    """Parse Rho source code into a `Block` of top-level statements.

    Syntax errors are raised as `TrilangError` with the name SyntaxError.
    """
    return _parse(preprocess(source), 'file_input')


def is_constant(node: Expr) -> bool:
    if isinstance(node, Literal):
        return True
    if isinstance(node, ArrayLit):
        return all(is_constant(el) for el in node.elements)
    if isinstance(node, MapLit):
        return all(is_constant(k) and is_constant(v) for k, v in node.entries)
    return False


def parse_constant(text: str) -> Expr:
    """Parse a single literal such as `3`, `"a"`, `[1,2]` or `color(1,2,3)`."""
    try:
        node = _parse(text, 'expr')
    except TrilangError as e:
        if e.err.name != 'SyntaxError':
            raise
        node = None
    if node is None or not is_constant(node):
        raise syntax_error(f'cannot parse value: {text}')
    return node
