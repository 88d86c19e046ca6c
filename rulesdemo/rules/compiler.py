"""
Rule expression compiler.

Turns expression text into an immutable tree of nodes (see nodes.py).
Compilation is purely structural: it needs no fact context and performs no
evaluation, so the same text always yields an equal tree.

Grammar (lowest to highest precedence):

    expression := or_expr EOF
    or_expr    := and_expr (OR and_expr)*
    and_expr   := comparison (AND comparison)*
    comparison := additive (COMPARE additive)?
    additive   := term (("+" | "-") term)*
    term       := unary (("*" | "/" | "%") unary)*
    unary      := (NOT | "-") unary | primary
    primary    := NUMBER | STRING | TRUE | FALSE | NULL
                | "(" or_expr ")"
                | IDENT ("." IDENT)* [ "(" [or_expr ("," or_expr)*] ")" ]
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, FrozenSet, List

from .errors import ParseError
from .lexer import Token, TokenKind, tokenize
from .nodes import (
    Arithmetic,
    Comparison,
    Expr,
    Literal,
    Logical,
    MemberPath,
    MethodCall,
    Negate,
    Not,
    iter_nodes,
)

# Bounds on parenthesis/unary nesting and on the height of the finished tree
MAX_NESTING = 50
MAX_DEPTH = 100


@dataclass(frozen=True)
class CompiledExpression:
    """A parsed rule expression, safe to share and reuse across evaluations."""
    source: str
    root: Expr

    def references(self) -> FrozenSet[str]:
        """
        Root identifiers the expression reads from the fact context.

        Example:
            >>> compile_expression("businessLogic.IsWeekend() AND input1.Age > 3").references()
            frozenset({'businessLogic', 'input1'})
        """
        names = set()
        for node in iter_nodes(self.root):
            if isinstance(node, MemberPath):
                names.add(node.root)
        return frozenset(names)

    def function_names(self) -> FrozenSet[str]:
        """Names of receiver-less calls (resolved against the function table)."""
        return frozenset(
            node.method
            for node in iter_nodes(self.root)
            if isinstance(node, MethodCall) and node.receiver is None
        )


class Parser:
    """Recursive-descent parser over the token stream of one expression."""

    ADDITIVE = {TokenKind.PLUS: "+", TokenKind.MINUS: "-"}
    MULTIPLICATIVE = {TokenKind.STAR: "*", TokenKind.SLASH: "/", TokenKind.PERCENT: "%"}

    def __init__(self, source: str):
        self.source = source
        self.tokens: List[Token] = tokenize(source)
        self.index = 0
        self.nesting = 0
        self._depths: Dict[int, int] = {}

    @property
    def current(self) -> Token:
        return self.tokens[self.index]

    def advance(self) -> Token:
        token = self.tokens[self.index]
        if token.kind is not TokenKind.EOF:
            self.index += 1
        return token

    def expect(self, kind: TokenKind, description: str) -> Token:
        if self.current.kind is not kind:
            self.fail(f"Expected {description}")
        return self.advance()

    def fail(self, reason: str):
        token = self.current
        found = "end of expression" if token.kind is TokenKind.EOF else f"'{token.text}'"
        raise ParseError(token.position, f"{reason}, found {found}", self.source)

    def enter(self) -> None:
        """Open one level of parenthesis, argument list or unary operator."""
        self.nesting += 1
        if self.nesting > MAX_NESTING:
            raise ParseError(self.current.position, "Expression nested too deeply", self.source)

    def leave(self) -> None:
        self.nesting -= 1

    def build(self, node: Expr, *children: Expr) -> Expr:
        """Record the height of a new interior node; refuse trees taller than MAX_DEPTH."""
        depth = 1 + max((self._depths.get(id(child), 1) for child in children), default=0)
        if depth > MAX_DEPTH:
            raise ParseError(self.current.position, "Expression nested too deeply", self.source)
        self._depths[id(node)] = depth
        return node

    def parse(self) -> Expr:
        if self.current.kind is TokenKind.EOF:
            raise ParseError(0, "Expression cannot be empty", self.source)
        node = self.parse_or()
        if self.current.kind is not TokenKind.EOF:
            self.fail("Unexpected token")
        return node

    def parse_or(self) -> Expr:
        node = self.parse_and()
        while self.current.kind is TokenKind.OR:
            self.advance()
            right = self.parse_and()
            node = self.build(Logical("OR", node, right), node, right)
        return node

    def parse_and(self) -> Expr:
        node = self.parse_comparison()
        while self.current.kind is TokenKind.AND:
            self.advance()
            right = self.parse_comparison()
            node = self.build(Logical("AND", node, right), node, right)
        return node

    def parse_comparison(self) -> Expr:
        node = self.parse_additive()
        if self.current.kind is TokenKind.COMPARE:
            op = self.advance().text
            right = self.parse_additive()
            node = self.build(Comparison(op, node, right), node, right)
            if self.current.kind is TokenKind.COMPARE:
                self.fail("Chained comparisons are not supported")
        return node

    def parse_additive(self) -> Expr:
        node = self.parse_term()
        while self.current.kind in self.ADDITIVE:
            op = self.ADDITIVE[self.advance().kind]
            right = self.parse_term()
            node = self.build(Arithmetic(op, node, right), node, right)
        return node

    def parse_term(self) -> Expr:
        node = self.parse_unary()
        while self.current.kind in self.MULTIPLICATIVE:
            op = self.MULTIPLICATIVE[self.advance().kind]
            right = self.parse_unary()
            node = self.build(Arithmetic(op, node, right), node, right)
        return node

    def parse_unary(self) -> Expr:
        if self.current.kind in (TokenKind.NOT, TokenKind.MINUS):
            node_type = Not if self.current.kind is TokenKind.NOT else Negate
            self.enter()
            self.advance()
            operand = self.parse_unary()
            self.leave()
            return self.build(node_type(operand), operand)
        return self.parse_primary()

    def parse_primary(self) -> Expr:
        token = self.current
        kind = token.kind

        if kind is TokenKind.NUMBER:
            self.advance()
            return Literal(_number_value(token.text))
        if kind is TokenKind.STRING:
            self.advance()
            return Literal(token.text)
        if kind is TokenKind.TRUE:
            self.advance()
            return Literal(True)
        if kind is TokenKind.FALSE:
            self.advance()
            return Literal(False)
        if kind is TokenKind.NULL:
            self.advance()
            return Literal(None)
        if kind is TokenKind.LPAREN:
            self.enter()
            self.advance()
            node = self.parse_or()
            self.expect(TokenKind.RPAREN, "')'")
            self.leave()
            return node
        if kind is TokenKind.IDENT:
            return self.parse_path_or_call()

        self.fail("Expected a value, identifier or '('")

    def parse_path_or_call(self) -> Expr:
        parts = [self.advance().text]
        while self.current.kind is TokenKind.DOT:
            self.advance()
            parts.append(self.expect(TokenKind.IDENT, "member name after '.'").text)

        if self.current.kind is not TokenKind.LPAREN:
            return MemberPath(tuple(parts))

        self.enter()
        self.advance()
        args = []
        if self.current.kind is not TokenKind.RPAREN:
            args.append(self.parse_or())
            while self.current.kind is TokenKind.COMMA:
                self.advance()
                args.append(self.parse_or())
        self.expect(TokenKind.RPAREN, "',' or ')' in argument list")
        self.leave()

        receiver = MemberPath(tuple(parts[:-1])) if len(parts) > 1 else None
        return self.build(MethodCall(receiver, parts[-1], tuple(args)), *args)


def _number_value(text: str):
    """Integers stay int; anything with a fraction, exponent or 'm' suffix is Decimal."""
    if text[-1] in "mM":
        return Decimal(text[:-1])
    if any(c in text for c in ".eE"):
        return Decimal(text)
    return int(text)


def compile_expression(source: str) -> CompiledExpression:
    """
    Compile rule expression text into a reusable expression tree.

    Args:
        source: Expression text, e.g. "input1.LoyaltyFactor >= 3 AND businessLogic.IsWeekend()"

    Returns:
        CompiledExpression wrapping the parsed tree

    Raises:
        ParseError: If the text is empty or outside the grammar

    Example:
        >>> compiled = compile_expression("input1.Age >= 18")
        >>> compiled.root
        (Path(input1.Age) >= Literal(18))
    """
    if source is None:
        raise ParseError(0, "Expression cannot be empty", "")
    return CompiledExpression(source=source, root=Parser(source).parse())
