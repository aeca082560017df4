"""Tree navigation utilities for walking lark parse trees."""
from __future__ import annotations
from typing import Callable, Iterator, List, Optional

from lark import Tree, Token


def first(children: List[object], pred: Callable) -> Optional[object]:
    """Find first child matching predicate."""
    for ch in children:
        if pred(ch):
            return ch
    return None


def first_ident(children: List[object]) -> Optional[Token]:
    """Get first IDENT token from children."""
    return first(children, lambda c: isinstance(c, Token) and c.type == "IDENT")  # type: ignore[return-value]


def first_tree(children: List[object], data: str) -> Optional[Tree]:
    """Get first Tree child with specific data tag."""
    return first(children, lambda c: isinstance(c, Tree) and c.data == data)  # type: ignore[return-value]


def trees(children: List[object], data: str) -> Iterator[Tree]:
    """All Tree children with a specific data tag, in order."""
    for ch in children:
        if isinstance(ch, Tree) and ch.data == data:
            yield ch


def token_values(children: List[object]) -> List[str]:
    """Text of every direct Token child."""
    return [str(ch) for ch in children if isinstance(ch, Token)]


def first_tree_child(children: List[object]) -> Optional[Tree]:
    """Get first Tree child regardless of tag."""
    return first(children, lambda c: isinstance(c, Tree))  # type: ignore[return-value]
