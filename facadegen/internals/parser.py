"""Lark parser setup and syntax tree construction."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Tuple

from lark import Lark, Tree, UnexpectedInput, UnexpectedToken, UnexpectedCharacters

from facadegen.semantics.syntax import CompilationUnit
from facadegen.semantics.syntax_builder import SyntaxBuilder

GRAMMAR_PATH = Path(__file__).parent.parent / "grammar.lark"


@lru_cache(maxsize=1)
def get_parser() -> Lark:
    """Build the LALR parser once per process."""
    return Lark.open(
        str(GRAMMAR_PATH),
        parser="lalr",
        propagate_positions=True,
        maybe_placeholders=False,
    )


def improve_parse_error(e: UnexpectedInput) -> str:
    """Short, single-line description of a parse failure."""
    if isinstance(e, UnexpectedToken):
        tok = e.token
        if tok.type == "$END":
            return "unexpected end of file"
        expected = sorted(e.expected) if e.expected else []
        if "RBRACE" in expected and len(expected) <= 3:
            return f"unexpected '{tok}'; missing '}}'?"
        if "SEMICOLON" in expected and len(expected) <= 3:
            return f"unexpected '{tok}'; missing ';'?"
        return f"unexpected '{tok}'"
    if isinstance(e, UnexpectedCharacters):
        return f"unexpected character {e.char!r}"
    return str(e).splitlines()[0] if str(e) else "invalid input"


def parse_source(src: str, path: str = "<input>", dump_parse: bool = False) -> Tuple[CompilationUnit, Tree]:
    """Parse C# source into a compilation unit.

    Returns:
        Tuple of (unit, parse_tree).
    """
    tree = get_parser().parse(src)
    if dump_parse:
        print(tree.pretty())

    builder = SyntaxBuilder(src, path)
    return builder.build(tree), tree
