"""Cheap syntactic filter over every node of a tree."""
from __future__ import annotations
from typing import Iterator

from facadegen.semantics import syntax as sx

_CONTAINER_TYPES = (sx.ClassDeclaration, sx.StructDeclaration, sx.RecordDeclaration)


def is_candidate(node: object) -> bool:
    """True for declarations that can host a facade: classes, structs and records."""
    return isinstance(node, _CONTAINER_TYPES)


def iter_candidates(tree: sx.Node) -> Iterator[sx.TypeDeclaration]:
    """Candidate declarations of a syntax tree in source order, nested ones included."""
    for node in sx.walk(tree):
        if is_candidate(node):
            yield node
