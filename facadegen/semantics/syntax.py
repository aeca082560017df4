# semantics/syntax.py
"""Syntax nodes produced by the reference host front end.

Declaration nodes compare by identity (``eq=False``): two nodes are the same
declaration only if they are the same object, which is what candidate
deduplication and symbol lookup key on. Type syntax is a frozen value.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Tuple, Union

from facadegen.internals.report import Span


# === Type syntax ===

@dataclass(frozen=True)
class TypeSyntax:
    pass

@dataclass(frozen=True)
class PredefinedTypeSyntax(TypeSyntax):
    keyword: str                     # "int", "string", "void", ...

    def __str__(self) -> str:
        return self.keyword

@dataclass(frozen=True)
class SimpleNameSyntax:
    name: str
    type_arguments: Tuple[TypeSyntax, ...] = ()

    def __str__(self) -> str:
        if not self.type_arguments:
            return self.name
        return f"{self.name}<{', '.join(str(a) for a in self.type_arguments)}>"

@dataclass(frozen=True)
class NamedTypeSyntax(TypeSyntax):
    parts: Tuple[SimpleNameSyntax, ...]  # Foo.Bar<int>.Baz -> three parts
    is_global: bool = False              # written with a global:: prefix

    def __str__(self) -> str:
        text = ".".join(str(p) for p in self.parts)
        return f"global::{text}" if self.is_global else text

@dataclass(frozen=True)
class ArrayTypeSyntax(TypeSyntax):
    element: TypeSyntax
    rank: int = 1

    def __str__(self) -> str:
        return f"{self.element}[{',' * (self.rank - 1)}]"

@dataclass(frozen=True)
class NullableTypeSyntax(TypeSyntax):
    element: TypeSyntax

    def __str__(self) -> str:
        return f"{self.element}?"

@dataclass(frozen=True)
class PointerTypeSyntax(TypeSyntax):
    element: TypeSyntax

    def __str__(self) -> str:
        return f"{self.element}*"

@dataclass(frozen=True)
class TupleElementSyntax:
    type: TypeSyntax
    name: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.type} {self.name}" if self.name else str(self.type)

@dataclass(frozen=True)
class TupleTypeSyntax(TypeSyntax):
    elements: Tuple[TupleElementSyntax, ...]

    def __str__(self) -> str:
        return f"({', '.join(str(e) for e in self.elements)})"


# "class", "class?", "struct", "new()", "default" or a type
ConstraintSyntax = Union[str, TypeSyntax]


# === Core node base ===

@dataclass(eq=False)
class Node:
    loc: Optional[Span]
    parent: Optional["Node"] = field(default=None, init=False, repr=False)

    def ancestors(self) -> Iterator["Node"]:
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def children(self) -> List["Node"]:
        return []


# === Compilation unit structure ===

@dataclass(eq=False)
class UsingDirective(Node):
    name: str                            # namespace or type the directive names
    alias: Optional[str] = None          # using Alias = Target;
    target: Optional[TypeSyntax] = None  # bound target of an alias
    is_static: bool = False
    is_global: bool = False

    def __str__(self) -> str:
        prefix = "global using" if self.is_global else "using"
        if self.alias is not None:
            return f"{prefix} {self.alias} = {self.target};"
        if self.is_static:
            return f"{prefix} static {self.name};"
        return f"{prefix} {self.name};"

@dataclass(eq=False)
class CompilationUnit(Node):
    path: str
    usings: List[UsingDirective]
    members: List[Node]

    def children(self) -> List[Node]:
        return [*self.usings, *self.members]

@dataclass(eq=False)
class NamespaceDeclaration(Node):
    name: str                        # dotted name as written, "A.B"
    usings: List[UsingDirective]
    members: List[Node]
    file_scoped: bool = False

    def children(self) -> List[Node]:
        return [*self.usings, *self.members]


# === Declarations ===

class DeclarationKind(str, Enum):
    CLASS = "class"
    STRUCT = "struct"
    INTERFACE = "interface"
    RECORD = "record"
    RECORD_STRUCT = "record struct"
    ENUM = "enum"
    DELEGATE = "delegate"

@dataclass(eq=False)
class TypeParameterSyntax(Node):
    name: str
    variance: Optional[str] = None   # "in" / "out"

@dataclass(eq=False)
class ConstraintClause(Node):
    type_parameter: str
    constraints: List[ConstraintSyntax]

    def __str__(self) -> str:
        return f"where {self.type_parameter} : {', '.join(str(c) for c in self.constraints)}"

@dataclass(eq=False)
class ParameterSyntax(Node):
    name: str
    type: TypeSyntax
    modifiers: List[str] = field(default_factory=list)   # ref / out / in / params / this / scoped
    default: Optional[str] = None                         # default value text as written
    name_span: Optional[Span] = None

@dataclass(eq=False)
class MemberDeclaration(Node):
    """Non-method member: field, property, event, constructor, operator, ..."""
    kind: str
    name: Optional[str]
    modifiers: List[str] = field(default_factory=list)
    attributes: List[str] = field(default_factory=list)

@dataclass(eq=False)
class MethodDeclaration(Node):
    name: str
    return_type: TypeSyntax
    parameters: List[ParameterSyntax]
    type_parameters: List[TypeParameterSyntax] = field(default_factory=list)
    constraints: List[ConstraintClause] = field(default_factory=list)
    has_body: bool = False
    modifiers: List[str] = field(default_factory=list)
    attributes: List[str] = field(default_factory=list)
    name_span: Optional[Span] = None

    def children(self) -> List[Node]:
        return [*self.type_parameters, *self.parameters, *self.constraints]

@dataclass(eq=False)
class TypeDeclaration(Node):
    name: str
    type_parameters: List[TypeParameterSyntax] = field(default_factory=list)
    base_types: List[TypeSyntax] = field(default_factory=list)
    constraints: List[ConstraintClause] = field(default_factory=list)
    members: List[Node] = field(default_factory=list)
    modifiers: List[str] = field(default_factory=list)
    attributes: List[str] = field(default_factory=list)
    name_span: Optional[Span] = None

    kind = DeclarationKind.CLASS

    @property
    def keyword(self) -> str:
        return self.kind.value

    @property
    def arity(self) -> int:
        return len(self.type_parameters)

    @property
    def is_partial(self) -> bool:
        return "partial" in self.modifiers

    def children(self) -> List[Node]:
        return [*self.type_parameters, *self.constraints, *self.members]

@dataclass(eq=False)
class ClassDeclaration(TypeDeclaration):
    kind = DeclarationKind.CLASS

@dataclass(eq=False)
class StructDeclaration(TypeDeclaration):
    kind = DeclarationKind.STRUCT

@dataclass(eq=False)
class InterfaceDeclaration(TypeDeclaration):
    kind = DeclarationKind.INTERFACE

@dataclass(eq=False)
class RecordDeclaration(TypeDeclaration):
    is_struct: bool = False

    @property
    def kind(self) -> DeclarationKind:  # type: ignore[override]
        return DeclarationKind.RECORD_STRUCT if self.is_struct else DeclarationKind.RECORD

@dataclass(eq=False)
class EnumDeclaration(TypeDeclaration):
    kind = DeclarationKind.ENUM

@dataclass(eq=False)
class DelegateDeclaration(TypeDeclaration):
    return_type: Optional[TypeSyntax] = None
    parameters: List[ParameterSyntax] = field(default_factory=list)

    kind = DeclarationKind.DELEGATE


# === Traversal ===

def link_parents(node: Node) -> None:
    """Point every descendant's ``parent`` at its enclosing node."""
    for child in node.children():
        child.parent = node
        link_parents(child)

def walk(node: Node) -> Iterator[Node]:
    """Pre-order traversal in source order."""
    yield node
    for child in node.children():
        yield from walk(child)

def enclosing_unit(node: Node) -> Optional[CompilationUnit]:
    if isinstance(node, CompilationUnit):
        return node
    for anc in node.ancestors():
        if isinstance(anc, CompilationUnit):
            return anc
    return None

def enclosing_namespace_name(node: Node) -> Optional[str]:
    """Full dotted name of the namespace a node is declared in, or None for the global namespace."""
    names = [anc.name for anc in node.ancestors() if isinstance(anc, NamespaceDeclaration)]
    if not names:
        return None
    return ".".join(reversed(names))

def enclosing_types(node: Node) -> List[TypeDeclaration]:
    """Type declarations enclosing ``node``, outermost first."""
    types = [anc for anc in node.ancestors() if isinstance(anc, TypeDeclaration)]
    types.reverse()
    return types
