# semantics/symbols.py
"""Symbol model for bound C# declarations.

Definitions (``NamedTypeSymbol``) are created once per merged partial type and
compare by identity. Every other symbol is a frozen value: constructed types,
arrays and method signatures compare structurally, so substituting the same
type arguments twice yields equal symbols.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union, TYPE_CHECKING

if TYPE_CHECKING:
    from facadegen.semantics.syntax import TypeDeclaration, UsingDirective
    from facadegen.internals.report import Span


class TypeKind(str, Enum):
    CLASS = "class"
    STRUCT = "struct"
    INTERFACE = "interface"
    ENUM = "enum"
    DELEGATE = "delegate"
    TYPE_PARAMETER = "type parameter"
    ARRAY = "array"
    TUPLE = "tuple"
    POINTER = "pointer"
    ERROR = "error"


class Accessibility(str, Enum):
    NOT_APPLICABLE = "not applicable"
    PRIVATE = "private"
    PROTECTED_AND_INTERNAL = "private protected"
    PROTECTED = "protected"
    INTERNAL = "internal"
    PROTECTED_OR_INTERNAL = "protected internal"
    PUBLIC = "public"


Substitution = Dict["TypeParameterSymbol", "TypeSymbol"]


class TypeSymbol:
    """Common surface of every type symbol."""
    kind: TypeKind = TypeKind.ERROR

    @property
    def original_definition(self) -> "TypeSymbol":
        return self

    @property
    def type_arguments(self) -> Tuple["TypeSymbol", ...]:
        return ()

    @property
    def interfaces(self) -> Tuple["TypeSymbol", ...]:
        return ()

    @property
    def all_interfaces(self) -> Tuple["TypeSymbol", ...]:
        return ()

    @property
    def is_void(self) -> bool:
        return False

    def substitute(self, mapping: Substitution) -> "TypeSymbol":
        return self

    def display_string(self) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.display_string()


# === Leaf types ===

_REFERENCE_KEYWORDS = {"string", "object"}

@dataclass(frozen=True, eq=True)
class SpecialType(TypeSymbol):
    """A C# keyword type such as ``int``, ``string`` or ``void``."""
    keyword: str

    @property
    def kind(self) -> TypeKind:  # type: ignore[override]
        return TypeKind.CLASS if self.keyword in _REFERENCE_KEYWORDS else TypeKind.STRUCT

    @property
    def is_void(self) -> bool:
        return self.keyword == "void"

    def display_string(self) -> str:
        return self.keyword

    __str__ = display_string


@dataclass(frozen=True)
class TypeParameterSymbol(TypeSymbol):
    name: str
    ordinal: int
    owner: str                      # qualified name of the declaring type or method
    variance: Optional[str] = None

    kind = TypeKind.TYPE_PARAMETER

    def substitute(self, mapping: Substitution) -> TypeSymbol:
        return mapping.get(self, self)

    def display_string(self) -> str:
        return self.name

    __str__ = display_string


@dataclass(frozen=True)
class UnresolvedTypeSymbol(TypeSymbol):
    """A type the program does not declare, carried as written."""
    name: str
    args: Tuple[TypeSymbol, ...] = ()

    kind = TypeKind.ERROR

    @property
    def type_arguments(self) -> Tuple[TypeSymbol, ...]:
        return self.args

    def substitute(self, mapping: Substitution) -> TypeSymbol:
        if not self.args:
            return self
        return UnresolvedTypeSymbol(self.name, tuple(a.substitute(mapping) for a in self.args))

    def display_string(self) -> str:
        if not self.args:
            return self.name
        return f"{self.name}<{', '.join(a.display_string() for a in self.args)}>"

    __str__ = display_string


# === Composite types ===

@dataclass(frozen=True)
class ArrayTypeSymbol(TypeSymbol):
    element: TypeSymbol
    rank: int = 1

    kind = TypeKind.ARRAY

    def substitute(self, mapping: Substitution) -> TypeSymbol:
        return ArrayTypeSymbol(self.element.substitute(mapping), self.rank)

    def display_string(self) -> str:
        return f"{self.element.display_string()}[{',' * (self.rank - 1)}]"

    __str__ = display_string


@dataclass(frozen=True)
class NullableTypeSymbol(TypeSymbol):
    element: TypeSymbol

    @property
    def kind(self) -> TypeKind:  # type: ignore[override]
        return self.element.kind

    def substitute(self, mapping: Substitution) -> TypeSymbol:
        return NullableTypeSymbol(self.element.substitute(mapping))

    def display_string(self) -> str:
        return f"{self.element.display_string()}?"

    __str__ = display_string


@dataclass(frozen=True)
class PointerTypeSymbol(TypeSymbol):
    element: TypeSymbol

    kind = TypeKind.POINTER

    def substitute(self, mapping: Substitution) -> TypeSymbol:
        return PointerTypeSymbol(self.element.substitute(mapping))

    def display_string(self) -> str:
        return f"{self.element.display_string()}*"

    __str__ = display_string


@dataclass(frozen=True)
class TupleTypeSymbol(TypeSymbol):
    elements: Tuple[TypeSymbol, ...]
    names: Tuple[Optional[str], ...]

    kind = TypeKind.TUPLE

    def substitute(self, mapping: Substitution) -> TypeSymbol:
        return TupleTypeSymbol(tuple(e.substitute(mapping) for e in self.elements), self.names)

    def display_string(self) -> str:
        parts = []
        for el, name in zip(self.elements, self.names):
            parts.append(f"{el.display_string()} {name}" if name else el.display_string())
        return f"({', '.join(parts)})"

    __str__ = display_string


# === Members ===

ConstraintSymbol = Union[str, TypeSymbol]

@dataclass(frozen=True)
class ConstraintClauseSymbol:
    type_parameter: str
    constraints: Tuple[ConstraintSymbol, ...]

    def substitute(self, mapping: Substitution) -> "ConstraintClauseSymbol":
        return ConstraintClauseSymbol(
            self.type_parameter,
            tuple(c if isinstance(c, str) else c.substitute(mapping) for c in self.constraints),
        )

    def display_string(self) -> str:
        shown = ", ".join(c if isinstance(c, str) else c.display_string() for c in self.constraints)
        return f"where {self.type_parameter} : {shown}"


@dataclass(frozen=True)
class ParameterSymbol:
    name: str
    type: TypeSymbol
    modifiers: Tuple[str, ...] = ()
    default_value: Optional[str] = None

    def substitute(self, mapping: Substitution) -> "ParameterSymbol":
        return ParameterSymbol(self.name, self.type.substitute(mapping), self.modifiers, self.default_value)


@dataclass(frozen=True)
class MethodSymbol:
    name: str
    return_type: TypeSymbol
    parameters: Tuple[ParameterSymbol, ...] = ()
    type_parameters: Tuple[TypeParameterSymbol, ...] = ()
    constraint_clauses: Tuple[ConstraintClauseSymbol, ...] = ()
    is_static: bool = False
    accessibility: Accessibility = Accessibility.PUBLIC
    kind: str = "ordinary"
    span: Optional["Span"] = field(default=None, compare=False)

    @property
    def returns_void(self) -> bool:
        return self.return_type.is_void

    @property
    def arity(self) -> int:
        return len(self.type_parameters)

    def substitute(self, mapping: Substitution) -> "MethodSymbol":
        if not mapping:
            return self
        return MethodSymbol(
            name=self.name,
            return_type=self.return_type.substitute(mapping),
            parameters=tuple(p.substitute(mapping) for p in self.parameters),
            type_parameters=self.type_parameters,
            constraint_clauses=tuple(c.substitute(mapping) for c in self.constraint_clauses),
            is_static=self.is_static,
            accessibility=self.accessibility,
            kind=self.kind,
            span=self.span,
        )


# === Named types ===

class NamedTypeSymbol(TypeSymbol):
    """Definition of a class, struct, record, interface, enum or delegate.

    One instance per merged partial type. Populated by the binder, read-only
    afterwards.
    """

    def __init__(self, name: str, kind: TypeKind, namespace: Optional[str],
                 containing_type: Optional["NamedTypeSymbol"] = None) -> None:
        self.name = name
        self.kind = kind
        self.namespace = namespace
        self.containing_type = containing_type
        self.type_parameters: List[TypeParameterSymbol] = []
        self.accessibility = Accessibility.INTERNAL
        self.is_record = False
        self.declarations: List["TypeDeclaration"] = []
        self.base_type: Optional[TypeSymbol] = None
        self.declared_interfaces: List[TypeSymbol] = []
        self.methods: List[MethodSymbol] = []
        self.nested_types: Dict[Tuple[str, int], "NamedTypeSymbol"] = {}

    def __repr__(self) -> str:
        return f"NamedTypeSymbol({self.display_string()!r}, {self.kind.value})"

    @property
    def arity(self) -> int:
        return len(self.type_parameters)

    @property
    def is_partial(self) -> bool:
        return any(d.is_partial for d in self.declarations)

    @property
    def imports(self) -> List["UsingDirective"]:
        """Using directives in scope at the type's declarations, in first-seen order."""
        from facadegen.semantics.syntax import CompilationUnit, NamespaceDeclaration

        seen: Dict[str, "UsingDirective"] = {}
        for decl in self.declarations:
            for anc in decl.ancestors():
                if isinstance(anc, (CompilationUnit, NamespaceDeclaration)):
                    for u in anc.usings:
                        if not u.is_global:
                            seen.setdefault(str(u), u)
        return list(seen.values())

    @property
    def metadata_name(self) -> str:
        """``Ns.Outer+Name`1`` style key, stable across runs."""
        simple = f"{self.name}`{self.arity}" if self.arity else self.name
        if self.containing_type is not None:
            return f"{self.containing_type.metadata_name}+{simple}"
        return f"{self.namespace}.{simple}" if self.namespace else simple

    @property
    def type_arguments(self) -> Tuple[TypeSymbol, ...]:
        return tuple(self.type_parameters)

    @property
    def interfaces(self) -> Tuple[TypeSymbol, ...]:
        return tuple(self.declared_interfaces)

    @property
    def all_interfaces(self) -> Tuple[TypeSymbol, ...]:
        return _all_interfaces(self)

    def get_methods(self) -> List[MethodSymbol]:
        return list(self.methods)

    def qualified_name(self) -> str:
        if self.containing_type is not None:
            return f"{self.containing_type.display_string()}.{self.name}"
        return f"{self.namespace}.{self.name}" if self.namespace else self.name

    def display_string(self) -> str:
        if not self.type_parameters:
            return self.qualified_name()
        return f"{self.qualified_name()}<{', '.join(p.name for p in self.type_parameters)}>"

    __str__ = display_string

    def construct(self, args: Tuple[TypeSymbol, ...]) -> TypeSymbol:
        if not args:
            return self
        return ConstructedTypeSymbol(self, tuple(args))


@dataclass(frozen=True)
class ConstructedTypeSymbol(TypeSymbol):
    """A generic definition applied to type arguments, ``IFacadeGenerator<ITest>``."""
    definition: NamedTypeSymbol
    args: Tuple[TypeSymbol, ...]

    @property
    def kind(self) -> TypeKind:  # type: ignore[override]
        return self.definition.kind

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def accessibility(self) -> Accessibility:
        return self.definition.accessibility

    @property
    def original_definition(self) -> TypeSymbol:
        return self.definition

    @property
    def type_arguments(self) -> Tuple[TypeSymbol, ...]:
        return self.args

    @property
    def declarations(self) -> List["TypeDeclaration"]:
        return self.definition.declarations

    @property
    def imports(self) -> List["UsingDirective"]:
        return self.definition.imports

    def mapping(self) -> Substitution:
        return dict(zip(self.definition.type_parameters, self.args))

    @property
    def base_type(self) -> Optional[TypeSymbol]:
        base = self.definition.base_type
        return base.substitute(self.mapping()) if base is not None else None

    @property
    def interfaces(self) -> Tuple[TypeSymbol, ...]:
        m = self.mapping()
        return tuple(i.substitute(m) for i in self.definition.declared_interfaces)

    @property
    def all_interfaces(self) -> Tuple[TypeSymbol, ...]:
        return _all_interfaces(self)

    def get_methods(self) -> List[MethodSymbol]:
        m = self.mapping()
        return [meth.substitute(m) for meth in self.definition.methods]

    def substitute(self, mapping: Substitution) -> TypeSymbol:
        return ConstructedTypeSymbol(self.definition, tuple(a.substitute(mapping) for a in self.args))

    def display_string(self) -> str:
        return f"{self.definition.qualified_name()}<{', '.join(a.display_string() for a in self.args)}>"

    __str__ = display_string


def _all_interfaces(symbol: TypeSymbol) -> Tuple[TypeSymbol, ...]:
    """Transitive interfaces of ``symbol``.

    Declared interfaces first, each followed by its own bases (pre-order),
    then whatever the base class contributes. Duplicates keep their first
    position; cycles in malformed input terminate.
    """
    out: List[TypeSymbol] = []
    seen = set()
    # definitions currently being expanded; stops growth like I<T> : I<List<T>>
    active = set()

    def visit_interface(iface: TypeSymbol) -> None:
        if iface in seen:
            return
        seen.add(iface)
        out.append(iface)
        definition = iface.original_definition
        if definition in active:
            return
        active.add(definition)
        for base in iface.interfaces:
            visit_interface(base)
        active.discard(definition)

    def visit_type(t: Optional[TypeSymbol]) -> None:
        if t is None:
            return
        definition = t.original_definition
        if definition in active:
            return
        active.add(definition)
        for iface in t.interfaces:
            visit_interface(iface)
        visit_type(getattr(t, "base_type", None))

    visit_type(symbol)
    return tuple(i for i in out if i.original_definition is not symbol.original_definition)
