# semantics/compilation.py
"""Compilation and binder: from syntax trees to a whole-program symbol table.

Binding runs in two passes, mirroring how the units are merged before any
type reference is looked at:

1. declare: walk every tree and create one ``NamedTypeSymbol`` per type,
   merging partial declarations keyed by (namespace or containing type,
   name, arity).
2. bind: resolve base lists and method signatures of every declaration in
   the scope of the site that wrote them.

Types the program never declares bind to ``UnresolvedTypeSymbol`` and are
displayed exactly as written.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from facadegen.internals.errors import raise_internal_error
from facadegen.semantics import syntax as sx
from facadegen.semantics.symbols import (
    Accessibility, TypeKind, TypeSymbol, NamedTypeSymbol, SpecialType,
    TypeParameterSymbol, UnresolvedTypeSymbol, ArrayTypeSymbol,
    NullableTypeSymbol, PointerTypeSymbol, TupleTypeSymbol,
    MethodSymbol, ParameterSymbol, ConstraintClauseSymbol,
)


def declared_accessibility(modifiers: Sequence[str], default: Accessibility) -> Accessibility:
    """Map written access modifiers onto an accessibility level."""
    mods = set(modifiers)
    if "file" in mods:
        return Accessibility.NOT_APPLICABLE
    if "private" in mods and "protected" in mods:
        return Accessibility.PROTECTED_AND_INTERNAL
    if "protected" in mods and "internal" in mods:
        return Accessibility.PROTECTED_OR_INTERNAL
    if "public" in mods:
        return Accessibility.PUBLIC
    if "internal" in mods:
        return Accessibility.INTERNAL
    if "protected" in mods:
        return Accessibility.PROTECTED
    if "private" in mods:
        return Accessibility.PRIVATE
    return default


_ACCESS_WORDS = {"public", "private", "protected", "internal", "file"}


def _kind_of(decl: sx.TypeDeclaration) -> TypeKind:
    if isinstance(decl, sx.InterfaceDeclaration):
        return TypeKind.INTERFACE
    if isinstance(decl, sx.StructDeclaration):
        return TypeKind.STRUCT
    if isinstance(decl, sx.RecordDeclaration):
        return TypeKind.STRUCT if decl.is_struct else TypeKind.CLASS
    if isinstance(decl, sx.EnumDeclaration):
        return TypeKind.ENUM
    if isinstance(decl, sx.DelegateDeclaration):
        return TypeKind.DELEGATE
    return TypeKind.CLASS


def _join(namespace: Optional[str], name: str) -> str:
    return f"{namespace}.{name}" if namespace else name


@dataclass(frozen=True)
class _Level:
    """One step of the outward namespace search."""
    namespaces: Tuple[Optional[str], ...]
    usings: Tuple[sx.UsingDirective, ...]


class Scope:
    """Name lookup context for one declaration site."""

    def __init__(self, binder: "Binder", node: sx.Node,
                 method_type_parameters: Tuple[TypeParameterSymbol, ...] = (),
                 use_aliases: bool = True) -> None:
        self.binder = binder
        self.node = node
        self.method_type_parameters = method_type_parameters
        self.use_aliases = use_aliases

        decls = sx.enclosing_types(node)
        if isinstance(node, sx.TypeDeclaration):
            decls.append(node)
        # innermost first
        self.containing: List[NamedTypeSymbol] = [
            binder.declared[d] for d in reversed(decls) if d in binder.declared
        ]
        self.levels = self._build_levels()

    def _build_levels(self) -> List[_Level]:
        levels: List[_Level] = []
        for anc in self.node.ancestors():
            if isinstance(anc, sx.NamespaceDeclaration):
                outer = sx.enclosing_namespace_name(anc)
                segs = anc.name.split(".")
                names = tuple(_join(outer, ".".join(segs[:k])) for k in range(len(segs), 0, -1))
                levels.append(_Level(names, tuple(anc.usings)))
            elif isinstance(anc, sx.CompilationUnit):
                usings = list(anc.usings)
                usings += [u for u in self.binder.global_usings if u not in usings]
                levels.append(_Level((None,), tuple(usings)))
        return levels

    # ---------- resolution ----------

    def resolve(self, ts: sx.TypeSyntax) -> TypeSymbol:
        if isinstance(ts, sx.PredefinedTypeSyntax):
            return SpecialType(ts.keyword)
        if isinstance(ts, sx.NullableTypeSyntax):
            return NullableTypeSymbol(self.resolve(ts.element))
        if isinstance(ts, sx.ArrayTypeSyntax):
            return ArrayTypeSymbol(self.resolve(ts.element), ts.rank)
        if isinstance(ts, sx.PointerTypeSyntax):
            return PointerTypeSymbol(self.resolve(ts.element))
        if isinstance(ts, sx.TupleTypeSyntax):
            return TupleTypeSymbol(tuple(self.resolve(e.type) for e in ts.elements),
                                   tuple(e.name for e in ts.elements))
        if isinstance(ts, sx.NamedTypeSyntax):
            return self._resolve_named(ts)
        raise_internal_error("FG0001", message=f"unexpected type syntax {ts!r}")

    def _args(self, part: sx.SimpleNameSyntax) -> Tuple[TypeSymbol, ...]:
        return tuple(self.resolve(a) for a in part.type_arguments)

    def _resolve_named(self, ts: sx.NamedTypeSyntax) -> TypeSymbol:
        parts = ts.parts
        head = parts[0]
        if ts.is_global:
            found = self.binder.types.get((None, head.name, len(head.type_arguments)))
        else:
            found = self.lookup(head.name, len(head.type_arguments))

        if found is not None:
            current = self._construct(found, head)
            rest = parts[1:]
        else:
            qualified = self._lookup_in_namespace(parts, ts.is_global)
            if qualified is None:
                return self._unresolved(ts)
            sym, index = qualified
            current = self._construct(sym, parts[index])
            rest = parts[index + 1:]

        for part in rest:
            definition = current.original_definition
            if not isinstance(definition, NamedTypeSymbol):
                return self._unresolved(ts)
            nested = definition.nested_types.get((part.name, len(part.type_arguments)))
            if nested is None:
                return self._unresolved(ts)
            current = self._construct(nested, part)
        return current

    def _construct(self, sym: TypeSymbol, part: sx.SimpleNameSyntax) -> TypeSymbol:
        if isinstance(sym, NamedTypeSymbol):
            return sym.construct(self._args(part))
        return sym

    def _unresolved(self, ts: sx.NamedTypeSyntax) -> UnresolvedTypeSymbol:
        *outer, last = ts.parts
        name = ".".join([*(str(p) for p in outer), last.name])
        if ts.is_global:
            name = f"global::{name}"
        return UnresolvedTypeSymbol(name, self._args(last))

    # ---------- lookup ----------

    def lookup(self, name: str, arity: int) -> Optional[TypeSymbol]:
        """Find the type a simple name refers to from this site."""
        if arity == 0:
            for tp in self.method_type_parameters:
                if tp.name == name:
                    return tp
        for sym in self.containing:
            if arity == 0:
                for tp in sym.type_parameters:
                    if tp.name == name:
                        return tp
            nested = sym.nested_types.get((name, arity))
            if nested is not None:
                return nested

        types = self.binder.types
        for level in self.levels:
            for ns in level.namespaces:
                sym = types.get((ns, name, arity))
                if sym is not None:
                    return sym
            if self.use_aliases and arity == 0:
                for u in level.usings:
                    if u.alias == name:
                        return self.binder.resolve_alias(u)
            for u in level.usings:
                if u.alias is None and not u.is_static:
                    sym = types.get((u.name, name, arity))
                    if sym is not None:
                        return sym
        return None

    def _lookup_in_namespace(self, parts: Sequence[sx.SimpleNameSyntax],
                             is_global: bool) -> Optional[Tuple[NamedTypeSymbol, int]]:
        """Longest namespace prefix of a dotted name that leads to a declared type."""
        if is_global:
            bases: List[Optional[str]] = [None]
        else:
            bases = [ns for level in self.levels for ns in level.namespaces]
        for k in range(len(parts) - 1, 0, -1):
            if any(p.type_arguments for p in parts[:k]):
                continue
            suffix = ".".join(p.name for p in parts[:k])
            for base in bases:
                full = _join(base, suffix)
                if full not in self.binder.namespaces:
                    continue
                sym = self.binder.types.get((full, parts[k].name, len(parts[k].type_arguments)))
                if sym is not None:
                    return sym, k
        return None


class Binder:
    def __init__(self, units: Sequence[sx.CompilationUnit]) -> None:
        self.units = units
        self.types: Dict[Tuple[Optional[str], str, int], NamedTypeSymbol] = {}
        self.namespaces: Set[str] = set()
        self.declared: Dict[sx.TypeDeclaration, NamedTypeSymbol] = {}
        self.ordered: List[NamedTypeSymbol] = []
        self.global_usings: List[sx.UsingDirective] = [
            u for unit in units for u in unit.usings if u.is_global
        ]
        self._aliases: Dict[sx.UsingDirective, TypeSymbol] = {}

    def bind(self) -> "Binder":
        for unit in self.units:
            self._declare_members(unit.members, namespace=None, containing=None)
        for sym in self.ordered:
            self._assign_accessibility(sym)
        for sym in self.ordered:
            self._bind_type(sym)
        return self

    # ---------- declare ----------

    def _declare_members(self, members: Iterable[sx.Node], namespace: Optional[str],
                         containing: Optional[NamedTypeSymbol]) -> None:
        for m in members:
            if isinstance(m, sx.NamespaceDeclaration):
                full = _join(namespace, m.name)
                segs = full.split(".")
                for k in range(1, len(segs) + 1):
                    self.namespaces.add(".".join(segs[:k]))
                self._declare_members(m.members, namespace=full, containing=None)
            elif isinstance(m, sx.TypeDeclaration):
                self._declare_type(m, namespace, containing)

    def _declare_type(self, decl: sx.TypeDeclaration, namespace: Optional[str],
                      containing: Optional[NamedTypeSymbol]) -> None:
        key = (decl.name, decl.arity)
        if containing is not None:
            sym = containing.nested_types.get(key)
        else:
            sym = self.types.get((namespace, *key))

        if sym is None:
            sym = NamedTypeSymbol(decl.name, _kind_of(decl), namespace, containing)
            sym.is_record = isinstance(decl, sx.RecordDeclaration)
            sym.type_parameters = [
                TypeParameterSymbol(tp.name, i, sym.metadata_name, tp.variance)
                for i, tp in enumerate(decl.type_parameters)
            ]
            if containing is not None:
                containing.nested_types[key] = sym
            else:
                self.types[(namespace, *key)] = sym
            self.ordered.append(sym)

        sym.declarations.append(decl)
        self.declared[decl] = sym
        self._declare_members(decl.members, namespace, sym)

    def _assign_accessibility(self, sym: NamedTypeSymbol) -> None:
        if sym.containing_type is None:
            default = Accessibility.INTERNAL
        elif sym.containing_type.kind == TypeKind.INTERFACE:
            default = Accessibility.PUBLIC
        else:
            default = Accessibility.PRIVATE
        for decl in sym.declarations:
            if _ACCESS_WORDS.intersection(decl.modifiers):
                sym.accessibility = declared_accessibility(decl.modifiers, default)
                return
        sym.accessibility = default

    # ---------- bind ----------

    def _bind_type(self, sym: NamedTypeSymbol) -> None:
        if sym.kind in (TypeKind.ENUM, TypeKind.DELEGATE):
            return
        interfaces: List[TypeSymbol] = []
        for decl in sym.declarations:
            scope = Scope(self, decl)
            for i, base in enumerate(scope.resolve(b) for b in decl.base_types):
                if (i == 0 and sym.kind == TypeKind.CLASS and base.kind == TypeKind.CLASS
                        and sym.base_type is None):
                    sym.base_type = base
                elif base not in interfaces:
                    interfaces.append(base)
            for member in decl.members:
                if isinstance(member, sx.MethodDeclaration):
                    sym.methods.append(self._bind_method(sym, member))
        sym.declared_interfaces = interfaces

    def _bind_method(self, owner: NamedTypeSymbol, m: sx.MethodDeclaration) -> MethodSymbol:
        key = f"{owner.metadata_name}.{m.name}`{len(m.type_parameters)}"
        type_params = tuple(
            TypeParameterSymbol(tp.name, i, key, tp.variance) for i, tp in enumerate(m.type_parameters)
        )
        scope = Scope(self, m, method_type_parameters=type_params)
        default = Accessibility.PUBLIC if owner.kind == TypeKind.INTERFACE else Accessibility.PRIVATE
        return MethodSymbol(
            name=m.name,
            return_type=scope.resolve(m.return_type),
            parameters=tuple(
                ParameterSymbol(p.name, scope.resolve(p.type), tuple(p.modifiers), p.default)
                for p in m.parameters
            ),
            type_parameters=type_params,
            constraint_clauses=tuple(
                ConstraintClauseSymbol(
                    c.type_parameter,
                    tuple(k if isinstance(k, str) else scope.resolve(k) for k in c.constraints),
                )
                for c in m.constraints
            ),
            is_static="static" in m.modifiers,
            accessibility=declared_accessibility(m.modifiers, default),
            kind="explicit" if "." in m.name else "ordinary",
            span=m.name_span,
        )

    def resolve_alias(self, u: sx.UsingDirective) -> TypeSymbol:
        if u not in self._aliases:
            # alias targets never see sibling aliases
            self._aliases[u] = Scope(self, u, use_aliases=False).resolve(u.target)
        return self._aliases[u]


class SemanticModel:
    """Whole-program symbol resolution service over one compilation."""

    def __init__(self, compilation: "Compilation", binder: Binder) -> None:
        self.compilation = compilation
        self._binder = binder

    def get_declared_symbol(self, declaration: sx.Node) -> Optional[NamedTypeSymbol]:
        if not isinstance(declaration, sx.TypeDeclaration):
            return None
        return self._binder.declared.get(declaration)

    def all_interfaces(self, symbol: TypeSymbol) -> Tuple[TypeSymbol, ...]:
        return symbol.all_interfaces

    def get_type_by_metadata_name(self, name: str) -> Optional[NamedTypeSymbol]:
        for sym in self._binder.ordered:
            if sym.metadata_name == name:
                return sym
        return None

    def scope_at(self, node: sx.Node) -> Scope:
        return Scope(self._binder, node)

    @property
    def types(self) -> List[NamedTypeSymbol]:
        return list(self._binder.ordered)


class Compilation:
    """Immutable set of syntax trees; binding happens on first use."""

    def __init__(self, syntax_trees: Iterable[sx.CompilationUnit] = ()) -> None:
        self._trees: Tuple[sx.CompilationUnit, ...] = tuple(syntax_trees)
        self._model: Optional[SemanticModel] = None

    @property
    def syntax_trees(self) -> Tuple[sx.CompilationUnit, ...]:
        return self._trees

    def add_syntax_trees(self, *trees: sx.CompilationUnit) -> "Compilation":
        return Compilation(self._trees + tuple(trees))

    def get_semantic_model(self) -> SemanticModel:
        if self._model is None:
            self._model = SemanticModel(self, Binder(self._trees).bind())
        return self._model

    def get_type_by_metadata_name(self, name: str) -> Optional[NamedTypeSymbol]:
        return self.get_semantic_model().get_type_by_metadata_name(name)
