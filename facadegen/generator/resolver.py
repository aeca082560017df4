"""Find which interface a candidate asks to facade."""
from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from facadegen.generator.contracts import SymbolResolutionService
from facadegen.generator.marker import MARKER_DISPLAY_NAME
from facadegen.generator.results import (
    MethodDescriptor, ParameterDescriptor, Skip, SkipReason, TargetInterfaceDescriptor,
)
from facadegen.semantics import syntax as sx
from facadegen.semantics.symbols import (
    Accessibility, MethodSymbol, NullableTypeSymbol, TypeKind, TypeSymbol,
)


@dataclass(frozen=True)
class Resolution:
    """A candidate that realizes the marker with an interface."""
    declaration: sx.TypeDeclaration
    symbol: TypeSymbol
    marker: TypeSymbol
    target: TargetInterfaceDescriptor
    realizations: int = 1


def marker_realizations(service: SymbolResolutionService, symbol: TypeSymbol) -> List[TypeSymbol]:
    """Every constructed marker interface in ``symbol``'s transitive interface list."""
    return [
        iface for iface in service.all_interfaces(symbol)
        if iface.original_definition.display_string() == MARKER_DISPLAY_NAME
    ]


def find_marker_interface(service: SymbolResolutionService, symbol: TypeSymbol) -> Optional[TypeSymbol]:
    """First marker realization in interface order, if any."""
    for iface in service.all_interfaces(symbol):
        if iface.original_definition.display_string() == MARKER_DISPLAY_NAME:
            return iface
    return None


def forwarded_methods(target: TypeSymbol) -> List[MethodSymbol]:
    """Interface methods a facade forwards: public, instance, declared on the interface itself."""
    get_methods = getattr(target, "get_methods", None)
    if get_methods is None:
        return []
    return [
        m for m in get_methods()
        if not m.is_static and m.kind == "ordinary" and m.accessibility == Accessibility.PUBLIC
    ]


def describe_method(m: MethodSymbol) -> MethodDescriptor:
    return MethodDescriptor(
        name=m.name,
        return_type=m.return_type.display_string(),
        returns_void=m.returns_void,
        parameters=tuple(
            ParameterDescriptor(p.type.display_string(), p.name, p.modifiers, p.default_value)
            for p in m.parameters
        ),
        type_parameters=tuple(tp.name for tp in m.type_parameters),
        constraint_clauses=tuple(c.display_string() for c in m.constraint_clauses),
    )


def describe_interface(target: TypeSymbol) -> TargetInterfaceDescriptor:
    imports: Tuple[str, ...] = tuple(str(u) for u in getattr(target, "imports", ()))
    return TargetInterfaceDescriptor(
        display_name=target.display_string(),
        methods=tuple(describe_method(m) for m in forwarded_methods(target)),
        imports=imports,
        symbol=target,
    )


def _site(declaration: sx.TypeDeclaration) -> Tuple[Optional[object], Optional[str]]:
    unit = sx.enclosing_unit(declaration)
    return declaration.name_span, unit.path if unit is not None else None


def resolve_detailed(service: SymbolResolutionService,
                     declaration: sx.TypeDeclaration) -> Union[Resolution, Skip]:
    """Resolve a candidate, saying why when nothing comes of it."""
    span, filename = _site(declaration)
    symbol = service.get_declared_symbol(declaration)
    if symbol is None:
        return Skip(SkipReason.NO_SYMBOL, declaration.name, span=span, filename=filename)

    realizations = marker_realizations(service, symbol)
    if not realizations:
        return Skip(SkipReason.NO_MARKER, declaration.name, span=span, filename=filename)

    # first match wins when the marker is realized more than once
    marker = realizations[0]
    target = marker.type_arguments[0] if marker.type_arguments else None
    # IFacadeGenerator<ITest?> facades ITest itself
    if isinstance(target, NullableTypeSymbol):
        target = target.element
    if target is None or target.kind != TypeKind.INTERFACE:
        shown = target.display_string() if target is not None else "?"
        return Skip(SkipReason.NOT_AN_INTERFACE, declaration.name, detail=shown,
                    span=span, filename=filename)

    return Resolution(
        declaration=declaration,
        symbol=symbol,
        marker=marker,
        target=describe_interface(target),
        realizations=len(realizations),
    )


def resolve(service: SymbolResolutionService,
            declaration: sx.TypeDeclaration) -> Optional[TargetInterfaceDescriptor]:
    """The interface ``declaration`` facades, or None."""
    outcome = resolve_detailed(service, declaration)
    if isinstance(outcome, Skip):
        return None
    return outcome.target
