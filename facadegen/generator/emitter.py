"""Emit the partial declaration that makes a container forward to its implementation.

Output is a pure function of (container, target): iteration follows
declaration order only, newlines are ``\\n`` and nothing time- or
environment-dependent is written, so identical input gives identical bytes.
"""
from __future__ import annotations
from typing import Dict, List, Optional, Union

from facadegen.generator.results import (
    ContainerDescriptor, GeneratedUnit, MethodDescriptor, Skip, SkipReason,
    TargetInterfaceDescriptor,
)
from facadegen.semantics import syntax as sx
from facadegen.semantics.symbols import Accessibility, TypeSymbol

ACCESSIBILITY_KEYWORDS: Dict[Accessibility, str] = {
    Accessibility.PRIVATE: "private",
    Accessibility.PROTECTED_AND_INTERNAL: "private protected",
    Accessibility.PROTECTED: "protected",
    Accessibility.INTERNAL: "internal",
    Accessibility.PUBLIC: "public",
}

ACCESSOR_NAME = "GetImplementation"
INDENT = "    "


def accessibility_keyword(level: Accessibility) -> Optional[str]:
    return ACCESSIBILITY_KEYWORDS.get(level)


def _decl_head(decl: sx.TypeDeclaration) -> str:
    if decl.type_parameters:
        return f"{decl.name}<{', '.join(tp.name for tp in decl.type_parameters)}>"
    return decl.name


def describe_container(declaration: sx.TypeDeclaration, symbol: TypeSymbol) -> ContainerDescriptor:
    """Snapshot the parts of a container declaration the emitter reads."""
    unit = sx.enclosing_unit(declaration)
    return ContainerDescriptor(
        name=declaration.name,
        keyword=declaration.keyword,
        accessibility=getattr(symbol, "accessibility", Accessibility.NOT_APPLICABLE),
        namespace=sx.enclosing_namespace_name(declaration),
        type_parameters=tuple(tp.name for tp in declaration.type_parameters),
        outer_types=tuple((t.keyword, _decl_head(t)) for t in sx.enclosing_types(declaration)),
        is_partial=declaration.is_partial,
        span=declaration.name_span,
        filename=unit.path if unit is not None else None,
    )


class _SourceWriter:
    def __init__(self) -> None:
        self.lines: List[str] = []
        self.depth = 0

    def line(self, text: str = "") -> None:
        self.lines.append(f"{INDENT * self.depth}{text}" if text else "")

    def open(self, header: str) -> None:
        self.line(header)
        self.line("{")
        self.depth += 1

    def close(self) -> None:
        self.depth -= 1
        self.line("}")

    def text(self) -> str:
        return "\n".join(self.lines) + "\n"


def _write_method(w: _SourceWriter, m: MethodDescriptor) -> None:
    params = ", ".join(p.declaration() for p in m.parameters)
    header = f"public {m.return_type} {m.name}{m.generic_suffix}({params})"
    if m.constraint_clauses:
        header += " " + " ".join(m.constraint_clauses)
    args = ", ".join(p.argument() for p in m.parameters)
    call = f"{ACCESSOR_NAME}().{m.name}{m.generic_suffix}({args});"
    w.open(header)
    w.line(call if m.returns_void else f"return {call}")
    w.close()


def emit(container: ContainerDescriptor,
         target: TargetInterfaceDescriptor) -> Union[GeneratedUnit, Skip]:
    """Generated unit for ``container`` facading ``target``, or why there is none."""
    if not container.namespace:
        return Skip(SkipReason.NO_NAMESPACE, container.name,
                    span=container.span, filename=container.filename)

    access = accessibility_keyword(container.accessibility)
    if access is None:
        return Skip(SkipReason.UNSUPPORTED_ACCESSIBILITY, container.name,
                    detail=container.accessibility.value,
                    span=container.span, filename=container.filename)

    w = _SourceWriter()
    w.line("#nullable enable")
    for using in target.imports:
        w.line(using)
    w.line()
    w.open(f"namespace {container.namespace}")
    for keyword, head in container.outer_types:
        w.open(f"partial {keyword} {head}")

    w.open(f"{access} partial {container.keyword} {container.display_name} : {target.display_name}")
    w.line(f"private partial {target.display_name} {ACCESSOR_NAME}();")
    for method in target.methods:
        w.line()
        _write_method(w, method)
    w.close()

    for _ in container.outer_types:
        w.close()
    w.close()

    return GeneratedUnit(name=container.name, hint_name=f"{container.name}.generated", text=w.text())
