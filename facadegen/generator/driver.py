"""FacadeGenerator: runs scanner output through resolver and emitter for one pass."""
from __future__ import annotations
from typing import Callable, Dict, Iterable, List, Optional, Union

from facadegen.generator.context import PostInitializationContext, SourceProductionContext
from facadegen.generator.contracts import SymbolResolutionService
from facadegen.generator.emitter import describe_container, emit
from facadegen.generator.marker import MARKER_HINT_NAME, MARKER_SOURCE
from facadegen.generator.resolver import Resolution, resolve_detailed
from facadegen.generator.results import (
    ContainerDescriptor, GeneratedUnit, Notice, NoticeKind, Skip, TargetInterfaceDescriptor,
)
from facadegen.semantics import syntax as sx

Outcome = Union[GeneratedUnit, Skip]
Fingerprint = Callable[[ContainerDescriptor, TargetInterfaceDescriptor], str]


class FacadeGenerator:
    """Generator entry points: ``initialize`` once, ``execute`` per pass.

    With a ``fingerprint`` function, generated units are memoized by content
    fingerprint between passes, so unchanged candidates reuse their unit.
    The memo is replaced only when a pass completes.
    """

    def __init__(self, fingerprint: Optional[Fingerprint] = None) -> None:
        self._fingerprint = fingerprint
        self._memo: Dict[str, GeneratedUnit] = {}
        self.cache_hits = 0

    def initialize(self, ctx: PostInitializationContext) -> None:
        ctx.add_source(MARKER_HINT_NAME, MARKER_SOURCE)

    def execute(self, service: SymbolResolutionService,
                candidates: Iterable[Optional[sx.TypeDeclaration]],
                ctx: SourceProductionContext) -> None:
        unique = list(dict.fromkeys(c for c in candidates if c is not None))
        if not unique:
            return

        units: List[GeneratedUnit] = []
        skips: List[Skip] = []
        notices: List[Notice] = []
        memo: Dict[str, GeneratedUnit] = {}
        hits = 0

        for declaration in unique:
            ctx.cancellation.throw_if_cancellation_requested()

            resolution = resolve_detailed(service, declaration)
            if isinstance(resolution, Skip):
                skips.append(resolution)
                continue
            notices.extend(_notices(resolution))

            container = describe_container(declaration, resolution.symbol)
            key = self._fingerprint(container, resolution.target) if self._fingerprint else None
            if key is not None and key in self._memo:
                outcome = self._memo[key]
                hits += 1
            else:
                outcome = emit(container, resolution.target)
            if key is not None and isinstance(outcome, GeneratedUnit):
                memo[key] = outcome

            if isinstance(outcome, Skip):
                skips.append(outcome)
            elif outcome.text:
                units.append(outcome)

        ctx.cancellation.throw_if_cancellation_requested()

        self._memo = memo
        self.cache_hits += hits
        for unit in units:
            ctx.add_source(unit)
        for skip in skips:
            ctx.report_skip(skip)
        for notice in notices:
            ctx.report_notice(notice)


def _notices(resolution: Resolution) -> List[Notice]:
    decl = resolution.declaration
    unit = sx.enclosing_unit(decl)
    where = dict(span=decl.name_span, filename=unit.path if unit is not None else None)
    out: List[Notice] = []
    if resolution.realizations > 1:
        out.append(Notice(NoticeKind.MULTIPLE_MARKERS, decl.name,
                          detail=resolution.target.display_name,
                          count=resolution.realizations, **where))
    if not decl.is_partial:
        out.append(Notice(NoticeKind.NOT_PARTIAL, decl.name, **where))
    if not resolution.target.methods:
        out.append(Notice(NoticeKind.EMPTY_INTERFACE, decl.name,
                          detail=resolution.target.display_name, **where))
    return out
