"""GeneratorDriver: runs the facade generator over a Compilation, the way a host compiler would."""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from facadegen.compiler.fingerprint import compute_facade_fingerprint
from facadegen.generator.context import (
    CancellationToken, PostInitializationContext, SourceProductionContext,
)
from facadegen.generator.driver import FacadeGenerator
from facadegen.generator.results import GeneratedUnit, Notice, Skip
from facadegen.generator.scanner import iter_candidates
from facadegen.internals.parser import parse_source
from facadegen.semantics.compilation import Compilation
from facadegen.semantics.syntax import CompilationUnit


@dataclass
class GeneratorRunResult:
    units: List[GeneratedUnit]
    marker_sources: Dict[str, str]
    skips: List[Skip] = field(default_factory=list)
    notices: List[Notice] = field(default_factory=list)
    cache_hits: int = 0
    compilation: Optional[Compilation] = None


class GeneratorDriver:
    """Owns one ``FacadeGenerator`` across passes.

    ``initialize`` runs once; its sources are parsed and added to every
    compilation before candidates are resolved, so the marker interface is
    always visible to the resolver.
    """

    def __init__(self, generator: Optional[FacadeGenerator] = None, incremental: bool = True) -> None:
        if generator is None:
            generator = FacadeGenerator(fingerprint=compute_facade_fingerprint if incremental else None)
        self.generator = generator
        self._post_init_sources: Optional[Dict[str, str]] = None
        self._post_init_trees: List[CompilationUnit] = []

    def _initialize(self) -> None:
        if self._post_init_sources is not None:
            return
        ctx = PostInitializationContext()
        self.generator.initialize(ctx)
        self._post_init_sources = dict(ctx.sources)
        self._post_init_trees = [
            parse_source(text, hint_name)[0] for hint_name, text in ctx.sources.items()
        ]

    def run(self, compilation: Compilation,
            cancellation: Optional[CancellationToken] = None) -> GeneratorRunResult:
        """One full pass. Raises ``OperationCancelled`` if cancelled; nothing is returned then."""
        self._initialize()
        full = compilation.add_syntax_trees(*self._post_init_trees)
        model = full.get_semantic_model()

        candidates = [node for tree in compilation.syntax_trees for node in iter_candidates(tree)]
        ctx = SourceProductionContext(cancellation)
        hits_before = self.generator.cache_hits
        self.generator.execute(model, candidates, ctx)

        return GeneratorRunResult(
            units=ctx.units,
            marker_sources=dict(self._post_init_sources or {}),
            skips=list(ctx.skips),
            notices=list(ctx.notices),
            cache_hits=self.generator.cache_hits - hits_before,
            compilation=full,
        )
