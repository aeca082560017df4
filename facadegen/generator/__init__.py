"""Facade generation pipeline: scanner -> resolver -> emitter, run by the driver."""
from facadegen.generator.driver import FacadeGenerator
from facadegen.generator.emitter import ACCESSIBILITY_KEYWORDS, emit
from facadegen.generator.resolver import resolve
from facadegen.generator.scanner import is_candidate, iter_candidates
from facadegen.generator.results import GeneratedUnit, Skip, SkipReason

__all__ = [
    "FacadeGenerator", "ACCESSIBILITY_KEYWORDS", "emit", "resolve",
    "is_candidate", "iter_candidates", "GeneratedUnit", "Skip", "SkipReason",
]
