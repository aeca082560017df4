"""Registration points the host hands to the generator."""
from __future__ import annotations
from typing import Dict, List, Optional

from facadegen.generator.results import GeneratedUnit, Notice, Skip


class OperationCancelled(Exception):
    """A pass was abandoned at a candidate boundary; nothing was registered."""


class CancellationToken:
    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def is_cancellation_requested(self) -> bool:
        return self._cancelled

    def throw_if_cancellation_requested(self) -> None:
        if self._cancelled:
            raise OperationCancelled()


class PostInitializationContext:
    """Collects the fixed sources registered once, before any pass runs."""

    def __init__(self) -> None:
        self.sources: Dict[str, str] = {}

    def add_source(self, hint_name: str, text: str) -> None:
        self.sources[hint_name] = text


class SourceProductionContext:
    """Per-pass output. Units are keyed by hint name; the last write wins."""

    def __init__(self, cancellation: Optional[CancellationToken] = None) -> None:
        self.cancellation = cancellation or CancellationToken()
        self._units: Dict[str, GeneratedUnit] = {}
        self.skips: List[Skip] = []
        self.notices: List[Notice] = []

    def add_source(self, unit: GeneratedUnit) -> None:
        self._units.pop(unit.hint_name, None)
        self._units[unit.hint_name] = unit

    def report_skip(self, skip: Skip) -> None:
        self.skips.append(skip)

    def report_notice(self, notice: Notice) -> None:
        self.notices.append(notice)

    @property
    def units(self) -> List[GeneratedUnit]:
        return list(self._units.values())
