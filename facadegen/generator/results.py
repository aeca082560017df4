"""Values that flow between pipeline stages. All frozen."""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from facadegen.internals.report import Span
from facadegen.semantics.symbols import Accessibility, TypeSymbol


@dataclass(frozen=True)
class GeneratedUnit:
    name: str           # container simple name
    hint_name: str      # <name>.generated
    text: str

    @property
    def file_name(self) -> str:
        return f"{self.hint_name}.cs"


@dataclass(frozen=True)
class ParameterDescriptor:
    type: str
    name: str
    modifiers: Tuple[str, ...] = ()
    default: Optional[str] = None

    def declaration(self) -> str:
        text = " ".join([*self.modifiers, self.type, self.name])
        return f"{text} = {self.default}" if self.default is not None else text

    def argument(self) -> str:
        """How the parameter is passed on; ref/out/in are repeated at the call site."""
        passing = [m for m in self.modifiers if m in ("ref", "out", "in")]
        return " ".join([*passing, self.name])


@dataclass(frozen=True)
class MethodDescriptor:
    name: str
    return_type: str
    returns_void: bool
    parameters: Tuple[ParameterDescriptor, ...] = ()
    type_parameters: Tuple[str, ...] = ()
    constraint_clauses: Tuple[str, ...] = ()

    @property
    def generic_suffix(self) -> str:
        return f"<{', '.join(self.type_parameters)}>" if self.type_parameters else ""


@dataclass(frozen=True)
class TargetInterfaceDescriptor:
    display_name: str
    methods: Tuple[MethodDescriptor, ...]
    imports: Tuple[str, ...] = ()
    symbol: Optional[TypeSymbol] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class ContainerDescriptor:
    """What the emitter needs to know about the partial type being extended."""
    name: str
    keyword: str                            # class / struct / record / record struct
    accessibility: Accessibility
    namespace: Optional[str]
    type_parameters: Tuple[str, ...] = ()
    outer_types: Tuple[Tuple[str, str], ...] = ()   # (keyword, name<TP>) outermost first
    is_partial: bool = True
    span: Optional[Span] = field(default=None, compare=False)
    filename: Optional[str] = field(default=None, compare=False)

    @property
    def display_name(self) -> str:
        tps = f"<{', '.join(self.type_parameters)}>" if self.type_parameters else ""
        return f"{self.name}{tps}"


class SkipReason(str, Enum):
    NO_SYMBOL = "no symbol"
    NO_MARKER = "no marker"
    NOT_AN_INTERFACE = "not an interface"
    NO_NAMESPACE = "no namespace"
    UNSUPPORTED_ACCESSIBILITY = "unsupported accessibility"


@dataclass(frozen=True)
class Skip:
    """A candidate that produced nothing. Not an error."""
    reason: SkipReason
    container: str
    detail: str = ""
    span: Optional[Span] = field(default=None, compare=False)
    filename: Optional[str] = field(default=None, compare=False)


class NoticeKind(str, Enum):
    MULTIPLE_MARKERS = "multiple markers"
    NOT_PARTIAL = "not partial"
    EMPTY_INTERFACE = "empty interface"


@dataclass(frozen=True)
class Notice:
    """Something worth reporting about a candidate that was still generated."""
    kind: NoticeKind
    container: str
    detail: str = ""
    count: int = 0
    span: Optional[Span] = field(default=None, compare=False)
    filename: Optional[str] = field(default=None, compare=False)
