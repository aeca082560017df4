# internals/errors.py
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from facadegen.internals.report import Span, Reporter


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class Category(str, Enum):
    GENERAL    = "general"
    PARSE      = "parse"
    IO         = "io"
    RESOLUTION = "resolution"
    SHAPE      = "shape"
    INTERNAL   = "internal"


@dataclass(frozen=True)
class ErrorMessage:
    code: str
    severity: Severity
    text: str
    category: Category = Category.GENERAL
    doc: str = ""


REGISTRY: Dict[str, ErrorMessage] = {}

class _ErrorCatalog:
    def __init__(self, backing: Dict[str, ErrorMessage]) -> None:
        self._registry = backing

    def __getattr__(self, name: str) -> ErrorMessage:
        try:
            return self._registry[name]
        except KeyError as e:
            raise AttributeError(name) from e

    def __getitem__(self, code: str) -> ErrorMessage:
        return self._registry[code]


ERR = _ErrorCatalog(REGISTRY)

def emit(r: Reporter, em: ErrorMessage, span: Optional[Span],
         filename: Optional[str] = None, **kwargs) -> None:
    text = _fmt(em.code, **kwargs)
    if em.severity == Severity.ERROR:
        r.error(em.code, text, span, filename=filename)
    else:
        r.warn(em.code, text, span, filename=filename)

def raise_internal_error(code: str, **kwargs) -> None:
    """Raise a RuntimeError for internal generator errors.

    Internal errors indicate generator bugs, not user code issues.

    Raises:
        RuntimeError: Always raises with formatted error message
    """
    text = _fmt(code, **kwargs)
    raise RuntimeError(f"{code}: {text}")


#
# --- Helpers
#

def _add(msg: ErrorMessage) -> None:
    if msg.code in REGISTRY:
        raise ValueError(f"duplicate error code {REGISTRY[msg.code]} in {msg}")
    REGISTRY[msg.code] = msg

def _get(code: str) -> ErrorMessage:
    try:
        return REGISTRY[code]
    except KeyError:
        raise KeyError(f"unknown error code: {code}")

def _fmt(code: str, **kwargs) -> str:
    msg = _get(code)
    try:
        return msg.text.format(**kwargs)
    except KeyError as key_error:
        missing = key_error.args[0]
        raise KeyError(f"missing text key '{missing}' for {code} "
                       f"(needed by: {msg.text!r})") from None

#
# --- Registry population
#

# Internal errors (generator bugs) - FG0xxx range
_add(ErrorMessage("FG0001", Severity.ERROR,
    "internal invariant violated: {message}",
    Category.INTERNAL, "Generator invariant violated; this is a bug, not a problem in user code."))

# Host input errors - FG1xxx range
_add(ErrorMessage("FG1001", Severity.ERROR,
    "syntax error: {message}",
    Category.PARSE, "The source file could not be parsed; it is excluded from generation."))

_add(ErrorMessage("FG1002", Severity.ERROR,
    "cannot read source file: {reason}",
    Category.IO, "The source file could not be read from disk."))

# Skipped candidates - FG2xxx range (opt-in, never change what is generated)
_add(ErrorMessage("FG2001", Severity.WARNING,
    "'{container}' facades '{target}', which is not an interface; nothing generated",
    Category.RESOLUTION, "The marker type argument must be an interface type."))

_add(ErrorMessage("FG2002", Severity.WARNING,
    "'{container}' is not declared inside a namespace; nothing generated",
    Category.SHAPE, "Containers in the global namespace are not supported."))

_add(ErrorMessage("FG2003", Severity.WARNING,
    "'{container}' has unsupported accessibility '{accessibility}'; nothing generated",
    Category.SHAPE, "Only private, private protected, protected, internal and public containers are supported."))

_add(ErrorMessage("FG2004", Severity.WARNING,
    "'{container}' realizes the facade marker {count} times; using '{target}'",
    Category.RESOLUTION, "Only the first marker realization in interface order is facaded."))

_add(ErrorMessage("FG2005", Severity.WARNING,
    "'{container}' is not declared partial; generated code will not compile",
    Category.SHAPE, "Facade containers must be declared with the partial modifier."))

_add(ErrorMessage("FG2006", Severity.WARNING,
    "'{target}' declares no methods; '{container}' only gets the accessor",
    Category.RESOLUTION, "The generated unit contains the accessor declaration and no forwarding methods."))
