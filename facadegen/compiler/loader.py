"""Source discovery and loading."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional

from facadegen.internals.parser import parse_source
from facadegen.internals.parse_errors import handle_parse_exception
from facadegen.internals.report import Reporter
from facadegen.semantics.syntax import CompilationUnit

SOURCE_SUFFIX = ".cs"
GENERATED_SUFFIX = ".generated.cs"
EXCLUDED_DIRS = {"bin", "obj", ".git", ".vs", "__facadegen_cache__"}


def is_source_file(path: Path) -> bool:
    """C# source the generator reads; its own output is never input."""
    return path.suffix == SOURCE_SUFFIX and not path.name.endswith(GENERATED_SUFFIX)


def collect_sources(paths: Iterable[Path], reporter: Reporter) -> List[Path]:
    """Expand files and directories into a sorted, de-duplicated list of sources."""
    from facadegen.internals import errors as er

    found: dict[Path, None] = {}
    for path in paths:
        if path.is_dir():
            for candidate in sorted(path.rglob(f"*{SOURCE_SUFFIX}")):
                rel_parts = candidate.relative_to(path).parts[:-1]
                if any(part in EXCLUDED_DIRS for part in rel_parts):
                    continue
                if is_source_file(candidate):
                    found.setdefault(candidate.resolve(), None)
        elif path.is_file():
            found.setdefault(path.resolve(), None)
        else:
            er.emit(reporter, er.ERR.FG1002, None, filename=str(path),
                    reason="no such file or directory")
    return list(found)


def load_unit(path: Path, reporter: Reporter, dump_tree: bool = False) -> Optional[CompilationUnit]:
    """Read and parse one file. Problems are reported and yield None."""
    from facadegen.internals import errors as er

    try:
        src = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        er.emit(reporter, er.ERR.FG1002, None, filename=str(path), reason=str(e))
        return None

    # Create unit-specific reporter
    unit_reporter = Reporter(source=src, filename=str(path))
    try:
        unit, _ = parse_source(src, str(path), dump_parse=dump_tree)
    except Exception as exc:
        if handle_parse_exception(exc, unit_reporter, source_path=path):
            reporter.items.extend(unit_reporter.items)
            return None
        raise

    reporter.items.extend(unit_reporter.items)
    return unit


def load_units(paths: Iterable[Path], reporter: Reporter, dump_tree: bool = False) -> List[CompilationUnit]:
    """Load every file that parses; the rest are reported and left out."""
    units: List[CompilationUnit] = []
    for path in paths:
        unit = load_unit(path, reporter, dump_tree=dump_tree)
        if unit is not None:
            units.append(unit)
    return units
