"""Generation orchestration: load -> compile -> run generator -> write."""
from __future__ import annotations

import sys
import time
from pathlib import Path
from typing import List, Optional, Sequence

from facadegen.compiler.host import GeneratorDriver, GeneratorRunResult
from facadegen.compiler.loader import collect_sources, load_units
from facadegen.generator.results import GeneratedUnit, NoticeKind, SkipReason
from facadegen.internals.report import Reporter
from facadegen.semantics.compilation import Compilation


def default_out_dir(sources: Sequence[Path]) -> Path:
    first = sources[0]
    base = first if first.is_dir() else first.parent
    return base / "Generated"


def report_outcomes(result: GeneratorRunResult, reporter: Reporter) -> None:
    """Surface skipped candidates and notices as warnings (opt-in)."""
    from facadegen.internals import errors as er

    for skip in result.skips:
        where = dict(filename=skip.filename)
        if skip.reason == SkipReason.NOT_AN_INTERFACE:
            er.emit(reporter, er.ERR.FG2001, skip.span, container=skip.container, target=skip.detail, **where)
        elif skip.reason == SkipReason.NO_NAMESPACE:
            er.emit(reporter, er.ERR.FG2002, skip.span, container=skip.container, **where)
        elif skip.reason == SkipReason.UNSUPPORTED_ACCESSIBILITY:
            er.emit(reporter, er.ERR.FG2003, skip.span, container=skip.container,
                    accessibility=skip.detail, **where)
        # NO_SYMBOL and NO_MARKER are ordinary types, not facades

    for notice in result.notices:
        where = dict(filename=notice.filename)
        if notice.kind == NoticeKind.MULTIPLE_MARKERS:
            er.emit(reporter, er.ERR.FG2004, notice.span, container=notice.container,
                    count=notice.count, target=notice.detail, **where)
        elif notice.kind == NoticeKind.NOT_PARTIAL:
            er.emit(reporter, er.ERR.FG2005, notice.span, container=notice.container, **where)
        elif notice.kind == NoticeKind.EMPTY_INTERFACE:
            er.emit(reporter, er.ERR.FG2006, notice.span, container=notice.container,
                    target=notice.detail, **where)


def _output_units(result: GeneratorRunResult) -> List[GeneratedUnit]:
    """Marker sources first, then generated units in registration order."""
    markers = [
        GeneratedUnit(name=hint.rsplit(".", 1)[0], hint_name=hint, text=text)
        for hint, text in result.marker_sources.items()
    ]
    return markers + list(result.units)


def write_units(units: List[GeneratedUnit], out_dir: Path, project_root: Path,
                incremental: bool = True, cache_dir: Optional[Path] = None) -> None:
    """Write units to *out_dir*, skipping files whose content is unchanged."""
    from facadegen.compiler.cache import CacheManager
    from facadegen.compiler.fingerprint import compute_unit_fingerprint

    out_dir.mkdir(parents=True, exist_ok=True)
    cache = CacheManager(project_root, out_dir=out_dir, cache_dir=cache_dir)
    if not incremental or not cache.is_valid():
        cache.invalidate_and_rebuild()
    else:
        cache.ensure_dirs()

    current = {u.hint_name for u in units}
    written = cached = 0

    print("Generated units:")
    for unit in units:
        path = out_dir / unit.file_name
        fp = compute_unit_fingerprint(unit)
        if incremental and cache.has_cached_unit(unit.hint_name, fp, path):
            cached += 1
            print(f"  {unit.file_name:<40s} [cached]")
            continue
        path.write_text(unit.text, encoding="utf-8", newline="\n")
        cache.store_unit_fingerprint(unit.hint_name, fp)
        written += 1
        print(f"  {unit.file_name:<40s} [written]")

    # Units generated by an earlier run that no longer have a container
    for hint_name in cache.cached_unit_names():
        if hint_name in current:
            continue
        stale = out_dir / f"{hint_name}.cs"
        if stale.exists():
            stale.unlink()
            print(f"  {stale.name:<40s} [removed]")
        cache.forget_unit(hint_name)

    print(f"\n{len(units)} units ({cached} cached, {written} written) -> {out_dir}")


def generate(sources: Sequence[Path], reporter: Reporter, args) -> int:
    """Run the whole pipeline for the CLI.

    Returns:
        Exit code (0=success, 1=warnings, 2=errors).
    """
    t0 = time.monotonic()

    paths = collect_sources(sources, reporter)
    if not paths and not reporter.has_errors:
        print("No C# sources found.", file=sys.stderr)
        return 2

    units = load_units(paths, reporter, dump_tree=getattr(args, "dump_tree", False))
    compilation = Compilation(units)

    result = GeneratorDriver(incremental=not getattr(args, "no_incremental", False)).run(compilation)

    if getattr(args, "diagnostics", False):
        report_outcomes(result, reporter)

    if len(paths) > 1:
        print(f"Found {len(paths)} sources ({len(units)} parsed)")

    out_units = _output_units(result)
    if getattr(args, "dump_units", False):
        for unit in out_units:
            print(f"// ---- {unit.file_name}")
            print(unit.text)
    else:
        out_dir = Path(args.out) if getattr(args, "out", None) else default_out_dir(list(sources))
        cache_dir = Path(args.cache_dir) if getattr(args, "cache_dir", None) else None
        write_units(out_units, out_dir.resolve(), project_root=default_out_dir(list(sources)).parent,
                    incremental=not getattr(args, "no_incremental", False), cache_dir=cache_dir)

    print(f"Generated {len(result.units)} facades in {time.monotonic() - t0:.2f}s")
    return reporter.exit_code()
