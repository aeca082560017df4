"""CLI entry point and argument parsing."""
from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from facadegen.internals.version import print_banner, version_line


def main(argv: list[str] | None = None) -> int:
    """Generator entry point."""
    ap = argparse.ArgumentParser(prog="facadegen",
                                 description="Generate forwarding facades for C# partial types")

    ap.add_argument("sources", nargs="*", help="C# source files or directories (searched recursively)")
    ap.add_argument("--version", action="store_true", help="Show version and exit")
    ap.add_argument("-o", "--out", metavar="DIR",
                    help="Output directory (default: <first source dir>/Generated)")
    ap.add_argument("--diagnostics", action="store_true",
                    help="Report skipped candidates and questionable facades as warnings")
    ap.add_argument("--dump-tree", action="store_true", help="Print raw Lark tree for every source")
    ap.add_argument("--dump-units", action="store_true",
                    help="Print generated units instead of writing them")
    ap.add_argument(
        "--no-incremental",
        action="store_true",
        help="Rewrite every unit, ignoring cached fingerprints",
    )
    ap.add_argument(
        "--clean-cache",
        action="store_true",
        help="Remove __facadegen_cache__/ directory and exit",
    )
    ap.add_argument(
        "--cache-dir",
        metavar="PATH",
        default=os.environ.get("FACADEGEN_CACHE_DIR"),
        help="Custom cache directory location (default: __facadegen_cache__/, or $FACADEGEN_CACHE_DIR)",
    )
    ap.add_argument("--no-banner", action="store_true", help="Do not print the version banner")
    args = ap.parse_args(argv)

    if args.version:
        print(version_line())
        return 0

    if not args.no_banner:
        print_banner()

    sources = [Path(s) for s in args.sources]

    if args.clean_cache:
        from facadegen.compiler.cache import CacheManager
        from facadegen.compiler.pipeline import default_out_dir
        project_root = default_out_dir(sources).parent if sources else Path.cwd()
        cache_dir = Path(args.cache_dir) if args.cache_dir else None
        cm = CacheManager(project_root, cache_dir=cache_dir)
        if cm.cache_path.exists():
            cm.wipe()
            print(f"Removed cache: {cm.cache_path}")
        else:
            print("No cache found.")
        return 0

    if not sources:
        print("error: at least one source file or directory is required", file=sys.stderr)
        return 2

    from facadegen.compiler.pipeline import generate
    from facadegen.internals.report import Reporter

    reporter = Reporter()
    result = generate(sources, reporter, args)
    reporter.print()
    return result


if __name__ == "__main__":
    raise SystemExit(main())
