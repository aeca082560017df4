"""Cache management for incremental generation.

Manages the __facadegen_cache__/ directory, manifest metadata, and the
per-unit fingerprints that decide whether a generated file is rewritten.
"""
from __future__ import annotations

import json
import shutil
from pathlib import Path
from typing import List, Optional

from facadegen import __version__ as generator_version


# Cache directory name (placed at project root)
CACHE_DIR_NAME = "__facadegen_cache__"
MANIFEST_NAME = "cache.json"
UNITS_DIR = "units"


class CacheManager:
    """Manages the incremental generation cache directory and manifest.

    The cache stores one fingerprint sidecar per written unit alongside a
    manifest that tracks generator version and output directory. A mismatch
    in either triggers a full cache wipe.

    Directory layout::

        __facadegen_cache__/
            cache.json                          -- manifest (version, out dir)
            units/
                TestFacade.generated.fingerprint
                IFacadeGenerator.generated.fingerprint
    """

    def __init__(self, project_root: Path, out_dir: Optional[Path] = None,
                 cache_dir: Optional[Path] = None) -> None:
        self.project_root = project_root
        self.out_dir = out_dir
        self.cache_path = cache_dir or (project_root / CACHE_DIR_NAME)
        self.units_path = self.cache_path / UNITS_DIR
        self._manifest: Optional[dict] = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def is_valid(self) -> bool:
        """Check whether the cache exists and the manifest matches current settings."""
        manifest = self._read_manifest()
        if manifest is None:
            return False
        return (
            manifest.get("generator_version") == generator_version
            and manifest.get("out_dir") == self._out_dir_key()
        )

    def ensure_dirs(self) -> None:
        """Create the cache directory structure if it doesn't exist."""
        self.units_path.mkdir(parents=True, exist_ok=True)

    def write_manifest(self) -> None:
        """Write (or overwrite) the cache manifest with current settings."""
        self.ensure_dirs()
        manifest = {
            "generator_version": generator_version,
            "out_dir": self._out_dir_key(),
        }
        manifest_path = self.cache_path / MANIFEST_NAME
        manifest_path.write_text(json.dumps(manifest, indent=2), encoding="utf-8")
        self._manifest = manifest

    def wipe(self) -> None:
        """Remove the entire cache directory."""
        if self.cache_path.exists():
            shutil.rmtree(self.cache_path)
        self._manifest = None

    def invalidate_and_rebuild(self) -> None:
        """Wipe cache and recreate with fresh manifest."""
        self.wipe()
        self.write_manifest()

    # ------------------------------------------------------------------
    # Per-unit fingerprints
    # ------------------------------------------------------------------

    def has_cached_unit(self, hint_name: str, fingerprint: str, written_path: Path) -> bool:
        """True if *written_path* still exists and was written with *fingerprint*."""
        if not written_path.exists():
            return False
        return self._read_unit_fingerprint(hint_name) == fingerprint

    def store_unit_fingerprint(self, hint_name: str, fingerprint: str) -> None:
        fp = self._fingerprint_path(hint_name)
        fp.parent.mkdir(parents=True, exist_ok=True)
        fp.write_text(fingerprint, encoding="utf-8")

    def forget_unit(self, hint_name: str) -> None:
        fp = self._fingerprint_path(hint_name)
        if fp.exists():
            fp.unlink()

    def cached_unit_names(self) -> List[str]:
        """Hint names of every unit the cache has a fingerprint for, sorted."""
        if not self.units_path.exists():
            return []
        return sorted(p.name[: -len(".fingerprint")] for p in self.units_path.glob("*.fingerprint"))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _fingerprint_path(self, hint_name: str) -> Path:
        return self.units_path / (hint_name + ".fingerprint")

    def _read_unit_fingerprint(self, hint_name: str) -> Optional[str]:
        fp = self._fingerprint_path(hint_name)
        return fp.read_text(encoding="utf-8").strip() if fp.exists() else None

    def _out_dir_key(self) -> Optional[str]:
        return str(self.out_dir.resolve()) if self.out_dir is not None else None

    def _read_manifest(self) -> Optional[dict]:
        if self._manifest is not None:
            return self._manifest
        manifest_path = self.cache_path / MANIFEST_NAME
        if not manifest_path.exists():
            return None
        try:
            self._manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
            return self._manifest
        except (json.JSONDecodeError, OSError):
            return None
