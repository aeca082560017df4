"""
Fixture metadata parsing for the facadegen end-to-end tests.

Expectations are written as line comments at the top of a C# fixture and
checked against the output of ``facadegen --dump-units --diagnostics``.
"""

from dataclasses import dataclass, field
from typing import Optional, List
from pathlib import Path
import re

UNIT_HEADER = re.compile(r"^// ---- (?P<file>\S+)\.generated\.cs$", re.MULTILINE)
MARKER_UNIT = "IFacadeGenerator"


@dataclass
class FixtureMetadata:
    """Expectations a fixture file declares about its generated output."""

    # Names of the facade units that must be generated (marker unit excluded)
    expect_units: Optional[List[str]] = None
    expect_generated_contains: List[str] = field(default_factory=list)
    expect_generated_absent: List[str] = field(default_factory=list)
    expect_stderr_contains: List[str] = field(default_factory=list)
    expect_stderr_empty: bool = False


def _unquote(value: str) -> str:
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        value = value[1:-1]
    return value.replace('\\n', '\n').replace('\\t', '\t')


def parse_fixture_metadata(fixture: Path) -> FixtureMetadata:
    """
    Parse expectations from the leading comments of a fixture.

    Looks for directives in the first 20 lines:
    // EXPECT_UNITS: TestFacade, OtherFacade
    // EXPECT_GENERATED_CONTAINS: "return GetImplementation().Run();"
    // EXPECT_GENERATED_ABSENT: "Hidden"
    // EXPECT_STDERR_CONTAINS: "FG2001"
    // EXPECT_STDERR_EMPTY: true

    Args:
        fixture: Path to the .cs fixture file

    Returns:
        FixtureMetadata with parsed expectations
    """
    metadata = FixtureMetadata()
    lines = fixture.read_text(encoding='utf-8').split('\n')

    for line in lines[:20]:
        line = line.strip()
        if not line.startswith('//'):
            continue

        directive = line[2:].strip()
        if ':' not in directive:
            continue
        key, value = directive.split(':', 1)
        value = value.strip()

        if key == 'EXPECT_UNITS':
            metadata.expect_units = [v.strip() for v in value.split(',') if v.strip()]
        elif key == 'EXPECT_GENERATED_CONTAINS':
            metadata.expect_generated_contains.append(_unquote(value))
        elif key == 'EXPECT_GENERATED_ABSENT':
            metadata.expect_generated_absent.append(_unquote(value))
        elif key == 'EXPECT_STDERR_CONTAINS':
            metadata.expect_stderr_contains.append(_unquote(value))
        elif key == 'EXPECT_STDERR_EMPTY':
            metadata.expect_stderr_empty = value.lower() in ('true', 'yes', '1')

    return metadata


def get_expected_exit_code(fixture: Path) -> int:
    """Expected exit code from the filename convention.

    - test_*.cs: expect 0 (generated, no warnings)
    - test_warn_*.cs: expect 1 (warnings under --diagnostics)
    - test_err_*.cs: expect 2 (errors)
    """
    name = fixture.name
    if name.startswith("test_warn_"):
        return 1
    if name.startswith("test_err_"):
        return 2
    return 0


def generated_unit_names(stdout: str) -> List[str]:
    """Facade unit names printed by --dump-units, in output order."""
    return [m.group("file") for m in UNIT_HEADER.finditer(stdout) if m.group("file") != MARKER_UNIT]


def check_expectations(metadata: FixtureMetadata, stdout: str, stderr: str) -> List[str]:
    """Every expectation the output violates, as readable messages."""
    problems: List[str] = []

    if metadata.expect_units is not None:
        actual = sorted(generated_unit_names(stdout))
        expected = sorted(metadata.expect_units)
        if actual != expected:
            problems.append(f"units: expected {expected}, got {actual}")

    for text in metadata.expect_generated_contains:
        if text not in stdout:
            problems.append(f"generated output lacks: {text!r}")

    for text in metadata.expect_generated_absent:
        if text in stdout:
            problems.append(f"generated output contains: {text!r}")

    for text in metadata.expect_stderr_contains:
        if text not in stderr:
            problems.append(f"stderr lacks: {text!r}")

    if metadata.expect_stderr_empty and stderr.strip():
        problems.append("stderr is not empty")

    return problems
