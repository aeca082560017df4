"""Content fingerprints for incremental generation.

A facade fingerprint captures everything that affects a generated unit:
- Generator version
- Container shape (name, kind, accessibility, namespace, nesting)
- Target interface display name and using directives
- Every forwarded method signature, in order

If the fingerprint matches, the previously generated unit is reused as is.
"""
from __future__ import annotations

import hashlib
from typing import TYPE_CHECKING

from facadegen import __version__ as generator_version

if TYPE_CHECKING:
    from facadegen.generator.results import (
        ContainerDescriptor, GeneratedUnit, MethodDescriptor, TargetInterfaceDescriptor,
    )


def compute_facade_fingerprint(container: ContainerDescriptor,
                               target: TargetInterfaceDescriptor) -> str:
    """Hex SHA-256 digest of a resolved (container, target) pair."""
    hasher = hashlib.sha256()

    hasher.update(b"GENERATOR:")
    hasher.update(generator_version.encode())

    # 1. Container shape
    hasher.update(b"CONTAINER:")
    hasher.update(f"{container.keyword}:{container.display_name}".encode())
    hasher.update(f"@{container.accessibility.name}".encode())
    hasher.update(f"ns={container.namespace or ''}".encode())
    for keyword, head in container.outer_types:
        hasher.update(f"OUTER:{keyword}:{head}".encode())

    # 2. Target interface
    hasher.update(b"TARGET:")
    hasher.update(target.display_name.encode())
    hasher.update(b"IMPORTS:")
    for using in target.imports:
        hasher.update(using.encode())
        hasher.update(b"\0")

    # 3. Forwarded methods, order matters
    hasher.update(b"METHODS:")
    for method in target.methods:
        hasher.update(_method_signature(method).encode())
        hasher.update(b"\0")

    return hasher.hexdigest()


def compute_unit_fingerprint(unit: GeneratedUnit) -> str:
    """Fingerprint of a unit's emitted text, stored beside the written file."""
    hasher = hashlib.sha256()
    hasher.update(b"UNIT:")
    hasher.update(unit.hint_name.encode())
    hasher.update(b"TEXT:")
    hasher.update(unit.text.encode("utf-8"))
    return hasher.hexdigest()


def _method_signature(m: MethodDescriptor) -> str:
    params = ",".join(p.declaration() for p in m.parameters)
    ret = "~" if m.returns_void else m.return_type
    return f"{m.name}{m.generic_suffix}({params})->{ret} {' '.join(m.constraint_clauses)}"
