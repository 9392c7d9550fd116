"""
protosign - breaking-change detection and fingerprinting for protobuf schemas.

Compares two versions of a ``.proto`` file and reports every change that
breaks wire decoding, JSON decoding or generated-code consumers, and
computes a fingerprint that ignores comments, formatting and declaration
order.

Public API::

    from protosign import ProtoFile, BreakingConfig, Compatibility

    old = ProtoFile.from_path(Path("v1/user.proto"))
    new = ProtoFile.from_path(Path("v2/user.proto"))
    old.compare_with(new)            # Compatibility.YELLOW
    old.check_breaking_changes(new)  # BreakingResult
"""

from protosign.breaking import (
    BreakingCategory,
    BreakingChange,
    BreakingConfig,
    BreakingEngine,
    BreakingResult,
)
from protosign.canonical import (
    CanonicalFile,
    Compatibility,
    compute_fingerprint,
    normalize_file,
)
from protosign.exceptions import ConfigError, ProtoParseError, ProtoSignError
from protosign.schema_file import ProtoFile

__version__ = "0.1.0"

__all__ = [
    "ProtoFile",
    # Canonical
    "CanonicalFile",
    "Compatibility",
    "compute_fingerprint",
    "normalize_file",
    # Breaking
    "BreakingCategory",
    "BreakingChange",
    "BreakingConfig",
    "BreakingEngine",
    "BreakingResult",
    # Errors
    "ProtoSignError",
    "ProtoParseError",
    "ConfigError",
]
