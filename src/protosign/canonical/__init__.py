"""
Canonical schema model, normalizer, fingerprint and compatibility verdict.

Public API::

    from protosign.canonical import (
        # Model
        CanonicalFile,
        CanonicalMessage,
        CanonicalField,
        CanonicalEnum,
        CanonicalEnumValue,
        CanonicalService,
        CanonicalMethod,
        CanonicalExtension,
        CanonicalRange,
        # Normalizer
        normalize_file,
        # Fingerprint
        compute_fingerprint,
        # Compatibility
        Compatibility,
        CompatibilityModel,
        classify,
    )
"""

from protosign.canonical.compatibility import (
    Compatibility,
    CompatibilityModel,
    classify,
)
from protosign.canonical.fingerprint import canonical_json, compute_fingerprint
from protosign.canonical.model import (
    CanonicalEnum,
    CanonicalEnumValue,
    CanonicalExtension,
    CanonicalField,
    CanonicalFile,
    CanonicalMessage,
    CanonicalMethod,
    CanonicalRange,
    CanonicalService,
)
from protosign.canonical.normalize import normalize_file

__all__ = [
    # Model
    "CanonicalFile",
    "CanonicalMessage",
    "CanonicalField",
    "CanonicalEnum",
    "CanonicalEnumValue",
    "CanonicalService",
    "CanonicalMethod",
    "CanonicalExtension",
    "CanonicalRange",
    # Normalizer
    "normalize_file",
    # Fingerprint
    "canonical_json",
    "compute_fingerprint",
    # Compatibility
    "Compatibility",
    "CompatibilityModel",
    "classify",
]
