"""
Schema text -> descriptor tree (via the protobuf compiler) and the
degraded text fallback.

Public API::

    from protosign.parsing import parse_proto, extract_fallback
"""

from protosign.parsing.fallback import extract_fallback
from protosign.parsing.protoc import find_imports, parse_proto, stage_imports

__all__ = [
    "parse_proto",
    "find_imports",
    "stage_imports",
    "extract_fallback",
]
