"""
Span event helper behind ``protosign.breaking.otel``.

Check results carry plenty of optional data (a change without a source
line, a method-level change without a previous location), so attributes
whose value is ``None`` are dropped here rather than at each emitter.
Enum members such as ``Compatibility`` or ``BreakingSeverity`` are
recorded by value.

Usage::

    from protosign._otel_helpers import add_span_event

    add_span_event(
        "protosign.breaking.change",
        {"breaking.rule_id": "FIELD_NO_DELETE", "breaking.line": None},
    )
"""

from __future__ import annotations

from enum import Enum
from typing import Mapping, Optional, Union

try:
    from opentelemetry import trace as otel_trace

    HAS_OTEL = True
except ImportError:  # pragma: no cover
    HAS_OTEL = False

AttributeValue = Union[str, int, float, bool, Enum]


def span_attributes(
    attributes: Mapping[str, Optional[AttributeValue]],
) -> dict[str, Union[str, int, float, bool]]:
    """Attributes in the shape OpenTelemetry accepts."""
    cleaned: dict[str, Union[str, int, float, bool]] = {}
    for key, value in attributes.items():
        if value is None:
            continue
        cleaned[key] = value.value if isinstance(value, Enum) else value
    return cleaned


def add_span_event(name: str, attributes: Mapping[str, Optional[AttributeValue]]) -> None:
    """Record ``name`` on the current span if one is recording."""
    if not HAS_OTEL:
        return
    span = otel_trace.get_current_span()
    if span and span.is_recording():
        span.add_event(name=name, attributes=span_attributes(attributes))
