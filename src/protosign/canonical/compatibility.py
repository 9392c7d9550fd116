"""
Reduced compatibility projection and the Green/Yellow/Red verdict.

The projection keeps, per message, only ``(number, type)`` pairs and, per
service, only ``(method, input, output)`` triples.  Names and labels are
dropped on purpose: renames and cardinality tweaks are invisible here and
are left to the rule engine.

Classification:
    - ``GREEN``  fingerprints are equal (semantically identical)
    - ``YELLOW`` every old message/service exists by name in the new
      version with a superset of its pairs/triples (additions only)
    - ``RED``    anything else

Usage::

    from protosign.canonical.compatibility import CompatibilityModel, classify

    verdict = classify(old_fp, old_model, new_fp, new_model)
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from protosign.canonical.model import CanonicalFile


class Compatibility(str, Enum):
    """Three-way verdict of the fast comparison path."""
    GREEN = "Green"
    YELLOW = "Yellow"
    RED = "Red"

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]


_DESCRIPTIONS = {
    Compatibility.GREEN: "Files are semantically identical",
    Compatibility.YELLOW: "New file is backward-compatible with old file",
    Compatibility.RED: "Breaking change detected",
}


class CompatibilityModel(BaseModel):
    """Numbers-and-types projection of a canonical file."""

    model_config = ConfigDict(frozen=True)

    messages: dict[str, frozenset[tuple[int, str]]] = Field(default_factory=dict)
    services: dict[str, frozenset[tuple[str, str, str]]] = Field(default_factory=dict)

    @classmethod
    def from_canonical(cls, canonical: CanonicalFile) -> "CompatibilityModel":
        messages = {
            path: frozenset((f.number, f.type_name) for f in message.fields)
            for path, message in canonical.all_messages().items()
        }
        services = {
            service.name: frozenset(
                (m.name, m.input_type, m.output_type) for m in service.methods
            )
            for service in canonical.services
        }
        return cls(messages=messages, services=services)

    def is_backward_compatible_with(self, old: "CompatibilityModel") -> bool:
        """True if ``self`` only adds to ``old``."""
        for name, fields in old.messages.items():
            current = self.messages.get(name)
            if current is None or not fields <= current:
                return False
        for name, methods in old.services.items():
            current = self.services.get(name)
            if current is None or not methods <= current:
                return False
        return True


def classify(
    old_fingerprint: str,
    old_model: CompatibilityModel,
    new_fingerprint: str,
    new_model: CompatibilityModel,
) -> Compatibility:
    """Classify the change from the old schema version to the new one."""
    if old_fingerprint == new_fingerprint:
        return Compatibility.GREEN
    if new_model.is_backward_compatible_with(old_model):
        return Compatibility.YELLOW
    return Compatibility.RED
