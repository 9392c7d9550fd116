"""
``ProtoFile``: one parsed schema version with its canonical model,
fingerprint and compatibility projection.

Usage::

    from protosign.schema_file import ProtoFile

    old = ProtoFile.from_path(Path("v1/user.proto"))
    new = ProtoFile.from_path(Path("v2/user.proto"))
    verdict = old.compare_with(new)
    result = old.check_breaking_changes(new)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

from google.protobuf import descriptor_pb2

from protosign.breaking.engine import BreakingEngine
from protosign.breaking.otel import emit_compatibility_check
from protosign.breaking.schema import BreakingConfig, BreakingResult, RuleContext
from protosign.canonical.compatibility import Compatibility, CompatibilityModel, classify
from protosign.canonical.fingerprint import compute_fingerprint
from protosign.canonical.model import CanonicalFile
from protosign.canonical.normalize import normalize_file
from protosign.exceptions import ProtoParseError
from protosign.parsing.fallback import extract_fallback
from protosign.parsing.protoc import parse_proto

logger = logging.getLogger(__name__)


class ProtoFile:
    """A schema version ready for comparison."""

    def __init__(
        self,
        canonical: CanonicalFile,
        content: str = "",
        file_path: Optional[str] = None,
        degraded: bool = False,
    ) -> None:
        self.canonical = canonical
        self.content = content
        self.file_path = file_path or "input.proto"
        self.degraded = degraded
        self.fingerprint = compute_fingerprint(canonical)
        self.compatibility_model = CompatibilityModel.from_canonical(canonical)

    def __repr__(self) -> str:
        return f"ProtoFile({self.file_path!r}, fingerprint={self.fingerprint[:12]}...)"

    @classmethod
    def from_descriptor(
        cls,
        descriptor: descriptor_pb2.FileDescriptorProto,
        content: str = "",
        file_path: Optional[str] = None,
    ) -> "ProtoFile":
        return cls(normalize_file(descriptor), content, file_path or descriptor.name or None)

    @classmethod
    def from_text(
        cls,
        content: str,
        *,
        file_path: Optional[str] = None,
        include_paths: Iterable[Path] = (),
        allow_fallback: bool = True,
    ) -> "ProtoFile":
        """Parse ``content``; fall back to text extraction if allowed.

        Raises:
            ProtoParseError: If parsing fails and ``allow_fallback`` is False.
        """
        source_dir = Path(file_path).parent if file_path else None
        try:
            descriptor = parse_proto(
                content,
                file_name=Path(file_path).name if file_path else "input.proto",
                include_paths=include_paths,
                source_dir=source_dir,
            )
        except ProtoParseError as exc:
            if not allow_fallback:
                raise
            logger.warning("%s; using degraded text extraction", exc)
            return cls(extract_fallback(content), content, file_path, degraded=True)
        return cls(normalize_file(descriptor), content, file_path)

    @classmethod
    def from_path(cls, path: Path, **kwargs: object) -> "ProtoFile":
        """Read and parse a schema file.

        Raises:
            OSError: If the file cannot be read.
        """
        content = path.read_text(encoding="utf-8")
        return cls.from_text(content, file_path=str(path), **kwargs)  # type: ignore[arg-type]

    def compare_with(self, new: "ProtoFile") -> Compatibility:
        """Green/Yellow/Red verdict for the change ``self`` -> ``new``."""
        verdict = classify(
            self.fingerprint, self.compatibility_model, new.fingerprint, new.compatibility_model
        )
        emit_compatibility_check(verdict, self.fingerprint, new.fingerprint)
        return verdict

    def check_breaking_changes(
        self,
        new: "ProtoFile",
        config: Optional[BreakingConfig] = None,
        engine: Optional[BreakingEngine] = None,
    ) -> BreakingResult:
        """Run the rule engine with ``new`` as current and ``self`` as previous."""
        context = RuleContext(current_file=new.file_path, previous_file=self.file_path)
        return (engine or BreakingEngine()).check(new.canonical, self.canonical, config, context)
