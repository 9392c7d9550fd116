"""
Parser adapter: ``.proto`` text -> ``FileDescriptorProto``.

Runs the protobuf compiler bundled with ``grpcio-tools``
(``python -m grpc_tools.protoc``) in a scratch directory and reads back the
descriptor set it writes.  Imports are staged next to the input: a file
found on the search path is copied, anything else gets a dummy stub so the
``import`` statement itself compiles.  ``google/protobuf/*`` imports are
served by the well-known types shipped with ``grpc_tools``.

Usage::

    from protosign.parsing.protoc import parse_proto

    descriptor = parse_proto(Path("user.proto").read_text(), file_name="user.proto")
"""

from __future__ import annotations

import logging
import re
import subprocess
import sys
import tempfile
from pathlib import Path
from typing import Iterable, Optional, Sequence

from google.protobuf import descriptor_pb2

from protosign.exceptions import ProtoParseError

logger = logging.getLogger(__name__)

IMPORT_PATTERN = re.compile(r'^\s*import\s+(?:public\s+|weak\s+)?"([^"]+)"\s*;', re.MULTILINE)

STUB_CONTENT = 'syntax = "proto3";\n'

_WELL_KNOWN_PREFIX = "google/protobuf/"
_DESCRIPTOR_SET = "_protosign_descriptor.pb"


def find_imports(content: str) -> list[str]:
    """Import paths declared in ``content``, in order of appearance."""
    return IMPORT_PATTERN.findall(content)


def _locate(import_path: str, search_dirs: Sequence[Path]) -> Optional[Path]:
    for directory in search_dirs:
        candidate = directory / import_path
        if candidate.is_file():
            return candidate
    return None


def _is_within(path: Path, root: Path) -> bool:
    try:
        path.relative_to(root)
    except ValueError:
        return False
    return True


def stage_imports(content: str, root: Path, search_dirs: Sequence[Path]) -> list[str]:
    """Write every transitive import of ``content`` under ``root``.

    Returns the import paths that were replaced by stubs.
    """
    stubbed: list[str] = []
    pending = list(find_imports(content))
    seen: set[str] = set()

    while pending:
        import_path = pending.pop(0)
        if import_path in seen or import_path.startswith(_WELL_KNOWN_PREFIX):
            continue
        seen.add(import_path)
        target = (root / import_path).resolve()
        if not _is_within(target, root.resolve()):
            logger.warning("Import %s escapes the staging directory; not staged", import_path)
            continue
        target.parent.mkdir(parents=True, exist_ok=True)

        source = _locate(import_path, search_dirs)
        if source is None:
            logger.debug("Import %s not found; writing stub", import_path)
            target.write_text(STUB_CONTENT, encoding="utf-8")
            stubbed.append(import_path)
            continue

        imported = source.read_text(encoding="utf-8")
        target.write_text(imported, encoding="utf-8")
        pending.extend(find_imports(imported))

    return stubbed


def parse_proto(
    content: str,
    *,
    file_name: str = "input.proto",
    include_paths: Iterable[Path] = (),
    source_dir: Optional[Path] = None,
) -> descriptor_pb2.FileDescriptorProto:
    """Compile ``content`` and return its file descriptor.

    Args:
        content: Schema source text.
        file_name: Name the file is compiled under (only its base name is used).
        include_paths: Extra directories searched for imports.
        source_dir: Directory of the original file, searched first.

    Raises:
        ProtoParseError: If the compiler rejects the input.
    """
    name = Path(file_name).name or "input.proto"
    search_dirs = ([source_dir] if source_dir is not None else []) + [
        Path(p) for p in include_paths
    ]

    with tempfile.TemporaryDirectory(prefix="protosign-") as workdir:
        root = Path(workdir)
        (root / name).write_text(content, encoding="utf-8")
        stubbed = stage_imports(content, root, search_dirs)
        if stubbed:
            logger.info("Stubbed %d unresolved import(s) for %s: %s", len(stubbed), name, stubbed)

        out = root / _DESCRIPTOR_SET
        cmd = [
            sys.executable,
            "-m",
            "grpc_tools.protoc",
            f"-I{root}",
            f"--descriptor_set_out={out}",
            name,
        ]
        proc = subprocess.run(cmd, capture_output=True, text=True, cwd=root)
        if proc.returncode != 0 or not out.exists():
            raise ProtoParseError(name, proc.stderr or proc.stdout)
        if proc.stderr:
            logger.debug("protoc warnings for %s: %s", name, proc.stderr.strip())

        descriptor_set = descriptor_pb2.FileDescriptorSet.FromString(out.read_bytes())

    for descriptor in descriptor_set.file:
        if descriptor.name == name:
            return descriptor
    raise ProtoParseError(name, "compiler output did not contain the input file")
