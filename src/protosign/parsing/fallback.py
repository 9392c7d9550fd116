"""
Degraded-mode extractor used when the compiler rejects a schema.

Recovers syntax, package, imports, messages (nested ones included) with
their ``[label] type name = number;`` fields, enums with ``NAME = n;``
values, and services with ``rpc`` lines, by splitting the comment-free
text on ``{``, ``}`` and ``;``.  Anything it does not recognise is
skipped; it never raises on text input.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

from protosign.canonical.model import (
    DEFAULT_SYNTAX,
    CanonicalEnum,
    CanonicalEnumValue,
    CanonicalField,
    CanonicalFile,
    CanonicalMessage,
    CanonicalMethod,
    CanonicalRange,
    CanonicalService,
)

logger = logging.getLogger(__name__)

_BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)
_LINE_COMMENT = re.compile(r"//[^\n]*")
_STATEMENT = re.compile(r"([^{};]*)([{};])")

_SYNTAX = re.compile(r'^syntax\s*=\s*["\'](\w+)["\']$')
_PACKAGE = re.compile(r"^package\s+([\w.]+)$")
_IMPORT = re.compile(r'^import\s+(?:public\s+|weak\s+)?["\']([^"\']+)["\']$')
_BLOCK = re.compile(r"^(message|enum|service|oneof)\s+(\w+)$")
_FIELD = re.compile(
    r"^(?:(optional|required|repeated)\s+)?"
    r"(map\s*<\s*[\w.]+\s*,\s*[\w.]+\s*>|[\w.]+)\s+(\w+)\s*=\s*(\d+)"
)
_ENUM_VALUE = re.compile(r"^(\w+)\s*=\s*(-?\d+)")
_RPC = re.compile(
    r"^rpc\s+(\w+)\s*\(\s*(stream\s+)?([\w.]+)\s*\)\s*"
    r"returns\s*\(\s*(stream\s+)?([\w.]+)\s*\)"
)
_RESERVED = re.compile(r"^reserved\s+(.+)$")


def _strip_comments(content: str) -> str:
    return _LINE_COMMENT.sub("", _BLOCK_COMMENT.sub("", content))


def _normalize_map(type_name: str) -> str:
    if not type_name.startswith("map") or "<" not in type_name:
        return type_name
    inner = type_name[type_name.index("<") + 1 : type_name.rindex(">")]
    key, value = (part.strip() for part in inner.split(","))
    return f"map<{key}, {value}>"


def _parse_reserved(body: str) -> tuple[list[CanonicalRange], list[str]]:
    ranges: list[CanonicalRange] = []
    names: list[str] = []
    for part in body.split(","):
        part = part.strip()
        if not part:
            continue
        if part[0] in "\"'":
            names.append(part.strip("\"'"))
            continue
        bounds = [b.strip() for b in part.split("to")]
        try:
            start = int(bounds[0])
            end = start if len(bounds) == 1 else (
                536870911 if bounds[1] == "max" else int(bounds[1])
            )
        except ValueError:
            continue
        ranges.append(CanonicalRange(start=start, end=end))
    return ranges, names


class _Frame:
    """A block being collected: message, enum, service, oneof or other."""

    def __init__(self, kind: str, name: str = "") -> None:
        self.kind = kind
        self.name = name
        self.fields: list[dict[str, Any]] = []
        self.messages: list[CanonicalMessage] = []
        self.enums: list[CanonicalEnum] = []
        self.values: list[CanonicalEnumValue] = []
        self.methods: list[CanonicalMethod] = []
        self.oneofs: list[str] = []
        self.reserved_ranges: list[CanonicalRange] = []
        self.reserved_names: list[str] = []


class _Extractor:
    def __init__(self) -> None:
        self.syntax: Optional[str] = None
        self.package: Optional[str] = None
        self.imports: list[str] = []
        self.services: list[CanonicalService] = []
        self.root = _Frame("file")
        self.stack: list[_Frame] = [self.root]

    def _message_frame(self) -> Optional[_Frame]:
        for frame in reversed(self.stack):
            if frame.kind == "message":
                return frame
            if frame.kind != "oneof":
                return None
        return None

    def statement(self, head: str) -> None:
        frame = self.stack[-1]
        if frame.kind == "file":
            self._file_statement(head)
        elif frame.kind in ("message", "oneof"):
            self._message_statement(head, frame)
        elif frame.kind == "enum":
            match = _ENUM_VALUE.match(head)
            reserved = _RESERVED.match(head)
            if reserved:
                ranges, names = _parse_reserved(reserved.group(1))
                frame.reserved_ranges.extend(ranges)
                frame.reserved_names.extend(names)
            elif match and not head.startswith("option"):
                frame.values.append(
                    CanonicalEnumValue(name=match.group(1), number=int(match.group(2)))
                )
        elif frame.kind == "service":
            self._rpc(head, frame)

    def _file_statement(self, head: str) -> None:
        for pattern, attr in ((_SYNTAX, "syntax"), (_PACKAGE, "package")):
            match = pattern.match(head)
            if match:
                setattr(self, attr, match.group(1))
                return
        match = _IMPORT.match(head)
        if match:
            self.imports.append(match.group(1))

    def _message_statement(self, head: str, frame: _Frame) -> None:
        message = self._message_frame()
        if message is None:
            return
        reserved = _RESERVED.match(head)
        if reserved:
            ranges, names = _parse_reserved(reserved.group(1))
            message.reserved_ranges.extend(ranges)
            message.reserved_names.extend(names)
            return
        match = _FIELD.match(head)
        if not match or match.group(2) in ("option", "extensions", "reserved"):
            return
        message.fields.append(
            {
                "name": match.group(3),
                "number": int(match.group(4)),
                "label": match.group(1) if match.group(1) in ("required", "repeated") else None,
                "type_name": _normalize_map(match.group(2)),
                "oneof": frame.name if frame.kind == "oneof" else None,
            }
        )

    def _rpc(self, head: str, frame: _Frame) -> bool:
        match = _RPC.match(head)
        if not match:
            return False
        frame.methods.append(
            CanonicalMethod(
                name=match.group(1),
                input_type=match.group(3),
                output_type=match.group(5),
                client_streaming=bool(match.group(2)),
                server_streaming=bool(match.group(4)),
            )
        )
        return True

    def open_block(self, head: str) -> None:
        parent = self.stack[-1]
        if parent.kind == "service" and self._rpc(head, parent):
            self.stack.append(_Frame("other"))
            return
        match = _BLOCK.match(head)
        if match and parent.kind in ("file", "message", "oneof"):
            kind, name = match.groups()
            if kind == "oneof":
                message = self._message_frame()
                if message is not None:
                    message.oneofs.append(name)
            self.stack.append(_Frame(kind, name))
            return
        self.stack.append(_Frame("other"))

    def close_block(self) -> None:
        if len(self.stack) == 1:
            return
        frame = self.stack.pop()
        parent = self._message_frame() if frame.kind != "oneof" else None
        target = parent if parent is not None else self.root
        if frame.kind == "message":
            target.messages.append(self._build_message(frame))
        elif frame.kind == "enum":
            target.enums.append(
                CanonicalEnum(
                    name=frame.name,
                    values=tuple(frame.values),
                    reserved_ranges=tuple(frame.reserved_ranges),
                    reserved_names=tuple(frame.reserved_names),
                )
            )
        elif frame.kind == "service":
            self.services.append(CanonicalService(name=frame.name, methods=tuple(frame.methods)))

    @staticmethod
    def _build_message(frame: _Frame) -> CanonicalMessage:
        oneofs = tuple(sorted(set(frame.oneofs)))
        fields = tuple(
            CanonicalField(
                name=f["name"],
                number=f["number"],
                label=f["label"],
                type_name=f["type_name"],
                oneof_index=oneofs.index(f["oneof"]) if f["oneof"] else None,
            )
            for f in frame.fields
        )
        return CanonicalMessage(
            name=frame.name,
            fields=fields,
            nested_messages=tuple(frame.messages),
            nested_enums=tuple(frame.enums),
            oneofs=oneofs,
            reserved_ranges=tuple(frame.reserved_ranges),
            reserved_names=tuple(frame.reserved_names),
        )

    def result(self) -> CanonicalFile:
        # Unclosed blocks at end of input still count.
        while len(self.stack) > 1:
            self.close_block()
        return CanonicalFile(
            package=self.package,
            syntax=self.syntax or DEFAULT_SYNTAX,
            imports=tuple(self.imports),
            messages=tuple(self.root.messages),
            enums=tuple(self.root.enums),
            services=tuple(self.services),
        )


def extract_fallback(content: str) -> CanonicalFile:
    """Best-effort canonical model recovered from raw schema text."""
    extractor = _Extractor()
    text = _strip_comments(content)
    consumed = 0
    for match in _STATEMENT.finditer(text):
        consumed = match.end()
        head = " ".join(match.group(1).split())
        punct = match.group(2)
        if punct == ";":
            if head:
                extractor.statement(head)
        elif punct == "{":
            extractor.open_block(head)
        else:
            if head:
                extractor.statement(head)
            extractor.close_block()
    if text[consumed:].strip():
        logger.debug("Fallback extractor ignored trailing text")
    canonical = extractor.result()
    logger.debug(
        "Fallback extraction: package=%s messages=%d enums=%d services=%d",
        canonical.package,
        len(canonical.messages),
        len(canonical.enums),
        len(canonical.services),
    )
    return canonical
