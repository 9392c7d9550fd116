"""Exception hierarchy for protosign."""

from __future__ import annotations


class ProtoSignError(Exception):
    """Base class for all protosign errors."""


class ProtoParseError(ProtoSignError):
    """The protobuf compiler rejected a schema file."""

    def __init__(self, file_name: str, detail: str) -> None:
        self.file_name = file_name
        self.detail = detail.strip()
        super().__init__(f"Failed to parse {file_name}: {self.detail or 'unknown error'}")


class ConfigError(ProtoSignError):
    """A configuration file could not be loaded or validated."""
