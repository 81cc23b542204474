"""Exceptions raised by the glossary pipeline."""
from __future__ import annotations

from typing import Optional


class GlossaryError(Exception):
    pass


class EntryShapeError(GlossaryError):
    """A JSON record does not have the shape of a dictionary entry."""

    def __init__(self, message: str, *, index: Optional[int] = None, field: Optional[str] = None) -> None:
        location = []
        if index is not None:
            location.append(f"record {index}")
        if field:
            location.append(f"field {field!r}")
        prefix = f"{', '.join(location)}: " if location else ""
        super().__init__(f"{prefix}{message}")
        self.index = index
        self.field = field


class ScorerError(GlossaryError):
    """The external similarity scorer failed; the run cannot continue."""


class OutputWriteError(GlossaryError):
    def __init__(self, path, cause: BaseException) -> None:
        super().__init__(f"Could not write {path}: {cause}")
        self.path = path


class ConfigError(GlossaryError):
    """A configuration value from the environment cannot be used."""
