"""Dictionary records and the builder that turns parsed lines into them."""
from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Pattern

from .brackets import find_bracket_groups, flatten_nested, split_outside_brackets
from .cleaning import (
    DEFAULT_EXPLANATION_PATTERN,
    clean_translation,
    dedup_keep_order,
    should_drop_fragment,
)
from .errors import EntryShapeError
from .fields import PART_OF_SPEECH_TAGS, STATUS_ENTRY, STATUS_REFERENCE, LineFields

LOGGER = logging.getLogger(__name__)


def count_words(text: str) -> int:
    return len(text.split())


@dataclass
class DictionaryEntry:
    headword: str
    translation: str
    part_of_speech: Optional[str] = None
    usage_context: Optional[str] = None
    notes: Optional[List[str]] = None
    word_count: int = 0
    source_line: Optional[str] = None

    def to_dict(self, *, with_source: bool = False) -> Dict[str, object]:
        record: Dict[str, object] = {
            "headword": self.headword,
            "translation": self.translation,
        }
        if self.part_of_speech:
            record["partOfSpeech"] = self.part_of_speech
        if self.usage_context:
            record["usageContext"] = self.usage_context
        if self.notes:
            record["notes"] = list(self.notes)
        record["wordCount"] = self.word_count
        if with_source and self.source_line is not None:
            record["sourceLine"] = self.source_line
        return record

    @classmethod
    def from_dict(cls, data: object, *, index: Optional[int] = None) -> "DictionaryEntry":
        """Validate a decoded JSON object and build an entry from it."""
        if not isinstance(data, dict):
            raise EntryShapeError(f"expected an object, got {type(data).__name__}", index=index)

        def text(name: str, required: bool) -> Optional[str]:
            value = data.get(name)
            if value is None:
                if required:
                    raise EntryShapeError("missing required value", index=index, field=name)
                return None
            if not isinstance(value, str):
                raise EntryShapeError("expected a string", index=index, field=name)
            if required and not value.strip():
                raise EntryShapeError("must not be empty", index=index, field=name)
            return value

        headword = text("headword", True)
        translation = text("translation", True)
        part_of_speech = text("partOfSpeech", False)
        if part_of_speech is not None and part_of_speech not in PART_OF_SPEECH_TAGS:
            raise EntryShapeError(f"unknown part of speech {part_of_speech!r}", index=index, field="partOfSpeech")
        notes = data.get("notes")
        if notes is not None:
            if not isinstance(notes, list) or not all(isinstance(n, str) for n in notes):
                raise EntryShapeError("expected a list of strings", index=index, field="notes")
            notes = dedup_keep_order(notes) or None
        word_count = data.get("wordCount")
        if word_count is None:
            word_count = count_words(headword)
        elif not isinstance(word_count, int) or isinstance(word_count, bool):
            raise EntryShapeError("expected an integer", index=index, field="wordCount")
        return cls(
            headword=headword,
            translation=translation,
            part_of_speech=part_of_speech,
            usage_context=text("usageContext", False),
            notes=notes,
            word_count=word_count,
            source_line=text("sourceLine", False),
        )


@dataclass
class SeeReference:
    source: str
    target: str
    part_of_speech: Optional[str] = None
    usage_context: Optional[str] = None
    source_line: str = ""

    @classmethod
    def from_fields(cls, fields: LineFields) -> "SeeReference":
        if fields.status != STATUS_REFERENCE or not fields.target:
            raise ValueError(f"not a reference line: {fields.source_line!r}")
        return cls(
            source=fields.headword,
            target=fields.target,
            part_of_speech=fields.part_of_speech,
            usage_context=fields.usage_context,
            source_line=fields.source_line,
        )


@dataclass
class BuildResult:
    entries: List[DictionaryEntry] = field(default_factory=list)
    dropped: Counter = field(default_factory=Counter)


def entries_from_json(records: object) -> List[DictionaryEntry]:
    if not isinstance(records, list):
        raise EntryShapeError(f"expected a JSON array, got {type(records).__name__}")
    return [DictionaryEntry.from_dict(item, index=i) for i, item in enumerate(records)]


def entries_to_json(entries: Iterable[DictionaryEntry], *, with_source: bool = False) -> List[Dict[str, object]]:
    return [entry.to_dict(with_source=with_source) for entry in entries]


def translation_side_notes(translations: str) -> List[str]:
    notes: List[str] = []
    for group in find_bracket_groups(translations, "[", "]"):
        note = flatten_nested(group.content.strip(), "[", "]").strip()
        if note:
            notes.append(note)
    return notes


def build_entries(
    fields: LineFields,
    explanation_pattern: Pattern[str] = DEFAULT_EXPLANATION_PATTERN,
) -> BuildResult:
    """Expand one translation line into zero or more entries."""
    result = BuildResult()
    if fields.status != STATUS_ENTRY:
        return result
    existing_notes = translation_side_notes(fields.translations)
    without_markers = fields.translations
    for group in reversed(find_bracket_groups(without_markers, "{", "}")):
        without_markers = without_markers[: group.start] + without_markers[group.end :]
    word_count = count_words(fields.headword)
    for fragment in split_outside_brackets(without_markers):
        reason = should_drop_fragment(fields.headword, fragment)
        if reason:
            result.dropped[reason] += 1
            LOGGER.debug("Dropped fragment %r of %r (%s)", fragment, fields.headword, reason)
            continue
        cleaned = clean_translation(fragment, existing_notes, explanation_pattern)
        if cleaned is None:
            result.dropped["empty-after-cleaning"] += 1
            continue
        result.entries.append(
            DictionaryEntry(
                headword=fields.headword,
                translation=cleaned.translation,
                part_of_speech=fields.part_of_speech,
                usage_context=fields.usage_context,
                notes=cleaned.notes or None,
                word_count=word_count,
                source_line=fields.source_line,
            )
        )
    return result
