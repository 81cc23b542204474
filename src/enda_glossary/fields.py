"""Split one glossary line into headword, markers and translation side."""
from __future__ import annotations

import logging
import re
import unicodedata
from dataclasses import dataclass, field
from typing import List, Optional

import ftfy

from .brackets import find_bracket_groups

LOGGER = logging.getLogger(__name__)

COMMENT_PREFIX = "#"
DELIMITER = "::"
SEE_PATTERN = re.compile(r"SEE:", re.IGNORECASE)
SEE_TARGET_PATTERN = re.compile(r"SEE:\s*(.+)", re.IGNORECASE)
HEADWORD_END_PATTERN = re.compile(r"[({]|SEE:", re.IGNORECASE)

PART_OF_SPEECH_MARKERS = {
    "n": "noun",
    "noun": "noun",
    "v": "verb",
    "verb": "verb",
    "adj": "adjective",
    "adjective": "adjective",
    "adv": "adverb",
    "adverb": "adverb",
    "prep": "preposition",
    "preposition": "preposition",
    "pron": "pronoun",
    "pronoun": "pronoun",
    "det": "determiner",
    "determiner": "determiner",
    "conj": "conjunction",
    "conjunction": "conjunction",
    "interj": "interjection",
    "interjection": "interjection",
    "phrase": "phrase",
    "idiom": "phrase",
    "expression": "phrase",
    "prop": "properNoun",
    "proper": "properNoun",
    "proper noun": "properNoun",
    "prefix": "prefix",
    "suffix": "suffix",
    "proverb": "proverb",
    "particle": "particle",
    "num": "numeral",
    "numeral": "numeral",
    "abbr": "abbreviation",
    "abbreviation": "abbreviation",
    "art": "article",
    "article": "article",
    "contraction": "contraction",
}
PART_OF_SPEECH_TAGS = tuple(dict.fromkeys(PART_OF_SPEECH_MARKERS.values()))
SKIPPED_PARTS_OF_SPEECH = frozenset(
    {"article", "interjection", "abbreviation", "prefix", "suffix", "proverb"}
)

STATUS_ENTRY = "entry"
STATUS_REFERENCE = "reference"
STATUS_REMOVED = "removed"
STATUS_SKIPPED = "skipped"


@dataclass
class LineFields:
    status: str
    source_line: str
    reason: Optional[str] = None
    headword: str = ""
    part_of_speech: Optional[str] = None
    usage_context: Optional[str] = None
    translations: str = ""
    target: Optional[str] = None
    unknown_markers: List[str] = field(default_factory=list)


def normalize_line(raw_line: str) -> str:
    # curly quotes stay as written
    text = ftfy.fix_text(raw_line, uncurl_quotes=False)
    text = text.replace("\xa0", " ")
    return unicodedata.normalize("NFC", text).strip()


def parse_part_of_speech(marker: Optional[str]) -> Optional[str]:
    if not marker:
        return None
    return PART_OF_SPEECH_MARKERS.get(marker.strip().lower())


def extract_fields(line: str, source_line: Optional[str] = None) -> LineFields:
    """Classify ``line`` and pull out the fields shared by all its entries.

    The returned status is one of ``entry`` (translations follow),
    ``reference`` (a ``SEE:`` line), ``removed`` (part of speech in the
    skip set) or ``skipped`` (comment or malformed, see ``reason``).
    """
    original = line if source_line is None else source_line
    stripped = line.strip()
    if not stripped:
        return LineFields(STATUS_SKIPPED, original, reason="blank")
    if stripped.startswith(COMMENT_PREFIX):
        return LineFields(STATUS_SKIPPED, original, reason="comment")

    lhs, has_delimiter, rhs = stripped.partition(DELIMITER)
    lhs = lhs.strip()
    rhs = rhs.strip()
    is_reference = bool(SEE_PATTERN.search(lhs) or SEE_PATTERN.search(rhs))
    if not has_delimiter and not is_reference:
        return LineFields(STATUS_SKIPPED, original, reason="missing-delimiter")

    markers = [group.content.strip() for group in find_bracket_groups(lhs, "{", "}")]
    contexts = [group.content.strip() for group in find_bracket_groups(lhs, "(", ")")]
    part_of_speech = None
    unknown: List[str] = []
    for marker in markers:
        if not marker:
            continue
        tag = parse_part_of_speech(marker)
        if tag is None:
            unknown.append(marker)
            continue
        if part_of_speech is None:
            part_of_speech = tag
    if unknown:
        LOGGER.debug("Unknown part-of-speech marker(s) %s in %r", unknown, original)
    usage_context = "; ".join(c for c in contexts if c) or None

    headword = HEADWORD_END_PATTERN.split(lhs, maxsplit=1)[0].strip()
    fields = LineFields(
        STATUS_SKIPPED,
        original,
        headword=headword,
        part_of_speech=part_of_speech,
        usage_context=usage_context,
        unknown_markers=unknown,
    )
    if not headword:
        fields.reason = "empty-headword"
        return fields
    if part_of_speech in SKIPPED_PARTS_OF_SPEECH:
        fields.status = STATUS_REMOVED
        fields.reason = part_of_speech
        return fields

    if is_reference:
        match = SEE_TARGET_PATTERN.search(lhs) or SEE_TARGET_PATTERN.search(rhs)
        target = match.group(1).strip() if match else ""
        if not target:
            fields.reason = "empty-reference"
            return fields
        fields.status = STATUS_REFERENCE
        fields.target = target
        return fields

    if not rhs:
        fields.reason = "empty-translation"
        return fields
    fields.status = STATUS_ENTRY
    fields.translations = rhs
    return fields
