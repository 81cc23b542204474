"""Clean a single translation fragment and collect its notes."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Pattern, Sequence

from .brackets import (
    find_bracket_groups,
    flatten_nested,
    has_unmatched_boundary_bracket,
    remove_bracket_groups,
)

LOGGER = logging.getLogger(__name__)

# Parenthesised text containing any of these words is an English gloss,
# not a Danish clarification.
DEFAULT_EXPLANATION_WORDS = (
    "this",
    "which",
    "so",
    "can",
    "also",
    "mean",
    "is",
    "in",
    "Danish",
    "more",
    "fully",
    "means",
    "to",
    "check",
    "verify",
    "do",
    "not",
    "confuse",
    "with",
    "choose",
    "between",
    "plague",
    "cholera",
)
SINGLE_LETTER_PATTERN = re.compile(r"[a-zæøå]", re.IGNORECASE)
KNOWN_MISTRANSLATIONS = (
    ("between", "tilsammen"),
)
SENTENCE_FRAGMENT_OPENERS = ("which means", "do not confuse")
WHITESPACE_PATTERN = re.compile(r"\s+")
TRAILING_SQUARE_PATTERN = re.compile(r"\]\.?$")


def compile_explanation_pattern(words: Iterable[str]) -> Pattern[str]:
    alternatives = "|".join(re.escape(word) for word in words if word)
    if not alternatives:
        # never matches
        return re.compile(r"(?!)")
    return re.compile(rf"\b(?:{alternatives})\b", re.IGNORECASE)


def load_explanation_words(path: Path) -> List[str]:
    """Read one word per line; blank lines and ``#`` comments are ignored."""
    words: List[str] = []
    for line in path.read_text(encoding="utf-8").splitlines():
        word = line.strip()
        if not word or word.startswith("#"):
            continue
        words.append(word)
    LOGGER.info("Loaded %d explanation words from %s", len(words), path)
    return words


DEFAULT_EXPLANATION_PATTERN = compile_explanation_pattern(DEFAULT_EXPLANATION_WORDS)


@dataclass
class CleanedTranslation:
    translation: str
    notes: List[str] = field(default_factory=list)


def dedup_keep_order(values: Iterable[str]) -> List[str]:
    seen = set()
    out: List[str] = []
    for value in values:
        if value in seen:
            continue
        seen.add(value)
        out.append(value)
    return out


def is_single_letter_fragment(headword: str, fragment: str) -> bool:
    trimmed = fragment.strip()
    return (
        len(trimmed) == 1
        and not SINGLE_LETTER_PATTERN.match(trimmed)
        and len(headword) > 3
    )


def is_known_mistranslation(headword: str, fragment: str) -> bool:
    headword_lower = headword.lower()
    fragment_lower = fragment.strip().lower()
    return any(
        headword_lower == bad_headword and fragment_lower.startswith(bad_prefix)
        for bad_headword, bad_prefix in KNOWN_MISTRANSLATIONS
    )


def is_sentence_fragment(fragment: str) -> bool:
    return fragment.strip().lower().startswith(SENTENCE_FRAGMENT_OPENERS)


def should_drop_fragment(headword: str, fragment: str) -> Optional[str]:
    """Return the name of the first drop filter ``fragment`` trips, if any."""
    if is_single_letter_fragment(headword, fragment):
        return "single-letter"
    if has_unmatched_boundary_bracket(fragment):
        return "unmatched-bracket"
    if is_known_mistranslation(headword, fragment):
        return "mistranslation"
    if is_sentence_fragment(fragment):
        return "sentence-fragment"
    return None


def extract_square_notes(text: str) -> List[str]:
    notes: List[str] = []
    for group in find_bracket_groups(text, "[", "]"):
        note = flatten_nested(group.content.strip(), "[", "]").strip()
        if note and note not in notes:
            notes.append(note)
    return notes


def strip_dangling_brackets(text: str) -> str:
    text = TRAILING_SQUARE_PATTERN.sub("", text).strip()
    if text.startswith("[") and "]" not in text:
        text = text[1:].strip()
    groups = find_bracket_groups(text, "(", ")")
    if text.startswith("(") and not any(group.start == 0 for group in groups):
        text = text[1:].strip()
        groups = find_bracket_groups(text, "(", ")")
    if text.endswith(")") and not any(group.end == len(text) for group in groups):
        text = text[:-1].strip()
    return text


def extract_paren_notes(text: str, explanation_pattern: Pattern[str]) -> List[str]:
    notes: List[str] = []
    for group in find_bracket_groups(text, "(", ")"):
        content = group.content.strip()
        if not content:
            continue
        if explanation_pattern.search(content):
            LOGGER.debug("Dropping English explanation %r", content)
            continue
        parts = content.split(",") if "," in content else [content]
        for part in parts:
            part = part.strip()
            if part and part not in notes:
                notes.append(part)
    return notes


def collapse_whitespace(text: str) -> str:
    return WHITESPACE_PATTERN.sub(" ", text).strip()


def clean_translation(
    fragment: str,
    existing_notes: Sequence[str] = (),
    explanation_pattern: Pattern[str] = DEFAULT_EXPLANATION_PATTERN,
) -> Optional[CleanedTranslation]:
    """Turn a raw fragment into a visible translation plus notes.

    Square-bracket groups become notes, parenthesised groups become notes
    unless they read like English explanations, and both are removed from
    the translation. Returns ``None`` when nothing visible is left.
    """
    cleaned = fragment.strip()
    square_notes = extract_square_notes(cleaned)
    cleaned = remove_bracket_groups(cleaned, "[", "]")
    cleaned = strip_dangling_brackets(cleaned)
    paren_notes = extract_paren_notes(cleaned, explanation_pattern)
    cleaned = remove_bracket_groups(cleaned, "(", ")")
    cleaned = collapse_whitespace(cleaned)
    if not cleaned:
        return None
    notes = dedup_keep_order([*existing_notes, *square_notes, *paren_notes])
    if LOGGER.isEnabledFor(logging.DEBUG):
        LOGGER.debug("Cleaned %r -> %r notes=%s", fragment, cleaned, notes)
    return CleanedTranslation(translation=cleaned, notes=notes)
