"""Offline checks over built dictionaries: structural flags and sampled similarity."""
from __future__ import annotations

import hashlib
import logging
import re
import struct
import unicodedata
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, TypeVar

from .entries import DictionaryEntry
from .references import CachedScorer, SimilarityScorer

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

SAMPLE_SIZE = 500
SAMPLE_SIM_THRESHOLD = 0.35
DELIMITER_PATTERN = re.compile(r"[(){}\[\]<>;,/]")
DANISH_LETTERS = re.compile(r"[æøå]", re.IGNORECASE)
ALLOWED_PUNCTUATION = {" ", "-", "'"}


def is_latin_text(text: str) -> bool:
    if not text:
        return False
    for char in text:
        if char in ALLOWED_PUNCTUATION:
            continue
        if not char.isalpha():
            return False
        if not unicodedata.name(char, "").startswith("LATIN"):
            return False
    return True


def length_mismatch(headword: str, translation: str) -> Optional[str]:
    headword = headword.strip()
    translation = translation.strip()
    if not headword or not translation:
        return None
    # symbolic and single-letter pairs such as "a" / "æ"
    if len(headword) <= 2 and len(translation) <= 2:
        return None
    longer, shorter = sorted((len(headword), len(translation)), reverse=True)
    if longer / shorter > 2.5:
        return "length-mismatch"
    return None


def flag_entry(entry: DictionaryEntry) -> List[str]:
    """Return the names of the structural checks ``entry`` fails."""
    flags: List[str] = []
    headword = entry.headword
    translation = entry.translation
    if not headword.strip() or not translation.strip():
        flags.append("missing-field")
    if not is_latin_text(translation):
        if DELIMITER_PATTERN.search(translation):
            flags.append("contains-delimiters")
        else:
            flags.append("invalid-chars")
    if DANISH_LETTERS.search(headword) and not DANISH_LETTERS.search(translation):
        flags.append("potentially-reversed")
    if entry.part_of_speech == "noun" and headword.startswith("to "):
        flags.append("noun-starts-with-to")
    if abs(len(headword.split(" ")) - len(translation.split(" "))) > 3:
        flags.append("word-count-drift")
    if "�" in translation:
        flags.append("encoding-issue")
    if len(headword) > 40 or len(translation) > 40 or len(headword) < 2 or len(translation) < 2:
        mismatch = length_mismatch(headword, translation)
        if mismatch:
            flags.append(mismatch)
    return flags


def flag_entries(entries: Sequence[DictionaryEntry]) -> List[Dict[str, object]]:
    flagged = []
    for entry in entries:
        flags = flag_entry(entry)
        if flags:
            flagged.append({**entry.to_dict(with_source=True), "flags": flags})
    LOGGER.info("Flagged %d suspicious entries", len(flagged))
    return flagged


def sha256_random(seed: str) -> Callable[[], float]:
    """Uniform floats from a chain of sha256 digests of ``seed``."""
    digest = hashlib.sha256(seed.encode("utf-8")).digest()
    index = 0

    def random() -> float:
        nonlocal digest, index
        if index >= len(digest) - 8:
            digest = hashlib.sha256(digest).digest()
            index = 0
        (number,) = struct.unpack_from("<I", digest, index)
        index += 4
        return number / 0xFFFFFFFF

    return random


def sample_entries(items: Sequence[T], seed: str, size: int = SAMPLE_SIZE) -> List[T]:
    rand = sha256_random(seed)
    shuffled = list(items)
    for index in range(len(shuffled) - 1, 0, -1):
        # the generator can return exactly 1.0
        other = min(int(rand() * (index + 1)), index)
        shuffled[index], shuffled[other] = shuffled[other], shuffled[index]
    return shuffled[:size]


@dataclass
class SampleReport:
    results: List[Dict[str, object]] = field(default_factory=list)
    threshold: float = SAMPLE_SIM_THRESHOLD

    @property
    def flagged(self) -> List[Dict[str, object]]:
        return [row for row in self.results if row["score"] < self.threshold]

    @property
    def average(self) -> float:
        if not self.results:
            return 0.0
        return sum(row["score"] for row in self.results) / len(self.results)


def score_sample(
    entries: Sequence[DictionaryEntry],
    scorer: SimilarityScorer,
    threshold: float = SAMPLE_SIM_THRESHOLD,
) -> SampleReport:
    cached = scorer if isinstance(scorer, CachedScorer) else CachedScorer(scorer)
    report = SampleReport(threshold=threshold)
    for position, entry in enumerate(entries, start=1):
        headword = entry.headword.strip()
        translation = entry.translation.strip()
        if not headword or not translation:
            continue
        row: Dict[str, object] = {
            "headword": headword,
            "translation": translation,
            "score": cached.score(headword, translation),
        }
        if entry.part_of_speech:
            row["partOfSpeech"] = entry.part_of_speech
        report.results.append(row)
        if position % 50 == 0:
            LOGGER.info("Processed %d/%d", position, len(entries))
    share = len(report.flagged) / len(report.results) * 100 if report.results else 0.0
    LOGGER.info(
        "Average similarity %.3f; %d entries below %.2f (%.1f%% flagged)",
        report.average,
        len(report.flagged),
        threshold,
        share,
    )
    return report
