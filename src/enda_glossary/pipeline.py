"""Batch driver: glossary text file in, JSON dictionary artifacts out."""
from __future__ import annotations

import json
import logging
import os
import tempfile
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Pattern, Sequence, Tuple

from .cleaning import (
    DEFAULT_EXPLANATION_PATTERN,
    compile_explanation_pattern,
    load_explanation_words,
)
from .config import PipelineConfig
from .entries import (
    DictionaryEntry,
    SeeReference,
    build_entries,
    entries_to_json,
)
from .errors import OutputWriteError
from .fields import (
    STATUS_ENTRY,
    STATUS_REFERENCE,
    STATUS_REMOVED,
    extract_fields,
    normalize_line,
)
from .quality import filter_by_semantic_quality
from .references import (
    RejectedReference,
    SentenceTransformerScorer,
    SimilarityScorer,
    resolve_references,
)
from .shuffle import seeded_shuffle

LOGGER = logging.getLogger(__name__)


@dataclass
class ParseResult:
    entries: List[DictionaryEntry] = field(default_factory=list)
    references: List[SeeReference] = field(default_factory=list)
    lines: int = 0
    removed: int = 0
    skipped: Counter = field(default_factory=Counter)
    removed_by_tag: Counter = field(default_factory=Counter)
    dropped_fragments: Counter = field(default_factory=Counter)
    unknown_markers: Counter = field(default_factory=Counter)


@dataclass
class RunResult:
    """Counts and artifacts of one run, returned instead of global state."""

    entries: List[DictionaryEntry] = field(default_factory=list)
    entries_with_source: List[DictionaryEntry] = field(default_factory=list)
    shuffled: List[DictionaryEntry] = field(default_factory=list)
    rejected_references: List[RejectedReference] = field(default_factory=list)
    quality_rejects: List[Tuple[DictionaryEntry, float]] = field(default_factory=list)
    parse: ParseResult = field(default_factory=ParseResult)
    references_accepted: int = 0
    references_unresolved: int = 0
    written: List[Path] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def removed(self) -> int:
        return self.parse.removed

    def summary(self) -> dict:
        return {
            "lines": self.parse.lines,
            "entries": len(self.entries),
            "entriesWithSource": len(self.entries_with_source),
            "removed": self.parse.removed,
            "skipped": dict(self.parse.skipped),
            "droppedFragments": dict(self.parse.dropped_fragments),
            "references": len(self.parse.references),
            "referencesAccepted": self.references_accepted,
            "referencesRejected": len(self.rejected_references),
            "referencesUnresolved": self.references_unresolved,
            "qualityRejected": len(self.quality_rejects),
            "warnings": list(self.warnings),
        }


def parse_lines(
    lines: Iterable[str],
    explanation_pattern: Pattern[str] = DEFAULT_EXPLANATION_PATTERN,
) -> ParseResult:
    """Parse every line in order, collecting entries and ``SEE:`` references."""
    result = ParseResult()
    for raw_line in lines:
        if not raw_line.strip():
            continue
        result.lines += 1
        fields = extract_fields(normalize_line(raw_line), source_line=raw_line.rstrip("\r\n"))
        for marker in fields.unknown_markers:
            result.unknown_markers[marker] += 1
        if fields.status == STATUS_REMOVED:
            result.removed += 1
            result.removed_by_tag[fields.reason] += 1
        elif fields.status == STATUS_REFERENCE:
            result.references.append(SeeReference.from_fields(fields))
        elif fields.status == STATUS_ENTRY:
            built = build_entries(fields, explanation_pattern)
            result.entries.extend(built.entries)
            result.dropped_fragments.update(built.dropped)
        else:
            result.skipped[fields.reason] += 1
    LOGGER.info(
        "Parsed %d entries and %d SEE references from %d lines",
        len(result.entries),
        len(result.references),
        result.lines,
    )
    LOGGER.info("Removed %d lines due to filtering rules", result.removed)
    if result.unknown_markers:
        LOGGER.info(
            "Ignored %d unknown part-of-speech markers (%d distinct)",
            sum(result.unknown_markers.values()),
            len(result.unknown_markers),
        )
    return result


def read_lines(path: Path) -> List[str]:
    return path.read_text(encoding="utf-8").splitlines()


def dump_json(data: object) -> str:
    return json.dumps(data, ensure_ascii=False, indent=2) + "\n"


def write_text_atomic(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    handle, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(handle, "w", encoding="utf-8") as stream:
            stream.write(text)
        os.replace(temp_name, path)
    except BaseException:
        if os.path.exists(temp_name):
            os.unlink(temp_name)
        raise


def write_artifacts(artifacts: Sequence[Tuple[Path, object]]) -> List[Path]:
    """Serialize every artifact first, then write them one file at a time.

    The first failure stops the run so later artifacts are never written
    next to a missing earlier one.
    """
    rendered: List[Tuple[Path, str]] = []
    for path, data in artifacts:
        try:
            rendered.append((path, dump_json(data)))
        except (TypeError, ValueError) as exc:
            raise OutputWriteError(path, exc) from exc
    written: List[Path] = []
    for path, text in rendered:
        try:
            write_text_atomic(path, text)
        except OSError as exc:
            raise OutputWriteError(path, exc) from exc
        LOGGER.info("Saved output -> %s", path)
        written.append(path)
    return written


def run_pipeline(
    config: PipelineConfig,
    scorer: Optional[SimilarityScorer] = None,
    quality_scorer: Optional[SimilarityScorer] = None,
    *,
    write: bool = True,
) -> RunResult:
    result = RunResult()
    explanation_pattern = DEFAULT_EXPLANATION_PATTERN
    if config.explanation_words_path:
        explanation_pattern = compile_explanation_pattern(
            load_explanation_words(config.explanation_words_path)
        )

    try:
        lines = read_lines(config.input_path)
    except FileNotFoundError:
        message = f"Could not parse {config.input_path}: file not found"
        LOGGER.warning(message)
        result.warnings.append(message)
        lines = []

    parsed = parse_lines(lines, explanation_pattern)
    result.parse = parsed
    entries = list(parsed.entries)
    if parsed.references:
        resolution = resolve_references(
            parsed.references,
            parsed.entries,
            scorer or SentenceTransformerScorer(config.see_model),
            threshold=config.similarity_threshold,
        )
        entries.extend(resolution.accepted)
        result.references_accepted = len(resolution.accepted)
        result.references_unresolved = resolution.unresolved
        result.rejected_references = resolution.rejected
    result.entries_with_source = entries
    LOGGER.info("Total entries parsed: %d", len(entries))

    final_entries = entries
    quality_rejects_json: List[dict] = []
    if config.validate_semantics:
        quality = filter_by_semantic_quality(
            entries,
            quality_scorer or SentenceTransformerScorer(config.quality_model),
            threshold=config.quality_threshold,
        )
        final_entries = quality.passed
        result.quality_rejects = quality.failed
        quality_rejects_json = quality.rejects_to_json()
    result.entries = final_entries

    LOGGER.info("Deterministically shuffling entries with seed %r", config.shuffle_seed)
    result.shuffled = seeded_shuffle(final_entries, config.shuffle_seed)

    if not write:
        return result
    artifacts: List[Tuple[Path, object]] = [
        (config.output_path, entries_to_json(final_entries)),
        (config.originals_output_path, entries_to_json(entries, with_source=True)),
        (config.shuffled_output_path, entries_to_json(result.shuffled)),
        (config.rejected_see_path, [item.to_dict() for item in result.rejected_references]),
    ]
    if config.validate_semantics:
        artifacts.append((config.semantic_rejects_path, quality_rejects_json))
    result.written = write_artifacts(artifacts)
    return result
