"""Optional pass dropping entries whose two sides are semantically far apart."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

from .entries import DictionaryEntry
from .errors import GlossaryError, ScorerError
from .references import CachedScorer, SimilarityScorer

LOGGER = logging.getLogger(__name__)

SEMANTIC_THRESHOLD = 0.35
QUALITY_MODEL = "sentence-transformers/distiluse-base-multilingual-cased-v2"


@dataclass
class QualityResult:
    passed: List[DictionaryEntry] = field(default_factory=list)
    failed: List[Tuple[DictionaryEntry, float]] = field(default_factory=list)

    def rejects_to_json(self) -> List[Dict[str, object]]:
        return [{**entry.to_dict(), "score": score} for entry, score in self.failed]


def filter_by_semantic_quality(
    entries: Sequence[DictionaryEntry],
    scorer: SimilarityScorer,
    threshold: float = SEMANTIC_THRESHOLD,
) -> QualityResult:
    LOGGER.info("Semantic quality filter active on %d entries", len(entries))
    cached = scorer if isinstance(scorer, CachedScorer) else CachedScorer(scorer)
    try:
        cached.embed_many([text for entry in entries for text in (entry.headword, entry.translation)])
    except GlossaryError:
        raise
    except Exception as exc:
        raise ScorerError(f"Embedding entries for the quality filter failed: {exc}") from exc
    result = QualityResult()
    for entry in entries:
        score = cached.score(entry.headword, entry.translation)
        if score >= threshold:
            result.passed.append(entry)
        else:
            result.failed.append((entry, score))
    LOGGER.info(
        "Kept %d, dropped %d low-similarity entries",
        len(result.passed),
        len(result.failed),
    )
    return result
