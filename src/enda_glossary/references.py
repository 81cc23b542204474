"""Expand ``SEE:`` cross-references into concrete entries."""
from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol, Sequence

import numpy as np

from .entries import DictionaryEntry, SeeReference, count_words
from .errors import GlossaryError, ScorerError

LOGGER = logging.getLogger(__name__)

SIM_THRESHOLD = 0.42
SEE_MODEL = "sentence-transformers/all-MiniLM-L6-v2"


class SimilarityScorer(Protocol):
    def embed(self, text: str) -> object:
        ...

    def similarity(self, left: object, right: object) -> float:
        ...


def cosine(left: np.ndarray, right: np.ndarray) -> float:
    left = np.asarray(left, dtype="float32")
    right = np.asarray(right, dtype="float32")
    denominator = float(np.linalg.norm(left) * np.linalg.norm(right))
    if denominator == 0.0:
        return 0.0
    return float(np.dot(left, right) / denominator)


class SentenceTransformerScorer:
    """Embeds text with a sentence-transformers model and compares by cosine."""

    def __init__(self, model_name: str = SEE_MODEL, device: str = "cpu") -> None:
        self.model_name = model_name
        self.device = device
        self._model = None

    def _load(self):
        if self._model is None:
            from sentence_transformers import SentenceTransformer

            LOGGER.info("Loading embedding model %s", self.model_name)
            self._model = SentenceTransformer(self.model_name, device=self.device)
        return self._model

    def embed(self, text: str) -> np.ndarray:
        return self.embed_many([text])[0]

    def embed_many(self, texts: Sequence[str]) -> List[np.ndarray]:
        vectors = self._load().encode(list(texts), normalize_embeddings=True)
        return list(np.asarray(vectors, dtype="float32"))

    def similarity(self, left: np.ndarray, right: np.ndarray) -> float:
        return cosine(left, right)


class CachedScorer:
    """Wraps a scorer so each distinct lowercased text is embedded once."""

    def __init__(self, scorer: SimilarityScorer) -> None:
        self.scorer = scorer
        self._cache: Dict[str, object] = {}

    def embed(self, text: str) -> object:
        key = text.lower()
        if key not in self._cache:
            self._cache[key] = self.scorer.embed(text)
        return self._cache[key]

    def embed_many(self, texts: Sequence[str]) -> List[object]:
        missing: Dict[str, str] = {}
        for text in texts:
            key = text.lower()
            if key not in self._cache and key not in missing:
                missing[key] = text
        if missing:
            batch = getattr(self.scorer, "embed_many", None)
            originals = list(missing.values())
            vectors = batch(originals) if batch else [self.scorer.embed(t) for t in originals]
            for key, vector in zip(missing, vectors):
                self._cache[key] = vector
        return [self._cache[text.lower()] for text in texts]

    def similarity(self, left: object, right: object) -> float:
        return self.scorer.similarity(left, right)

    def score(self, left_text: str, right_text: str) -> float:
        try:
            return float(self.similarity(self.embed(left_text), self.embed(right_text)))
        except GlossaryError:
            raise
        except Exception as exc:
            raise ScorerError(f"Scoring {left_text!r} against {right_text!r} failed: {exc}") from exc

    def __len__(self) -> int:
        return len(self._cache)


@dataclass
class RejectedReference:
    source: str
    target: str
    score: float

    def to_dict(self) -> Dict[str, object]:
        return {"from": self.source, "to": self.target, "score": self.score}


@dataclass
class ResolutionResult:
    accepted: List[DictionaryEntry] = field(default_factory=list)
    rejected: List[RejectedReference] = field(default_factory=list)
    unresolved: int = 0


def index_by_headword(entries: Sequence[DictionaryEntry]) -> Dict[str, List[DictionaryEntry]]:
    index: Dict[str, List[DictionaryEntry]] = defaultdict(list)
    for entry in entries:
        index[entry.headword.lower()].append(entry)
    return index


def expand_reference(reference: SeeReference, target: DictionaryEntry) -> DictionaryEntry:
    return DictionaryEntry(
        headword=reference.source,
        translation=target.translation,
        part_of_speech=target.part_of_speech,
        usage_context=reference.usage_context or target.usage_context,
        notes=list(target.notes) if target.notes else None,
        word_count=count_words(reference.source),
        source_line=reference.source_line,
    )


def resolve_references(
    references: Sequence[SeeReference],
    entries: Sequence[DictionaryEntry],
    scorer: SimilarityScorer,
    threshold: float = SIM_THRESHOLD,
    cache: Optional[CachedScorer] = None,
) -> ResolutionResult:
    """Copy the translations of each reference target onto the referring headword.

    A reference whose target has no entries is dropped. Otherwise the two
    headwords are scored and the reference is only expanded when the score
    reaches ``threshold``; lower scores are recorded as rejections.
    """
    cached = cache if cache is not None else (
        scorer if isinstance(scorer, CachedScorer) else CachedScorer(scorer)
    )
    index = index_by_headword(entries)
    result = ResolutionResult()
    for reference in references:
        targets = index.get(reference.target.lower())
        if not targets:
            result.unresolved += 1
            continue
        score = cached.score(reference.source, reference.target)
        if score < threshold:
            result.rejected.append(RejectedReference(reference.source, reference.target, score))
            LOGGER.debug("Rejected SEE %s -> %s (%.3f)", reference.source, reference.target, score)
            continue
        result.accepted.extend(expand_reference(reference, target) for target in targets)
    LOGGER.info(
        "Semantic SEE filter: kept %d, dropped %d, unresolved %d",
        len(result.accepted),
        len(result.rejected),
        result.unresolved,
    )
    return result
