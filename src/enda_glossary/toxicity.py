"""Offensive-content filtering of a built dictionary."""
from __future__ import annotations

import json
import logging
import math
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol, Sequence, Set

import pandas as pd
import requests

from .config import ToxicityConfig
from .entries import DictionaryEntry, entries_from_json, entries_to_json
from .pipeline import write_artifacts

LOGGER = logging.getLogger(__name__)

TOXIC_LABEL_PATTERN = re.compile(r"toxic|obscene|hate", re.IGNORECASE)
DEFAULT_OPENAI_URL = "https://api.openai.com/v1"
REVIEW_SYSTEM_PROMPT = (
    "You check English→Danish dictionary entries.\n\n"
    "Only return English words that are 100% safe for all ages.\n\n"
    "Remove anything sexual, violent, hateful, profane, rude, or disturbing.\n"
    "That includes: body parts, sex acts, insults, slurs, weapons, drugs, crime, death, or religion.\n\n"
    "If you are unsure, do NOT include the word.\n\n"
    "Output only the SAFE English words, separated by ;; with no extra text.\n"
    "Example: apple;;table;;happy;;run"
)


class ContentClassifier(Protocol):
    def classify(self, texts: Sequence[str]) -> List[List[Dict[str, object]]]:
        ...


class TransformersToxicityClassifier:
    def __init__(self, model_name: str, top_k: int = 3) -> None:
        self.model_name = model_name
        self.top_k = top_k
        self._pipeline = None

    def classify(self, texts: Sequence[str]) -> List[List[Dict[str, object]]]:
        if self._pipeline is None:
            from transformers import pipeline

            LOGGER.info("Loading toxicity model %s", self.model_name)
            self._pipeline = pipeline("text-classification", model=self.model_name, top_k=self.top_k)
        results = self._pipeline(list(texts))
        return [item if isinstance(item, list) else [item] for item in results]


def classifier_text(entry: DictionaryEntry) -> str:
    # "slut" is an ordinary Danish word (end); scoring it would flag harmless entries
    if "slut" in entry.translation:
        return entry.headword
    return f"{entry.headword} → {entry.translation}"


def toxic_score(labels: Sequence[Dict[str, object]]) -> float:
    for label in labels:
        if TOXIC_LABEL_PATTERN.search(str(label.get("label", ""))):
            return float(label.get("score", 0.0))
    return 0.0


def score_bucket(score: float) -> str:
    return f"{math.floor(score * 20) / 20:.2f}"


@dataclass
class ToxicityResult:
    clean: List[DictionaryEntry] = field(default_factory=list)
    removed: List[tuple] = field(default_factory=list)
    review: List[tuple] = field(default_factory=list)
    histogram: Counter = field(default_factory=Counter)

    def review_table(self, size: int = 30) -> pd.DataFrame:
        frame = pd.DataFrame(
            [
                {"headword": entry.headword, "translation": entry.translation, "score": score}
                for entry, score in self.review
            ],
            columns=["headword", "translation", "score"],
        )
        frame = frame.sort_values(by="score", ascending=False, kind="stable").head(size)
        frame["score"] = frame["score"].map(lambda value: f"{value:.3f}")
        return frame.reset_index(drop=True)


def filter_offensive(
    entries: Sequence[DictionaryEntry],
    classifier: ContentClassifier,
    threshold: float = 0.45,
    review_margin: float = 0.05,
    batch_size: int = 64,
) -> ToxicityResult:
    """Split entries into clean and removed by toxicity score.

    Entries within ``review_margin`` of the threshold that are still kept
    are also listed for manual review.
    """
    result = ToxicityResult()
    total_batches = math.ceil(len(entries) / batch_size) if entries else 0
    for batch_index in range(total_batches):
        batch = entries[batch_index * batch_size : (batch_index + 1) * batch_size]
        labels = classifier.classify([classifier_text(entry) for entry in batch])
        for entry, entry_labels in zip(batch, labels):
            score = toxic_score(entry_labels)
            result.histogram[score_bucket(score)] += 1
            if score > threshold:
                result.removed.append((entry, score))
                continue
            if abs(score - threshold) <= review_margin:
                result.review.append((entry, score))
            result.clean.append(entry)
        if batch_index % 10 == 0 or batch_index == total_batches - 1:
            LOGGER.info("Processed batch %d/%d", batch_index + 1, total_batches)
    return result


class SafetyReviewer:
    """Asks a chat-completions endpoint which flagged headwords are actually safe."""

    def __init__(self, url: Optional[str], api_key: Optional[str], model: str) -> None:
        self.url = (url or DEFAULT_OPENAI_URL).rstrip("/")
        self.api_key = api_key
        self.model = model

    def safe_headwords(self, entries: Sequence[DictionaryEntry]) -> Optional[Set[str]]:
        if not self.api_key:
            return None
        prompt = (
            "Here are the flagged entries (JSON):\n"
            f"{json.dumps(entries_to_json(entries), ensure_ascii=False)}\n"
            'Return only the English words (field "headword") that are safe, joined by \';;\'.'
        )
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": REVIEW_SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
        }
        try:
            response = requests.post(
                f"{self.url}/chat/completions",
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=120,
            )
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as exc:  # pragma: no cover - network failure
            LOGGER.warning("Safety review request failed: %s", exc)
            return None
        choices = data.get("choices") or []
        text = ((choices[0].get("message") or {}).get("content") or "") if choices else ""
        return {word.strip() for word in text.split(";;") if word.strip()}

    def restore(self, entries: Sequence[DictionaryEntry]) -> List[DictionaryEntry]:
        safe = self.safe_headwords(entries)
        if not safe:
            return []
        return [entry for entry in entries if entry.headword in safe]


def run_toxicity_filter(
    config: ToxicityConfig,
    classifier: Optional[ContentClassifier] = None,
    reviewer: Optional[SafetyReviewer] = None,
) -> ToxicityResult:
    records = json.loads(config.input_path.read_text(encoding="utf-8"))
    entries = entries_from_json(records)
    LOGGER.info("Loaded %d entries from %s", len(entries), config.input_path)
    result = filter_offensive(
        entries,
        classifier or TransformersToxicityClassifier(config.model),
        threshold=config.threshold,
        review_margin=config.review_margin,
        batch_size=config.batch_size,
    )
    review = result.review_table(config.review_size)
    artifacts = [
        (config.clean_path, entries_to_json(result.clean)),
        (config.removed_path, [{**entry.to_dict(), "toxicScore": score} for entry, score in result.removed]),
        (config.review_path, review.to_dict(orient="records")),
        (config.histogram_path, dict(sorted(result.histogram.items()))),
    ]
    if reviewer is not None:
        restored = reviewer.restore([entry for entry, _ in result.removed])
        LOGGER.info("Restored %d safe entries", len(restored))
        artifacts.append((config.restored_path, entries_to_json(restored)))
    write_artifacts(artifacts)

    total = len(entries) or 1
    LOGGER.info("Kept: %d", len(result.clean))
    LOGGER.info("Removed: %d (%.2f%%)", len(result.removed), len(result.removed) / total * 100)
    LOGGER.info("Review bin: %d (%.2f%%)", len(result.review), len(result.review) / total * 100)
    if not review.empty:
        LOGGER.info("Top borderline entries:\n%s", review.to_string(index=False))
    return result
