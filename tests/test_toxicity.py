import json

import pytest

from enda_glossary import toxicity
from enda_glossary.config import ToxicityConfig
from enda_glossary.entries import DictionaryEntry
from enda_glossary.toxicity import (
    SafetyReviewer,
    classifier_text,
    filter_offensive,
    run_toxicity_filter,
    score_bucket,
    toxic_score,
)

SCORES = {"curse → bande": 0.9, "edgy → kant": 0.43, "cat → kat": 0.12}


class StubClassifier:
    def __init__(self, scores=SCORES):
        self.scores = scores
        self.calls = []

    def classify(self, texts):
        self.calls.append(list(texts))
        return [
            [{"label": "toxic", "score": self.scores.get(text, 0.0)}, {"label": "insult", "score": 0.01}]
            for text in texts
        ]


ENTRIES = [
    DictionaryEntry("curse", "bande", word_count=1),
    DictionaryEntry("edgy", "kant", word_count=1),
    DictionaryEntry("cat", "kat", word_count=1),
    DictionaryEntry("end", "slut", word_count=1),
]


def test_classifier_text_skips_danish_slut():
    assert classifier_text(DictionaryEntry("end", "slut")) == "end"
    assert classifier_text(DictionaryEntry("cat", "kat")) == "cat → kat"


def test_toxic_score_picks_matching_label():
    assert toxic_score([{"label": "insult", "score": 0.5}, {"label": "severe_toxic", "score": 0.2}]) == 0.2
    assert toxic_score([{"label": "neutral", "score": 0.9}]) == 0.0


def test_score_bucket():
    assert score_bucket(0.12) == "0.10"
    assert score_bucket(0.9) == "0.90"


def test_filter_offensive_splits_entries():
    classifier = StubClassifier()
    result = filter_offensive(ENTRIES, classifier, threshold=0.45, review_margin=0.05, batch_size=2)

    assert len(classifier.calls) == 2
    assert [entry.headword for entry in result.clean] == ["edgy", "cat", "end"]
    assert [(entry.headword, score) for entry, score in result.removed] == [("curse", 0.9)]
    assert [entry.headword for entry, _ in result.review] == ["edgy"]
    assert result.histogram == {"0.90": 1, "0.40": 1, "0.10": 1, "0.00": 1}

    table = result.review_table()
    assert table.to_dict(orient="records") == [{"headword": "edgy", "translation": "kant", "score": "0.430"}]


def test_run_toxicity_filter_writes_outputs(tmp_path):
    source = tmp_path / "data.json"
    source.write_text(json.dumps([entry.to_dict() for entry in ENTRIES]), encoding="utf-8")
    config = ToxicityConfig(
        input_path=source, output_dir=tmp_path / "out", batch_size=3, reviewer_url=None, reviewer_api_key=None
    )
    run_toxicity_filter(config, classifier=StubClassifier())

    clean = json.loads(config.clean_path.read_text(encoding="utf-8"))
    removed = json.loads(config.removed_path.read_text(encoding="utf-8"))
    histogram = json.loads(config.histogram_path.read_text(encoding="utf-8"))
    assert [item["headword"] for item in clean] == ["edgy", "cat", "end"]
    assert removed == [{"headword": "curse", "translation": "bande", "wordCount": 1, "toxicScore": 0.9}]
    assert histogram == {"0.00": 1, "0.10": 1, "0.40": 1, "0.90": 1}
    assert json.loads(config.review_path.read_text(encoding="utf-8"))[0]["headword"] == "edgy"
    assert not config.restored_path.exists()


class FakeResponse:
    def __init__(self, payload):
        self.payload = payload

    def raise_for_status(self):
        pass

    def json(self):
        return self.payload


def test_reviewer_restores_safe_headwords(monkeypatch):
    calls = []

    def fake_post(url, json=None, headers=None, timeout=None):
        calls.append((url, headers, json))
        return FakeResponse({"choices": [{"message": {"content": "curse;; kitten"}}]})

    monkeypatch.setattr(toxicity.requests, "post", fake_post)
    reviewer = SafetyReviewer("https://llm.example/v1/", "secret", "gpt-4o-mini")
    flagged = [DictionaryEntry("curse", "bande"), DictionaryEntry("gun", "gevær")]

    assert [entry.headword for entry in reviewer.restore(flagged)] == ["curse"]
    url, headers, payload = calls[0]
    assert url == "https://llm.example/v1/chat/completions"
    assert headers == {"Authorization": "Bearer secret"}
    assert payload["model"] == "gpt-4o-mini"


def test_reviewer_without_key_restores_nothing(monkeypatch):
    def fail(*args, **kwargs):
        pytest.fail("no request expected without an API key")

    monkeypatch.setattr(toxicity.requests, "post", fail)
    assert SafetyReviewer(None, None, "gpt-4o-mini").restore([DictionaryEntry("curse", "bande")]) == []
