from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make the package importable when running tests from a source checkout.
SRC = Path(__file__).resolve().parents[1] / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


class StubScorer:
    """Deterministic stand-in for an embedding model.

    ``embed`` returns the lowercased text and ``similarity`` looks the pair
    up in a table (in either order), falling back to ``default``.
    """

    def __init__(self, scores=None, default: float = 0.0) -> None:
        self.scores = {
            (left.lower(), right.lower()): value for (left, right), value in (scores or {}).items()
        }
        self.default = default
        self.embedded: list[str] = []

    def embed(self, text: str) -> str:
        self.embedded.append(text)
        return text.lower()

    def similarity(self, left: str, right: str) -> float:
        if (left, right) in self.scores:
            return self.scores[(left, right)]
        return self.scores.get((right, left), self.default)


@pytest.fixture
def stub_scorer_factory():
    return StubScorer
