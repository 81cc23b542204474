"""Run configuration: defaults, environment overrides and output paths."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .errors import ConfigError
from .quality import QUALITY_MODEL, SEMANTIC_THRESHOLD
from .references import SEE_MODEL, SIM_THRESHOLD
from .shuffle import DEFAULT_SEED

TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off", ""}

DEFAULT_INPUT = Path("en-da-enwiktionary.txt")
DEFAULT_OUTPUT_DIR = Path("data")
DEFAULT_VALIDATIONS_DIR = Path("validations")


def env_flag(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}")


@dataclass
class PipelineConfig:
    input_path: Path = DEFAULT_INPUT
    output_path: Path = DEFAULT_OUTPUT_DIR / "data.json"
    shuffled_output_path: Path = DEFAULT_OUTPUT_DIR / "data-shuffled.json"
    originals_output_path: Path = DEFAULT_VALIDATIONS_DIR / "data-originals.json"
    rejected_see_path: Path = DEFAULT_VALIDATIONS_DIR / "see-rejected.json"
    semantic_rejects_path: Path = DEFAULT_VALIDATIONS_DIR / "semantic-rejects.json"
    shuffle_seed: str = DEFAULT_SEED
    similarity_threshold: float = SIM_THRESHOLD
    validate_semantics: bool = False
    quality_threshold: float = SEMANTIC_THRESHOLD
    see_model: str = SEE_MODEL
    quality_model: str = QUALITY_MODEL
    explanation_words_path: Optional[Path] = None

    @classmethod
    def from_env(cls, **overrides) -> "PipelineConfig":
        """Defaults, then ``VALIDATE_SEMANTICS``/``ENDA_SHUFFLE_SEED``, then ``overrides``."""
        values = {
            "validate_semantics": env_flag("VALIDATE_SEMANTICS"),
        }
        seed = os.environ.get("ENDA_SHUFFLE_SEED")
        if seed:
            values["shuffle_seed"] = seed
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)


@dataclass
class ToxicityConfig:
    input_path: Path = DEFAULT_OUTPUT_DIR / "data.json"
    output_dir: Path = DEFAULT_OUTPUT_DIR
    model: str = "unitary/toxic-bert"
    threshold: float = 0.45
    review_margin: float = 0.05
    batch_size: int = 64
    review_size: int = 30
    reviewer_url: Optional[str] = field(default_factory=lambda: os.environ.get("OPENAI_BASE_URL"))
    reviewer_api_key: Optional[str] = field(default_factory=lambda: os.environ.get("OPENAI_API_KEY"))
    reviewer_model: str = "gpt-4o-mini"

    @property
    def clean_path(self) -> Path:
        return self.output_dir / "data-clean.json"

    @property
    def removed_path(self) -> Path:
        return self.output_dir / "data-removed.json"

    @property
    def review_path(self) -> Path:
        return self.output_dir / "data-review.json"

    @property
    def histogram_path(self) -> Path:
        return self.output_dir / "toxicity-histogram.json"

    @property
    def restored_path(self) -> Path:
        return self.output_dir / "data-restored.json"
