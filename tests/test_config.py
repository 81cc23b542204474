from __future__ import annotations

from pathlib import Path

import pytest

from enda_glossary.config import PipelineConfig, env_flag
from enda_glossary.errors import ConfigError


def test_env_flag_parsing(monkeypatch):
    monkeypatch.setenv("VALIDATE_SEMANTICS", "true")
    assert env_flag("VALIDATE_SEMANTICS") is True
    monkeypatch.setenv("VALIDATE_SEMANTICS", "off")
    assert env_flag("VALIDATE_SEMANTICS") is False
    monkeypatch.delenv("VALIDATE_SEMANTICS")
    assert env_flag("VALIDATE_SEMANTICS", default=True) is True


def test_invalid_flag_raises(monkeypatch):
    monkeypatch.setenv("VALIDATE_SEMANTICS", "maybe")
    with pytest.raises(ConfigError):
        env_flag("VALIDATE_SEMANTICS")


def test_from_env_then_overrides(monkeypatch):
    monkeypatch.setenv("VALIDATE_SEMANTICS", "1")
    monkeypatch.setenv("ENDA_SHUFFLE_SEED", "from-env")
    config = PipelineConfig.from_env(input_path=Path("in.txt"), shuffle_seed=None)
    assert config.validate_semantics is True
    assert config.shuffle_seed == "from-env"
    assert config.input_path == Path("in.txt")
    assert config.similarity_threshold == 0.42

    config = PipelineConfig.from_env(shuffle_seed="cli")
    assert config.shuffle_seed == "cli"


def test_defaults(monkeypatch):
    monkeypatch.delenv("VALIDATE_SEMANTICS", raising=False)
    monkeypatch.delenv("ENDA_SHUFFLE_SEED", raising=False)
    config = PipelineConfig.from_env()
    assert config.validate_semantics is False
    assert config.shuffle_seed == "danskify-v1"
