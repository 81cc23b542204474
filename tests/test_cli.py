import json

import pytest

from enda_glossary.cli import main, parse_args


def test_defaults_to_build():
    args = parse_args(["--seed", "abc", "--log-level", "DEBUG"])
    assert args.command == "build"
    assert args.seed == "abc"
    assert args.log_level == "DEBUG"


def test_top_level_log_level_is_kept():
    args = parse_args(["--log-level", "WARNING", "analyze-see"])
    assert args.command == "analyze-see"
    assert args.log_level == "WARNING"


def test_build_command(tmp_path, monkeypatch):
    monkeypatch.delenv("VALIDATE_SEMANTICS", raising=False)
    monkeypatch.delenv("ENDA_SHUFFLE_SEED", raising=False)
    source = tmp_path / "glossary.txt"
    source.write_text("cat {n} :: kat\ndog {n} :: hund, vovse\n", encoding="utf-8")
    output = tmp_path / "data.json"
    main(
        [
            "build",
            "--input", str(source),
            "--output", str(output),
            "--shuffled-output", str(tmp_path / "shuffled.json"),
            "--originals-output", str(tmp_path / "originals.json"),
            "--rejected-see", str(tmp_path / "rejected.json"),
        ]
    )
    data = json.loads(output.read_text(encoding="utf-8"))
    assert [entry["translation"] for entry in data] == ["kat", "hund", "vovse"]
    assert json.loads((tmp_path / "rejected.json").read_text(encoding="utf-8")) == []


def test_analyze_see_prints_summary(tmp_path, capsys):
    path = tmp_path / "see-rejected.json"
    path.write_text(json.dumps([{"from": "auto", "to": "car", "score": 0.4}]), encoding="utf-8")
    main(["analyze-see", "--input", str(path)])
    out = capsys.readouterr().out
    assert "Count: 1" in out
    assert "auto → car" in out


def test_analyze_see_missing_file(tmp_path):
    with pytest.raises(SystemExit):
        main(["analyze-see", "--input", str(tmp_path / "missing.json")])


def test_invalid_entries_exit_with_message(tmp_path):
    path = tmp_path / "data.json"
    path.write_text(json.dumps([{"headword": "cat"}]), encoding="utf-8")
    with pytest.raises(SystemExit, match="Parsing failed"):
        main(["validate-structure", "--input", str(path), "--output", str(tmp_path / "flags.json")])


def test_bad_environment_flag_exits_with_message(tmp_path, monkeypatch):
    monkeypatch.setenv("VALIDATE_SEMANTICS", "maybe")
    with pytest.raises(SystemExit, match="VALIDATE_SEMANTICS must be a boolean"):
        main(["build", "--input", str(tmp_path / "missing.txt"), "--output", str(tmp_path / "data.json")])
