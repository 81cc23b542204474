from __future__ import annotations

import pytest

from enda_glossary.fields import (
    STATUS_ENTRY,
    STATUS_REFERENCE,
    STATUS_REMOVED,
    STATUS_SKIPPED,
    extract_fields,
    normalize_line,
    parse_part_of_speech,
)


def test_verb_line_fields():
    line = "run {v} (to move fast) :: løbe, springe [about animals]"
    fields = extract_fields(line)
    assert fields.status == STATUS_ENTRY
    assert fields.headword == "run"
    assert fields.part_of_speech == "verb"
    assert fields.usage_context == "to move fast"
    assert fields.translations == "løbe, springe [about animals]"
    assert fields.source_line == line


@pytest.mark.parametrize(
    "line, reason",
    [
        ("# English :: Danish dictionary", "comment"),
        ("no delimiter here", "missing-delimiter"),
        ("{n} :: bil", "empty-headword"),
        ("car {n} ::", "empty-translation"),
    ],
)
def test_skipped_lines(line, reason):
    fields = extract_fields(line)
    assert fields.status == STATUS_SKIPPED
    assert fields.reason == reason


def test_skip_set_line_is_removed():
    fields = extract_fields("xx {prefix} :: foo")
    assert fields.status == STATUS_REMOVED
    assert fields.reason == "prefix"


def test_see_reference_on_right_hand_side():
    fields = extract_fields("auto {n} :: SEE: car")
    assert fields.status == STATUS_REFERENCE
    assert fields.headword == "auto"
    assert fields.part_of_speech == "noun"
    assert fields.target == "car"


def test_see_reference_without_delimiter_and_lowercase_marker():
    fields = extract_fields("automobile see: motor car")
    assert fields.status == STATUS_REFERENCE
    assert fields.headword == "automobile"
    assert fields.target == "motor car"


def test_first_known_marker_wins_and_contexts_are_joined():
    fields = extract_fields("bank {xyz} {n} {v} (finance) (money) :: bank")
    assert fields.part_of_speech == "noun"
    assert fields.unknown_markers == ["xyz"]
    assert fields.usage_context == "finance; money"


def test_unknown_marker_is_not_fatal():
    fields = extract_fields("thing {weird} :: ting")
    assert fields.status == STATUS_ENTRY
    assert fields.part_of_speech is None


def test_part_of_speech_markers():
    assert parse_part_of_speech(" Proper Noun ") == "properNoun"
    assert parse_part_of_speech("idiom") == "phrase"
    assert parse_part_of_speech("abbr") == "abbreviation"
    assert parse_part_of_speech("c") is None
    assert parse_part_of_speech(None) is None


def test_normalize_line_replaces_no_break_space():
    assert normalize_line("foo\xa0bar  ") == "foo bar"


def test_normalize_line_keeps_curly_quotes():
    assert normalize_line("det’s “godt”") == "det’s “godt”"
