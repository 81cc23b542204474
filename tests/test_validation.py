from enda_glossary.entries import DictionaryEntry
from enda_glossary.validation import (
    flag_entries,
    flag_entry,
    is_latin_text,
    length_mismatch,
    sample_entries,
    score_sample,
    sha256_random,
)


def test_latin_text():
    assert is_latin_text("blåbær")
    assert is_latin_text("god morgen")
    assert not is_latin_text("hund (dyr)")
    assert not is_latin_text("")


def test_flags_suspicious_entries():
    assert flag_entry(DictionaryEntry("hello", "hej")) == []
    assert flag_entry(DictionaryEntry("dog", "hund (dyr)")) == ["contains-delimiters"]
    assert flag_entry(DictionaryEntry("blåbær", "blueberry")) == ["potentially-reversed"]
    assert flag_entry(DictionaryEntry("to run", "løb", part_of_speech="noun")) == ["noun-starts-with-to"]
    assert flag_entry(DictionaryEntry("x", "something")) == ["length-mismatch"]


def test_length_mismatch_ignores_short_pairs():
    assert length_mismatch("a", "æ") is None
    assert length_mismatch("ab", "abcdefgh") == "length-mismatch"


def test_flag_entries_keeps_only_flagged():
    flagged = flag_entries(
        [DictionaryEntry("hello", "hej"), DictionaryEntry("dog", "hund; vovse", source_line="dog :: hund; vovse")]
    )
    assert len(flagged) == 1
    assert flagged[0]["flags"] == ["contains-delimiters"]
    assert flagged[0]["sourceLine"] == "dog :: hund; vovse"


def test_sha256_random_is_deterministic():
    first = sha256_random("seed")
    second = sha256_random("seed")
    values = [first() for _ in range(40)]
    assert values == [second() for _ in range(40)]
    assert all(0.0 <= value <= 1.0 for value in values)


def test_sample_is_a_seeded_subset():
    items = list(range(50))
    sample = sample_entries(items, "abc", size=10)
    assert sample == sample_entries(items, "abc", size=10)
    assert len(sample) == 10
    assert len(set(sample)) == 10
    assert set(sample) <= set(items)
    assert sample_entries(items, "abc", size=100) != items
    assert sorted(sample_entries(items, "abc", size=100)) == items


def test_score_sample_reports_low_scores(stub_scorer_factory):
    scorer = stub_scorer_factory({("dog", "hund"): 0.9, ("cat", "bil"): 0.1})
    report = score_sample(
        [
            DictionaryEntry("dog", "hund", part_of_speech="noun"),
            DictionaryEntry("cat", "bil"),
            DictionaryEntry("", "tom"),
        ],
        scorer,
    )
    assert len(report.results) == 2
    assert report.results[0]["partOfSpeech"] == "noun"
    assert [row["headword"] for row in report.flagged] == ["cat"]
    assert report.average == 0.5
