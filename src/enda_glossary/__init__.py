"""English–Danish dictionary builder for Wiktionary glossary dumps."""
from .entries import DictionaryEntry, SeeReference, build_entries
from .fields import extract_fields
from .pipeline import RunResult, parse_lines, run_pipeline
from .references import resolve_references
from .shuffle import seeded_shuffle

__all__ = [
    "DictionaryEntry",
    "RunResult",
    "SeeReference",
    "build_entries",
    "extract_fields",
    "parse_lines",
    "resolve_references",
    "run_pipeline",
    "seeded_shuffle",
]
