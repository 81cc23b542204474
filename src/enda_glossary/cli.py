"""Build an English–Danish JSON dictionary from a Wiktionary glossary dump."""
from __future__ import annotations

import argparse
import json
import logging
import sys
import uuid
from pathlib import Path
from typing import Optional, Sequence

from .audit import format_summary, load_rejections, summarize_rejections
from .config import PipelineConfig, ToxicityConfig
from .entries import entries_from_json
from .errors import GlossaryError
from .pipeline import run_pipeline, write_artifacts
from .quality import QUALITY_MODEL
from .references import SIM_THRESHOLD, SentenceTransformerScorer
from .toxicity import SafetyReviewer, run_toxicity_filter
from .validation import SAMPLE_SIZE, flag_entries, sample_entries, score_sample

LOGGER = logging.getLogger(__name__)

COMMANDS = ("build", "analyze-see", "validate-structure", "sample", "validate-sample", "filter-offensive")


def read_entries(path: Path):
    return entries_from_json(json.loads(path.read_text(encoding="utf-8")))


def cmd_build(args: argparse.Namespace) -> None:
    config = PipelineConfig.from_env(
        input_path=args.input,
        output_path=args.output,
        shuffled_output_path=args.shuffled_output,
        originals_output_path=args.originals_output,
        rejected_see_path=args.rejected_see,
        semantic_rejects_path=args.semantic_rejects,
        shuffle_seed=args.seed,
        similarity_threshold=args.similarity_threshold,
        validate_semantics=True if args.validate_semantics else None,
        explanation_words_path=args.explanation_words,
    )
    result = run_pipeline(config)
    LOGGER.info("Run summary: %s", json.dumps(result.summary(), ensure_ascii=False))


def cmd_analyze_see(args: argparse.Namespace) -> None:
    if not args.input.exists():
        raise SystemExit(f"File not found: {args.input}")
    summary = summarize_rejections(load_rejections(args.input), args.threshold)
    print(format_summary(summary))


def cmd_validate_structure(args: argparse.Namespace) -> None:
    flagged = flag_entries(read_entries(args.input))
    write_artifacts([(args.output, flagged)])


def cmd_sample(args: argparse.Namespace) -> None:
    seed = args.seed or str(uuid.uuid4())
    sample = sample_entries(read_entries(args.input), seed, args.size)
    write_artifacts([(args.output, [entry.to_dict(with_source=True) for entry in sample])])
    LOGGER.info("Wrote %d entries to %s", len(sample), args.output)
    LOGGER.info("Seed used: %s", seed)


def cmd_validate_sample(args: argparse.Namespace) -> None:
    report = score_sample(read_entries(args.input), SentenceTransformerScorer(args.model))
    write_artifacts([(args.output, report.results)])
    for row in report.flagged[:10]:
        LOGGER.info("Possible mistranslation: %s → %s (sim=%.3f)", row["headword"], row["translation"], row["score"])


def cmd_filter_offensive(args: argparse.Namespace) -> None:
    config = ToxicityConfig(input_path=args.input, output_dir=args.output_dir)
    reviewer = None
    if args.review:
        reviewer = SafetyReviewer(config.reviewer_url, config.reviewer_api_key, config.reviewer_model)
    run_toxicity_filter(config, reviewer=reviewer)


def add_log_level(parser: argparse.ArgumentParser, default: object) -> None:
    parser.add_argument(
        "--log-level",
        default=default,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__)
    add_log_level(parser, "INFO")
    # subcommands accept --log-level too without overriding the top-level value
    common = argparse.ArgumentParser(add_help=False)
    add_log_level(common, argparse.SUPPRESS)
    commands = parser.add_subparsers(dest="command")

    build = commands.add_parser(
        "build", parents=[common], help="Parse the glossary and write the dictionary files"
    )
    build.add_argument("--input", type=Path, default=None, help="Glossary text file")
    build.add_argument("--output", type=Path, default=None, help="Public dictionary JSON")
    build.add_argument("--shuffled-output", type=Path, default=None, help="Shuffled dictionary JSON")
    build.add_argument("--originals-output", type=Path, default=None, help="Dictionary JSON with source lines")
    build.add_argument("--rejected-see", type=Path, default=None, help="Audit file for rejected SEE references")
    build.add_argument("--semantic-rejects", type=Path, default=None, help="Audit file for the quality filter")
    build.add_argument("--seed", type=str, default=None, help="Shuffle seed")
    build.add_argument(
        "--similarity-threshold",
        type=float,
        default=None,
        help=f"Minimum headword similarity for SEE expansion (default {SIM_THRESHOLD})",
    )
    build.add_argument(
        "--validate-semantics",
        action="store_true",
        help="Drop entries whose headword and translation are semantically far apart",
    )
    build.add_argument(
        "--explanation-words",
        type=Path,
        default=None,
        help="File with one English explanation word per line",
    )
    build.set_defaults(handler=cmd_build)

    analyze = commands.add_parser("analyze-see", parents=[common], help="Summarize rejected SEE references")
    analyze.add_argument("--input", type=Path, default=Path("validations/see-rejected.json"))
    analyze.add_argument("--threshold", type=float, default=SIM_THRESHOLD)
    analyze.set_defaults(handler=cmd_analyze_see)

    structure = commands.add_parser("validate-structure", parents=[common], help="Flag structurally suspicious entries")
    structure.add_argument("--input", type=Path, default=Path("data/data-clean.json"))
    structure.add_argument("--output", type=Path, default=Path("validations/sus-entries.json"))
    structure.set_defaults(handler=cmd_validate_structure)

    sample = commands.add_parser("sample", parents=[common], help="Draw a seeded validation sample")
    sample.add_argument("--input", type=Path, default=Path("validations/data-originals.json"))
    sample.add_argument("--output", type=Path, default=Path("validations/validation-sample.json"))
    sample.add_argument("--seed", type=str, default=None, help="Random when omitted")
    sample.add_argument("--size", type=int, default=SAMPLE_SIZE)
    sample.set_defaults(handler=cmd_sample)

    scored = commands.add_parser("validate-sample", parents=[common], help="Score a validation sample by similarity")
    scored.add_argument("--input", type=Path, default=Path("validations/validation-sample.json"))
    scored.add_argument("--output", type=Path, default=Path("validations/validation-report.json"))
    scored.add_argument("--model", type=str, default=QUALITY_MODEL)
    scored.set_defaults(handler=cmd_validate_sample)

    offensive = commands.add_parser("filter-offensive", parents=[common], help="Remove toxic entries")
    offensive.add_argument("--input", type=Path, default=Path("data/data.json"))
    offensive.add_argument("--output-dir", type=Path, default=Path("data"))
    offensive.add_argument(
        "--review",
        action="store_true",
        help="Ask the chat-completions endpoint to restore safe removed entries",
    )
    offensive.set_defaults(handler=cmd_filter_offensive)
    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    argv = list(sys.argv[1:] if argv is None else argv)
    if not any(arg in COMMANDS for arg in argv) and "-h" not in argv and "--help" not in argv:
        argv.insert(0, "build")
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level), format="%(levelname)s %(message)s"
    )
    return args


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    try:
        args.handler(args)
    except GlossaryError as exc:
        raise SystemExit(f"Parsing failed: {exc}") from exc


if __name__ == "__main__":
    main()
