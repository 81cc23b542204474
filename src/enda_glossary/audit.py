"""Statistics over the rejected ``SEE:`` references of a run."""
from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List

import pandas as pd

from .errors import EntryShapeError
from .references import SIM_THRESHOLD, RejectedReference

BIN_WIDTH = 0.05
BORDERLINE_LIMIT = 20


def load_rejections(path: Path) -> List[RejectedReference]:
    records = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(records, list):
        raise EntryShapeError("expected a JSON array of rejected references")
    rejections = []
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            raise EntryShapeError("expected an object", index=index)
        for name in ("from", "to"):
            if not isinstance(record.get(name), str):
                raise EntryShapeError("expected a string", index=index, field=name)
        score = record.get("score")
        if not isinstance(score, (int, float)) or isinstance(score, bool):
            raise EntryShapeError("expected a number", index=index, field="score")
        rejections.append(RejectedReference(record["from"], record["to"], float(score)))
    return rejections


@dataclass
class RejectionSummary:
    count: int = 0
    mean: float = 0.0
    median: float = 0.0
    minimum: float = 0.0
    maximum: float = 0.0
    threshold: float = SIM_THRESHOLD
    histogram: Dict[str, int] = field(default_factory=dict)
    borderline: List[RejectedReference] = field(default_factory=list)


def histogram_bin(score: float) -> str:
    return f"{math.floor(score / BIN_WIDTH) * BIN_WIDTH:.2f}"


def summarize_rejections(
    rejections: List[RejectedReference], threshold: float = SIM_THRESHOLD
) -> RejectionSummary:
    if not rejections:
        return RejectionSummary(threshold=threshold)
    scores = pd.Series([item.score for item in rejections], dtype="float64")
    ordered = scores.sort_values(ignore_index=True)
    bins = scores.map(histogram_bin).value_counts()
    histogram = {key: int(bins[key]) for key in sorted(bins.index, key=float)}
    borderline = [
        item for item in rejections if threshold - BIN_WIDTH <= item.score < threshold
    ]
    return RejectionSummary(
        count=len(scores),
        mean=float(scores.mean()),
        # upper median, as the report has always shown it
        median=float(ordered.iloc[len(ordered) // 2]),
        minimum=float(ordered.iloc[0]),
        maximum=float(ordered.iloc[-1]),
        threshold=threshold,
        histogram=histogram,
        borderline=borderline,
    )


def format_summary(summary: RejectionSummary) -> str:
    if not summary.count:
        return "No rejected SEE entries found."
    lines = [
        "SEE Rejection Stats",
        "---------------------",
        f"Count: {summary.count}",
        f"Avg similarity: {summary.mean:.3f}",
        f"Median: {summary.median:.3f}",
        f"Min: {summary.minimum:.3f}, Max: {summary.maximum:.3f}",
        f"Threshold: {summary.threshold}",
        "",
        f"Histogram (bin width = {BIN_WIDTH}):",
    ]
    for bin_label, count in summary.histogram.items():
        bar = "█" * min(30, round(count / summary.count * 200))
        lines.append(f"{bin_label:<4} | {bar} {count}")
    lines.append("")
    if summary.borderline:
        lines.append(f"Borderline rejections (within {BIN_WIDTH} of threshold):")
        for item in summary.borderline[:BORDERLINE_LIMIT]:
            lines.append(f"  {item.source} → {item.target}  (sim={item.score:.3f})")
        lines.append(f"...and {max(0, len(summary.borderline) - BORDERLINE_LIMIT)} more")
    else:
        lines.append("No borderline rejections found.")
    return "\n".join(lines)
