"""Balanced bracket scanning used by every extractor in the parser."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List

PAIRS = (("(", ")"), ("[", "]"))


@dataclass(frozen=True)
class BracketGroup:
    match: str
    content: str
    start: int
    end: int


def find_bracket_groups(text: str, open_char: str, close_char: str) -> List[BracketGroup]:
    """Return the top-level ``open_char``/``close_char`` groups of ``text``.

    Nested groups of the same bracket type stay inside the parent's
    ``content`` with their delimiters. An opener that is never closed
    produces no group; a closer without an opener is ignored.
    """
    groups: List[BracketGroup] = []
    depth = 0
    start = -1
    content: List[str] = []
    for index, char in enumerate(text):
        if char == open_char:
            if depth == 0:
                start = index
                content = []
            else:
                content.append(char)
            depth += 1
        elif char == close_char:
            if depth == 0:
                continue
            depth -= 1
            if depth == 0:
                groups.append(
                    BracketGroup(
                        match=text[start : index + 1],
                        content="".join(content),
                        start=start,
                        end=index + 1,
                    )
                )
            else:
                content.append(char)
        elif depth > 0:
            content.append(char)
    return groups


def _splice(text: str, groups: List[BracketGroup], keep_content: bool) -> str:
    # work from the end so earlier offsets stay valid
    for group in reversed(groups):
        replacement = group.content if keep_content else ""
        text = text[: group.start] + replacement + text[group.end :]
    return text


def flatten_nested(content: str, open_char: str, close_char: str) -> str:
    """Replace each inner group of ``content`` by its bare content."""
    return _splice(content, find_bracket_groups(content, open_char, close_char), True)


def remove_bracket_groups(text: str, open_char: str, close_char: str) -> str:
    return _splice(text, find_bracket_groups(text, open_char, close_char), False).strip()


def split_outside_brackets(text: str, separators: Iterable[str] = ",;") -> List[str]:
    """Split ``text`` on separators that are not inside ``(...)`` or ``[...]``."""
    separators = set(separators)
    parts: List[str] = []
    current: List[str] = []
    paren_depth = 0
    square_depth = 0
    for char in text:
        if char == "(":
            paren_depth += 1
        elif char == ")":
            paren_depth -= 1
        elif char == "[":
            square_depth += 1
        elif char == "]":
            square_depth -= 1
        elif char in separators and paren_depth == 0 and square_depth == 0:
            part = "".join(current).strip()
            if part:
                parts.append(part)
            current = []
            continue
        current.append(char)
    part = "".join(current).strip()
    if part:
        parts.append(part)
    return parts


def has_unmatched_boundary_bracket(text: str) -> bool:
    """True when ``text`` opens or closes a bracket at its edge without the partner."""
    stripped = text.strip()
    for open_char, close_char in PAIRS:
        if stripped.startswith(open_char) and close_char not in stripped:
            return True
        if stripped.endswith(close_char) and open_char not in stripped:
            return True
    return False
