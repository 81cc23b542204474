"""Seeded, reproducible shuffling of the final entry list.

The generator is xmur3 (string hash) feeding sfc32, with the same
constants and 32-bit arithmetic as the JavaScript build of the
dictionary, so a given seed produces the same order in both.
"""
from __future__ import annotations

from typing import Callable, Iterator, List, Sequence, TypeVar

T = TypeVar("T")

MASK32 = 0xFFFFFFFF
DEFAULT_SEED = "danskify-v1"


def _imul(a: int, b: int) -> int:
    return (a * b) & MASK32


def _rotl(value: int, bits: int) -> int:
    value &= MASK32
    return ((value << bits) | (value >> (32 - bits))) & MASK32


def _code_units(text: str) -> Iterator[int]:
    data = text.encode("utf-16-le")
    for index in range(0, len(data), 2):
        yield data[index] | (data[index + 1] << 8)


def xmur3(seed: str) -> Callable[[], int]:
    units = list(_code_units(seed))
    h = (1779033703 ^ len(units)) & MASK32
    for unit in units:
        h = _imul(h ^ unit, 3432918353)
        h = _rotl(h, 13)

    def next_word() -> int:
        nonlocal h
        h = _imul(h ^ (h >> 16), 2246822507)
        h = _imul(h ^ (h >> 13), 3266489909)
        h ^= h >> 16
        return h

    return next_word


def sfc32(a: int, b: int, c: int, d: int) -> Callable[[], float]:
    state = [a & MASK32, b & MASK32, c & MASK32, d & MASK32]

    def random() -> float:
        a, b, c, d = state
        t = (a + b) & MASK32
        a = b ^ (b >> 9)
        b = (c + (c << 3)) & MASK32
        c = _rotl(c, 21)
        d = (d + 1) & MASK32
        t = (t + d) & MASK32
        c = (c + t) & MASK32
        state[:] = [a, b, c, d]
        return t / 4294967296

    return random


def seeded_random(seed: str) -> Callable[[], float]:
    words = xmur3(seed)
    return sfc32(words(), words(), words(), words())


def seeded_shuffle(items: Sequence[T], seed: str = DEFAULT_SEED) -> List[T]:
    """Fisher-Yates shuffle of a copy of ``items`` driven by ``seed``."""
    rand = seeded_random(seed)
    shuffled = list(items)
    for index in range(len(shuffled) - 1, 0, -1):
        other = int(rand() * (index + 1))
        shuffled[index], shuffled[other] = shuffled[other], shuffled[index]
    return shuffled
