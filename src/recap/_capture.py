"""Capture: patterns that also report the tokens they consumed.

find_all_cap and find_all are separate-and-capture over a capturing
wrapper; they add no scanning logic of their own.
"""

from __future__ import annotations

from dataclasses import dataclass
from operator import itemgetter
from typing import TYPE_CHECKING

from recap._patterns import Mapped
from recap._separator import SepCap, search, searcher, sep_cap

if TYPE_CHECKING:
    from recap._types import Pattern, Searcher, Tokens


@dataclass(frozen=True, slots=True)
class Captured[A]:
    """Pair a pattern's value with the slice of input it consumed.

    The value becomes ``(consumed, value)``. An editor that returns
    ``consumed`` unchanged leaves the input exactly as it was.
    """

    pattern: Pattern[A]

    def scan(self, tokens: Tokens, offset: int, /) -> tuple[int, tuple[Tokens, A]] | None:
        hit = self.pattern.scan(tokens, offset)
        if hit is None:
            return None
        stop, value = hit
        return stop, (tokens[offset:stop], value)

    def search(
        self, tokens: Tokens, offset: int, /
    ) -> tuple[int, int, tuple[Tokens, A]] | None:
        return _capture_hit(search(self.pattern, tokens, offset), tokens)

    def searcher(self, tokens: Tokens, /) -> Searcher[tuple[Tokens, A]]:
        find = searcher(self.pattern, tokens)
        return lambda offset: _capture_hit(find(offset), tokens)


def _capture_hit[A](
    hit: tuple[int, int, A] | None, tokens: Tokens
) -> tuple[int, int, tuple[Tokens, A]] | None:
    if hit is None:
        return None
    start, stop, value = hit
    return start, stop, (tokens[start:stop], value)


def captured[A](pattern: Pattern[A]) -> Captured[A]:
    """Wrap ``pattern`` so its value also carries the consumed slice."""
    return Captured(pattern)


def find_all_cap[A](pattern: Pattern[A]) -> SepCap[tuple[Tokens, A]]:
    """Separate-and-capture where each match carries ``(consumed, value)``."""
    return sep_cap(Captured(pattern))


def find_all[A](pattern: Pattern[A]) -> SepCap[Tokens]:
    """Separate-and-capture where each match carries only the consumed slice."""
    return sep_cap(Mapped(Captured(pattern), itemgetter(0)))
