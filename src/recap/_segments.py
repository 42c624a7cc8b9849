"""Segments: the tagged output of the separator.

A separated input is a sequence of Unmatched spans and Matched values.
Concatenating the segments in order, rendering each Matched back to the
tokens it consumed, reproduces the input exactly once.

The Segment union type is pattern-matchable via match/case.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from recap._types import Tokens


@dataclass(frozen=True, slots=True)
class Unmatched:
    """A run of input the pattern did not recognize.

    ``text`` is the slice itself; ``start`` records where it began in the
    source. Offsets do not take part in equality.
    """

    text: Tokens
    start: int = field(default=0, compare=False)

    @property
    def stop(self) -> int:
        return self.start + len(self.text)

    def span(self, tokens: Tokens) -> Tokens:
        """The source tokens this segment covers."""
        return self.text


@dataclass(frozen=True, slots=True)
class Matched[A]:
    """One occurrence of the pattern.

    ``value`` is whatever the pattern returned; ``[start, stop)`` is the
    range it consumed. Offsets do not take part in equality.

    INV: stop > start (zero-width matches are never emitted).
    """

    value: A
    start: int = field(default=0, compare=False)
    stop: int = field(default=0, compare=False)

    def span(self, tokens: Tokens) -> Tokens:
        """The source tokens this match consumed."""
        return tokens[self.start : self.stop]


type Segment[A] = Unmatched | Matched[A]


def render(segments: Iterable[Segment[object]], tokens: Tokens) -> Tokens:
    """Reassemble the source from its segments.

    The inverse of separation: ``render(separate(p, s), s) == s``.
    """
    return tokens[:0].join(seg.span(tokens) for seg in segments)  # type: ignore[arg-type]
