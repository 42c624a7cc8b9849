"""Separator: split a token sequence into unmatched spans and matches.

The scan walks the input left to right. At each offset the pattern is
attempted once:
- a success that consumes tokens closes the pending unmatched run and
  emits a Matched segment
- a failure, or a success that consumes nothing, extends the pending
  unmatched run by exactly one token

INV: Total: every token lands in exactly one segment; the separator never fails.
INV: No zero-width matches: a pattern must consume to produce a Matched.
INV: Coalesced: two Unmatched segments are never adjacent.

Patterns that implement ``search`` take a fast path that jumps straight to
the next candidate start instead of probing every offset. Both paths emit
identical segments.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING

from recap._segments import Matched, Unmatched
from recap._types import IncrementalPattern, SearchablePattern

if TYPE_CHECKING:
    from collections.abc import Iterator

    from recap._segments import Segment
    from recap._types import Pattern, Searcher, Tokens


class RecapError(Exception):
    """Base class for recap errors."""


class PatternContractError(RecapError):
    """A pattern reported a result outside the input it was given."""

    def __init__(self, pattern: object, offset: int, position: int, length: int) -> None:
        self.pattern = pattern
        self.offset = offset
        self.position = position
        self.length = length
        super().__init__(
            f"{pattern!r} at offset {offset} reported position {position}, "
            f"outside [{offset}, {length}]"
        )


class SeparatorInvariantError(AssertionError):
    """The separator produced an impossible result.

    Separation is total, so this is never raised for a well-formed pattern.
    Seeing it means the coverage invariant itself is broken.
    """


def separate[A](
    pattern: Pattern[A], tokens: Tokens, offset: int = 0
) -> Iterator[Segment[A]]:
    """Lazily separate ``tokens[offset:]`` into segments.

    Empty input yields nothing. Patterns are attempted in document order,
    interleaved with consumption of the returned iterator.

    Raises:
        ValueError: If offset is outside the input.
        PatternContractError: If the pattern reports a stop past the end.
    """
    if not 0 <= offset <= len(tokens):
        msg = f"offset {offset} out of range for input of length {len(tokens)}"
        raise ValueError(msg)
    if isinstance(pattern, SearchablePattern):
        return _separate_searching(pattern, tokens, offset)
    return _separate_scanning(pattern, tokens, offset)


def search[A](
    pattern: Pattern[A], tokens: Tokens, offset: int
) -> tuple[int, int, A] | None:
    """Find the leftmost offset at or after ``offset`` where ``pattern`` succeeds.

    Delegates to the pattern's own ``search`` when it has one, otherwise
    tries ``scan`` at each offset. Zero-width hits are returned as-is.
    """
    if isinstance(pattern, SearchablePattern):
        return pattern.search(tokens, offset)
    for start in range(offset, len(tokens)):
        hit = pattern.scan(tokens, start)
        if hit is not None:
            stop, value = hit
            return start, stop, value
    return None


def searcher[A](pattern: Pattern[A], tokens: Tokens) -> Searcher[A]:
    """Return a function answering ``search(pattern, tokens, offset)``.

    Incremental patterns hand back their own stateful searcher; anything
    else gets a plain call to ``search`` per offset.
    """
    if isinstance(pattern, IncrementalPattern):
        return pattern.searcher(tokens)
    return partial(search, pattern, tokens)


@dataclass(frozen=True, slots=True)
class SepCap[A]:
    """Separate-and-capture as a pattern.

    Scanning always succeeds and always consumes the rest of the input,
    returning the list of segments as its value. Being a Pattern itself,
    it composes with anything that accepts one.
    """

    pattern: Pattern[A]

    def scan(self, tokens: Tokens, offset: int, /) -> tuple[int, list[Segment[A]]]:
        return len(tokens), list(separate(self.pattern, tokens, offset))

    def segments(self, tokens: Tokens) -> list[Segment[A]]:
        """Separate the whole input eagerly."""
        _, segments = self.scan(tokens, 0)
        return segments


def sep_cap[A](pattern: Pattern[A]) -> SepCap[A]:
    """Build the separate-and-capture pattern for ``pattern``.

    >>> from recap import Literal, sep_cap
    >>> sep_cap(Literal("foo")).segments("xx foo yy")
    [Unmatched(text='xx ', start=0), Matched(value='foo', start=3, stop=6), Unmatched(text=' yy', start=6)]
    """
    return SepCap(pattern)


# ── Scan loops ──────────────────────────────────────────────────────────────


def _separate_scanning[A](
    pattern: Pattern[A], tokens: Tokens, offset: int
) -> Iterator[Segment[A]]:
    """Reference loop: attempt the pattern at every offset."""
    end = len(tokens)
    pending = pos = offset
    while pos < end:
        hit = pattern.scan(tokens, pos)
        if hit is not None:
            stop, value = hit
            if stop > pos:
                _check_stop(pattern, pos, stop, end)
                if pending < pos:
                    yield Unmatched(tokens[pending:pos], pending)
                yield Matched(value, pos, stop)
                pending = pos = stop
                continue
        pos += 1
    if pending < end:
        yield Unmatched(tokens[pending:end], pending)


def _separate_searching[A](
    pattern: SearchablePattern[A], tokens: Tokens, offset: int
) -> Iterator[Segment[A]]:
    """Fast loop: let the pattern locate its next candidate start."""
    end = len(tokens)
    find = searcher(pattern, tokens)
    pending = pos = offset
    while pos < end:
        hit = find(pos)
        if hit is None:
            break
        start, stop, value = hit
        if start < pos:
            raise PatternContractError(pattern, pos, start, end)
        if start >= end:
            break
        if stop <= start:
            # zero-width: the token at start is unmatched
            pos = start + 1
            continue
        _check_stop(pattern, start, stop, end)
        if pending < start:
            yield Unmatched(tokens[pending:start], pending)
        yield Matched(value, start, stop)
        pending = pos = stop
    if pending < end:
        yield Unmatched(tokens[pending:end], pending)


def _check_stop(pattern: object, offset: int, stop: int, end: int) -> None:
    if stop > end:
        raise PatternContractError(pattern, offset, stop, end)
