"""Concrete patterns implementing the Pattern protocol.

Each pattern is a frozen dataclass, immutable after construction, and
works over both ``str`` and ``bytes`` input. Feeding a ``str`` pattern a
``bytes`` input (or the reverse) raises TypeError rather than silently
never matching.

Regex uses ``google-re2`` for guaranteed linear-time matching. RE2 does not
support backreferences or lookahead/lookbehind because they require
backtracking, so patterns using them are rejected at compile time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import partial
from typing import TYPE_CHECKING, Any

import re2

from recap._separator import RecapError, search, searcher
from recap._types import SearchablePattern

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from recap._types import Pattern, Searcher, Tokens


class PatternError(RecapError):
    """Errors from pattern construction."""


def _check_kind(pattern: Tokens, tokens: Tokens) -> None:
    if isinstance(tokens, str) is not isinstance(pattern, str):
        msg = (
            f"cannot match a {type(pattern).__name__} pattern "
            f"against {type(tokens).__name__} input"
        )
        raise TypeError(msg)


@dataclass(frozen=True, slots=True)
class Literal:
    """Exact token sequence match.

    When ignore_case is True, comparison is case-insensitive.
    The literal is pre-lowercased at construction time.
    The value is the matched slice of input, in its original case.

    An empty literal only ever matches zero-width, so it never produces
    a match under the separator.
    """

    value: Tokens
    ignore_case: bool = False
    _cmp_value: Tokens = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.value, str | bytes):
            msg = f"literal must be str or bytes, got {type(self.value).__name__}"
            raise PatternError(msg)
        object.__setattr__(
            self, "_cmp_value", self.value.lower() if self.ignore_case else self.value
        )

    def scan(self, tokens: Tokens, offset: int, /) -> tuple[int, Tokens] | None:
        _check_kind(self.value, tokens)
        stop = offset + len(self.value)
        chunk = tokens[offset:stop]
        cmp_chunk = chunk.lower() if self.ignore_case else chunk
        if cmp_chunk != self._cmp_value:
            return None
        return stop, chunk

    def search(
        self, tokens: Tokens, offset: int, /
    ) -> tuple[int, int, Tokens] | None:
        _check_kind(self.value, tokens)
        if self.ignore_case:
            # lowering can change lengths, so try offset by offset
            for start in range(offset, len(tokens)):
                hit = self.scan(tokens, start)
                if hit is not None:
                    return start, hit[0], hit[1]
            return None
        start = tokens.find(self.value, offset)  # type: ignore[arg-type]
        if start < 0:
            return None
        stop = start + len(self.value)
        return start, stop, tokens[start:stop]


@dataclass(frozen=True, slots=True)
class Regex:
    """Regular expression match anchored at the scan offset.

    The pattern is compiled at construction time via ``google-re2``.
    The value is the RE2 match object, so editors can reach groups.

    Raises:
        PatternError: If the pattern is not valid RE2 syntax.
    """

    pattern: Tokens
    ignore_case: bool = False
    _compiled: Any = field(init=False, repr=False)

    def __post_init__(self) -> None:
        source = self.pattern
        if self.ignore_case:
            source = (b"(?i)" if isinstance(source, bytes) else "(?i)") + source
        try:
            compiled = re2.compile(source)
        except re2.error as e:
            msg = f"invalid regex pattern {self.pattern!r}: {e}"
            raise PatternError(msg) from e
        object.__setattr__(self, "_compiled", compiled)

    def scan(self, tokens: Tokens, offset: int, /) -> tuple[int, Any] | None:
        _check_kind(self.pattern, tokens)
        m = self._compiled.match(tokens, offset)
        if m is None:
            return None
        return m.end(), m

    def search(self, tokens: Tokens, offset: int, /) -> tuple[int, int, Any] | None:
        _check_kind(self.pattern, tokens)
        m = self._compiled.search(tokens, offset)
        if m is None:
            return None
        return m.start(), m.end(), m

    def searcher(self, tokens: Tokens, /) -> Searcher[Any]:
        _check_kind(self.pattern, tokens)
        return _RegexCursor(self._compiled, tokens)


class _RegexCursor:
    """Answer successive searches of one input from a single finditer pass.

    Each ``search`` call on ``str`` input re-encodes the whole text, so
    asking once per match is quadratic. finditer encodes once and resumes
    where its last match ended, which is exactly where the separator asks
    next. An offset the iterator has already stepped over restarts it.

    INV: the iterator last searched from ``_resumed``; ``_pending`` is its
    next match (None when exhausted). Matches starting before the asked
    offset are stepped over, which also drops an empty match finditer
    reports twice.
    """

    __slots__ = ("_compiled", "_tokens", "_matches", "_pending", "_resumed")

    def __init__(self, compiled: Any, tokens: Tokens) -> None:
        self._compiled = compiled
        self._tokens = tokens
        self._matches: Iterator[Any] | None = None
        self._pending: Any = None
        self._resumed = 0

    def __call__(self, offset: int) -> tuple[int, int, Any] | None:
        if self._matches is None or offset < self._resumed:
            self._restart(offset)
        while self._pending is not None and self._pending.start() < offset:
            m = self._pending
            resume = m.end() if m.end() > m.start() else m.start() + 1
            if resume > offset:
                self._restart(offset)
                break
            self._resumed = resume
            self._pending = next(self._matches, None)
        m = self._pending
        if m is None:
            return None
        return m.start(), m.end(), m

    def _restart(self, offset: int) -> None:
        self._matches = self._compiled.finditer(self._tokens, offset)
        self._pending = next(self._matches, None)
        self._resumed = offset


@dataclass(frozen=True, slots=True)
class Run:
    """A run of tokens that each satisfy a predicate.

    The predicate receives one token as a length-1 slice (``"7"`` or
    ``b"7"``), so ``str.isdigit`` and ``bytes.isdigit`` work directly.
    The run is greedy, bounded by ``at_most`` when given, and fails if
    shorter than ``at_least``. The value is the consumed slice.

    With ``at_least=0`` the run can succeed without consuming anything;
    the separator rejects those zero-width successes.
    """

    predicate: Callable[[Tokens], bool]
    at_least: int = 1
    at_most: int | None = None

    def __post_init__(self) -> None:
        if self.at_least < 0:
            msg = f"at_least must be >= 0, got {self.at_least}"
            raise PatternError(msg)
        if self.at_most is not None and self.at_most < self.at_least:
            msg = f"at_most ({self.at_most}) must be >= at_least ({self.at_least})"
            raise PatternError(msg)

    def scan(self, tokens: Tokens, offset: int, /) -> tuple[int, Tokens] | None:
        limit = len(tokens)
        if self.at_most is not None:
            limit = min(limit, offset + self.at_most)
        pos = offset
        while pos < limit and self.predicate(tokens[pos : pos + 1]):
            pos += 1
        if pos - offset < self.at_least:
            return None
        return pos, tokens[offset:pos]


@dataclass(frozen=True, slots=True)
class Choice[A]:
    """Ordered alternatives with first-success-wins semantics.

    Alternatives are tried in order at the same offset and the first one
    that succeeds decides the result, even when that success is zero-width
    (later alternatives are never consulted at that offset).
    """

    alternatives: tuple[Pattern[A], ...]

    def scan(self, tokens: Tokens, offset: int, /) -> tuple[int, A] | None:
        for alt in self.alternatives:
            hit = alt.scan(tokens, offset)
            if hit is not None:
                return hit
        return None

    def search(self, tokens: Tokens, offset: int, /) -> tuple[int, int, A] | None:
        return self.searcher(tokens)(offset)

    def searcher(self, tokens: Tokens, /) -> Searcher[A]:
        """Search all alternatives, or decide offset by offset.

        When every alternative can search, the leftmost hit wins. When one
        can only scan, each offset is decided in turn the same way ``scan``
        decides it, and the scan-only alternative is never run ahead of it.
        """
        finds = [
            _LastHit(searcher(alt, tokens)) if isinstance(alt, SearchablePattern) else None
            for alt in self.alternatives
        ]
        if all(find is not None for find in finds):
            return partial(_leftmost, finds)
        return partial(_first_at_each_offset, self.alternatives, finds, tokens)


class _LastHit:
    """Reuse a searcher's previous answer while it is still the leftmost hit."""

    __slots__ = ("_find", "_asked", "_hit")

    def __init__(self, find: Searcher[Any]) -> None:
        self._find = find
        self._asked = -1
        self._hit: tuple[int, int, Any] | None = None

    def __call__(self, offset: int) -> tuple[int, int, Any] | None:
        hit = self._hit
        if self._asked < 0 or offset < self._asked or (hit is not None and hit[0] < offset):
            hit = self._hit = self._find(offset)
            self._asked = offset
        return hit


def _leftmost(finds: list[_LastHit], offset: int) -> tuple[int, int, Any] | None:
    best: tuple[int, int, Any] | None = None
    for find in finds:
        hit = find(offset)
        # strict < keeps the earliest alternative on ties
        if hit is not None and (best is None or hit[0] < best[0]):
            best = hit
            if best[0] == offset:
                break
    return best


def _first_at_each_offset(
    alternatives: tuple[Pattern[Any], ...],
    finds: list[_LastHit | None],
    tokens: Tokens,
    offset: int,
) -> tuple[int, int, Any] | None:
    for pos in range(offset, len(tokens)):
        for alt, find in zip(alternatives, finds, strict=True):
            if find is None:
                hit = alt.scan(tokens, pos)
                if hit is not None:
                    return pos, hit[0], hit[1]
            else:
                found = find(pos)
                # a searcher's hit at pos is what scan at pos would return
                if found is not None and found[0] == pos:
                    return found
    return None


@dataclass(frozen=True, slots=True)
class Mapped[A, B]:
    """Transform the value of a pattern without changing what it consumes."""

    pattern: Pattern[A]
    fn: Callable[[A], B]

    def scan(self, tokens: Tokens, offset: int, /) -> tuple[int, B] | None:
        hit = self.pattern.scan(tokens, offset)
        if hit is None:
            return None
        stop, value = hit
        return stop, self.fn(value)

    def search(self, tokens: Tokens, offset: int, /) -> tuple[int, int, B] | None:
        return _map_hit(search(self.pattern, tokens, offset), self.fn)

    def searcher(self, tokens: Tokens, /) -> Searcher[B]:
        find = searcher(self.pattern, tokens)
        return lambda offset: _map_hit(find(offset), self.fn)


def _map_hit[A, B](
    hit: tuple[int, int, A] | None, fn: Callable[[A], B]
) -> tuple[int, int, B] | None:
    if hit is None:
        return None
    start, stop, value = hit
    return start, stop, fn(value)
