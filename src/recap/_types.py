"""Core protocols and type aliases for recap.

The type system has two ports:
- Pattern is the matching port: recognize one occurrence at an offset
- Editor is the rewriting port: map a matched value to replacement tokens

Both are structural (Protocol / Callable) so any object with the right
shape plugs in, from a literal matcher to a stateful closure.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Protocol, TypeVar, runtime_checkable

# The token sequence. A single token is a length-1 slice, so bytes tokens
# stay bytes rather than decaying to int.
type Tokens = str | bytes

A_co = TypeVar("A_co", covariant=True)


@runtime_checkable
class Pattern(Protocol[A_co]):
    """Recognize one occurrence of a pattern at an offset.

    Returns None on failure (nothing consumed), or ``(stop, value)`` where
    ``stop`` is the offset just past the consumed tokens.

    A result with ``stop <= offset`` is a zero-width success. The separator
    treats it exactly like a failure at that offset.
    """

    def scan(self, tokens: Tokens, offset: int, /) -> tuple[int, A_co] | None: ...


@runtime_checkable
class SearchablePattern(Pattern[A_co], Protocol[A_co]):
    """A Pattern that can also jump to its next candidate position.

    ``search`` returns the leftmost ``(start, stop, value)`` with
    ``start >= offset``, zero-width hits included, such that ``scan`` at
    ``start`` would return ``(stop, value)`` and ``scan`` fails (or is
    zero-width) at every offset in ``[offset, start)``.
    """

    def search(
        self, tokens: Tokens, offset: int, /
    ) -> tuple[int, int, A_co] | None: ...


type Searcher[A] = Callable[[int], tuple[int, int, A] | None]


@runtime_checkable
class IncrementalPattern(SearchablePattern[A_co], Protocol[A_co]):
    """A SearchablePattern that keeps state across searches of one input.

    ``searcher(tokens)`` returns a function answering ``search(tokens, offset)``
    for that one input. The separator asks with increasing offsets, so the
    function can resume where its previous answer left off instead of
    starting over.
    """

    def searcher(self, tokens: Tokens, /) -> Searcher[A_co]: ...


type Editor[A] = Callable[[A], Tokens]
type AsyncEditor[A] = Callable[[A], Tokens | Awaitable[Tokens]]
