"""Stream editor: find every match and replace it with the editor's output.

Unmatched spans pass through verbatim; each Matched value goes through the
editor and its return value takes the match's place. The pieces are joined
back into one sequence of the same type as the input.

Editors run strictly left to right, one match at a time, interleaved with
the scan. A pattern or editor that raises aborts the edit and nothing is
returned; the exception reaches the caller unchanged.
"""

from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING, Any

from recap._segments import Matched, Unmatched
from recap._separator import SeparatorInvariantError, separate

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from recap._segments import Segment
    from recap._types import AsyncEditor, Editor, Pattern, Tokens

logger = logging.getLogger(__name__)


def stream_edit[A](pattern: Pattern[A], editor: Editor[A], tokens: Tokens) -> Tokens:
    """Replace every match of ``pattern`` in ``tokens`` with ``editor(value)``.

    If no editor output differs from the text it replaces, the input object
    itself is returned.

    >>> from recap import Literal, stream_edit
    >>> stream_edit(Literal("foo"), lambda _: "bar", "xx foo yy foo zz")
    'xx bar yy bar zz'
    """
    splice = _Splice(tokens)
    for seg in _checked(separate(pattern, tokens), tokens):
        match seg:
            case Unmatched(text=text):
                splice.keep(text)
            case Matched(value=value):
                splice.replace(seg, editor(value))
    return splice.result()


async def stream_edit_async[A](
    pattern: Pattern[A], editor: AsyncEditor[A], tokens: Tokens
) -> Tokens:
    """Effectful stream editor.

    ``editor`` may return tokens or an awaitable of tokens. Awaitables are
    awaited one at a time in document order; the scan does not advance
    past a match until its replacement is ready.
    """
    splice = _Splice(tokens)
    for seg in _checked(separate(pattern, tokens), tokens):
        match seg:
            case Unmatched(text=text):
                splice.keep(text)
            case Matched(value=value):
                out = editor(value)
                if inspect.isawaitable(out):
                    out = await out
                splice.replace(seg, out)
    return splice.result()


class _Splice:
    """Accumulates output pieces for one edit."""

    __slots__ = ("_tokens", "_pieces", "_matches", "_edits")

    def __init__(self, tokens: Tokens) -> None:
        self._tokens = tokens
        self._pieces: list[Any] = []
        self._matches = 0
        self._edits = 0

    def keep(self, text: Tokens) -> None:
        self._pieces.append(text)

    def replace(self, seg: Matched[Any], out: Tokens) -> None:
        self._matches += 1
        if out != seg.span(self._tokens):
            self._edits += 1
        self._pieces.append(out)

    def result(self) -> Tokens:
        logger.debug(
            "stream edit: %d matches, %d edited, %d tokens in",
            self._matches,
            self._edits,
            len(self._tokens),
        )
        if not self._edits:
            return self._tokens
        return self._tokens[:0].join(self._pieces)


def _checked[A](segments: Iterable[Segment[A]], tokens: Tokens) -> Iterator[Segment[A]]:
    """Pass segments through, asserting they tile the input exactly."""
    expected = 0
    previous: Segment[A] | None = None
    for seg in segments:
        stop = seg.stop
        if seg.start != expected or stop <= seg.start:
            msg = (
                f"separator produced {seg!r} covering [{seg.start}, {stop}) "
                f"where offset {expected} was expected"
            )
            raise SeparatorInvariantError(msg)
        if isinstance(seg, Unmatched) and isinstance(previous, Unmatched):
            msg = f"separator produced adjacent unmatched spans at offset {seg.start}"
            raise SeparatorInvariantError(msg)
        expected = stop
        previous = seg
        yield seg
    if expected != len(tokens):
        msg = f"separator stopped at offset {expected} of {len(tokens)}"
        raise SeparatorInvariantError(msg)
