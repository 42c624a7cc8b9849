"""Test utilities for recap.

Provides small patterns and editors that reduce boilerplate in tests and
examples. These are NOT general-purpose building blocks. Real callers
bring their own Pattern implementations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from recap._patterns import Run

if TYPE_CHECKING:
    from collections.abc import Callable

    from recap._registry import RegistryBuilder
    from recap._types import Pattern, Tokens


@dataclass(frozen=True, slots=True)
class ScanOnly[A]:
    """Expose only ``scan`` of the wrapped pattern.

    Hides any ``search`` method, so the separator falls back to probing
    every offset. Comparing results with and without the wrapper checks
    a fast path against the reference loop.
    """

    pattern: Pattern[A]

    def scan(self, tokens: Tokens, offset: int, /) -> tuple[int, A] | None:
        return self.pattern.scan(tokens, offset)


@dataclass(slots=True)
class Recorder[A]:
    """Editor that remembers every value it is handed, in call order.

    >>> from recap import Literal, stream_edit
    >>> from recap.testing import Recorder
    >>> rec = Recorder(lambda v: v.upper())
    >>> stream_edit(Literal("a"), rec, "banana")
    'bAnAnA'
    >>> rec.seen
    ['a', 'a', 'a']
    """

    fn: Callable[[A], Tokens]
    seen: list[A] = field(default_factory=list)

    def __call__(self, value: A) -> Tokens:
        self.seen.append(value)
        return self.fn(value)


def _is_digit(token: Tokens) -> bool:
    return token.isdigit()


def digits(at_least: int = 1) -> Run:
    """A run of ASCII/Unicode digits (``at_least=0`` allows an empty run)."""
    return Run(_is_digit, at_least=at_least)


def register(builder: RegistryBuilder) -> RegistryBuilder:
    """Register the test-domain pattern types.

    Type URL: recap.test.v1.DigitRun
    Config field: { "at_least": 1 } (optional)
    """
    return builder.pattern("recap.test.v1.DigitRun", _digit_run_factory)


def _digit_run_factory(config: dict[str, Any]) -> Run:
    at_least = config.get("at_least", 1)
    if not isinstance(at_least, int) or isinstance(at_least, bool):
        msg = "DigitRun 'at_least' must be an integer"
        raise ValueError(msg)
    return digits(at_least)
