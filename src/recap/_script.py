"""Script: an ordered set of edit rules applied in one pass.

Rules combine into a single first-match-wins pattern, so at every offset
the first rule that matches claims the text and the scan moves past it.
Output of one rule is never rescanned by another.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import partial
from typing import TYPE_CHECKING, Any

from recap._capture import Captured
from recap._editor import stream_edit
from recap._patterns import Choice, Mapped
from recap._segments import Matched
from recap._separator import sep_cap

if TYPE_CHECKING:
    from recap._types import Pattern, Tokens


@dataclass(frozen=True, slots=True)
class Rule:
    """A pattern and its replacement. A replacement of None keeps the match."""

    pattern: Pattern[Any]
    replacement: Tokens | None = None


@dataclass(frozen=True, slots=True)
class Script:
    """Runnable edit script, usually built by Registry.load_script()."""

    rules: tuple[Rule, ...]
    _pattern: Choice[tuple[Rule, Tokens]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        tagged = tuple(
            Mapped(Captured(rule.pattern), partial(_tag, rule)) for rule in self.rules
        )
        object.__setattr__(self, "_pattern", Choice(tagged))

    def apply(self, tokens: Tokens) -> Tokens:
        """Run every rule over ``tokens`` and return the edited result."""
        return stream_edit(self._pattern, _rewrite, tokens)

    def find(self, tokens: Tokens) -> list[Tokens]:
        """Return the text of every match, in document order."""
        return [
            seg.value[1]
            for seg in sep_cap(self._pattern).segments(tokens)
            if isinstance(seg, Matched)
        ]


def _tag(rule: Rule, capture: tuple[Tokens, Any]) -> tuple[Rule, Tokens]:
    return rule, capture[0]


def _rewrite(tagged: tuple[Rule, Tokens]) -> Tokens:
    rule, consumed = tagged
    if rule.replacement is None:
        return consumed
    return rule.replacement
