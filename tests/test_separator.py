"""Tests for separate / sep_cap and the segment invariants."""

from __future__ import annotations

import time
from collections import Counter
from dataclasses import dataclass, field

import pytest
from conftest import segment_shape

from recap import (
    Choice,
    Literal,
    Matched,
    PatternContractError,
    Regex,
    Rule,
    Run,
    Script,
    Unmatched,
    render,
    sep_cap,
    separate,
)
from recap.testing import ScanOnly, digits

FOO = Literal("foo")


@dataclass
class Attempted:
    """Scan-only pattern that records every offset it is attempted at."""

    pattern: object
    attempts: list[int] = field(default_factory=list)

    def scan(self, tokens, offset, /):  # noqa: ANN001, ANN202
        self.attempts.append(offset)
        return self.pattern.scan(tokens, offset)


@dataclass(frozen=True)
class Fixed:
    """Always reports the same stop, whatever the offset."""

    stop: int

    def scan(self, tokens, offset, /):  # noqa: ANN001, ANN202
        return self.stop, "x"


class ZeroWidth:
    def scan(self, tokens, offset, /):  # noqa: ANN001, ANN202
        return offset, "empty"


class TestSepCap:
    def test_literal_example(self) -> None:
        assert sep_cap(FOO).segments("xx foo yy foo zz") == [
            Unmatched("xx "),
            Matched("foo"),
            Unmatched(" yy "),
            Matched("foo"),
            Unmatched(" zz"),
        ]

    def test_offsets_recorded(self) -> None:
        segments = sep_cap(FOO).segments("xx foo yy foo zz")
        assert [(s.start, s.stop) for s in segments] == [
            (0, 3),
            (3, 6),
            (6, 10),
            (10, 13),
            (13, 16),
        ]

    def test_empty_input(self) -> None:
        assert sep_cap(FOO).segments("") == []
        assert sep_cap(digits(0)).segments("") == []
        assert sep_cap(ScanOnly(FOO)).segments(b"") == []

    def test_no_match_is_one_unmatched(self) -> None:
        assert sep_cap(FOO).segments("abc") == [Unmatched("abc")]

    def test_whole_input_matched(self) -> None:
        assert sep_cap(FOO).segments("foo") == [Matched("foo")]

    def test_adjacent_matches(self) -> None:
        one_digit = Run(str.isdigit, at_least=1, at_most=1)
        assert sep_cap(one_digit).segments("12ab") == [
            Matched("1"),
            Matched("2"),
            Unmatched("ab"),
        ]

    def test_zero_width_capable_pattern_requires_progress(self) -> None:
        assert sep_cap(digits(at_least=0)).segments("a123b") == [
            Unmatched("a"),
            Matched("123"),
            Unmatched("b"),
        ]

    def test_always_zero_width_never_matches(self) -> None:
        assert sep_cap(ZeroWidth()).segments("abc") == [Unmatched("abc")]

    def test_backwards_stop_is_a_failure(self) -> None:
        assert sep_cap(Fixed(0)).segments("abc") == [Unmatched("abc")]

    def test_stop_past_end_raises(self) -> None:
        with pytest.raises(PatternContractError) as exc_info:
            sep_cap(Fixed(10)).segments("abc")
        assert exc_info.value.position == 10
        assert exc_info.value.length == 3

    def test_bytes(self) -> None:
        assert sep_cap(Literal(b"foo")).segments(b"xx foo") == [
            Unmatched(b"xx "),
            Matched(b"foo"),
        ]

    def test_first_success_wins(self) -> None:
        """No search for a longer match once an alternative succeeds."""
        pattern = Choice((Literal("f"), Literal("foo")))
        assert sep_cap(pattern).segments("foo") == [Matched("f"), Unmatched("oo")]

    def test_scan_consumes_rest_of_input(self) -> None:
        stop, segments = sep_cap(FOO).scan("ab foo", 0)
        assert stop == 6
        assert segments == [Unmatched("ab "), Matched("foo")]

    def test_scan_from_offset(self) -> None:
        stop, segments = sep_cap(FOO).scan("ab foo cd", 3)
        assert stop == 9
        assert segments == [Matched("foo"), Unmatched(" cd")]
        assert segments[0].start == 3

    def test_sep_cap_is_a_pattern(self) -> None:
        """The separator itself composes: it never fails at any offset."""
        assert sep_cap(FOO).scan("", 0) == (0, [])


class TestSeparate:
    def test_offset_out_of_range(self) -> None:
        with pytest.raises(ValueError, match="out of range"):
            separate(FOO, "abc", 4)
        with pytest.raises(ValueError, match="out of range"):
            separate(FOO, "abc", -1)

    def test_lazy(self) -> None:
        attempted = Attempted(FOO)
        segments = separate(attempted, "foo foo")
        assert attempted.attempts == []
        assert next(segments) == Matched("foo")
        assert attempted.attempts == [0]

    def test_attempts_once_per_offset(self) -> None:
        attempted = Attempted(FOO)
        list(separate(attempted, "fooab"))
        assert attempted.attempts == [0, 3, 4]

    def test_unmatched_offsets(self) -> None:
        segments = list(separate(FOO, "ab foo cd"))
        assert segments[0].start == 0
        assert segments[0].stop == 3
        assert segments[2].start == 6


INPUTS = [
    "",
    "a",
    "foo",
    "foofoo",
    "xx foo yy foo zz",
    "123abc456",
    "x1x22x333x",
    "café foo 中文 42",
    "ooo oo o",
]

PATTERNS = [
    pytest.param(FOO, id="literal"),
    pytest.param(Literal("O", ignore_case=True), id="literal-ignore-case"),
    pytest.param(Literal(""), id="literal-empty"),
    pytest.param(digits(0), id="digits-star"),
    pytest.param(digits(1), id="digits-plus"),
    pytest.param(Regex("o+"), id="regex-o-plus"),
    pytest.param(Regex("x*"), id="regex-x-star"),
    pytest.param(Regex(r"[0-9]{2}"), id="regex-digit-pair"),
    pytest.param(Choice((Literal("foo"), digits())), id="choice-literal-run"),
    pytest.param(Choice((Regex("a*"), Literal("o"))), id="choice-zero-width-first"),
]


class TestProperties:
    @pytest.mark.parametrize("text", INPUTS)
    @pytest.mark.parametrize("pattern", PATTERNS)
    def test_total_coverage(self, pattern: object, text: str) -> None:
        segments = list(separate(pattern, text))
        assert render(segments, text) == text

    @pytest.mark.parametrize("text", INPUTS)
    @pytest.mark.parametrize("pattern", PATTERNS)
    def test_no_zero_width_matches(self, pattern: object, text: str) -> None:
        for seg in separate(pattern, text):
            assert seg.stop > seg.start

    @pytest.mark.parametrize("text", INPUTS)
    @pytest.mark.parametrize("pattern", PATTERNS)
    def test_unmatched_never_adjacent(self, pattern: object, text: str) -> None:
        segments = list(separate(pattern, text))
        for left, right in zip(segments, segments[1:], strict=False):
            assert not (isinstance(left, Unmatched) and isinstance(right, Unmatched))

    @pytest.mark.parametrize("text", INPUTS)
    @pytest.mark.parametrize("pattern", PATTERNS)
    def test_fast_path_matches_reference(self, pattern: object, text: str) -> None:
        fast = list(separate(pattern, text))
        reference = list(separate(ScanOnly(pattern), text))
        assert segment_shape(fast) == segment_shape(reference)

    @pytest.mark.parametrize("text", INPUTS)
    def test_bytes_like_str(self, text: str) -> None:
        data = text.encode()
        segments = list(separate(Regex(rb"[0-9]+"), data))
        assert render(segments, data) == data
        assert [s.span(data) for s in segments if isinstance(s, Matched)] == [
            m.encode() for m in _digit_runs(text)
        ]


def _digit_runs(text: str) -> list[str]:
    runs: list[str] = []
    current = ""
    for ch in text:
        if ch in "0123456789":
            current += ch
        elif current:
            runs.append(current)
            current = ""
    if current:
        runs.append(current)
    return runs


class _CallCounter:
    """Stand-in for a compiled RE2 pattern that counts method lookups."""

    def __init__(self, compiled: object) -> None:
        self.compiled = compiled
        self.calls: Counter[str] = Counter()

    def __getattr__(self, name: str) -> object:
        self.calls[name] += 1
        return getattr(self.compiled, name)


def _counted(regex: Regex) -> _CallCounter:
    counter = _CallCounter(regex._compiled)
    object.__setattr__(regex, "_compiled", counter)
    return counter


class TestIncrementalSearch:
    def test_str_regex_iterates_once(self) -> None:
        rx = Regex("[0-9]")
        counter = _counted(rx)
        segments = list(separate(rx, "1a" * 2000))
        assert len(segments) == 4000
        assert counter.calls == {"finditer": 1}

    def test_script_regex_iterates_once(self) -> None:
        rx = Regex("[0-9]+")
        counter = _counted(rx)
        script = Script(rules=(Rule(Literal("zz"), "!"), Rule(rx, "#")))
        assert script.apply("a1 b22 zz c333" * 100) == "a# b# ! c#" * 100
        assert counter.calls == {"finditer": 1}

    def test_str_separates_about_as_fast_as_bytes(self) -> None:
        text = "1a" * 20_000

        def timed(pattern: Regex, tokens: str | bytes) -> float:
            started = time.perf_counter()
            segments = list(separate(pattern, tokens))
            elapsed = time.perf_counter() - started
            assert len(segments) == 40_000
            return elapsed

        str_time = timed(Regex("[0-9]"), text)
        bytes_time = timed(Regex(rb"[0-9]"), text.encode())
        assert str_time < 10 * bytes_time + 1.0

    @pytest.mark.parametrize(
        ("source", "text"),
        [
            pytest.param("[0-9]+", "a1b22c333", id="digits"),
            pytest.param("x*", "axxbx", id="zero-width"),
            pytest.param(r"\b", "ab cd", id="word-boundary"),
            pytest.param("é+", "café éé", id="non-ascii"),
        ],
    )
    def test_searcher_agrees_with_search(self, source: str, text: str) -> None:
        rx = Regex(source)
        find = rx.searcher(text)
        for offset in range(len(text) + 1):
            hit = find(offset)
            expected = rx.search(text, offset)
            assert (hit is None) == (expected is None)
            if hit is not None:
                assert hit[:2] == expected[:2]

    def test_searcher_restarts_for_overlapping_offset(self) -> None:
        rx = Regex("[0-9]+")
        find = rx.searcher("12 34")
        assert find(0)[:2] == (0, 2)
        assert find(1)[:2] == (1, 2)
        assert find(3)[:2] == (3, 5)
        assert find(0)[:2] == (0, 2)

    def test_choice_with_scan_only_alternative_scans_each_offset_once(self) -> None:
        attempted = Attempted(digits())
        pattern = Choice((attempted, Literal("a")))
        segments = list(separate(pattern, "a" * 200))
        assert len(segments) == 200
        assert attempted.attempts == list(range(200))

    def test_choice_with_scan_only_alternative_matches_reference(self) -> None:
        pattern = Choice((digits(), Literal("ab"), Regex("[xy]+")))
        text = "ab12xyab3 yyab"
        fast = list(separate(pattern, text))
        reference = list(separate(ScanOnly(pattern), text))
        assert segment_shape(fast) == segment_shape(reference)
