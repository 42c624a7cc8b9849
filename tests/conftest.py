"""Conformance fixture loader for recap.

Loads YAML fixtures from tests/fixtures/ and converts them into cases for
parametrized testing. Each document names an edit script and a list of
input/expected-output cases.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from recap import RegistryBuilder, Script, parse_edit_config
from recap.testing import register

FIXTURE_DIR = Path(__file__).resolve().parent / "fixtures"


@dataclass
class FixtureCase:
    """A single test case from a conformance fixture."""

    fixture_name: str
    case_name: str
    script: Script
    input: str
    expect: str
    found: list[str] | None


def _make_registry():  # noqa: ANN202
    """Build a registry with the test domain."""
    return register(RegistryBuilder()).build()


# ─── Fixture loading ────────────────────────────────────────────────────────


def load_edit_fixtures() -> list[FixtureCase]:
    """Load all edit conformance fixtures."""
    cases: list[FixtureCase] = []
    for yaml_file in sorted(FIXTURE_DIR.glob("*.yaml")):
        cases.extend(_load_file(yaml_file))
    return cases


def _load_file(path: Path) -> list[FixtureCase]:
    """Load a single fixture YAML file (may contain multiple documents)."""
    registry = _make_registry()
    cases: list[FixtureCase] = []
    with path.open(encoding="utf-8") as f:
        for doc in yaml.safe_load_all(f):
            if doc is None:
                continue
            fixture_name = doc["name"]
            script = registry.load_script(parse_edit_config(doc["script"]))
            for case in doc["cases"]:
                cases.append(
                    FixtureCase(
                        fixture_name=fixture_name,
                        case_name=case["name"],
                        script=script,
                        input=str(case["input"]),
                        expect=str(case["expect"]),
                        found=case.get("found"),
                    )
                )
    return cases


def fixture_id(case: FixtureCase) -> str:
    return f"{case.fixture_name}::{case.case_name}"


def segment_shape(segments: list[Any]) -> list[tuple[str, int, int]]:
    """Reduce segments to (kind, start, stop) so values need not compare."""
    return [(type(seg).__name__, seg.start, seg.stop) for seg in segments]
