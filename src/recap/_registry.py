"""Type registry for config-driven script construction.

The registry enables generic config loading: JSON/YAML config → runnable
Script without hand-written compile code.

- RegistryBuilder → .build() → Registry (immutable)
- Factories are plain callables: (config: dict) → Pattern
- load_script() walks the config tree and constructs runtime types

Example::

    builder = RegistryBuilder()
    builder.pattern("acme.v1.Sku", lambda cfg: Regex(r"SKU-[0-9]+"))
    registry = builder.build()

    config = parse_edit_config(yaml.safe_load(text))
    script = registry.load_script(config)
    script.apply("order SKU-1234")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

import yaml

from recap._config import (
    BuiltInPattern,
    ConfigParseError,
    CustomPattern,
    KeepAction,
    ReplaceAction,
    parse_edit_config,
)
from recap._patterns import Literal, PatternError, Regex
from recap._script import Rule, Script
from recap._separator import RecapError

if TYPE_CHECKING:
    from collections.abc import Callable

    from recap._config import EditConfig, PatternConfig, RuleConfig
    from recap._types import Pattern

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# Limits
# ═══════════════════════════════════════════════════════════════════════════════

MAX_RULES = 256
MAX_PATTERN_LENGTH = 8192
MAX_REGEX_PATTERN_LENGTH = 4096

# ═══════════════════════════════════════════════════════════════════════════════
# Error types
# ═══════════════════════════════════════════════════════════════════════════════


class UnknownTypeUrlError(RecapError):
    """A type_url was not found in the registry."""

    def __init__(self, type_url: str, available: list[str]) -> None:
        self.type_url = type_url
        self.available = sorted(available)
        if self.available:
            registered = ", ".join(self.available)
            msg = f"unknown pattern type_url: {type_url!r} (registered: {registered})"
        else:
            msg = f"unknown pattern type_url: {type_url!r} (no pattern types are registered)"
        super().__init__(msg)


class InvalidConfigError(RecapError):
    """A config payload was malformed or semantically invalid."""

    def __init__(self, source: str) -> None:
        self.source = source
        super().__init__(f"invalid config: {source}")


class TooManyRulesError(RecapError):
    """Script has too many rules (width-based limit)."""

    def __init__(self, count: int, max_: int) -> None:
        self.count = count
        self.max = max_
        super().__init__(f"too many rules: {count} exceeds maximum {max_}")


class PatternTooLongError(RecapError):
    """A pattern exceeds the length limit."""

    def __init__(self, length: int, max_: int) -> None:
        self.length = length
        self.max = max_
        super().__init__(f"pattern length {length} exceeds maximum {max_}")


# ═══════════════════════════════════════════════════════════════════════════════
# Builder
# ═══════════════════════════════════════════════════════════════════════════════

type PatternFactory = Callable[[dict[str, Any]], Pattern[Any]]


class RegistryBuilder:
    """Builder for constructing a Registry.

    Register Pattern factories with type URLs, then call build() to
    produce an immutable Registry.
    """

    def __init__(self) -> None:
        self._pattern_factories: dict[str, PatternFactory] = {}

    def pattern(self, type_url: str, factory: PatternFactory) -> RegistryBuilder:
        """Register a Pattern factory with a type URL."""
        self._pattern_factories[type_url] = factory
        return self

    def build(self) -> Registry:
        """Freeze the registry. No further registration is possible."""
        return Registry(
            _pattern_factories=MappingProxyType(dict(self._pattern_factories)),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Registry
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Registry:
    """Immutable registry of Pattern factories.

    Constructed via RegistryBuilder. Use load_script() to compile config
    into a runtime Script. Built-in Literal and Regex patterns need no
    registration.
    """

    _pattern_factories: MappingProxyType[str, PatternFactory] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def load_script(self, config: EditConfig) -> Script:
        """Load a Script from configuration.

        Raises:
            UnknownTypeUrlError: pattern type_url not registered
            InvalidConfigError: config payload malformed
            TooManyRulesError: too many rules
            PatternTooLongError: pattern exceeds length limit
        """
        if len(config.rules) > MAX_RULES:
            raise TooManyRulesError(len(config.rules), MAX_RULES)

        rules = tuple(self._load_rule(r) for r in config.rules)
        logger.debug("loaded script with %d rules", len(rules))
        return Script(rules=rules)

    @property
    def pattern_count(self) -> int:
        """Number of registered pattern types."""
        return len(self._pattern_factories)

    def contains_pattern(self, type_url: str) -> bool:
        """Check if a pattern type URL is registered."""
        return type_url in self._pattern_factories

    def pattern_type_urls(self) -> list[str]:
        """Return all registered pattern type URLs (sorted)."""
        return sorted(self._pattern_factories.keys())

    # ── Private loading methods ────────────────────────────────────────────

    def _load_rule(self, config: RuleConfig) -> Rule:
        pattern = self._load_pattern(config.pattern)
        match config.action:
            case ReplaceAction(replacement=replacement):
                return Rule(pattern=pattern, replacement=replacement)
            case KeepAction():
                return Rule(pattern=pattern)
            case _:  # pragma: no cover
                msg = f"unknown action config type: {type(config.action).__name__}"
                raise InvalidConfigError(msg)

    def _load_pattern(self, config: PatternConfig) -> Pattern[Any]:
        match config:
            case BuiltInPattern(variant=variant, value=value, ignore_case=ignore_case):
                return _compile_built_in(variant, value, ignore_case)
            case CustomPattern(typed_config=tc):
                factory = self._pattern_factories.get(tc.type_url)
                if factory is None:
                    raise UnknownTypeUrlError(tc.type_url, list(self._pattern_factories.keys()))
                try:
                    return factory(tc.config)
                except Exception as e:
                    raise InvalidConfigError(str(e)) from e
            case _:  # pragma: no cover
                msg = f"unknown pattern config type: {type(config).__name__}"
                raise InvalidConfigError(msg)


# ═══════════════════════════════════════════════════════════════════════════════
# Built-in pattern compilation
# ═══════════════════════════════════════════════════════════════════════════════


def _check_pattern_length(variant: str, value: str) -> None:
    """Enforce pattern length limits on built-in patterns."""
    if variant == "Regex":
        if len(value) > MAX_REGEX_PATTERN_LENGTH:
            raise PatternTooLongError(len(value), MAX_REGEX_PATTERN_LENGTH)
    elif len(value) > MAX_PATTERN_LENGTH:
        raise PatternTooLongError(len(value), MAX_PATTERN_LENGTH)


def _compile_built_in(variant: str, value: str, ignore_case: bool) -> Pattern[Any]:
    """Compile a built-in pattern variant."""
    _check_pattern_length(variant, value)

    match variant:
        case "Literal":
            if not value:
                msg = "Literal pattern must not be empty"
                raise InvalidConfigError(msg)
            return Literal(value=value, ignore_case=ignore_case)
        case "Regex":
            try:
                return Regex(pattern=value, ignore_case=ignore_case)
            except PatternError as e:
                raise InvalidConfigError(str(e)) from e
        case _:
            msg = f"unknown built-in pattern variant: {variant!r}"
            raise InvalidConfigError(msg)


# ═══════════════════════════════════════════════════════════════════════════════
# YAML loading
# ═══════════════════════════════════════════════════════════════════════════════


def load_script_yaml(source: str | Path, registry: Registry | None = None) -> Script:
    """Parse and load a YAML edit script.

    ``source`` is YAML text, or a Path to a YAML file. Without a registry
    only built-in patterns are available.

    Raises:
        ConfigParseError: If the YAML is invalid or the config is malformed.
        RecapError: If loading fails (see Registry.load_script).
    """
    if isinstance(source, Path):
        logger.debug("reading edit script from %s", source)
        source = source.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(source)
    except yaml.YAMLError as e:
        msg = f"invalid YAML: {e}"
        raise ConfigParseError(msg) from e

    if registry is None:
        registry = Registry()
    return registry.load_script(parse_edit_config(data))
