"""Config types for declarative edit scripts.

An edit script is an ordered list of rules. Each rule pairs a pattern
with what to do when it matches. Config-driven construction path:
  dict → parse_edit_config() → EditConfig → Registry.load_script() → Script

Relationship to runtime types:

| Config type     | Runtime type           |
|-----------------|------------------------|
| EditConfig      | Script                 |
| RuleConfig      | Rule                   |
| BuiltInPattern  | Literal / Regex        |
| CustomPattern   | registered Pattern     |
| TypedConfig     | registered Pattern     |

Example (YAML)::

    rules:
      - pattern: {Literal: "colour", ignore_case: true}
        replace: "color"
      - pattern: {Regex: "[0-9]{3}-[0-9]{4}"}
        replace: "XXX-XXXX"
      - pattern: {type_url: "acme.v1.Sku", config: {}}
        keep: true
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# ═══════════════════════════════════════════════════════════════════════════════
# Config types
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class TypedConfig:
    """Reference to a registered pattern type with its configuration.

    - type_url identifies the registered pattern factory
    - config carries the type-specific configuration payload
    """

    type_url: str
    config: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class BuiltInPattern:
    """Built-in pattern (Literal or Regex).

    Written as ``{ "Literal": "foo" }`` or ``{ "Regex": "[0-9]+" }`` with an
    optional ``ignore_case`` flag alongside.
    """

    variant: str
    value: str
    ignore_case: bool = False


@dataclass(frozen=True, slots=True)
class CustomPattern:
    """Pattern resolved via the registry's pattern factories."""

    typed_config: TypedConfig


type PatternConfig = BuiltInPattern | CustomPattern


@dataclass(frozen=True, slots=True)
class ReplaceAction:
    """Replace the match with fixed text."""

    replacement: str


@dataclass(frozen=True, slots=True)
class KeepAction:
    """Leave the match untouched.

    Useful ahead of broader rules: text claimed by a keep rule is never
    offered to the rules after it.
    """


type ActionConfig = ReplaceAction | KeepAction


@dataclass(frozen=True, slots=True)
class RuleConfig:
    """Pairs a pattern config with an action config."""

    pattern: PatternConfig
    action: ActionConfig


@dataclass(frozen=True, slots=True)
class EditConfig:
    """Configuration for an edit script.

    Deserializes from JSON/YAML dicts and can be loaded into a runtime
    Script via Registry.load_script().
    """

    rules: tuple[RuleConfig, ...]


# ═══════════════════════════════════════════════════════════════════════════════
# Parsing (dict → config types)
# ═══════════════════════════════════════════════════════════════════════════════

_PATTERN_VARIANTS = frozenset({"Literal", "Regex"})


class ConfigParseError(Exception):
    """Error parsing a config dict into config types."""


def parse_edit_config(data: dict[str, Any]) -> EditConfig:
    """Parse a dict into an EditConfig.

    This is the main entry point for config loading.

    Raises:
        ConfigParseError: If the dict is malformed.
    """
    if not isinstance(data, dict):
        msg = f"expected dict, got {type(data).__name__}"
        raise ConfigParseError(msg)

    raw_rules = data.get("rules")
    if raw_rules is None:
        msg = "missing required field 'rules'"
        raise ConfigParseError(msg)
    if not isinstance(raw_rules, list):
        msg = f"'rules' must be a list, got {type(raw_rules).__name__}"
        raise ConfigParseError(msg)

    return EditConfig(rules=tuple(_parse_rule(r) for r in raw_rules))


def _parse_rule(data: dict[str, Any]) -> RuleConfig:
    """Parse a rule dict.

    Enforces oneof: exactly one of replace or keep.
    """
    if not isinstance(data, dict):
        msg = f"rule must be a dict, got {type(data).__name__}"
        raise ConfigParseError(msg)

    if "pattern" not in data:
        msg = "rule missing required field 'pattern'"
        raise ConfigParseError(msg)
    pattern = _parse_pattern(data["pattern"])

    has_replace = "replace" in data
    has_keep = "keep" in data
    if has_replace and has_keep:
        msg = "exactly one of 'replace' or 'keep' must be set, got both"
        raise ConfigParseError(msg)
    if not has_replace and not has_keep:
        msg = "one of 'replace' or 'keep' is required"
        raise ConfigParseError(msg)

    action: ActionConfig
    if has_replace:
        replacement = data["replace"]
        if not isinstance(replacement, str):
            msg = f"'replace' must be a string, got {type(replacement).__name__}"
            raise ConfigParseError(msg)
        action = ReplaceAction(replacement=replacement)
    else:
        if data["keep"] is not True:
            msg = f"'keep' must be true, got {data['keep']!r}"
            raise ConfigParseError(msg)
        action = KeepAction()

    return RuleConfig(pattern=pattern, action=action)


def _parse_pattern(data: dict[str, Any]) -> PatternConfig:
    """Parse a pattern dict into a BuiltInPattern or CustomPattern.

    Expected format: { "Literal": "foo" }, { "Regex": "^a" } or a typed
    config { "type_url": ..., "config": {...} }.
    """
    if not isinstance(data, dict):
        msg = f"pattern must be a dict, got {type(data).__name__}"
        raise ConfigParseError(msg)

    if "type_url" in data:
        return CustomPattern(typed_config=_parse_typed_config(data))

    variants = sorted(_PATTERN_VARIANTS & data.keys())
    if not variants:
        expected = sorted(_PATTERN_VARIANTS)
        msg = f"pattern must contain one of {expected} or 'type_url', got keys: {sorted(data.keys())}"
        raise ConfigParseError(msg)
    if len(variants) > 1:
        msg = f"pattern must contain exactly one variant, got {variants}"
        raise ConfigParseError(msg)

    variant = variants[0]
    value = data[variant]
    if not isinstance(value, str):
        msg = f"pattern {variant} value must be a string, got {type(value).__name__}"
        raise ConfigParseError(msg)

    ignore_case = data.get("ignore_case", False)
    if not isinstance(ignore_case, bool):
        msg = f"'ignore_case' must be a bool, got {type(ignore_case).__name__}"
        raise ConfigParseError(msg)

    return BuiltInPattern(variant=variant, value=value, ignore_case=ignore_case)


def _parse_typed_config(data: dict[str, Any]) -> TypedConfig:
    """Parse a typed config dict."""
    type_url = data["type_url"]
    if not isinstance(type_url, str):
        msg = f"type_url must be a string, got {type(type_url).__name__}"
        raise ConfigParseError(msg)

    config = data.get("config", {})
    if not isinstance(config, dict):
        msg = f"config must be a dict, got {type(config).__name__}"
        raise ConfigParseError(msg)

    return TypedConfig(type_url=type_url, config=config)
