"""recap: pattern capture and stream editing over str and bytes.

Split input into unmatched spans and pattern matches, or rewrite every
match in one pass. All public types are exported from this module:

    from recap import Literal, Regex, sep_cap, stream_edit
"""

__version__ = "0.1.0"

# Capture
from recap._capture import Captured, captured, find_all, find_all_cap

# Config types, see recap._config for details
from recap._config import (
    ActionConfig,
    BuiltInPattern,
    ConfigParseError,
    CustomPattern,
    EditConfig,
    KeepAction,
    PatternConfig,
    ReplaceAction,
    RuleConfig,
    TypedConfig,
    parse_edit_config,
)

# Stream editor
from recap._editor import stream_edit, stream_edit_async

# Concrete patterns
from recap._patterns import Choice, Literal, Mapped, PatternError, Regex, Run

# Registry, see recap._registry for details
from recap._registry import (
    MAX_PATTERN_LENGTH,
    MAX_REGEX_PATTERN_LENGTH,
    MAX_RULES,
    InvalidConfigError,
    PatternTooLongError,
    Registry,
    RegistryBuilder,
    TooManyRulesError,
    UnknownTypeUrlError,
    load_script_yaml,
)
from recap._script import Rule, Script

# Segments
from recap._segments import Matched, Segment, Unmatched, render

# Separator
from recap._separator import (
    PatternContractError,
    RecapError,
    SepCap,
    SeparatorInvariantError,
    search,
    searcher,
    sep_cap,
    separate,
)

# Protocols
from recap._types import (
    AsyncEditor,
    Editor,
    IncrementalPattern,
    Pattern,
    SearchablePattern,
    Searcher,
    Tokens,
)

__all__ = [
    # Protocols
    "Tokens",
    "Pattern",
    "SearchablePattern",
    "IncrementalPattern",
    "Searcher",
    "Editor",
    "AsyncEditor",
    # Segments
    "Unmatched",
    "Matched",
    "Segment",
    "render",
    # Separator
    "SepCap",
    "sep_cap",
    "separate",
    "search",
    "searcher",
    "RecapError",
    "PatternContractError",
    "SeparatorInvariantError",
    # Capture
    "Captured",
    "captured",
    "find_all_cap",
    "find_all",
    # Stream editor
    "stream_edit",
    "stream_edit_async",
    # Concrete patterns
    "Literal",
    "Regex",
    "Run",
    "Choice",
    "Mapped",
    "PatternError",
    # Config types
    "TypedConfig",
    "BuiltInPattern",
    "CustomPattern",
    "PatternConfig",
    "ReplaceAction",
    "KeepAction",
    "ActionConfig",
    "RuleConfig",
    "EditConfig",
    "ConfigParseError",
    "parse_edit_config",
    # Registry and scripts
    "RegistryBuilder",
    "Registry",
    "Rule",
    "Script",
    "load_script_yaml",
    "UnknownTypeUrlError",
    "InvalidConfigError",
    "TooManyRulesError",
    "PatternTooLongError",
    "MAX_RULES",
    "MAX_PATTERN_LENGTH",
    "MAX_REGEX_PATTERN_LENGTH",
]
