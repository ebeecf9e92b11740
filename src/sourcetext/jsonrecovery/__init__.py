"""Sanitization and resilient parsing of model-generated JSON."""

from .parser import (
    DEFAULT_STRATEGIES,
    ParseAttempt,
    ParseError,
    ParseFailure,
    ParserStrategy,
    ResilientJSONParser,
    parse_json,
    recover_json,
)
from .sanitize import sanitize_json_text

__all__ = [
    "DEFAULT_STRATEGIES",
    "ParseAttempt",
    "ParseError",
    "ParseFailure",
    "ParserStrategy",
    "ResilientJSONParser",
    "parse_json",
    "recover_json",
    "sanitize_json_text",
]
