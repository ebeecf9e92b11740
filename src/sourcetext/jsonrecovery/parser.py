"""Strict-then-lenient JSON parsing for model output."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import json
import logging
from typing import Any, Callable, Sequence

import json5

from sourcetext.jsonrecovery.sanitize import sanitize_json_text

logger = logging.getLogger(__name__)


class ParseFailure(Enum):
    BOTH_PARSERS_FAILED = "both_parsers_failed"


@dataclass(frozen=True, slots=True)
class ParserStrategy:
    name: str
    loads: Callable[[str], Any]


@dataclass(frozen=True, slots=True)
class ParseAttempt:
    """Why one parser stage rejected the input."""

    stage: str
    message: str


@dataclass(slots=True)
class ParseError(Exception):
    """Terminal failure raised once every parser stage has rejected the input."""

    attempts: tuple[ParseAttempt, ...]
    kind: ParseFailure = ParseFailure.BOTH_PARSERS_FAILED

    def __str__(self) -> str:
        details = "; ".join(f"{attempt.stage}: {attempt.message}" for attempt in self.attempts)
        return f"Both strict and lenient JSON parsing failed ({details})"


STRICT_STRATEGY = ParserStrategy(name="strict", loads=json.loads)
LENIENT_STRATEGY = ParserStrategy(name="lenient", loads=json5.loads)
DEFAULT_STRATEGIES: tuple[ParserStrategy, ...] = (STRICT_STRATEGY, LENIENT_STRATEGY)


class ResilientJSONParser:
    """Try parser strategies in order and return the first successful value."""

    def __init__(self, strategies: Sequence[ParserStrategy] = DEFAULT_STRATEGIES) -> None:
        if not strategies:
            raise ValueError("At least one parser strategy is required")
        self._strategies = tuple(strategies)

    @property
    def strategies(self) -> tuple[ParserStrategy, ...]:
        return self._strategies

    def parse(self, text: str) -> Any:
        attempts: list[ParseAttempt] = []
        for strategy in self._strategies:
            try:
                value = strategy.loads(text)
            except (ValueError, RecursionError) as exc:
                attempts.append(ParseAttempt(stage=strategy.name, message=str(exc)))
                continue
            if attempts:
                logger.debug("Parsed JSON with %s stage after %d failed stage(s)", strategy.name, len(attempts))
            return value

        raise ParseError(attempts=tuple(attempts))


_DEFAULT_PARSER = ResilientJSONParser()


def parse_json(text: str) -> Any:
    """Parse *text* with the default strict-then-lenient parser."""

    return _DEFAULT_PARSER.parse(text)


def recover_json(raw: str | None, *, parser: ResilientJSONParser | None = None) -> Any:
    """Sanitize and parse model output, retrying once with flattened line breaks.

    Escaped line breaks keep multi-line string values intact but break JSON
    whose structure is spread over several lines. The second round folds the
    breaks into spaces instead. When both rounds fail, the raised
    ``ParseError`` carries every attempt.
    """

    active = parser or _DEFAULT_PARSER
    try:
        return active.parse(sanitize_json_text(raw))
    except ParseError as first:
        try:
            return active.parse(sanitize_json_text(raw, escape_newlines=False))
        except ParseError as second:
            flattened = tuple(
                ParseAttempt(stage=f"{attempt.stage} (flattened)", message=attempt.message)
                for attempt in second.attempts
            )
            raise ParseError(attempts=first.attempts + flattened) from second
