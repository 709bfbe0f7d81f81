"""Delimiter-based text codec for foods and daily logs.

Basic foods are one record per line: ``identifier|calories|kw1,kw2``.
Composite foods are blocks terminated by a ``---`` line; the first line of a
block is ``identifier|kw1,kw2`` and the remaining lines are
``componentId|servings``. Daily logs are one ``foodId|servings|timestamp``
record per line. A line that is not valid UTF-8 is a parse error.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from pydantic import ValidationError

from diet_assistant.domain.records import (
    BasicFoodRecord,
    ComponentRecord,
    CompositeFoodRecord,
    LogEntryRecord,
)

FIELD_SEPARATOR = "|"
KEYWORD_SEPARATOR = ","
BLOCK_TERMINATOR = "---"


class RecordParseError(ValueError):
    """Raised when a persisted line cannot be decoded."""

    def __init__(self, source: str, line_number: int, line: str, reason: str):
        super().__init__(f"{source}:{line_number}: {reason}: {line!r}")
        self.source = source
        self.line_number = line_number
        self.line = line
        self.reason = reason


@dataclass(frozen=True)
class CompositeBlock:
    """Decoded composite block with the errors found in its component lines."""

    record: CompositeFoodRecord
    errors: list[RecordParseError]


def split_keywords(raw: str) -> list[str]:
    """Split comma-separated keywords, trimming items and dropping empties."""
    keywords = []
    for chunk in raw.split(KEYWORD_SEPARATOR):
        value = chunk.strip()
        if value:
            keywords.append(value)
    return keywords


def join_keywords(keywords: Iterable[str]) -> str:
    return KEYWORD_SEPARATOR.join(keywords)


def format_number(value: float) -> str:
    """Format a calorie value so that it parses back to the same float."""
    if value.is_integer():
        return str(int(value))
    return repr(value)


def format_basic_line(identifier: str, calories: float, keywords: Iterable[str]) -> str:
    return FIELD_SEPARATOR.join(
        [identifier, format_number(calories), join_keywords(keywords)]
    )


def parse_basic_line(
    line: str, source: str = "<basic>", line_number: int = 0
) -> BasicFoodRecord:
    """Decode one basic-food line."""
    _require_utf8(line, source, line_number)
    parts = line.split(FIELD_SEPARATOR, 2)
    if len(parts) < 2:  # noqa: PLR2004
        raise RecordParseError(
            source, line_number, line, "expected identifier|calories"
        )
    keywords = split_keywords(parts[2]) if len(parts) == 3 else []  # noqa: PLR2004
    try:
        return BasicFoodRecord(
            identifier=parts[0].strip(),
            calories_per_serving=parts[1].strip(),
            keywords=keywords,
        )
    except ValidationError as exc:
        raise RecordParseError(source, line_number, line, _first_error(exc)) from exc


def format_composite_block(
    identifier: str, keywords: Iterable[str], components: Iterable[tuple[str, int]]
) -> list[str]:
    lines = [FIELD_SEPARATOR.join([identifier, join_keywords(keywords)])]
    for food_id, servings in components:
        lines.append(f"{food_id}{FIELD_SEPARATOR}{servings}")
    lines.append(BLOCK_TERMINATOR)
    return lines


def parse_composite_header(
    line: str, source: str = "<composite>", line_number: int = 0
) -> CompositeFoodRecord:
    _require_utf8(line, source, line_number)
    identifier, _, keyword_text = line.partition(FIELD_SEPARATOR)
    try:
        return CompositeFoodRecord(
            identifier=identifier.strip(), keywords=split_keywords(keyword_text)
        )
    except ValidationError as exc:
        raise RecordParseError(source, line_number, line, _first_error(exc)) from exc


def parse_component_line(
    line: str, source: str = "<composite>", line_number: int = 0
) -> ComponentRecord:
    _require_utf8(line, source, line_number)
    parts = line.split(FIELD_SEPARATOR)
    if len(parts) != 2:  # noqa: PLR2004
        raise RecordParseError(
            source, line_number, line, "expected componentId|servings"
        )
    try:
        return ComponentRecord(food_id=parts[0].strip(), servings=parts[1].strip())
    except ValidationError as exc:
        raise RecordParseError(source, line_number, line, _first_error(exc)) from exc


def iter_composite_blocks(
    lines: Iterable[str], source: str = "<composite>"
) -> Iterator[CompositeBlock | RecordParseError]:
    """Yield decoded blocks, or an error for each block whose header is bad.

    Blank lines are ignored. A trailing block without a terminator is still
    yielded. Lines following a bad header are skipped up to the next
    terminator.
    """
    current: CompositeFoodRecord | None = None
    errors: list[RecordParseError] = []
    skipping = False
    for line_number, raw in enumerate(lines, start=1):
        line = raw.rstrip("\r\n")
        if not line.strip():
            continue
        if line.strip() == BLOCK_TERMINATOR:
            if current is not None:
                yield CompositeBlock(current, errors)
            current, errors, skipping = None, [], False
            continue
        if skipping:
            continue
        if current is None:
            try:
                current = parse_composite_header(line, source, line_number)
            except RecordParseError as exc:
                skipping = True
                yield exc
            continue
        try:
            current.components.append(parse_component_line(line, source, line_number))
        except RecordParseError as exc:
            errors.append(exc)
    if current is not None:
        yield CompositeBlock(current, errors)


def format_log_line(food_id: str, servings: int, timestamp: int) -> str:
    return FIELD_SEPARATOR.join([food_id, str(servings), str(timestamp)])


def parse_log_line(
    line: str, source: str = "<log>", line_number: int = 0
) -> LogEntryRecord:
    """Decode one daily-log line."""
    _require_utf8(line, source, line_number)
    parts = line.rsplit(FIELD_SEPARATOR, 2)
    if len(parts) != 3:  # noqa: PLR2004
        raise RecordParseError(
            source, line_number, line, "expected foodId|servings|timestamp"
        )
    try:
        return LogEntryRecord(
            food_id=parts[0], servings=parts[1].strip(), timestamp=parts[2].strip()
        )
    except ValidationError as exc:
        raise RecordParseError(source, line_number, line, _first_error(exc)) from exc


def _require_utf8(line: str, source: str, line_number: int) -> None:
    # Undecodable bytes arrive as lone surrogates from read_lines.
    try:
        line.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise RecordParseError(source, line_number, line, "invalid UTF-8") from exc


def _first_error(exc: ValidationError) -> str:
    error = exc.errors()[0]
    location = ".".join(str(part) for part in error.get("loc", ()))
    return f"{location}: {error.get('msg', 'invalid value')}"
