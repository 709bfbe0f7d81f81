"""Flat-file implementation of the food repository."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from diet_assistant.adapters.files import read_lines, write_lines
from diet_assistant.adapters.text_codec import (
    CompositeBlock,
    RecordParseError,
    format_basic_line,
    format_composite_block,
    iter_composite_blocks,
    parse_basic_line,
)
from diet_assistant.domain.records import BasicFoodRecord, CompositeFoodRecord
from diet_assistant.services.foods import FoodRepository

_logger = logging.getLogger(__name__)


@dataclass
class TextFoodRepository(FoodRepository):
    """Stores basic and composite foods in two delimiter-separated files.

    Malformed records are logged, collected in ``skipped`` and left out.
    """

    basic_path: Path
    composite_path: Path
    skipped: list[RecordParseError] = field(default_factory=list)

    def load_basic_foods(self) -> list[BasicFoodRecord]:
        """Parse the basic-food file; a missing file means no foods."""
        lines = read_lines(self.basic_path)
        if lines is None:
            _logger.info("No basic foods file at %s", self.basic_path)
            return []
        records = []
        for line_number, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            try:
                records.append(
                    parse_basic_line(line, str(self.basic_path), line_number)
                )
            except RecordParseError as exc:
                self._skip(exc)
        return records

    def load_composite_foods(self) -> list[CompositeFoodRecord]:
        """Parse the composite-food file; a missing file means no foods."""
        lines = read_lines(self.composite_path)
        if lines is None:
            _logger.info("No composite foods file at %s", self.composite_path)
            return []
        records = []
        for item in iter_composite_blocks(lines, str(self.composite_path)):
            if isinstance(item, CompositeBlock):
                for error in item.errors:
                    self._skip(error)
                records.append(item.record)
            else:
                self._skip(item)
        return records

    def save_basic_foods(self, records: list[BasicFoodRecord]) -> None:
        write_lines(
            self.basic_path,
            [
                format_basic_line(
                    record.identifier, record.calories_per_serving, record.keywords
                )
                for record in records
            ],
        )

    def save_composite_foods(self, records: list[CompositeFoodRecord]) -> None:
        lines: list[str] = []
        for record in records:
            lines.extend(
                format_composite_block(
                    record.identifier,
                    record.keywords,
                    [(item.food_id, item.servings) for item in record.components],
                )
            )
        write_lines(self.composite_path, lines)

    def _skip(self, error: RecordParseError) -> None:
        _logger.warning("Skipping malformed food record: %s", error)
        self.skipped.append(error)
