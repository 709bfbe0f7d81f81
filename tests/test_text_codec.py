"""Tests for the delimiter-based text codec."""

import pytest

from diet_assistant.adapters.text_codec import (
    CompositeBlock,
    RecordParseError,
    format_basic_line,
    format_composite_block,
    format_log_line,
    format_number,
    iter_composite_blocks,
    parse_basic_line,
    parse_log_line,
    split_keywords,
)


def test_split_keywords_trims_and_drops_empty_items() -> None:
    assert split_keywords(" fruit, Sweet ,,  ") == ["fruit", "Sweet"]
    assert split_keywords("") == []


def test_format_number_keeps_integers_short() -> None:
    assert format_number(52.0) == "52"
    assert format_number(52.25) == "52.25"
    assert float(format_number(0.1 + 0.2)) == 0.1 + 0.2


def test_basic_line_format_and_parse() -> None:
    line = format_basic_line("apple", 52.0, ["fruit", "Sweet"])

    record = parse_basic_line(line)

    assert line == "apple|52|fruit,Sweet"
    assert record.identifier == "apple"
    assert record.calories_per_serving == 52
    assert record.keywords == ["fruit", "Sweet"]


def test_basic_line_without_keywords() -> None:
    assert parse_basic_line("water|0|").keywords == []
    assert parse_basic_line("water|0").keywords == []


@pytest.mark.parametrize(
    "line",
    ["apple", "apple|lots|fruit", "|52|fruit", "apple|-3|fruit", "apple|inf|x"],
)
def test_malformed_basic_lines_raise(line: str) -> None:
    with pytest.raises(RecordParseError) as excinfo:
        parse_basic_line(line, "basic_foods.txt", 7)

    assert excinfo.value.line_number == 7
    assert excinfo.value.line == line
    assert "basic_foods.txt:7" in str(excinfo.value)


def test_composite_blocks_parse_components() -> None:
    lines = [
        *format_composite_block("salad", ["mixed"], [("apple", 2), ("pear", 1)]),
        "",
        "sandwich|lunch",
        "bread|2",
    ]

    items = list(iter_composite_blocks(lines))

    assert all(isinstance(item, CompositeBlock) for item in items)
    salad, sandwich = (item.record for item in items)
    assert salad.identifier == "salad"
    assert salad.keywords == ["mixed"]
    assert [(c.food_id, c.servings) for c in salad.components] == [
        ("apple", 2),
        ("pear", 1),
    ]
    assert sandwich.identifier == "sandwich"
    assert [c.food_id for c in sandwich.components] == ["bread"]


def test_bad_component_lines_are_reported_and_skipped() -> None:
    lines = ["salad|mixed", "apple|two", "pear|0", "lemon|1", "---"]

    (block,) = list(iter_composite_blocks(lines, "composite_foods.txt"))

    assert isinstance(block, CompositeBlock)
    assert [c.food_id for c in block.record.components] == ["lemon"]
    assert [error.line_number for error in block.errors] == [2, 3]


def test_bad_header_skips_whole_block() -> None:
    lines = ["|mixed", "apple|1", "---", "soup|hot", "---"]

    items = list(iter_composite_blocks(lines))

    assert isinstance(items[0], RecordParseError)
    assert items[0].line_number == 1
    assert isinstance(items[1], CompositeBlock)
    assert items[1].record.identifier == "soup"
    assert len(items) == 2


def test_log_line_format_and_parse() -> None:
    line = format_log_line("fruit_salad", 3, 1704067200)

    record = parse_log_line(line)

    assert line == "fruit_salad|3|1704067200"
    assert (record.food_id, record.servings, record.timestamp) == (
        "fruit_salad",
        3,
        1704067200,
    )


@pytest.mark.parametrize("line", ["apple|1", "apple|x|1704067200", "apple|1|soon"])
def test_malformed_log_lines_raise(line: str) -> None:
    with pytest.raises(RecordParseError):
        parse_log_line(line)
