"""JSON Schema definitions for every assertion type of the fingerprint DSL."""

from __future__ import annotations

from typing import Any

Schema = dict[str, Any]

_ROW_RANGE_PATTERN = r"^\s*\d+\s*:\s*\d+\s*$"
_DEFERRED_DESCRIPTION = "Known assertion type, unsupported in v0.1 runtime."
_DEFERRED_SUPPORT = "unsupported_in_v0_1"


def _string(min_length: int | None = 1) -> Schema:
    schema: Schema = {"type": "string"}
    if min_length is not None:
        schema["minLength"] = min_length
    return schema


def _integer(minimum: int | None = None, maximum: int | None = None) -> Schema:
    schema: Schema = {"type": "integer"}
    if minimum is not None:
        schema["minimum"] = minimum
    if maximum is not None:
        schema["maximum"] = maximum
    return schema


def _number(minimum: float | None = None, maximum: float | None = None) -> Schema:
    schema: Schema = {"type": "number"}
    if minimum is not None:
        schema["minimum"] = minimum
    if maximum is not None:
        schema["maximum"] = maximum
    return schema


def _string_array() -> Schema:
    return {"type": "array", "items": _string()}


def _object(required: list[str], properties: Schema) -> Schema:
    return {
        "type": "object",
        "additionalProperties": False,
        "required": required,
        "properties": properties,
    }


def _assertion(key: str, body: Schema, *, deferred: bool = False) -> tuple[str, Schema]:
    definition: Schema = {"type": "object"}
    if deferred:
        definition["description"] = _DEFERRED_DESCRIPTION
        definition["x-runtime-support"] = _DEFERRED_SUPPORT
    definition.update(
        {
            "additionalProperties": False,
            "required": [key],
            "properties": {"name": {"type": "string"}, key: body},
        }
    )
    return f"assertion_{key}", definition


def _page_count_body() -> Schema:
    return {
        "type": "object",
        "additionalProperties": False,
        "properties": {"min": _integer(minimum=0), "max": _integer(minimum=0)},
        "anyOf": [{"required": ["min"]}, {"required": ["max"]}],
    }


def assertion_definitions() -> dict[str, Schema]:
    """Schema definitions keyed by definition name, in DSL order.

    Each call builds a fresh mapping, so callers may modify the result.
    """
    entries = [
        _assertion("filename_regex", _object(["pattern"], {"pattern": _string()})),
        _assertion("sheet_exists", _string()),
        _assertion(
            "sheet_name_regex",
            _object(["pattern"], {"pattern": _string(), "bind": _string()}),
        ),
        _assertion(
            "cell_eq",
            _object(
                ["sheet", "cell", "value"],
                {"sheet": _string(), "cell": _string(), "value": _string(None)},
            ),
        ),
        _assertion(
            "cell_regex",
            _object(
                ["sheet", "cell", "pattern"],
                {"sheet": _string(), "cell": _string(), "pattern": _string()},
            ),
        ),
        _assertion(
            "range_non_null",
            _object(["sheet", "range"], {"sheet": _string(), "range": _string()}),
        ),
        _assertion(
            "sheet_min_rows",
            _object(["sheet", "min_rows"], {"sheet": _string(), "min_rows": _integer(0)}),
        ),
        _assertion(
            "column_search",
            _object(
                ["sheet", "column", "row_range", "pattern"],
                {
                    "sheet": _string(),
                    "column": _string(),
                    "row_range": {"type": "string", "pattern": _ROW_RANGE_PATTERN},
                    "pattern": _string(),
                },
            ),
        ),
        _assertion(
            "header_row_match",
            _object(
                ["sheet", "row_range", "min_match", "columns"],
                {
                    "sheet": _string(),
                    "row_range": {"type": "string", "pattern": _ROW_RANGE_PATTERN},
                    "min_match": _integer(1),
                    "columns": {
                        "type": "array",
                        "minItems": 1,
                        "items": _object(["pattern"], {"pattern": _string()}),
                    },
                },
            ),
        ),
        _assertion(
            "range_populated",
            _object(
                ["sheet", "range", "min_pct"],
                {"sheet": _string(), "range": _string(), "min_pct": _number(0.0, 1.0)},
            ),
            deferred=True,
        ),
        _assertion(
            "sum_eq",
            _object(
                ["range", "equals_cell", "tolerance"],
                {"range": _string(), "equals_cell": _string(), "tolerance": _number(0.0)},
            ),
            deferred=True,
        ),
        _assertion(
            "within_tolerance",
            _object(
                ["cell", "min", "max"],
                {"cell": _string(), "min": _number(), "max": _number()},
            ),
            deferred=True,
        ),
        _assertion("heading_exists", _string()),
        _assertion("heading_regex", _object(["pattern"], {"pattern": _string()})),
        _assertion(
            "heading_level",
            _object(["level", "pattern"], {"level": _integer(1, 6), "pattern": _string()}),
        ),
        _assertion("text_contains", _string()),
        _assertion("text_regex", _object(["pattern"], {"pattern": _string()})),
        _assertion(
            "text_near",
            _object(
                ["anchor", "pattern", "within_chars"],
                {"anchor": _string(), "pattern": _string(), "within_chars": _integer(0)},
            ),
        ),
        _assertion("section_non_empty", _object(["heading"], {"heading": _string()})),
        _assertion(
            "section_min_lines",
            _object(["heading", "min_lines"], {"heading": _string(), "min_lines": _integer(0)}),
        ),
        _assertion(
            "table_exists",
            _object(["heading"], {"heading": _string(), "index": _integer(0)}),
        ),
        _assertion(
            "table_columns",
            _object(
                ["heading", "patterns"],
                {"heading": _string(), "index": _integer(0), "patterns": _string_array()},
            ),
        ),
        _assertion(
            "table_shape",
            _object(
                ["heading", "min_columns", "column_types"],
                {
                    "heading": _string(),
                    "index": _integer(0),
                    "min_columns": _integer(1),
                    "column_types": _string_array(),
                },
            ),
        ),
        _assertion(
            "table_min_rows",
            _object(
                ["heading", "min_rows"],
                {"heading": _string(), "index": _integer(0), "min_rows": _integer(0)},
            ),
        ),
        _assertion("page_count", _page_count_body()),
        _assertion(
            "metadata_regex",
            _object(["key", "pattern"], {"key": _string(), "pattern": _string()}),
        ),
    ]
    return dict(entries)