"""JSON Schema for fingerprint DSL definitions (.fp.yaml files)."""

from __future__ import annotations

import json
from typing import Any

from docfingerprint.compile.schema_defs import assertion_definitions

Schema = dict[str, Any]

SCHEMA_DIALECT = "https://json-schema.org/draft/2020-12/schema"
SCHEMA_TITLE = "Fingerprint DSL Definition"

FORMATS = ("xlsx", "csv", "pdf", "markdown", "text")
EXTRACT_TYPES = ("range", "table", "section", "text_match")
HASH_ALGORITHMS = ("blake3",)

_DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"

_EXTRACT_OPTIONAL_STRINGS = ("anchor_heading", "anchor", "pattern", "sheet", "range")
_EXTRACT_OPTIONAL_COUNTS = ("index", "within_chars")


def _string(**constraints: Any) -> Schema:
    return {"type": "string", **constraints}


def _non_empty_string() -> Schema:
    return _string(minLength=1)


def _enum(values: tuple[str, ...]) -> Schema:
    return _string(enum=list(values))


def _array_of(items: Schema, **constraints: Any) -> Schema:
    return {"type": "array", "items": items, **constraints}


def _ref(name: str) -> Schema:
    return {"$ref": f"#/$defs/{name}"}


def _closed_object(required: tuple[str, ...], properties: Schema) -> Schema:
    return {
        "type": "object",
        "additionalProperties": False,
        "required": list(required),
        "properties": properties,
    }


def _date_bound(which: str) -> Schema:
    return _string(
        pattern=_DATE_PATTERN,
        description=f"Optional metadata-only {which} bound date (YYYY-MM-DD).",
    )


def _extract_section() -> Schema:
    properties: Schema = {
        "name": _non_empty_string(),
        "type": _enum(EXTRACT_TYPES),
    }
    properties.update({field: _string() for field in _EXTRACT_OPTIONAL_STRINGS})
    properties.update(
        {field: {"type": "integer", "minimum": 0} for field in _EXTRACT_OPTIONAL_COUNTS}
    )
    return _closed_object(("name", "type"), properties)


def _content_hash_config() -> Schema:
    return _closed_object(
        ("algorithm", "over"),
        {
            "algorithm": _enum(HASH_ALGORITHMS),
            "over": _array_of(_non_empty_string()),
        },
    )


def _top_level_properties() -> Schema:
    return {
        "fingerprint_id": _non_empty_string(),
        "format": _enum(FORMATS),
        "valid_from": _date_bound("lower"),
        "valid_until": _date_bound("upper"),
        "parent": _non_empty_string(),
        "assertions": _array_of(_ref("namedAssertion")),
        "extract": _array_of(_ref("extractSection"), default=[]),
        "content_hash": _ref("contentHashConfig"),
    }


def dsl_schema() -> Schema:
    """The DSL schema as a freshly built mapping."""
    assertions = assertion_definitions()
    definitions: Schema = {
        "namedAssertion": {"oneOf": [_ref(name) for name in assertions]},
        **assertions,
        "extractSection": _extract_section(),
        "contentHashConfig": _content_hash_config(),
    }
    schema = _closed_object(
        ("fingerprint_id", "format", "assertions"),
        _top_level_properties(),
    )
    return {
        "$schema": SCHEMA_DIALECT,
        "title": SCHEMA_TITLE,
        **schema,
        "$defs": definitions,
    }


def dsl_json_schema() -> str:
    """The DSL schema as pretty-printed JSON with sorted keys."""
    return json.dumps(dsl_schema(), indent=2, sort_keys=True)