import json

from docfingerprint.compile.schema import dsl_json_schema, dsl_schema


def _parsed():
    return json.loads(dsl_json_schema())


def _named_assertion_keys(schema):
    defs = schema["$defs"]
    keys = set()
    for reference in defs["namedAssertion"]["oneOf"]:
        definition_name = reference["$ref"].rsplit("/", 1)[-1]
        for key in defs[definition_name]["properties"]:
            if key != "name":
                keys.add(key)
    return keys


def test_schema_is_valid_json_and_includes_temporal_metadata_fields():
    properties = _parsed()["properties"]
    assert properties["valid_from"]["type"] == "string"
    assert properties["valid_until"]["type"] == "string"
    assert properties["valid_from"]["pattern"] == r"^\d{4}-\d{2}-\d{2}$"
    assert properties["valid_until"]["pattern"] == r"^\d{4}-\d{2}-\d{2}$"


def test_temporal_descriptions():
    properties = _parsed()["properties"]
    assert (
        properties["valid_from"]["description"]
        == "Optional metadata-only lower bound date (YYYY-MM-DD)."
    )
    assert (
        properties["valid_until"]["description"]
        == "Optional metadata-only upper bound date (YYYY-MM-DD)."
    )


def test_schema_includes_expected_top_level_required_fields():
    required = _parsed()["required"]
    assert "fingerprint_id" in required
    assert "format" in required
    assert "assertions" in required


def test_schema_contains_v0_1_assertion_subschemas():
    defs = _parsed()["$defs"]
    for key in [
        "assertion_sheet_exists",
        "assertion_cell_eq",
        "assertion_cell_regex",
        "assertion_range_non_null",
        "assertion_sheet_min_rows",
        "assertion_column_search",
        "assertion_header_row_match",
        "assertion_filename_regex",
        "assertion_sheet_name_regex",
    ]:
        assert key in defs, f"missing definition: {key}"


def test_schema_marks_deferred_assertions_as_unsupported_in_v0_1():
    defs = _parsed()["$defs"]
    for key in [
        "assertion_range_populated",
        "assertion_sum_eq",
        "assertion_within_tolerance",
    ]:
        assert "unsupported in v0.1" in defs[key]["description"]
        assert defs[key]["x-runtime-support"] == "unsupported_in_v0_1"


def test_schema_output_is_deterministic():
    first = dsl_json_schema()
    second = dsl_json_schema()
    assert first == second
    assert json.loads(first)["title"] == "Fingerprint DSL Definition"


def test_schema_covers_argus_example_assertion_types():
    sample = {
        "fingerprint_id": "argus-model.v1",
        "format": "xlsx",
        "assertions": [
            {"sheet_exists": "Assumptions"},
            {
                "cell_eq": {
                    "sheet": "Assumptions",
                    "cell": "A3",
                    "value": "Market Leasing Assumptions",
                }
            },
            {"range_non_null": {"sheet": "Assumptions", "range": "A3:D10"}},
            {"sheet_min_rows": {"sheet": "Rent Roll", "min_rows": 10}},
        ],
    }
    supported = _named_assertion_keys(_parsed())
    for assertion in sample["assertions"]:
        key = next(k for k in assertion if k != "name")
        assert key in supported, f"schema missing assertion key '{key}'"


def test_named_assertion_refs_all_resolve_in_order():
    defs = _parsed()["$defs"]
    refs = [entry["$ref"] for entry in defs["namedAssertion"]["oneOf"]]
    assert len(refs) == 26
    assert refs[0] == "#/$defs/assertion_filename_regex"
    assert refs[-1] == "#/$defs/assertion_metadata_regex"
    for ref in refs:
        assert ref.rsplit("/", 1)[-1] in defs


def test_format_enum_and_content_hash_algorithm():
    parsed = _parsed()
    assert parsed["properties"]["format"]["enum"] == [
        "xlsx",
        "csv",
        "pdf",
        "markdown",
        "text",
    ]
    content_hash = parsed["$defs"]["contentHashConfig"]
    assert content_hash["properties"]["algorithm"]["enum"] == ["blake3"]
    assert content_hash["required"] == ["algorithm", "over"]


def test_extract_section_types_and_default():
    parsed = _parsed()
    section = parsed["$defs"]["extractSection"]
    assert section["properties"]["type"]["enum"] == [
        "range",
        "table",
        "section",
        "text_match",
    ]
    assert section["required"] == ["name", "type"]
    assert section["properties"]["index"] == {"type": "integer", "minimum": 0}
    assert section["properties"]["anchor"] == {"type": "string"}
    assert parsed["properties"]["extract"]["default"] == []


def test_top_level_is_closed_object():
    parsed = _parsed()
    assert parsed["type"] == "object"
    assert parsed["additionalProperties"] is False
    assert parsed["$schema"] == "https://json-schema.org/draft/2020-12/schema"


def test_json_text_is_pretty_printed_with_sorted_top_level_keys():
    text = dsl_json_schema()
    assert text.startswith('{\n  "$defs": {')
    assert list(json.loads(text)) == sorted(json.loads(text))


def test_dsl_schema_matches_json_and_is_fresh():
    first = dsl_schema()
    first["title"] = "changed"
    second = dsl_schema()
    assert second["title"] == "Fingerprint DSL Definition"
    assert json.loads(dsl_json_schema()) == second