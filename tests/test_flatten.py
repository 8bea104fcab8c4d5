"""
Flattening Tests
Nested response schemas become flat column sets.
"""
from framework import SuiteRunner, expect_error

from esi2ddl.document import Array, Object, Scalar, parse_schema
from esi2ddl.errors import UnsupportedSchemaType
from esi2ddl.flatten import fill_columns
from esi2ddl.model import Table


def flatten(schema, name="chr_thing"):
    table = Table(name=name, operation="get_thing")
    fill_columns(parse_schema(schema), table)
    return table


def test_parse_schema_variants():
    node = parse_schema({
        "type": "array",
        "items": {"type": "object", "properties": {"id": {"type": "integer"}}, "required": ["id"]},
    })
    assert isinstance(node, Array)
    assert isinstance(node.items, Object)
    assert node.items.required_fields == ("id",)
    assert node.items.properties["id"] == Scalar(type="integer")


def test_object_properties_become_columns():
    table = flatten({
        "type": "object",
        "properties": {
            "name": {"type": "string", "description": "name"},
            "birthday": {"type": "string", "format": "date-time"},
            "security_status": {"type": "number", "format": "float"},
        },
        "required": ["name", "birthday"],
    })
    assert list(table.columns) == ["name", "birthday", "security_status"]
    assert table["name"].type == "varchar"
    assert table["name"].required
    assert table["name"].description == "name"
    assert table["birthday"].type == "timestamp"
    assert not table["security_status"].required
    assert not table.primitive


def test_nested_objects_prefix_names():
    table = flatten({
        "type": "object",
        "properties": {
            "position": {
                "type": "object",
                "properties": {
                    "x": {"type": "number", "format": "double"},
                    "y": {"type": "number", "format": "double"},
                },
                "required": ["x"],
            },
            "stats": {
                "type": "object",
                "properties": {
                    "combat": {"type": "object", "properties": {"kills": {"type": "integer"}}},
                },
            },
        },
    })
    assert list(table.columns) == ["positionx", "positiony", "statscombatkills"]
    assert table["positionx"].required
    assert not table["positiony"].required
    assert table["statscombatkills"].type == "integer"


def test_arrays_unwrap_without_renaming():
    table = flatten({
        "type": "array",
        "items": {
            "type": "object",
            "properties": {
                "skill_id": {"type": "integer", "format": "int32"},
                "tags": {"type": "array", "items": {"type": "object", "properties": {}}},
            },
        },
    })
    assert list(table.columns) == ["skill_id", "tags"]
    # array properties are stored as text
    assert table["tags"].type == "varchar"
    assert not table.primitive


def test_scalar_response_marks_primitive():
    table = flatten({"type": "number", "format": "double"}, name="chr_wallet")
    assert table.primitive
    assert list(table.columns) == ["wallet_id"]
    assert table["wallet_id"].type == "double precision"

    table = flatten({"type": "array", "items": {"type": "integer", "format": "int32"}}, name="chr_implant")
    assert table.primitive
    assert list(table.columns) == ["implant_id"]

    table = flatten({"type": "array", "items": {"type": "integer"}}, name="wars")
    assert list(table.columns) == ["wars_id"]


def test_unsupported_top_level_type():
    error = expect_error(UnsupportedSchemaType, flatten, {"type": "string", "title": "get_status_ok"})
    assert error.type == "string"
    assert "get_status_ok" in str(error)

    error = expect_error(UnsupportedSchemaType, flatten, {"type": "array", "items": {"type": "boolean"}})
    assert error.type == "boolean"


def test_existing_columns_win():
    table = Table(name="chr_thing", operation="get_thing")
    table.add_column("character_id", "integer", required=True, path=True)
    fill_columns(parse_schema({
        "type": "object",
        "properties": {"character_id": {"type": "string"}, "name": {"type": "string"}},
    }), table)
    assert list(table.columns) == ["character_id", "name"]
    assert table["character_id"].type == "integer"
    assert table["character_id"].path


def test_long_and_reserved_names_compiled():
    table = flatten({
        "type": "object",
        "properties": {
            "from": {"type": "integer"},
            "recovery_statistics_cumulative_average_value": {"type": "number", "format": "float"},
        },
    })
    assert table["from"].cname == '"from"'
    assert table["recovery_statistics_cumulative_average_value"].cname == "recovery_s1797218933erage_value"


def run_tests():
    """Run all flattening tests"""
    runner = SuiteRunner(verbose=True)

    runner.run_test(test_parse_schema_variants, "Parse schema variants")
    runner.run_test(test_object_properties_become_columns, "Object properties")
    runner.run_test(test_nested_objects_prefix_names, "Nested objects")
    runner.run_test(test_arrays_unwrap_without_renaming, "Arrays unwrap")
    runner.run_test(test_scalar_response_marks_primitive, "Scalar responses")
    runner.run_test(test_unsupported_top_level_type, "Unsupported top level type")
    runner.run_test(test_existing_columns_win, "Existing columns win")
    runner.run_test(test_long_and_reserved_names_compiled, "Long and reserved names")

    return runner.print_summary()


if __name__ == "__main__":
    import sys
    success = run_tests()
    sys.exit(0 if success else 1)
