import pytest

from spector import DocumentError, Schema, SchemaError
from spector.loaders import (
    DocumentLoader,
    load_document,
    load_schema,
    parse_document,
    schema_issues,
    validate_file,
    validate_text,
)

SCHEMA_YAML = """\
url:
  type: string
  required: true
connections:
  type: non_neg_integer
  default: 5
"""

SCHEMA_JSON = """\
{
  "url": {"type": "string", "required": true},
  "connections": {"type": "non_neg_integer", "default": 5}
}
"""


def test_parse_document():
    assert parse_document("a: 1\nb: [x, y]\n") == {"a": 1, "b": ["x", "y"]}
    assert parse_document('{"a": 1}', "json") == {"a": 1}
    assert parse_document("") == {}


@pytest.mark.parametrize(
    "content, fmt, message",
    [
        ("a: [1, 2\n", "yaml", "Failed to parse YAML content"),
        ("{not json}", "json", "Failed to parse JSON content"),
        ("a: 1", "toml", "Unsupported document format 'toml'"),
    ],
)
def test_parse_document_errors(content, fmt, message):
    with pytest.raises(DocumentError, match=message):
        parse_document(content, fmt)


def test_load_document_by_suffix(tmp_path):
    yaml_path = tmp_path / "data.yaml"
    yaml_path.write_text("a: 1\n")
    json_path = tmp_path / "data.json"
    json_path.write_text('{"a": 2}')

    assert load_document(yaml_path) == {"a": 1}
    assert load_document(str(json_path)) == {"a": 2}


def test_load_document_missing_file(tmp_path):
    with pytest.raises(DocumentError, match="Document file not found"):
        load_document(tmp_path / "missing.yaml")


def test_loader_cache(tmp_path):
    path = tmp_path / "data.yaml"
    path.write_text("a: 1\n")

    cached = DocumentLoader(cache_enabled=True)
    uncached = DocumentLoader(cache_enabled=False)
    assert cached.load(path) == {"a": 1}
    assert uncached.load(path) == {"a": 1}

    path.write_text("a: 2\n")
    assert cached.load(path) == {"a": 1}
    assert uncached.load(path) == {"a": 2}

    cached.clear_cache()
    assert cached.load(path) == {"a": 2}


def test_load_with_source(tmp_path):
    path = tmp_path / "data.yaml"
    path.write_text("a:\n  b: 1\n")

    data, source_map = DocumentLoader(cache_enabled=False).load_with_source(path)

    assert data == {"a": {"b": 1}}
    assert source_map["/a/b"]["line"] == 2


@pytest.mark.parametrize("content, fmt", [(SCHEMA_YAML, "yaml"), (SCHEMA_JSON, "json")])
def test_load_schema_from_text(content, fmt):
    schema = load_schema(content, fmt=fmt)
    assert isinstance(schema, Schema)
    assert list(schema) == ["url", "connections"]


def test_load_schema_from_file(tmp_path):
    path = tmp_path / "schema.yaml"
    path.write_text(SCHEMA_YAML)
    assert list(load_schema(path)) == ["url", "connections"]


def test_schema_issues_point_at_the_bad_attribute():
    issues = schema_issues({"a": {"type": "strng"}})
    assert [issue.yaml_path for issue in issues] == ["/a/type"]

    issues = schema_issues({"a": {"required": True, "typo": 1}})
    assert len(issues) == 1
    assert issues[0].yaml_path == "/a"
    assert "typo" in issues[0].message

    assert schema_issues({"a": {"type": {"list": "string"}, "keys": {"b": {}}}}) == []


def test_load_schema_reports_document_issues():
    with pytest.raises(SchemaError) as exc_info:
        load_schema("a:\n  type: strng\n", fmt="yaml")
    assert "invalid schema document (yaml text)" in str(exc_info.value)
    assert "/a/type" in str(exc_info.value)


def test_load_schema_reports_meta_schema_errors():
    with pytest.raises(SchemaError, match="invalid default for 'a' key"):
        load_schema("a:\n  type: integer\n  default: x\n", fmt="yaml")


def test_load_schema_with_named_validators():
    schema = load_schema("n:\n  type: {custom: double}\n", fmt="yaml", validators={"double": lambda v: v * 2})
    assert validate_text("n: 4\n", "n:\n  type: {custom: double}\n", validators={"double": lambda v: v * 2}).value == {
        "n": 8
    }
    assert list(schema) == ["n"]


def test_validate_text():
    assert validate_text("url: u\n", SCHEMA_YAML).value == {"url": "u", "connections": 5}
    assert validate_text('{"url": "u", "connections": 1}', SCHEMA_JSON, fmt="json").value == {
        "url": "u",
        "connections": 1,
    }

    result = validate_text("connections: -1\nurl: u\n", SCHEMA_YAML)
    assert result.error.key == "connections"


def test_validate_text_with_nested_textual_types():
    schema_text = """\
servers:
  type: non_empty_list
  keys:
    host: {type: string, required: true}
    mode: {type: {in: [active, standby]}, default: active}
    ports: {type: {list: pos_integer}, default: []}
limits:
  type: {map: [string, non_neg_integer]}
"""
    data_text = """\
servers:
  - host: a
  - host: b
    mode: standby
    ports: [80, 443]
limits:
  cpu: 2
"""
    assert validate_text(data_text, schema_text).value == {
        "servers": [
            {"host": "a", "mode": "active", "ports": []},
            {"host": "b", "mode": "standby", "ports": [80, 443]},
        ],
        "limits": {"cpu": 2},
    }


def test_validate_file(tmp_path):
    schema_path = tmp_path / "schema.yaml"
    schema_path.write_text(SCHEMA_YAML)
    data_path = tmp_path / "data.yaml"
    data_path.write_text("url: u\n")

    assert validate_file(data_path, schema_path).value == {"url": "u", "connections": 5}
    assert validate_file(data_path, {"url": {"type": "integer"}}).error.key == "url"
