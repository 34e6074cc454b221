"""
Tests for schema loading and the validation gateway
"""
import pytest

from core.errors import ParseFailure, ResourceReadFailure, SchemaValidationFailure
from core.schema_loader import load_json_file, parse_json
from core.validation import schema_identity, validate
from tests.fakes import FakeWorkspace, MemoryHost


def test_parse_json_loose_dialect():
    """测试宽松JSON：注释与尾随逗号"""
    text = """
    {
      // builders shipped by this package
      "builders": {
        "build": {"class": "./build", "schema": "./schema.json",},
      },
    }
    """
    assert parse_json(text) == {"builders": {"build": {"class": "./build", "schema": "./schema.json"}}}


def test_parse_json_invalid():
    with pytest.raises(ParseFailure) as exc_info:
        parse_json("{builders: [", "/pkg/builders.json")
    assert exc_info.value.path == "/pkg/builders.json"


@pytest.mark.asyncio
async def test_load_json_file():
    host = MemoryHost({"/a.json": '{"a": 1, /* note */ "b": [1, 2,]}'})
    assert await load_json_file(host, "/a.json") == {"a": 1, "b": [1, 2]}
    assert host.reads["/a.json"] == 1


@pytest.mark.asyncio
async def test_load_json_file_missing():
    """测试读取失败转换为ResourceReadFailure"""
    with pytest.raises(ResourceReadFailure) as exc_info:
        await load_json_file(MemoryHost(), "/missing.json")
    assert exc_info.value.path == "/missing.json"


@pytest.mark.asyncio
async def test_load_json_file_not_utf8():
    host = MemoryHost({"/bin.json": b"\xff\xfe\x00"})
    with pytest.raises(ParseFailure):
        await load_json_file(host, "/bin.json")


def test_schema_identity():
    assert schema_identity({"$id": "Id", "title": "Title"}, "x") == "Id"
    assert schema_identity({"title": "Title"}, "x") == "Title"
    assert schema_identity({}, "fallback") == "fallback"


class _RaisingWorkspace:
    async def validate(self, value, schema):
        raise ValueError("'name' is a required property")


@pytest.mark.asyncio
async def test_validate_wraps_foreign_errors():
    """测试网关包装非架构错误"""
    with pytest.raises(SchemaValidationFailure) as exc_info:
        await validate(_RaisingWorkspace(), {"x": 1}, {"title": "Options"})

    error = exc_info.value
    assert error.schema_id == "Options"
    assert error.value == {"x": 1}
    assert error.errors == ["'name' is a required property"]


@pytest.mark.asyncio
async def test_validate_returns_validated_value():
    workspace = FakeWorkspace({}, MemoryHost())
    schema = {"type": "object", "properties": {"watch": {"type": "boolean", "default": False}}}

    value = {"outputPath": "dist"}
    validated = await validate(workspace, value, schema)

    assert validated == {"outputPath": "dist", "watch": False}
    assert value == {"outputPath": "dist"}
