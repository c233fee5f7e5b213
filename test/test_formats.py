"""Tests for the JSON/YAML import and export handler."""

import json

import pytest
import yaml

from confstore.errors import (
    ConfigFileNotFoundError,
    FormatError,
    InvalidPathError,
    UnsupportedFormatError,
)
from confstore.formats import ImportExport
from confstore.nested import NestedMap


class TestRead:
    """Test suite for document decoding."""

    def test_json_string(self):
        formats = ImportExport()

        assert formats.read_json('{"a": {"b": 1}}') == {"a": {"b": 1}}

    def test_yaml_string(self):
        formats = ImportExport()

        assert formats.read_yaml("a:\n  b: 1\n") == {"a": {"b": 1}}

    def test_json_file(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text('{"debug": true}')
        formats = ImportExport()

        assert formats.read_json(str(path)) == {"debug": True}
        assert formats.read_json(path) == {"debug": True}

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "settings.yml"
        path.write_text("debug: true\n")

        assert ImportExport().read_yaml(str(path)) == {"debug": True}

    def test_malformed_json(self):
        with pytest.raises(FormatError) as exc_info:
            ImportExport().read_json('{"a": ')

        assert isinstance(exc_info.value.__cause__, json.JSONDecodeError)
        assert exc_info.value.source == "<string>"

    def test_malformed_yaml_file(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("a: [1, 2\nb: 3\n")

        with pytest.raises(FormatError) as exc_info:
            ImportExport().read_yaml(str(path))

        assert isinstance(exc_info.value.__cause__, yaml.YAMLError)
        assert exc_info.value.source == str(path)

    def test_missing_file(self, tmp_path):
        """A string which looks like a file name is not parsed as a document."""
        with pytest.raises(ConfigFileNotFoundError):
            ImportExport().read_json(str(tmp_path / "missing.json"))
        with pytest.raises(ConfigFileNotFoundError):
            ImportExport().read_yaml("missing.yaml")

    def test_document_mentioning_a_file_name(self):
        """A one line document ending in an extension is decoded, not opened."""
        formats = ImportExport()

        assert formats.read_yaml("include: base.yaml") == {"include": "base.yaml"}
        assert formats.read_yaml("- other.yaml") == ["other.yaml"]
        assert formats.read_json('["settings.json"]') == ["settings.json"]

    def test_invalid_utf8_file(self, tmp_path):
        path = tmp_path / "latin.json"
        path.write_bytes(b'{"name": "caf\xe9"}')

        with pytest.raises(FormatError) as exc_info:
            ImportExport().read_file(path)

        assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)
        assert exc_info.value.source == str(path)

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert ImportExport().read_file(path) is None

    def test_read_file_by_extension(self, config_dir):
        formats = ImportExport()

        assert formats.read_file(config_dir / "cache.json")["ttl"] == 300
        assert formats.read_file(config_dir / "app.yaml")["name"] == "demo"

    def test_extension_case(self, tmp_path):
        path = tmp_path / "upper.JSON"
        path.write_text('{"a": 1}')

        assert ImportExport().read_file(path) == {"a": 1}

    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("a: 1")

        with pytest.raises(UnsupportedFormatError, match=r"\.txt"):
            ImportExport().read_file(path)

    def test_register(self, tmp_path):
        """New formats can be registered with their own decoder."""
        path = tmp_path / "values.csv"
        path.write_text("a=1,b=2")
        formats = ImportExport()
        formats.register(
            "csv",
            "kv",
            lambda text: dict(item.split("=") for item in text.split(",")),
        )

        assert formats.format_for(path) == "kv"
        assert formats.read_file(path) == {"a": "1", "b": "2"}


class TestExport:
    """Test suite for document encoding and file export."""

    def test_export_all(self, tmp_path):
        items = NestedMap({"a": {"b": 1}, "c": [1, 2]})
        output_path = ImportExport().export_file(items, tmp_path, "*", "out.json")

        assert output_path == str(tmp_path / "out.json")
        with open(output_path, "r", encoding="utf-8") as f:
            assert json.load(f) == {"a": {"b": 1}, "c": [1, 2]}

    def test_export_selection(self, tmp_path):
        items = NestedMap({"a": {"b": 1, "x": 0}, "c": 2, "d": 3})
        formats = ImportExport()

        formats.export_file(items, tmp_path, "a.b", "one.json")
        formats.export_file(items, tmp_path, ["c", "d"], "two.yaml", "yaml")

        assert formats.read_file(tmp_path / "one.json") == {"a": {"b": 1}}
        assert formats.read_file(tmp_path / "two.yaml") == {"c": 2, "d": 3}

    def test_export_leaves_no_temporary_file(self, tmp_path):
        items = NestedMap({"a": 1})
        formats = ImportExport()
        formats.export_file(items, tmp_path, filename="out.json")
        formats.export_file(items, tmp_path, filename="out.json")

        assert [p.name for p in tmp_path.iterdir()] == ["out.json"]

    def test_export_missing_directory(self, tmp_path):
        with pytest.raises(InvalidPathError):
            ImportExport().export_file(NestedMap(), tmp_path / "missing")

    def test_export_unknown_format(self, tmp_path):
        with pytest.raises(UnsupportedFormatError):
            ImportExport().export_file(NestedMap(), tmp_path, fmt="xml")

        assert list(tmp_path.iterdir()) == []

    def test_dump_dates_as_strings(self):
        data = yaml.safe_load("released: 2024-01-01")

        assert json.loads(ImportExport().dump(data)) == {"released": "2024-01-01"}
