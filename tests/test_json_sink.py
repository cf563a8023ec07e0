"""Tests for the JSON file sink"""

import json

import pytest

from apisync.domain.models.errors import PersistenceError
from apisync.domain.models.fetch_result import FailureKind
from apisync.infrastructure.storage.json_sink import JsonFileSink


def test_write_creates_pretty_json(tmp_path):
    sink = JsonFileSink(tmp_path / "out")

    path = sink.write("usuarios_sync.json", [{"id": 1, "nombre": "José"}])

    assert path == (tmp_path / "out" / "usuarios_sync.json").resolve()
    content = path.read_text(encoding="utf-8")
    assert json.loads(content) == [{"id": 1, "nombre": "José"}]
    assert "José" in content
    assert content.startswith("[\n  {")


def test_write_overwrites_existing_file(tmp_path):
    sink = JsonFileSink(tmp_path)
    sink.write("data.json", [1])

    sink.write("data.json", [2])

    assert json.loads((tmp_path / "data.json").read_text(encoding="utf-8")) == [2]


def test_destination_outside_base_dir_is_rejected(tmp_path):
    sink = JsonFileSink(tmp_path / "out")

    with pytest.raises(PersistenceError, match="outside"):
        sink.write("../escape.json", [])


def test_unserializable_records(tmp_path):
    sink = JsonFileSink(tmp_path)

    with pytest.raises(PersistenceError, match="cannot serialize"):
        sink.write("data.json", [object()])


def test_os_error_becomes_persistence_error(tmp_path):
    (tmp_path / "taken").mkdir()
    sink = JsonFileSink(tmp_path)

    with pytest.raises(PersistenceError) as exc_info:
        sink.write("taken", [])

    assert exc_info.value.kind == FailureKind.IO
    assert isinstance(exc_info.value.__cause__, OSError)
