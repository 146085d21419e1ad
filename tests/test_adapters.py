"""Tests for storage adapters."""

import os
import shutil
import tempfile
from pathlib import Path

import pytest

from ctxstash.adapters import (
    FileStorageAdapter,
    StorageReadParams,
    StorageWriteParams,
    build_key,
    sanitize_key_name,
)
from ctxstash.adapters.filesystem import file_uri_to_options
from ctxstash.storage.resolver import create_storage_adapter, resolve_file_uri_from_base_dir


class TestKeyResolution:
    """Key sanitizing shared by all adapters."""

    def test_sanitize_strips_traversal(self):
        assert sanitize_key_name("../file.txt") == "file.txt"
        assert sanitize_key_name("..\\..\\file.txt") == "file.txt"
        assert sanitize_key_name("/absolute/path") == "absolute/path"
        assert sanitize_key_name("a/./b//c") == "a/b/c"
        assert sanitize_key_name("..") == ""

    def test_build_key_folds_prefix_and_session(self):
        assert build_key("f1.json") == "f1.json"
        assert build_key("f1.json", prefix="data/") == "data/f1.json"
        assert build_key("f1.json", session_id="s1") == "s1/tool-results/f1.json"
        assert build_key("f1.json", prefix="data", session_id="s1") == "data/s1/tool-results/f1.json"


class TestFileStorageAdapter:
    """Test suite for filesystem storage adapter."""

    def setup_method(self):
        self.temp_dir = tempfile.mkdtemp(prefix="ctxstash_adapter_test_")
        self.adapter = FileStorageAdapter(base_dir=self.temp_dir)

    def teardown_method(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_resolve_key(self):
        assert self.adapter.resolve_key("file.txt") == "file.txt"

        adapter_with_prefix = FileStorageAdapter(self.temp_dir, prefix="data")
        assert adapter_with_prefix.resolve_key("file.txt") == "data/file.txt"

        assert self.adapter.resolve_key("../file.txt") == "file.txt"
        assert self.adapter.resolve_key("/absolute/path") == "absolute/path"

    def test_resolve_key_is_deterministic_per_session(self):
        adapter = FileStorageAdapter(self.temp_dir, session_id="session-abc")
        first = adapter.resolve_key("search.json")
        assert first == "session-abc/tool-results/search.json"
        assert adapter.resolve_key("search.json") == first

    def test_write_and_read_text(self):
        params = StorageWriteParams(key="test.txt", body="Hello, World!", content_type="text/plain")

        result = self.adapter.write(params)
        assert result.key == "test.txt"
        assert result.url.startswith("file://")

        file_path = Path(self.temp_dir) / "test.txt"
        assert file_path.read_text() == "Hello, World!"

        assert self.adapter.read_text(StorageReadParams(key="test.txt")) == "Hello, World!"

    def test_write_overwrites_existing_key(self):
        self.adapter.write(StorageWriteParams(key="tool.json", body="first"))
        self.adapter.write(StorageWriteParams(key="tool.json", body="second"))

        assert self.adapter.read_text(StorageReadParams(key="tool.json")) == "second"

    def test_write_and_read_bytes(self):
        binary_data = b"\x00\x01\x02\x03"
        self.adapter.write(StorageWriteParams(key="binary.dat", body=binary_data))

        assert (Path(self.temp_dir) / "binary.dat").read_bytes() == binary_data

        with self.adapter.open_read_stream(StorageReadParams(key="binary.dat")) as stream:
            assert stream.read() == binary_data

    def test_write_creates_directories(self):
        result = self.adapter.write(StorageWriteParams(key="nested/deep/file.txt", body="Content"))
        assert result.key == "nested/deep/file.txt"

        file_path = Path(self.temp_dir) / "nested" / "deep" / "file.txt"
        assert file_path.read_text() == "Content"

    def test_keys_cannot_escape_base_dir(self):
        with pytest.raises(ValueError):
            self.adapter.write(StorageWriteParams(key="../outside.txt", body="nope"))

        with pytest.raises(ValueError):
            self.adapter.read_text(StorageReadParams(key="../../etc/passwd"))

    def test_read_nonexistent_file(self):
        with pytest.raises(FileNotFoundError):
            self.adapter.read_text(StorageReadParams(key="nonexistent.txt"))

        with pytest.raises(FileNotFoundError):
            self.adapter.open_read_stream(StorageReadParams(key="nonexistent.txt"))

    def test_adapter_string_representation(self):
        str_repr = str(self.adapter)
        assert str_repr.startswith("file://")
        assert str_repr == Path(self.temp_dir).resolve().as_uri()

        adapter_with_prefix = FileStorageAdapter(self.temp_dir, prefix="data")
        assert str(adapter_with_prefix).endswith("/data")

    def test_session_id_not_part_of_uri(self):
        adapter = FileStorageAdapter(self.temp_dir, session_id="s1")
        assert str(adapter) == str(self.adapter)

    def test_file_uri_to_options(self):
        options = file_uri_to_options("file:///tmp/storage")
        assert options == {"base_dir": "/tmp/storage"}

        if os.name == "nt":
            options = file_uri_to_options("file:///C:/temp/storage")
            assert options["base_dir"].replace("\\", "/") == "C:/temp/storage"

        with pytest.raises(ValueError):
            file_uri_to_options("http://example.com")


class TestCreateStorageAdapter:
    """Adapter resolution from URIs and instances."""

    def setup_method(self):
        self.temp_dir = tempfile.mkdtemp(prefix="ctxstash_resolver_test_")

    def teardown_method(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_instance_is_returned_unchanged(self):
        adapter = FileStorageAdapter(self.temp_dir)
        assert create_storage_adapter(adapter) is adapter

    def test_file_uri_with_session(self):
        uri = resolve_file_uri_from_base_dir(self.temp_dir)
        adapter = create_storage_adapter(uri, session_id="s1")

        assert isinstance(adapter, FileStorageAdapter)
        assert str(adapter) == uri
        assert adapter.resolve_key("f1.json") == "s1/tool-results/f1.json"

    def test_default_is_temp_directory(self):
        adapter = create_storage_adapter()
        try:
            assert isinstance(adapter, FileStorageAdapter)
            assert adapter.base_dir.name.startswith("ctxstash_")
        finally:
            shutil.rmtree(adapter.base_dir, ignore_errors=True)

    def test_unsupported_schemes(self):
        with pytest.raises(NotImplementedError):
            create_storage_adapter("blob://container/prefix")

        with pytest.raises(ValueError):
            create_storage_adapter("ftp://host/path")
