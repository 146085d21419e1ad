"""Tests for reference formatting and parsing."""

from ctxstash.storage.references import (
    ParsedReference,
    ReferenceKind,
    format_read_fallback,
    format_reference,
    format_storage_path_for_display,
    is_reference,
    parse_reference,
)


class TestDisplayPath:
    def test_slash_schemes(self):
        assert format_storage_path_for_display("file:///tmp/store", "a/b.json") == "file:///tmp/store/a/b.json"
        assert format_storage_path_for_display("file:///tmp/store/", "b.json") == "file:///tmp/store/b.json"
        assert format_storage_path_for_display("sandbox://sbx-1", "b.json") == "sandbox://sbx-1/b.json"

    def test_other_schemes_use_colon(self):
        assert format_storage_path_for_display("s3://bucket/prefix", "b.json") == "s3://bucket/prefix:b.json"

    def test_empty_uri(self):
        assert format_storage_path_for_display("", "b.json") == "b.json"


class TestFormatReference:
    def test_written_reference_text(self):
        text = format_reference(ReferenceKind.WRITTEN, "file:///tmp/store", "s1/tool-results/f1.json")
        assert text == (
            "Written to file: file:///tmp/store/s1/tool-results/f1.json. "
            "Key: s1/tool-results/f1.json. Use the read/search tools to inspect its contents."
        )

    def test_read_reference_text(self):
        text = format_reference(ReferenceKind.READ, "s3://bucket", "f1.json")
        assert text == "Read from file: s3://bucket:f1.json. Key: f1.json"

    def test_read_fallback(self):
        assert format_read_fallback("notes.txt") == "Read from file: notes.txt"
        assert format_read_fallback(None) == "Read from file: <unknown>"


class TestParseReference:
    def test_written_round_trip(self):
        for uri, key in [
            ("file:///tmp/store", "s1/tool-results/f1.json"),
            ("sandbox://sbx-42", "f1.json"),
            ("s3://bucket/prefix", "prefix/s1/tool-results/search.json"),
        ]:
            parsed = parse_reference(format_reference(ReferenceKind.WRITTEN, uri, key))
            assert parsed == ParsedReference(kind=ReferenceKind.WRITTEN, adapter_uri=uri, key=key)

    def test_read_round_trip(self):
        parsed = parse_reference(format_reference(ReferenceKind.READ, "file:///data", "k.json"))
        assert parsed == ParsedReference(kind=ReferenceKind.READ, adapter_uri="file:///data", key="k.json")

    def test_read_without_key(self):
        parsed = parse_reference("Read from file: notes.txt")
        assert parsed == ParsedReference(kind=ReferenceKind.READ)

    def test_malformed_references_are_tolerated(self):
        for text in ["Written to file: ", "Written to file: garbage", "Read from file: "]:
            parsed = parse_reference(text)
            assert parsed is not None
            assert parsed.key is None
            assert is_reference(text)

    def test_non_references(self):
        assert parse_reference("Some tool output") is None
        assert parse_reference({"type": "json"}) is None
        assert parse_reference(None) is None
        assert not is_reference("written to file: lowercase does not count")
