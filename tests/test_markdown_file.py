"""
Tests for Markdown file parsing, atomic writes and GUID injection.
"""

import os
from unittest.mock import patch

import pytest

from mdsync.core.documents import MarkdownFile, inject_guid, write_file
from mdsync.core.errors import InvalidDocument, SaveFailed


class TestParse:
    """Test front matter splitting."""

    def test_front_matter_and_body(self):
        """Front matter is parsed; the body is kept verbatim."""
        md = MarkdownFile.parse("---\nTitle: Hi\nTags: [a, b]\n---\n\nBody  \ntext\n")
        assert md.meta.to_dict() == {"Title": "Hi", "Tags": ["a", "b"]}
        assert md.body == "\nBody  \ntext\n"
        assert md.has_front_matter

    def test_no_front_matter(self):
        """A file without a fence is all body."""
        md = MarkdownFile.parse("# Just text\n")
        assert md.meta.to_dict() == {}
        assert md.body == "# Just text\n"
        assert not md.has_front_matter

    def test_empty_front_matter(self):
        """An empty block is an empty mapping."""
        md = MarkdownFile.parse("---\n---\nBody\n")
        assert md.meta.to_dict() == {}
        assert md.has_front_matter
        assert md.body == "Body\n"

    def test_crlf(self):
        """Windows line endings are accepted."""
        md = MarkdownFile.parse("---\r\nTitle: Hi\r\n---\r\nBody\r\n")
        assert md.meta["Title"] == "Hi"
        assert md.body == "Body\r\n"

    def test_malformed_yaml(self):
        """A YAML syntax error is an InvalidDocument."""
        with pytest.raises(InvalidDocument, match="malformed front matter"):
            MarkdownFile.parse("---\nTitle: [unclosed\n---\n")

    def test_non_mapping(self):
        """Front matter must be a mapping."""
        with pytest.raises(InvalidDocument, match="must be a mapping"):
            MarkdownFile.parse("---\n- a\n- b\n---\n")

    def test_from_file_sets_path(self, tmp_path):
        """Errors from a file name the file."""
        path = tmp_path / "bad.md"
        path.write_text("---\n- a\n---\n")
        with pytest.raises(InvalidDocument) as exc_info:
            MarkdownFile.from_file(path)
        assert exc_info.value.path == path
        assert str(exc_info.value).startswith(str(path))


class TestDumpAndUnfence:
    """Test serialization and fence unwrapping."""

    def test_dump(self):
        """Front matter is re-serialized; the body is appended unchanged."""
        md = MarkdownFile({"Title": "Hi", "Draft": False}, "Body\n")
        assert md.dump() == "---\nTitle: Hi\nDraft: false\n---\nBody\n"

    def test_dump_without_front_matter(self):
        """A body-only file stays body-only."""
        assert MarkdownFile(body="Text\n").dump() == "Text\n"

    def test_unfence(self):
        """A body that is one fenced block is unwrapped."""
        md = MarkdownFile(body="\n```jinja\n{{ Title }}\n```\n")
        assert md.unfence("jinja") == "{{ Title }}\n"

    def test_unfence_other_language(self):
        """Fences in other languages are left alone."""
        body = "```css\nbody {}\n```\n"
        assert MarkdownFile(body=body).unfence("jinja") == body


class TestWriteFile:
    """Test atomic file replacement."""

    def test_writes_content(self, tmp_path):
        """Content is written exactly, including line endings."""
        path = tmp_path / "a.md"
        write_file(path, "one\r\ntwo\n")
        assert path.read_bytes() == b"one\r\ntwo\n"

    def test_keeps_permissions(self, tmp_path):
        """An existing file's mode is preserved."""
        path = tmp_path / "a.md"
        path.write_text("old")
        os.chmod(path, 0o600)
        write_file(path, "new")
        assert path.read_text() == "new"
        assert (path.stat().st_mode & 0o777) == 0o600

    def test_failure_leaves_original(self, tmp_path):
        """If the rename fails, the original is untouched and no temp file remains."""
        path = tmp_path / "a.md"
        path.write_text("original")

        with patch(
            "mdsync.core.documents.markdown.os.replace",
            side_effect=OSError(13, "Permission denied"),
        ):
            with pytest.raises(SaveFailed, match="Permission denied"):
                write_file(path, "replacement")

        assert path.read_text() == "original"
        assert [p.name for p in tmp_path.iterdir()] == ["a.md"]


class TestInjectGuid:
    """Test writing IDs into files."""

    def test_inserts_after_fence(self, tmp_path):
        """The ID line goes right after the opening fence; the rest is untouched."""
        path = tmp_path / "a.md"
        path.write_text("---\nTitle:   Spaced  # comment\n---\nBody\n")

        assert inject_guid(path, "urn:uuid:1") is True
        assert path.read_text() == "---\nID: urn:uuid:1\nTitle:   Spaced  # comment\n---\nBody\n"

    def test_creates_front_matter(self, tmp_path):
        """A file without front matter gets a new block."""
        path = tmp_path / "a.md"
        path.write_text("Body\n")

        inject_guid(path, "urn:uuid:1")
        assert path.read_text() == "---\nID: urn:uuid:1\n---\nBody\n"

    def test_preserves_crlf(self, tmp_path):
        """The inserted line uses the file's line ending."""
        path = tmp_path / "a.md"
        path.write_bytes(b"---\r\nTitle: Hi\r\n---\r\nBody\r\n")

        inject_guid(path, "urn:uuid:1")
        assert path.read_bytes() == b"---\r\nID: urn:uuid:1\r\nTitle: Hi\r\n---\r\nBody\r\n"

    def test_fills_empty_id(self, tmp_path):
        """An empty ID key is filled in place."""
        path = tmp_path / "a.md"
        path.write_text("---\nTitle: Hi\nID:\n---\nBody\n")

        inject_guid(path, "urn:uuid:1")
        assert path.read_text() == "---\nTitle: Hi\nID: urn:uuid:1\n---\nBody\n"

    def test_never_overwrites(self, tmp_path):
        """An existing ID is kept."""
        path = tmp_path / "a.md"
        text = "---\nID: urn:uuid:keep\n---\nBody\n"
        path.write_text(text)

        assert inject_guid(path, "urn:uuid:new") is False
        assert path.read_text() == text
