"""
Tests for set-if-absent field sets.
"""

from mdsync.core.errors import BadReference
from mdsync.core.sync import FieldSet


class TestFieldSet:
    """Test field precedence."""

    def test_first_writer_wins(self):
        """Later contributions never overwrite a set field."""
        fields = FieldSet()
        assert fields.set("title", "first") is True
        assert fields.set("title", "second") is False
        assert fields["title"] == "first"

    def test_none_is_ignored(self):
        """None does not claim a field."""
        fields = FieldSet()
        fields.set("title", None)
        assert "title" not in fields
        fields.set("title", "real")
        assert fields["title"] == "real"

    def test_falsy_values_count(self):
        """Empty strings, zero and False are real values."""
        fields = FieldSet()
        fields.set("order", 0)
        fields.set("order", 5)
        assert fields["order"] == 0

    def test_error_is_terminal(self):
        """Once an error is set, nothing else is accepted."""
        fields = FieldSet()
        error = BadReference("nope")
        fields.set("anything", error)
        assert fields.error is error
        assert fields.set("title", "late") is False
        assert len(fields) == 0

    def test_compute_is_lazy(self):
        """compute only calls its function when the field is still open."""
        calls = []
        fields = FieldSet()
        fields.set("content", "given")

        fields.compute("content", lambda: calls.append("content") or "rendered")
        fields.compute("excerpt", lambda: calls.append("excerpt") or "short", when=None)
        fields.compute("slug", lambda: calls.append("slug") or "a-slug")

        assert calls == ["slug"]
        assert fields.as_dict() == {"content": "given", "slug": "a-slug"}

    def test_compute_captures_document_errors(self):
        """A DocumentError raised while computing becomes the set's error."""

        def fail():
            raise BadReference("bad date")

        fields = FieldSet()
        fields.compute("date", fail)
        assert isinstance(fields.error, BadReference)

    def test_replace(self):
        """replace overwrites set fields only."""
        fields = FieldSet()
        fields.replace("content", "ignored")
        assert "content" not in fields

        fields.set("content", "<h1>T</h1><p>x</p>")
        fields.replace("content", "<p>x</p>")
        assert fields.get("content") == "<p>x</p>"
