"""
Tests for exporting records to Markdown and re-exporting sidecar meta.
"""

import pytest

from mdsync.core.documents import MarkdownFile, Workspace
from mdsync.core.errors import BadReference, MissingGuid
from mdsync.core.sync.exporters import PostExporter, find_record

RECORD = {
    "id": "1",
    "guid": "urn:uuid:a",
    "title": "Hi",
    "slug": "hi",
    "date_utc": "2024-01-02 03:04:05",
    "type": "post",
    "status": "draft",
    "tags": ["a"],
    "meta": {},
    "comment_status": "closed",
    "content": "<p>x</p>\n",
}


class TestToMarkdown:
    """Test record to front matter mapping."""

    def test_fields(self):
        md = PostExporter().to_markdown(RECORD)
        assert md.dump() == (
            "---\n"
            "ID: urn:uuid:a\n"
            "Title: Hi\n"
            "Slug: hi\n"
            "Date: 2024-01-02 03:04:05 UTC\n"
            "Draft: true\n"
            "Tags: [a]\n"
            "Comments: closed\n"
            "---\n"
            "<p>x</p>\n"
        )

    def test_published_and_other_statuses(self):
        exporter = PostExporter()
        assert exporter.to_markdown(dict(RECORD, status="publish")).meta["Draft"] is False
        meta = exporter.to_markdown(dict(RECORD, status="private")).meta
        assert meta["Status"] == "private"
        assert "Draft" not in meta

    def test_type_and_updated(self):
        meta = PostExporter().to_markdown(
            dict(RECORD, type="page", updated_at="2024-05-01 00:00:00")
        ).meta
        assert meta["Type"] == "page"
        assert meta["Updated"] == "2024-05-01 00:00:00 UTC"


class TestExport:
    """Test writing exported files."""

    def test_named_after_slug(self, workspace, tmp_path):
        path = PostExporter().export(RECORD, tmp_path, workspace)
        assert path == tmp_path / "hi.md"
        assert MarkdownFile.from_file(path).meta["ID"] == "urn:uuid:a"

    def test_taken_name_gets_suffix(self, workspace, tmp_path):
        (tmp_path / "hi.md").write_text("---\nID: urn:uuid:other\n---\n")
        (tmp_path / "hi-1.md").write_text("no front matter\n")

        path = PostExporter().export(RECORD, tmp_path, workspace)
        assert path == tmp_path / "hi-2.md"

    def test_same_record_is_overwritten(self, workspace, tmp_path):
        (tmp_path / "hi.md").write_text("---\nID: urn:uuid:a\n---\nold\n")
        path = PostExporter().export(RECORD, tmp_path, workspace)

        assert path == tmp_path / "hi.md"
        assert path.read_text().endswith("<p>x</p>\n")

    def test_no_slug(self, workspace, tmp_path):
        path = PostExporter().export(dict(RECORD, slug=None), tmp_path, workspace)
        assert path.name == "record-1.md"

    def test_export_hook(self, workspace, tmp_path):
        workspace.hooks.add("export", lambda md, record: md.meta.__setitem__("Author", "hooked"))
        path = PostExporter().export(RECORD, tmp_path, workspace)
        assert "Author: hooked" in path.read_text()


class TestFindRecord:
    """Test locating records by identifier or GUID."""

    def test_by_identifier_and_guid(self, store):
        identifier = store.commit("post", None, {"guid": "urn:uuid:a"})
        assert find_record(store, identifier)["guid"] == "urn:uuid:a"
        assert find_record(store, "urn:uuid:a")["id"] == identifier

    def test_missing(self, store):
        with pytest.raises(BadReference, match="No record found for 'urn:uuid:x'"):
            find_record(store, "urn:uuid:x")


class TestUpdateSidecar:
    """Test re-exporting record meta into sidecar files."""

    @pytest.fixture
    def synced(self, store):
        return store.commit(
            "post", None, {"guid": "urn:uuid:a", "meta": {"views": 3, "lang": "en", "secret": 1}}
        )

    def test_writes_listed_keys(self, workspace, store, write, synced, config):
        path = write("a.md", "---\nID: urn:uuid:a\nExport-Meta: [views, lang, absent]\n---\nx\n")
        metafile = PostExporter().update_sidecar(workspace.doc(path), store)

        assert metafile == path.with_name("a.meta.yml")
        assert metafile.read_text() == "Meta: {views: 3, lang: en}\n"
        assert Workspace(config).doc(path).meta["Meta"] == {"views": 3, "lang": "en"}

    def test_mapping_form(self, workspace, store, write, synced):
        path = write("a.md", "---\nID: urn:uuid:a\nExport-Meta: {views: true, lang: false}\n---\n")
        metafile = PostExporter().update_sidecar(workspace.doc(path), store)
        assert metafile.read_text() == "Meta: {views: 3}\n"

    def test_comma_string(self, workspace, store, write, synced):
        path = write("a.md", "---\nID: urn:uuid:a\nExport-Meta: lang, views\n---\n")
        metafile = PostExporter().update_sidecar(workspace.doc(path), store)
        assert metafile.read_text() == "Meta: {lang: en, views: 3}\n"

    def test_removes_stale_sidecar(self, workspace, store, write, synced):
        stale = write("a.meta.yml", "Meta: {views: 1}\n")
        path = write("a.md", "---\nID: urn:uuid:a\n---\n")

        assert PostExporter().update_sidecar(workspace.doc(path), store) is None
        assert not stale.exists()

    def test_missing_guid(self, workspace, store, write):
        with pytest.raises(MissingGuid):
            PostExporter().update_sidecar(workspace.doc(write("a.md", "x\n")), store)

    def test_not_synced(self, workspace, store, write):
        path = write("a.md", "---\nID: urn:uuid:new\n---\n")
        with pytest.raises(BadReference, match="has not been synced yet"):
            PostExporter().update_sidecar(workspace.doc(path), store)
