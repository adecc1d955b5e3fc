"""
Tests for the Document model.
"""

import hashlib

import pytest

from mdsync.core.documents import Workspace
from mdsync.core.errors import InvalidDocument, InvalidKind


class TestSlugAndPaths:
    """Test slugs and path helpers."""

    def test_slug_from_filename(self, workspace, write):
        """A document's slug is its file name without extension."""
        doc = workspace.doc(write("blog/hello-world.md", "Hi\n"))
        assert doc.slug() == "hello-world"
        assert doc.stem() == "hello-world"
        assert doc.relative_path() == "blog/hello-world.md"

    def test_index_slug_is_directory(self, workspace, write):
        """An index document takes its directory's name."""
        doc = workspace.doc(write("blog/index.md", "Blog\n"))
        assert doc.slug() == "blog"

    def test_metafile(self, workspace, write):
        """The sidecar sits next to the document."""
        path = write("blog/post.md", "x\n")
        assert workspace.doc(path).metafile() == path.with_name("post.meta.yml")

    def test_memoized(self, workspace, write, project):
        """Equivalent paths map to the same Document."""
        path = write("a.md", "x\n")
        assert workspace.doc(path) is workspace.doc(project / "sub" / ".." / "a.md")


class TestMerging:
    """Test sidecar merging and GUIDs."""

    def test_sidecar_fields_are_inherited(self, workspace, write):
        """Sidecar fields fill in what the document does not set."""
        write("post.meta.yml", "Title: From sidecar\nMeta: {views: 3}\n")
        doc = workspace.doc(write("post.md", "---\nTitle: Own\nMeta: {lang: en}\n---\nBody\n"))

        assert doc.meta["Title"] == "Own"
        assert doc.meta["Meta"] == {"views": 3, "lang": "en"}

    def test_bad_sidecar(self, workspace, write):
        """A sidecar that is not a mapping makes the document invalid."""
        write("post.meta.yml", "- a\n")
        with pytest.raises(InvalidDocument, match="metadata file must be a mapping"):
            workspace.doc(write("post.md", "x\n")).load()

    @pytest.mark.parametrize(
        "value", ["!!binary aGVsbG8=", "!!set {a: null}"], ids=["binary", "set"]
    )
    def test_unsupported_value_types(self, workspace, write, value):
        """Values the emitter cannot write make the document invalid."""
        doc = workspace.doc(write("a.md", f"---\nBlob: {value}\n---\nx\n"))
        with pytest.raises(InvalidDocument, match="unsupported front matter value"):
            doc.fingerprint()

    def test_guid(self, workspace, write):
        """The ID field is the document's GUID; blank means none."""
        assert workspace.doc(write("a.md", "---\nID: urn:uuid:1\n---\n")).guid == "urn:uuid:1"
        assert workspace.doc(write("b.md", "---\nID:\n---\n")).guid is None
        assert workspace.doc(write("c.md", "x\n")).guid is None

    def test_save_guid(self, workspace, write):
        """Saving a GUID writes it into the file and reloads the document."""
        path = write("a.md", "---\nTitle: T\n---\nBody\n")
        doc = workspace.doc(path)
        before = doc.fingerprint()

        doc.save_guid("urn:uuid:new")

        assert path.read_text() == "---\nID: urn:uuid:new\nTitle: T\n---\nBody\n"
        assert doc.guid == "urn:uuid:new"
        assert doc.fingerprint() != before


class TestKind:
    """Test resource kind inference."""

    def test_default_kind(self, workspace, write):
        """Plain documents are posts."""
        doc = workspace.doc(write("a.md", "x\n"))
        assert doc.kind() == "post"
        assert doc.meta["Resource-Kind"] == "post"

    def test_option_value_guid_implies_option(self, workspace, write):
        """An x-option-value ID makes the document an option."""
        doc = workspace.doc(write("a.md", "---\nID: urn:x-option-value:blurb/text\n---\nHi\n"))
        assert doc.kind() == "option"

    def test_explicit_kind_wins(self, workspace, write):
        """An explicit Resource-Kind overrides inference."""
        doc = workspace.doc(
            write("a.md", "---\nID: urn:x-option-value:x\nResource-Kind: post\n---\n")
        )
        assert doc.kind() == "post"

    def test_unknown_kind(self, workspace, write):
        """An unregistered kind is a configuration error for the document."""
        path = write("a.md", "---\nResource-Kind: widget\n---\n")
        with pytest.raises(InvalidKind, match="Unknown resource kind 'widget'") as exc_info:
            workspace.doc(path).load()
        assert exc_info.value.path == path

    def test_kind_without_importer(self, workspace, write):
        """A kind registered without an importer cannot be loaded."""
        workspace.registry.register("widget")
        path = write("a.md", "---\nResource-Kind: widget\n---\n")
        with pytest.raises(InvalidKind, match="No import handler"):
            workspace.doc(path).load()


class TestFingerprint:
    """Test content fingerprints."""

    def test_format(self, workspace, write):
        """Fingerprints are the relative path plus an md5 of the merged document."""
        doc = workspace.doc(write("blog/a.md", "---\nTitle: T\n---\nBody\n"))
        digest = hashlib.md5(doc.dump().encode("utf-8")).hexdigest()
        assert doc.fingerprint() == f"blog/a.md:{digest}"

    def test_stable(self, workspace, write):
        """Reloading unchanged content gives the same fingerprint."""
        doc = workspace.doc(write("a.md", "---\nTitle: T\n---\nBody\n"))
        before = doc.fingerprint()
        doc.load(reload=True)
        assert doc.fingerprint() == before

    def test_body_change(self, workspace, write):
        """Editing the body changes the fingerprint."""
        path = write("a.md", "Body\n")
        doc = workspace.doc(path)
        before = doc.fingerprint()
        path.write_text("Body, edited\n")
        assert doc.load(reload=True).fingerprint() != before

    def test_sidecar_change(self, workspace, write):
        """Editing the sidecar changes the fingerprint."""
        path = write("a.md", "Body\n")
        doc = workspace.doc(path)
        before = doc.fingerprint()
        write("a.meta.yml", "Meta: {views: 1}\n")
        assert doc.load(reload=True).fingerprint() != before

    def test_prototype_change(self, workspace, write, config):
        """Editing a prototype changes the fingerprint of documents using it."""
        proto = write("_mdsync/page.type.yml", "Type: page\n")
        doc = workspace.doc(write("a.page.md", "Body\n"))
        before = doc.fingerprint()

        proto.write_text("Type: page\nComments: false\n")
        assert Workspace(config).doc(doc.filename).fingerprint() != before


class TestHooks:
    """Test on_load hooks."""

    def test_on_load_can_modify_meta(self, workspace, write):
        """on_load hooks run after merging and before the fingerprint."""
        workspace.hooks.add("on_load", lambda doc: doc.meta.set_default("Author", "admin"))
        doc = workspace.doc(write("a.md", "x\n"))
        assert doc.meta["Author"] == "admin"
        assert "Author: admin" in doc.dump()
