"""
Tests for GUID minting and identity resolution.
"""

import pytest

from mdsync.core.errors import BadReference, MissingGuid
from mdsync.core.guids import classify_kind, guid_scheme, new_guid, parse_option_url
from mdsync.core.sync import IdentityResolver


class TestGuids:
    """Test GUID helpers."""

    def test_new_guid(self):
        guid = new_guid()
        assert guid.startswith("urn:uuid:")
        assert guid != new_guid()

    def test_guid_scheme(self):
        assert guid_scheme("urn:uuid:1") == "uuid"
        assert guid_scheme("URN:X-Option-Id:a") == "x-option-id"
        assert guid_scheme("http://example.com") is None
        assert guid_scheme("urn:nothing") is None
        assert guid_scheme(None) is None

    def test_parse_option_url(self):
        """Key path segments are percent-decoded."""
        url = parse_option_url("urn:x-option-value:widget_text/3/a%2Fb")
        assert url.scheme == "x-option-value"
        assert url.option == "widget_text"
        assert url.keypath == ["widget_text", "3", "a/b"]

    @pytest.mark.parametrize(
        "guid",
        ["urn:uuid:1", "urn:x-option-id:", "urn:x-option-id:/a", "urn:x-option-id:a?b=1"],
    )
    def test_parse_option_url_rejects(self, guid):
        with pytest.raises(BadReference, match="Invalid option URL"):
            parse_option_url(guid)

    def test_classify_kind(self):
        assert classify_kind("urn:x-option-value:a") == "option"
        assert classify_kind("urn:x-option-id:a") == "post"
        assert classify_kind("urn:uuid:1", "page") == "page"
        assert classify_kind(None, default="note") == "note"


class TestIdentityResolver:
    """Test mapping documents to store identifiers."""

    def test_mints_and_writes_guid(self, workspace, store, write):
        """A document without an ID gets one written into its file."""
        path = write("a.md", "Body\n")
        doc = workspace.doc(path)

        guid = IdentityResolver(store).ensure_guid(doc)

        assert guid.startswith("urn:uuid:")
        assert path.read_text() == f"---\nID: {guid}\n---\nBody\n"
        assert doc.guid == guid

    def test_missing_guid_when_creation_disabled(self, workspace, store, write):
        """Minting can be turned off."""
        path = write("a.md", "Body\n")
        with pytest.raises(MissingGuid, match="creating new IDs is disabled"):
            IdentityResolver(store, allow_create=False).resolve(workspace.doc(path))
        assert path.read_text() == "Body\n"

    def test_new_document(self, workspace, store, write):
        """Unknown GUIDs resolve to None (create)."""
        doc = workspace.doc(write("a.md", "---\nID: urn:uuid:new\n---\n"))
        assert IdentityResolver(store).resolve(doc) is None

    def test_existing_record(self, workspace, store, write):
        """Known GUIDs resolve through the store."""
        identifier = store.commit("post", None, {"guid": "urn:uuid:old"})
        doc = workspace.doc(write("a.md", "---\nID: urn:uuid:old\n---\n"))
        assert IdentityResolver(store).resolve(doc) == identifier

    def test_remembered_identifier_wins(self, workspace, store, write):
        """The in-process index is consulted before the store."""
        resolver = IdentityResolver(store)
        resolver.remember("urn:uuid:x", "42")
        doc = workspace.doc(write("a.md", "---\nID: urn:uuid:x\n---\n"))

        assert resolver.resolve(doc) == "42"

    def test_option_id_mirror(self, workspace, store, write):
        """An x-option-id GUID resolves through the option it is mirrored into."""
        identifier = store.commit("post", None, {"guid": "urn:uuid:other"})
        store.patch_option(["page_on_front"], identifier)
        doc = workspace.doc(write("home.md", "---\nID: urn:x-option-id:page_on_front\n---\n"))

        assert IdentityResolver(store).resolve(doc) == identifier

    def test_option_id_unset(self, workspace, store, write):
        """An unset or zero option means the record must be created."""
        store.patch_option(["page_on_front"], 0)
        doc = workspace.doc(write("home.md", "---\nID: urn:x-option-id:page_on_front\n---\n"))
        assert IdentityResolver(store).resolve(doc) is None

    def test_option_id_dangling(self, workspace, store, write):
        """An option naming a missing record is a bad reference."""
        store.patch_option(["page_on_front"], "99")
        doc = workspace.doc(write("home.md", "---\nID: urn:x-option-id:page_on_front\n---\n"))

        with pytest.raises(BadReference, match="refers to record 99"):
            IdentityResolver(store).resolve(doc)
