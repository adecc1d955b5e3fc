"""
Identity resolution: from a document's GUID to a store identifier.
"""

import logging
from typing import TYPE_CHECKING

from mdsync.core.errors import BadReference, MissingGuid
from mdsync.core.guids import OPTION_ID_SCHEME, guid_scheme, new_guid, parse_option_url

if TYPE_CHECKING:
    from mdsync.core.documents.document import Document
    from mdsync.core.store.base import Store

logger = logging.getLogger(__name__)


class IdentityResolver:
    """
    Ensures every document has a GUID and maps GUIDs to store identifiers.

    Lookups go through an in-process GUID index first, then the store's
    GUID index, then (for ``urn:x-option-id:`` GUIDs) the option fragment
    the identifier is mirrored into.

    Args:
        store: Store to query
        allow_create: Mint and write back GUIDs for documents without one
    """

    def __init__(self, store: "Store", *, allow_create: bool = True) -> None:
        self.store = store
        self.allow_create = allow_create
        self._index: dict[str, str] = {}

    def ensure_guid(self, doc: "Document") -> str:
        """
        Return the document's GUID, minting one if needed.

        A minted GUID is written into the file before it is used, so a
        crash can never leave a record whose GUID the file does not carry.

        Raises:
            MissingGuid: If the document has no ID and creation is disabled
            SaveFailed: If the minted GUID cannot be written
        """
        if guid := doc.guid:
            return guid
        if not self.allow_create:
            raise MissingGuid(
                "document has no ID and creating new IDs is disabled", path=doc.filename
            )

        guid = new_guid()
        doc.save_guid(guid)
        logger.info(f"Minted {guid} for {doc.filename}")
        return guid

    def resolve(self, doc: "Document") -> str | None:
        """
        Return the store identifier for ``doc``, or None if it must be created.

        Raises:
            MissingGuid: If the document has no ID and creation is disabled
            SaveFailed: If a minted GUID cannot be written
            BadReference: If an option mirror names a record that does not exist
        """
        guid = self.ensure_guid(doc)
        if guid in self._index:
            return self._index[guid]

        identifier = self.store.lookup_by_guid(guid, doc.kind())
        if identifier is None and guid_scheme(guid) == OPTION_ID_SCHEME:
            identifier = self._from_option(guid)

        if identifier is not None:
            self._index[guid] = identifier
        return identifier

    def _from_option(self, guid: str) -> str | None:
        url = parse_option_url(guid)
        value = self.store.get_option(url.keypath)
        if value in (None, "", 0):
            return None
        identifier = str(value)
        if self.store.fetch(identifier) is None:
            raise BadReference(
                f"option {'/'.join(url.keypath)} refers to record {identifier}, which does not exist"
            )
        return identifier

    def remember(self, guid: str, identifier: str) -> None:
        """Record a committed GUID so later lookups skip the store."""
        self._index[guid] = identifier
