"""
The sync orchestrator: drives one document at a time into the store.

For each document:

1. a cached fingerprint short-circuits to the cached identifier
2. the kind's importer resolves the parent (syncing it first), the
   identity and the field set, then commits
3. when the commit resolves, the fingerprint cache and GUID index are
   updated and ``after_sync`` hooks run
4. follow-ups queued by the importer run when ``finish()`` drains the
   deferred queue

Each distinct fingerprint is committed at most once per run: a second
``sync()`` of the same state returns the first call's handle.
"""

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

from mdsync.core.documents.document import Document
from mdsync.core.documents.workspace import Workspace
from mdsync.core.errors import BadReference, DocumentError, MissingGuid

from .cache import FingerprintCache
from .identity import IdentityResolver
from .models import DocumentOutcome, OutcomeStatus, SyncReport
from .tasks import DeferredTaskQueue, Pending

if TYPE_CHECKING:
    from mdsync.core.store.base import Store

logger = logging.getLogger(__name__)


class SyncOrchestrator:
    """
    Per-run sync driver.

    Args:
        workspace: Workspace holding config, kinds, renderer and hooks
        store: Store to commit into
        use_cache: Load the fingerprint cache from the store (``--force`` disables)
        allow_create: Mint GUIDs for documents without one (default from config)

    Example:
        >>> sync = SyncOrchestrator(Workspace(), SqliteStore("store.db"))
        >>> handle = sync.sync(sync.workspace.doc("site/about.md"))
        >>> errors = sync.finish()
        >>> handle.result()
        '1'
    """

    def __init__(
        self,
        workspace: Workspace,
        store: "Store",
        *,
        use_cache: bool = True,
        allow_create: bool | None = None,
    ) -> None:
        self.workspace = workspace
        self.store = store
        if allow_create is None:
            allow_create = workspace.config.sync.allow_create
        self.identity = IdentityResolver(store, allow_create=allow_create)
        self.cache = (
            FingerprintCache.load(store, workspace.registry) if use_cache else FingerprintCache()
        )
        self.queue = DeferredTaskQueue()
        self._handles: dict[str, Pending[str]] = {}
        self._failures: dict[Path, DocumentError] = {}

    def is_synced(self, doc: Document) -> bool:
        """Return True if the document's current state is already in the store."""
        return doc.fingerprint() in self.cache

    def sync(self, doc: Document) -> Pending[str]:
        """
        Sync one document.

        Returns:
            Handle for the record identifier. It is already resolved unless
            the store commits lazily.

        Raises:
            DocumentError: The document could not be synced; nothing was committed
            ConfigurationError: A setup defect that should abort the run
        """
        if doc.filename in self._failures:
            raise self._failures[doc.filename]
        try:
            return self._sync(doc)
        except DocumentError as e:
            if e.path is None:
                e.path = doc.filename
            self._failures[doc.filename] = e
            raise

    def _sync(self, doc: Document) -> Pending[str]:
        fingerprint = doc.fingerprint()
        if (identifier := self.cache.get(fingerprint)) is not None:
            logger.debug(f"{doc.filename} unchanged ({fingerprint}), record {identifier}")
            if doc.guid:
                self.identity.remember(doc.guid, identifier)
            return Pending.resolved(identifier)
        if fingerprint in self._handles:
            return self._handles[fingerprint]

        importer = self.workspace.registry.kind(doc.kind()).get_importer(doc)
        handle = Pending.wrap(importer(doc, self))
        handle = handle.then(lambda committed: self._committed(doc, committed))
        # The importer may have minted a GUID, which changes the fingerprint
        self._handles[fingerprint] = self._handles[doc.fingerprint()] = handle
        return handle

    def _committed(self, doc: Document, identifier: str) -> str:
        identifier = str(identifier)
        self.cache.record(doc.fingerprint(), identifier)
        if doc.guid:
            self.identity.remember(doc.guid, identifier)
        self.workspace.hooks.fire("after_sync", doc, identifier)
        logger.info(f"Synced {doc.filename} as record {identifier}")
        return identifier

    def parent_id(self, doc: Document) -> "str | Pending[str] | None":
        """
        Sync the document's parent and return its identifier.

        Returns:
            None at a project root, the parent's identifier, or a handle
            for it when the store commits lazily

        Raises:
            MissingGuid: If the parent has no ID and creating IDs is disabled
            BadReference: If the parent document fails to sync for another reason
        """
        parent = doc.parent()
        if parent is None:
            return None
        try:
            handle = self.sync(parent)
        except MissingGuid as e:
            raise MissingGuid(f"parent document has no ID ({e})", path=doc.filename) from e
        except DocumentError as e:
            raise BadReference(f"parent document failed to sync ({e})", path=doc.filename) from e
        if handle.done and not handle.failed:
            return handle.result()
        return handle

    def run(self, docs: Iterable[Document], *, lenient: bool = False) -> SyncReport:
        """
        Sync a batch of documents, then drain follow-ups.

        A failing document never stops the batch. With ``lenient`` (bulk
        ``tree`` syncs), documents without an ID are reported as skipped
        rather than failed.

        Raises:
            ConfigurationError: A setup defect aborts the whole batch
        """
        report = SyncReport()
        handles: list[tuple[DocumentOutcome, Pending[str]]] = []

        for doc in docs:
            outcome = DocumentOutcome(path=str(doc.filename), status=OutcomeStatus.PENDING)
            report.add(outcome)
            try:
                cached = self.is_synced(doc)
                handle = self.sync(doc)
            except MissingGuid as e:
                outcome.status = OutcomeStatus.SKIPPED if lenient else OutcomeStatus.FAILED
                outcome.error, outcome.code = str(e), e.code
                continue
            except DocumentError as e:
                outcome.status = OutcomeStatus.FAILED
                outcome.error, outcome.code = str(e), e.code
                continue
            if cached:
                outcome.status = OutcomeStatus.CACHED
            handles.append((outcome, handle))

        report.followup_errors = [str(e) for e in self.finish()]

        for outcome, handle in handles:
            if not handle.done:
                continue
            if handle.failed:
                error = handle.error
                outcome.status = OutcomeStatus.FAILED
                outcome.error = str(error)
                outcome.code = getattr(error, "code", None)
                continue
            outcome.identifier = handle.result()
            if outcome.status == OutcomeStatus.PENDING:
                outcome.status = OutcomeStatus.SYNCED
        return report

    def finish(self) -> list[DocumentError]:
        """
        Run queued follow-ups (links, option mirrors).

        Returns:
            DocumentErrors raised by follow-ups, in the order they ran
        """
        errors = self.queue.run()
        if errors:
            logger.warning(f"{len(errors)} follow-up task(s) failed")
        return errors
