"""
Importers: turn a loaded document into a store commit.

``PostImporter`` builds a record field set from front matter, hooks and
rendered content, commits it, and queues the document's follow-ups
(links to other documents, option mirrors). ``OptionImporter`` stores a
document's rendered body into the option fragment its GUID addresses.
"""

import html
import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING, Any

from mdsync.core.documents.markdown import MarkdownFile
from mdsync.core.errors import BadReference, DocumentError, ExcludedType
from mdsync.core.guids import (
    OPTION_ID_SCHEME,
    OPTION_VALUE_SCHEME,
    guid_scheme,
    parse_option_url,
)

from .dates import get_timezone, parse_date
from .fields import FieldSet
from .tasks import Pending

if TYPE_CHECKING:
    from mdsync.core.documents.document import Document

    from .orchestrator import SyncOrchestrator

logger = logging.getLogger(__name__)

# A rendered body starting with a heading donates it as the title
LEADING_HEADING = re.compile(
    r"\A\s*<h([1-6])[^>]*>(?P<title>.*?)</h\1>\s*(?P<rest>.*)\Z", re.DOTALL | re.IGNORECASE
)
TAG = re.compile(r"<[^>]+>")

OPTION_PREFIX = "@option:"


def split_title(content: str) -> tuple[str, str] | None:
    """
    Split a leading ``<hN>`` heading off rendered HTML.

    Returns:
        ``(title, remaining_html)``, or None if the HTML does not start
        with a heading

    Example:
        >>> split_title("<h1>Hello &amp; welcome</h1>\\n<p>Text</p>\\n")
        ('Hello & welcome', '<p>Text</p>\\n')
    """
    match = LEADING_HEADING.match(content)
    if match is None:
        return None
    title = html.unescape(TAG.sub("", match.group("title"))).strip()
    return title, match.group("rest")


def _open_closed(value: Any) -> Any:
    if isinstance(value, bool):
        return "open" if value else "closed"
    return value


class PostImporter:
    """
    Importer for the ``post`` resource kind.

    Fields are contributed in strict precedence order; the first
    contributor to set a field wins:

    1. ``parent`` from the nearest index document
    2. ``before_sync`` hooks
    3. front matter (``Slug``, ``Title``, ``Weight``, ``Draft``, ``Status``...)
    4. ``metadata`` hooks
    5. rendered content, the title split from a leading heading, the excerpt
    6. ``content`` hooks

    The record type is then checked against the configured post types.
    """

    def __call__(self, doc: "Document", sync: "SyncOrchestrator") -> "str | Pending[str]":
        hooks = sync.workspace.hooks
        fields = FieldSet()

        parent = sync.parent_id(doc)
        identifier = sync.identity.resolve(doc)

        hooks.fire("before_sync", doc, fields)
        self._metadata(doc, fields, sync)
        hooks.fire("metadata", fields, doc)
        self._content(doc, fields, sync, is_new=identifier is None)
        hooks.fire("content", fields, doc)
        self._check_type(fields, sync)
        mirrors = self._option_mirrors(doc, fields)

        if fields.error is not None:
            if isinstance(fields.error, DocumentError) and fields.error.path is None:
                fields.error.path = doc.filename
            raise fields.error

        record = fields.as_dict()
        record["parent"] = parent
        if meta := doc.meta.get_mapping("Meta"):
            record["meta"] = meta
        record["fingerprint"] = doc.fingerprint()

        logger.debug(f"Committing {doc.filename} as {identifier or 'new record'}")
        handle = Pending.wrap(sync.store.commit("post", identifier, record))
        return handle.then(lambda committed: self._follow_up(doc, sync, committed, mirrors))

    # -- field contributors -------------------------------------------------

    def _metadata(self, doc: "Document", fields: FieldSet, sync: "SyncOrchestrator") -> None:
        meta = doc.meta
        fields.set("guid", doc.guid)
        fields.set("slug", meta.get_string("Slug"))
        fields.set("title", meta.get_string("Title"))
        fields.set("order", meta.get("Weight"))
        fields.compute("status", lambda: "draft" if meta.get_bool("Draft") else None)
        fields.compute("status", lambda: meta.get_string("Status"))
        fields.set("template", meta.get_string("Template"))
        fields.set("ping_status", _open_closed(meta.get("Pings")))
        fields.set("comment_status", _open_closed(meta.get("Comments")))
        fields.set("password", meta.get_string("Password"))
        fields.set("type", meta.get_string("Type"))
        fields.compute("terms", lambda: meta.get_mapping("Terms") or None)
        fields.set("mime_type", meta.get_string("MIME-Type"))
        fields.compute("tags", lambda: meta.get_list("Tags", split=True) or None)
        fields.compute("categories", lambda: meta.get_list("Category", split=True) or None)
        fields.compute("slug", doc.slug)
        fields.set("author", meta.get_string("Author"))

        zone_name = sync.workspace.config.timezone
        for field, key in (("date", "Date"), ("modified", "Updated")):
            fields.compute(
                field,
                lambda key=key, field=field: self._date(fields, field, meta.get(key), zone_name),
                when=meta.get(key),
            )

    @staticmethod
    def _date(fields: FieldSet, field: str, value: Any, zone_name: str | None) -> str:
        local, utc = parse_date(value, get_timezone(zone_name))
        fields.set(f"{field}_utc", utc)
        return local

    def _content(
        self, doc: "Document", fields: FieldSet, sync: "SyncOrchestrator", *, is_new: bool
    ) -> None:
        meta = doc.meta
        renderer = sync.workspace.renderer

        fields.set("status", "publish" if is_new or meta.get_bool("Draft") is False else None)
        if fields.get("type") == "custom_css":
            fields.compute("content", lambda: MarkdownFile(body=doc.body).unfence("css"))
        fields.compute("content", lambda: renderer.render(doc.body, {"doc": doc}))

        if not fields.has("title") and (split := split_title(fields.get("content", ""))):
            fields.set("title", split[0])
            fields.replace("content", split[1])

        fields.compute(
            "excerpt",
            lambda: renderer.render(str(meta["Excerpt"]), {"doc": doc}),
            when=meta.get("Excerpt"),
        )

    @staticmethod
    def _check_type(fields: FieldSet, sync: "SyncOrchestrator") -> None:
        record_type = fields.get("type")
        if record_type is None:
            return
        config = sync.workspace.config.sync
        if record_type in config.excluded_types or record_type not in config.post_types:
            fields.set("error", ExcludedType(f"Excluded or unregistered type '{record_type}'"))

    @staticmethod
    def _option_mirrors(doc: "Document", fields: FieldSet) -> list[list[str]]:
        """Key paths of the options that receive the record identifier after commit."""
        guids = [
            f"urn:{OPTION_ID_SCHEME}:{path}"
            for path in doc.meta.get_list("Set-Options", split=True)
        ]
        if guid_scheme(doc.guid) == OPTION_ID_SCHEME:
            guids.append(doc.guid)

        keypaths = []
        for guid in guids:
            try:
                keypaths.append(parse_option_url(guid).keypath)
            except BadReference as e:
                fields.set("error", e)
        return keypaths

    # -- follow-ups ---------------------------------------------------------

    def _follow_up(
        self,
        doc: "Document",
        sync: "SyncOrchestrator",
        identifier: str,
        mirrors: list[list[str]],
    ) -> str:
        queue = sync.queue

        for key, target in doc.meta.get_mapping("Links").items():
            queue.defer(self._link, doc, sync, identifier, str(key), target)

        for keypath in mirrors:
            queue.defer(sync.store.patch_option, keypath, identifier)

        return identifier

    @staticmethod
    def _link(
        doc: "Document", sync: "SyncOrchestrator", identifier: str, key: str, target: Any
    ) -> "Pending[str]":
        """Store the identifier of the document at ``target`` in meta ``key``."""
        if not target:
            return Pending.wrap(sync.store.commit("post", identifier, {"meta": {key: None}}))

        path = (doc.filename.parent / Path(str(target))).resolve()
        if not path.is_file():
            raise BadReference(f"link '{key}' points to missing document {target}", path=doc.filename)

        linked = sync.sync(sync.workspace.doc(path))
        return linked.then(
            lambda target_id: sync.store.commit("post", identifier, {"meta": {key: target_id}})
        )


class OptionImporter:
    """
    Importer for the ``option`` resource kind.

    The document's GUID (``urn:x-option-value:<option>/<key>...``) names
    the option fragment; its rendered body becomes the fragment's value.
    """

    def __call__(self, doc: "Document", sync: "SyncOrchestrator") -> "str | Pending[str]":
        guid = sync.identity.ensure_guid(doc)
        url = parse_option_url(guid)
        if url.scheme != OPTION_VALUE_SCHEME:
            raise BadReference(
                f"option documents need an urn:{OPTION_VALUE_SCHEME}: ID, not {guid}",
                path=doc.filename,
            )

        value = sync.workspace.renderer.render(doc.body, {"doc": doc})
        identifier = OPTION_PREFIX + "/".join(url.keypath)
        record = {
            "guid": guid,
            "keypath": url.keypath,
            "value": value,
            "fingerprint": doc.fingerprint(),
        }
        logger.debug(f"Committing {doc.filename} into option {'/'.join(url.keypath)}")
        return sync.store.commit("option", identifier, record)
