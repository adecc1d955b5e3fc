"""
Exporters: turn store records back into files.

``PostExporter.export`` writes a record as a new Markdown document;
``PostExporter.update_sidecar`` re-exports selected record meta into a
synced document's ``<stem>.meta.yml`` sidecar so store-side changes can
be reviewed (and committed) alongside the document.
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from mdsync.core import serialize
from mdsync.core.documents.markdown import MarkdownFile, write_file
from mdsync.core.errors import BadReference, InvalidDocument, MissingGuid

if TYPE_CHECKING:
    from mdsync.core.documents.document import Document
    from mdsync.core.documents.workspace import Workspace
    from mdsync.core.store.base import Store

logger = logging.getLogger(__name__)

# Record field -> front matter key, in the order keys are written
EXPORT_FIELDS = (
    ("guid", "ID"),
    ("title", "Title"),
    ("slug", "Slug"),
    ("author", "Author"),
    ("date_utc", "Date"),
    ("modified_utc", "Updated"),
    ("excerpt", "Excerpt"),
    ("type", "Type"),
    ("status", "Draft"),
    ("categories", "Category"),
    ("tags", "Tags"),
    ("terms", "Terms"),
    ("password", "Password"),
    ("comment_status", "Comments"),
    ("ping_status", "Pings"),
    ("template", "Template"),
    ("meta", "Meta"),
)


def find_record(store: "Store", ref: str) -> dict[str, Any]:
    """
    Fetch a record by identifier or GUID.

    Raises:
        BadReference: If no record matches ``ref``
    """
    record = store.fetch(ref)
    if record is None and (identifier := store.lookup_by_guid(ref)) is not None:
        record = store.fetch(identifier)
    if record is None:
        raise BadReference(f"No record found for '{ref}'")
    return record


class PostExporter:
    """Exporter for the ``post`` resource kind."""

    def to_markdown(self, record: dict[str, Any]) -> MarkdownFile:
        """
        Build the Markdown file for a record.

        Dates are written in UTC with an explicit ``UTC`` suffix. Published
        and draft records get a ``Draft`` flag; any other status is written
        as ``Status``. The default ``post`` type is left implicit.
        """
        md = MarkdownFile(body=record.get("content") or "", has_front_matter=True)
        meta = md.meta

        for field, key in EXPORT_FIELDS:
            value = record.get(field)
            if field == "modified_utc":
                value = value or record.get("updated_at")
            if value is None or value == "" or value == {} or value == []:
                continue

            if key in ("Date", "Updated"):
                value = f"{value} UTC"
            elif key == "Type" and value == "post":
                continue
            elif key == "Draft":
                if value not in ("publish", "draft"):
                    meta["Status"] = value
                    continue
                value = value == "draft"
            meta[key] = value

        return md

    def export(
        self,
        record: dict[str, Any],
        directory: Path,
        workspace: "Workspace",
    ) -> Path:
        """
        Write ``record`` as a Markdown file in ``directory``.

        The file is named after the record's slug. If that name is taken by
        a file carrying a different ID, ``-1``, ``-2``... are appended; a
        file carrying the record's own ID is overwritten.

        Returns:
            Path of the written file

        Raises:
            SaveFailed: If the file cannot be written
        """
        md = self.to_markdown(record)
        workspace.hooks.fire("export", md, record)

        path = self._filename(Path(directory), record)
        config = workspace.config.serializer
        md.save_as(path, width=config.width, indent=config.indent)
        logger.info(f"Exported record {record.get('id')} to {path}")
        return path

    @staticmethod
    def _filename(directory: Path, record: dict[str, Any]) -> Path:
        stem = record.get("slug") or f"record-{record.get('id')}"
        guid = record.get("guid")
        suffix = 0
        while True:
            path = directory / (f"{stem}.md" if suffix == 0 else f"{stem}-{suffix}.md")
            if not path.exists() or _file_guid(path) == guid:
                return path
            suffix += 1

    def update_sidecar(self, doc: "Document", store: "Store") -> Path | None:
        """
        Re-export the record meta keys listed in ``Export-Meta`` to the sidecar.

        ``Export-Meta`` is a list of meta keys, or a mapping whose keys
        are exported unless their value is false. The sidecar is removed
        when there is nothing to export.

        Returns:
            Path of the sidecar if one was written, else None

        Raises:
            MissingGuid: If the document has no ID
            BadReference: If the document has not been synced yet
            SaveFailed: If the sidecar cannot be written
        """
        guid = doc.guid
        if not guid:
            raise MissingGuid("document has no ID", path=doc.filename)
        identifier = store.lookup_by_guid(guid, doc.kind())
        record = store.fetch(identifier) if identifier is not None else None
        if record is None:
            raise BadReference("document has not been synced yet", path=doc.filename)

        stored = record.get("meta") or {}
        data = {
            key: stored[key]
            for key in _export_keys(doc.meta.get("Export-Meta"))
            if stored.get(key) is not None
        }

        metafile = doc.metafile()
        if not data:
            if metafile.exists():
                metafile.unlink()
                logger.info(f"Removed stale {metafile}")
            return None

        config = doc.workspace.config.serializer
        text = serialize.dump({"Meta": data}, width=config.width, indent=config.indent)
        write_file(metafile, text)
        logger.info(f"Updated {metafile}")
        return metafile


def _export_keys(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, dict):
        return [str(key) for key, wanted in value.items() if wanted is not False]
    if isinstance(value, list):
        return [str(key) for key in value]
    return [part.strip() for part in str(value).split(",") if part.strip()]


def _file_guid(path: Path) -> str | None:
    try:
        return MarkdownFile.from_file(path).meta.get_string("ID")
    except InvalidDocument:
        return None
