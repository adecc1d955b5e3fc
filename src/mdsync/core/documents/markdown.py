"""
Markdown files with YAML front matter.

A file is an optional front-matter block fenced by ``---`` lines, followed
by the body. The body is kept byte-for-byte; only the front matter is ever
re-serialized, and then with the diff-stable emitter.
"""

import logging
import os
import re
import shutil
import tempfile
from pathlib import Path
from typing import Any

import yaml

from mdsync.core import serialize
from mdsync.core.errors import InvalidDocument, SaveFailed

from .metadata import Metadata

logger = logging.getLogger(__name__)

FRONT_MATTER = re.compile(
    r"\A---[ \t]*\r?\n(?P<meta>.*?)^---[ \t]*(?:\r?\n|\Z)(?P<body>.*)\Z",
    re.DOTALL | re.MULTILINE,
)


def write_file(path: Path, content: str) -> None:
    """
    Atomically replace ``path`` with ``content``.

    Writes to a temporary file in the same directory and renames it over
    the target, so readers see either the old or the new file, never a
    partial one. The original file's permissions are kept.

    Raises:
        SaveFailed: If the file cannot be written
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=".mdsync_", suffix=".tmp")
    except OSError as e:
        raise SaveFailed(f"cannot write file: {e.strerror or e}", path=path) from e

    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        if path.exists():
            shutil.copymode(path, tmp_path)
        else:
            os.chmod(tmp_path, 0o644)
        os.replace(tmp_path, path)
    except OSError as e:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise SaveFailed(f"cannot write file: {e.strerror or e}", path=path) from e


class MarkdownFile:
    """
    Parsed front matter and body of a Markdown file.

    Example:
        >>> md = MarkdownFile.parse("---\\nTitle: Hi\\n---\\nBody\\n")
        >>> md.meta["Title"], md.body
        ('Hi', 'Body\\n')
    """

    def __init__(
        self,
        meta: Metadata | dict[str, Any] | None = None,
        body: str = "",
        *,
        has_front_matter: bool | None = None,
    ) -> None:
        self.meta = meta if isinstance(meta, Metadata) else Metadata(meta)
        self.body = body
        self.has_front_matter = bool(self.meta) if has_front_matter is None else has_front_matter

    @classmethod
    def parse(cls, text: str) -> "MarkdownFile":
        """
        Split ``text`` into front matter and body.

        Raises:
            InvalidDocument: If the front matter is not a YAML mapping
        """
        match = FRONT_MATTER.match(text)
        if match is None:
            return cls(Metadata(), text, has_front_matter=False)

        try:
            data = yaml.safe_load(match.group("meta"))
        except yaml.YAMLError as e:
            raise InvalidDocument(f"malformed front matter: {e}") from e
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise InvalidDocument("front matter must be a mapping of fields")
        return cls(Metadata(data), match.group("body"), has_front_matter=True)

    @classmethod
    def from_file(cls, path: Path) -> "MarkdownFile":
        """
        Read and parse a file.

        Raises:
            InvalidDocument: If the file cannot be read or parsed
        """
        try:
            text = Path(path).read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise InvalidDocument(f"cannot read file: {e}", path=path) from e
        try:
            return cls.parse(text)
        except InvalidDocument as e:
            e.path = path
            raise

    def dump(self, width: int = 120, indent: int = 2) -> str:
        """Serialize back to file text; the body is appended unchanged."""
        if not self.meta and not self.has_front_matter:
            return self.body
        front = serialize.dump(self.meta, width=width, indent=indent) if self.meta else ""
        return f"---\n{front}---\n{self.body}"

    def unfence(self, language: str) -> str:
        """
        Return the body with a single fenced code block unwrapped.

        If the body consists of one fenced block in ``language`` (surrounded
        by whitespace only), its content is returned. Otherwise the body is
        returned as-is.
        """
        pattern = re.compile(
            r"\A\s*(?P<fence>```+|~~~+)[ \t]*" + re.escape(language) + r"[ \t]*\r?\n"
            r"(?P<code>.*?)^(?P=fence)[ \t]*\s*\Z",
            re.DOTALL | re.MULTILINE,
        )
        match = pattern.match(self.body)
        return match.group("code") if match else self.body

    def save_as(self, path: Path, width: int = 120, indent: int = 2) -> None:
        """Write this file to ``path`` atomically."""
        write_file(path, self.dump(width=width, indent=indent))


def inject_guid(path: Path, guid: str, width: int = 120, indent: int = 2) -> bool:
    """
    Write ``ID: <guid>`` into a file's front matter.

    The ID line is inserted right after the opening fence so the rest of
    the file stays byte-identical. A file without front matter gets a new
    block. If the front matter already has an empty ``ID`` key, the front
    matter is re-serialized with the key filled in. An existing non-empty
    ID is never overwritten.

    Returns:
        True if the file was written, False if it already had an ID

    Raises:
        InvalidDocument: If the file cannot be read or parsed
        SaveFailed: If the file cannot be written
    """
    path = Path(path)
    current = MarkdownFile.from_file(path)
    if current.meta.has("ID"):
        logger.debug(f"{path} already has ID {current.meta['ID']}, not replacing it")
        return False

    line = serialize.dump({"ID": guid}, width=width, indent=indent)
    if "ID" in current.meta:
        current.meta["ID"] = guid
        current.save_as(path, width=width, indent=indent)
    elif current.has_front_matter:
        text = path.read_bytes().decode("utf-8")
        fence, newline, rest = text.partition("\n")
        if fence.endswith("\r"):
            line = line.replace("\n", "\r\n")
        write_file(path, f"{fence}{newline}{line}{rest}")
    else:
        write_file(path, f"---\n{line}---\n{current.body}")

    logger.info(f"Assigned {guid} to {path}")
    return True
