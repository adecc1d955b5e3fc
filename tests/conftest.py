"""
Pytest configuration and shared fixtures.

Provides project directories, an in-memory recording store, a fake
renderer, and workspace/orchestrator fixtures wired to them.
"""

import copy
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Any

import pytest

from mdsync.core.config import MdsyncConfig, clear_cache
from mdsync.core.documents import Workspace
from mdsync.core.store.options import patch, pluck
from mdsync.core.sync import Pending, SyncOrchestrator

# ==============================================================================
# Environment Isolation
# ==============================================================================


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep user config, .env files and MDSYNC_* variables out of every test."""
    for name in ("MDSYNC_STORE", "MDSYNC_TIMEZONE", "MDSYNC_SKIP_CREATE", "MDSYNC_EXCLUDED_TYPES"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    clear_cache()
    yield
    clear_cache()


# ==============================================================================
# Directory Fixtures
# ==============================================================================


@pytest.fixture
def project(tmp_path):
    """
    Provide a temporary project root.

    Creates:
    - site/.git/ (project marker)
    """
    root = tmp_path / "site"
    root.mkdir()
    (root / ".git").mkdir()
    return root.resolve()


@pytest.fixture
def write(project) -> Callable[[str, str], Path]:
    """Write a file beneath the project root and return its path."""

    def _write(relative: str, text: str) -> Path:
        path = project / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


# ==============================================================================
# Fake Collaborators
# ==============================================================================


class RecordingStore:
    """
    In-memory Store that records every commit.

    With ``lazy=True``, ``commit`` returns unresolved Pending handles that
    are settled (in commit order) by ``flush()``.
    """

    def __init__(self, *, lazy: bool = False) -> None:
        self.lazy = lazy
        self.records: dict[str, dict[str, Any]] = {}
        self.options: dict[str, Any] = {}
        self.option_fingerprints: dict[str, str] = {}
        self.commits: list[tuple[str, str | None, dict[str, Any]]] = []
        self.pending: list[tuple[Pending[str], str, str | None, Mapping[str, Any]]] = []
        self._next_id = 1

    def lookup_by_guid(self, guid: str, kind: str = "post") -> str | None:
        for identifier, record in self.records.items():
            if record.get("guid") == guid and record["kind"] == kind:
                return identifier
        return None

    def commit(self, kind: str, identifier: str | None, fields: Mapping[str, Any]) -> Any:
        self.commits.append((kind, identifier, dict(fields)))
        if self.lazy:
            handle: Pending[str] = Pending()
            self.pending.append((handle, kind, identifier, fields))
            return handle
        return self._apply(kind, identifier, fields)

    def flush(self) -> None:
        pending, self.pending = self.pending, []
        for handle, kind, identifier, fields in pending:
            handle.resolve(self._apply(kind, identifier, fields))

    def _apply(self, kind: str, identifier: str | None, fields: Mapping[str, Any]) -> str:
        values = {
            name: value.result() if isinstance(value, Pending) else value
            for name, value in fields.items()
        }
        if kind == "option":
            self.patch_option(values["keypath"], values["value"])
            self.option_fingerprints[identifier] = values["fingerprint"]
            return identifier

        if identifier is None:
            identifier = str(self._next_id)
            self._next_id += 1
            self.records[identifier] = {"id": identifier, "kind": kind, "meta": {}}
        record = self.records[identifier]
        for key, value in (values.pop("meta", None) or {}).items():
            if value is None:
                record["meta"].pop(key, None)
            else:
                record["meta"][key] = value
        record.update(values)
        return identifier

    def query_cached_fingerprints(self, kind: str) -> dict[str, str]:
        if kind == "option":
            return {fp: identifier for identifier, fp in self.option_fingerprints.items()}
        return {
            record["fingerprint"]: identifier
            for identifier, record in self.records.items()
            if record["kind"] == kind and record.get("fingerprint")
        }

    def fetch(self, identifier: str) -> dict[str, Any] | None:
        record = self.records.get(identifier)
        return copy.deepcopy(record) if record is not None else None

    def get_option(self, keypath: Sequence[str]) -> Any:
        return pluck(self.options, keypath)

    def patch_option(self, keypath: Sequence[str], value: Any) -> None:
        self.options = patch(self.options, keypath, value)


class FakeRenderer:
    """Renderer that wraps Markdown in <p> and formats templates with str.format."""

    def __init__(self) -> None:
        self.rendered: list[str] = []

    def render(self, markdown: str, context: Mapping[str, Any] | None = None) -> str:
        self.rendered.append(markdown)
        return f"<p>{markdown.strip()}</p>\n"

    def render_template(
        self, source: str, context: Mapping[str, Any], search_path: Sequence[Path] = ()
    ) -> str:
        return source.format(**{k: v for k, v in context.items() if isinstance(k, str)})


# ==============================================================================
# Engine Fixtures
# ==============================================================================


@pytest.fixture
def config():
    """Default configuration with a fixed timezone."""
    return MdsyncConfig(timezone="UTC")


@pytest.fixture
def store():
    """Provide an empty recording store."""
    return RecordingStore()


@pytest.fixture
def workspace(config):
    """Provide a workspace with the default kinds and renderer."""
    return Workspace(config)


@pytest.fixture
def orchestrator(workspace, store):
    """Provide an orchestrator over the workspace and recording store."""
    return SyncOrchestrator(workspace, store)


@pytest.fixture
def lazy_store():
    """Provide a recording store whose commits settle on flush()."""
    return RecordingStore(lazy=True)


@pytest.fixture
def fake_renderer():
    """Provide a renderer that records what it renders."""
    return FakeRenderer()
