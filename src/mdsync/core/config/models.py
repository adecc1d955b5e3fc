"""
Configuration data models for mdsync.

These models define the structure of .mdsync.json and
~/.config/mdsync/config.json files, with validation via Pydantic.
"""

from pydantic import BaseModel, Field, field_validator


class SyncConfig(BaseModel):
    """
    Rules for what the sync engine may create and commit.
    """

    allow_create: bool = Field(
        default=True,
        description="Mint and write back new GUIDs for documents without an ID",
    )
    default_kind: str = Field(
        default="post",
        description="Resource kind used when a document neither declares nor implies one",
    )
    post_types: list[str] = Field(
        default_factory=lambda: ["post", "page"],
        description="Record types that documents may sync into",
    )
    excluded_types: list[str] = Field(
        default_factory=lambda: ["revision"],
        description="Record types that are never synced, even if listed in post_types",
    )


class SerializerConfig(BaseModel):
    """
    Layout of YAML written back to disk (GUIDs, sidecars, exports).
    """

    width: int = Field(
        default=120,
        ge=20,
        description="Maximum line width before flow collections are broken into blocks",
    )
    indent: int = Field(
        default=2,
        ge=1,
        le=9,
        description="Spaces per nesting level",
    )


class StoreConfig(BaseModel):
    """
    Location of the default SQLite record store.
    """

    path: str = Field(
        default=".mdsync/store.db",
        description="Database path, relative to the project root unless absolute",
    )


class RenderConfig(BaseModel):
    """
    Markdown rendering options.
    """

    markdown_preset: str = Field(
        default="commonmark",
        description="markdown-it-py preset name",
    )
    markdown_features: list[str] = Field(
        default_factory=lambda: ["table", "strikethrough"],
        description="Additional markdown-it-py rules to enable",
    )
    templates: dict[str, str] = Field(
        default_factory=dict,
        description="Named template snippets that prototype templates can include or extend",
    )


class MdsyncConfig(BaseModel):
    """
    Top-level mdsync configuration.

    Loaded from defaults, user config, project config, and env vars.

    Example:
        >>> config = MdsyncConfig(sync=SyncConfig(allow_create=False))
        >>> config.sync.allow_create
        False
        >>> config.serializer.width
        120
    """

    sync: SyncConfig = Field(
        default_factory=SyncConfig,
        description="Sync engine rules",
    )
    serializer: SerializerConfig = Field(
        default_factory=SerializerConfig,
        description="YAML write-back layout",
    )
    store: StoreConfig = Field(
        default_factory=StoreConfig,
        description="Default store settings",
    )
    render: RenderConfig = Field(
        default_factory=RenderConfig,
        description="Markdown rendering options",
    )
    timezone: str | None = Field(
        default=None,
        description="IANA zone used to interpret local Date/Updated values (default: system zone)",
    )

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str | None) -> str | None:
        """Treat an empty timezone as unset."""
        if v is not None and not v.strip():
            return None
        return v
