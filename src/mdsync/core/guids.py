"""
GUID families and URN parsing.

A document's ``ID`` is a URN. Three families exist:

- ``urn:x-option-value:<option>/<key>/...`` addresses a keyed fragment of a
  store option. Documents with such an ID are of the ``option`` kind and
  their rendered body *is* the fragment's value.
- ``urn:x-option-id:<option>/<key>/...`` is an ordinary record whose
  identifier is mirrored into the addressed option fragment.
- anything else, normally ``urn:uuid:<uuid4>``, is an opaque identity.

Key path segments are percent-decoded, so ``a%2Fb`` is the single key ``a/b``.
"""

import uuid
from dataclasses import dataclass, field
from urllib.parse import unquote

from mdsync.core.errors import BadReference

OPTION_VALUE_SCHEME = "x-option-value"
OPTION_ID_SCHEME = "x-option-id"

OPTION_KIND = "option"


@dataclass(frozen=True)
class OptionURL:
    """A parsed option URN."""

    scheme: str
    option: str
    path: list[str] = field(default_factory=list)

    @property
    def keypath(self) -> list[str]:
        """Option name followed by the key path."""
        return [self.option, *self.path]


def new_guid() -> str:
    """Mint a fresh opaque GUID."""
    return f"urn:uuid:{uuid.uuid4()}"


def guid_scheme(guid: str | None) -> str | None:
    """
    Return the URN namespace of ``guid`` (``uuid``, ``x-option-id``...).

    Returns None for values that are not URNs at all.
    """
    if not guid or not guid.lower().startswith("urn:"):
        return None
    scheme, sep, _ = guid[4:].partition(":")
    return scheme.lower() if sep else None


def parse_option_url(guid: str) -> OptionURL:
    """
    Parse an ``urn:x-option-value:`` or ``urn:x-option-id:`` GUID.

    Args:
        guid: The URN to parse

    Returns:
        OptionURL with the option name and decoded key path

    Raises:
        BadReference: If ``guid`` is not a well-formed option URN

    Example:
        >>> parse_option_url("urn:x-option-value:widget_text/3/text").keypath
        ['widget_text', '3', 'text']
    """
    scheme = guid_scheme(guid)
    if scheme not in (OPTION_VALUE_SCHEME, OPTION_ID_SCHEME):
        raise BadReference(f"Invalid option URL: {guid}")

    rest = guid[4 + len(scheme) + 1 :]
    if not rest or any(ch in rest for ch in "?#") or rest.startswith("/"):
        raise BadReference(f"Invalid option URL: {guid}")

    parts = [unquote(part) for part in rest.split("/")]
    if not parts[0]:
        raise BadReference(f"Invalid option URL: {guid}")
    return OptionURL(scheme=scheme, option=parts[0], path=parts[1:])


def classify_kind(guid: str | None, explicit: str | None = None, default: str = "post") -> str:
    """
    Decide a document's resource kind.

    An explicit ``Resource-Kind`` always wins. Otherwise an
    ``urn:x-option-value:`` GUID implies the option kind and everything
    else gets ``default``.
    """
    if explicit:
        return explicit
    if guid_scheme(guid) == OPTION_VALUE_SCHEME:
        return OPTION_KIND
    return default
