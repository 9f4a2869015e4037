"""
Group (deck/tag) path helpers.

Group paths are slash-separated hierarchies ("lang/dutch/verbs").
"""

import re
from collections.abc import Iterable

from sprout.domain.constants import GROUP_DELIMITERS

_DELIMITER_RE = re.compile(f"[{re.escape(GROUP_DELIMITERS)}]+")


def normalise_group_path(raw: str | None) -> str | None:
    """Normalise " /a//b/ c / " to "a/b/c"; None when nothing is left."""
    text = str(raw or "").strip().replace("\\", "/")
    parts = [p.strip() for p in text.split("/")]
    parts = [p for p in parts if p]
    if not parts:
        return None
    return "/".join(parts)


def expand_group_prefixes(path: str) -> list[str]:
    """Expand "a/b/c" to ["a", "a/b", "a/b/c"]."""
    normalised = normalise_group_path(path)
    if not normalised:
        return []
    segments = normalised.split("/")
    return ["/".join(segments[: i + 1]) for i in range(len(segments))]


def coerce_groups(raw: object) -> list[str]:
    """
    Accept groups as an iterable of strings or a single delimited string
    (comma, semicolon or pipe).
    """
    if not raw:
        return []
    if isinstance(raw, str):
        return [s.strip() for s in _DELIMITER_RE.split(raw) if s.strip()]
    if isinstance(raw, Iterable):
        return [str(x if x is not None else "") for x in raw]
    return []


def format_groups(raw: object) -> str:
    normalised = [g for g in (normalise_group_path(x) for x in coerce_groups(raw)) if g]
    if not normalised:
        return "—"
    return ", ".join(normalised)


def split_group_keys(key: str) -> list[str]:
    """A group scope key may name several groups separated by commas."""
    keys = []
    for part in str(key or "").split(","):
        normalised = normalise_group_path(part)
        if normalised:
            keys.append(normalised)
    return keys
