"""
Group-to-card index.

Stores every prefix of every group path, so looking up a group returns its
whole subtree.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime

from sprout.application.scope_filter import is_available_now
from sprout.application.utils.groups import (
    coerce_groups,
    expand_group_prefixes,
    normalise_group_path,
)
from sprout.domain.constants import GROUP_SEARCH_LIMIT
from sprout.domain.models import CardRecord, CardState


@dataclass(frozen=True)
class GroupCounts:
    due: int
    total: int


class GroupIndex:
    """
    Cached mapping from group path (and every ancestor prefix) to card ids.

    `all_groups` keeps the paths as written. Lookups and `search` ignore case,
    matching group scopes.
    """

    def __init__(self):
        self._group_to_ids: dict[str, set[str]] = {}
        self._ids_by_lower: dict[str, set[str]] = {}
        self._keys: list[str] = []
        self._keys_lower: list[str] = []

    def build(self, cards: Iterable[CardRecord]) -> "GroupIndex":
        self._group_to_ids.clear()
        self._ids_by_lower.clear()

        for card in cards:
            if not card.id:
                continue
            for raw in coerce_groups(card.groups):
                for prefix in expand_group_prefixes(raw):
                    self._group_to_ids.setdefault(prefix, set()).add(card.id)
                    self._ids_by_lower.setdefault(prefix.lower(), set()).add(card.id)

        self._keys = sorted(self._group_to_ids)
        self._keys_lower = [k.lower() for k in self._keys]
        return self

    def all_groups(self) -> list[str]:
        return list(self._keys)

    def ids(self, group: str) -> set[str]:
        """IDs for a group subtree (descendants included)."""
        normalised = normalise_group_path(group)
        if not normalised:
            return set()
        return set(self._ids_by_lower.get(normalised.lower(), ()))

    def counts(self, group: str, states: Mapping[str, CardState], now: datetime) -> GroupCounts:
        ids = self.ids(group)
        due = sum(1 for card_id in ids if is_available_now(states.get(card_id), now))
        return GroupCounts(due=due, total=len(ids))

    def search(self, query: str, limit: int = GROUP_SEARCH_LIMIT) -> list[str]:
        q = str(query or "").strip().lower()
        if not q:
            return self._keys[:limit]

        out: list[str] = []
        for key, lower in zip(self._keys, self._keys_lower):
            if q in lower:
                out.append(key)
            if len(out) >= limit:
                break
        return out
