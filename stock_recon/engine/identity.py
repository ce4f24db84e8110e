"""
Identity resolution for locations and item keys.

Upstream records tag locations and items inconsistently: a shipment may name
the consuming site instead of the production house, and item keys arrive as
``chicken``, ``chicken_momos``, ``chickenMomos`` or a catalog id. Everything
here is a pure function of its input and the catalog snapshot the resolver
was built from. Unknown identifiers never raise; they come back as
``Unresolved`` carrying the best available fallback value.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import ClassVar, Dict, Iterable, List, Optional, Sequence, Union

from stock_recon.data.models import Item, ItemScope, Location

_SEPARATORS = re.compile(r"[\s_\-]+")


@dataclass(frozen=True)
class Resolved:
    """Identifier matched the catalog; ``value`` is the canonical form."""
    value: str
    raw: str
    resolved: ClassVar[bool] = True


@dataclass(frozen=True)
class Unresolved:
    """Identifier did not match; ``value`` is the fallback used in its place."""
    value: str
    raw: str
    resolved: ClassVar[bool] = False


Resolution = Union[Resolved, Unresolved]


def normalize_item_key(raw: str, suffixes: Sequence[str] = ("momo",)) -> str:
    """Normalize a raw item key to its comparison form.

    Steps, in order:
    1. trim surrounding whitespace;
    2. join ``_``, ``-`` or whitespace separated segments in camel case
       (``chicken_cheese`` -> ``chickenCheese``; all-caps segments are lowered first);
    3. drop one trailing unit-of-product word from ``suffixes``, optionally
       plural and in any case (``chickenMomos`` -> ``chicken``), unless
       nothing would be left.

    Examples::

        normalize_item_key("chicken_momos")      == "chicken"
        normalize_item_key("Chicken Cheese Momo") == "chickenCheese"
        normalize_item_key("vegKurkureMomos")    == "vegKurkure"
        normalize_item_key("momos")              == "momos"
    """
    parts = [p.lower() if p.isupper() else p for p in _SEPARATORS.split(str(raw).strip()) if p]
    if not parts:
        return ""
    camel = parts[0][:1].lower() + parts[0][1:]
    camel += "".join(p[:1].upper() + p[1:] for p in parts[1:])

    for suffix in suffixes:
        stripped = re.sub(rf"{re.escape(suffix)}s?$", "", camel, flags=re.IGNORECASE)
        if stripped and stripped != camel:
            return stripped
    return camel


class IdentityResolver:
    """Resolves raw location and item identifiers against a catalog snapshot.

    Alias sets are assumed disjoint; if two locations claim the same alias the
    first one listed wins.
    """

    def __init__(
        self,
        locations: Iterable[Location],
        items: Iterable[Item],
        suffixes: Sequence[str] = ("momo",),
    ) -> None:
        self.suffixes = tuple(suffixes)
        self._locations: Dict[str, Location] = {}
        self._aliases: Dict[str, str] = {}
        for loc in locations:
            self._locations.setdefault(loc.location_id, loc)
        for loc in self._locations.values():
            for alias in loc.alias_ids:
                if alias not in self._locations:
                    self._aliases.setdefault(alias, loc.location_id)

        self._items: List[Item] = list(items)
        self._item_index: Dict[str, str] = {}
        # Keys take precedence over display names and ids
        for item in self._items:
            self._item_index.setdefault(self.normalize(item.key), item.key)
        for item in self._items:
            for candidate in (item.display_name, item.item_id):
                if candidate:
                    self._item_index.setdefault(self.normalize(candidate), item.key)
            if item.item_id:
                self._item_index.setdefault(item.item_id, item.key)

    # ---------- locations ----------

    def identify_location(self, raw_id: Optional[str]) -> Resolution:
        raw = (raw_id or "").strip()
        if raw in self._locations:
            return Resolved(raw, raw)
        if raw in self._aliases:
            return Resolved(self._aliases[raw], raw)
        return Unresolved(raw, raw)

    def resolve_location(self, raw_id: Optional[str]) -> str:
        """Canonical id for ``raw_id``, or ``raw_id`` itself when unknown."""
        return self.identify_location(raw_id).value

    def location_refs(self, location_id: str) -> List[str]:
        """Every identifier records for this location may be stored under."""
        canonical = self.resolve_location(location_id)
        refs = [canonical]
        loc = self._locations.get(canonical)
        if loc is not None:
            refs.extend(loc.alias_ids)
        if location_id and location_id not in refs:
            refs.append(location_id)
        return list(dict.fromkeys(refs))

    def location(self, location_id: str) -> Optional[Location]:
        return self._locations.get(self.resolve_location(location_id))

    # ---------- items ----------

    def normalize(self, raw_key: str) -> str:
        return normalize_item_key(raw_key, self.suffixes)

    def identify_item(self, raw_key: Optional[str]) -> Resolution:
        raw = (raw_key or "").strip()
        key = self._item_index.get(raw)
        if key is not None:
            return Resolved(key, raw)
        normalized = self.normalize(raw)
        key = self._item_index.get(normalized)
        if key is not None:
            return Resolved(key, raw)
        return Unresolved(normalized, raw)

    def resolve_item_key(self, raw_key: Optional[str]) -> str:
        """Canonical catalog key, or the normalized raw key when unmatched."""
        return self.identify_item(raw_key).value

    def applicable_items(self, location_id: str) -> List[Item]:
        """Active global items plus active items scoped to this location."""
        canonical = self.resolve_location(location_id)
        return [
            item for item in self._items
            if item.is_active and (
                item.scope == ItemScope.GLOBAL
                or self.resolve_location(item.location_id) == canonical
            )
        ]

    def applicable_item_keys(self, location_id: str) -> List[str]:
        return list(dict.fromkeys(item.key for item in self.applicable_items(location_id)))
