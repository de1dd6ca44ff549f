# search / filter / sort pipeline shared by the listing and admin screens
from __future__ import annotations

import unicodedata
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Sequence, Tuple

from store.fuzzy import BitapMatcher, Matcher, WeightedKey, ranked, resolve_path

SHOW_ALL = "all"


class SortKey(str, Enum):
    NAME_ASC = "name"
    PRICE_ASC = "price-low"
    PRICE_DESC = "price-high"


SORT_LABELS = {
    SortKey.NAME_ASC: "Name A-Z",
    SortKey.PRICE_ASC: "Lowest Price",
    SortKey.PRICE_DESC: "Highest Price",
}


_default_matcher = BitapMatcher()


def fuzzy_filter(
    records: Sequence[Any],
    keys: Sequence[WeightedKey],
    query: str,
    threshold: float,
    matcher: Optional[Matcher] = None,
) -> List[Any]:
    """
    Records matching query, best first.
    An empty (or whitespace-only) query returns every record in input order.
    """
    if not query or not query.strip():
        return list(records)
    matcher = matcher or _default_matcher
    return ranked(matcher.search(records, keys, query, threshold))


def filter_by(records: Sequence[Any], field_path: str, value: Optional[str]) -> List[Any]:
    """Exact, case-sensitive equality on field_path. SHOW_ALL/None keeps all."""
    if value is None or value == SHOW_ALL:
        return list(records)
    return [r for r in records if resolve_path(r, field_path) == value]


def name_sort_key(name: Any) -> Tuple[str, str]:
    """
    Locale-style collation key: accents and case are ignored first,
    then lowercase sorts before uppercase.
    """
    text = "" if name is None else str(name)
    decomposed = unicodedata.normalize("NFKD", text)
    base = "".join(c for c in decomposed if not unicodedata.combining(c))
    return base.casefold(), text.swapcase()


def _price(record: Any, price_field: str) -> float:
    value = resolve_path(record, price_field)
    return value if isinstance(value, (int, float)) else 0


def sort_records(
    records: Sequence[Any],
    sort_key: SortKey | str = SortKey.NAME_ASC,
    name_field: str = "name",
    price_field: str = "price",
) -> List[Any]:
    """Stable sort; unknown keys fall back to name ascending."""
    try:
        sort_key = SortKey(sort_key)
    except ValueError:
        sort_key = SortKey.NAME_ASC

    if sort_key is SortKey.PRICE_ASC:
        return sorted(records, key=lambda r: _price(r, price_field))
    if sort_key is SortKey.PRICE_DESC:
        return sorted(records, key=lambda r: _price(r, price_field), reverse=True)
    return sorted(records, key=lambda r: name_sort_key(resolve_path(r, name_field)))


@dataclass
class SearchPipeline:
    """
    Holds the current query / filter / sort selection of one screen.

    apply() runs: fuzzy match -> categorical filter -> sort.
    Sorting only happens when the pipeline is sortable; an explicit sort
    replaces the match ranking.
    """

    keys: Sequence[WeightedKey]
    threshold: float
    filter_field: Optional[str] = None
    sortable: bool = False
    name_field: str = "name"
    price_field: str = "price"
    matcher: Optional[Matcher] = None

    query: str = ""
    filter_value: str = SHOW_ALL
    sort_key: SortKey = SortKey.NAME_ASC
    _last_count: int = field(default=0, repr=False)

    def apply(self, records: Sequence[Any]) -> List[Any]:
        result = fuzzy_filter(records, self.keys, self.query, self.threshold, self.matcher)
        if self.filter_field:
            result = filter_by(result, self.filter_field, self.filter_value)
        if self.sortable:
            result = sort_records(
                result, self.sort_key, self.name_field, self.price_field
            )
        self._last_count = len(result)
        return result

    @property
    def last_count(self) -> int:
        return self._last_count

    def reset(self) -> None:
        self.query = ""
        self.filter_value = SHOW_ALL
        self.sort_key = SortKey.NAME_ASC


# ---------------------------
# Presets per screen
# ---------------------------

PRODUCT_KEYS = (
    WeightedKey("name"),
    WeightedKey("description"),
    WeightedKey("category.name"),
)


def storefront_pipeline() -> SearchPipeline:
    return SearchPipeline(
        keys=PRODUCT_KEYS, threshold=0.4, filter_field="category_id", sortable=True
    )


def admin_products_pipeline() -> SearchPipeline:
    return SearchPipeline(keys=PRODUCT_KEYS, threshold=0.3, filter_field="category_id")


def admin_categories_pipeline() -> SearchPipeline:
    return SearchPipeline(keys=(WeightedKey("name"),), threshold=0.3)


def admin_users_pipeline() -> SearchPipeline:
    return SearchPipeline(
        keys=(WeightedKey("name"), WeightedKey("email"), WeightedKey("role")),
        threshold=0.3,
    )


def admin_orders_pipeline() -> SearchPipeline:
    return SearchPipeline(
        keys=(
            WeightedKey("id"),
            WeightedKey("first_name"),
            WeightedKey("last_name"),
            WeightedKey("email"),
        ),
        threshold=0.4,
        filter_field="payment_status",
    )
