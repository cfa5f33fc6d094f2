"""
Catalog set-difference.

Both outputs keep the iteration order of the catalog they come from, which is
fetch order. Notification truncation depends on that order.
"""

from typing import Iterable, Union

from src.models import Catalog, CatalogDiff

CatalogLike = Union[Catalog, Iterable[str]]


def _as_catalog(products: CatalogLike) -> Catalog:
    return products if isinstance(products, Catalog) else Catalog(products)


def diff_catalogs(previous: CatalogLike, current: CatalogLike) -> CatalogDiff:
    """
    Compare two catalogs.

    Args:
        previous: The last persisted catalog (the baseline)
        current: The freshly fetched catalog

    Returns:
        CatalogDiff with `added` (in current, not previous) and `removed`
        (in previous, not current)
    """
    previous = _as_catalog(previous)
    current = _as_catalog(current)

    added = tuple(p for p in current if p not in previous)
    removed = tuple(p for p in previous if p not in current)
    return CatalogDiff(added=added, removed=removed)
