"""
services/listing.py

Client-side list behaviour of the console pages: search, filter, sort, page.
Upstream list endpoints return everything; narrowing happens here.
"""

from collections import Counter
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from schemas.common import MetaInfo, make_meta


def _get(item: Any, attr: str) -> Any:
    if isinstance(item, dict):
        return item.get(attr)
    return getattr(item, attr, None)


def contains(value: Optional[str], term: Optional[str]) -> bool:
    """Case-insensitive substring; an empty term matches everything"""
    if not term or not term.strip():
        return True
    if value is None:
        return False
    return term.strip().lower() in str(value).lower()


def matches_any(item: Any, term: Optional[str], attrs: Iterable[str]) -> bool:
    if not term or not term.strip():
        return True
    return any(contains(_get(item, a), term) for a in attrs)


def equals(value: Optional[str], wanted: Optional[str]) -> bool:
    """Filter select: None / "" / "all" mean no filter"""
    if wanted is None or wanted == "" or wanted.lower() == "all":
        return True
    return value is not None and str(value).lower() == wanted.lower()


def sort_by(items: Sequence[Any], key: str, descending: bool = False) -> List[Any]:
    """Stable sort on one attribute, missing values always last"""
    present = [i for i in items if _get(i, key) is not None]
    missing = [i for i in items if _get(i, key) is None]
    ordered = sorted(present, key=lambda i: _sort_key(_get(i, key)), reverse=descending)
    return ordered + missing


def _sort_key(value: Any) -> Any:
    return value.lower() if isinstance(value, str) else value


def paginate(items: Sequence[Any], page: int, size: int, sort: Optional[str] = None) -> Tuple[List[Any], MetaInfo]:
    """Slice one page; a page past the end is empty but still reports the totals"""
    page = max(1, page)
    size = max(1, size)
    start = (page - 1) * size
    return list(items[start:start + size]), make_meta(len(items), page, size, sort)


def count_by(items: Iterable[Any], attr: str) -> Dict[str, int]:
    return dict(Counter(_get(i, attr) for i in items if _get(i, attr) is not None))


def count_where(items: Iterable[Any], predicate: Callable[[Any], bool]) -> int:
    return sum(1 for i in items if predicate(i))


def unique_options(items: Iterable[Any], id_attr: str, name_attr: str) -> List[Dict[str, str]]:
    """Distinct {id, name} pairs in first-seen order (filter dropdowns)"""
    seen: Dict[str, str] = {}
    for i in items:
        key = _get(i, id_attr)
        if key and key not in seen:
            seen[key] = _get(i, name_attr) or key
    return [{"id": k, "name": v} for k, v in seen.items()]


def list_response(
    items: Sequence[Any],
    page: int,
    size: int,
    sort: Optional[str] = None,
    stats: Optional[Dict[str, Any]] = None,
    filters: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    page_items, meta = paginate(items, page, size, sort)
    body: Dict[str, Any] = {
        "success": True,
        "data": [_dump(i) for i in page_items],
        "meta": meta.model_dump(),
    }
    if stats is not None:
        body["stats"] = stats
    if filters is not None:
        body["filters"] = filters
    return body


def _dump(item: Any) -> Any:
    if hasattr(item, "to_upstream"):
        return item.to_upstream()
    return item
