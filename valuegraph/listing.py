# valuegraph/listing.py
"""List engine shared by every collection.

A page is derived from the full collection in a fixed order: free-text query,
then field filters, then sort, then pagination. `list_page` is a pure
function; `ListView` carries the transient view state a console screen keeps
between requests (query, filters, sort, page, selection).
"""
import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from .entities import EntitySpec, get_spec
from .schemas import Record
from .utils import collation_key

PAGE_SIZE = 50
ALL = "all"
DIRECTIONS = ("asc", "desc")


@dataclass(frozen=True)
class ListQuery:
    query: str = ""
    filters: Mapping[str, str] = field(default_factory=dict)
    sort: Optional[str] = None
    direction: str = "asc"
    page: int = 1


@dataclass(frozen=True)
class ListPage:
    items: Tuple[Record, ...]
    total: int
    page: int
    pages: int
    sort: str
    direction: str
    page_size: int = PAGE_SIZE

    @property
    def empty(self) -> bool:
        return self.total == 0

    @property
    def start(self) -> int:
        return 0 if self.total == 0 else (self.page - 1) * self.page_size + 1

    @property
    def end(self) -> int:
        return min(self.page * self.page_size, self.total)


def _active(filters: Optional[Mapping[str, str]]) -> Dict[str, str]:
    return {k: v for k, v in (filters or {}).items() if v not in (None, "", ALL)}


def filter_records(spec: EntitySpec, records: Iterable[Record], query: str = "",
                   filters: Optional[Mapping[str, str]] = None) -> List[Record]:
    data = list(records)
    if query:
        needle = query.lower()
        data = [r for r in data if any(needle in (get(r) or "").lower() for get in spec.search)]
    for name, value in _active(filters).items():
        try:
            get = spec.filters[name]
        except KeyError:
            raise ValueError(f"Cannot filter {spec.plural} by {name!r}") from None
        data = [r for r in data if get(r) == value]
    return data


def sort_records(spec: EntitySpec, records: Iterable[Record], sort: Optional[str] = None,
                 direction: str = "asc") -> List[Record]:
    sort = sort or spec.default_sort
    if direction not in DIRECTIONS:
        raise ValueError(f"Sort direction must be one of {DIRECTIONS}, got {direction!r}")
    try:
        sort_field = spec.sorts[sort]
    except KeyError:
        raise ValueError(f"Cannot sort {spec.plural} by {sort!r}") from None
    if sort_field.numeric:
        key = lambda r: sort_field.key(r) or 0
    else:
        key = lambda r: collation_key(sort_field.key(r) or "")
    # sorted() is stable in both directions, ties keep collection order
    return sorted(records, key=key, reverse=direction == "desc")


def page_count(total: int, page_size: int = PAGE_SIZE) -> int:
    return max(1, math.ceil(total / page_size))


def paginate(records: Sequence[Record], page: int, page_size: int = PAGE_SIZE) -> List[Record]:
    # out-of-range pages are not clamped, they come back empty
    start = (page - 1) * page_size
    if start < 0:
        return []
    return list(records[start:start + page_size])


def list_page(kind, records: Iterable[Record], view: ListQuery = ListQuery()) -> ListPage:
    spec = get_spec(kind)
    sort = view.sort or spec.default_sort
    data = filter_records(spec, records, view.query, view.filters)
    data = sort_records(spec, data, sort, view.direction)
    return ListPage(
        items=tuple(paginate(data, view.page)),
        total=len(data),
        page=view.page,
        pages=page_count(len(data)),
        sort=sort,
        direction=view.direction,
    )


def distinct_values(kind, records: Iterable[Record], name: str) -> List[str]:
    """Sorted distinct non-empty values of a filterable field, for filter dropdowns."""
    spec = get_spec(kind)
    try:
        get = spec.filters[name]
    except KeyError:
        raise ValueError(f"Cannot filter {spec.plural} by {name!r}") from None
    return sorted({get(r) for r in records if get(r)}, key=collation_key)


class Selection:
    """Identifiers picked for bulk actions.

    Selected ids survive paging and filtering even when they are no longer
    visible; bulk delete still acts on them.
    """

    def __init__(self, ids: Iterable[str] = ()):
        self.ids: Set[str] = set(ids)

    def __contains__(self, record_id) -> bool:
        return record_id in self.ids

    def __len__(self) -> int:
        return len(self.ids)

    def __iter__(self):
        return iter(self.ids)

    def toggle(self, record_id: str):
        if record_id in self.ids:
            self.ids.discard(record_id)
        else:
            self.ids.add(record_id)

    def toggle_all(self, visible: Iterable[Record]):
        """Header checkbox: select the visible page, or clear if it is already selected."""
        page_ids = {r.id for r in visible}
        if page_ids and self.ids == page_ids:
            self.ids = set()
        else:
            self.ids = page_ids

    def select_matching(self, records: Iterable[Record]):
        self.ids = {r.id for r in records}

    def clear(self):
        self.ids = set()


class ListView:
    """Transient view state for one collection screen.

    Changing the query or a filter sends the view back to page 1.
    """

    def __init__(self, kind):
        self.spec = get_spec(kind)
        self.query = ""
        self.filters: Dict[str, str] = {name: ALL for name in self.spec.filters}
        self.sort = self.spec.default_sort
        self.direction = "asc"
        self.page = 1
        self.selection = Selection()

    def set_query(self, query: str):
        self.query = query
        self.page = 1

    def set_filter(self, name: str, value: str):
        if name not in self.spec.filters:
            raise ValueError(f"Cannot filter {self.spec.plural} by {name!r}")
        self.filters[name] = value
        self.page = 1

    def toggle_sort(self, key: str):
        if key not in self.spec.sorts:
            raise ValueError(f"Cannot sort {self.spec.plural} by {key!r}")
        if key == self.sort:
            self.direction = "desc" if self.direction == "asc" else "asc"
        else:
            self.sort = key
            self.direction = "asc"

    def go_to(self, page: int):
        self.page = page

    def as_query(self) -> ListQuery:
        return ListQuery(self.query, dict(self.filters), self.sort, self.direction, self.page)

    def render(self, records: Iterable[Record]) -> ListPage:
        return list_page(self.spec.kind, records, self.as_query())

    def select_all(self, records: Iterable[Record], scope: str = "page"):
        """Header checkbox. `page` acts on the visible page only; `filtered`
        selects every record matching the current query and filters."""
        if scope == "filtered":
            self.selection.select_matching(
                filter_records(self.spec, records, self.query, self.filters))
        elif scope == "page":
            self.selection.toggle_all(self.render(records).items)
        else:
            raise ValueError(f"Unknown selection scope {scope!r}")
