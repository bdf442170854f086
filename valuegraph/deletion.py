# valuegraph/deletion.py
"""Single and bulk delete behind an explicit confirmation step.

Requesting a delete only builds a `PendingDeletion`; nothing is removed from
the store until `confirm()` is called. `cancel()` drops the request.
"""
from typing import Iterable, Optional, Tuple

from .entities import get_spec
from .listing import Selection
from .store import EntityStore
from .utils import logger


class PendingDeletion:
    def __init__(self, store: EntityStore, kind, ids: Iterable[str],
                 selection: Optional[Selection] = None):
        self.store = store
        self.spec = get_spec(kind)
        self.ids: Tuple[str, ...] = tuple(ids)
        self.selection = selection
        self.state = "pending"

    @property
    def count(self) -> int:
        return len(self.ids)

    @property
    def prompt(self) -> str:
        if self.count == 1:
            return f"Delete this {self.spec.label.lower()}? This cannot be undone."
        return f"Delete {self.count} {self.spec.plural}? This cannot be undone."

    def _check_pending(self):
        if self.state != "pending":
            raise RuntimeError(f"Deletion already {self.state}")

    def confirm(self) -> int:
        """Remove the requested ids and clear the selection.

        Returns the number of ids requested; ids that are no longer in the
        collection are skipped silently.
        """
        self._check_pending()
        removed = self.store.delete_many(self.spec.kind, self.ids)
        if removed != self.count:
            logger.debug("%d of %d %s were already gone",
                         self.count - removed, self.count, self.spec.plural)
        if self.selection is not None:
            self.selection.clear()
        self.state = "confirmed"
        return self.count

    def cancel(self):
        self._check_pending()
        self.state = "cancelled"


def request_delete(store: EntityStore, kind, record_id: str) -> PendingDeletion:
    return PendingDeletion(store, kind, [record_id])


def request_bulk_delete(store: EntityStore, kind, selection: Selection) -> PendingDeletion:
    return PendingDeletion(store, kind, sorted(selection), selection)
