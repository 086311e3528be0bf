# ==============================================
# MemoryMetaStore
# ==============================================
#
# PURPOSE:
#   In-process implementation of StorageBackend. Rows live in a
#   plain list, so insertion order is storage order. Values are
#   copied in and out, so callers never share objects with a row.
#
# WHY THIS CLASS EXISTS:
#   Tests and one-off scripts need a store with exactly the same
#   add / update / delete semantics as the database engines,
#   without a server. JSONFileMetaStore builds on it.
#
# ROW LAYOUT:
#   MetaRow(meta_id, object_id, meta_key, meta_value)
#
# ==============================================

import copy
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from .backend import StorageBackend


@dataclass
class MetaRow:
    meta_id: int
    object_id: Any
    meta_key: str
    meta_value: Any

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization"""
        return {
            "meta_id": self.meta_id,
            "object_id": self.object_id,
            "meta_key": self.meta_key,
            "meta_value": self.meta_value,
        }

    @staticmethod
    def from_dict(data: dict) -> 'MetaRow':
        """Create from dictionary (deserialization)"""
        return MetaRow(
            meta_id=data["meta_id"],
            object_id=data["object_id"],
            meta_key=data["meta_key"],
            meta_value=data.get("meta_value"),
        )


class MemoryMetaStore(StorageBackend):
    def __init__(self, data_type: str = "post"):
        super().__init__(data_type)
        self.rows: List[MetaRow] = []
        self._next_id = 1

    def _matching(self, data_id, data_key: str) -> List[MetaRow]:
        return [
            row for row in self.rows
            if row.object_id == data_id and row.meta_key == data_key
        ]

    def _changed(self) -> None:
        # Hook for subclasses that persist rows somewhere
        pass

    def _commit(self, snapshot: Tuple[List[MetaRow], int]) -> None:
        # Persist, or restore the rows as they were before the change
        try:
            self._changed()
        except Exception:
            self.rows, self._next_id = snapshot
            raise

    def _snapshot(self) -> Tuple[List[MetaRow], int]:
        return copy.deepcopy(self.rows), self._next_id

    def get_data(self, data_id, data_key: str, single: bool = False) -> Any:
        values = [copy.deepcopy(row.meta_value) for row in self._matching(data_id, data_key)]
        return self._first(values, single)

    def add_data(self, data_id, data_key: str, data_value: Any, unique: bool = False):
        if unique and self._matching(data_id, data_key):
            return False
        snapshot = self._snapshot()
        row = MetaRow(self._next_id, data_id, data_key, copy.deepcopy(data_value))
        self._next_id += 1
        self.rows.append(row)
        self._commit(snapshot)
        return row.meta_id

    def update_data(self, data_id, data_key: str, data_value: Any, data_prev_value: Any = ""):
        existing = self._matching(data_id, data_key)
        if not existing:
            return self.add_data(data_id, data_key, data_value)

        if data_prev_value != "":
            targets = [row for row in existing if row.meta_value == data_prev_value]
            if not targets:
                return False
        else:
            if len(existing) == 1 and existing[0].meta_value == data_value:
                return False
            targets = existing

        snapshot = self._snapshot()
        for row in targets:
            row.meta_value = copy.deepcopy(data_value)
        self._commit(snapshot)
        return True

    def delete_data(self, data_id, data_key: str, data_value: Any = "") -> bool:
        doomed = [
            row for row in self._matching(data_id, data_key)
            if data_value == "" or row.meta_value == data_value
        ]
        if not doomed:
            return False
        snapshot = self._snapshot()
        doomed_ids = {row.meta_id for row in doomed}
        self.rows = [row for row in self.rows if row.meta_id not in doomed_ids]
        self._commit(snapshot)
        return True

    def get_all(self, data_id) -> Dict[str, List[Any]]:
        result: Dict[str, List[Any]] = {}
        for row in self.rows:
            if row.object_id == data_id:
                result.setdefault(row.meta_key, []).append(copy.deepcopy(row.meta_value))
        return result
