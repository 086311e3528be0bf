# ==============================================
# StorageBackend (Abstract Interface)
# ==============================================
#
# PURPOSE:
#   The four primitives a Context needs from a host's key/value
#   metadata store. Every concrete store (memory, JSON file,
#   MySQL, MongoDB) implements them for one data type
#   ("post", "user", "term", "option", ...).
#
# WHY THIS CLASS EXISTS:
#   The Context walks the field tree and decides WHAT to write.
#   The store decides HOW. Keeping the contract in one place lets
#   the same Context run against any engine.
#
# CLASS: StorageBackend
# ---------------------
#   Methods (abstract):
#   -------------------
#   - get_data(data_id, data_key, single=False) -> list | Any
#       All values stored for data_key on object data_id, in
#       insertion order. [] when absent.
#       single=True → first value only, "" when absent.
#
#   - add_data(data_id, data_key, data_value, unique=False) -> int | bool
#       Append a value. Returns the new meta id (truthy).
#       unique=True and the key already has a value → False.
#
#   - update_data(data_id, data_key, data_value, data_prev_value="") -> int | bool
#       Key absent                        → add, return new meta id.
#       data_prev_value given             → only rows equal to it,
#                                           False if none matched.
#       Single stored value == data_value → False.
#       Otherwise replace every value     → True.
#
#   - delete_data(data_id, data_key, data_value="") -> bool
#       Remove all values for the key, or only those equal to
#       data_value when given. False if nothing was removed.
#
#   - get_all(data_id) -> dict[str, list]
#       Every key stored on the object. Used by the CLI.
#
# ==============================================

from abc import ABC, abstractmethod
from typing import Any, Dict, List


class StorageBackend(ABC):
    """Key/value metadata storage for one host object type."""

    def __init__(self, data_type: str = "post"):
        if not data_type:
            raise ValueError("data_type is required")
        self.data_type = data_type

    @abstractmethod
    def get_data(self, data_id, data_key: str, single: bool = False) -> Any:
        ...

    @abstractmethod
    def add_data(self, data_id, data_key: str, data_value: Any, unique: bool = False):
        ...

    @abstractmethod
    def update_data(self, data_id, data_key: str, data_value: Any, data_prev_value: Any = ""):
        ...

    @abstractmethod
    def delete_data(self, data_id, data_key: str, data_value: Any = "") -> bool:
        ...

    @abstractmethod
    def get_all(self, data_id) -> Dict[str, List[Any]]:
        ...

    @staticmethod
    def _first(values: List[Any], single: bool) -> Any:
        # Shape a list of stored values the way get_data() promises
        if single:
            return values[0] if values else ""
        return values
