import json
from pathlib import Path
from typing import Any, Dict

from .memory_store import MemoryMetaStore, MetaRow


# ==============================================
# JSONFileMetaStore
# ==============================================
#
# PURPOSE:
#   Persist meta rows for one data type to a JSON file so that
#   saved field values survive process restarts without a
#   database server.
#
# WHAT IS PERSISTED:
#   1. rows     → every (meta_id, object_id, meta_key, meta_value)
#   2. next_id  → the next meta id to hand out
#
# CLASS: JSONFileMetaStore
# ------------------------
#   Stateful — holds the rows in memory and rewrites the file
#   after every change.
#
#   Constructor:
#   ------------
#   - __init__(data_type="post", storage_dir="metadata/", table_prefix="fm_")
#       Create storage directory if it doesn't exist, then load
#       any rows saved by a previous run.
#
class JSONFileMetaStore(MemoryMetaStore):
    """
    MemoryMetaStore backed by a JSON file.
    
    Files created:
    - metadata/fm_postmeta.json    → rows for data_type "post"
    - metadata/fm_usermeta.json    → rows for data_type "user"
    """
    
    def __init__(self, data_type: str = "post", storage_dir: str = "metadata/", table_prefix: str = "fm_"):
        """
        Initialize the JSON store.
        
        Args:
            data_type: Host object type the rows belong to
            storage_dir: Directory to store meta files
            table_prefix: Prefix for the file name
        """
        super().__init__(data_type)
        self.storage_dir = Path(storage_dir)
        
        # Create directory if it doesn't exist
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        
        self.meta_file = self.storage_dir / f"{table_prefix}{data_type}meta.json"
        self.load()
#   Methods:
#   --------
#   - load() -> None
#       Read rows from the file. Start empty if no file.
#
#   - save() -> None
#       Serialize rows and next_id to the file.
#
#   - exists() -> bool
#       Check whether the meta file exists (i.e., is this a restart?).
#
#   - clear() -> None
#       Delete the meta file and forget all rows.
#
    def load(self) -> None:
        """
        Load rows from disk. Missing file means an empty store.
        """
        if not self.meta_file.exists():
            print(f"No meta file found at {self.meta_file}")
            self.rows = []
            self._next_id = 1
            return
        
        with open(self.meta_file, 'r') as f:
            state = json.load(f)
        
        self.rows = [MetaRow.from_dict(row) for row in state.get("rows", [])]
        self._next_id = state.get("next_id", len(self.rows) + 1)
        print(f"Loaded {len(self.rows)} {self.data_type} meta rows from {self.meta_file}")
    
    def save(self) -> None:
        """
        Save rows to disk.

        The JSON is built in full before anything is written, then
        swapped in from a temp file, so a failed save leaves the
        previous file intact.

        Raises:
            TypeError: a stored value is not JSON-serialisable
        """
        state: Dict[str, Any] = {
            "data_type": self.data_type,
            "next_id": self._next_id,
            "rows": [row.to_dict() for row in self.rows],
        }
        payload = json.dumps(state, indent=2)
        
        tmp_file = self.meta_file.with_name(self.meta_file.name + ".tmp")
        with open(tmp_file, 'w') as f:
            f.write(payload)
        tmp_file.replace(self.meta_file)
    
    def _changed(self) -> None:
        self.save()
    
    def exists(self) -> bool:
        """
        Returns:
            True if this is a restart (meta file exists), False if fresh start
        """
        return self.meta_file.exists()
    
    def clear(self) -> None:
        """
        Delete the meta file and all in-memory rows (for testing or reset).
        """
        if self.meta_file.exists():
            self.meta_file.unlink()
            print(f"🗑️  Deleted {self.meta_file}")
        self.rows = []
        self._next_id = 1
# FILE STRUCTURE:
# ---------------
#   metadata/
#   └── fm_postmeta.json   → {data_type, next_id, rows: [{meta_id, object_id, meta_key, meta_value}]}
#
# =============================================
