# ==============================================
# STORAGE (key/value meta stores)
# ==============================================
#
# This package holds the StorageBackend contract and every
# engine that implements it.
#
# Modules:
# --------
# - backend.py       → StorageBackend abstract interface
# - memory_store.py  → In-process rows (tests, scripts)
# - json_store.py    → Rows persisted to a JSON file per data type
# - mysql_store.py   → {prefix}{data_type}meta tables via PyMySQL
# - mongo_store.py   → {prefix}{data_type}meta collections via pymongo
# - factory.py       → create_store() from AppConfig
#
# ==============================================

from .backend import StorageBackend
from .memory_store import MemoryMetaStore, MetaRow
from .json_store import JSONFileMetaStore
from .mysql_store import MySQLMetaStore
from .mongo_store import MongoMetaStore
from .factory import create_store

__all__ = [
    "StorageBackend",
    "MemoryMetaStore",
    "MetaRow",
    "JSONFileMetaStore",
    "MySQLMetaStore",
    "MongoMetaStore",
    "create_store",
]
