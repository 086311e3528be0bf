# ==============================================
# MongoMetaStore
# ==============================================
#
# PURPOSE:
#   StorageBackend over a MongoDB collection, one collection per
#   data type. Each stored value is its own document:
#
#     {_id, object_id, meta_key, meta_value}
#
#   Values keep their native structure (nested dicts, lists).
#   Order of values under a key is _id order.
#
# CLASS: MongoMetaStore
# ---------------------
#   Stateful — holds connection to MongoDB.
#
#   Constructor:
#   ------------
#   - __init__(host, port, database, user=None, password=None,
#              data_type="post", table_prefix="fm_")
#
#   Methods:
#   --------
#   - connect() -> None
#       Establish connection to MongoDB and create indexes.
#
#   - disconnect() -> None
#       Close connection.
#
#   - ensure_indexes() -> None
#       Compound index on (object_id, meta_key).
#
#   - get_data / add_data / update_data / delete_data / get_all
#       StorageBackend primitives. add_data returns the inserted
#       _id as a string.
#
#   Context Manager:
#   ----------------
#   - __enter__ / __exit__ for `with MongoMetaStore(...) as store:` usage.
#
# ==============================================

from typing import Any, Dict, List
from urllib.parse import quote_plus

import pymongo
from pymongo import MongoClient as PyMongoClient
from pymongo.errors import ConnectionFailure, OperationFailure

from .backend import StorageBackend


class MongoMetaStore(StorageBackend):
    def __init__(self, host, port, database, user=None, password=None, data_type="post", table_prefix="fm_"):
        # Store connection params. Don't connect yet.
        super().__init__(data_type)
        self.host = host
        self.port = port
        self.database = database
        self.user = user
        self.password = password
        self.collection_name = f"{table_prefix}{data_type}meta"
        self.client = None  # Will hold the actual MongoDB client connection

    def connect(self):
        # Establish connection to MongoDB.
        try:
            if self.user and self.password:
                user = quote_plus(self.user)
                password = quote_plus(self.password)
                uri = f"mongodb://{user}:{password}@{self.host}:{self.port}/{self.database}"
            else:
                uri = f"mongodb://{self.host}:{self.port}/{self.database}"
            self.client = PyMongoClient(uri)
            # Test connection
            self.client.admin.command('ping')
            print("Connected to MongoDB successfully.")
        except ConnectionFailure as e:
            print(f"Could not connect to MongoDB: {e}")
            raise
        except OperationFailure as e:
            print(f"Authentication failed: {e}")
            raise
        self.ensure_indexes()

    def disconnect(self):
        # Close connection.
        if self.client:
            self.client.close()
            print("Disconnected from MongoDB.")
            self.client = None

    def _collection(self):
        if not self.client:
            raise RuntimeError("Not connected to MongoDB.")
        return self.client[self.database][self.collection_name]

    def ensure_indexes(self):
        collection = self._collection()
        collection.create_index(
            [("object_id", pymongo.ASCENDING), ("meta_key", pymongo.ASCENDING)]
        )

    def _find(self, data_id, data_key: str) -> List[dict]:
        cursor = self._collection().find(
            {"object_id": data_id, "meta_key": data_key}
        ).sort("_id", pymongo.ASCENDING)
        return list(cursor)

    def get_data(self, data_id, data_key: str, single: bool = False) -> Any:
        values = [doc.get("meta_value") for doc in self._find(data_id, data_key)]
        return self._first(values, single)

    def add_data(self, data_id, data_key: str, data_value: Any, unique: bool = False):
        if unique and self._find(data_id, data_key):
            return False
        result = self._collection().insert_one(
            {"object_id": data_id, "meta_key": data_key, "meta_value": data_value}
        )
        return str(result.inserted_id)

    def update_data(self, data_id, data_key: str, data_value: Any, data_prev_value: Any = ""):
        docs = self._find(data_id, data_key)
        if not docs:
            return self.add_data(data_id, data_key, data_value)

        if data_prev_value != "":
            target_ids = [doc["_id"] for doc in docs if doc.get("meta_value") == data_prev_value]
            if not target_ids:
                return False
        else:
            if len(docs) == 1 and docs[0].get("meta_value") == data_value:
                return False
            target_ids = [doc["_id"] for doc in docs]

        self._collection().update_many(
            {"_id": {"$in": target_ids}},
            {"$set": {"meta_value": data_value}}
        )
        return True

    def delete_data(self, data_id, data_key: str, data_value: Any = "") -> bool:
        target_ids = [
            doc["_id"] for doc in self._find(data_id, data_key)
            if data_value == "" or doc.get("meta_value") == data_value
        ]
        if not target_ids:
            return False
        result = self._collection().delete_many({"_id": {"$in": target_ids}})
        return result.deleted_count > 0

    def get_all(self, data_id) -> Dict[str, List[Any]]:
        cursor = self._collection().find({"object_id": data_id}).sort("_id", pymongo.ASCENDING)
        result: Dict[str, List[Any]] = {}
        for doc in cursor:
            result.setdefault(doc["meta_key"], []).append(doc.get("meta_value"))
        return result

    def __enter__(self):
        # For `with MongoMetaStore(...) as store:` usage.
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()
