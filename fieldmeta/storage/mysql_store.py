# ==============================================
# MySQLMetaStore
# ==============================================
#
# PURPOSE:
#   StorageBackend over a MySQL "meta" table, one table per data
#   type, shaped like a classic postmeta table:
#
#     {prefix}{data_type}meta
#       meta_id     BIGINT UNSIGNED AUTO_INCREMENT PRIMARY KEY
#       object_id   VARCHAR(191)   (the data_id, stored as text)
#       meta_key    VARCHAR(255)
#       meta_value  LONGTEXT       (JSON-encoded value)
#
# WHY THIS CLASS EXISTS:
#   Field values have no fixed schema. Every value is one row
#   under (object_id, meta_key), so a multi-value field is simply
#   several rows with the same key, ordered by meta_id.
#
# CLASS: MySQLMetaStore
# ---------------------
#   Stateful — holds connection to MySQL.
#
#   Constructor:
#   ------------
#   - __init__(host, port, user, password, database,
#              data_type="post", table_prefix="fm_")
#       Store connection params. Don't connect yet.
#
#   Methods:
#   --------
#   - connect() -> None
#       Establish connection. Create database and meta table
#       if they don't exist.
#
#   - disconnect() -> None
#       Close connection cleanly.
#
#   - ensure_table() -> None
#       CREATE TABLE IF NOT EXISTS for this data type.
#
#   - get_data / add_data / update_data / delete_data / get_all
#       StorageBackend primitives. Comparisons against stored
#       values happen on decoded values, not on JSON text.
#
#   Context Manager:
#   ----------------
#   - __enter__ / __exit__ for `with MySQLMetaStore(...) as store:` usage.
#
# ==============================================

import json
from typing import Any, Dict, List, Tuple, cast

import pymysql
import pymysql.cursors

from .backend import StorageBackend


class MySQLMetaStore(StorageBackend):
    def __init__(self, host, port, user, password, database, data_type="post", table_prefix="fm_"):
        super().__init__(data_type)
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.database = database
        self.table_name = f"{table_prefix}{data_type}meta"
        self.connection = None

    def connect(self) -> None:
        # Establish connection to MySQL, create database and table if they don't exist
        self.connection = pymysql.connect(
            host=self.host,
            port=self.port,
            user=self.user,
            password=self.password,
        )
        cursor = self.connection.cursor()
        cursor.execute(f"CREATE DATABASE IF NOT EXISTS {self.database}")
        cursor.execute(f"USE {self.database}")
        cursor.close()
        self.ensure_table()
        print(f"Connected to MySQL, using table '{self.table_name}'.")

    def disconnect(self) -> None:
        # Close connection cleanly
        if self.connection:
            self.connection.close()
            self.connection = None

    def _require_connection(self):
        if self.connection is None:
            raise RuntimeError("Not connected to MySQL")
        return self.connection

    def ensure_table(self) -> None:
        connection = self._require_connection()
        cursor = connection.cursor()
        cursor.execute(
            f"CREATE TABLE IF NOT EXISTS {self.table_name} ("
            "meta_id BIGINT UNSIGNED NOT NULL AUTO_INCREMENT PRIMARY KEY, "
            "object_id VARCHAR(191) NOT NULL, "
            "meta_key VARCHAR(255) NOT NULL, "
            "meta_value LONGTEXT NULL, "
            "KEY object_key (object_id, meta_key(191))"
            ")"
        )
        connection.commit()
        cursor.close()

    @staticmethod
    def _encode(value: Any) -> str:
        return json.dumps(value)

    @staticmethod
    def _decode(raw: Any) -> Any:
        if raw is None:
            return None
        return json.loads(raw)

    def _fetch_rows(self, data_id, data_key: str) -> List[Tuple[int, Any]]:
        # (meta_id, decoded value) for every row under the key, oldest first
        connection = self._require_connection()
        cursor = connection.cursor(pymysql.cursors.DictCursor)
        cursor.execute(
            f"SELECT meta_id, meta_value FROM {self.table_name} "
            "WHERE object_id = %s AND meta_key = %s ORDER BY meta_id",
            (str(data_id), data_key)
        )
        rows = cast(List[Dict[str, Any]], cursor.fetchall())
        cursor.close()
        return [(row["meta_id"], self._decode(row["meta_value"])) for row in rows]

    def get_data(self, data_id, data_key: str, single: bool = False) -> Any:
        values = [value for _, value in self._fetch_rows(data_id, data_key)]
        return self._first(values, single)

    def add_data(self, data_id, data_key: str, data_value: Any, unique: bool = False):
        if unique and self._fetch_rows(data_id, data_key):
            return False
        connection = self._require_connection()
        cursor = connection.cursor()
        cursor.execute(
            f"INSERT INTO {self.table_name} (object_id, meta_key, meta_value) "
            "VALUES (%s, %s, %s)",
            (str(data_id), data_key, self._encode(data_value))
        )
        connection.commit()
        meta_id = cursor.lastrowid
        cursor.close()
        return meta_id

    def update_data(self, data_id, data_key: str, data_value: Any, data_prev_value: Any = ""):
        rows = self._fetch_rows(data_id, data_key)
        if not rows:
            return self.add_data(data_id, data_key, data_value)

        if data_prev_value != "":
            target_ids = [meta_id for meta_id, value in rows if value == data_prev_value]
            if not target_ids:
                return False
        else:
            if len(rows) == 1 and rows[0][1] == data_value:
                return False
            target_ids = [meta_id for meta_id, _ in rows]

        connection = self._require_connection()
        cursor = connection.cursor()
        placeholders = ", ".join(['%s'] * len(target_ids))
        cursor.execute(
            f"UPDATE {self.table_name} SET meta_value = %s "
            f"WHERE meta_id IN ({placeholders})",
            (self._encode(data_value), *target_ids)
        )
        connection.commit()
        cursor.close()
        return True

    def delete_data(self, data_id, data_key: str, data_value: Any = "") -> bool:
        target_ids = [
            meta_id for meta_id, value in self._fetch_rows(data_id, data_key)
            if data_value == "" or value == data_value
        ]
        if not target_ids:
            return False

        connection = self._require_connection()
        cursor = connection.cursor()
        placeholders = ", ".join(['%s'] * len(target_ids))
        cursor.execute(
            f"DELETE FROM {self.table_name} WHERE meta_id IN ({placeholders})",
            tuple(target_ids)
        )
        connection.commit()
        cursor.close()
        return True

    def get_all(self, data_id) -> Dict[str, List[Any]]:
        connection = self._require_connection()
        cursor = connection.cursor(pymysql.cursors.DictCursor)
        cursor.execute(
            f"SELECT meta_key, meta_value FROM {self.table_name} "
            "WHERE object_id = %s ORDER BY meta_id",
            (str(data_id),)
        )
        rows = cast(List[Dict[str, Any]], cursor.fetchall())
        cursor.close()
        result: Dict[str, List[Any]] = {}
        for row in rows:
            result.setdefault(row["meta_key"], []).append(self._decode(row["meta_value"]))
        return result

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()
