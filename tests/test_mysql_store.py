# ==============================================
# Tests for MySQLMetaStore
# ==============================================
#
# The PyMySQL connection is a MagicMock, so no server is needed.
# Assertions check the SQL sent and how results are shaped.
# ==============================================

from unittest.mock import MagicMock, patch

import pytest

from fieldmeta.storage import MySQLMetaStore


@pytest.fixture
def mysql_store():
    store = MySQLMetaStore("localhost", 3306, "root", "root", "fieldmeta")
    store.connection = MagicMock()
    return store


@pytest.fixture
def cursor(mysql_store):
    return mysql_store.connection.cursor.return_value


def executed_sql(cursor):
    return [call.args[0] for call in cursor.execute.call_args_list]


class TestConnection:
    def test_table_name_per_data_type(self):
        store = MySQLMetaStore("h", 1, "u", "p", "db", data_type="user", table_prefix="wp_")
        assert store.table_name == "wp_usermeta"

    def test_connect_creates_database_and_table(self):
        with patch("fieldmeta.storage.mysql_store.pymysql.connect") as connect:
            store = MySQLMetaStore("localhost", 3306, "root", "root", "fieldmeta")
            store.connect()

        sql = executed_sql(connect.return_value.cursor.return_value)
        assert sql[0] == "CREATE DATABASE IF NOT EXISTS fieldmeta"
        assert sql[1] == "USE fieldmeta"
        assert sql[2].startswith("CREATE TABLE IF NOT EXISTS fm_postmeta")

    def test_context_manager_disconnects(self):
        with patch("fieldmeta.storage.mysql_store.pymysql.connect") as connect:
            with MySQLMetaStore("localhost", 3306, "root", "root", "fieldmeta") as store:
                assert store.connection is connect.return_value
        connect.return_value.close.assert_called_once()
        assert store.connection is None

    def test_primitives_require_connection(self):
        store = MySQLMetaStore("localhost", 3306, "root", "root", "fieldmeta")
        with pytest.raises(RuntimeError, match="Not connected to MySQL"):
            store.get_data(1, "k")


class TestPrimitives:
    def test_get_data_decodes_json_in_order(self, mysql_store, cursor):
        cursor.fetchall.return_value = [
            {"meta_id": 1, "meta_value": '"a"'},
            {"meta_id": 2, "meta_value": '{"x": 1}'},
        ]

        assert mysql_store.get_data(5, "k") == ["a", {"x": 1}]
        assert cursor.execute.call_args.args[1] == ("5", "k")

    def test_get_data_single_absent(self, mysql_store, cursor):
        cursor.fetchall.return_value = []
        assert mysql_store.get_data(5, "k", single=True) == ""

    def test_add_data_inserts_encoded_value(self, mysql_store, cursor):
        cursor.lastrowid = 42

        assert mysql_store.add_data(5, "k", ["v"]) == 42
        assert cursor.execute.call_args.args[1] == ("5", "k", '["v"]')
        mysql_store.connection.commit.assert_called()

    def test_add_unique_with_existing_value(self, mysql_store, cursor):
        cursor.fetchall.return_value = [{"meta_id": 1, "meta_value": '"a"'}]

        assert mysql_store.add_data(5, "k", "b", unique=True) is False
        assert not any(sql.startswith("INSERT") for sql in executed_sql(cursor))

    def test_update_absent_key_inserts(self, mysql_store, cursor):
        cursor.fetchall.return_value = []
        cursor.lastrowid = 9

        assert mysql_store.update_data(5, "k", "v") == 9
        assert executed_sql(cursor)[-1].startswith("INSERT INTO fm_postmeta")

    def test_update_same_value(self, mysql_store, cursor):
        cursor.fetchall.return_value = [{"meta_id": 3, "meta_value": '"v"'}]
        assert mysql_store.update_data(5, "k", "v") is False

    def test_update_replaces_all_rows(self, mysql_store, cursor):
        cursor.fetchall.return_value = [
            {"meta_id": 3, "meta_value": '"a"'},
            {"meta_id": 4, "meta_value": '"b"'},
        ]

        assert mysql_store.update_data(5, "k", "new") is True
        assert executed_sql(cursor)[-1] == (
            "UPDATE fm_postmeta SET meta_value = %s WHERE meta_id IN (%s, %s)"
        )
        assert cursor.execute.call_args.args[1] == ('"new"', 3, 4)

    def test_update_prev_value_mismatch(self, mysql_store, cursor):
        cursor.fetchall.return_value = [{"meta_id": 3, "meta_value": '"a"'}]
        assert mysql_store.update_data(5, "k", "new", "zzz") is False

    def test_delete_matching_value_only(self, mysql_store, cursor):
        cursor.fetchall.return_value = [
            {"meta_id": 1, "meta_value": '"a"'},
            {"meta_id": 2, "meta_value": '"b"'},
        ]

        assert mysql_store.delete_data(5, "k", "b") is True
        assert executed_sql(cursor)[-1] == "DELETE FROM fm_postmeta WHERE meta_id IN (%s)"
        assert cursor.execute.call_args.args[1] == (2,)

    def test_delete_nothing_stored(self, mysql_store, cursor):
        cursor.fetchall.return_value = []
        assert mysql_store.delete_data(5, "k") is False

    def test_get_all(self, mysql_store, cursor):
        cursor.fetchall.return_value = [
            {"meta_key": "a", "meta_value": "1"},
            {"meta_key": "b", "meta_value": "null"},
            {"meta_key": "a", "meta_value": "2"},
        ]
        assert mysql_store.get_all(5) == {"a": [1, 2], "b": [None]}
