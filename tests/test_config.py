# ==============================================
# Tests for Configuration and Store Factory
# ==============================================

import pytest

from fieldmeta.config import AppConfig, NonceConfig, get_config, reset_config
from fieldmeta.storage import (
    JSONFileMetaStore,
    MemoryMetaStore,
    MongoMetaStore,
    MySQLMetaStore,
    create_store,
)


class TestGetConfig:
    @pytest.fixture(autouse=True)
    def nonce_secret(self, monkeypatch):
        monkeypatch.setenv("FM_NONCE_SECRET", "env-secret")

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("FM_BACKEND", "MySQL")
        monkeypatch.setenv("MYSQL_PORT", "3307")
        monkeypatch.setenv("FM_NONCE_LIFETIME", "3600")
        monkeypatch.setenv("FM_TABLE_PREFIX", "wp_")

        config = get_config()

        assert config.backend == "mysql"
        assert config.mysql.port == 3307
        assert config.nonce.lifetime == 3600
        assert config.table_prefix == "wp_"

    def test_is_singleton(self):
        assert get_config() is get_config()

    def test_unknown_backend(self, monkeypatch):
        monkeypatch.setenv("FM_BACKEND", "redis")
        with pytest.raises(ValueError, match="FM_BACKEND"):
            get_config()

    def test_nonce_secret_from_environment(self):
        assert get_config().nonce.secret == "env-secret"

    def test_missing_nonce_secret_is_rejected(self, monkeypatch):
        monkeypatch.delenv("FM_NONCE_SECRET")
        monkeypatch.setenv("FM_BACKEND", "json")
        with pytest.raises(ValueError, match="FM_NONCE_SECRET"):
            get_config()

    def test_memory_backend_gets_random_secret(self, monkeypatch):
        monkeypatch.delenv("FM_NONCE_SECRET")
        monkeypatch.setenv("FM_BACKEND", "memory")
        first = get_config().nonce.secret
        reset_config()
        second = get_config().nonce.secret

        assert len(first) == 64
        assert first != second

    def test_default_nonce_config_is_not_shared(self):
        assert NonceConfig().secret != NonceConfig().secret


class TestCreateStore:
    def test_memory(self):
        store = create_store("user", AppConfig(backend="memory"))
        assert isinstance(store, MemoryMetaStore)
        assert store.data_type == "user"

    def test_json(self, tmp_path):
        store = create_store("post", AppConfig(backend="json", data_dir=str(tmp_path)))
        assert isinstance(store, JSONFileMetaStore)
        assert store.meta_file == tmp_path / "fm_postmeta.json"

    def test_mysql_is_not_connected_yet(self):
        store = create_store("term", AppConfig(backend="mysql"))
        assert isinstance(store, MySQLMetaStore)
        assert store.connection is None
        assert store.table_name == "fm_termmeta"

    def test_mongo(self):
        store = create_store("option", AppConfig(backend="mongo"))
        assert isinstance(store, MongoMetaStore)
        assert store.client is None

    def test_unknown(self):
        with pytest.raises(ValueError):
            create_store("post", AppConfig(backend="nope"))
