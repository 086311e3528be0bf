from typing import Optional

from fieldmeta.config import AppConfig, get_config

from .backend import StorageBackend
from .json_store import JSONFileMetaStore
from .memory_store import MemoryMetaStore
from .mongo_store import MongoMetaStore
from .mysql_store import MySQLMetaStore


def create_store(data_type: str = "post", config: Optional[AppConfig] = None) -> StorageBackend:
    """
    Build the store configured by FM_BACKEND for one data type.

    MySQL and MongoDB stores are returned unconnected; call connect()
    or use them as context managers.
    """
    config = config or get_config()

    if config.backend == "memory":
        return MemoryMetaStore(data_type)
    if config.backend == "json":
        return JSONFileMetaStore(
            data_type=data_type,
            storage_dir=config.data_dir,
            table_prefix=config.table_prefix,
        )
    if config.backend == "mysql":
        return MySQLMetaStore(
            host=config.mysql.host,
            port=config.mysql.port,
            user=config.mysql.user,
            password=config.mysql.password,
            database=config.mysql.database,
            data_type=data_type,
            table_prefix=config.table_prefix,
        )
    if config.backend == "mongo":
        return MongoMetaStore(
            host=config.mongo.host,
            port=config.mongo.port,
            database=config.mongo.database,
            user=config.mongo.user,
            password=config.mongo.password,
            data_type=data_type,
            table_prefix=config.table_prefix,
        )
    raise ValueError(f"Unknown storage backend: {config.backend}")
