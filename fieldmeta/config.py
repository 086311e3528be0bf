# ==============================================
# Configuration Management
# ==============================================
#
# PURPOSE:
#   Load and validate all configuration from environment
#   variables / .env file. Provides typed config objects
#   to the stores, the nonce manager and the CLI.
#
# CLASSES:
# --------
# - MySQLConfig (dataclass)
#     host: str          (default "localhost")
#     port: int          (default 3306)
#     user: str          (default "root")
#     password: str      (default "root")
#     database: str      (default "fieldmeta")
#
# - MongoConfig (dataclass)
#     host: str          (default "localhost")
#     port: int          (default 27017)
#     user: str | None   (default None)
#     password: str | None (default None)
#     database: str      (default "fieldmeta")
#
# - NonceConfig (dataclass)
#     secret: str        (random per process unless FM_NONCE_SECRET is set)
#     lifetime: int      (default 86400 seconds)
#
# - AppConfig (dataclass)
#     mysql: MySQLConfig
#     mongo: MongoConfig
#     nonce: NonceConfig
#     backend: str       (default "json"; memory | json | mysql | mongo)
#     table_prefix: str  (default "fm_")
#     data_dir: str      (default "metadata/")
#
# FUNCTIONS:
# ----------
# - get_config() -> AppConfig
#     Load .env using python-dotenv, construct AppConfig.
#     Returns the same singleton on repeated calls.
#
# - reset_config() -> None
#     Forget the singleton so the next get_config() re-reads the env.
#
# USAGE:
# ------
#   from fieldmeta.config import get_config
#   config = get_config()
#   print(config.backend)
#   print(config.nonce.lifetime)
#
# ==============================================

import os
import secrets
from dataclasses import dataclass, field
from typing import Optional
from pathlib import Path

from dotenv import load_dotenv


BACKENDS = ("memory", "json", "mysql", "mongo")


@dataclass
class MySQLConfig:
    """MySQL database configuration."""
    host: str = "localhost"
    port: int = 3306
    user: str = "root"
    password: str = "root"
    database: str = "fieldmeta"


@dataclass
class MongoConfig:
    """MongoDB database configuration."""
    host: str = "localhost"
    port: int = 27017
    user: Optional[str] = None
    password: Optional[str] = None
    database: str = "fieldmeta"


@dataclass
class NonceConfig:
    """Anti-forgery nonce configuration."""
    secret: str = field(default_factory=lambda: secrets.token_hex(32))
    lifetime: int = 86400


@dataclass
class AppConfig:
    """Main application configuration."""
    mysql: MySQLConfig = field(default_factory=MySQLConfig)
    mongo: MongoConfig = field(default_factory=MongoConfig)
    nonce: NonceConfig = field(default_factory=NonceConfig)
    backend: str = "json"
    table_prefix: str = "fm_"
    data_dir: str = "metadata/"


# Singleton instance
_config_instance: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """
    Load configuration from environment variables / .env file.
    Returns the same singleton instance on repeated calls.
    
    Returns:
        AppConfig: Application configuration

    Raises:
        ValueError: FM_BACKEND names an unknown store, or
                    FM_NONCE_SECRET is unset for a persistent backend
    """
    global _config_instance
    
    if _config_instance is not None:
        return _config_instance
    
    # Load .env file from project root
    env_path = Path(__file__).parent.parent / ".env"
    load_dotenv(dotenv_path=env_path)
    
    mysql_config = MySQLConfig(
        host=os.getenv("MYSQL_HOST", "localhost"),
        port=int(os.getenv("MYSQL_PORT", "3306")),
        user=os.getenv("MYSQL_USER", "root"),
        password=os.getenv("MYSQL_PASSWORD", "root"),
        database=os.getenv("MYSQL_DATABASE", "fieldmeta")
    )
    
    mongo_config = MongoConfig(
        host=os.getenv("MONGO_HOST", "localhost"),
        port=int(os.getenv("MONGO_PORT", "27017")),
        user=os.getenv("MONGO_USER") or None,
        password=os.getenv("MONGO_PASSWORD") or None,
        database=os.getenv("MONGO_DATABASE", "fieldmeta")
    )
    
    backend = os.getenv("FM_BACKEND", "json").lower()
    if backend not in BACKENDS:
        raise ValueError(
            f"FM_BACKEND must be one of {', '.join(BACKENDS)}, got '{backend}'"
        )
    
    # Only the memory backend may run without FM_NONCE_SECRET (random per process)
    nonce_secret = os.getenv("FM_NONCE_SECRET") or None
    if nonce_secret is None:
        if backend != "memory":
            raise ValueError("FM_NONCE_SECRET environment variable is required")
        nonce_secret = secrets.token_hex(32)
    
    nonce_config = NonceConfig(
        secret=nonce_secret,
        lifetime=int(os.getenv("FM_NONCE_LIFETIME", "86400"))
    )
    
    _config_instance = AppConfig(
        mysql=mysql_config,
        mongo=mongo_config,
        nonce=nonce_config,
        backend=backend,
        table_prefix=os.getenv("FM_TABLE_PREFIX", "fm_"),
        data_dir=os.getenv("FM_DATA_DIR", "metadata/")
    )
    
    return _config_instance


def reset_config() -> None:
    global _config_instance
    _config_instance = None
