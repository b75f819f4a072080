"""Core infrastructure layer - no business logic dependencies.

This module provides foundation-level services:
- Configuration management (TOML)
- Database connections and schema (SQLite / PostgreSQL)
- Logging setup (Loguru)
"""

from .config import (
    Config,
    load_config,
    get_config_dir,
    get_config_path,
    get_data_dir,
    get_database_path,
    get_assets_root,
    get_log_file_path,
    create_default_config,
    ensure_directories,
)
from .database import (
    get_db_connection,
    init_database,
    make_connection_factory,
    migrate_database,
)
from .output import setup_loguru

__all__ = [
    "Config",
    "load_config",
    "get_config_dir",
    "get_config_path",
    "get_data_dir",
    "get_database_path",
    "get_assets_root",
    "get_log_file_path",
    "create_default_config",
    "ensure_directories",
    "get_db_connection",
    "init_database",
    "make_connection_factory",
    "migrate_database",
    "setup_loguru",
]
