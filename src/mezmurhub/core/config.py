"""
Configuration management for the MezmurHub admin service
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from loguru import logger


VALID_STORE_BACKENDS = {"sqlite", "memory"}


@dataclass
class StoreConfig:
    """Configuration for the catalog document store."""

    backend: str = "sqlite"  # 'sqlite' or 'memory'
    database_path: Optional[str] = None  # Default: <data dir>/mezmurhub.db
    database_url: Optional[str] = None  # postgres:// URL, usually from DATABASE_URL

    def validate(self) -> None:
        """Validate store configuration values.

        Raises:
            ValueError: If the backend name is unknown
        """
        if self.backend not in VALID_STORE_BACKENDS:
            raise ValueError(
                f"Invalid store backend: {self.backend}. "
                f"Valid backends are: {sorted(VALID_STORE_BACKENDS)}"
            )


@dataclass
class AssetsConfig:
    """Configuration for uploaded audio/image storage."""

    root: Optional[str] = None  # Default: <data dir>/assets
    public_base_url: str = "/assets"
    max_audio_mb: int = 50
    max_image_mb: int = 5

    def validate(self) -> None:
        """Validate asset limits.

        Raises:
            ValueError: If a size limit is not positive
        """
        if self.max_audio_mb <= 0 or self.max_image_mb <= 0:
            raise ValueError("Asset size limits must be positive")


@dataclass
class WebConfig:
    """Configuration for the FastAPI backend."""

    host: str = "127.0.0.1"
    port: int = 8000
    allowed_origins: List[str] = field(
        default_factory=lambda: ["http://localhost:3000"]
    )


@dataclass
class AuthConfig:
    """Configuration for admin sign-in sessions."""

    session_ttl_hours: int = 168  # 7 days
    cookie_name: str = "mezmurhub_session"
    secure_cookies: bool = False


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file: Optional[str] = (
        None  # Custom log file path (default: ~/.local/share/mezmurhub/mezmurhub.log)
    )
    max_file_size_mb: int = 10  # Maximum log file size before rotation
    backup_count: int = 5  # Number of rotated files to keep
    console_output: bool = False  # Also log to stderr


@dataclass
class Config:
    """Main configuration object."""

    store: StoreConfig = field(default_factory=StoreConfig)
    assets: AssetsConfig = field(default_factory=AssetsConfig)
    web: WebConfig = field(default_factory=WebConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "mezmurhub"
    return Path.home() / ".config" / "mezmurhub"


def get_data_dir() -> Path:
    """Get the data directory path."""
    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        return Path(data_home) / "mezmurhub"
    return Path.home() / ".local" / "share" / "mezmurhub"


def _find_project_config() -> Optional[Path]:
    """Find config.toml in the project root (the directory holding pyproject.toml).

    Returns:
        Path to config.toml in project root, or None if not found
    """
    current = Path(__file__).resolve().parent
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            config_path = parent / "config.toml"
            return config_path if config_path.exists() else None
    return None


def get_config_path() -> Path:
    """Get the main configuration file path.

    Checks for config.toml in the following order:
    1. Project root (detected via pyproject.toml) - for development
    2. Current working directory
    3. XDG_CONFIG_HOME/mezmurhub (or ~/.config/mezmurhub)
    """
    project_config = _find_project_config()
    if project_config:
        return project_config

    local_config = Path.cwd() / "config.toml"
    if local_config.exists():
        return local_config

    return get_config_dir() / "config.toml"


def get_database_path(config: Config) -> Path:
    """Resolve the SQLite database file for a configuration."""
    if config.store.database_path:
        return Path(config.store.database_path).expanduser()
    return get_data_dir() / "mezmurhub.db"


def get_assets_root(config: Config) -> Path:
    """Resolve the directory local assets are written to."""
    if config.assets.root:
        return Path(config.assets.root).expanduser()
    return get_data_dir() / "assets"


def get_log_file_path(config: Config) -> Path:
    """Resolve the log file path."""
    if config.logging.log_file:
        return Path(config.logging.log_file).expanduser()
    return get_data_dir() / "mezmurhub.log"


def create_default_config() -> str:
    """Create a default configuration TOML content."""
    return """
# MezmurHub Admin Configuration

[store]
# Catalog store backend: "sqlite" (persistent) or "memory" (lost on restart)
backend = "sqlite"

# SQLite database file (default: ~/.local/share/mezmurhub/mezmurhub.db)
# database_path = "/path/to/mezmurhub.db"

# Set DATABASE_URL=postgresql://... in the environment to use PostgreSQL instead

[assets]
# Directory uploaded audio and cover images are written to
# root = "/srv/mezmurhub/assets"

# URL prefix under which assets are served
public_base_url = "/assets"

# Upload limits in MB
max_audio_mb = 50
max_image_mb = 5

[web]
host = "127.0.0.1"
port = 8000
allowed_origins = ["http://localhost:3000"]

[auth]
# How long an admin session stays valid
session_ttl_hours = 168
cookie_name = "mezmurhub_session"

# Mark session cookies Secure (enable behind HTTPS)
secure_cookies = false

[logging]
# Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
level = "INFO"

# Custom log file path (default: ~/.local/share/mezmurhub/mezmurhub.log)
# log_file = "/path/to/mezmurhub.log"

max_file_size_mb = 10
backup_count = 5
console_output = false
""".strip()


def _load_env_file() -> None:
    from dotenv import load_dotenv

    env_path = get_config_dir() / ".env"
    if env_path.exists():
        load_dotenv(env_path)


def _apply_env_overrides(config: Config) -> Config:
    database_url = os.environ.get("DATABASE_URL")
    if database_url:
        config.store.database_url = database_url

    allowed_origins = os.environ.get("ALLOWED_ORIGINS", "")
    if allowed_origins:
        config.web.allowed_origins = [
            origin.strip() for origin in allowed_origins.split(",") if origin.strip()
        ]
    return config


def parse_config(toml_data: dict) -> Config:
    """Build a Config from parsed TOML data, falling back to defaults per key."""
    config = Config()

    if "store" in toml_data:
        store_data = toml_data["store"]
        config.store = StoreConfig(
            backend=store_data.get("backend", config.store.backend),
            database_path=store_data.get("database_path"),
            database_url=store_data.get("database_url"),
        )
        try:
            config.store.validate()
        except ValueError as e:
            logger.warning(f"Invalid store configuration: {e}; using defaults")
            config.store = StoreConfig()

    if "assets" in toml_data:
        assets_data = toml_data["assets"]
        config.assets = AssetsConfig(
            root=assets_data.get("root"),
            public_base_url=assets_data.get(
                "public_base_url", config.assets.public_base_url
            ).rstrip("/"),
            max_audio_mb=assets_data.get("max_audio_mb", config.assets.max_audio_mb),
            max_image_mb=assets_data.get("max_image_mb", config.assets.max_image_mb),
        )
        try:
            config.assets.validate()
        except ValueError as e:
            logger.warning(f"Invalid assets configuration: {e}; using defaults")
            config.assets = AssetsConfig()

    if "web" in toml_data:
        web_data = toml_data["web"]
        config.web = WebConfig(
            host=web_data.get("host", config.web.host),
            port=web_data.get("port", config.web.port),
            allowed_origins=web_data.get(
                "allowed_origins", config.web.allowed_origins
            ),
        )

    if "auth" in toml_data:
        auth_data = toml_data["auth"]
        config.auth = AuthConfig(
            session_ttl_hours=auth_data.get(
                "session_ttl_hours", config.auth.session_ttl_hours
            ),
            cookie_name=auth_data.get("cookie_name", config.auth.cookie_name),
            secure_cookies=auth_data.get(
                "secure_cookies", config.auth.secure_cookies
            ),
        )

    if "logging" in toml_data:
        logging_data = toml_data["logging"]
        config.logging = LoggingConfig(
            level=logging_data.get("level", config.logging.level).upper(),
            log_file=logging_data.get("log_file"),
            max_file_size_mb=logging_data.get(
                "max_file_size_mb", config.logging.max_file_size_mb
            ),
            backup_count=logging_data.get(
                "backup_count", config.logging.backup_count
            ),
            console_output=logging_data.get(
                "console_output", config.logging.console_output
            ),
        )

    return config


def load_config(
    config_path: Optional[Path] = None, create_missing: bool = True
) -> Config:
    """Load configuration from file or create default.

    With ``create_missing=False`` a missing file yields defaults without
    writing anything.

    Environment variables override TOML values:
    - DATABASE_URL
    - ALLOWED_ORIGINS (comma-separated)
    """
    _load_env_file()

    config_path = config_path or get_config_path()

    if not config_path.exists():
        if not create_missing:
            return _apply_env_overrides(Config())
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            f.write(create_default_config())
        logger.info(f"Created default configuration at: {config_path}")
        return _apply_env_overrides(Config())

    try:
        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.error(f"Error loading configuration from {config_path}: {e}")
        logger.warning("Using default configuration.")
        return _apply_env_overrides(Config())

    return _apply_env_overrides(parse_config(toml_data))


def ensure_directories(config: Config) -> None:
    """Create the data, asset and log directories if they do not exist."""
    get_data_dir().mkdir(parents=True, exist_ok=True)
    get_assets_root(config).mkdir(parents=True, exist_ok=True)
    get_log_file_path(config).parent.mkdir(parents=True, exist_ok=True)
