"""
FTNed Configuration Module

Handles loading, validation, and management of configuration settings.
"""

import sys
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Optional

import toml

from .core.address import FidoAddr
from .db.connection import DRIVER_SCHEMES
from .errors import ConfigError, InvalidAddressError

# Use tomllib for Python 3.11+, tomli for earlier versions
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

AREA_FILE_TYPES = ["jnode-sql"]
SORT_MODES = ["default", "unread"]


@dataclass
class EditorConfig:
    """Identity used when writing messages."""
    username: str = "Sysop"
    address: str = ""  # e.g. 2:5020/1.5


@dataclass
class AreaFileConfig:
    """Where areas come from."""
    type: str = "jnode-sql"
    subscribed_only: bool = False


@dataclass
class AreaConfig:
    """Per-area overrides."""
    name: str
    chrs: str = ""


@dataclass
class ChrsConfig:
    """Character set settings."""
    default: str = "UTF-8 4"  # display charset
    jnode_default: str = ""  # forced CHRS kludge on saved messages


@dataclass
class DatabaseConfig:
    """jnode database settings."""
    driver: str = "sqlite"  # sqlite | mysql | postgres
    dsn: str = "jnode.db"
    max_open_conns: int = 25
    max_idle_conns: int = 5
    conn_max_lifetime: int = 300  # seconds
    auto_migrate: bool = False


@dataclass
class LastReadConfig:
    """Last-read store settings."""
    enabled: bool = True
    database_path: str = "~/.local/share/ftned/lastread.db"


@dataclass
class SortingConfig:
    """Area list ordering."""
    areas: str = "default"  # default | unread


@dataclass
class LoggingConfig:
    """Logging settings."""
    level: str = "INFO"
    file: str = ""


@dataclass
class Config:
    """Main configuration container."""
    editor: EditorConfig = field(default_factory=EditorConfig)
    area_file: AreaFileConfig = field(default_factory=AreaFileConfig)
    areas: list[AreaConfig] = field(default_factory=list)
    chrs: ChrsConfig = field(default_factory=ChrsConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    lastread: LastReadConfig = field(default_factory=LastReadConfig)
    sorting: SortingConfig = field(default_factory=SortingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def address(self) -> Optional[FidoAddr]:
        """Parsed editor address, None if missing or malformed."""
        return FidoAddr.from_string(self.editor.address)

    def area_chrs(self, area_name: str) -> str:
        """Configured charset for an area, empty if none."""
        for area in self.areas:
            if area.name == area_name and area.chrs:
                return area.chrs
        return ""

    def validate(self) -> list[str]:
        """Validate configuration and return list of errors."""
        errors = []

        # Identity
        if not self.editor.address:
            errors.append("editor.address not defined")
        else:
            try:
                FidoAddr.parse(self.editor.address)
            except InvalidAddressError as e:
                errors.append(f"editor.address is invalid: {e}")

        if not self.chrs.default:
            errors.append("chrs.default not defined")

        if self.area_file.type not in AREA_FILE_TYPES:
            errors.append(f"area_file.type must be one of: {AREA_FILE_TYPES}")

        # Database
        if self.database.driver.lower() not in DRIVER_SCHEMES:
            errors.append(f"database.driver must be one of: {sorted(DRIVER_SCHEMES)}")
        if not self.database.dsn:
            errors.append("database.dsn cannot be empty")
        if self.database.max_idle_conns > self.database.max_open_conns:
            errors.append("database.max_idle_conns cannot exceed database.max_open_conns")

        if self.lastread.enabled and not self.lastread.database_path:
            errors.append("lastread.database_path cannot be empty when lastread is enabled")

        if self.sorting.areas not in SORT_MODES:
            errors.append(f"sorting.areas must be one of: {SORT_MODES}")

        for area in self.areas:
            if not area.name:
                errors.append("areas entries need a name")

        return errors

    def save(self, path: Path):
        """Save configuration to TOML file."""
        with open(path, "w") as f:
            toml.dump(self._to_dict(), f)

    def _to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary for serialization."""
        return asdict(self)


SECTIONS = {
    "editor": EditorConfig,
    "area_file": AreaFileConfig,
    "chrs": ChrsConfig,
    "database": DatabaseConfig,
    "lastread": LastReadConfig,
    "sorting": SortingConfig,
    "logging": LoggingConfig,
}


def _build_section(cls, name: str, values: Any):
    """Build a section dataclass from a TOML table, checking keys and value types."""
    if not isinstance(values, dict):
        raise ValueError(f"[{name}] must be a table")

    known = {f.name: f.type for f in fields(cls)}
    for key, value in values.items():
        if key not in known:
            raise ValueError(f"unknown key {name}.{key}")
        expected = known[key]
        # bool is an int subclass
        if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
            raise ValueError(
                f"{name}.{key} must be {expected.__name__}, not {type(value).__name__}"
            )

    return cls(**values)


def load_config(path: Path) -> Config:
    """
    Load configuration from TOML file.

    A missing file yields the defaults.

    Raises:
        ConfigError: unreadable TOML, unknown sections or keys, wrongly typed values
    """
    config = Config()

    if not path.exists():
        return config

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    # Map TOML sections to config dataclasses
    try:
        for name in data:
            if name != "areas" and name not in SECTIONS:
                raise ValueError(f"unknown section [{name}]")

        for name, cls in SECTIONS.items():
            if name in data:
                setattr(config, name, _build_section(cls, name, data[name]))

        if "areas" in data:
            if not isinstance(data["areas"], list):
                raise ValueError("areas must be an array of tables")
            config.areas = [_build_section(AreaConfig, "areas", area) for area in data["areas"]]
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    return config


def create_default_config(path: Path):
    """Create a default configuration file."""
    config = Config()
    config.editor.address = "2:5020/9999"
    config.areas = [AreaConfig(name="Netmail", chrs="UTF-8 4")]
    config.save(path)
