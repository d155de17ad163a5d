"""
FTNed Editor Session

Wires configuration, the jnode database, the last-read store and the
area registry together for one user.
"""

import logging
from typing import Optional

from ..config import Config
from ..utils.formatting import mask_dsn

logger = logging.getLogger(__name__)


class EditorSession:
    """
    One reader/editor session.

    Responsibilities:
    - Connect to the jnode database
    - Open the last-read store when enabled
    - Own the message count cache and the area registry
    - Close everything on shutdown
    """

    def __init__(self, config: Config):
        """
        Args:
            config: Loaded and validated configuration
        """
        self.config = config

        # These will be initialized in setup()
        self.db = None
        self.lastread = None
        self.count_cache = None
        self.registry = None

    def setup(self):
        """
        Connect to storage and load the areas.

        Raises:
            ConfigError: unsupported database driver
            DatabaseConnectionError: jnode database unreachable
        """
        from ..areas.count_cache import MessageCountCache
        from ..areas.loader import load_areas
        from ..db.connection import JnodeDatabase
        from ..db.lastread import LastReadStore

        db_config = self.config.database
        logger.info(f"Connecting to {db_config.driver} database: {mask_dsn(db_config.dsn)}")
        self.db = JnodeDatabase.from_config(db_config)
        self.db.initialize()

        if self.config.lastread.enabled:
            self.lastread = LastReadStore(self.config.lastread.database_path)
            self.lastread.initialize()

        self.count_cache = MessageCountCache(self.db)
        self.registry = load_areas(self.db, self.config, self.count_cache, self.lastread)
        logger.info("Session setup complete")

    def reload_areas(self):
        """Reload the area list and counts from the database."""
        from ..areas.loader import load_areas

        self.count_cache.invalidate()
        self.registry = load_areas(self.db, self.config, self.count_cache, self.lastread)

    def find_area(self, name: str):
        """Area by exact name, or the first area containing name."""
        area = self.registry.get(name)
        if area is not None:
            return area
        index = self.registry.search(name)
        return self.registry[index] if index is not None else None

    def close(self):
        """Release database connections."""
        if self.lastread is not None:
            self.lastread.close()
            self.lastread = None
        if self.db is not None:
            self.db.close()
            self.db = None
        logger.info("Session closed")

    def __enter__(self) -> "EditorSession":
        self.setup()
        return self

    def __exit__(self, exc_type, exc, tb) -> Optional[bool]:
        self.close()
        return None
