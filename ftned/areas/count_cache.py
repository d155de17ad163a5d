"""
FTNed Message Count Cache

Per-area message counts loaded with two aggregate queries, so the
area list does not need one COUNT(*) per area.
"""

import logging
import threading
from typing import Optional

from ..db.connection import JnodeDatabase
from ..db.messages import EchomailRepository, NetmailRepository

logger = logging.getLogger(__name__)


class MessageCountCache:
    """
    Message counts keyed by echoarea id, plus the netmail total.

    While invalid, get() returns None and increment() does nothing;
    callers fall back to direct count queries.
    """

    def __init__(self, db: JnodeDatabase):
        self.echomail_repo = EchomailRepository(db)
        self.netmail_repo = NetmailRepository(db)
        self._lock = threading.Lock()
        self._area_counts: dict[int, int] = {}
        self._netmail_count = 0
        self._valid = False

    @property
    def is_valid(self) -> bool:
        with self._lock:
            return self._valid

    def refresh(self):
        """
        Reload all counts.

        Raises:
            SQLAlchemyError: if either query fails; the cache is left as it was
        """
        counts = self.echomail_repo.count_by_area()
        netmail_count = self.netmail_repo.count()

        with self._lock:
            self._area_counts = counts
            self._netmail_count = netmail_count
            self._valid = True

        logger.info(
            f"Loaded message counts for {len(counts)} echoareas "
            f"and {netmail_count} netmail messages"
        )

    def invalidate(self):
        """Drop all cached counts."""
        with self._lock:
            self._area_counts = {}
            self._netmail_count = 0
            self._valid = False

    def increment(self, area_id: int, is_netmail: bool = False):
        """Count one new message; ignored while the cache is invalid."""
        with self._lock:
            if not self._valid:
                return
            if is_netmail:
                self._netmail_count += 1
            else:
                self._area_counts[area_id] = self._area_counts.get(area_id, 0) + 1

    def get(self, area_id: int, is_netmail: bool = False) -> Optional[int]:
        """Cached count, or None if the cache is invalid."""
        with self._lock:
            if not self._valid:
                return None
            if is_netmail:
                return self._netmail_count
            return self._area_counts.get(area_id, 0)
