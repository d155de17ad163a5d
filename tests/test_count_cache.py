"""
Tests for FTNed Message Count Cache
"""

import pytest
from sqlalchemy.exc import SQLAlchemyError

from ftned.areas.count_cache import MessageCountCache
from ftned.db.connection import JnodeDatabase
from ftned.db.links import EchoareaRepository
from ftned.db.messages import EchomailRepository, NetmailRepository
from ftned.db.models import Echomail, Netmail


class TestMessageCountCache:
    """Tests for cached message counts."""

    def setup_method(self):
        """Set up test fixtures."""
        self.db = JnodeDatabase(driver="sqlite", dsn=":memory:", auto_migrate=True)
        self.db.initialize()
        self.echomail = EchomailRepository(self.db)
        self.netmail = NetmailRepository(self.db)
        areas = EchoareaRepository(self.db)
        self.area_a = areas.create("AREA.A")
        self.area_b = areas.create("AREA.B")
        self.area_empty = areas.create("AREA.EMPTY")
        self.cache = MessageCountCache(self.db)

    def teardown_method(self):
        self.db.close()

    def _add_echomail(self, area_id: int, count: int):
        for i in range(count):
            self.echomail.create(Echomail(
                echoarea_id=area_id,
                from_name="Tester",
                to_name="All",
                from_ftn_addr="2:5020/1",
                subject=f"msg {i}",
                message="text\n",
            ))

    def _add_netmail(self, count: int):
        for i in range(count):
            self.netmail.create(Netmail(
                from_address="2:5020/1",
                to_address="2:5020/2",
                subject=f"net {i}",
            ))

    def test_invalid_until_refresh(self):
        """A new cache is invalid and returns no counts."""
        assert not self.cache.is_valid
        assert self.cache.get(self.area_a.id) is None
        assert self.cache.get(0, is_netmail=True) is None

    def test_refresh_matches_direct_counts(self):
        """Refreshed counts equal direct COUNT queries."""
        self._add_echomail(self.area_a.id, 3)
        self._add_echomail(self.area_b.id, 1)
        self._add_netmail(2)

        self.cache.refresh()

        assert self.cache.is_valid
        for area in (self.area_a, self.area_b, self.area_empty):
            assert self.cache.get(area.id) == self.echomail.count(area.id)
        assert self.cache.get(0, is_netmail=True) == self.netmail.count() == 2

    def test_missing_area_is_zero(self):
        """Areas without messages count as zero once valid."""
        self.cache.refresh()

        assert self.cache.get(self.area_empty.id) == 0
        assert self.cache.get(9999) == 0

    def test_increment_ignored_while_invalid(self):
        """Increment does nothing before refresh."""
        self.cache.increment(self.area_a.id)
        self.cache.increment(0, is_netmail=True)

        assert self.cache.get(self.area_a.id) is None

        self.cache.refresh()
        assert self.cache.get(self.area_a.id) == 0
        assert self.cache.get(0, is_netmail=True) == 0

    def test_increment(self):
        """Increment bumps echomail and netmail counts separately."""
        self.cache.refresh()

        self.cache.increment(self.area_a.id)
        self.cache.increment(self.area_a.id)
        self.cache.increment(0, is_netmail=True)

        assert self.cache.get(self.area_a.id) == 2
        assert self.cache.get(self.area_b.id) == 0
        assert self.cache.get(0, is_netmail=True) == 1

    def test_invalidate(self):
        """Invalidate drops all counts."""
        self._add_echomail(self.area_a.id, 1)
        self.cache.refresh()

        self.cache.invalidate()

        assert not self.cache.is_valid
        assert self.cache.get(self.area_a.id) is None

    def test_refresh_failure_propagates(self):
        """Query failures are raised and leave the cache invalid."""
        self.db.execute("DROP TABLE netmail")

        with pytest.raises(SQLAlchemyError):
            self.cache.refresh()

        assert not self.cache.is_valid
