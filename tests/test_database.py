"""
Tests for FTNed jnode Database Access and Area Loading
"""

import pytest

from ftned.areas.base import AreaType
from ftned.areas.count_cache import MessageCountCache
from ftned.areas.loader import load_areas, load_jnode_areas, load_subscribed_areas
from ftned.config import AreaConfig, Config
from ftned.core.session import EditorSession
from ftned.db.connection import JnodeDatabase, build_url
from ftned.db.links import EchoareaRepository, LinkRepository
from ftned.db.messages import EchomailRepository
from ftned.db.models import Echomail
from ftned.errors import ConfigError, DatabaseConnectionError


def make_db() -> JnodeDatabase:
    db = JnodeDatabase(driver="sqlite", dsn=":memory:", auto_migrate=True)
    db.initialize()
    return db


class TestBuildUrl:
    """Tests for database URL construction."""

    def test_sqlite(self):
        """SQLite DSNs are file paths."""
        assert build_url("sqlite", "/var/lib/jnode.db") == "sqlite:////var/lib/jnode.db"
        assert build_url("sqlite", ":memory:") == "sqlite:///:memory:"

    def test_server_drivers(self):
        """Server DSNs get the driver scheme."""
        assert build_url("mysql", "u:p@host/jnode") == "mysql+pymysql://u:p@host/jnode"
        assert build_url("postgres", "u:p@host/jnode") == "postgresql+psycopg2://u:p@host/jnode"
        assert build_url("PostgreSQL", "u:p@host/jnode") == "postgresql+psycopg2://u:p@host/jnode"

    def test_full_url_passthrough(self):
        """Full URLs are used unchanged."""
        url = "postgresql+psycopg2://u:p@host:5432/jnode"

        assert build_url("postgres", url) == url

    def test_unsupported_driver(self):
        """Unknown drivers are a configuration error."""
        with pytest.raises(ConfigError):
            build_url("oracle", "whatever")


class TestJnodeDatabase:
    """Tests for the connection manager."""

    def test_engine_requires_initialize(self):
        """The engine is unavailable before initialize."""
        db = JnodeDatabase(driver="sqlite", dsn=":memory:")

        with pytest.raises(RuntimeError):
            db.engine
        assert "error" in db.connection_stats()

    def test_initialize_and_close(self):
        """A working database passes the health check."""
        db = make_db()

        db.health_check()
        assert db.connection_stats()["driver"] == "sqlite"

        db.close()
        with pytest.raises(RuntimeError):
            db.engine

    def test_unreachable_database(self, tmp_path):
        """Connection failures raise DatabaseConnectionError."""
        db = JnodeDatabase(driver="sqlite", dsn=str(tmp_path / "missing" / "jnode.db"))

        with pytest.raises(DatabaseConnectionError):
            db.initialize()

    def test_from_config(self):
        """Settings are taken from the database section."""
        config = Config()
        config.database.dsn = ":memory:"
        config.database.auto_migrate = True

        db = JnodeDatabase.from_config(config.database)

        assert db.dsn == ":memory:"
        assert db.auto_migrate is True
        assert db.max_open_conns == 25


class TestEchoareaRepository:
    """Tests for echoarea management."""

    def setup_method(self):
        """Set up test fixtures."""
        self.db = make_db()
        self.areas = EchoareaRepository(self.db)
        self.links = LinkRepository(self.db)
        self.echomail = EchomailRepository(self.db)

    def teardown_method(self):
        self.db.close()

    def test_create_and_get(self):
        """Created areas can be looked up by name."""
        created = self.areas.create("RU.FIDONET", "Fidonet talk", rlevel=1, wlevel=2, grp="R")

        found = self.areas.get_by_name("RU.FIDONET")

        assert found == created
        assert self.areas.get_by_name("MISSING") is None
        assert [a.name for a in self.areas.get_all()] == ["RU.FIDONET"]

    def test_delete_cascades(self):
        """Deleting an area removes its messages, queue and subscriptions."""
        area = self.areas.create("RU.TEST")
        link = self.links.create_link("Hub", "2:5020/1")
        self.links.subscribe(link.id, area.id)
        msg_id = self.echomail.create(Echomail(
            echoarea_id=area.id, from_name="a", to_name="b", from_ftn_addr="2:5020/1"
        ))
        self.links.queue_echomail(area.id, msg_id)

        assert self.areas.delete("RU.TEST") is True

        assert self.areas.get_by_name("RU.TEST") is None
        assert self.echomail.count(area.id) == 0
        assert self.links.get_subscribers(area.id) == []
        assert self.links.count_awaiting(link.id) == 0
        assert self.areas.delete("RU.TEST") is False

    def test_statistics(self):
        """Statistics include empty areas and netmail."""
        busy = self.areas.create("BUSY")
        self.areas.create("QUIET")
        for _ in range(3):
            self.echomail.create(Echomail(
                echoarea_id=busy.id, from_name="a", to_name="b", from_ftn_addr="2:5020/1"
            ))

        assert self.areas.statistics() == {"BUSY": 3, "QUIET": 0, "Netmail": 0}

    def test_subscribed(self):
        """Subscribed areas are listed per link."""
        first = self.areas.create("FIRST")
        self.areas.create("SECOND")
        link = self.links.create_link("Point", "2:5020/1042.5")
        self.links.subscribe(link.id, first.id)

        assert [a.name for a in self.areas.get_subscribed(link.id)] == ["FIRST"]


class TestAreaLoader:
    """Tests for building the registry from the database."""

    def setup_method(self):
        """Set up test fixtures."""
        self.db = make_db()
        areas = EchoareaRepository(self.db)
        self.fidonet = areas.create("RU.FIDONET")
        areas.create("BadMail")
        self.config = Config()
        self.config.editor.address = "2:5020/1042"
        self.config.areas = [AreaConfig("RU.FIDONET", "CP866 2")]
        self.cache = MessageCountCache(self.db)

    def teardown_method(self):
        self.db.close()

    def test_load_all(self):
        """All echoareas plus netmail are loaded and sorted."""
        registry = load_jnode_areas(self.db, self.config, self.cache)

        assert [a.get_name() for a in registry] == ["Netmail", "BadMail", "RU.FIDONET"]
        assert registry.get("BadMail").get_type() == AreaType.BAD
        assert registry.get("RU.FIDONET").get_chrs() == "CP866 2"
        assert registry.get("Netmail").get_chrs() == ""
        assert self.cache.is_valid

    def test_load_subscribed(self):
        """Only subscribed areas are loaded for a known link."""
        links = LinkRepository(self.db)
        link = links.create_link("Me", "2:5020/1042")
        links.subscribe(link.id, self.fidonet.id)

        registry = load_subscribed_areas(self.db, self.config, self.cache)

        assert [a.get_name() for a in registry] == ["Netmail", "RU.FIDONET"]

    def test_subscribed_falls_back(self):
        """An unknown address loads every area."""
        self.config.area_file.subscribed_only = True

        registry = load_areas(self.db, self.config, self.cache)

        assert len(registry) == 3

    def test_settings_applied(self):
        """Areas get the configured user and charsets."""
        self.config.editor.username = "John Doe"
        self.config.chrs.jnode_default = "UTF-8 4"

        area = load_jnode_areas(self.db, self.config).get("RU.FIDONET")

        assert area.settings.username == "John Doe"
        assert area.settings.jnode_chrs == "UTF-8 4"
        assert area.count_cache is None


class TestEditorSession:
    """Tests for session setup and teardown."""

    def _config(self) -> Config:
        config = Config()
        config.editor.address = "2:5020/1042"
        config.database.dsn = ":memory:"
        config.database.auto_migrate = True
        config.lastread.database_path = ":memory:"
        return config

    def test_setup_and_close(self):
        """Setup opens storage and loads the netmail area."""
        session = EditorSession(self._config())
        session.setup()

        assert session.lastread.is_open
        assert session.count_cache.is_valid
        assert session.find_area("Netmail") is session.registry[0]
        assert session.find_area("net") is session.registry[0]
        assert session.find_area("nothing") is None

        session.close()
        assert session.db is None
        assert session.lastread is None

    def test_context_manager(self):
        """The session can be used as a context manager."""
        config = self._config()
        config.lastread.enabled = False

        with EditorSession(config) as session:
            assert session.lastread is None
            assert len(session.registry) == 1

        assert session.db is None
