"""
Tests for FTNed Netmail Routing
"""

import pytest

from ftned.areas.sql_area import SQLArea
from ftned.core.address import FidoAddr
from ftned.core.message import Message
from ftned.db.connection import JnodeDatabase
from ftned.db.links import LinkRepository, RoutingRepository
from ftned.db.models import Route
from ftned.errors import NoRouteError


class TestFindRoute:
    """Tests for netmail route resolution."""

    def setup_method(self):
        """Set up test fixtures."""
        self.db = JnodeDatabase(driver="sqlite", dsn=":memory:", auto_migrate=True)
        self.db.initialize()
        self.links = LinkRepository(self.db)
        self.routing = RoutingRepository(self.db)
        self.area = SQLArea.netmail(self.db)

        self.hub = self.links.create_link("Hub", "2:5020/1")
        self.uplink = self.links.create_link("Uplink", "2:5030/1")

    def teardown_method(self):
        self.db.close()

    def _msg(self, to_addr: str, **fields) -> Message:
        return Message(
            from_name=fields.get("from_name", "John Doe"),
            to_name=fields.get("to_name", "Sysop"),
            from_addr=FidoAddr.parse("2:5020/1042.5"),
            to_addr=FidoAddr.parse(to_addr),
            subject=fields.get("subject", "Hello"),
        )

    def test_direct_link(self):
        """A destination that is a link is sent directly."""
        assert self.area.find_route(self._msg("2:5020/1")) is None

    def test_boss_node(self):
        """A point is routed via its boss node link."""
        assert self.area.find_route(self._msg("2:5020/1.7")) == self.hub.id

    def test_direct_beats_rules(self):
        """A direct link wins over any routing rule."""
        self.routing.create_rule(Route(nice=1, route_via=self.uplink.id))

        assert self.area.find_route(self._msg("2:5020/1")) is None

    def test_rule_by_nice(self):
        """The matching rule with the lowest nice wins."""
        self.routing.create_rule(Route(nice=10, route_via=self.hub.id))
        self.routing.create_rule(Route(nice=5, to_address="2:463/68", route_via=self.uplink.id))

        assert self.area.find_route(self._msg("2:463/68")) == self.uplink.id
        assert self.area.find_route(self._msg("1:100/1")) == self.hub.id

    def test_rule_fields_must_match(self):
        """Non-wildcard rule fields must equal the message fields."""
        self.routing.create_rule(Route(nice=1, to_name="Somebody Else", route_via=self.uplink.id))
        self.routing.create_rule(Route(nice=2, subject="Hello", route_via=self.hub.id))

        assert self.area.find_route(self._msg("1:100/1")) == self.hub.id
        assert self.area.find_route(self._msg("1:100/1", to_name="Somebody Else")) == self.uplink.id

    def test_no_route(self):
        """No link and no rule raises."""
        with pytest.raises(NoRouteError):
            self.area.find_route(self._msg("1:100/1"))

    def test_no_route_is_lookup_error(self):
        """Routing failures can be caught as LookupError."""
        with pytest.raises(LookupError):
            self.area.find_route(self._msg("3:633/280.1"))


class TestRoutingRepository:
    """Tests for routing rule storage."""

    def setup_method(self):
        """Set up test fixtures."""
        self.db = JnodeDatabase(driver="sqlite", dsn=":memory:", auto_migrate=True)
        self.db.initialize()
        self.routing = RoutingRepository(self.db)

    def teardown_method(self):
        self.db.close()

    def test_create_rule(self):
        """Created rules get an id and read back."""
        rule = self.routing.create_rule(Route(nice=3, from_address="2:5020/1042", route_via=7))

        assert rule.id is not None
        found = self.routing.find_rule("2:5020/1042", "1:1/1", "a", "b", "c")
        assert found == rule

    def test_wildcard_defaults(self):
        """A default rule matches anything."""
        self.routing.create_rule(Route(nice=100, route_via=9))

        found = self.routing.find_rule("x", "y", "z", "w", "v")

        assert found.route_via == 9
        assert found.to_address == "*"
