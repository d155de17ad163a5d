"""
Tests for FTNed Addresses and Messages
"""

import pytest

from ftned.core.address import FidoAddr, ZERO_ADDR
from ftned.core.message import Message, MessageAttr
from ftned.errors import InvalidAddressError


class TestFidoAddrParse:
    """Tests for address parsing."""

    def test_full_address(self):
        """Zone, net, node and point are parsed."""
        addr = FidoAddr.parse("2:5020/1042.7")

        assert addr == FidoAddr(2, 5020, 1042, 7)

    def test_round_trip(self):
        """Formatting then parsing gives back the same address."""
        for text in ["1:1/1", "2:5020/1042.7", "3:633/280", "65535:65535/65535.65535"]:
            addr = FidoAddr.parse(text)
            assert FidoAddr.parse(str(addr)) == addr
            assert str(addr) == text

    def test_zero_point_omitted(self):
        """A zero point is not rendered."""
        assert str(FidoAddr.parse("2:5020/1.0")) == "2:5020/1"

    def test_short_form_needs_default_zone(self):
        """net/node without a zone requires default_zone."""
        with pytest.raises(InvalidAddressError):
            FidoAddr.parse("5020/1")

        assert FidoAddr.parse("5020/1", default_zone=2) == FidoAddr(2, 5020, 1)

    def test_domain_ignored(self):
        """An @domain suffix is accepted and dropped."""
        assert FidoAddr.parse("2:5020/1@fidonet") == FidoAddr(2, 5020, 1)

    def test_invalid_addresses(self):
        """Malformed or out of range input raises."""
        for text in ["", "abc", "2:5020", "2:5020/x", "2:70000/1", "-1:2/3"]:
            with pytest.raises(InvalidAddressError):
                FidoAddr.parse(text)

    def test_invalid_is_value_error(self):
        """Address errors can be caught as ValueError."""
        with pytest.raises(ValueError):
            FidoAddr.parse("nonsense")

    def test_from_string_returns_none(self):
        """from_string does not raise."""
        assert FidoAddr.from_string("garbage") is None
        assert FidoAddr.from_string("2:5020/1") == FidoAddr(2, 5020, 1)

    def test_ascii_digits_only(self):
        """Digits from other scripts are not address numbers."""
        assert FidoAddr.from_string("\u0662:\u0665\u0660\u0662\u0660/\u0661") is None
        with pytest.raises(InvalidAddressError):
            FidoAddr.parse("2:5020/\u0661")


class TestFidoAddrValue:
    """Tests for address value behaviour."""

    def test_boss(self):
        """Boss node drops the point."""
        assert FidoAddr(2, 5020, 1, 5).boss() == FidoAddr(2, 5020, 1)

    def test_ordering(self):
        """Addresses order by zone, net, node, point."""
        addrs = [FidoAddr(2, 5020, 1, 1), FidoAddr(1, 9999, 9), FidoAddr(2, 5020, 1)]

        assert sorted(addrs) == [FidoAddr(1, 9999, 9), FidoAddr(2, 5020, 1), FidoAddr(2, 5020, 1, 1)]

    def test_zero(self):
        """The default address is the zero address."""
        assert FidoAddr().is_zero
        assert ZERO_ADDR.is_zero
        assert not FidoAddr(2, 5020, 1).is_zero

    def test_constructor_range_check(self):
        """Segments must fit in 16 bits."""
        with pytest.raises(InvalidAddressError):
            FidoAddr(2, 5020, 1, 65536)


class TestMessageKludges:
    """Tests for kludge extraction and rendering."""

    def test_extract(self):
        """Kludge lines move from the body to the mapping."""
        msg = Message(body="\x01MSGID: 2:5020/1 abcd\r\x01PID: ftned\rHello\rWorld")
        msg.extract_kludges()

        assert msg.kludges == {"MSGID:": "2:5020/1 abcd", "PID:": "ftned"}
        assert msg.body == "Hello\rWorld"
        assert msg.lines == ["Hello", "World"]

    def test_render_with_exclude(self):
        """Excluded kludges are not rendered."""
        msg = Message(kludges={"MSGID:": "1", "CHRS:": "UTF-8 4"})

        assert msg.render_kludges() == "\x01MSGID: 1\r\x01CHRS: UTF-8 4\r"
        assert msg.render_kludges(exclude=("MSGID:",)) == "\x01CHRS: UTF-8 4\r"

    def test_attr_values(self):
        """Attributes display with their FTN abbreviations."""
        assert MessageAttr.KILL_SENT.value == "K/s"
        assert MessageAttr.PRIVATE.value == "Pvt"
