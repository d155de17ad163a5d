"""
FTNed FidoNet Addresses

Parsing and formatting of zone:net/node.point addresses.
"""

import re
from dataclasses import dataclass, replace
from typing import Optional

from ..errors import InvalidAddressError

MAX_SEGMENT = 0xFFFF

# [zone:]net/node[.point][@domain]
_ADDR_RE = re.compile(
    r"^(?:(?P<zone>\d+):)?(?P<net>\d+)/(?P<node>\d+)"
    r"(?:\.(?P<point>\d+))?(?:@[\w.-]+)?$",
    re.ASCII,
)


@dataclass(frozen=True, order=True)
class FidoAddr:
    """FTN network address."""
    zone: int = 0
    net: int = 0
    node: int = 0
    point: int = 0

    def __post_init__(self):
        for name in ("zone", "net", "node", "point"):
            value = getattr(self, name)
            if not 0 <= value <= MAX_SEGMENT:
                raise InvalidAddressError(f"{name} out of range: {value}")

    def __str__(self) -> str:
        base = f"{self.zone}:{self.net}/{self.node}"
        if self.point:
            return f"{base}.{self.point}"
        return base

    @property
    def is_zero(self) -> bool:
        return self == ZERO_ADDR

    def boss(self) -> "FidoAddr":
        """Return the boss node address (same address with point 0)."""
        return replace(self, point=0)

    @classmethod
    def parse(cls, text: str, default_zone: Optional[int] = None) -> "FidoAddr":
        """
        Parse an address string.

        Args:
            text: Address like "2:5020/1.5" or, with default_zone, "5020/1"
            default_zone: Zone used when the string has none

        Raises:
            InvalidAddressError: on malformed or out-of-range input
        """
        match = _ADDR_RE.match(text.strip()) if text else None
        if not match:
            raise InvalidAddressError(f"Invalid FTN address: {text!r}")

        zone = match.group("zone")
        if zone is None:
            if default_zone is None:
                raise InvalidAddressError(f"FTN address has no zone: {text!r}")
            zone_num = default_zone
        else:
            zone_num = int(zone)

        return cls(
            zone=zone_num,
            net=int(match.group("net")),
            node=int(match.group("node")),
            point=int(match.group("point") or 0),
        )

    @classmethod
    def from_string(cls, text: str, default_zone: Optional[int] = None) -> Optional["FidoAddr"]:
        """Parse an address, returning None instead of raising."""
        try:
            return cls.parse(text, default_zone)
        except InvalidAddressError:
            return None


ZERO_ADDR = FidoAddr()
