"""
FTNed Data Models

Dataclasses representing jnode database entities.
"""

from dataclasses import dataclass
from typing import Optional

WILDCARD = "*"


@dataclass
class Link:
    """FTN node this system exchanges mail with."""
    id: Optional[int] = None
    station_name: str = ""
    ftn_address: str = ""
    pkt_password: str = ""
    password: str = "-"
    address: str = "-"


@dataclass
class Echoarea:
    """Echomail area definition."""
    id: Optional[int] = None
    name: str = ""
    description: str = ""
    wlevel: int = 0
    rlevel: int = 0
    grp: str = ""


@dataclass
class Echomail:
    """Stored echomail message."""
    id: Optional[int] = None
    echoarea_id: int = 0
    from_name: str = ""
    to_name: str = ""
    from_ftn_addr: str = ""
    date: int = 0  # milliseconds since epoch
    subject: str = ""
    message: str = ""
    seen_by: str = ""
    path: str = ""
    msgid: str = ""


@dataclass
class Netmail:
    """Stored netmail message."""
    id: Optional[int] = None
    from_name: str = ""
    to_name: str = ""
    from_address: str = ""
    to_address: str = ""
    subject: str = ""
    text: str = ""
    date: int = 0  # milliseconds since epoch
    route_via: Optional[int] = None  # None = direct
    send: bool = False
    attr: int = 256
    last_modified: int = 0


@dataclass
class Subscription:
    """Link subscription to an echoarea."""
    link_id: int = 0
    echoarea_id: int = 0


@dataclass
class Route:
    """Netmail routing rule; text fields may be the '*' wildcard."""
    id: Optional[int] = None
    nice: int = 0
    from_name: str = WILDCARD
    to_name: str = WILDCARD
    from_address: str = WILDCARD
    to_address: str = WILDCARD
    subject: str = WILDCARD
    route_via: int = 0


@dataclass
class LastRead:
    """Per-user read position in an area."""
    id: Optional[int] = None
    username: str = ""
    area_name: str = ""
    last_read_msg: int = 0
    high_read_msg: int = 0
    last_updated: int = 0
