"""FTNed Database Module - jnode SQL access and the local last-read store."""

from .connection import JnodeDatabase
from .lastread import LastReadStore
from .models import Link, Echoarea, Echomail, Netmail, Subscription, Route, LastRead

__all__ = [
    "JnodeDatabase",
    "LastReadStore",
    "Link",
    "Echoarea",
    "Echomail",
    "Netmail",
    "Subscription",
    "Route",
    "LastRead",
]
