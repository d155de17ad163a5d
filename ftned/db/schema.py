"""
FTNed jnode Schema

Table definitions for the jnode database, portable across the
supported SQL drivers.
"""

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
)

metadata = MetaData()

links = Table(
    "links", metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("station_name", String(255), nullable=False),
    Column("ftn_address", String(255), nullable=False, unique=True),
    Column("pkt_password", String(255), server_default=""),
    Column("password", String(255), server_default="-"),
    Column("address", String(255), server_default="-"),
)

echoarea = Table(
    "echoarea", metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False, unique=True),
    Column("description", String(1000), server_default=""),
    Column("wlevel", Integer, server_default="0"),
    Column("rlevel", Integer, server_default="0"),
    Column("grp", String(255), server_default=""),
)

echomail = Table(
    "echomail", metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("echoarea_id", Integer, ForeignKey("echoarea.id"), nullable=False, index=True),
    Column("from_name", String(255), nullable=False),
    Column("to_name", String(255), nullable=False),
    Column("from_ftn_addr", String(255), nullable=False),
    Column("date", BigInteger),
    Column("subject", Text),
    Column("message", Text),
    Column("seen_by", Text),
    Column("path", Text),
    Column("msgid", String(255), index=True),
)

netmail = Table(
    "netmail", metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("from_name", String(255)),
    Column("to_name", String(255)),
    Column("from_address", String(255), nullable=False),
    Column("to_address", String(255), nullable=False),
    Column("subject", Text),
    Column("text", Text),
    Column("date", BigInteger),
    Column("route_via", Integer, ForeignKey("links.id"), nullable=True, index=True),
    Column("send", Boolean, server_default="0", index=True),
    Column("attr", Integer, server_default="256"),
    Column("last_modified", BigInteger),
)

subscription = Table(
    "subscription", metadata,
    Column("link_id", Integer, ForeignKey("links.id"), primary_key=True),
    Column("echoarea_id", Integer, ForeignKey("echoarea.id"), primary_key=True),
)

echomailawait = Table(
    "echomailawait", metadata,
    Column("link_id", Integer, ForeignKey("links.id"), primary_key=True),
    Column("echomail_id", Integer, ForeignKey("echomail.id"), primary_key=True),
)

routing = Table(
    "routing", metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("nice", Integer),
    Column("from_name", String(255), server_default="*"),
    Column("to_name", String(255), server_default="*"),
    Column("from_address", String(255), server_default="*"),
    Column("to_address", String(255), server_default="*"),
    Column("subject", String(255), server_default="*"),
    Column("route_via", Integer, ForeignKey("links.id"), nullable=False),
)

Index("idx_routing_nice", routing.c.nice)
