"""
FTNed SQL Message Areas

Echomail and netmail areas stored in a jnode database.

Storage is always UTF-8 with LF line endings; in memory, bodies use FTN
CR line endings and are re-encoded to the display charset on read.
"""

import logging
import sqlite3
import threading
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from ..core.address import FidoAddr
from ..core.message import Message, MessageAttr, MessageListItem
from ..core.text import charset_name, encode_charmap, is_utf8
from ..db.connection import JnodeDatabase
from ..db.lastread import LastReadStore
from ..db.links import LinkRepository, RoutingRepository
from ..db.messages import EchomailRepository, NetmailRepository
from ..db.models import Echoarea, Echomail, Netmail
from ..errors import NoRouteError
from ..utils.formatting import from_unix_time, to_unix_time
from .base import AreaStore, AreaType, MsgBaseType
from .count_cache import MessageCountCache

logger = logging.getLogger(__name__)

NETMAIL_AREA_NAME = "Netmail"
MSGID_KLUDGE = "MSGID:"
CHRS_KLUDGES = ("CHRS:", "CHRS")

# jnode netmail attribute bits
NETMAIL_ATTR_BITS = {
    MessageAttr.PRIVATE: 1,
    MessageAttr.CRASH: 2,
    MessageAttr.RECEIVED: 4,
    MessageAttr.SENT: 8,
    MessageAttr.FILE_ATTACH: 16,
    MessageAttr.FORWARD: 32,
    MessageAttr.KILL_SENT: 128,
    MessageAttr.LOCAL: 256,
    MessageAttr.HOLD: 512,
}


def decode_attrs(attr: int) -> set[MessageAttr]:
    """Convert jnode attribute bits to message attributes."""
    return {flag for flag, bit in NETMAIL_ATTR_BITS.items() if attr & bit}


def encode_attrs(attrs: set[MessageAttr]) -> int:
    """Convert message attributes to jnode attribute bits."""
    result = 0
    for flag in attrs:
        result |= NETMAIL_ATTR_BITS[flag]
    return result


def map_jnode_area_type(area_name: str) -> AreaType:
    """Guess the area type from a jnode area name."""
    if area_name == NETMAIL_AREA_NAME:
        return AreaType.NETMAIL
    if area_name in ("BadMail", "Bad"):
        return AreaType.BAD
    if area_name in ("DupeMail", "Dupe"):
        return AreaType.DUPE
    return AreaType.ECHO


@dataclass
class AreaSettings:
    """Per-user settings shared by all SQL areas."""
    username: str = ""
    display_chrs: str = "UTF-8 4"  # charset messages are shown in
    jnode_chrs: str = ""  # CHRS kludge forced on saved messages


class SQLArea(AreaStore):
    """
    Message area backed by the jnode echomail or netmail table.

    Features:
    - Position-based paging in insertion (id) order
    - Shared message count cache, direct COUNT(*) fallback
    - Last-read positions in a separate store, in-memory fallback
    - Echomail fan-out to subscribed links
    - Netmail route resolution on save
    """

    def __init__(
        self,
        db: JnodeDatabase,
        area_id: int,
        name: str,
        area_type: AreaType,
        count_cache: Optional[MessageCountCache] = None,
        lastread: Optional[LastReadStore] = None,
        settings: Optional[AreaSettings] = None
    ):
        self.db = db
        self.area_id = area_id
        self.area_name = name
        self.area_type = area_type
        self.count_cache = count_cache
        self.lastread = lastread
        self.settings = settings or AreaSettings()
        self.chrs = ""

        self.echomail_repo = EchomailRepository(db)
        self.netmail_repo = NetmailRepository(db)
        self.link_repo = LinkRepository(db)
        self.routing_repo = RoutingRepository(db)

        self._list_lock = threading.Lock()
        self._list_generation = 0
        self._message_list: list[MessageListItem] = []
        self._message_list_valid = False
        self._last_read_position = 0

    @classmethod
    def for_echoarea(cls, db: JnodeDatabase, echoarea: Echoarea, **kwargs) -> "SQLArea":
        """Create an area for a jnode echoarea row."""
        return cls(db, echoarea.id, echoarea.name, map_jnode_area_type(echoarea.name), **kwargs)

    @classmethod
    def netmail(cls, db: JnodeDatabase, **kwargs) -> "SQLArea":
        """Create the netmail area."""
        return cls(db, 0, NETMAIL_AREA_NAME, AreaType.NETMAIL, **kwargs)

    @property
    def is_netmail(self) -> bool:
        return self.area_type == AreaType.NETMAIL

    def init(self):
        self._last_read_position = 0
        self._invalidate_message_list()

    def _invalidate_message_list(self):
        with self._list_lock:
            self._list_generation += 1
            self._message_list = []
            self._message_list_valid = False

    # === Counts and read positions ===

    def get_count(self) -> int:
        if self.count_cache is not None:
            cached = self.count_cache.get(self.area_id, self.is_netmail)
            if cached is not None:
                return cached

        try:
            if self.is_netmail:
                return self.netmail_repo.count()
            return self.echomail_repo.count(self.area_id)
        except SQLAlchemyError as e:
            logger.error(f"Error counting messages for area {self.area_name}: {e}")
            return 0

    def get_last(self) -> int:
        if self.lastread is not None:
            try:
                return self.lastread.get_last_read(self.settings.username, self.area_name)
            except (sqlite3.Error, RuntimeError) as e:
                logger.error(f"Error getting lastread for area {self.area_name}: {e}")
        return self._last_read_position

    def set_last(self, position: int):
        self._last_read_position = position
        if self.lastread is not None:
            try:
                self.lastread.set_last_read(self.settings.username, self.area_name, position)
            except (sqlite3.Error, RuntimeError) as e:
                logger.error(f"Error saving lastread for area {self.area_name}: {e}")

    # === Reading ===

    def get_msg(self, position: int) -> Optional[Message]:
        if position == 0:
            position = 1

        if self.is_netmail:
            row = self.netmail_repo.get_at_position(position)
            if row is None:
                return None
            msg = self._netmail_to_message(row, position)
        else:
            row = self.echomail_repo.get_at_position(self.area_id, position)
            if row is None:
                return None
            msg = self._echomail_to_message(row, position)

        msg.extract_kludges()
        self._apply_display_charset(msg)
        return msg

    def _echomail_to_message(self, row: Echomail, position: int) -> Message:
        date = from_unix_time(row.date)
        msg = Message(
            area=self.area_name,
            msg_num=position,
            max_num=self.get_count(),
            from_name=row.from_name,
            to_name=row.to_name,
            subject=row.subject,
            body=self.normalize_from_storage(row.message),
            date_written=date,
            date_arrived=date,
        )

        from_addr = FidoAddr.from_string(row.from_ftn_addr)
        if from_addr is None:
            from_addr = FidoAddr()
            msg.corrupted = True
        msg.from_addr = from_addr

        # Echomail has no single recipient address
        msg.to_addr = FidoAddr()

        if row.msgid:
            msg.kludges[MSGID_KLUDGE] = row.msgid
        return msg

    def _netmail_to_message(self, row: Netmail, position: int) -> Message:
        date = from_unix_time(row.date)
        msg = Message(
            area=self.area_name,
            msg_num=position,
            max_num=self.get_count(),
            from_name=row.from_name,
            to_name=row.to_name,
            subject=row.subject,
            body=self.normalize_from_storage(row.text),
            date_written=date,
            date_arrived=date,
            attrs=decode_attrs(row.attr),
        )

        from_addr = FidoAddr.from_string(row.from_address)
        to_addr = FidoAddr.from_string(row.to_address)
        if from_addr is None:
            from_addr = FidoAddr()
            msg.corrupted = True
        if to_addr is None:
            to_addr = FidoAddr()
            msg.corrupted = True
        msg.from_addr = from_addr
        msg.to_addr = to_addr
        return msg

    def _apply_display_charset(self, msg: Message):
        """Storage is UTF-8; convert text fields for a non-UTF-8 display."""
        chrs = self.settings.display_chrs
        if is_utf8(chrs):
            return
        msg.body = encode_charmap(msg.body, chrs)
        msg.from_name = encode_charmap(msg.from_name, chrs)
        msg.to_name = encode_charmap(msg.to_name, chrs)
        msg.subject = encode_charmap(msg.subject, chrs)

    def get_messages(self) -> list[MessageListItem]:
        with self._list_lock:
            if self._message_list_valid:
                return self._message_list
            generation = self._list_generation

        try:
            if self.is_netmail:
                rows = self.netmail_repo.list_headers()
            else:
                rows = self.echomail_repo.list_headers(self.area_id)
        except SQLAlchemyError as e:
            logger.error(f"Error loading message list for area {self.area_name}: {e}")
            return []

        items = [
            MessageListItem(
                msg_num=num,
                from_name=row.from_name,
                to_name=row.to_name,
                subject=row.subject,
                date_written=from_unix_time(row.date),
            )
            for num, row in enumerate(rows, 1)
        ]

        # A save or delete during the query makes this list stale
        with self._list_lock:
            if generation == self._list_generation:
                self._message_list = items
                self._message_list_valid = True
        return items

    # === Writing ===

    def save_msg(self, msg: Message):
        """
        Store a new message.

        Raises:
            SQLAlchemyError: if the message row cannot be inserted
        """
        kludges = dict(msg.kludges)
        if self.settings.jnode_chrs:
            for key in CHRS_KLUDGES:
                kludges.pop(key, None)
            kludges["CHRS:"] = self.settings.jnode_chrs

        # MSGID has its own column
        kludge_text = Message(kludges=kludges).render_kludges(exclude=(MSGID_KLUDGE,))
        text = self.normalize_for_storage(kludge_text + msg.body)

        if self.is_netmail:
            self._save_netmail(msg, text)
        else:
            self._save_echomail(msg, text, kludges.get(MSGID_KLUDGE, ""))

        self._invalidate_message_list()
        if self.count_cache is not None:
            self.count_cache.increment(self.area_id, self.is_netmail)

    def _save_echomail(self, msg: Message, text: str, msgid: str):
        echomail_id = self.echomail_repo.create(Echomail(
            echoarea_id=self.area_id,
            from_name=msg.from_name,
            to_name=msg.to_name,
            from_ftn_addr=str(msg.from_addr),
            date=to_unix_time(msg.date_written),
            subject=msg.subject,
            message=text,
            seen_by="",  # filled in by the tosser
            path="",
            msgid=msgid,
        ))

        try:
            queued = self.link_repo.queue_echomail(self.area_id, echomail_id)
            if queued:
                logger.info(
                    f"Queued echomail message {echomail_id} for {queued} "
                    f"subscribed links in area {self.area_name}"
                )
        except SQLAlchemyError as e:
            logger.warning(f"Failed to queue echomail for subscribers: {e}")

        logger.info(f"Saved echomail message to area {self.area_name}")

    def _save_netmail(self, msg: Message, text: str):
        try:
            route_via = self.find_route(msg)
        except NoRouteError as e:
            logger.warning(f"{e}; saved without route, manual routing needed")
            route_via = None

        self.netmail_repo.create(Netmail(
            from_name=msg.from_name,
            to_name=msg.to_name,
            from_address=str(msg.from_addr),
            to_address=str(msg.to_addr),
            subject=msg.subject,
            text=text,
            date=to_unix_time(msg.date_written),
            route_via=route_via,
            send=False,  # set by jnode once sent
            attr=encode_attrs(msg.attrs),
            last_modified=to_unix_time(),
        ))

        if route_via is not None:
            logger.info(f"Netmail queued for sending via link {route_via}")
        logger.info(f"Saved netmail message to {msg.to_addr}")

    def find_route(self, msg: Message) -> Optional[int]:
        """
        Resolve the link a netmail leaves through.

        Returns:
            None for a directly connected destination, else the link id

        Raises:
            NoRouteError: if no link or routing rule matches
        """
        dest = str(msg.to_addr)

        link = self.link_repo.get_by_address(dest)
        if link:
            logger.debug(f"Found direct link for {dest}: {link.station_name}")
            return None

        if msg.to_addr.point:
            boss = str(msg.to_addr.boss())
            link = self.link_repo.get_by_address(boss)
            if link:
                logger.debug(f"Routing {dest} via boss node {boss}: {link.station_name}")
                return link.id

        route = self.routing_repo.find_rule(
            from_address=str(msg.from_addr),
            to_address=dest,
            from_name=msg.from_name,
            to_name=msg.to_name,
            subject=msg.subject,
        )
        if route:
            logger.debug(f"Found route via routing table for {dest}: link {route.route_via}")
            return route.route_via

        raise NoRouteError(f"No route found for netmail to {dest}")

    def del_msg(self, position: int) -> bool:
        if position == 0:
            position = 1

        if self.is_netmail:
            row = self.netmail_repo.get_at_position(position)
            deleted = row is not None and self.netmail_repo.delete(row.id)
        else:
            row = self.echomail_repo.get_at_position(self.area_id, position)
            deleted = row is not None and self.echomail_repo.delete(row.id)

        if not deleted:
            logger.warning(f"No message {position} to delete in area {self.area_name}")
            return False

        # The count cache is not decremented; it catches up on the next refresh
        self._invalidate_message_list()
        logger.info(f"Deleted message {position} from area {self.area_name}")
        return True

    # === Area properties ===

    def get_name(self) -> str:
        return self.area_name

    def get_msg_type(self) -> MsgBaseType:
        return MsgBaseType.SQL

    def get_type(self) -> AreaType:
        return self.area_type

    def set_chrs(self, chrs: str):
        self.chrs = chrs

    def get_chrs(self) -> str:
        return self.chrs

    def get_storage_line_ending(self) -> str:
        return "\n"

    def __repr__(self) -> str:
        return f"<SQLArea {self.area_name!r} id={self.area_id} type={self.area_type.name}>"
