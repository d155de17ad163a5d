"""
FTNed Message Database Operations

Position-based access to echomail and netmail rows. Positions are
1-based offsets in ascending id order, never stored ids.
"""

import logging
from typing import Optional

from .connection import JnodeDatabase
from .models import Echomail, Netmail
from .schema import echomail as echomail_table, netmail as netmail_table

logger = logging.getLogger(__name__)


class EchomailRepository:
    """Repository for echomail database operations."""

    def __init__(self, db: JnodeDatabase):
        self.db = db

    def count(self, echoarea_id: int) -> int:
        """Count messages in an echoarea."""
        row = self.db.fetchone(
            "SELECT COUNT(*) AS cnt FROM echomail WHERE echoarea_id = :area_id",
            {"area_id": echoarea_id}
        )
        return row["cnt"] if row else 0

    def count_by_area(self) -> dict[int, int]:
        """Count messages for every echoarea in one query."""
        rows = self.db.fetchall("""
            SELECT echoarea_id, COUNT(*) AS cnt
            FROM echomail
            GROUP BY echoarea_id
        """)
        return {row["echoarea_id"]: row["cnt"] for row in rows}

    def get_at_position(self, echoarea_id: int, position: int) -> Optional[Echomail]:
        """Get the message at a 1-based position."""
        row = self.db.fetchone("""
            SELECT * FROM echomail
            WHERE echoarea_id = :area_id
            ORDER BY id ASC
            LIMIT 1 OFFSET :offset
        """, {"area_id": echoarea_id, "offset": max(position, 1) - 1})
        return self._row_to_echomail(row) if row else None

    def list_headers(self, echoarea_id: int) -> list[Echomail]:
        """Get header fields of all messages in position order."""
        rows = self.db.fetchall("""
            SELECT id, from_name, to_name, subject, date
            FROM echomail
            WHERE echoarea_id = :area_id
            ORDER BY id ASC
        """, {"area_id": echoarea_id})
        return [
            Echomail(
                id=row["id"],
                echoarea_id=echoarea_id,
                from_name=row["from_name"] or "",
                to_name=row["to_name"] or "",
                subject=row["subject"] or "",
                date=row["date"] or 0
            )
            for row in rows
        ]

    def create(self, message: Echomail) -> int:
        """Insert a message, returning its id."""
        return self.db.insert(echomail_table, {
            "echoarea_id": message.echoarea_id,
            "from_name": message.from_name,
            "to_name": message.to_name,
            "from_ftn_addr": message.from_ftn_addr,
            "date": message.date,
            "subject": message.subject,
            "message": message.message,
            "seen_by": message.seen_by,
            "path": message.path,
            "msgid": message.msgid,
        })

    def delete(self, message_id: int) -> bool:
        """Delete a message by id."""
        return self.db.execute(
            "DELETE FROM echomail WHERE id = :id", {"id": message_id}
        ) > 0

    def _row_to_echomail(self, row) -> Echomail:
        """Convert database row to Echomail object."""
        return Echomail(
            id=row["id"],
            echoarea_id=row["echoarea_id"],
            from_name=row["from_name"] or "",
            to_name=row["to_name"] or "",
            from_ftn_addr=row["from_ftn_addr"] or "",
            date=row["date"] or 0,
            subject=row["subject"] or "",
            message=row["message"] or "",
            seen_by=row["seen_by"] or "",
            path=row["path"] or "",
            msgid=row["msgid"] or ""
        )


class NetmailRepository:
    """Repository for netmail database operations."""

    def __init__(self, db: JnodeDatabase):
        self.db = db

    def count(self) -> int:
        """Count all netmail."""
        row = self.db.fetchone("SELECT COUNT(*) AS cnt FROM netmail")
        return row["cnt"] if row else 0

    def get_at_position(self, position: int) -> Optional[Netmail]:
        """Get the netmail at a 1-based position."""
        row = self.db.fetchone("""
            SELECT * FROM netmail
            ORDER BY id ASC
            LIMIT 1 OFFSET :offset
        """, {"offset": max(position, 1) - 1})
        return self._row_to_netmail(row) if row else None

    def list_headers(self) -> list[Netmail]:
        """Get header fields of all netmail in position order."""
        rows = self.db.fetchall("""
            SELECT id, from_name, to_name, subject, date
            FROM netmail
            ORDER BY id ASC
        """)
        return [
            Netmail(
                id=row["id"],
                from_name=row["from_name"] or "",
                to_name=row["to_name"] or "",
                subject=row["subject"] or "",
                date=row["date"] or 0
            )
            for row in rows
        ]

    def create(self, message: Netmail) -> int:
        """Insert a netmail, returning its id."""
        return self.db.insert(netmail_table, {
            "from_name": message.from_name,
            "to_name": message.to_name,
            "from_address": message.from_address,
            "to_address": message.to_address,
            "subject": message.subject,
            "text": message.text,
            "date": message.date,
            "route_via": message.route_via,
            "send": message.send,
            "attr": message.attr,
            "last_modified": message.last_modified,
        })

    def delete(self, message_id: int) -> bool:
        """Delete a netmail by id."""
        return self.db.execute(
            "DELETE FROM netmail WHERE id = :id", {"id": message_id}
        ) > 0

    def _row_to_netmail(self, row) -> Netmail:
        """Convert database row to Netmail object."""
        return Netmail(
            id=row["id"],
            from_name=row["from_name"] or "",
            to_name=row["to_name"] or "",
            from_address=row["from_address"] or "",
            to_address=row["to_address"] or "",
            subject=row["subject"] or "",
            text=row["text"] or "",
            date=row["date"] or 0,
            route_via=row["route_via"],
            send=bool(row["send"]),
            attr=row["attr"] or 0,
            last_modified=row["last_modified"] or 0
        )
