"""
FTNed Link, Area and Routing Database Operations

Links, echoarea definitions, subscriptions, the echomail outbound
queue and netmail routing rules.
"""

import logging
from typing import Optional

from sqlalchemy import insert, text

from .connection import JnodeDatabase
from .models import Echoarea, Link, Route, WILDCARD
from .schema import (
    echoarea as echoarea_table,
    echomailawait as echomailawait_table,
    links as links_table,
    routing as routing_table,
    subscription as subscription_table,
)

logger = logging.getLogger(__name__)


class LinkRepository:
    """Repository for links, subscriptions and the echomail queue."""

    def __init__(self, db: JnodeDatabase):
        self.db = db

    def get_by_address(self, ftn_address: str) -> Optional[Link]:
        """Get link by exact FTN address."""
        row = self.db.fetchone(
            "SELECT * FROM links WHERE ftn_address = :addr",
            {"addr": ftn_address}
        )
        return self._row_to_link(row) if row else None

    def create_link(self, station_name: str, ftn_address: str, pkt_password: str = "") -> Link:
        """Create a new link."""
        link_id = self.db.insert(links_table, {
            "station_name": station_name,
            "ftn_address": ftn_address,
            "pkt_password": pkt_password,
            "password": "-",
            "address": "-",
        })
        return Link(id=link_id, station_name=station_name,
                    ftn_address=ftn_address, pkt_password=pkt_password)

    def subscribe(self, link_id: int, echoarea_id: int):
        """Subscribe a link to an echoarea."""
        self.db.insert(subscription_table, {"link_id": link_id, "echoarea_id": echoarea_id})

    def get_subscribers(self, echoarea_id: int) -> list[int]:
        """Get ids of links subscribed to an echoarea."""
        rows = self.db.fetchall(
            "SELECT link_id FROM subscription WHERE echoarea_id = :area_id ORDER BY link_id",
            {"area_id": echoarea_id}
        )
        return [row["link_id"] for row in rows]

    def queue_echomail(self, echoarea_id: int, echomail_id: int) -> int:
        """
        Queue an echomail for every link subscribed to its area.

        Returns:
            Number of links the message was queued for
        """
        link_ids = self.get_subscribers(echoarea_id)
        if not link_ids:
            return 0

        with self.db.transaction() as conn:
            conn.execute(
                insert(echomailawait_table),
                [{"link_id": link_id, "echomail_id": echomail_id} for link_id in link_ids]
            )
        return len(link_ids)

    def count_awaiting(self, link_id: int) -> int:
        """Count echomail queued for a link."""
        row = self.db.fetchone(
            "SELECT COUNT(*) AS cnt FROM echomailawait WHERE link_id = :link_id",
            {"link_id": link_id}
        )
        return row["cnt"] if row else 0

    def _row_to_link(self, row) -> Link:
        """Convert database row to Link object."""
        return Link(
            id=row["id"],
            station_name=row["station_name"],
            ftn_address=row["ftn_address"],
            pkt_password=row["pkt_password"] or "",
            password=row["password"] or "-",
            address=row["address"] or "-"
        )


class RoutingRepository:
    """Repository for netmail routing rules."""

    def __init__(self, db: JnodeDatabase):
        self.db = db

    def find_rule(
        self,
        from_address: str,
        to_address: str,
        from_name: str,
        to_name: str,
        subject: str
    ) -> Optional[Route]:
        """
        Get the first rule, by ascending nice, whose fields each match
        the message or are the '*' wildcard.
        """
        row = self.db.fetchone("""
            SELECT * FROM routing
            WHERE (from_address = :from_address OR from_address = :any)
              AND (to_address = :to_address OR to_address = :any)
              AND (from_name = :from_name OR from_name = :any)
              AND (to_name = :to_name OR to_name = :any)
              AND (subject = :subject OR subject = :any)
            ORDER BY nice ASC, id ASC
            LIMIT 1
        """, {
            "from_address": from_address,
            "to_address": to_address,
            "from_name": from_name,
            "to_name": to_name,
            "subject": subject,
            "any": WILDCARD,
        })
        return self._row_to_route(row) if row else None

    def create_rule(self, route: Route) -> Route:
        """Create a routing rule."""
        route.id = self.db.insert(routing_table, {
            "nice": route.nice,
            "from_name": route.from_name,
            "to_name": route.to_name,
            "from_address": route.from_address,
            "to_address": route.to_address,
            "subject": route.subject,
            "route_via": route.route_via,
        })
        return route

    def _row_to_route(self, row) -> Route:
        """Convert database row to Route object."""
        return Route(
            id=row["id"],
            nice=row["nice"] or 0,
            from_name=row["from_name"],
            to_name=row["to_name"],
            from_address=row["from_address"],
            to_address=row["to_address"],
            subject=row["subject"],
            route_via=row["route_via"]
        )


class EchoareaRepository:
    """Repository for echoarea definitions."""

    def __init__(self, db: JnodeDatabase):
        self.db = db

    def get_all(self) -> list[Echoarea]:
        """Get all echoareas."""
        rows = self.db.fetchall("SELECT * FROM echoarea ORDER BY id")
        return [self._row_to_echoarea(row) for row in rows]

    def get_by_name(self, name: str) -> Optional[Echoarea]:
        """Get echoarea by name."""
        row = self.db.fetchone(
            "SELECT * FROM echoarea WHERE name = :name", {"name": name}
        )
        return self._row_to_echoarea(row) if row else None

    def get_subscribed(self, link_id: int) -> list[Echoarea]:
        """Get echoareas a link is subscribed to."""
        rows = self.db.fetchall("""
            SELECT e.* FROM echoarea e
            JOIN subscription s ON s.echoarea_id = e.id
            WHERE s.link_id = :link_id
            ORDER BY e.id
        """, {"link_id": link_id})
        return [self._row_to_echoarea(row) for row in rows]

    def create(
        self,
        name: str,
        description: str = "",
        rlevel: int = 0,
        wlevel: int = 0,
        grp: str = ""
    ) -> Echoarea:
        """Create a new echoarea."""
        area_id = self.db.insert(echoarea_table, {
            "name": name,
            "description": description,
            "rlevel": rlevel,
            "wlevel": wlevel,
            "grp": grp,
        })
        logger.info(f"Created new echoarea: {name}")
        return Echoarea(id=area_id, name=name, description=description,
                        rlevel=rlevel, wlevel=wlevel, grp=grp)

    def delete(self, name: str) -> bool:
        """Delete an echoarea with its messages, queue entries and subscriptions."""
        area = self.get_by_name(name)
        if not area:
            return False

        params = {"area_id": area.id}
        with self.db.transaction() as conn:
            conn.execute(text("""
                DELETE FROM echomailawait WHERE echomail_id IN
                    (SELECT id FROM echomail WHERE echoarea_id = :area_id)
            """), params)
            conn.execute(text("DELETE FROM echomail WHERE echoarea_id = :area_id"), params)
            conn.execute(text("DELETE FROM subscription WHERE echoarea_id = :area_id"), params)
            conn.execute(text("DELETE FROM echoarea WHERE id = :area_id"), params)

        logger.info(f"Deleted echoarea: {name}")
        return True

    def statistics(self) -> dict[str, int]:
        """Message counts per area name, netmail included."""
        rows = self.db.fetchall("""
            SELECT e.name AS name, COUNT(m.id) AS cnt
            FROM echoarea e
            LEFT JOIN echomail m ON m.echoarea_id = e.id
            GROUP BY e.id, e.name
        """)
        stats = {row["name"]: row["cnt"] for row in rows}

        row = self.db.fetchone("SELECT COUNT(*) AS cnt FROM netmail")
        stats["Netmail"] = row["cnt"] if row else 0
        return stats

    def _row_to_echoarea(self, row) -> Echoarea:
        """Convert database row to Echoarea object."""
        return Echoarea(
            id=row["id"],
            name=row["name"],
            description=row["description"] or "",
            wlevel=row["wlevel"] or 0,
            rlevel=row["rlevel"] or 0,
            grp=row["grp"] or ""
        )
