"""
FTNed Area Loader

Builds the area registry from the echoareas in a jnode database.
"""

import logging
from typing import Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..config import Config
from ..db.connection import JnodeDatabase
from ..db.lastread import LastReadStore
from ..db.links import EchoareaRepository, LinkRepository
from ..db.models import Echoarea
from .count_cache import MessageCountCache
from .registry import AreaRegistry
from .sql_area import AreaSettings, SQLArea

logger = logging.getLogger(__name__)


def _refresh_counts(count_cache: Optional[MessageCountCache]):
    if count_cache is None:
        return
    try:
        count_cache.refresh()
    except SQLAlchemyError as e:
        # Areas fall back to per-area COUNT(*) queries
        logger.warning(f"Failed to load message counts cache: {e}")


def _build_registry(
    db: JnodeDatabase,
    config: Config,
    echoareas: Iterable[Echoarea],
    count_cache: Optional[MessageCountCache],
    lastread: Optional[LastReadStore]
) -> AreaRegistry:
    settings = AreaSettings(
        username=config.editor.username,
        display_chrs=config.chrs.default,
        jnode_chrs=config.chrs.jnode_default,
    )
    options = {"count_cache": count_cache, "lastread": lastread, "settings": settings}

    registry = AreaRegistry(sort_mode=config.sorting.areas)
    areas = [SQLArea.for_echoarea(db, echoarea, **options) for echoarea in echoareas]
    areas.append(SQLArea.netmail(db, **options))

    for area in areas:
        chrs = config.area_chrs(area.get_name())
        if chrs:
            area.set_chrs(chrs)
        area.init()
        registry.add(area)
        logger.debug(f"Loaded area: {area.get_name()}")

    registry.sort()
    logger.info(f"Loaded {len(registry)} areas from jnode database")
    return registry


def load_jnode_areas(
    db: JnodeDatabase,
    config: Config,
    count_cache: Optional[MessageCountCache] = None,
    lastread: Optional[LastReadStore] = None
) -> AreaRegistry:
    """
    Load every echoarea plus the netmail area.

    Raises:
        SQLAlchemyError: if the echoarea list cannot be read
    """
    echoareas = EchoareaRepository(db).get_all()
    logger.info(f"Loading message counts for {len(echoareas)} echoareas...")
    _refresh_counts(count_cache)
    return _build_registry(db, config, echoareas, count_cache, lastread)


def load_subscribed_areas(
    db: JnodeDatabase,
    config: Config,
    count_cache: Optional[MessageCountCache] = None,
    lastread: Optional[LastReadStore] = None
) -> AreaRegistry:
    """
    Load the echoareas the configured address is subscribed to, plus netmail.

    Falls back to all areas when the address is not a known link.
    """
    address = config.address
    link = LinkRepository(db).get_by_address(str(address)) if address else None
    if link is None:
        logger.info(f"Node {config.editor.address} not found in links table, loading all areas")
        return load_jnode_areas(db, config, count_cache, lastread)

    echoareas = EchoareaRepository(db).get_subscribed(link.id)
    _refresh_counts(count_cache)
    return _build_registry(db, config, echoareas, count_cache, lastread)


def load_areas(
    db: JnodeDatabase,
    config: Config,
    count_cache: Optional[MessageCountCache] = None,
    lastread: Optional[LastReadStore] = None
) -> AreaRegistry:
    """Load areas according to area_file.subscribed_only."""
    if config.area_file.subscribed_only:
        return load_subscribed_areas(db, config, count_cache, lastread)
    return load_jnode_areas(db, config, count_cache, lastread)
