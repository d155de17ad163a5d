"""FTNed Areas Module - Area contract, SQL areas, count cache and registry."""

from .base import AreaStore, AreaType, MsgBaseType
from .count_cache import MessageCountCache
from .registry import AreaRegistry, FilteredArea
from .sql_area import AreaSettings, SQLArea, map_jnode_area_type

__all__ = [
    "AreaStore",
    "AreaType",
    "MsgBaseType",
    "MessageCountCache",
    "AreaRegistry",
    "FilteredArea",
    "AreaSettings",
    "SQLArea",
    "map_jnode_area_type",
]
