"""
FTNed Area Contract

Interface every message area backend implements. Messages are
addressed by 1-based position, never by storage id.
"""

from abc import ABC, abstractmethod
from enum import Enum, IntEnum
from typing import Optional

from ..core.message import Message, MessageListItem
from ..core.text import normalize_for_storage, normalize_from_storage


class MsgBaseType(Enum):
    """Message base format."""
    JAM = "JAM"
    MSG = "MSG"
    SQUISH = "Squish"
    PASSTHROUGH = "Passthrough"
    SQL = "SQL"


class AreaType(IntEnum):
    """Area type; numeric order is the area list sort order."""
    NETMAIL = 0
    BAD = 1
    DUPE = 2
    ECHO = 3
    LOCAL = 4
    NONE = 5


class AreaStore(ABC):
    """Message area backend."""

    @abstractmethod
    def init(self):
        """Reset per-session state (read position shadow, caches)."""

    @abstractmethod
    def get_count(self) -> int:
        """Number of messages in the area."""

    @abstractmethod
    def get_last(self) -> int:
        """Last read position, 0 if nothing read."""

    @abstractmethod
    def set_last(self, position: int):
        """Store the last read position."""

    @abstractmethod
    def get_msg(self, position: int) -> Optional[Message]:
        """
        Get the message at a 1-based position.

        Position 0 is treated as 1. Returns None past the end of the area.
        """

    @abstractmethod
    def save_msg(self, msg: Message):
        """Append a message to the area."""

    @abstractmethod
    def del_msg(self, position: int) -> bool:
        """Delete the message at a position; later positions shift down."""

    @abstractmethod
    def get_name(self) -> str:
        """Area name."""

    @abstractmethod
    def get_msg_type(self) -> MsgBaseType:
        """Message base format."""

    @abstractmethod
    def get_type(self) -> AreaType:
        """Area type."""

    @abstractmethod
    def set_chrs(self, chrs: str):
        """Set the area character set."""

    @abstractmethod
    def get_chrs(self) -> str:
        """Area character set."""

    @abstractmethod
    def get_messages(self) -> list[MessageListItem]:
        """Headers of all messages in position order."""

    def get_storage_line_ending(self) -> str:
        return "\r"

    def normalize_for_storage(self, body: str) -> str:
        return normalize_for_storage(body, self.get_storage_line_ending())

    def normalize_from_storage(self, body: str) -> str:
        return normalize_from_storage(body, self.get_storage_line_ending())

    def unread_count(self) -> int:
        """Unread messages, never negative."""
        return max(0, self.get_count() - self.get_last())

    def has_unread(self) -> bool:
        return self.unread_count() > 0
