"""FTNed Core Module - Addresses, messages, text helpers and session bootstrap."""

from .address import FidoAddr, ZERO_ADDR
from .message import Message, MessageAttr, MessageListItem

__all__ = [
    "FidoAddr",
    "ZERO_ADDR",
    "Message",
    "MessageAttr",
    "MessageListItem",
]
