"""
FTNed Message Model

Netmail/echomail messages as seen by the reader and editor.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional

from .address import FidoAddr

KLUDGE_PREFIX = "\x01"
FTN_EOL = "\r"


class MessageAttr(Enum):
    """Netmail attribute flags."""
    PRIVATE = "Pvt"
    CRASH = "Cra"
    RECEIVED = "Rcv"
    SENT = "Snt"
    FILE_ATTACH = "Att"
    FORWARD = "Fwd"
    KILL_SENT = "K/s"
    HOLD = "Hld"
    LOCAL = "Loc"


@dataclass
class MessageListItem:
    """Message header for area listings."""
    msg_num: int
    from_name: str = ""
    to_name: str = ""
    subject: str = ""
    date_written: Optional[datetime] = None


@dataclass
class Message:
    """A netmail or echomail message."""
    area: str = ""
    msg_num: int = 0
    max_num: int = 0
    from_name: str = ""
    to_name: str = ""
    from_addr: FidoAddr = field(default_factory=FidoAddr)
    to_addr: FidoAddr = field(default_factory=FidoAddr)
    subject: str = ""
    body: str = ""  # CR separated
    date_written: Optional[datetime] = None
    date_arrived: Optional[datetime] = None
    attrs: set[MessageAttr] = field(default_factory=set)
    kludges: dict[str, str] = field(default_factory=dict)
    corrupted: bool = False

    def extract_kludges(self):
        """
        Move kludge lines out of the body into the kludges mapping.

        The body is taken as-is; no charset detection or decoding is done.
        """
        kept = []
        for line in self.body.split(FTN_EOL):
            if line.startswith(KLUDGE_PREFIX):
                key, _, value = line[1:].partition(" ")
                if key:
                    self.kludges[key] = value
                continue
            kept.append(line)
        self.body = FTN_EOL.join(kept)

    def render_kludges(self, exclude: Iterable[str] = ()) -> str:
        """Render kludges as control-A prefixed, CR terminated lines."""
        skip = set(exclude)
        return "".join(
            f"{KLUDGE_PREFIX}{key} {value}{FTN_EOL}"
            for key, value in self.kludges.items()
            if key not in skip
        )

    @property
    def lines(self) -> list[str]:
        """Body split into display lines."""
        return self.body.split(FTN_EOL)
