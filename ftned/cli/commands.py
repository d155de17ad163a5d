"""
FTNed Command Line Commands

Non-interactive commands over an editor session.
"""

import logging
from pathlib import Path

import toml

from ..config import create_default_config, load_config
from ..core.message import Message
from ..editor.quote import author_initials, quote_text
from ..utils.formatting import format_timestamp, pad_left, pad_right, truncate

logger = logging.getLogger(__name__)

BOX_WIDTH = 79


def print_box(title: str, content: list[str], width: int = BOX_WIDTH):
    """Print a bordered box."""
    border_h = "─" * (width - 2)
    print(f"┌{border_h}┐")
    print(f"│{title.center(width - 2)}│")
    print(f"├{border_h}┤")
    for line in content:
        padded = line.ljust(width - 4)[:width - 4]
        print(f"│ {padded} │")
    print(f"└{border_h}┘")


def message_header(msg: Message) -> list[str]:
    """Header lines for a message view."""
    attrs = " ".join(sorted(attr.value for attr in msg.attrs))
    lines = [
        f"Msg  : {msg.msg_num} of {msg.max_num}  {attrs}".rstrip(),
        f"From : {pad_right(msg.from_name, 36)} {msg.from_addr}",
        f"To   : {pad_right(msg.to_name, 36)} {'' if msg.to_addr.is_zero else msg.to_addr}".rstrip(),
        f"Subj : {msg.subject}",
        f"Date : {format_timestamp(msg.date_written)}",
    ]
    if msg.corrupted:
        lines.append("Warning: message header is corrupted")
    return lines


def run_areas(args, session) -> int:
    """List areas with message and unread counts."""
    matches = session.registry.filter(args.filter or "")
    if not matches:
        print("No areas found.")
        return 0

    for match in matches:
        area = match.area
        print(
            f"{pad_left(str(match.original_index + 1), 4)}  "
            f"{pad_right(truncate(area.get_name(), 40), 40)} "
            f"{pad_left(str(area.get_count()), 7)} "
            f"{pad_left(str(area.unread_count()), 7)}"
        )
    return 0


def run_read(args, session) -> int:
    """Print a message and advance the last-read position."""
    area = session.find_area(args.area)
    if area is None:
        print(f"Area not found: {args.area}")
        return 1

    position = args.number if args.number else area.get_last() + 1
    msg = area.get_msg(position)
    if msg is None:
        print(f"No message {position} in {area.get_name()}")
        return 1

    print_box(area.get_name(), message_header(msg))
    for line in msg.lines:
        print(line)

    if position > area.get_last():
        area.set_last(position)
    return 0


def run_quote(args, session) -> int:
    """Print the reply citation for a message."""
    area = session.find_area(args.area)
    if area is None:
        print(f"Area not found: {args.area}")
        return 1

    msg = area.get_msg(args.number)
    if msg is None:
        print(f"No message {args.number} in {area.get_name()}")
        return 1

    initials = author_initials(msg.from_name)
    for line in quote_text(msg.body, initials, args.width, args.margin):
        print(line)
    return 0


def run_stats(args, session) -> int:
    """Print per-area message counts and last-read statistics."""
    from ..db.links import EchoareaRepository

    stats = EchoareaRepository(session.db).statistics()
    for name in sorted(stats):
        print(f"{pad_right(name, 40)} {pad_left(str(stats[name]), 8)}")
    print(f"{pad_right('Total', 40)} {pad_left(str(sum(stats.values())), 8)}")

    if session.lastread is not None:
        lr = session.lastread.get_stats()
        print()
        print(f"Last-read records: {lr['total_records']} "
              f"({lr['unique_users']} users, {lr['unique_areas']} areas)")

    logger.debug(f"Connection stats: {session.db.connection_stats()}")
    return 0


def run_init_config(args) -> int:
    """Write a default configuration file."""
    path = Path(args.config)
    if path.exists() and not args.force:
        print(f"{path} already exists, use --force to overwrite")
        return 1
    create_default_config(path)
    print(f"Wrote default configuration to {path}")
    return 0


def run_config(args) -> int:
    """Show or validate the configuration file."""
    config = load_config(Path(args.config))

    if args.show:
        print(toml.dumps(config._to_dict()))
        return 0

    errors = config.validate()
    if errors:
        print("Configuration errors:")
        for err in errors:
            print(f"  - {err}")
        return 1
    print("Configuration is valid.")
    return 0
