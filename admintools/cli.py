"""
Command line front end for the admin tools.

Examples:
    admintools bytes 1536000
    admintools password --length 16 --no-adjacent-repeat
    admintools memory srv01 srv02 --unit GB
    admintools software srv01 --name "*office*" --json
"""

import argparse
import json
import sys
from typing import List, Optional, Sequence

from pydantic import BaseModel

from admintools.config import get_settings
from admintools.errors import AdminToolsError
from admintools.logger import setup_logging
from admintools.models.collection import CollectionResult
from admintools.models.secret import CharacterClass
from admintools.models.size import SizeUnit
from admintools.services import (
    byte_size,
    disk_monitor,
    memory_monitor,
    os_monitor,
    password,
    software_inventory,
    uptime_monitor,
)

_TABLE_COLUMNS = {
    "memory": ["host", "total", "free", "free_memory_gb", "used_memory_percent"],
    "disk": ["host", "drive", "volume_name", "size", "free", "free_percent"],
    "os": ["host", "name", "version", "build_number", "architecture"],
    "uptime": ["host", "last_boot", "uptime"],
    "software": ["host", "name", "version", "publisher", "install_date"],
}


def _unit(value: str) -> SizeUnit:
    try:
        return byte_size.parse_size_unit(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _add_target_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "targets",
        nargs="*",
        help="Hosts to query (default: ADMIN_TARGETS, then the local machine)",
    )
    parser.add_argument("--json", action="store_true", help="Print records as JSON")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="admintools",
        description="Helpers for Windows system administrators.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log at DEBUG level")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("bytes", help="Format a byte count")
    p.add_argument("value", type=int, help="Raw byte count")
    p.add_argument("--unit", type=_unit, help="KB, MB, GB or TB (default: automatic)")

    p = sub.add_parser("password", help="Generate a password")
    p.add_argument("--length", type=int, help="Default: ADMIN_PASSWORD_LENGTH or 12")
    p.add_argument(
        "--classes",
        default="lower,upper,digit,special",
        help="Comma separated classes: " + ", ".join(c.value for c in CharacterClass),
    )
    p.add_argument("--no-adjacent-repeat", action="store_true")
    p.add_argument("--count", type=int, default=1, help="Number of passwords")

    p = sub.add_parser("pin", help="Generate a numeric PIN")
    p.add_argument("--length", type=int, default=4)

    p = sub.add_parser("passphrase", help="Generate a passphrase from a word list")
    p.add_argument("wordlist", help="Text file with one word per line")
    p.add_argument("--words", type=int, default=4, help="Number of words")
    p.add_argument("--separator", default="-")
    p.add_argument("--capitalize", action="store_true")
    p.add_argument("--append-digit", action="store_true")
    p.add_argument("--min-length", type=int, default=3)
    p.add_argument("--max-length", type=int, default=10)

    for name, help_text in (
        ("memory", "Total and free memory per host"),
        ("disk", "Fixed drive capacity per host"),
    ):
        p = sub.add_parser(name, help=help_text)
        _add_target_args(p)
        p.add_argument("--unit", type=_unit, help="KB, MB, GB or TB (default: automatic)")

    p = sub.add_parser("os", help="Operating system version per host")
    _add_target_args(p)

    p = sub.add_parser("uptime", help="Last boot time and uptime per host")
    _add_target_args(p)

    p = sub.add_parser("software", help="Installed software per host")
    _add_target_args(p)
    p.add_argument("--include-updates", action="store_true", help="Also list hotfixes and updates")
    p.add_argument("--name", help="Wildcard filter on the display name, e.g. '*office*'")

    return parser.parse_args(argv)


def _cell(value) -> str:
    if value is None:
        return ""
    if isinstance(value, BaseModel):
        return str(value)
    if isinstance(value, float):
        return f"{value:.2f}"
    return str(value)


def render_table(records: List[BaseModel], columns: List[str]) -> str:
    """Render records as a left-aligned text table."""
    rows = [[_cell(getattr(record, column)) for column in columns] for record in records]
    widths = [max([len(column)] + [len(row[i]) for row in rows]) for i, column in enumerate(columns)]

    lines = ["  ".join(column.ljust(widths[i]) for i, column in enumerate(columns))]
    lines.append("  ".join("-" * width for width in widths))
    for row in rows:
        lines.append("  ".join(cell.ljust(widths[i]) for i, cell in enumerate(row)).rstrip())
    return "\n".join(lines)


def _print_collection(command: str, result: CollectionResult, as_json: bool) -> int:
    if as_json:
        print(result.model_dump_json(indent=2))
    elif result.records:
        print(render_table(result.records, _TABLE_COLUMNS[command]))

    for host in result.unreachable:
        print(f"[WARN] {host} is not reachable, skipped", file=sys.stderr)
    for host in result.failed:
        print(f"[WARN] {host} could not be queried, skipped", file=sys.stderr)

    # Non-zero when nothing at all could be collected
    if not result.records and result.skipped_count:
        return 1
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    setup_logging("DEBUG" if args.verbose else settings.log_level)

    try:
        if args.command == "bytes":
            print(byte_size.format_byte_length(args.value, args.unit))
            return 0

        if args.command == "password":
            classes = [c for c in args.classes.split(",") if c.strip()]
            for _ in range(max(1, args.count)):
                print(
                    password.generate_password(
                        args.length or settings.password_length,
                        classes,
                        no_adjacent_repeat=args.no_adjacent_repeat,
                        max_attempts=settings.max_generation_attempts,
                    )
                )
            return 0

        if args.command == "pin":
            print(password.generate_pin(args.length))
            return 0

        if args.command == "passphrase":
            words = password.load_word_list(args.wordlist)
            print(
                password.generate_passphrase(
                    words,
                    word_count=args.words,
                    separator=args.separator,
                    capitalize=args.capitalize,
                    append_digit=args.append_digit,
                    min_word_length=args.min_length,
                    max_word_length=args.max_length,
                )
            )
            return 0

        if args.command == "memory":
            result = memory_monitor.get_memory_status(args.targets, args.unit)
        elif args.command == "disk":
            result = disk_monitor.get_disk_status(args.targets, args.unit)
        elif args.command == "os":
            result = os_monitor.get_os_info(args.targets)
        elif args.command == "uptime":
            result = uptime_monitor.get_uptime(args.targets)
        else:
            result = software_inventory.get_installed_software(
                args.targets,
                include_updates=args.include_updates,
                name_filter=args.name,
            )
        return _print_collection(args.command, result, args.json)

    except (ValueError, OSError) as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 2
    except AdminToolsError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
