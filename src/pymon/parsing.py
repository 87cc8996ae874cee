"""Parsers for /proc and /sys text records.

Every function here is tolerant: unreadable files and malformed records
produce ``None`` (or are skipped) instead of raising.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from pymon.models import CPUTicks

logger = logging.getLogger(__name__)

NET_DEV_FIELDS = 16
# Fields after the ")" that closes the command name: state is the first,
# utime and stime are overall fields 14 and 15.
_STAT_STATE = 0
_STAT_UTIME = 11
_STAT_STIME = 12


@dataclass(slots=True, frozen=True)
class ProcessStat:
    """Fields extracted from a /proc/<pid>/stat line."""

    pid: int
    name: str
    state: str
    utime: int
    stime: int


def read_text(path: Path) -> str | None:
    """Read a whole virtual file, returning None if it cannot be opened."""
    try:
        return path.read_text()
    except OSError as exc:
        logger.debug("Cannot read %s: %s", path, exc)
        return None
    except UnicodeDecodeError:
        logger.debug("Undecodable content in %s", path)
        return None


def read_first_int(path: Path) -> int | None:
    """Read the first integer token of a sensor-style file."""
    text = read_text(path)
    if text is None:
        return None
    tokens = text.split()
    if not tokens:
        return None
    try:
        return int(tokens[0])
    except ValueError:
        logger.debug("Non-numeric value in %s: %r", path, tokens[0])
        return None


def parse_key_value(text: str) -> dict[str, int]:
    """
    Parse ``Key: value [unit]`` lines into a mapping.

    Used for /proc/meminfo and /proc/<pid>/status. Lines whose value is not
    an integer are skipped.
    """
    values: dict[str, int] = {}
    for line in text.splitlines():
        parts = line.split()
        if len(parts) < 2:
            continue
        key = parts[0].rstrip(":")
        try:
            values[key] = int(parts[1])
        except ValueError:
            continue
    return values


def parse_cpu_ticks(line: str) -> CPUTicks | None:
    """Parse the aggregate ``cpu`` line of /proc/stat."""
    parts = line.split()
    if len(parts) < 8 or not parts[0].startswith("cpu"):
        return None
    try:
        counters = [int(p) for p in parts[1:8]]
    except ValueError:
        return None
    return CPUTicks(*counters)


def parse_process_stat(text: str) -> ProcessStat | None:
    """
    Parse a /proc/<pid>/stat record.

    The command name may contain spaces and parentheses, so it is taken
    from between the first "(" and the last ")".
    """
    open_paren = text.find("(")
    close_paren = text.rfind(")")
    if open_paren < 0 or close_paren < open_paren:
        return None

    rest = text[close_paren + 1 :].split()
    if len(rest) <= _STAT_STIME:
        return None

    try:
        return ProcessStat(
            pid=int(text[:open_paren]),
            name=text[open_paren + 1 : close_paren],
            state=rest[_STAT_STATE][:1],
            utime=int(rest[_STAT_UTIME]),
            stime=int(rest[_STAT_STIME]),
        )
    except ValueError:
        return None


def parse_net_dev_line(line: str) -> tuple[str, list[int], list[int]] | None:
    """
    Parse one interface line of /proc/net/dev.

    Returns the interface name with its 8 receive and 8 transmit counters,
    or None when the line is missing a field.
    """
    name, sep, counters = line.partition(":")
    name = name.strip()
    if not sep or not name:
        return None

    fields = counters.split()
    if len(fields) < NET_DEV_FIELDS:
        return None
    try:
        values = [int(f) for f in fields[:NET_DEV_FIELDS]]
    except ValueError:
        return None
    return name, values[:8], values[8:]


def parse_os_release(text: str) -> str | None:
    """Return PRETTY_NAME from os-release content, without quotes."""
    for line in text.splitlines():
        if line.startswith("PRETTY_NAME="):
            label = line[len("PRETTY_NAME=") :].replace('"', "")
            return label or None
    return None


def parse_cpu_model(text: str) -> str | None:
    """Return the first ``model name`` value from /proc/cpuinfo."""
    for line in text.splitlines():
        if "model name" in line:
            _, sep, value = line.partition(":")
            if sep:
                return value.strip()
    return None
