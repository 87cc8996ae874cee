"""Filtering, sorting and selection for the process table."""

from collections.abc import Iterable

from pymon.models import ProcessRecord


def filter_processes(records: Iterable[ProcessRecord], text: str) -> list[ProcessRecord]:
    """Keep records whose name contains text, ignoring case. Empty text keeps all."""
    if not text:
        return list(records)
    needle = text.lower()
    return [proc for proc in records if needle in proc.name.lower()]


def sort_by_cpu(records: Iterable[ProcessRecord]) -> list[ProcessRecord]:
    """Stable sort, highest CPU ticks first."""
    return sorted(records, key=lambda p: p.cpu_ticks, reverse=True)


def build_process_table(records: Iterable[ProcessRecord], text: str = "") -> list[ProcessRecord]:
    """Filter by name, then sort by CPU ticks."""
    return sort_by_cpu(filter_processes(records, text))


class ProcessSelection:
    """
    Selected pids in the process table.

    A plain select replaces the selection; a multi select toggles the pid
    in or out, keeping the order pids were picked in.
    """

    def __init__(self) -> None:
        self._pids: list[int] = []

    @property
    def pids(self) -> tuple[int, ...]:
        return tuple(self._pids)

    def select(self, pid: int, multi: bool = False) -> None:
        if not multi:
            self._pids = [pid]
        elif pid in self._pids:
            self._pids.remove(pid)
        else:
            self._pids.append(pid)

    def clear(self) -> None:
        self._pids.clear()

    def prune(self, live_pids: Iterable[int]) -> None:
        """Drop pids that are no longer present."""
        live = set(live_pids)
        self._pids = [pid for pid in self._pids if pid in live]

    def __contains__(self, pid: object) -> bool:
        return pid in self._pids

    def __len__(self) -> int:
        return len(self._pids)
