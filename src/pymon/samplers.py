"""Metric samplers reading Linux virtual filesystem sources.

Samplers never raise for unavailable or malformed sources: an unreadable
file yields a zero/default snapshot, a malformed record is skipped, and a
process that exits mid-scan is simply left out.
"""

import getpass
import logging
import random
import socket
from pathlib import Path

import psutil

from pymon.models import (
    CPUSample,
    CPUTicks,
    FanSample,
    MemorySnapshot,
    NetworkInterfaceSnapshot,
    ProcessCensus,
    ProcessRecord,
    SensorSource,
    SystemIdentity,
    ThermalSample,
)
from pymon.parsing import (
    ProcessStat,
    parse_cpu_model,
    parse_cpu_ticks,
    parse_key_value,
    parse_net_dev_line,
    parse_os_release,
    parse_process_stat,
    read_first_int,
    read_text,
)

logger = logging.getLogger(__name__)

PROC_ROOT = "/proc"
SYS_ROOT = "/sys"
ETC_ROOT = "/etc"

THERMAL_RANGE = (45.0, 65.0)  # degrees C
FAN_RANGE = (2000, 3000)  # rpm
HWMON_CANDIDATES = 10

_RUNNING = {"R"}
_SLEEPING = {"S", "D"}
_ZOMBIE = {"Z"}
_STOPPED = {"T", "t"}


def _list_pids(proc_root: Path) -> list[int]:
    """Numeric entries of the process directory."""
    try:
        names = [entry.name for entry in proc_root.iterdir()]
    except OSError as exc:
        logger.debug("Cannot list %s: %s", proc_root, exc)
        return []
    return sorted(int(name) for name in names if name.isdigit())


def _read_stat(proc_root: Path, pid: int) -> ProcessStat | None:
    text = read_text(proc_root / str(pid) / "stat")
    if text is None:
        # Process exited between listing and reading
        return None
    stat = parse_process_stat(text)
    if stat is None:
        logger.debug("Malformed stat record for pid %d", pid)
    return stat


def count_processes(proc_root: str | Path = PROC_ROOT) -> ProcessCensus:
    """Count processes by scheduler state."""
    root = Path(proc_root)
    pids = _list_pids(root)
    running = sleeping = zombie = stopped = 0

    for pid in pids:
        stat = _read_stat(root, pid)
        if stat is None:
            continue
        if stat.state in _RUNNING:
            running += 1
        elif stat.state in _SLEEPING:
            sleeping += 1
        elif stat.state in _ZOMBIE:
            zombie += 1
        elif stat.state in _STOPPED:
            stopped += 1

    return ProcessCensus(
        total=len(pids),
        running=running,
        sleeping=sleeping,
        zombie=zombie,
        stopped=stopped,
    )


def _username() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "unknown"


def _hostname() -> str:
    try:
        return socket.gethostname() or "unknown"
    except OSError:
        return "unknown"


def sample_identity(
    proc_root: str | Path = PROC_ROOT,
    etc_root: str | Path = ETC_ROOT,
) -> SystemIdentity:
    """Collect OS label, user, host, CPU model and the process census."""
    os_text = read_text(Path(etc_root) / "os-release")
    cpu_text = read_text(Path(proc_root) / "cpuinfo")

    return SystemIdentity(
        os_label=(parse_os_release(os_text) if os_text else None) or "Linux",
        username=_username(),
        hostname=_hostname(),
        cpu_label=(parse_cpu_model(cpu_text) if cpu_text else None) or "",
        census=count_processes(proc_root),
    )


def _disk_usage(path: str) -> tuple[int, int]:
    """Total and unprivileged-free disk space of the mount holding path, in kB."""
    try:
        usage = psutil.disk_usage(path)
    except OSError as exc:
        logger.debug("Disk statistics unavailable for %s: %s", path, exc)
        return 0, 0
    return usage.total // 1024, usage.free // 1024


def sample_memory(proc_root: str | Path = PROC_ROOT, disk_path: str = "/") -> MemorySnapshot:
    """Read RAM and swap from meminfo and disk usage of the root mount."""
    text = read_text(Path(proc_root) / "meminfo")
    values = parse_key_value(text) if text else {}

    total_ram = values.get("MemTotal", 0)
    free_ram = values.get("MemFree", 0) + values.get("Buffers", 0) + values.get("Cached", 0)
    total_swap = values.get("SwapTotal", 0)
    free_swap = values.get("SwapFree", 0)
    total_disk, free_disk = _disk_usage(disk_path)

    return MemorySnapshot(
        total_ram=total_ram,
        used_ram=total_ram - free_ram,
        free_ram=free_ram,
        total_swap=total_swap,
        used_swap=total_swap - free_swap,
        free_swap=free_swap,
        total_disk=total_disk,
        used_disk=total_disk - free_disk,
        free_disk=free_disk,
    )


def _total_ram_kb(proc_root: Path) -> int:
    text = read_text(proc_root / "meminfo")
    if text is None:
        return 0
    return parse_key_value(text).get("MemTotal", 0)


def _resident_kb(proc_root: Path, pid: int) -> int:
    text = read_text(proc_root / str(pid) / "status")
    if text is None:
        return 0
    return parse_key_value(text).get("VmRSS", 0)


def sample_processes(
    proc_root: str | Path = PROC_ROOT,
    total_ram_kb: int | None = None,
) -> list[ProcessRecord]:
    """
    Snapshot every process under proc_root.

    The CPU value of each record is its cumulative user + kernel ticks.
    Memory percent is resident set size relative to total RAM. The list is
    ordered by CPU ticks, highest first.
    """
    root = Path(proc_root)
    if total_ram_kb is None:
        total_ram_kb = _total_ram_kb(root)

    processes: list[ProcessRecord] = []
    for pid in _list_pids(root):
        stat = _read_stat(root, pid)
        if stat is None:
            continue

        memory_kb = _resident_kb(root, pid)
        memory_percent = memory_kb * 100.0 / total_ram_kb if total_ram_kb > 0 else 0.0

        processes.append(
            ProcessRecord(
                pid=pid,
                name=stat.name,
                state=stat.state,
                cpu_ticks=stat.utime + stat.stime,
                memory_percent=memory_percent,
                memory_kb=memory_kb,
            )
        )

    processes.sort(key=lambda p: p.cpu_ticks, reverse=True)
    return processes


def interface_addresses() -> dict[str, str]:
    """Map interface names to their first IPv4 address."""
    try:
        all_addrs = psutil.net_if_addrs()
    except OSError as exc:
        logger.debug("Interface enumeration failed: %s", exc)
        return {}

    addresses: dict[str, str] = {}
    for name, addrs in all_addrs.items():
        for addr in addrs:
            if addr.family == socket.AF_INET and addr.address:
                addresses[name] = addr.address
                break
    return addresses


def sample_network(
    proc_root: str | Path = PROC_ROOT,
    addresses: dict[str, str] | None = None,
) -> list[NetworkInterfaceSnapshot]:
    """Read per-interface counters from net/dev and attach IPv4 addresses."""
    text = read_text(Path(proc_root) / "net" / "dev")
    if text is None:
        return []
    if addresses is None:
        addresses = interface_addresses()

    interfaces: list[NetworkInterfaceSnapshot] = []
    # First two lines are column headers
    for line in text.splitlines()[2:]:
        parsed = parse_net_dev_line(line)
        if parsed is None:
            if line.strip():
                logger.debug("Skipping malformed net/dev line: %r", line)
            continue
        name, rx, tx = parsed
        interfaces.append(
            NetworkInterfaceSnapshot(
                name,
                *rx,
                *tx,
                ipv4_address=addresses.get(name) or "N/A",
            )
        )
    return interfaces


class CPUTracker:
    """
    Computes aggregate CPU usage from consecutive /proc/stat readings.

    Each tracker owns its previous counters. The first sample has nothing to
    diff against, so it reports 0% and only seeds the state.
    """

    def __init__(self, proc_root: str | Path = PROC_ROOT) -> None:
        self._stat_path = Path(proc_root) / "stat"
        self._previous: CPUTicks | None = None

    @property
    def previous(self) -> CPUTicks | None:
        return self._previous

    def reset(self) -> None:
        self._previous = None

    @staticmethod
    def usage(previous: CPUTicks, current: CPUTicks) -> float:
        """Busy share of the ticks elapsed between two readings, in percent."""
        total_diff = current.total - previous.total
        idle_diff = current.idle_total - previous.idle_total
        if total_diff <= 0:
            return 0.0
        return 100.0 * (total_diff - idle_diff) / total_diff

    def update(self, current: CPUTicks) -> CPUSample:
        """Fold a new reading into the tracker and return its usage."""
        previous = self._previous
        self._previous = current
        if previous is None:
            return CPUSample(ticks=current, usage_percent=0.0)
        return CPUSample(ticks=current, usage_percent=self.usage(previous, current))

    def sample(self) -> CPUSample:
        """Read /proc/stat and return the usage since the previous sample."""
        text = read_text(self._stat_path)
        ticks = parse_cpu_ticks(text.splitlines()[0]) if text else None
        if ticks is None:
            logger.debug("No aggregate cpu line in %s", self._stat_path)
            return CPUSample(
                ticks=self._previous or CPUTicks(),
                usage_percent=0.0,
            )
        return self.update(ticks)


class ThermalProbe:
    """Reads the first thermal zone, falling back to a simulated temperature."""

    def __init__(self, sys_root: str | Path = SYS_ROOT, rng: random.Random | None = None) -> None:
        self._path = Path(sys_root) / "class" / "thermal" / "thermal_zone0" / "temp"
        self._rng = rng or random.Random()
        self.last: ThermalSample | None = None

    def sample(self) -> ThermalSample:
        millidegrees = read_first_int(self._path)
        if millidegrees is not None:
            reading = ThermalSample(millidegrees / 1000.0, SensorSource.HARDWARE)
        else:
            reading = ThermalSample(self._rng.uniform(*THERMAL_RANGE), SensorSource.SIMULATED)
        self.last = reading
        return reading


class FanProbe:
    """Reads the first available hwmon fan sensor, falling back to a simulated speed."""

    def __init__(self, sys_root: str | Path = SYS_ROOT, rng: random.Random | None = None) -> None:
        hwmon = Path(sys_root) / "class" / "hwmon"
        self._paths = [hwmon / f"hwmon{i}" / "fan1_input" for i in range(HWMON_CANDIDATES)]
        self._rng = rng or random.Random()
        self.last: FanSample | None = None

    def sample(self) -> FanSample:
        for path in self._paths:
            speed = read_first_int(path)
            if speed is not None:
                reading = FanSample(
                    active=speed > 0,
                    speed=speed,
                    level=speed // 1000,
                    source=SensorSource.HARDWARE,
                )
                break
        else:
            speed = self._rng.randint(FAN_RANGE[0], FAN_RANGE[1] - 1)
            reading = FanSample(
                active=True,
                speed=speed,
                level=speed // 1000,
                source=SensorSource.SIMULATED,
            )
        self.last = reading
        return reading
