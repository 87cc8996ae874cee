"""Shared fixtures: fake /proc, /sys and /etc trees."""

from collections import namedtuple
from pathlib import Path

import pytest

from pymon.config import MonitorConfig
from pymon.monitor import SystemMonitor
from pymon.scheduler import GraphSettings

DiskUsage = namedtuple("DiskUsage", ["total", "used", "free", "percent"])

MEMINFO = """\
MemTotal:       16000000 kB
MemFree:         4000000 kB
MemAvailable:    9000000 kB
Buffers:          500000 kB
Cached:          3500000 kB
SwapCached:            0 kB
SwapTotal:       2000000 kB
SwapFree:        1500000 kB
"""

CPU_STAT = """\
cpu  100 0 50 800 50 0 0 0 0 0
cpu0 100 0 50 800 50 0 0 0 0 0
intr 12345
ctxt 67890
"""

NET_DEV = """\
Inter-|   Receive                                                |  Transmit
 face |bytes    packets errs drop fifo frame compressed multicast|bytes    packets errs drop fifo colls carrier compressed
    lo:    2048      20    0    0    0     0          0         0     2048      20    0    0    0     0       0          0
  eth0: 1073741824 1000 1 2 3 4 5 6 536870912 800 7 8 9 10 11 12
  bad0: 1 2 3
"""

OS_RELEASE = """\
NAME="Debian GNU/Linux"
PRETTY_NAME="Debian GNU/Linux 12 (bookworm)"
ID=debian
"""

CPUINFO = """\
processor\t: 0
vendor_id\t: GenuineIntel
model name\t: Intel(R) Core(TM) i7-8550U CPU @ 1.80GHz
processor\t: 1
model name\t: Intel(R) Core(TM) i7-8550U CPU @ 1.80GHz
"""

# pid -> (name, state, utime, stime, VmRSS kB or None)
PROCESSES = {
    1: ("systemd", "S", 10, 5, 8000),
    42: ("my weird (proc) name", "R", 300, 200, 1600000),
    77: ("bash", "Z", 40, 10, None),
    88: ("sshd", "T", 20, 20, 4000),
    120: ("kworker/0:1", "D", 0, 0, None),
}


def stat_line(pid: int, name: str, state: str, utime: int, stime: int) -> str:
    """Build a /proc/<pid>/stat record with utime/stime at fields 14 and 15."""
    return (
        f"{pid} ({name}) {state} 1 1 1 0 -1 4194560 100 0 0 0 "
        f"{utime} {stime} 0 0 20 0 1 0 100 10000 200 18446744073709551615\n"
    )


def write_process(proc_root: Path, pid: int, name: str, state: str, utime: int, stime: int, rss: int | None) -> None:
    pid_dir = proc_root / str(pid)
    pid_dir.mkdir(parents=True, exist_ok=True)
    (pid_dir / "stat").write_text(stat_line(pid, name, state, utime, stime))
    status = f"Name:\t{name}\nState:\t{state}\n"
    if rss is not None:
        status += f"VmRSS:\t{rss:>8} kB\n"
    (pid_dir / "status").write_text(status)


@pytest.fixture
def proc_root(tmp_path: Path) -> Path:
    """A fake /proc with meminfo, stat, net/dev and a handful of processes."""
    root = tmp_path / "proc"
    (root / "net").mkdir(parents=True)
    (root / "meminfo").write_text(MEMINFO)
    (root / "stat").write_text(CPU_STAT)
    (root / "cpuinfo").write_text(CPUINFO)
    (root / "net" / "dev").write_text(NET_DEV)
    (root / "self").mkdir()

    for pid, (name, state, utime, stime, rss) in PROCESSES.items():
        write_process(root, pid, name, state, utime, stime, rss)

    # A pid directory whose stat record is truncated
    (root / "99").mkdir()
    (root / "99" / "stat").write_text("99 (broken) S 1\n")
    # A pid directory that vanished before its files could be read
    (root / "123").mkdir()
    return root


@pytest.fixture
def sys_root(tmp_path: Path) -> Path:
    """A fake /sys with one thermal zone and a fan on the third hwmon."""
    root = tmp_path / "sys"
    zone = root / "class" / "thermal" / "thermal_zone0"
    zone.mkdir(parents=True)
    (zone / "temp").write_text("52000\n")
    fan = root / "class" / "hwmon" / "hwmon2"
    fan.mkdir(parents=True)
    (fan / "fan1_input").write_text("1800\n")
    return root


@pytest.fixture
def etc_root(tmp_path: Path) -> Path:
    root = tmp_path / "etc"
    root.mkdir()
    (root / "os-release").write_text(OS_RELEASE)
    return root


@pytest.fixture
def empty_root(tmp_path: Path) -> Path:
    """A directory with none of the expected sources."""
    root = tmp_path / "empty"
    root.mkdir()
    return root


@pytest.fixture
def fake_disk(monkeypatch):
    """Replace psutil.disk_usage with a 100 GiB disk, 40 GiB available."""
    usage = DiskUsage(total=100 * 1024**3, used=55 * 1024**3, free=40 * 1024**3, percent=55.0)
    calls = []

    def disk_usage(path):
        calls.append(path)
        return usage

    monkeypatch.setattr("pymon.samplers.psutil.disk_usage", disk_usage)
    return calls


@pytest.fixture
def no_addresses(monkeypatch):
    """Make interface enumeration return nothing."""
    monkeypatch.setattr("pymon.samplers.psutil.net_if_addrs", lambda: {})


@pytest.fixture
def monitor(proc_root: Path, sys_root: Path, etc_root: Path, fake_disk, no_addresses) -> SystemMonitor:
    """A monitor reading the fake trees, graphs at 10 fps with 3 points."""
    config = MonitorConfig(
        proc_root=str(proc_root),
        sys_root=str(sys_root),
        etc_root=str(etc_root),
        cpu_graph=GraphSettings(fps=10, max_points=3),
        fan_graph=GraphSettings(fps=10, max_points=3),
        thermal_graph=GraphSettings(fps=10, max_points=3),
    )
    return SystemMonitor(config)
