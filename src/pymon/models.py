"""Data models for pymon."""

from dataclasses import dataclass
from enum import Enum


class SensorSource(Enum):
    """Where a thermal or fan reading came from."""

    HARDWARE = "hardware"
    SIMULATED = "simulated"


@dataclass(slots=True, frozen=True)
class ProcessCensus:
    """Process counts by scheduler state."""

    total: int = 0
    running: int = 0
    sleeping: int = 0
    zombie: int = 0
    stopped: int = 0


@dataclass(slots=True, frozen=True)
class SystemIdentity:
    """Host, OS and user identity plus the process census."""

    os_label: str = "Linux"
    username: str = "unknown"
    hostname: str = "unknown"
    cpu_label: str = ""
    census: ProcessCensus = ProcessCensus()


def _fraction(part: int, whole: int) -> float:
    return part / whole if whole > 0 else 0.0


@dataclass(slots=True, frozen=True)
class MemorySnapshot:
    """
    RAM, swap and root-disk usage at one instant.

    All values are in kB. Every used value is derived as total - free.
    """

    total_ram: int = 0
    used_ram: int = 0
    free_ram: int = 0
    total_swap: int = 0
    used_swap: int = 0
    free_swap: int = 0
    total_disk: int = 0
    used_disk: int = 0
    free_disk: int = 0

    @property
    def ram_fraction(self) -> float:
        return _fraction(self.used_ram, self.total_ram)

    @property
    def swap_fraction(self) -> float:
        return _fraction(self.used_swap, self.total_swap)

    @property
    def disk_fraction(self) -> float:
        return _fraction(self.used_disk, self.total_disk)


@dataclass(slots=True, frozen=True)
class ProcessRecord:
    """Immutable snapshot of one process."""

    pid: int
    name: str
    state: str  # 'R', 'S', 'D', 'Z', 'T', etc.
    cpu_ticks: int  # utime + stime since process start, not a percentage
    memory_percent: float
    memory_kb: int


@dataclass(slots=True, frozen=True)
class NetworkInterfaceSnapshot:
    """Cumulative counters of one network interface."""

    name: str
    rx_bytes: int = 0
    rx_packets: int = 0
    rx_errs: int = 0
    rx_drop: int = 0
    rx_fifo: int = 0
    rx_frame: int = 0
    rx_compressed: int = 0
    rx_multicast: int = 0
    tx_bytes: int = 0
    tx_packets: int = 0
    tx_errs: int = 0
    tx_drop: int = 0
    tx_fifo: int = 0
    tx_colls: int = 0
    tx_carrier: int = 0
    tx_compressed: int = 0
    ipv4_address: str = "N/A"


@dataclass(slots=True, frozen=True)
class CPUTicks:
    """Aggregate cumulative CPU tick counters."""

    user: int = 0
    nice: int = 0
    system: int = 0
    idle: int = 0
    iowait: int = 0
    irq: int = 0
    softirq: int = 0

    @property
    def total(self) -> int:
        return (
            self.user
            + self.nice
            + self.system
            + self.idle
            + self.iowait
            + self.irq
            + self.softirq
        )

    @property
    def idle_total(self) -> int:
        return self.idle + self.iowait


@dataclass(slots=True, frozen=True)
class CPUSample:
    """CPU counters together with the usage derived from the previous sample."""

    ticks: CPUTicks
    usage_percent: float


@dataclass(slots=True, frozen=True)
class ThermalSample:
    """Temperature reading in degrees Celsius."""

    temperature: float
    source: SensorSource = SensorSource.HARDWARE

    @property
    def simulated(self) -> bool:
        return self.source is SensorSource.SIMULATED


@dataclass(slots=True, frozen=True)
class FanSample:
    """Fan speed reading in rpm."""

    active: bool
    speed: int
    level: int
    source: SensorSource = SensorSource.HARDWARE

    @property
    def simulated(self) -> bool:
        return self.source is SensorSource.SIMULATED
