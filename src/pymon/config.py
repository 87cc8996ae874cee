"""Configuration for the pymon monitor."""

from dataclasses import dataclass, field

from pymon.history import DEFAULT_CAPACITY
from pymon.samplers import ETC_ROOT, PROC_ROOT, SYS_ROOT
from pymon.scheduler import (
    IDENTITY_INTERVAL,
    MEMORY_INTERVAL,
    NETWORK_INTERVAL,
    GraphSettings,
)


class ConfigurationError(ValueError):
    """Raised for invalid monitor configuration values."""


@dataclass(slots=True)
class MonitorConfig:
    """
    Settings for a SystemMonitor.

    Attributes:
        proc_root: Root of the process virtual filesystem.
        sys_root: Root of the sysfs tree holding thermal and hwmon sensors.
        etc_root: Directory holding os-release.
        disk_path: Mount point whose capacity is reported.
        identity_interval: Seconds between identity/census samples.
        memory_interval: Seconds between memory, disk and process samples.
        network_interval: Seconds between network samples.
        cpu_graph, fan_graph, thermal_graph: Per-series graph settings.
        refresh_interval: Seconds between front-end polls.
    """

    proc_root: str = PROC_ROOT
    sys_root: str = SYS_ROOT
    etc_root: str = ETC_ROOT
    disk_path: str = "/"
    identity_interval: float = IDENTITY_INTERVAL
    memory_interval: float = MEMORY_INTERVAL
    network_interval: float = NETWORK_INTERVAL
    cpu_graph: GraphSettings = field(default_factory=GraphSettings)
    fan_graph: GraphSettings = field(default_factory=GraphSettings)
    thermal_graph: GraphSettings = field(default_factory=GraphSettings)
    refresh_interval: float = 0.1

    def __post_init__(self) -> None:
        for name in ("identity_interval", "memory_interval", "network_interval", "refresh_interval"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be positive, got {getattr(self, name)}")

    @classmethod
    def with_graphs(
        cls,
        fps: float = 30.0,
        history: int = DEFAULT_CAPACITY,
        **kwargs,
    ) -> "MonitorConfig":
        """Build a config whose three graphs share fps and history capacity."""
        if history < 1:
            raise ConfigurationError(f"history must be at least 1, got {history}")
        return cls(
            cpu_graph=GraphSettings(fps=fps, max_points=history),
            fan_graph=GraphSettings(fps=fps, max_points=history),
            thermal_graph=GraphSettings(fps=fps, max_points=history),
            **kwargs,
        )
