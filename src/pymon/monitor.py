"""Poll-driven sampling coordinator for pymon."""

import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from pymon.config import MonitorConfig
from pymon.history import HistorySeries
from pymon.models import (
    CPUSample,
    FanSample,
    MemorySnapshot,
    NetworkInterfaceSnapshot,
    ProcessRecord,
    SystemIdentity,
    ThermalSample,
)
from pymon.samplers import (
    CPUTracker,
    FanProbe,
    ThermalProbe,
    sample_identity,
    sample_memory,
    sample_network,
    sample_processes,
)
from pymon.scheduler import GraphSettings, Throttle
from pymon.table import build_process_table

logger = logging.getLogger(__name__)


class Series(Enum):
    """Graphable metric series."""

    CPU = "cpu"
    FAN = "fan"
    THERMAL = "thermal"


@dataclass(slots=True, frozen=True)
class MonitorState:
    """Latest samples and history returned by each poll."""

    identity: SystemIdentity = field(default_factory=SystemIdentity)
    memory: MemorySnapshot = field(default_factory=MemorySnapshot)
    processes: tuple[ProcessRecord, ...] = ()
    network: tuple[NetworkInterfaceSnapshot, ...] = ()
    cpu: CPUSample | None = None
    fan: FanSample | None = None
    thermal: ThermalSample | None = None
    # Read-only view; each value is a tuple copy of the history
    history: Mapping[Series, tuple[float, ...]] = field(default_factory=lambda: MappingProxyType({}))


class SystemMonitor:
    """
    Runs each sampler when its interval has elapsed.

    Everything happens on the caller's thread: call poll() from any loop
    (a UI timer, for instance) as often as you like, and only the samplers
    that are due will touch the filesystem. The monitor owns all
    previous-sample state, so independent monitors do not interfere.
    """

    def __init__(self, config: MonitorConfig | None = None) -> None:
        """
        Initialize the SystemMonitor.

        Args:
            config: Monitor settings. Defaults to reading the live system.
        """
        self._config = config or MonitorConfig()
        cfg = self._config

        self._cpu_tracker = CPUTracker(cfg.proc_root)
        self._thermal_probe = ThermalProbe(cfg.sys_root)
        self._fan_probe = FanProbe(cfg.sys_root)

        self._identity_throttle = Throttle(cfg.identity_interval)
        self._memory_throttle = Throttle(cfg.memory_interval)
        self._network_throttle = Throttle(cfg.network_interval)
        self._graph_throttles = {series: Throttle(self.graph(series).interval) for series in Series}
        self._history = {series: HistorySeries(self.graph(series).max_points) for series in Series}

        self._state = MonitorState()

    @property
    def config(self) -> MonitorConfig:
        return self._config

    @property
    def state(self) -> MonitorState:
        """The state produced by the most recent poll."""
        return self._state

    @property
    def cpu_tracker(self) -> CPUTracker:
        return self._cpu_tracker

    def graphs(self) -> dict[Series, GraphSettings]:
        """Settings of every graph series."""
        return {
            Series.CPU: self._config.cpu_graph,
            Series.FAN: self._config.fan_graph,
            Series.THERMAL: self._config.thermal_graph,
        }

    def graph(self, series: Series) -> GraphSettings:
        """Settings of one graph series."""
        return self.graphs()[series]

    def history(self, series: Series) -> HistorySeries:
        return self._history[series]

    def set_animate(self, series: Series, enabled: bool) -> None:
        """Enable or freeze sampling of one graph series."""
        self.graph(series).animate = enabled

    def toggle_series(self, series: Series) -> bool:
        """Flip animation for one series; returns the new setting."""
        settings = self.graph(series)
        settings.animate = not settings.animate
        logger.debug("%s graph %s", series.value, "enabled" if settings.animate else "frozen")
        return settings.animate

    def adjust_fps(self, series: Series, delta: float) -> float:
        """
        Change the sampling rate of one series.

        Args:
            series: Graph to change.
            delta: Frames per second to add (negative to slow down).

        Returns:
            The new rate after clamping to 1-60.
        """
        settings = self.graph(series)
        settings.fps += delta
        return settings.fps

    def adjust_y_scale(self, series: Series, delta: float) -> float:
        """Change the plotted range of one series; returns the clamped value."""
        settings = self.graph(series)
        settings.y_scale += delta
        return settings.y_scale

    def toggle_animation(self) -> bool:
        """Flip animation for every series; returns the new setting."""
        enabled = not all(self.graph(series).animate for series in Series)
        for series in Series:
            self.set_animate(series, enabled)
        logger.debug("Graph animation %s", "enabled" if enabled else "frozen")
        return enabled

    def poll(self, now: float | None = None) -> MonitorState:
        """Run every due sampler and return the updated state."""
        if now is None:
            now = time.monotonic()
        cfg = self._config
        state = self._state

        if self._identity_throttle.ready(now):
            identity = sample_identity(cfg.proc_root, cfg.etc_root)
            self._identity_throttle.mark(now)
        else:
            identity = state.identity

        if self._memory_throttle.ready(now):
            memory = sample_memory(cfg.proc_root, cfg.disk_path)
            processes = tuple(sample_processes(cfg.proc_root, memory.total_ram))
            self._memory_throttle.mark(now)
        else:
            memory, processes = state.memory, state.processes

        if self._network_throttle.ready(now):
            network = tuple(sample_network(cfg.proc_root))
            self._network_throttle.mark(now)
        else:
            network = state.network

        cpu = state.cpu
        if self._graph_due(Series.CPU, now):
            cpu = self._cpu_tracker.sample()
            self._record(Series.CPU, cpu.usage_percent, now)

        fan = state.fan
        if self._graph_due(Series.FAN, now):
            fan = self._fan_probe.sample()
            self._record(Series.FAN, float(fan.speed), now)

        thermal = state.thermal
        if self._graph_due(Series.THERMAL, now):
            thermal = self._thermal_probe.sample()
            self._record(Series.THERMAL, thermal.temperature, now)

        self._state = MonitorState(
            identity=identity,
            memory=memory,
            processes=processes,
            network=network,
            cpu=cpu,
            fan=fan,
            thermal=thermal,
            history=MappingProxyType({series: self._history[series].values() for series in Series}),
        )
        return self._state

    def _graph_due(self, series: Series, now: float) -> bool:
        settings = self.graph(series)
        if not settings.animate:
            return False
        throttle = self._graph_throttles[series]
        throttle.interval = settings.interval
        return throttle.ready(now)

    def _record(self, series: Series, value: float, now: float) -> None:
        history = self._history[series]
        history.capacity = self.graph(series).max_points
        history.append(value)
        self._graph_throttles[series].mark(now)

    def process_table(self, filter_text: str = "") -> list[ProcessRecord]:
        """Filtered and sorted view of the latest process sample."""
        return build_process_table(self._state.processes, filter_text)
