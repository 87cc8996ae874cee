"""pymon - Textual front end for the sampling core."""

import argparse
import logging
from collections.abc import Iterable, Mapping, Sequence

from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal
from textual.widgets import DataTable, Footer, Input, Sparkline, Static, TabbedContent, TabPane

from pymon.config import ConfigurationError, MonitorConfig
from pymon.formatting import capped_ratio, format_bytes, format_network_bytes
from pymon.models import NetworkInterfaceSnapshot, ProcessRecord
from pymon.monitor import MonitorState, Series, SystemMonitor
from pymon.scheduler import GraphSettings
from pymon.table import ProcessSelection, build_process_table

logger = logging.getLogger(__name__)

BAR_WIDTH = 20


def render_bar(fraction: float, color: str) -> str:
    """Render a fraction in [0, 1] as a fixed-width markup bar."""
    filled = min(BAR_WIDTH, max(0, int(fraction * BAR_WIDTH)))
    return f"[{color}]█[/{color}]" * filled + "[dim]░[/dim]" * (BAR_WIDTH - filled)


class HeaderStats(Static):
    """Header widget showing identity, process census and memory usage."""

    DEFAULT_CSS = """
    HeaderStats {
        height: auto;
        min-height: 7;
        padding: 0 1;
        background: $surface;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize HeaderStats."""
        super().__init__(*args, **kwargs)
        self._state: MonitorState | None = None

    def compose(self) -> ComposeResult:
        """Compose the header stats layout."""
        yield Horizontal(
            Static(self._get_system_info(), id="system-info"),
            Static(self._get_mem_info(), id="mem-info"),
        )

    def update_stats(self, state: MonitorState) -> None:
        """Update the statistics from a monitor state."""
        self._state = state
        try:
            self.query_one("#system-info", Static).update(self._get_system_info())
            self.query_one("#mem-info", Static).update(self._get_mem_info())
        except Exception:
            pass  # Widget not mounted yet

    def _get_system_info(self) -> str:
        if self._state is None:
            return "Loading system info..."
        identity = self._state.identity
        census = identity.census
        return (
            f"OS: {identity.os_label}\n"
            f"User: {identity.username}  Host: {identity.hostname}\n"
            f"CPU: {identity.cpu_label}\n"
            f"Tasks: {census.total} total, {census.running} running, "
            f"{census.sleeping} sleeping, {census.stopped} stopped, {census.zombie} zombie"
        )

    def _get_mem_info(self) -> str:
        if self._state is None or self._state.memory.total_ram == 0:
            return "Loading memory info..."
        mem = self._state.memory
        # Snapshot values are kB
        return (
            f"Mem \\[{render_bar(mem.ram_fraction, 'cyan')}] "
            f"{format_bytes(mem.used_ram * 1024)} / {format_bytes(mem.total_ram * 1024)}\n"
            f"Swp \\[{render_bar(mem.swap_fraction, 'yellow')}] "
            f"{format_bytes(mem.used_swap * 1024)} / {format_bytes(mem.total_swap * 1024)}\n"
            f"Disk\\[{render_bar(mem.disk_fraction, 'magenta')}] "
            f"{format_bytes(mem.used_disk * 1024)} / {format_bytes(mem.total_disk * 1024)}"
        )


# Fan history is kept in rpm and plotted in hundreds of rpm
PLOT_DIVISORS = {Series.FAN: 100.0}
SCALE_UNITS = {Series.CPU: "%", Series.FAN: " rpm", Series.THERMAL: "°C"}


def plot_values(series: Series, values: Iterable[float], settings: GraphSettings) -> list[float]:
    """Convert history to plot units and clamp it to the graph's y-scale."""
    divisor = PLOT_DIVISORS.get(series, 1.0)
    return settings.clip(value / divisor for value in values)


def graph_label(series: Series, reading: str, settings: GraphSettings, selected: bool = False) -> str:
    """Title line of one graph: reading, rate or pause state, and plotted range."""
    marker = "▶ " if selected else "  "
    status = f"{settings.fps:g} fps" if settings.animate else "paused"
    top = settings.y_scale * PLOT_DIVISORS.get(series, 1.0)
    return f"{marker}{reading}  [{status}, 0-{top:g}{SCALE_UNITS[series]}]"


class GraphPanel(Container):
    """Sparklines for the CPU, fan and thermal history."""

    DEFAULT_CSS = """
    GraphPanel {
        height: auto;
        layout: grid;
        grid-size: 3;
        grid-gutter: 0 2;
        padding: 0 1;
    }
    GraphPanel Sparkline {
        height: 3;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize GraphPanel."""
        super().__init__(*args, **kwargs)
        self.selected = Series.CPU

    def compose(self) -> ComposeResult:
        """Compose one label and sparkline per series."""
        for series in Series:
            yield Static(series.value.upper(), id=f"{series.value}-label")
        for series in Series:
            yield Sparkline([], summary_function=max, id=f"{series.value}-graph")

    def select_next(self) -> Series:
        """Move the graph controls to the next series."""
        members = list(Series)
        self.selected = members[(members.index(self.selected) + 1) % len(members)]
        return self.selected

    def update_graphs(self, state: MonitorState, settings: Mapping[Series, GraphSettings]) -> None:
        """Push the latest history into the sparklines."""
        readings = {
            Series.CPU: f"CPU {state.cpu.usage_percent:5.1f}%" if state.cpu else "CPU",
            Series.FAN: self._fan_label(state),
            Series.THERMAL: self._thermal_label(state),
        }
        for series in Series:
            graph = settings[series]
            try:
                self.query_one(f"#{series.value}-label", Static).update(
                    graph_label(series, readings[series], graph, series is self.selected)
                )
                self.query_one(f"#{series.value}-graph", Sparkline).data = plot_values(
                    series, state.history.get(series, ()), graph
                )
            except Exception:
                pass  # Widget not mounted yet

    @staticmethod
    def _fan_label(state: MonitorState) -> str:
        if state.fan is None:
            return "FAN"
        suffix = " (simulated)" if state.fan.simulated else ""
        return f"FAN {state.fan.speed} rpm L{state.fan.level}{suffix}"

    @staticmethod
    def _thermal_label(state: MonitorState) -> str:
        if state.thermal is None:
            return "THERMAL"
        suffix = " (simulated)" if state.thermal.simulated else ""
        return f"THERMAL {state.thermal.temperature:.1f}°C{suffix}"


class ProcessTable(Container):
    """Container for the filter input and the process data table."""

    DEFAULT_CSS = """
    ProcessTable {
        height: 1fr;
        border: solid $primary;
    }
    ProcessTable Input {
        dock: top;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize ProcessTable."""
        super().__init__(*args, **kwargs)
        self._current_pids: list[int] = []
        self._records: list[ProcessRecord] = []
        self.filter_text: str = ""
        self.selection = ProcessSelection()

    def compose(self) -> ComposeResult:
        """Compose the filter input and the process table."""
        yield Input(placeholder="Filter by name", id="process-filter")
        yield DataTable(id="process-table")

    def on_mount(self) -> None:
        """Initialize the data table when mounted."""
        table = self.query_one("#process-table", DataTable)
        table.cursor_type = "row"

        table.add_column("", key="selected", width=1)
        table.add_column("PID", key="pid", width=8)
        table.add_column("Name", key="name", width=24)
        table.add_column("S", key="state", width=3)
        table.add_column("CPU ticks", key="cpu", width=10)
        table.add_column("MEM%", key="mem", width=7)
        table.add_column("RES", key="rss", width=12)

    def on_input_changed(self, event: Input.Changed) -> None:
        """Re-filter the table as the filter text changes."""
        self.filter_text = event.value
        self.update_processes(self._records)

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        """Enter selects a single row."""
        self.select_row(event.row_key.value, multi=False)

    def highlighted_pid(self) -> int | None:
        """PID of the row under the cursor."""
        table = self.query_one("#process-table", DataTable)
        if table.row_count == 0:
            return None
        try:
            row_key = table.coordinate_to_cell_key(table.cursor_coordinate).row_key
        except Exception:
            return None
        return int(row_key.value) if row_key.value is not None else None

    def select_row(self, row_key: str | None, multi: bool) -> None:
        if row_key is None:
            return
        self.selection.select(int(row_key), multi=multi)
        self.update_processes(self._records)

    def update_processes(self, processes: Sequence[ProcessRecord]) -> None:
        """
        Update the process table with new data.

        Uses update_cell when the visible order is unchanged to avoid
        re-rendering the whole table.
        """
        self._records = list(processes)
        self.selection.prune(proc.pid for proc in processes)
        visible = build_process_table(processes, self.filter_text)
        table = self.query_one("#process-table", DataTable)

        new_pids = [proc.pid for proc in visible]
        if new_pids == self._current_pids:
            for proc in visible:
                self._update_row(table, str(proc.pid), proc)
        else:
            table.clear()
            for proc in visible:
                self._add_row(table, str(proc.pid), proc)
        self._current_pids = new_pids

    def _cells(self, proc: ProcessRecord) -> tuple[str, ...]:
        return (
            "*" if proc.pid in self.selection else "",
            str(proc.pid),
            proc.name[:24],
            proc.state,
            str(proc.cpu_ticks),
            f"{proc.memory_percent:5.1f}",
            format_bytes(proc.memory_kb * 1024),
        )

    def _update_row(self, table: DataTable, row_key: str, proc: ProcessRecord) -> None:
        columns = ("selected", "pid", "name", "state", "cpu", "mem", "rss")
        try:
            for column, value in zip(columns, self._cells(proc)):
                table.update_cell(row_key, column, value)
        except Exception:
            pass  # Row may have been removed

    def _add_row(self, table: DataTable, row_key: str, proc: ProcessRecord) -> None:
        try:
            table.add_row(*self._cells(proc), key=row_key)
        except Exception:
            pass  # Row may already exist


# (header, attribute) pairs after the byte count and gauge columns
RX_COUNTERS = (
    ("Packets", "rx_packets"),
    ("Errs", "rx_errs"),
    ("Drop", "rx_drop"),
    ("FIFO", "rx_fifo"),
    ("Frame", "rx_frame"),
    ("Compressed", "rx_compressed"),
    ("Multicast", "rx_multicast"),
)
TX_COUNTERS = (
    ("Packets", "tx_packets"),
    ("Errs", "tx_errs"),
    ("Drop", "tx_drop"),
    ("FIFO", "tx_fifo"),
    ("Colls", "tx_colls"),
    ("Carrier", "tx_carrier"),
    ("Compressed", "tx_compressed"),
)


class CounterTable(DataTable):
    """Per-interface counters for one direction of traffic."""

    def __init__(
        self,
        bytes_attribute: str,
        counters: tuple[tuple[str, str], ...],
        gauge_color: str,
        **kwargs,
    ) -> None:
        """
        Initialize CounterTable.

        Args:
            bytes_attribute: Snapshot field holding the byte count.
            counters: (header, snapshot field) pairs for the remaining counters.
            gauge_color: Markup color of the usage gauge.
        """
        super().__init__(**kwargs)
        self.bytes_attribute = bytes_attribute
        self.counters = counters
        self.gauge_color = gauge_color

    def on_mount(self) -> None:
        """Add the columns when mounted."""
        self.add_column("Interface", key="name", width=12)
        self.add_column("IPv4", key="ip", width=16)
        self.add_column("Bytes", key="bytes", width=12)
        self.add_column("Usage", key="usage", width=BAR_WIDTH)
        for header, attribute in self.counters:
            self.add_column(header, key=attribute)

    def update_interfaces(self, interfaces: Sequence[NetworkInterfaceSnapshot]) -> None:
        """Replace the rows with the latest interface counters."""
        self.clear()
        for iface in interfaces:
            byte_count = getattr(iface, self.bytes_attribute)
            self.add_row(
                iface.name,
                iface.ipv4_address,
                format_network_bytes(byte_count),
                render_bar(capped_ratio(byte_count), self.gauge_color),
                *(str(getattr(iface, attribute)) for _, attribute in self.counters),
                key=iface.name,
            )


class NetworkTable(Container):
    """Receive and transmit counters per interface, with gauges on a capped 2 GB scale."""

    DEFAULT_CSS = """
    NetworkTable {
        height: auto;
        max-height: 14;
        border: solid $secondary;
    }
    NetworkTable CounterTable {
        height: auto;
        max-height: 10;
    }
    """

    def compose(self) -> ComposeResult:
        """Compose one tab per direction."""
        with TabbedContent():
            with TabPane("Receive", id="rx-tab"):
                yield CounterTable("rx_bytes", RX_COUNTERS, "green", id="network-rx")
            with TabPane("Transmit", id="tx-tab"):
                yield CounterTable("tx_bytes", TX_COUNTERS, "blue", id="network-tx")

    def update_interfaces(self, interfaces: Sequence[NetworkInterfaceSnapshot]) -> None:
        """Refresh both directions."""
        for table in self.query(CounterTable):
            table.update_interfaces(interfaces)


class PymonApp(App):
    """Main pymon application."""

    TITLE = "pymon"
    SUB_TITLE = "Linux Telemetry Monitor"
    AUTO_FOCUS = "#process-table"

    CSS = """
    Screen {
        layout: vertical;
    }

    Horizontal {
        height: auto;
    }

    #system-info {
        width: 1fr;
        padding-right: 2;
    }

    #mem-info {
        width: 1fr;
        padding-left: 2;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("a", "toggle_animation", "Animate all"),
        ("g", "next_graph", "Next graph"),
        ("p", "toggle_graph", "Pause graph"),
        ("plus", "graph_fps(5)", "FPS+"),
        ("minus", "graph_fps(-5)", "FPS-"),
        ("right_square_bracket", "graph_scale(10)", "Scale+"),
        ("left_square_bracket", "graph_scale(-10)", "Scale-"),
        ("slash", "search", "Filter"),
        ("space", "toggle_select", "Select"),
    ]

    def __init__(self, monitor: SystemMonitor | None = None) -> None:
        """Initialize the PymonApp."""
        super().__init__()
        self._monitor = monitor or SystemMonitor()

    @property
    def monitor(self) -> SystemMonitor:
        return self._monitor

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield HeaderStats(id="header-stats")
        yield GraphPanel(id="graphs")
        yield ProcessTable()
        yield NetworkTable()
        yield Footer()

    def on_mount(self) -> None:
        """Start polling the monitor once the app is mounted."""
        self.call_after_refresh(self._check_for_updates)
        self.set_interval(self._monitor.config.refresh_interval, self._check_for_updates)

    def _check_for_updates(self) -> None:
        """Poll the monitor and refresh the UI."""
        state = self._monitor.poll()
        self._update_ui(state)

    def _update_ui(self, state: MonitorState) -> None:
        """Update the UI with the new monitor state."""
        try:
            self.query_one("#header-stats", HeaderStats).update_stats(state)
            self.query_one(GraphPanel).update_graphs(state, self._monitor.graphs())
            self.query_one(ProcessTable).update_processes(state.processes)
            self.query_one(NetworkTable).update_interfaces(state.network)
        except Exception:
            logger.exception("Failed to refresh the display")

    def action_toggle_animation(self) -> None:
        """Freeze or resume all graphs."""
        enabled = self._monitor.toggle_animation()
        self.notify(f"Animation: {'on' if enabled else 'off'}")

    def _refresh_graphs(self) -> None:
        self.query_one(GraphPanel).update_graphs(self._monitor.state, self._monitor.graphs())

    def action_next_graph(self) -> None:
        """Point the graph controls at the next series."""
        self.query_one(GraphPanel).select_next()
        self._refresh_graphs()

    def action_toggle_graph(self) -> None:
        """Freeze or resume the selected graph."""
        series = self.query_one(GraphPanel).selected
        enabled = self._monitor.toggle_series(series)
        self._refresh_graphs()
        self.notify(f"{series.value.upper()} animation: {'on' if enabled else 'off'}")

    def action_graph_fps(self, delta: float) -> None:
        """Change the sampling rate of the selected graph."""
        self._monitor.adjust_fps(self.query_one(GraphPanel).selected, delta)
        self._refresh_graphs()

    def action_graph_scale(self, delta: float) -> None:
        """Change the plotted range of the selected graph."""
        self._monitor.adjust_y_scale(self.query_one(GraphPanel).selected, delta)
        self._refresh_graphs()

    def action_search(self) -> None:
        """Move focus to the process filter."""
        self.query_one("#process-filter", Input).focus()

    def action_toggle_select(self) -> None:
        """Toggle the highlighted process in the multi-selection."""
        table = self.query_one(ProcessTable)
        pid = table.highlighted_pid()
        if pid is not None:
            table.select_row(str(pid), multi=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pymon", description="Linux telemetry monitor")
    parser.add_argument("--fps", type=float, default=30.0, help="graph samples per second (1-60)")
    parser.add_argument("--history", type=int, default=200, help="points kept per graph")
    parser.add_argument("--log-file", help="write debug logs to this file")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Entry point for pymon application."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.log_file:
        logging.basicConfig(
            filename=args.log_file,
            level=logging.DEBUG,
            format="%(asctime)s %(name)s %(levelname)s %(message)s",
        )

    try:
        config = MonitorConfig.with_graphs(fps=args.fps, history=args.history)
    except ConfigurationError as exc:
        parser.error(str(exc))

    app = PymonApp(SystemMonitor(config))
    app.run()


if __name__ == "__main__":
    main()
