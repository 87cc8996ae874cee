"""Interval gating that decouples sampling from the caller's poll rate."""

from collections.abc import Iterable

from pymon.history import DEFAULT_CAPACITY

IDENTITY_INTERVAL = 5.0
MEMORY_INTERVAL = 2.0
NETWORK_INTERVAL = 2.0

MIN_FPS = 1.0
MAX_FPS = 60.0
MIN_Y_SCALE = 10.0
MAX_Y_SCALE = 200.0


def due(last: float | None, now: float, interval: float) -> bool:
    """True once at least interval seconds have passed since last (None is always due)."""
    return last is None or now - last >= interval


class Throttle:
    """Tracks when a sampler last ran and whether it is due again."""

    def __init__(self, interval: float) -> None:
        self.interval = interval
        self.last: float | None = None

    def ready(self, now: float) -> bool:
        return due(self.last, now, self.interval)

    def mark(self, now: float) -> None:
        """Record that a sample was actually taken at now."""
        self.last = now

    def reset(self) -> None:
        self.last = None


class GraphSettings:
    """Display and sampling settings for one graphable series."""

    __slots__ = ("animate", "_fps", "_y_scale", "_max_points")

    def __init__(
        self,
        animate: bool = True,
        fps: float = 30.0,
        y_scale: float = 100.0,
        max_points: int = DEFAULT_CAPACITY,
    ) -> None:
        """
        Initialize GraphSettings.

        Args:
            animate: Whether the series keeps sampling.
            fps: Target samples per second, clamped to 1-60.
            y_scale: Upper bound of the plotted range, clamped to 10-200.
            max_points: History length, at least 1.
        """
        self.animate = animate
        self.fps = fps
        self.y_scale = y_scale
        self.max_points = max_points

    def __repr__(self) -> str:
        return (
            f"GraphSettings(animate={self.animate}, fps={self._fps}, "
            f"y_scale={self._y_scale}, max_points={self._max_points})"
        )

    @property
    def fps(self) -> float:
        """Get the target frame rate."""
        return self._fps

    @fps.setter
    def fps(self, value: float) -> None:
        """Set the target frame rate (1-60)."""
        self._fps = min(MAX_FPS, max(MIN_FPS, float(value)))

    @property
    def y_scale(self) -> float:
        """Get the upper bound of the plotted range."""
        return self._y_scale

    @y_scale.setter
    def y_scale(self, value: float) -> None:
        """Set the upper bound of the plotted range (10-200)."""
        self._y_scale = min(MAX_Y_SCALE, max(MIN_Y_SCALE, float(value)))

    @property
    def max_points(self) -> int:
        return self._max_points

    @max_points.setter
    def max_points(self, value: int) -> None:
        self._max_points = max(1, int(value))

    @property
    def interval(self) -> float:
        """Seconds between samples at the target frame rate."""
        return 1.0 / self._fps

    def clip(self, values: Iterable[float]) -> list[float]:
        """Clamp plotted values into [0, y_scale]."""
        return [min(self._y_scale, max(0.0, value)) for value in values]
