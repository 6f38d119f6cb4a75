# ecg_engine/strip_buffer.py
import math
import numpy as np
from typing import Dict, Iterable, Tuple

from .constants import LEAD_NAMES
from .engine import SampleBuffer


class StripChartBuffer:
    """
    Fixed-width scrolling window of recent samples, one ring per lead.

    Samples are placed by absolute sample index (t_start / dt), never by
    arrival time, so late or uneven polling does not smear the trace. Once
    more than window_sec of signal has arrived the oldest samples are dropped.
    Call clear() after the engine is reset or reloaded, since its clock restarts at 0.
    """

    def __init__(self, window_sec: float, sample_rate_hz: float, leads: Iterable[str] = LEAD_NAMES):
        if window_sec <= 0 or sample_rate_hz <= 0:
            raise ValueError("window_sec and sample_rate_hz must be positive")
        self.dt = 1.0 / sample_rate_hz
        self.capacity = max(1, int(round(window_sec * sample_rate_hz)))
        self.leads = tuple(leads)
        self._values: Dict[str, np.ndarray] = {
            lead: np.zeros(self.capacity, dtype=np.float32) for lead in self.leads
        }
        self._indices = np.full(self.capacity, -1, dtype=np.int64)
        self._newest = -1

    def __len__(self):
        return int(np.count_nonzero(self._live_mask()))

    def clear(self) -> None:
        self._indices.fill(-1)
        for values in self._values.values():
            values.fill(0.0)
        self._newest = -1

    def append(self, buffer: SampleBuffer) -> None:
        if not math.isclose(buffer.dt, self.dt, rel_tol=1e-9):
            raise ValueError(f"Chunk dt {buffer.dt} does not match strip dt {self.dt}")
        n = buffer.n_samples
        if n == 0:
            return
        start = int(round(buffer.t_start / self.dt))
        newest = max(self._newest, start + n - 1)
        # Samples older than the visible window would overwrite newer ones in the ring.
        skip = max(0, newest - self.capacity + 1 - start)
        if skip >= n:
            return
        absolute = np.arange(start + skip, start + n, dtype=np.int64)
        slots = absolute % self.capacity
        for lead in self.leads:
            self._values[lead][slots] = buffer.data[lead][skip:]
        self._indices[slots] = absolute
        self._newest = newest

    def _live_mask(self) -> np.ndarray:
        oldest_visible = self._newest - self.capacity + 1
        return (self._indices >= 0) & (self._indices >= oldest_visible)

    def window(self, lead: str) -> Tuple[np.ndarray, np.ndarray]:
        """Visible (times, values) for one lead, oldest first."""
        live = self._live_mask()
        indices = self._indices[live]
        order = np.argsort(indices, kind="stable")
        return indices[order] * self.dt, self._values[lead][live][order]
