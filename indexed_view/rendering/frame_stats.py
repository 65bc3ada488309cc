"""Rolling frame-time statistics."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

DEFAULT_STATS_WINDOW = 100


@dataclass(frozen=True, slots=True)
class FrameStatsSummary:
    average_frame_seconds: float
    fps: float
    width: int
    height: int
    sample_count: int


class FrameStats:
    """Accumulates inter-frame durations and reports once per window."""

    def __init__(
        self,
        *,
        threshold: int = DEFAULT_STATS_WINDOW,
        time_source: Callable[[], float] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        if threshold <= 0:
            raise ValueError("threshold must be > 0")
        self._threshold = int(threshold)
        self._time_source = time_source or time.perf_counter
        self._logger = logger or _LOG
        self._sample_count = 0
        self._sample_time_sum = 0.0
        self._last_timestamp = self._time_source()
        self._reports = 0

    @property
    def sample_count(self) -> int:
        return self._sample_count

    @property
    def sample_time_sum(self) -> float:
        return self._sample_time_sum

    @property
    def last_timestamp(self) -> float:
        return self._last_timestamp

    @property
    def reports(self) -> int:
        return self._reports

    def record(self, width: int, height: int) -> FrameStatsSummary | None:
        """Add one sample; returns a summary when the window overflows."""
        now = self._time_source()
        self._sample_time_sum += max(0.0, now - self._last_timestamp)
        self._last_timestamp = now
        self._sample_count += 1
        if self._sample_count <= self._threshold:
            return None
        average = self._sample_time_sum / float(self._sample_count)
        summary = FrameStatsSummary(
            average_frame_seconds=average,
            fps=(1.0 / average) if average > 0.0 else 0.0,
            width=int(width),
            height=int(height),
            sample_count=self._sample_count,
        )
        self._logger.info(
            "frame_stats avg_frame_ms=%.3f fps=%.1f size=%sx%s samples=%s",
            summary.average_frame_seconds * 1000.0,
            summary.fps,
            summary.width,
            summary.height,
            summary.sample_count,
        )
        self._sample_count = 0
        self._sample_time_sum = 0.0
        self._reports += 1
        return summary


_LOG = logging.getLogger("indexed_view.rendering.frame_stats")

__all__ = ["DEFAULT_STATS_WINDOW", "FrameStats", "FrameStatsSummary"]
