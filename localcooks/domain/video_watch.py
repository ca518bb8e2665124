"""Watched-coverage arithmetic shared by the progress service, schemas and tests.

A player reports ``timeupdate`` ticks. Only short forward steps count as
watching; seeks and jumps are discarded so that scrubbing to the end of a
video never marks it as watched.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

COMPLETION_THRESHOLD: float = 90.0
MAX_CONTINUOUS_STEP_SECONDS: float = 2.0


@dataclass(frozen=True)
class WatchSegment:
    start: float
    end: float

    @property
    def length(self) -> float:
        return max(0.0, self.end - self.start)


def accept_segment(
    previous_time: float, current_time: float, seeking: bool = False
) -> Optional[WatchSegment]:
    """Return the segment between two ticks when playback was continuous."""
    if seeking:
        return None
    step = current_time - previous_time
    if step <= 0 or step > MAX_CONTINUOUS_STEP_SECONDS:
        return None
    return WatchSegment(previous_time, current_time)


def compute_watched_percentage(segments: Iterable[WatchSegment], duration: float) -> float:
    """Merge overlapping segments and return coverage of ``duration`` in 0..100."""
    if not duration or duration <= 0:
        return 0.0

    total = 0.0
    last_end = -1.0
    for segment in sorted(segments, key=lambda s: s.start):
        if segment.start > last_end:
            total += segment.length
        elif segment.end > last_end:
            total += segment.end - last_end
        last_end = max(last_end, segment.end)

    return min(total / duration * 100.0, 100.0)


def is_complete(watched_percentage: float, ended: bool = False) -> bool:
    return ended or watched_percentage >= COMPLETION_THRESHOLD


@dataclass
class WatchTracker:
    """Accumulates player ticks for one video."""

    duration: float
    segments: List[WatchSegment] = field(default_factory=list)
    ended: bool = False
    _last_time: Optional[float] = None

    def tick(self, current_time: float, seeking: bool = False) -> None:
        if self._last_time is not None:
            segment = accept_segment(self._last_time, current_time, seeking)
            if segment is not None:
                self.segments.append(segment)
        self._last_time = current_time

    def seek(self, target_time: float) -> None:
        self._last_time = target_time

    def mark_ended(self) -> None:
        self.ended = True

    @property
    def watched_percentage(self) -> float:
        return compute_watched_percentage(self.segments, self.duration)

    @property
    def completed(self) -> bool:
        return is_complete(self.watched_percentage, self.ended)
