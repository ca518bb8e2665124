import pytest

from localcooks.domain.video_watch import (
    COMPLETION_THRESHOLD,
    WatchSegment,
    WatchTracker,
    accept_segment,
    compute_watched_percentage,
    is_complete,
)


class TestAcceptSegment:
    def test_short_forward_step_is_kept(self):
        assert accept_segment(10.0, 11.5) == WatchSegment(10.0, 11.5)

    def test_step_of_exactly_two_seconds_is_continuous(self):
        assert accept_segment(4.0, 6.0) == WatchSegment(4.0, 6.0)

    @pytest.mark.parametrize(
        "previous,current",
        [(10.0, 10.0), (10.0, 9.0), (10.0, 12.01), (0.0, 120.0)],
    )
    def test_jumps_and_rewinds_are_dropped(self, previous, current):
        assert accept_segment(previous, current) is None

    def test_seeking_tick_is_dropped(self):
        assert accept_segment(10.0, 11.0, seeking=True) is None


class TestComputeWatchedPercentage:
    def test_zero_or_negative_duration(self):
        segments = [WatchSegment(0, 10)]
        assert compute_watched_percentage(segments, 0) == 0.0
        assert compute_watched_percentage(segments, -5) == 0.0

    def test_disjoint_segments_are_summed(self):
        segments = [WatchSegment(0, 10), WatchSegment(50, 60)]
        assert compute_watched_percentage(segments, 100) == pytest.approx(20.0)

    def test_overlaps_are_counted_once_regardless_of_order(self):
        segments = [WatchSegment(5, 15), WatchSegment(0, 10), WatchSegment(12, 14)]
        assert compute_watched_percentage(segments, 100) == pytest.approx(15.0)

    def test_rewatching_the_same_range_does_not_inflate(self):
        segments = [WatchSegment(0, 30)] * 4
        assert compute_watched_percentage(segments, 60) == pytest.approx(50.0)

    def test_result_is_capped_at_100(self):
        assert compute_watched_percentage([WatchSegment(0, 150)], 100) == 100.0


class TestIsComplete:
    def test_threshold(self):
        assert COMPLETION_THRESHOLD == 90.0
        assert is_complete(90.0)
        assert not is_complete(89.99)

    def test_natural_end_completes(self):
        assert is_complete(12.0, ended=True)


class TestWatchTracker:
    def test_continuous_playback_accumulates(self):
        tracker = WatchTracker(duration=10.0)
        for second in range(0, 11):
            tracker.tick(float(second))
        assert tracker.watched_percentage == pytest.approx(100.0)
        assert tracker.completed

    def test_scrubbing_to_the_end_does_not_complete(self):
        tracker = WatchTracker(duration=100.0)
        tracker.tick(0.0)
        tracker.tick(1.0)
        tracker.seek(95.0)
        tracker.tick(96.0)
        tracker.tick(99.0)  # 3s jump, not continuous
        assert tracker.watched_percentage == pytest.approx(2.0)
        assert not tracker.completed

    def test_mark_ended_completes_regardless_of_coverage(self):
        tracker = WatchTracker(duration=100.0)
        tracker.tick(0.0)
        tracker.tick(1.0)
        tracker.mark_ended()
        assert tracker.completed

    def test_seeking_flag_drops_the_tick(self):
        tracker = WatchTracker(duration=10.0)
        tracker.tick(0.0)
        tracker.tick(1.0, seeking=True)
        tracker.tick(2.0)
        assert tracker.segments == [WatchSegment(1.0, 2.0)]
