import pytest

from blink_gate.models import BlinkDetector, ConfigError


def feed(det, values, start_ms=0.0, step_ms=100.0):
    t = start_ms
    for v in values:
        det.update(v, v, t)
        t += step_ms
    return t


def test_constant_ear_never_blinks():
    det = BlinkDetector()
    feed(det, [0.3] * 200)
    assert det.blink_count == 0
    assert det.last_blink_time_ms is None
    assert not det.is_blinking


def test_blink_is_edge_triggered():
    det = BlinkDetector()
    feed(det, [0.3] * 20)
    started = [det.update(v, v, 2000.0 + i * 100) for i, v in enumerate([0.1, 0.1, 0.1, 0.3])]
    assert started == [True, False, False, False]
    assert det.blink_count == 1
    assert det.last_blink_time_ms == 2000.0
    assert not det.is_blinking


def test_rearms_after_open_frame():
    det = BlinkDetector()
    feed(det, [0.3] * 20 + [0.1, 0.3, 0.1, 0.3, 0.1])
    assert det.blink_count == 3


def test_uses_average_of_both_eyes():
    det = BlinkDetector()
    feed(det, [0.3] * 20)
    # one eye closing halfway is not enough on its own
    assert det.update(0.3, 0.25, 2000.0) is False
    assert det.update(0.1, 0.1, 2100.0) is True


def test_history_is_bounded():
    det = BlinkDetector(rolling_average_count=5)
    feed(det, [0.3] * 4)
    assert len(det.history) == 4
    feed(det, [0.2, 0.25, 0.3] * 10)
    assert len(det.history) == 5
    assert det.rolling_average() == pytest.approx((0.25 + 0.3 + 0.2 + 0.25 + 0.3) / 5)


def test_baseline_includes_current_sample_by_default():
    det = BlinkDetector(rolling_average_count=4)
    feed(det, [0.3] * 4)
    # mean with the 0.26 sample is 0.29, threshold 0.2552
    assert det.update(0.26, 0.26, 400.0) is False


def test_exclude_current_from_baseline():
    det = BlinkDetector(rolling_average_count=4, exclude_current_from_baseline=True)
    feed(det, [0.3] * 4)
    # compared against the previous mean 0.3, threshold 0.264
    assert det.update(0.26, 0.26, 400.0) is True
    assert len(det.history) == 4


def test_exclude_mode_first_sample_never_blinks():
    det = BlinkDetector(exclude_current_from_baseline=True)
    assert det.update(0.05, 0.05, 0.0) is False
    assert det.blink_count == 0


def test_recency_window():
    det = BlinkDetector(blink_duration_ms=3000)
    assert not det.is_recent(0.0)
    feed(det, [0.3] * 20)
    det.update(0.1, 0.1, 5000.0)
    assert det.is_recent(7999.0)
    assert not det.is_recent(8000.0)


def test_reset():
    det = BlinkDetector()
    feed(det, [0.3] * 20 + [0.1])
    det.reset()
    assert det.blink_count == 0
    assert len(det.history) == 0
    assert det.rolling_average() is None


@pytest.mark.parametrize(
    "kwargs",
    [
        {"rolling_average_count": 0},
        {"blink_threshold": 0.0},
        {"blink_threshold": 1.5},
        {"blink_duration_ms": 0},
    ],
)
def test_invalid_parameters(kwargs):
    with pytest.raises(ConfigError):
        BlinkDetector(**kwargs)
