import numpy as np
import pytest

from towersim.config.sensors import SENSOR_ORDER
from towersim.core.window_buffer import StreamWindowBuffer, initialize_window_buffers


def _fill(buf: StreamWindowBuffer, n: int, step: float = 0.05) -> None:
    for i in range(n + 1):
        buf.append(i * step, float(i))


def test_samples_older_than_window_are_evicted() -> None:
    buf = StreamWindowBuffer(10.0)
    _fill(buf, 240)  # 0.00 .. 12.00 s
    oldest, newest = buf.time_span()
    assert newest == pytest.approx(12.0)
    assert oldest >= newest - 10.0
    # the sample just before the oldest kept one was dropped
    assert oldest - 0.05 < newest - 10.0
    assert all(t >= newest - 10.0 for t, _ in buf)


def test_nothing_evicted_inside_window() -> None:
    buf = StreamWindowBuffer(10.0)
    _fill(buf, 100)  # 0 .. 5 s
    assert len(buf) == 101
    assert buf.time_span()[0] == 0.0


def test_explicit_evict_with_narrower_window() -> None:
    buf = StreamWindowBuffer(10.0)
    for t in range(10):
        buf.append(float(t), 0.0)
    dropped = buf.evict(3.0)
    assert dropped == 6
    assert [t for t, _ in buf] == [6.0, 7.0, 8.0, 9.0]
    assert StreamWindowBuffer().evict(1.0) == 0


def test_current_range_holds_then_slides() -> None:
    buf = StreamWindowBuffer(10.0)
    assert buf.current_range() == (0.0, 10.0)
    buf.append(4.0, 1.0)
    assert buf.current_range() == (0.0, 10.0)
    buf.append(10.0, 1.0)
    assert buf.current_range() == (0.0, 10.0)
    buf.append(12.5, 1.0)
    assert buf.current_range() == pytest.approx((2.5, 12.5))


def test_timestamps_must_not_go_backwards() -> None:
    buf = StreamWindowBuffer(10.0)
    buf.append(1.0, 0.0)
    buf.append(1.0, 0.5)
    with pytest.raises(ValueError):
        buf.append(0.5, 0.0)


def test_series_and_clear() -> None:
    buf = StreamWindowBuffer(5.0)
    buf.append(0.0, 1.0)
    buf.append(1.0, 2.0)
    times, values = buf.series()
    np.testing.assert_array_equal(times, [0.0, 1.0])
    np.testing.assert_array_equal(values, [1.0, 2.0])
    assert buf.latest() == (1.0, 2.0)
    buf.clear()
    assert len(buf) == 0
    assert buf.latest() is None
    assert buf.time_span() is None
    assert buf.series()[0].size == 0


def test_initialize_creates_independent_buffers() -> None:
    buffers = initialize_window_buffers(window_seconds=2.0)
    assert list(buffers) == list(SENSOR_ORDER)
    first, second = buffers[SENSOR_ORDER[0]], buffers[SENSOR_ORDER[1]]
    first.append(0.0, 1.0)
    assert len(second) == 0
    assert first.window_seconds == 2.0


def test_window_must_be_positive() -> None:
    with pytest.raises(ValueError):
        StreamWindowBuffer(0.0)
