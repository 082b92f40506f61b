import pytest

from autodump.runtime.window import RollingWindow


def test_window_never_exceeds_capacity():
    window = RollingWindow()
    for i in range(25):
        window.push(i)
        assert len(window) <= 10


def test_window_keeps_most_recent_in_order():
    window = RollingWindow()
    for i in range(13):
        window.push(i)
    assert window.samples() == list(range(3, 13))


def test_window_average_is_mean_of_held_samples():
    window = RollingWindow(capacity=3)
    for sample in (1, 2, 3, 10):
        window.push(sample)
    assert window.samples() == [2, 3, 10]
    assert window.average() == pytest.approx(5.0)


def test_empty_window_average_rejected():
    with pytest.raises(ValueError):
        RollingWindow().average()


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        RollingWindow(capacity=0)
