from datetime import timedelta

from fdbexplorer.interval import IntervalControl


def test_default_is_five_seconds():
    assert IntervalControl().duration() == timedelta(seconds=5)


def test_next_walks_through_intervals():
    control = IntervalControl()
    seen = [control.duration()]
    for _ in range(3):
        control.next()
        seen.append(control.duration())
    assert seen == [timedelta(seconds=s) for s in (5, 3, 1, 10)]


def test_next_wraps_around():
    control = IntervalControl()
    first = control.duration()
    for _ in range(4):
        control.next()
    assert control.duration() == first


def test_controls_are_independent():
    a = IntervalControl()
    b = IntervalControl()
    a.next()
    assert a.duration() != b.duration()
    assert b.duration() == timedelta(seconds=5)