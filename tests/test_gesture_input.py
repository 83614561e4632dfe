import pytest

from location_map.widget.gesture_input import GestureCallbacks, GestureInput


class Recorder:
    def __init__(self):
        self.events = []

    def callbacks(self):
        return GestureCallbacks(
            began=lambda session: self.events.append(("began", session)),
            updated=lambda session, ts, factor, dx, dy: self.events.append(
                ("updated", session, ts, factor, dx, dy)
            ),
            ended=lambda session: self.events.append(("ended", session)),
        )

    def kinds(self):
        return [event[0] for event in self.events]

    def updates(self):
        return [event for event in self.events if event[0] == "updated"]


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def gesture_input(recorder):
    ticks = iter(range(1, 1000))
    return GestureInput(recorder.callbacks(), clock=lambda: float(next(ticks)))


def test_click_without_drag_opens_no_session(gesture_input, recorder):
    gesture_input.press(10, 10)
    assert gesture_input.move(12, 11) is False
    assert gesture_input.release(12, 11) is True
    assert recorder.events == []


def test_drag_reports_cumulative_offset_from_press(gesture_input, recorder):
    gesture_input.press(0, 0)
    assert gesture_input.move(10, 0) is True
    gesture_input.move(25, -5)
    assert gesture_input.release(30, -5) is False

    assert recorder.kinds() == ["began", "updated", "updated", "updated", "ended"]
    offsets = [(dx, dy) for _, _, _, _, dx, dy in recorder.updates()]
    assert offsets == [(10, 0), (25, -5), (30, -5)]
    assert all(factor == 1.0 for _, _, _, factor, _, _ in recorder.updates())


def test_pinch_reports_total_factor(gesture_input, recorder):
    gesture_input.pinch_started()
    gesture_input.pinch_changed(1.5)
    gesture_input.pinch_changed(2.0)
    gesture_input.pinch_finished()

    assert recorder.events[0] == ("began", 1)
    assert [event[3] for event in recorder.updates()] == [1.5, 2.0]
    assert recorder.events[-1] == ("ended", 1)


def test_pinch_and_drag_share_one_session(gesture_input, recorder):
    gesture_input.press(0, 0)
    gesture_input.move(10, 0)
    gesture_input.pinch_changed(2.0)
    gesture_input.release(10, 0)

    assert gesture_input.active
    assert "ended" not in recorder.kinds()

    gesture_input.pinch_finished()

    assert recorder.kinds().count("began") == 1
    assert recorder.events[-1] == ("ended", 1)
    last_update = recorder.updates()[-1]
    assert last_update[3:] == (2.0, 10, 0)


def test_standalone_wheel_notch_is_its_own_session(gesture_input, recorder):
    gesture_input.wheel(1.15)
    gesture_input.wheel(1.15)

    assert recorder.kinds() == ["began", "updated", "ended"] * 2
    assert [event[1] for event in recorder.events] == [1, 1, 1, 2, 2, 2]
    assert [event[3] for event in recorder.updates()] == [1.15, 1.15]


def test_wheel_during_pinch_multiplies_factor(gesture_input, recorder):
    gesture_input.pinch_changed(2.0)
    gesture_input.wheel(1.5)

    assert recorder.kinds().count("began") == 1
    assert recorder.updates()[-1][3] == 3.0
    assert gesture_input.session_id == 1


def test_session_ids_increase(gesture_input, recorder):
    for _ in range(3):
        gesture_input.pinch_started()
        gesture_input.pinch_finished()
    began = [event[1] for event in recorder.events if event[0] == "began"]
    assert began == [1, 2, 3]


def test_timestamps_strictly_increase_with_stalled_clock(recorder):
    gesture_input = GestureInput(recorder.callbacks(), clock=lambda: 5.0)
    gesture_input.pinch_changed(1.1)
    gesture_input.pinch_changed(1.2)
    gesture_input.pinch_changed(1.3)

    stamps = [event[2] for event in recorder.updates()]
    assert stamps[0] == 5000.0
    assert stamps[0] < stamps[1] < stamps[2]


def test_cancel_all_ends_open_session(gesture_input, recorder):
    gesture_input.press(0, 0)
    gesture_input.move(20, 0)
    gesture_input.cancel_all()

    assert not gesture_input.active
    assert gesture_input.session_id is None
    assert recorder.events[-1] == ("ended", 1)
    assert gesture_input.release(30, 0) is False


def test_cancel_all_when_idle_is_silent(gesture_input, recorder):
    gesture_input.cancel_all()
    assert recorder.events == []
