import pytest

import volley_vision.config as cfg
from volley_vision.errors import ConfigurationError, PreconditionError
from volley_vision.options import SessionOptions
from volley_vision.session import AnnotationSession, SessionState

from conftest import NET_CORNERS


def test_calibration_walks_through_four_steps():
    session = AnnotationSession()
    assert session.state is SessionState.UNCALIBRATED
    assert session.calibration_prompt == cfg.CALIBRATION_PROMPTS[0]

    for step, (x, y) in enumerate(NET_CORNERS[:3], start=1):
        assert session.add_calibration_point(x, y) is None
        assert session.state is SessionState.CALIBRATING
        assert session.calibration_step == step
        assert session.model is None

    model = session.add_calibration_point(*NET_CORNERS[3])
    assert model is session.model
    assert session.state is SessionState.RECORDING
    assert session.calibration_step == 4
    assert session.calibration_prompt is None
    assert list(session.calibration_points) == list(cfg.CALIBRATION_ORDER)


def test_clicks_before_calibration_are_rejected():
    session = AnnotationSession()
    with pytest.raises(PreconditionError):
        session.record_click(10, 10, 0.0)
    session.add_calibration_point(*NET_CORNERS[0])
    with pytest.raises(PreconditionError):
        session.close_rep()
    with pytest.raises(PreconditionError):
        session.end_session()
    with pytest.raises(PreconditionError):
        session.vertical_offset_m(400, 150)


def test_calibration_point_after_calibration_is_rejected(recording_session):
    with pytest.raises(PreconditionError):
        recording_session.add_calibration_point(1, 1)


def test_degenerate_calibration_restarts_calibration():
    session = AnnotationSession()
    for x, y in [(100, 400), (100, 200), (100, 410)]:
        session.add_calibration_point(x, y)
    with pytest.raises(ConfigurationError):
        session.add_calibration_point(100, 205)
    assert session.state is SessionState.UNCALIBRATED
    assert session.calibration_step == 0
    assert session.model is None


def test_bad_reference_height_surfaces_at_finalize():
    session = AnnotationSession(SessionOptions(reference_height_m=0))
    for x, y in NET_CORNERS[:3]:
        session.add_calibration_point(x, y)
    with pytest.raises(ConfigurationError):
        session.add_calibration_point(*NET_CORNERS[3])


def test_record_undo_and_close(recording_session):
    session = recording_session
    session.record_click(100, 400, 0.0)
    session.record_click(400, 150, 1.0)
    session.record_click(999, 999, 1.5)
    undone = session.undo_click()
    assert (undone.x, undone.y) == (999, 999)

    closed = session.close_rep()
    assert closed.peak_height_m == pytest.approx(3.06)
    assert session.reps == (closed,)
    assert session.current_rep.points == []
    assert session.current_rep.color != closed.color


def test_undo_on_empty_rep_returns_none(recording_session):
    assert recording_session.undo_click() is None


def test_closing_an_empty_rep_keeps_nothing(recording_session):
    assert recording_session.close_rep() is None
    assert recording_session.reps == ()


def test_single_point_rep_is_kept_without_metrics(recording_session):
    recording_session.record_click(400, 150, 1.0)
    closed = recording_session.close_rep()
    assert closed is not None
    assert not closed.has_metrics


def test_end_session_summarizes_closed_reps(recording_session):
    session = recording_session
    session.record_click(100, 400, 0.0)
    session.record_click(400, 150, 1.0)
    session.close_rep()
    lower_y = 150 + 0.26 * session.model.pixels_per_meter
    session.record_click(100, 400, 2.0)
    session.record_click(400, lower_y, 3.0)
    session.close_rep()
    session.record_click(500, 100, 4.0)  # left open

    summary = session.end_session()
    assert session.state is SessionState.CLOSED
    assert summary.rep_count == 2
    assert summary.best_index == 0
    assert summary.mean_peak_m == pytest.approx((3.06 + 2.80) / 2)
    assert session.summary() == summary

    with pytest.raises(PreconditionError):
        session.record_click(1, 1, 5.0)
    with pytest.raises(PreconditionError):
        session.close_rep()


def test_summary_needs_closed_session(recording_session):
    with pytest.raises(PreconditionError):
        recording_session.summary()


def test_replay_keeps_closed_reps(recording_session):
    session = recording_session
    session.record_click(100, 400, 0.0)
    session.record_click(400, 150, 1.0)
    session.close_rep()
    session.end_session()

    session.replay()
    assert session.state is SessionState.RECORDING
    assert len(session.reps) == 1
    session.record_click(200, 300, 0.2)
    session.record_click(300, 320, 0.4)
    session.close_rep()
    assert session.end_session().rep_count == 2


def test_replay_discards_open_rep(recording_session):
    recording_session.record_click(200, 300, 0.2)
    recording_session.replay()
    assert recording_session.current_rep.points == []


def test_replay_requires_calibration():
    with pytest.raises(PreconditionError):
        AnnotationSession().replay()


def test_reset_clears_everything(recording_session):
    session = recording_session
    session.record_click(100, 400, 0.0)
    session.record_click(400, 150, 1.0)
    session.close_rep()
    session.end_session()

    session.reset()
    assert session.state is SessionState.UNCALIBRATED
    assert session.model is None
    assert session.reps == ()
    assert session.current_rep.points == []
    assert session.calibration_points == {}


def test_rep_colours_cycle_through_palette():
    palette = ((1, 1, 1), (2, 2, 2))
    session = AnnotationSession(SessionOptions(palette=palette))
    for x, y in NET_CORNERS:
        session.add_calibration_point(x, y)
    colours = []
    for i in range(3):
        session.record_click(100 + i, 400, float(i))
        colours.append(session.close_rep().color)
    assert colours == [(1, 1, 1), (2, 2, 2), (1, 1, 1)]


def test_session_offset_helper(recording_session):
    assert recording_session.vertical_offset_m(400, 150) == pytest.approx(0.63)


def _session_in(state):
    session = AnnotationSession()
    if state is SessionState.UNCALIBRATED:
        return session
    if state is SessionState.CALIBRATING:
        session.add_calibration_point(*NET_CORNERS[0])
        return session
    for x, y in NET_CORNERS:
        session.add_calibration_point(x, y)
    if state is SessionState.CLOSED:
        session.record_click(100, 400, 0.0)
        session.record_click(400, 150, 1.0)
        session.close_rep()
        session.end_session()
    return session


OPERATIONS = {
    "add_calibration_point": (
        lambda s: s.add_calibration_point(10, 10),
        {SessionState.UNCALIBRATED, SessionState.CALIBRATING},
    ),
    "record_click": (lambda s: s.record_click(10, 10, 0.0), {SessionState.RECORDING}),
    "undo_click": (lambda s: s.undo_click(), {SessionState.RECORDING}),
    "close_rep": (lambda s: s.close_rep(), {SessionState.RECORDING}),
    "end_session": (lambda s: s.end_session(), {SessionState.RECORDING}),
    "replay": (lambda s: s.replay(), {SessionState.RECORDING, SessionState.CLOSED}),
    "summary": (lambda s: s.summary(), {SessionState.CLOSED}),
    "vertical_offset_m": (
        lambda s: s.vertical_offset_m(400, 150),
        {SessionState.RECORDING, SessionState.CLOSED},
    ),
}

WRONG_STATE_CASES = [
    (name, state)
    for name, (_, allowed) in OPERATIONS.items()
    for state in SessionState
    if state not in allowed
]


@pytest.mark.parametrize(
    "name,state", WRONG_STATE_CASES, ids=[f"{n}-{s.value}" for n, s in WRONG_STATE_CASES]
)
def test_operation_outside_its_states_is_rejected(name, state):
    session = _session_in(state)
    assert session.state is state
    reps_before = session.reps
    call, _ = OPERATIONS[name]
    with pytest.raises(PreconditionError):
        call(session)
    assert session.state is state
    assert session.reps == reps_before


@pytest.mark.parametrize("palette", [(), []])
def test_empty_palette_is_rejected(palette):
    with pytest.raises(ConfigurationError):
        SessionOptions(palette=palette)


def test_closed_rep_points_are_read_only(recording_session):
    session = recording_session
    session.record_click(100, 400, 0.0)
    session.record_click(400, 150, 1.0)
    closed = session.close_rep()
    session.end_session()

    assert isinstance(closed.points, tuple)
    with pytest.raises(AttributeError):
        session.reps[0].points.append(closed.points[0])
    assert len(session.reps[0].points) == 2
    summary = session.summary()
    assert summary.best_peak_m == pytest.approx(3.06)


def test_open_rep_stays_editable_after_close(recording_session):
    recording_session.record_click(100, 400, 0.0)
    recording_session.close_rep()
    recording_session.record_click(200, 300, 0.5)
    assert recording_session.undo_click().x == 200
    assert recording_session.current_rep.points == []
