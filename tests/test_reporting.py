import pytest

from volley_vision.formatting import format_cm, format_height_m, format_time, format_width
from volley_vision.reporting import (
    REP_TABLE_COLUMNS,
    build_metric_cards,
    build_rep_table,
    build_report_payload,
    build_summary_lines,
)
from volley_vision.reps import Direction, Rep, SessionSummary


def _closed_session(session):
    session.record_click(100, 400, 0.0)
    session.record_click(400, 150, 1.0)
    session.record_click(700, 410, 2.0)
    session.close_rep()
    session.record_click(300, 200, 3.0)
    session.close_rep()
    session.end_session()
    return session


def test_rep_table_rows(recording_session):
    session = _closed_session(recording_session)
    table = build_rep_table(session.reps)
    assert list(table.columns) == REP_TABLE_COLUMNS
    assert table["rep"].tolist() == [1, 2]
    first = table.iloc[0]
    assert first["peak_height_m"] == pytest.approx(3.06)
    assert first["above_reference_cm"] == 63
    assert first["width_m"] == pytest.approx(7.2)
    assert first["direction"] == "→"
    assert first["points"] == 3
    assert table.iloc[1]["direction"] == ""


def test_empty_rep_table_has_columns():
    table = build_rep_table([])
    assert table.empty
    assert list(table.columns) == REP_TABLE_COLUMNS


def test_summary_lines():
    summary = SessionSummary(
        rep_count=2, best_index=0, best_peak_m=3.06, mean_peak_m=2.93, mean_width_m=6.0
    )
    assert build_summary_lines(summary, 2.43) == [
        "SET STATS (Net = 2.43 m)",
        "Highest Peak: Rep 1 (3.06 m)",
        "Average Peak: 2.93 m",
        "Average Width: 6.00 m",
    ]


def test_summary_lines_without_metrics():
    summary = SessionSummary(
        rep_count=1, best_index=None, best_peak_m=None, mean_peak_m=None, mean_width_m=None
    )
    assert build_summary_lines(summary) == []


def test_report_payload(recording_session):
    session = _closed_session(recording_session)
    payload = build_report_payload(session)
    assert payload["state"] == "closed"
    assert payload["calibration"]["pixels_per_meter"] == pytest.approx(202.5 / 2.43)
    assert set(payload["calibration"]["corners"]) == {"LB", "LT", "RB", "RT"}
    assert payload["reps"][0]["direction"] == "forward"
    assert payload["reps"][1]["peak_height_m"] is None
    assert payload["reps"][0]["points"][1] == {"x": 400.0, "y": 150.0, "t": 1.0}
    assert payload["summary"]["best_rep"] == 1
    assert payload["summary"]["rep_count"] == 2


def test_formatting_helpers():
    assert format_height_m(None) == "N/A"
    assert format_height_m(3.064) == "3.06 m"
    assert format_cm(63) == "63 cm"
    assert format_cm(None) == "N/A"
    assert format_width(7.2, Direction.BACKWARD) == "← 7.20 m"
    assert format_width(None, Direction.FORWARD) == "N/A"
    assert format_time(1.5) == "1.50 s"
    assert format_time(75.25) == "1m 15.25s"
    assert format_time(None) == "N/A"


def test_rep_table_handles_unaggregated_rep():
    table = build_rep_table([Rep(direction=Direction.NEUTRAL)])
    assert table.iloc[0]["direction"] == "•"
    assert table.iloc[0]["points"] == 0


def test_metric_cards_name_the_best_rep_in_the_title():
    summary = SessionSummary(
        rep_count=2, best_index=1, best_peak_m=3.1, mean_peak_m=2.95, mean_width_m=6.0
    )
    cards = build_metric_cards(summary)
    assert cards == [
        ("Highest peak (Rep 2)", "3.10 m"),
        ("Average peak", "2.95 m"),
        ("Average width", "6.00 m"),
    ]


def test_metric_cards_without_reps():
    summary = SessionSummary(
        rep_count=0, best_index=None, best_peak_m=None, mean_peak_m=None, mean_width_m=None
    )
    titles, values = zip(*build_metric_cards(summary))
    assert titles[0] == "Highest peak (N/A)"
    assert set(values) == {"N/A"}
