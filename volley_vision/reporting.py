"""
Tables and payloads built from closed reps for the display layers.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

import pandas as pd

import volley_vision.config as cfg
from volley_vision.formatting import format_height_m, format_width
from volley_vision.reps import Rep, SessionSummary
from volley_vision.session import AnnotationSession


REP_TABLE_COLUMNS = [
    "rep",
    "peak_height_m",
    "above_reference_cm",
    "width_m",
    "direction",
    "points",
]


def build_rep_table(reps: Sequence[Rep]) -> pd.DataFrame:
    rows: List[Dict[str, Any]] = []
    for index, rep in enumerate(reps):
        rows.append(
            {
                "rep": index + 1,
                "peak_height_m": None if rep.peak_height_m is None else round(rep.peak_height_m, 2),
                "above_reference_cm": rep.height_above_reference_cm,
                "width_m": None if rep.width_m is None else round(rep.width_m, 2),
                "direction": rep.direction.arrow if rep.direction is not None else "",
                "points": len(rep.points),
            }
        )
    return pd.DataFrame(rows, columns=REP_TABLE_COLUMNS)


def build_summary_lines(summary: SessionSummary, reference_height_m: Optional[float] = None) -> List[str]:
    lines: List[str] = []
    if reference_height_m is not None:
        lines.append(f"SET STATS (Net = {reference_height_m:.2f} m)")
    if summary.best_index is not None:
        lines.append(
            f"Highest Peak: Rep {summary.best_index + 1} ({format_height_m(summary.best_peak_m)})"
        )
    if summary.mean_peak_m is not None:
        lines.append(f"Average Peak: {format_height_m(summary.mean_peak_m)}")
    if summary.mean_width_m is not None:
        lines.append(f"Average Width: {format_width(summary.mean_width_m)}")
    return lines


def build_metric_cards(summary: SessionSummary) -> List[Tuple[str, str]]:
    """(title, value) pairs for the headline metrics; the best rep goes in the title."""
    best_label = cfg.MISSING_VALUE if summary.best_index is None else f"Rep {summary.best_index + 1}"
    return [
        (f"Highest peak ({best_label})", format_height_m(summary.best_peak_m)),
        ("Average peak", format_height_m(summary.mean_peak_m)),
        ("Average width", format_width(summary.mean_width_m)),
    ]


def _rep_payload(index: int, rep: Rep) -> Dict[str, Any]:
    return {
        "rep": index + 1,
        "color": list(rep.color) if rep.color is not None else None,
        "peak_height_m": rep.peak_height_m,
        "height_above_reference_cm": rep.height_above_reference_cm,
        "width_m": rep.width_m,
        "direction": rep.direction.value if rep.direction is not None else None,
        "points": [{"x": p.x, "y": p.y, "t": p.t} for p in rep.points],
    }


def build_report_payload(session: AnnotationSession) -> Dict[str, Any]:
    """JSON-ready snapshot of a closed session (kept in memory)."""
    summary = session.summary()
    model = session.model
    return {
        "state": session.state.value,
        "reference_height_m": session.options.reference_height_m,
        "calibration": {
            "pixels_per_meter": model.pixels_per_meter,
            "slope": model.reference_line.slope,
            "intercept": model.reference_line.intercept,
            "corners": {
                label: {"x": point.x, "y": point.y}
                for label, point in session.calibration_points.items()
            },
        },
        "reps": [_rep_payload(index, rep) for index, rep in enumerate(session.reps)],
        "summary": {
            "rep_count": summary.rep_count,
            "best_rep": None if summary.best_index is None else summary.best_index + 1,
            "best_peak_m": summary.best_peak_m,
            "mean_peak_m": summary.mean_peak_m,
            "mean_width_m": summary.mean_width_m,
        },
    }


__all__ = [
    "REP_TABLE_COLUMNS",
    "build_rep_table",
    "build_summary_lines",
    "build_metric_cards",
    "build_report_payload",
]
