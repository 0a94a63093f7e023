"""
Annotation session: the state machine that sequences calibration, click
recording and rep aggregation.

The session owns the calibration corners, the calibration model, the open rep
and the closed reps. UI layers (the OpenCV annotator, the Streamlit app) hold
one session object and forward user events to it; calling an operation in the
wrong state raises ``PreconditionError`` instead of being ignored.
"""

from enum import Enum
import logging
from typing import Dict, List, Optional, Tuple

import volley_vision.config as cfg
from volley_vision.calibration import (
    CalibrationModel,
    CalibrationPoint,
    finalize_calibration,
)
from volley_vision.errors import ConfigurationError, PreconditionError
from volley_vision.metrics import vertical_offset_m
from volley_vision.options import SessionOptions
from volley_vision.reps import (
    ClickedPoint,
    Rep,
    SessionSummary,
    aggregate_rep,
    aggregate_reps,
    summarize_reps,
)


logger = logging.getLogger(__name__)


class SessionState(Enum):
    UNCALIBRATED = "uncalibrated"
    CALIBRATING = "calibrating"
    RECORDING = "recording"
    CLOSED = "closed"


class AnnotationSession:
    def __init__(self, options: Optional[SessionOptions] = None) -> None:
        self.options = options or SessionOptions()
        self._palette_idx = 0
        self._init_state()

    def _init_state(self) -> None:
        self._state = SessionState.UNCALIBRATED
        self._corners: List[CalibrationPoint] = []
        self._model: Optional[CalibrationModel] = None
        self._reps: List[Rep] = []
        self._current = Rep(color=self._next_color())

    def _next_color(self) -> Tuple[int, int, int]:
        palette = self.options.palette
        color = tuple(palette[self._palette_idx % len(palette)])
        self._palette_idx += 1
        return color

    def _require(self, operation: str, *states: SessionState) -> None:
        if self._state not in states:
            allowed = ", ".join(s.value for s in states)
            raise PreconditionError(
                f"Cannot {operation} while the session is {self._state.value} (allowed: {allowed})."
            )

    # ----- read-only views -----

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def model(self) -> Optional[CalibrationModel]:
        return self._model

    @property
    def reps(self) -> Tuple[Rep, ...]:
        return tuple(self._reps)

    @property
    def current_rep(self) -> Rep:
        return self._current

    @property
    def calibration_step(self) -> int:
        """Number of corners recorded so far (4 once calibrated)."""
        if self._model is not None:
            return len(cfg.CALIBRATION_ORDER)
        return len(self._corners)

    @property
    def calibration_points(self) -> Dict[str, CalibrationPoint]:
        return dict(zip(cfg.CALIBRATION_ORDER, self._corners))

    @property
    def calibration_prompt(self) -> Optional[str]:
        if self._model is not None:
            return None
        return cfg.CALIBRATION_PROMPTS[len(self._corners)]

    @property
    def is_calibrated(self) -> bool:
        return self._model is not None

    # ----- calibration -----

    def add_calibration_point(self, x: float, y: float) -> Optional[CalibrationModel]:
        """Record the next net corner; returns the model after the fourth."""
        self._require("add a calibration point", SessionState.UNCALIBRATED, SessionState.CALIBRATING)
        point = CalibrationPoint(x, y)
        label = cfg.CALIBRATION_ORDER[len(self._corners)]
        self._corners.append(point)
        self._state = SessionState.CALIBRATING
        logger.debug("Calibration corner %s = (%.1f, %.1f)", label, point.x, point.y)

        if len(self._corners) < len(cfg.CALIBRATION_ORDER):
            return None

        try:
            model = finalize_calibration(
                *self._corners, reference_height_m=self.options.reference_height_m
            )
        except ConfigurationError:
            self._corners = []
            self._state = SessionState.UNCALIBRATED
            raise
        self._model = model
        self._state = SessionState.RECORDING
        return model

    # ----- recording -----

    def record_click(self, x: float, y: float, t: float) -> ClickedPoint:
        self._require("record a click", SessionState.RECORDING)
        point = ClickedPoint(x, y, t)
        self._current.points.append(point)
        return point

    def undo_click(self) -> Optional[ClickedPoint]:
        self._require("undo a click", SessionState.RECORDING)
        if not self._current.points:
            return None
        return self._current.points.pop()

    def close_rep(self) -> Optional[Rep]:
        """Move the open rep into the closed list and start a new one.

        An empty open rep is not kept. The closed rep is aggregated right away
        so the UI can show its metrics.
        """
        self._require("close a rep", SessionState.RECORDING)
        closed = None
        if self._current.points:
            # closed reps are read-only
            self._current.points = tuple(self._current.points)
            closed = aggregate_rep(self._current, self._model, self.options.reference_height_m)
            self._reps.append(closed)
            logger.info(
                "Closed rep %d with %d points (peak=%s)",
                len(self._reps),
                len(closed.points),
                "n/a" if closed.peak_height_m is None else f"{closed.peak_height_m:.2f} m",
            )
        self._current = Rep(color=self._next_color())
        return closed

    def end_session(self) -> SessionSummary:
        """Aggregate every closed rep and freeze the session for review.

        The open rep is not part of the results; close it first to keep it.
        """
        self._require("end the session", SessionState.RECORDING)
        aggregate_reps(self._reps, self._model, self.options.reference_height_m)
        self._state = SessionState.CLOSED
        return summarize_reps(self._reps)

    def replay(self) -> None:
        """Start another recording pass, keeping reps closed so far."""
        self._require("replay", SessionState.RECORDING, SessionState.CLOSED)
        self._current = Rep(color=self._next_color())
        self._state = SessionState.RECORDING

    def reset(self) -> None:
        """Drop calibration and every rep; back to the first calibration click."""
        self._init_state()
        logger.info("Session reset")

    # ----- results -----

    def summary(self) -> SessionSummary:
        self._require("summarize", SessionState.CLOSED)
        return summarize_reps(self._reps)

    def vertical_offset_m(self, x: float, y: float) -> float:
        self._require("convert a point", SessionState.RECORDING, SessionState.CLOSED)
        return vertical_offset_m(self._model, x, y)


__all__ = ["SessionState", "AnnotationSession"]
