"""
Manual ball-flight annotation for volleyball video.

A one-time 4-point net calibration turns clicked pixels into meters; clicks are
grouped into reps whose peak height, height above the net and horizontal width
are derived when the rep closes. The package keeps the calibration and metric
core free of UI code so the OpenCV annotator and the Streamlit app share it.
"""

from volley_vision import config  # noqa: F401
from volley_vision.calibration import (  # noqa: F401
    CalibrationModel,
    CalibrationPoint,
    ReferenceLine,
    build_calibration,
    finalize_calibration,
)
from volley_vision.errors import (  # noqa: F401
    ConfigurationError,
    PreconditionError,
    VolleyVisionError,
)
from volley_vision.metrics import (  # noqa: F401
    horizontal_distance_m,
    vertical_offset_m,
    vertical_offsets_m,
)
from volley_vision.options import SessionOptions  # noqa: F401
from volley_vision.reps import (  # noqa: F401
    ClickedPoint,
    Direction,
    Rep,
    SessionSummary,
    aggregate_rep,
    aggregate_reps,
    summarize_reps,
)
from volley_vision.session import AnnotationSession, SessionState  # noqa: F401

__all__ = [
    "config",
    "CalibrationModel",
    "CalibrationPoint",
    "ReferenceLine",
    "build_calibration",
    "finalize_calibration",
    "ConfigurationError",
    "PreconditionError",
    "VolleyVisionError",
    "horizontal_distance_m",
    "vertical_offset_m",
    "vertical_offsets_m",
    "SessionOptions",
    "ClickedPoint",
    "Direction",
    "Rep",
    "SessionSummary",
    "aggregate_rep",
    "aggregate_reps",
    "summarize_reps",
    "AnnotationSession",
    "SessionState",
]
