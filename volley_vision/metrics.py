"""
Pixel-to-meter conversions driven by a finalized calibration model.

Every helper takes the model explicitly and holds no state of its own.
"""

from typing import Iterable, Optional, Tuple

import numpy as np

from volley_vision.calibration import CalibrationModel
from volley_vision.errors import PreconditionError


def _xy(point) -> Tuple[float, float]:
    if hasattr(point, "x") and hasattr(point, "y"):
        return float(point.x), float(point.y)
    return float(point[0]), float(point[1])


def _require_model(model: Optional[CalibrationModel]) -> CalibrationModel:
    if model is None:
        raise PreconditionError("No calibration model yet; finish the 4-point calibration first.")
    return model


def vertical_offset_m(model: Optional[CalibrationModel], x: float, y: float) -> float:
    """Signed height of pixel (x, y) above the reference line, in meters.

    Image y grows downward, so a point drawn higher than the line at the same
    column gives a positive value.
    """
    model = _require_model(model)
    y_reference = model.reference_line.y_at(x)
    return (y_reference - y) / model.pixels_per_meter


def vertical_offsets_m(
    model: Optional[CalibrationModel], points: Iterable[Tuple[float, float]]
) -> np.ndarray:
    model = _require_model(model)
    pts = np.array([_xy(p) for p in points], dtype=np.float64).reshape(-1, 2)
    line = model.reference_line
    y_reference = line.slope * pts[:, 0] + line.intercept
    return (y_reference - pts[:, 1]) / model.pixels_per_meter


def horizontal_distance_m(model: Optional[CalibrationModel], p1, p2) -> float:
    """Horizontal start-to-end distance in meters.

    Reuses the net's vertical scale for x, which ignores depth foreshortening:
    a ball travelling toward or away from the camera is under-measured. This
    is an approximation, not a projective measurement.
    """
    model = _require_model(model)
    dx_px = abs(_xy(p2)[0] - _xy(p1)[0])
    return dx_px / model.pixels_per_meter


__all__ = ["vertical_offset_m", "vertical_offsets_m", "horizontal_distance_m"]
