"""
Calibration helpers for mapping image points onto the net plane.

Four clicked net corners give a pixels-per-meter scale (averaged over the left
and right antenna) and the line of the top tape in image space. The model is
affine: it does not correct for perspective beyond that averaging.
"""

from dataclasses import dataclass
import logging
import math
from typing import Iterable, Sequence, Tuple

import volley_vision.config as cfg
from volley_vision.errors import ConfigurationError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalibrationPoint:
    x: float
    y: float

    def __post_init__(self) -> None:
        for name in ("x", "y"):
            value = getattr(self, name)
            try:
                number = float(value)
            except (TypeError, ValueError) as exc:
                raise ConfigurationError(f"Calibration point {name} is not a number: {value!r}") from exc
            if not math.isfinite(number):
                raise ConfigurationError(f"Calibration point {name} must be finite, got {value!r}")
            object.__setattr__(self, name, number)


@dataclass(frozen=True)
class ReferenceLine:
    slope: float
    intercept: float

    def y_at(self, x: float) -> float:
        """Pixel y of the reference line at pixel column ``x``."""
        return self.slope * x + self.intercept


@dataclass(frozen=True)
class CalibrationModel:
    pixels_per_meter: float
    reference_line: ReferenceLine
    reference_height_m: float
    corners: Tuple[CalibrationPoint, CalibrationPoint, CalibrationPoint, CalibrationPoint]


def _as_point(point) -> CalibrationPoint:
    if isinstance(point, CalibrationPoint):
        return point
    try:
        x, y = point
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Expected an (x, y) pair, got {point!r}") from exc
    return CalibrationPoint(x, y)


def check_reference_height(reference_height_m) -> float:
    try:
        height = float(reference_height_m)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Reference height is not a number: {reference_height_m!r}") from exc
    if not math.isfinite(height) or height <= 0:
        raise ConfigurationError(
            f"Reference height must be a positive number of meters, got {reference_height_m!r}"
        )
    return height


def finalize_calibration(
    lb: CalibrationPoint,
    lt: CalibrationPoint,
    rb: CalibrationPoint,
    rt: CalibrationPoint,
    reference_height_m: float = cfg.NET_HEIGHT_M,
) -> CalibrationModel:
    """Build the pixel-to-meter model from the four net corners.

    The corners are left-bottom, left-top, right-bottom and right-top. The
    scale is the mean of both vertical spans divided by the known height, and
    the reference line runs through the two top corners.
    """
    lb, lt, rb, rt = (_as_point(p) for p in (lb, lt, rb, rt))
    height = check_reference_height(reference_height_m)

    if rt.x == lt.x:
        raise ConfigurationError(
            "Top corners share the same x; the reference line would be vertical."
        )

    left_span = abs(lt.y - lb.y)
    right_span = abs(rt.y - rb.y)
    avg_span = (left_span + right_span) / 2.0
    pixels_per_meter = avg_span / height
    if not pixels_per_meter > 0 or not math.isfinite(pixels_per_meter):
        raise ConfigurationError(
            "The reference object has no vertical extent in the image; "
            "cannot derive a pixel scale."
        )

    slope = (rt.y - lt.y) / (rt.x - lt.x)
    intercept = lt.y - slope * lt.x
    if not (math.isfinite(slope) and math.isfinite(intercept)):
        raise ConfigurationError("Reference line through the top corners is not finite.")

    model = CalibrationModel(
        pixels_per_meter=pixels_per_meter,
        reference_line=ReferenceLine(slope=slope, intercept=intercept),
        reference_height_m=height,
        corners=(lb, lt, rb, rt),
    )
    logger.info(
        "Calibration complete: left=%.1fpx right=%.1fpx avg=%.1fpx px/m=%.3f line=(m=%.5f, b=%.2f)",
        left_span,
        right_span,
        avg_span,
        pixels_per_meter,
        slope,
        intercept,
    )
    return model


def build_calibration(
    image_points: Iterable[Sequence[float]],
    reference_height_m: float = cfg.NET_HEIGHT_M,
) -> CalibrationModel:
    """Finalize from a list of four (x, y) pairs in LB, LT, RB, RT order."""
    pts = list(image_points)
    if len(pts) != len(cfg.CALIBRATION_ORDER):
        raise ConfigurationError(
            f"Expected exactly {len(cfg.CALIBRATION_ORDER)} calibration points, got {len(pts)}."
        )
    return finalize_calibration(*pts, reference_height_m=reference_height_m)


__all__ = [
    "CalibrationPoint",
    "ReferenceLine",
    "CalibrationModel",
    "finalize_calibration",
    "build_calibration",
    "check_reference_height",
]
