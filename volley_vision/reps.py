"""
Rep containers and per-rep metric aggregation.

A rep is one annotated ball flight: the ordered clicks between two "end rep"
signals. Metrics are derived once the rep is closed; reps with fewer than two
points keep ``None`` metrics rather than raising.
"""

from dataclasses import dataclass, field
from enum import Enum
import logging
import math
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from volley_vision.calibration import CalibrationModel, check_reference_height
from volley_vision.errors import ConfigurationError, PreconditionError
from volley_vision.metrics import horizontal_distance_m, vertical_offsets_m


logger = logging.getLogger(__name__)

MIN_REP_POINTS = 2


class Direction(Enum):
    FORWARD = "forward"
    BACKWARD = "backward"
    NEUTRAL = "neutral"

    @property
    def arrow(self) -> str:
        return {"forward": "→", "backward": "←", "neutral": "•"}[self.value]


@dataclass(frozen=True)
class ClickedPoint:
    x: float
    y: float
    t: float

    def __post_init__(self) -> None:
        for name in ("x", "y", "t"):
            try:
                value = float(getattr(self, name))
            except (TypeError, ValueError) as exc:
                raise ConfigurationError(f"Clicked point {name} is not a number") from exc
            if not math.isfinite(value):
                raise ConfigurationError(f"Clicked point {name} must be finite, got {value!r}")
            object.__setattr__(self, name, value)


@dataclass
class Rep:
    points: Sequence[ClickedPoint] = field(default_factory=list)
    color: Optional[Tuple[int, int, int]] = None
    peak_height_m: Optional[float] = None
    height_above_reference_cm: Optional[int] = None
    width_m: Optional[float] = None
    direction: Optional[Direction] = None

    @property
    def has_metrics(self) -> bool:
        return self.peak_height_m is not None

    def clear_metrics(self) -> None:
        self.peak_height_m = None
        self.height_above_reference_cm = None
        self.width_m = None
        self.direction = None


@dataclass(frozen=True)
class SessionSummary:
    rep_count: int
    best_index: Optional[int]
    best_peak_m: Optional[float]
    mean_peak_m: Optional[float]
    mean_width_m: Optional[float]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _direction(first: ClickedPoint, last: ClickedPoint) -> Direction:
    if last.x > first.x:
        return Direction.FORWARD
    if last.x < first.x:
        return Direction.BACKWARD
    return Direction.NEUTRAL


def aggregate_rep(
    rep: Rep,
    model: Optional[CalibrationModel],
    reference_height_m: Optional[float] = None,
) -> Rep:
    """Fill the rep's metric fields in place and return it.

    The peak is the highest point over every click, start and end touches
    included. Width and direction always use the first and last clicks.
    """
    if model is None:
        raise PreconditionError("Cannot aggregate a rep before calibration is finalized.")
    if reference_height_m is None:
        reference_height_m = model.reference_height_m
    else:
        reference_height_m = check_reference_height(reference_height_m)

    if len(rep.points) < MIN_REP_POINTS:
        rep.clear_metrics()
        return rep

    offsets = vertical_offsets_m(model, rep.points)
    offset_above = float(np.max(offsets))
    if not math.isfinite(offset_above):
        rep.clear_metrics()
        return rep

    first = rep.points[0]
    last = rep.points[-1]
    rep.peak_height_m = reference_height_m + offset_above
    rep.height_above_reference_cm = _round_half_up(offset_above * 100.0)
    rep.width_m = horizontal_distance_m(model, first, last)
    rep.direction = _direction(first, last)
    return rep


def aggregate_reps(
    reps: Iterable[Rep],
    model: Optional[CalibrationModel],
    reference_height_m: Optional[float] = None,
) -> List[Rep]:
    aggregated = [aggregate_rep(rep, model, reference_height_m) for rep in reps]
    logger.info(
        "Aggregated %d reps (%d with metrics)",
        len(aggregated),
        sum(1 for rep in aggregated if rep.has_metrics),
    )
    return aggregated


def summarize_reps(reps: Sequence[Rep]) -> SessionSummary:
    best_index = None
    best_peak = None
    peaks: List[float] = []
    widths: List[float] = []
    for index, rep in enumerate(reps):
        if rep.peak_height_m is not None:
            # strict > keeps the lowest index on ties
            if best_peak is None or rep.peak_height_m > best_peak:
                best_peak = rep.peak_height_m
                best_index = index
            peaks.append(rep.peak_height_m)
        if rep.width_m is not None:
            widths.append(rep.width_m)

    return SessionSummary(
        rep_count=len(reps),
        best_index=best_index,
        best_peak_m=best_peak,
        mean_peak_m=sum(peaks) / len(peaks) if peaks else None,
        mean_width_m=sum(widths) / len(widths) if widths else None,
    )


__all__ = [
    "MIN_REP_POINTS",
    "Direction",
    "ClickedPoint",
    "Rep",
    "SessionSummary",
    "aggregate_rep",
    "aggregate_reps",
    "summarize_reps",
]
