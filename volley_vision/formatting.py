from __future__ import annotations

from typing import Optional

import volley_vision.config as cfg
from volley_vision.reps import Direction


def format_time(seconds: Optional[float]) -> str:
    if seconds is None or seconds < 0:
        return cfg.MISSING_VALUE
    if seconds < 60:
        return f"{seconds:.2f} s"
    minutes = int(seconds // 60)
    rem = seconds - minutes * 60
    return f"{minutes:d}m {rem:05.2f}s"


def format_height_m(meters: Optional[float]) -> str:
    if meters is None:
        return cfg.MISSING_VALUE
    return f"{meters:.2f} m"


def format_cm(centimeters: Optional[int]) -> str:
    if centimeters is None:
        return cfg.MISSING_VALUE
    return f"{centimeters:d} cm"


def format_width(meters: Optional[float], direction: Optional[Direction] = None) -> str:
    if meters is None:
        return cfg.MISSING_VALUE
    if direction is None:
        return f"{meters:.2f} m"
    return f"{direction.arrow} {meters:.2f} m"
