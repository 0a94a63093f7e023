"""
User-tunable options for an annotation session.
"""

from dataclasses import dataclass
from typing import Tuple

import volley_vision.config as cfg
from volley_vision.errors import ConfigurationError


@dataclass
class SessionOptions:
    reference_height_m: float = cfg.NET_HEIGHT_M
    palette: Tuple[Tuple[int, int, int], ...] = cfg.PALETTE
    frame_step_sec: float = cfg.FRAME_STEP_SEC

    def __post_init__(self) -> None:
        if not self.palette:
            raise ConfigurationError("Rep palette needs at least one colour.")
        self.palette = tuple(tuple(color) for color in self.palette)


__all__ = ["SessionOptions"]
