from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

import cv2
import numpy as np

import volley_vision.config as cfg
from volley_vision.calibration import CalibrationModel
from volley_vision.reps import Rep


def rgb_to_bgr(color: Sequence[int]) -> Tuple[int, int, int]:
    return int(color[2]), int(color[1]), int(color[0])


def draw_cross(frame_bgr, x: float, y: float, color: Tuple[int, int, int]) -> None:
    size = cfg.MARKER_HALF_SIZE
    cx, cy = int(round(x)), int(round(y))
    cv2.line(frame_bgr, (cx - size, cy), (cx + size, cy), color, 3, lineType=cv2.LINE_AA)
    cv2.line(frame_bgr, (cx, cy - size), (cx, cy + size), color, 3, lineType=cv2.LINE_AA)


def draw_calibration_markers(frame_bgr, corners: dict) -> None:
    """Cross on every clicked corner: bottoms red, tops blue."""
    if frame_bgr is None:
        return
    for label, point in corners.items():
        color = cfg.TOP_MARKER_COLOR if label.endswith("T") else cfg.BOTTOM_MARKER_COLOR
        draw_cross(frame_bgr, point.x, point.y, color)


def draw_reference_line(frame_bgr, model: Optional[CalibrationModel]) -> None:
    if frame_bgr is None or model is None:
        return
    width = frame_bgr.shape[1]
    line = model.reference_line
    pt1 = (0, int(round(line.y_at(0))))
    pt2 = (width - 1, int(round(line.y_at(width - 1))))
    cv2.line(frame_bgr, pt1, pt2, cfg.REFERENCE_LINE_COLOR, 1, lineType=cv2.LINE_AA)


def draw_rep_trail(
    frame_bgr,
    points: Iterable,
    color: Tuple[int, int, int] = (0, 165, 255),
    thickness: int = cfg.TRAIL_THICKNESS,
) -> None:
    """Polyline through the clicked points of one rep (colour in BGR)."""
    pts = [(int(round(p.x)), int(round(p.y))) for p in points]
    if frame_bgr is None or not pts:
        return
    if len(pts) == 1:
        cv2.circle(frame_bgr, pts[0], max(2, thickness), color, -1, lineType=cv2.LINE_AA)
        return
    poly = np.array(pts, dtype=np.int32).reshape((-1, 1, 2))
    cv2.polylines(frame_bgr, [poly], False, color, max(1, int(thickness)), lineType=cv2.LINE_AA)


def draw_rep_trails(frame_bgr, reps: Iterable[Rep]) -> None:
    for rep in reps:
        color = rgb_to_bgr(rep.color) if rep.color is not None else (0, 165, 255)
        draw_rep_trail(frame_bgr, rep.points, color)


def draw_banner(frame_bgr, message: str) -> None:
    """Dark strip across the top with one line of instructions."""
    if frame_bgr is None or not message:
        return
    height = cfg.BANNER_HEIGHT
    width = frame_bgr.shape[1]
    strip = frame_bgr[0:height, 0:width]
    dark = np.zeros_like(strip)
    frame_bgr[0:height, 0:width] = cv2.addWeighted(strip, 0.2, dark, 0.8, 0)
    cv2.putText(
        frame_bgr,
        message,
        (12, height // 2 + 8),
        cv2.FONT_HERSHEY_SIMPLEX,
        0.7,
        (255, 255, 255),
        2,
        lineType=cv2.LINE_AA,
    )


def draw_stats_overlay(
    frame_bgr,
    lines: List[str],
    header: Optional[str] = None,
    anchor: tuple[int, int] = (16, 16),
) -> None:
    if frame_bgr is None:
        return
    font = cv2.FONT_HERSHEY_SIMPLEX
    font_scale = 0.6
    header_scale = 0.7
    thickness = 2
    padding = 10
    line_gap = 6

    items = []
    if header:
        items.append((header, header_scale))
    for line in lines:
        items.append((line, font_scale))
    if not items:
        return

    max_width = 0
    total_height = padding
    metrics = []
    for text, scale in items:
        (w, h), base = cv2.getTextSize(text, font, scale, thickness)
        max_width = max(max_width, w)
        total_height += h + base + line_gap
        metrics.append((text, scale, h, base))
    total_height += padding - line_gap
    x, y = max(0, anchor[0]), max(0, anchor[1])

    cv2.rectangle(
        frame_bgr,
        (x, y),
        (x + max_width + padding * 2, y + max(0, total_height)),
        (0, 0, 0),
        -1,
    )

    cursor_y = y + padding
    for text, scale, height, base in metrics:
        cursor_y += height
        cv2.putText(
            frame_bgr,
            text,
            (x + padding, cursor_y),
            font,
            scale,
            (255, 255, 255),
            thickness,
            lineType=cv2.LINE_AA,
        )
        cursor_y += base + line_gap


__all__ = [
    "rgb_to_bgr",
    "draw_cross",
    "draw_calibration_markers",
    "draw_reference_line",
    "draw_rep_trail",
    "draw_rep_trails",
    "draw_banner",
    "draw_stats_overlay",
]
