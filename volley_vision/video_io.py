from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple
from uuid import uuid4

import cv2
from PIL import Image

import volley_vision.config as cfg


def save_uploaded_file(uploaded_file, base_dir: str = ".cache/uploads") -> str:
    base_path = Path(base_dir)
    base_path.mkdir(parents=True, exist_ok=True)

    original_suffix = Path(uploaded_file.name).suffix
    suffix = original_suffix if original_suffix else ".mp4"
    file_path = base_path / f"{uuid4().hex}{suffix}"

    with file_path.open("wb") as handle:
        handle.write(uploaded_file.getbuffer())

    return str(file_path)


def probe_video(video_path: str) -> Optional[Dict[str, Any]]:
    capture = cv2.VideoCapture(video_path)
    if not capture.isOpened():
        return None

    fps = capture.get(cv2.CAP_PROP_FPS)
    frame_count = capture.get(cv2.CAP_PROP_FRAME_COUNT)
    capture.release()

    fps = float(fps) if fps and fps > 0 else cfg.DEFAULT_FPS
    frame_count = int(frame_count) if frame_count else 0
    return {
        "fps": fps,
        "frame_count": frame_count,
        "duration_s": frame_count / fps if frame_count else None,
    }


def read_video_frame(path: str, frame_idx: int):
    cap = cv2.VideoCapture(path)
    if not cap.isOpened():
        return None
    if frame_idx > 0:
        cap.set(cv2.CAP_PROP_POS_FRAMES, frame_idx)
    ret, frame = cap.read()
    cap.release()
    if not ret or frame is None:
        return None
    return frame


def frame_time(frame_idx: int, fps: float) -> float:
    """Media timestamp (seconds) of a frame index."""
    if not fps or fps <= 0:
        fps = cfg.DEFAULT_FPS
    return max(0, frame_idx) / fps


def step_frames(fps: float, step_sec: float = cfg.FRAME_STEP_SEC) -> int:
    """Whole frames covered by one playback step, at least one."""
    if not fps or fps <= 0:
        fps = cfg.DEFAULT_FPS
    return max(1, int(round(step_sec * fps)))


def prepare_canvas_frame(frame_bgr, max_width: int = cfg.CANVAS_MAX_WIDTH) -> Tuple[Image.Image, float]:
    height, width = frame_bgr.shape[:2]
    scale = min(1.0, max_width / max(1, width))
    new_w = int(width * scale)
    new_h = int(height * scale)
    resized = cv2.resize(frame_bgr, (new_w, new_h)) if scale < 1.0 else frame_bgr
    rgb = cv2.cvtColor(resized, cv2.COLOR_BGR2RGB)
    return Image.fromarray(rgb), scale


def canvas_to_frame(points: Iterable[Tuple[float, float]], scale: float) -> List[Tuple[float, float]]:
    """Map canvas click coordinates back to full-resolution frame pixels."""
    if scale <= 0:
        raise ValueError(f"Canvas scale must be positive, got {scale!r}")
    return [(float(x) / scale, float(y) / scale) for x, y in points]


def extract_canvas_points(canvas_json: Optional[Dict[str, Any]]) -> List[Tuple[float, float]]:
    points: List[Tuple[float, float]] = []
    if not canvas_json:
        return points
    for obj in canvas_json.get("objects", []):
        x = obj.get("x")
        y = obj.get("y")
        if x is not None and y is not None:
            points.append((float(x), float(y)))
            continue
        left = float(obj.get("left", 0.0))
        top = float(obj.get("top", 0.0))
        radius = float(obj.get("radius", 0.0))
        scale_x = float(obj.get("scaleX", 1.0))
        scale_y = float(obj.get("scaleY", 1.0))
        points.append((left + radius * scale_x, top + radius * scale_y))
    return points


__all__ = [
    "save_uploaded_file",
    "probe_video",
    "read_video_frame",
    "frame_time",
    "step_frames",
    "prepare_canvas_frame",
    "canvas_to_frame",
    "extract_canvas_points",
]
