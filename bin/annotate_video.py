import argparse
import logging
from pathlib import Path

import cv2

from volley_vision import config as cfg
from volley_vision.errors import VolleyVisionError
from volley_vision.keys import key_action
from volley_vision.options import SessionOptions
from volley_vision.overlay import (
    draw_banner,
    draw_calibration_markers,
    draw_reference_line,
    draw_rep_trail,
    draw_rep_trails,
    draw_stats_overlay,
    rgb_to_bgr,
)
from volley_vision.reporting import build_rep_table, build_summary_lines
from volley_vision.session import AnnotationSession, SessionState
from volley_vision.video_io import frame_time, step_frames


WINDOW_NAME = "VolleyVision"
HELP_LINES = [
    "Click = add point   n = end rep   z = undo",
    "space = play/pause   , . = step   Enter/s = replay   r = reset   q = quit",
]


def _status_text(session, playing):
    if not session.is_calibrated:
        status = "Calibration mode"
    elif session.state is SessionState.CLOSED:
        status = "Ended"
    else:
        status = "Playing" if playing else "Paused"
    return (
        f"Status: {status}   Reps: {len(session.reps)}   "
        f"Current pts: {len(session.current_rep.points)}"
    )


def _render(canvas, session, playing, show_trails, message):
    height = canvas.shape[0]
    if not session.is_calibrated:
        draw_calibration_markers(canvas, session.calibration_points)
        draw_banner(canvas, session.calibration_prompt)
    else:
        draw_reference_line(canvas, session.model)
        if session.state is SessionState.CLOSED:
            if show_trails:
                draw_rep_trails(canvas, session.reps)
            lines = build_summary_lines(session.summary(), session.options.reference_height_m)
            draw_stats_overlay(canvas, lines[1:], header=lines[0])
        else:
            rep = session.current_rep
            draw_rep_trail(canvas, rep.points, rgb_to_bgr(rep.color))
            if not playing:
                draw_stats_overlay(canvas, HELP_LINES)
    footer = [_status_text(session, playing)]
    if message:
        footer.insert(0, message)
    draw_stats_overlay(canvas, footer, anchor=(16, height - 40 - 26 * len(footer)))


def main():
    parser = argparse.ArgumentParser(
        description="Annotate ball flights on a volleyball video and measure set height."
    )
    parser.add_argument("video", help="Path to the input video file.")
    parser.add_argument(
        "--net-height",
        type=float,
        default=cfg.NET_HEIGHT_M,
        help="Height of the net top tape in meters (default from config).",
    )
    parser.add_argument("--verbose", action="store_true", help="Log every calibration click.")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    video_path = Path(args.video)
    if not video_path.exists():
        raise SystemExit(f"Video not found: {video_path}")

    cap = cv2.VideoCapture(str(video_path))
    ret, frame = cap.read()
    if not ret or frame is None:
        cap.release()
        raise SystemExit("Unable to read the first frame.")
    fps = cap.get(cv2.CAP_PROP_FPS)
    fps = fps if fps and fps > 0 else cfg.DEFAULT_FPS
    frame_count = int(cap.get(cv2.CAP_PROP_FRAME_COUNT)) or 0

    session = AnnotationSession(SessionOptions(reference_height_m=args.net_height))
    state = {"frame": frame, "frame_idx": 0, "playing": False, "show_trails": True, "message": None}
    step = step_frames(fps, session.options.frame_step_sec)

    def seek(frame_idx):
        frame_idx = max(0, frame_idx)
        if frame_count:
            frame_idx = min(frame_idx, frame_count - 1)
        cap.set(cv2.CAP_PROP_POS_FRAMES, frame_idx)
        ok, img = cap.read()
        if ok and img is not None:
            state["frame"] = img
            state["frame_idx"] = frame_idx

    def on_mouse(event, x, y, _flags, _param):
        if event != cv2.EVENT_LBUTTONDOWN:
            return
        try:
            if session.is_calibrated:
                if session.state is SessionState.RECORDING:
                    session.record_click(x, y, frame_time(state["frame_idx"], fps))
            else:
                session.add_calibration_point(x, y)
            state["message"] = None
        except VolleyVisionError as exc:
            state["message"] = str(exc)

    def replay():
        session.replay()
        state["show_trails"] = False
        seek(0)
        state["playing"] = True

    cv2.namedWindow(WINDOW_NAME, cv2.WINDOW_NORMAL)
    cv2.setMouseCallback(WINDOW_NAME, on_mouse)

    delay = max(1, int(1000 / fps))
    while True:
        if state["playing"] and session.state is SessionState.RECORDING:
            ok, img = cap.read()
            if ok and img is not None:
                state["frame"] = img
                state["frame_idx"] += 1
            else:
                state["playing"] = False
                state["show_trails"] = True
                session.end_session()

        canvas = state["frame"].copy()
        _render(canvas, session, state["playing"], state["show_trails"], state["message"])
        cv2.imshow(WINDOW_NAME, canvas)
        action = key_action(cv2.waitKey(delay if state["playing"] else 20))

        if action == "quit":
            break
        if not session.is_calibrated:
            # only quit is available until the net is calibrated
            continue

        try:
            if action == "toggle_play" and session.state is SessionState.RECORDING:
                state["playing"] = not state["playing"]
            elif action == "end_rep":
                session.close_rep()
            elif action == "undo":
                session.undo_click()
            elif action == "step_back" and session.state is SessionState.RECORDING:
                state["playing"] = False
                seek(state["frame_idx"] - step)
            elif action == "step_forward" and session.state is SessionState.RECORDING:
                state["playing"] = False
                seek(state["frame_idx"] + step)
            elif action == "toggle_trails" and session.state is SessionState.CLOSED:
                state["show_trails"] = not state["show_trails"]
            elif action == "replay":
                replay()
            elif action == "reset":
                session.reset()
                state["playing"] = False
                state["show_trails"] = True
                seek(0)
            else:
                continue
            state["message"] = None
        except VolleyVisionError as exc:
            state["message"] = str(exc)

    cap.release()
    cv2.destroyAllWindows()

    if session.state is SessionState.CLOSED:
        print(build_rep_table(session.reps).to_string(index=False))
        for line in build_summary_lines(session.summary(), session.options.reference_height_m):
            print(line)


if __name__ == "__main__":
    main()
