import logging
import uuid

import streamlit as st

import volley_vision.config as cfg
from volley_vision.errors import VolleyVisionError
from volley_vision.formatting import format_time
from volley_vision.options import SessionOptions
from volley_vision.overlay import (
    draw_banner,
    draw_calibration_markers,
    draw_reference_line,
    draw_rep_trail,
    draw_rep_trails,
    rgb_to_bgr,
)
from volley_vision.reporting import build_metric_cards, build_rep_table, build_report_payload
from volley_vision.session import AnnotationSession, SessionState
from volley_vision.video_io import (
    canvas_to_frame,
    extract_canvas_points,
    frame_time,
    prepare_canvas_frame,
    probe_video,
    read_video_frame,
    save_uploaded_file,
    step_frames,
)


logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

st.set_page_config(page_title="VolleyVision", layout="wide")

st.markdown(
    """
    <style>
    body {
        background: radial-gradient(circle at 20% 20%, #0f172a 0, #0b1020 40%, #070b17 100%);
        color: #e2e8f0;
    }
    .block-container {
        padding-top: 2rem;
        padding-bottom: 2rem;
    }
    .stButton>button {
        background: linear-gradient(120deg, #22d3ee, #6366f1);
        color: white;
        border: none;
        padding: 0.6rem 1.1rem;
        border-radius: 12px;
        font-weight: 600;
        box-shadow: 0 10px 30px rgba(99,102,241,0.25);
    }
    </style>
    """,
    unsafe_allow_html=True,
)


def _ensure_canvas_compat():
    try:
        import streamlit.elements.image as st_image
        if hasattr(st_image, "image_to_url"):
            return
        from streamlit.elements.lib import image_utils, layout_utils

        def _image_to_url_compat(image, width, clamp, channels, output_format, image_id):
            layout_config = layout_utils.LayoutConfig(width=width)
            return image_utils.image_to_url(
                image, layout_config, clamp, channels, output_format, image_id
            )

        st_image.image_to_url = _image_to_url_compat
    except (ImportError, AttributeError):
        return


def _new_canvas_key():
    st.session_state["canvas_key"] = f"annotation_canvas_{uuid.uuid4().hex}"


def _get_session(reference_height_m: float) -> AnnotationSession:
    session = st.session_state.get("session")
    if session is None or session.options.reference_height_m != reference_height_m:
        session = AnnotationSession(SessionOptions(reference_height_m=reference_height_m))
        st.session_state["session"] = session
        _new_canvas_key()
    return session


def _run_action(action, *args):
    try:
        return action(*args)
    except VolleyVisionError as exc:
        logger.warning("%s failed: %s", getattr(action, "__name__", "action"), exc)
        st.session_state["last_error"] = str(exc)
        return None


def _set_frame(frame_idx: int, frame_count: int) -> None:
    upper = max(0, frame_count - 1) if frame_count else frame_idx
    st.session_state["frame_idx"] = max(0, min(frame_idx, upper))
    _new_canvas_key()


def sidebar_options() -> float:
    st.sidebar.header("Calibration")
    net_height = st.sidebar.number_input(
        "Net height (m)",
        min_value=0.5,
        max_value=4.0,
        value=float(cfg.NET_HEIGHT_M),
        step=0.01,
        help="Known height of the top tape. Changing it starts a new session.",
    )
    st.sidebar.header("Session")
    if st.sidebar.button("Reset session"):
        session = st.session_state.get("session")
        if session is not None:
            session.reset()
        st.session_state["frame_idx"] = 0
        _new_canvas_key()
    st.sidebar.caption(
        "Calibrate by clicking the net corners (left bottom, left top, right bottom, "
        "right top), then click the ball frame by frame. End a rep after each set."
    )
    return float(net_height)


def _annotated_frame(frame, session: AnnotationSession):
    canvas = frame.copy()
    if not session.is_calibrated:
        draw_calibration_markers(canvas, session.calibration_points)
        draw_banner(canvas, session.calibration_prompt)
        return canvas
    draw_reference_line(canvas, session.model)
    if session.state is SessionState.CLOSED:
        draw_rep_trails(canvas, session.reps)
    else:
        rep = session.current_rep
        draw_rep_trail(canvas, rep.points, rgb_to_bgr(rep.color))
    return canvas


def _handle_clicks(session: AnnotationSession, points, time_s: float) -> None:
    for x, y in points:
        if not session.is_calibrated:
            _run_action(session.add_calibration_point, x, y)
        elif session.state is SessionState.RECORDING:
            _run_action(session.record_click, x, y, time_s)


def _render_results(session: AnnotationSession) -> None:
    summary = session.summary()
    st.subheader(f"Set stats (Net = {session.options.reference_height_m:.2f} m)")
    table = build_rep_table(session.reps)
    if table.empty:
        st.info("No reps were recorded.")
        return
    st.dataframe(table, hide_index=True, use_container_width=True)

    for column, (title, value) in zip(st.columns(3), build_metric_cards(summary)):
        with column:
            st.metric(title, value)

    with st.expander("Report payload"):
        st.json(build_report_payload(session))


st.title("VolleyVision")
st.caption("Click the ball through each set to measure peak height and width.")

reference_height_m = sidebar_options()
session = _get_session(reference_height_m)

uploaded = st.file_uploader("Upload a video", type=["mp4", "mov", "avi", "mkv"])
if uploaded is None:
    st.info("Upload a video to start annotating.")
    st.stop()

if st.session_state.get("video_name") != uploaded.name:
    st.session_state["video_path"] = save_uploaded_file(uploaded)
    st.session_state["video_name"] = uploaded.name
    st.session_state["frame_idx"] = 0
    session.reset()
    _new_canvas_key()

video_path = st.session_state["video_path"]
info = probe_video(video_path)
if info is None:
    st.error("Unable to open the uploaded video.")
    st.stop()

fps = info["fps"]
frame_count = info["frame_count"]
step = step_frames(fps, session.options.frame_step_sec)

col_end_rep, col_undo, col_end, col_replay = st.columns(4)
with col_end_rep:
    if st.button("End rep (N)"):
        closed = _run_action(session.close_rep)
        if closed is not None:
            st.session_state["last_info"] = f"Rep {len(session.reps)} saved."
with col_undo:
    if st.button("Undo point (Z)"):
        _run_action(session.undo_click)
with col_end:
    if st.button("End session", type="primary"):
        _run_action(session.end_session)
with col_replay:
    if st.button("Replay"):
        try:
            session.replay()
        except VolleyVisionError as exc:
            st.session_state["last_error"] = str(exc)
        else:
            _set_frame(0, frame_count)

last_error = st.session_state.pop("last_error", None)
if last_error:
    st.error(last_error)
last_info = st.session_state.pop("last_info", None)
if last_info:
    st.success(last_info)

frame_idx = int(st.session_state.get("frame_idx", 0))

col_back, col_slider, col_fwd = st.columns([1, 6, 1])
with col_back:
    if st.button("◀ Step"):
        _set_frame(frame_idx - step, frame_count)
with col_fwd:
    if st.button("Step ▶"):
        _set_frame(frame_idx + step, frame_count)
with col_slider:
    if frame_count > 1:
        picked = st.slider(
            "Frame",
            min_value=0,
            max_value=frame_count - 1,
            value=int(st.session_state.get("frame_idx", 0)),
            step=1,
        )
        if picked != st.session_state.get("frame_idx", 0):
            _set_frame(picked, frame_count)

frame_idx = int(st.session_state.get("frame_idx", 0))
time_s = frame_time(frame_idx, fps)
frame = read_video_frame(video_path, frame_idx)
if frame is None:
    st.error("Unable to read the selected frame.")
    st.stop()

if session.calibration_prompt:
    st.info(session.calibration_prompt)
else:
    st.write(
        f"Time: {format_time(time_s)}   Reps: {len(session.reps)}   "
        f"Current points: {len(session.current_rep.points)}   State: {session.state.value}"
    )

canvas_image, scale = prepare_canvas_frame(_annotated_frame(frame, session))

try:
    _ensure_canvas_compat()
    from streamlit_drawable_canvas import st_canvas
except ImportError:
    st.warning("Install `streamlit-drawable-canvas` to annotate on the video frame.")
    st.code("pip install streamlit-drawable-canvas")
    st.stop()

if "canvas_key" not in st.session_state:
    _new_canvas_key()

canvas_result = st_canvas(
    fill_color="rgba(255, 196, 0, 0.6)",
    stroke_width=2,
    stroke_color="#ffc400",
    background_image=canvas_image,
    update_streamlit=True,
    width=canvas_image.width,
    height=canvas_image.height,
    drawing_mode="point",
    point_display_radius=4,
    display_toolbar=False,
    key=st.session_state["canvas_key"],
)

canvas_points = extract_canvas_points(canvas_result.json_data)
if canvas_points:
    _handle_clicks(session, canvas_to_frame(canvas_points, scale), time_s)
    # clicks are redrawn into the background; start from a clean canvas
    _new_canvas_key()
    st.rerun()

if session.state is SessionState.CLOSED:
    _render_results(session)
