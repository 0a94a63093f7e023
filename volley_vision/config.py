"""
Central configuration values shared across the annotation entrypoints.

Importing these constants keeps the Streamlit app and the OpenCV annotator
aligned while letting us tweak defaults in one place.
"""

# Reference object (official men's beach volleyball net height, meters)
NET_HEIGHT_M = 2.43

# Calibration corners, clicked in this order
CALIBRATION_ORDER = ("LB", "LT", "RB", "RT")
CALIBRATION_PROMPTS = (
    "Calibration 1/4 - Click the BOTTOM of the net at the LEFT antenna",
    "Calibration 2/4 - Click the TOP of the net at the LEFT antenna",
    "Calibration 3/4 - Click the BOTTOM of the net at the RIGHT antenna",
    "Calibration 4/4 - Click the TOP of the net at the RIGHT antenna",
)

# Rep trail colours (RGB), cycled per rep
PALETTE = (
    (255, 80, 80),  # red
    (255, 160, 0),  # orange
    (255, 220, 0),  # yellow
    (0, 190, 255),  # sky
    (80, 220, 160),  # mint
    (180, 120, 255),  # purple
    (255, 100, 200),  # pink
)

# Playback
FRAME_STEP_SEC = 1.0 / 30.0
DEFAULT_FPS = 30.0

# Canvas / overlay
CANVAS_MAX_WIDTH = 960
MARKER_HALF_SIZE = 8
BOTTOM_MARKER_COLOR = (87, 87, 255)  # BGR, red
TOP_MARKER_COLOR = (255, 199, 87)  # BGR, blue
REFERENCE_LINE_COLOR = (255, 255, 255)
TRAIL_THICKNESS = 4
BANNER_HEIGHT = 56

# Display
MISSING_VALUE = "N/A"

__all__ = [name for name in globals() if name.isupper()]
