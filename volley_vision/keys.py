"""
Keyboard bindings for the OpenCV annotator. Letter keys match either case.
"""

from typing import Optional

KEY_ENTER = 13
KEY_ESC = 27

KEY_ACTIONS = {
    "q": "quit",
    " ": "toggle_play",
    "n": "end_rep",
    "z": "undo",
    ",": "step_back",
    ".": "step_forward",
    "t": "toggle_trails",
    "s": "replay",
    "r": "reset",
}


def key_action(key: int) -> Optional[str]:
    """Action name for a ``cv2.waitKey`` code, or None when unbound."""
    if key < 0:
        return None
    key &= 0xFF
    if key == KEY_ESC:
        return "quit"
    if key == KEY_ENTER:
        return "replay"
    return KEY_ACTIONS.get(chr(key).lower())


__all__ = ["KEY_ENTER", "KEY_ESC", "KEY_ACTIONS", "key_action"]
