import pytest

from volley_vision.keys import KEY_ENTER, KEY_ESC, key_action


@pytest.mark.parametrize(
    "char,action",
    [
        ("n", "end_rep"),
        ("z", "undo"),
        ("r", "reset"),
        ("s", "replay"),
        ("t", "toggle_trails"),
        ("q", "quit"),
    ],
)
def test_letter_keys_match_either_case(char, action):
    assert key_action(ord(char)) == action
    assert key_action(ord(char.upper())) == action


def test_special_keys():
    assert key_action(KEY_ENTER) == "replay"
    assert key_action(KEY_ESC) == "quit"
    assert key_action(ord(" ")) == "toggle_play"
    assert key_action(ord(",")) == "step_back"
    assert key_action(ord(".")) == "step_forward"


def test_no_key_or_unbound_key():
    assert key_action(-1) is None
    assert key_action(0xFF) is None
    assert key_action(ord("x")) is None


def test_high_bits_from_wait_key_are_masked():
    assert key_action(0x100000 | ord("N")) == "end_rep"
