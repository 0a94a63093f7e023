import pytest

from volley_vision.calibration import CalibrationPoint, finalize_calibration
from volley_vision.session import AnnotationSession


NET_HEIGHT = 2.43
NET_CORNERS = [(100, 400), (100, 200), (700, 410), (700, 205)]


@pytest.fixture
def net_corners():
    return [CalibrationPoint(x, y) for x, y in NET_CORNERS]


@pytest.fixture
def model(net_corners):
    return finalize_calibration(*net_corners, reference_height_m=NET_HEIGHT)


@pytest.fixture
def recording_session():
    session = AnnotationSession()
    for x, y in NET_CORNERS:
        session.add_calibration_point(x, y)
    return session
