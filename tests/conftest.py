from datetime import datetime

import numpy as np
import pytest

from pothole_survey.classifier import RiskLevel, SizeCategory
from pothole_survey.frame_analyzer import DetectionRecord

FRAME_SIZE = (1020, 500)  # (width, height)


def _square(x, y, side):
    return [(x, y), (x + side, y), (x + side, y + side), (x, y + side)]


@pytest.fixture
def square():
    """Axis-aligned square contour with top-left corner (x, y)"""
    return _square


@pytest.fixture
def frame_size():
    return FRAME_SIZE


@pytest.fixture
def fixed_time():
    return datetime(2024, 5, 1, 12, 30, 45)


@pytest.fixture
def record_factory():
    def make(x, y, area=1000.0, size=SizeCategory.SMALL, risk=RiskLevel.LOW, frame_index=None):
        return DetectionRecord(
            centroid=(float(x), float(y)),
            area=area,
            size_category=size,
            risk_level=risk,
            frame_index=frame_index
        )
    return make


@pytest.fixture
def blank_frame():
    def make(width=FRAME_SIZE[0], height=FRAME_SIZE[1]):
        return np.zeros((height, width, 3), dtype=np.uint8)
    return make
