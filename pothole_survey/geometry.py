"""
Contour geometry helpers

Area, centroid and bounding box for a single closed contour. Contours can be
given as any sequence of (x, y) pairs or as numpy arrays shaped (N, 2) or
(N, 1, 2), the layout OpenCV returns from findContours.
"""

import numpy as np
import cv2
from typing import Sequence, Tuple, Union

Contour = Union[np.ndarray, Sequence[Sequence[float]]]


def as_cv_contour(contour: Contour) -> np.ndarray:
    """
    Convert a contour to the (N, 1, 2) float32 layout OpenCV expects

    Raises:
        ValueError: If the contour has no points or is not 2-D
    """
    points = np.asarray(contour, dtype=np.float32)
    if points.size == 0:
        raise ValueError("Contour has no points")
    if points.shape[-1] != 2:
        raise ValueError(f"Contour points must be 2-D, got shape {points.shape}")
    return np.ascontiguousarray(points.reshape(-1, 1, 2))


def contour_area(contour: Contour) -> float:
    """Polygon area in square pixels (always >= 0)"""
    points = as_cv_contour(contour)
    if len(points) < 3:
        return 0.0
    return float(cv2.contourArea(points))


def bounding_box(contour: Contour) -> Tuple[int, int, int, int]:
    """
    Upright bounding rectangle as (x, y, width, height)

    Follows cv2.boundingRect: the extent is inclusive, so a single point
    has a 1x1 box.
    """
    pixels = np.floor(as_cv_contour(contour)).astype(np.int32)
    x, y, w, h = cv2.boundingRect(pixels)
    return int(x), int(y), int(w), int(h)


def centroid(contour: Contour) -> Tuple[float, float]:
    """
    Moment-based centroid (m10/m00, m01/m00)

    Degenerate contours (zero area, m00 == 0) use the bounding box center.
    """
    points = as_cv_contour(contour)
    moments = cv2.moments(points)
    if moments['m00'] != 0:
        return (
            float(moments['m10'] / moments['m00']),
            float(moments['m01'] / moments['m00'])
        )

    x, y, w, h = bounding_box(points)
    return x + w / 2.0, y + h / 2.0
