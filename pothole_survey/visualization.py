"""
Heatmap rendering for survey outputs
"""

import logging
import os

import numpy as np
import cv2

logger = logging.getLogger(__name__)


def render_heatmap(heatmap: np.ndarray, colormap: int = cv2.COLORMAP_JET) -> np.ndarray:
    """
    Colorize a detection-count heatmap

    Args:
        heatmap: (H, W) counts from AggregateStatistics.heatmap
        colormap: OpenCV colormap

    Returns:
        BGR uint8 image of the same size
    """
    heatmap = heatmap.astype(np.float32)
    peak = float(heatmap.max()) if heatmap.size else 0.0
    low = float(heatmap.min()) if heatmap.size else 0.0

    if peak > low:
        normalized = (heatmap - low) / (peak - low)
    else:
        # Flat heatmap (e.g. no detections)
        normalized = np.zeros_like(heatmap)

    heatmap_uint8 = (normalized * 255).astype(np.uint8)
    return cv2.applyColorMap(heatmap_uint8, colormap)


def save_heatmap(heatmap: np.ndarray, path: str, colormap: int = cv2.COLORMAP_JET) -> bool:
    """Write the colorized heatmap image; returns False if it could not be written"""
    directory = os.path.dirname(path)
    try:
        if directory:
            os.makedirs(directory, exist_ok=True)
        written = cv2.imwrite(path, render_heatmap(heatmap, colormap))
    except (OSError, cv2.error) as e:
        logger.error("Could not write heatmap to %s: %s", path, e)
        return False

    if not written:
        logger.error("Could not write heatmap to %s", path)
    return bool(written)
