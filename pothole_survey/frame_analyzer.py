"""
Per-frame Pothole Analysis

Turns one frame's contour set into classified detection records and a
binary heatmap delta. Contours arrive already extracted; where they come
from (segmentation model, simulation) does not matter here.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np
import cv2

from .classifier import DefectClassifier, RiskLevel, SizeCategory
from .geometry import Contour, as_cv_contour, centroid, contour_area

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DetectionRecord:
    """A single classified pothole detection"""

    centroid: Tuple[float, float]
    area: float
    size_category: SizeCategory
    risk_level: RiskLevel
    frame_index: Optional[int] = None

    def to_dict(self) -> Dict:
        return {
            'centroid': list(self.centroid),
            'area': self.area,
            'size_category': self.size_category.value,
            'risk_level': self.risk_level.value,
            'frame_index': self.frame_index,
        }


@dataclass
class FrameResult:
    """Detections and heatmap delta for one frame"""

    records: List[DetectionRecord]
    heatmap_delta: np.ndarray  # uint8 (H, W), 1 where a detection touched
    frame_index: Optional[int] = None

    @property
    def size_counts(self) -> Dict[SizeCategory, int]:
        counts = Counter(r.size_category for r in self.records)
        return {size: counts.get(size, 0) for size in SizeCategory}

    @property
    def risk_counts(self) -> Dict[RiskLevel, int]:
        counts = Counter(r.risk_level for r in self.records)
        return {risk: counts.get(risk, 0) for risk in RiskLevel}

    @property
    def areas(self) -> List[float]:
        return [r.area for r in self.records]


class FrameAnalyzer:
    """
    Classify every contour of a frame and stamp it into a heatmap delta

    Stamping draws the 1px contour outline by default. With heatmap_fill the
    whole contour region is marked instead.
    """

    def __init__(
        self,
        classifier: Optional[DefectClassifier] = None,
        heatmap_fill: bool = False
    ):
        self.classifier = classifier or DefectClassifier()
        self.heatmap_fill = heatmap_fill

    def analyze_frame(
        self,
        frame_size: Tuple[int, int],
        contours: Iterable[Contour],
        frame_index: Optional[int] = None
    ) -> FrameResult:
        """
        Analyze one frame's contours

        Args:
            frame_size: (width, height) of the frame in pixels
            contours: Closed contours, one per candidate pothole
            frame_index: Source frame index, stamped on every record

        Returns:
            FrameResult with one record per contour of positive area
        """
        width, height = int(frame_size[0]), int(frame_size[1])
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid frame size: {frame_size}")

        heatmap_delta = np.zeros((height, width), dtype=np.uint8)
        records = []
        discarded = 0

        for contour in contours:
            # An empty point list has no area either
            area = contour_area(contour) if np.size(contour) else 0.0
            if area <= 0:
                discarded += 1
                continue

            cx, cy = centroid(contour)
            size, risk = self.classifier.classify(area, cy, height)

            records.append(DetectionRecord(
                centroid=(cx, cy),
                area=area,
                size_category=size,
                risk_level=risk,
                frame_index=frame_index
            ))

            self._stamp(heatmap_delta, contour)

        if discarded:
            logger.debug("Frame %s: discarded %d zero-area contours", frame_index, discarded)

        return FrameResult(records=records, heatmap_delta=heatmap_delta, frame_index=frame_index)

    def _stamp(self, heatmap_delta: np.ndarray, contour: Contour):
        points = np.round(as_cv_contour(contour)).astype(np.int32)
        thickness = cv2.FILLED if self.heatmap_fill else 1
        cv2.drawContours(heatmap_delta, [points], -1, 1, thickness)
