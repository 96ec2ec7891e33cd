"""
Pothole Size and Risk Classification

Every detection is classified by two factors:
- Size: contour area in square pixels (Small / Medium / Large)
- Position: vertical distance from the road center line of the frame

Potholes near the vertical center of the frame sit in the driving line and
get a risk bonus of up to one level. Edge potholes get none.
"""

from enum import Enum
from typing import Dict, Optional, Tuple


class SizeCategory(str, Enum):
    SMALL = "Small"
    MEDIUM = "Medium"
    LARGE = "Large"


class RiskLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"

    @property
    def rank(self) -> int:
        """Sort key: High=2, Medium=1, Low=0"""
        return RISK_RANK[self]


RISK_RANK = {
    RiskLevel.LOW: 0,
    RiskLevel.MEDIUM: 1,
    RiskLevel.HIGH: 2,
}


class DefectClassifier:
    """
    Size and risk classification for a single pothole contour

    Scoring:
    - Base risk by size:  Large=2, Medium=1, Small=0
    - Center factor:      0.0 at top/bottom edge, 1.0 at frame center
    - Adjusted risk:      base + center factor
                          >= 2 -> High, >= 1 -> Medium, else Low
    """

    # Area thresholds in square pixels
    DEFAULT_THRESHOLDS = {
        'small': 5000,    # below this -> Small
        'large': 15000,   # above this -> Large
    }

    BASE_RISK = {
        SizeCategory.SMALL: 0,
        SizeCategory.MEDIUM: 1,
        SizeCategory.LARGE: 2,
    }

    def __init__(self, thresholds: Optional[Dict] = None):
        """
        Initialize classifier

        Args:
            thresholds: Custom {'small': float, 'large': float} area thresholds
                        (uses defaults for missing keys)
        """
        self.thresholds = dict(self.DEFAULT_THRESHOLDS)
        if thresholds:
            self.thresholds.update(thresholds)

        if self.thresholds['small'] > self.thresholds['large']:
            raise ValueError(
                f"Small threshold ({self.thresholds['small']}) exceeds "
                f"large threshold ({self.thresholds['large']})"
            )

    def size_category(self, area: float) -> SizeCategory:
        if area < self.thresholds['small']:
            return SizeCategory.SMALL
        if area > self.thresholds['large']:
            return SizeCategory.LARGE
        return SizeCategory.MEDIUM

    @staticmethod
    def center_factor(centroid_y: float, frame_height: float) -> float:
        """
        How close a point is to the vertical center of the frame

        Args:
            centroid_y: Vertical pixel position
            frame_height: Frame height in pixels

        Returns:
            1.0 at the center, 0.0 at (or beyond) the top/bottom edge
        """
        if frame_height <= 0:
            raise ValueError(f"Frame height must be positive, got {frame_height}")

        road_center = frame_height / 2.0
        factor = 1.0 - abs(centroid_y - road_center) / road_center
        # Centroids outside the frame would otherwise go negative
        return min(1.0, max(0.0, factor))

    def risk_level(
        self,
        size: SizeCategory,
        centroid_y: float,
        frame_height: float
    ) -> RiskLevel:
        adjusted = self.BASE_RISK[size] + self.center_factor(centroid_y, frame_height)

        if adjusted >= 2:
            return RiskLevel.HIGH
        if adjusted >= 1:
            return RiskLevel.MEDIUM
        return RiskLevel.LOW

    def classify(
        self,
        area: float,
        centroid_y: float,
        frame_height: float
    ) -> Tuple[SizeCategory, RiskLevel]:
        """
        Classify a pothole by area and vertical position

        Args:
            area: Contour area in square pixels
            centroid_y: Vertical centroid position in pixels
            frame_height: Frame height in pixels

        Returns:
            (size category, risk level)
        """
        size = self.size_category(area)
        return size, self.risk_level(size, centroid_y, frame_height)


_default_classifier = DefectClassifier()


def classify(area: float, centroid_y: float, frame_height: float) -> Tuple[SizeCategory, RiskLevel]:
    """Classify with the default thresholds"""
    return _default_classifier.classify(area, centroid_y, frame_height)
