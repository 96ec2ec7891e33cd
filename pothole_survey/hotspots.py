"""
Hotspot detection

Finds places where several potholes were detected close to each other.
Greedy and order-dependent: a record with at least two neighbours within
the radius becomes a hotspot unless an earlier hotspot center already lies
within the radius of it. Pre-sort the records if a canonical result is
needed.
"""

from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np

from .frame_analyzer import DetectionRecord

HOTSPOT_RADIUS = 50.0   # pixels
MIN_RECORDS = 3
MIN_NEIGHBOURS = 2


@dataclass(frozen=True)
class Hotspot:
    center: Tuple[float, float]
    member_count: int

    def to_dict(self):
        return {'center': list(self.center), 'member_count': self.member_count}


def find_hotspots(
    records: Sequence[DetectionRecord],
    radius: float = HOTSPOT_RADIUS
) -> List[Hotspot]:
    """
    Cluster detections into hotspots

    Args:
        records: Detection records, in the order seeds should be considered
        radius: Proximity radius in pixels (strict less-than)

    Returns:
        Hotspots in discovery order
    """
    if len(records) < MIN_RECORDS:
        return []

    points = np.array([r.centroid for r in records], dtype=np.float64)
    diff = points[:, None, :] - points[None, :, :]
    distances = np.hypot(diff[..., 0], diff[..., 1])
    # Each record is at distance 0 from itself
    nearby = (distances < radius).sum(axis=1) - 1

    hotspots: List[Hotspot] = []
    for idx, record in enumerate(records):
        if nearby[idx] < MIN_NEIGHBOURS:
            continue

        x, y = record.centroid
        covered = any(
            np.hypot(x - h.center[0], y - h.center[1]) < radius
            for h in hotspots
        )
        if not covered:
            hotspots.append(Hotspot(center=(x, y), member_count=int(nearby[idx]) + 1))

    return hotspots


def rank_hotspots(hotspots: Sequence[Hotspot]) -> List[Hotspot]:
    """Largest hotspots first; ties keep their discovery order"""
    return sorted(hotspots, key=lambda h: h.member_count, reverse=True)
