"""
Video-level aggregation of per-frame results

Folds FrameResults into running histograms, the area list, the record list
and a cumulative heatmap. All folds are additive, so the totals do not
depend on the order in which frames are ingested.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np

from .classifier import RiskLevel, SizeCategory
from .frame_analyzer import DetectionRecord, FrameResult

logger = logging.getLogger(__name__)


@dataclass
class AggregateStatistics:
    size_counts: Dict[SizeCategory, int]
    risk_counts: Dict[RiskLevel, int]
    areas: List[float]
    records: List[DetectionRecord]
    heatmap: Optional[np.ndarray]  # int32 (H, W); None until a frame size is known
    frames_ingested: int = 0

    @property
    def total_potholes(self) -> int:
        return len(self.records)

    @property
    def average_area(self) -> float:
        return float(np.mean(self.areas)) if self.areas else 0.0

    def to_dict(self) -> Dict:
        return {
            'size_counts': {k.value: v for k, v in self.size_counts.items()},
            'risk_counts': {k.value: v for k, v in self.risk_counts.items()},
            'total_potholes': self.total_potholes,
            'average_area': self.average_area,
            'frames_ingested': self.frames_ingested,
        }


@dataclass
class AnalysisSession:
    """Mutable accumulator for one video. Only the Aggregator touches it."""

    size_counts: Dict[SizeCategory, int] = field(
        default_factory=lambda: {size: 0 for size in SizeCategory})
    risk_counts: Dict[RiskLevel, int] = field(
        default_factory=lambda: {risk: 0 for risk in RiskLevel})
    areas: List[float] = field(default_factory=list)
    records: List[DetectionRecord] = field(default_factory=list)
    heatmap: Optional[np.ndarray] = None
    frames_ingested: int = 0
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


class Aggregator:
    """
    begin / ingest / finalize over one video

    ingest holds the session lock, so frames analyzed on several threads can
    be merged safely. finalize can be called at any point, e.g. after the
    caller stopped early, and returns whatever was ingested so far.
    """

    def begin(self, frame_shape: Optional[Tuple[int, int]] = None) -> AnalysisSession:
        """
        Start a new session

        Args:
            frame_shape: Optional (height, width) to pre-allocate the heatmap
        """
        session = AnalysisSession()
        if frame_shape is not None:
            session.heatmap = np.zeros(tuple(frame_shape), dtype=np.int32)
        return session

    def ingest(self, session: AnalysisSession, frame_result: FrameResult):
        delta = frame_result.heatmap_delta

        with session.lock:
            if session.heatmap is None:
                session.heatmap = np.zeros(delta.shape, dtype=np.int32)
            elif session.heatmap.shape != delta.shape:
                raise ValueError(
                    f"Heatmap shape mismatch: session {session.heatmap.shape} "
                    f"vs frame {delta.shape}"
                )

            for record in frame_result.records:
                session.size_counts[record.size_category] += 1
                session.risk_counts[record.risk_level] += 1
                session.areas.append(record.area)
                session.records.append(record)

            session.heatmap += delta.astype(np.int32)
            session.frames_ingested += 1

    def finalize(self, session: AnalysisSession) -> AggregateStatistics:
        with session.lock:
            stats = AggregateStatistics(
                size_counts=dict(session.size_counts),
                risk_counts=dict(session.risk_counts),
                areas=list(session.areas),
                records=list(session.records),
                heatmap=None if session.heatmap is None else session.heatmap.copy(),
                frames_ingested=session.frames_ingested
            )

        logger.info(
            "Aggregated %d potholes over %d frames",
            stats.total_potholes, stats.frames_ingested
        )
        return stats
