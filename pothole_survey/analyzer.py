"""
Main Analyzer Module

Runs the full survey pipeline over one video:
1. Contour extraction (pluggable contour source)
2. Per-frame classification (FrameAnalyzer)
3. Aggregation across frames (Aggregator)
4. Hotspot clustering and report rendering

Frames are supplied by the caller (decoded video, image sequence, ...), so
this module never touches video files or model weights directly.
"""

import logging
import os
import threading
import time
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional, Tuple

import numpy as np
import cv2

from .aggregator import AggregateStatistics, Aggregator, AnalysisSession
from .classifier import DefectClassifier
from .config import load_config
from .frame_analyzer import FrameAnalyzer, FrameResult
from .geometry import Contour
from .hotspots import find_hotspots, rank_hotspots
from .report import render_report, save_report
from .visualization import save_heatmap

logger = logging.getLogger(__name__)

ContourSource = Callable[[np.ndarray], List[Contour]]
ProgressCallback = Callable[[int, int, int, float], None]


class PotholeSurveyAnalyzer:
    """
    Complete pothole survey pipeline for one video at a time

    Combines:
    - A contour source (segmentation model, mask extractor or simulation)
    - Size/risk classification per detection
    - Video-level statistics and detection heatmap
    - Hotspot analysis and a text report
    """

    def __init__(
        self,
        config_path: Optional[str] = None,
        contour_source: Optional[ContourSource] = None,
        frame_stride: Optional[int] = None,
        frame_size: Optional[Tuple[int, int]] = None,
        heatmap_fill: Optional[bool] = None,
        hotspot_radius: Optional[float] = None,
        model_label: Optional[str] = None
    ):
        """
        Initialize the analyzer

        Args:
            config_path: Path to config.yaml (optional)
            contour_source: Callable mapping a frame to its pothole contours
            frame_stride: Analyze every n-th frame
            frame_size: (width, height) frames are resized to before analysis
            heatmap_fill: Stamp filled contours into the heatmap instead of outlines
            hotspot_radius: Proximity radius for hotspot clustering (pixels)
            model_label: Detector description printed in the report

        Keyword arguments override values from the config file.
        """
        config = load_config(config_path)
        analysis = config['analysis']

        if frame_stride is not None:
            analysis['frame_stride'] = frame_stride
        if frame_size is not None:
            analysis['frame_size'] = frame_size
        if heatmap_fill is not None:
            analysis['heatmap_fill'] = heatmap_fill
        if hotspot_radius is not None:
            config['hotspots']['radius'] = hotspot_radius
        if model_label is not None:
            config['report']['model_label'] = model_label

        self.frame_stride = int(analysis['frame_stride'])
        if self.frame_stride < 1:
            raise ValueError(f"frame_stride must be >= 1, got {self.frame_stride}")

        self.frame_size = tuple(analysis['frame_size']) if analysis['frame_size'] else None
        self.hotspot_radius = float(config['hotspots']['radius'])
        self.model_label = config['report']['model_label']
        self.contour_source = contour_source

        self.classifier = DefectClassifier({
            'small': config['classifier']['small_threshold'],
            'large': config['classifier']['large_threshold'],
        })
        self.frame_analyzer = FrameAnalyzer(
            classifier=self.classifier,
            heatmap_fill=bool(analysis['heatmap_fill'])
        )
        self.aggregator = Aggregator()
        self.config = config

    def _prepare_frame(self, frame: np.ndarray) -> np.ndarray:
        if self.frame_size is None:
            return frame
        width, height = self.frame_size
        if frame.shape[1] == width and frame.shape[0] == height:
            return frame
        return cv2.resize(frame, (width, height))

    def analyze_frames(
        self,
        frames: Iterable[np.ndarray],
        video_name: str,
        duration_seconds: float,
        contour_source: Optional[ContourSource] = None,
        cancel_event: Optional[threading.Event] = None,
        progress_callback: Optional[ProgressCallback] = None,
        output_dir: Optional[str] = None,
        generated_at: Optional[datetime] = None
    ) -> Dict:
        """
        Analyze a sequence of decoded video frames

        Args:
            frames: Frames in playback order (BGR or greyscale arrays)
            video_name: Video file name for the report
            duration_seconds: Video duration for the report
            contour_source: Overrides the analyzer's contour source for this run
            cancel_event: Checked before each frame; when set, the run stops
                          and a report is built from the frames done so far
            progress_callback: Called after each analyzed frame with
                               (frames_processed, frames_seen, total_potholes, elapsed_s)
            output_dir: Directory for the report and heatmap files (optional)
            generated_at: Report timestamp (defaults to now)

        Returns:
            Survey results
        """
        source = contour_source or self.contour_source
        if source is None:
            raise ValueError("No contour source configured")

        def analyze(index: int, frame: np.ndarray) -> FrameResult:
            frame = self._prepare_frame(frame)
            height, width = frame.shape[:2]
            return self.frame_analyzer.analyze_frame((width, height), source(frame), frame_index=index)

        return self._run(
            frames, analyze, self.frame_stride, video_name, duration_seconds,
            cancel_event, progress_callback, output_dir, generated_at
        )

    def analyze_contour_frames(
        self,
        frame_size: Tuple[int, int],
        contour_frames: Iterable[List[Contour]],
        video_name: str,
        duration_seconds: float,
        cancel_event: Optional[threading.Event] = None,
        progress_callback: Optional[ProgressCallback] = None,
        output_dir: Optional[str] = None,
        generated_at: Optional[datetime] = None
    ) -> Dict:
        """
        Analyze pre-extracted contour sets, one per already-sampled frame

        No frame stride is applied here: every item counts as a processed frame.

        Args:
            frame_size: (width, height) the contours are expressed in
            contour_frames: Contour list for each frame
            (other arguments as in analyze_frames)
        """
        def analyze(index: int, contours: List[Contour]) -> FrameResult:
            return self.frame_analyzer.analyze_frame(frame_size, contours, frame_index=index)

        return self._run(
            contour_frames, analyze, 1, video_name, duration_seconds,
            cancel_event, progress_callback, output_dir, generated_at
        )

    def _run(
        self,
        items: Iterable,
        analyze: Callable[[int, object], FrameResult],
        stride: int,
        video_name: str,
        duration_seconds: float,
        cancel_event: Optional[threading.Event],
        progress_callback: Optional[ProgressCallback],
        output_dir: Optional[str],
        generated_at: Optional[datetime]
    ) -> Dict:
        logger.info("Analyzing %s (every %d frame(s))", video_name, stride)

        session = self.aggregator.begin()
        start_time = time.monotonic()
        frames_seen = 0
        processed = 0
        total_potholes = 0
        cancelled = False

        for index, item in enumerate(items):
            if cancel_event is not None and cancel_event.is_set():
                cancelled = True
                logger.info("Analysis cancelled after %d processed frames", processed)
                break

            frames_seen += 1
            if index % stride:
                continue

            frame_result = analyze(index, item)
            self.aggregator.ingest(session, frame_result)
            processed += 1
            total_potholes += len(frame_result.records)

            logger.debug("Frame %d: %d potholes", index, len(frame_result.records))

            if progress_callback is not None:
                progress_callback(processed, frames_seen, total_potholes, time.monotonic() - start_time)

        # The frame source may have stopped early because of the cancel request
        if cancel_event is not None and cancel_event.is_set():
            cancelled = True

        return self._summarize(
            session, video_name, duration_seconds, processed, frames_seen,
            cancelled, time.monotonic() - start_time, output_dir, generated_at
        )

    def _summarize(
        self,
        session: AnalysisSession,
        video_name: str,
        duration_seconds: float,
        processed: int,
        frames_seen: int,
        cancelled: bool,
        elapsed: float,
        output_dir: Optional[str],
        generated_at: Optional[datetime]
    ) -> Dict:
        stats = self.aggregator.finalize(session)

        # Records stay in ingestion order so hotspot seeding follows the video
        hotspots = find_hotspots(stats.records, radius=self.hotspot_radius)

        report = render_report(
            video_name=video_name,
            duration_seconds=duration_seconds,
            frames_processed=processed,
            stats=stats,
            hotspots=hotspots,
            model_label=self.model_label,
            generated_at=generated_at
        )

        outputs = {}
        report_saved = False
        if output_dir:
            report_saved, report_path = save_report(report, output_dir)
            if report_saved:
                outputs['report'] = report_path
            outputs.update(self._save_heatmap(stats, output_dir, report.generated_at))

        logger.info(
            "Found %d potholes in %d frames (severity %.1f/10)",
            stats.total_potholes, processed, report.severity
        )

        return {
            'status': 'cancelled' if cancelled else 'success',
            'video_name': video_name,
            'timestamp': report.generated_at.isoformat(),
            'frames_seen': frames_seen,
            'frames_processed': processed,
            'processing_time_s': elapsed,
            'total_potholes': stats.total_potholes,
            'severity': report.severity,
            'statistics': stats,
            'hotspots': rank_hotspots(hotspots),
            'report': report,
            'report_saved': report_saved,
            'outputs': outputs
        }

    def _save_heatmap(
        self,
        stats: AggregateStatistics,
        output_dir: str,
        generated_at: datetime
    ) -> Dict:
        if stats.heatmap is None:
            return {}

        path = os.path.join(
            output_dir, f"pothole_heatmap_{generated_at.strftime('%Y%m%d_%H%M%S')}.png"
        )
        if save_heatmap(stats.heatmap, path):
            return {'heatmap': path}
        return {}
