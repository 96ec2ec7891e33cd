"""
Pothole Survey Analysis

Frame-by-frame pothole analysis for road-survey videos.

Stages:
1. Contour extraction - segmentation mask, SAM or simulated blobs
2. Classification - size category and position-weighted risk per pothole
3. Aggregation - video-level statistics and detection heatmap
4. Reporting - hotspot analysis and severity-rated text report
"""

from .aggregator import AggregateStatistics, Aggregator, AnalysisSession
from .analyzer import PotholeSurveyAnalyzer
from .classifier import DefectClassifier, RiskLevel, SizeCategory, classify
from .frame_analyzer import DetectionRecord, FrameAnalyzer, FrameResult
from .geometry import bounding_box, centroid, contour_area
from .hotspots import Hotspot, find_hotspots, rank_hotspots
from .report import SurveyReport, render_report, save_report, severity_rating

__version__ = "1.0.0"
__author__ = "Pothole Survey Analysis Team"
