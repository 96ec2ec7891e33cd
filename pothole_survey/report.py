"""
Survey Report Generation

Renders the plain-text pothole analysis report for one video:
- Video information
- Summary statistics (size/risk distribution, average area, severity)
- Hotspot analysis (top 5 clusters)
- Per-pothole details, highest risk first
- Recommendations by severity tier

Rendering is deterministic for a given timestamp. Writing the report to
disk is a separate step so a failed write never loses the rendered text.
"""

import logging
import math
import os
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Optional, Sequence, Tuple

from .aggregator import AggregateStatistics
from .classifier import RiskLevel, SizeCategory
from .hotspots import Hotspot, rank_hotspots

logger = logging.getLogger(__name__)

DEFAULT_MODEL_LABEL = "YOLOv8-seg (best_02.pt)"
MAX_LISTED_HOTSPOTS = 5
RULE_WIDTH = 80

RECOMMENDATIONS = {
    'urgent': (
        "URGENT ATTENTION REQUIRED: The analyzed road section shows significant pothole "
        "damage that requires immediate repair.\n"
        "- Prioritize the identified hotspot areas for immediate patching.\n"
        "- Consider complete resurfacing for long-term solution.\n"
        "- Place warning signs for drivers about dangerous road conditions.\n"
    ),
    'moderate': (
        "MODERATE ATTENTION NEEDED: The analyzed road section shows moderate pothole "
        "damage that should be addressed soon.\n"
        "- Schedule repairs for high-risk potholes within the next maintenance cycle.\n"
        "- Monitor the identified hotspots for further deterioration.\n"
    ),
    'minor': (
        "MINOR ATTENTION SUGGESTED: The analyzed road section shows minimal pothole damage.\n"
        "- Address the few identified potholes during regular maintenance cycles.\n"
        "- Re-analyze the road after adverse weather conditions to monitor degradation.\n"
    ),
}


@dataclass(frozen=True)
class SurveyReport:
    text: str
    severity: float
    total_potholes: int
    average_area: float
    generated_at: datetime


def format_fixed(value: float, places: int) -> str:
    """
    Fixed-point text with half-up rounding (0.25 -> "0.3", 12.5 -> "13")

    Rounds the shortest decimal form of the value, so ties that format()
    would send to the even neighbour always go up.
    """
    value = float(value)
    if not math.isfinite(value):
        return f"{value:.{places}f}"
    exponent = Decimal(1).scaleb(-places)
    return str(Decimal(repr(value)).quantize(exponent, rounding=ROUND_HALF_UP))


def severity_rating(risk_counts: Dict[RiskLevel, int], frames_processed: int) -> float:
    """
    Overall road condition on a 0-10 scale

    Medium-risk potholes weigh 0.5, high-risk 1.0, normalized per processed
    frame and capped at 10.
    """
    weighted = risk_counts.get(RiskLevel.MEDIUM, 0) * 0.5 + risk_counts.get(RiskLevel.HIGH, 0) * 1.0
    return min(10.0, weighted / max(1, frames_processed) * 10)


def recommendation_tier(severity: float) -> str:
    if severity >= 7:
        return 'urgent'
    if severity >= 4:
        return 'moderate'
    return 'minor'


def render_report(
    video_name: str,
    duration_seconds: float,
    frames_processed: int,
    stats: AggregateStatistics,
    hotspots: Sequence[Hotspot],
    model_label: str = DEFAULT_MODEL_LABEL,
    generated_at: Optional[datetime] = None
) -> SurveyReport:
    """
    Render the analysis report

    Args:
        video_name: Name of the analyzed video
        duration_seconds: Video duration
        frames_processed: Number of frames actually analyzed
        stats: Finalized aggregate statistics
        hotspots: Hotspots from find_hotspots (any order)
        model_label: Detector description for the header
        generated_at: Report timestamp (defaults to now)

    Returns:
        SurveyReport with the text and the computed summary numbers
    """
    generated_at = generated_at or datetime.now()
    severity = severity_rating(stats.risk_counts, frames_processed)
    average_area = stats.average_area
    heavy_rule = "=" * RULE_WIDTH
    rule = "-" * RULE_WIDTH

    report = f"{heavy_rule}\n"
    report += "POTHOLE DETECTION ANALYSIS REPORT\n"
    report += f"Generated on: {generated_at.strftime('%Y-%m-%d %H:%M:%S')}\n"
    report += f"{heavy_rule}\n\n"

    report += "VIDEO INFORMATION\n"
    report += f"{rule}\n"
    report += f"Filename: {video_name}\n"
    report += f"Duration: {format_fixed(duration_seconds, 2)} seconds\n"
    report += f"Frames analyzed: {frames_processed}\n"
    report += f"Model used: {model_label}\n\n"

    report += "SUMMARY STATISTICS\n"
    report += f"{rule}\n"
    report += f"Total unique potholes detected: {stats.total_potholes}\n"
    report += "Pothole size distribution:\n"
    for size in SizeCategory:
        report += f"  - {size.value}: {stats.size_counts.get(size, 0)}\n"
    report += "\n"
    report += "Risk level distribution:\n"
    for risk in RiskLevel:
        report += f"  - {risk.value} risk: {stats.risk_counts.get(risk, 0)}\n"
    report += "\n"
    report += f"Average pothole area: {format_fixed(average_area, 2)} square pixels\n"
    report += f"Overall road condition severity rating (0-10): {format_fixed(severity, 1)}\n\n"

    report += "HOTSPOT ANALYSIS\n"
    report += f"{rule}\n"
    ranked = rank_hotspots(hotspots)
    if ranked:
        report += f"Identified {len(ranked)} hotspot areas with multiple potholes:\n"
        for i, hotspot in enumerate(ranked[:MAX_LISTED_HOTSPOTS], 1):
            x, y = hotspot.center
            report += (
                f"  {i}. Location: x={format_fixed(x, 0)}, y={format_fixed(y, 0)} - "
                f"{hotspot.member_count} potholes in proximity\n"
            )
    else:
        report += "No significant hotspots identified.\n"
    report += "\n"

    report += "DETAILED POTHOLE INFORMATION\n"
    report += f"{rule}\n"
    # sorted() is stable, equal risks keep detection order
    by_risk = sorted(stats.records, key=lambda r: r.risk_level.rank, reverse=True)
    for i, record in enumerate(by_risk, 1):
        x, y = record.centroid
        report += f"Pothole #{i}:\n"
        report += f"  - Size category: {record.size_category.value}\n"
        report += f"  - Area: {format_fixed(record.area, 2)} square pixels\n"
        report += f"  - Risk level: {record.risk_level.value}\n"
        report += f"  - Position: x={format_fixed(x, 0)}, y={format_fixed(y, 0)}\n"
        report += "\n"

    report += "RECOMMENDATIONS\n"
    report += f"{rule}\n"
    report += RECOMMENDATIONS[recommendation_tier(severity)]

    return SurveyReport(
        text=report,
        severity=severity,
        total_potholes=stats.total_potholes,
        average_area=average_area,
        generated_at=generated_at
    )


def report_filename(generated_at: datetime) -> str:
    return f"pothole_report_{generated_at.strftime('%Y%m%d_%H%M%S')}.txt"


def save_report(
    report: SurveyReport,
    output_dir: str,
    filename: Optional[str] = None
) -> Tuple[bool, str]:
    """
    Write the report text to disk

    Args:
        report: Rendered report
        output_dir: Target directory (created if missing)
        filename: File name (defaults to pothole_report_<timestamp>.txt)

    Returns:
        (success, path). Write errors are logged, not raised.
    """
    path = os.path.join(output_dir, filename or report_filename(report.generated_at))
    try:
        os.makedirs(output_dir, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(report.text)
    except OSError as e:
        logger.error("Could not write report to %s: %s", path, e)
        return False, path

    logger.info("Report saved to %s", path)
    return True, path
