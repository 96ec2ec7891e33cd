#!/usr/bin/env python3
"""
Example script demonstrating the Pothole Survey Analysis pipeline

This script shows how to:
1. Decode a road-survey video with OpenCV
2. Pick a contour source (simulated blobs or SAM)
3. Run the survey analysis with cancellation on Ctrl+C
4. Save the report and heatmap
"""

import os
import signal
import sys
import threading

import cv2

# Add repo root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from pothole_survey.analyzer import PotholeSurveyAnalyzer
from pothole_survey.logging_config import setup_logging
from pothole_survey.segmentation import SamContourSource, SimulatedContourSource


def iter_video_frames(cap):
    """Yield frames until the capture runs out"""
    while True:
        ok, frame = cap.read()
        if not ok:
            return
        yield frame


def main():
    """Main example function"""
    setup_logging()

    print("\n" + "=" * 80)
    print("POTHOLE SURVEY ANALYSIS - EXAMPLE")
    print("=" * 80 + "\n")

    if len(sys.argv) < 2:
        print("Usage:")
        print("  python examples/demo.py path/to/road_video.mp4 [sam_checkpoint.pth]")
        return

    video_path = sys.argv[1]
    if not os.path.exists(video_path):
        print(f"\n❌ Video not found: {video_path}")
        return

    # ═══════════════════════════════════════════════════════════════════════
    # Contour Source
    # ═══════════════════════════════════════════════════════════════════════
    print("[1/3] Preparing contour source...")

    if len(sys.argv) > 2:
        source = SamContourSource(checkpoint_path=sys.argv[2], model_type="vit_b")
        model_label = "Segment Anything (vit_b)"
    else:
        source = SimulatedContourSource(seed=0)
        model_label = "Simulated contours"

    analyzer = PotholeSurveyAnalyzer(
        config_path="config.yaml",
        contour_source=source,
        model_label=model_label
    )

    # ═══════════════════════════════════════════════════════════════════════
    # Analyze Video
    # ═══════════════════════════════════════════════════════════════════════
    print(f"\n[2/3] Analyzing {video_path}...")

    cap = cv2.VideoCapture(video_path)
    if not cap.isOpened():
        print(f"\n❌ Could not open video: {video_path}")
        return

    fps = cap.get(cv2.CAP_PROP_FPS) or 30.0
    frame_count = cap.get(cv2.CAP_PROP_FRAME_COUNT)
    duration = frame_count / fps if frame_count > 0 else 0.0

    def show_progress(processed, seen, potholes, elapsed):
        sys.stdout.write(
            f"\r  Frame {seen} | processed {processed} | potholes {potholes} | {elapsed:.0f}s"
        )
        sys.stdout.flush()

    # Ctrl+C only requests cancellation; frames done so far are still reported
    cancel = threading.Event()
    previous_handler = signal.signal(signal.SIGINT, lambda signum, frame: cancel.set())

    try:
        results = analyzer.analyze_frames(
            iter_video_frames(cap),
            video_name=os.path.basename(video_path),
            duration_seconds=duration,
            cancel_event=cancel,
            progress_callback=show_progress,
            output_dir="./outputs"
        )
    finally:
        signal.signal(signal.SIGINT, previous_handler)
        cap.release()
    print()

    # ═══════════════════════════════════════════════════════════════════════
    # Display Results Summary
    # ═══════════════════════════════════════════════════════════════════════
    print("\n[3/3] Results")
    stats = results['statistics']

    print(f"""
📊 SUMMARY
─────────────────────────────────────────────────────────
Status:           {results['status']}
Frames analyzed:  {results['frames_processed']}
Total Potholes:   {results['total_potholes']}
Average Area:     {stats.average_area:.2f} px²
Severity:         {results['severity']:.1f}/10
Hotspots:         {len(results['hotspots'])}

📁 OUTPUT FILES
─────────────────────────────────────────────────────────
""")
    for output_type, path in results['outputs'].items():
        print(f"  {output_type}: {path}")

    if not results['report_saved']:
        print("\n⚠️  Report could not be saved, printing instead:\n")
        print(results['report'].text)

    print("\n✅ Demo complete!")


if __name__ == "__main__":
    main()
