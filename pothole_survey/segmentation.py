"""
Contour Sources

A contour source turns one video frame into the list of pothole contours the
frame analyzer consumes. Three sources are provided:
1. MaskContourExtractor - contours of an existing binary segmentation mask
2. SimulatedContourSource - threshold + morphology blobs, for pipeline testing
   without a model
3. SamContourSource - Segment Anything Model masks filtered to the road area

Model handles are created by the caller and passed to the analyzer; nothing
here is loaded at import time.
"""

import logging
import os
from typing import List, Optional

import numpy as np
import cv2

logger = logging.getLogger(__name__)


def _to_gray(frame: np.ndarray) -> np.ndarray:
    if frame.ndim == 2:
        return frame
    if frame.ndim == 3 and frame.shape[2] == 3:
        return cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)
    if frame.ndim == 3 and frame.shape[2] == 4:
        return cv2.cvtColor(frame, cv2.COLOR_BGRA2GRAY)
    raise ValueError(f"Unsupported frame shape: {frame.shape}")


def _external_contours(binary: np.ndarray) -> List[np.ndarray]:
    contours, _ = cv2.findContours(
        binary.astype(np.uint8),
        cv2.RETR_EXTERNAL,
        cv2.CHAIN_APPROX_SIMPLE
    )
    return list(contours)


class MaskContourExtractor:
    """
    Extract pothole outlines from a segmentation mask

    Args:
        threshold: Pixels above this value count as pothole
        min_area: Drop contours at or below this area
        max_area: Drop contours at or above this area (None = no limit)
    """

    def __init__(
        self,
        threshold: int = 127,
        min_area: float = 0,
        max_area: Optional[float] = None
    ):
        self.threshold = threshold
        self.min_area = min_area
        self.max_area = max_area

    def __call__(self, mask: np.ndarray) -> List[np.ndarray]:
        if mask.dtype == bool:
            binary = mask.astype(np.uint8)
        else:
            binary = (_to_gray(mask) > self.threshold).astype(np.uint8)

        result = []
        for contour in _external_contours(binary):
            area = cv2.contourArea(contour)
            if area <= self.min_area:
                continue
            if self.max_area is not None and area >= self.max_area:
                continue
            result.append(contour.reshape(-1, 2))

        return result


class SimulatedContourSource:
    """
    Blob-based stand-in for a segmentation model

    Bright regions of the frame are closed into blobs; blobs of plausible
    pothole size are kept at random, with small ones kept more often to
    mimic a real size distribution. Seed it for reproducible runs.
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        intensity_threshold: int = 100,
        kernel_size: int = 20,
        min_area: float = 1000,
        max_area: float = 20000,
        small_threshold: float = 5000
    ):
        self.rng = np.random.default_rng(seed)
        self.intensity_threshold = intensity_threshold
        self.kernel = cv2.getStructuringElement(cv2.MORPH_ELLIPSE, (kernel_size, kernel_size))
        self.min_area = min_area
        self.max_area = max_area
        self.small_threshold = small_threshold

    def __call__(self, frame: np.ndarray) -> List[np.ndarray]:
        gray = _to_gray(frame)
        _, binary = cv2.threshold(gray, self.intensity_threshold, 255, cv2.THRESH_BINARY)
        binary = cv2.morphologyEx(binary, cv2.MORPH_CLOSE, self.kernel)

        selected = []
        for contour in _external_contours(binary):
            area = cv2.contourArea(contour)
            if not self.min_area < area < self.max_area:
                continue

            # Keep ~70% of small blobs, ~30% of larger ones
            keep_above = 0.3 if area < self.small_threshold else 0.7
            if self.rng.random() > keep_above:
                selected.append(contour.reshape(-1, 2))

        return selected


class SamContourSource:
    """
    Pothole contours from Meta's Segment Anything Model (SAM)

    Uses the automatic mask generator and keeps masks that:
    - fall inside the area bounds
    - have their center in the lower 70% of the frame (road surface)
    """

    def __init__(
        self,
        checkpoint_path: str = "models/sam_vit_b_01ec64.pth",
        model_type: str = "vit_b",
        device: str = "cuda",
        min_area: int = 1000,
        max_area: int = 500000
    ):
        """
        Initialize SAM model

        Args:
            checkpoint_path: Path to SAM checkpoint
            model_type: Model variant (vit_h, vit_l, vit_b)
            device: Device to run model on (cuda/cpu)
            min_area: Minimum mask area in pixels
            max_area: Maximum mask area in pixels
        """
        try:
            import torch
            from segment_anything import sam_model_registry, SamAutomaticMaskGenerator
        except ImportError:
            raise ImportError(
                "SAM support needs torch and segment-anything. "
                "Run: pip install 'pothole-survey[sam]'"
            )

        if not os.path.exists(checkpoint_path):
            raise FileNotFoundError(
                f"SAM checkpoint not found at {checkpoint_path}. "
                f"Download from: https://github.com/facebookresearch/segment-anything#model-checkpoints"
            )

        self.device = device if torch.cuda.is_available() else "cpu"
        self.min_area = min_area
        self.max_area = max_area
        self.extractor = MaskContourExtractor()

        logger.info("Loading SAM model (%s) on %s", model_type, self.device)

        sam = sam_model_registry[model_type](checkpoint=checkpoint_path)
        sam.to(device=self.device)

        self.mask_generator = SamAutomaticMaskGenerator(
            model=sam,
            points_per_side=32,
            pred_iou_thresh=0.80,
            stability_score_thresh=0.85,
            crop_n_layers=1,
            crop_n_points_downscale_factor=2,
            min_mask_region_area=min_area
        )

    def __call__(self, frame: np.ndarray) -> List[np.ndarray]:
        if frame.ndim != 3 or frame.shape[2] != 3:
            raise ValueError("Frame must be BGR with shape (H, W, 3)")

        image_rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        masks = self.mask_generator.generate(image_rgb)

        contours = []
        for mask in masks:
            if not self.min_area < mask['area'] < self.max_area:
                continue

            segmentation = mask['segmentation']
            y_indices, _ = np.where(segmentation)
            if len(y_indices) == 0 or np.mean(y_indices) < frame.shape[0] * 0.3:
                continue

            contours.extend(self.extractor(segmentation))

        return contours
