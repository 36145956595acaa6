import logging
from typing import List, Optional
import cv2
import numpy as np

from .config import DEFAULT_CONFIG, VisionConfig
from .geometry import (
    approx_poly,
    contour_centroid,
    contour_extent,
    find_contours,
    is_convex_quad,
    is_rectangle_angles,
)
from .preprocess import threshold_stages, to_gray
from .types import DetectedShape

logger = logging.getLogger(__name__)


def detect_rects_from_mask(
    mask: np.ndarray,
    *,
    min_area: float = 100.0,
    poly_eps_ratio: float = 0.04,
    angle_tol_deg: float = 15.0,
) -> List[DetectedShape]:
    out: List[DetectedShape] = []

    for cnt in find_contours(mask):
        area = float(cv2.contourArea(cnt))
        if area < min_area:
            continue

        poly = approx_poly(cnt, poly_eps_ratio)
        if len(poly) != 4 or not is_convex_quad(poly):
            continue

        if not is_rectangle_angles(poly, tol_deg=angle_tol_deg):
            continue

        # centroid and extent come from the raw contour, not the approximation
        cxy = contour_centroid(cnt)
        if cxy is None:
            continue

        out.append(DetectedShape(
            contour=cnt,
            centroid=cxy,
            extent=contour_extent(cnt),
            area=area,
        ))
    return out


def segment_shapes(image: Optional[np.ndarray], config: VisionConfig = DEFAULT_CONFIG) -> List[DetectedShape]:
    """Find rectangular marks in one candidate image.

    Unreadable input (None, empty array, odd channel layout, OpenCV failure)
    yields an empty list rather than an exception.
    """
    if image is None or getattr(image, "size", 0) == 0:
        return []
    try:
        gray = to_gray(image)
        mask = threshold_stages(gray, config)["combined"]
        shapes = detect_rects_from_mask(
            mask,
            min_area=config.min_area,
            poly_eps_ratio=config.approx_eps_ratio,
            angle_tol_deg=config.angle_tol_deg,
        )
    except (cv2.error, ValueError) as e:
        logger.warning("Segmentation failed: %s", e)
        return []
    logger.debug("Found %d rectangle candidates.", len(shapes))
    return shapes
