from typing import List, Optional, Tuple
import numpy as np
import cv2

# float slack so an angle of exactly 90 +/- tol still passes
_ANGLE_EPS_DEG = 1e-6


def find_contours(mask: np.ndarray) -> List[np.ndarray]:
    contours, _ = cv2.findContours(mask, cv2.RETR_TREE, cv2.CHAIN_APPROX_SIMPLE)
    return list(contours)


def contour_centroid(cnt: np.ndarray) -> Optional[Tuple[float, float]]:
    """Pixel-mass centre of a mark's contour; None for zero-area outlines."""
    m = cv2.moments(cnt)
    mass = m["m00"]
    if abs(mass) < 1e-6:
        return None
    return (float(m["m10"] / mass), float(m["m01"] / mass))


def contour_extent(cnt: np.ndarray) -> float:
    _, _, w, h = cv2.boundingRect(cnt)
    return float(max(w, h))


def approx_poly(cnt: np.ndarray, eps_ratio: float) -> np.ndarray:
    # closed Douglas-Peucker, tolerance scales with the mark's perimeter
    return cv2.approxPolyDP(cnt, eps_ratio * cv2.arcLength(cnt, True), True)


def angle_deg(p0: np.ndarray, p1: np.ndarray, p2: np.ndarray) -> float:
    """Corner angle at p1 between the edges to p0 and p2, in [0, 180] degrees.

    Degenerate corners (coincident points) report 0 so they always fail the
    rectangularity test.
    """
    a = np.asarray(p0, dtype=np.float64) - np.asarray(p1, dtype=np.float64)
    b = np.asarray(p2, dtype=np.float64) - np.asarray(p1, dtype=np.float64)
    if np.hypot(*a) < 1e-6 or np.hypot(*b) < 1e-6:
        return 0.0
    cross = a[0] * b[1] - a[1] * b[0]
    return float(np.degrees(np.arctan2(abs(cross), np.dot(a, b))))


def is_convex_quad(poly: np.ndarray) -> bool:
    if len(poly) != 4:
        return False
    pts = np.asarray(poly).reshape(-1, 1, 2).astype(np.float32)
    return bool(cv2.isContourConvex(pts))


def is_rectangle_angles(poly: np.ndarray, tol_deg: float) -> bool:
    """True when every corner of the 4-point polygon is within tol_deg of 90 degrees.

    The bound is inclusive. Points are taken in polygon order, so callers should
    check convexity first (see is_convex_quad).
    """
    if len(poly) != 4:
        return False
    pts = np.asarray(poly, dtype=np.float64).reshape(-1, 2)
    for i in range(4):
        p0 = pts[(i - 1) % 4]
        p1 = pts[i]
        p2 = pts[(i + 1) % 4]
        a = angle_deg(p0, p1, p2)
        if abs(a - 90.0) - tol_deg > _ANGLE_EPS_DEG:
            return False
    return True
