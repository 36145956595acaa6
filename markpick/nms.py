import math
from typing import List
from .types import DetectedShape


def centroid_distance(a: DetectedShape, b: DetectedShape) -> float:
    dx = a.centroid[0] - b.centroid[0]
    dy = a.centroid[1] - b.centroid[1]
    return math.hypot(dx, dy)


def suppress_duplicates(shapes: List[DetectedShape], overlap_factor: float = 0.6) -> List[DetectedShape]:
    """Greedy NMS by area: a shape whose centroid lies closer than
    kept.extent * overlap_factor to an already kept shape is the same mark.
    """
    if not shapes:
        return []
    # largest first; sorted() is stable so equal areas keep discovery order
    shapes = sorted(shapes, key=lambda s: s.area, reverse=True)
    keep: List[DetectedShape] = []
    for s in shapes:
        if all(centroid_distance(s, k) >= k.extent * overlap_factor for k in keep):
            keep.append(s)
    return keep
