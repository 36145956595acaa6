"""Per-shape content measurement.

Every measurement takes the grayscale image and the de-duplicated shapes of one
candidate and returns the integer metric the decision step compares. New rule
subjects plug in with the decorator:

    @measurement("filled")
    def count_filled(gray, shapes, config) -> int:
        ...
"""
import logging
import math
from typing import Callable, Dict, List
import cv2
import numpy as np

from .config import DEFAULT_CONFIG, VisionConfig
from .types import DetectedShape

logger = logging.getLogger(__name__)

Measurement = Callable[[np.ndarray, List[DetectedShape], VisionConfig], int]

_MEASUREMENTS: Dict[str, Measurement] = {}


def measurement(name: str) -> Callable[[Measurement], Measurement]:
    def decorator(fn: Measurement) -> Measurement:
        if name in _MEASUREMENTS:
            raise ValueError(f"Duplicate measurement: {name}")
        _MEASUREMENTS[name] = fn
        return fn
    return decorator


def get_measurement(name: str) -> Measurement:
    try:
        return _MEASUREMENTS[name]
    except KeyError:
        raise KeyError(f"No measurement registered for subject {name!r}") from None


def available_measurements() -> List[str]:
    return sorted(_MEASUREMENTS)


def interior_mask(gray: np.ndarray, shape: DetectedShape, config: VisionConfig = DEFAULT_CONFIG) -> np.ndarray:
    """Filled contour mask eroded inward, so the outline itself is not counted."""
    mask = np.zeros(gray.shape[:2], dtype=np.uint8)
    cv2.drawContours(mask, [shape.contour], -1, 255, -1)
    k = config.erosion_kernel_size
    kernel = cv2.getStructuringElement(cv2.MORPH_ELLIPSE, (k, k))
    iterations = max(1, int(math.floor(shape.extent * config.erosion_factor)))
    return cv2.erode(mask, kernel, iterations=iterations)


def content_ratio(gray: np.ndarray, shape: DetectedShape, config: VisionConfig = DEFAULT_CONFIG) -> float:
    inner = interior_mask(gray, shape, config)
    total = cv2.countNonZero(inner)
    if total == 0:
        return 0.0

    local_mean = cv2.mean(gray, mask=inner)[0]
    thresh = min(config.intensity_cap, local_mean - config.intensity_margin)
    _, dark = cv2.threshold(gray, thresh, 255, cv2.THRESH_BINARY_INV)
    content = cv2.bitwise_and(dark, dark, mask=inner)
    return cv2.countNonZero(content) / float(total)


def is_empty(gray: np.ndarray, shape: DetectedShape, config: VisionConfig = DEFAULT_CONFIG) -> bool:
    return content_ratio(gray, shape, config) < config.emptiness_threshold


@measurement("empty")
def count_empty(gray: np.ndarray, shapes: List[DetectedShape], config: VisionConfig) -> int:
    return sum(1 for s in shapes if is_empty(gray, s, config))


@measurement("filled")
def count_filled(gray: np.ndarray, shapes: List[DetectedShape], config: VisionConfig) -> int:
    return sum(1 for s in shapes if not is_empty(gray, s, config))


def measure(subject: str, gray: np.ndarray, shapes: List[DetectedShape], config: VisionConfig = DEFAULT_CONFIG) -> int:
    fn = get_measurement(subject)
    value = int(fn(gray, shapes, config))
    logger.debug("measure[%s]: %d of %d shapes", subject, value, len(shapes))
    return max(0, value)
