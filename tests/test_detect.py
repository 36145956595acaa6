"""Tests for shape segmentation on synthetic cards."""

import cv2
import numpy as np

from markpick.config import DEFAULT_CONFIG, VisionConfig
from markpick.detect import detect_rects_from_mask, segment_shapes
from markpick.nms import suppress_duplicates


def _marks(img, config=DEFAULT_CONFIG):
    return suppress_duplicates(segment_shapes(img, config), config.overlap_factor)


def test_outlined_squares_are_found(make_card):
    shapes = _marks(make_card("eee"))
    assert len(shapes) == 3
    xs = sorted(s.centroid[0] for s in shapes)
    # squares sit 90px apart
    assert np.allclose(np.diff(xs), 90, atol=2)
    for s in shapes:
        assert 58 <= s.extent <= 66
        assert s.area > 3000


def test_filled_squares_are_still_one_mark_each(make_card):
    assert len(_marks(make_card("fef"))) == 3


def test_outline_registers_inner_and_outer_contours(make_card):
    # the raw tree holds both edges of each stroke; suppression folds them together
    raw = segment_shapes(make_card("e"))
    assert len(raw) >= 2
    assert len(suppress_duplicates(raw)) == 1


def test_blank_image_has_no_shapes():
    img = np.full((100, 100, 3), 255, dtype=np.uint8)
    assert segment_shapes(img) == []


def test_triangle_is_ignored():
    img = np.full((150, 150, 3), 255, dtype=np.uint8)
    pts = np.array([[20, 130], [130, 130], [75, 20]], dtype=np.int32)
    cv2.polylines(img, [pts], True, (0, 0, 0), 2)
    assert _marks(img) == []


def test_skewed_parallelogram_is_ignored():
    img = np.full((150, 200, 3), 255, dtype=np.uint8)
    pts = np.array([[20, 120], [100, 120], [160, 30], [80, 30]], dtype=np.int32)
    cv2.polylines(img, [pts], True, (0, 0, 0), 2)
    assert _marks(img) == []


def test_small_squares_below_min_area_are_ignored(make_card):
    img = np.full((100, 100, 3), 255, dtype=np.uint8)
    cv2.rectangle(img, (40, 40), (47, 47), (0, 0, 0), 1)
    assert _marks(img) == []


def test_min_area_is_configurable(make_card):
    config = VisionConfig(min_area=5000)
    assert _marks(make_card("ee"), config) == []


def test_unreadable_inputs_return_empty_list():
    assert segment_shapes(None) == []
    assert segment_shapes(np.zeros((0, 0), dtype=np.uint8)) == []
    assert segment_shapes(np.zeros((20, 20, 5), dtype=np.uint8)) == []


def test_grayscale_and_bgra_inputs(make_card):
    bgr = make_card("ee")
    gray = cv2.cvtColor(bgr, cv2.COLOR_BGR2GRAY)
    bgra = cv2.cvtColor(bgr, cv2.COLOR_BGR2BGRA)
    assert len(_marks(gray)) == 2
    assert len(_marks(bgra)) == 2


def test_segmentation_is_deterministic(make_card):
    img = make_card("efe")
    a = segment_shapes(img)
    b = segment_shapes(img.copy())
    assert [(s.centroid, s.extent, s.area) for s in a] == [(s.centroid, s.extent, s.area) for s in b]
    for sa, sb in zip(a, b):
        assert np.array_equal(sa.contour, sb.contour)


def test_detect_rects_from_mask_direct():
    mask = np.zeros((100, 100), dtype=np.uint8)
    cv2.rectangle(mask, (20, 20), (80, 70), 255, -1)
    shapes = detect_rects_from_mask(mask, min_area=100)
    assert len(shapes) == 1
    cx, cy = shapes[0].centroid
    assert abs(cx - 50) < 1 and abs(cy - 45) < 1
    assert shapes[0].extent == 61.0
