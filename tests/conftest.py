"""Shared test fixtures: synthetic challenge cards drawn with OpenCV."""

import base64

import cv2
import numpy as np
import pytest

SQUARE = 60
PITCH = 90
MARGIN = 30


def draw_card(pattern, height=120):
    """White BGR card with one outlined square per entry of pattern.

    "e" draws an empty square, "f" one with a solid dark block in the middle.
    """
    width = MARGIN * 2 + PITCH * max(len(pattern), 1)
    img = np.full((height, width, 3), 255, dtype=np.uint8)
    y = (height - SQUARE) // 2
    for i, kind in enumerate(pattern):
        x = MARGIN + i * PITCH
        cv2.rectangle(img, (x, y), (x + SQUARE, y + SQUARE), (0, 0, 0), 2)
        if kind == "f":
            c = SQUARE // 2
            cv2.rectangle(img, (x + c - 8, y + c - 8), (x + c + 8, y + c + 8), (0, 0, 0), -1)
    return img


def to_png_b64(img, data_url=False):
    ok, buf = cv2.imencode(".png", img)
    assert ok
    b64 = base64.b64encode(buf.tobytes()).decode("ascii")
    return f"data:image/png;base64,{b64}" if data_url else b64


@pytest.fixture
def make_card():
    return draw_card


@pytest.fixture
def card_batch():
    # empty counts 1, 3, 2; three squares each
    return [draw_card("eff"), draw_card("eee"), draw_card("eef")]


@pytest.fixture
def png_b64():
    return to_png_b64
