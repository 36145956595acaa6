import base64
import binascii
import logging
from typing import Dict, Optional
import cv2
import numpy as np

from .config import VisionConfig

logger = logging.getLogger(__name__)


def decode_image_bytes(data: bytes) -> Optional[np.ndarray]:
    """Decode PNG/JPG bytes as-is (gray, BGR or BGRA). Returns None on failure."""
    if not data:
        return None
    arr = np.frombuffer(data, dtype=np.uint8)
    img = cv2.imdecode(arr, cv2.IMREAD_UNCHANGED)
    if img is None:
        logger.debug("cv2.imdecode could not read %d bytes", len(data))
    return img


def decode_base64_image(b64: str) -> Optional[np.ndarray]:
    """Accepts bare base64 or a data: URL."""
    if not b64:
        return None
    raw_b64 = b64.split(",", 1)[1] if "," in b64 else b64
    try:
        data = base64.b64decode(raw_b64)
    except (binascii.Error, ValueError):
        logger.debug("invalid base64 payload (%d chars)", len(b64))
        return None
    return decode_image_bytes(data)


def composite_on_white(bgra: np.ndarray) -> np.ndarray:
    alpha = bgra[:, :, 3:].astype(np.float32) / 255.0
    bgr = bgra[:, :, :3].astype(np.float32)
    white = np.full_like(bgr, 255.0)
    return (bgr * alpha + white * (1.0 - alpha)).astype(np.uint8)


def to_gray(img: np.ndarray) -> np.ndarray:
    if img.ndim == 2:
        gray = img
    elif img.shape[2] == 4:
        gray = cv2.cvtColor(composite_on_white(img), cv2.COLOR_BGR2GRAY)
    elif img.shape[2] == 3:
        gray = cv2.cvtColor(img, cv2.COLOR_BGR2GRAY)
    elif img.shape[2] == 1:
        gray = img[:, :, 0]
    else:
        raise ValueError(f"unsupported channel count: {img.shape[2]}")
    if gray.dtype != np.uint8:
        gray = cv2.normalize(gray, None, 0, 255, cv2.NORM_MINMAX).astype(np.uint8)
    return np.ascontiguousarray(gray)


def black_hat(gray: np.ndarray, k: int = 5) -> np.ndarray:
    # dark strokes thinner than the kernel light up, flat areas go to zero
    kernel = cv2.getStructuringElement(cv2.MORPH_RECT, (k, k))
    return cv2.morphologyEx(gray, cv2.MORPH_BLACKHAT, kernel)


def threshold_stages(gray: np.ndarray, config: VisionConfig) -> Dict[str, np.ndarray]:
    """
    Build the stroke mask: black-hat, then Otsu AND Gaussian adaptive threshold.
    Returns every intermediate so the debug view can show them; "combined" is the mask.
    """
    bh = black_hat(gray, k=config.morph_kernel_size)
    _, otsu = cv2.threshold(bh, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)
    adaptive = cv2.adaptiveThreshold(
        bh, 255, cv2.ADAPTIVE_THRESH_GAUSSIAN_C,
        cv2.THRESH_BINARY, config.adaptive_block_size, config.adaptive_c
    )
    combined = cv2.bitwise_and(otsu, adaptive)
    return {
        "gray": gray,
        "blackhat": bh,
        "otsu": otsu,
        "adaptive": adaptive,
        "combined": combined,
    }
