from dataclasses import dataclass
from typing import Dict, Tuple


@dataclass(frozen=True)
class VisionConfig:
    # segmentation
    morph_kernel_size: int = 5
    adaptive_block_size: int = 11
    adaptive_c: float = 2.0
    min_area: float = 100.0
    approx_eps_ratio: float = 0.04
    angle_tol_deg: float = 15.0

    # duplicate suppression
    overlap_factor: float = 0.6

    # content classification
    erosion_factor: float = 0.1
    erosion_kernel_size: int = 3
    intensity_cap: float = 100.0
    intensity_margin: float = 10.0
    emptiness_threshold: float = 0.015

    def __post_init__(self):
        if self.morph_kernel_size < 1:
            raise ValueError("morph_kernel_size must be >= 1")
        if self.erosion_kernel_size < 1:
            raise ValueError("erosion_kernel_size must be >= 1")
        if self.adaptive_block_size < 3 or self.adaptive_block_size % 2 == 0:
            raise ValueError("adaptive_block_size must be an odd number >= 3")
        if self.approx_eps_ratio <= 0:
            raise ValueError("approx_eps_ratio must be > 0")
        if not (0.0 <= self.angle_tol_deg < 90.0):
            raise ValueError("angle_tol_deg must be in [0, 90)")
        for name in ("min_area", "overlap_factor", "erosion_factor", "emptiness_threshold"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0")


DEFAULT_CONFIG = VisionConfig()


# instruction keywords, checked in this order (first match wins)
MAXIMUM_KEYWORDS: Tuple[str, ...] = ("highest", "most", "maximum")
EXACT_KEYWORDS: Tuple[str, ...] = ("exactly",)
OUTLIER_KEYWORDS: Tuple[str, ...] = ("pair", "not like the others", "odd one out")

EXACT_TARGET_REGEX = r"exactly\s*(\d+)"
BARE_NUMBER_REGEX = r">\s*(\d+)\s*<"

# whole-word subject keyword -> measurement name, first match wins;
# no match measures "empty"
SUBJECT_KEYWORDS: Dict[str, str] = {
    "dotted": "filled",
    "empty": "empty",
}
DEFAULT_SUBJECT = "empty"

# "exactly" with no number anywhere counts toward zero
DEFAULT_EXACT_TARGET = 0
