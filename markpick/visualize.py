from typing import Dict, List, Optional, Sequence
import numpy as np
import cv2
from .types import DetectedShape

EMPTY_COLOR = (0, 200, 0)
FILLED_COLOR = (0, 0, 255)


def draw_shapes_on_image(
    image: np.ndarray,
    shapes: List[DetectedShape],
    empty_flags: Optional[Sequence[bool]] = None,
    label: Optional[str] = None,
) -> np.ndarray:
    if image.ndim == 2:
        vis = cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
    elif image.shape[2] == 4:
        vis = cv2.cvtColor(image, cv2.COLOR_BGRA2BGR)
    else:
        vis = image.copy()

    for i, s in enumerate(shapes):
        empty = bool(empty_flags[i]) if empty_flags is not None else True
        color = EMPTY_COLOR if empty else FILLED_COLOR
        cv2.drawContours(vis, [s.contour], -1, color, 2)
        cx, cy = int(round(s.centroid[0])), int(round(s.centroid[1]))
        cv2.circle(vis, (cx, cy), 2, color, -1)

    if label:
        (tw, th), _ = cv2.getTextSize(label, cv2.FONT_HERSHEY_SIMPLEX, 0.5, 1)
        cv2.rectangle(vis, (0, 0), (tw + 6, th + 8), (0, 0, 0), -1)
        cv2.putText(vis, label, (3, th + 4), cv2.FONT_HERSHEY_SIMPLEX, 0.5, (255, 255, 255), 1, cv2.LINE_AA)

    return vis


def show_threshold_stages(
    stages: Dict[str, np.ndarray],
    cols: int = 3,
    figsize: tuple = (12, 8),
    title: str = "Threshold stages"
):
    import matplotlib.pyplot as plt

    names = list(stages.keys())
    n = len(names)
    rows = (n + cols - 1) // cols

    fig, axes = plt.subplots(rows, cols, figsize=figsize)
    axes = np.array(axes).reshape(-1)

    for ax in axes[n:]:
        ax.axis("off")

    for i, name in enumerate(names):
        ax = axes[i]
        ax.imshow(stages[name], cmap="gray")
        ax.set_title(name)
        ax.axis("off")

    fig.suptitle(title, fontsize=14)
    plt.tight_layout()
    plt.show()
