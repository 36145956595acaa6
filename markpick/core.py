import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence

import numpy as np

from .classify import measure
from .config import DEFAULT_CONFIG, VisionConfig
from .decide import decide
from .detect import segment_shapes
from .instruction import parse_instruction
from .nms import suppress_duplicates
from .preprocess import to_gray
from .types import AnalysisReport, PerImageResult, Rule

logger = logging.getLogger(__name__)


def analyze_image(
        image: Optional[np.ndarray],
        index: int,
        rule: Rule,
        config: VisionConfig = DEFAULT_CONFIG
    ) -> PerImageResult:
    """Segment -> de-duplicate -> measure one candidate.

    All intermediate buffers live in this frame, so they are dropped on every exit
    path. Failures degrade to a zero result for this index only.
    """
    if image is None:
        logger.warning("Image %d: nothing to analyze (not decoded).", index)
        return PerImageResult(index, 0, 0, error="undecodable image")

    try:
        shapes = segment_shapes(image, config)
        shapes = suppress_duplicates(shapes, overlap_factor=config.overlap_factor)
        if not shapes:
            return PerImageResult(index, 0, 0)
        gray = to_gray(image)
        metric = measure(rule.subject, gray, shapes, config)
    except Exception as e:
        logger.warning("Image %d: analysis failed: %s", index, e, exc_info=True)
        return PerImageResult(index, 0, 0, error=str(e))

    logger.debug("Image %d: %s=%d total=%d", index, rule.subject, metric, len(shapes))
    return PerImageResult(index, len(shapes), metric)


def analyze_batch(
        images: Sequence[Optional[np.ndarray]],
        instruction: Optional[str],
        config: Optional[VisionConfig] = None,
        max_workers: Optional[int] = None
    ) -> AnalysisReport:
    config = config or DEFAULT_CONFIG
    rule = parse_instruction(instruction)
    images = list(images)

    results: List[PerImageResult] = []
    if images:
        workers = max(1, max_workers or min(len(images), 8))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="markpick") as pool:
            futures = [
                pool.submit(analyze_image, img, i, rule, config)
                for i, img in enumerate(images)
            ]
            # futures are joined in submission order, not completion order
            for i, fut in enumerate(futures):
                try:
                    results.append(fut.result())
                except Exception as e:
                    logger.warning("Image %d: worker failed: %s", i, e)
                    results.append(PerImageResult(i, 0, 0, error=str(e)))

    decision = decide(rule, results)
    if decision.decided:
        logger.info(
            "Decision: index %d%s", decision.selected_index,
            " (approximate)" if decision.approximate else ""
        )
    else:
        logger.info("Decision: none for rule %s", rule.kind.value)
    return AnalysisReport(rule=rule, decision=decision, results=results)
