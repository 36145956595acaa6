from typing import Sequence

from .config import DEFAULT_EXACT_TARGET
from .types import Decision, PerImageResult, Rule, RuleKind

NO_DECISION = Decision()


def pick_maximum(results: Sequence[PerImageResult]) -> Decision:
    if not results:
        return NO_DECISION
    # most metric, then fewest shapes (fewer distractors), then lowest index
    best = min(results, key=lambda r: (-r.metric, r.total_shapes, r.index))
    if best.metric <= 0:
        return NO_DECISION
    return Decision(best.index, approximate=False)


def pick_exact(results: Sequence[PerImageResult], target: int) -> Decision:
    if not results:
        return NO_DECISION
    for r in results:
        if r.metric == target:
            return Decision(r.index, approximate=False)
    closest = min(results, key=lambda r: (abs(r.metric - target), r.index))
    return Decision(closest.index, approximate=True)


def decide(rule: Rule, results: Sequence[PerImageResult]) -> Decision:
    if rule.kind == RuleKind.MAXIMUM:
        return pick_maximum(results)
    if rule.kind == RuleKind.EXACT_COUNT:
        target = rule.target if rule.target is not None else DEFAULT_EXACT_TARGET
        return pick_exact(results, target)
    # OUTLIER has no local measurement yet; UNKNOWN is unsupported
    return NO_DECISION
