from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple
import numpy as np


class RuleKind(str, Enum):
    MAXIMUM = "MAXIMUM"
    EXACT_COUNT = "EXACT_COUNT"
    OUTLIER = "OUTLIER"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True)
class Rule:
    kind: RuleKind
    target: Optional[int] = None             # only used by EXACT_COUNT
    text: str = ""                           # normalized visible text
    subject: str = "empty"                   # measurement strategy name


@dataclass
class DetectedShape:
    contour: np.ndarray                      # original contour points (N,1,2)
    centroid: Tuple[float, float]            # cx,cy from moments
    extent: float                            # max(bbox w, bbox h)
    area: float


@dataclass(frozen=True)
class PerImageResult:
    index: int
    total_shapes: int = 0
    metric: int = 0
    error: Optional[str] = None


@dataclass(frozen=True)
class Decision:
    selected_index: Optional[int] = None
    approximate: bool = False

    @property
    def decided(self) -> bool:
        return self.selected_index is not None


@dataclass
class AnalysisReport:
    rule: Rule
    decision: Decision
    results: List[PerImageResult] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "rule": {
                "kind": self.rule.kind.value,
                "target": self.rule.target,
                "subject": self.rule.subject,
                "text": self.rule.text,
            },
            "selected_index": self.decision.selected_index,
            "approximate": self.decision.approximate,
            "results": [
                {"index": r.index, "total_shapes": r.total_shapes, "metric": r.metric, "error": r.error}
                for r in self.results
            ],
        }
