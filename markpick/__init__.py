"""Top-level package interface for markpick.

Expose the main API: analyze_batch plus the individual pipeline stages.
"""
from .config import DEFAULT_CONFIG, VisionConfig
from .core import analyze_batch, analyze_image  # re-export
from .decide import decide
from .instruction import parse_instruction
from .types import AnalysisReport, Decision, DetectedShape, PerImageResult, Rule, RuleKind

__all__ = [
    "analyze_batch",
    "analyze_image",
    "decide",
    "parse_instruction",
    "VisionConfig",
    "DEFAULT_CONFIG",
    "AnalysisReport",
    "Decision",
    "DetectedShape",
    "PerImageResult",
    "Rule",
    "RuleKind",
]
