"""Instruction markup -> Rule.

Challenge prompts arrive as small HTML fragments, sometimes JSON-escaped, and may
hide decoy words with inline styles. Only the text a user would actually see is
classified.
"""
import logging
import re
from typing import Optional

from bs4 import BeautifulSoup

from .config import (
    BARE_NUMBER_REGEX,
    DEFAULT_EXACT_TARGET,
    DEFAULT_SUBJECT,
    EXACT_KEYWORDS,
    EXACT_TARGET_REGEX,
    MAXIMUM_KEYWORDS,
    OUTLIER_KEYWORDS,
    SUBJECT_KEYWORDS,
)
from .types import Rule, RuleKind

logger = logging.getLogger(__name__)


def unescape_markup(markup: str) -> str:
    return markup.replace("\\/", "/").replace('\\"', '"')


def _style_declarations(style: str):
    for decl in style.split(";"):
        if ":" not in decl:
            continue
        prop, value = decl.split(":", 1)
        prop = "".join(prop.split()).lower()
        value = "".join(value.split()).lower().replace("!important", "")
        yield prop, value


def _is_zero(value: str) -> bool:
    try:
        return float(value.rstrip("%")) == 0.0
    except ValueError:
        return False


def is_hidden_style(style: Optional[str]) -> bool:
    """True when an inline style makes the element invisible.

    Tokens are compared whole: "display:nnone" still renders and is not hidden.
    """
    if not style:
        return False
    for prop, value in _style_declarations(style):
        if prop == "display" and value == "none":
            return True
        if prop == "visibility" and value == "hidden":
            return True
        if prop == "opacity" and _is_zero(value):
            return True
    return False


def normalize_text(text: str) -> str:
    return " ".join(text.lower().split())


def visible_text(markup: str) -> str:
    soup = BeautifulSoup(unescape_markup(markup), "html.parser")
    for tag in soup.find_all(style=True):
        if is_hidden_style(tag.get("style")):
            tag.extract()
    # no separator: words split across inline tags must join back up
    return normalize_text(soup.get_text())


def _first_int(pattern: str, text: str) -> Optional[int]:
    m = re.search(pattern, text)
    return int(m.group(1)) if m else None


def _has_word(word: str, text: str) -> bool:
    return re.search(rf"\b{re.escape(word)}\b", text) is not None


def subject_of(text: str) -> str:
    # "unmarked", "undotted" and the like must not flip the measurement
    return next((v for k, v in SUBJECT_KEYWORDS.items() if _has_word(k, text)), DEFAULT_SUBJECT)


def classify_text(text: str, raw_markup: str = "") -> Rule:
    subject = subject_of(text)

    if any(k in text for k in MAXIMUM_KEYWORDS):
        return Rule(RuleKind.MAXIMUM, None, text, subject)
    if any(k in text for k in EXACT_KEYWORDS):
        target = _first_int(EXACT_TARGET_REGEX, text)
        if target is None:
            target = _first_int(BARE_NUMBER_REGEX, raw_markup)
        if target is None:
            target = DEFAULT_EXACT_TARGET
        return Rule(RuleKind.EXACT_COUNT, target, text, subject)
    if any(k in text for k in OUTLIER_KEYWORDS):
        return Rule(RuleKind.OUTLIER, None, text, subject)
    return Rule(RuleKind.UNKNOWN, None, text, subject)


def parse_instruction(markup: Optional[str]) -> Rule:
    """Never raises; anything unusable comes back as an UNKNOWN rule."""
    if not markup or not isinstance(markup, str):
        return Rule(RuleKind.UNKNOWN)
    try:
        text = visible_text(markup)
    except Exception as e:  # html.parser can still choke on pathological input
        logger.warning("Could not parse instruction markup: %s", e)
        return Rule(RuleKind.UNKNOWN)

    rule = classify_text(text, raw_markup=markup)
    logger.info("Parser: [subject:%s] [mode:%s] [target:%s]", rule.subject, rule.kind.value, rule.target)
    return rule
