"""
Section Parser

Splits one free-text analysis reply into its three labelled sections.

A section starts at a markdown heading token (``#`` .. ``######`` at the start
of a line, optionally indented) followed, after any whitespace, by its label,
and runs until the next such heading token or the end of the text. A ``#``
inside a line, or one followed by a digit as in ``#1``, is body text.
Labels are matched case-insensitively and tolerate any whitespace between
their words. A section that is absent or empty is replaced
by a fixed fallback string; the parser itself never raises.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Tuple

from abg_insights.utils import get_logger

logger = get_logger(__name__)

HEADING_TOKEN = r"^[ \t]*#{1,6}(?![#\d])"

INTERPRETATION_LABEL = "INTERPRETATION"
CONDITIONS_LABEL = "SUGGESTED CONDITIONS"
TREATMENT_LABEL = "TREATMENT RECOMMENDATIONS"

INTERPRETATION_FALLBACK = "Interpretation not available"
CONDITIONS_FALLBACK = "Condition suggestions not available"
TREATMENT_FALLBACK = "Treatment recommendations not available"


def _section_pattern(label: str) -> "re.Pattern[str]":
    words = r"\s+".join(re.escape(word) for word in label.split())
    # Optional bold markers and a trailing colon are part of the heading line
    return re.compile(
        rf"{HEADING_TOKEN}\s*\**\s*{words}\b\s*\**\s*:?(?P<body>.*?)(?={HEADING_TOKEN}|\Z)",
        re.IGNORECASE | re.DOTALL | re.MULTILINE,
    )


_SECTIONS = (
    ("interpretation", _section_pattern(INTERPRETATION_LABEL), INTERPRETATION_FALLBACK),
    ("conditions", _section_pattern(CONDITIONS_LABEL), CONDITIONS_FALLBACK),
    ("treatment", _section_pattern(TREATMENT_LABEL), TREATMENT_FALLBACK),
)


@dataclass(frozen=True)
class AnalysisSections:
    """The three text blocks of one analysis reply."""
    interpretation: str
    conditions: str
    treatment: str
    missing: Tuple[str, ...] = ()

    @property
    def is_complete(self) -> bool:
        return not self.missing


def _extract(pattern: "re.Pattern[str]", text: str) -> Optional[str]:
    match = pattern.search(text)
    if match is None:
        return None
    body = match.group("body").strip()
    return body or None


def parse_sections(raw_text: Optional[str]) -> AnalysisSections:
    """
    Parse a raw reply into interpretation, conditions and treatment text.

    Args:
        raw_text: The reply exactly as returned by the language model.

    Returns:
        AnalysisSections with fallback text in every slot that could not be
        found. ``missing`` lists the slots that fell back.
    """
    text = raw_text if isinstance(raw_text, str) else ""

    values = {}
    missing = []
    for name, pattern, fallback in _SECTIONS:
        body = _extract(pattern, text)
        if body is None:
            missing.append(name)
            body = fallback
        values[name] = body

    if missing:
        logger.warning(f"Analysis reply missing sections: {', '.join(missing)}")

    return AnalysisSections(
        interpretation=values["interpretation"],
        conditions=values["conditions"],
        treatment=values["treatment"],
        missing=tuple(missing),
    )
