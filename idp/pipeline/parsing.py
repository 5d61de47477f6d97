"""Tolerant parsers turning model/OCR output into stage results.

All functions are pure. Output that does not match the expected format
degrades to defaults and is flagged, it never raises.
"""

import re
from dataclasses import dataclass

from idp.extraction.models import TextLine

DEFAULT_CATEGORY = "Other"
DEFAULT_CONFIDENCE = 50

_CATEGORY_RE = re.compile(r"Category:\s*([^,]+)", re.IGNORECASE)
_CONFIDENCE_RE = re.compile(r"Confidence:\s*(\d+)", re.IGNORECASE)
_SUMMARY_RE = re.compile(r"Summary:\s*(.*?)(?=Key Points:|\Z)", re.IGNORECASE | re.DOTALL)
_KEY_POINTS_RE = re.compile(r"Key Points:\s*(.*)", re.IGNORECASE | re.DOTALL)


@dataclass(frozen=True)
class ParsedExtraction:
    text: str
    confidence: float


@dataclass(frozen=True)
class ParsedClassification:
    category: str
    confidence: int
    degraded: bool = False


@dataclass(frozen=True)
class ParsedSummary:
    summary: str
    key_points: tuple[str, ...]
    degraded: bool = False


def parse_extraction(lines: list[TextLine]) -> ParsedExtraction:
    """Join lines with newlines; confidence is the mean of the scored lines."""
    # unscored and zero-scored lines are left out of the mean
    scores = [line.confidence for line in lines if line.confidence]
    confidence = sum(scores) / len(scores) if scores else 0.0
    return ParsedExtraction(
        text="\n".join(line.text for line in lines),
        confidence=confidence,
    )


def parse_classification(text: str) -> ParsedClassification:
    category_match = _CATEGORY_RE.search(text)
    confidence_match = _CONFIDENCE_RE.search(text)

    category = category_match.group(1).strip() if category_match else ""
    if not category:
        category = DEFAULT_CATEGORY
    confidence = int(confidence_match.group(1)) if confidence_match else DEFAULT_CONFIDENCE

    return ParsedClassification(
        category=category,
        confidence=confidence,
        degraded=category_match is None or confidence_match is None,
    )


def parse_summary(text: str) -> ParsedSummary:
    summary_match = _SUMMARY_RE.search(text)
    key_points_match = _KEY_POINTS_RE.search(text)

    summary = summary_match.group(1).strip() if summary_match else text.strip()
    key_points: list[str] = []
    if key_points_match:
        for line in key_points_match.group(1).splitlines():
            stripped = line.strip()
            if not stripped.startswith("-"):
                continue
            point = stripped[1:].strip()
            if point:
                key_points.append(point)

    return ParsedSummary(
        summary=summary,
        key_points=tuple(key_points),
        degraded=summary_match is None or key_points_match is None,
    )
