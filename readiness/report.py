"""
Shapes a validated assessment record into the document the report template
renders.

Accepts both the canonical capitalised keys the language model is asked for
("Student Name", "Overall Readiness Index", ...) and their camelCase fallbacks.
Narrative fields are turned into bullet lists, country-fit entries are ranked
and given a match percentage, and nothing is rendered unless every required
field is present.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence

from fastapi.templating import Jinja2Templates

from .categories import CATEGORIES
from .errors import InvalidInput, MissingRequiredField
from .scoring import round_half_up
from .validation import REQUIRED_FIELDS, is_blank, lookup

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

PLACEHOLDER = "Information not available"
INVALID_FORMAT = "Invalid input format"
_UNAVAILABLE_SENTINELS = {
    "No strengths identified",
    "No gaps identified",
    "No recommendations provided",
}

_SENTENCE_SPLIT = re.compile(r"[.!?]+")
_CLAUSE_SPLIT = re.compile(r"[,;]+")
# Leading "1.", "2)", "-", "*" or "•" markers, possibly repeated; a bare number is all marker
_ENUM_MARKER = re.compile(r"^(?:\s*(?:\d+(?:[.)]|$)|[-*•]))+\s*")
_FILENAME_UNSAFE = re.compile(r"[^a-z0-9]+")

MATCH_STEP = 15


@dataclass(frozen=True)
class ScoreCard:
    label: str
    score: int
    weight_percent: int

    @property
    def bar_class(self) -> str:
        if self.score >= 80:
            return "excellent"
        if self.score >= 60:
            return "good"
        if self.score >= 40:
            return "average"
        return "weak"


@dataclass(frozen=True)
class CountryCard:
    rank: int
    country: str
    match_percent: int
    reasoning: str = ""
    challenges: str = ""


@dataclass(frozen=True)
class ReportDocument:
    student_name: str
    student_email: str
    student_phone: str
    overall_index: str
    readiness_level: str
    preparation_timeline: Optional[str]
    score_cards: List[ScoreCard]
    strengths: List[str]
    gaps: List[str]
    recommendations: List[str]
    countries: List[CountryCard] = field(default_factory=list)
    generated_on: str = ""


# ---------------------------------------------------------------------------
# Narrative bullets
# ---------------------------------------------------------------------------


def clean_entry(text: str) -> str:
    return _ENUM_MARKER.sub("", text.strip()).strip()


def to_bullets(value: Any) -> List[str]:
    """Normalise a narrative field into a non-empty list of bullet entries.

    A list keeps one entry per element. A string is split into sentences, or
    into clauses when it holds a single sentence.
    """
    if is_blank(value):
        return [PLACEHOLDER]

    if isinstance(value, (list, tuple)):
        entries = [clean_entry(str(item)) for item in value if not is_blank(item)]
    elif isinstance(value, str):
        if value.strip() in _UNAVAILABLE_SENTINELS:
            return [PLACEHOLDER]
        fragments = [s for s in _SENTENCE_SPLIT.split(value) if s.strip()]
        if len(fragments) <= 1:
            fragments = [s for s in _CLAUSE_SPLIT.split(value) if s.strip()]
        entries = [clean_entry(s) for s in fragments]
    else:
        return [INVALID_FORMAT]

    entries = [e for e in entries if e]
    return entries or [PLACEHOLDER]


# ---------------------------------------------------------------------------
# Country fit
# ---------------------------------------------------------------------------


def fallback_match(rank: int) -> int:
    """Match percentage for an entry without one: 100, 85, 70, ... floored at 0."""
    return max(0, 100 - MATCH_STEP * (rank - 1))


def _percent(value: Any) -> Optional[int]:
    if is_blank(value):
        return None
    try:
        return max(0, min(100, round_half_up(float(value))))
    except (TypeError, ValueError):
        return None


def country_cards(entries: Optional[Sequence[Any]]) -> List[CountryCard]:
    if entries and not isinstance(entries, (list, tuple)):
        logger.warning("Ignoring country fit of type %s", type(entries).__name__)
        return []
    cards = []
    for rank, entry in enumerate(entries or [], start=1):
        if isinstance(entry, str):
            cards.append(CountryCard(rank=rank, country=entry, match_percent=fallback_match(rank)))
            continue
        if not isinstance(entry, Mapping):
            logger.warning("Skipping country fit entry of type %s", type(entry).__name__)
            continue
        match = _percent(lookup(entry, "match", "matchPercent"))
        cards.append(
            CountryCard(
                rank=rank,
                country=str(entry.get("country") or "Unknown"),
                match_percent=fallback_match(rank) if match is None else match,
                reasoning=str(entry.get("reasoning") or ""),
                challenges=str(entry.get("challenges") or ""),
            )
        )
    return cards


# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------


def _score_cards(scores: Any) -> List[ScoreCard]:
    if not isinstance(scores, Mapping):
        raise InvalidInput("Scores must be a mapping of category to score")
    cards = []
    for category in CATEGORIES:
        raw = scores.get(category.label, scores.get(category.name, 0))
        if isinstance(raw, str):
            raw = raw.strip().rstrip("%")
        try:
            score = round_half_up(float(raw if raw is not None else 0))
        except (TypeError, ValueError) as exc:
            raise InvalidInput(f"Score for {category.label} must be a number, got {raw!r}") from exc
        cards.append(ScoreCard(category.label, score, category.weight_percent))
    return cards


def _display_index(value: Any) -> str:
    try:
        return str(round_half_up(float(value)))
    except (TypeError, ValueError):
        return str(value).strip().rstrip("%")


def assemble(data: Mapping[str, Any], today: Optional[date] = None) -> ReportDocument:
    """Build the report document, failing on the first missing required field."""
    values = {}
    for canonical, camel in REQUIRED_FIELDS:
        value = lookup(data, canonical, camel)
        if value is None:
            raise MissingRequiredField(canonical)
        values[canonical] = value

    return ReportDocument(
        student_name=str(values["Student Name"]).strip(),
        student_email=str(lookup(data, "Student Email", "studentEmail", "userEmail") or ""),
        student_phone=str(lookup(data, "Student Phone", "studentPhone", "userPhone") or ""),
        overall_index=_display_index(values["Overall Readiness Index"]),
        readiness_level=str(values["Readiness Level"]),
        preparation_timeline=lookup(data, "Preparation Timeline", "preparationTimeline"),
        score_cards=_score_cards(values["Scores"]),
        strengths=to_bullets(values["Strengths"]),
        gaps=to_bullets(values["Gaps"]),
        recommendations=to_bullets(values["Recommendations"]),
        countries=country_cards(lookup(data, "Country Fit (Top 3)", "countryFit")),
        generated_on=(today or date.today()).strftime("%B %d, %Y"),
    )


def render_html(document: ReportDocument) -> str:
    return templates.get_template("report.html").render(report=document)


def report_filename(student_name: str) -> str:
    slug = _FILENAME_UNSAFE.sub("-", student_name.lower()).strip("-") or "student"
    return f"psychometric-report-{slug}.pdf"
