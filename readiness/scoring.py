"""
Deterministic readiness scoring.

Raw per-category quiz results are normalised to whole percentages, combined
into the Comprehensive Readiness Index (CRI) using the fixed category weights,
and the index is classified into a readiness tier. Everything here is a pure
function of its inputs.
"""

import logging
import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Mapping, Union

from .categories import CATEGORIES, TIER_THRESHOLDS, Category, ReadinessTier, resolve_category
from .errors import InvalidInput, MissingCategory, OutOfRange, UnknownCategory
from .narrative import build_narrative
from .schemas import AssessmentReport, CategoryResult, StudentResults

logger = logging.getLogger(__name__)

Number = Union[int, float, Decimal]


def round_half_up(value: Number) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def normalize(result: CategoryResult) -> int:
    """Percentage of correct answers, rounded half-up to a whole number."""
    if result.total <= 0:
        raise InvalidInput(f"{result.name}: total must be greater than 0 (got {result.total})")
    if result.correct < 0:
        raise InvalidInput(f"{result.name}: correct must not be negative (got {result.correct})")
    if result.correct > result.total:
        raise InvalidInput(
            f"{result.name}: correct ({result.correct}) exceeds total ({result.total})"
        )
    percentage = Decimal(100 * result.correct) / Decimal(result.total)
    return int(percentage.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _resolve(name: str) -> Category:
    category = resolve_category(name)
    if category is None:
        raise UnknownCategory(name)
    return category


def compute_index(scores: Mapping[str, Number]) -> float:
    """Weighted sum of the six category percentages.

    ``scores`` is keyed by category (canonical name, report label or legacy
    alias). Every canonical category must be present exactly once; anything
    else raises.
    """
    resolved: Dict[str, Decimal] = {}
    for key, value in scores.items():
        category = _resolve(key)
        if category.name in resolved:
            raise InvalidInput(f"Category supplied more than once: {category.name}")
        if not 0 <= value <= 100:
            raise OutOfRange(f"{category.name}: score {value} is outside [0, 100]")
        resolved[category.name] = Decimal(str(value))

    for category in CATEGORIES:
        if category.name not in resolved:
            raise MissingCategory(category.name)

    total = sum(resolved[c.name] * c.weight for c in CATEGORIES)
    return float(total)


def classify_tier(index: Number) -> ReadinessTier:
    if not 0 <= index <= 100:
        raise OutOfRange(f"Readiness index {index} is outside [0, 100]")
    for lower, tier in TIER_THRESHOLDS:
        if index >= lower:
            return tier
    # Unreachable: the ladder ends at 0
    raise OutOfRange(f"Readiness index {index} is outside [0, 100]")


def _check_weight(result: CategoryResult, category: Category) -> None:
    if result.weight is None:
        return
    if not math.isclose(result.weight, float(category.weight), abs_tol=1e-9):
        raise InvalidInput(
            f"{category.name}: weight {result.weight} does not match the fixed "
            f"weight {category.weight}"
        )


def category_percentages(results: StudentResults) -> Dict[str, int]:
    """Normalised percentage per canonical category name."""
    percentages: Dict[str, int] = {}
    for result in results.topic_scores:
        category = _resolve(result.name)
        _check_weight(result, category)
        if category.name in percentages:
            raise InvalidInput(f"Category supplied more than once: {category.name}")
        percentages[category.name] = normalize(result)
    return percentages


def score_assessment(results: StudentResults) -> AssessmentReport:
    """Score a full set of quiz results into a renderable report."""
    if not results.user_name.strip():
        raise InvalidInput("userName is required")

    percentages = category_percentages(results)
    index = round_half_up(compute_index(percentages))
    tier = classify_tier(index)
    narrative = build_narrative(percentages, tier)

    logger.info("Scored assessment: CRI=%d (%s)", index, tier.value)

    return AssessmentReport(
        student_name=results.user_name.strip(),
        student_email=results.user_email or "",
        student_phone=results.user_phone or "",
        scores={c.label: percentages[c.name] for c in CATEGORIES},
        overall_index=index,
        readiness_level=tier.value,
        preparation_timeline=tier.timeline,
        strengths=narrative.strengths,
        gaps=narrative.gaps,
        recommendations=narrative.recommendations,
    )
