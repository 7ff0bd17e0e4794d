"""Rule-based narrative for reports scored without the language model."""

from dataclasses import dataclass
from typing import List, Mapping

from .categories import CATEGORIES, ReadinessTier

STRENGTH_THRESHOLD = 70
GAP_THRESHOLD = 60
MAX_RECOMMENDATIONS = 5

ACTIONS = {
    "Financial Planning": (
        "Build a year-by-year budget covering tuition, living costs and visa fees, "
        "and shortlist scholarships and education loans"
    ),
    "Academic Readiness": (
        "Schedule your standardized tests and English proficiency exam, "
        "and set a target score for each"
    ),
    "Career & Goal Alignment": (
        "Write down the role you want after graduation and pick programs "
        "whose curriculum leads there"
    ),
    "Personal & Cultural Readiness": (
        "Practise living independently and connect with students already "
        "studying in your target countries"
    ),
    "Practical Readiness": (
        "Prepare a document checklist for admission and visa applications "
        "and read the visa rules of your target countries"
    ),
    "Support System": (
        "Agree on the plan and its funding with your family, "
        "and prepare a backup plan if admissions fall through"
    ),
}


@dataclass(frozen=True)
class Narrative:
    strengths: List[str]
    gaps: List[str]
    recommendations: List[str]


def _describe(name: str, score: int, constructs) -> str:
    return f"{name} ({score}%): {', '.join(constructs).lower()}"


def build_narrative(percentages: Mapping[str, int], tier: ReadinessTier) -> Narrative:
    """Derive strengths, gaps and next steps from canonical category percentages."""
    ranked = sorted(CATEGORIES, key=lambda c: percentages[c.name])

    strengths = [
        _describe(c.name, percentages[c.name], c.constructs)
        for c in reversed(ranked)
        if percentages[c.name] >= STRENGTH_THRESHOLD
    ]
    weak = [c for c in ranked if percentages[c.name] < GAP_THRESHOLD]
    gaps = [_describe(c.name, percentages[c.name], c.constructs) for c in weak]

    recommendations = [ACTIONS[c.name] for c in weak][: MAX_RECOMMENDATIONS - 1]
    recommendations.append(f"Plan for a preparation timeline of {tier.timeline}")

    if not strengths:
        strengths = [f"No category reached {STRENGTH_THRESHOLD}% yet"]
    if not gaps:
        gaps = [f"No category scored below {GAP_THRESHOLD}%"]

    return Narrative(strengths=strengths, gaps=gaps, recommendations=recommendations)
