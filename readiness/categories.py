"""
Canonical assessment framework: the six readiness categories, their fixed
weights, and the tier ladder the weighted index is classified against.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class Category:
    name: str
    # Key used in the "Scores" mapping of reports and language model replies
    label: str
    weight: Decimal
    constructs: Tuple[str, ...]

    @property
    def weight_percent(self) -> int:
        return int(self.weight * 100)


CATEGORIES: Tuple[Category, ...] = (
    Category(
        name="Financial Planning",
        label="Financial Planning",
        weight=Decimal("0.25"),
        constructs=("Budgeting skills", "Funding sources", "Loan awareness", "Cost management"),
    ),
    Category(
        name="Academic Readiness",
        label="Academic Readiness",
        weight=Decimal("0.20"),
        constructs=(
            "GPA consistency",
            "Standardized test prep",
            "English language proficiency",
            "Subject mastery",
        ),
    ),
    Category(
        name="Career & Goal Alignment",
        label="Career Alignment",
        weight=Decimal("0.20"),
        constructs=(
            "Career goal clarity",
            "Program relevance",
            "Decision maturity",
            "Long-term planning",
        ),
    ),
    Category(
        name="Personal & Cultural Readiness",
        label="Personal & Cultural",
        weight=Decimal("0.15"),
        constructs=(
            "Cultural openness",
            "Cross-cultural communication",
            "Independence",
            "Emotional resilience",
        ),
    ),
    Category(
        name="Practical Readiness",
        label="Practical Readiness",
        weight=Decimal("0.10"),
        constructs=(
            "Visa process understanding",
            "Document preparation",
            "Technology skills",
            "Safety awareness",
        ),
    ),
    Category(
        name="Support System",
        label="Support System",
        weight=Decimal("0.10"),
        constructs=("Family consensus", "Financial backing", "Emotional support", "Backup plans"),
    ),
)

CATEGORY_BY_NAME: Dict[str, Category] = {c.name: c for c in CATEGORIES}
CATEGORY_BY_LABEL: Dict[str, Category] = {c.label: c for c in CATEGORIES}

# Section names used by earlier versions of the questionnaire
LEGACY_ALIASES: Dict[str, str] = {
    "Cultural Adaptability": "Personal & Cultural Readiness",
    "Career Clarity": "Career & Goal Alignment",
    "Study Abroad Readiness": "Practical Readiness",
}


def resolve_category(name: str) -> Optional[Category]:
    """Look up a category by canonical name, report label, or legacy alias."""
    name = name.strip()
    if name in CATEGORY_BY_NAME:
        return CATEGORY_BY_NAME[name]
    if name in CATEGORY_BY_LABEL:
        return CATEGORY_BY_LABEL[name]
    if name in LEGACY_ALIASES:
        return CATEGORY_BY_NAME[LEGACY_ALIASES[name]]
    return None


class ReadinessTier(str, Enum):
    EXCELLENT = "Excellent"
    VERY_GOOD = "Very Good"
    GOOD = "Good"
    SATISFACTORY = "Satisfactory"
    NEEDS_IMPROVEMENT = "Needs Improvement"
    LOW = "Low"

    @property
    def timeline(self) -> str:
        return TIER_TIMELINES[self]


# Lower bound (inclusive) of each tier, highest first
TIER_THRESHOLDS: Tuple[Tuple[int, ReadinessTier], ...] = (
    (90, ReadinessTier.EXCELLENT),
    (80, ReadinessTier.VERY_GOOD),
    (70, ReadinessTier.GOOD),
    (60, ReadinessTier.SATISFACTORY),
    (50, ReadinessTier.NEEDS_IMPROVEMENT),
    (0, ReadinessTier.LOW),
)

TIER_TIMELINES: Dict[ReadinessTier, str] = {
    ReadinessTier.EXCELLENT: "0-3 months (ready to apply immediately)",
    ReadinessTier.VERY_GOOD: "3-6 months (minor preparation needed)",
    ReadinessTier.GOOD: "6-9 months (prepare before next cycle)",
    ReadinessTier.SATISFACTORY: "9-12 months (strengthen weak areas)",
    ReadinessTier.NEEDS_IMPROVEMENT: "12-18 months (major readiness gaps)",
    ReadinessTier.LOW: "More than 18 months (reassess plan or delay)",
}
