import json
from typing import Mapping

from .categories import CATEGORIES, TIER_THRESHOLDS
from .schemas import StudentResults
from .scoring import classify_tier

SYSTEM_PROMPT = """\
You are an expert psychometric evaluator specializing in study-abroad readiness \
assessment for Indian students.

You analyze psychometric test responses using the Comprehensive Study Abroad \
Assessment Framework, which uses a weighted multi-factor scoring model.

Each response contributes to one of six readiness dimensions with specific weights:
1. Financial Planning - 25% weight (Budgeting, funding confidence, risk management, cost awareness)
2. Academic Readiness - 20% weight (GPA consistency, test prep, language skills)
3. Career & Goal Alignment - 20% weight (Career clarity, program relevance, decision maturity)
4. Personal & Cultural Readiness - 15% weight (Adaptability, independence, social integration)
5. Practical Readiness - 10% weight (Visa/document prep, tech skills, safety planning)
6. Support System - 10% weight (Family consensus, emotional resilience, backup plan)

COMPREHENSIVE READINESS INDEX (CRI) CALCULATION:
CRI = sum(Score_i x Weight_i) for all 6 dimensions
The CRI ranges from 0-100, providing an overall readiness assessment.

READINESS LEVELS:
90-100: Excellent (Ready to apply immediately, 0-3 months prep)
80-89: Very Good (Minor preparation needed, 3-6 months prep)
70-79: Good (Prepare before next cycle, 6-9 months prep)
60-69: Satisfactory (Strengthen weak areas, 9-12 months prep)
50-59: Needs Improvement (Major readiness gaps, 12-18 months prep)
<50: Low (Reassess plan/delay, >18 months prep)

COUNTRY-FIT MATRIX LOGIC:
Evaluate countries based on CRI level, financial affordability, course-career \
alignment, cultural adaptability, and visa risk.
Consider: Canada, Australia, UK, Germany, USA, Singapore, Ireland, Netherlands, UAE.

You must provide:
1. Detailed analysis of each dimension's specific constructs
2. Concrete, actionable recommendations tailored to the Indian study-abroad context
3. Country-specific fit assessment based on the student's profile
4. Timeline-based preparation roadmap

Output ONLY valid JSON in the specified format. Be specific, data-driven, and practical.
"""

USER_PROMPT = """\
DETAILED PSYCHOMETRIC ASSESSMENT REQUEST

STUDENT INFORMATION:
Name: {name}
Email: {email}
Phone: {phone}

TEST PERFORMANCE BY DIMENSION:
{dimensions}

CRITICAL ANALYSIS REQUIREMENTS:

1. DIMENSION-BY-DIMENSION BREAKDOWN:
For each of the 6 dimensions, cite the constructs that scored well, the constructs \
that need improvement, and the realistic risk for that dimension in an \
international education context.

2. COMPREHENSIVE READINESS INDEX (CRI) CALCULATION:
Calculate: CRI = {formula}
This gives the weighted CRI score (0-100 range).

3. READINESS LEVEL & TIMELINE:
Based on CRI, determine the readiness level ({levels}), the recommended \
preparation timeline, and key milestones to achieve before applying.

4. COUNTRY-FIT ANALYSIS:
For the top 3 countries, provide a match percentage (0-100), specific reasons why \
the country fits the student's profile, and potential challenges for this student \
in that country.

5. ACTIONABLE RECOMMENDATIONS:
Immediate actions (next 1-3 months), short-term goals (3-6 months), medium-term \
preparation (6-12 months) and long-term development (12+ months).

OUTPUT FORMAT (JSON only):
{output_shape}
"""


def _output_shape(results: StudentResults) -> str:
    score_placeholder = "<calculate actual score>"
    country = {
        "country": "<name>",
        "match": "<percentage>",
        "reasoning": "<detailed>",
        "challenges": "<specific>",
    }
    shape = {
        "Student Name": results.user_name,
        "Student Email": results.user_email or "",
        "Student Phone": results.user_phone or "",
        "Scores": {c.label: score_placeholder for c in CATEGORIES},
        "Overall Readiness Index": "<calculated CRI score>",
        "Readiness Level": "<determined level>",
        "Preparation Timeline": "<timeline estimate>",
        "Strengths": "<detailed paragraph citing specific constructs>",
        "Gaps": "<detailed paragraph citing specific weaknesses and risks>",
        "Recommendations": "<3-5 specific, actionable recommendations with timeline>",
        "Country Fit (Top 3)": [country, country, country],
    }
    return json.dumps(shape, indent=2, ensure_ascii=False)


def build_user_prompt(results: StudentResults, percentages: Mapping[str, int]) -> str:
    """Render the user prompt from canonical category percentages."""
    dimensions = "\n\n".join(
        f"- {c.name} (Weight: {c.weight_percent}%): {percentages[c.name]}%\n"
        f"  Constructs: {', '.join(c.constructs)}\n"
        f"  Interpretation: {classify_tier(percentages[c.name]).value}"
        for c in CATEGORIES
        if c.name in percentages
    )
    formula = " + ".join(f"({c.label} x {c.weight:.2f})" for c in CATEGORIES)
    levels = "/".join(tier.value for _, tier in TIER_THRESHOLDS)

    return USER_PROMPT.format(
        name=results.user_name,
        email=results.user_email or "Not provided",
        phone=results.user_phone or "Not provided",
        dimensions=dimensions,
        formula=formula,
        levels=levels,
        output_shape=_output_shape(results),
    )
