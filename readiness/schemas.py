from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class CategoryResult(BaseModel):
    """Raw quiz outcome for one category. Weight is implied by the category table."""

    name: str
    correct: int
    total: int
    weight: Optional[float] = None


class StudentResults(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_name: str = Field(alias="userName")
    user_email: Optional[str] = Field(default=None, alias="userEmail")
    user_phone: Optional[str] = Field(default=None, alias="userPhone")
    # Sent by the quiz frontend; the index is always recomputed from the categories
    overall_score: Optional[float] = Field(default=None, alias="overallScore")
    topic_scores: List[CategoryResult] = Field(alias="topicScoresArray")


class CountryFit(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    country: str
    match_percent: Optional[int] = Field(default=None, alias="match", ge=0, le=100)
    reasoning: str = ""
    challenges: str = ""


Narrative = Union[str, List[str]]


class AssessmentReport(BaseModel):
    """Result record, serialised with the same keys the language model returns."""

    model_config = ConfigDict(populate_by_name=True)

    student_name: str = Field(alias="Student Name")
    student_email: str = Field(default="", alias="Student Email")
    student_phone: str = Field(default="", alias="Student Phone")
    scores: dict[str, int] = Field(alias="Scores")
    overall_index: int = Field(alias="Overall Readiness Index", ge=0, le=100)
    readiness_level: str = Field(alias="Readiness Level")
    preparation_timeline: Optional[str] = Field(default=None, alias="Preparation Timeline")
    strengths: Narrative = Field(alias="Strengths")
    gaps: Narrative = Field(alias="Gaps")
    recommendations: Narrative = Field(alias="Recommendations")
    country_fit: List[CountryFit] = Field(default_factory=list, alias="Country Fit (Top 3)")


class ErrorResponse(BaseModel):
    error: str
    detail: str
    field: Optional[str] = None
    category: Optional[str] = None
