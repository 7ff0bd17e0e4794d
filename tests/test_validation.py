import json

import pytest

from readiness.errors import MissingField, NoJsonFound
from readiness.validation import extract_json, parse_collaborator_reply, validate_payload


def _reply(**overrides):
    data = {
        "Student Name": "Asha Rao",
        "Student Email": "asha@example.com",
        "Scores": {
            "Financial Planning": 70,
            "Academic Readiness": 80,
            "Career Alignment": 75,
            "Personal & Cultural": 60,
            "Practical Readiness": 55,
            "Support System": 90,
        },
        "Overall Readiness Index": 72,
        "Readiness Level": "Good",
        "Strengths": "Strong family backing. Clear academic record.",
        "Gaps": ["Visa documents not started", "Budget incomplete"],
        "Recommendations": "1. Book IELTS. 2. Draft a budget.",
        "Country Fit (Top 3)": [
            {"country": "Germany", "match": 82, "reasoning": "Low tuition", "challenges": "Language"},
        ],
    }
    data.update(overrides)
    return data


class TestExtractJson:
    def test_prose_around_object(self):
        text = "Here is the analysis you asked for:\n" + json.dumps(_reply()) + "\nHope it helps!"
        assert extract_json(text)["Student Name"] == "Asha Rao"

    def test_markdown_fence(self):
        text = "```json\n" + json.dumps(_reply()) + "\n```"
        assert extract_json(text)["Readiness Level"] == "Good"

    def test_no_brace(self):
        with pytest.raises(NoJsonFound):
            extract_json("I'm sorry, I cannot help with that.")

    def test_unparseable_span(self):
        with pytest.raises(NoJsonFound):
            extract_json("Result: {Student Name: Asha}")

    def test_empty_text(self):
        with pytest.raises(NoJsonFound):
            extract_json("")


class TestValidatePayload:
    def test_complete_reply(self):
        text = "Analysis complete.\n" + json.dumps(_reply())
        result = parse_collaborator_reply(text)
        assert result["Overall Readiness Index"] == 72
        assert result["Country Fit (Top 3)"][0]["country"] == "Germany"

    def test_missing_gaps(self):
        data = _reply()
        del data["Gaps"]
        with pytest.raises(MissingField) as exc_info:
            validate_payload(data)
        assert exc_info.value.field == "Gaps"
        assert exc_info.value.to_dict()["field"] == "Gaps"

    def test_first_missing_field_reported(self):
        data = _reply()
        del data["Student Name"]
        del data["Recommendations"]
        with pytest.raises(MissingField) as exc_info:
            validate_payload(data)
        assert exc_info.value.field == "Student Name"

    def test_camel_case_fallback(self):
        data = {
            "studentName": "Asha Rao",
            "scores": {"Financial Planning": 50},
            "overallIndex": 50,
            "readinessLevel": "Needs Improvement",
            "strengths": "Motivation",
            "gaps": "Funding",
            "recommendations": "Apply for loans",
        }
        assert validate_payload(data)["studentName"] == "Asha Rao"

    def test_blank_values_count_as_missing(self):
        with pytest.raises(MissingField) as exc_info:
            validate_payload(_reply(Strengths="   "))
        assert exc_info.value.field == "Strengths"

        with pytest.raises(MissingField) as exc_info:
            validate_payload(_reply(Scores={}))
        assert exc_info.value.field == "Scores"

    def test_zero_index_is_present(self):
        assert validate_payload(_reply(**{"Overall Readiness Index": 0}))
