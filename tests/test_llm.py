"""Language model client tests.

The chat completions endpoint is replaced with ``httpx.MockTransport`` so no
network traffic leaves the test process.
"""

import asyncio
import json

import httpx
import pytest

from readiness.categories import CATEGORIES
from readiness.config import Settings
from readiness.errors import MissingCategory, MissingField, NoJsonFound, UpstreamUnavailable
from readiness.llm import NarrativeClient
from readiness.schemas import StudentResults

VALID_REPLY = {
    "Student Name": "Asha Rao",
    "Scores": {c.label: 80 for c in CATEGORIES},
    "Overall Readiness Index": 80,
    "Readiness Level": "Very Good",
    "Strengths": "Solid finances",
    "Gaps": "Visa paperwork",
    "Recommendations": "Start the visa checklist",
    "Country Fit (Top 3)": [],
}


def _settings(**overrides):
    values = {
        "llm_api_key": "test-key",
        "llm_base_url": "https://llm.test",
        "llm_primary_model": "sonar-pro",
        "llm_fallback_models": ["sonar"],
        "llm_attempt_timeout": 5.0,
    }
    values.update(overrides)
    return Settings(**values)


def _completion(content):
    return httpx.Response(200, json={"choices": [{"message": {"content": content}}]})


class Recorder:
    """Mock transport handler that replays one response per call."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    async def __call__(self, request):
        self.requests.append(request)
        response = self.responses.pop(0)
        if callable(response):
            return await response()
        return response

    @property
    def models(self):
        return [json.loads(r.content)["model"] for r in self.requests]


def _client(recorder, **overrides):
    return NarrativeClient(_settings(**overrides), transport=httpx.MockTransport(recorder))


def _results(**overrides):
    data = {
        "userName": "Asha Rao",
        "userEmail": "asha@example.com",
        "topicScoresArray": [{"name": c.name, "correct": 4, "total": 5} for c in CATEGORIES],
    }
    data.update(overrides)
    return StudentResults(**data)


# ---------------------------------------------------------------------------
# complete(): model fallback
# ---------------------------------------------------------------------------


class TestComplete:
    def test_primary_model_succeeds(self):
        recorder = Recorder(_completion("hello"))
        text = asyncio.run(_client(recorder).complete("prompt", system="system"))

        assert text == "hello"
        assert recorder.models == ["sonar-pro"]
        request = recorder.requests[0]
        assert request.url == "https://llm.test/chat/completions"
        assert request.headers["Authorization"] == "Bearer test-key"
        body = json.loads(request.content)
        assert body["messages"][0] == {"role": "system", "content": "system"}
        assert body["messages"][1] == {"role": "user", "content": "prompt"}

    def test_falls_back_on_http_error(self):
        recorder = Recorder(httpx.Response(500, json={"error": "boom"}), _completion("from fallback"))
        text = asyncio.run(_client(recorder).complete("prompt"))

        assert text == "from fallback"
        assert recorder.models == ["sonar-pro", "sonar"]

    def test_falls_back_on_timeout(self):
        async def slow():
            await asyncio.sleep(1)
            return _completion("too late")

        recorder = Recorder(slow, _completion("fast"))
        text = asyncio.run(_client(recorder, llm_attempt_timeout=0.05).complete("prompt"))

        assert text == "fast"
        assert recorder.models == ["sonar-pro", "sonar"]

    def test_all_models_fail(self):
        recorder = Recorder(httpx.Response(503), httpx.Response(429))
        with pytest.raises(UpstreamUnavailable) as exc_info:
            asyncio.run(_client(recorder).complete("prompt"))

        assert isinstance(exc_info.value.__cause__, httpx.HTTPStatusError)
        assert exc_info.value.__cause__.response.status_code == 429
        assert "429" in exc_info.value.detail
        assert recorder.models == ["sonar-pro", "sonar"]

    def test_only_one_alternate_model_tried(self):
        recorder = Recorder(httpx.Response(503), httpx.Response(503))
        client = _client(recorder, llm_fallback_models=["sonar", "sonar-reasoning", "r1"])
        with pytest.raises(UpstreamUnavailable):
            asyncio.run(client.complete("prompt"))

        assert recorder.models == ["sonar-pro", "sonar"]

    def test_malformed_completion_is_a_failed_attempt(self):
        recorder = Recorder(httpx.Response(200, json={"choices": []}), _completion("ok"))
        assert asyncio.run(_client(recorder).complete("prompt")) == "ok"

    def test_missing_api_key(self):
        recorder = Recorder()
        with pytest.raises(UpstreamUnavailable):
            asyncio.run(_client(recorder, llm_api_key="").complete("prompt"))
        assert recorder.requests == []


# ---------------------------------------------------------------------------
# analyze(): prompt + validation
# ---------------------------------------------------------------------------


class TestAnalyze:
    def test_returns_validated_reply(self):
        reply = "Here is your assessment:\n" + json.dumps(VALID_REPLY)
        recorder = Recorder(_completion(reply))

        result = asyncio.run(_client(recorder).analyze(_results()))

        assert result["Overall Readiness Index"] == 80
        assert result["Readiness Level"] == "Very Good"
        prompt = json.loads(recorder.requests[0].content)["messages"][1]["content"]
        assert "Financial Planning (Weight: 25%): 80%" in prompt
        assert "Support System (Weight: 10%): 80%" in prompt
        assert '"Country Fit (Top 3)"' in prompt
        assert "Email: asha@example.com" in prompt

    def test_empty_reply(self):
        recorder = Recorder(_completion("   "))
        with pytest.raises(NoJsonFound):
            asyncio.run(_client(recorder).analyze(_results()))

    def test_reply_missing_field(self):
        reply = dict(VALID_REPLY)
        del reply["Gaps"]
        recorder = Recorder(_completion(json.dumps(reply)))
        with pytest.raises(MissingField) as exc_info:
            asyncio.run(_client(recorder).analyze(_results()))
        assert exc_info.value.field == "Gaps"

    def test_invalid_results_never_reach_the_model(self):
        recorder = Recorder()
        results = _results(
            topicScoresArray=[
                {"name": c.name, "correct": 4, "total": 5}
                for c in CATEGORIES
                if c.name != "Support System"
            ]
        )
        with pytest.raises(MissingCategory):
            asyncio.run(_client(recorder).analyze(results))
        assert recorder.requests == []


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


class TestSettings:
    def test_candidate_models_deduplicated(self):
        settings = _settings(llm_fallback_models=["sonar-pro", "sonar", "sonar"])
        assert settings.candidate_models == ["sonar-pro", "sonar"]

    def test_fallback_models_from_comma_string(self):
        settings = _settings(llm_fallback_models="sonar, sonar-reasoning")
        assert settings.llm_fallback_models == ["sonar", "sonar-reasoning"]

    def test_candidate_models_single_alternate(self):
        settings = _settings(llm_fallback_models=["sonar-pro", "sonar", "sonar-reasoning"])
        assert settings.candidate_models == ["sonar-pro", "sonar"]

    def test_fallback_same_as_primary(self):
        settings = _settings(llm_fallback_models=["sonar-pro"])
        assert settings.candidate_models == ["sonar-pro"]
