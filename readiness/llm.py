import asyncio
import logging
from typing import Optional

import httpx

from .config import Settings
from .errors import NoJsonFound, UpstreamUnavailable
from .prompts import SYSTEM_PROMPT, build_user_prompt
from .schemas import StudentResults
from .scoring import category_percentages, compute_index, round_half_up
from .validation import lookup, parse_collaborator_reply

logger = logging.getLogger(__name__)


class NarrativeClient:
    """Client for the language model that writes the assessment narrative.

    Talks to any OpenAI-compatible ``/chat/completions`` endpoint. Candidate
    models are tried in order; each attempt gets its own timeout and a failed
    or timed-out attempt moves on to the next candidate.
    """

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self._transport = transport

    async def _call_model(self, client: httpx.AsyncClient, model: str, messages: list[dict]) -> str:
        response = await client.post(
            f"{self.settings.llm_base_url.rstrip('/')}/chat/completions",
            headers={
                "Authorization": f"Bearer {self.settings.llm_api_key}",
                "Content-Type": "application/json",
            },
            json={
                "model": model,
                "messages": messages,
                "temperature": self.settings.llm_temperature,
                "max_tokens": self.settings.llm_max_tokens,
            },
        )
        response.raise_for_status()
        data = response.json()
        return data["choices"][0]["message"]["content"] or ""

    async def complete(self, prompt: str, system: str = "") -> str:
        if not self.settings.llm_api_key:
            raise UpstreamUnavailable("LLM_API_KEY is not configured.")

        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        timeout = self.settings.llm_attempt_timeout
        last_error: Optional[Exception] = None

        async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
            for model in self.settings.candidate_models:
                logger.info("Trying model: %s", model)
                try:
                    text = await asyncio.wait_for(
                        self._call_model(client, model, messages), timeout=timeout
                    )
                except asyncio.TimeoutError as exc:
                    logger.warning("Model %s timed out after %.0fs", model, timeout)
                    last_error = exc
                    continue
                except httpx.HTTPStatusError as exc:
                    logger.warning(
                        "Model %s failed with status %s", model, exc.response.status_code
                    )
                    last_error = exc
                    continue
                except (httpx.HTTPError, KeyError, IndexError, TypeError, ValueError) as exc:
                    logger.warning("Model %s failed: %s", model, exc)
                    last_error = exc
                    continue
                logger.info("Success with model: %s (%d chars)", model, len(text))
                return text

        detail = str(last_error) or type(last_error).__name__
        raise UpstreamUnavailable(f"All models failed. Last error: {detail}") from last_error

    async def analyze(self, results: StudentResults) -> dict:
        """Ask the model for a full assessment and return the validated reply."""
        percentages = category_percentages(results)
        local_index = round_half_up(compute_index(percentages))

        text = await self.complete(build_user_prompt(results, percentages), system=SYSTEM_PROMPT)
        if not text.strip():
            raise NoJsonFound("Empty response from language model")

        report = parse_collaborator_reply(text)
        _log_index_mismatch(lookup(report, "Overall Readiness Index", "overallIndex"), local_index)
        return report


def _log_index_mismatch(reported, local_index: int) -> None:
    # The model's index is reported as-is; a disagreement is only logged.
    try:
        reported_value = float(reported)
    except (TypeError, ValueError):
        logger.warning("Model returned a non-numeric readiness index: %r", reported)
        return
    if abs(reported_value - local_index) >= 1:
        logger.warning(
            "Model readiness index %s differs from weighted score %d", reported, local_index
        )
