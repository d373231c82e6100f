"""Narrative provider HTTP client for explanations, chat, and document extraction"""

import asyncio
import base64
import json
import math
from dataclasses import dataclass
from typing import Any, Dict, Sequence

import httpx

from xai_credit.domain.exceptions import PreconditionViolation, ServiceError
from xai_credit.domain.models import ApplicantRecord, ChatMessage, ScoringResult
from xai_credit.domain.prompts import (
    EXTRACTION_FIELDS,
    EXTRACTION_PROMPT,
    build_chat_instruction,
    build_explanation_prompt,
    extraction_schema,
)
from xai_credit.infrastructure.observability.metrics import (
    narrative_failure_counter,
    narrative_latency_histogram,
)

SUPPORTED_DOCUMENT_TYPES = frozenset({"text/plain", "text/markdown", "application/pdf"})

# Statuses retried with backoff
RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


@dataclass(frozen=True)
class GenAIConfig:
    """Connection settings for the narrative provider"""

    api_key: str | None = None
    base_url: str = "https://generativelanguage.googleapis.com"
    explanation_model: str = "gemini-2.5-flash"
    chat_model: str = "gemini-2.5-flash"
    extraction_model: str = "gemini-2.5-flash"
    timeout_seconds: float = 30.0
    max_retries: int = 3
    backoff_base: float = 1.0


def _text_part(text: str) -> Dict[str, Any]:
    return {"text": text}


def _strip_code_fence(text: str) -> str:
    t = text.strip()
    if t.startswith("```"):
        t = t.strip("` \n")
        if t.lower().startswith("json"):
            t = t[4:].strip()
    return t


class NarrativeClient:
    """Client for a Gemini-style ``generateContent`` API"""

    def __init__(self, config: GenAIConfig, transport: httpx.AsyncBaseTransport | None = None):
        self.config = config
        self.transport = transport

    async def explain(self, record: ApplicantRecord, result: ScoringResult) -> str:
        """
        Turn a scoring result into customer-facing prose.

        Raises:
            ServiceError: Provider unreachable, rate-limited, or returned no text
        """
        body = {
            "contents": [{"role": "user", "parts": [_text_part(build_explanation_prompt(record, result))]}],
        }
        return await self._generate("explain", self.config.explanation_model, body)

    async def chat(
        self,
        record: ApplicantRecord,
        result: ScoringResult,
        history: Sequence[ChatMessage],
    ) -> str:
        """
        Produce the next assistant turn, grounded only in the applicant data and result.

        Raises:
            PreconditionViolation: History is empty, has unknown roles, or does not end with a user turn
            ServiceError: Provider unreachable, rate-limited, or returned no text
        """
        if not history:
            raise PreconditionViolation("Conversation history is empty")
        for message in history:
            if message.role not in ("user", "model"):
                raise PreconditionViolation(f"Unknown conversation role: {message.role!r}")
        if history[-1].role != "user":
            raise PreconditionViolation("Conversation must end with a user turn")

        body = {
            "systemInstruction": {"parts": [_text_part(build_chat_instruction(record, result))]},
            "contents": [{"role": m.role, "parts": [_text_part(m.text)]} for m in history],
        }
        return await self._generate("chat", self.config.chat_model, body)

    async def extract_fields(self, content: bytes, mime_type: str) -> Dict[str, float]:
        """
        Best-effort parse of an uploaded document into applicant fields.

        Fields the provider does not find are omitted, never defaulted.

        Raises:
            ServiceError: Provider failure or a response that is not a JSON object
        """
        body = {
            "contents": [
                {
                    "role": "user",
                    "parts": [
                        _text_part(EXTRACTION_PROMPT),
                        {
                            "inlineData": {
                                "mimeType": mime_type,
                                "data": base64.b64encode(content).decode("ascii"),
                            }
                        },
                    ],
                }
            ],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": extraction_schema(),
            },
        }
        text = await self._generate("extract", self.config.extraction_model, body)

        try:
            data = json.loads(_strip_code_fence(text))
        except ValueError as e:
            raise ServiceError(f"Document extraction returned invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ServiceError("Document extraction did not return an object")

        extracted: Dict[str, float] = {}
        for key, value in data.items():
            name = EXTRACTION_FIELDS.get(key)
            if name is None or isinstance(value, bool) or not isinstance(value, (int, float)):
                continue
            if not math.isfinite(value):
                continue
            extracted[name] = value
        return extracted

    async def _generate(self, operation: str, model: str, body: Dict[str, Any]) -> str:
        """
        POST a generateContent request and return the candidate text.

        Retry strategy:
        - Exponential backoff: base, 2*base, 4*base, ... between attempts
        - Retries on 429, 5xx and transport failures, up to max_retries attempts in total
        """
        if not self.config.api_key:
            raise ServiceError("GenAI API key is not configured")

        url = f"{self.config.base_url.rstrip('/')}/v1beta/models/{model}:generateContent"
        headers = {"x-goog-api-key": self.config.api_key}
        max_attempts = max(1, self.config.max_retries)
        attempt = 0

        async with httpx.AsyncClient(timeout=self.config.timeout_seconds, transport=self.transport) as client:
            while True:
                try:
                    with narrative_latency_histogram.labels(operation=operation).time():
                        response = await client.post(url, json=body, headers=headers)
                        response.raise_for_status()
                    break

                except httpx.HTTPStatusError as e:
                    attempt += 1
                    narrative_failure_counter.labels(operation=operation).inc()
                    status = e.response.status_code

                    if status not in RETRYABLE_STATUS_CODES or attempt >= max_attempts:
                        if status == 429:
                            raise ServiceError("GenAI API rate limit exceeded") from e
                        raise ServiceError(f"GenAI API error: {status}") from e

                except httpx.TimeoutException as e:
                    attempt += 1
                    narrative_failure_counter.labels(operation=operation).inc()
                    if attempt >= max_attempts:
                        raise ServiceError(f"GenAI API timeout after {self.config.timeout_seconds}s") from e

                except httpx.RequestError as e:
                    attempt += 1
                    narrative_failure_counter.labels(operation=operation).inc()
                    if attempt >= max_attempts:
                        raise ServiceError(f"GenAI API unreachable: {e}") from e

                backoff = self.config.backoff_base * (2 ** (attempt - 1))
                await asyncio.sleep(backoff)

        return self._candidate_text(response)

    @staticmethod
    def _candidate_text(response: httpx.Response) -> str:
        try:
            data = response.json()
            parts = data["candidates"][0]["content"]["parts"]
            text = "".join(part.get("text", "") for part in parts)
        except (KeyError, IndexError, TypeError, AttributeError, ValueError) as e:
            raise ServiceError(f"Malformed GenAI response: {e}") from e

        if not text.strip():
            raise ServiceError("GenAI returned no text")
        return text.strip()
