"""Async adapter around the Gemini generateContent API."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import httpx

from ..errors import ConfigurationError, InferenceError
from ..logging import get_logger

SYSTEM_PROMPT = """You are an expert API Architect. Your task is to analyze a source code file.
**First, you must determine if this file defines API endpoints (like a Router, Controller, or main API file).**
If the file is a service, utility, model, or configuration file, return {"endpoints": []}.
If (and only if) the file defines API endpoints, find ALL endpoints and generate a JSON array.
For each endpoint, you MUST infer the following:
1.  'path' and 'method'.
2.  'summary' and 'description'.
3.  'requestBodySchema': A JSON schema object, returned as a JSON-stringified STRING. If no body, return null.
4.  'successResponseSchema': A JSON schema object, returned as a JSON-stringified STRING.
5.  'errorResponses': An array of common error responses (e.g., {"code": "400", "description": "Invalid input"}).
Return ONLY the JSON object as requested in the schema."""

USER_PROMPT_TEMPLATE = """Here is the complete source code file. The language is: {language}
---
{code}
---
Please analyze this file. **If this file does not define API endpoints (e.g., it's a service, model, or helper file), return {{"endpoints": []}}.**
Otherwise, find all API endpoints in this file and generate an object for each.

IMPORTANT: 'requestBodySchema' and 'successResponseSchema' MUST be JSON-stringified strings.
Return a JSON object containing a single key 'endpoints', which is an array of these objects."""

LANGUAGE_PROMPT_TEMPLATE = (
    "Analyze this code snippet and return *only* the name of the programming "
    'language (e.g., "python", "javascript", "java").\n\n{snippet}'
)

RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "endpoints": {
            "type": "ARRAY",
            "description": "An array of all API endpoint objects found in the code.",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "path": {"type": "STRING"},
                    "method": {"type": "STRING"},
                    "summary": {"type": "STRING"},
                    "description": {"type": "STRING"},
                    "tags": {"type": "ARRAY", "items": {"type": "STRING"}},
                    "requestBodySchema": {"type": "STRING", "nullable": True},
                    "successResponseSchema": {"type": "STRING", "nullable": True},
                    "errorResponses": {
                        "type": "ARRAY",
                        "items": {
                            "type": "OBJECT",
                            "properties": {
                                "code": {"type": "STRING"},
                                "description": {"type": "STRING"},
                            },
                        },
                        "nullable": True,
                    },
                },
                "required": ["path", "method", "summary"],
            },
        }
    },
    "required": ["endpoints"],
}

_LANGUAGE_SNIPPET_LIMIT = 1000


@dataclass
class GeminiRequest:
    """A single generateContent call."""

    prompt: str
    system: Optional[str] = None
    response_schema: Optional[Dict[str, Any]] = None


class GeminiClient:
    """Sends inference requests to Gemini over a shared async HTTP client."""

    DEFAULT_MODEL = "gemini-2.5-flash-preview-09-2025"
    DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
    ENV_API_KEY_KEYS = ("APIDOCGEN_GEMINI_API_KEY", "GEMINI_API_KEY")
    ENV_MODEL_KEYS = ("APIDOCGEN_GEMINI_MODEL", "GEMINI_MODEL")

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        request_timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key or self._first_env_value(self.ENV_API_KEY_KEYS)
        self.model = model or self._first_env_value(self.ENV_MODEL_KEYS) or self.DEFAULT_MODEL
        self.base_url = (base_url or self.DEFAULT_BASE_URL).rstrip("/")
        self.request_timeout = request_timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self.logger = get_logger("llm.gemini")

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def ensure_configured(self) -> None:
        if not self.is_configured:
            raise ConfigurationError("GEMINI_API_KEY is not configured on the server.")

    async def extract_endpoints(self, code: str, language: str) -> List[Dict[str, Any]]:
        """Return the raw endpoint objects Gemini infers for ``code``."""
        request = GeminiRequest(
            prompt=USER_PROMPT_TEMPLATE.format(language=language, code=code),
            system=SYSTEM_PROMPT,
            response_schema=RESPONSE_SCHEMA,
        )
        text = await self.generate(request)
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise InferenceError(f"Gemini returned invalid JSON: {exc}") from exc
        if not isinstance(payload, dict):
            raise InferenceError("Gemini returned a non-object JSON payload")
        endpoints = payload.get("endpoints")
        if not isinstance(endpoints, list):
            return []
        return [endpoint for endpoint in endpoints if isinstance(endpoint, dict)]

    async def detect_language(self, snippet: str) -> Optional[str]:
        """Ask Gemini to name the programming language of ``snippet``."""
        request = GeminiRequest(
            prompt=LANGUAGE_PROMPT_TEMPLATE.format(snippet=snippet[:_LANGUAGE_SNIPPET_LIMIT])
        )
        text = await self.generate(request)
        language = text.strip().strip("`\"'").lower()
        return language or None

    async def generate(self, request: GeminiRequest) -> str:
        """Run ``request`` and return the first candidate's text."""
        self.ensure_configured()
        endpoint = f"{self.base_url}/models/{self.model}:generateContent"
        payload = self._build_payload(request)
        client = self._get_client()
        try:
            response = await client.post(
                endpoint,
                params={"key": self.api_key},
                json=payload,
                headers={"Content-Type": "application/json"},
            )
        except httpx.TimeoutException as exc:
            raise InferenceError(f"Gemini API call timed out: {exc}") from exc
        except httpx.HTTPError as exc:
            raise InferenceError(f"Gemini API call failed: {exc}") from exc

        if not response.is_success:
            self.logger.error("Gemini API error: %s %s", response.status_code, response.text)
            raise InferenceError(
                f"Gemini API call failed with status: {response.status_code}"
            )

        try:
            result = response.json()
        except ValueError as exc:
            raise InferenceError("Gemini API returned a non-JSON response") from exc

        text = self._extract_text(result)
        if not text:
            raise InferenceError("No text returned from AI.")
        return text

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------
    # Helpers

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.request_timeout, connect=10.0),
                transport=self._transport,
            )
        return self._client

    @staticmethod
    def _build_payload(request: GeminiRequest) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"contents": [{"parts": [{"text": request.prompt}]}]}
        if request.system:
            payload["systemInstruction"] = {"parts": [{"text": request.system}]}
        if request.response_schema is not None:
            payload["generationConfig"] = {
                "responseMimeType": "application/json",
                "responseSchema": request.response_schema,
            }
        return payload

    @staticmethod
    def _extract_text(payload: object) -> str:
        if not isinstance(payload, dict):
            return ""
        candidates = payload.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            return ""
        first = candidates[0]
        if not isinstance(first, dict):
            return ""
        content = first.get("content")
        if not isinstance(content, dict):
            return ""
        parts = content.get("parts")
        if not isinstance(parts, list) or not parts:
            return ""
        part = parts[0]
        if isinstance(part, dict) and isinstance(part.get("text"), str):
            return part["text"]
        return ""

    @staticmethod
    def _first_env_value(keys: Sequence[str]) -> str | None:
        for key in keys:
            value = os.getenv(key)
            if value:
                return value
        return None


__all__ = ["GeminiClient", "GeminiRequest", "RESPONSE_SCHEMA", "SYSTEM_PROMPT"]
