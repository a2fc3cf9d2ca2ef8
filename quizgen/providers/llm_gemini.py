from __future__ import annotations

import logging
import os
import time

import httpx

from quizgen.providers.base import LLMProvider

log = logging.getLogger("quizgen.llm")

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta"

SAFETY_CATEGORIES = (
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
)


class GeminiProvider(LLMProvider):
    """Google Gemini over the ``generateContent`` REST endpoint."""

    def __init__(
        self,
        model: str = "gemini-2.0-flash",
        base_url: str = GEMINI_URL,
        safety_threshold: str = "BLOCK_MEDIUM_AND_ABOVE",
        top_p: float = 0.8,
        top_k: int = 40,
        timeout: float = 120.0,
    ):
        self.api_key = os.environ.get("GEMINI_API_KEY", "")
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.safety_threshold = safety_threshold
        self.top_p = top_p
        self.top_k = top_k
        self.timeout = timeout

    def _body(self, prompt: str, temperature: float, max_tokens: int) -> dict:
        return {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "safetySettings": [
                {"category": c, "threshold": self.safety_threshold} for c in SAFETY_CATEGORIES
            ],
            "generationConfig": {
                "temperature": temperature,
                "topP": self.top_p,
                "topK": self.top_k,
                "maxOutputTokens": max_tokens,
            },
        }

    async def generate(self, prompt: str, temperature: float = 0.7, max_tokens: int = 8192) -> str:
        if not self.api_key:
            raise RuntimeError("GEMINI_API_KEY is not set")
        t0 = time.monotonic()
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.post(
                f"{self.base_url}/models/{self.model}:generateContent",
                params={"key": self.api_key},
                json=self._body(prompt, temperature, max_tokens),
            )
            resp.raise_for_status()
            data = resp.json()

        candidates = data.get("candidates") or []
        parts = candidates[0].get("content", {}).get("parts", []) if candidates else []
        text = "".join(p.get("text", "") for p in parts)
        if not text:
            reason = candidates[0].get("finishReason") if candidates else data.get("promptFeedback")
            raise RuntimeError(f"Gemini returned an empty response ({reason})")
        log.info("Gemini response (%.1fs, %d chars)", time.monotonic() - t0, len(text))
        return text

    def name(self) -> str:
        return f"gemini/{self.model}"
