"""
Hosted language-model client wrapper (OpenAI chat completions and Gemini).
"""
import httpx
from typing import Optional, List, Dict, Any
from core.config import (
    OPENAI_API_KEY,
    OPENAI_BASE_URL,
    OPENAI_MODEL,
    GOOGLE_API_KEY,
    GEMINI_BASE_URL,
    GEMINI_MODEL,
    LLM_TEMPERATURE,
    LLM_TIMEOUT_SECONDS,
)


class LLMError(Exception):
    """Raised when a model endpoint cannot be reached or returns no text."""
    pass


class LLMClient:
    """Client for the hosted completion endpoints."""

    def __init__(
        self,
        openai_api_key: Optional[str] = OPENAI_API_KEY,
        google_api_key: Optional[str] = GOOGLE_API_KEY,
        openai_base_url: str = OPENAI_BASE_URL,
        gemini_base_url: str = GEMINI_BASE_URL,
        timeout: float = LLM_TIMEOUT_SECONDS,
    ):
        self.openai_api_key = openai_api_key
        self.google_api_key = google_api_key
        self.openai_base_url = openai_base_url.rstrip("/")
        self.gemini_base_url = gemini_base_url.rstrip("/")
        self.client = httpx.Client(timeout=timeout)

    def _post(self, url: str, payload: Dict[str, Any], **kwargs) -> Dict[str, Any]:
        """POST a JSON payload and return the decoded body."""
        try:
            response = self.client.post(url, json=payload, **kwargs)
            response.raise_for_status()
            return response.json()
        except Exception as e:
            raise LLMError(f"Model API error: {str(e)}") from e

    def call_openai(
        self,
        prompt: str,
        system: Optional[str] = None,
        model: str = OPENAI_MODEL,
        temperature: float = LLM_TEMPERATURE,
        json_mode: bool = True,
    ) -> str:
        """Call an OpenAI chat model and return the first choice's text."""
        if not self.openai_api_key:
            raise LLMError("OPENAI_API_KEY is not configured")

        messages: List[Dict[str, str]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        payload: Dict[str, Any] = {
            "model": model,
            "messages": messages,
            "temperature": temperature,
        }
        if json_mode:
            payload["response_format"] = {"type": "json_object"}

        result = self._post(
            f"{self.openai_base_url}/chat/completions",
            payload,
            headers={"Authorization": f"Bearer {self.openai_api_key}"},
        )

        try:
            content = result["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise LLMError(f"Unexpected OpenAI response shape: {result}") from e
        if not content:
            raise LLMError("OpenAI returned an empty completion")
        return content

    def call_gemini(
        self,
        prompt: str,
        model: str = GEMINI_MODEL,
        temperature: float = LLM_TEMPERATURE,
    ) -> str:
        """Call a Gemini model and return the concatenated candidate text."""
        if not self.google_api_key:
            raise LLMError("GOOGLE_API_KEY is not configured")

        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": temperature},
        }
        result = self._post(
            f"{self.gemini_base_url}/models/{model}:generateContent",
            payload,
            params={"key": self.google_api_key},
        )

        candidates = result.get("candidates") or []
        if not candidates:
            raise LLMError(f"Gemini returned no candidates: {result}")
        parts = (candidates[0].get("content") or {}).get("parts") or []
        text = "".join(part.get("text", "") for part in parts)
        if not text.strip():
            raise LLMError("Gemini returned an empty response")
        return text


# Global LLM client instance
llm = LLMClient()
