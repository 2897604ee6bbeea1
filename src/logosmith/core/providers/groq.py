"""
Groq reasoning client.

Thin wrapper over Groq's OpenAI-compatible chat completions endpoint, used to
refine generation instructions and to analyse business profiles.
"""

import json
import re
import time
from typing import Any

import requests

from logosmith.logging_config import get_logger
from logosmith.utils.exceptions import (
    ConfigurationError,
    NetworkError,
    RemoteServiceError,
    RequestTimeoutError,
)

logger = get_logger(__name__)

SYSTEM_PROMPT = (
    "You are a professional brand designer and marketing expert. "
    "Provide detailed, actionable insights for logo design and branding."
)

_THINK_BLOCK = re.compile(r"<think>.*?</think>", re.DOTALL)


def clean_completion(text: str) -> str:
    """
    Strip reasoning blocks and markdown code fences from model output.

    Some models wrap their reasoning in <think>...</think> and the final answer
    in ``` fences; this returns only the answer.
    """
    if not text or not text.strip():
        return ""
    cleaned = _THINK_BLOCK.sub("", text).strip()
    if cleaned.startswith("```"):
        lines = cleaned.split("\n")
        if lines and lines[0].startswith("```"):
            lines = lines[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        cleaned = "\n".join(lines).strip()
    return cleaned


class GroqReasoningClient:
    """Blocking chat-completions client; constructed once per process."""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str = "https://api.groq.com/openai/v1",
        timeout: int = 60,
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ) -> None:
        if not api_key:
            raise ConfigurationError(
                "Groq API key is required. Set GROQ_API_KEY to enable instruction refinement."
            )
        self._api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.temperature = temperature
        self.max_tokens = max_tokens

    def __repr__(self) -> str:
        return f"GroqReasoningClient(model={self.model!r}, base_url={self.base_url!r})"

    def complete(self, prompt: str, system: str = SYSTEM_PROMPT) -> str:
        """
        Run one chat completion and return the cleaned message content.

        Raises:
            RemoteServiceError: On HTTP error status, malformed or empty response
            NetworkError: If the backend cannot be reached
            RequestTimeoutError: If the request times out
        """
        url = f"{self.base_url}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
        logger.debug("Groq request model=%s timeout=%s", self.model, self.timeout)
        start_time = time.time()
        try:
            response = requests.post(url, headers=headers, json=payload, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise RequestTimeoutError(
                f"Groq request timed out after {self.timeout} seconds."
            ) from e
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Network error during Groq request: {e}", original_error=e) from e
        logger.debug(
            "Groq response status=%s time=%.2fs", response.status_code, time.time() - start_time
        )

        if response.status_code in (401, 403):
            raise RemoteServiceError(
                "Authentication failed. Please check your Groq API key.",
                status_code=response.status_code,
                response=response.text,
            )
        if response.status_code == 429:
            raise RemoteServiceError(
                "Groq rate limit exceeded.", status_code=429, response=response.text
            )
        if response.status_code != 200:
            raise RemoteServiceError(
                f"Groq request failed with status {response.status_code}",
                status_code=response.status_code,
                response=response.text,
            )

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise RemoteServiceError(
                f"Failed to extract completion from Groq response: {e}",
                response=response.text,
            ) from e
        cleaned = clean_completion(content or "")
        if not cleaned:
            raise RemoteServiceError("Groq returned an empty response")
        return cleaned

    def complete_json(self, prompt: str, system: str = SYSTEM_PROMPT) -> dict[str, Any]:
        """
        Run a completion expected to contain a JSON object.

        Raises:
            RemoteServiceError: If the content is not a JSON object (plus complete() errors)
        """
        content = self.complete(prompt, system=system)
        try:
            data = json.loads(content)
        except ValueError as e:
            raise RemoteServiceError(
                f"Groq response is not valid JSON: {e}", response=content
            ) from e
        if not isinstance(data, dict):
            raise RemoteServiceError("Groq response is not a JSON object", response=content)
        return data
