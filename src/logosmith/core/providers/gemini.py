"""
Gemini image generation client.

Handles HTTP communication with the Gemini ``generateContent`` endpoint for
text-to-image and image+text-to-image requests. Returns the decoded bytes of
the first inline image part in the response.
"""

import base64
import binascii
import json
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

_DEBUG_TRUNCATE_THRESHOLD = 200
_DEBUG_NEVER_TRUNCATE_KEYS = frozenset({"text", "message", "finishReason"})


def _truncate_image_data_for_log(obj: Any, parent_key: str | None = None) -> Any:
    """Recursively replace long base64 strings with placeholders for safe logging."""
    if isinstance(obj, dict):
        return {k: _truncate_image_data_for_log(v, k) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_truncate_image_data_for_log(v, None) for v in obj]
    if isinstance(obj, str) and len(obj) >= _DEBUG_TRUNCATE_THRESHOLD:
        if parent_key in _DEBUG_NEVER_TRUNCATE_KEYS:
            return obj
        return f"<string, {len(obj)} chars>"
    return obj


def text_part(text: str) -> dict[str, Any]:
    return {"text": text}


def image_part(data: bytes, mime_type: str = "image/png") -> dict[str, Any]:
    encoded = base64.b64encode(data).decode("ascii")
    return {"inline_data": {"mime_type": mime_type, "data": encoded}}


def _shape_error(result: dict[str, Any]) -> RemoteServiceError:
    return RemoteServiceError(
        "Unexpected Gemini response shape",
        response=json.dumps(_truncate_image_data_for_log(result), default=str),
    )


def extract_image(result: dict[str, Any]) -> bytes:
    """
    Return the decoded bytes of the first part carrying inline image data.

    Raises:
        RemoteServiceError: If no candidate part carries an image
    """
    candidates = result.get("candidates") or []
    if not candidates:
        feedback = result.get("promptFeedback", {})
        raise RemoteServiceError(
            f"No candidates in Gemini response{f': {feedback}' if feedback else ''}",
            response=json.dumps(_truncate_image_data_for_log(result), default=str),
        )
    if not isinstance(candidates, list) or not isinstance(candidates[0], dict):
        raise _shape_error(result)
    content = candidates[0].get("content") or {}
    if not isinstance(content, dict):
        raise _shape_error(result)
    parts = content.get("parts") or []
    if not isinstance(parts, list):
        raise _shape_error(result)
    for part in parts:
        if not isinstance(part, dict):
            raise _shape_error(result)
        inline = part.get("inlineData") or part.get("inline_data")
        if not inline:
            continue
        if not isinstance(inline, dict) or not isinstance(inline.get("data", ""), str):
            raise _shape_error(result)
        if not inline.get("data"):
            continue
        try:
            return base64.b64decode(inline["data"], validate=True)
        except (binascii.Error, ValueError) as e:
            raise RemoteServiceError(f"Invalid base64 image in Gemini response: {e}") from e
    raise RemoteServiceError(
        "No image data received from Gemini API",
        response=json.dumps(_truncate_image_data_for_log(result), default=str),
    )


class GeminiImageClient:
    """Blocking client for Gemini image generation; constructed once per process."""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: int = 180,
        debug_api: bool = False,
    ) -> None:
        """
        Raises:
            ConfigurationError: If api_key is empty
        """
        if not api_key:
            raise ConfigurationError(
                "Gemini API key is required. Set GEMINI_API_KEY to enable remote generation."
            )
        self._api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.debug_api = debug_api

    def __repr__(self) -> str:
        return f"GeminiImageClient(model={self.model!r}, base_url={self.base_url!r})"

    def _check_status(self, response: requests.Response) -> None:
        """Map HTTP status codes to RemoteServiceError."""
        status = response.status_code
        if status == 200:
            return
        if status in (401, 403):
            raise RemoteServiceError(
                "Authentication failed. Please check your Gemini API key.",
                status_code=status,
                response=response.text,
            )
        if status == 404:
            raise RemoteServiceError(
                f"Model not found or endpoint unavailable: {self.model}",
                status_code=404,
                response=response.text,
            )
        if status == 429:
            raise RemoteServiceError(
                "Gemini quota or rate limit exceeded.",
                status_code=429,
                response=response.text,
            )
        if status >= 500:
            raise RemoteServiceError(
                f"Gemini service error: {status}",
                status_code=status,
                response=response.text,
            )
        raise RemoteServiceError(
            f"Gemini request failed with status {status}: {response.text}",
            status_code=status,
            response=response.text,
        )

    def generate(self, parts: list[dict[str, Any]]) -> bytes:
        """
        Send one generateContent request and return the first image.

        Args:
            parts: Content parts, e.g. [text_part(...), image_part(...)]

        Returns:
            Decoded image bytes

        Raises:
            RemoteServiceError: On HTTP error status, unparseable body or no image part
            NetworkError: If the backend cannot be reached
            RequestTimeoutError: If the request times out
        """
        url = f"{self.base_url}/models/{self.model}:generateContent"
        headers = {"x-goog-api-key": self._api_key, "Content-Type": "application/json"}
        payload = {
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": {"responseModalities": ["TEXT", "IMAGE"]},
        }

        logger.debug(
            "Gemini request model=%s parts=%d timeout=%s", self.model, len(parts), self.timeout
        )
        if self.debug_api:
            logger.info(
                "Gemini request payload (image data truncated): %s",
                json.dumps(_truncate_image_data_for_log(payload), indent=2, default=str),
            )

        start_time = time.time()
        try:
            response = requests.post(url, headers=headers, json=payload, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise RequestTimeoutError(
                f"Gemini request timed out after {self.timeout} seconds."
            ) from e
        except requests.exceptions.ConnectionError as e:
            raise NetworkError(
                "Failed to connect to Gemini API. Please check your internet connection.",
                original_error=e,
            ) from e
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Network error during Gemini request: {e}", original_error=e) from e
        elapsed = time.time() - start_time
        logger.debug("Gemini response status=%s time=%.2fs", response.status_code, elapsed)

        self._check_status(response)
        try:
            result = response.json()
        except ValueError as e:
            raise RemoteServiceError(
                f"Failed to parse Gemini response as JSON: {e}",
                response=response.text,
            ) from e
        if self.debug_api:
            logger.info(
                "Gemini response (image data truncated): %s",
                json.dumps(_truncate_image_data_for_log(result), indent=2, default=str),
            )
        if not isinstance(result, dict):
            raise RemoteServiceError("Unexpected Gemini response shape", response=response.text)

        image = extract_image(result)
        logger.info(
            "Gemini returned image in %.1fs model=%s bytes=%d", elapsed, self.model, len(image)
        )
        return image

    def text_to_image(self, instruction: str) -> bytes:
        return self.generate([text_part(instruction)])

    def edit_image(self, instruction: str, image: bytes, mime_type: str = "image/png") -> bytes:
        return self.generate([text_part(instruction), image_part(image, mime_type)])
