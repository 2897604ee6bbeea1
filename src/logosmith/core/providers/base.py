"""
Client protocols for remote backends.

The orchestrator depends on these interfaces rather than on the concrete
Gemini and Groq clients, so tests and alternative backends can be swapped in.
"""

from typing import Any, Protocol


class ImageBackend(Protocol):
    """A remote multimodal model that returns image bytes."""

    model: str

    def text_to_image(self, instruction: str) -> bytes:
        """Generate an image from instruction text only."""
        ...

    def edit_image(self, instruction: str, image: bytes, mime_type: str = "image/png") -> bytes:
        """Generate an image from instruction text plus a source image.

        May raise RemoteServiceError, NetworkError or RequestTimeoutError.
        """
        ...


class ReasoningBackend(Protocol):
    """A remote text model used to refine instructions and analyse businesses."""

    model: str

    def complete(self, prompt: str, system: str = ...) -> str: ...

    def complete_json(self, prompt: str, system: str = ...) -> dict[str, Any]: ...
