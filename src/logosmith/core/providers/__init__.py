"""
Remote backend clients: protocols plus the Gemini (image) and Groq (reasoning)
implementations.
"""

from logosmith.core.providers.base import ImageBackend as ImageBackend
from logosmith.core.providers.base import ReasoningBackend as ReasoningBackend
from logosmith.core.providers.gemini import GeminiImageClient as GeminiImageClient
from logosmith.core.providers.groq import GroqReasoningClient as GroqReasoningClient
