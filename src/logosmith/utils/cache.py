"""
In-memory caching for logosmith.

Refined instructions are cached per process so that the same instruction is
not sent to the reasoning backend twice.
"""

import hashlib
import threading


class InstructionCache:
    """In-memory cache of refined instructions keyed by (instruction, model)."""

    def __init__(self) -> None:
        self._cache: dict[str, str] = {}
        self._lock = threading.Lock()

    def _generate_key(self, instruction: str, model: str) -> str:
        """Hash the instruction text and model name into a cache key."""
        return hashlib.sha256(f"{instruction}|{model}".encode()).hexdigest()

    def get(self, instruction: str, model: str) -> str | None:
        """
        Retrieve a refined instruction.

        Returns:
            The cached refinement, or None if not found
        """
        with self._lock:
            return self._cache.get(self._generate_key(instruction, model))

    def set(self, instruction: str, model: str, refined: str) -> None:
        with self._lock:
            self._cache[self._generate_key(instruction, model)] = refined

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def size(self) -> int:
        return len(self._cache)
