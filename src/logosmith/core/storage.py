"""
Artifact store for generated images.

Artifacts are written once under a collision-resistant filename
(``<prefix>-<epoch ms>-<9 random digits>.png``) and read back byte for byte.
Files are created exclusively, so two writers can never share a name.
Artifacts are never deleted by the store.
"""

import secrets
import time
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path

from logosmith.core.models import Artifact
from logosmith.logging_config import get_logger
from logosmith.utils.exceptions import NotFoundError, ValidationError

logger = get_logger(__name__)

_MAX_NAME_ATTEMPTS = 5
_READ_CHUNK = 64 * 1024


def _unique_name(prefix: str, extension: str) -> str:
    stamp = int(time.time() * 1000)
    suffix = secrets.randbelow(1_000_000_000)
    return f"{prefix}-{stamp}-{suffix}.{extension}"


class ArtifactStore:
    """Write-once storage of generated image payloads under a single directory."""

    def __init__(self, root: str | Path, url_prefix: str = "/api/logo/download/") -> None:
        self.root = Path(root)
        self.url_prefix = url_prefix

    def save(self, content: bytes, prefix: str, extension: str = "png") -> Artifact:
        """
        Persist content under a fresh unique filename.

        Args:
            content: Encoded image bytes
            prefix: Filename prefix naming the producer (e.g. "enhanced", "fallback")
            extension: File extension without the dot

        Returns:
            The written Artifact
        """
        self.root.mkdir(parents=True, exist_ok=True)
        for _ in range(_MAX_NAME_ATTEMPTS):
            filename = _unique_name(prefix, extension)
            path = self.root / filename
            try:
                with path.open("xb") as f:
                    f.write(content)
            except FileExistsError:
                logger.debug("Artifact name collision filename=%s; retrying", filename)
                continue
            logger.debug("Stored artifact filename=%s bytes=%d", filename, len(content))
            return Artifact(
                filename=filename,
                content=content,
                created_at=datetime.now(timezone.utc),
                path=path,
            )
        raise FileExistsError(
            f"Could not allocate a unique artifact name after {_MAX_NAME_ATTEMPTS} attempts"
        )

    def path_for(self, filename: str) -> Path:
        """
        Resolve a stored filename to its path.

        Raises:
            NotFoundError: If the name is not a plain filename or no such artifact exists
        """
        if not filename or filename in (".", "..") or Path(filename).name != filename:
            raise NotFoundError(f"Artifact not found: {filename}", filename=filename)
        path = self.root / filename
        if not path.is_file():
            raise NotFoundError(f"Artifact not found: {filename}", filename=filename)
        return path

    def exists(self, filename: str) -> bool:
        try:
            self.path_for(filename)
        except NotFoundError:
            return False
        return True

    def read(self, filename: str) -> bytes:
        """Return the exact bytes stored under filename."""
        return self.path_for(filename).read_bytes()

    def stream(self, filename: str, chunk_size: int = _READ_CHUNK) -> Iterator[bytes]:
        """
        Yield the artifact in chunks.

        The existence check happens before the first chunk is requested so a
        missing artifact fails at call time, not during iteration.
        """
        path = self.path_for(filename)

        def _chunks() -> Iterator[bytes]:
            with path.open("rb") as f:
                while chunk := f.read(chunk_size):
                    yield chunk

        return _chunks()

    def url_for(self, filename: str) -> str:
        return f"{self.url_prefix}{filename}"


@contextmanager
def staged_input(source: bytes | str | Path, max_bytes: int | None = None) -> Iterator[bytes]:
    """
    Yield the bytes of an input image for the duration of one operation.

    When source is a path (an uploaded file handed over to the pipeline) the
    file is deleted when the block exits, whether it succeeded or raised.

    Raises:
        ValidationError: If the input is missing, empty or larger than max_bytes
    """
    path = None if isinstance(source, bytes) else Path(source)
    try:
        if isinstance(source, bytes):
            data = source
        else:
            assert path is not None
            if not path.is_file():
                raise ValidationError(f"Input image not found: {path}", field="image")
            data = path.read_bytes()
        if not data:
            raise ValidationError("Image data is empty", field="image")
        if max_bytes is not None and len(data) > max_bytes:
            raise ValidationError(
                f"Image is too large: {len(data)} bytes (limit {max_bytes}).",
                field="image",
            )
        yield data
    finally:
        if path is not None:
            path.unlink(missing_ok=True)
            logger.debug("Removed staged input path=%s", path)
