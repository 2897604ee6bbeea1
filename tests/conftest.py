"""
Pytest configuration: default runs most tests; use --run-slow to include slow tests.

Shared fixtures build small in-memory images and an artifact store rooted in
tmp_path, so no test touches the real uploads directory.
"""

import io
from collections.abc import Callable

import pytest
from PIL import Image

from logosmith.core.storage import ArtifactStore


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="Run slow tests (live Gemini calls). Default: skip them.",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if config.getoption("--run-slow", False):
        return
    skip_slow = pytest.mark.skip(reason="Slow test; run with --run-slow to include")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


def make_image_bytes(
    size: tuple[int, int] = (400, 300),
    color: tuple[int, ...] = (37, 99, 235),
    mode: str = "RGB",
    fmt: str = "PNG",
) -> bytes:
    buf = io.BytesIO()
    Image.new(mode, size, color=color).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def image_bytes() -> Callable[..., bytes]:
    """Factory for encoded solid-color images."""
    return make_image_bytes


@pytest.fixture
def png_bytes() -> bytes:
    return make_image_bytes()


@pytest.fixture
def store(tmp_path) -> ArtifactStore:
    return ArtifactStore(tmp_path / "uploads")
