"""Shared pytest fixtures for Promptcraft tests."""

import base64
import json
import shutil
import tempfile
from pathlib import Path
from typing import Callable, Generator
from unittest.mock import patch

import httpx
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from promptcraft.api.upstream import UpstreamClient
from promptcraft.core.config import PromptcraftConfig
from promptcraft.ui.models import UIState

# Smallest payload the relay accepts as an image result
FAKE_IMAGE_BASE64 = base64.b64encode(b"\x89PNG\r\n\x1a\nfake").decode("ascii")


@pytest.fixture
def anyio_backend() -> str:
    """Run async tests on asyncio only."""
    return "asyncio"


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path, monkeypatch) -> PromptcraftConfig:
    """Create a test configuration with a temporary outputs directory.

    Args:
        temp_dir: Temporary directory from fixture

    Returns:
        PromptcraftConfig instance for testing
    """
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("PROMPTCRAFT_OPENAI_API_KEY", raising=False)
    return PromptcraftConfig(
        _env_file=None,
        openai_api_key="sk-test",
        outputs_dir=temp_dir / "outputs",
        relay_url="http://relay.test/api/generate-image",
        retry_initial_delay_ms=0,
    )


@pytest.fixture
def png_file(temp_dir: Path) -> Path:
    """Write a small PNG image and return its path."""
    path = temp_dir / "reference.png"
    Image.new("RGB", (8, 8), color="red").save(path, format="PNG")
    return path


@pytest.fixture
def jpeg_file(temp_dir: Path) -> Path:
    """Write a small JPEG image and return its path."""
    path = temp_dir / "reference.jpg"
    Image.new("RGB", (8, 8), color="blue").save(path, format="JPEG")
    return path


@pytest.fixture
def text_file(temp_dir: Path) -> Path:
    """Write a non-image file with an image extension."""
    path = temp_dir / "not-an-image.png"
    path.write_text("hello")
    return path


@pytest.fixture
def ui_state() -> UIState:
    """Create empty UI state for testing.

    Returns:
        UIState instance
    """
    return UIState()


def image_generation_body(result: str = FAKE_IMAGE_BASE64) -> dict:
    """Upstream success body with one image_generation_call output."""
    return {
        "output": [
            {"type": "message", "content": []},
            {"type": "image_generation_call", "result": result},
        ]
    }


class UpstreamRecorder:
    """Programmable upstream double recording every request it receives."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.handler: Callable[[httpx.Request], httpx.Response] = lambda request: (
            httpx.Response(200, json=image_generation_body())
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @property
    def last_payload(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def upstream() -> UpstreamRecorder:
    """Upstream double; set ``upstream.handler`` to change its answer."""
    return UpstreamRecorder()


@pytest.fixture
def test_client(upstream: UpstreamRecorder) -> Generator[TestClient, None, None]:
    """Relay TestClient whose upstream calls go to the ``upstream`` double."""
    from promptcraft.api.main import app

    client = UpstreamClient(
        api_key="sk-test",
        url="https://upstream.test/v1/responses",
        model="test-model",
        timeout=5.0,
        transport=httpx.MockTransport(upstream),
    )
    with patch("promptcraft.api.main.get_upstream_client", return_value=client):
        yield TestClient(app)
