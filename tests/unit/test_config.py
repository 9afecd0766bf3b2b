"""Tests for promptcraft.core.config: configuration management.

Tests cover:
- Default values for all configuration fields.
- Environment variable overrides via the PROMPTCRAFT_ prefix.
- The plain OPENAI_API_KEY fallback for the upstream credential.
- Automatic outputs directory creation on initialisation.
- Pydantic validation constraints.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from promptcraft.core.config import (
    DEFAULT_PROMPT,
    MAX_FILE_SIZE_BYTES,
    MAX_PROMPT_LENGTH,
    MAX_REFERENCE_IMAGES,
    PromptcraftConfig,
)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove credential variables that would leak into defaults."""
    for name in ("OPENAI_API_KEY", "PROMPTCRAFT_OPENAI_API_KEY", "PROMPTCRAFT_RELAY_URL"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestConfigDefaults:
    """Verify that PromptcraftConfig provides sensible defaults."""

    def test_limits(self):
        assert MAX_PROMPT_LENGTH == 4000
        assert MAX_FILE_SIZE_BYTES == 5 * 1024 * 1024
        assert MAX_REFERENCE_IMAGES == 5
        assert DEFAULT_PROMPT == "A beautiful, high-quality image"

    def test_retry_defaults(self, clean_env, temp_dir):
        cfg = PromptcraftConfig(_env_file=None, outputs_dir=temp_dir / "out")
        assert cfg.retry_max_attempts == 3
        assert cfg.retry_initial_delay_ms == 1000

    def test_upstream_defaults(self, clean_env, temp_dir):
        cfg = PromptcraftConfig(_env_file=None, outputs_dir=temp_dir / "out")
        assert cfg.openai_api_key is None
        assert cfg.upstream_timeout_seconds == 60.0
        assert cfg.upstream_url.endswith("/v1/responses")

    def test_server_defaults(self, clean_env, temp_dir):
        cfg = PromptcraftConfig(_env_file=None, outputs_dir=temp_dir / "out")
        assert cfg.server_port == 8000
        assert cfg.gradio_server_port == 7860
        assert cfg.gradio_share is False


class TestConfigEnvironment:
    """Environment variable overrides."""

    def test_prefixed_override(self, clean_env, temp_dir):
        clean_env.setenv("PROMPTCRAFT_RELAY_URL", "http://relay:9000/api/generate-image")
        cfg = PromptcraftConfig(_env_file=None, outputs_dir=temp_dir / "out")
        assert cfg.relay_url == "http://relay:9000/api/generate-image"

    def test_plain_openai_key(self, clean_env, temp_dir):
        clean_env.setenv("OPENAI_API_KEY", "sk-plain")
        cfg = PromptcraftConfig(_env_file=None, outputs_dir=temp_dir / "out")
        assert cfg.openai_api_key == "sk-plain"

    def test_prefixed_key_wins(self, clean_env, temp_dir):
        clean_env.setenv("OPENAI_API_KEY", "sk-plain")
        clean_env.setenv("PROMPTCRAFT_OPENAI_API_KEY", "sk-prefixed")
        cfg = PromptcraftConfig(_env_file=None, outputs_dir=temp_dir / "out")
        assert cfg.openai_api_key == "sk-prefixed"


class TestConfigInit:
    """Directory creation and validation."""

    def test_creates_outputs_dir(self, clean_env, temp_dir):
        outputs = temp_dir / "nested" / "outputs"
        PromptcraftConfig(_env_file=None, outputs_dir=outputs)
        assert outputs.is_dir()

    def test_rejects_zero_attempts(self, clean_env, temp_dir):
        with pytest.raises(ValidationError):
            PromptcraftConfig(_env_file=None, outputs_dir=temp_dir, retry_max_attempts=0)

    def test_rejects_privileged_port(self, clean_env, temp_dir):
        with pytest.raises(ValidationError):
            PromptcraftConfig(_env_file=None, outputs_dir=temp_dir, server_port=80)
