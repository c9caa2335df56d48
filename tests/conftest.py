"""Pytest configuration and shared fixtures."""

import json
import struct
import tempfile
import zlib
from pathlib import Path
from unittest.mock import Mock

import pytest
from PIL import Image

from german_study_cli.config import StudyConfig
from german_study_cli.image import EncodedImage


@pytest.fixture
def temp_workspace():
    """Create a temporary workspace directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        workspace = Path(tmpdir)
        yield workspace


@pytest.fixture(autouse=True)
def no_env_api_keys(monkeypatch):
    """Keep real API keys from the environment out of tests."""
    for var in ("OPENAI_API_KEY", "ANTHROPIC_API_KEY", "PERPLEXITY_API_KEY", "GERMAN_STUDY_HOME"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def study_config(temp_workspace):
    """StudyConfig rooted in a temporary directory, without the wizard."""
    return StudyConfig(base_dir=temp_workspace / "data", skip_wizard=True)


@pytest.fixture
def make_image(temp_workspace):
    """Factory writing a solid-colour image of the given size and format."""

    def _make(width, height, fmt="PNG", mode="RGB", name=None):
        suffix = {"PNG": ".png", "JPEG": ".jpg", "GIF": ".gif", "BMP": ".bmp"}.get(fmt, ".img")
        path = temp_workspace / (name or f"source_{width}x{height}{suffix}")
        color = {"RGBA": (200, 30, 30, 128), "L": 128}.get(mode, (200, 30, 30))
        if mode == "P":
            Image.new("RGB", (width, height), color).convert("P").save(path, format=fmt)
        else:
            Image.new(mode, (width, height), color).save(path, format=fmt)
        return path

    return _make


@pytest.fixture
def oversized_png(temp_workspace):
    """A PNG whose header declares 20000x10000 pixels, past Pillow's bomb limit."""
    ihdr = struct.pack(">IIBBBBB", 20000, 10000, 8, 2, 0, 0, 0)
    chunk = b"IHDR" + ihdr
    path = temp_workspace / "panorama.png"
    path.write_bytes(
        b"\x89PNG\r\n\x1a\n"
        + struct.pack(">I", len(ihdr))
        + chunk
        + struct.pack(">I", zlib.crc32(chunk) & 0xFFFFFFFF)
    )
    return path


@pytest.fixture
def encoded_image(temp_workspace):
    """A tiny pre-encoded image for body construction tests."""
    return EncodedImage(
        data="QUJDRA==",
        path=temp_workspace / "scaled.jpg",
        width=800,
        height=600,
    )


@pytest.fixture
def mock_https_response():
    """Factory for a mocked http.client response."""

    def _make(status=200, payload=None, raw=None):
        response = Mock()
        response.status = status
        if raw is None:
            raw = json.dumps(payload).encode("utf-8") if payload is not None else b""
        response.read.return_value = raw
        return response

    return _make


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "unit: Mark test as a unit test (no external dependencies)"
    )
    config.addinivalue_line(
        "markers",
        "integration: Mark test as an integration test (may use external services)",
    )
    config.addinivalue_line("markers", "slow: Mark test as slow running")
