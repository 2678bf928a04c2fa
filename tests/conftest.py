"""Shared test fixtures for the catalogmedia test suite."""

from __future__ import annotations

import io
import os

import pytest
from PIL import Image

from catalogmedia.config import UploaderConfig
from catalogmedia.models import PendingFile, UploadPayload


def make_image_bytes(
    width: int,
    height: int,
    fmt: str = "PNG",
    mode: str = "RGB",
    noise: bool = False,
) -> bytes:
    """Encode a synthetic image.

    Solid images compress to almost nothing; *noise* images compress badly,
    which is what the size-budget tests need.
    """
    if noise:
        channels = len(mode)
        image = Image.frombytes(mode, (width, height), os.urandom(width * height * channels))
    else:
        color = (200, 120, 40, 255)[: len(mode)] if mode != "L" else 128
        image = Image.new(mode, (width, height), color)
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


def make_image_file(
    name: str = "product.png",
    width: int = 64,
    height: int = 48,
    **kwargs,
) -> PendingFile:
    return PendingFile(name=name, mime_type="image/png", data=make_image_bytes(width, height, **kwargs))


class FakeTransport:
    """Scripted stand-in for :class:`AsyncUploadTransport`.

    *script* maps a source file name to the outcomes of successive
    ``send`` calls: a list of URLs, or an exception to raise.
    """

    def __init__(self, script: dict[str, list]) -> None:
        self.script = {name: list(outcomes) for name, outcomes in script.items()}
        self.sent: list[UploadPayload] = []
        self.closed = False

    async def send(self, payload: UploadPayload) -> list[str]:
        self.sent.append(payload)
        outcome = self.script[payload.source_name].pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def sends_for(self, name: str) -> int:
        return sum(1 for payload in self.sent if payload.source_name == name)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def config() -> UploaderConfig:
    """Default configuration with a local endpoint."""
    return UploaderConfig(base_url="http://localhost:5000")


@pytest.fixture
def small_config() -> UploaderConfig:
    """Configuration with small limits so tests stay fast."""
    return UploaderConfig(
        base_url="http://localhost:5000",
        max_file_size_bytes=1024,
        max_dimension=256,
        target_size_bytes=4 * 1024,
    )


@pytest.fixture
def image_bytes():
    """Factory fixture: ``image_bytes(width, height, fmt=..., mode=..., noise=...)``."""
    return make_image_bytes


@pytest.fixture
def image_file():
    """Factory fixture building a PNG :class:`PendingFile`."""
    return make_image_file


@pytest.fixture
def fake_transport():
    """The :class:`FakeTransport` class, for building scripted transports."""
    return FakeTransport
