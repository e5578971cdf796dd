"""Shared fixtures: temporary output locations, generated images and an API client."""

from io import BytesIO
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from converter.conversion.service import ConversionService
from converter.main import app
from converter.output_dir import OutputLocation, get_output_location


def make_image_bytes(
    size: tuple[int, int] = (64, 48),
    mode: str = "RGB",
    fmt: str = "PNG",
    color=(200, 30, 30),
) -> bytes:
    """Encode a solid-color test image."""
    if mode == "RGBA" and len(color) == 3:
        color = (*color, 128)
    if mode == "L" and not isinstance(color, int):
        color = 128
    img = Image.new(mode, size, color)
    buf = BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """Output directory that does not exist yet."""
    return tmp_path / "converted"


@pytest.fixture
def location(output_dir: Path) -> OutputLocation:
    return OutputLocation(output_dir)


@pytest.fixture
def service(location: OutputLocation) -> ConversionService:
    return ConversionService(location=location, rollback_on_failure=True)


@pytest.fixture
def png_bytes() -> bytes:
    return make_image_bytes()


@pytest.fixture
def client(location: OutputLocation):
    app.dependency_overrides[get_output_location] = lambda: location
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_image():
    """Factory fixture around make_image_bytes."""
    return make_image_bytes
