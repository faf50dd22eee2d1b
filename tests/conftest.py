"""Pytest configuration and fixtures."""

import json
import logging
from pathlib import Path

import pytest
from PIL import Image

from image_dedupe.utils.config import Config


def create_image(path: Path, size=(64, 64), color=(255, 0, 0), fmt=None, **save_kwargs) -> Path:
    """Save a solid-colour image and return its path."""
    img = Image.new("RGB", size, color=color)
    img.save(path, fmt, **save_kwargs)
    return path


def create_patched_image(path: Path, size=(64, 64), color=(255, 0, 0), patch=5) -> Path:
    """Save a solid image with a small contrasting square in the corner."""
    img = Image.new("RGB", size, color=color)
    for x in range(patch):
        for y in range(patch):
            img.putpixel((x, y), (0, 0, 0))
    img.save(path)
    return path


@pytest.fixture
def config(tmp_path):
    """Config backed by a file inside tmp_path, with reports and logs kept there too."""
    config_file = tmp_path / "config" / "config.json"
    config_file.parent.mkdir()
    config_file.write_text(
        json.dumps(
            {
                "report_dir": str(tmp_path / "reports"),
                "log_dir": str(tmp_path / "logs"),
            }
        ),
        encoding="utf-8",
    )
    return Config(config_file)


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers the CLI attaches so they don't outlive the captured streams."""
    yield
    logging.getLogger("image_dedupe").handlers.clear()


@pytest.fixture
def make_image():
    return create_image


@pytest.fixture
def make_patched_image():
    return create_patched_image
