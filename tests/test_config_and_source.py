"""Test configuration persistence and image loading.

Tests for config_manager, image_source and the app entry point:
    - Defaults when no file exists, roundtrip through JSON, partial files
    - Unreadable config and out-of-range values fall back to defaults
    - Local paths, file:// locators, HTTP fetches, decode failures

Run:
    pytest tests/test_config_and_source.py -v
"""

import io
import json

import numpy as np
import pytest
import requests
from PIL import Image

import app
import image_source
from config_manager import ConfigManager
from image_source import ImageLoadError, decode_grayscale, load_grayscale, read_bytes
from models import PreviewMode, ScribblerConfig
from scribbler import ScribblerThread


def _png_bytes(array, mode=None):
    buffer = io.BytesIO()
    image = Image.fromarray(array)
    if mode:
        image = image.convert(mode)
    image.save(buffer, format="PNG")
    return buffer.getvalue()


# --- ConfigManager ---


def test_missing_file_gives_defaults(tmp_path):
    config = ConfigManager(tmp_path / "none.json").load()
    assert config == ScribblerConfig()


def test_save_and_load(tmp_path):
    manager = ConfigManager(tmp_path / "config.json")
    config = ScribblerConfig(blur=3.0, threshold=0.2, mode=PreviewMode.RASTER, num_attempts=7)

    ok, error = manager.save(config)
    assert ok and error is None
    assert json.loads((tmp_path / "config.json").read_text())["mode"] == "raster"
    assert manager.load() == config


def test_partial_file_keeps_other_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"threshold": 0.3}))
    config = ConfigManager(path).load()
    assert config.threshold == 0.3
    assert config.blur == ScribblerConfig().blur
    assert config.mode is PreviewMode.VECTOR


def test_corrupt_file_gives_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")
    assert ConfigManager(path).load() == ScribblerConfig()


@pytest.mark.parametrize(
    "field, value",
    [
        ("blur", 0),
        ("blur", 300),
        ("threshold", 2),
        ("threshold", -0.1),
        ("num_attempts", 0),
        ("max_strokes", -5),
        ("gray_resolution", 256),
    ],
)
def test_out_of_range_value_falls_back_to_default(tmp_path, field, value):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({field: value, "mode": "raster"}))
    config = ConfigManager(path).load()
    assert getattr(config, field) == getattr(ScribblerConfig(), field)
    # Valid neighbours are kept
    assert config.mode is PreviewMode.RASTER


@pytest.mark.usefixtures("qcore_app")
def test_loaded_config_starts_a_job(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"blur": 0, "threshold": 2}))
    config = ConfigManager(path).load()

    thread = ScribblerThread(np.full((20, 20), 128, dtype=np.uint8), config)
    snapshot = thread.params.snapshot()
    assert snapshot.blur == ScribblerConfig().blur
    assert snapshot.threshold == ScribblerConfig().threshold


def test_save_failure_reports_error(tmp_path):
    ok, error = ConfigManager(tmp_path / "missing_dir" / "c.json").save(ScribblerConfig())
    assert not ok
    assert error


# --- image_source ---


def test_load_local_file_as_grayscale(tmp_path):
    rgb = np.zeros((6, 9, 3), dtype=np.uint8)
    rgb[..., 0] = 255
    path = tmp_path / "red.png"
    path.write_bytes(_png_bytes(rgb))

    gray = load_grayscale(path)
    assert gray.shape == (6, 9)
    assert gray.dtype == np.uint8
    assert np.all(gray == gray[0, 0])


def test_file_url_locator(tmp_path):
    path = tmp_path / "img.png"
    path.write_bytes(_png_bytes(np.full((3, 3), 77, dtype=np.uint8)))
    assert np.all(load_grayscale(f"file://{path}") == 77)


def test_missing_file_raises(tmp_path):
    with pytest.raises(ImageLoadError):
        read_bytes(tmp_path / "nope.png")


def test_undecodable_bytes_raise():
    with pytest.raises(ImageLoadError):
        decode_grayscale(b"definitely not an image")


class _FakeResponse:
    def __init__(self, content, status=200):
        self.content = content
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} error")


def test_http_locator_uses_requests(monkeypatch):
    payload = _png_bytes(np.full((2, 2), 10, dtype=np.uint8))
    calls = []

    def fake_get(url, timeout):
        calls.append((url, timeout))
        return _FakeResponse(payload)

    monkeypatch.setattr(image_source.requests, "get", fake_get)
    assert read_bytes("https://example.com/cat.png") == payload
    assert calls == [("https://example.com/cat.png", image_source.HTTP_TIMEOUT)]


def test_http_error_raises_load_error(monkeypatch):
    monkeypatch.setattr(
        image_source.requests, "get", lambda url, timeout: _FakeResponse(b"", status=404)
    )
    with pytest.raises(ImageLoadError):
        read_bytes("http://example.com/missing.png")


# --- app ---


def test_app_logger_uses_module_name():
    assert app.logger.name == "app"
