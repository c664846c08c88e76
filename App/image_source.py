"""Resolve an image locator to bytes and decode it to grayscale.

AIDEV-NOTE: Locators are either http(s) URLs or filesystem paths
(optionally prefixed with file://). Any failure surfaces as ImageLoadError.
"""

import io
import logging
from pathlib import Path

import numpy as np
import requests
from PIL import Image

logger = logging.getLogger(__name__)

HTTP_TIMEOUT = 30  # seconds


class ImageLoadError(ValueError):
    """Raised when an image cannot be fetched or decoded."""


def read_bytes(locator: "str | Path") -> bytes:
    """Fetch the raw bytes behind a locator.

    Args:
        locator: URL (http/https) or path to an image file

    Returns:
        File contents

    Raises:
        ImageLoadError: If the resource cannot be read
    """
    text = str(locator)
    try:
        if text.startswith(("http://", "https://")):
            logger.info("Downloading %s", text)
            response = requests.get(text, timeout=HTTP_TIMEOUT)
            response.raise_for_status()
            return response.content

        if text.startswith("file://"):
            text = text[len("file://"):]
        return Path(text).read_bytes()
    except (OSError, requests.RequestException) as e:
        raise ImageLoadError(f"Failed to read {locator}: {e}") from e


def decode_grayscale(data: bytes) -> np.ndarray:
    """Decode encoded image bytes into a uint8 grayscale array.

    Raises:
        ImageLoadError: If the bytes are not a readable image
    """
    try:
        with Image.open(io.BytesIO(data)) as image:
            gray = image.convert("L")
    except Exception as e:
        raise ImageLoadError(f"Failed to decode image: {e}") from e
    return np.array(gray, dtype=np.uint8)


def load_grayscale(locator: "str | Path") -> np.ndarray:
    """Read and decode an image in one go."""
    image = decode_grayscale(read_bytes(locator))
    height, width = image.shape
    logger.info("Loaded %s (%dx%d)", locator, width, height)
    return image
