"""Shared pytest fixtures for the Scribbler test suite.

Fixtures:
    qcore_app: QCoreApplication for tests that start a QThread
    small_config: ScribblerConfig sized for fast tests (tiny residue grid)
    line_factory: Seeded LineKernelFactory
    gray_image / black_image / white_image: uniform 100x100 sources
"""

import sys
from pathlib import Path

import numpy as np
import pytest

# Add App directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "App"))

from models import PreviewMode, ScribblerConfig  # noqa: E402
from scribbler import LineKernelFactory  # noqa: E402


@pytest.fixture(scope="session")
def qcore_app():
    from PyQt6.QtCore import QCoreApplication

    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    return app


@pytest.fixture
def small_config():
    return ScribblerConfig(
        blur=2.0,
        threshold=0.05,
        mode=PreviewMode.VECTOR,
        num_attempts=30,
        max_strokes=400,
        line_width_to_image_width=40.0,
    )


@pytest.fixture
def line_factory():
    return LineKernelFactory(rng=np.random.default_rng(1234))


@pytest.fixture
def gray_image():
    return np.full((100, 100), 128, dtype=np.uint8)


@pytest.fixture
def black_image():
    return np.zeros((100, 100), dtype=np.uint8)


@pytest.fixture
def white_image():
    return np.full((100, 100), 255, dtype=np.uint8)
