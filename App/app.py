"""Scribbler - headless entry point.

Usage: python app.py <image path or URL> [thumbnail.png]
"""

import logging
import sys
from pathlib import Path

from PyQt6.QtCore import QCoreApplication
from PyQt6.QtGui import QImage

from config_manager import ConfigManager
from scribbler import ScribblerThread

logger = logging.getLogger(__name__)

PROGRESS_LOG_INTERVAL = 100  # strokes


def main():
    """Fit strokes to an image and save the comparison thumbnail."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

    if len(sys.argv) < 2:
        print(__doc__.strip().splitlines()[-1], file=sys.stderr)
        sys.exit(2)

    locator = sys.argv[1]
    output = Path(sys.argv[2]) if len(sys.argv) > 2 else Path("scribble_thumbnail.png")

    app = QCoreApplication(sys.argv)
    app.setApplicationName("Scribbler")

    config = ConfigManager().load()
    thread = ScribblerThread(locator, config)
    exit_code = {"value": 0}

    def on_progress(darkness: float, num_strokes: int):
        if num_strokes % PROGRESS_LOG_INTERVAL == 0:
            logger.info("%d strokes, darkness %.4f", num_strokes, darkness)

    def on_result(curve, thumbnail: QImage):
        logger.info(
            "Fitted %d strokes, %.1f px of pen travel", len(curve), curve.total_time()
        )
        if thumbnail.save(str(output)):
            logger.info("Saved %s", output)
        else:
            logger.error("Could not write %s", output)
            exit_code["value"] = 1
        thread.stop()

    def on_failed(error: str):
        logger.error("Job failed: %s", error)
        exit_code["value"] = 1

    thread.progress.connect(on_progress)
    thread.result.connect(on_result)
    thread.failed.connect(on_failed)
    thread.finished.connect(lambda: app.exit(exit_code["value"]))

    # The result is sent once the stroke set stops growing
    thread.request_result()
    thread.start()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
