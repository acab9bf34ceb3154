from __future__ import annotations

from qtpy import QtCore

from readmark.reading.mark_scheduler import FrameCallback

FRAME_INTERVAL_MS = 16


def qt_frame_request(callback: FrameCallback) -> None:
    """Run ``callback`` on the next Qt event-loop frame."""
    QtCore.QTimer.singleShot(FRAME_INTERVAL_MS, callback)
