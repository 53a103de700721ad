"""
Tests for the placement canvas and overlay (offscreen Qt platform)
"""
import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import numpy as np
import pytest
from PySide6.QtCore import QEvent, QPointF, Qt
from PySide6.QtGui import QMouseEvent, QPixmap
from PySide6.QtWidgets import QApplication

from app.ui.placement_window import PlacementCanvas, draw_overlay
from placement_engine import CameraModel, Dimensions, FootprintProjector, Pose


@pytest.fixture(scope="module")
def qapp():
    return QApplication.instance() or QApplication([])


def mouse_event(kind, x, y, button=Qt.LeftButton, buttons=Qt.LeftButton):
    pos = QPointF(x, y)
    return QMouseEvent(kind, pos, pos, button, buttons, Qt.NoModifier)


@pytest.fixture
def canvas(qapp):
    widget = PlacementCanvas()
    widget.resize(720, 360)
    received = []
    widget.pointer_sample.connect(received.append)
    widget.received = received
    return widget


class TestCanvasWithoutPhoto:
    def test_press_and_move_are_ignored(self, canvas):
        canvas.mousePressEvent(mouse_event(QEvent.MouseButtonPress, 10, 10))
        canvas.mouseMoveEvent(mouse_event(QEvent.MouseMove, 20, 20, Qt.NoButton))
        canvas.mouseReleaseEvent(mouse_event(QEvent.MouseButtonRelease, 20, 20, buttons=Qt.NoButton))
        assert canvas.received == []


class TestCanvasWithPhoto:
    def test_press_maps_to_image_coordinates(self, canvas):
        canvas.setImage(QPixmap(200, 100), (400, 200))
        canvas.mousePressEvent(mouse_event(QEvent.MouseButtonPress, 360, 180))

        assert len(canvas.received) == 1
        (pointer,) = canvas.received[0].pointers
        assert (pointer.x, pointer.y) == pytest.approx((200.0, 100.0))

    def test_release_emits_empty_sample(self, canvas):
        canvas.setImage(QPixmap(200, 100), (400, 200))
        canvas.mouseReleaseEvent(mouse_event(QEvent.MouseButtonRelease, 360, 180, buttons=Qt.NoButton))
        assert canvas.received[-1].pointers == ()


class TestOverlay:
    def test_clipped_footprint_draws(self):
        pool = Dimensions(length=8.0, width=4.0, depth=1.5)
        camera = CameraModel(resolution_width=640, resolution_height=360)
        projection = FootprintProjector().project(Pose(z=2.0), pool, camera)
        image = np.zeros((360, 640, 3), dtype=np.uint8)

        vis = draw_overlay(image, projection, camera)
        assert vis.shape == image.shape
        assert vis[359, 320].any()
