"""
Tests for mask rasterization and encoding
"""
import cv2
import numpy as np
import pytest

from placement_engine import (
    CameraModel, Dimensions, FootprintProjector, MaskRasterizer, Pose,
    canvas_polygon, encode_png, to_data_url,
)


@pytest.fixture
def projector():
    return FootprintProjector()


@pytest.fixture
def rasterizer():
    return MaskRasterizer()


@pytest.fixture
def pool():
    return Dimensions(length=8.0, width=4.0, depth=1.5)


class TestRasterize:
    def test_visible_footprint(self, projector, rasterizer, pool):
        camera = CameraModel(resolution_width=640, resolution_height=480)
        projection = projector.project(Pose(), pool, camera)
        mask = rasterizer.rasterize(projection, 640, 480)

        assert mask.shape == (480, 640)
        assert mask.dtype == np.uint8
        assert set(np.unique(mask)) <= {0, 255}

        cx, cy = (int(round(v)) for v in projection.center)
        assert mask[cy, cx] == 255
        assert mask[0, 0] == 0

    def test_off_frustum_is_all_black(self, projector, rasterizer, pool):
        camera = CameraModel(resolution_width=640, resolution_height=480)
        projection = projector.project(Pose(z=5.0), pool, camera)
        mask = rasterizer.rasterize(projection, 640, 480)

        assert mask.shape == (480, 640)
        assert not mask.any()

    def test_rescales_to_photo_size(self, projector, rasterizer, pool):
        projection = projector.project(Pose(), pool, CameraModel())
        mask = rasterizer.rasterize(projection, 960, 540)

        assert mask.shape == (540, 960)
        cx, cy = (int(round(v / 2.0)) for v in projection.center)
        assert mask[cy, cx] == 255

    def test_polygon_past_image_edge_is_clipped(self, projector, rasterizer, pool):
        camera = CameraModel(resolution_width=640, resolution_height=480)
        projection = projector.project(Pose(scale=1.5), pool, camera)
        assert projection.drawable
        assert projection.corners[:, 1].max() > 480
        mask = rasterizer.rasterize(projection, 640, 480)
        assert mask.shape == (480, 640)
        assert mask[479, 320] == 255

    def test_far_vertex_keeps_edge_slope(self):
        # (0,0)->(4000,1000) 모서리는 x=100에서 y=25를 지남
        triangle = np.array([[0.0, 0.0], [4000.0, 1000.0], [0.0, 100.0]])
        polygon = canvas_polygon(triangle, 200, 100)
        mask = np.zeros((100, 200), dtype=np.uint8)
        cv2.fillPoly(mask, [polygon], 255)

        assert mask[40, 100] == 255
        assert mask[10, 100] == 0

    def test_polygon_outside_canvas(self):
        square = np.array([[300.0, 300.0], [400.0, 300.0], [400.0, 400.0], [300.0, 400.0]])
        assert canvas_polygon(square, 200, 100) is None


class TestRotatedRect:
    def test_axis_aligned(self, rasterizer):
        mask = rasterizer.rasterize_rotated_rect((50, 50), (40, 20), 0.0, 100, 100)
        assert mask[50, 65] == 255
        assert mask[35, 50] == 0

    def test_quarter_turn(self, rasterizer):
        mask = rasterizer.rasterize_rotated_rect((50, 50), (40, 20), 90.0, 100, 100)
        assert mask[65, 50] == 255
        assert mask[50, 65] == 0

    def test_missing_size_is_blank(self, rasterizer):
        mask = rasterizer.rasterize_rotated_rect((50, 50), None, 0.0, 100, 100)
        assert not mask.any()


class TestEncoding:
    def test_png_bytes_decode(self):
        mask = np.zeros((30, 40), dtype=np.uint8)
        mask[10:20, 10:20] = 255
        data = encode_png(mask)

        assert data.startswith(b'\x89PNG')
        decoded = cv2.imdecode(np.frombuffer(data, np.uint8), cv2.IMREAD_GRAYSCALE)
        assert np.array_equal(decoded, mask)

    def test_data_url_prefix(self):
        image = np.zeros((8, 8, 3), dtype=np.uint8)
        assert to_data_url(image).startswith("data:image/png;base64,")
        assert to_data_url(image, "jpg").startswith("data:image/jpeg;base64,")
