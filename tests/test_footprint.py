"""
Tests for footprint geometry and projection
"""
import numpy as np
import pytest

from placement_engine import CameraModel, Dimensions, FootprintProjector, Pose
from placement_engine.geometry import (
    clip_polygon, clip_polygon_to_rect, footprint_corners, wrap_degrees,
)


@pytest.fixture
def camera():
    return CameraModel()


@pytest.fixture
def pool():
    return Dimensions(length=8.0, width=4.0, depth=1.5)


class TestDimensions:
    def test_rejects_non_positive(self):
        with pytest.raises(ValueError):
            Dimensions(length=0.0, width=4.0)
        with pytest.raises(ValueError):
            Dimensions(length=8.0, width=4.0, height=-1.0)

    def test_kind(self, pool):
        assert pool.kind == "pool"
        assert Dimensions(6.0, 2.5, height=3.0).kind == "tiny_home"

    def test_center_height(self, pool):
        assert pool.center_y == pytest.approx(-0.75)
        assert Dimensions(6.0, 2.5, height=3.0).center_y == pytest.approx(1.5)

    def test_to_dict_drops_missing(self, pool):
        assert pool.to_dict() == {'length': 8.0, 'width': 4.0, 'depth': 1.5}


class TestGeometry:
    def test_corners_unrotated(self):
        corners = footprint_corners(0.0, 0.0, 8.0, 4.0, 0.0)
        assert corners.shape == (4, 3)
        assert np.all(corners[:, 1] == 0.0)
        assert corners[:, 0].min() == pytest.approx(-4.0)
        assert corners[:, 2].max() == pytest.approx(2.0)

    def test_quarter_turn_swaps_extent(self):
        corners = footprint_corners(1.0, -1.0, 8.0, 4.0, 90.0, scale=0.5)
        span_x = corners[:, 0].max() - corners[:, 0].min()
        span_z = corners[:, 2].max() - corners[:, 2].min()
        assert span_x == pytest.approx(2.0)
        assert span_z == pytest.approx(4.0)
        assert corners[:, 0].mean() == pytest.approx(1.0)
        assert corners[:, 2].mean() == pytest.approx(-1.0)

    @pytest.mark.parametrize("angle, expected", [
        (0.0, 0.0), (359.5, 359.5), (360.0, 0.0), (-90.0, 270.0), (725.0, 5.0), (-1e-15, 0.0),
    ])
    def test_wrap_degrees(self, angle, expected):
        result = wrap_degrees(angle)
        assert 0.0 <= result < 360.0
        assert result == pytest.approx(expected)


class TestProjector:
    def test_centered_pose_is_drawable(self, camera, pool):
        projection = FootprintProjector().project(Pose(), pool, camera)

        assert projection.visible
        assert projection.drawable
        assert projection.corners.shape == (4, 2)
        assert projection.center[0] == pytest.approx(960.0)
        assert projection.image_size == (1920, 1080)

    def test_unrotated_corners_symmetric(self, camera, pool):
        projection = FootprintProjector().project(Pose(), pool, camera)
        xs = projection.corners[:, 0]
        assert xs.min() + xs.max() == pytest.approx(1920.0)

    def test_anchor_uv(self, camera, pool):
        projection = FootprintProjector().project(Pose(), pool, camera)
        u, v = projection.anchor_uv
        assert u == pytest.approx(0.5)
        assert 0.5 < v < 1.0

    def test_screen_size_foreshortened(self, camera, pool):
        projection = FootprintProjector().project(Pose(), pool, camera)
        length_px, width_px = projection.screen_size()
        assert length_px > width_px > 0

    def test_scale_grows_footprint(self, camera, pool):
        small = FootprintProjector().project(Pose(scale=0.5), pool, camera)
        large = FootprintProjector().project(Pose(scale=2.0), pool, camera)
        assert large.screen_size()[0] > small.screen_size()[0]

    def test_center_behind_camera(self, camera, pool):
        projection = FootprintProjector().project(Pose(z=5.0), pool, camera)

        assert not projection.visible
        assert not projection.drawable
        assert projection.center is None
        assert projection.anchor_uv is None
        assert len(projection.corners) == 0

    def test_near_plane_clips_polygon(self, pool):
        camera = CameraModel(z=0.5)
        projection = FootprintProjector().project(Pose(), pool, camera)

        # 카메라 쪽 두 꼭짓점은 near 평면 교점으로 대체됨
        assert projection.visible
        assert projection.clipped
        assert len(projection.corners) == 4
        assert projection.drawable
        assert np.all(np.isfinite(projection.corners))
        assert projection.screen_size() is not None

    def test_rotation_changes_outline(self, camera, pool):
        straight = FootprintProjector().project(Pose(), pool, camera)
        turned = FootprintProjector().project(Pose(rotation_deg=45.0), pool, camera)

        # 45도에서 한 꼭짓점이 카메라 뒤로 넘어가 교점 두 개가 생김
        assert not straight.clipped
        assert turned.clipped
        assert turned.drawable
        assert len(turned.corners) == 5
        assert not np.allclose(straight.corners, turned.corners[:4])
        assert turned.center == pytest.approx(straight.center)
        assert np.all(np.isfinite(turned.corners))

    def test_large_scale_keeps_polygon(self, camera, pool):
        projection = FootprintProjector().project(Pose(scale=2.0), pool, camera)
        assert projection.clipped
        assert projection.drawable
        assert len(projection.corners) >= 4


class TestClipping:
    def test_half_plane_cuts_square(self):
        square = np.array([[0.0, 0.0], [4.0, 0.0], [4.0, 4.0], [0.0, 4.0]])
        clipped = clip_polygon(square, 0, 1.0, keep_above=True)
        assert len(clipped) == 4
        assert clipped[:, 0].min() == pytest.approx(1.0)
        assert clipped[:, 0].max() == pytest.approx(4.0)

    def test_polygon_inside_is_unchanged(self):
        square = np.array([[0.0, 0.0], [4.0, 0.0], [4.0, 4.0], [0.0, 4.0]])
        assert np.array_equal(clip_polygon(square, 1, -1.0), square)

    def test_polygon_outside_is_empty(self):
        square = np.array([[0.0, 0.0], [4.0, 0.0], [4.0, 4.0], [0.0, 4.0]])
        assert len(clip_polygon(square, 0, 10.0)) == 0

    def test_rect_clip_keeps_edge_direction(self):
        # (0,0)->(400,100) 모서리는 x=200에서 y=50을 지나야 함
        triangle = np.array([[0.0, 0.0], [400.0, 100.0], [0.0, 100.0]])
        clipped = clip_polygon_to_rect(triangle, 0.0, 0.0, 200.0, 200.0)
        on_edge = clipped[np.isclose(clipped[:, 0], 200.0)]
        assert sorted(on_edge[:, 1]) == pytest.approx([50.0, 100.0])

    def test_camera_polygon_fully_visible_matches_points(self, camera):
        world = footprint_corners(0.0, 0.0, 8.0, 4.0, 0.0)
        assert np.allclose(camera.project_polygon(world), camera.project_points(world))

    def test_camera_polygon_fully_behind_is_empty(self, camera):
        world = footprint_corners(0.0, 20.0, 8.0, 4.0, 0.0)
        assert camera.project_polygon(world).shape == (0, 2)
