"""
Tests for the pinhole camera model
"""
import math

import numpy as np
import pytest

from placement_engine import CameraModel


def make_camera(**overrides):
    params = dict(x=0.0, y=1.8, z=3.0, pitch=-0.3, fov=math.radians(70),
                  resolution_width=1920, resolution_height=1080)
    params.update(overrides)
    return CameraModel(**params)


class TestConstruction:
    def test_rejects_zero_fov(self):
        with pytest.raises(ValueError):
            make_camera(fov=0.0)

    def test_rejects_fov_of_pi(self):
        with pytest.raises(ValueError):
            make_camera(fov=math.pi)

    def test_rejects_camera_on_ground(self):
        with pytest.raises(ValueError):
            make_camera(y=0.0)

    def test_focal_length(self):
        cam = make_camera()
        assert cam.focal_length == pytest.approx(1080 / (2 * math.tan(math.radians(35))))

    def test_with_pitch_returns_copy(self):
        cam = make_camera()
        tilted = cam.with_pitch(-0.5)
        assert tilted.pitch == -0.5
        assert cam.pitch == -0.3


class TestProject:
    def test_origin_lands_centered_below_horizon(self):
        cam = make_camera()
        sx, sy = cam.project((0.0, 0.0, 0.0))

        assert 1920 / 3 <= sx <= 2 * 1920 / 3
        assert sx == pytest.approx(960.0)
        assert cam.horizon_row() < sy < 1080
        assert sy > 540

    def test_deterministic(self):
        cam = make_camera()
        assert cam.project((1.2, 0.0, -0.7)) == cam.project((1.2, 0.0, -0.7))

    def test_point_to_the_right_projects_right_of_center(self):
        cam = make_camera()
        sx, _ = cam.project((2.0, 0.0, 0.0))
        assert sx > 960

    def test_point_behind_camera_is_not_visible(self):
        cam = make_camera()
        assert cam.project((0.0, 1.8, 10.0)) is None
        assert cam.project((0.0, 0.0, 8.0)) is None

    def test_point_at_camera_plane_is_not_visible(self):
        cam = make_camera(pitch=0.0)
        assert cam.project((5.0, 1.8, 3.0)) is None
        assert cam.project((0.0, 1.8, 3.0)) is None

    def test_far_point_at_eye_height_sits_on_horizon(self):
        cam = make_camera()
        _, sy = cam.project((0.0, 1.8, -1e7))
        assert sy == pytest.approx(cam.horizon_row(), abs=1e-3)

    def test_level_camera_horizon_is_image_center(self):
        cam = make_camera(pitch=0.0)
        assert cam.horizon_row() == pytest.approx(540.0)


class TestProjectPoints:
    def test_matches_scalar_projection(self):
        cam = make_camera()
        points = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, -2.0], [-3.0, 0.5, 1.0]])
        projected = cam.project_points(points)
        for point, row in zip(points, projected):
            assert tuple(row) == pytest.approx(cam.project(point))

    def test_invisible_rows_are_nan(self):
        cam = make_camera()
        projected = cam.project_points(np.array([[0.0, 0.0, 0.0], [0.0, 1.8, 10.0]]))
        assert np.all(np.isfinite(projected[0]))
        assert np.all(np.isnan(projected[1]))
        assert not np.any(np.isinf(projected))
