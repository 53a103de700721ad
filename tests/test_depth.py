"""
Tests for depth-driven auto scaling
"""
import numpy as np
import pytest

from placement_engine import DepthAutoScaler, DepthConfig, depth_to_scale


@pytest.fixture
def split_map():
    # 왼쪽 절반은 먼 곳(0), 오른쪽 절반은 가까운 곳(255)
    depth = np.zeros((10, 20), dtype=np.uint8)
    depth[:, 10:] = 255
    return depth


class TestMapping:
    def test_endpoints(self):
        assert depth_to_scale(0, 0.2, 1.5) == pytest.approx(0.2)
        assert depth_to_scale(255, 0.2, 1.5) == pytest.approx(1.5)

    def test_monotonic(self):
        values = [depth_to_scale(i, 0.2, 1.5) for i in range(0, 256, 5)]
        assert values == sorted(values)

    def test_out_of_range_intensity_clamped(self):
        assert depth_to_scale(400, 0.2, 1.5) == pytest.approx(1.5)
        assert depth_to_scale(-10, 0.2, 1.5) == pytest.approx(0.2)


class TestAutoScaler:
    def test_no_map_no_suggestion(self):
        assert DepthAutoScaler().suggest(0.5, 0.5) is None

    def test_samples_normalized_coordinates(self, split_map):
        scaler = DepthAutoScaler()
        scaler.load(split_map)
        assert scaler.suggest(0.25, 0.5) == pytest.approx(0.2)
        assert scaler.suggest(0.75, 0.5) == pytest.approx(1.5)

    def test_edge_coordinates_clamped(self, split_map):
        scaler = DepthAutoScaler()
        scaler.load(split_map)
        assert scaler.sample(1.0, 1.0).intensity == 255
        assert scaler.sample(-3.0, 0.5).intensity == 0
        assert scaler.sample(float('nan'), 0.5) is None

    def test_disable_and_enable(self, split_map):
        scaler = DepthAutoScaler()
        scaler.load(split_map)
        scaler.disable()
        assert scaler.suggest(0.75, 0.5) is None
        scaler.enable()
        assert scaler.suggest(0.75, 0.5) == pytest.approx(1.5)

    def test_disabled_by_config(self, split_map):
        scaler = DepthAutoScaler(DepthConfig(enabled=False))
        scaler.load(split_map)
        assert scaler.suggest(0.75, 0.5) is None

    def test_color_map_converted_to_gray(self):
        scaler = DepthAutoScaler()
        scaler.load(np.full((4, 4, 3), 255, dtype=np.uint8))
        assert scaler.depth_map.ndim == 2
        assert scaler.suggest(0.5, 0.5) == pytest.approx(1.5)

    def test_unload(self, split_map):
        scaler = DepthAutoScaler()
        scaler.load(split_map)
        scaler.load(None)
        assert not scaler.loaded
        assert scaler.suggest(0.5, 0.5) is None
