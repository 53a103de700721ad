"""
깊이 맵 기반 자동 스케일 추정
"""
from dataclasses import dataclass

import cv2
import numpy as np

from .config import DepthConfig
from .geometry import clamp


@dataclass(frozen=True)
class DepthSample:
    u: float
    v: float
    intensity: int  # 0~255, 클수록 카메라에 가까움


def depth_to_scale(intensity: float, scale_floor: float, scale_ceiling: float) -> float:
    """깊이 강도(0~255)를 선형으로 스케일 제안값에 매핑합니다."""
    i = clamp(float(intensity), 0.0, 255.0)
    return scale_floor + (i / 255.0) * (scale_ceiling - scale_floor)


class DepthAutoScaler:
    """
    미리 계산된 단일 채널 깊이 이미지를 앵커 위치에서 샘플링하여 스케일을 제안합니다.

    깊이 맵이 아직 로드되지 않았거나 비활성화된 경우 suggest()는 None을 반환합니다.
    사용자가 스케일을 직접 조정하면 disable()로 꺼지며, enable() 전까지 다시 켜지지 않습니다.
    """

    def __init__(self, config: DepthConfig | None = None):
        self.config = config or DepthConfig()
        self.enabled = self.config.enabled
        self.depth_map = None

    @property
    def loaded(self) -> bool:
        return self.depth_map is not None

    def load(self, image: np.ndarray | None):
        """
        깊이 이미지를 설정합니다. BGR/BGRA 이미지는 그레이스케일로 변환합니다.

        Args:
            image: (H, W) 또는 (H, W, C) uint8 배열. None이면 해제.
        """
        if image is None or image.size == 0:
            self.depth_map = None
            return

        if image.ndim == 3:
            if image.shape[2] == 4:
                image = cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
            elif image.shape[2] == 3:
                image = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
            else:
                image = image[:, :, 0]
        if image.dtype != np.uint8:
            image = np.clip(image, 0, 255).astype(np.uint8)

        self.depth_map = np.ascontiguousarray(image)
        h, w = self.depth_map.shape[:2]
        print(f"[정보] DepthAutoScaler: 깊이 맵 로드 완료 ({w}x{h})")

    def enable(self):
        self.enabled = True

    def disable(self):
        self.enabled = False

    def sample(self, u: float, v: float) -> DepthSample | None:
        """정규화 좌표 (u, v)에 해당하는 깊이 맵 픽셀 값을 읽습니다."""
        if self.depth_map is None:
            return None
        if not (np.isfinite(u) and np.isfinite(v)):
            return None

        h, w = self.depth_map.shape[:2]
        u = clamp(float(u), 0.0, 1.0)
        v = clamp(float(v), 0.0, 1.0)
        # 해상도가 사진과 달라도 정규화 좌표로 재매핑
        px = min(int(u * w), w - 1)
        py = min(int(v * h), h - 1)
        return DepthSample(u=u, v=v, intensity=int(self.depth_map[py, px]))

    def suggest(self, u: float, v: float) -> float | None:
        if not self.enabled:
            return None
        depth = self.sample(u, v)
        if depth is None:
            return None
        return depth_to_scale(depth.intensity, self.config.scale_floor, self.config.scale_ceiling)
