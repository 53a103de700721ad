"""
카메라 모델 (핀홀 투영)
"""
import math
import dataclasses
from dataclasses import dataclass

import numpy as np

from .geometry import clip_polygon


@dataclass(frozen=True)
class CameraModel:
    """
    배치 화면에서 사용하는 고정(또는 추정) 원근 카메라.

    월드 좌표계는 Y 상향, 카메라는 기본적으로 -Z 방향을 바라봅니다.
    pitch는 가로축 기준 회전이며 0이면 수평, 음수이면 아래를 내려다봅니다.
    모든 투영은 이 클래스의 project()를 거쳐야 합니다.
    """
    # Extrinsic Parameters (미터)
    x: float = 0.0
    y: float = 1.8
    z: float = 3.0
    pitch: float = -0.3  # 라디안

    # Intrinsic Parameters
    fov: float = math.radians(70.0)  # 수직 화각 (라디안)

    # Clipping
    near: float = 1e-6

    # Resolution
    resolution_width: int = 1920
    resolution_height: int = 1080

    def __post_init__(self):
        if not 0.0 < self.fov < math.pi:
            raise ValueError(f"fov는 (0, π) 범위여야 합니다: {self.fov}")
        if self.y <= 0.0:
            raise ValueError(f"카메라 높이(y)는 양수여야 합니다: {self.y}")
        if self.resolution_width <= 0 or self.resolution_height <= 0:
            raise ValueError(
                f"해상도는 양수여야 합니다: {self.resolution_width}x{self.resolution_height}"
            )

    @property
    def eye(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    @property
    def focal_length(self) -> float:
        """수직 화각과 이미지 높이로부터 픽셀 단위 초점 거리를 계산합니다."""
        return self.resolution_height / (2.0 * math.tan(self.fov / 2.0))

    def with_pitch(self, pitch: float) -> "CameraModel":
        return dataclasses.replace(self, pitch=float(pitch))

    def with_resolution(self, width: int, height: int) -> "CameraModel":
        return dataclasses.replace(self, resolution_width=int(width), resolution_height=int(height))

    def _to_camera(self, rel_x, rel_y, rel_z):
        # 전방축은 -Z. 전방 양수 깊이 좌표계로 바꾼 뒤 pitch 회전
        fwd = -rel_z
        cos_p, sin_p = math.cos(self.pitch), math.sin(self.pitch)
        rotated_y = rel_y * cos_p - fwd * sin_p
        rotated_z = rel_y * sin_p + fwd * cos_p
        return rotated_y, rotated_z

    def project(self, world_point) -> tuple[float, float] | None:
        """
        월드 좌표 한 점을 이미지 픽셀 좌표로 투영합니다.

        Args:
            world_point: (x, y, z) 월드 좌표 (미터).

        Returns:
            (screen_x, screen_y) 또는 카메라 뒤(깊이 <= near)인 경우 None.
        """
        px, py, pz = (float(v) for v in world_point)
        rel_x, rel_y, rel_z = px - self.x, py - self.y, pz - self.z
        rotated_y, rotated_z = self._to_camera(rel_x, rel_y, rel_z)

        if not math.isfinite(rotated_z) or rotated_z <= self.near:
            return None

        f = self.focal_length
        screen_x = (rel_x / rotated_z) * f + self.resolution_width / 2.0
        screen_y = (-rotated_y / rotated_z) * f + self.resolution_height / 2.0
        if not (math.isfinite(screen_x) and math.isfinite(screen_y)):
            return None
        return screen_x, screen_y

    def project_points(self, points: np.ndarray) -> np.ndarray:
        """
        여러 점을 한번에 투영합니다 (벡터화).

        Args:
            points: (N, 3) 월드 좌표 배열.

        Returns:
            (N, 2) 픽셀 좌표 배열. 보이지 않는 점의 행은 NaN.
        """
        cam = self.to_camera_points(points)
        out = np.full((cam.shape[0], 2), np.nan, dtype=np.float64)
        visible = np.isfinite(cam[:, 2]) & (cam[:, 2] > self.near)
        if not np.any(visible):
            return out

        out[visible] = self._divide(cam[visible])
        return out

    def to_camera_points(self, points: np.ndarray) -> np.ndarray:
        """
        월드 좌표를 카메라 좌표계로 변환합니다.

        Returns:
            (N, 3) 배열 [x, rotated_y, rotated_z]. rotated_z는 전방 깊이.
        """
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        rel = pts - self.eye
        rotated_y, rotated_z = self._to_camera(rel[:, 0], rel[:, 1], rel[:, 2])
        return np.column_stack([rel[:, 0], rotated_y, rotated_z])

    def _divide(self, cam: np.ndarray) -> np.ndarray:
        # 호출 측에서 깊이 > 0 을 보장
        f = self.focal_length
        out = np.empty((cam.shape[0], 2), dtype=np.float64)
        out[:, 0] = (cam[:, 0] / cam[:, 2]) * f + self.resolution_width / 2.0
        out[:, 1] = (-cam[:, 1] / cam[:, 2]) * f + self.resolution_height / 2.0
        return out

    def project_polygon(self, points: np.ndarray) -> np.ndarray:
        """
        닫힌 다각형을 near 평면에서 잘라낸 뒤 투영합니다.

        카메라 뒤로 넘어간 꼭짓점은 버리지 않고, 해당 모서리와 near 평면의
        교점으로 대체되므로 화면에 보이는 영역의 모양이 그대로 유지됩니다.

        Args:
            points: (N, 3) 월드 좌표 꼭짓점 (폴리곤 순서).

        Returns:
            (K, 2) 픽셀 좌표. 보이는 영역이 없으면 K=0, 그 외에는 K>=3.
        """
        cam = self.to_camera_points(points)
        if not np.all(np.isfinite(cam)):
            return np.empty((0, 2), dtype=np.float64)
        clipped = clip_polygon(cam, 2, self.near, keep_above=True)
        if len(clipped) < 3:
            return np.empty((0, 2), dtype=np.float64)
        return self._divide(clipped)

    def horizon_row(self) -> float:
        """지평선(무한 원점의 수평 방향)이 나타나는 이미지 행을 반환합니다."""
        return self.resolution_height / 2.0 + math.tan(self.pitch) * self.focal_length
