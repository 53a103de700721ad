"""
객체의 지면 직사각형(footprint)을 카메라 뷰로 투영하는 모듈.
"""
import dataclasses
from dataclasses import dataclass, field

import cv2
import numpy as np

from . import geometry
from .camera import CameraModel
from .pose import Pose


@dataclass(frozen=True)
class Dimensions:
    """
    카탈로그 항목의 실제 치수 (미터). 엔진에서 변경하지 않습니다.
    타이니 홈은 height, 수영장은 depth를 가집니다.
    """
    length: float
    width: float
    height: float | None = None
    depth: float | None = None

    def __post_init__(self):
        for name in ("length", "width"):
            value = getattr(self, name)
            if value is None or not value > 0:
                raise ValueError(f"{name}는 양수여야 합니다: {value}")
        for name in ("height", "depth"):
            value = getattr(self, name)
            if value is not None and not value > 0:
                raise ValueError(f"{name}는 양수여야 합니다: {value}")

    @property
    def kind(self) -> str:
        if self.depth is not None and self.height is None:
            return "pool"
        return "tiny_home"

    @property
    def center_y(self) -> float:
        """바닥면이 y=0에 놓일 때 객체 중심의 높이."""
        if self.kind == "pool":
            return -self.depth / 2.0
        return (self.height or 0.0) / 2.0

    def to_dict(self) -> dict:
        return {k: v for k, v in dataclasses.asdict(self).items() if v is not None}


@dataclass(frozen=True)
class FootprintProjection:
    """
    투영 결과.

    Attributes:
        visible: 중심점이 카메라 앞에 있는지 여부.
        center: 중심점의 픽셀 좌표 (visible이 아니면 None).
        corners: near 평면에서 잘린 footprint 다각형 (K, 2).
            모든 꼭짓점이 카메라 앞이면 네 꼭짓점 그대로.
        world_corners: 지면 위 네 꼭짓점 (4, 3).
        image_size: (width, height).
        clipped: 카메라 뒤 꼭짓점이 있어 다각형이 잘렸는지 여부.
    """
    visible: bool
    center: tuple | None
    corners: np.ndarray = field(default_factory=lambda: np.empty((0, 2)))
    world_corners: np.ndarray = field(default_factory=lambda: np.empty((0, 3)))
    image_size: tuple = (0, 0)
    clipped: bool = False

    @property
    def drawable(self) -> bool:
        return self.visible and len(self.corners) >= 3

    @property
    def anchor_uv(self) -> tuple | None:
        """중심점을 이미지 폭/높이 비율로 나타낸 값 (깊이 샘플링 앵커)."""
        if self.center is None:
            return None
        w, h = self.image_size
        return self.center[0] / w, self.center[1] / h

    def screen_size(self) -> tuple | None:
        """
        투영된 꼭짓점 간 거리로부터 화면상의 (폭, 높이)를 계산합니다.
        간이 래스터라이저 경로에서 사용합니다.

        다각형이 near 평면에서 잘린 경우에는 화면 안에 보이는 부분의
        최소 외접 회전 사각형 크기 (긴 변, 짧은 변)를 반환합니다.
        """
        if not self.drawable:
            return None
        c = self.corners
        if not self.clipped and len(c) == 4:
            length_px = (np.linalg.norm(c[1] - c[0]) + np.linalg.norm(c[2] - c[3])) / 2.0
            width_px = (np.linalg.norm(c[3] - c[0]) + np.linalg.norm(c[2] - c[1])) / 2.0
            return float(length_px), float(width_px)

        w, h = self.image_size
        on_screen = geometry.clip_polygon_to_rect(c, 0.0, 0.0, float(w), float(h))
        if len(on_screen) < 3:
            return None
        _, (rect_w, rect_h), _ = cv2.minAreaRect(on_screen.astype(np.float32))
        return float(max(rect_w, rect_h)), float(min(rect_w, rect_h))


class FootprintProjector:
    def project(self, pose: Pose, dimensions: Dimensions, camera: CameraModel) -> FootprintProjection:
        """
        Pose와 치수로 지면 직사각형을 만들고 카메라로 투영합니다.
        중심점이 보이지 않으면 예외 대신 빈 결과를 반환합니다.
        """
        image_size = (camera.resolution_width, camera.resolution_height)
        world = geometry.footprint_corners(
            pose.x, pose.z,
            dimensions.length, dimensions.width,
            pose.rotation_deg, pose.scale,
        )

        center = camera.project((pose.x, 0.0, pose.z))
        if center is None:
            return FootprintProjection(visible=False, center=None,
                                       world_corners=world, image_size=image_size)

        behind = int(np.count_nonzero(camera.to_camera_points(world)[:, 2] <= camera.near))
        corners = camera.project_polygon(world)
        if behind:
            print(f"[정보] FootprintProjector: 카메라 뒤 꼭짓점 {behind}개 - near 평면에서 다각형을 자릅니다")

        return FootprintProjection(
            visible=True,
            center=center,
            corners=corners,
            world_corners=world,
            image_size=image_size,
            clipped=behind > 0,
        )
