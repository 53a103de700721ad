"""
하나의 배치 세션을 구성하는 컴포넌트들을 연결합니다.

제스처 → Pose 변경 → (카메라 tilt / 깊이 자동 스케일 보정) → footprint 투영 → 마스크
"""
import math
from dataclasses import dataclass

import numpy as np

from .camera import CameraModel
from .config import CameraConfig, PlacementConfig
from .depth import DepthAutoScaler
from .footprint import Dimensions, FootprintProjection, FootprintProjector
from .gesture import GestureInterpreter, GesturePhase, PointerSample
from .mask import MaskRasterizer
from .pose import Pose, PoseModel
from .tilt import OrientationSample, create_tilt_estimator


def camera_from_config(config: CameraConfig) -> CameraModel:
    return CameraModel(
        x=config.x, y=config.y, z=config.z,
        pitch=math.radians(config.pitch_deg),
        fov=math.radians(config.fov_deg),
        resolution_width=config.resolution_width,
        resolution_height=config.resolution_height,
    )


@dataclass(frozen=True)
class CaptureResult:
    pose: Pose
    projection: FootprintProjection
    mask: np.ndarray | None

    @property
    def visible(self) -> bool:
        return self.projection.drawable


class PlacementSession:
    """
    세션마다 Pose/CameraModel 한 쌍을 소유합니다.
    모든 처리는 호출 스레드에서 동기적으로 수행됩니다.
    """

    def __init__(self, dimensions: Dimensions, config: PlacementConfig | None = None):
        self.config = config or PlacementConfig()
        self.dimensions = dimensions

        self.pose_model = PoseModel(self.config.pose)
        self.interpreter = GestureInterpreter(self.config.gesture)
        self.camera = camera_from_config(self.config.camera)
        self.tilt = create_tilt_estimator(self.config.tilt)
        self.depth = DepthAutoScaler(self.config.depth)
        self.projector = FootprintProjector()
        self.rasterizer = MaskRasterizer()

        self.photo_size = None  # (width, height)
        self.last_result = None  # 마지막 포인터 해제 시점의 CaptureResult
        self.last_tilt = None    # 마지막으로 적용된 TiltEstimate

        self._check_depth_range()

    def _check_depth_range(self):
        """깊이 제안 범위가 Pose 스케일 범위를 벗어나면 고정되는 구간을 알립니다."""
        depth_cfg, pose_cfg = self.config.depth, self.config.pose
        span = depth_cfg.scale_ceiling - depth_cfg.scale_floor
        if span <= 0.0:
            return
        if depth_cfg.scale_floor < pose_cfg.scale_min:
            limit = (pose_cfg.scale_min - depth_cfg.scale_floor) / span * 255.0
            print(f"[경고] PlacementSession: 깊이 강도 {min(limit, 255.0):.0f} 이하는 "
                  f"scale_min({pose_cfg.scale_min})으로 고정됩니다.")
        if depth_cfg.scale_ceiling > pose_cfg.scale_max:
            limit = (pose_cfg.scale_max - depth_cfg.scale_floor) / span * 255.0
            print(f"[경고] PlacementSession: 깊이 강도 {max(limit, 0.0):.0f} 이상은 "
                  f"scale_max({pose_cfg.scale_max})로 고정됩니다.")

    # --- 입력 이미지 ---
    def set_photo(self, image: np.ndarray | None):
        """사진 크기를 기록하고 카메라 해상도를 맞춥니다."""
        if image is None:
            self.photo_size = None
            return
        h, w = image.shape[:2]
        self.photo_size = (w, h)
        self.camera = self.camera.with_resolution(w, h)

    def load_depth_map(self, image: np.ndarray | None):
        self.depth.load(image)

    # --- Pose ---
    @property
    def pose(self) -> Pose:
        return self.pose_model.get()

    def handle_pointer(self, sample: PointerSample) -> Pose:
        previous = self.pose_model.get()
        pose = self.interpreter.feed(sample, self.pose_model)
        phase = self.interpreter.phase
        if phase is GesturePhase.PINCHING and pose.scale != previous.scale:
            # 핀치도 수동 스케일 조정으로 취급
            self.depth.disable()
        elif phase is GesturePhase.DRAGGING and (pose.x, pose.z) != (previous.x, previous.z):
            pose = self._apply_auto_scale()

        if not sample.pointers and self.photo_size is not None:
            # 포인터 해제 시 최신 Pose로 마스크를 다시 생성
            self.last_result = self.commit()
        return pose

    def _apply_auto_scale(self) -> Pose:
        anchor = self.project().anchor_uv
        if anchor is None:
            return self.pose_model.get()
        suggestion = self.depth.suggest(*anchor)
        if suggestion is None:
            return self.pose_model.get()
        return self.pose_model.set_scale(suggestion)

    def set_manual_scale(self, scale: float) -> Pose:
        """사용자가 직접 스케일을 지정하면 자동 스케일은 꺼집니다."""
        self.depth.disable()
        return self.pose_model.set_scale(scale)

    def scale_by(self, ds: float) -> Pose:
        self.depth.disable()
        return self.pose_model.scale_by(ds)

    def enable_auto_scale(self):
        self.depth.enable()

    def rotate_by(self, ddeg: float) -> Pose:
        return self.pose_model.rotate_by(ddeg)

    def set_rotation(self, deg: float) -> Pose:
        return self.pose_model.set_rotation(deg)

    def reset(self) -> Pose:
        self.interpreter.reset()
        self.last_result = None
        self.last_tilt = None
        self.camera = camera_from_config(self.config.camera)
        if self.photo_size is not None:
            self.camera = self.camera.with_resolution(*self.photo_size)
        return self.pose_model.reset()

    # --- 카메라 tilt ---
    def _apply_tilt(self) -> CameraModel:
        estimate = self.tilt.estimate()
        if estimate is not None:
            self.last_tilt = estimate
            self.camera = self.camera.with_pitch(estimate.pitch)
        return self.camera

    def handle_orientation(self, sample: OrientationSample) -> CameraModel:
        self.tilt.update_orientation(sample)
        return self._apply_tilt()

    def handle_video_frame(self, frame: np.ndarray, timestamp: float) -> CameraModel:
        self.tilt.update_frame(frame, timestamp)
        return self._apply_tilt()

    # --- 투영 / 마스크 ---
    def project(self) -> FootprintProjection:
        return self.projector.project(self.pose_model.get(), self.dimensions, self.camera)

    def commit(self) -> CaptureResult:
        """
        현재 Pose로 마스크를 생성합니다.

        사진이 아직 없으면 마스크는 None ("프레임 건너뜀"),
        객체가 보이지 않으면 전부 검은 마스크를 반환합니다.
        """
        pose = self.pose_model.get()
        projection = self.projector.project(pose, self.dimensions, self.camera)
        if self.photo_size is None:
            print("[경고] PlacementSession: 사진이 로드되지 않아 마스크를 생성하지 않습니다.")
            return CaptureResult(pose=pose, projection=projection, mask=None)

        w, h = self.photo_size
        mask = self.rasterizer.rasterize(projection, w, h)
        if not projection.drawable:
            print("[경고] PlacementSession: 객체가 화면에 보이지 않습니다. 빈 마스크를 반환합니다.")
        return CaptureResult(pose=pose, projection=projection, mask=mask)
