"""
배치 엔진 설정 모델
"""
import math
from dataclasses import dataclass, field


@dataclass
class CameraConfig:
    """
    세션 시작 시 사용할 기본 카메라 값.
    YAML에서는 pitch/fov를 도(degree) 단위로 작성합니다.
    """
    x: float = 0.0
    y: float = 1.8
    z: float = 3.0
    pitch_deg: float = math.degrees(-0.3)
    fov_deg: float = 70.0
    resolution_width: int = 1920
    resolution_height: int = 1080


@dataclass
class PoseConfig:
    scale_min: float = 0.5
    scale_max: float = 3.0
    position_limit: float = 5.0  # ±미터
    default_scale: float = 1.0

    def __post_init__(self):
        if not 0.0 < self.scale_min <= self.scale_max:
            raise ValueError(f"scale 범위가 잘못되었습니다: [{self.scale_min}, {self.scale_max}]")
        if self.position_limit <= 0.0:
            raise ValueError(f"position_limit는 양수여야 합니다: {self.position_limit}")


@dataclass
class GestureConfig:
    drag_sensitivity: float = 0.01   # 미터 / 픽셀
    scale_sensitivity: float = 0.01  # 스케일 / 픽셀
    drag_z_sign: float = -1.0        # 포인터 아래로 이동 → 카메라에서 멀어짐 (-Z)
    wheel_step: float = 0.1          # 휠 한 칸당 스케일 변화


@dataclass
class DepthConfig:
    enabled: bool = True
    scale_floor: float = 0.2
    scale_ceiling: float = 1.5


@dataclass
class TiltConfig:
    mode: str = "none"                  # none | sensor | horizon | fused
    beta_reference_deg: float = 0.0
    scan_hz: float = 2.0
    scan_width: int = 320               # 수평선 탐색 전 축소 폭 (픽셀)
    max_offset_deg: float = 30.0
    sensor_deadband_deg: float = 0.0    # 이 값 이하의 센서 pitch는 무시 (0이면 0이 아닌 값은 모두 채택)

    def __post_init__(self):
        if self.mode not in ("none", "sensor", "horizon", "fused"):
            raise ValueError(f"알 수 없는 tilt 모드: {self.mode}")
        if self.scan_hz <= 0.0:
            raise ValueError(f"scan_hz는 양수여야 합니다: {self.scan_hz}")


@dataclass
class PlacementConfig:
    camera: CameraConfig = field(default_factory=CameraConfig)
    pose: PoseConfig = field(default_factory=PoseConfig)
    gesture: GestureConfig = field(default_factory=GestureConfig)
    depth: DepthConfig = field(default_factory=DepthConfig)
    tilt: TiltConfig = field(default_factory=TiltConfig)
